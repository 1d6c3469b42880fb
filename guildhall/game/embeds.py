"""Формирование Discord Embed."""

from __future__ import annotations

from typing import Iterable, Optional

import discord

from ..models import Contract, ContractDetails, Hero, Outcome
from .constants import (
    CLAN_INFO,
    DIFFICULTY_COLORS,
    EMOJI_BOARD,
    EMOJI_CHANCE,
    EMOJI_CITY,
    EMOJI_CLOCK,
    EMOJI_COIN,
    EMOJI_CONTRACT,
    EMOJI_DEATH,
    EMOJI_HERO,
    EMOJI_INJURY,
    EMOJI_ITEM,
    EMOJI_MANDATORY,
    EMOJI_OK,
    EMOJI_PRESTIGE,
    EMOJI_RESOURCE,
    EMOJI_X,
    EMOJI_XP,
)
from .utils import format_mapping


def format_duration(seconds: int) -> str:
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}ч {minutes:02d}м"
    if minutes:
        return f"{minutes}м {secs:02d}с"
    return f"{secs}с"


def clan_label(clan: Optional[str]) -> str:
    if not clan:
        return "без клана"
    return CLAN_INFO.get(clan, (clan, 0))[0]


def contract_line(contract: Contract) -> str:
    marker = f"{EMOJI_MANDATORY} " if contract.is_mandatory else ""
    category = contract.category or "—"
    return f"{marker}**{contract.name}** (`{contract.id}`, {category})"


def hero_line(hero: Hero) -> str:
    stats = format_mapping({name: int(value) for name, value in hero.stats.items()})
    return f"{EMOJI_HERO} **{hero.name}** (`{hero.id}`, {clan_label(hero.clan)}): {stats}"


def requirement_lines(details: ContractDetails) -> list[str]:
    requirements = details.requirements
    if requirements is None:
        return ["Без требований"]
    lines: list[str] = []
    if requirements.city_level is not None:
        lines.append(f"{EMOJI_CITY} Уровень города: **{requirements.city_level}**")
    if requirements.hero_stats:
        lines.append(f"{EMOJI_HERO} Характеристики: {format_mapping(requirements.hero_stats)}")
    if requirements.resources:
        lines.append(f"{EMOJI_RESOURCE} Ресурсы: {format_mapping(requirements.resources)}")
    return lines or ["Без требований"]


def reward_lines(details: ContractDetails) -> list[str]:
    rewards = details.rewards
    if rewards is None:
        return ["Без награды"]
    lines: list[str] = []
    guaranteed = rewards.guaranteed
    if guaranteed is not None:
        if guaranteed.gold is not None:
            lines.append(f"{EMOJI_COIN} Золото: **{guaranteed.gold}**")
        if guaranteed.prestige is not None:
            lines.append(f"{EMOJI_PRESTIGE} Престиж: **{guaranteed.prestige}**")
        if guaranteed.xp:
            lines.append(f"{EMOJI_XP} Опыт: {format_mapping(guaranteed.xp)}")
    for entry in rewards.possible or ():
        lines.append(f"{EMOJI_ITEM} {entry.item} x{entry.quantity} ({entry.drop_chance:.0%})")
    return lines or ["Без награды"]


def build_board_embed(contracts: Iterable[Contract]) -> discord.Embed:
    lines = [contract_line(contract) for contract in contracts]
    embed = discord.Embed(title=f"{EMOJI_BOARD} Доска контрактов")
    embed.description = "\n".join(lines) if lines else "Сейчас нет доступных контрактов."
    return embed


def build_heroes_embed(heroes: Iterable[Hero]) -> discord.Embed:
    lines = [hero_line(hero) for hero in heroes]
    embed = discord.Embed(title=f"{EMOJI_HERO} Герои")
    embed.description = "\n".join(lines) if lines else "Герои не найдены."
    return embed


def build_contract_embed(contract: Contract, details: ContractDetails, hero: Optional[Hero] = None) -> discord.Embed:
    color = DIFFICULTY_COLORS.get(details.difficulty)
    embed = discord.Embed(title=f"{EMOJI_CONTRACT} {details.name}", color=color)
    embed.add_field(name="Категория", value=details.category, inline=True)
    embed.add_field(name="Сложность", value=details.difficulty, inline=True)
    embed.add_field(name="Клан", value=clan_label(contract.clan), inline=True)
    if details.is_mandatory:
        embed.add_field(name="Статус", value=f"{EMOJI_MANDATORY} Обязательный", inline=True)
    if hero is not None and details.success_rate_percent is not None:
        embed.add_field(
            name=f"Прогноз для {hero.name}",
            value=(
                f"{EMOJI_CHANCE} Шанс успеха: **{details.success_rate_percent}%**\n"
                f"{EMOJI_CLOCK} Длительность: **{format_duration(details.duration or 0)}**"
            ),
            inline=False,
        )
    embed.add_field(name="Требования", value="\n".join(requirement_lines(details)), inline=False)
    embed.add_field(name="Награды", value="\n".join(reward_lines(details)), inline=False)
    return embed


def outcome_lines(outcome: Outcome) -> list[str]:
    lines: list[str] = []
    if outcome.success:
        rewards = outcome.rewards
        if rewards.gold is not None:
            lines.append(f"{EMOJI_COIN} +{rewards.gold} золота")
        if rewards.prestige is not None:
            lines.append(f"{EMOJI_PRESTIGE} +{rewards.prestige} престижа")
        if outcome.experience_gained:
            lines.append(f"{EMOJI_XP} Опыт: {format_mapping(outcome.experience_gained)}")
        for drop in rewards.items:
            lines.append(f"{EMOJI_ITEM} {drop.item} x{drop.quantity}")
        return lines or ["Награды нет"]

    consequences = outcome.consequences
    if consequences.death:
        lines.append(f"{EMOJI_DEATH} Герой погиб")
    elif consequences.injury:
        lines.append(f"{EMOJI_INJURY} Герой ранен")
    if consequences.resource_loss:
        lines.append(f"{EMOJI_RESOURCE} Потери: {format_mapping(consequences.resource_loss)}")
    return lines or ["Без последствий"]


def build_outcome_embed(result: dict) -> discord.Embed:
    outcome: Outcome = result["outcome"]
    hero: Hero = result["hero"]
    contract: Contract = result["contract"]
    marker = EMOJI_OK if outcome.success else EMOJI_X
    verdict = "Успех" if outcome.success else "Провал"
    embed = discord.Embed(title=f"{marker} {verdict}: {contract.name}")
    embed.description = f"{hero.name} — шанс был {result['success_chance']:.0%}"
    embed.add_field(name="Длительность", value=f"{EMOJI_CLOCK} {format_duration(result['duration'])}", inline=True)
    embed.add_field(name="Итог", value="\n".join(outcome_lines(outcome)), inline=False)
    return embed


__all__ = [
    "build_board_embed",
    "build_contract_embed",
    "build_heroes_embed",
    "build_outcome_embed",
    "clan_label",
    "contract_line",
    "format_duration",
    "hero_line",
    "outcome_lines",
    "requirement_lines",
    "reward_lines",
]
