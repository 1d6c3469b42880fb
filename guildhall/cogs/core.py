"""Основной ког с игровыми командами."""

from __future__ import annotations

import logging
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands, tasks

from ..game.constants import CLAN_INFO
from ..game.embeds import (
    build_board_embed,
    build_contract_embed,
    build_heroes_embed,
    build_outcome_embed,
)
from ..game.utils import choice_value, parse_resources
from ..models import CLANS, Contract
from ..storage import (
    attempt_contract,
    contract_details,
    get_config,
    get_contract,
    get_hero,
    list_heroes,
    spawn_contracts,
)

log = logging.getLogger("guildhall.cogs.core")

CLAN_CHOICES = [app_commands.Choice(name=CLAN_INFO[clan][0], value=clan) for clan in CLANS]


def describe_check(check: str) -> str:
    """Подпись для непройденной проверки вида ``hero_stats.strength``."""

    group, _, name = check.partition(".")
    if group == "city_level":
        return "уровень города"
    if group == "hero_stats":
        return f"характеристика {name}"
    if group == "resources":
        return f"ресурс {name}"
    return check


def format_refusal(result: dict) -> str:
    reason = result.get("reason") or "Отказ"
    unmet = result.get("unmet") or []
    if unmet:
        return f"{reason}: {', '.join(describe_check(check) for check in unmet)}"
    return reason


class Core(commands.Cog):
    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot
        self.board: list[Contract] = []
        cfg = get_config() or {}
        self.board_refresh_minutes = self._resolve_refresh_minutes(cfg)
        self.board_refresher.change_interval(minutes=self.board_refresh_minutes)
        self.board_refresher.start()

    def cog_unload(self) -> None:
        self.board_refresher.cancel()

    @staticmethod
    def _resolve_refresh_minutes(config: Optional[dict]) -> float:
        default = 5.0
        try:
            value = float(((config or {}).get("board") or {}).get("refresh_minutes", default))
            if value <= 0:
                return default
            return value
        except (TypeError, ValueError):
            return default

    @tasks.loop(minutes=5)
    async def board_refresher(self) -> None:
        try:
            self.board = spawn_contracts()
        except Exception:  # pragma: no cover
            log.exception("Не удалось обновить доску контрактов")

    async def _send_response(
        self,
        interaction: discord.Interaction,
        *,
        content: Optional[str] = None,
        embed: Optional[discord.Embed] = None,
        ephemeral: bool = True,
    ) -> None:
        sender = interaction.response.send_message
        if interaction.response.is_done():
            sender = interaction.followup.send
        payload = {"ephemeral": ephemeral}
        if content is not None:
            payload["content"] = content
        if embed is not None:
            payload["embed"] = embed
        await sender(**payload)

    # ------------------------------------------------------------------
    @app_commands.command(name="contracts", description="Доска доступных контрактов")
    async def contracts(self, interaction: discord.Interaction) -> None:
        if not self.board:
            self.board = spawn_contracts()
        await self._send_response(interaction, embed=build_board_embed(self.board), ephemeral=False)

    @app_commands.command(name="contract", description="Подробности контракта")
    @app_commands.describe(contract_id="ID контракта", hero_id="ID героя для прогноза")
    async def contract(
        self,
        interaction: discord.Interaction,
        contract_id: str,
        hero_id: Optional[str] = None,
    ) -> None:
        contract = get_contract(contract_id)
        if contract is None:
            await self._send_response(interaction, content="Контракт не найден.")
            return
        hero = None
        if hero_id:
            hero = get_hero(hero_id)
            if hero is None:
                await self._send_response(interaction, content="Герой не найден.")
                return
        details = contract_details(hero, contract)
        if details is None:
            await self._send_response(interaction, content="У контракта нет условий.")
            return
        await self._send_response(interaction, embed=build_contract_embed(contract, details, hero))

    @app_commands.command(name="heroes", description="Список героев")
    @app_commands.choices(clan=CLAN_CHOICES)
    async def heroes(
        self,
        interaction: discord.Interaction,
        clan: Optional[app_commands.Choice[str]] = None,
    ) -> None:
        heroes = list_heroes(choice_value(clan))
        await self._send_response(interaction, embed=build_heroes_embed(heroes))

    @app_commands.command(name="attempt", description="Отправить героя на контракт")
    @app_commands.describe(
        hero_id="ID героя",
        contract_id="ID контракта",
        city_level="Уровень города",
        resources="Ресурсы игрока, например gold=100, wood=5",
    )
    async def attempt(
        self,
        interaction: discord.Interaction,
        hero_id: str,
        contract_id: str,
        city_level: int = 0,
        resources: Optional[str] = None,
    ) -> None:
        result = attempt_contract(hero_id, contract_id, city_level, parse_resources(resources))
        if not result.get("ok"):
            await self._send_response(interaction, content=format_refusal(result))
            return
        await self._send_response(interaction, embed=build_outcome_embed(result), ephemeral=False)


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(Core(bot))


__all__ = ["Core", "describe_check", "format_refusal", "setup"]
