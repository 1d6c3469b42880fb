"""Административные команды."""

from __future__ import annotations

import logging
from typing import Any, Optional

import discord
from discord import app_commands
from discord.ext import commands

from ..game.catalog import LoadReport
from ..storage import get_config, reload_catalog

log = logging.getLogger("guildhall.cogs.admin")


def configured_guild_id(config: Optional[dict]) -> Optional[int]:
    raw = ((config or {}).get("discord") or {}).get("guild_id")
    if raw in (None, ""):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        log.warning("Некорректный discord.guild_id: %r, синхронизация будет глобальной", raw)
        return None


async def sync_commands(tree: app_commands.CommandTree, config: Optional[dict]) -> tuple[Optional[int], list[Any]]:
    """Синхронизировать команды с гильдией из конфига или глобально."""

    guild_id = configured_guild_id(config)
    if guild_id is None:
        return None, await tree.sync()
    guild = discord.Object(id=guild_id)
    tree.copy_global_to(guild=guild)
    return guild_id, await tree.sync(guild=guild)


def format_load_report(report: LoadReport, limit: int = 10) -> str:
    lines = [f"Загружено героев: {report.heroes}, контрактов: {report.contracts}"]
    for failure in report.failures[:limit]:
        lines.append(f"• {failure.kind} `{failure.source}` ({failure.failure}): {failure.message}")
    hidden = len(report.failures) - limit
    if hidden > 0:
        lines.append(f"…и ещё {hidden} ошибок")
    return "\n".join(lines)


class Admin(commands.Cog):
    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot

    @app_commands.command(name="sync", description="Перерегистрировать slash-команды")
    @app_commands.default_permissions(administrator=True)
    async def sync(self, interaction: discord.Interaction) -> None:
        try:
            guild_id, synced = await sync_commands(self.bot.tree, get_config())
        except discord.HTTPException as exc:
            await interaction.response.send_message(f"Ошибка синхронизации: {exc}", ephemeral=True)
            return
        scope = f"с гильдией {guild_id}" if guild_id else "глобально"
        await interaction.response.send_message(f"Синхронизировано {len(synced)} команд {scope}", ephemeral=True)

    @app_commands.command(name="reload", description="Перечитать героев и контракты")
    @app_commands.default_permissions(administrator=True)
    async def reload(self, interaction: discord.Interaction) -> None:
        report = reload_catalog()
        log.info("Каталог перезагружен по команде %s", getattr(interaction.user, "id", "?"))
        await interaction.response.send_message(format_load_report(report), ephemeral=True)

    @app_commands.command(name="invite", description="Получить ссылку-приглашение")
    async def invite(self, interaction: discord.Interaction) -> None:
        app_info = await self.bot.application_info()
        perms = discord.Permissions.none()
        perms.update(send_messages=True, embed_links=True)
        url = discord.utils.oauth_url(app_info.id, permissions=perms, scopes=("bot", "applications.commands"))
        await interaction.response.send_message(url, ephemeral=True)


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(Admin(bot))


__all__ = ["Admin", "configured_guild_id", "format_load_report", "setup", "sync_commands"]
