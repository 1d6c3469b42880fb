"""Точка входа для Discord-бота гильдии."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any

import discord
from discord.ext import commands

from .cogs.admin import sync_commands
from .storage import get_config, get_service, reload_catalog

log = logging.getLogger("guildhall")

EXTENSIONS = ("guildhall.cogs.core", "guildhall.cogs.admin")


class GuildhallBot(commands.Bot):
    def __init__(self) -> None:
        intents = discord.Intents.default()
        intents.message_content = False
        super().__init__(command_prefix="!", intents=intents)

    async def setup_hook(self) -> None:
        # catalog first: the core cog spawns the board as soon as it loads
        report = reload_catalog()
        for failure in report.failures:
            log.warning("Пропущен %s %s: %s", failure.kind, failure.source, failure.message)
        for extension in EXTENSIONS:
            await self.load_extension(extension)
        guild_id, synced = await sync_commands(self.tree, get_config())
        if guild_id:
            log.info("Синхронизировано %d slash-команд с гильдией %s", len(synced), guild_id)
        else:
            log.info("Синхронизировано %d slash-команд глобально", len(synced))

    async def on_ready(self) -> None:
        catalog = get_service().catalog
        log.info("Бот авторизован как %s", self.user)
        log.info("В каталоге героев: %d, контрактов: %d", catalog.hero_count, catalog.contract_count)


def load_token(config: dict[str, Any]) -> str:
    token = ((config.get("discord") or {}).get("token"))
    if not token:
        raise RuntimeError("В config.json не указан discord.token")
    return str(token)


async def run_bot(bot: GuildhallBot, token: str) -> None:
    async with bot:
        await bot.start(token)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s: %(message)s")
    token = load_token(get_config())
    try:
        asyncio.run(run_bot(GuildhallBot(), token))
    except discord.LoginFailure as exc:
        log.error("Не удалось авторизоваться: %s. Проверьте discord.token в config.json.", exc)
        sys.exit(1)
    except KeyboardInterrupt:
        log.info("Бот остановлен")


if __name__ == "__main__":
    main()
