"""Константы оформления."""

EMOJI_HERO = "🧙"
EMOJI_CONTRACT = "📜"
EMOJI_BOARD = "📋"
EMOJI_COIN = "🪙"
EMOJI_PRESTIGE = "🏅"
EMOJI_XP = "⭐"
EMOJI_ITEM = "🎁"
EMOJI_CLOCK = "⏳"
EMOJI_CHANCE = "🎯"
EMOJI_CITY = "🏰"
EMOJI_RESOURCE = "📦"
EMOJI_MANDATORY = "📌"
EMOJI_OK = "✅"
EMOJI_X = "❌"
EMOJI_DEATH = "💀"
EMOJI_INJURY = "🩹"

CLAN_INFO = {
    "red": ("Красный клан", 0xEF4444),
    "green": ("Зелёный клан", 0x22C55E),
    "blue": ("Синий клан", 0x3B82F6),
}

DIFFICULTY_COLORS = {
    "Easy": 0x22C55E,
    "Normal": 0x60A5FA,
    "Hard": 0xF59E0B,
    "Very Hard": 0xF97316,
    "Extreme": 0xDC2626,
}

__all__ = [name for name in globals().keys() if name.startswith("EMOJI_")] + ["CLAN_INFO", "DIFFICULTY_COLORS"]
