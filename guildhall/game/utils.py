"""Вспомогательные функции."""

from __future__ import annotations

from typing import Any, Mapping, Optional


def choice_value(choice: Any, default: Optional[str] = None) -> Optional[str]:
    """Безопасно извлечь значение из ``discord.app_commands.Choice``."""

    if choice is None:
        return default
    value = getattr(choice, "value", None)
    if value in (None, ""):
        return default
    return str(value)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def parse_resources(raw: Optional[str]) -> Optional[dict[str, int]]:
    """Разобрать строку вида ``gold=100, wood=5`` в словарь ресурсов.

    Пустая строка означает «ресурсы не указаны» и возвращает ``None``.
    Некорректные пары пропускаются.
    """

    if raw is None or not raw.strip():
        return None
    result: dict[str, int] = {}
    for chunk in raw.replace(";", ",").split(","):
        name, sep, amount = chunk.partition("=")
        name = name.strip()
        if not sep or not name:
            continue
        try:
            result[name] = int(amount.strip())
        except ValueError:
            continue
    return result


def format_mapping(values: Optional[Mapping[str, Any]]) -> str:
    if not values:
        return "—"
    return ", ".join(f"{key} {value}" for key, value in values.items())


__all__ = ["choice_value", "clamp", "format_mapping", "parse_resources"]
