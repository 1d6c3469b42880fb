"""Centralised balance configuration for contract formulas."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass, replace
from typing import Any, Mapping, Sequence


@dataclass(frozen=True)
class SuccessBalance:
    """Parameters of the success chance model."""

    base: float = 0.5
    cap: tuple[float, float] = (0.05, 0.95)


@dataclass(frozen=True)
class ClanBalance:
    advantage_multiplier: float = 1.3


@dataclass(frozen=True)
class DurationBalance:
    """Efficiency is floored so a contract never takes longer than base / min_efficiency."""

    min_efficiency: float = 0.5


@dataclass(frozen=True)
class SpawnBalance:
    passes_per_slot: int = 10


@dataclass(frozen=True)
class DifficultyBalance:
    """Inclusive upper bounds of the difficulty labels."""

    easy: float = 1.0
    normal: float = 1.5
    hard: float = 2.0
    very_hard: float = 2.5


@dataclass(frozen=True)
class BalanceProfile:
    """Bundle of all tunable balance parameters."""

    success: SuccessBalance = field(default_factory=SuccessBalance)
    clan: ClanBalance = field(default_factory=ClanBalance)
    duration: DurationBalance = field(default_factory=DurationBalance)
    spawn: SpawnBalance = field(default_factory=SpawnBalance)
    difficulty: DifficultyBalance = field(default_factory=DifficultyBalance)


DEFAULT_BALANCE = BalanceProfile()


def _coerce_scalar(template: Any, raw: Any) -> Any:
    """Attempt to coerce ``raw`` into the type of ``template``."""

    if isinstance(template, float):
        try:
            return float(raw)
        except (TypeError, ValueError):
            return template
    if isinstance(template, int) and not isinstance(template, bool):
        try:
            return int(raw)
        except (TypeError, ValueError):
            return template
    if isinstance(template, tuple) and len(template) == 2:
        if isinstance(raw, Sequence) and not isinstance(raw, str) and len(raw) == 2:
            first = _coerce_scalar(template[0], raw[0])
            second = _coerce_scalar(template[1], raw[1])
            return (first, second)
        return template
    return raw


def _merge_dataclass(instance: Any, overrides: Mapping[str, Any]) -> Any:
    if not is_dataclass(instance) or not isinstance(overrides, Mapping):
        return instance

    updates: dict[str, Any] = {}
    for field_info in fields(instance):
        name = field_info.name
        if name not in overrides:
            continue
        current_value = getattr(instance, name)
        override_value = overrides[name]
        if is_dataclass(current_value):
            updates[name] = _merge_dataclass(current_value, override_value)
        else:
            updates[name] = _coerce_scalar(current_value, override_value)
    if not updates:
        return instance
    return replace(instance, **updates)


def load_balance_profile(raw: Mapping[str, Any] | None) -> BalanceProfile:
    """Return a :class:`BalanceProfile` with optional overrides applied."""

    profile = BalanceProfile()
    if not isinstance(raw, Mapping):
        return profile
    return _merge_dataclass(profile, raw)
