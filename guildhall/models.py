from __future__ import annotations
import math

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from typing import Any, Dict, List, Optional

# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------

CLANS = ["red", "green", "blue"]

# attacker clan -> clan it is strong against
CLAN_ADVANTAGES = {
    "red": "green",
    "green": "blue",
    "blue": "red",
}

HERO_TYPE = "hero"
CONTRACT_TYPE = "contract"

DEFAULT_CATEGORY = "general"
DEFAULT_BASE_DURATION = 30

# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def normalize_clan(value: Any) -> Optional[str]:
    """Lower-case a clan name; empty values become ``None``."""
    if value is None:
        return None
    text = str(value).strip().lower()
    return text or None

def _require_text(value: Any, field_name: str) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise ValueError(f"{field_name} must be a non-empty string")
    return text

def _check_type_tag(data: Any, expected: str) -> Any:
    if isinstance(data, dict) and "type" in data:
        if data.get("type") != expected:
            raise ValueError(f"expected record type {expected!r}, got {data.get('type')!r}")
    return data

def _check_amounts(values: Optional[Dict[str, Any]], field_name: str, *, positive: bool = False) -> Any:
    """Every amount must be finite and non-negative, or strictly positive."""
    for name, amount in (values or {}).items():
        if not math.isfinite(amount):
            raise ValueError(f"{field_name}.{name} must be a finite number")
        if amount < 0 or (positive and amount == 0):
            bound = "positive" if positive else "non-negative"
            raise ValueError(f"{field_name}.{name} must be {bound}")
    return values

# -----------------------------------------------------------------------------
# Records
# -----------------------------------------------------------------------------

class Hero(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", allow_inf_nan=False)

    id: str
    name: str
    clan: Optional[str] = None
    stats: Dict[str, float] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _flatten_base_stats(cls, data: Any) -> Any:
        data = _check_type_tag(data, HERO_TYPE)
        if not isinstance(data, dict) or "stats" in data:
            return data
        block = data.get("hero")
        if isinstance(block, dict) and isinstance(block.get("base_stats"), dict):
            data = dict(data)
            data["stats"] = block["base_stats"]
        return data

    @field_validator("id", "name", mode="before")
    @classmethod
    def _non_empty(cls, value: Any, info) -> str:
        return _require_text(value, info.field_name)

    @field_validator("clan", mode="before")
    @classmethod
    def _clan(cls, value: Any) -> Optional[str]:
        return normalize_clan(value)

    @field_validator("stats")
    @classmethod
    def _stats_non_negative(cls, value: Dict[str, float]) -> Dict[str, float]:
        return _check_amounts(value, "stats")

    def stat(self, name: str, default: float = 0.0) -> float:
        return self.stats.get(name, default)


class Requirements(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", allow_inf_nan=False)

    city_level: Optional[int] = Field(default=None, ge=0)
    hero_stats: Optional[Dict[str, float]] = None
    resources: Optional[Dict[str, int]] = None

    @field_validator("hero_stats")
    @classmethod
    def _stats_positive(cls, value: Optional[Dict[str, float]]) -> Optional[Dict[str, float]]:
        return _check_amounts(value, "hero_stats", positive=True)

    @field_validator("resources")
    @classmethod
    def _resources_non_negative(cls, value: Optional[Dict[str, int]]) -> Optional[Dict[str, int]]:
        return _check_amounts(value, "resources")


class GuaranteedRewards(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", allow_inf_nan=False)

    gold: Optional[int] = Field(default=None, ge=0)
    prestige: Optional[int] = Field(default=None, ge=0)
    xp: Optional[Dict[str, int]] = None

    @field_validator("xp")
    @classmethod
    def _xp_non_negative(cls, value: Optional[Dict[str, int]]) -> Optional[Dict[str, int]]:
        return _check_amounts(value, "xp")


class PossibleReward(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", allow_inf_nan=False)

    item: str
    quantity: int = Field(default=1, ge=1)
    drop_chance: float = Field(default=0.0, ge=0.0, le=1.0)


class Rewards(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", allow_inf_nan=False)

    guaranteed: Optional[GuaranteedRewards] = None
    possible: Optional[List[PossibleReward]] = None


class FailureConsequences(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", allow_inf_nan=False)

    death_chance: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    injury_chance: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    resource_loss: Optional[Dict[str, int]] = None

    @field_validator("resource_loss")
    @classmethod
    def _loss_non_negative(cls, value: Optional[Dict[str, int]]) -> Optional[Dict[str, int]]:
        return _check_amounts(value, "resource_loss")


class ContractDefinition(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", allow_inf_nan=False)

    category: str = DEFAULT_CATEGORY
    difficulty: float = Field(default=1.0, gt=0.0)
    base_duration_seconds: int = Field(default=DEFAULT_BASE_DURATION, gt=0)
    spawn_probability: float = Field(default=0.0, ge=0.0, le=1.0)
    requirements: Optional[Requirements] = None
    rewards: Optional[Rewards] = None
    failure_consequences: Optional[FailureConsequences] = None

    @field_validator("difficulty", mode="before")
    @classmethod
    def _difficulty_default(cls, value: Any) -> Any:
        # explicit null in the data means "unset"
        return 1.0 if value is None else value


class Contract(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", allow_inf_nan=False, populate_by_name=True)

    id: str
    name: str
    clan: Optional[str] = None
    is_mandatory: bool = False
    definition: Optional[ContractDefinition] = Field(
        default=None, alias="contract", serialization_alias="contract"
    )

    @model_validator(mode="before")
    @classmethod
    def _type_tag(cls, data: Any) -> Any:
        return _check_type_tag(data, CONTRACT_TYPE)

    @field_validator("id", "name", mode="before")
    @classmethod
    def _non_empty(cls, value: Any, info) -> str:
        return _require_text(value, info.field_name)

    @field_validator("clan", mode="before")
    @classmethod
    def _clan(cls, value: Any) -> Optional[str]:
        return normalize_clan(value)

    @field_validator("is_mandatory", mode="before")
    @classmethod
    def _mandatory(cls, value: Any) -> bool:
        return bool(value)

    @property
    def category(self) -> Optional[str]:
        return self.definition.category if self.definition else None

    @property
    def spawn_probability(self) -> float:
        return self.definition.spawn_probability if self.definition else 0.0

# -----------------------------------------------------------------------------
# Resolution payloads
# -----------------------------------------------------------------------------

class ItemDrop(BaseModel):
    item: str
    quantity: int


class RewardPayload(BaseModel):
    gold: Optional[int] = None
    prestige: Optional[int] = None
    experience: Dict[str, int] = Field(default_factory=dict)
    items: List[ItemDrop] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return (
            self.gold is None
            and self.prestige is None
            and not self.experience
            and not self.items
        )


class ConsequencePayload(BaseModel):
    death: Optional[bool] = None
    injury: Optional[bool] = None
    resource_loss: Optional[Dict[str, int]] = None

    def is_empty(self) -> bool:
        return self.death is None and self.injury is None and self.resource_loss is None


class Outcome(BaseModel):
    success: bool
    rewards: RewardPayload = Field(default_factory=RewardPayload)
    experience_gained: Dict[str, int] = Field(default_factory=dict)
    consequences: ConsequencePayload = Field(default_factory=ConsequencePayload)


class ContractDetails(BaseModel):
    """Read-only projection of a contract for presentation layers."""

    name: str
    category: str
    difficulty: str
    is_mandatory: bool = False
    success_rate: Optional[float] = None
    success_rate_percent: Optional[int] = None
    duration: Optional[int] = None
    requirements: Optional[Requirements] = None
    rewards: Optional[Rewards] = None
