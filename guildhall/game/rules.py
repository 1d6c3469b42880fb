"""Contract resolution rules.

Pure functions over :class:`~guildhall.models.Hero` and
:class:`~guildhall.models.Contract` records:

* eligibility gating (:func:`meets_requirements`),
* success chance and duration (:func:`success_rate`, :func:`duration_seconds`),
* reward / consequence rolls (:func:`resolve`),
* random contract spawning (:func:`spawn_random`),
* presentation helpers (:func:`get_difficulty_description`, :func:`contract_details`).

Missing inputs never raise; every function degrades to a conservative default
instead. Randomness always comes from the ``rng`` argument.
"""

from __future__ import annotations

import math
from typing import Iterator, Mapping, Optional, Sequence

from ..models import (
    CLAN_ADVANTAGES,
    ConsequencePayload,
    Contract,
    ContractDetails,
    Hero,
    ItemDrop,
    Outcome,
    RewardPayload,
)
from .balance import DEFAULT_BALANCE, BalanceProfile
from .rng import RandomSource
from .utils import clamp


# ----------------------------------------------------------------------
# Eligibility
# ----------------------------------------------------------------------
def _requirement_failures(
    hero: Optional[Hero],
    contract: Contract,
    city_level: int,
    resources: Optional[Mapping[str, int]],
) -> Iterator[str]:
    definition = contract.definition
    if definition is None or definition.requirements is None:
        return
    requirements = definition.requirements

    if requirements.city_level is not None and city_level < requirements.city_level:
        yield "city_level"

    # no hero / no resource map: the check is skipped, not failed
    if requirements.hero_stats and hero is not None:
        for stat_name, required_value in requirements.hero_stats.items():
            if hero.stat(stat_name, 0) < required_value:
                yield f"hero_stats.{stat_name}"

    if requirements.resources and resources is not None:
        for resource_name, required_amount in requirements.resources.items():
            if resources.get(resource_name, 0) < required_amount:
                yield f"resources.{resource_name}"


def meets_requirements(
    hero: Optional[Hero],
    contract: Optional[Contract],
    city_level: int,
    resources: Optional[Mapping[str, int]] = None,
) -> bool:
    """Return ``True`` when no requirement check fails.

    Stops at the first failing check.
    """
    if contract is None:
        return False
    return next(_requirement_failures(hero, contract, city_level, resources), None) is None


def unmet_requirements(
    hero: Optional[Hero],
    contract: Optional[Contract],
    city_level: int,
    resources: Optional[Mapping[str, int]] = None,
) -> list[str]:
    """All failing checks as ``city_level`` / ``hero_stats.<stat>`` / ``resources.<name>``."""
    if contract is None:
        return ["contract"]
    return list(_requirement_failures(hero, contract, city_level, resources))


# ----------------------------------------------------------------------
# Outcome calculator
# ----------------------------------------------------------------------
def apply_clan_advantage(
    attacker_clan: Optional[str],
    defender_clan: Optional[str],
    balance: BalanceProfile = DEFAULT_BALANCE,
) -> float:
    if not attacker_clan or not defender_clan:
        return 1.0
    if CLAN_ADVANTAGES.get(attacker_clan) == defender_clan:
        return balance.clan.advantage_multiplier
    return 1.0


def _stat_ratios(hero: Hero, contract: Contract) -> list[float]:
    requirements = contract.definition.requirements if contract.definition else None
    if requirements is None or not requirements.hero_stats:
        return []
    ratios = []
    for stat_name, required_value in requirements.hero_stats.items():
        if stat_name not in hero.stats or required_value <= 0:
            continue
        ratios.append(hero.stats[stat_name] / required_value)
    return ratios


def _clan_multiplier(hero: Hero, contract: Contract, balance: BalanceProfile) -> float:
    if not contract.clan:
        return 1.0
    return apply_clan_advantage(hero.clan, contract.clan, balance)


def success_rate(
    hero: Optional[Hero],
    contract: Optional[Contract],
    balance: BalanceProfile = DEFAULT_BALANCE,
) -> float:
    """Chance in ``[0.05, 0.95]`` that ``hero`` completes ``contract``.

    ``base * mean(stat ratios) * clan multiplier / difficulty``, clamped.
    Returns ``0.0`` when the hero, the contract or its definition is missing.
    """
    if hero is None or contract is None or contract.definition is None:
        return 0.0

    ratios = _stat_ratios(hero, contract)
    stat_bonus = sum(ratios) / len(ratios) if ratios else 1.0
    clan_multiplier = _clan_multiplier(hero, contract, balance)
    difficulty_modifier = 1.0 / (contract.definition.difficulty or 1.0)

    rate = balance.success.base * stat_bonus * clan_multiplier * difficulty_modifier
    low, high = balance.success.cap
    return clamp(rate, low, high)


def duration_seconds(
    hero: Optional[Hero],
    contract: Optional[Contract],
    balance: BalanceProfile = DEFAULT_BALANCE,
) -> int:
    """Seconds ``hero`` needs for ``contract``.

    Efficiency is the geometric mean of the stat ratios times the clan
    multiplier; duration is ``floor(base / max(min_efficiency, efficiency))``.
    """
    if contract is None or contract.definition is None:
        return 0
    base_duration = contract.definition.base_duration_seconds
    if hero is None:
        return base_duration

    ratios = _stat_ratios(hero, contract)
    efficiency = 1.0
    if ratios:
        efficiency = math.prod(ratios) ** (1.0 / len(ratios))
    efficiency *= _clan_multiplier(hero, contract, balance)

    return math.floor(base_duration / max(balance.duration.min_efficiency, efficiency))


# ----------------------------------------------------------------------
# Resolution
# ----------------------------------------------------------------------
def resolve(
    hero: Optional[Hero],
    contract: Optional[Contract],
    success: bool,
    rng: RandomSource,
) -> Outcome:
    """Roll the concrete rewards or consequences of a finished contract.

    Success: guaranteed rewards are copied, each possible item gets one draw
    in entry order. Failure: one draw for death and, only when death did not
    trigger, one draw for injury; resource loss is always copied.
    """
    outcome = Outcome(success=bool(success))
    if contract is None or contract.definition is None:
        return outcome
    definition = contract.definition

    if success:
        rewards = definition.rewards
        if rewards is None:
            return outcome
        payload = RewardPayload()
        if rewards.guaranteed is not None:
            guaranteed = rewards.guaranteed
            payload.gold = guaranteed.gold
            payload.prestige = guaranteed.prestige
            if guaranteed.xp:
                payload.experience = dict(guaranteed.xp)
        for entry in rewards.possible or ():
            if rng.random() <= entry.drop_chance:
                payload.items.append(ItemDrop(item=entry.item, quantity=entry.quantity))
        outcome.rewards = payload
        outcome.experience_gained = dict(payload.experience)
        return outcome

    consequences = definition.failure_consequences
    if consequences is None:
        return outcome
    result = ConsequencePayload()
    if consequences.death_chance is not None:
        if rng.random() <= consequences.death_chance:
            result.death = True
    if consequences.injury_chance is not None and not result.death:
        if rng.random() <= consequences.injury_chance:
            result.injury = True
    if consequences.resource_loss is not None:
        result.resource_loss = dict(consequences.resource_loss)
    outcome.consequences = result
    return outcome


# ----------------------------------------------------------------------
# Spawning
# ----------------------------------------------------------------------
def spawn_random(
    contracts: Sequence[Contract],
    count: int,
    rng: RandomSource,
    balance: BalanceProfile = DEFAULT_BALANCE,
) -> list[Contract]:
    """Pick up to ``count`` non-mandatory contracts by spawn probability.

    The catalog is scanned in order, one draw per candidate, until ``count``
    picks are made or ``passes_per_slot * count`` passes ran out. The same
    contract may be picked more than once.
    """
    spawned: list[Contract] = []
    if count <= 0:
        return spawned

    candidates = [c for c in contracts if not c.is_mandatory and c.definition is not None]
    max_passes = count * balance.spawn.passes_per_slot
    passes = 0
    while len(spawned) < count and passes < max_passes:
        passes += 1
        for contract in candidates:
            if len(spawned) >= count:
                break
            if rng.random() <= contract.spawn_probability:
                spawned.append(contract)
    return spawned


# ----------------------------------------------------------------------
# Presentation
# ----------------------------------------------------------------------
def get_difficulty_description(
    difficulty: float,
    balance: BalanceProfile = DEFAULT_BALANCE,
) -> str:
    labels = balance.difficulty
    if difficulty <= labels.easy:
        return "Easy"
    if difficulty <= labels.normal:
        return "Normal"
    if difficulty <= labels.hard:
        return "Hard"
    if difficulty <= labels.very_hard:
        return "Very Hard"
    return "Extreme"


def contract_details(
    hero: Optional[Hero],
    contract: Optional[Contract],
    balance: BalanceProfile = DEFAULT_BALANCE,
) -> Optional[ContractDetails]:
    if contract is None or contract.definition is None:
        return None
    definition = contract.definition

    details = ContractDetails(
        name=contract.name,
        category=definition.category,
        difficulty=get_difficulty_description(definition.difficulty, balance),
        is_mandatory=contract.is_mandatory,
        requirements=definition.requirements,
        rewards=definition.rewards,
    )
    if hero is not None:
        rate = success_rate(hero, contract, balance)
        details.success_rate = rate
        details.success_rate_percent = math.floor(rate * 100)
        details.duration = duration_seconds(hero, contract, balance)
    return details


__all__ = [
    "apply_clan_advantage",
    "contract_details",
    "duration_seconds",
    "get_difficulty_description",
    "meets_requirements",
    "resolve",
    "spawn_random",
    "success_rate",
    "unmet_requirements",
]
