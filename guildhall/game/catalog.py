"""In-memory catalogs of hero and contract records."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Protocol, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..models import CONTRACT_TYPE, HERO_TYPE, Contract, Hero, normalize_clan
from .errors import GuildhallError, LoadFailure, ParseFailure

log = logging.getLogger("guildhall.catalog")

RecordT = TypeVar("RecordT", Hero, Contract)


class RecordLoader(Protocol):
    def load_record(self, kind: str, name: str) -> dict:
        """Return the decoded record or raise LoadFailure / ParseFailure."""


@dataclass(frozen=True)
class SourceFailure:
    kind: str      # record kind, "hero" or "contract"
    source: str
    failure: str   # "load" or "parse"
    message: str


@dataclass
class LoadReport:
    heroes: int = 0
    contracts: int = 0
    failures: list[SourceFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def record_failure(self, kind: str, exc: GuildhallError) -> None:
        self.failures.append(
            SourceFailure(
                kind=kind,
                source=getattr(exc, "source", ""),
                failure=getattr(exc, "kind", "load"),
                message=getattr(exc, "message", str(exc)),
            )
        )


def _index(records: Iterable[RecordT], kind: str) -> dict[str, RecordT]:
    by_id: dict[str, RecordT] = {}
    for record in records:
        if record.id in by_id:
            log.warning("Duplicate %s id %s, keeping the later definition", kind, record.id)
        by_id[record.id] = record
    return by_id


@dataclass(frozen=True)
class _Snapshot:
    heroes: tuple[Hero, ...] = ()
    contracts: tuple[Contract, ...] = ()
    heroes_by_id: Mapping[str, Hero] = field(default_factory=dict)
    contracts_by_id: Mapping[str, Contract] = field(default_factory=dict)

    @classmethod
    def build(cls, heroes: Iterable[Hero], contracts: Iterable[Contract]) -> "_Snapshot":
        heroes_by_id = _index(heroes, HERO_TYPE)
        contracts_by_id = _index(contracts, CONTRACT_TYPE)
        return cls(
            heroes=tuple(heroes_by_id.values()),
            contracts=tuple(contracts_by_id.values()),
            heroes_by_id=MappingProxyType(heroes_by_id),
            contracts_by_id=MappingProxyType(contracts_by_id),
        )


class RecordStore:
    """Hero and contract catalogs keyed by id.

    The catalogs live in one immutable snapshot. :meth:`populate` and
    :meth:`reload` build a new snapshot completely before publishing it, so a
    reader holding the store never observes a half-filled catalog.
    """

    def __init__(self) -> None:
        self._snapshot = _Snapshot()

    # ------------------------------------------------------------------
    # Population
    # ------------------------------------------------------------------
    def populate(self, heroes: Iterable[Hero], contracts: Iterable[Contract]) -> None:
        self._snapshot = _Snapshot.build(heroes, contracts)

    def _load_one(
        self,
        loader: RecordLoader,
        kind: str,
        name: str,
        model: Type[BaseModel],
        report: LoadReport,
    ) -> Optional[BaseModel]:
        try:
            raw = loader.load_record(kind, name)
            if raw.get("type") != kind:
                raise ParseFailure(name, f"expected record type {kind!r}, got {raw.get('type')!r}")
            return model.model_validate(raw)
        except LoadFailure as exc:
            log.error("Failed to load %s resource %s: %s", kind, name, exc.message)
            report.record_failure(kind, exc)
        except ParseFailure as exc:
            log.error("Failed to parse %s JSON %s: %s", kind, name, exc.message)
            report.record_failure(kind, exc)
        except ValidationError as exc:
            failure = ParseFailure(name, f"{exc.error_count()} validation error(s): {exc.errors()[0]['msg']}")
            log.error("Failed to parse %s JSON %s: %s", kind, name, failure.message)
            report.record_failure(kind, failure)
        return None

    def reload(
        self,
        loader: RecordLoader,
        hero_sources: Sequence[str],
        contract_sources: Sequence[str],
    ) -> LoadReport:
        """Replace both catalogs with records read through ``loader``.

        Sources that fail to load or parse are logged, reported and skipped.
        Any other exception abandons the reload and keeps the current catalogs.
        """
        log.info("Loading game data...")
        report = LoadReport()

        heroes: list[Hero] = []
        for name in hero_sources:
            hero = self._load_one(loader, HERO_TYPE, name, Hero, report)
            if hero is not None:
                heroes.append(hero)
                log.info("Loaded hero: %s", hero.name)

        contracts: list[Contract] = []
        for name in contract_sources:
            contract = self._load_one(loader, CONTRACT_TYPE, name, Contract, report)
            if contract is not None:
                contracts.append(contract)
                log.info("Loaded contract: %s", contract.name)

        snapshot = _Snapshot.build(heroes, contracts)
        self._snapshot = snapshot

        report.heroes = len(snapshot.heroes)
        report.contracts = len(snapshot.contracts)
        log.info(
            "Data loading complete. Heroes: %d, Contracts: %d",
            report.heroes,
            report.contracts,
        )
        return report

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def get_hero(self, hero_id: str) -> Optional[Hero]:
        return self._snapshot.heroes_by_id.get(hero_id)

    def get_contract(self, contract_id: str) -> Optional[Contract]:
        return self._snapshot.contracts_by_id.get(contract_id)

    def list_heroes(self) -> list[Hero]:
        return list(self._snapshot.heroes)

    def list_contracts(self) -> list[Contract]:
        return list(self._snapshot.contracts)

    def heroes_by_clan(self, clan: Optional[str]) -> list[Hero]:
        wanted = normalize_clan(clan)
        return [hero for hero in self._snapshot.heroes if hero.clan == wanted]

    def contracts_by_category(self, category: str) -> list[Contract]:
        return [
            contract
            for contract in self._snapshot.contracts
            if contract.definition is not None and contract.definition.category == category
        ]

    def mandatory_contracts(self) -> list[Contract]:
        return [contract for contract in self._snapshot.contracts if contract.is_mandatory]

    @property
    def hero_count(self) -> int:
        return len(self._snapshot.heroes)

    @property
    def contract_count(self) -> int:
        return len(self._snapshot.contracts)


__all__ = ["LoadReport", "RecordLoader", "RecordStore", "SourceFailure"]
