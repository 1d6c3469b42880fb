"""Фасад для доступа к игровому сервису из когов."""
from __future__ import annotations

from typing import Mapping, Optional

from .game import DataStore, GameService
from .game.catalog import LoadReport
from .models import Contract, ContractDetails, Hero

__all__ = [
    "get_service",
    "get_config",
    "reload_catalog",
    "get_hero",
    "get_contract",
    "list_heroes",
    "spawn_contracts",
    "contract_details",
    "attempt_contract",
]

_STORE = DataStore()
_SERVICE = GameService(_STORE)


def get_service() -> GameService:
    return _SERVICE


def get_config() -> dict:
    return _SERVICE.config


def reload_catalog() -> LoadReport:
    return _SERVICE.reload_catalog()


def get_hero(hero_id: str) -> Optional[Hero]:
    return _SERVICE.get_hero(hero_id)


def get_contract(contract_id: str) -> Optional[Contract]:
    return _SERVICE.get_contract(contract_id)


def list_heroes(clan: Optional[str] = None) -> list[Hero]:
    return _SERVICE.list_heroes(clan)


def spawn_contracts(count: int | None = None) -> list[Contract]:
    return _SERVICE.spawn_contracts(count)


def contract_details(hero: Optional[Hero], contract: Optional[Contract]) -> Optional[ContractDetails]:
    return _SERVICE.contract_details(hero, contract)


def attempt_contract(
    hero_id: str,
    contract_id: str,
    city_level: int = 0,
    resources: Optional[Mapping[str, int]] = None,
) -> dict:
    return _SERVICE.attempt_contract(hero_id, contract_id, city_level, resources)
