"""High level game logic built on top of the record catalogs."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Mapping, Optional

from ..models import CONTRACT_TYPE, HERO_TYPE, Contract, ContractDetails, Hero, Outcome
from . import rules
from .balance import BalanceProfile, load_balance_profile
from .catalog import LoadReport, RecordStore
from .repository import DataStore
from .rng import RandomSource, SeededRandom

log = logging.getLogger("guildhall.service")

DEFAULT_HERO_SOURCES = (
    "hero_fire_wizard.json",
    "hero_forest_ranger.json",
    "hero_ice_knight.json",
    "hero_golden_trader.json",
    "hero_shadow_assassin.json",
)

DEFAULT_CONTRACT_SOURCES = (
    "contract_copper_mining.json",
    "contract_trade_spices.json",
    "contract_bandit_attack.json",
    "contract_magic_research.json",
    "contract_spy_mission.json",
    "contract_healing_plague.json",
    "contract_castle_construction.json",
    "contract_tax_rebellion.json",
    "contract_forest_logging.json",
    "contract_diplomatic_mission.json",
)

DEFAULT_BOARD_SIZE = 3


class GameService:
    """Encapsulates the contract rules, configuration and catalogs."""

    def __init__(
        self,
        store: DataStore | None = None,
        catalog: RecordStore | None = None,
        rng: RandomSource | None = None,
    ):
        self.store = store or DataStore()
        self.catalog = catalog or RecordStore()
        self._catalog_loaded = catalog is not None
        self._rng = rng
        self._config_cache: dict | None = None
        self._config_cache_key: tuple[str, int | None] | None = None
        self._config_path: Path | None = None
        self._config_default_base = self.store.base_dir
        self._balance_cache: BalanceProfile | None = None

    def _load_config(self) -> dict:
        candidates: list[Path] = []
        if self._config_path is not None:
            candidates.append(self._config_path)

        default_path = (self._config_default_base / "config.json").resolve()
        if default_path not in candidates:
            candidates.append(default_path)

        current_path = self.store.config_path.resolve()
        if current_path not in candidates:
            candidates.append(current_path)

        path = candidates[0]
        mtime: int | None = None
        for candidate in candidates:
            try:
                current_mtime = candidate.stat().st_mtime_ns
            except FileNotFoundError:
                continue

            path = candidate
            mtime = current_mtime
            if self._config_path != candidate:
                self._config_path = candidate
            break

        cache_key = (str(path), mtime)

        if self._config_cache is not None and self._config_cache_key == cache_key:
            return self._config_cache

        if mtime is None:
            data = {}
        else:
            try:
                with path.open("r", encoding="utf-8") as handle:
                    data = json.load(handle)
            except (FileNotFoundError, json.JSONDecodeError) as exc:
                log.warning("Ignoring unreadable config %s: %s", path, exc)
                data = {}

        if not isinstance(data, dict):
            data = {}

        paths_cfg = data.get("paths")
        self.store.configure_paths(paths_cfg if isinstance(paths_cfg, dict) else None)

        self._config_cache = data
        self._config_cache_key = cache_key
        self._balance_cache = None
        return self._config_cache

    def get_config(self) -> dict:
        return self._load_config()

    @property
    def config(self) -> dict:
        return self._load_config()

    def get_balance_profile(self) -> BalanceProfile:
        if self._balance_cache is None:
            config = self._load_config()
            balance_cfg = config.get("balance")
            mapping = balance_cfg if isinstance(balance_cfg, dict) else None
            self._balance_cache = load_balance_profile(mapping)
        return self._balance_cache

    @property
    def rng(self) -> RandomSource:
        if self._rng is None:
            rng = SeededRandom(self._load_config().get("random_seed"))
            if rng.seed is not None:
                log.info("Random source seeded with %r", rng.seed)
            self._rng = rng
        return self._rng

    def _section(self, name: str) -> dict:
        value = self._load_config().get(name)
        return value if isinstance(value, dict) else {}

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------
    def _sources(self, kind: str) -> List[str]:
        key = "heroes" if kind == HERO_TYPE else "contracts"
        default = DEFAULT_HERO_SOURCES if kind == HERO_TYPE else DEFAULT_CONTRACT_SOURCES
        raw = self._section("sources").get(key)
        if not isinstance(raw, list):
            return list(default)
        return [str(name).strip() for name in raw if str(name).strip()]

    def reload_catalog(self) -> LoadReport:
        self._load_config()
        report = self.catalog.reload(
            self.store,
            self._sources(HERO_TYPE),
            self._sources(CONTRACT_TYPE),
        )
        self._catalog_loaded = True
        return report

    def ensure_catalog(self) -> RecordStore:
        if not self._catalog_loaded:
            self.reload_catalog()
        return self.catalog

    def get_hero(self, hero_id: str) -> Optional[Hero]:
        return self.ensure_catalog().get_hero(hero_id)

    def get_contract(self, contract_id: str) -> Optional[Contract]:
        return self.ensure_catalog().get_contract(contract_id)

    def list_heroes(self, clan: Optional[str] = None) -> List[Hero]:
        catalog = self.ensure_catalog()
        if clan:
            return catalog.heroes_by_clan(clan)
        return catalog.list_heroes()

    # ------------------------------------------------------------------
    # Contract board
    # ------------------------------------------------------------------
    def board_size(self) -> int:
        raw = self._section("board").get("size", DEFAULT_BOARD_SIZE)
        try:
            size = int(raw)
        except (TypeError, ValueError):
            return DEFAULT_BOARD_SIZE
        return max(0, size)

    def spawn_contracts(self, count: int | None = None) -> List[Contract]:
        """Mandatory contracts followed by a random spawn of ``count`` others."""

        catalog = self.ensure_catalog()
        if count is None:
            count = self.board_size()
        spawned = rules.spawn_random(
            catalog.list_contracts(),
            count,
            self.rng,
            self.get_balance_profile(),
        )
        return catalog.mandatory_contracts() + spawned

    # ------------------------------------------------------------------
    # Contract evaluation / resolution
    # ------------------------------------------------------------------
    def contract_details(self, hero: Optional[Hero], contract: Optional[Contract]) -> Optional[ContractDetails]:
        return rules.contract_details(hero, contract, self.get_balance_profile())

    def evaluate_contract(
        self,
        hero: Optional[Hero],
        contract: Contract,
        city_level: int = 0,
        resources: Optional[Mapping[str, int]] = None,
    ) -> dict:
        balance = self.get_balance_profile()
        unmet = rules.unmet_requirements(hero, contract, city_level, resources)
        return {
            "eligible": not unmet,
            "unmet": unmet,
            "success_chance": rules.success_rate(hero, contract, balance),
            "duration": rules.duration_seconds(hero, contract, balance),
            "details": rules.contract_details(hero, contract, balance),
        }

    def resolve_contract(self, hero: Optional[Hero], contract: Optional[Contract], success: bool) -> Outcome:
        return rules.resolve(hero, contract, success, self.rng)

    def attempt_contract(
        self,
        hero_id: str,
        contract_id: str,
        city_level: int = 0,
        resources: Optional[Mapping[str, int]] = None,
    ) -> dict:
        hero = self.get_hero(hero_id)
        if hero is None:
            return {"ok": False, "reason": "Герой не найден"}
        contract = self.get_contract(contract_id)
        if contract is None:
            return {"ok": False, "reason": "Контракт не найден"}
        if contract.definition is None:
            return {"ok": False, "reason": "У контракта нет условий"}

        info = self.evaluate_contract(hero, contract, city_level, resources)
        if not info["eligible"]:
            return {
                "ok": False,
                "reason": "Требования не выполнены",
                "unmet": info["unmet"],
                "success_chance": info["success_chance"],
            }

        success = self.rng.random() < info["success_chance"]
        outcome = self.resolve_contract(hero, contract, success)
        log.info(
            "%s attempted %s: %s (chance %.2f)",
            hero.id,
            contract.id,
            "success" if success else "failure",
            info["success_chance"],
        )
        return {
            "ok": True,
            "success": success,
            "reason": "Успех" if success else "Провал",
            "hero": hero,
            "contract": contract,
            "success_chance": info["success_chance"],
            "duration": info["duration"],
            "outcome": outcome,
        }
