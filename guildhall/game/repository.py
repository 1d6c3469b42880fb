"""Filesystem-backed loader for hero and contract definitions."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from ..models import CONTRACT_TYPE, HERO_TYPE
from .errors import LoadFailure, ParseFailure


class DataStore:
    """Utility wrapper around the project's data directories."""

    def __init__(self, base_dir: Path | str | None = None):
        default_base = Path(__file__).resolve().parents[2]
        if base_dir is None:
            resolved_base = default_base
        else:
            resolved_base = Path(base_dir).expanduser()
            if not resolved_base.is_absolute():
                resolved_base = default_base / resolved_base
        resolved_base = resolved_base.resolve()
        self.base_dir = resolved_base
        self._base_anchor = resolved_base
        self.data_dir = self.base_dir / "data"
        self.heroes_dir = self.data_dir / "heroes"
        self.contracts_dir = self.data_dir / "contracts"

    def _coerce_path(self, value: Path | str, relative_to: Path) -> Path:
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = relative_to / path
        return path.resolve()

    def configure_paths(self, paths: dict | None) -> None:
        """Apply path overrides from configuration."""

        if not isinstance(paths, dict):
            paths = {}

        base_override = paths.get("base_dir")
        if base_override is not None:
            base_dir = self._coerce_path(base_override, self._base_anchor)
        else:
            base_dir = self._base_anchor
        self.base_dir = base_dir

        data_dir_value = paths.get("data_dir")
        if data_dir_value is not None:
            data_dir = self._coerce_path(data_dir_value, base_dir)
        else:
            data_dir = base_dir / "data"
        self.data_dir = data_dir

        heroes_value = paths.get("heroes_dir") or paths.get("heroes")
        contracts_value = paths.get("contracts_dir") or paths.get("contracts")
        if heroes_value is not None:
            self.heroes_dir = self._coerce_path(heroes_value, base_dir)
        else:
            self.heroes_dir = data_dir / "heroes"
        if contracts_value is not None:
            self.contracts_dir = self._coerce_path(contracts_value, base_dir)
        else:
            self.contracts_dir = data_dir / "contracts"

    # ------------------------------------------------------------------
    # Generic JSON helpers
    # ------------------------------------------------------------------
    def read_json(self, path: Path) -> Optional[dict]:
        if not path.exists():
            return None
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    # ------------------------------------------------------------------
    # Domain specific helpers
    # ------------------------------------------------------------------
    @property
    def config_path(self) -> Path:
        return self.base_dir / "config.json"

    def resource_path(self, kind: str, name: str) -> Path:
        if kind == HERO_TYPE:
            return self.heroes_dir / name
        if kind == CONTRACT_TYPE:
            return self.contracts_dir / name
        raise ValueError(f"Unknown record kind: {kind!r}")

    def load_record(self, kind: str, name: str) -> dict:
        """Read one decoded record.

        Raises :class:`LoadFailure` when the resource cannot be read and
        :class:`ParseFailure` when it is not a JSON object.
        """
        path = self.resource_path(kind, name)
        try:
            data = self.read_json(path)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ParseFailure(name, f"invalid JSON: {exc}") from exc
        except OSError as exc:
            raise LoadFailure(name, f"cannot read {path}: {exc}") from exc
        if data is None:
            raise LoadFailure(name, f"resource not found: {path}")
        if not isinstance(data, dict):
            raise ParseFailure(name, f"expected a JSON object, got {type(data).__name__}")
        return data
