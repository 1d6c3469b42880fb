"""Failures raised while populating the record catalogs."""

from __future__ import annotations


class GuildhallError(Exception):
    """Base exception for catalog errors."""


class LoadFailure(GuildhallError):
    """A named data source could not be retrieved."""

    kind = "load"

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message


class ParseFailure(GuildhallError):
    """Retrieved data failed decoding or schema validation."""

    kind = "parse"

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message


__all__ = ["GuildhallError", "LoadFailure", "ParseFailure"]
