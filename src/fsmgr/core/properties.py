"""
Process-wide property lookup.

A small key/value store with Android property semantics. Values are
strings; boolean lookups accept the usual spellings and fall back to the
caller's default for anything else.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from pathlib import Path

from fsmgr.core.logging import get_logger

logger = get_logger(__name__)

_TRUE_VALUES = frozenset({"1", "y", "yes", "on", "true"})
_FALSE_VALUES = frozenset({"0", "n", "no", "off", "false"})


def parse_bool(value: str | None, default: bool) -> bool:
    """Parse a property value as a boolean."""
    if value is None:
        return default
    value = value.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return default


class PropertyStore(Mapping[str, str]):
    """Read-mostly property store."""

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(values or {})

    def __getitem__(self, name: str) -> str:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"PropertyStore({self._values!r})"

    def set(self, name: str, value: str) -> None:
        self._values[name] = value

    def update(self, other: Mapping[str, str]) -> None:
        self._values.update(other)

    def get_property(self, name: str, default: str = "") -> str:
        return self._values.get(name, default)

    def get_bool_property(self, name: str, default: bool) -> bool:
        """Look up a boolean property."""
        return parse_bool(self._values.get(name), default)

    @classmethod
    def from_lines(cls, lines: list[str] | str) -> PropertyStore:
        """Parse ``key=value`` lines as found in build.prop files."""
        if isinstance(lines, str):
            lines = lines.splitlines()

        values: dict[str, str] = {}
        for lineno, raw in enumerate(lines, start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                logger.warning("Ignoring malformed property line", line=lineno, text=raw)
                continue
            name, _, value = line.partition("=")
            values[name.strip()] = value.strip()
        return cls(values)

    @classmethod
    def from_file(cls, path: Path) -> PropertyStore:
        return cls.from_lines(path.read_text(encoding="utf-8"))
