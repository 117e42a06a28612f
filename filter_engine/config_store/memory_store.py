"""
In-memory ConfigStore.

Values are kept as strings, the same way the SQLite store keeps them, so the
parsing and defaulting behavior is identical across implementations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from .values import format_bool, parse_bool, parse_int


@dataclass(slots=True)
class MemoryConfigStore:
    """ConfigStore backed by a dict. Useful for tests and scratch sessions."""

    values: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "MemoryConfigStore":
        """Build a store from arbitrary values, stringifying each one."""
        return cls(values={str(k): str(v) for k, v in data.items()})

    def has(self, key: str) -> bool:
        """See ConfigStore.has."""
        return key in self.values

    def get_int(self, key: str, default: int = 0) -> int:
        """See ConfigStore.get_int."""
        return parse_int(self.values.get(key), default)

    def set_int(self, key: str, value: int) -> None:
        """See ConfigStore.set_int."""
        self.values[key] = str(int(value))

    def get_string(self, key: str, default: str = "") -> str:
        """See ConfigStore.get_string."""
        return self.values.get(key, default)

    def set_string(self, key: str, value: str) -> None:
        """See ConfigStore.set_string."""
        self.values[key] = str(value)

    def get_bool(self, key: str, default: bool = False) -> bool:
        """See ConfigStore.get_bool."""
        return parse_bool(self.values.get(key), default)

    def set_bool(self, key: str, value: bool) -> None:
        """See ConfigStore.set_bool."""
        self.values[key] = format_bool(value)

    def keys(self, prefix: str = "") -> list[str]:
        """See ConfigStore.keys."""
        return sorted(key for key in self.values if key.startswith(prefix))
