"""
ConfigStore public API.

This is the narrow key/value surface the engine persists through. Keys are
plain strings (see keys.py). A missing key is not an error: getters return the
caller-supplied default, and callers treat that as "use default".
"""

from __future__ import annotations

from typing import Protocol


class ConfigStore(Protocol):
    """Key/value persistence with typed accessors."""

    def has(self, key: str) -> bool:
        """Return True if key has a stored value."""
        raise NotImplementedError

    def get_int(self, key: str, default: int = 0) -> int:
        """
        Return the int stored under key.

        Returns
        -------
        int
            The stored value, or default when the key is missing or the stored
            value does not parse as an int.
        """
        raise NotImplementedError

    def set_int(self, key: str, value: int) -> None:
        """Store an int under key."""
        raise NotImplementedError

    def get_string(self, key: str, default: str = "") -> str:
        """Return the string stored under key, or default when missing."""
        raise NotImplementedError

    def set_string(self, key: str, value: str) -> None:
        """Store a string under key."""
        raise NotImplementedError

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Return the bool stored under key, or default when missing/unparsable."""
        raise NotImplementedError

    def set_bool(self, key: str, value: bool) -> None:
        """Store a bool under key."""
        raise NotImplementedError

    def keys(self, prefix: str = "") -> list[str]:
        """Return stored keys starting with prefix, sorted."""
        raise NotImplementedError
