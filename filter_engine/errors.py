"""
Domain exceptions for the filter engine.

Notes
-----
Engine code avoids raising generic exceptions for expected failure modes. Each
one maps to a domain exception with a clear meaning. Malformed persisted data
is not an expected failure: it is recovered locally and never raised.
"""

from __future__ import annotations


class FilterEngineError(RuntimeError):
    """Base exception for all filter engine failures."""


class CapacityExceededError(FilterEngineError):
    """Raised when a rule is appended to a rule set that is already full."""


class RuleIndexError(FilterEngineError, IndexError):
    """Raised when a rule index does not address an active rule."""


class NotifierStateError(FilterEngineError):
    """Raised when batch boundaries are unbalanced."""


class ConfigStoreError(FilterEngineError):
    """Raised when the backing key/value store cannot be opened."""


class PresetFormatError(FilterEngineError):
    """Raised when a preset record cannot be decoded."""


class UnknownPresetError(FilterEngineError):
    """Raised when a named preset does not exist."""
