"""
Preset import/export.

A preset is a fixed-size binary record, the unit of interchange for saved
rule sets:

    uint32 count
    MAX_RULES x { uint16 item; uint16 mode; uint16 off; 2 pad bytes; char text[256] }

All integers are little-endian. ``text`` is NUL-terminated UTF-8 of at most
255 bytes. Import populates slots 0 .. count-1 and ignores the rest; export
fills only the active slots and zeroes the others.

Design constraints
------------------
- Preset files are written atomically (temp file + replace).
- ``.preset.zst`` files hold the same record compressed with zstandard.
"""

from __future__ import annotations

import logging
import os
import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar, Final, Sequence

import zstandard as zstd

from .errors import PresetFormatError, UnknownPresetError
from .properties import PropertyKind
from .rules.manager import RuleSetManager
from .rules.models import MAX_RULES, TEXT_MAX_BYTES, Rule, RuleOperator

logger = logging.getLogger(__name__)

_HEADER: Final[struct.Struct] = struct.Struct("<I")
_SLOT: Final[struct.Struct] = struct.Struct(f"<HHHxx{TEXT_MAX_BYTES + 1}s")

PRESET_SUFFIX: Final[str] = ".preset"
COMPRESSED_SUFFIX: Final[str] = ".preset.zst"


@dataclass(frozen=True, slots=True)
class PresetSlot:
    """One rule slot of a preset record."""

    item: int = 0
    mode: int = 0
    off: int = 0
    text: str = ""


def _empty_slots() -> tuple[PresetSlot, ...]:
    return tuple(PresetSlot() for _ in range(MAX_RULES))


@dataclass(frozen=True, slots=True)
class PresetRecord:
    """
    Fixed-size preset record.

    Attributes
    ----------
    count:
        Number of active slots.
    slots:
        Exactly MAX_RULES slots; those at or beyond count are ignored on import.
    """

    SIZE: ClassVar[int] = _HEADER.size + MAX_RULES * _SLOT.size

    count: int = 0
    slots: tuple[PresetSlot, ...] = field(default_factory=_empty_slots)

    def __post_init__(self) -> None:
        if len(self.slots) != MAX_RULES:
            raise PresetFormatError(f"Preset must have exactly {MAX_RULES} slots, got {len(self.slots)}")

    @classmethod
    def from_rules(cls, rules: Sequence[Rule]) -> "PresetRecord":
        """Export active rules; unused slots are zeroed."""
        active = list(rules[:MAX_RULES])
        slots = [
            PresetSlot(
                item=int(rule.property),
                mode=int(rule.operator),
                off=0 if rule.enabled else 1,
                text=rule.raw_text,
            )
            for rule in active
        ]
        slots.extend(PresetSlot() for _ in range(MAX_RULES - len(slots)))
        return cls(count=len(active), slots=tuple(slots))

    def to_rules(self) -> list[Rule]:
        """Import slots 0 .. count-1 as rules; count is clamped to MAX_RULES."""
        count = max(0, min(self.count, MAX_RULES))
        return [
            Rule(
                index=i,
                property=slot.item,
                operator=RuleOperator.coerce(slot.mode),
                enabled=slot.off == 0,
                raw_text=slot.text,
            )
            for i, slot in enumerate(self.slots[:count])
        ]

    def pack(self) -> bytes:
        """
        Encode the record.

        Raises
        ------
        PresetFormatError
            If a field does not fit its width.
        """
        try:
            parts = [_HEADER.pack(self.count)]
            for slot in self.slots:
                text = slot.text.encode("utf-8")
                if len(text) > TEXT_MAX_BYTES:
                    raise PresetFormatError(f"Preset text exceeds {TEXT_MAX_BYTES} bytes")
                parts.append(_SLOT.pack(slot.item, slot.mode, slot.off, text))
        except struct.error as exc:
            raise PresetFormatError(f"Preset field out of range: {exc}") from exc
        return b"".join(parts)

    @classmethod
    def unpack(cls, data: bytes) -> "PresetRecord":
        """
        Decode a record.

        Raises
        ------
        PresetFormatError
            If data is not exactly SIZE bytes.
        """
        if len(data) != cls.SIZE:
            raise PresetFormatError(f"Preset record must be {cls.SIZE} bytes, got {len(data)}")
        (count,) = _HEADER.unpack_from(data, 0)
        slots: list[PresetSlot] = []
        for i in range(MAX_RULES):
            item, mode, off, raw = _SLOT.unpack_from(data, _HEADER.size + i * _SLOT.size)
            text = raw.split(b"\x00", 1)[0].decode("utf-8", errors="replace")
            slots.append(PresetSlot(item=item, mode=mode, off=off, text=text))
        return cls(count=count, slots=tuple(slots))


def _single_rule_preset(prop: PropertyKind, text: str) -> PresetRecord:
    slots = list(_empty_slots())
    slots[0] = PresetSlot(item=int(prop), mode=int(RuleOperator.AND), off=0, text=text)
    return PresetRecord(count=1, slots=tuple(slots))


BUILTIN_PRESETS: Final[dict[str, PresetRecord]] = {
    "rating : all except rejected": _single_rule_preset(PropertyKind.RATING, ">=0"),
    "rating : ★ ★": _single_rule_preset(PropertyKind.RATING, ">=2"),
    "color labels : red": _single_rule_preset(PropertyKind.COLORLABEL, "red"),
}


def capture_preset(manager: RuleSetManager) -> PresetRecord:
    """Export the manager's current rule set."""
    return PresetRecord.from_rules(manager.rules)


def apply_preset(manager: RuleSetManager, record: PresetRecord) -> None:
    """Replace the manager's rule set with the preset (one signal)."""
    manager.apply_rules(record.to_rules())


def _check_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise ValueError("Preset name must not be empty.")
    if any(ch in cleaned for ch in r'\/:*?"<>|') or cleaned in {".", ".."}:
        raise ValueError(f"Preset name contains invalid characters: {cleaned!r}")
    return cleaned


def _write_atomic(path: Path, payload: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_name(path.name + ".tmp")
    try:
        temp_path.write_bytes(payload)
        os.replace(temp_path, path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise


@dataclass(frozen=True, slots=True)
class PresetStore:
    """
    Named presets stored as files under a directory.

    Parameters
    ----------
    root:
        Directory holding preset files. Created on first save.
    compress:
        Write new presets as zstandard-compressed ``.preset.zst`` files.
    """

    root: Path
    compress: bool = False

    def _paths(self, name: str) -> tuple[Path, Path]:
        cleaned = _check_name(name)
        return self.root / f"{cleaned}{COMPRESSED_SUFFIX}", self.root / f"{cleaned}{PRESET_SUFFIX}"

    def save(self, name: str, record: PresetRecord) -> Path:
        """Write record under name, replacing any existing preset of that name."""
        compressed, plain = self._paths(name)
        payload = record.pack()
        if self.compress:
            _write_atomic(compressed, zstd.ZstdCompressor().compress(payload))
            plain.unlink(missing_ok=True)
            target = compressed
        else:
            _write_atomic(plain, payload)
            compressed.unlink(missing_ok=True)
            target = plain
        logger.debug("Saved preset %r to %s", name, target)
        return target

    def load(self, name: str) -> PresetRecord:
        """
        Read the preset called name.

        Raises
        ------
        UnknownPresetError
            If no such preset exists.
        PresetFormatError
            If the file is corrupt.
        """
        compressed, plain = self._paths(name)
        if compressed.exists():
            try:
                payload = zstd.ZstdDecompressor().decompress(compressed.read_bytes())
            except zstd.ZstdError as exc:
                raise PresetFormatError(f"Corrupt compressed preset: {compressed}") from exc
            return PresetRecord.unpack(payload)
        if plain.exists():
            return PresetRecord.unpack(plain.read_bytes())
        raise UnknownPresetError(f"Unknown preset: {name}")

    def names(self) -> list[str]:
        """Return stored preset names, sorted."""
        if not self.root.is_dir():
            return []
        found: set[str] = set()
        for path in self.root.iterdir():
            if not path.is_file():
                continue
            for suffix in (COMPRESSED_SUFFIX, PRESET_SUFFIX):
                if path.name.endswith(suffix):
                    found.add(path.name[: -len(suffix)])
                    break
        return sorted(found)

    def delete(self, name: str) -> None:
        """Delete the preset called name."""
        removed = False
        for path in self._paths(name):
            if path.exists():
                path.unlink()
                removed = True
        if not removed:
            raise UnknownPresetError(f"Unknown preset: {name}")
