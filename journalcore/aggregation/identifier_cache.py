"""
Identifier Cache
================

Best-effort translation table from raw journal identifiers
(`$SAA_SignalType_Geological;`, `$USS_Type_Salvage;`, ...) to the text
the game showed for them.

GENERATION:
- Incremented on every put() that passes the equality guard
- Overwriting a key with an identical value still increments
- Never decremented; observers compare it to detect change
"""

from __future__ import annotations
from types import MappingProxyType
from typing import Dict, Mapping, Optional


# Entity artifact the game leaves in some localised strings
_NBSP = "&NBSP;"


def normalize_identifier(raw_id: str) -> str:
    return raw_id.lower().strip()


def sanitize_text(text: str) -> str:
    return text.replace(_NBSP, " ")


class IdentifierCache:
    """
    Mapping from normalized identifier to display text.

    Single writer. Readers on other threads need external synchronization.
    """

    def __init__(self):
        self._items: Dict[str, str] = {}
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def items(self) -> Mapping[str, str]:
        """Read-only live view of the table."""
        return MappingProxyType(self._items)

    def put(self, raw_id: str, display_text: str, force_even_if_equal: bool = False) -> bool:
        """
        Store display text for raw_id. Returns True if the table was written.

        An untranslated passthrough (raw_id == display_text) is ignored
        unless forced.
        """
        if raw_id == display_text and not force_even_if_equal:
            return False

        self._items[normalize_identifier(raw_id)] = sanitize_text(display_text)
        self._generation += 1
        return True

    def get(self, raw_id: str, return_absent_as_none: bool = False) -> Optional[str]:
        """Display text for raw_id; the raw id itself (or None) when unknown."""
        text = self._items.get(normalize_identifier(raw_id))
        if text is not None:
            return text
        return None if return_absent_as_none else raw_id

    def __contains__(self, raw_id: object) -> bool:
        return isinstance(raw_id, str) and normalize_identifier(raw_id) in self._items

    def __len__(self) -> int:
        return len(self._items)
