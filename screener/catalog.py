"""Indicator catalog built from the metadata endpoint.

The catalog only provides display labels and the selection list. Keys that
are missing from it (or an empty catalog after a failed fetch) still work;
they are shown as their raw key.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndicatorMeta:
    """One selectable indicator."""

    key: str
    label: Optional[str] = None

    @property
    def display(self) -> str:
        return self.label or self.key


class IndicatorCatalog:
    """Ordered lookup of indicator metadata by key."""

    def __init__(self, indicators: Iterable[IndicatorMeta] = ()):
        self._items: list[IndicatorMeta] = []
        self._by_key: dict[str, IndicatorMeta] = {}
        for meta in indicators:
            if meta.key in self._by_key:
                continue
            self._items.append(meta)
            self._by_key[meta.key] = meta

    @classmethod
    def from_payload(cls, payload: Optional[dict]) -> "IndicatorCatalog":
        """Build from an ``{"indicators": [{"key", "label"?}]}`` response body.

        Malformed entries are skipped.
        """
        rows = (payload or {}).get("indicators") or []
        items: list[IndicatorMeta] = []
        skipped = 0
        for row in rows:
            if not isinstance(row, dict) or not row.get("key"):
                skipped += 1
                continue
            label = row.get("label")
            items.append(IndicatorMeta(key=str(row["key"]), label=str(label) if label else None))
        if skipped:
            logger.warning("Skipped %d malformed indicator entries", skipped)
        return cls(items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(self._items)

    def __contains__(self, key: str) -> bool:
        return key in self._by_key

    def get(self, key: str) -> Optional[IndicatorMeta]:
        return self._by_key.get(key)

    def label(self, key: str) -> str:
        """Display label for *key*, falling back to the key itself."""
        meta = self._by_key.get(key)
        return meta.display if meta else key

    def options(self) -> list[tuple[str, str]]:
        """``(key, label)`` pairs for the selection list, in catalog order."""
        return [(m.key, m.display) for m in self._items]
