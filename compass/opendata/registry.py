from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from compass.opendata.adapters import CHICAGO_ADAPTERS, SourceAdapter
from compass.services.query_engine import ALL


def _selects(wanted: Optional[str], value: str) -> bool:
    return not wanted or wanted == ALL or wanted == value


class CategoryRegistry:
    """Static (category, subcategory) -> adapters table. Immutable after construction."""

    def __init__(self, adapters: Iterable[SourceAdapter]):
        self._adapters: Tuple[SourceAdapter, ...] = tuple(adapters)
        self._by_key: Dict[str, SourceAdapter] = {}
        for adapter in self._adapters:
            if adapter.key in self._by_key:
                raise ValueError(f"Duplicate adapter key: {adapter.key}")
            self._by_key[adapter.key] = adapter

    @property
    def adapters(self) -> Tuple[SourceAdapter, ...]:
        return self._adapters

    def get(self, key: str) -> Optional[SourceAdapter]:
        return self._by_key.get(key)

    def resolve(self, category: str, subcategory: Optional[str] = None) -> List[SourceAdapter]:
        """Adapters for a selection. `None` or "all" on either level matches everything."""
        return [
            a for a in self._adapters
            if _selects(category, a.category) and _selects(subcategory, a.subcategory)
        ]

    def categories(self) -> Dict[str, List[str]]:
        out: Dict[str, List[str]] = {}
        for adapter in self._adapters:
            subs = out.setdefault(adapter.category, [])
            if adapter.subcategory not in subs:
                subs.append(adapter.subcategory)
        return out


default_registry = CategoryRegistry(CHICAGO_ADAPTERS)
