# gds_gerber/geometry/cache.py

from __future__ import annotations

from dataclasses import dataclass, field
from threading import RLock
from typing import Dict, Optional, Tuple

from .primitives import Pattern

CacheKey = Tuple[str, int]


@dataclass
class PatternCache:
    """
    Per-run memo of flattened (structure name, layer) results.

    Patterns are immutable, so a cached value can be handed to any number
    of callers; translating it produces a new Pattern.

    Thread-safety:
      - Safe for concurrent reads/writes (simple lock).
      - Two threads may flatten the same key at once; the first stored
        result wins.
    """
    _store: Dict[CacheKey, Pattern] = field(default_factory=dict)
    _lock: RLock = field(default_factory=RLock)
    hits: int = 0

    def get(self, name: str, layer: int) -> Optional[Pattern]:
        with self._lock:
            pat = self._store.get((name, layer))
            if pat is not None:
                self.hits += 1
            return pat

    def set(self, name: str, layer: int, pattern: Pattern) -> Pattern:
        with self._lock:
            return self._store.setdefault((name, layer), pattern)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
