"""LRU cache of grid snapshots keyed by cell map content.

Repeated queries against an unchanged dataset reuse the derived snapshot
instead of re-materializing it. The key is a SHA-256 fingerprint of the
cells' coordinates, values and formulas, so any edit to the map produces a
new key. Snapshots are frozen and shared read-only between callers.
"""

from __future__ import annotations

import hashlib
import json
import threading
from collections import OrderedDict
from collections.abc import Callable, Mapping

from spreadsheet_query.config import settings
from spreadsheet_query.grid import MaterializedGrid
from spreadsheet_query.models import Cell
from spreadsheet_query.utils.logging import get_logger

logger = get_logger(__name__)


def fingerprint(cells: Mapping[str, Cell]) -> str:
    """Compute a content fingerprint for a cell map, independent of key order."""
    entries = sorted(
        (
            (cell.row, cell.col, type(cell.value).__name__, cell.value, cell.formula)
            for cell in cells.values()
        ),
        key=lambda entry: (entry[0], entry[1], repr(entry[2:])),
    )
    payload = json.dumps(entries, separators=(",", ":"), default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class GridCache:
    """Thread-safe LRU cache of :class:`MaterializedGrid` snapshots."""

    def __init__(self, max_size: int | None = None) -> None:
        """Initialize the cache.

        Args:
            max_size: Maximum number of snapshots kept. 0 disables caching.
                Defaults to the configured ``grid_cache_size``.
        """
        self._max_size = settings.grid_cache_size if max_size is None else max_size
        self._entries: OrderedDict[str, MaterializedGrid] = OrderedDict()
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0

    @property
    def enabled(self) -> bool:
        """Whether the cache stores anything at all."""
        return self._max_size > 0

    def get(self, key: str) -> MaterializedGrid | None:
        """Return the cached snapshot for ``key`` and mark it recently used."""
        with self._lock:
            grid = self._entries.get(key)
            if grid is None:
                self._misses += 1
                return None
            self._entries.move_to_end(key)
            self._hits += 1
            return grid

    def put(self, key: str, grid: MaterializedGrid) -> None:
        """Store a snapshot, evicting the least recently used entry if full."""
        if not self.enabled:
            return
        with self._lock:
            self._entries[key] = grid
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_size:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted grid snapshot", key=evicted[:12])

    def get_or_build(
        self,
        cells: Mapping[str, Cell],
        build: Callable[[Mapping[str, Cell]], MaterializedGrid],
    ) -> MaterializedGrid:
        """Return the cached snapshot for ``cells``, building it on a miss.

        Args:
            cells: Cell map to look up.
            build: Materialization function used on a cache miss.

        Returns:
            The (possibly shared) grid snapshot.
        """
        if not self.enabled:
            return build(cells)
        key = fingerprint(cells)
        grid = self.get(key)
        if grid is not None:
            logger.debug("Grid cache hit", key=key[:12])
            return grid
        grid = build(cells)
        self.put(key, grid)
        return grid

    def clear(self) -> None:
        """Drop all cached snapshots and reset statistics."""
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> dict[str, int]:
        """Return cache statistics.

        Returns:
            Dictionary with size, max_size, hits and misses.
        """
        with self._lock:
            return {
                "size": len(self._entries),
                "max_size": self._max_size,
                "hits": self._hits,
                "misses": self._misses,
            }
