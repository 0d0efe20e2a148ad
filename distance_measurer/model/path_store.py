"""PathStore - the single ordered sequence of path coordinates.

The store is the one source of truth for a measured path. Everything drawn
on the map (markers, segments, distance labels) is derived from it by the
SyncEngine, which listens to the ``inserted`` and ``removed`` signals.

Only two mutations exist: ``insert_at`` and ``remove_at``. Replacing a point
is expressed as an insert followed by a remove, and ``clear`` removes the
last entry repeatedly so every entry gets its own teardown notification.
"""

import logging
from collections.abc import Iterator

from distance_measurer.model.coordinate import Coordinate
from distance_measurer.model.signal import Signal

logger = logging.getLogger(__name__)


class PathStore:
    """Ordered, index-contiguous sequence of Coordinates.

    Signals:
        inserted(index, coord): after an entry was inserted at index
        removed(index, coord): after the entry at index was removed

    Example:
        store = PathStore()
        store.inserted.connect(on_inserted)
        store.insert_at(0, Coordinate(lat=22.5, lon=113.9))
    """

    def __init__(self) -> None:
        self._points: list[Coordinate] = []
        self.inserted = Signal("inserted")
        self.removed = Signal("removed")

    def insert_at(self, index: int, coord: Coordinate) -> None:
        """Insert coord at index (0 <= index <= len), shifting later entries right."""
        if not 0 <= index <= len(self._points):
            raise IndexError(f"insert_at index {index} outside [0, {len(self._points)}]")
        self._points.insert(index, coord)
        logger.debug(f"[PATH] insert_at({index}) -> length {len(self._points)}")
        self.inserted.emit(index, coord)

    def remove_at(self, index: int) -> Coordinate:
        """Remove the entry at index, shifting later entries left."""
        if not 0 <= index < len(self._points):
            raise IndexError(f"remove_at index {index} outside [0, {len(self._points)})")
        coord = self._points.pop(index)
        logger.debug(f"[PATH] remove_at({index}) -> length {len(self._points)}")
        self.removed.emit(index, coord)
        return coord

    def push(self, coord: Coordinate) -> None:
        """Append coord at the end."""
        self.insert_at(len(self._points), coord)

    def pop(self) -> Coordinate:
        """Remove and return the last entry."""
        return self.remove_at(len(self._points) - 1)

    def clear(self) -> None:
        """Remove entries from the end until empty (one ``removed`` per entry).

        Listeners may themselves remove entries while handling a removal,
        so the length is re-read on every iteration.
        """
        while self._points:
            self.pop()

    def get_at(self, index: int) -> Coordinate:
        if not 0 <= index < len(self._points):
            raise IndexError(f"get_at index {index} outside [0, {len(self._points)})")
        return self._points[index]

    @property
    def last(self) -> Coordinate | None:
        return self._points[-1] if self._points else None

    def to_list(self) -> list[Coordinate]:
        return list(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __getitem__(self, index: int) -> Coordinate:
        return self.get_at(index)

    def __iter__(self) -> Iterator[Coordinate]:
        return iter(list(self._points))

    def __repr__(self) -> str:
        return f"PathStore(length={len(self._points)})"
