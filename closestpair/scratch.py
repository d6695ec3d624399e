"""Per-level working buffers reused across the recursive search."""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from .types import IndexedPoint


def coordinate_key(axis: int) -> Callable[[IndexedPoint], float]:
    """Return a sort key reading coordinate ``axis`` of an indexed point."""

    def key(item: IndexedPoint) -> float:
        return item.point[axis]

    return key


class ScratchPool:
    """Reusable working buffers, one per remaining-dimension level.

    Level ``d`` (``1 <= d <= dimension``) holds points sorted by coordinate
    ``d - 1``. Loading overwrites the front of a level's buffer and grows it
    only when the incoming range is longer than anything seen before, so the
    active length is returned to the caller instead of being stored in the
    list itself. Each level is owned by at most one live call: the search
    fully resolves a left half, then a right half, then their strip.
    """

    def __init__(self, dimension: int) -> None:
        if dimension < 1:
            raise ValueError(f"dimension must be >= 1, received {dimension}")
        self._buffers: list[list[IndexedPoint]] = [[] for _ in range(dimension)]

    @property
    def dimension(self) -> int:
        """Return the number of levels in the pool."""

        return len(self._buffers)

    @property
    def capacity(self) -> tuple[int, ...]:
        """Return the allocated length of each level, level 1 first."""

        return tuple(len(buffer) for buffer in self._buffers)

    def buffer(self, level: int) -> list[IndexedPoint]:
        return self._buffers[self._slot(level)]

    def load(
        self,
        level: int,
        source: Sequence[IndexedPoint],
        start: int = 0,
        stop: Optional[int] = None,
    ) -> int:
        """Copy ``source[start:stop]`` to the front of a level and return its length."""

        buffer = self._buffers[self._slot(level)]
        stop = len(source) if stop is None else stop
        length = stop - start
        if length > len(buffer):
            buffer[:] = source[start:stop]
        else:
            buffer[:length] = source[start:stop]
        return length

    def sort(self, level: int, length: int, axis: int) -> None:
        """Sort the first ``length`` entries of a level by coordinate ``axis``."""

        buffer = self._buffers[self._slot(level)]
        key = coordinate_key(axis)
        if length == len(buffer):
            buffer.sort(key=key)
        else:
            buffer[:length] = sorted(buffer[:length], key=key)

    def _slot(self, level: int) -> int:
        if not 1 <= level <= len(self._buffers):
            raise ValueError(
                f"level must lie in [1, {len(self._buffers)}], received {level}"
            )
        return level - 1


__all__ = ["ScratchPool", "coordinate_key"]
