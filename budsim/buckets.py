"""Spatial bucket grid: node-to-bucket indexing and periodic neighbour lookup."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple

_PLANE = [(0, 0), (-1, 1), (0, 1), (1, 1), (1, 0), (1, -1), (0, -1), (-1, -1), (-1, 0)]
# Order of the 27 neighbour ranks: centre plane, lower z plane, upper z plane.
_OFFSETS = [(dx, dy, dz) for dz in (0, -1, 1) for dx, dy in _PLANE]


def _wrap(pos: int, delta: int, count: int) -> int:
    if delta < 0:
        return count - 1 if pos == 0 else pos - 1
    if delta > 0:
        return 0 if pos + 1 >= count else pos + 1
    return pos


def neighbor_bucket(
    bucket: int, rank: int, x_count: int, y_count: int, z_count: int
) -> int:
    """Bucket adjacent to ``bucket`` selected by ``rank % 27``, with periodic wrap.

    Rank 0 is the bucket itself; the other 26 ranks walk the surrounding
    buckets in a fixed order.
    """
    if rank < 0:
        raise ValueError(f"rank must be non-negative, got {rank}")
    relative = rank % 27
    if relative == 0:
        return bucket
    area = x_count * y_count
    x = bucket % x_count
    z = bucket // area
    y = (bucket - z * area) // x_count
    dx, dy, dz = _OFFSETS[relative]
    return (
        _wrap(x, dx, x_count)
        + _wrap(y, dy, y_count) * x_count
        + _wrap(z, dz, z_count) * area
    )


@dataclass(frozen=True)
class BucketIndexer:
    """Maps a node position to the linear index of its grid bucket."""

    min_x: float
    max_x: float
    min_y: float
    max_y: float
    min_z: float
    max_z: float
    x_count: int
    y_count: int
    z_count: int
    unit_len: float

    def __call__(self, x: float, y: float, z: float, node_id: int) -> Tuple[int, int]:
        """Return ``(bucket, node_id)`` for a node at ``(x, y, z)``."""
        ix = int((x - self.min_x) / self.unit_len)
        iy = int((y - self.min_y) / self.unit_len)
        iz = int((z - self.min_z) / self.unit_len)
        bucket = iz * self.x_count * self.y_count + iy * self.x_count + ix
        if bucket == -1:
            bucket = 0
        return bucket, node_id


def expand(counts: Sequence[int], values: Sequence[Any]) -> List[Any]:
    """Repeat each ``values[i]`` ``counts[i]`` times, in order."""
    if len(values) < len(counts):
        raise ValueError("fewer values than counts")
    if any(c < 0 for c in counts):
        raise ValueError("counts must be non-negative")
    return [value for count, value in zip(counts, values) for _ in range(count)]