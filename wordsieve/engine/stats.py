"""
Partition statistics.

For a partition with bucket sizes {c_i} (optionally counted inside a
candidate set) over `total` words:

  max_bucket        = max_i c_i                      (worst case left)
  expected_bucket   = sum_i c_i**2 / total           (expected words left)
  entropy_bits      = -sum_i (c_i/total) log2(c_i/total)
  solve_probability = #{i : c_i == 1} / total        (one word remains)

total == 0 gives Stats.zero() instead of dividing by zero.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Iterable, Optional, Sequence

import numpy as np

from .partition import Partition


@dataclass(frozen=True)
class Stats:
    max_bucket: int = 0
    expected_bucket: float = 0.0
    entropy_bits: float = 0.0
    solve_probability: float = 0.0

    @classmethod
    def zero(cls) -> "Stats":
        return cls()

    def as_dict(self) -> Dict:
        return asdict(self)


def stats_from_sizes(sizes: Iterable[int], total: int) -> Stats:
    """Shared arithmetic: bucket sizes + population size -> Stats."""
    if total <= 0:
        return Stats.zero()
    s = np.fromiter(sizes, dtype=np.int64)
    s = s[s > 0]
    if not len(s):
        return Stats.zero()

    p = s / float(total)
    return Stats(
        max_bucket=int(s.max()),
        expected_bucket=float((s * s).sum()) / total,
        entropy_bits=float(-(p * np.log2(p)).sum()),
        solve_probability=float((s == 1).sum()) / total,
    )


def compute_stats(partition: Partition, restrict_to: Optional[np.ndarray] = None) -> Stats:
    """
    Stats for one guess, over the whole dictionary or inside `restrict_to`.
    """
    total = partition.size if restrict_to is None else int(np.count_nonzero(restrict_to))
    if total == 0:
        return Stats.zero()
    return stats_from_sizes(partition.sizes(restrict_to), total)


def combined_stats(partitions: Sequence[Partition],
                   restrict_to: Optional[np.ndarray] = None) -> Stats:
    """
    Stats for several guesses played together (not adaptively).

    A word's bucket identity is the tuple of its codes under each guess;
    words are grouped by that tuple before applying the usual formulas.
    """
    if not partitions:
        raise ValueError("combined_stats needs at least one partition")
    if len(partitions) == 1:
        return compute_stats(partitions[0], restrict_to)

    size = partitions[0].size
    mask = np.ones(size, dtype=bool) if restrict_to is None else np.asarray(restrict_to, dtype=bool)
    total = int(np.count_nonzero(mask))
    if total == 0:
        return Stats.zero()

    # Columns: one code per guess for each surviving word.
    keys = np.stack([p.assignment[mask] for p in partitions], axis=1)
    _, counts = np.unique(keys, axis=0, return_counts=True)
    return stats_from_sizes(counts, total)
