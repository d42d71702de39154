"""Deterministic seeding for the Monte Carlo ensemble.

Same inputs give the same seed, and the same seed gives the same draws. Each
simulated path gets its own sub-generator derived from (seed, path index), so
paths can be drawn in any order or in parallel without changing the result.
"""

import hashlib
from typing import Optional

import numpy as np


def stable_seed(*parts) -> int:
    """32-bit seed from the |-joined text of parts.

    Uses a SHA-256 digest instead of hash(), whose output changes between
    interpreter runs.
    """
    key = "|".join(repr(p) if isinstance(p, float) else str(p) for p in parts)
    digest = hashlib.sha256(key.encode("utf-8")).digest()
    return int.from_bytes(digest[:4], "big")


class SeededGenerator:
    """Seeded source of uniform integer draws."""

    def __init__(self, seed: int, path: Optional[int] = None):
        self.seed = int(seed)
        self.path = path
        entropy = [self.seed] if path is None else [self.seed, int(path)]
        self._rng = np.random.default_rng(np.random.SeedSequence(entropy))

    def for_path(self, index: int) -> "SeededGenerator":
        """Canonical sub-generator for one ensemble path."""
        return SeededGenerator(self.seed, path=index)

    def draw_indices(self, pool_size: int, count: int) -> np.ndarray:
        """count uniform picks from range(pool_size), with replacement.

        An empty pool yields -1 for every pick; callers treat that as a zero draw.
        """
        if pool_size <= 0:
            return np.full(count, -1, dtype=np.int64)
        return self._rng.integers(0, pool_size, size=count)

    def __repr__(self) -> str:
        return f"SeededGenerator(seed={self.seed}, path={self.path})"
