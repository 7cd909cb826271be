"""
Seeded pseudo-random stream — Mulberry32.

A 32-bit state mixing generator: fast, deterministic, not cryptographic.
Every Monte Carlo draw in a run comes from ONE instance consumed strictly in
order, so a run is reproducible from its seed alone:

    rng = seeded(42)
    u = rng()          # float in [0, 1)
    child = rng.next_seed()   # integer for seeding an independent sub-stream

Instances carry mutable state and must not be shared between concurrent runs.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

_MASK32 = 0xFFFFFFFF
_INCREMENT = 0x6D2B79F5
_TWO_32 = 4294967296.0

MAX_SEED = 2 ** 31


def _imul(a: int, b: int) -> int:
    """32-bit wrapping multiply (low 32 bits, unsigned)."""
    return (a * b) & _MASK32


class Mulberry32:
    """Callable generator returning uniforms in [0, 1)."""

    __slots__ = ("seed", "_state")

    def __init__(self, seed: int):
        self.seed = int(seed)
        self._state = self.seed & _MASK32

    def __call__(self) -> float:
        t = (self._state + _INCREMENT) & _MASK32
        self._state = t
        r = ((_imul(t ^ (t >> 15), 1 | t) + _imul(t ^ (t >> 7), 61 | t)) & _MASK32) ^ t
        return ((r ^ (r >> 14)) & _MASK32) / _TWO_32

    def next_seed(self) -> int:
        """Draw an integer seed for a derived stream (consumes one draw)."""
        return int(self() * 1e9)

    def __repr__(self) -> str:
        return f"Mulberry32(seed={self.seed})"


def entropy_seed() -> int:
    """Fresh seed from the OS entropy pool."""
    return int(np.random.default_rng().integers(0, MAX_SEED))


def seeded(seed: Optional[int] = None) -> Mulberry32:
    """Generator for `seed`, or for a fresh entropy seed when absent."""
    if seed is None:
        seed = entropy_seed()
    return Mulberry32(seed)
