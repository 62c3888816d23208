"""
Deterministic random numbers for world generation.

SeededRandom wraps numpy's PCG64 bit generator (PCG XSL RR 128/64), a named
algorithm with a published reference implementation, so orbital element
draws are reproducible for a given seed on every platform.

Seeds may be integers, floats or strings. Integral floats act as the matching
integer; other finite floats hash their hex form. Strings go through a stable
32-bit polynomial hash (h = h * 31 + code point, wrapped to signed 32 bits, then
absolute value); Python's built-in hash() is salted per process and cannot
be used.
"""

from __future__ import annotations

import math
from typing import Union

import numpy as np


Seed = Union[int, float, str]

DEFAULT_SEED = 12345


def hash_seed(text: str) -> int:
    """Stable 32-bit string hash used to turn names/ids into seeds."""
    h = 0
    for char in text:
        h = (h * 31 + ord(char)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


def normalize_seed(seed: Seed | None) -> int:
    """Map any accepted seed value to a non-negative integer."""
    if seed is None:
        return DEFAULT_SEED
    if isinstance(seed, str):
        return hash_seed(seed)
    if isinstance(seed, (float, np.floating)):
        value = float(seed)
        if not math.isfinite(value):
            raise ValueError(f"Seed must be finite, got {value}")
        if value.is_integer():
            return abs(int(value))
        return hash_seed(value.hex())
    if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)):
        raise ValueError(f"Seed must be a number or str, got {type(seed).__name__}")
    return abs(int(seed))


class SeededRandom:
    """
    Seedable uniform generator exposing next() and range(min, max).

    Two instances created with the same seed produce identical sequences.
    """

    def __init__(self, seed: Seed | None = None) -> None:
        self.initial_seed = normalize_seed(seed)
        self._generator = np.random.Generator(np.random.PCG64(self.initial_seed))

    def next(self) -> float:
        """Uniform float in [0, 1)."""
        return float(self._generator.random())

    def range(self, minimum: float, maximum: float) -> float:
        """Uniform float in [minimum, maximum)."""
        return minimum + self.next() * (maximum - minimum)

    def chance(self, probability: float) -> bool:
        """True with the given probability."""
        return self.next() < probability
