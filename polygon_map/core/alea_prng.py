"""
Seeded uniform random source based on Johannes Baagøe's Alea generator.

Alea is small, fast and fully reproducible from a string or numeric seed,
which makes site sampling repeatable across runs and platforms.
"""

_TWO_POW_32 = 0x100000000
_TWO_POW_MINUS_32 = 2.3283064365386963e-10


def _uint32(n) -> int:
    """Wrap to an unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


def _mash_factory():
    """Alea's Mash hash: folds seed characters into a 32-bit state."""
    state = 0xEFC8249D

    def mash(data) -> float:
        nonlocal state
        for char in str(data):
            state += ord(char)
            h = 0.02519603282416938 * state
            state = _uint32(h)
            h -= state
            h *= state
            state = _uint32(h)
            h -= state
            state += h * _TWO_POW_32
        return _uint32(state) * _TWO_POW_MINUS_32

    return mash


class AleaPRNG:
    """
    Alea pseudo random number generator.

    The seed may be a string, a number or an iterable of those. Every value
    produced by `random()` lies in [0, 1).
    """

    def __init__(self, seed="default"):
        self.seed = seed
        self.call_count = 0

        if hasattr(seed, "__iter__") and not isinstance(seed, str):
            parts = list(seed)
        else:
            parts = [seed]

        mash = _mash_factory()
        self.s0 = mash(" ")
        self.s1 = mash(" ")
        self.s2 = mash(" ")
        self.c = 1

        for part in parts:
            self.s0 -= mash(part)
            if self.s0 < 0:
                self.s0 += 1
            self.s1 -= mash(part)
            if self.s1 < 0:
                self.s1 += 1
            self.s2 -= mash(part)
            if self.s2 < 0:
                self.s2 += 1

    def __repr__(self):
        return f"AleaPRNG(seed={self.seed!r}, calls={self.call_count})"

    def random(self) -> float:
        """Next uniform double in [0, 1)."""
        self.call_count += 1
        t = 2091639 * self.s0 + self.c * _TWO_POW_MINUS_32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def uniform(self, low: float, high: float) -> float:
        """Uniform double in [low, high)."""
        return low + (high - low) * self.random()
