"""
Process-wide random source.

Site sampling draws from a single Alea generator so a run is reproducible
from its seed. Python's `random` and NumPy's generators are not used for
anything that affects the generated map.
"""

from typing import Optional

from ..core.alea_prng import AleaPRNG

_prng: Optional[AleaPRNG] = None


def set_random_seed(seed) -> AleaPRNG:
    """
    Reseed the shared generator.

    Args:
        seed: String or numeric seed

    Returns:
        The fresh AleaPRNG instance
    """
    global _prng
    _prng = AleaPRNG(seed)
    return _prng


def get_prng() -> AleaPRNG:
    """Shared generator, seeded with "default" on first use."""
    global _prng
    if _prng is None:
        _prng = AleaPRNG("default")
    return _prng
