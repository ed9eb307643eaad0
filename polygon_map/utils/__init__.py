"""
Utility helpers: shared random source and logging configuration.
"""

from .random import set_random_seed, get_prng
from .log_config import configure_logging

__all__ = ['set_random_seed', 'get_prng', 'configure_logging']
