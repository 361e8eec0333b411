"""Oracle Data Feed - Price-update retrieval utilities for on-chain oracles.

Provides:
- Pyth Hermes latest price-update fetcher (run once, write to file)
"""

__version__ = "0.1.0"

# Expose main submodules
from . import pyth

__all__ = ["pyth", "__version__"]
