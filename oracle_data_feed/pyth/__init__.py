"""Pyth Hermes latest price-update fetcher.

Builds the Hermes request for a fixed set of price feeds, extracts the
hex-encoded update payload and writes it to a flat file for on-chain submission.
"""

__all__ = [
    "api",
    "cli",
    "extract",
    "feeds",
    "persistence",
]
