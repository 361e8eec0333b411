from __future__ import annotations

from pathlib import Path


def write_price_update(out: Path, data: bytes) -> Path:
    """Overwrite `out` with an already encoded update line."""
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(data)
    return out
