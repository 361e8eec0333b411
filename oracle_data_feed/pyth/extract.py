from __future__ import annotations

import json
import re
from typing import Any, List, Union

from .api import PriceUpdateError


UPDATE_DATA_PATH = "binary.data[0]"

_TOKEN = re.compile(r"(\.)?([A-Za-z_][A-Za-z0-9_]*)|\[(-?\d+)\]")


class ExtractionError(PriceUpdateError):
    pass


def parse_path(path: str) -> List[Union[str, int]]:
    """Split a jq-style path such as `binary.data[0]` into keys and indices.

    Keys after the first step must be introduced by a dot, as in jq.
    """
    steps: List[Union[str, int]] = []
    pos = 0
    path = path.strip()
    if path.startswith("."):
        path = path[1:]
    while pos < len(path):
        m = _TOKEN.match(path, pos)
        if m is None:
            raise ValueError(f"invalid path {path!r} at offset {pos}")
        dot, key, idx = m.groups()
        if key is not None:
            if steps and dot is None:
                raise ValueError(f"invalid path {path!r} at offset {pos}: expected '.' before {key!r}")
            if not steps and dot is not None:
                raise ValueError(f"invalid path {path!r} at offset {pos}")
            steps.append(key)
        else:
            steps.append(int(idx))
        pos = m.end()
    if not steps:
        raise ValueError("empty path")
    return steps


def extract_field(payload: Any, path: str = UPDATE_DATA_PATH) -> Any:
    cur = payload
    walked = ""
    for step in parse_path(path):
        if isinstance(step, str):
            if not isinstance(cur, dict):
                raise ExtractionError(f"cannot read key {step!r}: {walked or '.'} is not an object")
            if step not in cur:
                raise ExtractionError(f"missing field {walked}.{step}")
            cur = cur[step]
            walked = f"{walked}.{step}"
        else:
            if not isinstance(cur, list):
                raise ExtractionError(f"cannot index [{step}]: {walked or '.'} is not an array")
            if not -len(cur) <= step < len(cur):
                raise ExtractionError(f"index {walked}[{step}] out of range (length {len(cur)})")
            cur = cur[step]
            walked = f"{walked}[{step}]"
    if cur is None:
        raise ExtractionError(f"{walked} is null")
    return cur


def render_raw(value: Any) -> str:
    """Render like `jq -r`: strings verbatim, everything else as compact JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"))


def encode_line(value: str) -> bytes:
    """UTF-8 encode `value` plus a trailing newline, ready to write."""
    try:
        return (value.rstrip("\n") + "\n").encode("utf-8")
    except UnicodeEncodeError as e:
        raise ExtractionError(f"value cannot be encoded as UTF-8: {e.reason} at offset {e.start}") from e
