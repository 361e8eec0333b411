from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .api import (
    DEFAULT_TIMEOUT,
    PriceUpdateError,
    fetch_latest_price_update,
    parsed_to_dataframe,
)
from .extract import UPDATE_DATA_PATH, encode_line, extract_field, render_raw
from .feeds import DEFAULT_OUTPUT, HERMES_BASE_URL, HermesConfig
from .persistence import write_price_update


@dataclass
class RunConfig:
    out_path: Path = DEFAULT_OUTPUT
    hermes: HermesConfig = field(default_factory=HermesConfig)
    timeout: Optional[float] = DEFAULT_TIMEOUT
    debug: bool = False


def run_once(cfg: RunConfig) -> int:
    feeds = cfg.hermes.feeds
    feed_ids = cfg.hermes.feed_ids()
    if cfg.debug:
        print(f"[INFO] requesting {len(feed_ids)} feeds: {', '.join(f.name for f in feeds)}")

    # Fetch, extract and encode before touching the output file so a failure keeps the previous update
    try:
        payload = fetch_latest_price_update(feed_ids, cfg.hermes.base_url, cfg.timeout)
        value = render_raw(extract_field(payload, UPDATE_DATA_PATH))
        data = encode_line(value)
    except PriceUpdateError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        print(f"[WARN] {cfg.out_path} left unchanged", file=sys.stderr)
        return 2

    has_parsed = "parsed" in payload
    if cfg.debug or has_parsed:
        parsed_df = parsed_to_dataframe(payload, feeds)
        n_parsed = len(parsed_df)
    else:
        parsed_df, n_parsed = None, 0
    if cfg.debug:
        if parsed_df.empty:
            print("[INFO] response has no parsed prices")
        else:
            print(parsed_df.to_string(index=False))
    if has_parsed and n_parsed < len(feeds):
        print(f"[WARN] parsed section covers {n_parsed} of {len(feeds)} requested feeds", file=sys.stderr)

    out = write_price_update(cfg.out_path, data)

    # Log concise stats
    print(f"feeds={len(feed_ids)} parsed={n_parsed} bytes={len(value)} out={out}")
    return 0


def parse_args(argv: Optional[list[str]] = None) -> RunConfig:
    p = argparse.ArgumentParser(description="Fetch the latest Pyth price update and write it to a file")
    p.add_argument("--out", type=Path, default=DEFAULT_OUTPUT, help="Output file (overwritten on success)")
    p.add_argument("--base-url", type=str, default=HERMES_BASE_URL, help="Hermes base URL")
    p.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help="HTTP timeout in seconds; 0 waits indefinitely",
    )
    p.add_argument("--debug", action="store_true", help="Verbose logging")
    args = p.parse_args(argv)

    return RunConfig(
        out_path=args.out,
        hermes=HermesConfig(base_url=args.base_url),
        timeout=args.timeout if args.timeout > 0 else None,
        debug=args.debug,
    )


def main(argv: Optional[list[str]] = None) -> int:
    cfg = parse_args(argv)
    try:
        return run_once(cfg)
    except Exception as e:  # surface clear error message
        print(f"[ERROR] {e}", file=sys.stderr)
        if cfg.debug:
            raise
        return 3


if __name__ == "__main__":
    raise SystemExit(main())
