from __future__ import annotations

from typing import Any, Iterable, List, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen
import json

import pandas as pd

from .feeds import HERMES_BASE_URL, PriceFeed


LATEST_UPDATES_PATH = "/v2/updates/price/latest"
USER_AGENT = "pyth-price-update/1.0"
DEFAULT_TIMEOUT = 15.0


class PriceUpdateError(RuntimeError):
    """Base class for failures that leave the output file untouched."""


class HermesRequestError(PriceUpdateError):
    def __init__(self, message: str, url: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class MalformedResponseError(PriceUpdateError):
    pass


def build_latest_updates_url(feed_ids: Iterable[str], base_url: str = HERMES_BASE_URL) -> str:
    # Hermes expects repeated ids[] keys; keep the brackets literal
    qs = urlencode([("ids[]", fid) for fid in feed_ids], safe="[]")
    return f"{base_url.rstrip('/')}{LATEST_UPDATES_PATH}?{qs}"


def fetch_latest_price_update(
    feed_ids: Sequence[str],
    base_url: str = HERMES_BASE_URL,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
) -> Any:
    """Fetch the latest price update for the given feeds from Hermes.

    Returns the decoded JSON document. Raises HermesRequestError on transport
    failures and non-2xx responses, MalformedResponseError if the body is not JSON.
    A timeout of None blocks until the server answers.
    """
    url = build_latest_updates_url(feed_ids, base_url)
    req = Request(url, headers={"User-Agent": USER_AGENT, "Accept": "application/json"})
    try:
        with urlopen(req, timeout=timeout) as resp:
            body = resp.read()
    except HTTPError as e:
        # Release the error body; only the status is reported
        e.close()
        raise HermesRequestError(f"HTTP {e.code} from {url}", url, status=e.code) from e
    except URLError as e:
        raise HermesRequestError(f"request to {url} failed: {e.reason}", url) from e
    except OSError as e:  # read timeouts raise TimeoutError, not URLError
        raise HermesRequestError(f"request to {url} failed: {e}", url) from e
    try:
        return json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedResponseError(f"response from {url} is not valid JSON: {e}") from e


def parsed_to_dataframe(payload: Any, feeds: Sequence[PriceFeed]) -> pd.DataFrame:
    """Map the `parsed` section into a DataFrame: feed, id, price, conf, expo, publish_time.

    - price / conf: float64, scaled by 10**expo
    - publish_time: pandas datetime64[ns] (UTC, naive by convention)
    - rows follow the requested feed order; feeds Hermes did not return are dropped
    """
    cols = ["feed", "id", "price", "conf", "expo", "publish_time"]
    parsed = payload.get("parsed") if isinstance(payload, dict) else None
    if not isinstance(parsed, list):
        parsed = []
    by_id = {
        str(item.get("id", "")).lower().removeprefix("0x"): item for item in parsed if isinstance(item, dict)
    }
    rows: List[dict] = []
    for feed in feeds:
        item = by_id.get(feed.bare_id)
        if item is None:
            continue
        try:
            p = item["price"]
            expo = int(p["expo"])
            row = {
                "feed": feed.name,
                "id": feed.id,
                "price": int(p["price"]) * 10.0**expo,
                "conf": int(p["conf"]) * 10.0**expo,
                "expo": expo,
                "publish_time": pd.to_datetime(int(p["publish_time"]), unit="s", utc=True).tz_convert(None),
            }
        except (KeyError, TypeError, ValueError, OverflowError):
            # Summary only; the binary payload is still usable
            continue
        rows.append(row)
    if not rows:
        return pd.DataFrame(columns=cols).astype(
            {"price": float, "conf": float, "expo": int, "publish_time": "datetime64[ns]"}
        )
    return pd.DataFrame(rows, columns=cols)
