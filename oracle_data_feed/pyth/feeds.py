from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple


HERMES_BASE_URL = "https://hermes.pyth.network"
DEFAULT_OUTPUT = Path("price_update.txt")


@dataclass(frozen=True)
class PriceFeed:
    name: str
    id: str

    @property
    def bare_id(self) -> str:
        """Identifier without the 0x prefix, as Hermes reports it in `parsed`."""
        return self.id[2:].lower() if self.id.lower().startswith("0x") else self.id.lower()


DAI_USD = PriceFeed("DAI/USD", "0xb0948a5e5313200c632b51bb5ca32f6de0d36e9950a942d19751e833f70dabfd")
LINK_USD = PriceFeed("LINK/USD", "0x8ac0c70fff57e9aefdf5edf44b51d62c2d433653cbb2cf5cc06bb115af04d221")
WETH_USD = PriceFeed("WETH/USD", "0x9d4294bbcd1174d6f2003ec365831e64cc31d9f6f15a2b85399db8d5000960f6")
USDC_USD = PriceFeed("USDC/USD", "0xeaa020c61cc479712813461ce153894a96a6c00b21ed0cfc2798d1f9a9e9c94a")

# Request order matters: the update payload covers feeds in this order
DEFAULT_FEEDS: Tuple[PriceFeed, ...] = (DAI_USD, LINK_USD, WETH_USD, USDC_USD)


@dataclass(frozen=True)
class HermesConfig:
    base_url: str = HERMES_BASE_URL
    feeds: Tuple[PriceFeed, ...] = DEFAULT_FEEDS

    def feed_ids(self) -> list[str]:
        return [f.id for f in self.feeds]
