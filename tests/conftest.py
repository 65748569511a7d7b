"""Pytest configuration and fixtures."""

import pytest

from lot_market.clock import ManualClock
from lot_market.config import MarketConfig
from lot_market.market import LotMarket
from lot_market.models import ListingStatus
from lot_market.payments import InMemoryLedger
from lot_market.registry import InMemoryRegistry

DAY = 86_400
HOUR = 3_600
START = 1_700_000_000


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def alice() -> str:
    return "0xalice"


@pytest.fixture
def bob() -> str:
    return "0xbob"


@pytest.fixture
def carol() -> str:
    return "0xcarol"


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(start=START)


@pytest.fixture
def registry() -> InMemoryRegistry:
    return InMemoryRegistry()


@pytest.fixture
def ledger() -> InMemoryLedger:
    return InMemoryLedger()


@pytest.fixture
def market_config() -> MarketConfig:
    """Market with a mint fee of 1, a 3-lot wallet cap and a 5 hour grace window."""
    return MarketConfig(mint_fee=1, max_lots_per_wallet=3, grace_period_seconds=5 * HOUR)


@pytest.fixture
def market(
    market_config: MarketConfig,
    registry: InMemoryRegistry,
    ledger: InMemoryLedger,
    clock: ManualClock,
) -> LotMarket:
    return LotMarket(config=market_config, registry=registry, payments=ledger, clock=clock)


@pytest.fixture
def lot_id(market: LotMarket, alice: str) -> int:
    """A freshly minted lot owned by alice."""
    return market.create_lot(alice, "https://example.com/lots/0.json", payment=1)


@pytest.fixture
def for_sale(market: LotMarket, lot_id: int, alice: str) -> int:
    """Alice's lot listed for sale at 500."""
    market.set_listing(lot_id, ListingStatus.SALE, alice)
    market.set_sale_price(lot_id, 500, alice)
    return lot_id


@pytest.fixture
def for_rent(market: LotMarket, lot_id: int, alice: str) -> int:
    """Alice's lot listed for rent at 10/day with a 50% deposit."""
    market.set_rent_terms(lot_id, 10, 50, alice)
    market.set_listing(lot_id, ListingStatus.SALE, alice)
    market.set_listing(lot_id, ListingStatus.RENT, alice)
    return lot_id


@pytest.fixture
def rented(market: LotMarket, for_rent: int, bob: str) -> int:
    """Alice's lot rented by bob for 2 days (10 paid up front)."""
    market.rent(for_rent, bob, 2 * DAY, 10)
    return for_rent
