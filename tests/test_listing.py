"""Tests for the listing state machine."""

from dataclasses import replace

import pytest

from lot_market.config import MarketConfig
from lot_market.exceptions import InvalidStateError, LotNotFoundError, UnauthorizedError
from lot_market.market import LotMarket
from lot_market.models import ListingStatus
from lot_market.registry import InMemoryRegistry

ESCROW = "escrow"


class TestListingTransitions:
    """Tests for the reachable listing edges."""

    def test_new_lot_is_unavailable_and_held_by_owner(
        self, market: LotMarket, registry: InMemoryRegistry, lot_id: int, alice: str
    ) -> None:
        assert market.get_lot(lot_id).status == ListingStatus.UNAVAILABLE
        assert registry.holder_of(lot_id) == alice

    def test_unavailable_to_sale_moves_custody_to_escrow(
        self, market: LotMarket, registry: InMemoryRegistry, lot_id: int, alice: str
    ) -> None:
        status = market.set_listing(lot_id, ListingStatus.SALE, alice)

        assert status == ListingStatus.SALE
        assert registry.holder_of(lot_id) == ESCROW
        assert registry.balance_of(alice) == 0

    def test_sale_to_rent_keeps_escrow_and_grants_authority(
        self, market: LotMarket, registry: InMemoryRegistry, lot_id: int, alice: str
    ) -> None:
        market.set_listing(lot_id, ListingStatus.SALE, alice)

        status = market.set_listing(lot_id, ListingStatus.RENT, alice)

        assert status == ListingStatus.RENT
        assert registry.holder_of(lot_id) == ESCROW
        assert registry.authority_of(lot_id) == ESCROW

    def test_rent_to_unavailable_returns_custody(
        self, market: LotMarket, registry: InMemoryRegistry, for_rent: int, alice: str
    ) -> None:
        status = market.set_listing(for_rent, ListingStatus.UNAVAILABLE, alice)

        assert status == ListingStatus.UNAVAILABLE
        assert registry.holder_of(for_rent) == alice

    def test_sale_to_unavailable_clears_asking_price(
        self, market: LotMarket, registry: InMemoryRegistry, for_sale: int, alice: str
    ) -> None:
        market.set_listing(for_sale, ListingStatus.UNAVAILABLE, alice)

        assert market.get_sale_price(for_sale) == 0
        assert registry.holder_of(for_sale) == alice

    def test_accepts_status_string(self, market: LotMarket, lot_id: int, alice: str) -> None:
        assert market.set_listing(lot_id, "SALE", alice) == ListingStatus.SALE

    def test_unknown_status_string(self, market: LotMarket, lot_id: int, alice: str) -> None:
        with pytest.raises(InvalidStateError, match="Unknown listing status: LEASED"):
            market.set_listing(lot_id, "LEASED", alice)

        assert market.get_lot(lot_id).status == ListingStatus.UNAVAILABLE


class TestListingRejections:
    """Tests for transitions the custody rule forbids."""

    def test_unavailable_to_rent_requires_sale_first(
        self, market: LotMarket, registry: InMemoryRegistry, lot_id: int, alice: str
    ) -> None:
        with pytest.raises(UnauthorizedError, match="not in escrow custody"):
            market.set_listing(lot_id, ListingStatus.RENT, alice)

        assert market.get_lot(lot_id).status == ListingStatus.UNAVAILABLE
        assert registry.holder_of(lot_id) == alice

    def test_rent_to_sale_is_rejected(
        self, market: LotMarket, registry: InMemoryRegistry, for_rent: int, alice: str
    ) -> None:
        with pytest.raises(UnauthorizedError, match="does not hold"):
            market.set_listing(for_rent, ListingStatus.SALE, alice)

        assert market.get_lot(for_rent).status == ListingStatus.RENT
        assert registry.holder_of(for_rent) == ESCROW

    def test_rent_to_rent_is_invalid(self, market: LotMarket, for_rent: int, alice: str) -> None:
        with pytest.raises(InvalidStateError, match="only move to RENT from SALE"):
            market.set_listing(for_rent, ListingStatus.RENT, alice)

    def test_sale_to_sale_is_rejected(self, market: LotMarket, for_sale: int, alice: str) -> None:
        with pytest.raises(UnauthorizedError):
            market.set_listing(for_sale, ListingStatus.SALE, alice)

    def test_unavailable_to_unavailable_is_rejected(
        self, market: LotMarket, lot_id: int, alice: str
    ) -> None:
        with pytest.raises(UnauthorizedError):
            market.set_listing(lot_id, ListingStatus.UNAVAILABLE, alice)

    def test_rented_cannot_be_targeted(self, market: LotMarket, lot_id: int, alice: str) -> None:
        with pytest.raises(InvalidStateError, match="cannot be set directly"):
            market.set_listing(lot_id, ListingStatus.RENTED, alice)

    def test_rented_lot_cannot_be_delisted(
        self, market: LotMarket, registry: InMemoryRegistry, rented: int, alice: str, bob: str
    ) -> None:
        with pytest.raises(UnauthorizedError):
            market.set_listing(rented, ListingStatus.UNAVAILABLE, alice)

        assert market.get_lot(rented).status == ListingStatus.RENTED
        assert registry.holder_of(rented) == bob

    def test_stranger_cannot_list_someone_elses_lot(
        self, market: LotMarket, lot_id: int, bob: str
    ) -> None:
        with pytest.raises(UnauthorizedError):
            market.set_listing(lot_id, ListingStatus.SALE, bob)

    def test_unknown_lot(self, market: LotMarket, alice: str) -> None:
        with pytest.raises(LotNotFoundError):
            market.set_listing(42, ListingStatus.SALE, alice)


class TestCustodyAsAuthorization:
    """Leaving escrow is authorised by custody, not by the lender's identity."""

    def test_any_caller_can_delist_an_escrowed_lot(
        self, market: LotMarket, registry: InMemoryRegistry, for_sale: int, alice: str, bob: str
    ) -> None:
        status = market.set_listing(for_sale, ListingStatus.UNAVAILABLE, bob)

        assert status == ListingStatus.UNAVAILABLE
        assert registry.holder_of(for_sale) == bob
        assert market.get_lot(for_sale).lender == alice

    def test_lender_check_can_be_enabled(
        self,
        market_config: MarketConfig,
        registry: InMemoryRegistry,
        alice: str,
        bob: str,
    ) -> None:
        strict = LotMarket(
            config=replace(market_config, listing_requires_lender=True), registry=registry
        )
        lot_id = strict.create_lot(alice, "uri", payment=1)
        strict.set_listing(lot_id, ListingStatus.SALE, alice)

        with pytest.raises(UnauthorizedError, match="not the lender"):
            strict.set_listing(lot_id, ListingStatus.UNAVAILABLE, bob)

        assert registry.holder_of(lot_id) == ESCROW
        assert strict.set_listing(lot_id, ListingStatus.UNAVAILABLE, alice) == ListingStatus.UNAVAILABLE

    def test_renter_cannot_list_rented_lot(
        self, market: LotMarket, registry: InMemoryRegistry, rented: int, bob: str
    ) -> None:
        with pytest.raises(InvalidStateError, match="only move to SALE from UNAVAILABLE"):
            market.set_listing(rented, ListingStatus.SALE, bob)

        assert market.get_lot(rented).status == ListingStatus.RENTED
        assert registry.holder_of(rented) == bob
