"""Tests for lot models and enums."""

from datetime import datetime

from lot_market.models import ListingStatus, Lot, LotEvent, LotEventType, SettlementBasis


class TestLot:
    """Tests for the Lot record."""

    def test_defaults(self) -> None:
        lot = Lot(lot_id=0, lender="0xa", renter="0xa")

        assert lot.status == ListingStatus.UNAVAILABLE
        assert lot.price == 0
        assert lot.deposit == 0
        assert lot.return_day == 0
        assert lot.rent_time == 0
        assert not lot.is_rented

    def test_end_rental_resets_occupancy(self) -> None:
        lot = Lot(
            lot_id=1,
            lender="0xa",
            renter="0xb",
            price=10,
            deposit=50,
            return_day=5000,
            rent_time=200,
            status=ListingStatus.RENTED,
        )

        lot.end_rental()

        assert lot.renter == "0xa"
        assert lot.return_day == 0
        assert lot.rent_time == 0
        assert lot.status == ListingStatus.RENT
        # Terms survive the rental
        assert lot.price == 10
        assert lot.deposit == 50


class TestEnums:
    """Tests for enum values."""

    def test_listing_status_values(self) -> None:
        assert {s.value for s in ListingStatus} == {"SALE", "RENT", "RENTED", "UNAVAILABLE"}

    def test_listing_status_from_string(self) -> None:
        assert ListingStatus("SALE") is ListingStatus.SALE

    def test_event_types_are_dotted(self) -> None:
        assert all(t.value.startswith("lot.") for t in LotEventType)

    def test_settlement_basis_values(self) -> None:
        assert SettlementBasis("OVERRUN") is SettlementBasis.OVERRUN
        assert SettlementBasis("RENTAL_TERM") is SettlementBasis.RENTAL_TERM


class TestLotEvent:
    """Tests for the LotEvent record."""

    def test_record_copies_lot(self) -> None:
        lot = Lot(lot_id=4, lender="0xa", renter="0xa", price=10)

        event = LotEvent.record(LotEventType.LISTED, lot, 1_700_000_000, caller="0xa")
        lot.price = 99

        assert event.lot.price == 10
        assert event.lot_id == 4
        assert event.clock == 1_700_000_000
        assert event.details == {"caller": "0xa"}
        assert event.event_time.tzinfo is not None

    def test_record_ids_are_unique(self) -> None:
        lot = Lot(lot_id=0, lender="0xa", renter="0xa")

        first = LotEvent.record(LotEventType.CREATED, lot, 0)
        second = LotEvent.record(LotEventType.CREATED, lot, 0)

        assert first.event_id != second.event_id

    def test_defaults_and_subject(self) -> None:
        event = LotEvent(
            event_id="e1",
            event_type=LotEventType.CREATED,
            event_time=datetime(2024, 1, 1),
            lot_id=7,
            lot=Lot(lot_id=7, lender="0xa", renter="0xa"),
            clock=0,
        )

        assert event.details == {}
        assert event.source == "lot-market"
        assert event.subject == "lot-7"
