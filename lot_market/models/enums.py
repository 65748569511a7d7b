"""Enumeration types for lot-market entities."""

from enum import Enum


class ListingStatus(str, Enum):
    SALE = "SALE"
    RENT = "RENT"
    RENTED = "RENTED"
    UNAVAILABLE = "UNAVAILABLE"


class SettlementBasis(str, Enum):
    """How many days a renter owes the non-deposit share for at settlement.

    ``OVERRUN`` counts whole days elapsed past ``return_day``.
    ``RENTAL_TERM`` counts whole days of the agreed rental.
    """

    OVERRUN = "OVERRUN"
    RENTAL_TERM = "RENTAL_TERM"


class LotEventType(str, Enum):
    CREATED = "lot.created"
    LISTED = "lot.listed"
    SALE_PRICED = "lot.sale_priced"
    SOLD = "lot.sold"
    RENT_TERMS_SET = "lot.rent_terms_set"
    RENTED = "lot.rented"
    SETTLED = "lot.settled"
    RECLAIMED = "lot.reclaimed"
