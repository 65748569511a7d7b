"""Domain models for the lot market."""

from lot_market.models.enums import LotEventType, ListingStatus, SettlementBasis
from lot_market.models.event import LotEvent
from lot_market.models.lot import Lot

__all__ = ["ListingStatus", "Lot", "LotEvent", "LotEventType", "SettlementBasis"]
