"""Lot lifecycle engines: listing, escrow and penalties."""

from lot_market.engine.custody import Custody
from lot_market.engine.escrow import EscrowEngine
from lot_market.engine.listing import LISTING_TARGETS, ListingStateMachine
from lot_market.engine.penalty import PenaltyEnforcer

__all__ = [
    "Custody",
    "EscrowEngine",
    "LISTING_TARGETS",
    "ListingStateMachine",
    "PenaltyEnforcer",
]
