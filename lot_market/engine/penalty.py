"""Return deadlines, grace window and blacklist."""

import logging

from lot_market.exceptions import BlacklistedError, TimeWindowViolationError
from lot_market.models import Lot
from lot_market.store import LotStore

logger = logging.getLogger(__name__)


class PenaltyEnforcer:
    """Decides whether a rental may still be settled or may be reclaimed.

    Expiry is evaluated lazily: nothing happens when a deadline passes,
    only the next settle or reclaim call observes it.

    Parameters
    ----------
    store : LotStore
        Holds the blacklist.
    grace_period_seconds : int
        Extra time after ``return_day`` during which the renter may still
        settle and the lender may not yet reclaim.
    """

    def __init__(self, store: LotStore, grace_period_seconds: int) -> None:
        self.store = store
        self.grace_period_seconds = grace_period_seconds

    def deadline(self, lot: Lot) -> int:
        """Last second at which the renter may settle."""
        return lot.return_day + self.grace_period_seconds

    def is_overdue(self, lot: Lot, now: int) -> bool:
        """True once a rented lot is past its grace window."""
        return lot.is_rented and now > self.deadline(lot)

    def check_settlement_window(self, lot: Lot, now: int) -> None:
        if self.is_overdue(lot, now):
            raise TimeWindowViolationError(
                f"Lot {lot.lot_id}: settlement window closed at {self.deadline(lot)}, now {now}"
            )

    def check_reclaim_window(self, lot: Lot, now: int) -> None:
        if not self.is_overdue(lot, now):
            raise TimeWindowViolationError(
                f"Lot {lot.lot_id}: cannot reclaim before {self.deadline(lot) + 1}, now {now}"
            )

    def check_not_blacklisted(self, address: str) -> None:
        if self.store.is_blacklisted(address):
            raise BlacklistedError(f"{address} is blacklisted")

    def blacklist(self, address: str) -> None:
        if self.store.add_to_blacklist(address):
            logger.warning("Blacklisted %s", address)
