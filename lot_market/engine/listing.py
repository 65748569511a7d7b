"""Listing state machine: Sale / Rent / Unavailable toggles."""

import logging
from dataclasses import replace

from lot_market.config import MarketConfig
from lot_market.engine.custody import Custody
from lot_market.exceptions import InvalidStateError, UnauthorizedError
from lot_market.logging import lot_extra
from lot_market.models import ListingStatus, Lot
from lot_market.store import LotStore

logger = logging.getLogger(__name__)

LISTING_TARGETS = frozenset(
    {ListingStatus.SALE, ListingStatus.RENT, ListingStatus.UNAVAILABLE}
)


class ListingStateMachine:
    """Moves a lot between listing states and custody holders.

    Authorization is a capability check on who holds the asset in the
    registry, not on who the lender is:

    - into ``SALE``: the caller must hold the asset; it moves to the custodian.
    - ``SALE`` to ``RENT``: the custodian must hold the asset; it stays there
      and the custodian is granted standing transfer authority.
    - into ``UNAVAILABLE``: the custodian must hold the asset; it moves to
      the caller.

    ``RENTED`` is only reached through a rental.
    """

    def __init__(self, store: LotStore, custody: Custody, config: MarketConfig) -> None:
        self.store = store
        self.custody = custody
        self.config = config

    def set_listing(self, lot_id: int, target: ListingStatus | str, caller: str) -> Lot:
        """Toggle the listing status of a lot.

        Returns
        -------
        Lot
            Copy of the lot after the transition.

        Raises
        ------
        InvalidStateError
            If ``target`` is not a listing state or the transition is not an edge.
        UnauthorizedError
            If the custody precondition for ``target`` does not hold.
        """
        try:
            target = ListingStatus(target)
        except ValueError as e:
            raise InvalidStateError(f"Unknown listing status: {target}") from e
        if target not in LISTING_TARGETS:
            raise InvalidStateError(f"{target.value} cannot be set directly")

        with self.store.transaction(lot_id) as tx:
            lot = tx.lot
            if self.config.listing_requires_lender and caller != lot.lender:
                raise UnauthorizedError(f"{caller} is not the lender of lot {lot_id}")

            holder = self.custody.holder(lot_id)
            custodian = self.custody.custodian

            if target == ListingStatus.SALE:
                if holder != caller:
                    raise UnauthorizedError(f"{caller} does not hold lot {lot_id}")
                if lot.status != ListingStatus.UNAVAILABLE:
                    raise InvalidStateError(
                        f"Lot {lot_id} can only move to SALE from UNAVAILABLE, not {lot.status.value}"
                    )
                lot.status = ListingStatus.SALE
                self.custody.move(tx, caller, custodian)

            elif target == ListingStatus.RENT:
                if holder != custodian:
                    raise UnauthorizedError(f"Lot {lot_id} is not in escrow custody")
                if lot.status != ListingStatus.SALE:
                    raise InvalidStateError(
                        f"Lot {lot_id} can only move to RENT from SALE, not {lot.status.value}"
                    )
                lot.status = ListingStatus.RENT
                self.store.sale_prices[lot_id] = 0
                self.custody.grant(tx)

            else:
                if holder != custodian:
                    raise UnauthorizedError(f"Lot {lot_id} is not in escrow custody")
                lot.status = ListingStatus.UNAVAILABLE
                self.store.sale_prices[lot_id] = 0
                self.custody.move(tx, custodian, caller)

            result = replace(lot)

        logger.info(
            "Lot %d listed as %s by %s",
            lot_id,
            result.status.value,
            caller,
            extra=lot_extra(lot_id, caller, result.status),
        )
        return result
