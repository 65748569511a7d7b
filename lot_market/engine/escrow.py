"""Escrow and pricing engine: sales, rentals and their settlement."""

from __future__ import annotations

import logging
from dataclasses import replace

from lot_market.clock import ManualClock, SystemClock
from lot_market.config import MarketConfig
from lot_market.engine import pricing
from lot_market.engine.custody import Custody
from lot_market.engine.penalty import PenaltyEnforcer
from lot_market.exceptions import (
    InvalidAmountError,
    InvalidStateError,
    UnauthorizedError,
)
from lot_market.logging import lot_extra
from lot_market.models import ListingStatus, Lot
from lot_market.payments import PaymentGateway
from lot_market.store import LotStore

logger = logging.getLogger(__name__)


class EscrowEngine:
    """Prices lots, validates payments and routes value to lenders.

    Every state-changing method runs inside one lot transaction. The
    payment transfer is always the last step; if it fails, custody moves
    and counter changes are undone and the lot is restored.
    """

    def __init__(
        self,
        store: LotStore,
        custody: Custody,
        payments: PaymentGateway,
        penalty: PenaltyEnforcer,
        clock: SystemClock | ManualClock,
        config: MarketConfig,
    ) -> None:
        self.store = store
        self.custody = custody
        self.payments = payments
        self.penalty = penalty
        self.clock = clock
        self.config = config

    # Sales
    def set_sale_price(self, lot_id: int, price: int, caller: str) -> Lot:
        if price <= 0:
            raise InvalidAmountError(f"Sale price must be positive, got {price}")
        with self.store.transaction(lot_id) as tx:
            lot = tx.lot
            if caller != lot.lender:
                raise UnauthorizedError(f"{caller} is not the lender of lot {lot_id}")
            if lot.status != ListingStatus.SALE:
                raise InvalidStateError(f"Lot {lot_id} is not for sale")
            self.store.sale_prices[lot_id] = price
            result = replace(lot)
        logger.info(
            "Lot %d asking price set to %d",
            lot_id,
            price,
            extra=lot_extra(lot_id, caller, result.status),
        )
        return result

    def buy(self, lot_id: int, caller: str, payment: int) -> Lot:
        """Buy a lot listed for sale at exactly its asking price.

        The buyer becomes lender and renter, the lot becomes ``UNAVAILABLE``
        in the buyer's custody and the full payment goes to the seller.
        """
        with self.store.transaction(lot_id) as tx:
            lot = tx.lot
            if lot.status != ListingStatus.SALE:
                raise InvalidStateError(f"Lot {lot_id} is not for sale")
            asking = self.store.sale_prices.get(lot_id, 0)
            if asking <= 0:
                raise InvalidStateError(f"Lot {lot_id} has no asking price")
            if payment != asking:
                raise InvalidAmountError(
                    f"Lot {lot_id} costs {asking}, payment was {payment}"
                )
            if caller == lot.lender:
                raise UnauthorizedError(f"{caller} already owns lot {lot_id}")

            seller = lot.lender
            self.store.increment_held(caller)
            tx.on_rollback(lambda: self.store.decrement_held(caller))
            self.store.decrement_held(seller)
            tx.on_rollback(lambda: self.store.increment_held(seller))

            lot.lender = caller
            lot.renter = caller
            lot.status = ListingStatus.UNAVAILABLE
            self.store.sale_prices[lot_id] = 0
            self.custody.move(tx, self.custody.custodian, caller)
            self._pay(seller, payment)
            result = replace(lot)

        logger.info(
            "Lot %d sold by %s to %s for %d",
            lot_id,
            seller,
            caller,
            payment,
            extra=lot_extra(lot_id, caller, result.status),
        )
        return result

    # Rentals
    def set_rent_terms(
        self, lot_id: int, price_per_day: int, deposit_pct: int, caller: str
    ) -> Lot:
        pricing.validate_rent_terms(price_per_day, deposit_pct)
        with self.store.transaction(lot_id) as tx:
            lot = tx.lot
            if caller != lot.lender:
                raise UnauthorizedError(f"{caller} is not the lender of lot {lot_id}")
            if lot.is_rented:
                raise InvalidStateError(f"Lot {lot_id} is rented; terms are locked")
            lot.price = price_per_day
            lot.deposit = deposit_pct
            result = replace(lot)
        logger.info(
            "Lot %d rent terms: %d/day, %d%% deposit",
            lot_id,
            price_per_day,
            deposit_pct,
            extra=lot_extra(lot_id, caller, result.status),
        )
        return result

    def quote_rent(self, lot_id: int, duration_seconds: int) -> int:
        """Up-front deposit required to rent ``lot_id`` for ``duration_seconds``."""
        lot = self.store.get(lot_id)
        return pricing.rent_quote(lot.price, lot.deposit, duration_seconds)

    def rent(self, lot_id: int, caller: str, duration_seconds: int, payment: int) -> Lot:
        if duration_seconds <= 0:
            raise InvalidAmountError(f"Rental duration must be positive, got {duration_seconds}")
        with self.store.transaction(lot_id) as tx:
            lot = tx.lot
            if lot.status != ListingStatus.RENT:
                raise InvalidStateError(
                    f"Lot {lot_id} is not available for rent ({lot.status.value})"
                )
            self.penalty.check_not_blacklisted(caller)
            if caller == lot.renter:
                raise UnauthorizedError(f"{caller} already occupies lot {lot_id}")
            quote = pricing.rent_quote(lot.price, lot.deposit, duration_seconds)
            if payment != quote:
                raise InvalidAmountError(
                    f"Renting lot {lot_id} requires {quote}, payment was {payment}"
                )

            lot.renter = caller
            lot.rent_time = duration_seconds
            lot.return_day = self.clock.now() + duration_seconds
            lot.status = ListingStatus.RENTED
            self.custody.move(tx, self.custody.holder(lot_id), caller)
            self.custody.grant(tx)
            self._pay(lot.lender, payment)
            result = replace(lot)

        logger.info(
            "Lot %d rented to %s until %d (deposit paid %d)",
            lot_id,
            caller,
            result.return_day,
            payment,
            extra=lot_extra(lot_id, caller, result.status),
        )
        return result

    def settle_amount(self, lot_id: int) -> int:
        """What the renter would owe if settling right now."""
        lot = self.store.get(lot_id)
        if not lot.is_rented or lot.deposit == 100:
            return 0
        days = pricing.settlement_days(lot, self.clock.now(), self.config.settlement_basis)
        return pricing.settlement_due(lot.price, lot.deposit, days)

    def settle_by_renter(self, lot_id: int, caller: str, payment: int) -> Lot:
        """End a rental from the renter's side within the grace window.

        With a full deposit any payment is accepted; otherwise ``payment``
        must equal the outstanding non-deposit share.
        """
        with self.store.transaction(lot_id) as tx:
            lot = tx.lot
            if lot.status != ListingStatus.RENTED:
                raise InvalidStateError(f"Lot {lot_id} is not rented")
            if caller != lot.renter:
                raise UnauthorizedError(f"{caller} is not the renter of lot {lot_id}")
            now = self.clock.now()
            self.penalty.check_settlement_window(lot, now)

            if lot.deposit < 100:
                days = pricing.settlement_days(lot, now, self.config.settlement_basis)
                due = pricing.settlement_due(lot.price, lot.deposit, days)
                if payment != due:
                    raise InvalidAmountError(
                        f"Settling lot {lot_id} requires {due}, payment was {payment}"
                    )

            lot.end_rental()
            self.custody.recall(tx)
            self._pay(lot.lender, payment)
            result = replace(lot)

        logger.info(
            "Lot %d returned by %s (paid %d)",
            lot_id,
            caller,
            payment,
            extra=lot_extra(lot_id, caller, result.status),
        )
        return result

    def reclaim_by_lender(self, lot_id: int, caller: str) -> Lot:
        """Take back an overdue lot and blacklist its renter."""
        with self.store.transaction(lot_id) as tx:
            lot = tx.lot
            if lot.status != ListingStatus.RENTED:
                raise InvalidStateError(f"Lot {lot_id} is not rented")
            if caller != lot.lender:
                raise UnauthorizedError(f"{caller} is not the lender of lot {lot_id}")
            self.penalty.check_reclaim_window(lot, self.clock.now())

            renter = lot.renter
            self.custody.recall(tx)
            lot.end_rental()
            self.penalty.blacklist(renter)
            result = replace(lot)

        logger.info(
            "Lot %d reclaimed by %s from %s",
            lot_id,
            caller,
            renter,
            extra=lot_extra(lot_id, caller, result.status),
        )
        return result

    def _pay(self, to_addr: str, amount: int) -> None:
        if amount:
            self.payments.transfer(to_addr, amount)
