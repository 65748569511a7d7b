"""Public API of the lot market."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Protocol

from lot_market.clock import ManualClock, SystemClock
from lot_market.config import MarketConfig
from lot_market.engine import Custody, EscrowEngine, ListingStateMachine, PenaltyEnforcer
from lot_market.engine.pricing import validate_rent_terms
from lot_market.exceptions import InvalidAmountError, SinkError
from lot_market.logging import lot_extra
from lot_market.models import ListingStatus, Lot, LotEvent, LotEventType
from lot_market.payments import InMemoryLedger, PaymentGateway
from lot_market.registry import InMemoryRegistry, OwnershipRegistry
from lot_market.store import LotStore

logger = logging.getLogger(__name__)


class Sink(Protocol):
    def write_batch(self, entity_type: str, records: list[Any]) -> None: ...

    def close(self) -> None: ...


class LotMarket:
    """Create, list, sell and rent lots.

    Every state-changing call is applied atomically to a single lot and,
    once committed, published as a ``LotEvent`` to each configured sink.

    Parameters
    ----------
    config : MarketConfig | None
        Market rules (custodian, fees, wallet cap, grace window).
    registry : OwnershipRegistry | None
        Asset registry. Defaults to an in-memory registry.
    payments : PaymentGateway | None
        Payment rail. Defaults to an in-memory ledger.
    clock : SystemClock | ManualClock | None
        Time source for rental deadlines.
    sinks : list[Sink] | None
        Destinations for lot events.
    """

    def __init__(
        self,
        config: MarketConfig | None = None,
        registry: OwnershipRegistry | None = None,
        payments: PaymentGateway | None = None,
        clock: SystemClock | ManualClock | None = None,
        sinks: list[Sink] | None = None,
    ) -> None:
        self.config = config or MarketConfig()
        self.config.validate()
        self.registry = registry or InMemoryRegistry()
        self.payments = payments or InMemoryLedger()
        self.clock = clock or SystemClock()
        self.sinks: list[Sink] = list(sinks or [])

        self.store = LotStore(max_lots_per_wallet=self.config.max_lots_per_wallet)
        self.custody = Custody(self.registry, self.config.custodian)
        self.penalty = PenaltyEnforcer(self.store, self.config.grace_period_seconds)
        self.listing = ListingStateMachine(self.store, self.custody, self.config)
        self.escrow = EscrowEngine(
            self.store,
            self.custody,
            self.payments,
            self.penalty,
            self.clock,
            self.config,
        )

    # Operations
    def create_lot(
        self,
        owner: str,
        metadata_uri: str,
        payment: int = 0,
        *,
        price: int = 0,
        deposit: int = 0,
    ) -> int:
        """Mint a new lot for ``owner`` against the mint fee.

        ``price`` and ``deposit`` optionally set the rent terms at mint time;
        left at 0 the lot has no terms until ``set_rent_terms``.

        Returns
        -------
        int
            The new lot id.
        """
        fee = self.config.mint_fee
        if price or deposit:
            validate_rent_terms(price, deposit)
        with self.store.creating(owner) as lot:
            if payment != fee:
                raise InvalidAmountError(f"Mint fee is {fee}, payment was {payment}")
            lot.price = price
            lot.deposit = deposit
            self.registry.mint(owner, lot.lot_id, metadata_uri)
            try:
                if payment:
                    self.payments.transfer(self.config.fee_recipient, payment)
            except Exception:
                self.registry.burn(lot.lot_id)
                raise
            created = replace(lot)

        logger.info(
            "Lot %d created for %s",
            created.lot_id,
            owner,
            extra=lot_extra(created.lot_id, owner, created.status),
        )
        self._emit(LotEventType.CREATED, created, metadata_uri=metadata_uri, fee=payment)
        return created.lot_id

    def set_listing(
        self, lot_id: int, target: ListingStatus | str, caller: str
    ) -> ListingStatus:
        lot = self.listing.set_listing(lot_id, target, caller)
        self._emit(LotEventType.LISTED, lot, caller=caller)
        return lot.status

    def set_sale_price(self, lot_id: int, price: int, caller: str) -> Lot:
        lot = self.escrow.set_sale_price(lot_id, price, caller)
        self._emit(LotEventType.SALE_PRICED, lot, sale_price=price)
        return lot

    def buy(self, lot_id: int, caller: str, payment: int) -> Lot:
        seller = self.store.get(lot_id).lender
        lot = self.escrow.buy(lot_id, caller, payment)
        self._emit(LotEventType.SOLD, lot, seller=seller, payment=payment)
        return lot

    def set_rent_terms(
        self, lot_id: int, price_per_day: int, deposit_pct: int, caller: str
    ) -> Lot:
        lot = self.escrow.set_rent_terms(lot_id, price_per_day, deposit_pct, caller)
        self._emit(LotEventType.RENT_TERMS_SET, lot)
        return lot

    def quote_rent(self, lot_id: int, duration_seconds: int) -> int:
        return self.escrow.quote_rent(lot_id, duration_seconds)

    def rent(self, lot_id: int, caller: str, duration_seconds: int, payment: int) -> Lot:
        lot = self.escrow.rent(lot_id, caller, duration_seconds, payment)
        self._emit(LotEventType.RENTED, lot, payment=payment)
        return lot

    def settle_by_renter(self, lot_id: int, caller: str, payment: int = 0) -> Lot:
        lot = self.escrow.settle_by_renter(lot_id, caller, payment)
        self._emit(LotEventType.SETTLED, lot, renter=caller, payment=payment)
        return lot

    def reclaim_by_lender(self, lot_id: int, caller: str) -> Lot:
        renter = self.store.get(lot_id).renter
        lot = self.escrow.reclaim_by_lender(lot_id, caller)
        self._emit(LotEventType.RECLAIMED, lot, blacklisted=renter)
        return lot

    # Read accessors
    def get_lot(self, lot_id: int) -> Lot:
        """Return a copy of the lot record."""
        return replace(self.store.get(lot_id))

    def get_lots(self) -> list[Lot]:
        return [replace(lot) for lot in self.store.lots.values()]

    def get_lot_count(self) -> int:
        return len(self.store.lots)

    def get_blacklist_count(self) -> int:
        return self.store.blacklist_count()

    def is_blacklisted(self, address: str) -> bool:
        return self.store.is_blacklisted(address)

    def get_max_lots_per_wallet(self) -> int:
        return self.config.max_lots_per_wallet

    def get_mint_fee(self) -> int:
        return self.config.mint_fee

    def get_sale_price(self, lot_id: int) -> int:
        self.store.get(lot_id)
        return self.store.sale_prices.get(lot_id, 0)

    def settle_amount(self, lot_id: int) -> int:
        return self.escrow.settle_amount(lot_id)

    def lots_held(self, wallet: str) -> int:
        return self.store.lots_held(wallet)

    def token_uri(self, lot_id: int) -> str:
        return self.registry.token_uri(lot_id)

    def close(self) -> None:
        for sink in self.sinks:
            sink.close()

    def _emit(self, event_type: LotEventType, lot: Lot, **extra: Any) -> None:
        if not self.sinks:
            return
        event = LotEvent.record(event_type, lot, self.clock.now(), **extra)
        for sink in self.sinks:
            # Committed already; sink failures are reported, not rolled back
            try:
                sink.write_batch(self.config.event_topic, [event])
            except SinkError:
                logger.exception(
                    "Failed to publish %s for lot %d", event_type.value, lot.lot_id
                )
