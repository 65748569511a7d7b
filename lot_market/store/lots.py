"""Lot store with per-lot transactions and wallet bookkeeping."""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Callable, Hashable, Iterator

from lot_market.exceptions import LotNotFoundError, WalletLimitExceededError
from lot_market.models import Lot

logger = logging.getLogger(__name__)


class KeyedLocks:
    """Lazily created lock per key, so unrelated keys never contend."""

    def __init__(self) -> None:
        self._locks: dict[Hashable, threading.Lock] = {}
        self._guard = threading.Lock()

    def get(self, key: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock


@dataclass
class LotTransaction:
    """Handle for one in-flight operation on a lot.

    ``lot`` is the live record; mutate it freely. Effects outside the store
    (custody moves, counter changes) register an undo with ``on_rollback``.
    """

    lot: Lot
    _undo: list[Callable[[], None]] = field(default_factory=list)

    def on_rollback(self, undo: Callable[[], None]) -> None:
        self._undo.append(undo)


@dataclass
class LotStore:
    """In-memory store for lots, wallet counters, blacklist and sale prices."""

    max_lots_per_wallet: int = 10

    lots: dict[int, Lot] = field(default_factory=dict)
    sale_prices: dict[int, int] = field(default_factory=dict)
    _lots_held: dict[str, int] = field(default_factory=dict)
    _blacklist: set[str] = field(default_factory=set)

    _lot_locks: KeyedLocks = field(default_factory=KeyedLocks)
    _wallet_locks: KeyedLocks = field(default_factory=KeyedLocks)
    _sequence_lock: threading.Lock = field(default_factory=threading.Lock)
    _blacklist_lock: threading.Lock = field(default_factory=threading.Lock)

    def get(self, lot_id: int) -> Lot:
        """Return the live lot record."""
        lot = self.lots.get(lot_id)
        if lot is None:
            raise LotNotFoundError(f"Lot {lot_id} not found")
        return lot

    def create(self, owner: str) -> Lot:
        """Allocate the next lot id for ``owner``.

        Raises
        ------
        WalletLimitExceededError
            If ``owner`` already holds ``max_lots_per_wallet`` lots.
        """
        with self.creating(owner) as lot:
            return lot

    @contextmanager
    def creating(self, owner: str) -> Iterator[Lot]:
        """Reserve the next lot id while the caller finishes creation.

        The lot is only stored when the body completes; if it raises, the
        wallet counter is released and the id stays free, so identifiers
        remain sequential.
        """
        with self._sequence_lock:
            self.increment_held(owner)
            lot = Lot(lot_id=len(self.lots), lender=owner, renter=owner)
            try:
                yield lot
            except Exception:
                self.decrement_held(owner)
                raise
            self.lots[lot.lot_id] = lot
            self.sale_prices[lot.lot_id] = 0

    @contextmanager
    def transaction(self, lot_id: int) -> Iterator[LotTransaction]:
        """Serialise one operation on a lot and make it all-or-nothing.

        On any exception the registered undo callbacks run in reverse order,
        the lot and its sale price are restored, and the exception propagates.
        """
        with self._lot_locks.get(lot_id):
            lot = self.get(lot_id)
            snapshot = replace(lot)
            sale_price = self.sale_prices.get(lot_id, 0)
            tx = LotTransaction(lot=lot)
            try:
                yield tx
            except Exception:
                for undo in reversed(tx._undo):
                    try:
                        undo()
                    except Exception:
                        logger.exception("Rollback step failed for lot %d", lot_id)
                self.lots[lot_id] = snapshot
                self.sale_prices[lot_id] = sale_price
                logger.warning("Rolled back operation on lot %d", lot_id)
                raise

    # Wallet counters
    def lots_held(self, wallet: str) -> int:
        return self._lots_held.get(wallet, 0)

    def increment_held(self, wallet: str) -> None:
        with self._wallet_locks.get(wallet):
            held = self._lots_held.get(wallet, 0)
            if held >= self.max_lots_per_wallet:
                raise WalletLimitExceededError(
                    f"Wallet {wallet} already holds {held} lots (max {self.max_lots_per_wallet})"
                )
            self._lots_held[wallet] = held + 1

    def decrement_held(self, wallet: str) -> None:
        with self._wallet_locks.get(wallet):
            self._lots_held[wallet] = max(0, self._lots_held.get(wallet, 0) - 1)

    # Blacklist
    def add_to_blacklist(self, address: str) -> bool:
        """Blacklist ``address``. Returns False if it already was."""
        with self._blacklist_lock:
            if address in self._blacklist:
                return False
            self._blacklist.add(address)
            return True

    def is_blacklisted(self, address: str) -> bool:
        return address in self._blacklist

    def blacklist_count(self) -> int:
        return len(self._blacklist)

    def summary(self) -> dict[str, int]:
        """Return summary counts."""
        by_status: dict[str, int] = {}
        for lot in self.lots.values():
            by_status[lot.status.value] = by_status.get(lot.status.value, 0) + 1
        return {
            "lots": len(self.lots),
            "wallets": sum(1 for n in self._lots_held.values() if n > 0),
            "blacklisted": len(self._blacklist),
            **{f"status_{k.lower()}": v for k, v in sorted(by_status.items())},
        }
