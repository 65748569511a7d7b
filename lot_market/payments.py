"""Payment rail collaborator: move N units of value to an address."""

import logging
import threading
from abc import ABC, abstractmethod

from lot_market.exceptions import InvalidAmountError, TransferFailedError

logger = logging.getLogger(__name__)


class PaymentGateway(ABC):
    """Forwards value the market has received to its recipient.

    ``transfer`` either completes in full or raises ``TransferFailedError``.
    """

    @abstractmethod
    def transfer(self, to_addr: str, amount: int) -> None:
        """Send ``amount`` units of value to ``to_addr``."""


class InMemoryLedger(PaymentGateway):
    """Records credited balances per address.

    Parameters
    ----------
    rejecting : set[str] | None
        Addresses that refuse incoming value. Transfers to them fail,
        which is how tests exercise rollback.
    """

    def __init__(self, rejecting: set[str] | None = None) -> None:
        self.rejecting: set[str] = set(rejecting or ())
        self._balances: dict[str, int] = {}
        self._lock = threading.Lock()
        self.transfers: list[tuple[str, int]] = []

    def transfer(self, to_addr: str, amount: int) -> None:
        if amount < 0:
            raise InvalidAmountError(f"Cannot transfer negative amount {amount}")
        if to_addr in self.rejecting:
            raise TransferFailedError(f"Payment of {amount} to {to_addr} rejected")
        with self._lock:
            self._balances[to_addr] = self._balances.get(to_addr, 0) + amount
            self.transfers.append((to_addr, amount))
        logger.debug("Paid %d to %s", amount, to_addr)

    def balance_of(self, address: str) -> int:
        with self._lock:
            return self._balances.get(address, 0)
