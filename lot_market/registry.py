"""Ownership registry collaborator.

The market never owns asset identities itself; it asks a registry to mint
them, to report who holds them and to move them. ``OwnershipRegistry`` is
the contract the market relies on and ``InMemoryRegistry`` is the
process-local implementation used by tests and simulations.
"""

import logging
import threading
from abc import ABC, abstractmethod

from lot_market.exceptions import LotNotFoundError, TransferFailedError

logger = logging.getLogger(__name__)


class OwnershipRegistry(ABC):
    """Asset identity → holder registry (non-fungible token semantics).

    ``transfer`` is called by the market as the privileged operator: it
    checks only that ``from_addr`` currently holds the asset. Every
    implementation must raise ``TransferFailedError`` when a transfer
    cannot be completed and must leave no partial effect behind.
    """

    @abstractmethod
    def mint(self, owner: str, asset_id: int, metadata_uri: str) -> None:
        """Create a new asset held by ``owner``."""

    @abstractmethod
    def burn(self, asset_id: int) -> None:
        """Destroy an asset. Only used to undo a mint."""

    @abstractmethod
    def transfer(self, asset_id: int, from_addr: str, to_addr: str) -> None:
        """Move holding of ``asset_id`` from ``from_addr`` to ``to_addr``."""

    @abstractmethod
    def holder_of(self, asset_id: int) -> str:
        """Return the current holder of ``asset_id``."""

    @abstractmethod
    def grant_transfer_authority(self, asset_id: int, delegate: str | None) -> None:
        """Let ``delegate`` move the asset; ``None`` revokes."""

    @abstractmethod
    def authority_of(self, asset_id: int) -> str | None:
        """Return the current delegate for ``asset_id``, if any."""

    @abstractmethod
    def token_uri(self, asset_id: int) -> str:
        """Return the metadata URI recorded at mint time."""

    @abstractmethod
    def balance_of(self, holder: str) -> int:
        """Return how many assets ``holder`` currently holds."""


class InMemoryRegistry(OwnershipRegistry):
    """Thread-safe dict-backed registry."""

    def __init__(self) -> None:
        self._holders: dict[int, str] = {}
        self._uris: dict[int, str] = {}
        self._delegates: dict[int, str] = {}
        self._balances: dict[str, int] = {}
        self._lock = threading.Lock()

    def mint(self, owner: str, asset_id: int, metadata_uri: str) -> None:
        with self._lock:
            if asset_id in self._holders:
                raise TransferFailedError(f"Asset {asset_id} already minted")
            self._holders[asset_id] = owner
            self._uris[asset_id] = metadata_uri
            self._balances[owner] = self._balances.get(owner, 0) + 1
        logger.debug("Minted asset %d to %s", asset_id, owner)

    def burn(self, asset_id: int) -> None:
        with self._lock:
            holder = self._require(asset_id)
            del self._holders[asset_id]
            self._uris.pop(asset_id, None)
            self._delegates.pop(asset_id, None)
            self._balances[holder] -= 1

    def transfer(self, asset_id: int, from_addr: str, to_addr: str) -> None:
        with self._lock:
            holder = self._holders.get(asset_id)
            if holder is None:
                raise TransferFailedError(f"Asset {asset_id} does not exist")
            if holder != from_addr:
                raise TransferFailedError(
                    f"Asset {asset_id} is held by {holder}, not {from_addr}"
                )
            self._holders[asset_id] = to_addr
            # Approvals do not survive a change of holder
            self._delegates.pop(asset_id, None)
            self._balances[from_addr] -= 1
            self._balances[to_addr] = self._balances.get(to_addr, 0) + 1
        logger.debug("Asset %d: %s -> %s", asset_id, from_addr, to_addr)

    def holder_of(self, asset_id: int) -> str:
        with self._lock:
            return self._require(asset_id)

    def grant_transfer_authority(self, asset_id: int, delegate: str | None) -> None:
        with self._lock:
            self._require(asset_id)
            if delegate is None:
                self._delegates.pop(asset_id, None)
            else:
                self._delegates[asset_id] = delegate

    def authority_of(self, asset_id: int) -> str | None:
        with self._lock:
            self._require(asset_id)
            return self._delegates.get(asset_id)

    def token_uri(self, asset_id: int) -> str:
        with self._lock:
            self._require(asset_id)
            return self._uris[asset_id]

    def balance_of(self, holder: str) -> int:
        with self._lock:
            return self._balances.get(holder, 0)

    def _require(self, asset_id: int) -> str:
        holder = self._holders.get(asset_id)
        if holder is None:
            raise LotNotFoundError(f"Asset {asset_id} not found")
        return holder
