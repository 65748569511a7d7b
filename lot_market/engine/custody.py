"""Custody moves through the ownership registry, undone on rollback."""

from lot_market.exceptions import TransferFailedError
from lot_market.registry import OwnershipRegistry
from lot_market.store import LotTransaction


class Custody:
    """Moves lots between holders on behalf of the escrow custodian."""

    def __init__(self, registry: OwnershipRegistry, custodian: str) -> None:
        self.registry = registry
        self.custodian = custodian

    def holder(self, lot_id: int) -> str:
        return self.registry.holder_of(lot_id)

    def move(self, tx: LotTransaction, src: str, dst: str) -> None:
        lot_id = tx.lot.lot_id
        delegate = self.registry.authority_of(lot_id)
        self.registry.transfer(lot_id, src, dst)

        def undo() -> None:
            self.registry.transfer(lot_id, dst, src)
            if delegate is not None:
                self.registry.grant_transfer_authority(lot_id, delegate)

        tx.on_rollback(undo)

    def grant(self, tx: LotTransaction) -> None:
        """Give the custodian standing authority over the lot."""
        lot_id = tx.lot.lot_id
        previous = self.registry.authority_of(lot_id)
        self.registry.grant_transfer_authority(lot_id, self.custodian)
        tx.on_rollback(lambda: self.registry.grant_transfer_authority(lot_id, previous))

    def recall(self, tx: LotTransaction) -> None:
        """Bring the lot back to the custodian from whoever holds it."""
        lot_id = tx.lot.lot_id
        holder = self.holder(lot_id)
        if holder == self.custodian:
            return
        if self.registry.authority_of(lot_id) != self.custodian:
            raise TransferFailedError(
                f"Custodian has no transfer authority over lot {lot_id} held by {holder}"
            )
        self.move(tx, holder, self.custodian)
