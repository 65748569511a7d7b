"""In-memory lot store."""

from lot_market.store.lots import KeyedLocks, LotStore, LotTransaction

__all__ = ["KeyedLocks", "LotStore", "LotTransaction"]
