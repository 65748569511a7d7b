"""Lot events published after every committed operation."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

from lot_market.models.enums import LotEventType
from lot_market.models.lot import Lot


@dataclass
class LotEvent:
    """A committed change to one lot."""

    event_id: str
    event_type: LotEventType
    event_time: datetime  # Wall-clock publication time (UTC)
    lot_id: int
    lot: Lot  # Snapshot after the change
    clock: int  # Market clock at commit, epoch seconds
    details: dict[str, Any] = field(default_factory=dict)  # Operation-specific fields
    source: str = "lot-market"

    @classmethod
    def record(cls, event_type: LotEventType, lot: Lot, clock: int, **details: Any) -> LotEvent:
        """Build an event for ``lot`` with a fresh id and a copy of the lot."""
        return cls(
            event_id=uuid.uuid4().hex,
            event_type=event_type,
            event_time=datetime.now(timezone.utc),
            lot_id=lot.lot_id,
            lot=replace(lot),
            clock=clock,
            details=details,
        )

    @property
    def subject(self) -> str:
        return f"lot-{self.lot_id}"
