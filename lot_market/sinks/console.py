"""Console sink for watching a market run."""

import json
from typing import Any

from lot_market.models import LotEvent
from lot_market.sinks.serialization import to_dict


class ConsoleSink:
    """Print lot events and snapshots to stdout.

    In ``verbose`` mode every record is dumped as indented JSON. Otherwise
    events are printed as one line each::

        lot.rented     lot-3    RENTED       0xb (clock 1700000000)

    and any other record as compact JSON.
    """

    def __init__(self, verbose: bool = False, max_records: int | None = None) -> None:
        """Initialize console sink.

        Parameters
        ----------
        verbose : bool
            Dump full JSON instead of one-line event summaries.
        max_records : int | None
            Maximum records to print per batch (None for all).
        """
        self.verbose = verbose
        self.max_records = max_records
        self._counts: dict[str, int] = {}

    def write_batch(self, entity_type: str, records: list[Any]) -> None:
        shown = records[: self.max_records] if self.max_records else records
        if self.verbose or not all(isinstance(r, LotEvent) for r in shown):
            print(f"-- {entity_type} ({len(records)} records)")

        for record in shown:
            print(self.render(record))

        hidden = len(records) - len(shown)
        if hidden:
            print(f"... and {hidden} more records")

        self._counts[entity_type] = self._counts.get(entity_type, 0) + len(records)

    def render(self, record: Any) -> str:
        if self.verbose:
            return json.dumps(to_dict(record), indent=2, ensure_ascii=False)
        if isinstance(record, LotEvent):
            return (
                f"{record.event_type.value:<18} {record.subject:<8} "
                f"{record.lot.status.value:<12} {record.lot.renter} (clock {record.clock})"
            )
        return json.dumps(to_dict(record), ensure_ascii=False)

    def close(self) -> None:
        """Print per-entity totals."""
        for entity_type, count in self._counts.items():
            print(f"{entity_type}: {count} records")
