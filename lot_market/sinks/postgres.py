"""PostgreSQL sink for lot events and lot snapshots."""

import logging
from typing import Any

import psycopg
from psycopg.types.json import Jsonb

from lot_market.exceptions import SinkError
from lot_market.models import Lot, LotEvent
from lot_market.sinks.serialization import to_dict

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS lot_events (
    event_id TEXT PRIMARY KEY,
    event_type TEXT NOT NULL,
    event_time TIMESTAMPTZ NOT NULL,
    source TEXT NOT NULL,
    lot_id BIGINT NOT NULL,
    clock BIGINT NOT NULL,
    lot JSONB NOT NULL,
    details JSONB NOT NULL DEFAULT '{}'::jsonb
);
CREATE INDEX IF NOT EXISTS lot_events_lot_id_idx ON lot_events (lot_id, clock);
CREATE TABLE IF NOT EXISTS lots (
    lot_id BIGINT PRIMARY KEY,
    lender TEXT NOT NULL,
    renter TEXT NOT NULL,
    price BIGINT NOT NULL,
    deposit SMALLINT NOT NULL CHECK (deposit BETWEEN 0 AND 100),
    return_day BIGINT NOT NULL,
    rent_time BIGINT NOT NULL,
    status TEXT NOT NULL
);
"""

INSERT_EVENT = """
INSERT INTO lot_events (event_id, event_type, event_time, source, lot_id, clock, lot, details)
VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
ON CONFLICT (event_id) DO NOTHING
"""

UPSERT_LOT = """
INSERT INTO lots (lot_id, lender, renter, price, deposit, return_day, rent_time, status)
VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
ON CONFLICT (lot_id) DO UPDATE SET
    lender = EXCLUDED.lender,
    renter = EXCLUDED.renter,
    price = EXCLUDED.price,
    deposit = EXCLUDED.deposit,
    return_day = EXCLUDED.return_day,
    rent_time = EXCLUDED.rent_time,
    status = EXCLUDED.status
"""


class PostgresSink:
    """Persist events to ``lot_events`` and lot snapshots to ``lots``.

    Batches named ``"lots"`` are upserted as snapshots; every other batch
    is treated as a stream of ``LotEvent`` records.
    """

    def __init__(self, conninfo: str, create_tables: bool = True) -> None:
        try:
            self.conn = psycopg.connect(conninfo)
            if create_tables:
                with self.conn.cursor() as cur:
                    cur.execute(SCHEMA)
                self.conn.commit()
        except psycopg.Error as e:
            raise SinkError(f"PostgreSQL connection failed: {e}") from e
        self._counts: dict[str, int] = {}

    def write_batch(self, entity_type: str, records: list[Any]) -> None:
        if entity_type == "lots":
            sql, rows = UPSERT_LOT, [self._lot_row(r) for r in records]
        else:
            sql, rows = INSERT_EVENT, [self._event_row(r) for r in records]
        try:
            with self.conn.cursor() as cur:
                cur.executemany(sql, rows)
            self.conn.commit()
        except psycopg.Error as e:
            self.conn.rollback()
            raise SinkError(f"Failed to write {entity_type}: {e}") from e
        self._counts[entity_type] = self._counts.get(entity_type, 0) + len(rows)

    @staticmethod
    def _event_row(event: LotEvent) -> tuple:
        return (
            event.event_id,
            event.event_type.value,
            event.event_time,
            event.source,
            event.lot_id,
            event.clock,
            Jsonb(to_dict(event.lot)),
            Jsonb(to_dict(event.details)),
        )

    @staticmethod
    def _lot_row(lot: Lot) -> tuple:
        return (
            lot.lot_id,
            lot.lender,
            lot.renter,
            lot.price,
            lot.deposit,
            lot.return_day,
            lot.rent_time,
            lot.status.value,
        )

    def close(self) -> None:
        self.conn.close()
        logger.info("PostgreSQL sink closed: %s", self._counts)
