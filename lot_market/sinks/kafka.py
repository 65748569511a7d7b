"""Kafka sink for streaming lot events."""

import json
import logging
import time
from dataclasses import dataclass
from typing import Any

from confluent_kafka import KafkaException, Producer

from lot_market.config import KafkaConfig
from lot_market.exceptions import SinkError
from lot_market.models import Lot, LotEvent
from lot_market.sinks.serialization import to_dict

logger = logging.getLogger(__name__)


@dataclass
class ProducerStats:
    """Track producer delivery statistics."""

    sent: int = 0
    delivered: int = 0
    failed: int = 0
    start_time: float | None = None
    end_time: float | None = None

    @property
    def success_rate(self) -> float:
        total = self.delivered + self.failed
        return self.delivered / total if total > 0 else 0.0

    @property
    def throughput(self) -> float:
        """Messages sent per second between start and close."""
        if self.start_time is None or self.end_time is None:
            return 0.0
        duration = self.end_time - self.start_time
        return self.sent / duration if duration > 0 else 0.0


def message_key(record: Any) -> bytes | None:
    """Partition key: the lot id, so one lot's events stay in commit order."""
    if isinstance(record, (LotEvent, Lot)):
        return str(record.lot_id).encode("utf-8")
    if isinstance(record, dict) and record.get("lot_id") is not None:
        return str(record["lot_id"]).encode("utf-8")
    return None


class KafkaSink:
    """Publish lot events (and lot snapshots) to Kafka.

    Keys are lot ids so one lot's events share a partition. Each event also
    carries its type in an ``event_type`` header for consumers that filter
    without decoding.
    """

    def __init__(self, config: KafkaConfig | str) -> None:
        """Initialize Kafka sink.

        Parameters
        ----------
        config : KafkaConfig | str
            Producer configuration or a bootstrap servers string.
        """
        if isinstance(config, str):
            config = KafkaConfig(bootstrap_servers=config)

        self.config = config
        self.producer = Producer(config.to_dict())
        self.stats = ProducerStats(start_time=time.time())

    def _delivery_callback(self, err: Any, msg: Any) -> None:
        if err:
            self.stats.failed += 1
            logger.error("Delivery failed: %s", err)
        else:
            self.stats.delivered += 1
            logger.debug("Delivered to %s[%d]@%d", msg.topic(), msg.partition(), msg.offset())

    def send(self, topic: str, record: Any) -> None:
        """Queue one record.

        Raises
        ------
        SinkError
            If the producer rejects the message (full local queue, unknown
            topic, broker error).
        """
        headers = None
        if isinstance(record, LotEvent):
            headers = [("event_type", record.event_type.value.encode("utf-8"))]

        try:
            self.producer.produce(
                topic=topic,
                key=message_key(record),
                value=json.dumps(to_dict(record), ensure_ascii=False).encode("utf-8"),
                headers=headers,
                callback=self._delivery_callback,
            )
        except (KafkaException, BufferError) as e:
            self.stats.failed += 1
            raise SinkError(f"Failed to produce to {topic}: {e}") from e
        self.stats.sent += 1
        self.producer.poll(0)

    def write_batch(self, topic: str, records: list[Any]) -> None:
        """Send ``records`` and wait until the broker has them."""
        for record in records:
            self.send(topic, record)
        self.flush()

    def flush(self, timeout: float = 30.0) -> None:
        try:
            remaining = self.producer.flush(timeout)
        except KafkaException as e:
            raise SinkError(f"Kafka flush failed: {e}") from e
        if remaining:
            logger.warning("%d messages still queued after %.0fs flush", remaining, timeout)

    def close(self) -> None:
        self.flush()
        self.stats.end_time = time.time()
        logger.info(
            "Kafka sink closed: sent=%d, delivered=%d, failed=%d (%.1f%% delivered, %.1f msg/s)",
            self.stats.sent,
            self.stats.delivered,
            self.stats.failed,
            self.stats.success_rate * 100,
            self.stats.throughput,
        )
