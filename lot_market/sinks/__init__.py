"""Output sinks for lot events and snapshots."""

from lot_market.sinks.console import ConsoleSink
from lot_market.sinks.json_file import JsonFileSink
from lot_market.sinks.kafka import KafkaSink
from lot_market.sinks.postgres import PostgresSink

__all__ = ["ConsoleSink", "JsonFileSink", "KafkaSink", "PostgresSink"]
