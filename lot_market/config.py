"""Configuration for lot-market.

``LotMarketConfig.from_env`` reads ``LOT_MARKET_*`` variables for the market
rules and the usual ``KAFKA_*``, ``POSTGRES_*`` and ``DATABASE_URL`` variables
for the sinks.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from psycopg.conninfo import make_conninfo

from lot_market.exceptions import ConfigurationError
from lot_market.models.enums import SettlementBasis

SECONDS_PER_HOUR = 3600


@dataclass
class MarketConfig:
    """Rules of the lot market itself."""

    custodian: str = "escrow"  # address that holds listed lots
    fee_recipient: str = "treasury"  # receives mint fees
    mint_fee: int = 0
    max_lots_per_wallet: int = 10
    grace_period_seconds: int = 5 * SECONDS_PER_HOUR
    settlement_basis: SettlementBasis = SettlementBasis.OVERRUN
    listing_requires_lender: bool = False
    event_topic: str = "lots.events"

    def validate(self) -> None:
        """Check value ranges.

        Raises
        ------
        ConfigurationError
            If any value is out of range.
        """
        if not self.custodian:
            raise ConfigurationError("custodian address must not be empty")
        if not self.fee_recipient:
            raise ConfigurationError("fee_recipient address must not be empty")
        if self.mint_fee < 0:
            raise ConfigurationError(f"mint_fee must be >= 0, got {self.mint_fee}")
        if self.max_lots_per_wallet < 1:
            raise ConfigurationError(
                f"max_lots_per_wallet must be >= 1, got {self.max_lots_per_wallet}"
            )
        if self.grace_period_seconds < 0:
            raise ConfigurationError(
                f"grace_period_seconds must be >= 0, got {self.grace_period_seconds}"
            )


@dataclass
class KafkaConfig:
    """Producer settings for the event topic.

    ``linger_ms`` is 0 so every committed operation is sent without waiting
    for a batch to fill. ``overrides`` are passed to the producer verbatim.
    """

    bootstrap_servers: str = "localhost:9092"
    client_id: str = "lot-market"
    acks: str = "all"
    linger_ms: int = 0
    compression: str = "lz4"
    delivery_timeout_ms: int = 30_000
    overrides: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Build the confluent-kafka ``Producer`` config.

        With ``acks=all`` the producer is idempotent, so retries cannot
        duplicate or reorder one lot's events.
        """
        conf: dict[str, Any] = {
            "bootstrap.servers": self.bootstrap_servers,
            "client.id": self.client_id,
            "acks": self.acks,
            "linger.ms": self.linger_ms,
            "compression.type": self.compression,
            "delivery.timeout.ms": self.delivery_timeout_ms,
        }
        if self.acks == "all":
            conf["enable.idempotence"] = True
        conf.update(self.overrides)
        return conf


@dataclass
class PostgresConfig:
    """Database for the ``lot_events`` and ``lots`` tables.

    ``url`` wins over the individual fields when set.
    """

    url: str | None = None
    host: str = "localhost"
    port: int = 5432
    dbname: str = "lotmarket"
    user: str = "postgres"
    password: str = "postgres"
    application_name: str = "lot-market"

    @property
    def connection_string(self) -> str:
        if self.url:
            return self.url
        return make_conninfo(
            host=self.host,
            port=self.port,
            dbname=self.dbname,
            user=self.user,
            password=self.password,
            application_name=self.application_name,
        )


@dataclass
class ScenarioConfig:
    """Shape of a marketplace simulation run."""

    name: str
    num_owners: int = 10
    lots_per_owner: int = 2
    num_renters: int = 20
    rental_days: int = 2
    late_rate: float = 0.1
    sale_rate: float = 0.2

    def validate(self) -> None:
        for attr in ("num_owners", "lots_per_owner", "num_renters", "rental_days"):
            if getattr(self, attr) < 1:
                raise ConfigurationError(f"{attr} must be >= 1, got {getattr(self, attr)}")
        for attr in ("late_rate", "sale_rate"):
            if not 0.0 <= getattr(self, attr) <= 1.0:
                raise ConfigurationError(f"{attr} must be in [0, 1], got {getattr(self, attr)}")


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def _env_flag(env: Mapping[str, str], name: str) -> bool:
    return env.get(name, "false").lower() in ("1", "true", "yes")


@dataclass
class LotMarketConfig:
    """Main configuration for lot-market."""

    market: MarketConfig = field(default_factory=MarketConfig)
    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False
    seed: int | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "LotMarketConfig":
        """Create config from environment variables (``os.environ`` by default).

        Raises
        ------
        ConfigurationError
            On an unknown settlement basis, a non-integer number or market
            rules that fail ``MarketConfig.validate``.
        """
        env = os.environ if environ is None else environ

        basis = env.get("LOT_MARKET_SETTLEMENT_BASIS", SettlementBasis.OVERRUN.value)
        try:
            settlement_basis = SettlementBasis(basis.upper())
        except ValueError as e:
            raise ConfigurationError(f"Unknown settlement basis: {basis}") from e

        market = MarketConfig(
            custodian=env.get("LOT_MARKET_CUSTODIAN", "escrow"),
            fee_recipient=env.get("LOT_MARKET_FEE_RECIPIENT", "treasury"),
            mint_fee=_env_int(env, "LOT_MARKET_MINT_FEE", 0),
            max_lots_per_wallet=_env_int(env, "LOT_MARKET_MAX_LOTS_PER_WALLET", 10),
            grace_period_seconds=_env_int(
                env, "LOT_MARKET_GRACE_SECONDS", 5 * SECONDS_PER_HOUR
            ),
            settlement_basis=settlement_basis,
            listing_requires_lender=_env_flag(env, "LOT_MARKET_LISTING_REQUIRES_LENDER"),
            event_topic=env.get("LOT_MARKET_EVENT_TOPIC", "lots.events"),
        )
        market.validate()

        kafka = KafkaConfig(
            bootstrap_servers=env.get("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
            client_id=env.get("KAFKA_CLIENT_ID", "lot-market"),
            acks=env.get("KAFKA_ACKS", "all"),
        )

        postgres = PostgresConfig(
            url=env.get("DATABASE_URL") or None,
            host=env.get("POSTGRES_HOST", "localhost"),
            port=_env_int(env, "POSTGRES_PORT", 5432),
            dbname=env.get("POSTGRES_DB", "lotmarket"),
            user=env.get("POSTGRES_USER", "postgres"),
            password=env.get("POSTGRES_PASSWORD", "postgres"),
        )

        seed = env.get("SEED")
        return cls(
            market=market,
            kafka=kafka,
            postgres=postgres,
            output_dir=Path(env.get("OUTPUT_DIR", "output")),
            pretty_json=_env_flag(env, "PRETTY_JSON"),
            seed=_env_int(env, "SEED", 0) if seed else None,
            log_level=env.get("LOG_LEVEL", "INFO"),
        )
