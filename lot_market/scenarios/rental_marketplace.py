"""Rental marketplace scenario: mint, list, sell, rent, settle and reclaim."""

from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Any

from lot_market.clock import ManualClock
from lot_market.config import MarketConfig, ScenarioConfig
from lot_market.engine.pricing import SECONDS_PER_DAY
from lot_market.exceptions import WalletLimitExceededError
from lot_market.generators import WalletGenerator
from lot_market.market import LotMarket, Sink
from lot_market.models import ListingStatus

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600


class RentalMarketplaceScenario:
    """Drive a market through a full rental cycle on a manual clock.

    This scenario:
    - Mints lots for a set of owners (paying the mint fee)
    - Sells a share of them to other wallets
    - Lists the rest for rent and rents each one out
    - Lets most renters settle inside the grace window
    - Has lenders reclaim the late ones, blacklisting those renters
    """

    def __init__(
        self,
        num_owners: int = 10,
        lots_per_owner: int = 2,
        num_renters: int = 20,
        rental_days: int = 2,
        late_rate: float = 0.1,
        sale_rate: float = 0.2,
        seed: int | None = None,
        *,
        config: ScenarioConfig | None = None,
        market_config: MarketConfig | None = None,
        sinks: list[Sink] | None = None,
    ) -> None:
        """Initialize the scenario.

        Parameters
        ----------
        num_owners : int
            Number of wallets that mint lots.
        lots_per_owner : int
            Lots minted per owner.
        num_renters : int
            Number of wallets that rent or buy.
        rental_days : int
            Length of every rental in days.
        late_rate : float
            Share of renters that miss the grace window (0.0 to 1.0).
        sale_rate : float
            Share of lots sold instead of rented (0.0 to 1.0).
        seed : int | None
            Random seed for reproducibility.
        config : ScenarioConfig | None
            Optional scenario configuration. If provided, overrides the
            individual arguments above.
        market_config : MarketConfig | None
            Market rules for the simulated market.
        sinks : list[Sink] | None
            Destinations for the market's events.
        """
        if config is not None:
            config.validate()
            num_owners = config.num_owners
            lots_per_owner = config.lots_per_owner
            num_renters = config.num_renters
            rental_days = config.rental_days
            late_rate = config.late_rate
            sale_rate = config.sale_rate
        self.config = config

        self.num_owners = num_owners
        self.lots_per_owner = lots_per_owner
        self.num_renters = num_renters
        self.rental_days = rental_days
        self.late_rate = late_rate
        self.sale_rate = sale_rate
        self.seed = seed

        self.rng = random.Random(seed)
        self.clock = ManualClock()
        market_config = market_config or MarketConfig()
        if market_config.max_lots_per_wallet < lots_per_owner:
            market_config = replace(market_config, max_lots_per_wallet=lots_per_owner)
        self.market = LotMarket(config=market_config, clock=self.clock, sinks=sinks)
        self._wallets = WalletGenerator(seed=seed)

        self.counts: dict[str, int] = {
            "minted": 0,
            "sold": 0,
            "rented": 0,
            "settled": 0,
            "reclaimed": 0,
        }

    def generate(self) -> LotMarket:
        """Run the whole scenario.

        Returns
        -------
        LotMarket
            The market in its final state.
        """
        logger.info(
            "Starting rental marketplace scenario: %d owners x %d lots, %d renters",
            self.num_owners,
            self.lots_per_owner,
            self.num_renters,
        )
        addresses = list(self._wallets.addresses(self.num_owners + self.num_renters))
        owners, renters = addresses[: self.num_owners], addresses[self.num_owners :]

        lot_ids = self._mint(owners)
        for_sale = set(self.rng.sample(lot_ids, int(len(lot_ids) * self.sale_rate)))

        rented: list[int] = []
        for lot_id in lot_ids:
            if lot_id in for_sale:
                self._sell(lot_id, renters)
            elif self._rent(lot_id, renters):
                rented.append(lot_id)

        late = set(self.rng.sample(rented, int(len(rented) * self.late_rate)))

        # On-time renters return an hour late, or at the deadline if grace is shorter
        grace = self.market.config.grace_period_seconds
        self.clock.advance(self.rental_days * SECONDS_PER_DAY + min(SECONDS_PER_HOUR, grace))
        for lot_id in rented:
            if lot_id not in late:
                self._settle(lot_id)

        self.clock.advance(grace + 1)
        for lot_id in sorted(late):
            lot = self.market.get_lot(lot_id)
            self.market.reclaim_by_lender(lot_id, lot.lender)
            self.counts["reclaimed"] += 1

        logger.info("Scenario complete: %s", self.summary())
        return self.market

    def _mint(self, owners: list[str]) -> list[int]:
        fee = self.market.get_mint_fee()
        lot_ids = []
        for owner in owners:
            for _ in range(self.lots_per_owner):
                lot_ids.append(
                    self.market.create_lot(owner, self._wallets.metadata_uri(), payment=fee)
                )
        self.counts["minted"] = len(lot_ids)
        return lot_ids

    def _sell(self, lot_id: int, buyers: list[str]) -> None:
        owner = self.market.get_lot(lot_id).lender
        self.market.set_listing(lot_id, ListingStatus.SALE, owner)
        price = self.rng.randint(100, 1000)
        self.market.set_sale_price(lot_id, price, owner)
        buyer = self.rng.choice(buyers)
        try:
            self.market.buy(lot_id, buyer, price)
        except WalletLimitExceededError:
            logger.info("Buyer %s is at the wallet limit; lot %d stays listed", buyer, lot_id)
            return
        self.counts["sold"] += 1

    def _rent(self, lot_id: int, renters: list[str]) -> bool:
        owner = self.market.get_lot(lot_id).lender
        price, deposit = self._wallets.rent_terms()
        self.market.set_rent_terms(lot_id, price, deposit, owner)
        self.market.set_listing(lot_id, ListingStatus.SALE, owner)
        self.market.set_listing(lot_id, ListingStatus.RENT, owner)

        candidates = [r for r in renters if not self.market.is_blacklisted(r)]
        if not candidates:
            return False
        renter = self.rng.choice(candidates)
        duration = self.rental_days * SECONDS_PER_DAY
        self.market.rent(lot_id, renter, duration, self.market.quote_rent(lot_id, duration))
        self.counts["rented"] += 1
        return True

    def _settle(self, lot_id: int) -> None:
        lot = self.market.get_lot(lot_id)
        self.market.settle_by_renter(lot_id, lot.renter, self.market.settle_amount(lot_id))
        self.counts["settled"] += 1

    def summary(self) -> dict[str, Any]:
        """Return summary counts of the run."""
        return {
            **self.counts,
            **self.market.store.summary(),
        }
