"""Wallet addresses, lot metadata and rent terms for simulations."""

from __future__ import annotations

import random
from typing import Iterator

from faker import Faker


class WalletGenerator:
    """Generate wallet addresses, lot metadata URIs and rent terms.

    Faker and the numeric draws share one seed, so a seeded generator
    replays the same market.

    Parameters
    ----------
    seed : int | None
        Random seed for reproducibility.
    locale : str
        Faker locale for the street names and domains in metadata URIs.
    """

    # Price per day and deposit percentage ranges for generated rent terms
    PRICE_RANGE = (5, 50)
    DEPOSIT_CHOICES = [10, 20, 25, 50, 100]
    DEPOSIT_WEIGHTS = [0.30, 0.25, 0.20, 0.15, 0.10]

    def __init__(self, seed: int | None = None, locale: str = "en_US") -> None:
        self.fake = Faker(locale)
        self.rng = random.Random(seed)
        if seed is not None:
            self.fake.seed_instance(seed)

    def address(self) -> str:
        """Generate a 20-byte hex wallet address."""
        return "0x" + self.fake.hexify(text="^" * 40)

    def addresses(self, count: int) -> Iterator[str]:
        """Generate ``count`` distinct wallet addresses.

        Yields
        ------
        str
            Wallet address.
        """
        seen: set[str] = set()
        while len(seen) < count:
            addr = self.address()
            if addr not in seen:
                seen.add(addr)
                yield addr

    def metadata_uri(self) -> str:
        """Generate a metadata URI describing a lot."""
        slug = self.fake.slug(self.fake.street_name())
        return f"https://{self.fake.domain_name()}/lots/{slug}-{self.fake.uuid4()[:8]}.json"

    def rent_terms(self) -> tuple[int, int]:
        """Generate ``(price_per_day, deposit_pct)``."""
        price = self.rng.randint(*self.PRICE_RANGE)
        deposit = self.rng.choices(self.DEPOSIT_CHOICES, weights=self.DEPOSIT_WEIGHTS, k=1)[0]
        return price, deposit
