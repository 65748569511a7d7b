"""Rent, deposit and settlement arithmetic.

All amounts are integer units of value. Percentages are applied with
truncating integer division, never floats, so quoted and charged amounts
match exactly.
"""

from lot_market.exceptions import InvalidAmountError
from lot_market.models import Lot, SettlementBasis

SECONDS_PER_DAY = 86_400


def whole_days(seconds: int) -> int:
    """Whole days in ``seconds``, truncated."""
    return seconds // SECONDS_PER_DAY


def rent_quote(price_per_day: int, deposit_pct: int, duration_seconds: int) -> int:
    """Up-front payment to start a rental: the deposit share of total rent.

    >>> rent_quote(10, 50, 2 * SECONDS_PER_DAY)
    10
    """
    return deposit_pct * price_per_day * whole_days(duration_seconds) // 100


def settlement_due(price_per_day: int, deposit_pct: int, days: int) -> int:
    """Non-deposit share of rent for ``days`` days."""
    return (100 - deposit_pct) * price_per_day * days // 100


def settlement_days(lot: Lot, now: int, basis: SettlementBasis) -> int:
    """Days a renter owes the non-deposit share for when settling at ``now``.

    ``OVERRUN`` counts time past ``return_day`` only, so an on-time return
    owes nothing. Early returns count as zero days.
    """
    if basis == SettlementBasis.RENTAL_TERM:
        return whole_days(lot.rent_time)
    return whole_days(max(0, now - lot.return_day))


def validate_rent_terms(price_per_day: int, deposit_pct: int) -> None:
    if price_per_day <= 0:
        raise InvalidAmountError(f"Price per day must be positive, got {price_per_day}")
    if not 0 <= deposit_pct <= 100:
        raise InvalidAmountError(f"Deposit must be between 0 and 100, got {deposit_pct}")
