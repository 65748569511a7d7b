"""Lot record."""

from dataclasses import dataclass

from lot_market.models.enums import ListingStatus


@dataclass
class Lot:
    """A tokenised physical lot and its current listing terms."""

    lot_id: int
    lender: str  # Receives sale and rent proceeds
    renter: str  # Current occupant; equals lender when not rented
    price: int = 0  # Rental price per day
    deposit: int = 0  # Percentage of total rent paid up front (0-100)
    return_day: int = 0  # Epoch seconds; 0 when not rented
    rent_time: int = 0  # Rental duration in seconds; 0 when not rented
    status: ListingStatus = ListingStatus.UNAVAILABLE

    @property
    def is_rented(self) -> bool:
        return self.status == ListingStatus.RENTED

    def end_rental(self) -> None:
        """Return occupancy to the lender and relist for rent."""
        self.return_day = 0
        self.rent_time = 0
        self.renter = self.lender
        self.status = ListingStatus.RENT
