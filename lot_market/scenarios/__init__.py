"""Scenarios for simulating a lot market."""

from lot_market.scenarios.rental_marketplace import RentalMarketplaceScenario

__all__ = ["RentalMarketplaceScenario"]
