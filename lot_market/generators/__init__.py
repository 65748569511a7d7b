"""Simulation data generators."""

from lot_market.generators.wallet import WalletGenerator

__all__ = ["WalletGenerator"]
