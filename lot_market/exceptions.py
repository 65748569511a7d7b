"""Custom exception hierarchy for lot-market."""


class LotMarketError(Exception):
    """Base exception for all lot-market errors."""


class LotNotFoundError(LotMarketError):
    """Raised when a referenced lot does not exist."""


class UnauthorizedError(LotMarketError):
    """Raised when the caller lacks the custody or ownership an operation needs."""


class BlacklistedError(UnauthorizedError):
    """Raised when a blacklisted address tries to rent."""


class InvalidStateError(LotMarketError):
    """Raised when a lot is in the wrong listing status for the operation."""


class InvalidAmountError(LotMarketError):
    """Raised on a payment mismatch or an out-of-range price or deposit."""


class WalletLimitExceededError(LotMarketError):
    """Raised when a wallet would hold more lots than allowed."""


class TransferFailedError(LotMarketError):
    """Raised when a custody or payment transfer fails."""


class TimeWindowViolationError(LotMarketError):
    """Raised when an operation is attempted outside its allowed time window."""


class ConfigurationError(LotMarketError):
    """Raised when configuration is invalid or missing."""


class SinkError(LotMarketError):
    """Raised when a sink operation fails."""
