"""
Rebalancer exceptions.

Every error raised by the rebalancer derives from RebalancerError so the
HTTP layer can map it to a JSON error body.
"""
from typing import Any, Optional


class RebalancerError(Exception):
    """Base exception for rebalancer errors."""

    def __init__(self, message: str, error_code: Optional[str] = None):
        """
        Args:
            message: Human readable error message
            error_code: Machine readable error code
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code


class InvalidRequestError(RebalancerError):
    """Missing or malformed request fields."""

    def __init__(self, message: str):
        super().__init__(message, error_code="INVALID_REQUEST")


class PriceUnavailableError(RebalancerError):
    """The exchange returned no usable price for a symbol."""

    def __init__(self, symbol: str, reason: Optional[str] = None):
        """
        Args:
            symbol: Trading pair symbol (e.g. "BTCUSDT")
            reason: Why the price is unusable
        """
        super().__init__(f"Invalid trading pair: {symbol}", error_code="PRICE_UNAVAILABLE")
        self.symbol = symbol
        self.reason = reason


class GatewayError(RebalancerError):
    """An exchange API call failed."""

    def __init__(
        self,
        message: str,
        details: Any = None,
        status_code: Optional[int] = None,
        exchange_code: Optional[int] = None,
    ):
        """
        Args:
            message: Error message reported by the exchange (or transport)
            details: Raw error payload returned by the exchange
            status_code: HTTP status of the exchange response, if any
            exchange_code: Exchange-specific error code, if any
        """
        super().__init__(message, error_code="GATEWAY_ERROR")
        self.details = details
        self.status_code = status_code
        self.exchange_code = exchange_code


class SymbolNotFoundError(GatewayError):
    """The exchange does not know the requested symbol."""
    pass


class ExecutionFailedError(RebalancerError):
    """
    The redeem -> settle -> order sequence failed.

    ``stage`` tells whether funds were already redeemed when the failure
    happened:

    - ``redeem``: redemption failed, nothing has moved
    - ``order``: funds were redeemed but the market order was not placed
    """

    STAGE_REDEEM = "redeem"
    STAGE_ORDER = "order"

    def __init__(self, stage: str, cause: Exception):
        """
        Args:
            stage: Stage at which the sequence failed
            cause: Underlying exception
        """
        cause_message = getattr(cause, "message", None) or str(cause)
        super().__init__(
            f"Rebalance execution failed at {stage} stage: {cause_message}",
            error_code="EXECUTION_FAILED",
        )
        self.stage = stage
        self.cause = cause

    @property
    def funds_redeemed(self) -> bool:
        """True when Earn funds were redeemed before the failure."""
        return self.stage == self.STAGE_ORDER

    @property
    def details(self) -> Any:
        """Exchange-provided detail of the underlying failure, if any."""
        return getattr(self.cause, "details", None)


class RebalanceInProgressError(RebalancerError):
    """Another rebalance for the same pair is still running."""

    def __init__(self, symbol: str):
        super().__init__(
            f"Rebalance already in progress for {symbol}",
            error_code="REBALANCE_IN_PROGRESS",
        )
        self.symbol = symbol


class ConfigurationError(RebalancerError):
    """Invalid configuration value."""

    def __init__(self, config_key: str, reason: str):
        """
        Args:
            config_key: Configuration key
            reason: Why the value is invalid
        """
        super().__init__(f"Configuration error ({config_key}): {reason}", error_code="CONFIGURATION_ERROR")
        self.config_key = config_key
        self.reason = reason
