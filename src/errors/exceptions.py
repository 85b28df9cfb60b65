"""Custom Exception Hierarchy.

Typed exceptions carrying an error code and HTTP status so a thin
request layer can translate them without inspecting messages.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from src.errors.config import ERROR_SEVERITY_MAP, ERROR_STATUS_MAP, ErrorCode, ErrorSeverity


class StockWatchError(Exception):
    """Base exception for all StockWatch errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = ERROR_STATUS_MAP.get(error_code, 500)
        self.details = details or []

    @property
    def severity(self) -> ErrorSeverity:
        return ERROR_SEVERITY_MAP.get(self.error_code, ErrorSeverity.CRITICAL)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(StockWatchError):
    """Raised when caller input fails validation."""

    def __init__(
        self,
        message: str = "Validation failed",
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
        field: Optional[str] = None,
    ):
        if field and not details:
            details = [{"field": field, "issue": message}]
        super().__init__(message, error_code, details)
        self.field = field


class InvalidPriceDataError(ValidationError):
    """Raised when an OHLCV record violates its invariants."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, ErrorCode.INVALID_PRICE_DATA, field=field)


class InsufficientDataError(StockWatchError):
    """Fewer observations than the statistical window requires.

    Recoverable: callers treat it as "no anomaly can be determined".
    """

    def __init__(self, required: int, available: int, symbol: Optional[str] = None):
        subject = f" for {symbol}" if symbol else ""
        super().__init__(
            f"Insufficient data{subject}: {available} observations, {required} required",
            ErrorCode.INSUFFICIENT_DATA,
            [{"required": required, "available": available, "symbol": symbol}],
        )
        self.required = required
        self.available = available
        self.symbol = symbol


class NoDataForRangeError(StockWatchError):
    """No price point exists at or after the requested start date."""

    def __init__(
        self,
        symbol: str,
        start_date: Optional[date] = None,
        message: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.NO_DATA_FOR_RANGE,
    ):
        if message is None:
            message = f"No price data available for {symbol}"
            if start_date is not None:
                message += f" from {start_date.isoformat()}"
        super().__init__(
            message,
            error_code,
            [{"symbol": symbol, "start_date": start_date.isoformat() if start_date else None}],
        )
        self.symbol = symbol
        self.start_date = start_date


class UnknownSymbolError(NoDataForRangeError):
    """The repository holds no price data at all for the symbol."""

    def __init__(self, symbol: str):
        super().__init__(
            symbol,
            message=f"Stock symbol '{symbol}' not found",
            error_code=ErrorCode.SYMBOL_NOT_FOUND,
        )
