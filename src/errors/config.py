"""Error Configuration.

Error codes, HTTP status mapping and log severity for the
analytics core's exception hierarchy.
"""

from enum import Enum
from typing import Dict


class ErrorCode(Enum):
    """Standardized error codes."""

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_SYMBOL = "INVALID_SYMBOL"
    INVALID_SYMBOLS_LIST = "INVALID_SYMBOLS_LIST"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_DATE = "INVALID_DATE"
    INVALID_PRICE_DATA = "INVALID_PRICE_DATA"

    # Not found (404)
    SYMBOL_NOT_FOUND = "SYMBOL_NOT_FOUND"

    # Unprocessable (422)
    NO_DATA_FOR_RANGE = "NO_DATA_FOR_RANGE"

    # Internal, never surfaced to request callers
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorSeverity(Enum):
    """Severity levels for error logging."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


ERROR_STATUS_MAP: Dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.INVALID_SYMBOL: 400,
    ErrorCode.INVALID_SYMBOLS_LIST: 400,
    ErrorCode.INVALID_AMOUNT: 400,
    ErrorCode.INVALID_DATE: 400,
    ErrorCode.INVALID_PRICE_DATA: 400,
    ErrorCode.SYMBOL_NOT_FOUND: 404,
    ErrorCode.NO_DATA_FOR_RANGE: 422,
    ErrorCode.INSUFFICIENT_DATA: 422,
    ErrorCode.INTERNAL_ERROR: 500,
}

ERROR_SEVERITY_MAP: Dict[ErrorCode, ErrorSeverity] = {
    ErrorCode.VALIDATION_ERROR: ErrorSeverity.LOW,
    ErrorCode.INVALID_SYMBOL: ErrorSeverity.LOW,
    ErrorCode.INVALID_SYMBOLS_LIST: ErrorSeverity.LOW,
    ErrorCode.INVALID_AMOUNT: ErrorSeverity.LOW,
    ErrorCode.INVALID_DATE: ErrorSeverity.LOW,
    ErrorCode.INVALID_PRICE_DATA: ErrorSeverity.MEDIUM,
    ErrorCode.SYMBOL_NOT_FOUND: ErrorSeverity.LOW,
    ErrorCode.NO_DATA_FOR_RANGE: ErrorSeverity.LOW,
    ErrorCode.INSUFFICIENT_DATA: ErrorSeverity.LOW,
    ErrorCode.INTERNAL_ERROR: ErrorSeverity.CRITICAL,
}
