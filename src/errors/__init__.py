"""Error Handling & Validation.

Structured exception hierarchy with error codes and input validators
for the anomaly detection and investment simulation core.
"""

from src.errors.config import (
    ERROR_SEVERITY_MAP,
    ERROR_STATUS_MAP,
    ErrorCode,
    ErrorSeverity,
)
from src.errors.exceptions import (
    InsufficientDataError,
    InvalidPriceDataError,
    NoDataForRangeError,
    StockWatchError,
    UnknownSymbolError,
    ValidationError,
)
from src.errors.validators import (
    validate_amount,
    validate_start_date,
    validate_symbol,
    validate_symbols_list,
)

__all__ = [
    # Config
    "ERROR_SEVERITY_MAP",
    "ERROR_STATUS_MAP",
    "ErrorCode",
    "ErrorSeverity",
    # Exceptions
    "InsufficientDataError",
    "InvalidPriceDataError",
    "NoDataForRangeError",
    "StockWatchError",
    "UnknownSymbolError",
    "ValidationError",
    # Validators
    "validate_amount",
    "validate_start_date",
    "validate_symbol",
    "validate_symbols_list",
]
