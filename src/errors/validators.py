"""Input Validation Utilities.

Validators for the request shapes consumed by the simulator and
comparison engines: symbols, symbol lists, amounts and start dates.
The engines themselves assume validated input.
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Union

from src.errors.config import ErrorCode
from src.errors.exceptions import ValidationError

# Uppercase letters and digits, 1-10 characters (e.g. AAPL, VNM, 7203)
SYMBOL_PATTERN = re.compile(r"^[A-Z0-9]{1,10}$")

MIN_START_DATE = date(2000, 1, 1)
DEFAULT_MIN_AMOUNT = Decimal("1000000")
DEFAULT_MAX_AMOUNT = Decimal("10000000000")
DEFAULT_MIN_SYMBOLS = 2
DEFAULT_MAX_SYMBOLS = 5


def validate_symbol(symbol: str) -> str:
    """Validate a stock symbol.

    Args:
        symbol: The symbol string to validate.

    Returns:
        The validated, uppercased symbol.

    Raises:
        ValidationError: If the symbol format is invalid.
    """
    if not symbol or not isinstance(symbol, str):
        raise ValidationError(
            message="Symbol is required",
            error_code=ErrorCode.INVALID_SYMBOL,
            field="symbol",
        )

    symbol = symbol.strip().upper()

    if not SYMBOL_PATTERN.match(symbol):
        raise ValidationError(
            message=f"Invalid symbol format: '{symbol}'. Expected 1-10 uppercase letters or digits",
            error_code=ErrorCode.INVALID_SYMBOL,
            field="symbol",
        )

    return symbol


def validate_symbols_list(
    symbols: List[str],
    min_symbols: int = DEFAULT_MIN_SYMBOLS,
    max_symbols: int = DEFAULT_MAX_SYMBOLS,
) -> List[str]:
    """Validate a list of symbols for comparison.

    Symbols are uppercased before the distinctness check, so
    ``["aaa", "AAA"]`` is rejected as a duplicate.

    Raises:
        ValidationError: If any symbol is invalid, duplicated, or the
            list size is outside ``[min_symbols, max_symbols]``.
    """
    if not symbols:
        raise ValidationError(
            message="At least one symbol is required",
            error_code=ErrorCode.INVALID_SYMBOLS_LIST,
            field="symbols",
        )

    validated = [validate_symbol(s) for s in symbols]

    if len(validated) < min_symbols:
        raise ValidationError(
            message=f"At least {min_symbols} symbols are required for comparison",
            error_code=ErrorCode.INVALID_SYMBOLS_LIST,
            field="symbols",
        )

    if len(validated) > max_symbols:
        raise ValidationError(
            message=f"Too many symbols: {len(validated)} exceeds maximum of {max_symbols}",
            error_code=ErrorCode.INVALID_SYMBOLS_LIST,
            field="symbols",
        )

    duplicates = sorted({s for s in validated if validated.count(s) > 1})
    if duplicates:
        raise ValidationError(
            message=f"Duplicate symbols: {', '.join(duplicates)}",
            error_code=ErrorCode.INVALID_SYMBOLS_LIST,
            field="symbols",
        )

    return validated


def validate_amount(
    amount: Union[int, float, str, Decimal],
    min_amount: Decimal = DEFAULT_MIN_AMOUNT,
    max_amount: Decimal = DEFAULT_MAX_AMOUNT,
) -> Decimal:
    """Validate an investment amount and return it as a Decimal.

    Raises:
        ValidationError: If the amount is not numeric or out of bounds.
    """
    if isinstance(amount, bool):
        amount = "not-a-number"
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValidationError(
            message="Amount must be a number",
            error_code=ErrorCode.INVALID_AMOUNT,
            field="amount",
        )

    if not value.is_finite():
        raise ValidationError(
            message="Amount must be a finite number",
            error_code=ErrorCode.INVALID_AMOUNT,
            field="amount",
        )

    if value < Decimal(str(min_amount)):
        raise ValidationError(
            message=f"Amount {value} is below minimum of {min_amount}",
            error_code=ErrorCode.INVALID_AMOUNT,
            field="amount",
        )

    if value > Decimal(str(max_amount)):
        raise ValidationError(
            message=f"Amount {value} exceeds maximum of {max_amount}",
            error_code=ErrorCode.INVALID_AMOUNT,
            field="amount",
        )

    return value


def validate_start_date(
    start_date: Union[date, str],
    today: Optional[date] = None,
) -> date:
    """Validate a simulation start date.

    Accepts a ``date`` or an ISO ``YYYY-MM-DD`` string. The date must
    not be in the future and must be after 2000-01-01.

    Raises:
        ValidationError: If the date is malformed or out of range.
    """
    if isinstance(start_date, str):
        try:
            start_date = datetime.strptime(start_date.strip(), "%Y-%m-%d").date()
        except ValueError:
            raise ValidationError(
                message=f"Invalid start date: '{start_date}'. Expected YYYY-MM-DD",
                error_code=ErrorCode.INVALID_DATE,
                field="start_date",
            )
    elif isinstance(start_date, datetime):
        start_date = start_date.date()
    elif not isinstance(start_date, date):
        raise ValidationError(
            message="Start date is required",
            error_code=ErrorCode.INVALID_DATE,
            field="start_date",
        )

    today = today or date.today()
    if start_date > today:
        raise ValidationError(
            message="start_date cannot be in the future",
            error_code=ErrorCode.INVALID_DATE,
            field="start_date",
        )

    if start_date <= MIN_START_DATE:
        raise ValidationError(
            message=f"start_date must be after {MIN_START_DATE.isoformat()}",
            error_code=ErrorCode.INVALID_DATE,
            field="start_date",
        )

    return start_date
