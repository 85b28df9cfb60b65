"""Tests for the exception hierarchy and input validators."""

from datetime import date, datetime
from decimal import Decimal

import pytest

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

TODAY = date(2024, 6, 1)


class TestErrorConfig:
    """Tests for error configuration."""

    def test_error_code_enum_values(self):
        assert ErrorCode.VALIDATION_ERROR.value == "VALIDATION_ERROR"
        assert ErrorCode.NO_DATA_FOR_RANGE.value == "NO_DATA_FOR_RANGE"

    def test_error_status_map_covers_all_codes(self):
        for code in ErrorCode:
            assert code in ERROR_STATUS_MAP

    def test_error_severity_map_covers_all_codes(self):
        for code in ErrorCode:
            assert code in ERROR_SEVERITY_MAP

    def test_validation_errors_map_to_400(self):
        for code in (ErrorCode.VALIDATION_ERROR, ErrorCode.INVALID_SYMBOL, ErrorCode.INVALID_AMOUNT):
            assert ERROR_STATUS_MAP[code] == 400

    def test_data_errors(self):
        assert ERROR_STATUS_MAP[ErrorCode.SYMBOL_NOT_FOUND] == 404
        assert ERROR_STATUS_MAP[ErrorCode.NO_DATA_FOR_RANGE] == 422


class TestExceptions:
    """Tests for custom exception hierarchy."""

    def test_base_error(self):
        exc = StockWatchError("test error")
        assert str(exc) == "test error"
        assert exc.status_code == 500
        assert exc.error_code == ErrorCode.INTERNAL_ERROR
        assert exc.severity == ErrorSeverity.CRITICAL

    def test_validation_error(self):
        exc = ValidationError("bad input", field="symbol")
        assert exc.status_code == 400
        assert exc.error_code == ErrorCode.VALIDATION_ERROR
        assert exc.details == [{"field": "symbol", "issue": "bad input"}]
        assert exc.field == "symbol"

    def test_invalid_price_data_is_validation_error(self):
        exc = InvalidPriceDataError("low above high", field="low")
        assert isinstance(exc, ValidationError)
        assert exc.error_code == ErrorCode.INVALID_PRICE_DATA

    def test_insufficient_data(self):
        exc = InsufficientDataError(required=2, available=1, symbol="AAA")
        assert exc.required == 2
        assert exc.available == 1
        assert "AAA" in exc.message

    def test_no_data_for_range(self):
        exc = NoDataForRangeError("EEE", date(2024, 1, 1))
        assert exc.symbol == "EEE"
        assert exc.status_code == 422
        assert exc.message == "No price data available for EEE from 2024-01-01"
        assert exc.details[0]["start_date"] == "2024-01-01"

    def test_unknown_symbol(self):
        exc = UnknownSymbolError("ZZZ")
        assert isinstance(exc, NoDataForRangeError)
        assert exc.start_date is None
        assert exc.message == "Stock symbol 'ZZZ' not found"
        assert exc.status_code == 404

    def test_to_dict(self):
        data = ValidationError("bad", field="amount").to_dict()
        assert data["error"] == "VALIDATION_ERROR"
        assert data["message"] == "bad"
        assert data["details"][0]["field"] == "amount"


class TestValidators:
    """Tests for input validators."""

    def test_valid_symbol(self):
        assert validate_symbol("aapl") == "AAPL"
        assert validate_symbol(" vnm ") == "VNM"
        assert validate_symbol("7203") == "7203"

    @pytest.mark.parametrize("symbol", ["", "BRK.B", "TOOLONGSYMBOL", "A-B", None])
    def test_invalid_symbol(self, symbol):
        with pytest.raises(ValidationError) as exc_info:
            validate_symbol(symbol)
        assert exc_info.value.error_code == ErrorCode.INVALID_SYMBOL

    def test_symbols_list(self):
        assert validate_symbols_list(["aaa", "bbb"]) == ["AAA", "BBB"]

    def test_symbols_list_bounds(self):
        with pytest.raises(ValidationError):
            validate_symbols_list(["AAA"])
        with pytest.raises(ValidationError):
            validate_symbols_list(["A", "B", "C", "D", "E", "F"])
        with pytest.raises(ValidationError):
            validate_symbols_list([])
        assert len(validate_symbols_list(["A", "B", "C", "D", "E"])) == 5

    def test_symbols_list_duplicates_case_insensitive(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_symbols_list(["aaa", "AAA"])
        assert "AAA" in exc_info.value.message
        assert exc_info.value.error_code == ErrorCode.INVALID_SYMBOLS_LIST

    def test_amount(self):
        assert validate_amount("10000000") == Decimal("10000000")
        assert validate_amount(1_000_000) == Decimal("1000000")
        assert validate_amount(10_000_000_000) == Decimal("10000000000")

    @pytest.mark.parametrize("amount", [999_999, 10_000_000_001, "abc", "NaN", "Infinity", True])
    def test_invalid_amount(self, amount):
        with pytest.raises(ValidationError) as exc_info:
            validate_amount(amount)
        assert exc_info.value.error_code == ErrorCode.INVALID_AMOUNT

    def test_amount_custom_bounds(self):
        assert validate_amount(5, min_amount=1, max_amount=10) == 5

    def test_start_date(self):
        assert validate_start_date("2024-01-02", today=TODAY) == date(2024, 1, 2)
        assert validate_start_date(date(2020, 5, 5), today=TODAY) == date(2020, 5, 5)
        assert validate_start_date(datetime(2020, 5, 5, 10, 30), today=TODAY) == date(2020, 5, 5)
        assert validate_start_date(TODAY, today=TODAY) == TODAY

    @pytest.mark.parametrize("value", ["2024-13-01", "yesterday", "2000-01-01", "1999-12-31", "2024-06-02", None])
    def test_invalid_start_date(self, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_start_date(value, today=TODAY)
        assert exc_info.value.error_code == ErrorCode.INVALID_DATE
