"""Tests for the Money value type."""

from decimal import Decimal

import pytest

from registry.money import Money


class TestMoney:
    def test_currency_is_uppercased(self) -> None:
        assert Money.of("usd", 1).currency == "USD"

    def test_amount_is_quantized(self) -> None:
        assert Money.of("USD", 8).amount == Decimal("8.00")
        assert Money.of("JPY", 100).amount == Decimal("100")

    def test_equality_is_per_currency(self) -> None:
        assert Money.of("USD", 1) == Money.of("USD", "1.00")
        assert Money.of("USD", 1) != Money.of("EUR", 1)

    def test_str(self) -> None:
        assert str(Money.of("USD", "42.42")) == "USD 42.42"

    def test_is_negative(self) -> None:
        assert Money.of("USD", "-1").is_negative
        assert not Money.zero("USD").is_negative


class TestParse:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("USD 42.42", Money.of("USD", "42.42")),
            ("  eur 5 ", Money.of("EUR", 5)),
            ('"JPY 1000"', Money.of("JPY", 1000)),
        ],
    )
    def test_valid(self, text: str, expected: Money) -> None:
        assert Money.parse(text) == expected

    @pytest.mark.parametrize("text", ["42.42", "USD", "US 1", "USD one"])
    def test_invalid(self, text: str) -> None:
        with pytest.raises(ValueError):
            Money.parse(text)

    @pytest.mark.parametrize("text", ["USD 1.005", "JPY 1.5", "EUR 0.001"])
    def test_too_many_decimal_places(self, text: str) -> None:
        with pytest.raises(ValueError, match="decimal places"):
            Money.parse(text)

    def test_trailing_zeros_beyond_scale_accepted(self) -> None:
        assert Money.parse("USD 1.500") == Money.of("USD", "1.50")
        assert Money.parse("JPY 100.0").amount == Decimal("100")

    def test_short_amount_padded(self) -> None:
        assert str(Money.parse("USD 1.5")) == "USD 1.50"
