"""
Test suite for currency module

Tests Money arithmetic, precision rounding and amount conversion.
All monetary calculations must use Decimal precision.
"""

import pytest
from decimal import Decimal

from banking_ledger.currency import Money, Currency, to_decimal


class TestMoney:
    """Test Money class operations"""

    def test_money_creation(self):
        """Test Money object creation and rounding"""
        money = Money(Decimal('100.50'), Currency.USD)
        assert money.amount == Decimal('100.50')
        assert money.currency == Currency.USD

        # Rounded half-up to 2 places for USD
        assert Money(Decimal('100.555'), Currency.USD).amount == Decimal('100.56')

        # JPY has no minor unit
        assert Money(Decimal('100.7'), Currency.JPY).amount == Decimal('101')

    def test_non_decimal_amounts_converted(self):
        """Test that floats go through their string form"""
        assert Money(0.1, Currency.USD).amount == Decimal('0.10')
        assert Money(7, Currency.USD).amount == Decimal('7.00')
        assert Money("12.345", Currency.EUR).amount == Decimal('12.35')

    def test_money_arithmetic(self):
        """Test Money arithmetic operations"""
        money1 = Money(Decimal('100.50'), Currency.USD)
        money2 = Money(Decimal('50.25'), Currency.USD)

        assert (money1 + money2).amount == Decimal('150.75')
        assert (money1 - money2).amount == Decimal('50.25')
        assert (money1 * Decimal('2')).amount == Decimal('201.00')
        assert (money1 * 3).amount == Decimal('301.50')

    def test_currency_mismatch(self):
        """Test that mixing currencies fails"""
        usd = Money(Decimal('1'), Currency.USD)
        eur = Money(Decimal('1'), Currency.EUR)

        with pytest.raises(ValueError, match="Cannot add"):
            usd + eur
        with pytest.raises(ValueError, match="Cannot subtract"):
            usd - eur
        with pytest.raises(ValueError, match="Cannot compare"):
            usd < eur

    def test_comparisons(self):
        """Test ordering and equality"""
        small = Money(Decimal('10'), Currency.USD)
        large = Money(Decimal('20'), Currency.USD)

        assert small < large
        assert small <= Money(Decimal('10.00'), Currency.USD)
        assert large > small
        assert large >= small
        assert small == Money(Decimal('10.00'), Currency.USD)
        assert small != Money(Decimal('10'), Currency.EUR)
        assert small != Decimal('10')

    def test_predicates(self):
        """Test sign predicates and zero constructor"""
        assert Money.zero(Currency.USD).is_zero()
        assert Money(Decimal('0.01'), Currency.USD).is_positive()
        assert Money(Decimal('-0.01'), Currency.USD).is_negative()
        assert not Money(Decimal('0.001'), Currency.USD).is_positive()

    def test_to_string(self):
        """Test display formatting"""
        assert Money(Decimal('1234.5'), Currency.USD).to_string() == "USD 1,234.50"
        assert Money(Decimal('1234'), Currency.JPY).to_string() == "JPY 1,234"

    def test_hashable(self):
        """Test that equal Money values hash alike"""
        values = {Money(Decimal('1'), Currency.USD), Money(Decimal('1.00'), Currency.USD)}
        assert len(values) == 1


class TestToDecimal:
    """Test caller amount conversion"""

    @pytest.mark.parametrize("value,expected", [
        (Decimal('1.5'), Decimal('1.5')),
        (2, Decimal('2')),
        (0.2, Decimal('0.2')),
        ("  3.25 ", Decimal('3.25')),
        ("-4", Decimal('-4')),
    ])
    def test_valid_values(self, value, expected):
        """Test accepted inputs"""
        assert to_decimal(value) == expected

    @pytest.mark.parametrize("value", [
        "abc", "", None, True, False, float('nan'), float('inf'), "Infinity",
        Decimal('NaN'), object()
    ])
    def test_invalid_values(self, value):
        """Test rejected inputs"""
        with pytest.raises(ValueError):
            to_decimal(value)
