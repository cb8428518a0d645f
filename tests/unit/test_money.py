"""
Money Utilities Unit Tests
"""

from decimal import Decimal

import pytest

from billing_engine.models import TaxRateTable
from billing_engine.money import (
    RoundingMode,
    cents_to_display,
    cents_to_dollars,
    cents_to_input_value,
    display_to_cents,
    dollars_to_cents,
    round_cents,
)


class TestRoundCents:
    """Tests for round_cents"""
    
    @pytest.mark.parametrize("value,expected", [
        (Decimal("0.5"), 1),
        (Decimal("1.5"), 2),
        (Decimal("2.5"), 3),
        (Decimal("2.49"), 2),
        (Decimal("-2.5"), -3),
    ])
    def test_half_up(self, value, expected):
        assert round_cents(value) == expected
    
    @pytest.mark.parametrize("value,expected", [
        (Decimal("0.5"), 0),
        (Decimal("1.5"), 2),
        (Decimal("2.5"), 2),
        (Decimal("3.5"), 4),
    ])
    def test_half_even(self, value, expected):
        assert round_cents(value, RoundingMode.HALF_EVEN) == expected
    
    def test_returns_int(self):
        assert isinstance(round_cents(Decimal("10.0")), int)
    
    def test_float_input_uses_decimal_representation(self):
        assert round_cents(0.5) == 1
        assert round_cents(12.5) == 13


class TestConversions:
    """Tests for dollar/cent conversions"""
    
    def test_dollars_to_cents(self):
        assert dollars_to_cents(12.34) == 1234
        assert dollars_to_cents("0.005") == 1
        assert dollars_to_cents(Decimal("99.999")) == 10000
        assert dollars_to_cents(7) == 700
    
    def test_cents_to_dollars(self):
        assert cents_to_dollars(1234) == Decimal("12.34")
        assert cents_to_dollars(5) == Decimal("0.05")
    
    def test_cents_to_input_value(self):
        assert cents_to_input_value(100) == "1.00"
        assert cents_to_input_value(123456) == "1234.56"
    
    @pytest.mark.parametrize("value,expected", [
        ("$1,234.56", 123456),
        ("12.3", 1230),
        ("-4.50", -450),
        ("abc", 0),
        ("", 0),
        (19.99, 1999),
    ])
    def test_display_to_cents(self, value, expected):
        assert display_to_cents(value) == expected
    
    def test_cents_to_display(self):
        assert cents_to_display(123456) == "$1,234.56"
        assert cents_to_display(-500, "GBP") == "-£5.00"
        assert cents_to_display(1000, "chf") == "CHF 10.00"


class TestTaxRateTable:
    """Tests for TaxRateTable"""
    
    def test_default_table(self):
        table = TaxRateTable.default()
        
        assert set(table.codes()) == {"GST", "GST_FREE", "NONE"}
        assert table.resolve("GST").rate_percent == Decimal("10")
        assert table.rates["GST"].tax_name == "GST (10%)"
    
    def test_unknown_code_resolves_to_zero(self):
        resolution = TaxRateTable.default().resolve("VAT")
        
        assert resolution.known is False
        assert resolution.rate_percent == Decimal("0")
    
    def test_from_percentages_accepts_floats(self):
        table = TaxRateTable.from_percentages({"VAT": 20, "REDUCED": 5.5})
        
        assert table.resolve("REDUCED").rate_percent == Decimal("5.5")
        assert table.rates["VAT"].tax_name == "VAT"
    
    def test_table_is_immutable(self):
        table = TaxRateTable.default()
        with pytest.raises(ValueError):
            table.rates = {}
