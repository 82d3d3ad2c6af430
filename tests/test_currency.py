# tests/test_currency.py

"""Tests for Rupiah parsing and formatting helpers."""

import unittest
from decimal import Decimal

from src.utils.currency import (
    format_rupiah,
    format_weight,
    parse_grouped_number,
    parse_weight,
    price_per_unit,
)


class TestParseGroupedNumber(unittest.TestCase):
    """parse_grouped_number behaviour."""

    def test_strips_dot_grouping(self) -> None:
        """id-ID grouping separators are removed."""
        self.assertEqual(
            parse_grouped_number("2.943.600.000"), 2_943_600_000
        )

    def test_plain_digits(self) -> None:
        """Ungrouped digits parse unchanged."""
        self.assertEqual(parse_grouped_number("2850000"), 2_850_000)

    def test_no_digits_raises(self) -> None:
        """Text without digits is an error."""
        with self.assertRaises(ValueError):
            parse_grouped_number("Rp .")


class TestParseWeight(unittest.TestCase):
    """parse_weight behaviour."""

    def test_comma_decimal(self) -> None:
        """``0,5`` is half a gram."""
        self.assertEqual(parse_weight("0,5"), Decimal("0.5"))

    def test_integer_weight(self) -> None:
        """Integer weights parse to Decimal."""
        self.assertEqual(parse_weight("1000"), Decimal(1000))

    def test_zero_rejected(self) -> None:
        """Zero is not a valid weight."""
        with self.assertRaises(ValueError):
            parse_weight("0")

    def test_non_finite_rejected(self) -> None:
        """NaN and Infinity are ValueErrors, not arithmetic errors."""
        for text in ("NaN", "sNaN", "Infinity"):
            with self.subTest(text=text):
                with self.assertRaises(ValueError):
                    parse_weight(text)

    def test_garbage_rejected(self) -> None:
        """Non-numeric text is not a valid weight."""
        with self.assertRaises(ValueError):
            parse_weight("gram")


class TestFormatting(unittest.TestCase):
    """Display helpers."""

    def test_format_rupiah(self) -> None:
        """Thousands are grouped with dots."""
        self.assertEqual(
            format_rupiah(2_943_600_000), "Rp 2.943.600.000"
        )

    def test_format_rupiah_negative(self) -> None:
        """Negative amounts keep the sign in front."""
        self.assertEqual(format_rupiah(-50_000), "-Rp 50.000")

    def test_format_weight_has_no_exponent(self) -> None:
        """Normalised weights are rendered in plain notation."""
        self.assertEqual(format_weight(Decimal("1000")), "1000")
        self.assertEqual(format_weight(Decimal("0.50")), "0.5")


class TestPricePerUnit(unittest.TestCase):
    """price_per_unit rounding."""

    def test_rounds_to_nearest_integer(self) -> None:
        """Per-gram price is rounded half-up."""
        self.assertEqual(price_per_unit(1_542_500, Decimal("0.5")), 3_085_000)
        self.assertEqual(price_per_unit(10, Decimal(4)), 3)

    def test_unweighted_uses_unit_weight(self) -> None:
        """No weight means the price itself."""
        self.assertEqual(price_per_unit(2_985_000, None), 2_985_000)


if __name__ == "__main__":
    unittest.main()
