# tests/test_structured_data_strategy.py

"""Tests for the JSON-LD structured data strategy."""

import unittest
from decimal import Decimal
from pathlib import Path

from src.extraction.structured_data_strategy import StructuredDataStrategy

FIXTURES = Path(__file__).parent / "fixtures"


def _ld_page(*blocks: str) -> str:
    scripts = "".join(
        f'<script type="application/ld+json">{b}</script>' for b in blocks
    )
    return f"<html><head>{scripts}</head><body></body></html>"


class TestStructuredDataStrategy(unittest.TestCase):
    """StructuredDataStrategy.extract behaviour."""

    def setUp(self) -> None:
        self.strategy = StructuredDataStrategy()

    def test_fixture_products(self) -> None:
        """IDR products in @graph are extracted; USD and non-products skipped."""
        markup = (FIXTURES / "structured_data.html").read_text(encoding="utf-8")
        candidates = self.strategy.extract(markup)
        self.assertEqual(
            [c.label for c in candidates], ["Antam 10g", "Antam 1g"]
        )
        self.assertEqual(candidates[0].sell_price, 29_345_000)
        self.assertEqual(candidates[0].weight, Decimal(10))
        self.assertEqual(
            candidates[0].update_time_label, "2026-01-28T12:30:00+07:00"
        )
        self.assertEqual(candidates[1].sell_price, 2_985_000)
        self.assertTrue(
            all(c.origin_strategy == "structured" for c in candidates)
        )

    def test_broken_block_alongside_good_one_is_not_an_error(self) -> None:
        """A parseable block means no failure is reported."""
        markup = (FIXTURES / "structured_data.html").read_text(encoding="utf-8")
        _candidates, error = self.strategy.extract_with_error(markup)
        self.assertIsNone(error)

    def test_only_broken_blocks_reports_error(self) -> None:
        """Unparseable JSON-LD yields [] and an error message."""
        candidates, error = self.strategy.extract_with_error(
            _ld_page('{"@type": "Product", oops')
        )
        self.assertEqual(candidates, [])
        self.assertIsNotNone(error)

    def test_no_json_ld_is_empty(self) -> None:
        """Pages without JSON-LD produce nothing and no error."""
        candidates, error = self.strategy.extract_with_error(
            "<html><body><p>Rp 2.985.000</p></body></html>"
        )
        self.assertEqual(candidates, [])
        self.assertIsNone(error)

    def test_quantitative_value_weight(self) -> None:
        """schema.org weight objects in grams are honoured."""
        markup = _ld_page(
            '{"@type": "Product", "name": "Logam Mulia",'
            ' "weight": {"@type": "QuantitativeValue", "value": 0.5,'
            ' "unitCode": "GRM"},'
            ' "offers": {"@type": "Offer", "price": 1542500,'
            ' "priceCurrency": "IDR"}}'
        )
        candidates = self.strategy.extract(markup)
        self.assertEqual(len(candidates), 1)
        self.assertEqual(candidates[0].weight, Decimal("0.5"))
        self.assertEqual(candidates[0].label, "Antam 0.5g")

    def test_grouped_price_string(self) -> None:
        """id-ID formatted price strings are parsed."""
        markup = _ld_page(
            '{"@type": "Offer", "name": "Antam 5 gr",'
            ' "price": "14.700.000", "priceCurrency": "IDR"}'
        )
        candidates = self.strategy.extract(markup)
        self.assertEqual(candidates[0].sell_price, 14_700_000)
        self.assertEqual(candidates[0].weight, Decimal(5))

    def test_unweighted_offer_uses_name(self) -> None:
        """Offers without a weight keep their name as label."""
        markup = _ld_page(
            '[{"@type": "Product", "name": "Harga emas hari ini",'
            ' "offers": {"price": "2985000", "priceCurrency": "idr"}}]'
        )
        candidates = self.strategy.extract(markup)
        self.assertEqual(candidates[0].label, "Harga emas hari ini")
        self.assertIsNone(candidates[0].weight)

    def test_price_valid_until_is_not_an_update_time(self) -> None:
        """An offer expiry date never becomes the update label."""
        markup = _ld_page(
            '{"@type": "Product", "name": "Antam 1 gr",'
            ' "offers": {"@type": "Offer", "price": 2985000,'
            ' "priceCurrency": "IDR", "priceValidUntil": "2026-12-31"}}'
        )
        candidates = self.strategy.extract(markup)
        self.assertEqual(len(candidates), 1)
        self.assertIsNone(candidates[0].update_time_label)

    def test_empty_markup(self) -> None:
        """Empty input returns an empty list."""
        self.assertEqual(self.strategy.extract(""), [])


if __name__ == "__main__":
    unittest.main()
