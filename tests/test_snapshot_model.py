# tests/test_snapshot_model.py

"""Tests for PriceRecord, Snapshot and their JSON form."""

import unittest
from datetime import datetime, timezone
from decimal import Decimal

from src.models.price_record import (
    BuybackRecord,
    PriceRecord,
    RawCandidate,
    record_key,
)
from src.models.snapshot import Snapshot, SnapshotFormatError

_CAPTURED = datetime(2026, 1, 28, 5, 30, tzinfo=timezone.utc)


def _make_snapshot(**overrides) -> Snapshot:
    defaults = {
        "source_id": "harga-emas.org",
        "source_url": "https://harga-emas.org",
        "captured_at": _CAPTURED,
        "records": (
            PriceRecord(
                "Antam 1000g", 2_925_600_000, Decimal(1000),
                origin_strategy="table",
            ),
            PriceRecord(
                "Antam 0.5g", 1_542_500, Decimal("0.5"),
                origin_strategy="table",
            ),
            PriceRecord(
                "Live price", 2_985_000, buy_price=2_850_000,
                origin_strategy="embedded",
            ),
        ),
        "update_time_label": "28 Januari 2026 pukul 12.30",
        "buyback": BuybackRecord("Buyback per gram", 2_850_000),
    }
    defaults.update(overrides)
    return Snapshot(**defaults)


class TestPriceRecord(unittest.TestCase):
    """PriceRecord derived values."""

    def test_price_per_unit_follows_weight(self) -> None:
        """Per-gram price is sell price over weight."""
        record = PriceRecord("Antam 1000g", 2_943_600_000, Decimal(1000))
        self.assertEqual(record.price_per_unit, 2_943_600)

    def test_unweighted_price_per_unit_is_sell_price(self) -> None:
        """Live quotes have an implicit unit weight."""
        record = PriceRecord("Live price", 2_985_000)
        self.assertEqual(record.price_per_unit, 2_985_000)

    def test_formatted_prices(self) -> None:
        """Formatted strings use id-ID grouping."""
        record = PriceRecord("Live price", 2_985_000, buy_price=2_850_000)
        self.assertEqual(record.formatted_sell_price, "Rp 2.985.000")
        self.assertEqual(record.formatted_buy_price, "Rp 2.850.000")
        self.assertIsNone(
            PriceRecord("x", 1).formatted_buy_price
        )

    def test_key_normalises_weight(self) -> None:
        """1000 and 1E+3 grams are the same record."""
        self.assertEqual(
            record_key(Decimal("1000"), "a"),
            record_key(Decimal("1E+3"), "b"),
        )
        self.assertEqual(record_key(None, "Live price"), ("label", "Live price"))

    def test_origin_strategy_ignored_in_equality(self) -> None:
        """Provenance does not affect record equality."""
        a = PriceRecord("Antam 1g", 2_985_000, Decimal(1), origin_strategy="table")
        b = PriceRecord("Antam 1g", 2_985_000, Decimal(1), origin_strategy="structured")
        self.assertEqual(a, b)

    def test_from_candidate_copies_fields(self) -> None:
        """Promotion keeps price, weight and provenance."""
        candidate = RawCandidate(
            "Antam 5g", 14_700_000, Decimal(5), origin_strategy="table"
        )
        record = PriceRecord.from_candidate(candidate)
        self.assertEqual(record.sell_price, 14_700_000)
        self.assertEqual(record.weight, Decimal(5))
        self.assertEqual(record.origin_strategy, "table")


class TestSnapshot(unittest.TestCase):
    """Snapshot invariants and serialisation."""

    def test_duplicate_weight_rejected(self) -> None:
        """Two records with the same weight cannot coexist."""
        with self.assertRaises(ValueError):
            _make_snapshot(
                records=(
                    PriceRecord("Antam 1g", 2_985_000, Decimal(1)),
                    PriceRecord("Antam 1 gram", 2_990_000, Decimal("1.0")),
                )
            )

    def test_record_index(self) -> None:
        """Index maps keys to records."""
        index = _make_snapshot().record_index()
        self.assertEqual(index[("weight", "0.5")].sell_price, 1_542_500)
        self.assertIn(("label", "Live price"), index)

    def test_to_dict_uses_camel_case(self) -> None:
        """Persisted form uses camelCase keys and string weights."""
        data = _make_snapshot().to_dict()
        self.assertEqual(data["sourceId"], "harga-emas.org")
        self.assertEqual(data["capturedAt"], "2026-01-28T05:30:00+00:00")
        self.assertEqual(data["buyback"]["formattedPrice"], "Rp 2.850.000")
        first = data["records"][0]
        self.assertEqual(first["weight"], "1000")
        self.assertEqual(first["pricePerUnit"], 2_925_600)
        self.assertEqual(first["formattedSellPrice"], "Rp 2.925.600.000")
        self.assertIsNone(data["records"][2]["weight"])

    def test_round_trip(self) -> None:
        """from_dict(to_dict(s)) rebuilds an equal snapshot."""
        snapshot = _make_snapshot()
        self.assertEqual(Snapshot.from_dict(snapshot.to_dict()), snapshot)

    def test_derived_fields_not_trusted(self) -> None:
        """A tampered pricePerUnit is recomputed on load."""
        data = _make_snapshot().to_dict()
        data["records"][0]["pricePerUnit"] = 1
        loaded = Snapshot.from_dict(data)
        self.assertEqual(loaded.records[0].price_per_unit, 2_925_600)


class TestSnapshotFromDictErrors(unittest.TestCase):
    """Malformed persisted snapshots raise SnapshotFormatError."""

    def _assert_rejected(self, data) -> None:
        with self.assertRaises(SnapshotFormatError):
            Snapshot.from_dict(data)

    def test_not_a_mapping(self) -> None:
        """Lists are not snapshots."""
        self._assert_rejected([1, 2, 3])

    def test_missing_source_id(self) -> None:
        """sourceId is required."""
        data = _make_snapshot().to_dict()
        del data["sourceId"]
        self._assert_rejected(data)

    def test_bad_timestamp(self) -> None:
        """capturedAt must be ISO 8601."""
        data = _make_snapshot().to_dict()
        data["capturedAt"] = "yesterday"
        self._assert_rejected(data)

    def test_records_not_list(self) -> None:
        """records must be a list."""
        data = _make_snapshot().to_dict()
        data["records"] = {"a": 1}
        self._assert_rejected(data)

    def test_string_price_rejected(self) -> None:
        """sellPrice must be an integer."""
        data = _make_snapshot().to_dict()
        data["records"][0]["sellPrice"] = "2925600000"
        self._assert_rejected(data)

    def test_boolean_price_rejected(self) -> None:
        """Booleans are not prices."""
        data = _make_snapshot().to_dict()
        data["records"][0]["sellPrice"] = True
        self._assert_rejected(data)

    def test_negative_price_rejected(self) -> None:
        """Prices cannot be negative."""
        data = _make_snapshot().to_dict()
        data["records"][0]["sellPrice"] = -1
        self._assert_rejected(data)

    def test_invalid_weight_rejected(self) -> None:
        """Weights must be positive decimals."""
        data = _make_snapshot().to_dict()
        data["records"][0]["weight"] = "heavy"
        self._assert_rejected(data)

    def test_duplicate_records_rejected(self) -> None:
        """Duplicate keys in the file surface as a format error."""
        data = _make_snapshot().to_dict()
        data["records"].append(dict(data["records"][0]))
        self._assert_rejected(data)


if __name__ == "__main__":
    unittest.main()
