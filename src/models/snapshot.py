# src/models/snapshot.py

"""Immutable capture of one extraction run and its JSON form."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from src.models.price_record import BuybackRecord, PriceRecord, RecordKey
from src.utils.currency import format_weight, parse_weight


class SnapshotFormatError(ValueError):
    """A persisted snapshot is missing fields or holds invalid values."""


@dataclass(frozen=True)
class Snapshot:
    """All prices captured from one page at one point in time."""

    source_id: str
    source_url: str
    captured_at: datetime
    records: tuple[PriceRecord, ...] = field(default_factory=tuple)
    update_time_label: str | None = None
    buyback: BuybackRecord | None = None

    def __post_init__(self) -> None:
        keys = [r.key for r in self.records]
        if len(keys) != len(set(keys)):
            raise ValueError("Snapshot records must be unique by weight")

    def record_index(self) -> dict[RecordKey, PriceRecord]:
        """Map each record's identity to the record."""
        return {r.key: r for r in self.records}

    # ── Serialisation ───────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict using the persisted camelCase field names."""
        return {
            "sourceId": self.source_id,
            "sourceUrl": self.source_url,
            "capturedAt": self.captured_at.isoformat(),
            "updateTimeLabel": self.update_time_label,
            "buyback": (
                {
                    "label": self.buyback.label,
                    "price": self.buyback.price,
                    "formattedPrice": self.buyback.formatted_price,
                }
                if self.buyback
                else None
            ),
            "records": [_record_to_dict(r) for r in self.records],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Snapshot":
        """Rebuild a snapshot from :meth:`to_dict` output.

        Raises:
            SnapshotFormatError: required fields are missing or invalid.
        """
        if not isinstance(data, Mapping):
            raise SnapshotFormatError("Snapshot must be a JSON object")

        source_id = _require_str(data, "sourceId")
        source_url = str(data.get("sourceUrl") or "")
        raw_ts = _require_str(data, "capturedAt")
        try:
            captured_at = datetime.fromisoformat(raw_ts)
        except ValueError as exc:
            raise SnapshotFormatError(
                f"Invalid capturedAt {raw_ts!r}"
            ) from exc

        raw_records = data.get("records")
        if not isinstance(raw_records, list):
            raise SnapshotFormatError("records must be a list")
        records = tuple(_record_from_dict(r) for r in raw_records)

        update_label = data.get("updateTimeLabel")
        if update_label is not None and not isinstance(update_label, str):
            raise SnapshotFormatError("updateTimeLabel must be a string")

        buyback = None
        raw_buyback = data.get("buyback")
        if raw_buyback is not None:
            if not isinstance(raw_buyback, Mapping):
                raise SnapshotFormatError("buyback must be an object")
            buyback = BuybackRecord(
                label=_require_str(raw_buyback, "label"),
                price=_require_price(raw_buyback, "price"),
            )

        try:
            return cls(
                source_id=source_id,
                source_url=source_url,
                captured_at=captured_at,
                records=records,
                update_time_label=update_label,
                buyback=buyback,
            )
        except ValueError as exc:
            raise SnapshotFormatError(str(exc)) from exc


def _record_to_dict(record: PriceRecord) -> dict[str, Any]:
    return {
        "weight": (
            format_weight(record.weight)
            if record.weight is not None
            else None
        ),
        "label": record.label,
        "sellPrice": record.sell_price,
        "buyPrice": record.buy_price,
        "formattedSellPrice": record.formatted_sell_price,
        "formattedBuyPrice": record.formatted_buy_price,
        "pricePerUnit": record.price_per_unit,
        "originStrategy": record.origin_strategy,
    }


def _record_from_dict(raw: Any) -> PriceRecord:
    if not isinstance(raw, Mapping):
        raise SnapshotFormatError("Each record must be an object")

    weight: Decimal | None = None
    raw_weight = raw.get("weight")
    if raw_weight is not None:
        if isinstance(raw_weight, bool):
            raise SnapshotFormatError(f"Invalid weight {raw_weight!r}")
        try:
            weight = parse_weight(str(raw_weight))
        except ValueError as exc:
            raise SnapshotFormatError(str(exc)) from exc

    buy_price = None
    if raw.get("buyPrice") is not None:
        buy_price = _require_price(raw, "buyPrice")

    # pricePerUnit and formatted strings are derived, never trusted
    return PriceRecord(
        label=_require_str(raw, "label"),
        sell_price=_require_price(raw, "sellPrice"),
        weight=weight,
        buy_price=buy_price,
        origin_strategy=str(raw.get("originStrategy") or ""),
    )


def _require_str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise SnapshotFormatError(f"Missing or invalid {key!r}")
    return value


def _require_price(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        raise SnapshotFormatError(f"Missing or invalid {key!r}")
    if value < 0:
        raise SnapshotFormatError(f"{key!r} must not be negative")
    return value
