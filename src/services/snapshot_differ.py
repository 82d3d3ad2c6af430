# src/services/snapshot_differ.py

"""Classify the differences between a new snapshot and the previous one."""

import logging
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from src.config.settings import Settings
from src.models.comparison import (
    ChangeKind,
    ChangeRecord,
    ComparisonResult,
    ComparisonStatus,
    Direction,
)
from src.models.snapshot import Snapshot, SnapshotFormatError

logger = logging.getLogger("gold_watch.differ")

FIRST_RUN_MESSAGE = "First run - no previous data"
NO_CHANGE_MESSAGE = "No price change"


def price_delta(
    old_price: int, new_price: int,
) -> tuple[int, float | None, Direction]:
    """Difference, percent of the old price, and direction.

    The percentage is None when the old price is zero.
    """
    difference = new_price - old_price
    percent: float | None = None
    if old_price != 0:
        ratio = Decimal(difference) / Decimal(old_price) * 100
        percent = float(
            ratio.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        )
    direction = Direction.UP if difference > 0 else Direction.DOWN
    return difference, percent, direction


def impossible_result(error: str) -> ComparisonResult:
    """Result for a stored snapshot that cannot be compared against."""
    return ComparisonResult(
        has_changed=False,
        is_first_run=False,
        message="Comparison impossible: stored snapshot is malformed",
        status=ComparisonStatus.IMPOSSIBLE,
        error=error,
    )


def change_message(count: int) -> str:
    if count == 0:
        return NO_CHANGE_MESSAGE
    noun = "change" if count == 1 else "changes"
    return f"Found {count} price {noun}"


class SnapshotDiffer:
    """Pure comparison of two snapshots.

    Records are matched by weight (by label for unweighted quotes).
    Records that disappeared from the new snapshot are not reported.
    """

    def __init__(self, buyback_label: str | None = None) -> None:
        self.buyback_label = buyback_label or Settings.BUYBACK_CHANGE_LABEL

    def compare(
        self,
        new: Snapshot,
        old: Snapshot | Mapping[str, Any] | None,
    ) -> ComparisonResult:
        """Diff *new* against *old*; *old* may be a persisted dict."""
        if old is None:
            return ComparisonResult(
                has_changed=True,
                is_first_run=True,
                message=FIRST_RUN_MESSAGE,
                status=ComparisonStatus.FIRST_RUN,
            )
        if not isinstance(old, Snapshot):
            return self.compare_persisted(new, old)

        changes: list[ChangeRecord] = []
        previous = old.record_index()

        for record in new.records:
            before = previous.get(record.key)
            if before is None:
                changes.append(
                    ChangeRecord(
                        kind=ChangeKind.NEW,
                        label=record.label,
                        weight=record.weight,
                        new_sell_price=record.sell_price,
                        formatted_new_sell_price=record.formatted_sell_price,
                    )
                )
                continue
            if before.sell_price == record.sell_price:
                continue
            difference, percent, direction = price_delta(
                before.sell_price, record.sell_price
            )
            changes.append(
                ChangeRecord(
                    kind=ChangeKind.PRICE_CHANGE,
                    label=record.label,
                    weight=record.weight,
                    old_sell_price=before.sell_price,
                    new_sell_price=record.sell_price,
                    formatted_old_sell_price=before.formatted_sell_price,
                    formatted_new_sell_price=record.formatted_sell_price,
                    difference=difference,
                    difference_percent=percent,
                    direction=direction,
                )
            )

        if (
            new.buyback is not None
            and old.buyback is not None
            and new.buyback.price != old.buyback.price
        ):
            difference, percent, direction = price_delta(
                old.buyback.price, new.buyback.price
            )
            changes.append(
                ChangeRecord(
                    kind=ChangeKind.BUYBACK_CHANGE,
                    label=self.buyback_label,
                    old_sell_price=old.buyback.price,
                    new_sell_price=new.buyback.price,
                    formatted_old_sell_price=old.buyback.formatted_price,
                    formatted_new_sell_price=new.buyback.formatted_price,
                    difference=difference,
                    difference_percent=percent,
                    direction=direction,
                )
            )

        return ComparisonResult(
            has_changed=bool(changes),
            is_first_run=False,
            message=change_message(len(changes)),
            changes=tuple(changes),
        )

    def compare_persisted(
        self,
        new: Snapshot,
        raw_old: Mapping[str, Any] | None,
    ) -> ComparisonResult:
        """Diff against a snapshot loaded from storage.

        A malformed stored snapshot yields an IMPOSSIBLE result instead
        of an exception, and is distinct from a first run.
        """
        if raw_old is None:
            return self.compare(new, None)
        try:
            old = Snapshot.from_dict(raw_old)
        except SnapshotFormatError as exc:
            logger.error("Stored snapshot is malformed: %s", exc)
            return impossible_result(str(exc))
        return self.compare(new, old)
