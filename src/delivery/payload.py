# src/delivery/payload.py

"""Builds the webhook payload and its human-readable summary."""

from datetime import datetime, timezone
from typing import Any

from src.config.settings import Settings
from src.models.comparison import (
    ChangeKind,
    ChangeRecord,
    ComparisonResult,
    ComparisonStatus,
    Direction,
)
from src.models.snapshot import Snapshot
from src.utils.currency import format_rupiah

_STAMP_FORMAT = "%d/%m/%Y %H.%M.%S"


def _change_line(change: ChangeRecord) -> str:
    if change.kind is ChangeKind.NEW:
        return f"🆕 {change.label}: Jual {change.formatted_new_sell_price}"

    emoji = "📈" if change.direction is Direction.UP else "📉"
    if change.difference_percent is not None:
        sign = "+" if change.direction is Direction.UP else ""
        delta = f"{sign}{change.difference_percent:.2f}%"
    else:
        delta = format_rupiah(change.difference or 0)
    return (
        f"{emoji} {change.label}: Jual "
        f"{change.formatted_new_sell_price} ({delta})"
    )


def generate_summary(
    snapshot: Snapshot,
    comparison: ComparisonResult,
    now: datetime | None = None,
) -> str:
    """Short notification text for chat delivery."""
    stamp = (now or datetime.now()).strftime(_STAMP_FORMAT)

    if comparison.status is ComparisonStatus.IMPOSSIBLE:
        return f"⚠️ {comparison.message}"
    if comparison.is_first_run:
        return (
            "🥇 Gold Price Monitor aktif! "
            f"Memantau harga dari {snapshot.source_id}"
        )
    if not comparison.has_changed:
        return f"✅ Tidak ada perubahan harga emas ({stamp})"

    lines = [f"🔔 Update Harga Emas - {stamp}"]
    lines.extend(_change_line(c) for c in comparison.changes)
    return "\n".join(lines)


def format_payload(
    snapshot: Snapshot,
    comparison: ComparisonResult,
    now: datetime | None = None,
) -> dict[str, Any]:
    """JSON body posted to the notification webhook."""
    moment = now or datetime.now(timezone.utc)
    snapshot_data = snapshot.to_dict()
    return {
        "event": Settings.WEBHOOK_EVENT,
        "timestamp": moment.isoformat(),
        "source": snapshot.source_id,
        "url": snapshot.source_url,
        "updateTime": snapshot.update_time_label,
        **comparison.to_dict(),
        "currentPrices": snapshot_data["records"],
        "buyback": snapshot_data["buyback"],
        "summary": generate_summary(snapshot, comparison, now),
    }
