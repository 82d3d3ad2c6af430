# src/services/snapshot_assembler.py

"""Wrap merged records and page metadata into a Snapshot."""

from collections.abc import Sequence
from datetime import datetime, timezone

from src.config.settings import Settings
from src.models.price_record import BuybackRecord, PriceRecord
from src.models.snapshot import Snapshot


class SnapshotAssembler:
    """Builds the immutable Snapshot for one extraction run."""

    def __init__(
        self,
        source_id: str | None = None,
        source_url: str | None = None,
    ) -> None:
        self.source_id = source_id or Settings.SOURCE_ID
        self.source_url = source_url or Settings.SOURCE_URL

    def assemble(
        self,
        records: Sequence[PriceRecord],
        captured_at: datetime | None = None,
        update_time_label: str | None = None,
        buyback: BuybackRecord | None = None,
    ) -> Snapshot:
        return Snapshot(
            source_id=self.source_id,
            source_url=self.source_url,
            captured_at=captured_at or datetime.now(timezone.utc),
            records=tuple(records),
            update_time_label=update_time_label,
            buyback=buyback,
        )
