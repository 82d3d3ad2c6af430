# src/services/extraction_pipeline.py

"""Runs every strategy over the markup and assembles the snapshot."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from src.extraction.base_strategy import BaseStrategy
from src.extraction.embedded_state_strategy import EmbeddedStateStrategy
from src.extraction.page_metadata import extract_buyback, extract_update_time
from src.extraction.structured_data_strategy import StructuredDataStrategy
from src.extraction.table_heuristic_strategy import TableHeuristicStrategy
from src.extraction.text_scan_strategy import TextScanStrategy
from src.filters.candidate_merger import CandidateMerger
from src.filters.plausibility_validator import PlausibilityValidator
from src.models.price_record import RawCandidate
from src.models.snapshot import Snapshot
from src.services.snapshot_assembler import SnapshotAssembler

logger = logging.getLogger("gold_watch.pipeline")


class ExtractionStatus(str, Enum):
    """Whether the run produced any records."""

    OK = "OK"
    EXHAUSTED = "EXHAUSTED"


@dataclass(frozen=True)
class ExtractionOutcome:
    """Tagged result of one extraction run.

    ``snapshot`` is only set when ``status`` is OK. An EXHAUSTED outcome
    means every strategy came back empty, which callers should treat as
    a probable page-layout change rather than a page with no prices.
    """

    status: ExtractionStatus
    snapshot: Snapshot | None = None
    candidate_counts: dict[str, int] = field(
        default_factory=lambda: dict[str, int]()
    )
    failures: dict[str, str] = field(
        default_factory=lambda: dict[str, str]()
    )
    rejected_count: int = 0
    duplicate_count: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is ExtractionStatus.OK


def default_strategies(
    validator: PlausibilityValidator,
) -> list[BaseStrategy]:
    """The four strategies in merge-priority order."""
    return [
        StructuredDataStrategy(),
        EmbeddedStateStrategy(),
        TableHeuristicStrategy(validator),
        TextScanStrategy(validator),
    ]


class ExtractionPipeline:
    """markup -> strategies -> validator -> merger -> snapshot."""

    def __init__(
        self,
        strategies: Sequence[BaseStrategy] | None = None,
        validator: PlausibilityValidator | None = None,
        merger: CandidateMerger | None = None,
        assembler: SnapshotAssembler | None = None,
    ) -> None:
        self.validator = validator or PlausibilityValidator()
        self.strategies: list[BaseStrategy] = list(
            strategies or default_strategies(self.validator)
        )
        self.merger = merger or CandidateMerger()
        self.assembler = assembler or SnapshotAssembler()

    # ── Collection ───────────────────────────────────────

    def _collect(
        self, markup: str,
    ) -> dict[str, tuple[list[RawCandidate], str | None]]:
        return {
            s.name: s.extract_with_error(markup)
            for s in self.strategies
        }

    async def _collect_async(
        self, markup: str,
    ) -> dict[str, tuple[list[RawCandidate], str | None]]:
        """Run strategies on worker threads; completion order is irrelevant."""
        results = await asyncio.gather(
            *(
                asyncio.to_thread(s.extract_with_error, markup)
                for s in self.strategies
            )
        )
        return {
            s.name: result
            for s, result in zip(self.strategies, results)
        }

    # ── Assembly ─────────────────────────────────────────

    def _finish(
        self,
        markup: str,
        raw: dict[str, tuple[list[RawCandidate], str | None]],
        captured_at: datetime | None,
    ) -> ExtractionOutcome:
        counts: dict[str, int] = {}
        failures: dict[str, str] = {}
        validated: dict[str, list[RawCandidate]] = {}
        rejected = 0

        for name, (candidates, error) in raw.items():
            counts[name] = len(candidates)
            if error:
                failures[name] = error
            kept, dropped = self.validator.validate(candidates)
            validated[name] = kept
            rejected += dropped

        records, duplicates = self.merger.merge(validated)

        if not records:
            logger.warning(
                "No prices extracted (%d strategy failures)",
                len(failures),
            )
            return ExtractionOutcome(
                status=ExtractionStatus.EXHAUSTED,
                candidate_counts=counts,
                failures=failures,
                rejected_count=rejected,
                duplicate_count=duplicates,
                error="All extraction strategies returned no prices",
            )

        update_label = self._first_update_label(validated)
        if update_label is None:
            update_label = extract_update_time(markup)

        snapshot = self.assembler.assemble(
            records,
            captured_at=captured_at,
            update_time_label=update_label,
            buyback=extract_buyback(markup),
        )
        logger.info(
            "Extracted %d records (%d rejected, %d duplicates)",
            len(records),
            rejected,
            duplicates,
        )
        return ExtractionOutcome(
            status=ExtractionStatus.OK,
            snapshot=snapshot,
            candidate_counts=counts,
            failures=failures,
            rejected_count=rejected,
            duplicate_count=duplicates,
        )

    def _first_update_label(
        self, validated: dict[str, list[RawCandidate]],
    ) -> str | None:
        for name in self.merger.priority:
            for candidate in validated.get(name, []):
                if candidate.update_time_label:
                    return candidate.update_time_label
        return None

    # ── Public API ───────────────────────────────────────

    def run(
        self,
        markup: str,
        captured_at: datetime | None = None,
    ) -> ExtractionOutcome:
        """Extract a snapshot from *markup* sequentially."""
        return self._finish(markup, self._collect(markup), captured_at)

    async def run_async(
        self,
        markup: str,
        captured_at: datetime | None = None,
    ) -> ExtractionOutcome:
        """Same as :meth:`run` with strategies executed concurrently."""
        raw = await self._collect_async(markup)
        return self._finish(markup, raw, captured_at)
