# src/filters/candidate_merger.py

"""Cross-strategy merge of validated candidates into snapshot records."""

import logging
from collections.abc import Mapping, Sequence
from decimal import Decimal

from src.config.settings import Settings
from src.models.price_record import PriceRecord, RawCandidate, RecordKey

logger = logging.getLogger("gold_watch.filters")


class CandidateMerger:
    """Deduplicate candidates from all strategies by record identity.

    Precedence rules:
    1. Strategies are consulted in the fixed priority order, never in
       the order they finished. The first strategy to claim a key wins.
    2. Within a max-price strategy (the table scan) a later, larger
       price for the same weight replaces the earlier one.
    3. An unweighted candidate whose sell price equals any record
       already kept is dropped.
    """

    MAX_PRICE_STRATEGIES: frozenset[str] = frozenset({"table"})

    def __init__(self, priority: Sequence[str] | None = None) -> None:
        self.priority: list[str] = list(
            priority or Settings.STRATEGY_PRIORITY
        )

    def _ordered_names(self, batches: Mapping[str, object]) -> list[str]:
        known = [name for name in self.priority if name in batches]
        extra = sorted(name for name in batches if name not in self.priority)
        return known + extra

    def merge(
        self,
        batches: Mapping[str, Sequence[RawCandidate]],
    ) -> tuple[list[PriceRecord], int]:
        """Merge per-strategy candidate lists.

        Returns the merged records (weighted by descending weight, then
        unweighted in merge order) and the number of candidates dropped
        as duplicates.
        """
        kept: dict[RecordKey, tuple[RawCandidate, str]] = {}
        kept_prices: set[int] = set()
        dropped = 0

        for name in self._ordered_names(batches):
            for candidate in batches[name]:
                record = PriceRecord.from_candidate(candidate)
                key = record.key

                if key in kept:
                    existing, owner = kept[key]
                    if (
                        owner == name
                        and name in self.MAX_PRICE_STRATEGIES
                        and candidate.sell_price > existing.sell_price
                    ):
                        kept[key] = (candidate, name)
                        kept_prices = {
                            c.sell_price for c, _ in kept.values()
                        }
                    dropped += 1
                    continue

                if (
                    candidate.weight is None
                    and candidate.sell_price in kept_prices
                ):
                    dropped += 1
                    continue

                kept[key] = (candidate, name)
                kept_prices.add(candidate.sell_price)

        weighted = sorted(
            (c for c, _ in kept.values() if c.weight is not None),
            key=lambda c: c.weight or Decimal(0),
            reverse=True,
        )
        unweighted = [c for c, _ in kept.values() if c.weight is None]
        records = [
            PriceRecord.from_candidate(c) for c in weighted + unweighted
        ]

        if dropped:
            logger.debug(
                "Merge dropped %d duplicate candidates", dropped
            )
        return records, dropped
