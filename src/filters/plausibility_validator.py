# src/filters/plausibility_validator.py

"""Plausibility filtering of price candidates."""

import logging
from dataclasses import dataclass
from decimal import Decimal

from src.config.settings import Settings
from src.models.price_record import RawCandidate

logger = logging.getLogger("gold_watch.filters")


@dataclass(frozen=True)
class PriceBand:
    """Closed numeric interval ``[minimum, maximum]``."""

    minimum: int
    maximum: int

    def __contains__(self, value: object) -> bool:
        if not isinstance(value, (int, float, Decimal)):
            return False
        return self.minimum <= value <= self.maximum


def default_weighted_band() -> PriceBand:
    return PriceBand(
        Settings.PRICE_PER_GRAM_MIN, Settings.PRICE_PER_GRAM_MAX
    )


def default_unweighted_band() -> PriceBand:
    return PriceBand(
        Settings.UNWEIGHTED_PRICE_MIN, Settings.UNWEIGHTED_PRICE_MAX
    )


class PlausibilityValidator:
    """Accept candidates whose price per gram lies inside a band.

    Weighted candidates are checked on ``sell_price / weight`` against
    the per-gram band. Unweighted candidates (live quotes, text-scan
    hits) have no weight to divide by and are checked on the raw sell
    price against a separate, looser band.
    """

    def __init__(
        self,
        weighted_band: PriceBand | None = None,
        unweighted_band: PriceBand | None = None,
    ) -> None:
        self.weighted_band = weighted_band or default_weighted_band()
        self.unweighted_band = (
            unweighted_band or default_unweighted_band()
        )

    def accept(self, candidate: RawCandidate) -> bool:
        """Return True if the candidate's unit price is plausible."""
        if candidate.sell_price < 0:
            return False
        if candidate.weight is None:
            return candidate.sell_price in self.unweighted_band
        if candidate.weight <= 0:
            return False
        return (
            candidate.sell_price / candidate.weight
        ) in self.weighted_band

    def validate(
        self,
        candidates: list[RawCandidate],
    ) -> tuple[list[RawCandidate], int]:
        """Drop implausible candidates.

        Returns the accepted candidates and the count of rejections.
        """
        kept: list[RawCandidate] = []
        rejected = 0
        for candidate in candidates:
            if self.accept(candidate):
                kept.append(candidate)
            else:
                logger.debug(
                    "Rejected %s from %s (sell=%d, weight=%s)",
                    candidate.label,
                    candidate.origin_strategy,
                    candidate.sell_price,
                    candidate.weight,
                )
                rejected += 1
        return kept, rejected
