# src/extraction/table_heuristic_strategy.py

"""Prices from the per-gram table: weight token followed by a grouped numeral."""

import re
from decimal import Decimal

from src.extraction.base_strategy import BaseStrategy
from src.filters.plausibility_validator import PlausibilityValidator
from src.models.price_record import RawCandidate
from src.utils.currency import parse_grouped_number, parse_weight

# Grouped numeral with two or three ``.000`` groups, not followed by more
_PRICE_PATTERN = r"(\d{1,3}(?:\.\d{3}){2,3})(?!\d|\.\d)"

# A number not embedded in a larger numeral
_WEIGHT_START = r"(?<![\d.,])"
_WEIGHT_END = r"(?!\d|[.,]\d)"

_GRAM_UNIT = r"\s*(?:gram|gr|g)\b"


def _weight_token(weight: Decimal) -> str:
    """Regex for a known weight, accepting ``0,5`` as well as ``0.5``."""
    text = format(weight.normalize(), "f")
    return re.escape(text).replace(r"\.", "[.,]")


class TableHeuristicStrategy(BaseStrategy):
    """Scan for each known bar size followed by its price.

    Every match is checked against the per-gram plausibility band.
    When a weight matches several times the largest valid price is
    kept: a regex that stops early on a digit run can only produce a
    number smaller than the real one.
    """

    name = "table"

    def __init__(
        self, validator: PlausibilityValidator | None = None,
    ) -> None:
        super().__init__()
        self.validator = validator or PlausibilityValidator()
        window = self.settings.TABLE_WINDOW_CHARS
        self._known_patterns: list[tuple[Decimal, re.Pattern[str]]] = [
            (
                weight,
                re.compile(
                    _WEIGHT_START
                    + _weight_token(weight)
                    + _WEIGHT_END
                    + rf"[^\d]{{0,{window}}}?"
                    + _PRICE_PATTERN,
                    re.IGNORECASE,
                ),
            )
            for weight in self.settings.KNOWN_WEIGHTS
        ]
        self._unit_pattern = re.compile(
            _WEIGHT_START
            + r"(\d+(?:[.,]\d+)?)"
            + _GRAM_UNIT
            + rf"[^\d]{{0,{window}}}?"
            + _PRICE_PATTERN,
            re.IGNORECASE,
        )

    def _offer(
        self,
        found: dict[Decimal, RawCandidate],
        weight: Decimal,
        price_text: str,
    ) -> None:
        """Record a match if plausible and larger than what we have."""
        candidate = RawCandidate(
            label=self._weighted_label(weight),
            sell_price=parse_grouped_number(price_text),
            weight=weight,
            origin_strategy=self.name,
        )
        if not self.validator.accept(candidate):
            return
        current = found.get(weight)
        if current is None or candidate.sell_price > current.sell_price:
            found[weight] = candidate

    def _extract(self, markup: str) -> list[RawCandidate]:
        found: dict[Decimal, RawCandidate] = {}

        for weight, pattern in self._known_patterns:
            for match in pattern.finditer(markup):
                self._offer(found, weight, match.group(1))

        # Sizes outside the known list, written as "<n> gram"
        for match in self._unit_pattern.finditer(markup):
            try:
                weight = parse_weight(match.group(1))
            except ValueError:
                continue
            self._offer(found, weight, match.group(2))

        return sorted(
            found.values(),
            key=lambda c: c.weight or Decimal(0),
            reverse=True,
        )
