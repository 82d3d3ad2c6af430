# src/extraction/text_scan_strategy.py

"""Last-resort fallback: Rupiah amounts found anywhere in the visible text."""

import re

from src.extraction.base_strategy import BaseStrategy
from src.filters.plausibility_validator import PlausibilityValidator
from src.models.price_record import RawCandidate
from src.utils.currency import parse_grouped_number

_RUPIAH_RE = re.compile(
    r"Rp\.?\s*(\d{1,3}(?:\.\d{3})+)(?!\d|\.\d)", re.IGNORECASE
)

_INVISIBLE_TAGS = ("script", "style", "noscript", "template", "head")


class TextScanStrategy(BaseStrategy):
    """Positional ``Price #n`` labels for the first few plausible amounts.

    Low precision by nature; it exists so that a page without any table
    or metadata still yields something to compare.
    """

    name = "text_scan"

    def __init__(
        self, validator: PlausibilityValidator | None = None,
    ) -> None:
        super().__init__()
        self.validator = validator or PlausibilityValidator()

    def _visible_text(self, markup: str) -> str:
        soup = self._soup(markup)
        for tag in soup.find_all(_INVISIBLE_TAGS):
            tag.decompose()
        return soup.get_text(" ", strip=True)

    def _extract(self, markup: str) -> list[RawCandidate]:
        text = self._visible_text(markup)
        limit = self.settings.MAX_TEXT_SCAN_RESULTS

        seen: set[int] = set()
        candidates: list[RawCandidate] = []
        for match in _RUPIAH_RE.finditer(text):
            price = parse_grouped_number(match.group(1))
            if price in seen:
                continue
            if price not in self.validator.unweighted_band:
                continue
            seen.add(price)
            candidates.append(
                RawCandidate(
                    label=f"Price #{len(candidates) + 1}",
                    sell_price=price,
                    weight=None,
                    origin_strategy=self.name,
                )
            )
            if len(candidates) >= limit:
                break
        return candidates
