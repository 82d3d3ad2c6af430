# src/extraction/page_metadata.py

"""Buyback quote and update-time text scraped opportunistically from the page."""

import logging
import re

from src.config.settings import Settings
from src.filters.plausibility_validator import PriceBand
from src.models.price_record import BuybackRecord
from src.utils.currency import parse_grouped_number

logger = logging.getLogger("gold_watch.extraction")

_BUYBACK_RE = re.compile(
    r"(?:pembelian\s+kembali|buyback)[^R]{0,200}?"
    r"Rp\.?\s*(\d{1,3}(?:\.\d{3})+|\d+)",
    re.IGNORECASE,
)
# Antam buyback has sat in the 2.8 million range; used only as a fallback
_BUYBACK_FALLBACK_RE = re.compile(r"Rp\s*(2\.8\d{2}\.\d{3})(?!\d|\.\d)")

_MONTHS = (
    "Januari|Februari|Maret|April|Mei|Juni|Juli|Agustus|"
    "September|Oktober|November|Desember"
)
_UPDATE_TIME_RE = re.compile(
    r"Update[^:<]{0,80}:\s*(\d{1,2}\s+\w+\s+\d{4}[^<]{0,40}?pukul\s*[\d.:]+)",
    re.IGNORECASE,
)
_DATE_RE = re.compile(rf"(\d{{1,2}}\s+(?:{_MONTHS})\s+\d{{4}})", re.IGNORECASE)


def extract_buyback(
    markup: str,
    band: PriceBand | None = None,
) -> BuybackRecord | None:
    """Find the per-gram buyback price, or None.

    The labelled form ("Harga pembelian kembali: Rp2.850.000") must fall
    inside *band*; the unlabelled fallback pattern is narrow enough on
    its own.
    """
    if not markup:
        return None
    band = band or PriceBand(
        Settings.BUYBACK_PRICE_MIN, Settings.BUYBACK_PRICE_MAX
    )

    match = _BUYBACK_RE.search(markup)
    if match:
        price = parse_grouped_number(match.group(1))
        if price in band:
            return BuybackRecord(label=Settings.BUYBACK_LABEL, price=price)
        logger.debug("Labelled buyback %r outside band", match.group(1))

    fallback = _BUYBACK_FALLBACK_RE.search(markup)
    if fallback:
        return BuybackRecord(
            label=Settings.BUYBACK_LABEL,
            price=parse_grouped_number(fallback.group(1)),
        )
    return None


def extract_update_time(markup: str) -> str | None:
    """Free-text "last updated" label such as ``28 Januari 2026 pukul 12.30``."""
    if not markup:
        return None
    match = _UPDATE_TIME_RE.search(markup)
    if match:
        return " ".join(match.group(1).split())
    match = _DATE_RE.search(markup)
    if match:
        return " ".join(match.group(1).split())
    return None
