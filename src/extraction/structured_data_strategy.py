# src/extraction/structured_data_strategy.py

"""Prices from schema.org JSON-LD blocks (Product / Offer)."""

import json
import re
from decimal import Decimal, InvalidOperation
from typing import Any, cast

from src.extraction.base_strategy import BaseStrategy, StrategyParseError
from src.models.price_record import RawCandidate
from src.utils.currency import parse_grouped_number, parse_weight

_WEIGHT_IN_NAME_RE = re.compile(
    r"(\d+(?:[.,]\d+)?)\s*(?:gram|gr|g)\b", re.IGNORECASE
)
_PLAIN_DECIMAL_RE = re.compile(r"^\d+(?:\.\d{1,2})?$")

_PRODUCT_TYPES = {"product", "individualproduct", "productmodel"}
_OFFER_TYPES = {"offer", "aggregateoffer"}


def _types_of(node: dict[str, Any]) -> set[str]:
    raw = node.get("@type")
    if isinstance(raw, str):
        return {raw.lower()}
    if isinstance(raw, list):
        return {str(t).lower() for t in raw}
    return set()


def _iter_nodes(data: Any) -> list[dict[str, Any]]:
    """Flatten top-level lists and ``@graph`` containers."""
    nodes: list[dict[str, Any]] = []
    stack: list[Any] = [data]
    while stack:
        item = stack.pop(0)
        if isinstance(item, list):
            stack.extend(cast(list[Any], item))
        elif isinstance(item, dict):
            node = cast(dict[str, Any], item)
            graph = node.get("@graph")
            if isinstance(graph, list):
                stack.extend(cast(list[Any], graph))
            else:
                nodes.append(node)
    return nodes


def _parse_price(raw: Any) -> int | None:
    """Schema prices are plain decimals, but some sites emit id-ID text."""
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, (int, float)):
        return int(round(raw))
    text = str(raw).strip()
    if not text:
        return None
    if _PLAIN_DECIMAL_RE.match(text):
        try:
            return int(Decimal(text))
        except InvalidOperation:
            return None
    try:
        return parse_grouped_number(text.split(",")[0])
    except ValueError:
        return None


def _weight_from_text(text: str) -> Decimal | None:
    match = _WEIGHT_IN_NAME_RE.search(text)
    if not match:
        return None
    try:
        return parse_weight(match.group(1))
    except ValueError:
        return None


def _parse_schema_weight(node: dict[str, Any]) -> Decimal | None:
    """Weight from a QuantitativeValue, a weight string, or the name."""
    weight = node.get("weight")
    if isinstance(weight, dict):
        quantity = cast(dict[str, Any], weight)
        value = quantity.get("value")
        unit = str(quantity.get("unitCode", "GRM")).upper()
        if value is not None and unit in {"GRM", "G", "GRAM"}:
            try:
                return parse_weight(str(value))
            except ValueError:
                return None
    elif isinstance(weight, str):
        parsed = _weight_from_text(weight)
        if parsed is not None:
            return parsed
    return _weight_from_text(str(node.get("name") or ""))


class StructuredDataStrategy(BaseStrategy):
    """Highest-confidence source: explicit price + currency metadata."""

    name = "structured"
    CURRENCY = "IDR"

    def _load_blocks(self, markup: str) -> list[Any]:
        soup = self._soup(markup)
        scripts = soup.find_all(
            "script", attrs={"type": "application/ld+json"}
        )
        blocks: list[Any] = []
        failures = 0
        for script in scripts:
            text = script.string or script.get_text()
            if not text or not text.strip():
                continue
            try:
                blocks.append(json.loads(text))
            except json.JSONDecodeError:
                failures += 1
        if failures and not blocks:
            raise StrategyParseError(
                f"{failures} JSON-LD block(s), none parseable"
            )
        return blocks

    def _offers_of(self, node: dict[str, Any]) -> list[dict[str, Any]]:
        if _types_of(node) & _OFFER_TYPES:
            return [node]
        raw = node.get("offers")
        if isinstance(raw, dict):
            return [cast(dict[str, Any], raw)]
        if isinstance(raw, list):
            return [
                cast(dict[str, Any], o)
                for o in cast(list[Any], raw)
                if isinstance(o, dict)
            ]
        return []

    def _candidate_from(
        self, node: dict[str, Any],
    ) -> RawCandidate | None:
        for offer in self._offers_of(node):
            currency = str(offer.get("priceCurrency", "")).upper()
            if currency != self.CURRENCY:
                continue
            price = _parse_price(
                offer.get("price", offer.get("lowPrice"))
            )
            if price is None:
                continue

            weight = _parse_schema_weight(node)
            if weight is None and node is not offer:
                weight = _parse_schema_weight(offer)
            label = (
                self._weighted_label(weight)
                if weight is not None
                else str(node.get("name") or "Offer")
            )
            modified = node.get("dateModified") or offer.get("dateModified")
            return RawCandidate(
                label=label,
                sell_price=price,
                weight=weight,
                update_time_label=(
                    str(modified) if modified else None
                ),
                origin_strategy=self.name,
            )
        return None

    def _extract(self, markup: str) -> list[RawCandidate]:
        candidates: list[RawCandidate] = []
        for block in self._load_blocks(markup):
            for node in _iter_nodes(block):
                types = _types_of(node)
                if not types & (_PRODUCT_TYPES | _OFFER_TYPES):
                    continue
                candidate = self._candidate_from(node)
                if candidate is not None:
                    candidates.append(candidate)
        return candidates
