# src/extraction/embedded_state_strategy.py

"""Prices from framework state blobs (__NEXT_DATA__, __NUXT__, RSC pushes)."""

import json
import re
from typing import Any, cast

from src.extraction.base_strategy import BaseStrategy, StrategyParseError
from src.models.price_record import RawCandidate

# Object keys that hold the current quote
_PRICE_OBJECT_RE = re.compile(
    r'\\*"(currentPrice|current_price|hargaSekarang|goldPrice)\\*"'
    r"\s*:\s*\{"
)

# Markers of a serialised framework state in the page
_STATE_MARKERS = (
    "__NEXT_DATA__",
    "__NUXT__",
    "self.__next_f",
    "__INITIAL_STATE__",
)

_SELL_FIELD_RE = re.compile(
    r'\\*"(?:sell|jual)\\*"\s*:\s*\\*"?(\d+(?:\.\d+)?)'
)
_BUY_FIELD_RE = re.compile(
    r'\\*"(?:buy|beli)\\*"\s*:\s*\\*"?(\d+(?:\.\d+)?)'
)

_SELL_KEYS = ("sell", "jual", "mid")
_BUY_KEYS = ("buy", "beli")

# Enough characters to hold a small {buy, sell, mid, ...} object
_OBJECT_WINDOW = 4000


def _unescape(fragment: str) -> str:
    """Undo one level of string escaping (``\\"`` -> ``"``)."""
    return fragment.replace('\\\\"', '"').replace('\\"', '"')


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str) and value.strip():
        try:
            return int(float(value.strip()))
        except ValueError:
            return None
    return None


class EmbeddedStateStrategy(BaseStrategy):
    """Read the live buy/sell quote from serialised app state.

    The state is often embedded as a JSON string inside a script, so
    quotes arrive escaped. The object is unescaped and decoded with
    ``raw_decode``; when that fails the isolated ``"sell":<int>`` and
    ``"buy":<int>`` fields are read directly instead.
    """

    name = "embedded"

    def _decode_object(
        self, markup: str, match: re.Match[str],
    ) -> dict[str, Any]:
        brace = match.end() - 1
        fragment = markup[brace:brace + _OBJECT_WINDOW]
        if '\\"' in match.group(0) or '\\"' in fragment[:200]:
            fragment = _unescape(fragment)
        try:
            obj, _end = json.JSONDecoder().raw_decode(fragment)
        except json.JSONDecodeError as exc:
            raise StrategyParseError(
                f"Unparseable {match.group(1)} object: {exc.msg}"
            ) from exc
        if not isinstance(obj, dict):
            raise StrategyParseError(
                f"{match.group(1)} is not an object"
            )
        return cast(dict[str, Any], obj)

    def _candidate(
        self, sell: int, buy: int | None,
    ) -> RawCandidate:
        return RawCandidate(
            label=self.settings.LIVE_PRICE_LABEL,
            sell_price=sell,
            weight=None,
            buy_price=buy,
            origin_strategy=self.name,
        )

    def _from_objects(self, markup: str) -> tuple[list[RawCandidate], int]:
        candidates: list[RawCandidate] = []
        failures = 0
        for match in _PRICE_OBJECT_RE.finditer(markup):
            try:
                obj = self._decode_object(markup, match)
            except StrategyParseError as exc:
                self.logger.debug("[%s] %s", self.name, exc)
                failures += 1
                continue
            sell = next(
                (
                    v for v in (_as_int(obj.get(k)) for k in _SELL_KEYS)
                    if v is not None
                ),
                None,
            )
            if sell is None:
                failures += 1
                continue
            buy = next(
                (
                    v for v in (_as_int(obj.get(k)) for k in _BUY_KEYS)
                    if v is not None
                ),
                None,
            )
            candidates.append(self._candidate(sell, buy))
            # First decodable quote wins
            break
        return candidates, failures

    def _from_fields(self, markup: str) -> list[RawCandidate]:
        sell_match = _SELL_FIELD_RE.search(markup)
        if not sell_match:
            return []
        buy_match = _BUY_FIELD_RE.search(markup)
        sell = int(float(sell_match.group(1)))
        buy = int(float(buy_match.group(1))) if buy_match else None
        return [self._candidate(sell, buy)]

    def _extract(self, markup: str) -> list[RawCandidate]:
        candidates, failures = self._from_objects(markup)
        if candidates:
            return candidates

        has_state = any(marker in markup for marker in _STATE_MARKERS)
        if not failures and not has_state:
            return []

        fallback = self._from_fields(markup)
        if fallback:
            self.logger.debug(
                "[%s] Object decode failed, used direct fields",
                self.name,
            )
            return fallback
        if failures:
            raise StrategyParseError(
                f"{failures} price object(s) found but none usable"
            )
        return []
