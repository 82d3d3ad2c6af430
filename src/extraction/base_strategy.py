# src/extraction/base_strategy.py

"""Abstract base class for all price extraction strategies."""

import logging
from abc import ABC, abstractmethod
from decimal import Decimal

from bs4 import BeautifulSoup

from src.config.settings import Settings
from src.models.price_record import RawCandidate
from src.utils.currency import format_weight


class StrategyParseError(Exception):
    """A strategy could not make sense of the markup it was given."""


class BaseStrategy(ABC):
    """Turn raw markup into price candidates.

    Subclasses implement :meth:`_extract` and may raise freely;
    :meth:`extract` is the boundary that converts any failure into an
    empty result so one broken heuristic never stops the others.
    """

    name: str = "base"

    def __init__(self) -> None:
        self.logger = logging.getLogger(
            f"gold_watch.strategy.{self.name}"
        )
        self.settings = Settings()

    def extract(self, markup: str) -> list[RawCandidate]:
        """Return candidates found in *markup*; never raises."""
        candidates, _error = self.extract_with_error(markup)
        return candidates

    def extract_with_error(
        self, markup: str,
    ) -> tuple[list[RawCandidate], str | None]:
        """Like :meth:`extract`, also returning the failure message."""
        if not markup or not markup.strip():
            return [], None
        try:
            return self._extract(markup), None
        except StrategyParseError as exc:
            self.logger.debug(
                "[%s] Parse failure: %s", self.name, exc
            )
            return [], str(exc)
        except Exception as exc:
            self.logger.warning(
                "[%s] Extraction failed: %s",
                self.name,
                exc,
                exc_info=True,
            )
            return [], f"{type(exc).__name__}: {exc}"

    @staticmethod
    def _soup(markup: str) -> BeautifulSoup:
        return BeautifulSoup(markup, "lxml")

    def _weighted_label(self, weight: Decimal) -> str:
        return self.settings.RECORD_LABEL_TEMPLATE.format(
            weight=format_weight(weight)
        )

    @abstractmethod
    def _extract(self, markup: str) -> list[RawCandidate]:
        """Strategy-specific parsing; may raise StrategyParseError."""
        ...
