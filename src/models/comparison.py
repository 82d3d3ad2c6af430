# src/models/comparison.py

"""Change classification between two snapshots."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from src.utils.currency import format_weight


class ChangeKind(str, Enum):
    """What kind of difference a ChangeRecord describes."""

    NEW = "NEW"
    PRICE_CHANGE = "PRICE_CHANGE"
    BUYBACK_CHANGE = "BUYBACK_CHANGE"


class Direction(str, Enum):
    """Sign of a price movement."""

    UP = "UP"
    DOWN = "DOWN"


class ComparisonStatus(str, Enum):
    """How a comparison was resolved."""

    COMPARED = "COMPARED"
    FIRST_RUN = "FIRST_RUN"
    IMPOSSIBLE = "IMPOSSIBLE"


@dataclass(frozen=True)
class ChangeRecord:
    """One detected difference between the new and old snapshot."""

    kind: ChangeKind
    label: str
    new_sell_price: int
    formatted_new_sell_price: str
    weight: Decimal | None = None
    old_sell_price: int | None = None
    formatted_old_sell_price: str | None = None
    difference: int | None = None
    difference_percent: float | None = None
    direction: Direction | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "label": self.label,
            "weight": (
                format_weight(self.weight)
                if self.weight is not None
                else None
            ),
            "oldSellPrice": self.old_sell_price,
            "newSellPrice": self.new_sell_price,
            "formattedOldSellPrice": self.formatted_old_sell_price,
            "formattedNewSellPrice": self.formatted_new_sell_price,
            "difference": self.difference,
            "differencePercent": self.difference_percent,
            "direction": self.direction.value if self.direction else None,
        }


@dataclass(frozen=True)
class ComparisonResult:
    """Outcome of diffing a new snapshot against the previous one.

    ``has_changed`` is also true on a first run, when there is no
    baseline to diff against and ``changes`` is empty.
    """

    has_changed: bool
    is_first_run: bool
    message: str
    changes: tuple[ChangeRecord, ...] = field(default_factory=tuple)
    status: ComparisonStatus = ComparisonStatus.COMPARED
    error: str | None = None

    @property
    def change_count(self) -> int:
        return len(self.changes)

    @property
    def is_comparable(self) -> bool:
        return self.status is not ComparisonStatus.IMPOSSIBLE

    def to_dict(self) -> dict[str, Any]:
        return {
            "hasChanged": self.has_changed,
            "isFirstRun": self.is_first_run,
            "changeCount": self.change_count,
            "changes": [c.to_dict() for c in self.changes],
            "message": self.message,
            "status": self.status.value,
            "error": self.error,
        }
