# src/models/price_record.py

"""Price observation models: raw candidates and merged records."""

from dataclasses import dataclass, field
from decimal import Decimal

from src.utils.currency import format_rupiah, price_per_unit


@dataclass(frozen=True)
class RawCandidate:
    """An unvalidated price observation produced by one strategy.

    ``weight`` is ``None`` for quotes that are not tied to a bar size
    (live quotes, positional text-scan hits).
    """

    label: str
    sell_price: int
    weight: Decimal | None = None
    buy_price: int | None = None
    update_time_label: str | None = None
    origin_strategy: str = ""

    @property
    def price_per_unit(self) -> int:
        """Sell price per gram (or the price itself when unweighted)."""
        return price_per_unit(self.sell_price, self.weight)


RecordKey = tuple[str, str]


def record_key(weight: Decimal | None, label: str) -> RecordKey:
    """Identity of a record inside a snapshot.

    Weighted records are keyed by their normalised weight, unweighted
    ones by label.
    """
    if weight is not None:
        return ("weight", str(weight.normalize()))
    return ("label", label)


@dataclass(frozen=True)
class PriceRecord:
    """A merged, validated price for one bar size (or one live quote)."""

    label: str
    sell_price: int
    weight: Decimal | None = None
    buy_price: int | None = None
    origin_strategy: str = field(default="", compare=False)

    @property
    def key(self) -> RecordKey:
        """Snapshot identity of this record."""
        return record_key(self.weight, self.label)

    @property
    def price_per_unit(self) -> int:
        """Always derived from the current sell price and weight."""
        return price_per_unit(self.sell_price, self.weight)

    @property
    def formatted_sell_price(self) -> str:
        return format_rupiah(self.sell_price)

    @property
    def formatted_buy_price(self) -> str | None:
        if self.buy_price is None:
            return None
        return format_rupiah(self.buy_price)

    @classmethod
    def from_candidate(cls, candidate: RawCandidate) -> "PriceRecord":
        """Promote a validated candidate to a record."""
        return cls(
            label=candidate.label,
            sell_price=candidate.sell_price,
            weight=candidate.weight,
            buy_price=candidate.buy_price,
            origin_strategy=candidate.origin_strategy,
        )


@dataclass(frozen=True)
class BuybackRecord:
    """The singleton repurchase quote (per gram)."""

    label: str
    price: int

    @property
    def formatted_price(self) -> str:
        return format_rupiah(self.price)
