import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable, Iterator

from fincore.domain import ExpenseRecord
from fincore.metrics import percentage_of


@dataclass(frozen=True)
class CategoryShare:
    category: str
    amount: float
    count: int
    percentage: int


def category_breakdown(expenses: Iterable[ExpenseRecord]) -> list[CategoryShare]:
    """Totals per category, biggest first, with whole-number shares of the grand total."""
    amounts: dict[str, float] = defaultdict(float)
    counts: dict[str, int] = defaultdict(int)
    grand_total = 0

    for e in expenses:
        amounts[e.category] += e.amount
        counts[e.category] += 1
        grand_total += e.amount

    shares = [
        CategoryShare(
            category=category,
            amount=amount,
            count=counts[category],
            # half-up rounding, not banker's
            percentage=int(math.floor(percentage_of(amount, grand_total) + 0.5)),
        )
        for category, amount in amounts.items()
    ]
    return sorted(shares, key=lambda s: s.amount, reverse=True)


def lazy_top_categories(expenses: Iterable[ExpenseRecord], k: int) -> Iterator[CategoryShare]:
    for share in category_breakdown(expenses)[: max(0, k)]:
        yield share
