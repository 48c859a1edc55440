from typing import Callable, Iterable, Optional

from fincore.domain import ExpenseRecord
from fincore.functional import pipe

ALL_CATEGORIES = "all"


def by_category(category: str) -> Callable[[ExpenseRecord], bool]:
    def _filter(e: ExpenseRecord) -> bool:
        return category == ALL_CATEGORIES or e.category == category

    return _filter


def by_search(term: str) -> Callable[[ExpenseRecord], bool]:
    needle = (term or "").lower()

    def _filter(e: ExpenseRecord) -> bool:
        if not needle:
            return True
        return needle in e.category.lower() or needle in (e.description or "").lower()

    return _filter


def by_date_range(start: Optional[str], end: Optional[str]) -> Callable[[ExpenseRecord], bool]:
    # ISO dates compare correctly as strings; both bounds inclusive
    def _filter(e: ExpenseRecord) -> bool:
        day = e.date[:10]
        if start and day < start:
            return False
        if end and day > end:
            return False
        return True

    return _filter


def filter_expenses(
    expenses: Iterable[ExpenseRecord],
    search: str = "",
    category: str = ALL_CATEGORIES,
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> tuple[ExpenseRecord, ...]:
    return pipe(
        expenses,
        lambda es: filter(by_search(search), es),
        lambda es: filter(by_category(category), es),
        lambda es: filter(by_date_range(start, end), es),
        tuple,
    )


def unique_categories(expenses: Iterable[ExpenseRecord]) -> list[str]:
    return sorted({e.category for e in expenses})


def sort_by_date(expenses: Iterable[ExpenseRecord], descending: bool = True) -> tuple[ExpenseRecord, ...]:
    return tuple(sorted(expenses, key=lambda e: e.date, reverse=descending))
