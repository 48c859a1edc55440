import asyncio
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from fincore.domain import ExpenseRecord, IncomeRecord, SavingsRecord
from fincore.metrics import remaining, total_of

REPORT_WINDOWS: Dict[str, Optional[int]] = {
    "3months": 3,
    "6months": 6,
    "1year": 12,
    "all": None,
}


@dataclass(frozen=True)
class PeriodTrend:
    period: str
    income: float
    expenses: float
    savings: float
    net: float


def recent_periods(incomes: Sequence[IncomeRecord], window: str = "6months") -> List[str]:
    """Distinct period labels in the order incomes were recorded, newest last.

    The window keeps only the trailing labels; an unknown window means all.
    """
    labels: List[str] = []
    for income in incomes:
        if income.month not in labels:
            labels.append(income.month)
    size = REPORT_WINDOWS.get(window)
    return labels[-size:] if size else labels


async def period_trends(
    incomes: Sequence[IncomeRecord],
    expenses: Sequence[ExpenseRecord],
    savings: Sequence[SavingsRecord],
    periods: Sequence[str],
) -> Dict[str, PeriodTrend]:
    """Compute income, expenses, savings and net per period label concurrently.

    An expense belongs to the period of the income it was paid from; a savings
    record belongs to the period of its expense.
    """
    async def one_period(period: str) -> tuple[str, PeriodTrend]:
        income_ids = {i.id for i in incomes if i.month == period}
        period_expenses = [e for e in expenses if e.income_id in income_ids]
        expense_ids = {e.id for e in period_expenses}
        period_savings = [s for s in savings if s.expense_id in expense_ids]

        income_total = total_of(i for i in incomes if i.month == period)
        expense_total = total_of(period_expenses)
        await asyncio.sleep(0)  # cooperate
        return period, PeriodTrend(
            period=period,
            income=income_total,
            expenses=expense_total,
            savings=total_of(period_savings),
            net=remaining(income_total, expense_total),
        )

    results = await asyncio.gather(*(one_period(p) for p in periods))
    return {k: v for k, v in results}
