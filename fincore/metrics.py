"""Derived figures shown across the dashboard views.

Everything here is a pure function of records already in memory. Nothing
raises: missing or zero inputs fall back to 0 or to the lowest tier.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from fincore.domain import (
    BudgetRecord,
    ExpenseDestination,
    ExpenseRecord,
    GoalRecord,
    GoalStatus,
    IncomeRecord,
    InsightKind,
    ProgressStatus,
    SavingsRecord,
)

OVER_THRESHOLD = 100
NEAR_LIMIT_THRESHOLD = 80

EXPENSE_ALERT_RATIO = 90
HEALTHY_SAVINGS_RATE = 20
CONTROLLED_EXPENSE_RATIO = 70

SAVINGS_KEYWORD = "tabungan"

MS_PER_DAY = 86_400_000


@dataclass(frozen=True)
class Insight:
    kind: InsightKind
    title: str
    message: str


@dataclass(frozen=True)
class BudgetLine:
    percentage: float
    remaining: float
    display_percentage: float
    status: ProgressStatus


@dataclass(frozen=True)
class BudgetSummary:
    total_budget: float
    total_spent: float
    remaining: float
    progress: float
    status: ProgressStatus


@dataclass(frozen=True)
class GoalSummary:
    total_target: float
    total_current: float
    progress: float
    active_count: int
    completed_count: int


@dataclass(frozen=True)
class FinancialOverview:
    total_income: float
    total_expenses: float
    total_savings: float
    remaining_budget: float
    expense_ratio: float
    savings_rate: float
    insight: Insight


def _amount(record: Any, field: str) -> float:
    if isinstance(record, dict):
        value = record.get(field)
    else:
        value = getattr(record, field, None)
    if value is None or isinstance(value, bool):
        return 0
    if not isinstance(value, (int, float)):
        try:
            value = float(value)
        except (TypeError, ValueError):
            return 0
    if isinstance(value, float) and math.isnan(value):
        return 0
    return value


def total_of(records: Iterable[Any], amount_field: str = "amount") -> float:
    """Sum ``amount_field`` over records (dataclasses or mappings).

    Missing, non-numeric and NaN amounts count as 0; an empty sequence sums to 0.
    """
    return sum((_amount(r, amount_field) for r in records), 0)


def percentage_of(numerator: float, denominator: float) -> float:
    if denominator > 0:
        return numerator * 100 / denominator
    return 0


def remaining(total: float, spent: float) -> float:
    # negative means over budget, callers decide what to do with the sign
    return total - spent


def clamp_percentage(percentage: float) -> float:
    return max(0, min(100, percentage))


def classify_progress(percentage: float, goal: bool = False) -> ProgressStatus:
    """Map a percentage onto a progress tier.

    Lower bounds are inclusive: 80 is near the limit, 100 is over. For goals
    the top tier reads as completed instead of over.
    """
    if percentage >= OVER_THRESHOLD:
        return ProgressStatus.COMPLETED if goal else ProgressStatus.OVER
    if percentage >= NEAR_LIMIT_THRESHOLD:
        return ProgressStatus.NEAR_LIMIT
    return ProgressStatus.ON_TRACK


def classify_financial_health(expense_ratio: float, savings_rate: float) -> Insight:
    """First matching rule wins; the expense ratio is checked before savings."""
    if expense_ratio >= EXPENSE_ALERT_RATIO:
        return Insight(
            InsightKind.WARNING,
            "Budget Alert!",
            "You've spent 90% of your income. Consider reducing non-essential expenses.",
        )
    if savings_rate >= HEALTHY_SAVINGS_RATE:
        return Insight(
            InsightKind.SUCCESS,
            "Excellent Savings!",
            "You're saving above the recommended 20% rate. Keep up the great work!",
        )
    if expense_ratio <= CONTROLLED_EXPENSE_RATIO:
        return Insight(
            InsightKind.INFO,
            "Great Control!",
            "Your spending is well controlled. Consider increasing your savings rate.",
        )
    return Insight(
        InsightKind.NEUTRAL,
        "Room for Improvement",
        "Try to reduce expenses and increase your savings for better financial health.",
    )


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def days_remaining(target_date_iso: str, now: Optional[datetime] = None) -> int:
    """Whole days until the target date, rounded up; negative when overdue.

    A bare date means midnight UTC of that day, so a target of today gives 0.
    An unparseable target also gives 0.
    """
    try:
        # fromisoformat only accepts a trailing Z from 3.11 on
        if target_date_iso.endswith("Z"):
            target_date_iso = target_date_iso[:-1] + "+00:00"
        target = _as_utc(datetime.fromisoformat(target_date_iso))
    except (AttributeError, TypeError, ValueError):
        return 0
    now = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    diff_ms = (target - now).total_seconds() * 1000
    return int(math.ceil(diff_ms / MS_PER_DAY))


def describe_days_remaining(days: int) -> str:
    if days < 0:
        return f"{abs(days)} days overdue"
    if days == 0:
        return "today"
    return f"{days} days left"


def categorize_expense(category: str) -> ExpenseDestination:
    if SAVINGS_KEYWORD in (category or "").lower():
        return ExpenseDestination.SAVINGS
    return ExpenseDestination.EXPENSE


def goal_progress(current: float, target: float) -> float:
    return min(percentage_of(current, target), 100)


def budget_line(budget: BudgetRecord) -> BudgetLine:
    pct = percentage_of(budget.spent_amount, budget.budget_amount)
    return BudgetLine(
        percentage=pct,
        remaining=remaining(budget.budget_amount, budget.spent_amount),
        display_percentage=clamp_percentage(pct),
        status=classify_progress(pct),
    )


def budget_summary(budgets: Iterable[BudgetRecord]) -> BudgetSummary:
    budgets = tuple(budgets)
    total_budget = total_of(budgets, "budget_amount")
    total_spent = total_of(budgets, "spent_amount")
    progress = percentage_of(total_spent, total_budget)
    return BudgetSummary(
        total_budget=total_budget,
        total_spent=total_spent,
        remaining=remaining(total_budget, total_spent),
        progress=progress,
        status=classify_progress(progress),
    )


def goal_summary(goals: Iterable[GoalRecord]) -> GoalSummary:
    goals = tuple(goals)
    active = tuple(g for g in goals if g.status == GoalStatus.ACTIVE)
    completed = tuple(g for g in goals if g.status == GoalStatus.COMPLETED)
    total_target = total_of(active, "target_amount")
    total_current = total_of(active, "current_amount")
    return GoalSummary(
        total_target=total_target,
        total_current=total_current,
        progress=percentage_of(total_current, total_target),
        active_count=len(active),
        completed_count=len(completed),
    )


def financial_overview(
    incomes: Iterable[IncomeRecord],
    expenses: Iterable[ExpenseRecord],
    savings: Iterable[SavingsRecord],
) -> FinancialOverview:
    """Overview cards. Only savings whose expense still exists are counted."""
    expenses = tuple(expenses)
    expense_ids = {e.id for e in expenses}
    total_income = total_of(incomes)
    total_expenses = total_of(expenses)
    total_savings = total_of(s for s in savings if s.expense_id in expense_ids)
    expense_ratio = percentage_of(total_expenses, total_income)
    savings_rate = percentage_of(total_savings, total_income)
    return FinancialOverview(
        total_income=total_income,
        total_expenses=total_expenses,
        total_savings=total_savings,
        remaining_budget=remaining(total_income, total_expenses),
        expense_ratio=expense_ratio,
        savings_rate=savings_rate,
        insight=classify_financial_health(expense_ratio, savings_rate),
    )
