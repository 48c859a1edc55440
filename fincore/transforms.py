import json
import logging
import random
from typing import Optional, Tuple, TypeVar
from uuid import uuid4

from fincore.domain import (
    BudgetPeriod,
    BudgetRecord,
    ExpenseDestination,
    ExpenseRecord,
    GoalCategory,
    GoalPriority,
    GoalRecord,
    GoalStatus,
    IncomeRecord,
    SavingsRecord,
)
from fincore.metrics import categorize_expense

logger = logging.getLogger(__name__)

R = TypeVar("R")

BUDGET_COLORS = ("#ef4444", "#3b82f6", "#8b5cf6", "#f59e0b", "#10b981", "#f97316")


def _budget(raw: dict) -> BudgetRecord:
    return BudgetRecord(**{**raw, "period": BudgetPeriod(raw["period"])})


def _goal(raw: dict) -> GoalRecord:
    return GoalRecord(**{
        **raw,
        "category": GoalCategory(raw["category"]),
        "priority": GoalPriority(raw["priority"]),
        "status": GoalStatus(raw["status"]),
    })


def load_seed(
    path: str,
) -> Tuple[
    Tuple[IncomeRecord, ...],
    Tuple[ExpenseRecord, ...],
    Tuple[SavingsRecord, ...],
    Tuple[BudgetRecord, ...],
    Tuple[GoalRecord, ...],
]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    incomes = tuple(IncomeRecord(**i) for i in data.get("incomes", []))
    expenses = tuple(ExpenseRecord(**e) for e in data.get("expenses", []))
    savings = tuple(SavingsRecord(**s) for s in data.get("savings", []))
    budgets = tuple(_budget(b) for b in data.get("budgets", []))
    goals = tuple(_goal(g) for g in data.get("goals", []))

    logger.info(
        "Loaded seed %s: %d incomes, %d expenses, %d savings, %d budgets, %d goals",
        path, len(incomes), len(expenses), len(savings), len(budgets), len(goals),
    )
    return incomes, expenses, savings, budgets, goals


def add_record(records: Tuple[R, ...], record: R) -> Tuple[R, ...]:
    return records + (record,)


def delete_record(records: Tuple[R, ...], record_id: str) -> Tuple[R, ...]:
    kept = tuple(r for r in records if r.id != record_id)
    if len(kept) == len(records):
        logger.warning("Delete skipped, no record with id %s", record_id)
    return kept


def record_expense(
    expenses: Tuple[ExpenseRecord, ...],
    savings: Tuple[SavingsRecord, ...],
    expense: ExpenseRecord,
    savings_id: Optional[str] = None,
) -> Tuple[Tuple[ExpenseRecord, ...], Tuple[SavingsRecord, ...]]:
    """Append an expense; "tabungan" categories also land in savings."""
    new_expenses = add_record(expenses, expense)
    if categorize_expense(expense.category) != ExpenseDestination.SAVINGS:
        return new_expenses, savings

    contribution = SavingsRecord(
        id=savings_id or str(uuid4()),
        amount=expense.amount,
        expense_id=expense.id,
    )
    logger.info("Expense %s (%s) tagged as savings", expense.id, expense.category)
    return new_expenses, add_record(savings, contribution)


def delete_expense(
    expenses: Tuple[ExpenseRecord, ...],
    savings: Tuple[SavingsRecord, ...],
    expense_id: str,
) -> Tuple[Tuple[ExpenseRecord, ...], Tuple[SavingsRecord, ...]]:
    """Remove an expense together with any savings it created."""
    new_expenses = delete_record(expenses, expense_id)
    return new_expenses, savings_for_expenses(savings, new_expenses)


def adjust_budget_spent(
    budgets: Tuple[BudgetRecord, ...], budget_id: str, delta: float
) -> Tuple[BudgetRecord, ...]:
    return tuple(
        BudgetRecord(
            id=b.id,
            category=b.category,
            budget_amount=b.budget_amount,
            spent_amount=max(0, b.spent_amount + delta) if b.id == budget_id else b.spent_amount,
            period=b.period,
            color=b.color,
        )
        for b in budgets
    )


def update_goal_progress(
    goals: Tuple[GoalRecord, ...], goal_id: str, delta: float
) -> Tuple[GoalRecord, ...]:
    # current amount may pass the target but never drops below zero
    return tuple(
        GoalRecord(
            id=g.id,
            title=g.title,
            target_amount=g.target_amount,
            current_amount=max(0, g.current_amount + delta) if g.id == goal_id else g.current_amount,
            target_date=g.target_date,
            category=g.category,
            priority=g.priority,
            status=g.status,
            description=g.description,
            created_at=g.created_at,
        )
        for g in goals
    )


def set_goal_status(
    goals: Tuple[GoalRecord, ...], goal_id: str, status: GoalStatus
) -> Tuple[GoalRecord, ...]:
    return tuple(
        GoalRecord(
            id=g.id,
            title=g.title,
            target_amount=g.target_amount,
            current_amount=g.current_amount,
            target_date=g.target_date,
            category=g.category,
            priority=g.priority,
            status=status if g.id == goal_id else g.status,
            description=g.description,
            created_at=g.created_at,
        )
        for g in goals
    )


def pick_budget_color(rng: Optional[random.Random] = None) -> str:
    return (rng or random).choice(BUDGET_COLORS)


def new_record_id() -> str:
    return str(uuid4())


def goals_with_status(goals: Tuple[GoalRecord, ...], status: GoalStatus) -> Tuple[GoalRecord, ...]:
    return tuple(filter(lambda g: g.status == status, goals))


def savings_for_expenses(
    savings: Tuple[SavingsRecord, ...], expenses: Tuple[ExpenseRecord, ...]
) -> Tuple[SavingsRecord, ...]:
    expense_ids = {e.id for e in expenses}
    return tuple(filter(lambda s: s.expense_id in expense_ids, savings))
