from dataclasses import dataclass
from enum import Enum
from typing import Optional


class BudgetPeriod(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class GoalCategory(str, Enum):
    SAVINGS = "savings"
    INVESTMENT = "investment"
    DEBT = "debt"
    PURCHASE = "purchase"
    EMERGENCY = "emergency"


class GoalPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class GoalStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"


class ProgressStatus(str, Enum):
    ON_TRACK = "on_track"
    NEAR_LIMIT = "near_limit"
    OVER = "over"
    COMPLETED = "completed"


class InsightKind(str, Enum):
    WARNING = "warning"
    SUCCESS = "success"
    INFO = "info"
    NEUTRAL = "neutral"


class ExpenseDestination(str, Enum):
    EXPENSE = "expense"
    SAVINGS = "savings"


# A salary entry for one period, e.g. "Januari 2024"
@dataclass(frozen=True)
class IncomeRecord:
    id: str
    month: str
    amount: float


@dataclass(frozen=True)
class ExpenseRecord:
    id: str
    category: str
    amount: float
    date: str                          # ISO date, e.g. "2024-03-14"
    description: Optional[str] = None
    income_id: Optional[str] = None    # which salary it was paid from


@dataclass(frozen=True)
class SavingsRecord:
    id: str
    amount: float
    expense_id: str


# spent_amount is tracked on its own, it is not summed from expenses
@dataclass(frozen=True)
class BudgetRecord:
    id: str
    category: str
    budget_amount: float
    spent_amount: float
    period: BudgetPeriod
    color: str


@dataclass(frozen=True)
class GoalRecord:
    id: str
    title: str
    target_amount: float
    current_amount: float
    target_date: str
    category: GoalCategory
    priority: GoalPriority
    status: GoalStatus
    description: str = ""
    created_at: str = ""
