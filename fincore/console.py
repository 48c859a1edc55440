"""SQL console: pass raw queries to an executor and shape the rows for display."""
import logging
import sqlite3
from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Callable, Dict, List, Sequence

import pandas as pd

from fincore.domain import BudgetRecord, ExpenseRecord, GoalRecord, IncomeRecord, SavingsRecord
from fincore.functional import Either, Left, Right

logger = logging.getLogger(__name__)

Executor = Callable[[str], List[Dict[str, Any]]]

QUERY_TEMPLATES: Dict[str, str] = {
    "monthlyExpenses": """-- Monthly expenses
SELECT
  strftime('%Y-%m', date) AS month,
  SUM(amount) AS total_expenses,
  COUNT(*) AS transactions
FROM expenses
GROUP BY strftime('%Y-%m', date)
ORDER BY month DESC;""",
    "categoryAnalysis": """-- Expenses by category
SELECT
  category,
  SUM(amount) AS total,
  COUNT(*) AS count,
  ROUND(AVG(amount), 2) AS average
FROM expenses
GROUP BY category
ORDER BY total DESC;""",
    "savingsProgress": """-- Savings per month
SELECT
  strftime('%Y-%m', e.date) AS month,
  SUM(s.amount) AS total_savings,
  COUNT(s.id) AS contributions
FROM expenses e
JOIN savings s ON e.id = s.expense_id
GROUP BY strftime('%Y-%m', e.date)
ORDER BY month DESC;""",
    "incomeVsExpenses": """-- Income against expenses per salary period
WITH period_income AS (
  SELECT month, SUM(amount) AS income
  FROM incomes
  GROUP BY month
),
period_expenses AS (
  SELECT i.month, SUM(e.amount) AS expenses
  FROM expenses e
  JOIN incomes i ON e.income_id = i.id
  GROUP BY i.month
)
SELECT
  pi.month,
  pi.income,
  COALESCE(pe.expenses, 0) AS expenses,
  pi.income - COALESCE(pe.expenses, 0) AS balance
FROM period_income pi
LEFT JOIN period_expenses pe ON pi.month = pe.month;""",
}


@dataclass(frozen=True)
class QueryResult:
    rows: List[Dict[str, Any]]
    columns: List[str]

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.columns)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.rows, columns=self.columns)


def run_query(executor: Executor, sql: str) -> Either[dict, QueryResult]:
    if not sql or not sql.strip():
        return Left({"error": "empty_query", "message": "Please enter a SQL query"})

    try:
        rows = executor(sql)
    except Exception as e:
        logger.warning("Query failed: %s", e)
        return Left({"error": "query_failed", "message": str(e)})

    rows = list(rows or [])
    columns = list(rows[0].keys()) if rows else []
    logger.info("Query returned %d row(s)", len(rows))
    return Right(QueryResult(rows=rows, columns=columns))


def _frame(records: Sequence[Any], record_type: type) -> pd.DataFrame:
    columns = [f.name for f in fields(record_type)]
    rows = [
        {k: v.value if isinstance(v, Enum) else v for k, v in asdict(r).items()}
        for r in records
    ]
    return pd.DataFrame(rows, columns=columns)


def sqlite_executor(
    incomes: Sequence[IncomeRecord],
    expenses: Sequence[ExpenseRecord],
    savings: Sequence[SavingsRecord],
    budgets: Sequence[BudgetRecord] = (),
    goals: Sequence[GoalRecord] = (),
) -> Executor:
    """Executor over a throwaway in-memory SQLite copy of the given records."""
    tables = {
        "incomes": _frame(incomes, IncomeRecord),
        "expenses": _frame(expenses, ExpenseRecord),
        "savings": _frame(savings, SavingsRecord),
        "budgets": _frame(budgets, BudgetRecord),
        "goals": _frame(goals, GoalRecord),
    }

    def _execute(sql: str) -> List[Dict[str, Any]]:
        conn = sqlite3.connect(":memory:")
        try:
            for name, frame in tables.items():
                frame.to_sql(name, conn, index=False)
            result = pd.read_sql_query(sql, conn)
        finally:
            conn.close()
        return result.to_dict(orient="records")

    return _execute
