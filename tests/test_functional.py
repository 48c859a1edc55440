from fincore.domain import BudgetPeriod, GoalCategory, GoalPriority, GoalStatus, IncomeRecord
from fincore.functional import (
    Left,
    Nothing,
    Right,
    Some,
    pipe,
    safe_income,
    validate_budget,
    validate_expense,
    validate_goal,
    validate_income,
    validate_password_change,
)

INCOMES = (IncomeRecord("i1", "Januari 2024", 5000000),)


def test_maybe_map_and_bind():
    assert Some(5).map(lambda x: x * 2).get_or_else(0) == 10
    assert Nothing().map(lambda x: x * 2).get_or_else(0) == 0
    assert Some(0).bind(lambda x: Nothing() if x == 0 else Some(10 // x)).is_none()
    assert Some(2).bind(lambda x: Some(10 // x)) == Some(5)


def test_either_map_and_bind():
    assert Right(5).map(lambda x: x * 2).get_or_else(0) == 10
    left = Left("error").map(lambda x: x * 2)
    assert left.is_left()
    assert left.get_error() == "error"
    assert Right(0).bind(lambda x: Left("Division by zero")).get_error() == "Division by zero"


def test_pipe():
    assert pipe(3, lambda x: x + 1, lambda x: x * 10) == 40


def test_safe_income():
    assert safe_income(INCOMES, "i1").get_or_else(None).month == "Januari 2024"
    assert safe_income(INCOMES, "missing").is_none()


def test_validate_income():
    result = validate_income("i2", " Februari 2024 ", "5200000")
    assert result.is_right()
    income = result.get_or_else(None)
    assert income.month == "Februari 2024"
    assert income.amount == 5200000


def test_validate_income_missing_and_invalid():
    assert validate_income("i2", "", 100).get_error()["error"] == "missing_field"
    assert validate_income("i2", "Maret 2024", "").get_error()["error"] == "missing_field"
    assert validate_income("i2", "Maret 2024", "abc").get_error()["error"] == "invalid_amount"
    assert validate_income("i2", "Maret 2024", -1).get_error()["error"] == "invalid_amount"


def test_validate_expense():
    result = validate_expense("e1", "makan", 50000, "i1", INCOMES, expense_date="2024-01-03")
    assert result.is_right()
    expense = result.get_or_else(None)
    assert expense.income_id == "i1"
    assert expense.date == "2024-01-03"
    assert expense.description is None


def test_validate_expense_requires_known_income():
    result = validate_expense("e1", "makan", 50000, "i9", INCOMES)
    assert result.is_left()
    assert result.get_error()["error"] == "income_not_found"
    assert "i9" in result.get_error()["message"]


def test_validate_expense_requires_income_and_category():
    assert validate_expense("e1", "makan", 10, "", INCOMES).get_error()["field"] == "income_id"
    assert validate_expense("e1", "  ", 10, "i1", INCOMES).get_error()["field"] == "category"


def test_validate_budget():
    result = validate_budget("b1", "Food & Dining", "1500000", "weekly", "#ef4444")
    budget = result.get_or_else(None)
    assert budget.spent_amount == 0
    assert budget.period == BudgetPeriod.WEEKLY


def test_validate_budget_rejects_zero_and_bad_period():
    assert validate_budget("b1", "Food", 0, "monthly", "#fff").get_error()["error"] == "invalid_amount"
    assert validate_budget("b1", "Food", 100, "daily", "#fff").get_error()["error"] == "invalid_period"


def test_validate_goal():
    result = validate_goal("g1", "New Laptop", 25000000, "2025-06-30", "purchase", "high", "For work")
    goal = result.get_or_else(None)
    assert goal.current_amount == 0
    assert goal.status == GoalStatus.ACTIVE
    assert goal.category == GoalCategory.PURCHASE
    assert goal.priority == GoalPriority.HIGH
    assert goal.created_at


def test_validate_goal_errors():
    assert validate_goal("g1", "", 100, "2025-01-01").get_error()["error"] == "missing_field"
    assert validate_goal("g1", "Car", 100, "31/12/2025").get_error()["error"] == "invalid_date"
    assert validate_goal("g1", "Car", 100, "2025-01-01", "lottery").get_error()["error"] == "invalid_category"
    assert validate_goal("g1", "Car", 0, "2025-01-01").get_error()["error"] == "invalid_amount"


def test_validate_password_change():
    assert validate_password_change("secret1", "secret1").is_right()
    assert validate_password_change("secret1", "secret2").get_error()["error"] == "password_mismatch"
    assert validate_password_change("abc", "abc").get_error()["error"] == "password_too_short"
