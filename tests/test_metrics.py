import math
from datetime import datetime, timedelta, timezone

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
    InsightKind,
    ProgressStatus,
    SavingsRecord,
)
from fincore.metrics import (
    budget_line,
    budget_summary,
    categorize_expense,
    clamp_percentage,
    classify_financial_health,
    classify_progress,
    days_remaining,
    describe_days_remaining,
    financial_overview,
    goal_progress,
    goal_summary,
    percentage_of,
    remaining,
    total_of,
)


def make_budget(id, budget_amount, spent_amount):
    return BudgetRecord(id=id, category=f"cat-{id}", budget_amount=budget_amount,
                        spent_amount=spent_amount, period=BudgetPeriod.MONTHLY, color="#ef4444")


def make_goal(id, target, current, status=GoalStatus.ACTIVE):
    return GoalRecord(id=id, title=f"goal-{id}", target_amount=target, current_amount=current,
                      target_date="2030-01-01", category=GoalCategory.SAVINGS,
                      priority=GoalPriority.MEDIUM, status=status)


def test_total_of_sums_amounts():
    records = [{"amount": 1500000}, {"amount": 1200000}, {"amount": 300}]
    assert total_of(records) == 2700300
    assert total_of([]) == 0


def test_total_of_reads_dataclasses_and_other_fields():
    budgets = (make_budget("b1", 100, 40), make_budget("b2", 200, 10))
    assert total_of(budgets, "budget_amount") == 300
    assert total_of(budgets, "spent_amount") == 50


def test_total_of_treats_missing_and_nan_as_zero():
    records = [{"amount": 10}, {}, {"amount": None}, {"amount": float("nan")}, {"amount": "abc"}, {"amount": "5"}]
    assert total_of(records) == 15


def test_percentage_of():
    assert percentage_of(50, 200) == 25
    assert percentage_of(123, 0) == 0
    assert percentage_of(0, 0) == 0
    assert percentage_of(300, 200) == 150  # not clamped


def test_remaining_is_not_clamped():
    assert remaining(100, 150) == -50
    assert remaining(1500000, 1200000) == 300000


def test_clamp_percentage():
    assert clamp_percentage(150) == 100
    assert clamp_percentage(-5) == 0
    assert clamp_percentage(42.5) == 42.5


def test_classify_progress_boundaries():
    assert classify_progress(79) == ProgressStatus.ON_TRACK
    assert classify_progress(79.99) == ProgressStatus.ON_TRACK
    assert classify_progress(80) == ProgressStatus.NEAR_LIMIT
    assert classify_progress(99.9) == ProgressStatus.NEAR_LIMIT
    assert classify_progress(100) == ProgressStatus.OVER
    assert classify_progress(250) == ProgressStatus.OVER
    assert classify_progress(0) == ProgressStatus.ON_TRACK


def test_classify_progress_for_goals_reads_completed():
    assert classify_progress(100, goal=True) == ProgressStatus.COMPLETED
    assert classify_progress(85, goal=True) == ProgressStatus.NEAR_LIMIT


def test_financial_health_expense_ratio_wins():
    assert classify_financial_health(95, 5).kind == InsightKind.WARNING
    assert classify_financial_health(90, 50).kind == InsightKind.WARNING


def test_financial_health_decision_table():
    assert classify_financial_health(60, 25).kind == InsightKind.SUCCESS
    assert classify_financial_health(89, 20).kind == InsightKind.SUCCESS
    assert classify_financial_health(70, 10).kind == InsightKind.INFO
    assert classify_financial_health(75, 10).kind == InsightKind.NEUTRAL
    assert classify_financial_health(0, 0).kind == InsightKind.INFO


def test_days_remaining_today_and_yesterday():
    now = datetime.now(timezone.utc)
    today_iso = now.date().isoformat()
    yesterday_iso = (now - timedelta(days=1)).date().isoformat()
    assert days_remaining(today_iso, now=now) == 0
    assert days_remaining(yesterday_iso, now=now) < 0


def test_days_remaining_rounds_up():
    now = datetime(2024, 6, 10, 15, 30, tzinfo=timezone.utc)
    assert days_remaining("2024-06-11", now=now) == 1
    assert days_remaining("2024-06-20", now=now) == 10
    assert days_remaining("2024-06-09", now=now) == -1
    assert days_remaining("2024-06-01", now=now) == -9


def test_days_remaining_naive_now_is_utc():
    assert days_remaining("2024-01-03", now=datetime(2024, 1, 1)) == 2


def test_days_remaining_accepts_z_suffix():
    now = datetime(2024, 12, 30, tzinfo=timezone.utc)
    assert days_remaining("2024-12-31T00:00:00Z", now=now) == 1
    assert days_remaining("2024-12-31T00:00:00Z", now=now) == days_remaining("2024-12-31", now=now)


def test_days_remaining_bad_input_defaults_to_zero():
    assert days_remaining("not-a-date") == 0
    assert days_remaining(None) == 0


def test_describe_days_remaining():
    assert describe_days_remaining(-3) == "3 days overdue"
    assert describe_days_remaining(0) == "today"
    assert describe_days_remaining(12) == "12 days left"


def test_categorize_expense_substring_match():
    assert categorize_expense("Tabungan Pendidikan") == ExpenseDestination.SAVINGS
    assert categorize_expense("setoran tabungan") == ExpenseDestination.SAVINGS
    assert categorize_expense("TABUNGAN") == ExpenseDestination.SAVINGS
    assert categorize_expense("Tabung") == ExpenseDestination.EXPENSE
    assert categorize_expense("makan") == ExpenseDestination.EXPENSE
    assert categorize_expense("") == ExpenseDestination.EXPENSE


def test_goal_progress_is_capped():
    assert goal_progress(18000000, 30000000) == 60
    assert goal_progress(40, 20) == 100
    assert goal_progress(5, 0) == 0


def test_budget_scenario_near_limit():
    budget = make_budget("b1", 1500000, 1200000)
    assert remaining(budget.budget_amount, budget.spent_amount) == 300000
    assert percentage_of(1200000, 1500000) == 80
    assert classify_progress(80) == ProgressStatus.NEAR_LIMIT

    line = budget_line(budget)
    assert line.remaining == 300000
    assert line.percentage == 80
    assert line.status == ProgressStatus.NEAR_LIMIT


def test_budget_line_over_budget_keeps_negative_remaining():
    line = budget_line(make_budget("b4", 1000000, 1100000))
    assert line.remaining == -100000
    assert math.isclose(line.percentage, 110)
    assert line.display_percentage == 100
    assert line.status == ProgressStatus.OVER


def test_budget_summary():
    budgets = (
        make_budget("b1", 1500000, 1200000),
        make_budget("b2", 800000, 650000),
        make_budget("b3", 500000, 320000),
        make_budget("b4", 1000000, 1100000),
    )
    summary = budget_summary(budgets)
    assert summary.total_budget == 3800000
    assert summary.total_spent == 3270000
    assert summary.remaining == 530000
    assert summary.status == ProgressStatus.NEAR_LIMIT


def test_budget_summary_empty():
    summary = budget_summary(())
    assert summary.total_budget == 0
    assert summary.progress == 0
    assert summary.status == ProgressStatus.ON_TRACK


def test_goal_summary_counts_active_only():
    goals = (
        make_goal("g1", 30000000, 18000000),
        make_goal("g2", 20000000, 2000000),
        make_goal("g3", 10000000, 10000000, GoalStatus.COMPLETED),
        make_goal("g4", 10000000, 0, GoalStatus.PAUSED),
    )
    summary = goal_summary(goals)
    assert summary.total_target == 50000000
    assert summary.total_current == 20000000
    assert summary.progress == 40
    assert summary.active_count == 2
    assert summary.completed_count == 1


def test_financial_overview():
    incomes = (IncomeRecord("i1", "Januari 2024", 5000000),)
    expenses = (
        ExpenseRecord("e1", "makan", 2000000, "2024-01-05", income_id="i1"),
        ExpenseRecord("e2", "tabungan", 1000000, "2024-01-20", income_id="i1"),
    )
    savings = (SavingsRecord("s1", 1000000, "e2"),)

    ov = financial_overview(incomes, expenses, savings)
    assert ov.total_income == 5000000
    assert ov.total_expenses == 3000000
    assert ov.total_savings == 1000000
    assert ov.remaining_budget == 2000000
    assert ov.expense_ratio == 60
    assert ov.savings_rate == 20
    assert ov.insight.kind == InsightKind.SUCCESS


def test_financial_overview_ignores_orphaned_savings():
    incomes = (IncomeRecord("i1", "Januari 2024", 5000000),)
    savings = (SavingsRecord("s1", 1000000, "gone"),)

    ov = financial_overview(incomes, (), savings)
    assert ov.total_expenses == 0
    assert ov.total_savings == 0
    assert ov.savings_rate == 0
    assert ov.insight.kind != InsightKind.SUCCESS


def test_financial_overview_without_income():
    ov = financial_overview((), (ExpenseRecord("e1", "makan", 100, "2024-01-05"),), ())
    assert ov.expense_ratio == 0
    assert ov.savings_rate == 0
    assert ov.remaining_budget == -100
    assert ov.insight.kind == InsightKind.INFO
