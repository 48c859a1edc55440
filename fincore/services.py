from typing import Any, Callable, Dict, Iterable, Optional, Sequence

from fincore.lazy import category_breakdown
from fincore.metrics import classify_financial_health, percentage_of, remaining, total_of

Aggregator = Callable[[Iterable, Iterable, Iterable, Dict[str, Any]], Dict[str, Any]]


def totals_aggregator(incomes, expenses, savings, acc) -> Dict[str, Any]:
    total_income = total_of(incomes)
    total_expenses = total_of(expenses)
    return {
        "total_income": total_income,
        "total_expenses": total_expenses,
        "total_savings": total_of(savings),
        "net": remaining(total_income, total_expenses),
    }


def rates_aggregator(incomes, expenses, savings, acc) -> Dict[str, Any]:
    # reuses totals from an earlier step when present
    income = acc.get("total_income", total_of(incomes))
    expense_ratio = percentage_of(acc.get("total_expenses", total_of(expenses)), income)
    savings_rate = percentage_of(acc.get("total_savings", total_of(savings)), income)
    return {
        "expense_ratio": expense_ratio,
        "savings_rate": savings_rate,
        "insight": classify_financial_health(expense_ratio, savings_rate),
    }


def breakdown_aggregator(incomes, expenses, savings, acc) -> Dict[str, Any]:
    return {"categories": category_breakdown(expenses)}


DEFAULT_AGGREGATORS = (totals_aggregator, rates_aggregator, breakdown_aggregator)


class ReportService:
    """Facade for the reports view built from injected aggregators.

    Each aggregator takes (incomes, expenses, savings, acc) and returns a dict;
    outputs are merged into ``acc`` in order, so later steps can read earlier ones.
    """

    def __init__(self, aggregators: Optional[Sequence[Aggregator]] = None):
        self.aggregators = tuple(aggregators) if aggregators is not None else DEFAULT_AGGREGATORS

    def financial_report(self, incomes: Iterable, expenses: Iterable, savings: Iterable) -> Dict[str, Any]:
        incomes, expenses, savings = tuple(incomes), tuple(expenses), tuple(savings)
        report = {"steps": [], "result": {}}
        acc: Dict[str, Any] = {}
        for agg in self.aggregators:
            out = agg(incomes, expenses, savings, acc)
            report["steps"].append({"aggregator": getattr(agg, "__name__", str(agg)), "output": out})
            if isinstance(out, dict):
                acc.update(out)
        report["result"] = acc
        return report
