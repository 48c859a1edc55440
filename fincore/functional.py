from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Callable, Generic, Optional, TypeVar

from fincore.domain import (
    BudgetPeriod,
    BudgetRecord,
    ExpenseRecord,
    GoalCategory,
    GoalPriority,
    GoalRecord,
    GoalStatus,
    IncomeRecord,
)

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')

MIN_PASSWORD_LENGTH = 6


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    def is_some(self) -> bool:
        return isinstance(self, Some)

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass

    def is_right(self) -> bool:
        return isinstance(self, Right)

    def is_left(self) -> bool:
        return not self.is_right()


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Left(self._error)

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return Left(self._error)

    def get_or_else(self, default: T) -> T:
        return default

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


# --- form validation

def _missing(field: str) -> Left:
    return Left({
        "error": "missing_field",
        "message": "Please fill in all required fields",
        "field": field,
    })


def _parse_amount(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    if amount != amount:  # NaN
        return None
    return amount


def _check_amount(value: Any, field: str, strict: bool = False) -> Either[dict, float]:
    if value is None or value == "":
        return _missing(field)
    amount = _parse_amount(value)
    if amount is None or amount < 0 or (strict and amount == 0):
        return Left({
            "error": "invalid_amount",
            "message": f"{field} must be {'a positive' if strict else 'a non-negative'} number",
            "field": field,
            "value": value,
        })
    return Right(amount)


def _check_enum(enum_cls, value: Any, field: str) -> Either[dict, Any]:
    try:
        return Right(enum_cls(value))
    except ValueError:
        return Left({
            "error": f"invalid_{field}",
            "message": f"Unknown {field}: {value}",
            "field": field,
            "value": value,
        })


def safe_income(incomes: tuple[IncomeRecord, ...], income_id: str) -> Maybe[IncomeRecord]:
    for income in incomes:
        if income.id == income_id:
            return Some(income)
    return Nothing()


def validate_income(record_id: str, month: str, amount: Any) -> Either[dict, IncomeRecord]:
    if not month or not month.strip():
        return _missing("month")
    return _check_amount(amount, "amount").map(
        lambda value: IncomeRecord(id=record_id, month=month.strip(), amount=value)
    )


def validate_expense(
    record_id: str,
    category: str,
    amount: Any,
    income_id: str,
    incomes: tuple[IncomeRecord, ...],
    expense_date: Optional[str] = None,
    description: Optional[str] = None,
) -> Either[dict, ExpenseRecord]:
    if not income_id:
        return _missing("income_id")
    if not category or not category.strip():
        return _missing("category")

    if safe_income(incomes, income_id).is_none():
        return Left({
            "error": "income_not_found",
            "message": f"Income with ID {income_id} does not exist",
            "income_id": income_id,
        })

    return _check_amount(amount, "amount").map(
        lambda value: ExpenseRecord(
            id=record_id,
            category=category.strip(),
            amount=value,
            date=expense_date or date.today().isoformat(),
            description=description or None,
            income_id=income_id,
        )
    )


def validate_budget(
    record_id: str, category: str, amount: Any, period: Any, color: str
) -> Either[dict, BudgetRecord]:
    if not category or not category.strip():
        return _missing("category")

    return _check_amount(amount, "budget_amount", strict=True).bind(
        lambda value: _check_enum(BudgetPeriod, period, "period").map(
            lambda p: BudgetRecord(
                id=record_id,
                category=category.strip(),
                budget_amount=value,
                spent_amount=0,
                period=p,
                color=color,
            )
        )
    )


def _check_date(value: Any) -> Either[dict, str]:
    if not value:
        return _missing("target_date")
    try:
        return Right(date.fromisoformat(str(value)).isoformat())
    except ValueError:
        return Left({
            "error": "invalid_date",
            "message": f"Target date must be YYYY-MM-DD, got {value}",
            "field": "target_date",
            "value": value,
        })


def validate_goal(
    record_id: str,
    title: str,
    target_amount: Any,
    target_date: Any,
    category: Any = GoalCategory.SAVINGS,
    priority: Any = GoalPriority.MEDIUM,
    description: str = "",
) -> Either[dict, GoalRecord]:
    if not title or not title.strip():
        return _missing("title")

    def build(fields: dict) -> GoalRecord:
        return GoalRecord(
            id=record_id,
            title=title.strip(),
            target_amount=fields["target"],
            current_amount=0,
            target_date=fields["date"],
            category=fields["category"],
            priority=fields["priority"],
            status=GoalStatus.ACTIVE,
            description=description,
            created_at=date.today().isoformat(),
        )

    return pipe(
        _check_amount(target_amount, "target_amount", strict=True).map(lambda v: {"target": v}),
        lambda acc: acc.bind(lambda f: _check_date(target_date).map(lambda d: {**f, "date": d})),
        lambda acc: acc.bind(lambda f: _check_enum(GoalCategory, category, "category").map(lambda c: {**f, "category": c})),
        lambda acc: acc.bind(lambda f: _check_enum(GoalPriority, priority, "priority").map(lambda p: {**f, "priority": p})),
        lambda acc: acc.map(build),
    )


def validate_password_change(new_password: str, confirm_password: str) -> Either[dict, str]:
    if new_password != confirm_password:
        return Left({
            "error": "password_mismatch",
            "message": "New password and confirmation do not match",
        })
    if len(new_password or "") < MIN_PASSWORD_LENGTH:
        return Left({
            "error": "password_too_short",
            "message": f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            "min_length": MIN_PASSWORD_LENGTH,
        })
    return Right(new_password)


def pipe(x, *funcs):
    """Pipe a value through a series of functions.

    pipe(x, f, g, h) == h(g(f(x)))
    """
    res = x
    for f in funcs:
        res = f(res)
    return res
