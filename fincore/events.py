import logging
from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

from fincore.domain import ExpenseDestination, ProgressStatus
from fincore.metrics import (
    categorize_expense,
    classify_progress,
    goal_progress,
    percentage_of,
    remaining,
)

__all__ = [
    'EXPENSE_RECORDED', 'BUDGET_ADJUSTED', 'GOAL_UPDATED',
    'Event', 'EventBus', 'register_default_handlers',
]

logger = logging.getLogger(__name__)


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        handlers = self._subscribers.get(name, [])
        if not handlers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        logger.debug("Publishing %s to %d handler(s)", name, len(handlers))
        return [handler(event, payload) for handler in handlers]

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)


EXPENSE_RECORDED = "EXPENSE_RECORDED"
BUDGET_ADJUSTED = "BUDGET_ADJUSTED"
GOAL_UPDATED = "GOAL_UPDATED"


def savings_tag_handler(event: Event, payload: dict) -> dict:
    category = payload.get("category", "")
    if categorize_expense(category) == ExpenseDestination.SAVINGS:
        return {
            "notice": "Expense saved and moved to savings automatically",
            "destination": ExpenseDestination.SAVINGS,
        }
    return {"notice": "Expense saved", "destination": ExpenseDestination.EXPENSE}


def budget_status_handler(event: Event, payload: dict) -> dict:
    budget_amount = payload.get("budget_amount", 0)
    spent = payload.get("spent_amount", 0)
    category = payload.get("category", "")
    pct = percentage_of(spent, budget_amount)
    status = classify_progress(pct)
    result = {"status": status, "percentage": pct, "remaining": remaining(budget_amount, spent)}

    if status == ProgressStatus.OVER:
        result["alert"] = f"Budget exceeded for {category}: {pct:.1f}% used"
    elif status == ProgressStatus.NEAR_LIMIT:
        result["alert"] = f"Budget for {category} is near its limit: {pct:.1f}% used"
    if "alert" in result:
        logger.info(result["alert"])
    return result


def goal_status_handler(event: Event, payload: dict) -> dict:
    """Classify goal progress and flag completion.

    The handler only reports; marking the goal completed is left to the
    caller, which the dashboard does as soon as the notice appears.
    """
    progress = goal_progress(payload.get("current_amount", 0), payload.get("target_amount", 0))
    status = classify_progress(progress, goal=True)
    result = {"status": status, "progress": progress}
    if status == ProgressStatus.COMPLETED:
        result["notice"] = f"Goal reached: {payload.get('title', '')}"
    return result


def register_default_handlers(bus: EventBus) -> EventBus:
    bus.subscribe(EXPENSE_RECORDED, savings_tag_handler)
    bus.subscribe(BUDGET_ADJUSTED, budget_status_handler)
    bus.subscribe(GOAL_UPDATED, goal_status_handler)
    return bus
