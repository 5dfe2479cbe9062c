from typing import Callable, Dict, List, NamedTuple
from datetime import datetime

__all__ = [
    'Event', 'EventBus',
    'EXPENSE_ADDED',
    'check_budget_handler', 'register_default_handlers',
]


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[Event, dict], dict]]] = {}

    def subscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        if name not in self._subscribers:
            self._subscribers[name] = []
        self._subscribers[name].append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        if name not in self._subscribers:
            return []

        event = Event(
            name=name,
            ts=datetime.now().isoformat(),
            payload=payload
        )

        results = []
        for handler in self._subscribers[name]:
            result = handler(event, payload)
            results.append(result)
        return results


EXPENSE_ADDED = "EXPENSE_ADDED"


def check_budget_handler(event: Event, payload: dict) -> dict:
    name = payload.get("category_name", "")
    budget = payload.get("budget", 0)
    spent = payload.get("spent", 0)

    if spent > 0 and spent >= budget:
        return {
            "alert": f"Budget reached for {name}: ${spent:,.2f} / ${budget:,.2f}",
            "category_id": payload.get("category_id"),
            "spent": spent,
            "budget": budget,
        }
    return {"spent": spent}


def register_default_handlers(bus: EventBus) -> EventBus:
    bus.subscribe(EXPENSE_ADDED, check_budget_handler)
    return bus
