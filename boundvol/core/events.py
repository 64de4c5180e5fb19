# boundvol/core/events.py
from typing import Any, Dict, List, Type, TypeVar

E = TypeVar("E")


class EventManager:
    """
    Per-type FIFO queues. Reading a type drains it, so each event type is
    meant to have a single consumer.
    """

    def __init__(self) -> None:
        self._queues: Dict[Type[Any], List[Any]] = {}

    def emit(self, event: Any) -> None:
        self._queues.setdefault(type(event), []).append(event)

    def get(self, event_type: Type[E]) -> List[E]:
        return self._queues.pop(event_type, [])

    def pending(self, event_type: Type[Any]) -> int:
        return len(self._queues.get(event_type, ()))

    def clear_all(self) -> None:
        self._queues.clear()
