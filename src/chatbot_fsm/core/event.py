"""Event records for conversational machines."""

from dataclasses import dataclass
from typing import Any, Iterable, List


@dataclass(frozen=True)
class Event:
    """A named trigger a caller can fire.

    Attributes:
        name: Unique event identifier.
        message: Display payload, e.g. a button or menu label.
        order_id: Presentation order among available events. Has no effect
            on transition logic.
    """

    name: str
    message: Any = None
    order_id: int = 0


def sort_by_order(events: Iterable[Event]) -> List[Event]:
    """Sort events by ``order_id``, keeping declaration order for ties."""
    return sorted(events, key=lambda event: event.order_id)
