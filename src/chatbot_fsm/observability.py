"""Transition observability for machine instances.

Machine instances report every fired event to their observers: accepted
transitions through ``on_transition`` and rejected events through
``on_rejected``. A reset is reported through ``on_transition`` with the
:data:`RESET_EVENT` event name. This module provides the record type, the
observer protocol, a logging observer and a bounded in-memory tracker.
"""

import logging
import time
from collections import deque
from dataclasses import asdict, dataclass
from typing import Any, Deque, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

# event name of records reporting MachineInstance.reset()
RESET_EVENT = "<reset>"


@dataclass
class TransitionRecord:
    """Record of a single fired event.

    Attributes:
        from_state: State name before the event was fired
        to_state: State name after the event (same as ``from_state`` when rejected)
        event: Name of the fired event
        timestamp: Unix timestamp when the event was fired
        success: Whether the transition was applied
        error: Error message if the event was rejected
    """

    from_state: str
    to_state: str
    event: str
    timestamp: float
    success: bool = True
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert record to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TransitionRecord":
        """Create record from dictionary."""
        return cls(**data)

    @classmethod
    def accepted(cls, from_state: str, to_state: str, event: str) -> "TransitionRecord":
        return cls(from_state, to_state, event, time.time())

    @classmethod
    def rejected(cls, state: str, event: str, error: str) -> "TransitionRecord":
        return cls(state, state, event, time.time(), success=False, error=error)

    @classmethod
    def reset(cls, from_state: str, to_state: str) -> "TransitionRecord":
        return cls(from_state, to_state, RESET_EVENT, time.time())

    @property
    def is_reset(self) -> bool:
        return self.event == RESET_EVENT


@runtime_checkable
class TransitionObserver(Protocol):
    """Receives notifications about fired events."""

    def on_transition(self, record: TransitionRecord) -> None:
        ...

    def on_rejected(self, record: TransitionRecord) -> None:
        ...


class LoggingObserver:
    """Observer that writes fired events to a logger."""

    def __init__(self, log: logging.Logger | None = None):
        self._log = log or logger

    def on_transition(self, record: TransitionRecord) -> None:
        self._log.debug(
            "Event '%s' moved machine from '%s' to '%s'",
            record.event, record.from_state, record.to_state,
        )

    def on_rejected(self, record: TransitionRecord) -> None:
        self._log.info(
            "Rejected event '%s' in state '%s': %s",
            record.event, record.from_state, record.error,
        )


@dataclass
class TransitionQuery:
    """Query parameters for filtering transition history.

    Attributes:
        from_state: Filter by source state
        to_state: Filter by target state
        event: Filter by event name
        since: Filter to records after this timestamp
        success_only: Only include applied transitions
        failed_only: Only include rejected events
        limit: Maximum number of (most recent) records to return
    """

    from_state: str | None = None
    to_state: str | None = None
    event: str | None = None
    since: float | None = None
    success_only: bool = False
    failed_only: bool = False
    limit: int | None = None


@dataclass
class TransitionStats:
    """Aggregated statistics over recorded events.

    Attributes:
        total: Total number of fired events
        successful: Number of applied transitions
        rejected: Number of rejected events
        unique_paths: Number of distinct (from, to) pairs among applied transitions
        most_visited_state: Most frequent destination of applied transitions
        most_fired_event: Most frequently fired event name, ignoring resets
    """

    total: int = 0
    successful: int = 0
    rejected: int = 0
    unique_paths: int = 0
    most_visited_state: str | None = None
    most_fired_event: str | None = None

    @property
    def success_rate(self) -> float:
        """Success rate as a percentage between 0.0 and 100.0."""
        if self.total == 0:
            return 0.0
        return (self.successful / self.total) * 100.0


class TransitionTracker:
    """Observer that keeps a bounded history of fired events.

    Example:
        ```python
        tracker = TransitionTracker(max_history=500)
        machine = new_instance(definition, observers=[tracker])
        machine.fire("Greet")

        tracker.get_state_flow()   # ['Initial', 'Hello']
        tracker.get_stats().success_rate
        ```
    """

    def __init__(self, max_history: int = 100):
        """Initialize tracker.

        Args:
            max_history: Maximum records to retain (default 100)
        """
        self._history: Deque[TransitionRecord] = deque(maxlen=max_history)

    def on_transition(self, record: TransitionRecord) -> None:
        self.record(record)

    def on_rejected(self, record: TransitionRecord) -> None:
        self.record(record)

    def record(self, record: TransitionRecord) -> None:
        self._history.append(record)

    def query(self, query: TransitionQuery | None = None) -> list[TransitionRecord]:
        """Query transition history.

        Args:
            query: Query parameters, or None for all records

        Returns:
            List of matching records, oldest first
        """
        results = list(self._history)
        if query is None:
            return results

        if query.from_state:
            results = [r for r in results if r.from_state == query.from_state]
        if query.to_state:
            results = [r for r in results if r.to_state == query.to_state]
        if query.event:
            results = [r for r in results if r.event == query.event]
        if query.since:
            results = [r for r in results if r.timestamp >= query.since]
        if query.success_only:
            results = [r for r in results if r.success]
        if query.failed_only:
            results = [r for r in results if not r.success]
        if query.limit:
            results = results[-query.limit:]

        return results

    def get_stats(self) -> TransitionStats:
        """Get aggregated statistics over the retained history."""
        if not self._history:
            return TransitionStats()

        state_counts: dict[str, int] = {}
        event_counts: dict[str, int] = {}
        unique_paths: set[tuple[str, str]] = set()
        successful = 0

        for record in self._history:
            if not record.is_reset:
                event_counts[record.event] = event_counts.get(record.event, 0) + 1
            if record.success:
                successful += 1
                state_counts[record.to_state] = state_counts.get(record.to_state, 0) + 1
                unique_paths.add((record.from_state, record.to_state))

        return TransitionStats(
            total=len(self._history),
            successful=successful,
            rejected=len(self._history) - successful,
            unique_paths=len(unique_paths),
            most_visited_state=(
                max(state_counts, key=state_counts.__getitem__) if state_counts else None
            ),
            most_fired_event=(
                max(event_counts, key=event_counts.__getitem__) if event_counts else None
            ),
        )

    def get_state_flow(self) -> list[str]:
        """Sequence of states visited through applied transitions.

        Resets appear as a move back to the start state, so the flow shows
        where each restarted conversation began.
        """
        applied = [r for r in self._history if r.success]
        if not applied:
            return []
        return [applied[0].from_state] + [r.to_state for r in applied]

    def clear(self) -> None:
        self._history.clear()

    def __len__(self) -> int:
        return len(self._history)
