"""Immutable machine definitions.

A :class:`MachineDefinition` bundles the state table, event table and
transition table built from one document, together with the start state.
Definitions are read-only once constructed and may be shared by any number
of machine instances.
"""

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Tuple

from chatbot_fsm.core.event import Event
from chatbot_fsm.core.state import State
from chatbot_fsm.core.transition import Transition


class MachineDefinition:
    """Validated, queryable tables for a conversational state machine.

    Use :class:`chatbot_fsm.config.builder.MachineBuilder` to create
    definitions from documents; the constructor performs no referential
    checks of its own.
    """

    def __init__(
        self,
        states: Mapping[str, State],
        events: Mapping[str, Event],
        transitions: Iterable[Transition],
        start_state: str,
        name: str | None = None,
    ):
        """Initialize the definition.

        Args:
            states: State table keyed by name.
            events: Event table keyed by name.
            transitions: Validated edges in declaration order. Later edges
                with an already-seen key replace the earlier one.
            start_state: Name of the state new instances start in.
            name: Optional display name.
        """
        self.name = name
        self._start_state = start_state
        self._states = MappingProxyType(dict(states))
        self._events = MappingProxyType(dict(events))

        table: Dict[Tuple[str, str], Transition] = {}
        for transition in transitions:
            table[transition.key] = transition
        self._transitions = MappingProxyType(table)

        # source -> event names, in declaration order
        outgoing: Dict[str, List[str]] = {}
        for source, event in table:
            outgoing.setdefault(source, []).append(event)
        self._outgoing = MappingProxyType(
            {source: tuple(names) for source, names in outgoing.items()}
        )

    @property
    def states(self) -> Mapping[str, State]:
        """State table keyed by name."""
        return self._states

    @property
    def events(self) -> Mapping[str, Event]:
        """Event table keyed by name."""
        return self._events

    @property
    def transitions(self) -> Mapping[Tuple[str, str], Transition]:
        """Transition table keyed by ``(source, event)``."""
        return self._transitions

    @property
    def start_state(self) -> str:
        return self._start_state

    def get_state(self, name: str) -> State | None:
        return self._states.get(name)

    def get_event(self, name: str) -> Event | None:
        return self._events.get(name)

    def lookup(self, source: str, event: str) -> Transition | None:
        """Find the edge fired by ``event`` from ``source``.

        Args:
            source: Current state name.
            event: Event name.

        Returns:
            The matching transition, or None if the event is not legal.
        """
        return self._transitions.get((source, event))

    def events_from(self, source: str) -> Tuple[str, ...]:
        """Names of the events legal from ``source``, in declaration order."""
        return self._outgoing.get(source, ())

    def terminal_states(self) -> List[str]:
        """States with no outgoing transitions."""
        return [name for name in self._states if name not in self._outgoing]

    def __repr__(self) -> str:
        return (
            f"MachineDefinition(name={self.name!r}, start_state={self._start_state!r}, "
            f"states={len(self._states)}, events={len(self._events)}, "
            f"transitions={len(self._transitions)})"
        )
