"""Runtime machine instances.

A :class:`MachineInstance` holds one current-state pointer bound to an
immutable :class:`MachineDefinition`. It is the only object callers need
after a document has been built.

Instances are not thread-safe. Use one instance per conversation session,
or serialize access to a shared instance at the call site.
"""

import logging
from typing import Iterable, List

from chatbot_fsm.core.definition import MachineDefinition
from chatbot_fsm.core.event import Event, sort_by_order
from chatbot_fsm.core.state import State
from chatbot_fsm.exceptions import (
    HookError,
    IllegalTransitionError,
    ObserverError,
    TransitionCanceledError,
    UnknownStateError,
)
from chatbot_fsm.hooks import AFTER, BEFORE, ENTER, LEAVE, MachineHooks, TransitionContext
from chatbot_fsm.observability import LoggingObserver, TransitionObserver, TransitionRecord

logger = logging.getLogger(__name__)


class MachineInstance:
    """A live conversational state machine.

    Example:
        ```python
        machine = MachineInstance(definition)
        machine.current().message          # payload of the start state
        [e.name for e in machine.available_transitions()]

        try:
            machine.fire("Greet")
        except IllegalTransitionError as e:
            reply("That is not available right now")
        ```
    """

    def __init__(
        self,
        definition: MachineDefinition,
        hooks: MachineHooks | None = None,
        observers: Iterable[TransitionObserver] | None = None,
    ):
        """Initialize the instance in the definition's start state.

        Args:
            definition: Machine definition to execute.
            hooks: Optional transition lifecycle hooks.
            observers: Observers notified of every fired event. Defaults to
                a single :class:`LoggingObserver`.
        """
        self._definition = definition
        self._hooks = hooks if hooks is not None else MachineHooks()
        self._observers: List[TransitionObserver] = (
            list(observers) if observers is not None else [LoggingObserver()]
        )
        self._current = definition.start_state

    @property
    def definition(self) -> MachineDefinition:
        return self._definition

    @property
    def current_state(self) -> str:
        """Name of the current state."""
        return self._current

    def add_observer(self, observer: TransitionObserver) -> None:
        self._observers.append(observer)

    def current(self) -> State:
        """Return the State record of the current state.

        Raises:
            UnknownStateError: If the current state is not declared in the
                definition's state table.
        """
        state = self._definition.get_state(self._current)
        if state is None:
            raise UnknownStateError(
                self._current,
                f"Current state '{self._current}' is not declared in the state table",
            )
        return state

    def available_transitions(self, by_order: bool = False) -> List[Event]:
        """Events that can be fired from the current state.

        Args:
            by_order: Sort by ``order_id`` instead of rule declaration order.

        Returns:
            Event records, possibly empty when the current state is terminal.
        """
        events = [
            self._definition.events[name]
            for name in self._definition.events_from(self._current)
        ]
        return sort_by_order(events) if by_order else events

    def can_fire(self, event_name: str) -> bool:
        """Whether ``event_name`` is legal from the current state.

        Hooks are not consulted, so a legal event may still be vetoed.
        """
        return self._definition.lookup(self._current, event_name) is not None

    def is_terminal(self) -> bool:
        """Whether no event is legal from the current state."""
        return not self._definition.events_from(self._current)

    def fire(self, event_name: str) -> State:
        """Fire an event from the current state.

        The transition is atomic: either the current state moves to the
        declared destination or it stays unchanged.

        Args:
            event_name: Name of the event to fire.

        Returns:
            The State record of the new current state.

        Raises:
            IllegalTransitionError: If the event is not legal from the
                current state.
            TransitionCanceledError: If a before or leave hook vetoed it.
            HookError: If an enter or after hook failed. The transition has
                been applied.
            ObserverError: If an observer failed while being notified. The
                transition has been applied.
        """
        source = self._current
        transition = self._definition.lookup(source, event_name)
        if transition is None:
            error = IllegalTransitionError(
                source, event_name, list(self._definition.events_from(source))
            )
            self._notify_rejected(TransitionRecord.rejected(source, event_name, str(error)))
            raise error

        context = TransitionContext(event=event_name, source=source, dest=transition.dest)
        for phase in (BEFORE, LEAVE):
            if not self._hooks.trigger(phase, context):
                canceled = TransitionCanceledError(source, event_name, phase)
                self._notify_rejected(
                    TransitionRecord.rejected(source, event_name, str(canceled))
                )
                raise canceled

        self._current = transition.dest
        self._notify_transition(TransitionRecord.accepted(source, transition.dest, event_name))

        for phase in (ENTER, AFTER):
            try:
                self._hooks.trigger(phase, context)
            except Exception as e:
                raise HookError(
                    f"{phase} hook failed after '{event_name}' moved machine "
                    f"from '{source}' to '{transition.dest}': {e}",
                    context={
                        "phase": phase,
                        "event": event_name,
                        "source": source,
                        "dest": transition.dest,
                    },
                ) from e

        return self.current()

    def reset(self) -> None:
        """Move the machine back to the definition's start state.

        Observers receive the move as a transition whose event is
        :data:`~chatbot_fsm.observability.RESET_EVENT`.

        Raises:
            ObserverError: If an observer failed while being notified.
        """
        logger.debug(
            "Resetting machine from '%s' to '%s'",
            self._current, self._definition.start_state,
        )
        source = self._current
        self._current = self._definition.start_state
        self._notify_transition(TransitionRecord.reset(source, self._current))

    def _notify_transition(self, record: TransitionRecord) -> None:
        for observer in self._observers:
            try:
                observer.on_transition(record)
            except Exception as e:
                raise ObserverError(
                    f"Observer {type(observer).__name__} failed after '{record.event}' "
                    f"moved machine from '{record.from_state}' to '{record.to_state}': {e}",
                    context={
                        "observer": type(observer).__name__,
                        "event": record.event,
                        "source": record.from_state,
                        "dest": record.to_state,
                    },
                ) from e

    def _notify_rejected(self, record: TransitionRecord) -> None:
        for observer in self._observers:
            observer.on_rejected(record)

    def __repr__(self) -> str:
        return f"MachineInstance(current_state={self._current!r}, definition={self._definition!r})"
