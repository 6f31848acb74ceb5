"""Machine builder for constructing machine definitions from documents.

This module provides the MachineBuilder class that turns a decoded
document into an immutable :class:`MachineDefinition`:
- State and event table construction
- Referential integrity checks for every transition rule
- Transition table assembly with conflict detection
- Start state resolution
"""

import logging
from typing import Dict, List, Tuple

from chatbot_fsm.config.schema import (
    BuildOptions,
    ConflictPolicy,
    EventConfig,
    MachineDocument,
    StateConfig,
    TransitionRuleConfig,
)
from chatbot_fsm.core.definition import MachineDefinition
from chatbot_fsm.core.event import Event
from chatbot_fsm.core.state import State
from chatbot_fsm.core.transition import Transition
from chatbot_fsm.exceptions import (
    ConflictingTransitionError,
    DuplicateEventError,
    DuplicateStateError,
    UnknownReferenceError,
    UnknownStateError,
)

logger = logging.getLogger(__name__)


class MachineBuilder:
    """Build machine definitions from decoded documents."""

    def __init__(self, options: BuildOptions | None = None):
        """Initialize the MachineBuilder.

        Args:
            options: Build options. Defaults to ``BuildOptions()``.
        """
        self.options = options or BuildOptions()

    def build(self, document: MachineDocument) -> MachineDefinition:
        """Build a machine definition from a document.

        Args:
            document: Decoded machine document.

        Returns:
            Immutable machine definition.

        Raises:
            DuplicateStateError: If a state name is declared twice.
            DuplicateEventError: If an event name is declared twice.
            UnknownReferenceError: If a rule references an undeclared name.
            ConflictingTransitionError: If two rules map one (state, event)
                pair to different destinations under the reject policy.
            UnknownStateError: If the start state is not declared.
        """
        # 1. State table
        states = self._build_states(document.states)

        # 2. Event table
        events = self._build_events(document.events)

        # 3. Referential integrity
        for index, rule in enumerate(document.rules):
            self._check_references(index, rule, states, events)

        # 4. Transition table
        transitions = self._build_transitions(document.rules)

        # 5. Start state
        start_state = self.options.resolve_start_state(document.initial)
        if start_state not in states:
            raise UnknownStateError(
                start_state,
                f"Start state '{start_state}' is not declared in the states list",
            )

        definition = MachineDefinition(
            states=states,
            events=events,
            transitions=transitions,
            start_state=start_state,
            name=document.name,
        )
        logger.info(
            "Built machine %s: %d states, %d events, %d transitions, start state '%s'",
            document.name or "<unnamed>",
            len(states), len(events), len(definition.transitions), start_state,
        )
        return definition

    def _build_states(self, declared: List[StateConfig]) -> Dict[str, State]:
        states: Dict[str, State] = {}
        for state_config in declared:
            if state_config.name in states:
                raise DuplicateStateError(state_config.name)
            states[state_config.name] = State(
                name=state_config.name, message=state_config.message
            )
        return states

    def _build_events(self, declared: List[EventConfig]) -> Dict[str, Event]:
        events: Dict[str, Event] = {}
        for event_config in declared:
            if event_config.name in events:
                raise DuplicateEventError(event_config.name)
            events[event_config.name] = Event(
                name=event_config.name,
                message=event_config.message,
                order_id=event_config.order_id,
            )
        return events

    @staticmethod
    def _check_references(
        index: int,
        rule: TransitionRuleConfig,
        states: Dict[str, State],
        events: Dict[str, Event],
    ) -> None:
        if rule.name not in events:
            raise UnknownReferenceError(rule.name, "event", index, rule.name)
        for state_name in [*rule.src_state, rule.dest_state]:
            if state_name not in states:
                raise UnknownReferenceError(state_name, "state", index, rule.name)

    def _build_transitions(self, rules: List[TransitionRuleConfig]) -> List[Transition]:
        table: Dict[Tuple[str, str], Transition] = {}
        for index, rule in enumerate(rules):
            for source in rule.src_state:
                key = (source, rule.name)
                existing = table.get(key)
                if existing is not None and existing.dest != rule.dest_state:
                    if self.options.conflict_policy is ConflictPolicy.REJECT:
                        raise ConflictingTransitionError(
                            source, rule.name, existing.dest, rule.dest_state,
                            rule_index=index,
                        )
                    logger.warning(
                        "Rule #%d overrides '%s' from '%s': '%s' replaces '%s'",
                        index, rule.name, source, rule.dest_state, existing.dest,
                    )
                elif existing is not None:
                    continue
                table[key] = Transition(
                    source=source, event=rule.name, dest=rule.dest_state, rule_index=index
                )
        return list(table.values())
