"""Exception hierarchy for chatbot_fsm.

All errors raised by the package derive from :class:`ChatbotFSMError`, which
supports an optional context dictionary for rich error information.

Build-time errors (raised while turning a document into a machine
definition) derive from :class:`ConfigurationError`. Runtime errors raised
by a machine instance derive from :class:`OperationError`.

Example:
    ```python
    from chatbot_fsm.exceptions import IllegalTransitionError

    try:
        machine.fire("Greet")
    except IllegalTransitionError as e:
        reply(f"'{e.event}' is not available right now")
    ```
"""

from typing import Any, Dict, List


class ChatbotFSMError(Exception):
    """Base exception for all chatbot_fsm errors.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context
        details: Alternative to context (takes precedence if both are given)
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.context = details or context or {}
        self.details = self.context


class ConfigurationError(ChatbotFSMError):
    """Raised when a machine document or build configuration is invalid."""

    pass


class OperationError(ChatbotFSMError):
    """Raised when a runtime operation on a machine instance fails."""

    pass


class ParseError(ConfigurationError):
    """Raised when a document does not have the expected structure.

    Args:
        message: Description of the problem
        section: Name of the section being decoded, if known
        details: Extra context (e.g. underlying validation errors)
    """

    def __init__(
        self,
        message: str,
        section: str | None = None,
        details: Dict[str, Any] | None = None,
    ):
        context = dict(details or {})
        if section is not None:
            context["section"] = section
            message = f"Failed to decode {section}: {message}"
        super().__init__(message, context=context)
        self.section = section


class DuplicateStateError(ConfigurationError):
    """Raised when a document declares the same state name twice."""

    def __init__(self, name: str):
        super().__init__(
            f"State '{name}' is declared more than once",
            context={"state": name},
        )
        self.name = name


class DuplicateEventError(ConfigurationError):
    """Raised when a document declares the same event name twice."""

    def __init__(self, name: str):
        super().__init__(
            f"Event '{name}' is declared more than once",
            context={"event": name},
        )
        self.name = name


class UnknownReferenceError(ConfigurationError):
    """Raised when a transition rule references an undeclared state or event.

    Attributes:
        reference: The name that could not be resolved
        kind: ``"event"`` or ``"state"``
        rule_index: Zero-based position of the offending rule in the document
        rule_event: Event name of the offending rule
    """

    def __init__(self, reference: str, kind: str, rule_index: int, rule_event: str):
        super().__init__(
            f"Transition rule #{rule_index} ('{rule_event}') references "
            f"unknown {kind} '{reference}'",
            context={
                "reference": reference,
                "kind": kind,
                "rule_index": rule_index,
                "rule_event": rule_event,
            },
        )
        self.reference = reference
        self.kind = kind
        self.rule_index = rule_index
        self.rule_event = rule_event


class ConflictingTransitionError(ConfigurationError):
    """Raised when two rules map the same (state, event) pair to different states."""

    def __init__(
        self,
        source: str,
        event: str,
        existing_dest: str,
        new_dest: str,
        rule_index: int | None = None,
    ):
        super().__init__(
            f"Event '{event}' from state '{source}' leads to both "
            f"'{existing_dest}' and '{new_dest}'",
            context={
                "source": source,
                "event": event,
                "existing_dest": existing_dest,
                "new_dest": new_dest,
                "rule_index": rule_index,
            },
        )
        self.source = source
        self.event = event
        self.existing_dest = existing_dest
        self.new_dest = new_dest
        self.rule_index = rule_index


class UnknownStateError(ConfigurationError):
    """Raised when a state name does not resolve in the state table.

    This indicates a document defect, typically an undeclared start state.
    """

    def __init__(self, name: str, message: str | None = None):
        super().__init__(
            message or f"State '{name}' is not declared",
            context={"state": name},
        )
        self.name = name


class IllegalTransitionError(OperationError):
    """Raised when an event is fired that is not legal from the current state.

    The machine's current state is left unchanged. Callers are expected to
    offer ``available`` events instead.
    """

    def __init__(self, state: str, event: str, available: List[str] | None = None):
        self.state = state
        self.event = event
        self.available = list(available or [])
        allowed = ", ".join(self.available) if self.available else "(none)"
        super().__init__(
            f"Event '{event}' is not available in state '{state}'. "
            f"Available events: {allowed}",
            context={
                "state": state,
                "event": event,
                "available": self.available,
            },
        )


class TransitionCanceledError(OperationError):
    """Raised when a ``before`` or ``leave`` hook vetoes a transition."""

    def __init__(self, state: str, event: str, phase: str):
        super().__init__(
            f"Transition '{event}' from state '{state}' was canceled by a {phase} hook",
            context={"state": state, "event": event, "phase": phase},
        )
        self.state = state
        self.event = event
        self.phase = phase


class HookError(OperationError):
    """Raised when an ``enter`` or ``after`` hook fails.

    The transition that triggered the hook has already been applied.
    """

    pass


class ObserverError(OperationError):
    """Raised when an observer fails while being notified of a transition.

    The transition being reported has already been applied.
    """

    pass


__all__ = [
    "ChatbotFSMError",
    "ConfigurationError",
    "OperationError",
    "ParseError",
    "DuplicateStateError",
    "DuplicateEventError",
    "UnknownReferenceError",
    "ConflictingTransitionError",
    "UnknownStateError",
    "IllegalTransitionError",
    "TransitionCanceledError",
    "HookError",
    "ObserverError",
]
