"""Data-driven state machines for conversational agents.

Machine topology (states, events, transition rules) is loaded from a YAML
document, validated, and executed by lightweight per-session instances.
"""

__version__ = "0.1.0"

# Core data model and runtime
from .core.definition import MachineDefinition
from .core.event import Event
from .core.machine import MachineInstance
from .core.state import State
from .core.transition import Transition

# Configuration
from .config.builder import MachineBuilder
from .config.loader import DocumentLoader
from .config.schema import BuildOptions, ConflictPolicy
from .config.validator import DocumentValidator

# Entry points
from .api import build_machine, load_machine, new_instance

# Extensions
from .hooks import MachineHooks, TransitionContext
from .observability import LoggingObserver, TransitionRecord, TransitionTracker

# Errors
from .exceptions import (
    ChatbotFSMError,
    ConflictingTransitionError,
    DuplicateEventError,
    DuplicateStateError,
    HookError,
    IllegalTransitionError,
    ObserverError,
    ParseError,
    TransitionCanceledError,
    UnknownReferenceError,
    UnknownStateError,
)

__all__ = [
    "__version__",
    # Core
    "Event",
    "MachineDefinition",
    "MachineInstance",
    "State",
    "Transition",
    # Config
    "BuildOptions",
    "ConflictPolicy",
    "DocumentLoader",
    "DocumentValidator",
    "MachineBuilder",
    # Entry points
    "build_machine",
    "load_machine",
    "new_instance",
    # Extensions
    "LoggingObserver",
    "MachineHooks",
    "TransitionContext",
    "TransitionRecord",
    "TransitionTracker",
    # Errors
    "ChatbotFSMError",
    "ConflictingTransitionError",
    "DuplicateEventError",
    "DuplicateStateError",
    "HookError",
    "IllegalTransitionError",
    "ObserverError",
    "ParseError",
    "TransitionCanceledError",
    "UnknownReferenceError",
    "UnknownStateError",
]
