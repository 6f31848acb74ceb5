"""Entry points for building and running conversational machines.

Typical use:

    ```python
    from chatbot_fsm import load_machine, new_instance

    definition = load_machine("bot.yaml")     # once per process
    machine = new_instance(definition)        # once per chat session

    reply(machine.current().message)
    buttons = machine.available_transitions(by_order=True)
    ```
"""

from pathlib import Path
from typing import Iterable, Union

from chatbot_fsm.config.builder import MachineBuilder
from chatbot_fsm.config.loader import DocumentLoader
from chatbot_fsm.config.schema import BuildOptions
from chatbot_fsm.core.definition import MachineDefinition
from chatbot_fsm.core.machine import MachineInstance
from chatbot_fsm.hooks import MachineHooks
from chatbot_fsm.observability import TransitionObserver


def build_machine(
    document: Union[bytes, str],
    options: BuildOptions | None = None,
) -> MachineDefinition:
    """Parse and validate a machine document.

    Args:
        document: Raw YAML text or bytes.
        options: Build options (start state, conflict policy).

    Returns:
        Immutable machine definition.

    Raises:
        ConfigurationError: Any ParseError, DuplicateStateError,
            DuplicateEventError, UnknownReferenceError,
            ConflictingTransitionError or UnknownStateError.
    """
    return MachineBuilder(options).build(DocumentLoader().parse(document))


def load_machine(
    file_path: Union[str, Path],
    options: BuildOptions | None = None,
) -> MachineDefinition:
    """Read a machine document from a file and build it.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ConfigurationError: If the document is invalid.
    """
    return MachineBuilder(options).build(DocumentLoader().load_from_file(file_path))


def new_instance(
    definition: MachineDefinition,
    hooks: MachineHooks | None = None,
    observers: Iterable[TransitionObserver] | None = None,
) -> MachineInstance:
    """Create a machine instance positioned at the definition's start state."""
    return MachineInstance(definition, hooks=hooks, observers=observers)
