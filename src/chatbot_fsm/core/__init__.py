"""Core data model and runtime for conversational state machines."""

from chatbot_fsm.core.definition import MachineDefinition
from chatbot_fsm.core.event import Event
from chatbot_fsm.core.machine import MachineInstance
from chatbot_fsm.core.state import State
from chatbot_fsm.core.transition import Transition

__all__ = [
    "Event",
    "MachineDefinition",
    "MachineInstance",
    "State",
    "Transition",
]
