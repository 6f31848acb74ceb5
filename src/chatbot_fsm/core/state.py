"""State records for conversational machines."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class State:
    """A named position in the conversation graph.

    Attributes:
        name: Unique state identifier.
        message: User-facing payload shown while in this state. The engine
            never interprets it.
    """

    name: str
    message: Any = None
