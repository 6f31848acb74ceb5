"""Validated transition edges."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Transition:
    """One validated edge of the transition table.

    Attributes:
        source: State the event is fired from.
        event: Name of the event.
        dest: State the machine moves to.
        rule_index: Position of the declaring rule in the document.
    """

    source: str
    event: str
    dest: str
    rule_index: int = 0

    @property
    def key(self) -> tuple[str, str]:
        """Lookup key of this edge in the transition table."""
        return (self.source, self.event)

    @property
    def name(self) -> str:
        return f"{self.source} --{self.event}--> {self.dest}"
