"""Document and build option schemas using Pydantic.

This module defines the schema for machine documents:
- Transition rules (``fsm`` section)
- State declarations (``states`` section)
- Event declarations (``events`` section)

and the options that control how a document is built into a machine
definition.
"""

import os
from enum import Enum
from typing import Any, Dict, List

from pydantic import AliasChoices, BaseModel, Field, field_validator

DEFAULT_START_STATE = "Initial"


class TransitionRuleConfig(BaseModel):
    """Declaration of one transition rule.

    The rule makes event ``name`` legal from every state in ``src_state`` and
    moves the machine to ``dest_state`` when fired.
    """

    name: str = Field(min_length=1)
    src_state: List[str] = Field(alias="srcState", min_length=1)
    dest_state: str = Field(alias="destState", min_length=1)

    model_config = {"populate_by_name": True}  # Allow both 'srcState' and 'src_state'

    @field_validator("src_state")
    @classmethod
    def dedupe_sources(cls, v: List[str]) -> List[str]:
        """Collapse repeated source states, keeping first occurrence order."""
        result: List[str] = []
        for name in v:
            if not name:
                raise ValueError("Source state names must be non-empty")
            if name not in result:
                result.append(name)
        return result


class StateConfig(BaseModel):
    """Declaration of one state."""

    name: str = Field(min_length=1)
    message: Any = None


class EventConfig(BaseModel):
    """Declaration of one event."""

    name: str = Field(min_length=1)
    message: Any = None
    order_id: int = Field(
        default=0,
        validation_alias=AliasChoices("orderID", "orderid", "order_id"),
    )


class TransitionsSection(BaseModel):
    """First section of an ordered document."""

    rules: List[TransitionRuleConfig] = Field(
        validation_alias=AliasChoices("fsm", "transitions", "rules")
    )


class StatesSection(BaseModel):
    """Second section of an ordered document."""

    states: List[StateConfig]


class EventsSection(BaseModel):
    """Third section of an ordered document."""

    events: List[EventConfig]


class MachineDocument(BaseModel):
    """A fully decoded machine document.

    Produced by :class:`chatbot_fsm.config.loader.DocumentLoader` from either
    the ordered three-section stream or the single named-section form.
    """

    name: str | None = None
    initial: str | None = None
    rules: List[TransitionRuleConfig] = Field(
        validation_alias=AliasChoices("fsm", "transitions", "rules")
    )
    states: List[StateConfig]
    events: List[EventConfig]

    @field_validator("initial")
    @classmethod
    def validate_initial(cls, v: str | None) -> str | None:
        if v is not None and not v:
            raise ValueError("'initial' must be a non-empty state name")
        return v


class ConflictPolicy(str, Enum):
    """How to treat two rules mapping one (state, event) pair to different states."""

    REJECT = "reject"
    LAST_WINS = "last_wins"


class BuildOptions(BaseModel):
    """Options controlling how a document is built into a machine definition.

    The start state is resolved in this order: ``start_state`` if set, then
    the document's ``initial`` field, then ``default_start_state``.
    """

    start_state: str | None = None
    default_start_state: str = Field(default=DEFAULT_START_STATE, min_length=1)
    conflict_policy: ConflictPolicy = ConflictPolicy.REJECT

    def resolve_start_state(self, document_initial: str | None = None) -> str:
        """Pick the start state name for a document.

        Args:
            document_initial: The ``initial`` field of the document, if any.

        Returns:
            The start state name to use.
        """
        return self.start_state or document_initial or self.default_start_state

    @classmethod
    def from_env(cls, prefix: str = "CHATBOT_FSM_", **overrides: Any) -> "BuildOptions":
        """Create options from environment variables.

        Reads ``{prefix}START_STATE`` and ``{prefix}CONFLICT_POLICY``.
        Keyword overrides take precedence over the environment.

        Args:
            prefix: Environment variable prefix.
            **overrides: Explicit option values.

        Returns:
            Validated BuildOptions instance.
        """
        values: Dict[str, Any] = {}
        start_state = os.environ.get(f"{prefix}START_STATE")
        if start_state:
            values["start_state"] = start_state
        policy = os.environ.get(f"{prefix}CONFLICT_POLICY")
        if policy:
            values["conflict_policy"] = policy.lower()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def generate_json_schema() -> Dict[str, Any]:
    """Generate JSON schema for the named-section document form.

    Returns:
        JSON schema as a dictionary.
    """
    return MachineDocument.model_json_schema()
