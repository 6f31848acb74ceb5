"""Document loader for machine documents.

A machine document is YAML text in one of two shapes.

The ordered stream holds three YAML documents in a fixed order: transition
rules, then states, then events::

    fsm:
      - name: Greet
        srcState: [Initial]
        destState: Hello
    ---
    states:
      - name: Initial
        message: "Press start"
      - name: Hello
        message: "Hi there!"
    ---
    events:
      - name: Greet
        message: "Start"
        orderID: 1

The named form is a single mapping with ``fsm`` (or ``transitions`` or
``rules``), ``states`` and ``events`` keys, plus an optional ``initial``
start state. Section order does not matter in the named form.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Type, TypeVar, Union

import yaml
from pydantic import BaseModel, ValidationError

from chatbot_fsm.config.schema import (
    EventsSection,
    MachineDocument,
    StatesSection,
    TransitionsSection,
)
from chatbot_fsm.exceptions import ParseError

logger = logging.getLogger(__name__)

SectionT = TypeVar("SectionT", bound=BaseModel)

RULES_SECTION = "transition rules"
STATES_SECTION = "states list"
EVENTS_SECTION = "events list"

RULES_KEYS = ("fsm", "transitions", "rules")

BOOL_TAG = "tag:yaml.org,2002:bool"


class DocumentYamlLoader(yaml.SafeLoader):
    """Safe loader that only reads ``true``/``false`` as booleans.

    PyYAML follows YAML 1.1, where ``yes``, ``no``, ``on`` and ``off`` are
    booleans too. Names such as ``Yes`` or ``No`` must stay strings.
    """


DocumentYamlLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != BOOL_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
DocumentYamlLoader.add_implicit_resolver(
    BOOL_TAG,
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)

_SECTION_BY_FIELD = {
    "fsm": RULES_SECTION,
    "transitions": RULES_SECTION,
    "rules": RULES_SECTION,
    "states": STATES_SECTION,
    "events": EVENTS_SECTION,
}


def _error_messages(error: ValidationError) -> List[str]:
    messages = []
    for err in error.errors():
        location = ".".join(str(part) for part in err.get("loc", ()))
        messages.append(f"{location}: {err['msg']}" if location else err["msg"])
    return messages


class DocumentLoader:
    """Decode machine documents into declaration lists."""

    def parse(self, document: Union[bytes, str], name: str | None = None) -> MachineDocument:
        """Decode a machine document.

        Args:
            document: Raw YAML text or bytes.
            name: Optional name for the resulting document.

        Returns:
            The decoded document with rules, states and events in
            declaration order.

        Raises:
            ParseError: If the text is not YAML, or the structure does not
                match either document shape.
        """
        try:
            docs = list(yaml.load_all(document, Loader=DocumentYamlLoader))
        except yaml.YAMLError as e:
            raise ParseError(f"Invalid YAML: {e}") from e

        # a trailing '---' yields an empty document
        while docs and docs[-1] is None:
            docs.pop()

        if len(docs) == 3:
            parsed = self._parse_ordered(docs)
        elif len(docs) == 1 and self._is_named_form(docs[0]):
            parsed = self._parse_named(docs[0])
        else:
            raise ParseError(
                "Expected three YAML documents (transition rules, states, events) "
                f"or a single document with named sections, got {len(docs)} document(s)",
                details={"document_count": len(docs)},
            )

        if name and not parsed.name:
            parsed = parsed.model_copy(update={"name": name})
        return parsed

    def load_from_file(self, file_path: Union[str, Path]) -> MachineDocument:
        """Read and decode a machine document from a file.

        Args:
            file_path: Path to a YAML machine document.

        Returns:
            The decoded document, named after the file if it has no name.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ParseError: If the file content is malformed.
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"Machine document not found: {file_path}")

        logger.info("Loading machine document from %s", file_path)
        return self.parse(file_path.read_bytes(), name=file_path.stem)

    @staticmethod
    def _is_named_form(doc: Any) -> bool:
        return (
            isinstance(doc, dict)
            and "states" in doc
            and "events" in doc
            and any(key in doc for key in RULES_KEYS)
        )

    def _parse_ordered(self, docs: List[Any]) -> MachineDocument:
        rules = self._decode_section(docs[0], TransitionsSection, RULES_SECTION).rules
        logger.info("Decoded %d transition rules", len(rules))

        states = self._decode_section(docs[1], StatesSection, STATES_SECTION).states
        logger.info("Decoded %d states", len(states))

        events = self._decode_section(docs[2], EventsSection, EVENTS_SECTION).events
        logger.info("Decoded %d events", len(events))

        return MachineDocument(rules=rules, states=states, events=events)

    def _parse_named(self, doc: Dict[str, Any]) -> MachineDocument:
        try:
            parsed = MachineDocument.model_validate(doc)
        except ValidationError as e:
            first_loc = e.errors()[0].get("loc", ())
            section = _SECTION_BY_FIELD.get(str(first_loc[0])) if first_loc else None
            raise ParseError(
                str(e), section=section, details={"errors": _error_messages(e)}
            ) from e

        logger.info(
            "Decoded %d transition rules, %d states and %d events",
            len(parsed.rules), len(parsed.states), len(parsed.events),
        )
        return parsed

    @staticmethod
    def _decode_section(doc: Any, model: Type[SectionT], section: str) -> SectionT:
        if not isinstance(doc, dict):
            raise ParseError(
                f"expected a mapping, got {type(doc).__name__}", section=section
            )
        try:
            return model.model_validate(doc)
        except ValidationError as e:
            raise ParseError(
                str(e), section=section, details={"errors": _error_messages(e)}
            ) from e
