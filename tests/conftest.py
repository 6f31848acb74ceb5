"""Pytest configuration and shared fixtures for chatbot_fsm tests."""

import sys
from pathlib import Path

import pytest
import yaml

# Add src to path for testing
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from chatbot_fsm import build_machine, new_instance  # noqa: E402

GREETING_DOCUMENT = """\
fsm:
  - name: Greet
    srcState: [Initial]
    destState: Hello
---
states:
  - name: Initial
    message: "Say hi?"
  - name: Hello
    message: "Hello!"
---
events:
  - name: Greet
    message: "Hi"
    orderID: 1
"""

EXAMPLE_DOCUMENT = Path(__file__).parent.parent / "examples" / "chatbot.yaml"


def make_document(rules, states, events) -> str:
    """Render an ordered three-section document."""
    return yaml.safe_dump_all(
        [{"fsm": rules}, {"states": states}, {"events": events}],
        sort_keys=False,
    )


def states_named(*names):
    return [{"name": name, "message": f"{name} message"} for name in names]


def events_named(*names):
    return [
        {"name": name, "message": f"{name} label", "orderID": index}
        for index, name in enumerate(names)
    ]


@pytest.fixture
def greeting_document():
    """The minimal Initial --Greet--> Hello document."""
    return GREETING_DOCUMENT


@pytest.fixture
def greeting_definition(greeting_document):
    return build_machine(greeting_document)


@pytest.fixture
def greeting_machine(greeting_definition):
    return new_instance(greeting_definition, observers=[])


@pytest.fixture
def example_path():
    """Path to the bundled info-bot document."""
    return EXAMPLE_DOCUMENT


@pytest.fixture
def example_definition(example_path):
    return build_machine(example_path.read_text())


@pytest.fixture
def document_factory():
    """Build ordered documents from rule/state/event lists or bare names.

    ``states`` and ``events`` may be given as lists of dicts or as lists of
    names, in which case default messages and order ids are filled in.
    """

    def factory(rules, states, events):
        if states and isinstance(states[0], str):
            states = states_named(*states)
        if events and isinstance(events[0], str):
            events = events_named(*events)
        return make_document(rules, states, events)

    return factory
