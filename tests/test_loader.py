"""Tests for the document loader."""

import pytest

from chatbot_fsm.config.loader import (
    EVENTS_SECTION,
    RULES_SECTION,
    STATES_SECTION,
    DocumentLoader,
)
from chatbot_fsm.config.schema import generate_json_schema
from chatbot_fsm.exceptions import ConfigurationError, ParseError


@pytest.fixture
def loader():
    return DocumentLoader()


class TestOrderedDocuments:
    """Three YAML documents: rules, states, events."""

    def test_parse_greeting_document(self, loader, greeting_document):
        doc = loader.parse(greeting_document)

        assert [r.name for r in doc.rules] == ["Greet"]
        assert doc.rules[0].src_state == ["Initial"]
        assert doc.rules[0].dest_state == "Hello"
        assert [s.name for s in doc.states] == ["Initial", "Hello"]
        assert doc.states[1].message == "Hello!"
        assert doc.events[0].name == "Greet"
        assert doc.events[0].order_id == 1
        assert doc.initial is None

    def test_parse_bytes(self, loader, greeting_document):
        doc = loader.parse(greeting_document.encode("utf-8"))
        assert len(doc.states) == 2

    def test_declaration_order_preserved(self, loader, document_factory):
        text = document_factory(
            [
                {"name": "b", "srcState": ["S3"], "destState": "S1"},
                {"name": "a", "srcState": ["S1"], "destState": "S2"},
            ],
            ["S3", "S1", "S2"],
            ["b", "a"],
        )
        doc = loader.parse(text)

        assert [r.name for r in doc.rules] == ["b", "a"]
        assert [s.name for s in doc.states] == ["S3", "S1", "S2"]
        assert [e.name for e in doc.events] == ["b", "a"]

    def test_duplicate_sources_collapsed(self, loader, document_factory):
        text = document_factory(
            [{"name": "go", "srcState": ["A", "B", "A"], "destState": "B"}],
            ["A", "B"],
            ["go"],
        )
        assert loader.parse(text).rules[0].src_state == ["A", "B"]

    @pytest.mark.parametrize("key", ["orderID", "orderid", "order_id"])
    def test_order_id_keys(self, loader, document_factory, key):
        text = document_factory([], ["Initial"], [{"name": "go", key: 7}])
        assert loader.parse(text).events[0].order_id == 7

    def test_order_id_defaults_to_zero(self, loader, document_factory):
        text = document_factory([], ["Initial"], [{"name": "go"}])
        assert loader.parse(text).events[0].order_id == 0

    def test_opaque_messages_kept(self, loader, document_factory):
        message = {"text": "Pick one", "buttons": ["a", "b"]}
        text = document_factory([], [{"name": "Initial", "message": message}], [])
        assert loader.parse(text).states[0].message == message

    def test_transitions_key_accepted(self, loader):
        text = (
            "transitions:\n  - {name: go, srcState: [A], destState: B}\n"
            "---\nstates: [{name: A}, {name: B}]\n"
            "---\nevents: [{name: go}]\n"
        )
        assert loader.parse(text).rules[0].name == "go"

    def test_trailing_separator_ignored(self, loader, greeting_document):
        doc = loader.parse(greeting_document + "---\n")
        assert [s.name for s in doc.states] == ["Initial", "Hello"]

    def test_yes_no_names_stay_strings(self, loader):
        text = """\
fsm:
  - name: Yes
    srcState: [Initial]
    destState: On
  - name: No
    srcState: [Initial]
    destState: Off
---
states:
  - name: Initial
    message: Continue?
  - name: On
  - name: Off
---
events:
  - name: Yes
    message: yes
  - name: No
    message: no
"""
        doc = loader.parse(text)

        assert [r.name for r in doc.rules] == ["Yes", "No"]
        assert [r.dest_state for r in doc.rules] == ["On", "Off"]
        assert [s.name for s in doc.states] == ["Initial", "On", "Off"]
        assert [e.name for e in doc.events] == ["Yes", "No"]
        assert [e.message for e in doc.events] == ["yes", "no"]

    def test_true_false_still_booleans(self, loader):
        text = "fsm: []\n---\nstates: [{name: Initial, message: true}]\n---\nevents: []\n"
        assert loader.parse(text).states[0].message is True


class TestNamedDocuments:
    """A single mapping with named sections."""

    def test_parse_named_form(self, loader):
        text = """
name: greeter
initial: Start
events:
  - {name: Greet, orderID: 2}
states:
  - {name: Start}
  - {name: Hello}
fsm:
  - {name: Greet, srcState: [Start], destState: Hello}
"""
        doc = loader.parse(text)

        assert doc.name == "greeter"
        assert doc.initial == "Start"
        assert [r.name for r in doc.rules] == ["Greet"]
        assert [s.name for s in doc.states] == ["Start", "Hello"]
        assert doc.events[0].order_id == 2

    def test_named_form_error_reports_section(self, loader):
        text = "fsm: []\nstates:\n  - message: no name\nevents: []\n"
        with pytest.raises(ParseError) as exc_info:
            loader.parse(text)
        assert exc_info.value.section == STATES_SECTION

    def test_rules_key_accepted(self, loader):
        text = "rules: []\nstates: [{name: Initial}]\nevents: []\n"
        doc = loader.parse(text)
        assert doc.rules == []
        assert [s.name for s in doc.states] == ["Initial"]

    def test_empty_initial_rejected(self, loader):
        text = "initial: ''\nfsm: []\nstates: [{name: A}]\nevents: []\n"
        with pytest.raises(ParseError):
            loader.parse(text)


class TestParseErrors:
    """Malformed documents raise ParseError."""

    def test_parse_error_is_configuration_error(self):
        assert issubclass(ParseError, ConfigurationError)

    def test_empty_document(self, loader):
        with pytest.raises(ParseError) as exc_info:
            loader.parse("")
        assert exc_info.value.context["document_count"] == 0

    def test_two_documents(self, loader):
        text = "fsm: []\n---\nstates: []\n"
        with pytest.raises(ParseError, match="got 2 document"):
            loader.parse(text)

    def test_four_documents(self, loader, greeting_document):
        with pytest.raises(ParseError):
            loader.parse(greeting_document + "---\nextra: true\n")

    def test_single_document_missing_sections(self, loader):
        with pytest.raises(ParseError):
            loader.parse("fsm: []\nstates: []\n")

    def test_invalid_yaml(self, loader):
        with pytest.raises(ParseError, match="Invalid YAML"):
            loader.parse("fsm: [unclosed\n---\nstates: []\n---\nevents: []\n")

    def test_invalid_utf8(self, loader):
        text = b"fsm: []\n---\nstates: [{name: \xff\xfe}]\n---\nevents: []\n"
        with pytest.raises(ParseError, match="Invalid YAML"):
            loader.parse(text)

    def test_section_not_a_mapping(self, loader):
        text = "fsm: []\n---\n- name: A\n---\nevents: []\n"
        with pytest.raises(ParseError) as exc_info:
            loader.parse(text)
        assert exc_info.value.section == STATES_SECTION
        assert "expected a mapping" in str(exc_info.value)

    def test_sections_out_of_order(self, loader):
        text = "states: []\n---\nfsm: []\n---\nevents: []\n"
        with pytest.raises(ParseError) as exc_info:
            loader.parse(text)
        assert exc_info.value.section == RULES_SECTION

    def test_rule_missing_event_name(self, loader, document_factory):
        text = document_factory([{"srcState": ["A"], "destState": "A"}], ["A"], [])
        with pytest.raises(ParseError) as exc_info:
            loader.parse(text)
        assert exc_info.value.section == RULES_SECTION
        assert exc_info.value.context["errors"]

    def test_rule_missing_destination(self, loader, document_factory):
        text = document_factory([{"name": "go", "srcState": ["A"]}], ["A"], ["go"])
        with pytest.raises(ParseError):
            loader.parse(text)

    def test_rule_without_sources(self, loader, document_factory):
        text = document_factory(
            [{"name": "go", "srcState": [], "destState": "A"}], ["A"], ["go"]
        )
        with pytest.raises(ParseError):
            loader.parse(text)

    def test_state_missing_name(self, loader, document_factory):
        text = document_factory([], [{"message": "orphan"}], [])
        with pytest.raises(ParseError) as exc_info:
            loader.parse(text)
        assert exc_info.value.section == STATES_SECTION

    def test_state_with_empty_name(self, loader, document_factory):
        text = document_factory([], [{"name": ""}], [])
        with pytest.raises(ParseError):
            loader.parse(text)

    def test_event_with_bad_order_id(self, loader, document_factory):
        text = document_factory([], ["A"], [{"name": "go", "orderID": "first"}])
        with pytest.raises(ParseError) as exc_info:
            loader.parse(text)
        assert exc_info.value.section == EVENTS_SECTION


class TestLoadFromFile:
    """Reading documents from disk."""

    def test_load_example(self, loader, example_path):
        doc = loader.load_from_file(example_path)

        assert doc.name == "chatbot"
        assert "Initial" in [s.name for s in doc.states]
        assert len(doc.events) == 9

    def test_load_keeps_document_name(self, loader, tmp_path):
        path = tmp_path / "bot.yaml"
        path.write_text("name: named\nfsm: []\nstates: [{name: Initial}]\nevents: []\n")
        assert loader.load_from_file(path).name == "named"

    def test_missing_file(self, loader, tmp_path):
        with pytest.raises(FileNotFoundError):
            loader.load_from_file(tmp_path / "missing.yaml")


class TestJsonSchema:
    """JSON schema of the named-section form."""

    def test_schema_sections(self):
        schema = generate_json_schema()

        assert set(schema["required"]) == {"fsm", "states", "events"}
        assert {"name", "initial"} <= set(schema["properties"])

    def test_schema_uses_document_keys(self):
        defs = generate_json_schema()["$defs"]

        assert {"srcState", "destState"} <= set(defs["TransitionRuleConfig"]["properties"])
        assert "orderID" in defs["EventConfig"]["properties"]
