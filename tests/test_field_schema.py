import pydantic
import pytest

from prompt_wizard.base_utils import BaseUtils
from prompt_wizard.errors import ParseError
from prompt_wizard.field_schema import Field, FieldKind, FinalPromptObject, NextQuestionObject


@pytest.mark.parametrize(
    "wire, kind",
    [
        ("text", FieldKind.SHORT_TEXT),
        ("textarea", FieldKind.MULTI_LINE_TEXT),
        ("select", FieldKind.SINGLE_SELECT),
        ("Dropdown", FieldKind.SINGLE_SELECT),
        ("checkbox", FieldKind.BOOLEAN),
    ],
)
def test_wire_types_map_to_kinds(wire, kind):
    options = ["a", "b"] if kind == FieldKind.SINGLE_SELECT else None
    obj = NextQuestionObject.model_validate({"question": {"text": "Q?", "type": wire, "options": options}})
    assert obj.question.to_field("q0").kind == kind


def test_unknown_type_is_rejected():
    with pytest.raises(pydantic.ValidationError):
        NextQuestionObject.model_validate({"question": {"text": "Q?", "type": "slider"}})


def test_options_dropped_for_free_text_questions():
    obj = NextQuestionObject.model_validate(
        {"question": {"text": "Audience?", "type": "text", "options": ["x"], "required": "true"}}
    )
    field = obj.question.to_field("q2")
    assert field.options is None
    assert field.required is True
    assert field.text == "Audience?"


@pytest.mark.parametrize("default, encoded", [(False, "false"), (True, "true"), (3, "3"), ("formal", "formal")])
def test_question_default_is_encoded(default, encoded):
    obj = NextQuestionObject.model_validate({"question": {"text": "Include code?", "type": "checkbox", "default": default}})
    assert obj.question.to_field("q1").default == encoded


def test_field_enforces_options_invariant():
    with pytest.raises(pydantic.ValidationError):
        Field(id="q0", label="Tone?", kind=FieldKind.SINGLE_SELECT, options=[])
    with pytest.raises(pydantic.ValidationError):
        Field(id="q0", label="Tone?", kind=FieldKind.SHORT_TEXT, options=["a"])


def test_blank_final_prompt_is_rejected():
    with pytest.raises(pydantic.ValidationError):
        FinalPromptObject.model_validate({"finalPrompt": "  "})
    obj = FinalPromptObject.model_validate({"finalPrompt": " go ", "expertiseLevel": "Expert", "extra": 1})
    assert obj.finalPrompt == "go"


class TestExtractStructuredObject:

    def setup_method(self):
        self.utils = BaseUtils()

    def test_object_inside_prose_and_fences(self):
        text = 'Sure!\n```json\n{"question": {"text": "Tone?", "type": "text"}}\n```\nGood luck.'
        assert self.utils.extract_structured_object(text) == {"question": {"text": "Tone?", "type": "text"}}

    def test_spans_first_open_to_last_close(self):
        text = 'a {"finalPrompt": "use {braces} freely"} b'
        assert self.utils.extract_structured_object(text)["finalPrompt"] == "use {braces} freely"

    @pytest.mark.parametrize("text", ["", "no object here", "} backwards {", '{"a": 1} and {"b": 2}', "[1, 2]"])
    def test_rejects_missing_or_broken_objects(self, text):
        with pytest.raises(ParseError):
            self.utils.extract_structured_object(text)


def test_unsafe_string_format_leaves_literal_braces():
    out = BaseUtils().unsafe_string_format('{"a": 1} {NAME} {OTHER}', NAME="x")
    assert out == '{"a": 1} x {OTHER}'
