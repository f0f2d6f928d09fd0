# prompt_wizard/field_schema.py
"""
Field schema for elicited inputs, plus the two structured objects the
text-generation service is asked to embed in its completions:

    {"question": {"text": ..., "type": "text|textarea|select", "options": [...], "required": ...}}
    {"finalPrompt": "..."}

Both are validated here; anything else is rejected before it can reach a session.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class FieldKind(str, Enum):
    SHORT_TEXT = "short-text"
    MULTI_LINE_TEXT = "multi-line-text"
    SINGLE_SELECT = "single-select"
    BOOLEAN = "boolean"


# type names used by the generative service and the browser renderer
WIRE_KINDS: Dict[str, FieldKind] = {
    "text": FieldKind.SHORT_TEXT,
    "textarea": FieldKind.MULTI_LINE_TEXT,
    "select": FieldKind.SINGLE_SELECT,
    "dropdown": FieldKind.SINGLE_SELECT,
    "checkbox": FieldKind.BOOLEAN,
    "boolean": FieldKind.BOOLEAN,
}


def encode_field_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


class Field(BaseModel):
    id: str
    label: str
    kind: FieldKind
    options: Optional[List[str]] = None
    required: bool = False
    default: Optional[str] = None
    help: Optional[str] = None

    @model_validator(mode="after")
    def _options_only_for_select(self) -> "Field":
        if self.kind == FieldKind.SINGLE_SELECT:
            if not self.options:
                raise ValueError(f"field {self.id}: single-select needs at least one option")
        elif self.options is not None:
            raise ValueError(f"field {self.id}: options are only allowed on single-select fields")
        return self

    @property
    def text(self) -> str:
        return self.label

    def encode_value(self, value: Any) -> str:
        return encode_field_value(value)


class QuestionPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str
    type: str
    options: Optional[List[str]] = None
    required: bool = False
    # checkbox questions usually come with a JSON true/false default
    default: Optional[Union[bool, int, float, str]] = None
    help: Optional[str] = None
    rationale: Optional[str] = None

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("question text is empty")
        return v.strip()

    @field_validator("type")
    @classmethod
    def _known_type(cls, v: str) -> str:
        t = v.strip().lower()
        if t not in WIRE_KINDS:
            raise ValueError(f"unknown question type '{v}'")
        return t

    @field_validator("default")
    @classmethod
    def _encode_default(cls, v: Optional[Union[bool, int, float, str]]) -> Optional[str]:
        return None if v is None else encode_field_value(v)

    def to_field(self, field_id: str) -> Field:
        kind = WIRE_KINDS[self.type]
        options = None
        if kind == FieldKind.SINGLE_SELECT:
            options = [o.strip() for o in (self.options or []) if o and o.strip()]
        return Field(
            id=field_id,
            label=self.text,
            kind=kind,
            options=options,
            required=self.required,
            default=self.default,
            help=self.help or self.rationale,
        )


class NextQuestionObject(BaseModel):
    model_config = ConfigDict(extra="ignore")

    question: QuestionPayload


class FinalPromptObject(BaseModel):
    model_config = ConfigDict(extra="ignore")

    finalPrompt: str
    promptStructure: Optional[Dict[str, Any]] = None
    expertiseLevel: Optional[str] = None

    @field_validator("finalPrompt")
    @classmethod
    def _prompt_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("finalPrompt is empty")
        return v.strip()
