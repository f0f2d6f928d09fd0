# prompt_wizard/wizard_session.py

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field as PydField

from prompt_wizard.field_schema import Field


class WizardState(str, Enum):
    NOT_STARTED = "not_started"
    AWAITING_QUESTION = "awaiting_question"
    AWAITING_ANSWER = "awaiting_answer"
    AWAITING_SYNTHESIS = "awaiting_synthesis"
    COMPLETE = "complete"


class WizardSession(BaseModel):
    """
    Full mutable state of one question-flow run.

    `answers` only holds fields the user actually answered: a skipped optional
    field has no key at all, which is not the same as an explicit blank.
    """

    intent: str = ""
    started: bool = False
    step: int = 0
    questions: List[Field] = PydField(default_factory=list)
    answers: Dict[str, str] = PydField(default_factory=dict)
    progress: float = 0.0
    final_prompt: str = ""
    complete: bool = False
    pending: bool = False

    def current_question(self) -> Optional[Field]:
        if 0 <= self.step < len(self.questions):
            return self.questions[self.step]
        return None

    def question_ids(self) -> set[str]:
        return {q.id for q in self.questions}

    def answered_pairs(self) -> List[tuple[str, str]]:
        """(question text, answer) for every answered question, in question order."""
        return [(q.text, self.answers[q.id]) for q in self.questions if q.id in self.answers]

    def state(self, max_questions: int) -> WizardState:
        if not self.started:
            return WizardState.NOT_STARTED
        if self.complete:
            return WizardState.COMPLETE
        if self.step >= max_questions:
            return WizardState.AWAITING_SYNTHESIS
        if self.current_question() is None:
            return WizardState.AWAITING_QUESTION
        return WizardState.AWAITING_ANSWER

    def to_snapshot(self) -> dict:
        return self.model_dump(mode="json")

    @classmethod
    def from_snapshot(cls, snapshot: dict) -> "WizardSession":
        return cls.model_validate(snapshot)
