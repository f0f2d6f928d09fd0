# prompt_wizard/flow_controller.py

import logging
from typing import Any, Callable, Optional

import pydantic

from prompt_wizard.base_utils import BaseUtils
from prompt_wizard.errors import (
    GatewayError,
    GenerationFailure,
    InvalidStateError,
    ParseError,
    SessionBusyError,
    SynthesisFailure,
    ValidationError,
)
from prompt_wizard.field_schema import Field, FinalPromptObject, NextQuestionObject
from prompt_wizard.google_helpers import MAX_QUESTIONS
from prompt_wizard.wizard_prompts import FINAL_PROMPT_PROMPT, NEXT_QUESTION_PROMPT, NO_ANSWERS_YET, PREVIEW_SUFFIX
from prompt_wizard.wizard_session import WizardSession

logger = logging.getLogger("prompt_wizard")

# questions fill the bar up to here; the rest is reserved for synthesis
QUESTION_PROGRESS_CAP = 80.0


class FlowController(BaseUtils):
    """
    Owns every state transition of a WizardSession:

        not_started -> awaiting_question -> awaiting_answer <-> (loop)
                    -> awaiting_synthesis -> complete

    `llm` is anything with a `generate(prompt) -> str` method.
    `on_change` is called with the session after every mutation, including the
    `pending` flag flipping on before a gateway call, so a store can persist it.

    A failed gateway call never moves the session forward: the caller gets a
    GenerationFailure / SynthesisFailure and may simply retry the same operation.
    """

    def __init__(
        self,
        llm: Any,
        *,
        max_questions: int = MAX_QUESTIONS,
        on_change: Optional[Callable[[WizardSession], None]] = None,
    ):
        if max_questions < 1:
            raise ValueError("max_questions must be at least 1")
        self.llm = llm
        self.max_questions = max_questions
        self.on_change = on_change

    # -----------------------
    # Queries
    # -----------------------

    def can_proceed(self, session: WizardSession) -> bool:
        current = session.current_question()
        if current is None:
            return False
        return current.id in session.answers or not current.required

    def preview_prompt(self, session: WizardSession) -> str:
        """
        Local draft of the final prompt, built without calling the gateway.
        """
        parts = [session.intent.strip()]
        for text, answer in session.answered_pairs():
            parts.append(f"{text}: {answer}.")
        parts.append(PREVIEW_SUFFIX)
        return " ".join(p for p in parts if p)

    # -----------------------
    # Transitions
    # -----------------------

    def start(self, session: WizardSession, intent: str) -> WizardSession:
        intent = (intent or "").strip()
        if not intent:
            raise ValidationError("Please describe what you want to achieve before starting.")
        if session.started:
            raise InvalidStateError("This wizard has already started. Start over to change the goal.")
        self._ensure_idle(session)

        self._clear(session)
        session.intent = intent
        session.started = True
        session.step = 0
        self._changed(session)

        return self.request_next_question(session)

    def request_next_question(self, session: WizardSession) -> WizardSession:
        self._ensure_active(session)
        if session.step >= self.max_questions:
            return self.synthesize_final_prompt(session)
        if session.current_question() is not None:
            raise InvalidStateError("The current question has not been answered yet.")

        field = self._fetch_question(session, session.step)
        session.questions.append(field)
        self._bump_progress(session, session.step)
        self._changed(session)
        return session

    def submit_answer(self, session: WizardSession, field_id: str, value: Any) -> WizardSession:
        self._ensure_active(session)
        self._ensure_idle(session)
        current = session.current_question()
        if current is None or current.id != field_id:
            raise InvalidStateError(f"'{field_id}' is not the question currently being asked.")

        encoded = current.encode_value(value)
        if encoded.strip():
            session.answers[field_id] = encoded
        else:
            # skipped, not blank
            session.answers.pop(field_id, None)
        self._changed(session)
        return session

    def advance(self, session: WizardSession) -> WizardSession:
        self._ensure_active(session)
        self._ensure_idle(session)
        if session.current_question() is None:
            raise InvalidStateError("There is no question to move past yet.")
        if not self.can_proceed(session):
            raise ValidationError("This question is required. Please answer it before continuing.")

        next_step = session.step + 1
        if next_step >= self.max_questions:
            final_prompt = self._fetch_final_prompt(session)
            session.step = self.max_questions
            self._finish(session, final_prompt)
            return session

        field = self._fetch_question(session, next_step)
        session.step = next_step
        session.questions.append(field)
        self._bump_progress(session, next_step)
        self._changed(session)
        return session

    def skip_to_final(self, session: WizardSession) -> WizardSession:
        return self.synthesize_final_prompt(session)

    def synthesize_final_prompt(self, session: WizardSession) -> WizardSession:
        self._ensure_active(session)
        final_prompt = self._fetch_final_prompt(session)
        self._finish(session, final_prompt)
        return session

    def reset(self, session: WizardSession) -> WizardSession:
        self._clear(session)
        self._changed(session)
        return session

    # -----------------------
    # Prompt building
    # -----------------------

    def _render_pairs(self, session: WizardSession) -> str:
        lines = [f"{text}: {answer}" for text, answer in session.answered_pairs()]
        return "\n".join(lines) if lines else NO_ANSWERS_YET

    def build_question_prompt(self, session: WizardSession, step_index: int) -> str:
        return self.unsafe_string_format(
            NEXT_QUESTION_PROMPT,
            INTENT=session.intent,
            STEP_NUMBER=step_index + 1,
            MAX_QUESTIONS=self.max_questions,
            ANSWERED_PAIRS=self._render_pairs(session),
        )

    def build_final_prompt_request(self, session: WizardSession) -> str:
        return self.unsafe_string_format(
            FINAL_PROMPT_PROMPT,
            INTENT=session.intent,
            ANSWERED_PAIRS=self._render_pairs(session),
        )

    # -----------------------
    # Gateway plumbing
    # -----------------------

    def _call_gateway(self, session: WizardSession, prompt: str) -> str:
        self._ensure_idle(session)
        session.pending = True
        self._changed(session)
        try:
            return self.llm.generate(prompt)
        finally:
            session.pending = False
            self._changed(session)

    def _fetch_question(self, session: WizardSession, step_index: int) -> Field:
        prompt = self.build_question_prompt(session, step_index)
        try:
            raw = self._call_gateway(session, prompt)
            data = self.extract_structured_object(raw)
            try:
                field = NextQuestionObject.model_validate(data).question.to_field(f"q{step_index}")
            except pydantic.ValidationError as e:
                raise ParseError("The generated question did not match the expected shape.") from e
        except (GatewayError, ParseError) as e:
            logger.info(f"[FLOW] question {step_index} failed: {e.message}")
            raise GenerationFailure(f"Could not generate the next question: {e.message}") from e

        if field.id in session.question_ids():
            # only reachable if the cursor and the question list disagree
            raise InvalidStateError(f"Question '{field.id}' already exists.")
        return field

    def _fetch_final_prompt(self, session: WizardSession) -> str:
        prompt = self.build_final_prompt_request(session)
        try:
            raw = self._call_gateway(session, prompt)
            data = self.extract_structured_object(raw)
            try:
                result = FinalPromptObject.model_validate(data)
            except pydantic.ValidationError as e:
                raise ParseError("The generated final prompt did not match the expected shape.") from e
        except (GatewayError, ParseError) as e:
            logger.info(f"[FLOW] synthesis failed: {e.message}")
            raise SynthesisFailure(f"Could not generate the final prompt: {e.message}") from e

        if result.promptStructure:
            logger.debug("[FLOW] prompt structure: %s", result.promptStructure)
        return result.finalPrompt

    # -----------------------
    # State helpers
    # -----------------------

    def _ensure_active(self, session: WizardSession) -> None:
        if not session.started:
            raise InvalidStateError("The wizard has not been started.")
        if session.complete:
            raise InvalidStateError("The final prompt has already been generated. Start over to build another.")

    def _ensure_idle(self, session: WizardSession) -> None:
        if session.pending:
            raise SessionBusyError("Still working on the previous request. Please wait.")

    def _bump_progress(self, session: WizardSession, step_index: int) -> None:
        target = min((step_index + 1) / self.max_questions * QUESTION_PROGRESS_CAP, QUESTION_PROGRESS_CAP)
        session.progress = max(session.progress, target)

    def _finish(self, session: WizardSession, final_prompt: str) -> None:
        session.final_prompt = final_prompt
        session.complete = True
        session.progress = 100.0
        self._changed(session)

    def _clear(self, session: WizardSession) -> None:
        fresh = WizardSession()
        for name in WizardSession.model_fields:
            setattr(session, name, getattr(fresh, name))

    def _changed(self, session: WizardSession) -> None:
        if self.on_change is not None:
            self.on_change(session)
