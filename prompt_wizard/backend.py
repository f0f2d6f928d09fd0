# prompt_wizard/backend.py

import json
import logging
import re
from typing import Any, Callable, Optional

from prompt_wizard.errors import ValidationError, WizardError
from prompt_wizard.flow_controller import FlowController
from prompt_wizard.google_helpers import MAX_QUESTIONS, SESSION_KEY
from prompt_wizard.llm_client import build_llm_client
from prompt_wizard.wizard_session import WizardSession

logger = logging.getLogger("prompt_wizard")


def _sanitize_session_id(s: str) -> str:
    if not s:
        return ""
    # letters, digits, _ . - only
    return re.sub(r"[^A-Za-z0-9_.-]", "_", str(s))


class Backend:
    """
    Turns {type, session_id, payload} requests into FlowController operations.

    Every request loads the session from the store, runs one operation and returns
    the resulting snapshot. The controller saves through `on_change`, so the busy
    flag is visible to concurrent requests while a gateway call is outstanding.
    """

    def __init__(
        self,
        store,
        *,
        llm_factory: Callable[[], Any] = build_llm_client,
        max_questions: int = MAX_QUESTIONS,
    ):
        self.store = store
        self.max_questions = max_questions
        self._llm_factory = llm_factory
        self._llm = None

    # -----------------------
    # Gateway
    # -----------------------

    def generate(self, prompt: str) -> str:
        """
        Forward one prompt to the text-generation service. The client (and the
        credentials it holds) is built on first use and kept on the backend.
        """
        if self._llm is None:
            self._llm = self._llm_factory()
        return self._llm.generate(prompt)

    def handle_generate(self, payload) -> dict:
        payload = payload or {}
        prompt = (payload.get("prompt") or "").strip()
        if not prompt:
            raise ValidationError("A prompt is required.")
        return {"text": self.generate(prompt)}

    # -----------------------
    # Sessions
    # -----------------------

    def _session_key(self, session_id: str) -> str:
        return f"{session_id}::{SESSION_KEY}"

    def _load_session(self, key: str) -> WizardSession:
        session = self.store.load(key)
        return session if session is not None else WizardSession()

    def _session_view(self, session: WizardSession, controller: FlowController) -> dict:
        view = session.to_snapshot()
        current = session.current_question()
        view["state"] = session.state(self.max_questions).value
        view["can_proceed"] = controller.can_proceed(session)
        view["current_question_id"] = current.id if current is not None else None
        view["max_questions"] = self.max_questions
        return view

    def sweep(self) -> int:
        removed = self.store.sweep_expired()
        if removed:
            logger.debug("Session store sweep: removed %d expired wizard sessions", removed)
        return removed

    # -----------------------
    # Dispatch
    # -----------------------

    def _process_request_data(self, request_data: dict) -> dict:
        """
        Core request handling logic.
        Takes a parsed JSON dict and returns the response_data dict.
        Wizard failures become status "error" with a user-facing message and the
        (unchanged) session; anything else propagates.
        """
        request_type = request_data.get("type")
        payload = request_data.get("payload") or {}
        session_id = _sanitize_session_id(request_data.get("session_id") or "")

        try:
            preview = json.dumps(request_data, indent=2)
        except (TypeError, ValueError):
            preview = str(request_data)
        logger.debug(f"process_request request {preview}")

        response_data: dict = {
            "status": "success",
            "message": "",
            "session_id": session_id,
            "data": {},
        }

        if not session_id:
            response_data["status"] = "error"
            response_data["error_type"] = ValidationError.__name__
            response_data["message"] = "A session_id is required."
            return response_data

        key = self._session_key(session_id)
        session = self._load_session(key)
        controller = FlowController(
            self,
            max_questions=self.max_questions,
            on_change=lambda s: self.store.save(key, s),
        )

        try:
            if request_type == "load_session":
                pass
            elif request_type == "start":
                controller.start(session, payload.get("intent") or "")
            elif request_type == "next_question":
                controller.request_next_question(session)
            elif request_type == "answer":
                controller.submit_answer(session, payload.get("field_id") or "", payload.get("value"))
            elif request_type == "advance":
                if "field_id" in payload:
                    controller.submit_answer(session, payload.get("field_id") or "", payload.get("value"))
                controller.advance(session)
            elif request_type == "skip_to_final":
                controller.skip_to_final(session)
            elif request_type == "synthesize":
                controller.synthesize_final_prompt(session)
            elif request_type == "reset":
                controller.reset(session)
            elif request_type == "preview":
                response_data["data"]["preview"] = controller.preview_prompt(session)
            else:
                response_data["status"] = "error"
                response_data["error_type"] = ValidationError.__name__
                response_data["message"] = f"Unknown request type: {request_type}"
        except WizardError as e:
            logger.info(f"[{request_type}] {type(e).__name__}: {e.message}")
            response_data["status"] = "error"
            response_data["error_type"] = type(e).__name__
            response_data["message"] = e.message

        response_data["data"]["session"] = self._session_view(session, controller)

        try:
            preview = json.dumps(response_data, indent=2)
        except (TypeError, ValueError):
            preview = str(response_data)
        logger.debug(f"response {preview}")

        return response_data

    def process(self, request_type: str, session_id: str, payload: Optional[dict] = None) -> dict:
        return self._process_request_data({"type": request_type, "session_id": session_id, "payload": payload})
