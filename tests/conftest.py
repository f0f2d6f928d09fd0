import json

import pytest

from prompt_wizard.flow_controller import FlowController
from prompt_wizard.session_store import SessionCache
from prompt_wizard.wizard_session import WizardSession


def question_reply(text="Who is the audience?", qtype="text", options=None, required=True, **extra):
    question = {"text": text, "type": qtype, "required": required}
    if options is not None:
        question["options"] = options
    question.update(extra)
    return "Here is the next question:\n```json\n" + json.dumps({"question": question}) + "\n```"


def final_reply(prompt="You are an expert blog writer. Write a post about...", **extra):
    body = {"finalPrompt": prompt}
    body.update(extra)
    return json.dumps(body)


class ScriptedLlm:
    """
    Stands in for the text-generation gateway: hands out queued replies in order.
    A queued exception instance is raised instead of returned.
    """

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.prompts = []

    def queue(self, *replies):
        self.replies.extend(replies)
        return self

    def generate(self, prompt):
        self.prompts.append(prompt)
        if not self.replies:
            raise AssertionError("ScriptedLlm ran out of replies")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class EveryQuestion(ScriptedLlm):
    """Answers question requests with a fresh question and synthesis requests with a prompt."""

    def generate(self, prompt):
        self.prompts.append(prompt)
        if "GATHERED REQUIREMENTS" in prompt:
            return final_reply()
        return question_reply(text=f"Question {len(self.prompts)}?", required=False)


@pytest.fixture
def llm():
    return ScriptedLlm()


@pytest.fixture
def saved():
    return []


@pytest.fixture
def controller(llm, saved):
    return FlowController(llm, max_questions=15, on_change=lambda s: saved.append(s.to_snapshot()))


@pytest.fixture
def session():
    return WizardSession()


@pytest.fixture
def store():
    return SessionCache(ttl_seconds=3600)
