# prompt_wizard/llm_client.py

import logging
import os
import time
from typing import Any, Dict, Optional

from google.auth.exceptions import GoogleAuthError
from langchain_google_vertexai import VertexAI
from openai import OpenAI, OpenAIError

from prompt_wizard.errors import ConfigurationError, GatewayError
from prompt_wizard.google_helpers import LLM_TIMEOUT, MODEL_NAME, PROJECT_ID, REGION, build_creds
from prompt_wizard.model_props import GenerationParams, is_openai_model, load_generation_params, parse_model_name

logger = logging.getLogger("prompt_wizard")


class LlmClient:
    """
    Completion-style gateway to the external text-generation service:

        text = llm.generate("some prompt")

    Under the hood:
    - Vertex: VertexAI.invoke(prompt)
    - OpenAI: Responses API (client.responses.create)

    Credentials are resolved here and never leave this object.
    A single call is made per generate(); retrying is the caller's decision.
    """

    def __init__(
        self,
        model_name: str,
        *,
        vertex_project: str,
        vertex_region: str,
        params: GenerationParams,
        timeout: float | None = None,
    ):
        self.provider = "openai" if is_openai_model(model_name) else "vertex"
        self.model_name = model_name
        self.params = params
        self._timeout = timeout
        self._openai_params: Dict[str, Any] = {}

        if self.provider == "vertex":
            creds = build_creds()
            try:
                self._vertex = VertexAI(
                    project=vertex_project,
                    location=vertex_region,
                    model_name=model_name,
                    credentials=creds,
                    temperature=params.temperature,
                    max_output_tokens=params.max_output_tokens,
                    top_p=params.top_p,
                    top_k=params.top_k,
                    max_retries=1,
                    timeout=timeout,
                )
            except Exception as e:
                raise ConfigurationError(f"Could not initialize the Vertex AI client for {model_name}.") from e
            self._client = None
        else:
            if not os.getenv("OPENAI_API_KEY"):
                raise ConfigurationError("OPENAI_API_KEY is not configured for the text-generation service.")
            self._vertex = None
            self.model_name, self._openai_params = parse_model_name(self.model_name)
            client_kwargs: Dict[str, Any] = {"max_retries": 0}
            if timeout is not None:
                client_kwargs["timeout"] = timeout
            self._client = OpenAI(**client_kwargs)

    def _openai_sampling(self) -> Dict[str, Any]:
        # reasoning models reject sampling overrides
        if "reasoning" in self._openai_params:
            return {"max_output_tokens": self.params.max_output_tokens}
        return {
            "temperature": self.params.temperature,
            "top_p": self.params.top_p,
            "max_output_tokens": self.params.max_output_tokens,
        }

    def _invoke_once(self, prompt: str) -> str:
        """
        Single HTTP call, no retries/backoff.
        """
        if self.provider == "vertex":
            resp = self._vertex.invoke(prompt)
            if isinstance(resp, str):
                return resp
            # LangChain's Vertex types often have .content
            return getattr(resp, "content", "") or ""

        resp = self._client.responses.create(
            model=self.model_name,
            input=prompt,
            **self._openai_sampling(),
            **self._openai_params,
        )
        text = getattr(resp, "output_text", "") or ""
        return text.strip()

    def generate(self, prompt: str) -> str:
        logger.debug("[LLM] prompt (%d chars) -> %s\n%s", len(prompt), self.model_name, prompt)
        start_time = time.time()
        try:
            text = self._invoke_once(prompt)
        except GoogleAuthError as e:
            raise ConfigurationError("The text-generation service rejected the configured credentials.") from e
        except OpenAIError as e:
            logger.info("[LLM] OpenAI call failed after %.2fs: %s", time.time() - start_time, e)
            raise GatewayError(f"Text-generation service error: {e}") from e
        except Exception as e:
            logger.info("[LLM] Vertex call failed after %.2fs: %s", time.time() - start_time, e)
            raise GatewayError(f"Text-generation service error: {e}") from e

        if not text or not text.strip():
            raise GatewayError("The text-generation service returned no completion.")

        logger.debug("[LLM] completion in %.2fs\n%s", time.time() - start_time, text)
        return text


def build_llm_client(model_name: Optional[str] = None, timeout: float | None = None) -> LlmClient:
    return LlmClient(
        model_name=model_name or MODEL_NAME,
        vertex_project=PROJECT_ID,
        vertex_region=REGION,
        params=load_generation_params(),
        timeout=timeout or LLM_TIMEOUT,
    )
