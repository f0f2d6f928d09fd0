# prompt_wizard/model_props.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple
from pathlib import Path
import os

import commentjson

from prompt_wizard.errors import ConfigurationError

DEFAULT_GENERATION_CONFIG_PATH = Path(__file__).with_name("generation_config.jsonc")


@dataclass(frozen=True)
class GenerationParams:
    temperature: float
    max_output_tokens: int
    top_p: float
    top_k: int


def load_generation_params(path: str | os.PathLike | None = None) -> GenerationParams:
    """
    Load sampling parameters from a JSON-with-comments file.
    Fails fast if the file or required keys are missing.
    """
    cfg_path = Path(path or os.getenv("WIZARD_GENERATION_CONFIG_PATH") or DEFAULT_GENERATION_CONFIG_PATH)
    if not cfg_path.exists():
        raise ConfigurationError(f"Generation config file not found at '{cfg_path}'.")

    with cfg_path.open("r", encoding="utf-8") as f:
        data = commentjson.load(f)

    section = data.get("GENERATION_CONFIG") if isinstance(data, dict) else None
    if not isinstance(section, dict):
        raise ConfigurationError("Generation config missing or invalid key: GENERATION_CONFIG")

    for key in ("temperature", "maxOutputTokens", "topP", "topK"):
        if key not in section:
            raise ConfigurationError(f"Generation config missing key: GENERATION_CONFIG.{key}")

    return GenerationParams(
        temperature=float(section["temperature"]),
        max_output_tokens=int(section["maxOutputTokens"]),
        top_p=float(section["topP"]),
        top_k=int(section["topK"]),
    )


#! UTILS

def is_openai_model(model_name) -> bool:
    prefixes = ("gpt-", "gpt4", "gpt-4", "gpt-5", "o1", "o3", "o4")
    return any(model_name.startswith(p) for p in prefixes)


def parse_model_name(raw: str) -> Tuple[str, Dict[str, Any]]:
    """Parse strings like:
        - 'gpt-4.1'
        - 'gpt-5.1_low'
        - 'gpt-5.1_fast_flex'
    into (base_model, openai_params).
    """
    raw = (raw or "").strip()
    if not raw:
        raise ConfigurationError("parse_model_name: No Model Name passed.")

    parts = raw.split("_")
    base = parts[0]
    if len(parts) <= 1:
        return base, {}

    reasoning_effort: Optional[str] = None
    service_tier: Optional[str] = None

    reasoning_tokens = {"none", "minimal", "low", "medium", "high"}
    service_tier_tokens = {"auto", "default", "flex", "priority"}
    wildcards = {
        "fast": "none",
        "standard": "low",
        "deep": "high",
    }

    unknown = []
    for tok in parts[1:]:
        t = tok.strip().lower()
        if not t:
            continue
        if reasoning_effort is None and t in wildcards:
            reasoning_effort = wildcards[t]
            continue
        if reasoning_effort is None and t in reasoning_tokens:
            reasoning_effort = t
            continue
        if service_tier is None and t in service_tier_tokens:
            service_tier = t
            continue
        unknown.append(t)

    if unknown:
        raise ConfigurationError(f"parse_model_name: Unknown model suffix token(s) {unknown} in '{raw}'.")

    params: Dict[str, Any] = {}
    if reasoning_effort is not None:
        params["reasoning"] = {"effort": reasoning_effort}
    if service_tier is not None:
        params["service_tier"] = service_tier
    return base, params
