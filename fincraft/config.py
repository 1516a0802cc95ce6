# PURPOSE: Process-wide settings, loaded once at startup and immutable afterwards.
# CONTEXT: Injected into the model client, the pipeline and the API app so nothing
#          downstream reads the environment on its own.

from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from fincraft.errors import ConfigurationError

DEFAULT_MODEL_ID = "gemini-2.5-flash"
DEFAULT_TEMPERATURE = 0.5
DEFAULT_API_URL = "http://localhost:8000"

_TRUTHY = {"1", "true", "yes", "on"}


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class Settings:
    """
    Runtime configuration.

    attributes:
    - api_key: str|None – Gemini API key (GEMINI_API_KEY).
    - model_id: str – model identifier sent to the service.
    - temperature: float – sampling temperature (0.5 = moderately deterministic).
    - grounding_enabled: bool – attach the Google Search tool to each call.
    - include_rationale: bool – ask the model for a model_rationale block.
    - api_url: str – base URL the Streamlit front end posts to.
    """
    api_key: Optional[str] = None
    model_id: str = DEFAULT_MODEL_ID
    temperature: float = DEFAULT_TEMPERATURE
    grounding_enabled: bool = True
    include_rationale: bool = True
    api_url: str = DEFAULT_API_URL

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables (or any mapping, for tests).

        raises:
        - ConfigurationError – if MODEL_TEMPERATURE is not a number.
        """
        env = os.environ if env is None else env
        raw_temp = env.get("MODEL_TEMPERATURE")
        try:
            temperature = float(raw_temp) if raw_temp else DEFAULT_TEMPERATURE
        except ValueError as e:
            raise ConfigurationError(f"MODEL_TEMPERATURE is not a number: {raw_temp!r}") from e

        return cls(
            api_key=(env.get("GEMINI_API_KEY") or "").strip() or None,
            model_id=env.get("MODEL_ID") or DEFAULT_MODEL_ID,
            temperature=temperature,
            grounding_enabled=_flag(env.get("USE_GROUNDING"), True),
            include_rationale=_flag(env.get("INCLUDE_RATIONALE"), True),
            api_url=(env.get("FINCRAFT_API_URL") or DEFAULT_API_URL).rstrip("/"),
        )

    @property
    def api_key_configured(self) -> bool:
        return bool(self.api_key)

    def require_api_key(self) -> str:
        """Return the API key or raise ConfigurationError (mapped to HTTP 500)."""
        if not self.api_key:
            raise ConfigurationError("GEMINI_API_KEY is not set")
        return self.api_key
