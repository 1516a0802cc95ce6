"""
Gemini client for portfolio recommendations.

PURPOSE: Send a prompt to the generative-language service and hand back the raw
         text plus grounding metadata as plain dicts.
CONTEXT: With Google Search grounding the service cannot return schema-enforced
         JSON, so grounded calls use free-text mode and rely on the normalizer.
         Ungrounded calls request strict JSON against the pydantic response model.
NOTE: No retries. A failed call surfaces as ServiceUnavailable and the caller
      decides what to do.
"""

from __future__ import annotations
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from google import genai
from google.genai import types

from fincraft.config import Settings
from fincraft.errors import ServiceUnavailable, UpstreamEmptyResponse
from fincraft.logging_setup import get_logger
from fincraft.model_interface.response_schema import response_schema_for
from fincraft.model_interface.types import GroundingMetadata

log = get_logger(component="recommendation_client")


@dataclass(frozen=True)
class ModelResponse:
    """
    Tagged result of one model call.

    attributes:
    - text: str – raw model text (never empty).
    - grounding_metadata: dict|None – citations/supports when grounding ran.
    """
    text: str
    grounding_metadata: Optional[GroundingMetadata] = None


def _get(obj: Any, *names: str) -> Any:
    """Read the first present attribute (SDK object) or key (dict)."""
    for name in names:
        if isinstance(obj, dict):
            if obj.get(name) is not None:
                return obj[name]
        elif getattr(obj, name, None) is not None:
            return getattr(obj, name)
    return None


def grounding_to_dict(meta: Any) -> Optional[GroundingMetadata]:
    """
    Convert SDK grounding metadata (snake_case objects) into plain camelCase dicts.

    returns:
    - dict or None – None when the metadata is absent or carries nothing useful.
    """
    if meta is None:
        return None

    chunks: List[Dict[str, Any]] = []
    for chunk in _get(meta, "grounding_chunks", "groundingChunks") or []:
        web = _get(chunk, "web")
        chunks.append({"web": {"uri": _get(web, "uri"), "title": _get(web, "title")}} if web is not None else {})

    supports: List[Dict[str, Any]] = []
    for support in _get(meta, "grounding_supports", "groundingSupports") or []:
        segment = _get(support, "segment")
        supports.append({
            "segment": {
                "startIndex": _get(segment, "start_index", "startIndex"),
                "endIndex": _get(segment, "end_index", "endIndex"),
                "text": _get(segment, "text"),
            } if segment is not None else {},
            "groundingChunkIndices": list(_get(support, "grounding_chunk_indices", "groundingChunkIndices") or []),
            "confidenceScores": [float(s) for s in (_get(support, "confidence_scores", "confidenceScores") or [])],
        })

    queries = [str(q) for q in (_get(meta, "web_search_queries", "webSearchQueries") or [])]

    if not (chunks or supports or queries):
        return None
    return {"webSearchQueries": queries, "groundingChunks": chunks, "groundingSupports": supports}


class RecommendationClient:
    """Thin wrapper around google-genai's generate_content for one-shot recommendations."""

    def __init__(self, settings: Settings, client: Any = None):
        self.settings = settings
        self.model_id = settings.model_id
        self.temperature = settings.temperature
        # Tests pass a stand-in exposing .models.generate_content.
        self._client = client or genai.Client(api_key=settings.require_api_key())

    def _config(self, grounding_enabled: bool) -> types.GenerateContentConfig:
        if grounding_enabled:
            return types.GenerateContentConfig(
                temperature=self.temperature,
                tools=[types.Tool(google_search=types.GoogleSearch())],
            )
        return types.GenerateContentConfig(
            temperature=self.temperature,
            response_mime_type="application/json",
            response_schema=response_schema_for(self.settings.include_rationale),
        )

    def generate(self, prompt: str, grounding_enabled: bool = True) -> ModelResponse:
        """
        Call the model once.

        parameters:
        - prompt: str – full instruction text from the prompt builder.
        - grounding_enabled: bool – attach the Google Search tool.

        returns:
        - ModelResponse – raw text and optional grounding metadata.

        raises:
        - ServiceUnavailable – any SDK/transport failure (original error chained).
        - UpstreamEmptyResponse – the service answered without usable text.
        """
        t0 = time.time()
        log.info("model.generate.start", model=self.model_id, grounding=grounding_enabled,
                 prompt_chars=len(prompt))
        try:
            response = self._client.models.generate_content(
                model=self.model_id,
                contents=prompt,
                config=self._config(grounding_enabled),
            )
            text = getattr(response, "text", None) if response is not None else None
        except Exception as e:
            log.error("model.generate.failed", error=f"{type(e).__name__}: {e}",
                      latency_ms=round((time.time() - t0) * 1000, 1))
            raise ServiceUnavailable(f"generate_content failed: {type(e).__name__}: {e}") from e

        if not text or not str(text).strip():
            log.error("model.generate.empty", latency_ms=round((time.time() - t0) * 1000, 1))
            raise UpstreamEmptyResponse("model returned no text")

        grounding = None
        candidates = getattr(response, "candidates", None) or []
        if grounding_enabled and candidates:
            grounding = grounding_to_dict(getattr(candidates[0], "grounding_metadata", None))

        log.info(
            "model.generate.done",
            latency_ms=round((time.time() - t0) * 1000, 1),
            text_chars=len(text),
            grounded=grounding is not None,
            sources=len((grounding or {}).get("groundingChunks", [])),
        )
        return ModelResponse(text=str(text), grounding_metadata=grounding)
