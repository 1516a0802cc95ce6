# PURPOSE: End-to-end portfolio generation for one request: validate the body,
#          build the prompt, call the model once, normalize the text and attach
#          evidence/transparency data.
# CONTEXT: Shared by the FastAPI app, the Lambda handler and the CLI. Errors are
#          raised as fincraft.errors types and converted at those boundaries.

from __future__ import annotations
import time
import uuid
from typing import Any, Dict, Optional

import numpy as np
from jsonschema import ValidationError

from fincraft.agent_io import error_to_string, validate_generate_request
from fincraft.config import Settings
from fincraft.errors import ConfigurationError, InputValidationError
from fincraft.evidence import apply_grounding
from fincraft.logging_setup import get_logger
from fincraft.normalizer import normalize
from fincraft.prompt_builder import build_prompt

log = get_logger(component="pipeline")


def parse_request(payload: Any) -> Dict[str, Any]:
    """
    Check a /generate-portfolio body and return {profile, marketContext, spendingData}.

    raises:
    - InputValidationError – body is not an object, profile is missing, or the
      profile does not match the request schema.
    """
    if not isinstance(payload, dict) or payload.get("profile") is None:
        raise InputValidationError("profile missing from request body")
    try:
        validate_generate_request(payload)
    except ValidationError as e:
        raise InputValidationError(error_to_string(e), public_message=f"Invalid profile: {error_to_string(e)}") from e
    return {
        "profile": payload["profile"],
        "marketContext": payload.get("marketContext") or "",
        "spendingData": payload.get("spendingData") or "",
    }


def run_pipeline(
    payload: Dict[str, Any],
    client,
    settings: Settings,
    rng: Optional[np.random.Generator] = None,
) -> Dict[str, Any]:
    """
    Generate one portfolio recommendation.

    steps:
    1) Validate the request body.
    2) Build the prompt (grounding/rationale per settings).
    3) Call the model once (no retries).
    4) Normalize raw text into a PortfolioRecommendation.
    5) Attach citations, search queries and transparency metadata.

    parameters:
    - payload: dict – request body {profile, marketContext?, spendingData?}.
    - client: object with generate(prompt, grounding_enabled) -> ModelResponse,
      or None when no API key is configured.
    - settings: Settings – immutable runtime configuration.
    - rng: numpy Generator (optional) – jitter source for evidence scores.

    returns:
    - dict – PortfolioRecommendation ready for the front end.
    """
    t0 = time.time()
    run_id = uuid.uuid4().hex

    # Credential problems win over request problems.
    if client is None:
        settings.require_api_key()
        raise ConfigurationError("no model client available")
    req = parse_request(payload)

    profile = req["profile"]
    log.info(
        "pipeline.start",
        run_id=run_id,
        country=profile.get("country"),
        risk=profile.get("riskTolerance"),
        grounding=settings.grounding_enabled,
        has_market_context=bool(req["marketContext"]),
        has_spending_data=bool(req["spendingData"]),
    )

    prompt = build_prompt(
        profile,
        req["marketContext"],
        req["spendingData"],
        grounding_enabled=settings.grounding_enabled,
        include_rationale=settings.include_rationale,
    )
    response = client.generate(prompt, settings.grounding_enabled)
    recommendation = normalize(response.text)
    apply_grounding(recommendation, response.grounding_metadata, rng)

    log.info(
        "pipeline.done",
        run_id=run_id,
        categories=len(recommendation["recommended_portfolio"]),
        citations=len(recommendation.get("citations", [])),
        latency_ms=int((time.time() - t0) * 1000),
    )
    return recommendation
