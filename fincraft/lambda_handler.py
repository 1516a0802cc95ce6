"""
AWS Lambda handler for portfolio generation behind API Gateway.

PURPOSE:
- Normalises the incoming event, runs the generation pipeline and returns an
  HTTP-style response with the same status codes as the FastAPI app.

CONTEXT:
- Settings and the model client are built once per container (cold start) and
  reused across invocations. Logging includes request_id and correlation_id.
"""

from __future__ import annotations
import json
import time
import traceback
import uuid
from typing import Any, Dict

from fincraft.config import Settings
from fincraft.errors import FinCraftError, InputValidationError, UnhandledFailure
from fincraft.logging_setup import configure_logging
from fincraft.pipeline import run_pipeline
from fincraft.recommendation_client import RecommendationClient


log = configure_logging()

_state: Dict[str, Any] = {}


def _runtime():
    """Lazily build (settings, client) once per container."""
    if "settings" not in _state:
        settings = Settings.from_env()
        _state["settings"] = settings
        _state["client"] = RecommendationClient(settings) if settings.api_key_configured else None
        if _state["client"] is None:
            log.error("config.missing_api_key")
    return _state["settings"], _state["client"]


def _response(body: Dict[str, Any], status_code: int = 200) -> Dict[str, Any]:
    """
    Serialize a body into the proxy-integration response shape.

    returns:
    - dict – {"statusCode": int, "headers": {...}, "body": "<json-string>"}.
    """
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body),
    }


def _parse_body(event: Any) -> Any:
    """API Gateway proxy events carry the JSON body as a string; direct invokes pass a dict."""
    if isinstance(event, dict) and "body" in event:
        raw = event["body"]
        if isinstance(raw, str):
            try:
                return json.loads(raw)
            except ValueError as e:
                raise InputValidationError("request body is not valid JSON") from e
        return raw or {}
    return event


def handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    """
    Entry point for POST /generate-portfolio behind API Gateway.

    flow:
    1) Bind request_id (from the Lambda context) and correlation_id (header).
    2) Normalise the body (API Gateway proxy format or direct invoke).
    3) Run the pipeline.
    4) Map FinCraftError subclasses to their status codes; anything else is a
       generic 500 with details kept in the logs.

    returns:
    - dict – proxy response; body is a recommendation or {"error": str}.
    """
    t0 = time.time()

    request_id = getattr(context, "aws_request_id", None) or str(uuid.uuid4())
    headers = (event.get("headers") if isinstance(event, dict) else None) or {}
    correlation_id = headers.get("x-correlation-id") or str(uuid.uuid4())
    rlog = log.bind(request_id=request_id, correlation_id=correlation_id)
    rlog.info("request.received", event_type=type(event).__name__)

    try:
        settings, client = _runtime()
        body = _parse_body(event)
        result = run_pipeline(body, client, settings)
    except FinCraftError as e:
        latency_ms = round((time.time() - t0) * 1000, 1)
        rlog.error("response.error", kind=type(e).__name__, status=e.status_code,
                   error=str(e), latency_ms=latency_ms)
        return _response({"error": e.public_message}, e.status_code)
    except Exception as e:
        latency_ms = round((time.time() - t0) * 1000, 1)
        rlog.error(
            "response.unhandled",
            error=str(e),
            traceback=traceback.format_exc(limit=2),
            latency_ms=latency_ms,
        )
        fallback = UnhandledFailure(f"{type(e).__name__}: {e}")
        return _response({"error": fallback.public_message}, fallback.status_code)

    latency_ms = round((time.time() - t0) * 1000, 1)
    rlog.info("response.success", latency_ms=latency_ms)
    return _response(result, 200)
