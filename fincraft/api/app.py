# PURPOSE: FastAPI backend for FinCraft AI. Accepts a submitted investment profile,
#          runs the generation pipeline and returns the normalized recommendation.
# CONTEXT: Used by the Streamlit front end (apps/) and any other HTTP client.
#          Every failure leaves as {"error": "..."} with the mapped status code.

from __future__ import annotations

import time
import traceback
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from fincraft.config import Settings
from fincraft.errors import FinCraftError, InputValidationError, UnhandledFailure
from fincraft.logging_setup import configure_logging
from fincraft.pipeline import run_pipeline
from fincraft.recommendation_client import RecommendationClient

APP_VERSION = "0.1.0"

log = configure_logging()


class GenerateIn(BaseModel):
    profile: Optional[Dict[str, Any]] = None
    marketContext: Optional[str] = None
    spendingData: Optional[str] = None


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def build_client(settings: Settings):
    """Model client for the configured key, or None when the key is missing."""
    if not settings.api_key_configured:
        log.error("config.missing_api_key", hint="set GEMINI_API_KEY; requests will return 500")
        return None
    return RecommendationClient(settings)


def create_app(settings: Optional[Settings] = None, client: Any = None) -> FastAPI:
    """
    Build the FastAPI application.

    parameters:
    - settings: Settings (optional) – defaults to Settings.from_env(), read once here.
    - client: object (optional) – model client; defaults to a RecommendationClient
      built from settings (None if no API key is configured).

    returns:
    - FastAPI – app with /generate-portfolio and /health routes.
    """
    settings = settings or Settings.from_env()
    if client is None:
        client = build_client(settings)
    started = time.time()

    app = FastAPI(title="FinCraft AI API", version=APP_VERSION)
    app.state.settings = settings
    app.state.client = client

    log.info("app.start", version=APP_VERSION, model=settings.model_id,
             grounding=settings.grounding_enabled, api_key_configured=settings.api_key_configured)

    @app.exception_handler(RequestValidationError)
    async def _bad_body(request: Request, exc: RequestValidationError):
        log.warning("request.invalid_body", errors=str(exc.errors())[:500])
        return _error(InputValidationError.public_message, 400)

    @app.get("/health")
    def health() -> Dict[str, Any]:
        """Readiness probe: version, uptime and whether the model can be called."""
        return {
            "status": "ok",
            "version": APP_VERSION,
            "uptime_s": int(time.time() - started),
            "grounding_enabled": settings.grounding_enabled,
            "api_key_configured": settings.api_key_configured,
        }

    @app.post("/generate-portfolio")
    def generate_portfolio(body: GenerateIn, request: Request):
        """
        Generate a portfolio recommendation.

        body:
        - {"profile": UserProfile, "marketContext"?: str, "spendingData"?: str}

        returns:
        - 200 PortfolioRecommendation, or {"error": str} with 400/500/502.
        """
        t0 = time.time()
        request_id = str(uuid.uuid4())
        correlation_id = request.headers.get("x-correlation-id") or request_id
        rlog = log.bind(request_id=request_id, correlation_id=correlation_id)
        rlog.info("request.received", path="/generate-portfolio")

        try:
            result = run_pipeline(body.model_dump(), app.state.client, settings)
        except FinCraftError as e:
            latency_ms = round((time.time() - t0) * 1000, 1)
            log_fn = rlog.warning if e.status_code < 500 else rlog.error
            log_fn("response.error", kind=type(e).__name__, status=e.status_code,
                   error=str(e), latency_ms=latency_ms)
            return _error(e.public_message, e.status_code)
        except Exception as e:
            latency_ms = round((time.time() - t0) * 1000, 1)
            rlog.error("response.unhandled", error=f"{type(e).__name__}: {e}",
                       traceback=traceback.format_exc(limit=3), latency_ms=latency_ms)
            fallback = UnhandledFailure(f"{type(e).__name__}: {e}")
            return _error(fallback.public_message, fallback.status_code)

        rlog.info("response.success", latency_ms=round((time.time() - t0) * 1000, 1))
        return JSONResponse(status_code=200, content=result)

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
