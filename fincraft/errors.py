# PURPOSE: Failure taxonomy for the portfolio generation flow.
# CONTEXT: Every error carries the HTTP status it maps to and a message that is
#          safe to show to end users. Technical detail goes to the logs only.

from __future__ import annotations
from typing import Optional

GENERIC_FAILURE_MESSAGE = (
    "Failed to generate portfolio. The AI model may be temporarily unavailable."
)


class FinCraftError(Exception):
    """Base class. Subclasses set status_code and public_message."""

    status_code = 500
    public_message = GENERIC_FAILURE_MESSAGE

    def __init__(self, detail: Optional[str] = None, public_message: Optional[str] = None):
        super().__init__(detail or public_message or self.public_message)
        self.detail = detail
        if public_message is not None:
            self.public_message = public_message


class ConfigurationError(FinCraftError):
    """Credential for the generative service is not configured."""

    status_code = 500
    public_message = "Server configuration error: API key not found"


class InputValidationError(FinCraftError):
    """The request body is missing a required field or has the wrong shape."""

    status_code = 400
    public_message = "User profile is required"


class UpstreamEmptyResponse(FinCraftError):
    status_code = 502
    public_message = "Empty response from AI"


class InvalidResponseFormat(FinCraftError):
    """Model text could not be parsed, even after fenced-block extraction."""

    status_code = 502
    public_message = "Invalid JSON received from AI"

    def __init__(self, detail: Optional[str] = None, raw_text: str = ""):
        super().__init__(detail)
        self.raw_text = raw_text


class InvalidPortfolioStructure(FinCraftError):
    status_code = 502
    public_message = "AI response is missing the recommended portfolio structure"


class ServiceUnavailable(FinCraftError):
    """Transport or service-level failure talking to the model. Never retried here."""

    status_code = 500


class UnhandledFailure(FinCraftError):
    status_code = 500


__all__ = [
    "GENERIC_FAILURE_MESSAGE",
    "FinCraftError",
    "ConfigurationError",
    "InputValidationError",
    "UpstreamEmptyResponse",
    "InvalidResponseFormat",
    "InvalidPortfolioStructure",
    "ServiceUnavailable",
    "UnhandledFailure",
]
