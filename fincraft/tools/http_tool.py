# PURPOSE: Small helper to call the FinCraft HTTP API from the front end or scripts.
# CONTEXT: Used by the Streamlit app; keeps status handling in one place.

import requests
from typing import Any, Dict, Optional

from fincraft.errors import GENERIC_FAILURE_MESSAGE


class ApiError(Exception):
    """Non-2xx answer from the API; message is the server's user-safe error text."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


def post_json(url: str, payload: Dict[str, Any], timeout: Optional[float] = 120.0) -> Dict[str, Any]:
    """
    POST a JSON payload and return the decoded JSON body.

    parameters:
    - url: str – full endpoint URL.
    - payload: dict – request body.
    - timeout: float (optional) – seconds to wait; grounded generations are slow.

    returns:
    - dict – decoded response body on 2xx.

    raises:
    - ApiError – non-2xx status; carries the server's {"error"} message.
    - requests.exceptions.RequestException – connection problems or timeouts.
    """
    r = requests.post(url, json=payload, timeout=timeout)
    if r.ok:
        return r.json()
    try:
        message = r.json().get("error") or GENERIC_FAILURE_MESSAGE
    except ValueError:
        message = GENERIC_FAILURE_MESSAGE
    raise ApiError(message, r.status_code)


def generate_portfolio(api_url: str, profile: Dict[str, Any], market_context: str = "",
                       spending_data: str = "", timeout: Optional[float] = 120.0) -> Dict[str, Any]:
    """Call POST {api_url}/generate-portfolio."""
    body = {"profile": profile, "marketContext": market_context, "spendingData": spending_data}
    return post_json(f"{api_url.rstrip('/')}/generate-portfolio", body, timeout=timeout)
