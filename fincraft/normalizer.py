"""
Response normalization: raw model text -> validated PortfolioRecommendation.

PURPOSE: Parse whatever the model returned, repair allocation strings, validate
         the required fields and move meta-commentary out of the portfolio object.
CONTEXT: With grounding enabled the service cannot enforce a JSON schema, so the
         text may arrive wrapped in a ```json fence or otherwise decorated.
"""

from __future__ import annotations
import json
import re
from typing import Any, Dict, List, Optional

from jsonschema import ValidationError

from fincraft.agent_io import error_to_string, validate_recommendation
from fincraft.errors import InvalidPortfolioStructure, InvalidResponseFormat
from fincraft.logging_setup import get_logger
from fincraft.utils.numbers import js_number_str, parse_leading_float

log = get_logger(component="normalizer")

# ``` + optional json tag, a braces-delimited object, closing ```.
FENCED_JSON = re.compile(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```", re.IGNORECASE)

# Raw text is kept in logs only up to this many characters.
RAW_LOG_LIMIT = 2000

SERVER_OWNED_FIELDS = ("transparencyMetadata", "citations", "searchQueries")


# -------------------- Parse steps (Option-returning) -------------------- #

def parse_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Parse text as a JSON object; None if it is not valid JSON or not an object."""
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    return value if isinstance(value, dict) else None


def extract_fenced_json(text: str) -> Optional[Dict[str, Any]]:
    """Parse the first fenced code block that holds a JSON object; None otherwise."""
    for match in FENCED_JSON.finditer(text or ""):
        parsed = parse_json_object(match.group(1))
        if parsed is not None:
            return parsed
    return None


def parse_model_text(raw_text: str) -> Dict[str, Any]:
    """
    Run the parse steps in order, first success wins.

    raises:
    - InvalidResponseFormat – neither step produced an object; raw text attached.
    """
    text = (raw_text or "").strip()
    parsed = parse_json_object(text)
    if parsed is not None:
        return parsed

    parsed = extract_fenced_json(text)
    if parsed is not None:
        log.info("normalize.fenced_block_used")
        return parsed

    log.warning("normalize.unparsable", raw_text=text[:RAW_LOG_LIMIT])
    raise InvalidResponseFormat("model text is neither JSON nor a fenced JSON block", raw_text=raw_text)


# -------------------- Repair / reshape -------------------- #

def normalize_allocation(value: Any) -> str:
    """
    Make sure an allocation carries a percent sign.

    behaviour:
    - Strings that already contain "%" are returned unchanged (idempotent).
    - Anything else is read as a leading number and suffixed: "35" -> "35%",
      35 -> "35%", "12.5" -> "12.5%".
    - Non-numeric text becomes "NaN%" (logged, not rejected).
    """
    text = str(value)
    if "%" in text:
        return text
    number = parse_leading_float(value)
    out = f"{js_number_str(number)}%"
    if out == "NaN%":
        log.warning("normalize.allocation_not_numeric", allocation=text)
    return out


def _rationale_to_camel(raw: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {"summary": str(raw.get("summary") or "")}
    factors = raw.get("key_factors", raw.get("keyFactors")) or []
    out["keyFactors"] = [str(f) for f in factors] if isinstance(factors, list) else [str(factors)]
    exclusions = raw.get("exclusions")
    if exclusions:
        out["exclusions"] = [str(e) for e in exclusions] if isinstance(exclusions, list) else [str(exclusions)]
    return out


def _portfolio_entries(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    portfolio = data.get("recommended_portfolio")
    if not isinstance(portfolio, list):
        raise InvalidPortfolioStructure("recommended_portfolio is missing or not an array")
    for i, entry in enumerate(portfolio):
        if not isinstance(entry, dict):
            raise InvalidPortfolioStructure(f"recommended_portfolio[{i}] is not an object")
    return portfolio


def normalize(raw_text: str) -> Dict[str, Any]:
    """
    Turn raw model text into a PortfolioRecommendation.

    flow:
    1) Parse (direct JSON, then fenced block).
    2) Check recommended_portfolio is an array of objects.
    3) Repair allocation strings lacking "%".
    4) Drop echoed evidence fields, move model_rationale into
       transparencyMetadata.modelRationale.
    5) Validate required fields against the recommendation schema.

    returns:
    - dict – PortfolioRecommendation.

    raises:
    - InvalidResponseFormat – text cannot be parsed.
    - InvalidPortfolioStructure – parsed object misses required structure.
    """
    data = parse_model_text(raw_text)

    for entry in _portfolio_entries(data):
        if "allocation" in entry:
            entry["allocation"] = normalize_allocation(entry["allocation"])

    # Evidence fields are attached server-side; anything the model echoed is dropped.
    for key in SERVER_OWNED_FIELDS:
        if data.pop(key, None) is not None:
            log.warning("normalize.server_field_dropped", field=key)

    rationale = data.pop("model_rationale", None)
    if isinstance(rationale, dict):
        data["transparencyMetadata"] = {"modelRationale": _rationale_to_camel(rationale)}

    try:
        validate_recommendation(data)
    except ValidationError as e:
        raise InvalidPortfolioStructure(error_to_string(e)) from e

    return data
