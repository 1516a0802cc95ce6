"""
JSON schema checks for request bodies and normalized recommendations.

PURPOSE: Load the schemas bundled in fincraft/schemas, validate against them and
         turn jsonschema errors into short messages with a $-path.
CONTEXT: The pipeline validates incoming profiles, the normalizer validates the
         repaired model output. Both convert failures into fincraft.errors types.
"""

from __future__ import annotations

import json
import pathlib
from functools import lru_cache
from typing import Any, Dict

from jsonschema import Draft7Validator, ValidationError

SCHEMA_DIR = pathlib.Path(__file__).resolve().parent / "schemas"

GENERATE_REQUEST_SCHEMA = "generate_request.schema.json"
RECOMMENDATION_SCHEMA = "portfolio_recommendation.schema.json"


@lru_cache(maxsize=8)
def _read_schema(path: str) -> Dict[str, Any]:
    return json.loads(pathlib.Path(path).read_text(encoding="utf-8"))


def load_schema(name: str) -> Dict[str, Any]:
    """
    Return a parsed schema, read from disk once per process.

    parameters:
    - name: str – bundled file name ("generate_request.schema.json") or a path.

    raises:
    - FileNotFoundError – neither the path nor a bundled schema of that name exists.
    """
    p = pathlib.Path(name)
    if not p.exists():
        p = SCHEMA_DIR / p.name
    if not p.exists():
        raise FileNotFoundError(f"Schema not found at: {name}")
    return _read_schema(str(p.resolve()))


def validate_with_schema(instance: Any, schema: Dict[str, Any]) -> None:
    """Raise the best-matching jsonschema ValidationError, if any."""
    Draft7Validator(schema).validate(instance)


def validate_generate_request(payload: Dict[str, Any]) -> None:
    validate_with_schema(payload, load_schema(GENERATE_REQUEST_SCHEMA))


def validate_recommendation(recommendation: Dict[str, Any]) -> None:
    validate_with_schema(recommendation, load_schema(RECOMMENDATION_SCHEMA))


def error_to_string(err: Exception) -> str:
    """
    Short human-readable form of an exception.

    notes:
    - ValidationError -> "<message> at $.profile.age" (list indices as [0]).
    - Anything else -> "<ExceptionType>: <message>".
    """
    if isinstance(err, ValidationError):
        path = "$" + "".join(f"[{p}]" if isinstance(p, int) else f".{p}" for p in err.path)
        return f"{err.message} at {path}"
    return f"{type(err).__name__}: {err}"


__all__ = [
    "load_schema",
    "validate_with_schema",
    "validate_generate_request",
    "validate_recommendation",
    "error_to_string",
]
