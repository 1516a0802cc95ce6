# PURPOSE: Display-only shaping of a recommendation for the front end: transparency
#          mode projections, chart rows and percentage-to-currency conversion.
# CONTEXT: Used by the Streamlit app. None of these functions alter the input.

from __future__ import annotations
import copy
import math
from enum import Enum
from typing import Any, Dict, List

from fincraft.constants.markets import currency_for
from fincraft.evidence import confidence_level
from fincraft.utils.numbers import is_provided, parse_leading_float, round_money

__all__ = [
    "TransparencyMode",
    "MODE_LABELS",
    "view_for_mode",
    "allocation_value",
    "chart_data",
    "allocation_amounts",
    "amounts_for_profile",
    "confidence_level",
]


class TransparencyMode(str, Enum):
    BASELINE_OPAQUE = "baseline"
    CITATION_ENHANCED = "citation"
    SYNTHESIS_TRANSPARENT = "synthesis"
    GRAPH_AUGMENTED = "graph"


MODE_LABELS = {
    TransparencyMode.BASELINE_OPAQUE: "Baseline (recommendation only)",
    TransparencyMode.CITATION_ENHANCED: "Citations",
    TransparencyMode.SYNTHESIS_TRANSPARENT: "Synthesis rationale",
    TransparencyMode.GRAPH_AUGMENTED: "Evidence graph",
}

# transparencyMetadata keys shown per mode; citations/searchQueries from "citation" up.
_MODE_META_KEYS = {
    TransparencyMode.BASELINE_OPAQUE: (),
    TransparencyMode.CITATION_ENHANCED: ("synthesisMethod",),
    TransparencyMode.SYNTHESIS_TRANSPARENT: ("synthesisMethod", "modelRationale", "retrievedSegments"),
    TransparencyMode.GRAPH_AUGMENTED: ("synthesisMethod", "evidenceGraph", "overallConfidence"),
}


def view_for_mode(recommendation: Dict[str, Any], mode) -> Dict[str, Any]:
    """
    Project a recommendation onto what a transparency mode displays.

    parameters:
    - recommendation: dict – normalized PortfolioRecommendation.
    - mode: TransparencyMode or its string value.

    returns:
    - dict – deep copy with only the fields the mode shows. Missing
      transparencyMetadata (ungrounded responses) is tolerated.
    """
    mode = TransparencyMode(mode)
    view = copy.deepcopy(recommendation)
    meta = view.pop("transparencyMetadata", None) or {}

    if mode is TransparencyMode.BASELINE_OPAQUE:
        view.pop("citations", None)
        view.pop("searchQueries", None)
        return view

    kept = {k: meta[k] for k in _MODE_META_KEYS[mode] if k in meta}
    if kept:
        view["transparencyMetadata"] = kept
    return view


def allocation_value(allocation: str) -> float:
    """Numeric percentage of an allocation string ("35%" -> 35.0); 0.0 when unreadable."""
    value = parse_leading_float(allocation)
    return 0.0 if math.isnan(value) else value


def chart_data(recommendation: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Pie chart rows: [{"name": category, "value": percent}] in portfolio order."""
    return [
        {"name": entry.get("category", ""), "value": allocation_value(entry.get("allocation", ""))}
        for entry in recommendation.get("recommended_portfolio") or []
    ]


def allocation_amounts(recommendation: Dict[str, Any], investment_amount, currency: str = "USD") -> List[Dict[str, Any]]:
    """
    Convert each allocation percentage into an amount of the investment.

    returns:
    - list of {"category", "allocation", "percent", "amount", "currency"}; amount is
      None when no investment amount was provided.
    """
    rows = []
    provided = is_provided(investment_amount)
    for entry in recommendation.get("recommended_portfolio") or []:
        percent = allocation_value(entry.get("allocation", ""))
        amount = round_money(float(investment_amount) * percent / 100.0) if provided else None
        rows.append({
            "category": entry.get("category", ""),
            "allocation": entry.get("allocation", ""),
            "percent": percent,
            "amount": amount,
            "currency": currency,
        })
    return rows


def amounts_for_profile(recommendation: Dict[str, Any], profile: Dict[str, Any]) -> List[Dict[str, Any]]:
    """allocation_amounts using the profile's investment amount and country currency."""
    return allocation_amounts(recommendation, profile.get("investmentAmount"), currency_for(profile.get("country")))
