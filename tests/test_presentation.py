import numpy as np

from fincraft.evidence import apply_grounding
from fincraft.presentation import (
    TransparencyMode,
    allocation_amounts,
    allocation_value,
    amounts_for_profile,
    chart_data,
    view_for_mode,
)


def _grounded(recommendation, grounding):
    recommendation["transparencyMetadata"] = {"modelRationale": {"summary": "why", "keyFactors": ["horizon"]}}
    return apply_grounding(recommendation, grounding, np.random.default_rng(0))


def test_baseline_hides_all_evidence(recommendation, grounding):
    rec = _grounded(recommendation, grounding)
    view = view_for_mode(rec, TransparencyMode.BASELINE_OPAQUE)
    assert "citations" not in view
    assert "searchQueries" not in view
    assert "transparencyMetadata" not in view
    assert "transparencyMetadata" in rec


def test_modes_show_their_metadata(recommendation, grounding):
    rec = _grounded(recommendation, grounding)

    citation = view_for_mode(rec, "citation")
    assert citation["citations"] and set(citation["transparencyMetadata"]) == {"synthesisMethod"}

    synthesis = view_for_mode(rec, "synthesis")
    assert set(synthesis["transparencyMetadata"]) == {"synthesisMethod", "modelRationale", "retrievedSegments"}

    graph = view_for_mode(rec, TransparencyMode.GRAPH_AUGMENTED)
    assert set(graph["transparencyMetadata"]) == {"synthesisMethod", "evidenceGraph", "overallConfidence"}


def test_ungrounded_recommendation_in_graph_mode(recommendation):
    view = view_for_mode(recommendation, TransparencyMode.GRAPH_AUGMENTED)
    assert "transparencyMetadata" not in view
    assert view["recommended_portfolio"] == recommendation["recommended_portfolio"]


def test_chart_data_reads_percentages(recommendation):
    recommendation["recommended_portfolio"][4]["allocation"] = "NaN%"
    rows = chart_data(recommendation)
    assert rows[0] == {"name": "Local Equities (BSE)", "value": 50.0}
    assert rows[4]["value"] == 0.0
    assert allocation_value("12.5%") == 12.5


def test_amounts_use_profile_currency(recommendation, profile):
    rows = amounts_for_profile(recommendation, profile)
    assert rows[0]["currency"] == "BWP"
    assert rows[0]["amount"] == 25000.0
    assert sum(r["amount"] for r in rows) == 50000.0


def test_amounts_without_investment_amount(recommendation):
    rows = allocation_amounts(recommendation, "", "USD")
    assert all(r["amount"] is None for r in rows)
    assert rows[1]["percent"] == 20.0
