import copy
import json

import pytest

from fincraft.config import Settings
from fincraft.recommendation_client import ModelResponse

RECOMMENDATION = {
    "risk_profile": "Aggressive",
    "investment_horizon": "15 years",
    "recommended_portfolio": [
        {"category": "Local Equities (BSE)", "allocation": "50%", "reason": "Long horizon supports growth."},
        {"category": "Government Bonds", "allocation": "20%", "reason": "Stable coupon income."},
        {"category": "Real Estate / REITs", "allocation": "15%", "reason": "Inflation hedge."},
        {"category": "Cash / Money Market", "allocation": "10%", "reason": "Liquidity buffer."},
        {"category": "Gold & Commodities", "allocation": "5%", "reason": "Diversifier."},
    ],
    "expected_return": "11-13% annually",
    "estimated_risk_level": "High",
    "rebalancing_tip": "Rebalance when any class drifts 5% from target.",
    "narrative_summary": "A growth-tilted portfolio anchored on BSE equities.",
}

GROUNDING = {
    "webSearchQueries": ["Botswana Stock Exchange performance 2025", "Bank of Botswana policy rate"],
    "groundingChunks": [
        {"web": {"uri": "https://bse.example/report", "title": "BSE Domestic Company Index stock performance"}},
        {"web": {"uri": "https://bob.example/rates", "title": "Treasury Yields Rise"}},
        {"web": {"uri": "https://untitled.example", "title": None}},
        {"web": {"uri": "https://property.example/review", "title": "Gaborone property market review"}},
    ],
    "groundingSupports": [
        {
            "segment": {"startIndex": 0, "endIndex": 35, "text": "The BSE DCI gained 8% year to date."},
            "groundingChunkIndices": [0],
            "confidenceScores": [0.92],
        },
        {
            "segment": {"text": "Bank of Botswana held its policy rate."},
            "groundingChunkIndices": [1, 0],
            "confidenceScores": [0.7, 0.88],
        },
        {
            "segment": {"text": "Unattributed claim."},
            "groundingChunkIndices": [],
            "confidenceScores": [],
        },
    ],
}

PROFILE = {
    "country": "Botswana",
    "age": 32,
    "income": 240000,
    "investmentAmount": 50000,
    "horizon": 15,
    "riskTolerance": "Aggressive",
    "primaryGoal": "Growth",
    "financialSituation": {"currentSavings": 30000, "monthlyExpenses": 8000, "existingInvestments": 0},
    "preferences": {"sectors": ["Mining & Resources", "Technology"], "esgPreference": True,
                    "localInternationalSplit": 70},
}


class FakeModelClient:
    """Stand-in for RecommendationClient: records prompts and replays a canned answer."""

    def __init__(self, text="", grounding=None, exc=None):
        self.text = text
        self.grounding = grounding
        self.exc = exc
        self.calls = []

    def generate(self, prompt, grounding_enabled=True):
        self.calls.append({"prompt": prompt, "grounding_enabled": grounding_enabled})
        if self.exc is not None:
            raise self.exc
        return ModelResponse(text=self.text, grounding_metadata=self.grounding)


@pytest.fixture
def recommendation():
    return copy.deepcopy(RECOMMENDATION)


@pytest.fixture
def recommendation_text():
    return json.dumps(RECOMMENDATION)


@pytest.fixture
def grounding():
    return copy.deepcopy(GROUNDING)


@pytest.fixture
def profile():
    return copy.deepcopy(PROFILE)


@pytest.fixture
def settings():
    return Settings(api_key="test-key", grounding_enabled=True, include_rationale=True)


@pytest.fixture
def fake_client_factory():
    return FakeModelClient
