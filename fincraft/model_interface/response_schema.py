# PURPOSE: Pydantic description of the JSON the model must return.
# CONTEXT: Passed as response_schema when grounding is off (strict JSON mode).
#          With grounding on the service cannot enforce a schema, so the same
#          shape is spelled out in the prompt and enforced by the normalizer.

from __future__ import annotations
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class AssetAllocationOut(BaseModel):
    category: str
    allocation: str
    reason: str


class ModelRationaleOut(BaseModel):
    summary: str
    key_factors: List[str]
    exclusions: Optional[List[str]] = None


class PortfolioRecommendationOut(BaseModel):
    risk_profile: str
    investment_horizon: str
    recommended_portfolio: List[AssetAllocationOut]
    expected_return: str
    estimated_risk_level: str
    rebalancing_tip: str
    narrative_summary: str


class PortfolioWithRationaleOut(PortfolioRecommendationOut):
    # "model_" is a reserved pydantic prefix; the field name is fixed by the prompt.
    model_config = ConfigDict(protected_namespaces=())

    model_rationale: Optional[ModelRationaleOut] = None


def response_schema_for(include_rationale: bool) -> type[BaseModel]:
    """Pick the strict output model matching the prompt's rationale setting."""
    return PortfolioWithRationaleOut if include_rationale else PortfolioRecommendationOut
