from typing import TypedDict, Literal, List, Optional, Union

Country = Literal["Malawi", "Botswana", "Other"]
RiskTolerance = Literal["Conservative", "Balanced", "Aggressive"]
PrimaryGoal = Literal["Growth", "Income", "Capital Preservation"]
Sector = Literal[
    "Agriculture",
    "Mining & Resources",
    "Financial Services",
    "Real Estate",
    "Technology",
    "Manufacturing",
]
ConfidenceLevel = Literal["high", "medium", "low"]

# Blank form inputs arrive as "" rather than null.
OptionalNumber = Union[int, float, Literal[""], None]

class FinancialSituation(TypedDict, total=False):
    currentSavings: OptionalNumber
    monthlyExpenses: OptionalNumber
    existingInvestments: OptionalNumber

class InvestmentPreferences(TypedDict, total=False):
    sectors: List[Sector]
    esgPreference: bool
    localInternationalSplit: OptionalNumber  # percent local, 0-100

class UserProfile(TypedDict, total=False):
    country: Country
    age: OptionalNumber
    income: OptionalNumber
    investmentAmount: OptionalNumber
    horizon: OptionalNumber
    riskTolerance: RiskTolerance
    primaryGoal: PrimaryGoal
    financialSituation: FinancialSituation
    preferences: InvestmentPreferences

class AssetAllocation(TypedDict):
    category: str
    allocation: str
    reason: str

class Citation(TypedDict, total=False):
    uri: str
    title: str
    confidence: float

class RetrievedTextSegment(TypedDict, total=False):
    text: str
    source: str
    relevanceScore: float

class ModelRationale(TypedDict, total=False):
    summary: str
    keyFactors: List[str]
    exclusions: List[str]

class EvidenceSupport(TypedDict):
    category: str
    sourceCount: int
    avgConfidence: float
    confidenceLevel: ConfidenceLevel
    supportingCitations: List[Citation]
    alignmentScore: float

class TransparencyMetadata(TypedDict, total=False):
    synthesisMethod: str
    modelRationale: ModelRationale
    retrievedSegments: List[RetrievedTextSegment]
    evidenceGraph: List[EvidenceSupport]
    overallConfidence: float

class _RecommendationRequired(TypedDict):
    risk_profile: str
    investment_horizon: str
    recommended_portfolio: List[AssetAllocation]
    expected_return: str
    estimated_risk_level: str
    rebalancing_tip: str
    narrative_summary: str

class PortfolioRecommendation(_RecommendationRequired, total=False):
    citations: List[Citation]
    searchQueries: List[str]
    transparencyMetadata: TransparencyMetadata

# Grounding metadata, converted from SDK objects into plain dicts.
class WebSource(TypedDict, total=False):
    uri: Optional[str]
    title: Optional[str]

class GroundingChunk(TypedDict, total=False):
    web: WebSource

class Segment(TypedDict, total=False):
    startIndex: Optional[int]
    endIndex: Optional[int]
    text: Optional[str]

class GroundingSupport(TypedDict, total=False):
    segment: Segment
    groundingChunkIndices: List[int]
    confidenceScores: List[float]

class GroundingMetadata(TypedDict, total=False):
    webSearchQueries: List[str]
    groundingChunks: List[GroundingChunk]
    groundingSupports: List[GroundingSupport]
