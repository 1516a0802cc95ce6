"""
Prompt construction for portfolio recommendations.

PURPOSE: Turn a submitted UserProfile plus free-text market context and spending
         data into the instruction text sent to the model.
CONTEXT: One parameterized template. Grounding adds the web-search brief, rationale
         adds the optional model_rationale block to the output shape.
NOTE: Pure and deterministic. No timestamps or environment lookups.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional

from fincraft.constants.markets import market_for
from fincraft.utils.numbers import format_number, is_provided

NOT_PROVIDED = "Not provided"
NOT_SPECIFIED = "Not specified"

NO_MARKET_CONTEXT = (
    "No specific market context provided. Use general knowledge of current "
    "economic conditions for the user's market."
)
NO_SPENDING_DATA = "No spending data provided."

SYSTEM_ROLE = """System Role:
You are FinCraft AI, a financial intelligence assistant that helps investors build personalized portfolios based on their goals, risk tolerance, and market conditions.
Your task is to analyze a user's investment profile and current market context, then recommend an optimal asset allocation. You must reason carefully, stay factual, and present recommendations in a structured, explainable JSON format."""

TASK_STEPS = """TASK STEPS:
1. Interpret the user's risk profile, financial situation and goals.
2. Evaluate current market data to identify suitable asset categories in the {market_focus}.
3. Recommend portfolio allocations as percentages across: Equities (local/global), Bonds (government/corporate), Real Estate / REITs, Commodities / Alternatives, Cash / Short-term assets.
4. Respect the user's sector interests, ESG preference and local/international split.
5. Estimate expected annualized return (in {currency} terms) and risk level.
6. Explain clearly why each asset class suits the user profile.
7. Add one rebalancing or diversification tip."""

GROUNDING_BRIEF = """LIVE DATA (use Google Search before answering):
Search for and use the most recent figures for:
- {market_focus} performance: index level, year-to-date return and the most actively traded listed companies
- Inflation rate, central bank policy interest rate and GDP growth ({regulator})
- The {currency} exchange rate against the US dollar and its recent trend
- The list of sectors represented on the {exchange}
- ESG or sustainability-focused investment options available locally
- Government securities: treasury bill and bond yields
Cite the sources you rely on."""

OUTPUT_SHAPE = """{{
  "risk_profile": "string",
  "investment_horizon": "string",
  "recommended_portfolio": [
    {{"category": "string", "allocation": "string percentage, e.g. 40%", "reason": "string"}}
  ],
  "expected_return": "string",
  "estimated_risk_level": "string",
  "rebalancing_tip": "string",
  "narrative_summary": "string"{rationale}
}}"""

RATIONALE_SHAPE = """,
  "model_rationale": {
    "summary": "string: how the allocation was synthesized",
    "key_factors": ["string"],
    "exclusions": ["string: asset classes or options left out and why"]
  }"""

FINAL_INSTRUCTION = """FINAL INSTRUCTION:
Based on all the provided information, generate an optimal asset allocation. Allocations must add up to 100%.
Respond with ONLY a single valid JSON object with exactly this shape:
{shape}
Do not include any markdown formatting (like ```json), comments or text before or after the JSON object."""


def _money(value, currency: str) -> str:
    if not is_provided(value):
        return NOT_PROVIDED
    return f"{currency} {format_number(value, thousands=True)}"


def _plain(value, suffix: str = "") -> str:
    if not is_provided(value):
        return NOT_PROVIDED
    return f"{format_number(value)}{suffix}"


def _choice(value) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        return NOT_SPECIFIED
    return str(value)


def _sectors(values: Optional[List[str]]) -> str:
    names = [str(v) for v in (values or []) if v]
    return ", ".join(names) if names else NOT_SPECIFIED


def _esg(value) -> str:
    if value is None:
        return NOT_SPECIFIED
    return "Yes, prefer ESG / sustainable investments" if value else "No specific ESG preference"


def _split(value) -> str:
    if not is_provided(value):
        return NOT_SPECIFIED
    local = max(0.0, min(100.0, float(value)))
    intl = 100.0 - local
    return f"{format_number(local)}% local / {format_number(intl)}% international"


def profile_section(profile: Dict[str, Any]) -> str:
    """
    Render every profile field as an indented bullet list.

    notes:
    - Missing values are spelled out ("Not provided" / "Not specified"), never
      dropped and never shown as 0.
    """
    market = market_for(profile.get("country"))
    currency = market["currency"]
    fin = profile.get("financialSituation") or {}
    prefs = profile.get("preferences") or {}

    lines = [
        "1. User Profile:",
        f"   - Country: {_choice(profile.get('country'))}",
        f"   - Reporting Currency: {currency}",
        f"   - Age: {_plain(profile.get('age'))}",
        f"   - Annual Income: {_money(profile.get('income'), currency)}",
        f"   - Investment Amount: {_money(profile.get('investmentAmount'), currency)}",
        f"   - Investment Horizon: {_plain(profile.get('horizon'), ' years')}",
        f"   - Risk Tolerance: {_choice(profile.get('riskTolerance'))}",
        f"   - Primary Goal: {_choice(profile.get('primaryGoal'))}",
        "",
        "2. Financial Situation:",
        f"   - Current Savings: {_money(fin.get('currentSavings'), currency)}",
        f"   - Monthly Expenses: {_money(fin.get('monthlyExpenses'), currency)}",
        f"   - Existing Investments: {_money(fin.get('existingInvestments'), currency)}",
        "",
        "3. Investment Preferences:",
        f"   - Sector Interests: {_sectors(prefs.get('sectors'))}",
        f"   - ESG Preference: {_esg(prefs.get('esgPreference'))}",
        f"   - Local / International Split: {_split(prefs.get('localInternationalSplit'))}",
    ]
    return "\n".join(lines)


def build_prompt(
    profile: Dict[str, Any],
    market_context: str = "",
    spending_data: str = "",
    grounding_enabled: bool = True,
    include_rationale: bool = True,
) -> str:
    """
    Build the full instruction text for one recommendation request.

    parameters:
    - profile: dict – UserProfile as submitted by the form.
    - market_context: str – free text from the user; may be empty.
    - spending_data: str – contents of an uploaded text file; opaque, may be empty.
    - grounding_enabled: bool – include the web-search brief.
    - include_rationale: bool – include model_rationale in the output shape.

    returns:
    - str – prompt text.
    """
    market = market_for(profile.get("country"))
    currency = market["currency"]
    market_focus = market["market_focus"]

    sections = [
        SYSTEM_ROLE,
        f"MARKET FOCUS: {market_focus}. Express all monetary amounts in {currency}.",
        TASK_STEPS.format(market_focus=market_focus, currency=currency),
    ]
    if grounding_enabled:
        sections.append(GROUNDING_BRIEF.format(
            market_focus=market_focus,
            exchange=market["exchange"],
            regulator=market["regulator"],
            currency=currency,
        ))

    user_data = "\n".join([
        "USER-PROVIDED DATA:",
        "",
        profile_section(profile),
        "",
        "4. Current Market Context:",
        f"   {(market_context or '').strip() or NO_MARKET_CONTEXT}",
        "",
        "5. User Spending Data from Uploaded Document:",
        f"   {(spending_data or '').strip() or NO_SPENDING_DATA}",
    ])
    sections.append(user_data)

    shape = OUTPUT_SHAPE.format(rationale=RATIONALE_SHAPE if include_rationale else "")
    sections.append(FINAL_INSTRUCTION.format(shape=shape))

    return "\n\n---\n\n".join(sections) + "\n"
