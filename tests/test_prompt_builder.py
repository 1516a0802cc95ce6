import re

from fincraft.prompt_builder import (
    NO_MARKET_CONTEXT,
    NO_SPENDING_DATA,
    NOT_PROVIDED,
    build_prompt,
    profile_section,
)


def test_botswana_prompt_names_exchange_and_currency(profile):
    prompt = build_prompt(profile)
    assert "Botswana Stock Exchange (BSE)" in prompt
    assert "BWP" in prompt
    assert "Bank of Botswana" in prompt
    assert "BWP 50,000" in prompt
    assert "15 years" in prompt


def test_malawi_and_other_markets(profile):
    profile["country"] = "Malawi"
    malawi = build_prompt(profile)
    assert "Malawi Stock Exchange (MSE)" in malawi and "MWK" in malawi

    profile["country"] = "Other"
    other = build_prompt(profile)
    assert "emerging markets" in other and "USD" in other
    assert "BWP" not in other


def test_missing_numbers_render_as_not_provided():
    profile = {
        "country": "Botswana",
        "age": "",
        "income": None,
        "investmentAmount": "",
        "horizon": "",
        "riskTolerance": "Balanced",
        "primaryGoal": "Income",
        "financialSituation": {"currentSavings": "", "monthlyExpenses": None, "existingInvestments": ""},
        "preferences": {"sectors": [], "esgPreference": False, "localInternationalSplit": 50},
    }
    section = profile_section(profile)
    assert f"Age: {NOT_PROVIDED}" in section
    assert f"Annual Income: {NOT_PROVIDED}" in section
    assert f"Monthly Expenses: {NOT_PROVIDED}" in section

    prompt = build_prompt(profile)
    for token in ("undefined", "NaN", "None", "null"):
        assert not re.search(rf"\b{token}\b", prompt), token


def test_zero_is_rendered_not_dropped(profile):
    section = profile_section(profile)
    assert "Existing Investments: BWP 0" in section


def test_empty_context_and_spending_use_placeholders(profile):
    prompt = build_prompt(profile, "  ", "")
    assert NO_MARKET_CONTEXT in prompt
    assert NO_SPENDING_DATA in prompt

    prompt = build_prompt(profile, "Inflation eased to 2.8%", "Rent 4000\nFood 1500")
    assert "Inflation eased to 2.8%" in prompt
    assert "Rent 4000" in prompt


def test_grounding_brief_toggle(profile):
    assert "Google Search" in build_prompt(profile, grounding_enabled=True)
    assert "Google Search" not in build_prompt(profile, grounding_enabled=False)


def test_rationale_block_toggle(profile):
    assert "model_rationale" in build_prompt(profile, include_rationale=True)
    assert "model_rationale" not in build_prompt(profile, include_rationale=False)


def test_prompt_is_deterministic(profile):
    assert build_prompt(profile, "ctx", "spend") == build_prompt(profile, "ctx", "spend")


def test_split_and_preferences(profile):
    section = profile_section(profile)
    assert "70% local / 30% international" in section
    assert "Mining & Resources, Technology" in section
    assert "prefer ESG" in section
