# PURPOSE: Streamlit front end for FinCraft AI: collects the investment profile,
#          posts it to the API and renders the recommendation with a
#          transparency-mode switcher.
# CONTEXT: Run with `streamlit run apps/fincraft_streamlit.py` while the API is up
#          (uvicorn fincraft.api.app:create_app --factory).

import json

import plotly.express as px
import requests
import streamlit as st

from fincraft.config import Settings
from fincraft.presentation import (
    MODE_LABELS,
    TransparencyMode,
    amounts_for_profile,
    chart_data,
    confidence_level,
    view_for_mode,
)
from fincraft.tools.http_tool import ApiError, generate_portfolio

SECTORS = ["Agriculture", "Mining & Resources", "Financial Services",
           "Real Estate", "Technology", "Manufacturing"]

settings = Settings.from_env()

st.set_page_config(page_title="FinCraft AI", layout="wide")
st.title("FinCraft AI")
st.caption("Your Personalized Portfolio Architect")

for key, default in (("pending", False), ("portfolio", None), ("error", None), ("profile", None)):
    if key not in st.session_state:
        st.session_state[key] = default


def _optional(label: str, **kwargs):
    """Number input; left blank means not provided."""
    value = st.number_input(label, min_value=0.0, value=None, **kwargs)
    return "" if value is None else value


form_col, result_col = st.columns(2)

with form_col:
    st.subheader("Investment Profile")
    with st.form("profile"):
        country = st.selectbox("Country", ["Malawi", "Botswana", "Other"])
        c1, c2 = st.columns(2)
        with c1:
            age = _optional("Age", step=1.0)
            income = _optional("Annual income")
            amount = _optional("Investment amount")
        with c2:
            horizon = _optional("Investment horizon (years)", step=1.0)
            risk = st.selectbox("Risk tolerance", ["Conservative", "Balanced", "Aggressive"], index=1)
            goal = st.selectbox("Primary goal", ["Growth", "Income", "Capital Preservation"])

        st.markdown("**Financial situation**")
        f1, f2, f3 = st.columns(3)
        with f1:
            savings = _optional("Current savings")
        with f2:
            expenses = _optional("Monthly expenses")
        with f3:
            existing = _optional("Existing investments")

        st.markdown("**Preferences**")
        sectors = st.multiselect("Sector interests", SECTORS)
        esg = st.checkbox("Prefer ESG / sustainable investments")
        split = st.slider("Local allocation (%)", 0, 100, 50)

        market_context = st.text_area("Market context (optional)")
        upload = st.file_uploader("Spending data (.txt, optional)", type=["txt"])

        submitted = st.form_submit_button("Generate portfolio", type="primary")

# The script blocks while the request runs, so clicks only land between reruns.
# pending marks the in-flight call within a single run.
if submitted and not st.session_state.pending:
    st.session_state.pending = True
    st.session_state.error = None
    st.session_state.portfolio = None
    profile = {
        "country": country,
        "age": age,
        "income": income,
        "investmentAmount": amount,
        "horizon": horizon,
        "riskTolerance": risk,
        "primaryGoal": goal,
        "financialSituation": {
            "currentSavings": savings,
            "monthlyExpenses": expenses,
            "existingInvestments": existing,
        },
        "preferences": {"sectors": sectors, "esgPreference": esg, "localInternationalSplit": split},
    }
    spending = upload.getvalue().decode("utf-8", errors="replace") if upload else ""
    try:
        with st.spinner("Generating your portfolio..."):
            st.session_state.portfolio = generate_portfolio(settings.api_url, profile, market_context, spending)
            st.session_state.profile = profile
    except ApiError as e:
        st.session_state.error = str(e)
    except requests.exceptions.RequestException:
        st.session_state.error = "Could not reach the FinCraft API. Please try again."
    finally:
        st.session_state.pending = False

with result_col:
    st.subheader("AI-Generated Portfolio")
    if st.session_state.error:
        st.error(st.session_state.error)
    portfolio = st.session_state.portfolio
    if portfolio:
        mode = st.radio(
            "Transparency mode",
            list(TransparencyMode),
            format_func=lambda m: MODE_LABELS[m],
            horizontal=True,
        )
        view = view_for_mode(portfolio, mode)

        st.write(view["narrative_summary"])
        m1, m2, m3 = st.columns(3)
        m1.metric("Risk profile", view["risk_profile"])
        m2.metric("Expected return", view["expected_return"])
        m3.metric("Risk level", view["estimated_risk_level"])

        rows = chart_data(view)
        st.plotly_chart(px.pie(names=[r["name"] for r in rows], values=[r["value"] for r in rows],
                               title="Recommended Allocation"), use_container_width=True)

        amounts = amounts_for_profile(view, st.session_state.profile or {})
        st.table([
            {
                "Category": a["category"],
                "Allocation": a["allocation"],
                "Amount": "" if row["amount"] is None else f"{row['currency']} {row['amount']:,.2f}",
                "Reason": a["reason"],
            }
            for a, row in zip(view["recommended_portfolio"], amounts)
        ])
        st.info(f"Rebalancing tip: {view['rebalancing_tip']}")

        if view.get("citations"):
            st.markdown("**Sources**")
            for c in view["citations"]:
                st.markdown(f"- [{c['title']}]({c['uri']}) ({c.get('confidence', 0.8) * 100:.0f}%)")
        if view.get("searchQueries"):
            st.caption("Searches: " + "; ".join(view["searchQueries"]))

        meta = view.get("transparencyMetadata") or {}
        if meta.get("synthesisMethod"):
            st.caption(f"Method: {meta['synthesisMethod']}")
        rationale = meta.get("modelRationale")
        if rationale:
            st.markdown(f"**Model rationale:** {rationale.get('summary', '')}")
            for factor in rationale.get("keyFactors", []):
                st.markdown(f"- {factor}")
            for excl in rationale.get("exclusions", []):
                st.markdown(f"- Excluded: {excl}")
        for seg in meta.get("retrievedSegments", []):
            st.markdown(f"> {seg['text']}  \nSource: *{seg['source']}*")
        if meta.get("evidenceGraph"):
            overall = meta.get("overallConfidence", 0.8)
            st.markdown(f"**Overall confidence:** {overall * 100:.0f}% ({confidence_level(overall)})")
            graph = meta["evidenceGraph"]
            st.plotly_chart(px.pie(
                names=[e["category"] for e in graph],
                values=[max(e["sourceCount"], 1) for e in graph],
                hole=0.3, title="Evidence per asset class",
            ), use_container_width=True)
            for e in graph:
                with st.expander(f"{e['category']}: {e['sourceCount']} source(s), "
                                 f"{e['avgConfidence'] * 100:.0f}% {e['confidenceLevel']}"):
                    st.caption(f"Evidence alignment: {e['alignmentScore'] * 100:.0f}%")
                    for c in e["supportingCitations"]:
                        st.markdown(f"- [{c['title']}]({c['uri']})")

        with st.expander("Raw JSON"):
            st.code(json.dumps(portfolio, indent=2))

st.caption("Disclaimer: FinCraft AI provides recommendations for informational purposes only "
           "and does not constitute financial advice.")
