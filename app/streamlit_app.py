"""
Cash-Flow Risk Simulator — Dashboard
====================================

Sidebar form → one Monte Carlo run → KPIs, cash uncertainty bands,
ending-cash histogram and the ±10% sensitivity tornado.

The dashboard talks to the engine only through run messages
(engine/dispatch.py), in-line or in a background worker process.

Run: streamlit run app/streamlit_app.py
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

# ---------------------------------------------------------------------------
# Make project root importable
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.config import DEFAULT_PATH_COUNT, DEFAULT_PERIODS
from distributions.sampler import DISTRIBUTIONS
from engine.dispatch import SimulationDispatcher
from risk.metrics import histogram
from risk.report import fmt_money, fmt_pct

HIST_BINS = 40

_LAYOUT = dict(
    paper_bgcolor="rgba(0,0,0,0)",
    plot_bgcolor="rgba(0,0,0,0)",
    legend=dict(orientation="h"),
    margin=dict(l=10, r=10, t=50, b=10),
)


# ---------------------------------------------------------------------------
# Chart helpers
# ---------------------------------------------------------------------------
def _plot_fan(bands: Dict[str, List[float]], timeline: List[int]):
    x = timeline
    fig = go.Figure()
    fig.add_trace(go.Scatter(x=x, y=bands["p95"], mode="lines", line=dict(width=0),
                             name="95th", showlegend=False))
    fig.add_trace(go.Scatter(x=x, y=bands["p5"], mode="lines", line=dict(width=0),
                             fill="tonexty", fillcolor="rgba(106,209,255,0.08)", name="5–95%"))
    fig.add_trace(go.Scatter(x=x, y=bands["p75"], mode="lines", line=dict(width=0),
                             showlegend=False))
    fig.add_trace(go.Scatter(x=x, y=bands["p25"], mode="lines", line=dict(width=0),
                             fill="tonexty", fillcolor="rgba(106,209,255,0.18)", name="25–75%"))
    fig.add_trace(go.Scatter(x=x, y=bands["p50"], mode="lines",
                             line=dict(color="#6ad1ff", width=2), name="Median"))
    fig.update_layout(title="Cash Balance — Uncertainty Bands",
                      xaxis=dict(title="Month", dtick=1), yaxis=dict(title="Cash ($)"), **_LAYOUT)
    st.plotly_chart(fig, use_container_width=True)


def _plot_histogram(ending_cash: List[float]):
    if len(ending_cash) == 0:
        st.info("No data.")
        return
    centers, counts = histogram(ending_cash, bins=HIST_BINS)
    fig = go.Figure(go.Bar(x=centers, y=counts, marker=dict(color="#6ad1ff"), name="End cash"))
    fig.update_layout(title="Distribution — Ending Cash", xaxis=dict(title="End cash ($)"),
                      yaxis=dict(title="Count"), showlegend=False,
                      **{k: v for k, v in _LAYOUT.items() if k != "legend"})
    st.plotly_chart(fig, use_container_width=True)


def _plot_tornado(tornado: Dict):
    items = tornado.get("items") or []
    if not items:
        st.info("No sensitivity results.")
        return
    ranked = sorted(items, key=lambda d: max(abs(d["deltaLow"]), abs(d["deltaHigh"])), reverse=True)
    names = [d["name"] for d in ranked]
    fig = go.Figure()
    fig.add_trace(go.Bar(x=[d["deltaLow"] * 100 for d in ranked], y=names, orientation="h",
                         name="-10%", marker=dict(color="rgba(255,107,107,0.85)")))
    fig.add_trace(go.Bar(x=[d["deltaHigh"] * 100 for d in ranked], y=names, orientation="h",
                         name="+10%", marker=dict(color="rgba(66,211,146,0.85)")))
    fig.update_layout(title="Sensitivity: ΔP(Shortfall) when varying one input ±10%",
                      xaxis=dict(title="Percentage points", zeroline=True, zerolinewidth=2),
                      yaxis=dict(autorange="reversed"), barmode="overlay", **_LAYOUT)
    st.plotly_chart(fig, use_container_width=True)


@st.cache_resource
def _dispatcher(strategy: str) -> SimulationDispatcher:
    return SimulationDispatcher(strategy)


# ---------------------------------------------------------------------------
# Page
# ---------------------------------------------------------------------------
def render() -> None:
    st.set_page_config(page_title="Cash-Flow Risk Simulator", layout="wide")
    st.title("Cash-Flow Risk Simulator")

    with st.sidebar:
        st.markdown("#### Simulation")
        periods = st.number_input("Months", 3, 60, DEFAULT_PERIODS, 1)
        sims = st.number_input("Simulations", 1000, 100000, DEFAULT_PATH_COUNT, 1000)
        seed = st.text_input("Seed (blank = random)", "")

        st.markdown("#### Demand")
        dist = st.selectbox("Distribution", DISTRIBUTIONS)
        mu = st.number_input("Mean (units / month)", value=100.0)
        sigma = st.number_input("Std dev", value=20.0)

        st.markdown("#### Unit economics")
        aov = st.number_input("Average order value ($)", value=50.0, min_value=0.0)
        cogs = st.number_input("COGS %", value=40.0, min_value=0.0, max_value=100.0)
        varc = st.number_input("Variable opex %", value=10.0, min_value=0.0, max_value=100.0)
        fixed = st.number_input("Fixed cost / month ($)", value=2000.0, min_value=0.0)
        tax = st.number_input("Tax rate %", value=25.0, min_value=0.0, max_value=100.0)

        st.markdown("#### Cash")
        starting = st.number_input("Starting cash ($)", value=5000.0)
        dso = st.number_input("DSO (days)", value=30.0, min_value=0.0, max_value=120.0)
        late = st.number_input("Late payment %", value=10.0, min_value=0.0, max_value=100.0)
        thresh = st.number_input("Shortfall threshold ($)", value=0.0)

        background = st.checkbox("Run in background process", value=False)
        run = st.button("Run Simulation", type="primary", use_container_width=True)

    if run:
        params = {
            "periods": periods, "sims": sims, "seed": seed or None,
            "demand": {"dist": dist, "mu": mu, "sigma": sigma},
            "aov": aov, "cogsPct": cogs, "varCostPct": varc, "startingCash": starting,
            "fixedCost": fixed, "dsoDays": dso, "latePayPct": late, "taxRate": tax,
            "shortfallThresh": thresh,
        }
        dispatcher = _dispatcher("process" if background else "inline")
        with st.spinner("Running simulations…"):
            msg = dispatcher.submit(params).result()
        st.session_state["last_message"] = msg

    msg = st.session_state.get("last_message")
    if msg is None:
        st.info("Set the inputs and click 'Run Simulation'.")
        return
    if msg["type"] == "error":
        st.error("Error: " + msg["error"])
        return

    res = msg["result"]
    st.caption(f"Done. Sims: {msg['sims']:,} · seed {res['seed']}")

    m = res["metrics"]
    k1, k2, k3, k4 = st.columns(4)
    k1.metric("P(Shortfall)", fmt_pct(m["pShortfallAny"]))
    k2.metric("P(End cash < 0)", fmt_pct(m["pEndCashNeg"]))
    k3.metric("VaR-5 end cash", fmt_money(m["var5"]))
    k4.metric("Median end cash", fmt_money(m["medianEnd"]))

    _plot_fan(res["bands"], res["timeline"])
    left, right = st.columns(2)
    with left:
        _plot_histogram(res["endingCash"])
    with right:
        _plot_tornado(res["tornado"])

    with st.expander("Percentile bands", expanded=False):
        bands = pd.DataFrame({"month": res["timeline"], **res["bands"]})
        st.dataframe(bands.round(2), use_container_width=True, hide_index=True)


def main() -> None:
    """Console entry point: launch this page with streamlit."""
    from streamlit.web import cli as stcli

    sys.argv = ["streamlit", "run", str(Path(__file__).resolve())]
    sys.exit(stcli.main())


if __name__ == "__main__":
    render()
