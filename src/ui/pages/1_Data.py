"""
Streamlit page -- raw sheet data with a per-metric trend chart.
"""
import os

import httpx
import pandas as pd
import streamlit as st

API_BASE = os.getenv("DASHBOARD_API_BASE", "http://localhost:3000")

st.set_page_config(page_title="Sheet Data", layout="wide")
st.title("Sheet Data")

token = st.session_state.get("token")
if not token:
    st.info("Sign in on the main page first.")
    st.stop()

try:
    resp = httpx.get(f"{API_BASE}/api/data", headers={"Authorization": f"Bearer {token}"}, timeout=30)
    body = resp.json()
except httpx.ConnectError:
    st.error("Cannot reach the API.")
    st.stop()

if resp.status_code != 200:
    st.error(body.get("error", f"API returned {resp.status_code}"))
    st.stop()

rows = body.get("data", [])
st.caption(f"{body.get('count', 0)} rows · latest {body.get('latestDate') or 'n/a'}")
if not rows:
    st.stop()

df = pd.DataFrame(rows).drop(columns=["Raw Data"], errors="ignore")
df["day"] = pd.to_datetime(df["date"], errors="coerce")

metrics = [c for c in df.columns if c not in ("date", "day")]
metric = st.selectbox("Metric", metrics, index=0)

trend = df.dropna(subset=["day"]).sort_values("day").set_index("day")[[metric]]
st.line_chart(trend)

st.dataframe(df.drop(columns=["day"]), use_container_width=True, hide_index=True)
st.download_button(
    "Download CSV",
    df.drop(columns=["day"]).to_csv(index=False),
    file_name="sheet_data.csv",
    mime="text/csv",
)
