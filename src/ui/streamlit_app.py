"""
Streamlit UI -- Sheet Metrics Dashboard.

Features:
  - Login against /api/auth/login (token kept in session state)
  - Chat-style question box with persistent history
  - KPI cards for summary / growth answers, side-by-side table for comparisons
  - Sidebar with API health, cache stats, refresh button and metric catalog
"""
import os

import httpx
import pandas as pd
import streamlit as st


API_BASE = os.getenv("DASHBOARD_API_BASE", "http://localhost:3000")
_TIMEOUT = 30

st.set_page_config(
    page_title="Metrics Dashboard",
    page_icon="bar_chart",
    layout="wide",
    initial_sidebar_state="expanded",
)


if "token" not in st.session_state:
    st.session_state.token = None

if "email" not in st.session_state:
    st.session_state.email = None

if "messages" not in st.session_state:
    st.session_state.messages = []

if "catalog" not in st.session_state:
    st.session_state.catalog = None


def _auth_headers() -> dict:
    return {"Authorization": f"Bearer {st.session_state.token}"}


def _login(email: str, password: str) -> str | None:
    """Return an error message, or None on success."""
    try:
        resp = httpx.post(
            f"{API_BASE}/api/auth/login",
            json={"email": email, "password": password},
            timeout=5,
        )
    except httpx.ConnectError:
        return "Cannot reach the API. Start it with `uvicorn src.api.main:app --port 3000`."
    if resp.status_code != 200:
        return resp.json().get("error", f"Login failed ({resp.status_code})")
    body = resp.json()
    st.session_state.token = body["token"]
    st.session_state.email = body["email"]
    return None


def _load_catalog():
    """Fetch /api/metrics; cache in session_state."""
    try:
        resp = httpx.get(f"{API_BASE}/api/metrics", headers=_auth_headers(), timeout=5)
        resp.raise_for_status()
        st.session_state.catalog = resp.json()
    except Exception:
        st.session_state.catalog = None


def _fetch_health() -> dict | None:
    try:
        return httpx.get(f"{API_BASE}/api/health", timeout=3).json()
    except Exception:
        return None


def _fetch_cache_stats() -> dict | None:
    try:
        resp = httpx.get(f"{API_BASE}/api/cache/stats", headers=_auth_headers(), timeout=3)
        return resp.json() if resp.status_code == 200 else None
    except Exception:
        return None


# ── Login gate ──────────────────────────────────────────

if not st.session_state.token:
    st.title("Metrics Dashboard")
    with st.form("login"):
        email = st.text_input("Email", placeholder="demo@noon.com")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", use_container_width=True)
    if submitted:
        error = _login(email, password)
        if error:
            st.error(error)
        else:
            st.rerun()
    st.stop()


with st.sidebar:
    st.title("Dashboard")
    st.caption(f"Signed in as **{st.session_state.email}**")
    if st.button("Sign out", use_container_width=True):
        for key in ("token", "email", "catalog"):
            st.session_state[key] = None
        st.session_state.messages = []
        st.rerun()

    st.divider()

    # ── Data status ─────────────────────────────────────
    st.subheader("Data")
    health = _fetch_health()
    if health:
        st.write(f"Cache: **{health.get('cacheState', 'unknown')}**")
    else:
        st.warning("API not reachable.")

    stats = _fetch_cache_stats()
    if stats:
        c1, c2 = st.columns(2)
        c1.metric("Rows", stats.get("rows", 0))
        c2.metric("Hit Rate", f"{stats.get('hit_rate', 0):.0%}")
        age = stats.get("age_seconds")
        if age is not None:
            st.caption(f"Fetched {int(age // 60)} min ago · TTL {int(stats.get('ttl_seconds', 0) // 60)} min")

    if st.button("Refresh from sheet", use_container_width=True):
        try:
            httpx.post(f"{API_BASE}/api/cache/refresh", headers=_auth_headers(), timeout=3)
            st.success("Cache cleared -- next question refetches the sheet.")
        except Exception:
            st.warning("Could not refresh the cache.")

    st.divider()

    # ── Metric catalog ──────────────────────────────────
    st.subheader("Metrics")
    if st.session_state.catalog is None:
        _load_catalog()
    catalog = st.session_state.catalog
    if catalog:
        for m in catalog.get("metrics", []):
            label = m["label"] if m["label"] == m["key"] else f"{m['label']} ({m['key']})"
            st.markdown(f"- {label} `{m['format']}`")


st.title("Metrics Dashboard")
st.markdown("Ask about orders, sessions, conversion, AOV, GMV and customers in plain English.")


with st.expander("Example questions", expanded=False):
    examples = [
        "Orders yesterday",
        "GMV last week",
        "Compare sessions and CR yesterday vs today",
        "Growth",
        "AOV on 2/10/26",
        "New customers last 30 days",
    ]
    cols = st.columns(2)
    for i, ex in enumerate(examples):
        if cols[i % 2].button(ex, key=f"ex_{i}", use_container_width=True):
            st.session_state.prefill = ex


def _render_metrics(items: list[dict]):
    """KPI cards, four per row; growth answers carry a change badge."""
    for start in range(0, len(items), 4):
        cols = st.columns(4)
        for col, item in zip(cols, items[start:start + 4]):
            change = item.get("change")
            delta = None
            if change and change != "N/A":
                delta = change.replace("↑ ", "+").replace("↓ ", "-")
            col.metric(label=item["label"], value=item.get("value", "N/A"), delta=delta)


def _render_comparison(items: list[dict]):
    first = items[0]
    df = pd.DataFrame([
        {
            "Metric": i["label"],
            first.get("date1", "Current"): i.get("value1"),
            first.get("date2", "Previous"): i.get("value2"),
            "Change": i.get("change"),
        }
        for i in items
    ])
    st.dataframe(df, use_container_width=True, hide_index=True)


def _render_response(data: dict):
    """Render one /api/query answer inside a chat message."""
    results = data.get("results", {})
    kind = results.get("type")
    items = results.get("data", [])

    if kind == "error":
        st.error(results.get("message", "Something went wrong"))
        return
    if not items:
        st.info("No values found for that question.")
        return
    if kind == "comparison":
        _render_comparison(items)
    else:
        _render_metrics(items)


for msg in st.session_state.messages:
    with st.chat_message(msg["role"]):
        if msg["role"] == "user":
            st.markdown(msg["content"])
        else:
            _render_response(msg["data"])


prefill = st.session_state.pop("prefill", None)
question = st.chat_input("Ask about your metrics...") or prefill

if question:
    st.session_state.messages.append({"role": "user", "content": question})
    with st.chat_message("user"):
        st.markdown(question)

    with st.chat_message("assistant"):
        with st.spinner("Reading the sheet..."):
            try:
                resp = httpx.post(
                    f"{API_BASE}/api/query",
                    json={"query": question},
                    headers=_auth_headers(),
                    timeout=_TIMEOUT,
                )
                resp.raise_for_status()
                data = resp.json()
            except httpx.ConnectError:
                st.error("Cannot reach the API. Start it with:\n```\nuvicorn src.api.main:app --port 3000\n```")
                st.stop()
            except httpx.HTTPStatusError as exc:
                if exc.response.status_code in (401, 403):
                    st.session_state.token = None
                    st.error("Session expired -- please sign in again.")
                else:
                    st.error(f"API returned {exc.response.status_code}: {exc.response.text}")
                st.stop()
            except Exception as exc:
                st.error(f"Unexpected error: {exc}")
                st.stop()

        _render_response(data)
        st.session_state.messages.append({"role": "assistant", "data": data})
