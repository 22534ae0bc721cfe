from __future__ import annotations
import sys
from pathlib import Path as _Path

_ROOT = _Path(__file__).resolve().parents[1]
_SRC = _ROOT / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

import traceback
import streamlit as st

from nl_explorer.config.settings import load_settings
from nl_explorer.logging.logger import init_logging
from nl_explorer.api.service import build_service

st.set_page_config(page_title="Natural-language Data Exploration", layout="wide")

@st.cache_resource
def bootstrap():
    settings = load_settings()
    init_logging(settings.log_level, settings.log_file)
    service = build_service(settings)
    return settings, service

try:
    settings, service = bootstrap()
except Exception:
    st.error("Startup failed. See error below.")
    st.code(traceback.format_exc())
    raise

st.title("Ask your databases")

databases = service.list_databases()
if not databases:
    st.warning("The database catalog is empty.")
    st.stop()

engines = service.distinct_dialects()
engine = st.selectbox("Engine", ["All"] + engines)
choices = [d["databaseName"] for d in databases if engine == "All" or d["dbType"] == engine]
db_name = st.selectbox("Database", choices)

selected = next((d for d in databases if d["databaseName"] == db_name), None)
if selected:
    with st.expander("Schema", expanded=False):
        st.code(selected.get("schema") or "(no schema description)")

question = st.text_input("Question:", placeholder="e.g., total revenue per country in 2024")

if st.button("Run", disabled=not question):
    with st.spinner("Translating and running query..."):
        resp = service.run_query(db_name, question)

    if not resp.ok:
        st.error(f"{resp.failure.kind}: {resp.failure.message}")
    else:
        table = resp.result
        if table.translation:
            st.markdown("**Generated query**")
            st.code(table.translation.query)
            st.caption(table.translation.explanation)
        st.dataframe(table.to_frame(), use_container_width=True)
        st.caption(f"{len(table.rows)} row(s)")
