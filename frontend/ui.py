"""
Streamlit filter console for the order lister.

Offers the four filters of the order page. Submit sends the browser to the
lister page with the filters in the URL; Preview calls GET /api/orders and
shows the matching orders as a table.

    streamlit run frontend/ui.py
"""

import json
import logging

import requests
import streamlit as st
import streamlit.components.v1 as components

from app.settings import API_URL, LISTER_URL
from frontend.redirect import build_lister_url, lister_params, save_record
from orders.query import STATUS_OPTIONS

log = logging.getLogger("frontend")


class StreamlitNavigator:
    """Navigates the top-level browser window from an injected script."""

    def __init__(self) -> None:
        self._script: list[str] = []

    def disable_leave_prompt(self) -> None:
        self._script.append("window.parent.onbeforeunload = null;")

    def go(self, url: str) -> None:
        self._script.append(f"window.parent.location.href = {json.dumps(url)};")
        components.html("<script>" + "".join(self._script) + "</script>", height=0)


@st.cache_data(ttl=300)
def _load_lookup(source: str) -> list[tuple[str, str]]:
    resp = requests.get(f"{API_URL}/lookups/{source}", timeout=30)
    resp.raise_for_status()
    return [(o["id"], o["name"]) for o in resp.json()]


def _selector(label: str, field_id: str, options: list[tuple[str, str]]) -> str:
    names = dict(options)
    return st.selectbox(
        label,
        [value for value, _ in options],
        format_func=lambda v: names.get(v) or "—",
        key=field_id,
    )


st.set_page_config(page_title="Sales Orders to Fulfill or Bill", layout="wide")
st.title("Sales Orders to Fulfill or Bill")

st.markdown(
    """
Pick any of the filters and press **Submit** to open the order list, or
**Preview** to see the matching orders here.

- Start the API first: `python -m app.app`
- Leave a filter blank to not restrict on it.
"""
)

lookups: dict[str, list[tuple[str, str]]] = {}
for source in ("subsidiary", "customer", "department"):
    try:
        lookups[source] = [("", "")] + _load_lookup(source)
    except requests.exceptions.RequestException as exc:
        log.error("Lookup %s failed: %s", source, exc)
        st.warning(f"Could not load {source} list: {exc}")
        lookups[source] = [("", "")]

col1, col2, col3, col4 = st.columns(4)
with col1:
    status = _selector("Status", "custpage_statuses", STATUS_OPTIONS)
with col2:
    subsidiary = _selector("Subsidiary", "custpage_subsidiary1", lookups["subsidiary"])
with col3:
    customer = _selector("Customer", "custpage_customers", lookups["customer"])
with col4:
    department = _selector("Department", "custpage_department1", lookups["department"])

values = {
    "custpage_statuses":    status,
    "custpage_subsidiary1": subsidiary,
    "custpage_customers":   customer,
    "custpage_department1": department,
}

submit_col, preview_col = st.columns([1, 8])
submitted = submit_col.button("Submit")
preview = preview_col.button("Preview")

if submitted:
    save_record(values, lambda v: build_lister_url(LISTER_URL, v), StreamlitNavigator())

if preview:
    with st.spinner("Searching…"):
        try:
            resp = requests.get(f"{API_URL}/orders", params=lister_params(values), timeout=60)
            resp.raise_for_status()
            data = resp.json()
        except requests.exceptions.ConnectionError:
            st.error("Cannot reach the API. Start it with: python -m app.app")
            st.stop()
        except requests.exceptions.HTTPError as exc:
            st.error(f"API error: {exc}")
            st.stop()

    orders = data.get("orders", [])
    if orders:
        st.subheader(f"{len(orders)} orders")
        rows = [
            {
                "Internal ID":     o["internal_id"],
                "Document Number": o["document_number"],
                "Date":            o["date"],
                "Status":          o["status_label"],
                "Customer Name":   o["customer_name"],
                "Subsidiary":      o["subsidiary_label"],
                "Department":      o["department_label"],
                "Class":           o["class_label"],
                "Subtotal":        o["subtotal"],
                "Tax":             o["tax"],
                "Total":           o["total"],
            }
            for o in orders
        ]
        st.dataframe(rows, use_container_width=True, hide_index=True)
    else:
        st.info("No orders match these filters.")
