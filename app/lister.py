"""
Order lister: sales orders that need to be fulfilled or billed.

One call to list_orders() handles a request:

    1. build the form (filters + result sublist)
    2. set each filter's default from the cust_* request parameter
    3. fill the subsidiary / customer / department selectors from the search service
    4. build the filter clauses and run the grouped search (first 1000 headers)
    5. project each result into an OrderRow and write it to the sublist
    6. add Submit and Reset

Steps 2-5 never raise. A failing step is recorded as a StepFailure on the
returned OrderListing and the remaining steps still run; a failed search
leaves the table empty. Only a form that cannot be built stops the request,
with PageUnavailable.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

from pydantic import BaseModel

from app.widgets import Form, Sublist
from orders.engine import SearchResult
from orders.query import (
    RESULT_LIMIT,
    STATUS_OPTIONS,
    FilterCriteria,
    SearchColumn,
    SearchFilter,
    build_filters,
)

FORM_TITLE    = "Sales Orders to Fulfill or Bill"
SUBLIST_ID    = "custpage_sublistid"
SUBLIST_LABEL = "Sales orders that need to be fulfilled or billed"
APOLOGY       = "An error occurred while loading the page. Please contact your administrator."

NO_VALUE    = "No Value"
ZERO_AMOUNT = "0.00"

# (form field id, label, reference source, request parameter)
FILTER_FIELDS = [
    ("custpage_statuses",    "Status",     None,         "cust_status"),
    ("custpage_subsidiary1", "Subsidiary", "subsidiary", "cust_subsidiary"),
    ("custpage_customers",   "Customer",   "customer",   "cust_customer"),
    ("custpage_department1", "Department", "department", "cust_department"),
]


class OrderSearch(Protocol):
    def run(
        self,
        filters: list[SearchFilter],
        columns: list[SearchColumn],
        start: int = 0,
        end: int = RESULT_LIMIT,
    ) -> list[SearchResult]: ...

    def lookup(self, source: str) -> list[tuple[str, str]]: ...


# ---------------------------------------------------------------------------
# Result rows
# ---------------------------------------------------------------------------

class OrderRow(BaseModel):
    internal_id: str
    document_number: str
    date: str
    status_label: str
    customer_name: str
    subsidiary_label: str
    department_label: str
    class_label: str
    subtotal: str
    tax: str
    total: str


@dataclass(frozen=True)
class RowColumn:
    field: str            # OrderRow attribute
    sublist_id: str
    label: str
    column: SearchColumn
    text: bool = False    # use display text instead of the raw value
    fallback: str = NO_VALUE


# Same order as OrderRow; the search requests exactly these columns.
ROW_COLUMNS = (
    RowColumn("internal_id",      "custpage_internal_id",     "Internal ID",
              SearchColumn("internalid", label="Internal ID")),
    RowColumn("document_number",  "custpage_document_number", "Document Number",
              SearchColumn("tranid", label="Document Number")),
    RowColumn("date",             "custpage_date",            "Date",
              SearchColumn("trandate", label="Date")),
    RowColumn("status_label",     "custpage_status",          "Status",
              SearchColumn("statusref", label="Status"), text=True),
    RowColumn("customer_name",    "custpage_customer_name",   "Customer Name",
              SearchColumn("entityid", join="customerMain", label="Customer Name")),
    RowColumn("subsidiary_label", "custpage_subsidiary",      "Subsidiary",
              SearchColumn("subsidiary", label="Subsidiary"), text=True),
    RowColumn("department_label", "custpage_department",      "Department",
              SearchColumn("department", label="Department"), text=True),
    RowColumn("class_label",      "custpage_class",           "Class",
              SearchColumn("class", label="Class"), text=True),
    RowColumn("subtotal",         "custpage_subtotal",        "Subtotal",
              SearchColumn("netamount", "MAX", label="Net Amount"), fallback=ZERO_AMOUNT),
    RowColumn("tax",              "custpage_tax",             "Tax",
              SearchColumn("taxtotal", "MAX", label="Tax Total"), fallback=ZERO_AMOUNT),
    RowColumn("total",            "custpage_total",           "Total",
              SearchColumn("total", "MAX", label="Total"), fallback=ZERO_AMOUNT),
)

SEARCH_COLUMNS = [rc.column for rc in ROW_COLUMNS]


def project_row(result: SearchResult) -> OrderRow:
    values = {}
    for rc in ROW_COLUMNS:
        raw = result.get_text(rc.column) if rc.text else result.get_value(rc.column)
        values[rc.field] = str(raw) if raw else rc.fallback
    return OrderRow(**values)


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------

class PageUnavailable(Exception):
    """The form could not be built; the request gets the apology message."""


@dataclass
class StepFailure:
    step: str
    error: Exception


@dataclass
class OrderListing:
    criteria: FilterCriteria
    form: Form
    rows: list[OrderRow] = field(default_factory=list)
    failures: list[StepFailure] = field(default_factory=list)


def build_order_form() -> Form:
    form = Form(FORM_TITLE)

    status = form.add_field("custpage_statuses", "Status", type="select")
    for value, text in STATUS_OPTIONS:
        status.add_select_option(value, text)

    for field_id, label, source, _ in FILTER_FIELDS[1:]:
        form.add_field(field_id, label, type="select", source=source)

    sublist = form.add_sublist(SUBLIST_ID, SUBLIST_LABEL)
    for rc in ROW_COLUMNS:
        sublist.add_field(rc.sublist_id, rc.label)
    return form


def apply_defaults(form: Form, params: Mapping[str, Any]) -> None:
    for field_id, _, _, param in FILTER_FIELDS:
        f = form.get_field(field_id)
        if f:
            f.default_value = params.get(param) or ""


def resolve_lookups(form: Form, search: OrderSearch) -> None:
    for f in form.fields:
        if not f.source:
            continue
        options = search.lookup(f.source)
        f.add_select_option("", "")
        for value, text in options:
            f.add_select_option(value, text)


def search_orders(search: OrderSearch, criteria: FilterCriteria) -> list[OrderRow]:
    results = search.run(build_filters(criteria), SEARCH_COLUMNS, start=0, end=RESULT_LIMIT)
    return [project_row(r) for r in results[:RESULT_LIMIT]]


def fill_sublist(sublist: Sublist, rows: list[OrderRow]) -> None:
    for line, row in enumerate(rows):
        for rc in ROW_COLUMNS:
            sublist.set_sublist_value(rc.sublist_id, line, getattr(row, rc.field))


def list_orders(params: Mapping[str, Any], search: OrderSearch) -> OrderListing:
    criteria = FilterCriteria.from_params(params)

    try:
        form = build_order_form()
    except Exception as exc:
        raise PageUnavailable("Failed to create form") from exc

    listing = OrderListing(criteria, form)

    try:
        apply_defaults(form, params)
    except Exception as exc:
        listing.failures.append(StepFailure("apply defaults", exc))

    try:
        resolve_lookups(form, search)
    except Exception as exc:
        listing.failures.append(StepFailure("resolve lookups", exc))

    try:
        listing.rows = search_orders(search, criteria)
    except Exception as exc:
        listing.failures.append(StepFailure("search orders", exc))

    sublist = form.get_sublist(SUBLIST_ID)
    if sublist is not None:
        try:
            fill_sublist(sublist, listing.rows)
        except Exception as exc:
            sublist.lines.clear()
            listing.rows = []
            listing.failures.append(StepFailure("fill sublist", exc))

    form.add_submit_button("Submit")
    form.add_reset_button("Reset")
    return listing
