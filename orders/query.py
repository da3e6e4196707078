"""
Sales-order search query: filter criteria, filter clauses and columns.

A search is an ordered list of clauses ANDed together. Five clauses are
always present and restrict the search to item lines of an order:

    mainline is F, taxline is F, shipping is F, cogs is F,
    item.type noneof Discount

Each non-empty FilterCriteria field then adds one membership clause.

Public API:
    FilterCriteria.from_params(params) → FilterCriteria
    build_filters(criteria)            → list[SearchFilter]
    filter_expression(filters)         → [[field, op, value...], "AND", ...]
    SearchColumn(name, summary, join, label).key
"""

from dataclasses import dataclass
from typing import Any, Mapping

from pydantic import BaseModel

SEARCH_TYPE  = "salesorder"
RESULT_LIMIT = 1000

# Options of the status selector, blank first.
STATUS_OPTIONS = [
    ("",           ""),
    ("SalesOrd:B", "Pending Fulfillment"),
    ("SalesOrd:D", "Partially Fulfilled"),
    ("SalesOrd:E", "Pending Billing/Partially Fulfilled"),
    ("SalesOrd:F", "Pending Billing"),
]

# Every sales-order status, used for the display text of statusref.
STATUS_LABELS = {
    "SalesOrd:A": "Pending Approval",
    "SalesOrd:B": "Pending Fulfillment",
    "SalesOrd:C": "Cancelled",
    "SalesOrd:D": "Partially Fulfilled",
    "SalesOrd:E": "Pending Billing/Partially Fulfilled",
    "SalesOrd:F": "Pending Billing",
    "SalesOrd:G": "Billed",
    "SalesOrd:H": "Closed",
}

# URL parameter → FilterCriteria field
PARAM_FIELDS = {
    "cust_status":     "status",
    "cust_subsidiary": "subsidiary",
    "cust_customer":   "customer",
    "cust_department": "department",
}


class FilterCriteria(BaseModel):
    status: str | None = None
    subsidiary: str | None = None
    customer: str | None = None
    department: str | None = None

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "FilterCriteria":
        """Read cust_* request parameters; blank values mean no constraint."""
        values = {}
        for param, field in PARAM_FIELDS.items():
            raw = params.get(param)
            value = str(raw).strip() if raw is not None else ""
            values[field] = value or None
        return cls(**values)


@dataclass(frozen=True)
class SearchFilter:
    field: str
    operator: str            # is / anyof / noneof
    values: tuple[Any, ...]

    def expression(self) -> list[Any]:
        out: list[Any] = [self.field, self.operator]
        for v in self.values:
            if isinstance(v, bool):
                out.append("T" if v else "F")
            else:
                out.append(v)
        return out


@dataclass(frozen=True)
class SearchColumn:
    name: str
    summary: str = "GROUP"   # GROUP / MAX
    join: str | None = None
    label: str = ""

    @property
    def key(self) -> str:
        path = f"{self.join.lower()}.{self.name}" if self.join else self.name
        return f"{self.summary}({path})"

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "summary": self.summary, "join": self.join, "label": self.label}


MANDATORY_FILTERS = (
    SearchFilter("mainline", "is", (False,)),
    SearchFilter("taxline",  "is", (False,)),
    SearchFilter("shipping", "is", (False,)),
    SearchFilter("cogs",     "is", (False,)),
    SearchFilter("item.type", "noneof", ("Discount",)),
)


def build_filters(criteria: FilterCriteria) -> list[SearchFilter]:
    filters = list(MANDATORY_FILTERS)
    if criteria.status:
        filters.append(SearchFilter("status", "anyof", (criteria.status,)))
    if criteria.customer:
        filters.append(SearchFilter("customermain.internalid", "anyof", (criteria.customer,)))
    if criteria.subsidiary:
        filters.append(SearchFilter("subsidiary", "anyof", (criteria.subsidiary,)))
    if criteria.department:
        filters.append(SearchFilter("department", "anyof", (criteria.department,)))
    return filters


def filter_expression(filters: list[SearchFilter]) -> list[Any]:
    """Serialise clauses into the search service's AND-interleaved expression."""
    expr: list[Any] = []
    for f in filters:
        if expr:
            expr.append("AND")
        expr.append(f.expression())
    return expr
