"""
Local sales-order search engine over an OrderStore.

Evaluates the clause list from orders.query against every stored line,
groups the matching lines by order header (internalid) in order of first
appearance, and aggregates each requested column:

    GROUP → value of the first matching line of the header
    MAX   → numerically largest non-empty value across the header's lines

Public API:
    LocalOrderSearch(store)
    LocalOrderSearch.run(filters, columns, start, end) → list[SearchResult]
    LocalOrderSearch.lookup(source)                    → list[tuple[str, str]]
"""

import logging
from typing import Any, Callable

from orders.errors import SearchError
from orders.query import RESULT_LIMIT, STATUS_LABELS, SearchColumn, SearchFilter
from orders.store import REFERENCE_SOURCES, OrderStore

log = logging.getLogger("orders.engine")

Line = dict[str, Any]


class SearchResult:
    """One grouped result row, addressed by SearchColumn."""

    def __init__(self, cells: dict[str, dict[str, Any]]):
        self.cells = cells   # column key → {"value": .., "text": ..}

    def get_value(self, column: SearchColumn) -> Any:
        return self.cells.get(column.key, {}).get("value")

    def get_text(self, column: SearchColumn) -> Any:
        return self.cells.get(column.key, {}).get("text")


# ---------------------------------------------------------------------------
# Line field access
# ---------------------------------------------------------------------------

def _item_type(line: Line) -> Any:
    return (line.get("item") or {}).get("type")


# search field → line value (fields not listed read the line key directly)
FIELD_GETTERS: dict[str, Callable[[Line], Any]] = {
    "item.type":               _item_type,
    "customermain.internalid": lambda line: line.get("entity"),
    "statusref":               lambda line: line.get("status"),
}


def _field(line: Line, name: str) -> Any:
    getter = FIELD_GETTERS.get(name)
    return getter(line) if getter else line.get(name)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().upper() in {"T", "TRUE", "1"}
    return bool(value)


def _matches(line: Line, clause: SearchFilter) -> bool:
    value = _field(line, clause.field)
    if clause.operator == "is":
        return _as_bool(value) == _as_bool(clause.values[0])
    wanted = {str(v) for v in clause.values}
    if clause.operator == "anyof":
        return value is not None and str(value) in wanted
    if clause.operator == "noneof":
        return value is None or str(value) not in wanted
    raise SearchError(f"Unsupported filter operator: {clause.operator!r}")


def _number(value: Any) -> float | None:
    if value in (None, ""):
        return None
    try:
        return float(str(value).replace(",", ""))
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class LocalOrderSearch:
    def __init__(self, store: OrderStore):
        self.store = store

    def _cell(self, line: Line, column: SearchColumn) -> dict[str, Any]:
        path = f"{column.join.lower()}.{column.name}" if column.join else column.name
        value = _field(line, path)
        text = None
        if path == "statusref":
            text = STATUS_LABELS.get(str(value), value)
        elif path == "customermain.entityid":
            value = self.store.name_of("customer", line.get("entity"))
        elif path == "subsidiary" or path == "department":
            text = self.store.name_of(path, value)
        elif path == "class":
            text = self.store.name_of("classification", value)
        return {"value": value, "text": text}

    def _aggregate(self, lines: list[Line], column: SearchColumn) -> dict[str, Any]:
        if column.summary == "MAX":
            best, best_num = None, None
            for line in lines:
                value = _field(line, column.name)
                num = _number(value)
                if num is not None and (best_num is None or num > best_num):
                    best, best_num = value, num
            return {"value": best, "text": None}
        return self._cell(lines[0], column)

    def run(
        self,
        filters: list[SearchFilter],
        columns: list[SearchColumn],
        start: int = 0,
        end: int = RESULT_LIMIT,
    ) -> list[SearchResult]:
        """Return grouped rows [start, end) in order of first matching line."""
        groups: dict[str, list[Line]] = {}
        for line in self.store.lines:
            if all(_matches(line, clause) for clause in filters):
                groups.setdefault(str(line.get("internalid")), []).append(line)

        log.debug("  %d lines matched, %d order headers", sum(map(len, groups.values())), len(groups))

        rows = []
        for lines in list(groups.values())[start:end]:
            cells = {column.key: self._aggregate(lines, column) for column in columns}
            rows.append(SearchResult(cells))
        return rows

    def lookup(self, source: str) -> list[tuple[str, str]]:
        if source not in REFERENCE_SOURCES:
            raise SearchError(f"Unknown reference list: {source!r}", status=404)
        return [(str(r["id"]), r.get("name", "")) for r in self.store.references[source]]
