"""
JSON order store for the local search engine.

Holds a snapshot of sales-order lines together with the reference lists
that back the subsidiary, customer, department and class fields.

File layout (data/sales_orders.json):
    {
      "lines":          [ {internalid, tranid, trandate, status, entity, ...}, ... ],
      "subsidiary":     [ {"id": "1", "name": "Parent Company"}, ... ],
      "customer":       [ ... ],
      "department":     [ ... ],
      "classification": [ ... ]
    }

Public API:
    OrderStore(lines, references)
    OrderStore.save(path) / OrderStore.load(path)
    OrderStore.name_of(source, id) → str
"""

import json
import logging
from pathlib import Path

DATA_DIR   = Path(__file__).parent.parent / "data"
ORDER_FILE = DATA_DIR / "sales_orders.json"

REFERENCE_SOURCES = ("subsidiary", "customer", "department", "classification")

log = logging.getLogger("orders.store")


class OrderStore:
    def __init__(self, lines: list[dict], references: dict[str, list[dict]] | None = None):
        self.lines      = lines   # in saved order; the engine keeps it
        self.references = {
            source: list((references or {}).get(source, [])) for source in REFERENCE_SOURCES
        }
        self._names = {
            source: {str(r["id"]): r.get("name", "") for r in rows}
            for source, rows in self.references.items()
        }

    def name_of(self, source: str, ref_id) -> str:
        if ref_id in (None, ""):
            return ""
        return self._names.get(source, {}).get(str(ref_id), "")

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, path: Path = ORDER_FILE) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"lines": self.lines, **self.references}
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")

    @classmethod
    def load(cls, path: Path = ORDER_FILE) -> "OrderStore":
        """Load a store from disk; an absent file gives an empty store."""
        if not path.exists():
            log.warning("Order store %s not found — starting with no orders.", path)
            return cls([], {})
        data = json.loads(path.read_text(encoding="utf-8"))
        references = {source: data.get(source, []) for source in REFERENCE_SOURCES}
        return cls(data.get("lines", []), references)
