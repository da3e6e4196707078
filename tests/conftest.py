import pytest

from orders.engine import LocalOrderSearch
from orders.store import OrderStore


def make_line(internalid: str, **overrides) -> dict:
    """An item line of a pending-fulfillment order; override any field."""
    line = {
        "internalid": internalid,
        "tranid": f"SO-{internalid}",
        "trandate": "10/30/2025",
        "status": "SalesOrd:B",
        "entity": "301",
        "subsidiary": "1",
        "department": "10",
        "class": "5",
        "mainline": False,
        "taxline": False,
        "shipping": False,
        "cogs": False,
        "item": {"id": "55", "type": "InvtPart"},
        "netamount": "100.00",
        "taxtotal": "8.00",
        "total": "108.00",
    }
    line.update(overrides)
    return line


REFERENCES = {
    "subsidiary": [
        {"id": "1", "name": "Honeycomb Mfg."},
        {"id": "2", "name": "Honeycomb Mfg. : Canada"},
    ],
    "customer": [
        {"id": "301", "name": "Acme Supply Co"},
        {"id": "302", "name": "Northwind Traders"},
        {"id": "303", "name": "Blue Harbor Foods"},
    ],
    "department": [
        {"id": "10", "name": "Sales"},
        {"id": "20", "name": "Service"},
    ],
    "classification": [
        {"id": "5", "name": "Retail"},
        {"id": "6", "name": "Wholesale"},
    ],
}


@pytest.fixture
def line_factory():
    return make_line


@pytest.fixture
def references():
    return REFERENCES


@pytest.fixture
def sample_lines():
    """Five orders with summary, tax, shipping, cogs and discount lines mixed in."""
    return [
        make_line("1201", mainline=True, item=None, netamount="540.00", taxtotal="43.20", total="583.20"),
        make_line("1201", netamount="360.00", taxtotal="43.20", total="583.20"),
        make_line("1201", netamount="180.00", taxtotal="43.20", total="583.20",
                  item={"id": "56", "type": "InvtPart"}),
        make_line("1201", taxline=True, item=None, netamount="43.20", taxtotal="43.20", total="583.20"),
        make_line("1202", status="SalesOrd:D", entity="302", subsidiary="2", department="20", **{"class": "6"},
                  item={"id": "57", "type": "NonInvtPart"}, netamount="1200.00", taxtotal="96.00", total="1296.00"),
        make_line("1202", status="SalesOrd:D", entity="302", subsidiary="2", department="20", **{"class": "6"},
                  item={"id": "90", "type": "Discount"}, netamount="-100.00", taxtotal="96.00", total="1296.00"),
        make_line("1203", status="SalesOrd:F", department="", **{"class": ""},
                  item={"id": "58", "type": "Service"}, netamount="75.00", taxtotal="", total="75.00"),
        make_line("1203", status="SalesOrd:F", department="", **{"class": ""},
                  shipping=True, item=None, netamount="12.50", taxtotal="", total="75.00"),
        make_line("1204", status="SalesOrd:E", entity="303", subsidiary="2",
                  netamount="640.00", taxtotal="51.20", total="691.20"),
        make_line("1204", status="SalesOrd:E", entity="303", subsidiary="2", cogs=True,
                  netamount="410.00", taxtotal="51.20", total="691.20"),
        make_line("1205", status="SalesOrd:G", entity="302", subsidiary="2", department="20", **{"class": "6"},
                  netamount="300.00", taxtotal="24.00", total="324.00"),
    ]


@pytest.fixture
def sample_store(sample_lines):
    return OrderStore(sample_lines, REFERENCES)


@pytest.fixture
def local_search(sample_store):
    return LocalOrderSearch(sample_store)
