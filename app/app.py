"""
FastAPI application — sales orders to fulfill or bill.

Run from the project root:
    python -m app.app

Or as a module:
    uvicorn app.app:app --reload

Endpoints:
    GET  /orders                 HTML page: filters + order table
                                 query: cust_status, cust_subsidiary, cust_customer, cust_department
    POST /orders                 filter form submit → 303 to GET /orders?... (204 if no URL)
    GET  /api/orders             same listing as JSON: {"filters": {...}, "orders": [...]}
    GET  /api/lookups/{source}   reference list for subsidiary / customer / department

The search backend is chosen by ORDER_SEARCH_MODE: "local" reads the JSON
order store, "remote" calls the hosted search service.

Logs each request's filters, hit count and wall-clock time to stdout and
logs/app.log (rotating, 5 MB max, 3 backups).
"""

import asyncio
import logging
import logging.handlers
import sys
import time
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from app.lister import APOLOGY, OrderListing, OrderRow, OrderSearch, PageUnavailable, list_orders
from app.settings import (
    API_HOST,
    API_PORT,
    LOG_DIR,
    LOG_FILE,
    ORDER_DATA_FILE,
    ORDER_SEARCH_MODE,
    ORDER_SEARCH_TIMEOUT,
    ORDER_SEARCH_TOKEN,
    ORDER_SEARCH_URL,
)
from frontend.redirect import ResponseNavigator, build_lister_url, save_record
from orders.engine import LocalOrderSearch
from orders.errors import SearchError
from orders.query import FilterCriteria
from orders.remote import RemoteOrderSearch
from orders.store import OrderStore


def _setup_logging() -> None:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    fmt = logging.Formatter("%(asctime)s  %(levelname)s  %(message)s")

    stream = logging.StreamHandler(sys.stdout)
    stream.setFormatter(fmt)

    # Rotate at 5 MB, keep 3 backups
    rotating = logging.handlers.RotatingFileHandler(
        LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
    )
    rotating.setFormatter(fmt)

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    root.addHandler(stream)
    root.addHandler(rotating)

_setup_logging()
log = logging.getLogger("api")

TEMPLATES_DIR = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

LOOKUP_SOURCES = ("subsidiary", "customer", "department")


# ---------------------------------------------------------------------------
# Search backend
# ---------------------------------------------------------------------------

def create_search() -> OrderSearch:
    if ORDER_SEARCH_MODE == "remote":
        log.info("Using hosted order search at %s", ORDER_SEARCH_URL)
        return RemoteOrderSearch(ORDER_SEARCH_URL, token=ORDER_SEARCH_TOKEN, timeout=ORDER_SEARCH_TIMEOUT)

    log.info("Loading order store %s…", ORDER_DATA_FILE)
    store = OrderStore.load(ORDER_DATA_FILE)
    log.info("  %d order lines loaded.", len(store.lines))
    return LocalOrderSearch(store)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.search = create_search()
    log.info("  Order search ready (%s).", ORDER_SEARCH_MODE)
    yield  # server runs here


app = FastAPI(title="Sales Orders to Fulfill or Bill", lifespan=lifespan)


def get_search(request: Request) -> OrderSearch:
    return request.app.state.search


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

class OrderListResponse(BaseModel):
    filters: FilterCriteria
    orders: list[OrderRow]


class LookupOption(BaseModel):
    id: str
    name: str


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _log_failures(listing: OrderListing) -> None:
    for failure in listing.failures:
        log.error("Error in %s: %s", failure.step, failure.error, exc_info=failure.error)


def _run_listing(request: Request, search: OrderSearch) -> OrderListing:
    t0 = time.perf_counter()
    listing = list_orders(request.query_params, search)
    _log_failures(listing)
    elapsed = time.perf_counter() - t0
    log.info(
        "filters=%s  hits=%d  failures=%d  %.2fs",
        listing.criteria.model_dump(exclude_none=True), len(listing.rows), len(listing.failures), elapsed,
    )
    return listing


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@app.get("/orders", response_class=HTMLResponse)
def orders_page(request: Request, search: OrderSearch = Depends(get_search)):
    try:
        listing = _run_listing(request, search)
        return templates.TemplateResponse(request, "orders.html", {"form": listing.form})
    except PageUnavailable:
        log.exception("Error in orders page")
    except Exception:
        log.exception("Error rendering orders page")
    return PlainTextResponse(APOLOGY, status_code=500)


@app.post("/orders")
async def submit_filters(request: Request):
    values = await request.form()
    navigator = ResponseNavigator()

    def resolve(form_values) -> str:
        return build_lister_url(str(request.url_for("orders_page")), form_values)

    save_record(values, resolve, navigator)
    if navigator.location is None:
        return Response(status_code=204)
    return RedirectResponse(url=navigator.location, status_code=303)


@app.get("/api/orders", response_model=OrderListResponse)
def orders_json(request: Request, search: OrderSearch = Depends(get_search)) -> OrderListResponse:
    try:
        listing = _run_listing(request, search)
    except PageUnavailable:
        log.exception("Error in orders API")
        raise HTTPException(status_code=500, detail=APOLOGY)
    return OrderListResponse(filters=listing.criteria, orders=listing.rows)


@app.get("/api/lookups/{source}", response_model=list[LookupOption])
def lookups(source: str, search: OrderSearch = Depends(get_search)) -> list[LookupOption]:
    if source not in LOOKUP_SOURCES:
        raise HTTPException(status_code=404, detail=f"Unknown lookup source: {source}")
    try:
        options = search.lookup(source)
    except SearchError as exc:
        log.error("Lookup %s failed: %s", source, exc)
        raise HTTPException(status_code=502, detail="Order search service unavailable.")
    return [LookupOption(id=value, name=text) for value, text in options]


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def _launch_server() -> None:
    config = uvicorn.Config(app, host=API_HOST, port=API_PORT, reload=False)
    server = uvicorn.Server(config)

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        uvicorn.run(app, host=API_HOST, port=API_PORT, reload=False)
        return

    log.warning(
        "Detected an existing asyncio event loop; serving with create_task() instead of asyncio.run()."
    )
    asyncio.create_task(server.serve())


if __name__ == "__main__":
    log.info("=== Sales Orders to Fulfill or Bill — starting on http://%s:%d/orders ===", API_HOST, API_PORT)
    _launch_server()
