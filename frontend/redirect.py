"""
Filter redirector.

Turns the four filter selectors of the order-lister form into the lister
URL and sends the browser there:

    <lister>?cust_subsidiary=<id>&cust_customer=<id>&cust_status=<code>&cust_department=<id>

All four parameters are always carried, empty when nothing is selected.
save_record() never lets the form's own save go ahead: it returns False
whether or not navigation happened. A URL that cannot be built means no
navigation at all; the error goes to the log.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any, Protocol
from urllib.parse import urlencode

log = logging.getLogger("redirect")

# form field id → URL parameter, in URL order
FORM_PARAMS = {
    "custpage_subsidiary1": "cust_subsidiary",
    "custpage_customers":   "cust_customer",
    "custpage_statuses":    "cust_status",
    "custpage_department1": "cust_department",
}


class Navigator(Protocol):
    def disable_leave_prompt(self) -> None: ...
    def go(self, url: str) -> None: ...


class ResponseNavigator:
    """Records the target so an HTTP handler can answer with a redirect."""

    def __init__(self) -> None:
        self.location: str | None = None
        self.leave_prompt = True

    def disable_leave_prompt(self) -> None:
        self.leave_prompt = False

    def go(self, url: str) -> None:
        self.location = url


def lister_params(values: Mapping[str, Any]) -> dict[str, str]:
    return {param: str(values.get(field) or "") for field, param in FORM_PARAMS.items()}


def build_lister_url(base_url: str, values: Mapping[str, Any]) -> str:
    if not base_url:
        raise ValueError("Order lister URL is not configured.")
    sep = "&" if "?" in base_url else "?"
    return f"{base_url}{sep}{urlencode(lister_params(values))}"


def save_record(
    values: Mapping[str, Any],
    resolve_url: Callable[[Mapping[str, Any]], str],
    navigator: Navigator,
) -> bool:
    try:
        url = resolve_url(values)
        if not url:
            raise ValueError("Resolved an empty order lister URL.")
    except Exception:
        log.exception("Error generating order lister URL")
        return False

    try:
        navigator.disable_leave_prompt()
        navigator.go(url)
    except Exception:
        log.exception("Error navigating to order lister")
    return False
