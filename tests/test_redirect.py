from urllib.parse import parse_qsl, urlsplit

import pytest

from frontend.redirect import ResponseNavigator, build_lister_url, lister_params, save_record

FORM_VALUES = {
    "custpage_statuses": "SalesOrd:E",
    "custpage_subsidiary1": "1",
    "custpage_customers": "301",
    "custpage_department1": "10",
}


class BrokenNavigator(ResponseNavigator):
    def go(self, url):
        raise RuntimeError("location is read-only")


class TestBuildListerUrl:
    """Test lister URL construction."""

    def test_all_values(self):
        url = build_lister_url("http://host/orders", FORM_VALUES)
        parts = urlsplit(url)
        assert parts.path == "/orders"
        assert parse_qsl(parts.query) == [
            ("cust_subsidiary", "1"),
            ("cust_customer", "301"),
            ("cust_status", "SalesOrd:E"),
            ("cust_department", "10"),
        ]

    def test_empty_values_still_carried(self):
        """Test that unselected filters are sent as empty parameters."""
        url = build_lister_url("http://host/orders", {})
        assert url == "http://host/orders?cust_subsidiary=&cust_customer=&cust_status=&cust_department="

    def test_existing_query_string(self):
        """Test that script/deploy style parameters on the base URL are kept."""
        url = build_lister_url("http://host/app?script=12&deploy=1", {"custpage_statuses": "SalesOrd:B"})
        assert url.startswith("http://host/app?script=12&deploy=1&cust_subsidiary=")
        assert "cust_status=SalesOrd%3AB" in url

    def test_missing_base_url(self):
        with pytest.raises(ValueError):
            build_lister_url("", FORM_VALUES)

    def test_lister_params_none_values(self):
        assert lister_params({"custpage_customers": None})["cust_customer"] == ""


class TestSaveRecord:
    """Test the submit → navigate contract."""

    def test_navigates_and_suppresses_save(self):
        nav = ResponseNavigator()
        handled = save_record(FORM_VALUES, lambda v: build_lister_url("http://host/orders", v), nav)

        assert handled is False
        assert nav.leave_prompt is False
        assert nav.location.startswith("http://host/orders?cust_subsidiary=1")

    def test_url_failure_does_not_navigate(self, caplog):
        def resolve(values):
            raise RuntimeError("no such deployment")

        nav = ResponseNavigator()
        with caplog.at_level("ERROR", logger="redirect"):
            handled = save_record(FORM_VALUES, resolve, nav)

        assert handled is False
        assert nav.location is None
        assert nav.leave_prompt is True
        assert "Error generating order lister URL" in caplog.text

    def test_empty_url_does_not_navigate(self):
        nav = ResponseNavigator()
        save_record(FORM_VALUES, lambda v: "", nav)
        assert nav.location is None

    def test_navigation_failure_is_logged(self, caplog):
        nav = BrokenNavigator()
        with caplog.at_level("ERROR", logger="redirect"):
            handled = save_record(FORM_VALUES, lambda v: "http://host/orders", nav)

        assert handled is False
        assert "Error navigating to order lister" in caplog.text
