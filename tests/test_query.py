from orders.query import (
    MANDATORY_FILTERS,
    STATUS_OPTIONS,
    FilterCriteria,
    SearchColumn,
    SearchFilter,
    build_filters,
    filter_expression,
)

MANDATORY_EXPRESSIONS = [
    ["mainline", "is", "F"],
    ["taxline", "is", "F"],
    ["shipping", "is", "F"],
    ["cogs", "is", "F"],
    ["item.type", "noneof", "Discount"],
]


class TestFilterCriteria:
    """Test reading filter criteria from request parameters."""

    def test_all_params(self):
        """Test that every cust_* parameter maps onto its field."""
        criteria = FilterCriteria.from_params({
            "cust_status": "SalesOrd:B",
            "cust_subsidiary": "1",
            "cust_customer": "301",
            "cust_department": "10",
        })
        assert criteria == FilterCriteria(status="SalesOrd:B", subsidiary="1", customer="301", department="10")

    def test_missing_params_are_none(self):
        """Test that absent parameters leave the field unset."""
        criteria = FilterCriteria.from_params({})
        assert criteria == FilterCriteria()

    def test_blank_params_are_none(self):
        """Test that empty and whitespace values mean no constraint."""
        criteria = FilterCriteria.from_params({"cust_status": "", "cust_customer": "   "})
        assert criteria.status is None
        assert criteria.customer is None

    def test_unrelated_params_ignored(self):
        """Test that other parameters (script, deploy, ...) are ignored."""
        criteria = FilterCriteria.from_params({"script": "42", "deploy": "1"})
        assert criteria == FilterCriteria()


class TestBuildFilters:
    """Test compound filter construction."""

    def test_no_criteria_only_mandatory(self):
        """Test that no criteria gives exactly the five mandatory clauses."""
        filters = build_filters(FilterCriteria())
        assert filters == list(MANDATORY_FILTERS)
        assert len(filters) == 5

    def test_mandatory_always_first(self):
        """Test that mandatory clauses stay present whatever else is set."""
        criteria = FilterCriteria(status="SalesOrd:F", subsidiary="2", customer="302", department="20")
        filters = build_filters(criteria)
        assert filters[:5] == list(MANDATORY_FILTERS)
        assert len(filters) == 9

    def test_status_only(self):
        """Test that a status adds one status membership clause."""
        filters = build_filters(FilterCriteria(status="SalesOrd:B"))
        assert filters[5:] == [SearchFilter("status", "anyof", ("SalesOrd:B",))]

    def test_each_field_adds_its_clause(self):
        """Test that every set field adds its clause in status, customer, subsidiary, department order."""
        criteria = FilterCriteria(status="SalesOrd:D", subsidiary="1", customer="301", department="10")
        assert [f.field for f in build_filters(criteria)[5:]] == [
            "status", "customermain.internalid", "subsidiary", "department",
        ]

    def test_absent_field_omits_clause(self):
        """Test that an unset field sends no clause at all."""
        for name in ("status", "subsidiary", "customer", "department"):
            values = {"status": "SalesOrd:B", "subsidiary": "1", "customer": "301", "department": "10"}
            values[name] = None
            fields = [f.field for f in build_filters(FilterCriteria(**values))]
            assert len(fields) == 8
            expected_missing = {
                "status": "status",
                "subsidiary": "subsidiary",
                "customer": "customermain.internalid",
                "department": "department",
            }[name]
            assert expected_missing not in fields


class TestFilterExpression:
    """Test the serialised filter expression."""

    def test_mandatory_expression(self):
        """Test that clauses are interleaved with AND and booleans become F."""
        expr = filter_expression(build_filters(FilterCriteria()))
        assert expr[0::2] == MANDATORY_EXPRESSIONS
        assert expr[1::2] == ["AND"] * 4

    def test_status_expression(self):
        """Test the expression for a status-only request."""
        expr = filter_expression(build_filters(FilterCriteria(status="SalesOrd:B")))
        assert expr[-2:] == ["AND", ["status", "anyof", "SalesOrd:B"]]

    def test_empty(self):
        """Test that no clauses serialise to an empty expression."""
        assert filter_expression([]) == []


class TestSearchColumn:
    """Test column keys."""

    def test_plain_key(self):
        assert SearchColumn("tranid").key == "GROUP(tranid)"

    def test_joined_key(self):
        """Test that join names are lower-cased into the key."""
        assert SearchColumn("entityid", join="customerMain").key == "GROUP(customermain.entityid)"

    def test_max_key(self):
        assert SearchColumn("total", "MAX").key == "MAX(total)"


class TestStatusOptions:
    """Test the status selector options."""

    def test_five_options_blank_first(self):
        assert len(STATUS_OPTIONS) == 5
        assert STATUS_OPTIONS[0] == ("", "")

    def test_codes_and_labels(self):
        assert dict(STATUS_OPTIONS[1:]) == {
            "SalesOrd:B": "Pending Fulfillment",
            "SalesOrd:D": "Partially Fulfilled",
            "SalesOrd:E": "Pending Billing/Partially Fulfilled",
            "SalesOrd:F": "Pending Billing",
        }
