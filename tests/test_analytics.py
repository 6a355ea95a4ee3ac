"""Tests for the dashboard aggregation."""

import random
from datetime import datetime

import pytest

from analytics import (
    EXPORT_COLUMNS,
    NO_BEST_SELLER,
    compute_dashboard,
    export_rows,
    filter_by_month,
    normalize_month,
    parse_snapshot,
)
from conftest import make_order
from errors import AggregationSkip

JAN = datetime(2025, 1, 10, 9, 0)
FEB = datetime(2025, 2, 3, 18, 45)
MAY = datetime(2025, 5, 21, 12, 0)


def months(stats):
    return {m.month: m.sales for m in stats.sales_by_month}


class TestEmptyLedger:
    def test_zero_counts_and_sentinel(self):
        stats = compute_dashboard([])

        assert stats.total_orders == 0
        assert stats.total_revenue == 0
        assert stats.delivered == 0
        assert stats.pending == 0
        assert stats.best_seller == NO_BEST_SELLER
        assert stats.product_sales == []

    def test_baseline_months_present_at_zero(self):
        stats = compute_dashboard([])

        assert [m.month for m in stats.sales_by_month] == ["Jan", "Feb", "Mar"]
        assert all(m.sales == 0 for m in stats.sales_by_month)


class TestTotals:
    def test_january_scenario(self):
        """79 and 200 pending plus 89 delivered, all in January."""
        orders = [
            make_order(79, "pending", JAN),
            make_order(89, "delivered", JAN),
            make_order(200, "pending", JAN),
        ]

        stats = compute_dashboard(orders, "Jan")

        assert stats.total_orders == 3
        assert stats.total_revenue == 368
        assert stats.delivered == 1
        assert stats.pending == 2

    def test_delivered_is_case_insensitive(self):
        orders = [make_order(10, "Delivered"), make_order(10, "DELIVERED ")]

        stats = compute_dashboard(orders)

        assert stats.delivered == 2
        assert stats.pending == 0

    def test_unknown_status_counts_as_pending(self):
        orders = [make_order(10, "shipped"), make_order(10, ""), make_order(10, "delivered")]

        stats = compute_dashboard(orders)

        assert stats.delivered == 1
        assert stats.pending == 2
        assert [(s.name, s.value) for s in stats.status_breakdown] == [("Delivered", 1), ("Pending", 2)]

    def test_row_order_does_not_change_totals(self):
        orders = [
            make_order(79, "delivered", JAN),
            make_order(89.5, "pending", FEB),
            make_order(200, "pending", MAY),
            make_order(12.25, "delivered", FEB),
        ]
        shuffled = list(orders)
        random.Random(7).shuffle(shuffled)

        a = compute_dashboard(orders)
        b = compute_dashboard(list(reversed(orders)))
        c = compute_dashboard(shuffled)

        for other in (b, c):
            assert other.total_orders == a.total_orders
            assert other.total_revenue == a.total_revenue
            assert other.delivered == a.delivered
            assert other.pending == a.pending
            assert months(other) == months(a)


class TestMonths:
    def test_month_filter(self):
        orders = [make_order(79, created_at=JAN), make_order(89, created_at=FEB)]

        stats = compute_dashboard(orders, "Feb")

        assert stats.total_orders == 1
        assert stats.total_revenue == 89

    def test_all_means_no_filter(self):
        orders = [make_order(79, created_at=JAN), make_order(89, created_at=FEB)]

        assert compute_dashboard(orders, "All").total_orders == 2
        assert compute_dashboard(orders, None).total_orders == 2
        assert compute_dashboard(orders, "").total_orders == 2

    def test_filter_is_lenient_about_case(self):
        assert normalize_month("jan") == "Jan"
        assert normalize_month("FEBRUARY") == "Feb"
        assert normalize_month("all") is None

    def test_month_without_orders_filters_to_nothing(self):
        orders = [make_order(79, created_at=JAN)]

        assert filter_by_month(orders, "Dec") == []
        assert compute_dashboard(orders, "Dec").total_orders == 0

    def test_later_month_extends_axis(self):
        orders = [make_order(79, created_at=JAN), make_order(50, created_at=MAY), make_order(25, created_at=MAY)]

        stats = compute_dashboard(orders)

        assert [m.month for m in stats.sales_by_month] == ["Jan", "Feb", "Mar", "May"]
        assert months(stats) == {"Jan": 79, "Feb": 0, "Mar": 0, "May": 75}


class TestBestSeller:
    def test_highest_quantity_wins(self):
        orders = [
            make_order(2, items=[{"name": "A", "price": 1, "quantity": 2}]),
            make_order(2, items=[{"name": "A", "price": 1, "quantity": 2}]),
            make_order(1, items=[{"name": "B", "price": 1, "quantity": 1}]),
        ]

        stats = compute_dashboard(orders)

        assert stats.best_seller == "A"
        assert [(p.name, p.quantity) for p in stats.product_sales] == [("A", 4), ("B", 1)]

    def test_tie_goes_to_first_seen(self):
        orders = [
            make_order(3, items=[{"name": "B", "price": 1, "quantity": 3}]),
            make_order(3, items=[{"name": "A", "price": 1, "quantity": 3}]),
        ]

        assert compute_dashboard(orders).best_seller == "B"

    def test_quantity_not_line_count(self):
        orders = [
            make_order(5, items=[{"name": "A", "price": 1, "quantity": 5}]),
            make_order(1, items=[{"name": "B", "price": 1, "quantity": 1}]),
            make_order(1, items=[{"name": "B", "price": 1, "quantity": 1}]),
        ]

        assert compute_dashboard(orders).best_seller == "A"


class TestMalformedSnapshots:
    def test_bad_snapshot_only_skips_tallies(self):
        good = [
            make_order(79, "delivered", items=[{"name": "A", "price": 79, "quantity": 1}]),
            make_order(89, "pending", items=[{"name": "B", "price": 89, "quantity": 1}]),
        ]
        bad = make_order(200, "pending", items="{not json")

        with_bad = compute_dashboard(good + [bad])
        without_bad = compute_dashboard(good)

        assert with_bad.total_orders == 3
        assert with_bad.total_revenue == 368
        assert with_bad.delivered == 1
        assert with_bad.pending == 2
        assert with_bad.product_sales == without_bad.product_sales

    def test_wrong_shape_is_skipped(self):
        orders = [
            make_order(10, items='{"name": "A"}'),
            make_order(10, items='[{"name": "A"}]'),
            make_order(10, items='[{"name": "B", "price": 10, "quantity": 1}]'),
        ]

        stats = compute_dashboard(orders)

        assert stats.total_orders == 3
        assert stats.best_seller == "B"

    def test_parse_snapshot_raises_skip(self):
        with pytest.raises(AggregationSkip):
            parse_snapshot("nope")

    def test_stored_list_is_read_as_is(self):
        lines = parse_snapshot([{"name": "A", "price": 79, "quantity": 2}])

        assert lines[0].name == "A"
        assert lines[0].quantity == 2

    @pytest.mark.parametrize("items", [None, 5, {"name": "A"}])
    def test_non_text_snapshot_raises_skip(self, items):
        with pytest.raises(AggregationSkip):
            parse_snapshot(items)

    def test_missing_snapshot_still_counts_revenue(self):
        listed = make_order(79, "delivered").model_copy(update={"items": [{"name": "A", "price": 79, "quantity": 1}]})
        missing = make_order(50, None).model_copy(update={"items": None})

        stats = compute_dashboard([listed, missing])

        assert stats.total_orders == 2
        assert stats.total_revenue == 129
        assert stats.pending == 1
        assert stats.best_seller == "A"

    def test_extra_keys_in_lines_are_ignored(self):
        lines = parse_snapshot('[{"id": 1, "name": "A", "price": 79, "quantity": 2, "image": "x.png"}]')

        assert lines[0].name == "A"
        assert lines[0].quantity == 2


class TestExport:
    def test_rows(self):
        order = make_order(
            158,
            "delivered",
            JAN,
            items=[{"name": "A", "price": 79, "quantity": 2}],
            order_id="abc",
        )

        (row,) = export_rows([order])

        assert list(row) == EXPORT_COLUMNS
        assert row["OrderID"] == "abc"
        assert row["Products"] == "A (x2)"
        assert row["Amount"] == 158
        assert row["Month"] == "Jan"
        assert row["Date"] == "2025-01-10 09:00:00"

    def test_unreadable_products_left_blank(self):
        (row,) = export_rows([make_order(10, items="garbage")])

        assert row["Products"] == ""
