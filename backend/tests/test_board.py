"""
Order board tests.

Tests for:
- Bucket assignment by delivery date relative to the viewer's day
- Delivered orders and the delivered_unpaid column
- Sorting by delivery time with untimed orders last
"""

from datetime import date, timedelta

import pytest

from orderdesk.blueprints.orders.board import BUCKETS, partition_orders

TODAY = date(2026, 3, 10)


def _order(name, days=0, time="10:00", fulfillment="Not Delivered", payment="Unpaid", undated=False):
    return {
        "id": name,
        "delivery_date": None if undated else (TODAY + timedelta(days=days)).isoformat(),
        "delivery_time": time,
        "fulfillment_status": fulfillment,
        "payment_status": payment,
    }


def _ids(board, bucket):
    return [order["id"] for order in board[bucket]]


class TestBuckets:

    @pytest.mark.unit
    def test_all_buckets_present_when_empty(self):
        board = partition_orders([], TODAY)

        assert set(board) == set(BUCKETS)
        assert all(column == [] for column in board.values())

    @pytest.mark.unit
    def test_dates_relative_to_today(self):
        board = partition_orders([
            _order("past", days=-2),
            _order("today", days=0),
            _order("tomorrow", days=1),
            _order("in-two", days=2),
            _order("in-seven", days=7),
            _order("in-eight", days=8),
        ], TODAY)

        assert _ids(board, "overdue") == ["past"]
        assert _ids(board, "today") == ["today"]
        assert _ids(board, "tomorrow") == ["tomorrow"]
        assert _ids(board, "next7days") == ["in-two", "in-seven"]
        assert "in-eight" not in sum((_ids(board, b) for b in BUCKETS), [])

    @pytest.mark.unit
    def test_undated_order_is_overdue(self):
        board = partition_orders([_order("undated", undated=True)], TODAY)

        assert _ids(board, "overdue") == ["undated"]

    @pytest.mark.unit
    def test_date_objects_are_accepted(self):
        order = _order("obj")
        order["delivery_date"] = TODAY + timedelta(days=1)

        assert _ids(partition_orders([order], TODAY), "tomorrow") == ["obj"]

    @pytest.mark.unit
    def test_paid_but_not_delivered_stays_on_its_date(self):
        board = partition_orders([_order("paid", payment="Paid")], TODAY)

        assert _ids(board, "today") == ["paid"]

    @pytest.mark.unit
    def test_delivered_unpaid_has_its_own_column(self):
        board = partition_orders([_order("owing", days=-5, fulfillment="Delivered")], TODAY)

        assert _ids(board, "delivered_unpaid") == ["owing"]
        assert _ids(board, "overdue") == []

    @pytest.mark.unit
    def test_delivered_and_paid_is_off_the_board(self):
        board = partition_orders([_order("done", fulfillment="Delivered", payment="Paid")], TODAY)

        assert all(column == [] for column in board.values())

    @pytest.mark.unit
    def test_buckets_are_disjoint_and_cover_the_week(self):
        orders = [_order(f"d{days}", days=days) for days in range(-3, 8)]
        orders.append(_order("none", undated=True))

        board = partition_orders(orders, TODAY)
        placed = sum((_ids(board, b) for b in BUCKETS), [])

        assert sorted(placed) == sorted(order["id"] for order in orders)
        assert len(placed) == len(set(placed))

    @pytest.mark.unit
    def test_depends_on_the_given_day(self):
        order = _order("x", days=1)

        assert _ids(partition_orders([order], TODAY), "tomorrow") == ["x"]
        assert _ids(partition_orders([order], TODAY + timedelta(days=1)), "today") == ["x"]


class TestOrdering:

    @pytest.mark.unit
    def test_sorted_by_time_with_untimed_last(self):
        board = partition_orders([
            _order("afternoon", time="14:00"),
            _order("untimed", time=None),
            _order("morning", time="09:30"),
        ], TODAY)

        assert _ids(board, "today") == ["morning", "afternoon", "untimed"]

    @pytest.mark.unit
    def test_untimed_sorts_with_end_of_day(self):
        board = partition_orders([
            _order("untimed", time=""),
            _order("late", time="23:59"),
            _order("night", time="22:00"),
        ], TODAY)

        assert _ids(board, "today")[0] == "night"
        assert set(_ids(board, "today")[1:]) == {"untimed", "late"}
