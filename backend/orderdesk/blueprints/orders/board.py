"""
Kanban board partitioning of orders by delivery date.

Dates are compared as ISO ``YYYY-MM-DD`` strings against the given day, so
the board always reflects the calendar of whoever asked for it. Buckets are
recomputed on every call and nothing is cached.
"""

from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping

TODAY = "today"
TOMORROW = "tomorrow"
NEXT_7_DAYS = "next7days"
OVERDUE = "overdue"
DELIVERED_UNPAID = "delivered_unpaid"

BUCKETS = (TODAY, TOMORROW, NEXT_7_DAYS, OVERDUE, DELIVERED_UNPAID)

# Orders without a time sort to the end of their column
END_OF_DAY = "23:59"

DELIVERED = "Delivered"
UNPAID = "Unpaid"


def _iso(value) -> str:
    if value is None or value == "":
        return ""
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _sort_key(order: Mapping) -> str:
    return order.get("delivery_time") or END_OF_DAY


def partition_orders(orders: Iterable[Mapping], today: date) -> Dict[str, List[Mapping]]:
    """
    Split orders into the five board columns.

    Not-delivered orders:
        today      delivery_date == today
        tomorrow   delivery_date == today + 1
        next7days  today + 1 < delivery_date <= today + 7
        overdue    no delivery_date, or delivery_date < today
    Delivered orders:
        delivered_unpaid  payment still pending

    Not-delivered orders beyond a week, and delivered orders already paid,
    are on no column. Each column is sorted by delivery time ascending.

    Args:
        orders: Order dicts with delivery_date, delivery_time,
            fulfillment_status and payment_status
        today: The viewer's current date

    Returns:
        Dict of bucket name -> list of orders
    """
    today_iso = today.isoformat()
    tomorrow_iso = (today + timedelta(days=1)).isoformat()
    week_end_iso = (today + timedelta(days=7)).isoformat()

    buckets: Dict[str, List[Mapping]] = {name: [] for name in BUCKETS}

    for order in orders:
        if order.get("fulfillment_status") == DELIVERED:
            if order.get("payment_status") == UNPAID:
                buckets[DELIVERED_UNPAID].append(order)
            continue

        delivery_date = _iso(order.get("delivery_date"))
        if not delivery_date or delivery_date < today_iso:
            buckets[OVERDUE].append(order)
        elif delivery_date == today_iso:
            buckets[TODAY].append(order)
        elif delivery_date == tomorrow_iso:
            buckets[TOMORROW].append(order)
        elif delivery_date <= week_end_iso:
            buckets[NEXT_7_DAYS].append(order)

    for name in BUCKETS:
        buckets[name].sort(key=_sort_key)

    return buckets
