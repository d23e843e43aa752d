"""
Dashboard figures for the current store.
"""

from datetime import date
from typing import Optional

from orderdesk.extensions import db
from orderdesk.blueprints.orders.models import Order, PaymentStatus, FulfillmentStatus
from orderdesk.blueprints.orders.services import OrderService
from orderdesk.blueprints.customers.models import Customer
from orderdesk.core.permissions import PermissionContext


class DashboardService:

    @staticmethod
    def summary(context: PermissionContext, date_from: Optional[date] = None, date_to: Optional[date] = None) -> dict:
        """
        Headline numbers for the store.

        The order count and value respect the delivery date range; open
        orders, delivered unpaid orders and customers are store-wide.
        """
        totals = OrderService.totals_in_range(context, date_from, date_to)

        base = db.session.query(Order).filter(Order.store_id == context.store_id)

        open_orders = base.filter(Order.fulfillment_status == FulfillmentStatus.NOT_DELIVERED).count()
        delivered_unpaid = base.filter(
            Order.fulfillment_status == FulfillmentStatus.DELIVERED,
            Order.payment_status == PaymentStatus.UNPAID
        ).count()

        customers = db.session.query(Customer).filter(Customer.store_id == context.store_id).count()

        return {
            "date_from": date_from,
            "date_to": date_to,
            "order_count": totals["count"],
            "order_total": totals["total"],
            "open_orders": open_orders,
            "delivered_unpaid": delivered_unpaid,
            "customer_count": customers,
        }
