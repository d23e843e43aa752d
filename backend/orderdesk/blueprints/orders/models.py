"""
Order models
"""
from enum import Enum as PyEnum

from sqlalchemy import Column, String, Text, Integer, Numeric, Date, ForeignKey, Enum, JSON, UniqueConstraint, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from orderdesk.core.models import BaseModel, StoreScopedModel
from orderdesk.blueprints.tags.models import order_tags


class DeliveryType(PyEnum):
    PICKUP = "pickup"
    DELIVERY = "delivery"


class PaymentStatus(PyEnum):
    PAID = "Paid"
    UNPAID = "Unpaid"


class FulfillmentStatus(PyEnum):
    DELIVERED = "Delivered"
    NOT_DELIVERED = "Not Delivered"


class Order(StoreScopedModel):
    """
    A customer order. Aggregate root for its items and tag links.

    Money columns are kept consistent by the order service:
        subtotal = sum(item.unit_price * item.quantity)
        total    = subtotal + shipping_fee - discount
    """
    __tablename__ = 'orders'

    order_number = Column(Integer, nullable=False)
    customer_id = Column(UUID(as_uuid=True), ForeignKey('customers.id'), nullable=False, index=True)
    delivery_type = Column(Enum(DeliveryType), default=DeliveryType.PICKUP, nullable=False)
    delivery_date = Column(Date, nullable=True, index=True)
    delivery_time = Column(String(8), nullable=True)  # "HH:MM"
    address_id = Column(UUID(as_uuid=True), ForeignKey('addresses.id'), nullable=True)
    # The address as it was when the order was saved
    delivery_address_snapshot = Column(JSON, nullable=True)

    subtotal = Column(Numeric(10, 2), nullable=False, default=0)
    shipping_fee = Column(Numeric(10, 2), nullable=False, default=0)
    discount = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False, default=0)

    payment_status = Column(Enum(PaymentStatus), default=PaymentStatus.UNPAID, nullable=False, index=True)
    fulfillment_status = Column(
        Enum(FulfillmentStatus), default=FulfillmentStatus.NOT_DELIVERED, nullable=False, index=True
    )
    note = Column(Text, nullable=True)
    created_by_name = Column(String(255), nullable=True)

    # Relationships
    customer = relationship('Customer')
    address = relationship('Address')
    items = relationship(
        'OrderItem',
        back_populates='order',
        cascade='all, delete-orphan',
        order_by='OrderItem.position'
    )
    tags = relationship('Tag', secondary=order_tags, order_by='Tag.name')

    __table_args__ = (
        UniqueConstraint('store_id', 'order_number', name='uq_order_number_per_store'),
        Index('idx_orders_store_status', 'store_id', 'fulfillment_status', 'payment_status'),
    )

    def __repr__(self):
        return f'<Order #{self.order_number} (Store: {self.store_id})>'


class OrderItem(BaseModel):
    """
    One line of an order. Product name and chosen complements are copied at
    order time so later catalog edits do not rewrite history.
    """
    __tablename__ = 'order_items'

    order_id = Column(UUID(as_uuid=True), ForeignKey('orders.id'), nullable=False, index=True)
    product_id = Column(UUID(as_uuid=True), ForeignKey('products.id'), nullable=True)
    product_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(10, 2), nullable=False, default=0)
    note = Column(Text, nullable=True)
    complements = Column(JSON, nullable=False, default=list)
    position = Column(Integer, nullable=False, default=0)

    order = relationship('Order', back_populates='items')

    @property
    def line_total(self):
        return self.unit_price * self.quantity

    def __repr__(self):
        return f'<OrderItem {self.quantity}x {self.product_name}>'
