"""
Customer models
"""
from sqlalchemy import Column, String, Text, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from orderdesk.core.models import BaseModel, StoreScopedModel


class Customer(StoreScopedModel):
    """
    A person who places orders at a store. Identified by phone number,
    stored as 11 digits without punctuation.
    """
    __tablename__ = 'customers'

    name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False, index=True)
    email = Column(String(255), nullable=True)
    note = Column(Text, nullable=True)

    # Relationships
    addresses = relationship(
        'Address',
        back_populates='customer',
        cascade='all, delete-orphan',
        order_by='Address.created_at'
    )

    __table_args__ = (
        UniqueConstraint('store_id', 'phone', name='uq_customer_phone_per_store'),
    )

    def __repr__(self):
        return f'<Customer {self.name} ({self.phone})>'


class Address(BaseModel):
    """A delivery address. The first address registered for a customer is their principal one."""
    __tablename__ = 'addresses'

    customer_id = Column(UUID(as_uuid=True), ForeignKey('customers.id'), nullable=False, index=True)
    street = Column(String(255), nullable=False)
    number = Column(String(20), nullable=False)
    complement = Column(String(255), nullable=True)
    neighborhood = Column(String(255), nullable=True)
    city = Column(String(255), nullable=False)
    state = Column(String(2), nullable=False)
    postal_code = Column(String(8), nullable=True)
    is_principal = Column(Boolean, default=False, nullable=False)

    customer = relationship('Customer', back_populates='addresses')

    def __repr__(self):
        return f'<Address {self.street}, {self.number} - {self.city}/{self.state}>'
