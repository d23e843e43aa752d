"""
Store models
"""
from sqlalchemy import Column, String, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from orderdesk.core.models import BaseModel


class Store(BaseModel):
    """
    A restaurant using the system. The store is the tenant: customers,
    products, tags and orders all belong to exactly one store.
    """
    __tablename__ = 'stores'

    name = Column(String(255), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    store_users = relationship('StoreUser', back_populates='store', cascade='all, delete-orphan')

    def __repr__(self):
        return f'<Store {self.slug}>'


class StoreUser(BaseModel):
    """
    Links a user to a store with the role they hold there.
    The same user may hold different roles in different stores.
    """
    __tablename__ = 'store_users'

    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id'), nullable=False, index=True)
    store_id = Column(UUID(as_uuid=True), ForeignKey('stores.id'), nullable=False, index=True)
    role_id = Column(UUID(as_uuid=True), ForeignKey('roles.id'), nullable=False, index=True)

    # Relationships
    user = relationship('User', back_populates='store_assignments', foreign_keys=[user_id])
    store = relationship('Store', back_populates='store_users')
    role = relationship('Role', back_populates='store_assignments')

    __table_args__ = (
        UniqueConstraint('user_id', 'store_id', name='uq_store_user'),
    )

    def __repr__(self):
        return f'<StoreUser user_id={self.user_id} store_id={self.store_id}>'
