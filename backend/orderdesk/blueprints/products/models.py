"""
Catalog models: categories, products and complement groups.
"""
from sqlalchemy import Column, String, Boolean, Integer, Numeric, ForeignKey, JSON
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from orderdesk.core.models import BaseModel, StoreScopedModel


class Category(StoreScopedModel):
    __tablename__ = 'categories'

    name = Column(String(255), nullable=False)

    products = relationship('Product', back_populates='category')

    def __repr__(self):
        return f'<Category {self.name}>'


class Product(StoreScopedModel):
    """
    A sellable item with a base price.

    ``complement_group_ids`` is an ordered list of ComplementGroup ids. A
    group may appear more than once; each occurrence is a separate choice
    when the product is added to an order (e.g. two sauces from one group).
    """
    __tablename__ = 'products'

    name = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    category_id = Column(UUID(as_uuid=True), ForeignKey('categories.id'), nullable=True, index=True)
    complement_group_ids = Column(JSON, nullable=False, default=list)

    category = relationship('Category', back_populates='products')

    def __repr__(self):
        return f'<Product {self.name}>'


class ComplementGroup(StoreScopedModel):
    """A named set of options (sizes, sauces, extras). Required groups need a choice."""
    __tablename__ = 'complement_groups'

    name = Column(String(255), nullable=False)
    is_required = Column(Boolean, default=False, nullable=False)

    options = relationship(
        'ComplementOption',
        back_populates='group',
        cascade='all, delete-orphan',
        order_by='ComplementOption.position'
    )

    def __repr__(self):
        return f'<ComplementGroup {self.name}>'


class ComplementOption(BaseModel):
    __tablename__ = 'complement_options'

    group_id = Column(UUID(as_uuid=True), ForeignKey('complement_groups.id'), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    additional_price = Column(Numeric(10, 2), nullable=False, default=0)
    position = Column(Integer, nullable=False, default=0)

    group = relationship('ComplementGroup', back_populates='options')

    def __repr__(self):
        return f'<ComplementOption {self.name}>'
