"""
Tag models
"""
from sqlalchemy import Column, String, ForeignKey, Table
from sqlalchemy.dialects.postgresql import UUID

from orderdesk.core.models import StoreScopedModel
from orderdesk.extensions import db


order_tags = Table(
    'order_tags',
    db.metadata,
    Column('order_id', UUID(as_uuid=True), ForeignKey('orders.id'), primary_key=True),
    Column('tag_id', UUID(as_uuid=True), ForeignKey('tags.id'), primary_key=True),
)


class Tag(StoreScopedModel):
    """A colored label used to group orders (e.g. "Party", "VIP")."""
    __tablename__ = 'tags'

    name = Column(String(100), nullable=False)
    color = Column(String(20), nullable=False, default='#6b7280')

    def __repr__(self):
        return f'<Tag {self.name}>'
