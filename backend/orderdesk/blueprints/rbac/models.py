"""
Role model
"""
from sqlalchemy import Column, String, Text, JSON
from sqlalchemy.orm import relationship

from orderdesk.core.models import BaseModel


class Role(BaseModel):
    """
    A named permission matrix (module -> action set) shared by all stores.

    ``permissions`` is always written in the normalized six-action shape;
    rows saved by older clients are normalized again when loaded.
    """
    __tablename__ = 'roles'

    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    permissions = Column(JSON, nullable=False, default=dict)

    # Relationships
    store_assignments = relationship('StoreUser', back_populates='role')

    def __repr__(self):
        return f'<Role {self.name}>'
