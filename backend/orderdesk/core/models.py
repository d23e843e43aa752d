"""
Core abstract models for the multi-store application.
These base classes provide common functionality for all models.
"""
from datetime import datetime
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, JSON, String
from sqlalchemy.dialects.postgresql import UUID

from orderdesk.extensions import db


class BaseModel(db.Model):
    """Abstract base model with common fields and methods."""
    __abstract__ = True

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        """Convert model to dictionary."""
        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
        }


class StoreScopedModel(BaseModel):
    """Abstract base for rows owned by one store, with audit fields."""
    __abstract__ = True

    store_id = Column(UUID(as_uuid=True), ForeignKey('stores.id'), nullable=False, index=True)
    created_by = Column(UUID(as_uuid=True), ForeignKey('users.id'), nullable=True)
    updated_by = Column(UUID(as_uuid=True), ForeignKey('users.id'), nullable=True)


class StoredState(BaseModel):
    """
    Small JSON documents kept between requests on behalf of a client:
    the order wizard draft and the order detail view left open.
    """
    __tablename__ = 'stored_states'

    key = Column(String(255), unique=True, nullable=False, index=True)
    value = Column(JSON, nullable=False)

    def __repr__(self):
        return f'<StoredState {self.key}>'
