"""
User models
"""
from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship
from werkzeug.security import generate_password_hash, check_password_hash

from orderdesk.core.models import BaseModel


class User(BaseModel):
    """
    Global user model representing a person who can log in.
    A user can work in several stores, with a role per store.
    """
    __tablename__ = 'users'

    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    # Platform administrators manage stores and bypass the role matrix
    is_platform_admin = Column(Boolean, default=False, nullable=False)

    # Relationships
    store_assignments = relationship(
        'StoreUser',
        back_populates='user',
        cascade='all, delete-orphan',
        foreign_keys='StoreUser.user_id'
    )

    def set_password(self, password):
        """Hash and set user password."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Verify password against hash."""
        return check_password_hash(self.password_hash, password)

    def __repr__(self):
        return f'<User {self.email}>'
