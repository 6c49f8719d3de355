"""
Provides the User model.

A user is created at registration and never deleted. Only the bcrypt hash of
the password is stored; session tokens live exclusively in Redis.
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from .base import BaseModel


class User(BaseModel):
    """
    Represents a registered account.

    :ivar email: Login name of the user. It must be unique.
    :type email: str
    :ivar password_hash: Salted bcrypt hash of the password.
    :type password_hash: str
    """

    __tablename__ = "users"

    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)

    files = relationship("File", back_populates="user")
