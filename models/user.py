"""
Provides the User model for the application's database schema.

A user owns any number of support conversations. The record is created on
registration and only ever changes afterwards when the password is reset.

Attributes
----------
name : sqlalchemy.Column
    Display name given at registration.
email : sqlalchemy.Column
    Lower-cased, unique email address used to log in.
password_hash : sqlalchemy.Column
    bcrypt hash of the user's password.

Relationships
-------------
conversations : sqlalchemy.orm.relationship
    One-to-many relationship with the `Conversation` model.
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship, validates

from .base import BaseModel


class User(BaseModel):
    """
    Represents a customer account.

    :ivar name: Display name of the user.
    :type name: str
    :ivar email: Email address of the user, stored lower-cased. Unique.
    :type email: str
    :ivar password_hash: bcrypt hash of the password.
    :type password_hash: str
    """

    __tablename__ = "users"

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)

    conversations = relationship(
        "Conversation", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    @validates("email")
    def normalize_email(self, _key, value):
        return value.strip().lower() if value else value

    @validates("name")
    def normalize_name(self, _key, value):
        return value.strip() if value else value
