"""ORM model for application accounts (auth and RBAC)."""

from sqlalchemy import CheckConstraint, Column, Integer, String

from app.models.base import Base


class User(Base):
    """
    Account for JWT authentication and role-based access control.

    role: 'admin', 'moderator' or 'user' (see app.schemas.auth.Role).
    username is unique and never changes once created.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default="user")

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'moderator', 'user')", name="role"),
    )
