"""ORM model for user-submitted posts and their moderation state."""

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, Text, func

from app.models.base import Base


class Post(Base):
    """
    A piece of user content moving through pending → approved | rejected.

    author_username is fixed at creation. version is an optimistic lock:
    an update that lost a race raises StaleDataError on flush.
    """

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    author_username = Column(String(255), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    body = Column(Text, nullable=False)
    status = Column(String(16), nullable=False, default="pending", index=True)
    rejection_note = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    version = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')", name="status"
        ),
    )
    __mapper_args__ = {"version_id_col": version}
