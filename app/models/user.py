from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from app.db import Base


def utc_now():
    return datetime.now(timezone.utc)


class User(Base):
    """Account known to the marketplace. Credentials live with the upstream auth service."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    created_at = Column(DateTime, default=utc_now)
