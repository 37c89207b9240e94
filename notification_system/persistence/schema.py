"""Database schema definition and ORM models.

Defines the ``users`` table and the conversions between ``UserModel`` rows
and ``User`` domain models.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Integer, String, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from notification_system.domain.models import User

logger = logging.getLogger(__name__)

Base = declarative_base()


class UserModel(Base):
    """ORM model for the users table."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)
    age = Column(Integer, nullable=True)

    # ISO 8601 UTC string
    created_at = Column(String(50), nullable=False)

    def to_domain(self) -> User:
        return User(
            id=self.id,
            name=self.name,
            email=self.email,
            age=self.age,
            created_at=_parse_datetime(self.created_at),
        )

    @classmethod
    def from_domain(cls, user: User) -> "UserModel":
        """Create a row from an existing domain user (id included)."""
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            age=user.age,
            created_at=_format_datetime(user.created_at),
        )

    @classmethod
    def new(cls, name: str, email: str, age: Optional[int] = None) -> "UserModel":
        """Create a row for a user not stored yet; the id is assigned on flush."""
        return cls(
            name=name,
            email=email,
            age=age,
            created_at=_format_datetime(datetime.now(timezone.utc)),
        )


def _format_datetime(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _parse_datetime(dt_str: str) -> datetime:
    dt_str = dt_str.rstrip("Z")
    try:
        dt = datetime.strptime(dt_str, "%Y-%m-%dT%H:%M:%S.%f")
    except ValueError:
        dt = datetime.strptime(dt_str, "%Y-%m-%dT%H:%M:%S")
    return dt.replace(tzinfo=timezone.utc)


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes if they don't exist (idempotent)."""
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)
        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")
    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
