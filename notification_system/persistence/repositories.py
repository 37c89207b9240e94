"""Data access layer for users.

The repository works inside a session owned by the caller and returns
``User`` domain models rather than ORM rows. Transactions are committed by
``Database.session()``, never here.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from notification_system.domain.models import User

from .exceptions import DataIntegrityError, PersistenceError, RecordNotFoundError
from .schema import UserModel

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user records."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, user_id: int) -> Optional[User]:
        """Retrieve a user by primary key.

        Returns:
            User if found, None otherwise

        Raises:
            PersistenceError: If a database error occurs
        """
        try:
            user_model = self.session.get(UserModel, user_id)
            return user_model.to_domain() if user_model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve user: {e}") from e

    def get_by_email(self, email: str) -> Optional[User]:
        """Retrieve a user by exact email.

        Returns:
            User if found, None otherwise

        Raises:
            PersistenceError: If a database error occurs
        """
        try:
            stmt = select(UserModel).where(UserModel.email == email)
            user_model = self.session.execute(stmt).scalar_one_or_none()
            return user_model.to_domain() if user_model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving user by email {email}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve user: {e}") from e

    def exists_by_email(self, email: str) -> bool:
        try:
            stmt = select(func.count()).select_from(UserModel).where(UserModel.email == email)
            return self.session.execute(stmt).scalar_one() > 0
        except SQLAlchemyError as e:
            logger.error(f"Error checking user email {email}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to check user existence: {e}") from e

    def list_all(self) -> List[User]:
        """All users ordered by id (empty list if none)."""
        try:
            stmt = select(UserModel).order_by(UserModel.id)
            return [row.to_domain() for row in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing users: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list users: {e}") from e

    def add(self, name: str, email: str, age: Optional[int] = None) -> User:
        """Insert a new user and return it with its generated id.

        Raises:
            DataIntegrityError: If the email is already taken
            PersistenceError: If another database error occurs
        """
        try:
            user_model = UserModel.new(name=name, email=email, age=age)
            self.session.add(user_model)
            self.session.flush()
            return user_model.to_domain()
        except IntegrityError as e:
            logger.error(f"Integrity error inserting user {email}: {e}", exc_info=True)
            raise DataIntegrityError(f"Failed to insert user due to constraint violation: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error inserting user {email}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to insert user: {e}") from e

    def update(self, user: User) -> User:
        """Write back every mutable field of ``user`` (name, email, age).

        Raises:
            RecordNotFoundError: If no row has ``user.id``
            DataIntegrityError: If the new email belongs to another user
            PersistenceError: If another database error occurs
        """
        try:
            existing = self.session.get(UserModel, user.id)
            if existing is None:
                raise RecordNotFoundError(f"User {user.id} not found")

            existing.name = user.name
            existing.email = user.email
            existing.age = user.age

            self.session.flush()
            return existing.to_domain()
        except IntegrityError as e:
            logger.error(f"Integrity error updating user {user.id}: {e}", exc_info=True)
            raise DataIntegrityError(f"Failed to update user due to constraint violation: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error updating user {user.id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update user: {e}") from e

    def delete(self, user_id: int) -> bool:
        """Delete a user.

        Returns:
            True if a row was removed, False if there was none
        """
        try:
            result = self.session.execute(delete(UserModel).where(UserModel.id == user_id))
            return result.rowcount > 0
        except SQLAlchemyError as e:
            logger.error(f"Error deleting user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to delete user: {e}") from e
