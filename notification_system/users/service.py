"""User account service.

Validates requests, runs each write in one database session and, once that
session has committed, hands a CREATE or DELETE event to the publisher.
Publishing is best-effort: a broker failure never undoes a committed write.
"""

from typing import List, Optional

from notification_system.domain.models import User
from notification_system.logging import get_logger
from notification_system.persistence import (
    Database,
    DataIntegrityError,
    RecordNotFoundError,
    UserRepository,
)

from .exceptions import DuplicateEmailError, UserNotFoundError, UserValidationError

logger = get_logger(__name__, component="users")


class UserService:
    """CRUD over users plus lifecycle event publishing."""

    def __init__(self, database: Database, publisher):
        """
        Args:
            database: Open Database
            publisher: Object with ``publish_created(email)`` and ``publish_deleted(email)``
        """
        self.database = database
        self.publisher = publisher

    def create_user(self, name: Optional[str], email: Optional[str], age: Optional[int] = None) -> User:
        """Create a user and publish a CREATE event.

        Raises:
            UserValidationError: If name or email is blank, or age is negative
            DuplicateEmailError: If the email is already taken
        """
        name = _require_text(name, "Name")
        email = _require_text(email, "Email")
        _check_age(age)

        try:
            with self.database.session() as session:
                repo = UserRepository(session)
                if repo.exists_by_email(email):
                    logger.warning(
                        f"User with email already exists: {email}",
                        extra={"event": "user.create.duplicate"},
                    )
                    raise DuplicateEmailError("User with this email already exists")
                user = repo.add(name=name, email=email, age=age)
        except DataIntegrityError as e:
            # Lost a race with a concurrent insert of the same email
            raise DuplicateEmailError("User with this email already exists") from e

        logger.info(
            f"User created successfully: id={user.id}, email={user.email}",
            extra={"event": "user.created", "user_id": user.id},
        )
        self.publisher.publish_created(user.email)
        return user

    def get_user_by_id(self, user_id: int) -> User:
        """
        Raises:
            UserValidationError: If user_id is not a positive integer
            UserNotFoundError: If there is no such user
        """
        _check_id(user_id)
        with self.database.session() as session:
            user = UserRepository(session).get_by_id(user_id)

        if user is None:
            logger.warning(f"User not found with ID: {user_id}")
            raise UserNotFoundError(f"User not found with ID: {user_id}")
        return user

    def get_user_by_email(self, email: Optional[str]) -> User:
        email = _require_text(email, "Email")
        with self.database.session() as session:
            user = UserRepository(session).get_by_email(email)

        if user is None:
            logger.warning(f"User not found with email: {email}")
            raise UserNotFoundError(f"User not found with email: {email}")
        return user

    def list_users(self) -> List[User]:
        with self.database.session() as session:
            return UserRepository(session).list_all()

    def update_user(
        self,
        user_id: int,
        name: Optional[str] = None,
        email: Optional[str] = None,
        age: Optional[int] = None,
    ) -> User:
        """Change the given fields of a user; None or blank values leave a field as is.

        Raises:
            UserValidationError: If user_id is invalid or age is negative
            UserNotFoundError: If there is no such user
            DuplicateEmailError: If the new email belongs to another user
        """
        _check_id(user_id)
        _check_age(age)

        try:
            with self.database.session() as session:
                repo = UserRepository(session)
                current = repo.get_by_id(user_id)
                if current is None:
                    raise UserNotFoundError(f"User not found with ID: {user_id}")

                changes = {}
                if name is not None and name.strip():
                    changes["name"] = name.strip()
                if email is not None and email.strip():
                    new_email = email.strip()
                    if new_email != current.email and repo.exists_by_email(new_email):
                        raise DuplicateEmailError("User with this email already exists")
                    changes["email"] = new_email
                if age is not None:
                    changes["age"] = age

                updated = repo.update(current.model_copy(update=changes))
        except DataIntegrityError as e:
            raise DuplicateEmailError("User with this email already exists") from e
        except RecordNotFoundError as e:
            raise UserNotFoundError(f"User not found with ID: {user_id}") from e

        logger.info(
            f"User updated successfully: id={user_id}",
            extra={"event": "user.updated", "user_id": user_id, "fields": sorted(changes)},
        )
        return updated

    def delete_user(self, user_id: int) -> None:
        """Delete a user and publish a DELETE event with its former email.

        Raises:
            UserValidationError: If user_id is not a positive integer
            UserNotFoundError: If there is no such user
        """
        _check_id(user_id)

        with self.database.session() as session:
            repo = UserRepository(session)
            user = repo.get_by_id(user_id)
            if user is None:
                raise UserNotFoundError(f"User not found with ID: {user_id}")
            email = user.email
            repo.delete(user_id)

        logger.info(
            f"User deleted successfully: id={user_id}, email={email}",
            extra={"event": "user.deleted", "user_id": user_id},
        )
        self.publisher.publish_deleted(email)

    def user_exists(self, email: Optional[str]) -> bool:
        if email is None or not email.strip():
            return False
        with self.database.session() as session:
            return UserRepository(session).exists_by_email(email.strip())


def _require_text(value: Optional[str], field: str) -> str:
    if value is None or not str(value).strip():
        logger.error(f"Invalid user data: {field.lower()} is empty", extra={"event": "user.invalid"})
        raise UserValidationError(f"{field} cannot be null or empty")
    return str(value).strip()


def _check_id(user_id) -> None:
    if isinstance(user_id, bool) or not isinstance(user_id, int) or user_id <= 0:
        logger.error(f"Invalid user ID: {user_id}", extra={"event": "user.invalid"})
        raise UserValidationError("User ID must be greater than 0")


def _check_age(age: Optional[int]) -> None:
    if age is not None and age < 0:
        raise UserValidationError("Age cannot be negative")
