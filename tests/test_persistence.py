"""Unit tests for the persistence layer."""

from datetime import timezone

import pytest
from sqlalchemy import inspect, text

from notification_system.domain.models import User
from notification_system.persistence import (
    Database,
    DatabaseConnectionError,
    DataIntegrityError,
    RecordNotFoundError,
    UserRepository,
)
from notification_system.persistence.database import _redact_url


class TestDatabase:
    """Tests for Database lifecycle."""

    def test_open_file_database(self, tmp_path):
        """Test successful file database initialization."""
        db_file = tmp_path / "subdir" / "users.db"
        database = Database(f"sqlite:///{db_file}").open()

        assert db_file.exists()
        assert "users" in inspect(database.engine).get_table_names()

        database.close()

    def test_open_in_memory(self):
        with Database("sqlite:///:memory:") as database:
            with database.session() as session:
                assert session.execute(text("SELECT 1")).scalar() == 1

    def test_open_is_idempotent(self, database):
        engine = database.engine

        assert database.open() is database
        assert database.engine is engine

    @pytest.mark.parametrize("url", ["", None])
    def test_invalid_url_raises(self, url):
        with pytest.raises(DatabaseConnectionError):
            Database(url).open()

    def test_session_before_open_raises(self):
        database = Database("sqlite:///:memory:")

        with pytest.raises(DatabaseConnectionError):
            with database.session():
                pass

        with pytest.raises(DatabaseConnectionError):
            database.engine

    def test_close_is_idempotent(self):
        database = Database("sqlite:///:memory:").open()

        database.close()
        database.close()

        assert not database.is_open

    def test_session_rolls_back_on_error(self, database):
        with pytest.raises(RuntimeError):
            with database.session() as session:
                UserRepository(session).add("Ivan", "ivan@example.com")
                raise RuntimeError("abort")

        with database.session() as session:
            assert UserRepository(session).list_all() == []

    def test_session_commits(self, database):
        with database.session() as session:
            UserRepository(session).add("Ivan", "ivan@example.com")

        with database.session() as session:
            assert UserRepository(session).exists_by_email("ivan@example.com")

    def test_schema_creation_is_idempotent(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'users.db'}"

        Database(url).open().close()
        with Database(url) as database:
            assert "users" in inspect(database.engine).get_table_names()

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("sqlite:///./data/users.db", "sqlite:///./data/users.db"),
            ("postgresql://app:secret@db:5432/users", "postgresql://app:***@db:5432/users"),
            ("postgresql://db:5432/users", "postgresql://db:5432/users"),
        ],
    )
    def test_redact_url(self, url, expected):
        assert _redact_url(url) == expected


class TestUserRepository:
    """Tests for UserRepository CRUD."""

    def test_add_assigns_id_and_timestamp(self, database):
        with database.session() as session:
            user = UserRepository(session).add("Ivan", "ivan@example.com", age=30)

        assert isinstance(user, User)
        assert user.id > 0
        assert user.age == 30
        assert user.created_at.tzinfo == timezone.utc

    def test_get_by_id_and_email(self, database):
        with database.session() as session:
            created = UserRepository(session).add("Ivan", "ivan@example.com")

        with database.session() as session:
            repo = UserRepository(session)
            assert repo.get_by_id(created.id) == created
            assert repo.get_by_email("ivan@example.com") == created
            assert repo.get_by_id(999) is None
            assert repo.get_by_email("nobody@example.com") is None

    def test_duplicate_email_raises_integrity_error(self, database):
        with database.session() as session:
            UserRepository(session).add("Ivan", "ivan@example.com")

        with pytest.raises(DataIntegrityError):
            with database.session() as session:
                UserRepository(session).add("Other Ivan", "ivan@example.com")

    def test_list_all_ordered_by_id(self, database):
        with database.session() as session:
            repo = UserRepository(session)
            repo.add("B", "b@example.com")
            repo.add("A", "a@example.com")

        with database.session() as session:
            names = [u.name for u in UserRepository(session).list_all()]

        assert names == ["B", "A"]

    def test_update(self, database):
        with database.session() as session:
            created = UserRepository(session).add("Ivan", "ivan@example.com")

        with database.session() as session:
            updated = UserRepository(session).update(
                created.model_copy(update={"name": "Ivan P.", "age": 31})
            )

        assert updated.name == "Ivan P."
        assert updated.age == 31
        assert updated.email == "ivan@example.com"
        assert updated.created_at == created.created_at

    def test_update_missing_raises(self, database):
        ghost = User(id=42, name="Ghost", email="ghost@example.com", created_at="2025-11-01T12:00:00Z")

        with pytest.raises(RecordNotFoundError):
            with database.session() as session:
                UserRepository(session).update(ghost)

    def test_update_to_taken_email_raises(self, database):
        with database.session() as session:
            repo = UserRepository(session)
            repo.add("A", "a@example.com")
            second = repo.add("B", "b@example.com")

        with pytest.raises(DataIntegrityError):
            with database.session() as session:
                UserRepository(session).update(second.model_copy(update={"email": "a@example.com"}))

    def test_delete(self, database):
        with database.session() as session:
            created = UserRepository(session).add("Ivan", "ivan@example.com")

        with database.session() as session:
            repo = UserRepository(session)
            assert repo.delete(created.id) is True
            assert repo.delete(created.id) is False

        with database.session() as session:
            assert UserRepository(session).exists_by_email("ivan@example.com") is False
