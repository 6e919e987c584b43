"""Tests for shared/repository.py."""

import pytest
from unittest.mock import MagicMock

from postgrest.exceptions import APIError

from shared.exceptions import ConflictError, ExternalServiceError
from shared.repository import BaseRepository, SupabaseTableGateway, TableGateway


def api_error(code: str, message: str = "boom") -> APIError:
    return APIError({"code": code, "message": message, "details": None, "hint": None})


class TestBaseRepository:
    """Tests for BaseRepository base class."""

    def test_init_stores_db_client(self):
        """Should store the database client in _db attribute."""
        mock_db = MagicMock()
        repo = BaseRepository(mock_db)
        assert repo._db is mock_db


class TestSupabaseTableGateway:
    @pytest.fixture
    def db(self):
        return MagicMock()

    @pytest.fixture
    def gateway(self, db):
        return SupabaseTableGateway(db)

    def test_satisfies_protocol(self, gateway):
        assert isinstance(gateway, TableGateway)

    def test_select_applies_filters(self, db, gateway):
        query = db.table.return_value.select.return_value
        query.eq.return_value = query
        query.execute.return_value.data = [{"id": "c1"}]

        rows = gateway.select("courses", {"id": "c1"})

        db.table.assert_called_once_with("courses")
        db.table.return_value.select.assert_called_once_with("*")
        query.eq.assert_called_once_with("id", "c1")
        assert rows == [{"id": "c1"}]

    def test_select_none_filter_matches_null(self, db, gateway):
        query = db.table.return_value.select.return_value
        query.is_.return_value = query
        query.execute.return_value.data = []

        assert gateway.select("courses", {"description": None}) == []
        query.is_.assert_called_once_with("description", "null")

    def test_select_without_data_returns_empty(self, db, gateway):
        db.table.return_value.select.return_value.execute.return_value.data = None
        assert gateway.select("courses") == []

    def test_insert_returns_stored_row(self, db, gateway):
        db.table.return_value.insert.return_value.execute.return_value.data = [
            {"id": "generated", "title": "Intro"}
        ]
        row = gateway.insert("courses", {"title": "Intro"})
        db.table.return_value.insert.assert_called_once_with({"title": "Intro"})
        assert row["id"] == "generated"

    def test_update_filters_rows(self, db, gateway):
        query = db.table.return_value.update.return_value
        query.eq.return_value = query
        query.execute.return_value.data = [{"id": "p1", "display_name": "Ann"}]

        rows = gateway.update("users", {"id": "p1"}, {"display_name": "Ann"})

        db.table.return_value.update.assert_called_once_with({"display_name": "Ann"})
        query.eq.assert_called_once_with("id", "p1")
        assert rows[0]["display_name"] == "Ann"

    def test_list_filter_uses_in(self, db, gateway):
        query = db.table.return_value.update.return_value
        query.in_.return_value = query
        query.execute.return_value.data = [{"id": "p1"}, {"id": "p2"}]

        rows = gateway.update("users", {"id": ["p1", "p2"]}, {"display_name": "Ann"})

        query.in_.assert_called_once_with("id", ["p1", "p2"])
        query.eq.assert_not_called()
        assert len(rows) == 2

    def test_delete_filters_rows(self, db, gateway):
        query = db.table.return_value.delete.return_value
        query.eq.return_value = query
        query.execute.return_value.data = [{"id": "l1"}]

        assert gateway.delete("courses_likes", {"id": "l1"}) == [{"id": "l1"}]

    def test_unique_violation_raises_conflict(self, db, gateway):
        db.table.return_value.insert.return_value.execute.side_effect = api_error("23505")
        with pytest.raises(ConflictError) as exc_info:
            gateway.insert("users", {"auth_user_id": "a"})
        assert exc_info.value.table == "users"

    def test_other_errors_raise_external_service_error(self, db, gateway):
        db.table.return_value.select.return_value.execute.side_effect = api_error("42P01")
        with pytest.raises(ExternalServiceError) as exc_info:
            gateway.select("missing_table")
        assert exc_info.value.service == "supabase"
        assert exc_info.value.details["code"] == "42P01"
