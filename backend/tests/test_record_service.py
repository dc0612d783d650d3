"""
Alpaca API — Record Service Unit Tests
=======================================

What:  Tests for RecordService (get, list, create, update, remove, search).
How:   Uses a mock collection (no real MongoDB).

What we test:
    ✅ Driver results become Project instances with string ids
    ✅ Missing documents / zero counts raise NotFoundError
    ✅ Invalid ids, bodies and documents raise ValidationError before any driver call
    ✅ Driver failures are wrapped in DatabaseError
    ✅ Search builds anchored $regex queries and refuses operator keys
"""

import pytest
from bson import ObjectId
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

from alpaca.exceptions import DatabaseError, NotFoundError, ValidationError
from alpaca.models.project import Project
from alpaca.services.record_service import RecordService

PROJECT_ID = "65a1f0c2e4b0a1b2c3d4e5f6"


class TestRecordServiceGet:
    """Tests for get() by id."""

    def setup_method(self):
        self.service = RecordService("projects", Project)

    @pytest.mark.asyncio
    async def test_get_found(self, mock_db, mock_collection, sample_project_doc):
        """Existing document should come back as a Project."""
        mock_collection.find_one.return_value = sample_project_doc

        result = await self.service.get(mock_db, PROJECT_ID)

        assert isinstance(result, Project)
        assert result.id == PROJECT_ID
        assert result.name == "Alpaca"
        mock_db.__getitem__.assert_called_with("projects")
        mock_collection.find_one.assert_awaited_once_with({"_id": ObjectId(PROJECT_ID)})

    @pytest.mark.asyncio
    async def test_get_not_found(self, mock_db, mock_collection):
        """find_one returning None should raise NotFoundError."""
        mock_collection.find_one.return_value = None

        with pytest.raises(NotFoundError, match=PROJECT_ID):
            await self.service.get(mock_db, PROJECT_ID)

    @pytest.mark.asyncio
    async def test_get_invalid_id(self, mock_db, mock_collection):
        """A malformed id is rejected without querying."""
        with pytest.raises(ValidationError, match="not a valid record ID"):
            await self.service.get(mock_db, "not-an-id")
        mock_collection.find_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_driver_error(self, mock_db, mock_collection):
        """Driver failures become DatabaseError."""
        mock_collection.find_one.side_effect = ServerSelectionTimeoutError("no servers")

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.get(mock_db, PROJECT_ID)
        assert exc_info.value.context["operation"] == "get"
        assert exc_info.value.context["record_id"] == PROJECT_ID

    @pytest.mark.asyncio
    async def test_get_stored_document_wrong_shape(self, mock_db, mock_collection):
        """A stored document that does not fit the shape is a server-side error."""
        mock_collection.find_one.return_value = {
            "_id": ObjectId(PROJECT_ID), "name": 42, "category": "x", "description": "y",
        }

        with pytest.raises(DatabaseError):
            await self.service.get(mock_db, PROJECT_ID)


class TestRecordServiceList:
    """Tests for list()."""

    def setup_method(self):
        self.service = RecordService("projects", Project)

    @pytest.mark.asyncio
    async def test_list_empty(self, mock_db, mock_collection):
        result = await self.service.list(mock_db)

        assert result == []
        mock_collection.find.assert_called_once_with({})

    @pytest.mark.asyncio
    async def test_list_with_results(self, mock_db, mock_collection, make_cursor):
        docs = [
            {"_id": ObjectId(), "name": f"Project {i}", "category": "c", "description": "d"}
            for i in range(3)
        ]
        mock_collection.find.return_value = make_cursor(docs)

        result = await self.service.list(mock_db)

        assert [p.name for p in result] == ["Project 0", "Project 1", "Project 2"]
        assert [p.id for p in result] == [str(d["_id"]) for d in docs]

    @pytest.mark.asyncio
    async def test_list_driver_error(self, mock_db, mock_collection):
        mock_collection.find.return_value.to_list.side_effect = ServerSelectionTimeoutError("down")

        with pytest.raises(DatabaseError):
            await self.service.list(mock_db)


class TestRecordServiceCreate:
    """Tests for create()."""

    def setup_method(self):
        self.service = RecordService("projects", Project)

    @pytest.mark.asyncio
    async def test_create_success(self, mock_db, mock_collection):
        """Valid payload is given a fresh id and inserted."""
        payload = {"name": "Alpaca", "category": "web", "description": "Tracker"}

        result = await self.service.create(mock_db, payload)

        assert ObjectId.is_valid(result.id)
        mock_collection.insert_one.assert_awaited_once()
        inserted = mock_collection.insert_one.call_args.args[0]
        assert inserted == {
            "_id": ObjectId(result.id),
            "name": "Alpaca",
            "category": "web",
            "description": "Tracker",
        }

    @pytest.mark.asyncio
    async def test_create_ignores_client_id(self, mock_db, mock_collection):
        payload = {"id": PROJECT_ID, "name": "a", "category": "b", "description": "c"}

        result = await self.service.create(mock_db, payload)

        assert result.id != PROJECT_ID

    @pytest.mark.asyncio
    async def test_create_missing_fields(self, mock_db, mock_collection):
        """Missing or empty required fields answer 'Required fields missing'."""
        with pytest.raises(ValidationError, match="Required fields missing"):
            await self.service.create(mock_db, {"name": "Alpaca", "category": ""})
        mock_collection.insert_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_wrong_type(self, mock_db, mock_collection):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create(
                mock_db, {"name": 1, "category": "b", "description": "c"}
            )
        assert exc_info.value.context["invalid_fields"] == ["name"]

    @pytest.mark.asyncio
    async def test_create_body_not_object(self, mock_db):
        with pytest.raises(ValidationError, match="JSON object"):
            await self.service.create(mock_db, ["name", "category"])

    @pytest.mark.asyncio
    async def test_create_driver_error(self, mock_db, mock_collection):
        mock_collection.insert_one.side_effect = ServerSelectionTimeoutError("down")

        with pytest.raises(DatabaseError):
            await self.service.create(
                mock_db, {"name": "a", "category": "b", "description": "c"}
            )


class TestRecordServiceUpdate:
    """Tests for update()."""

    def setup_method(self):
        self.service = RecordService("projects", Project)

    @pytest.mark.asyncio
    async def test_update_merges_fields(self, mock_db, mock_collection, sample_project_doc):
        """Fields absent from the body keep their stored values."""
        mock_collection.find_one.return_value = sample_project_doc

        result = await self.service.update(mock_db, PROJECT_ID, {"description": "Renamed"})

        assert result.id == PROJECT_ID
        assert result.name == "Alpaca"
        assert result.description == "Renamed"
        mock_collection.replace_one.assert_awaited_once_with(
            {"_id": ObjectId(PROJECT_ID)},
            {
                "_id": ObjectId(PROJECT_ID),
                "name": "Alpaca",
                "category": "web",
                "description": "Renamed",
            },
        )

    @pytest.mark.asyncio
    async def test_update_keeps_path_id(self, mock_db, mock_collection, sample_project_doc):
        """An id in the body never redirects the update to another record."""
        mock_collection.find_one.return_value = sample_project_doc
        other = str(ObjectId())

        result = await self.service.update(mock_db, PROJECT_ID, {"id": other, "_id": other})

        assert result.id == PROJECT_ID
        filter_arg = mock_collection.replace_one.call_args.args[0]
        assert filter_arg == {"_id": ObjectId(PROJECT_ID)}

    @pytest.mark.asyncio
    async def test_update_not_found(self, mock_db, mock_collection):
        mock_collection.find_one.return_value = None

        with pytest.raises(NotFoundError):
            await self.service.update(mock_db, PROJECT_ID, {"name": "x"})
        mock_collection.replace_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_removed_before_replace(self, mock_db, mock_collection, sample_project_doc):
        mock_collection.find_one.return_value = sample_project_doc
        mock_collection.replace_one.return_value.matched_count = 0

        with pytest.raises(NotFoundError):
            await self.service.update(mock_db, PROJECT_ID, {"name": "x"})

    @pytest.mark.asyncio
    async def test_update_clearing_required_field(self, mock_db, mock_collection, sample_project_doc):
        mock_collection.find_one.return_value = sample_project_doc

        with pytest.raises(ValidationError, match="Required fields missing"):
            await self.service.update(mock_db, PROJECT_ID, {"name": ""})
        mock_collection.replace_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_driver_error(self, mock_db, mock_collection, sample_project_doc):
        mock_collection.find_one.return_value = sample_project_doc
        mock_collection.replace_one.side_effect = ServerSelectionTimeoutError("down")

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.update(mock_db, PROJECT_ID, {"name": "x"})
        assert exc_info.value.context["operation"] == "update"


class TestRecordServiceRemove:
    """Tests for remove()."""

    def setup_method(self):
        self.service = RecordService("projects", Project)

    @pytest.mark.asyncio
    async def test_remove_success(self, mock_db, mock_collection):
        await self.service.remove(mock_db, PROJECT_ID)

        mock_collection.delete_one.assert_awaited_once_with({"_id": ObjectId(PROJECT_ID)})

    @pytest.mark.asyncio
    async def test_remove_not_found(self, mock_db, mock_collection):
        mock_collection.delete_one.return_value.deleted_count = 0

        with pytest.raises(NotFoundError):
            await self.service.remove(mock_db, PROJECT_ID)

    @pytest.mark.asyncio
    async def test_remove_invalid_id(self, mock_db, mock_collection):
        with pytest.raises(ValidationError):
            await self.service.remove(mock_db, "12345")
        mock_collection.delete_one.assert_not_awaited()


class TestRecordServiceSearch:
    """Tests for search() and the query it builds."""

    def setup_method(self):
        self.service = RecordService("projects", Project)

    def test_build_query_anchors_each_value(self):
        query = RecordService.build_search_query({"name": "Alp", "category": "w"})

        assert query == {
            "name": {"$regex": "^Alp"},
            "category": {"$regex": "^w"},
        }

    def test_build_query_empty_matches_all(self):
        assert RecordService.build_search_query({}) == {}

    def test_build_query_rejects_non_string(self):
        with pytest.raises(ValidationError, match="must be a string"):
            RecordService.build_search_query({"name": 3})

    def test_build_query_rejects_non_object(self):
        with pytest.raises(ValidationError, match="JSON object"):
            RecordService.build_search_query("Alp")

    def test_build_query_passes_pattern_through(self):
        query = RecordService.build_search_query({"name": r"\p{L}"})

        assert query == {"name": {"$regex": r"^\p{L}"}}

    @pytest.mark.parametrize("field", ["$where", "$foo", ""])
    def test_build_query_rejects_operator_field(self, field):
        with pytest.raises(ValidationError, match="not a searchable field name"):
            RecordService.build_search_query({field: "x"})

    @pytest.mark.asyncio
    async def test_search_operator_field_not_sent(self, mock_db, mock_collection):
        with pytest.raises(ValidationError):
            await self.service.search(mock_db, {"$foo": "x"})
        mock_collection.find.assert_not_called()

    @pytest.mark.asyncio
    async def test_search_pattern_rejected_by_server(self, mock_db, mock_collection):
        """A regex the server cannot compile is a client error."""
        cursor = mock_collection.find.return_value
        cursor.to_list.side_effect = OperationFailure("Regular expression is invalid", code=51091)

        with pytest.raises(ValidationError, match="not a valid pattern"):
            await self.service.search(mock_db, {"name": "("})

    @pytest.mark.asyncio
    async def test_search_other_operation_failure(self, mock_db, mock_collection):
        cursor = mock_collection.find.return_value
        cursor.to_list.side_effect = OperationFailure("not authorized", code=13)

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.search(mock_db, {"name": "Alp"})
        assert exc_info.value.context["operation"] == "search"

    @pytest.mark.asyncio
    async def test_search_runs_query(self, mock_db, mock_collection, make_cursor, sample_project_doc):
        mock_collection.find.return_value = make_cursor([sample_project_doc])

        result = await self.service.search(mock_db, {"name": "Alp"})

        assert [p.id for p in result] == [PROJECT_ID]
        mock_collection.find.assert_called_once_with({"name": {"$regex": "^Alp"}})
