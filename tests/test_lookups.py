# =============================================================================
# tests/test_lookups.py - Lookup Table Tests
# =============================================================================
# Tests for the generic lookup CRUD (colors, makes, models, statuses, ...).
# =============================================================================

import pytest

from app.exceptions import DuplicateValueError, ReferencedRecordError, ValidationFailedError
from core.models.common import PaginationParams
from core.models.lookup import LOOKUPS, get_lookup
from core.services.lookup_service import LookupService

MAKE_ID = "aaaaaaaa-0000-0000-0000-000000000001"


# =============================================================================
# Registry
# =============================================================================

class TestRegistry:

    def test_paths_are_unique(self):
        paths = [definition.path for definition in LOOKUPS]
        assert len(paths) == len(set(paths))

    def test_get_lookup(self):
        definition = get_lookup("vehicle-configuration", "colors")
        assert definition.table == "vehicle_colors"
        assert definition.path == "/vehicle-configuration/colors"

    def test_unknown_lookup(self):
        with pytest.raises(KeyError):
            get_lookup("vehicle-configuration", "wheels")

    def test_customer_lookups_use_their_own_label(self):
        definition = get_lookup("customer-configurations", "nationalities")
        assert definition.label_field == "nationality"
        assert definition.min_label_length == 2


# =============================================================================
# Service
# =============================================================================

class TestLookupService:

    def test_create_defaults_active(self, fake_db, user_id):
        colors = get_lookup("vehicle-configuration", "colors")

        item = LookupService.create_item(colors, {"name": "  White ", "hex_code": "#FFFFFF"}, user_id=user_id)

        assert item["name"] == "White"
        assert item["is_active"] is True
        assert item["created_by"] == user_id

    def test_duplicate_name_rejected(self, fake_db):
        colors = get_lookup("vehicle-configuration", "colors")
        fake_db.seed("vehicle_colors", {"name": "White"})

        with pytest.raises(DuplicateValueError) as exc_info:
            LookupService.create_item(colors, {"name": "White"})
        assert exc_info.value.message == "Color name already exists"

    def test_model_name_unique_per_make(self, fake_db):
        models = get_lookup("vehicle-configuration", "models")
        fake_db.seed("vehicle_models", {"name": "Camry", "make_id": MAKE_ID})

        other_make = "aaaaaaaa-0000-0000-0000-000000000002"
        created = LookupService.create_item(models, {"name": "Camry", "make_id": other_make})
        assert created["make_id"] == other_make

        with pytest.raises(DuplicateValueError):
            LookupService.create_item(models, {"name": "Camry", "make_id": MAKE_ID})

    def test_model_requires_make(self, fake_db):
        models = get_lookup("vehicle-configuration", "models")
        with pytest.raises(ValidationFailedError) as exc_info:
            LookupService.create_item(models, {"name": "Camry"})
        assert "make_id" in exc_info.value.message

    def test_customer_label_length(self, fake_db):
        nationalities = get_lookup("customer-configurations", "nationalities")
        with pytest.raises(ValidationFailedError) as exc_info:
            LookupService.create_item(nationalities, {"nationality": "X"})
        assert exc_info.value.details[0]["message"] == "Nationality must be between 2 and 100 characters"

    def test_update_checks_other_rows_only(self, fake_db):
        colors = get_lookup("vehicle-configuration", "colors")
        white, black = fake_db.seed("vehicle_colors", {"name": "White"}, {"name": "Black"})

        renamed = LookupService.update_item(colors, white["id"], {"name": "White", "description": "Pearl"})
        assert renamed["description"] == "Pearl"

        with pytest.raises(DuplicateValueError):
            LookupService.update_item(colors, black["id"], {"name": "White"})

    def test_delete_blocked_by_reference(self, fake_db):
        makes = get_lookup("vehicle-configuration", "makes")
        make = fake_db.seed("vehicle_makes", {"name": "Toyota"})[0]
        fake_db.seed("vehicle_models", {"name": "Camry", "make_id": make["id"]})

        with pytest.raises(ReferencedRecordError) as exc_info:
            LookupService.delete_item(makes, make["id"])
        assert exc_info.value.message == "Cannot delete make that has associated models"

    def test_list_search_and_filters(self, fake_db):
        models = get_lookup("vehicle-configuration", "models")
        fake_db.seed(
            "vehicle_models",
            {"name": "Camry", "make_id": MAKE_ID, "code": 1, "is_active": True},
            {"name": "Corolla", "make_id": MAKE_ID, "code": 2, "is_active": False},
            {"name": "Accord", "make_id": "other", "code": 3, "is_active": True},
        )

        rows, total = LookupService.list_items(
            models,
            PaginationParams(page=1, limit=10, search="c"),
            active=True,
            filters={"make_id": MAKE_ID},
        )

        assert total == 1
        assert [row["name"] for row in rows] == ["Camry"]


# =============================================================================
# Endpoints
# =============================================================================

class TestLookupEndpoints:

    def test_list_envelope(self, client, fake_db):
        fake_db.seed("vehicle_colors", {"name": "White", "code": 1}, {"name": "Black", "code": 2})

        response = client.get("/api/v1/vehicle-configuration/colors?page=1&limit=1")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert len(body["colors"]) == 1
        assert body["pagination"]["total"] == 2
        assert body["pagination"]["hasNextPage"] is True

    def test_create_returns_201(self, client, fake_db):
        response = client.post("/api/v1/contract-configuration/add-ons", json={"name": "GPS", "amount": 25})

        assert response.status_code == 201
        assert response.json()["add_on"]["name"] == "GPS"

    def test_missing_name_is_400(self, client, fake_db):
        response = client.post("/api/v1/vehicle-configuration/features", json={"description": "no name"})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_get_unknown_is_404(self, client, fake_db):
        response = client.get("/api/v1/vehicle-configuration/makes/00000000-0000-0000-0000-000000000000")

        assert response.status_code == 404
        assert response.json()["error"] == "Make not found"

    def test_patch_and_put(self, client, fake_db):
        status = fake_db.seed("customer_statuses", {"name": "Active", "color": "green"})[0]

        patched = client.patch(f"/api/v1/customer-configurations/statuses/{status['id']}", json={"color": "blue"})
        put = client.put(f"/api/v1/customer-configurations/statuses/{status['id']}", json={"description": "ok"})

        assert patched.json()["status"]["color"] == "blue"
        assert put.json()["status"]["description"] == "ok"

    def test_delete(self, client, fake_db):
        owner = fake_db.seed("vehicle_owners", {"name": "Fleet Co"})[0]

        response = client.delete(f"/api/v1/vehicle-configuration/owners/{owner['id']}")

        assert response.status_code == 200
        assert response.json()["message"] == "Owner deleted successfully"
        assert fake_db.rows("vehicle_owners") == []

    def test_contract_status_dropdown(self, client, fake_db):
        fake_db.seed(
            "contract_statuses",
            {"name": "Open", "code": 1, "is_active": True},
            {"name": "Legacy", "code": 2, "is_active": False},
        )

        response = client.get("/api/v1/contract-statuses")

        assert [status["name"] for status in response.json()["statuses"]] == ["Open"]
