# =============================================================================
# tests/test_settings.py - System Settings Tests
# =============================================================================

from tests.conftest import TEST_USER_ID

SETTING = {"key": "vat_rate", "value": "15", "description": "VAT percentage", "category": "finance"}


class TestSystemSettings:

    def test_create(self, client, fake_db):
        response = client.post("/api/v1/system-settings", json=SETTING)

        assert response.status_code == 201
        setting = response.json()["data"]
        assert setting["is_active"] is True
        assert setting["created_by"] == TEST_USER_ID

    def test_create_requires_every_field(self, client, fake_db):
        response = client.post("/api/v1/system-settings", json={"key": "vat_rate", "value": "15"})

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required fields: key, value, description, category"

    def test_duplicate_key(self, client, fake_db):
        fake_db.seed("system_settings", {**SETTING, "is_active": True})

        response = client.post("/api/v1/system-settings", json=SETTING)

        assert response.status_code == 400
        assert response.json()["error"] == 'Setting with key "vat_rate" already exists'

    def test_list_active_by_category(self, client, fake_db):
        fake_db.seed(
            "system_settings",
            {**SETTING, "is_active": True},
            {"key": "invoice_prefix", "value": "INV", "category": "finance", "is_active": True},
            {"key": "old_rate", "value": "5", "category": "finance", "is_active": False},
            {"key": "theme", "value": "dark", "category": "ui", "is_active": True},
        )

        settings = client.get("/api/v1/system-settings?category=finance").json()["data"]["settings"]

        assert [s["key"] for s in settings] == ["invoice_prefix", "vat_rate"]

    def test_bulk_update(self, client, fake_db):
        fake_db.seed("system_settings", {**SETTING, "is_active": True})

        response = client.put("/api/v1/system-settings", json={"updates": [{"key": "vat_rate", "value": "5"}]})

        assert response.json() == {"success": True, "message": "Settings updated successfully"}
        row = fake_db.rows("system_settings")[0]
        assert row["value"] == "5"
        assert row["updated_by"] == TEST_USER_ID

    def test_bulk_update_format(self, client, fake_db):
        response = client.put("/api/v1/system-settings", json={"updates": {"key": "vat_rate"}})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request format"
