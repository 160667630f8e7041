# =============================================================================
# tests/test_insurance.py - Insurance Option and Policy Tests
# =============================================================================

import pytest

from core.models.insurance import InsuranceOptionRequest

POLICY = {
    "name": "Fleet 2025",
    "policyNumber": "POL-2025-001",
    "policyAmount": 250000,
    "deductiblePremium": 1000,
    "policyType": "Comprehensive",
    "policyCompany": "Tawuniya",
    "expiryDate": "2026-01-01T00:00:00Z",
}


# =============================================================================
# Options
# =============================================================================

class TestInsuranceOptionRequest:

    def test_value_increase_clears_percentage(self):
        request = InsuranceOptionRequest(
            name="Basic",
            deductiblePremium=500,
            rentalIncreaseType="value",
            rentalIncreaseValue=20,
        )

        row = request.to_row()
        assert row["rental_increase_value"] == 20
        assert row["rental_increase_percentage"] is None

    def test_percentage_increase_clears_value(self):
        request = InsuranceOptionRequest(
            name="Full Cover",
            deductible_premium=500,
            rental_increase_type="percentage",
            rental_increase_value=10,
        )

        row = request.to_row()
        assert row["rental_increase_value"] is None
        assert row["rental_increase_percentage"] == 10


class TestInsuranceOptionEndpoints:

    BODY = {"name": "Full Cover", "deductiblePremium": 500, "rentalIncreaseType": "percentage", "rentalIncreaseValue": 10}

    def test_create_and_list(self, client, fake_db):
        created = client.post("/api/v1/insurance-options", json=self.BODY)

        assert created.status_code == 201
        assert created.json()["option_id"] == created.json()["insuranceOption"]["id"]

        listed = client.get("/api/v1/insurance-options").json()
        assert [option["name"] for option in listed["insuranceOptions"]] == ["Full Cover"]

    def test_premium_must_be_positive(self, client, fake_db):
        response = client.post("/api/v1/insurance-options", json={**self.BODY, "deductiblePremium": 0})

        assert response.status_code == 400

    def test_soft_delete(self, client, fake_db):
        option = fake_db.seed("insurance_options", {"name": "Old", "is_active": True})[0]

        first = client.delete(f"/api/v1/insurance-options/{option['id']}")
        second = client.delete(f"/api/v1/insurance-options/{option['id']}")

        assert first.status_code == 200
        assert second.status_code == 404
        assert fake_db.rows("insurance_options")[0]["is_active"] is False
        assert client.get("/api/v1/insurance-options").json()["insuranceOptions"] == []

    def test_update_inactive_is_404(self, client, fake_db):
        option = fake_db.seed("insurance_options", {"name": "Old", "is_active": False})[0]

        response = client.put(f"/api/v1/insurance-options/{option['id']}", json=self.BODY)

        assert response.status_code == 404


# =============================================================================
# Policies
# =============================================================================

class TestInsurancePolicyEndpoints:

    def test_create_normalizes_expiry(self, client, fake_db):
        response = client.post("/api/v1/insurance-policies", json=POLICY)

        assert response.status_code == 201
        assert response.json()["policy"]["expiry_date"] == "2026-01-01"
        assert response.json()["policy"]["policy_number"] == "POL-2025-001"

    def test_duplicate_number_is_conflict(self, client, fake_db):
        fake_db.seed("insurance_policies", {"policy_number": "POL-2025-001", "is_active": True})

        response = client.post("/api/v1/insurance-policies", json=POLICY)

        assert response.status_code == 409
        assert response.json()["error"] == "Policy number already exists"

    def test_number_of_deleted_policy_can_be_reused(self, client, fake_db):
        fake_db.seed("insurance_policies", {"policy_number": "POL-2025-001", "is_active": False})

        response = client.post("/api/v1/insurance-policies", json=POLICY)

        assert response.status_code == 201

    def test_invalid_expiry(self, client, fake_db):
        response = client.post("/api/v1/insurance-policies", json={**POLICY, "expiryDate": "soon"})

        assert response.status_code == 400
        assert response.json()["details"] == [{"field": "expiry_date", "message": "Invalid date"}]

    def test_get_deleted_is_404(self, client, fake_db):
        policy = fake_db.seed("insurance_policies", {"policy_number": "P", "is_active": False})[0]

        assert client.get(f"/api/v1/insurance-policies/{policy['id']}").status_code == 404

    def test_update_keeps_own_number(self, client, fake_db):
        policy = fake_db.seed("insurance_policies", {"policy_number": "POL-2025-001", "is_active": True})[0]

        response = client.put(f"/api/v1/insurance-policies/{policy['id']}", json={**POLICY, "policyAmount": 300000})

        assert response.status_code == 200
        assert response.json()["policy"]["policy_amount"] == 300000

    @pytest.mark.parametrize("missing", ["policyNumber", "policyCompany", "expiryDate"])
    def test_all_fields_required(self, client, fake_db, missing):
        body = {key: value for key, value in POLICY.items() if key != missing}

        response = client.post("/api/v1/insurance-policies", json=body)

        assert response.status_code == 400
