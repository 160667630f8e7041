# =============================================================================
# tests/test_customers.py - Customer Tests
# =============================================================================
# Tests for ID-type dependent validation and the customer endpoints.
# =============================================================================

import pytest

from core.models.customer import validate_customer_data
from tests.conftest import OTHER_USER_ID, TEST_USER_ID

NATIONALITY_ID = "bbbbbbbb-0000-0000-0000-000000000001"
BRANCH_ID = "cccccccc-0000-0000-0000-000000000001"


@pytest.fixture
def resident():
    """A valid Resident ID body (no ID-type specific fields)."""
    return {
        "name": "Omar Haddad",
        "id_type": "Resident ID",
        "id_number": "2234567890",
        "nationality": NATIONALITY_ID,
        "mobile_number": "0501234567",
        "email": "omar@example.com",
        "branch_id": BRANCH_ID,
    }


@pytest.fixture
def national(resident):
    return {
        **resident,
        "id_type": "National ID",
        "national_id_number": "1234567890",
        "national_id_issue_date": "2020-01-01",
        "national_id_expiry_date": "2030-01-01",
        "place_of_birth": "Riyadh",
        "father_name": "Khalid",
        "mother_name": "Sara",
    }


# =============================================================================
# Validation
# =============================================================================

class TestValidateCustomerData:

    def test_resident_needs_base_fields_only(self, resident):
        assert validate_customer_data(resident) == []

    def test_national_id_valid(self, national):
        assert validate_customer_data(national) == []

    def test_national_id_number_length(self, national):
        errors = validate_customer_data({**national, "national_id_number": "123"})
        assert [error["field"] for error in errors] == ["national_id_number"]

    def test_invalid_date(self, national):
        errors = validate_customer_data({**national, "national_id_expiry_date": "someday"})
        assert errors[0]["field"] == "national_id_expiry_date"

    def test_visitor_requires_its_fields(self, resident):
        errors = validate_customer_data({**resident, "id_type": "Visitor"})
        fields = {error["field"] for error in errors}
        assert {"border_number", "passport_number", "address", "rental_type"} <= fields

    def test_base_errors_reported_before_type_errors(self, national):
        errors = validate_customer_data({**national, "email": "not-an-email", "father_name": ""})
        assert [error["field"] for error in errors] == ["email"]

    def test_unknown_id_type(self, resident):
        errors = validate_customer_data({**resident, "id_type": "Diplomat"})
        assert errors[0]["field"] == "id_type"


# =============================================================================
# Endpoints
# =============================================================================

class TestCustomerEndpoints:

    def test_create_maps_lookups_and_defaults_status(self, client, fake_db, resident):
        active = fake_db.seed("customer_statuses", {"name": "Active"})[0]

        response = client.post("/api/v1/customers", json=resident)

        assert response.status_code == 201
        customer = response.json()["customer"]
        assert customer["nationality_id"] == NATIONALITY_ID
        assert "nationality" not in customer
        assert customer["status_id"] == active["id"]
        assert customer["user_id"] == TEST_USER_ID

    def test_missing_id_number(self, client, fake_db, resident):
        del resident["id_number"]

        response = client.post("/api/v1/customers", json=resident)

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required field: id_number"

    def test_field_errors_returned(self, client, fake_db, national):
        response = client.post("/api/v1/customers", json={**national, "mother_name": "S"})

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "mother_name"

    def test_duplicate_id_number(self, client, fake_db, resident):
        fake_db.seed("customers", {"name": "Existing", "id_number": "2234567890", "user_id": TEST_USER_ID})

        response = client.post("/api/v1/customers", json=resident)

        assert response.status_code == 400
        assert response.json()["error"] == "Customer with this ID number already exists"

    def test_list_flattens_and_counts(self, client, fake_db):
        active, blacklisted = fake_db.seed("customer_statuses", {"name": "Active"}, {"name": "Blacklisted"})
        fake_db.seed(
            "customers",
            {
                "name": "Laila",
                "user_id": TEST_USER_ID,
                "status_id": active["id"],
                "status": {"name": "Active"},
                "nationality": {"nationality": "Saudi"},
            },
            {"name": "Fahad", "user_id": TEST_USER_ID, "status_id": blacklisted["id"], "status": {"name": "Blacklisted"}},
            {"name": "Other", "user_id": OTHER_USER_ID, "status_id": active["id"]},
        )

        body = client.get("/api/v1/customers").json()

        assert body["summaryStats"] == {"total": 2, "active": 1, "blacklisted": 1, "withDues": 0}
        laila = next(c for c in body["customers"] if c["name"] == "Laila")
        assert laila["nationality"] == "Saudi"
        assert laila["classification"] == "N/A"
        assert laila["id_number"] == "N/A"

    def test_blacklisted_filter(self, client, fake_db):
        blacklisted = fake_db.seed("customer_statuses", {"name": "Blacklisted"})[0]
        fake_db.seed(
            "customers",
            {"name": "Fahad", "user_id": TEST_USER_ID, "status_id": blacklisted["id"]},
            {"name": "Laila", "user_id": TEST_USER_ID},
        )

        body = client.get("/api/v1/customers?blacklisted=true").json()

        assert [c["name"] for c in body["customers"]] == ["Fahad"]

    def test_check_uniqueness(self, client, fake_db):
        customer = fake_db.seed("customers", {"email": "taken@example.com", "user_id": TEST_USER_ID})[0]

        taken = client.post("/api/v1/customers/check-uniqueness", json={"field": "email", "value": "taken@example.com"})
        own = client.post(
            "/api/v1/customers/check-uniqueness",
            json={"field": "email", "value": "taken@example.com", "customerId": customer["id"]},
        )
        bad_field = client.post("/api/v1/customers/check-uniqueness", json={"field": "name", "value": "x"})

        assert taken.json() == {"success": True, "isUnique": False}
        assert own.json()["isUnique"] is True
        assert bad_field.status_code == 400

    def test_update_revalidates_on_id_type(self, client, fake_db, resident):
        customer = fake_db.seed("customers", {**resident, "user_id": TEST_USER_ID})[0]

        response = client.put(f"/api/v1/customers/{customer['id']}", json={**resident, "id_type": "National ID"})

        assert response.status_code == 400

    def test_update_partial(self, client, fake_db, resident):
        customer = fake_db.seed("customers", {**resident, "user_id": TEST_USER_ID})[0]

        response = client.put(f"/api/v1/customers/{customer['id']}", json={"address": "King Fahd Road, Riyadh"})

        assert response.json()["customer"]["address"] == "King Fahd Road, Riyadh"

    def test_delete_blocked_by_contracts(self, client, fake_db):
        customer = fake_db.seed("customers", {"name": "Busy", "user_id": TEST_USER_ID})[0]
        fake_db.seed("contracts", {"selected_customer_id": customer["id"], "user_id": TEST_USER_ID})

        response = client.delete(f"/api/v1/customers/{customer['id']}")

        assert response.status_code == 400
        assert response.json()["error"] == "Cannot delete customer. There are contracts associated with this customer."

    def test_customer_contracts(self, client, fake_db):
        customer = fake_db.seed("customers", {"name": "Renter", "user_id": TEST_USER_ID})[0]
        fake_db.seed(
            "contracts",
            {"selected_customer_id": customer["id"], "user_id": TEST_USER_ID, "contract_number": "C-1"},
            {"selected_customer_id": "someone-else", "user_id": TEST_USER_ID, "contract_number": "C-2"},
        )

        body = client.get(f"/api/v1/customers/{customer['id']}/contracts").json()

        assert [c["contract_number"] for c in body["contracts"]] == ["C-1"]
        assert body["summary"]["total"] == 1
