# =============================================================================
# tests/test_companies.py - Company Endpoint Tests
# =============================================================================

import pytest

from tests.conftest import TEST_USER_ID

BRANCH_ID = "cccccccc-0000-0000-0000-000000000001"


@pytest.fixture
def company_body():
    return {
        "company_name": "Acme Trading",
        "tax_number": "300012345600003",
        "commercial_registration_number": "1010123456",
        "mobile_number": "0501234567",
        "email": "fleet@acme.example",
        "branch_id": BRANCH_ID,
        "license_expiry_date": "2027-05-01T00:00:00Z",
    }


class TestCompanyEndpoints:

    def test_create(self, client, fake_db, company_body):
        response = client.post("/api/v1/companies", json=company_body)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Company added successfully"
        assert body["company"]["license_expiry_date"] == "2027-05-01"
        assert body["company"]["documents"] == []
        assert body["company"]["user_id"] == TEST_USER_ID

    def test_invalid_email(self, client, fake_db, company_body):
        response = client.post("/api/v1/companies", json={**company_body, "email": "acme"})

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "email"

    def test_duplicate_tax_number(self, client, fake_db, company_body):
        fake_db.seed("companies", {"tax_number": "300012345600003", "user_id": TEST_USER_ID})

        response = client.post("/api/v1/companies", json=company_body)

        assert response.json()["error"] == "Tax number already exists"

    def test_duplicate_cr_number(self, client, fake_db, company_body):
        fake_db.seed("companies", {"commercial_registration_number": "1010123456", "user_id": TEST_USER_ID})

        response = client.post("/api/v1/companies", json=company_body)

        assert response.status_code == 400
        assert response.json()["error"] == "Commercial registration number already exists"

    def test_list_adds_mobile_alias(self, client, fake_db):
        fake_db.seed("companies", {"company_name": "Acme", "mobile_number": "0500000000", "user_id": TEST_USER_ID})

        body = client.get("/api/v1/companies?search=acm").json()

        assert body["companies"][0]["mobile"] == "0500000000"

    def test_update_checks_other_companies(self, client, fake_db):
        mine, other = fake_db.seed(
            "companies",
            {"company_name": "Mine", "tax_number": "111", "user_id": TEST_USER_ID},
            {"company_name": "Other", "tax_number": "222", "user_id": TEST_USER_ID},
        )

        same = client.put(f"/api/v1/companies/{mine['id']}", json={"tax_number": "111", "city": "Riyadh"})
        taken = client.put(f"/api/v1/companies/{mine['id']}", json={"tax_number": "222"})

        assert same.json()["company"]["city"] == "Riyadh"
        assert taken.status_code == 400

    def test_check_uniqueness(self, client, fake_db):
        fake_db.seed("companies", {"email": "a@b.co", "user_id": TEST_USER_ID})

        response = client.post("/api/v1/companies/check-uniqueness", json={"field": "email", "value": "a@b.co"})

        assert response.json()["isUnique"] is False

    def test_delete(self, client, fake_db):
        company = fake_db.seed("companies", {"company_name": "Gone", "user_id": TEST_USER_ID})[0]

        response = client.delete(f"/api/v1/companies/{company['id']}")

        assert response.status_code == 200
        assert client.get(f"/api/v1/companies/{company['id']}").status_code == 404


class TestConcurrentDuplicates:
    """A unique violation from the insert itself names the clashing column."""

    @pytest.fixture(autouse=True)
    def skip_precheck(self, monkeypatch, fake_db):
        from core.services.company_service import CompanyService

        monkeypatch.setattr(CompanyService, "_ensure_unique", staticmethod(lambda *args, **kwargs: None))
        fake_db.unique["companies"] = ("tax_number", "commercial_registration_number")

    def test_cr_number_violation(self, client, fake_db, company_body):
        fake_db.seed("companies", {"tax_number": "399999999900003", "commercial_registration_number": "1010123456"})

        response = client.post("/api/v1/companies", json=company_body)

        assert response.status_code == 400
        assert response.json()["error"] == "Commercial registration number already exists"

    def test_tax_number_violation(self, client, fake_db, company_body):
        fake_db.seed("companies", {"tax_number": "300012345600003", "commercial_registration_number": "2020000000"})

        response = client.post("/api/v1/companies", json=company_body)

        assert response.json()["error"] == "Tax number already exists"
        assert len(fake_db.rows("companies")) == 1
