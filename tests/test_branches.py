# =============================================================================
# tests/test_branches.py - Branch Endpoint Tests
# =============================================================================

from tests.conftest import OTHER_USER_ID, TEST_USER_ID


class TestBranchEndpoints:
    """CRUD through the API, scoped to the caller."""

    def test_create_defaults_flags(self, client, fake_db):
        response = client.post("/api/v1/branches", json={"name": "Riyadh Main", "code": "RUH-01"})

        assert response.status_code == 201
        branch = response.json()["branch"]
        assert branch["user_id"] == TEST_USER_ID
        assert branch["is_rental_office"] is False
        assert branch["is_active"] is True

    def test_duplicate_code_for_same_user(self, client, fake_db):
        fake_db.seed("branches", {"name": "Old", "code": "RUH-01", "user_id": TEST_USER_ID})

        response = client.post("/api/v1/branches", json={"name": "New", "code": "RUH-01"})

        assert response.status_code == 400
        assert response.json()["error"] == "Branch code already exists"

    def test_same_code_other_user_allowed(self, client, fake_db):
        fake_db.seed("branches", {"name": "Theirs", "code": "RUH-01", "user_id": OTHER_USER_ID})

        response = client.post("/api/v1/branches", json={"name": "Mine", "code": "RUH-01"})

        assert response.status_code == 201

    def test_missing_name_is_validation_error(self, client, fake_db):
        response = client.post("/api/v1/branches", json={"code": "RUH-01"})

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "name"

    def test_list_only_own_branches(self, client, fake_db):
        fake_db.seed(
            "branches",
            {"name": "Jeddah", "code": "JED", "user_id": TEST_USER_ID},
            {"name": "Dammam", "code": "DMM", "user_id": TEST_USER_ID},
            {"name": "Foreign", "code": "XXX", "user_id": OTHER_USER_ID},
        )

        body = client.get("/api/v1/branches").json()

        assert [branch["name"] for branch in body["branches"]] == ["Dammam", "Jeddah"]
        assert body["pagination"]["total"] == 2

    def test_search(self, client, fake_db):
        fake_db.seed(
            "branches",
            {"name": "Jeddah", "code": "JED", "user_id": TEST_USER_ID, "city_region": "Makkah"},
            {"name": "Dammam", "code": "DMM", "user_id": TEST_USER_ID},
        )

        body = client.get("/api/v1/branches?search=makkah").json()

        assert [branch["code"] for branch in body["branches"]] == ["JED"]

    def test_other_users_branch_is_404(self, client, fake_db):
        branch = fake_db.seed("branches", {"name": "Foreign", "code": "XXX", "user_id": OTHER_USER_ID})[0]

        response = client.get(f"/api/v1/branches/{branch['id']}")

        assert response.status_code == 404

    def test_update_partial(self, client, fake_db):
        branch = fake_db.seed("branches", {"name": "Old", "code": "A", "user_id": TEST_USER_ID})[0]

        response = client.put(f"/api/v1/branches/{branch['id']}", json={"name": "New"})

        assert response.json()["branch"]["name"] == "New"
        assert response.json()["branch"]["code"] == "A"

    def test_delete_blocked_by_vehicles(self, client, fake_db):
        branch = fake_db.seed("branches", {"name": "Busy", "code": "B", "user_id": TEST_USER_ID})[0]
        fake_db.seed("vehicles", {"plate_number": "ABC 123", "branch_id": branch["id"]})

        response = client.delete(f"/api/v1/branches/{branch['id']}")

        assert response.status_code == 400
        assert response.json()["error"] == "Cannot delete branch. There are vehicles associated with this branch."

    def test_delete(self, client, fake_db):
        branch = fake_db.seed("branches", {"name": "Empty", "code": "E", "user_id": TEST_USER_ID})[0]

        response = client.delete(f"/api/v1/branches/{branch['id']}")

        assert response.json() == {"success": True, "message": "Branch deleted successfully"}
        assert fake_db.rows("branches") == []


class TestBranchPagination:

    def test_second_page(self, client, fake_db):
        fake_db.seed(
            "branches",
            *[{"name": f"Branch {i:02d}", "code": f"B{i:02d}", "user_id": TEST_USER_ID} for i in reversed(range(25))],
        )

        body = client.get("/api/v1/branches?page=2&limit=10").json()

        assert [branch["name"] for branch in body["branches"]] == [f"Branch {i:02d}" for i in range(10, 20)]
        assert body["pagination"] == {
            "page": 2,
            "limit": 10,
            "total": 25,
            "totalPages": 3,
            "hasNextPage": True,
            "hasPrevPage": True,
        }

    def test_last_page_is_partial(self, client, fake_db):
        fake_db.seed(
            "branches",
            *[{"name": f"Branch {i:02d}", "code": f"B{i:02d}", "user_id": TEST_USER_ID} for i in range(25)],
        )

        body = client.get("/api/v1/branches?page=3&limit=10").json()

        assert [branch["name"] for branch in body["branches"]] == [f"Branch {i:02d}" for i in range(20, 25)]
        assert body["pagination"]["hasNextPage"] is False
