# =============================================================================
# tests/test_search.py - Global Search Tests
# =============================================================================

from core.services.search_service import SearchService, contract_result
from tests.conftest import OTHER_USER_ID, TEST_USER_ID


class TestGlobalSearch:

    def test_short_term_returns_nothing(self, client, fake_db):
        fake_db.seed("vehicles", {"plate_number": "A 1", "user_id": TEST_USER_ID})

        body = client.get("/api/v1/global-search?q=a").json()

        assert body["totalResults"] == 0
        assert body["results"] == {"vehicles": [], "customers": [], "contracts": []}
        assert fake_db.calls == []

    def test_groups_results(self, client, fake_db):
        fake_db.seed(
            "vehicles",
            {"plate_number": "RUH 100", "make_year": "Camry", "user_id": TEST_USER_ID, "make": {"name": "Toyota"}},
            {"plate_number": "RUH 200", "user_id": OTHER_USER_ID},
        )
        fake_db.seed("customers", {"name": "Ruhan Saleh", "mobile_number": "0501", "user_id": TEST_USER_ID})

        body = client.get("/api/v1/global-search?q=ruh").json()

        assert body["query"] == "ruh"
        assert body["totalResults"] == 2
        vehicle = body["results"]["vehicles"][0]
        assert vehicle["title"] == "RUH 100"
        assert vehicle["subtitle"] == "Toyota N/A • Camry"
        assert body["results"]["customers"][0]["subtitle"] == "0501 • N/A"

    def test_failing_table_is_skipped(self, fake_db):
        fake_db.failing_tables.add("contracts")
        fake_db.seed("customers", {"name": "Maha", "user_id": TEST_USER_ID})

        result = SearchService.search("maha", TEST_USER_ID)

        assert result["results"]["contracts"] == []
        assert len(result["results"]["customers"]) == 1

    def test_contract_title_fallback(self):
        result = contract_result({"id": "0000-abcdef123456"})

        assert result["title"] == "Contract #123456"
        assert result["subtitle"] == "N/A • N/A"
