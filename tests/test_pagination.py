# =============================================================================
# tests/test_pagination.py - Pagination Tests
# =============================================================================
# Tests for PaginationParams parsing and the list envelope.
# =============================================================================

from core.models.common import FETCH_ALL, PaginationParams, paginated


class TestFromQuery:
    """Lenient parsing of raw query-string values."""

    def test_defaults(self):
        params = PaginationParams.from_query()
        assert params.page == 1
        assert params.limit == 10
        assert params.search == ""

    def test_invalid_values_fall_back(self):
        params = PaginationParams.from_query("abc", "xyz")
        assert params.page == 1
        assert params.limit == 10

    def test_non_positive_page_becomes_one(self):
        assert PaginationParams.from_query("0").page == 1
        assert PaginationParams.from_query("-3").page == 1

    def test_zero_limit_uses_default(self):
        assert PaginationParams.from_query("1", "0").limit == 10

    def test_limit_is_capped(self):
        assert PaginationParams.from_query("1", "5000").limit == 1000

    def test_minus_one_fetches_all(self):
        params = PaginationParams.from_query("3", "-1")
        assert params.limit == FETCH_ALL
        assert params.fetch_all
        assert params.offset == 0

    def test_search_is_trimmed(self):
        assert PaginationParams.from_query(search="  corolla ").search == "corolla"


class TestInfo:
    """The pagination block of list responses."""

    def test_middle_page(self):
        info = PaginationParams(page=2, limit=10).info(35)
        assert info.totalPages == 4
        assert info.hasNextPage is True
        assert info.hasPrevPage is True

    def test_last_page(self):
        info = PaginationParams(page=4, limit=10).info(35)
        assert info.hasNextPage is False

    def test_empty_result(self):
        info = PaginationParams(page=1, limit=10).info(0)
        assert info.total == 0
        assert info.totalPages == 0
        assert info.hasNextPage is False
        assert info.hasPrevPage is False

    def test_fetch_all_is_single_page(self):
        info = PaginationParams(page=1, limit=FETCH_ALL).info(57)
        assert info.page == 1
        assert info.limit == 57
        assert info.totalPages == 1
        assert info.hasNextPage is False

    def test_offset(self):
        assert PaginationParams(page=3, limit=20).offset == 40


class TestPaginatedEnvelope:

    def test_envelope_shape(self):
        body = paginated("vehicles", [{"id": "a"}], PaginationParams(page=1, limit=10), 1, summaryStats={"total": 1})

        assert body["success"] is True
        assert body["vehicles"] == [{"id": "a"}]
        assert body["pagination"]["total"] == 1
        assert body["summaryStats"] == {"total": 1}
