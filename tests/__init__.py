# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the RentalDesk API. Supabase is
# replaced by the in-memory FakeSupabase from conftest.py, so no test
# needs a network connection.
#
# Run tests with: pytest
# =============================================================================
