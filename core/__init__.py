# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the rental back-office logic:
# - models/: Pydantic schemas for request validation
# - services/: Supabase queries and business rules per entity
#
# Routers call services; services never build HTTP responses, with the
# exception of the CSV export helper.
# =============================================================================
