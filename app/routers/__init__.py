# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - lookups.py: Configuration tables (makes, models, statuses, ...)
# - branches.py: Branch management
# - vehicles.py: Fleet, transfers, accidents, total loss, maintenance
# - customers.py: Individual customers
# - companies.py: Corporate customers
# - contracts.py: Rental contracts and their workflow
# - insurance.py: Insurance options and policies
# - finance.py: Income and expense ledger
# - search.py: Global search
# - system_settings.py: Shared key/value settings
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import lookups
from . import branches
from . import vehicles
from . import customers
from . import companies
from . import contracts
from . import insurance
from . import finance
from . import search
from . import system_settings

__all__ = [
    "health",
    "lookups",
    "branches",
    "vehicles",
    "customers",
    "companies",
    "contracts",
    "insurance",
    "finance",
    "search",
    "system_settings",
]
