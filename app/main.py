# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the RentalDesk API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.auth import routes as auth_routes
from app.config import settings
from app.exceptions import (
    RentalDeskException,
    http_exception_handler,
    rentaldesk_exception_handler,
    supabase_exception_handler,
    validation_exception_handler,
)
from app.routers import (
    branches,
    companies,
    contracts,
    customers,
    finance,
    health,
    insurance,
    lookups,
    search,
    system_settings,
    vehicles,
)
from lib.supabase_client import SupabaseClientError

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Logs the configuration on startup and the shutdown.
    """
    logger.info(f"Starting RentalDesk API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    yield

    logger.info("Shutting down RentalDesk API")


# Create FastAPI application
app = FastAPI(
    title="RentalDesk API",
    description="""
## Car Rental Back-Office API

Server side of a car rental management system: fleet, branches, customers,
rental contracts, insurance and finance, all backed by Supabase.

### Conventions

- Every endpoint except health checks needs `Authorization: Bearer <Supabase JWT>`.
- Lists take `page`, `limit` and `search`; `limit=-1` returns every row.
- Success bodies carry `success: true`; errors are
  `{"success": false, "error": "...", "code": "..."}`.

### Quick Start

```bash
# List the first page of vehicles
curl http://localhost:8000/api/v1/vehicles?page=1&limit=10 \\
  -H "Authorization: Bearer $TOKEN"

# Close a contract (its vehicle goes back to Available)
curl -X POST http://localhost:8000/api/v1/contracts/{id}/close \\
  -H "Authorization: Bearer $TOKEN" \\
  -H "Content-Type: application/json" \\
  -d '{"close_reason": "Returned"}'
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Inspect the caller's token and profile"},
        {"name": "Branches", "description": "Rental offices and locations"},
        {"name": "Vehicles", "description": "Fleet, transfers, accidents, total loss, maintenance"},
        {"name": "Customers", "description": "Individual customers and their contracts"},
        {"name": "Companies", "description": "Corporate customers"},
        {"name": "Contracts", "description": "Rental contracts and their workflow"},
        {"name": "Insurance", "description": "Insurance options and fleet policies"},
        {"name": "Finance", "description": "Income and expense ledger"},
        {"name": "Configuration", "description": "Lookup tables behind the dropdowns"},
        {"name": "Search", "description": "Header search box"},
        {"name": "System Settings", "description": "Shared key/value settings"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

app.add_exception_handler(RentalDeskException, rentaldesk_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(SupabaseClientError, supabase_exception_handler)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(auth_routes.router, prefix="/api/v1/auth", tags=["Auth"])
app.include_router(health.router, prefix="/api/v1", tags=["Health"])

app.include_router(branches.router, prefix="/api/v1/branches", tags=["Branches"])
app.include_router(vehicles.router, prefix="/api/v1/vehicles", tags=["Vehicles"])
app.include_router(customers.router, prefix="/api/v1/customers", tags=["Customers"])
app.include_router(companies.router, prefix="/api/v1/companies", tags=["Companies"])
app.include_router(contracts.router, prefix="/api/v1/contracts", tags=["Contracts"])

app.include_router(insurance.options_router, prefix="/api/v1/insurance-options", tags=["Insurance"])
app.include_router(insurance.policies_router, prefix="/api/v1/insurance-policies", tags=["Insurance"])
app.include_router(finance.router, prefix="/api/v1/finance", tags=["Finance"])

# Lookup tables: one generated router per configuration table
for path, lookup_router in lookups.lookup_routers.items():
    app.include_router(lookup_router, prefix=f"/api/v1{path}", tags=["Configuration"])
app.include_router(lookups.dropdowns, prefix="/api/v1", tags=["Configuration"])

app.include_router(search.router, prefix="/api/v1", tags=["Search"])
app.include_router(system_settings.router, prefix="/api/v1/system-settings", tags=["System Settings"])


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "RentalDesk API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
