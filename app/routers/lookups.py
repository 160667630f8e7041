# =============================================================================
# app/routers/lookups.py - Lookup Table Endpoints
# =============================================================================
# Builds one CRUD router per registered lookup table:
#
#   GET    /{group}/{slug}          list (page, limit, search, active, filters)
#   POST   /{group}/{slug}          create
#   GET    /{group}/{slug}/{id}     get
#   PATCH  /{group}/{slug}/{id}     partial update (PUT accepted too)
#   DELETE /{group}/{slug}/{id}     delete unless referenced
#
# Plus the read-only contract status dropdown the contract screens load.
# =============================================================================

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path, Query, Request

from app.auth import get_current_user, AuthUser
from app.dependencies import PaginationDep
from core.models.common import paginated
from core.models.lookup import CONTRACT_CONFIGURATION, LOOKUPS, LookupDefinition, get_lookup
from core.services.lookup_service import LookupService


def _parse_active(value: str | None) -> bool | None:
    if value is None or value == "":
        return None
    return value.lower() == "true"


def build_lookup_router(definition: LookupDefinition) -> APIRouter:
    """
    Create the CRUD router for one lookup table.

    Mount it at /api/v1{definition.path}.
    """
    router = APIRouter()

    @router.get("")
    async def list_items(
        request: Request,
        pagination: PaginationDep,
        user: AuthUser = Depends(get_current_user),
        active: Annotated[str | None, Query(description="Filter on is_active (true/false)")] = None,
    ):
        filters = {
            column: request.query_params.get(column)
            for column in definition.filter_fields
        }
        rows, total = LookupService.list_items(
            definition,
            pagination,
            active=_parse_active(active),
            filters=filters,
        )
        return paginated(definition.response_key, rows, pagination, total)

    @router.post("", status_code=201)
    async def create_item(
        payload: Annotated[dict[str, Any], Body()],
        user: AuthUser = Depends(get_current_user),
    ):
        item = LookupService.create_item(definition, payload, user_id=user.id)
        return {"success": True, definition.item_key: item}

    @router.get("/{item_id}")
    async def get_item(
        item_id: Annotated[UUID, Path(description=f"{definition.entity} UUID")],
        user: AuthUser = Depends(get_current_user),
    ):
        return {"success": True, definition.item_key: LookupService.get_item(definition, item_id)}

    @router.api_route("/{item_id}", methods=["PATCH", "PUT"])
    async def update_item(
        item_id: Annotated[UUID, Path(description=f"{definition.entity} UUID")],
        payload: Annotated[dict[str, Any], Body()],
        user: AuthUser = Depends(get_current_user),
    ):
        item = LookupService.update_item(definition, item_id, payload, user_id=user.id)
        return {"success": True, definition.item_key: item}

    @router.delete("/{item_id}")
    async def delete_item(
        item_id: Annotated[UUID, Path(description=f"{definition.entity} UUID")],
        user: AuthUser = Depends(get_current_user),
    ):
        LookupService.delete_item(definition, item_id)
        return {"success": True, "message": f"{definition.entity} deleted successfully"}

    return router


# One router per registered lookup, keyed by its mount path
lookup_routers: dict[str, APIRouter] = {
    definition.path: build_lookup_router(definition) for definition in LOOKUPS
}


# =============================================================================
# Dropdown Endpoints
# =============================================================================

dropdowns = APIRouter()


@dropdowns.get("/contract-statuses")
async def list_contract_statuses(user: AuthUser = Depends(get_current_user)):
    """All active contract statuses, in display order."""
    definition = get_lookup(CONTRACT_CONFIGURATION, "statuses")
    statuses = LookupService.list_active(definition.table, order_by=definition.order_by)
    return {"success": True, "statuses": statuses}

