# =============================================================================
# app/routers/insurance.py - Insurance Endpoints
# =============================================================================
# Two routers:
# - options_router  -> /api/v1/insurance-options
# - policies_router -> /api/v1/insurance-policies
# All endpoints require authentication. DELETE deactivates the row.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from app.auth import get_current_user, AuthUser
from core.models.insurance import InsuranceOptionRequest, InsurancePolicyRequest
from core.services.insurance_service import InsuranceService

options_router = APIRouter()
policies_router = APIRouter()

OptionId = Annotated[UUID, Path(description="Insurance option UUID")]
PolicyId = Annotated[UUID, Path(description="Insurance policy UUID")]


# =============================================================================
# Options
# =============================================================================

@options_router.get("")
async def list_insurance_options(user: AuthUser = Depends(get_current_user)):
    return {"success": True, "insuranceOptions": InsuranceService.list_options()}


@options_router.post("", status_code=201)
async def create_insurance_option(
    request: InsuranceOptionRequest,
    user: AuthUser = Depends(get_current_user),
):
    """
    Create an insurance option.

    rentalIncreaseValue is stored as a value or a percentage depending on
    rentalIncreaseType.
    """
    option = InsuranceService.create_option(request)
    return {
        "success": True,
        "insuranceOption": option,
        "option_id": option["id"],
        "message": "Insurance option created successfully",
    }


@options_router.put("/{option_id}")
async def update_insurance_option(
    option_id: OptionId,
    request: InsuranceOptionRequest,
    user: AuthUser = Depends(get_current_user),
):
    option = InsuranceService.update_option(option_id, request)
    return {"success": True, "insuranceOption": option, "message": "Insurance option updated successfully"}


@options_router.delete("/{option_id}")
async def delete_insurance_option(option_id: OptionId, user: AuthUser = Depends(get_current_user)):
    InsuranceService.delete_option(option_id)
    return {"success": True, "message": "Insurance option deleted successfully"}


# =============================================================================
# Policies
# =============================================================================

@policies_router.get("")
async def list_insurance_policies(user: AuthUser = Depends(get_current_user)):
    return {"success": True, "policies": InsuranceService.list_policies()}


@policies_router.post("", status_code=201)
async def create_insurance_policy(
    request: InsurancePolicyRequest,
    user: AuthUser = Depends(get_current_user),
):
    """Create a policy. An active policy with the same number answers 409."""
    policy = InsuranceService.create_policy(request)
    return {
        "success": True,
        "policy": policy,
        "policy_id": policy["id"],
        "message": "Insurance policy created successfully",
    }


@policies_router.get("/{policy_id}")
async def get_insurance_policy(policy_id: PolicyId, user: AuthUser = Depends(get_current_user)):
    return {"success": True, "policy": InsuranceService.get_policy(policy_id)}


@policies_router.put("/{policy_id}")
async def update_insurance_policy(
    policy_id: PolicyId,
    request: InsurancePolicyRequest,
    user: AuthUser = Depends(get_current_user),
):
    policy = InsuranceService.update_policy(policy_id, request)
    return {"success": True, "policy": policy, "message": "Insurance policy updated successfully"}


@policies_router.delete("/{policy_id}")
async def delete_insurance_policy(policy_id: PolicyId, user: AuthUser = Depends(get_current_user)):
    InsuranceService.delete_policy(policy_id)
    return {"success": True, "message": "Insurance policy deleted successfully"}
