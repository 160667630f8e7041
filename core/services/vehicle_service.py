# =============================================================================
# core/services/vehicle_service.py - Vehicle Business Logic
# =============================================================================
# Handles the fleet: vehicle CRUD plus the events that happen to a vehicle
# over its life (branch transfers, accidents, total loss, maintenance).
#
# Every vehicle query is scoped to the authenticated user.
# Branch transfers, accidents and total losses each leave a row in
# vehicle_transfers so the vehicle's movement history is complete.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import (
    DatabaseError,
    DuplicateValueError,
    NotFoundError,
    ReferencedRecordError,
    ValidationFailedError,
)
from core.models.common import PaginationParams
from core.models.vehicle import (
    AccidentCreate,
    BranchTransferRequest,
    TotalLossRequest,
    TransferType,
    VehicleCreate,
    VehicleUpdate,
)
from lib.supabase_client import SupabaseClient
from lib.utils import ilike_any, parse_date, sanitize_search, utc_now, utc_now_iso

logger = logging.getLogger(__name__)

# Embedded lookups returned with every vehicle row
VEHICLE_COLUMNS = (
    "*, "
    "make:vehicle_makes!make_id(name), "
    "model:vehicle_models!model_id(name), "
    "color:vehicle_colors!color_id(name, hex_code), "
    "status:vehicle_statuses!status_id(name, color), "
    "owner:vehicle_owners!owner_id(name), "
    "actual_user:vehicle_actual_users!actual_user_id(name)"
)

VEHICLE_DETAIL_COLUMNS = (
    VEHICLE_COLUMNS
    + ", branch:branches!vehicles_branch_id_fkey(id, name, code)"
    + ", insurance_policy:insurance_policies!insurance_policy_id(id, name, policy_number, expiry_date)"
)

TRANSFER_COLUMNS = (
    "*, "
    "from_branch:branches!vehicle_transfers_from_branch_id_fkey(name, code), "
    "to_branch:branches!vehicle_transfers_to_branch_id_fkey(name, code)"
)

SEARCH_FIELDS = (
    "plate_number",
    "serial_number",
    "internal_reference",
    "make_year",
    "plate_registration_type",
)

# Lookup tables searched by name, and the vehicle column pointing at each
NAME_SEARCH_TABLES = (
    ("vehicle_makes", "make_id"),
    ("vehicle_models", "model_id"),
    ("vehicle_colors", "color_id"),
    ("vehicle_statuses", "status_id"),
)

# Maintenance history sources: (response key, table, newest-first column)
MAINTENANCE_SOURCES = (
    ("oilChanges", "vehicle_oil_changes", "created_at"),
    ("serviceLogs", "vehicle_service_logs", "service_date"),
    ("warranties", "vehicle_warranties", "created_at"),
    ("penalties", "vehicle_penalties", "penalty_date"),
    ("maintenanceLogs", "vehicle_maintenance_logs", "maintenance_date"),
    ("notes", "vehicle_notes", "note_date"),
    ("inspections", "vehicle_inspections", "inspection_date"),
)

PROTECTED_COLUMNS = ("id", "user_id", "created_at")

# Column -> message when another of the user's vehicles already has the value
UNIQUE_IDENTIFIERS = {
    "plate_number": "Vehicle with this plate number already exists",
    "serial_number": "Vehicle with this serial number already exists",
}

TOTAL_LOSS_STATUS = "Total Loss"


def _validate_past_date(value: str, label: str) -> None:
    """Reject unparseable dates and dates after today."""
    parsed = parse_date(value)
    if parsed is None:
        raise ValidationFailedError(f"Invalid {label}")
    if parsed > utc_now().date():
        raise ValidationFailedError(f"{label.capitalize()} cannot be in the future")


class VehicleService:
    """
    Service for fleet operations.

    Provides a clean interface between API routes and database.
    """

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    @staticmethod
    def build_search_filter(term: str) -> str | None:
        """
        Build the `or_` filter for a vehicle search term.

        Matches text columns directly, and also vehicles whose make, model,
        color or status name contains the term.

        Returns:
            PostgREST or-filter string, or None for an empty term
        """
        term = sanitize_search(term)
        if not term:
            return None

        conditions = [ilike_any(SEARCH_FIELDS, term)]
        for table, column in NAME_SEARCH_TABLES:
            ids = SupabaseClient.find_ids_matching(table, term)
            if ids:
                conditions.append(f"{column}.in.({','.join(ids)})")

        return ",".join(conditions)

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    @staticmethod
    def list_vehicles(
        user_id: UUID | str,
        params: PaginationParams,
        plate_number: str | None = None,
        branch_id: str | None = None,
        status_id: str | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List the user's vehicles, newest first.

        Args:
            user_id: Owner of the vehicles
            params: Page/limit/search
            plate_number: Exact plate filter
            branch_id: Only vehicles in this branch
            status_id: Only vehicles with this status

        Returns:
            Tuple of (vehicles, total_count)
        """
        client = SupabaseClient.get_client()

        try:
            query = (
                client.table("vehicles")
                .select(VEHICLE_COLUMNS, count="exact")
                .eq("user_id", str(user_id))
            )

            if plate_number:
                query = query.eq("plate_number", plate_number)
            if branch_id:
                query = query.eq("branch_id", branch_id)
            if status_id:
                query = query.eq("status_id", status_id)

            search_filter = VehicleService.build_search_filter(params.search)
            if search_filter:
                query = query.or_(search_filter)

            query = query.order("created_at", desc=True)
            response = params.apply(query).execute()

            return response.data or [], response.count or 0

        except Exception as e:
            logger.error(f"Failed to list vehicles: {e}")
            raise

    @staticmethod
    def get_vehicle(
        vehicle_id: str | UUID,
        user_id: UUID | str,
        columns: str = VEHICLE_DETAIL_COLUMNS,
        branch_id: str | UUID | None = None,
    ) -> dict[str, Any]:
        """
        Get one of the user's vehicles with its lookups embedded.

        Args:
            branch_id: When given, the vehicle must also be in this branch

        Raises:
            NotFoundError: If the vehicle doesn't exist, isn't the user's,
                or is in another branch
        """
        vehicle = SupabaseClient.fetch_by_id(
            "vehicles",
            vehicle_id,
            user_id=user_id,
            columns=columns,
            filters={"branch_id": branch_id} if branch_id else None,
        )
        if not vehicle:
            raise NotFoundError("Vehicle", str(vehicle_id))
        return vehicle

    @staticmethod
    def _ensure_unique_identifiers(
        user_id: UUID | str,
        values: dict[str, Any],
        exclude_id: str | None = None,
    ) -> None:
        for column, message in UNIQUE_IDENTIFIERS.items():
            value = values.get(column)
            if value and SupabaseClient.exists(
                "vehicles",
                {column: value, "user_id": str(user_id)},
                exclude_id=exclude_id,
            ):
                raise DuplicateValueError(message, field=column)

    @staticmethod
    def create_vehicle(data: VehicleCreate, user_id: UUID | str) -> dict[str, Any]:
        """
        Add a vehicle to the user's fleet.

        Raises:
            DuplicateValueError: If the plate or serial number is already used
        """
        row = data.model_dump(mode="json", exclude_none=True)
        for column in PROTECTED_COLUMNS:
            row.pop(column, None)

        VehicleService._ensure_unique_identifiers(user_id, row)
        row["user_id"] = str(user_id)

        client = SupabaseClient.get_client()

        try:
            response = client.table("vehicles").insert(row).execute()
        except Exception as e:
            if SupabaseClient.is_unique_violation(e):
                column = SupabaseClient.violated_column(e, tuple(UNIQUE_IDENTIFIERS))
                if column:
                    raise DuplicateValueError(UNIQUE_IDENTIFIERS[column], field=column)
                raise DuplicateValueError("Vehicle with these details already exists")
            logger.error(f"Failed to create vehicle: {e}")
            raise

        vehicle = response.data[0]
        logger.info(f"Created vehicle: {vehicle['id']} ({vehicle.get('plate_number')}) for user: {user_id}")
        return vehicle

    @staticmethod
    def update_vehicle(
        vehicle_id: str | UUID,
        data: VehicleUpdate,
        user_id: UUID | str,
    ) -> dict[str, Any]:
        """Partially update one of the user's vehicles."""
        vehicle_id = str(vehicle_id)
        VehicleService.get_vehicle(vehicle_id, user_id, columns="id")

        updates = data.model_dump(mode="json", exclude_unset=True)
        for column in PROTECTED_COLUMNS:
            updates.pop(column, None)

        VehicleService._ensure_unique_identifiers(user_id, updates, exclude_id=vehicle_id)
        updates["updated_at"] = utc_now_iso()

        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("vehicles")
                .update(updates)
                .eq("id", vehicle_id)
                .eq("user_id", str(user_id))
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to update vehicle {vehicle_id}: {e}")
            raise

        logger.info(f"Updated vehicle: {vehicle_id}")
        return response.data[0]

    @staticmethod
    def delete_vehicle(vehicle_id: str | UUID, user_id: UUID | str) -> None:
        """
        Delete a vehicle that no contract references.

        Raises:
            ReferencedRecordError: If contracts were written for the vehicle
        """
        vehicle_id = str(vehicle_id)
        VehicleService.get_vehicle(vehicle_id, user_id, columns="id")

        if SupabaseClient.exists("contracts", {"selected_vehicle_id": vehicle_id}):
            raise ReferencedRecordError(
                "Cannot delete vehicle. There are contracts associated with this vehicle."
            )

        client = SupabaseClient.get_client()

        try:
            (
                client.table("vehicles")
                .delete()
                .eq("id", vehicle_id)
                .eq("user_id", str(user_id))
                .execute()
            )
            logger.info(f"Deleted vehicle: {vehicle_id}")
        except Exception as e:
            logger.error(f"Failed to delete vehicle {vehicle_id}: {e}")
            raise

    # -------------------------------------------------------------------------
    # Transfers
    # -------------------------------------------------------------------------

    @staticmethod
    def _log_transfer(row: dict[str, Any]) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        response = client.table("vehicle_transfers").insert(row).execute()
        if not response.data:
            raise Exception("Insert returned no data")
        return response.data[0]

    @staticmethod
    def transfer_to_branch(
        vehicle_id: str | UUID,
        request: BranchTransferRequest,
        user_id: UUID | str,
    ) -> dict[str, Any]:
        """
        Move a vehicle to another branch and log the transfer.

        The vehicle's branch is updated first. If the transfer log can't be
        written, the branch change is reverted.

        Returns:
            Dict with the transfer row and the vehicle's old/new branch

        Raises:
            NotFoundError: If the vehicle, or an active recipient branch, doesn't exist
            ValidationFailedError: If the vehicle is already in that branch
            DatabaseError: If either write fails
        """
        vehicle_id = str(vehicle_id)
        user_id = str(user_id)
        recipient_id = str(request.recipient_branch_id)

        vehicle = VehicleService.get_vehicle(
            vehicle_id,
            user_id,
            columns="id, plate_number, branch_id, branch:branches!vehicles_branch_id_fkey(id, name, code)",
        )

        client = SupabaseClient.get_client()
        branch_rows = (
            client.table("branches")
            .select("id, name, code")
            .eq("id", recipient_id)
            .eq("user_id", user_id)
            .eq("is_active", True)
            .limit(1)
            .execute()
        ).data
        if not branch_rows:
            raise NotFoundError("Branch", recipient_id, message="Recipient branch not found or inactive")
        recipient = branch_rows[0]

        previous_branch_id = vehicle.get("branch_id")
        if previous_branch_id and str(previous_branch_id) == recipient_id:
            raise ValidationFailedError("Vehicle is already in the selected branch")

        try:
            (
                client.table("vehicles")
                .update({"branch_id": recipient_id, "updated_at": utc_now_iso()})
                .eq("id", vehicle_id)
                .eq("user_id", user_id)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to update branch of vehicle {vehicle_id}: {e}")
            raise DatabaseError("update vehicle branch", str(e))

        try:
            transfer = VehicleService._log_transfer({
                "vehicle_id": vehicle_id,
                "transfer_type": TransferType.BRANCH_TRANSFER.value,
                "transfer_date": request.transfer_date,
                "from_branch_id": previous_branch_id,
                "to_branch_id": recipient_id,
                "details": request.details,
                "user_id": user_id,
                "additional_data": {
                    "from_branch": vehicle.get("branch"),
                    "to_branch": recipient,
                    "vehicle_plate": vehicle.get("plate_number"),
                },
            })
        except Exception as e:
            logger.error(f"Failed to log transfer of vehicle {vehicle_id}, reverting branch: {e}")
            try:
                (
                    client.table("vehicles")
                    .update({"branch_id": previous_branch_id})
                    .eq("id", vehicle_id)
                    .eq("user_id", user_id)
                    .execute()
                )
            except Exception as revert_error:
                logger.error(f"Failed to revert branch of vehicle {vehicle_id}: {revert_error}")
            raise DatabaseError("create transfer log", str(e))

        logger.info(f"Transferred vehicle {vehicle_id} from {previous_branch_id} to {recipient_id}")
        return {
            "transfer": transfer,
            "vehicle": {
                "id": vehicle_id,
                "plate_number": vehicle.get("plate_number"),
                "previous_branch": vehicle.get("branch"),
                "new_branch": recipient,
            },
        }

    @staticmethod
    def list_transfers(
        vehicle_id: str | UUID,
        user_id: UUID | str,
        transfer_type: TransferType | None = None,
    ) -> list[dict[str, Any]]:
        """The vehicle's transfer log, latest transfer first."""
        VehicleService.get_vehicle(vehicle_id, user_id, columns="id")
        client = SupabaseClient.get_client()

        try:
            query = (
                client.table("vehicle_transfers")
                .select(TRANSFER_COLUMNS)
                .eq("vehicle_id", str(vehicle_id))
                .eq("user_id", str(user_id))
            )
            if transfer_type:
                query = query.eq("transfer_type", transfer_type.value)

            response = query.order("transfer_date", desc=True).execute()
            return response.data or []

        except Exception as e:
            logger.error(f"Failed to list transfers for vehicle {vehicle_id}: {e}")
            raise

    @staticmethod
    def delete_transfer(vehicle_id: str | UUID, transfer_id: str | UUID, user_id: UUID | str) -> None:
        """
        Delete one transfer log row.

        Raises:
            NotFoundError: If the row doesn't belong to this vehicle and user
        """
        client = SupabaseClient.get_client()

        response = (
            client.table("vehicle_transfers")
            .delete()
            .eq("id", str(transfer_id))
            .eq("vehicle_id", str(vehicle_id))
            .eq("user_id", str(user_id))
            .execute()
        )
        if not response.data:
            raise NotFoundError("Transfer", str(transfer_id))

        logger.info(f"Deleted transfer {transfer_id} of vehicle {vehicle_id}")

    # -------------------------------------------------------------------------
    # Accidents
    # -------------------------------------------------------------------------

    @staticmethod
    def record_accident(
        vehicle_id: str | UUID,
        request: AccidentCreate,
        user_id: UUID | str,
    ) -> dict[str, Any]:
        """
        Record an accident for a vehicle.

        Writes the accident row, an "accident" transfer log (vehicle moved
        from its branch to the workshop), and, when log_maintenance_update
        is set, a maintenance log entry. The maintenance entry is best-effort.

        Raises:
            ValidationFailedError: If the accident date is invalid or in the future
            NotFoundError: If the vehicle doesn't exist
        """
        _validate_past_date(request.accident_date, "accident date")

        vehicle_id = str(vehicle_id)
        user_id = str(user_id)
        vehicle = VehicleService.get_vehicle(
            vehicle_id,
            user_id,
            columns="id, plate_number, branch_id, branch:branches!vehicles_branch_id_fkey(id, name, code)",
        )
        branch_name = (vehicle.get("branch") or {}).get("name") or "Current Branch"

        accident = {
            "vehicle_id": vehicle_id,
            "user_id": user_id,
            "accident_date": request.accident_date,
            "details": request.details,
            "log_maintenance_update": request.log_maintenance_update,
        }
        if request.log_maintenance_update:
            accident.update({
                "total_amount": request.total_amount,
                "statement_type": request.statement_type,
                "total_discount": request.total_discount,
                "vat": request.vat,
                "net_invoice": request.net_invoice,
                "total_paid": request.total_paid,
            })

        client = SupabaseClient.get_client()

        try:
            accident_row = client.table("vehicle_accidents").insert(accident).execute().data[0]
        except Exception as e:
            logger.error(f"Failed to save accident for vehicle {vehicle_id}: {e}")
            raise DatabaseError("save accident record", str(e))

        try:
            VehicleService._log_transfer({
                "vehicle_id": vehicle_id,
                "transfer_type": TransferType.ACCIDENT.value,
                "transfer_date": request.accident_date,
                "from_branch_id": vehicle.get("branch_id"),
                "to_branch_id": None,
                "from_location": branch_name,
                "to_location": "Workshop",
                "details": f"Vehicle involved in accident: {request.details}",
                "user_id": user_id,
                "additional_data": {
                    "type": "Accident",
                    "from": branch_name,
                    "to": "Workshop",
                    "vehicle_plate": vehicle.get("plate_number"),
                    "accident_details": request.details,
                },
            })
        except Exception as e:
            logger.error(f"Failed to log accident transfer for vehicle {vehicle_id}: {e}")
            raise DatabaseError("create transfer log", str(e))

        if request.log_maintenance_update:
            try:
                client.table("vehicle_maintenance_logs").insert({
                    "vehicle_id": vehicle_id,
                    "maintenance_date": request.accident_date,
                    "maintenance_type": "ACCIDENT",
                    "amount": request.total_amount,
                    "notes": f"Vehicle involved in accident: {request.details}",
                }).execute()
            except Exception as e:
                logger.warning(f"Accident saved but maintenance log failed for vehicle {vehicle_id}: {e}")

        logger.info(f"Recorded accident {accident_row.get('id')} for vehicle {vehicle_id}")
        return accident_row

    @staticmethod
    def list_accidents(vehicle_id: str | UUID, user_id: UUID | str) -> list[dict[str, Any]]:
        """The vehicle's accidents, most recent first."""
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("vehicle_accidents")
                .select("*")
                .eq("vehicle_id", str(vehicle_id))
                .eq("user_id", str(user_id))
                .order("accident_date", desc=True)
                .execute()
            )
            return response.data or []

        except Exception as e:
            logger.error(f"Failed to list accidents for vehicle {vehicle_id}: {e}")
            raise

    @staticmethod
    def delete_accident(vehicle_id: str | UUID, accident_id: str | UUID, user_id: UUID | str) -> None:
        client = SupabaseClient.get_client()

        response = (
            client.table("vehicle_accidents")
            .delete()
            .eq("id", str(accident_id))
            .eq("vehicle_id", str(vehicle_id))
            .eq("user_id", str(user_id))
            .execute()
        )
        if not response.data:
            raise NotFoundError("Accident", str(accident_id))

        logger.info(f"Deleted accident {accident_id} of vehicle {vehicle_id}")

    # -------------------------------------------------------------------------
    # Total Loss
    # -------------------------------------------------------------------------

    @staticmethod
    def mark_total_loss(
        vehicle_id: str | UUID,
        request: TotalLossRequest,
        user_id: UUID | str,
    ) -> dict[str, Any]:
        """
        Write a vehicle off.

        Moves the vehicle to the "Total Loss" status when that status is
        configured, and optionally logs a total_loss transfer.

        Returns:
            Summary of the write-off (vehicle, insurer, amount, date)
        """
        _validate_past_date(request.depreciation_date, "depreciation date")

        vehicle_id = str(vehicle_id)
        user_id = str(user_id)
        vehicle = VehicleService.get_vehicle(
            vehicle_id,
            user_id,
            columns="id, plate_number, branch_id, branch:branches!vehicles_branch_id_fkey(id, name, code)",
        )

        client = SupabaseClient.get_client()

        status_id = SupabaseClient.find_id_by_name("vehicle_statuses", TOTAL_LOSS_STATUS)
        if status_id:
            (
                client.table("vehicles")
                .update({"status_id": status_id, "updated_at": utc_now_iso()})
                .eq("id", vehicle_id)
                .eq("user_id", user_id)
                .execute()
            )
        else:
            logger.warning(f"No '{TOTAL_LOSS_STATUS}' vehicle status configured; vehicle {vehicle_id} status unchanged")

        transfer = None
        if request.create_transfer_log:
            branch_name = (vehicle.get("branch") or {}).get("name") or request.from_location
            try:
                transfer = VehicleService._log_transfer({
                    "vehicle_id": vehicle_id,
                    "transfer_type": TransferType.TOTAL_LOSS.value,
                    "transfer_date": request.depreciation_date,
                    "from_branch_id": vehicle.get("branch_id"),
                    "to_branch_id": None,
                    "from_location": request.from_location,
                    "to_location": request.to_location,
                    "details": f"Vehicle marked as total loss: {request.details}",
                    "user_id": user_id,
                    "additional_data": {
                        "type": request.transfer_type,
                        "from": branch_name,
                        "to": request.to_location,
                        "vehicle_plate": vehicle.get("plate_number"),
                        "insurance_company": request.insurance_company,
                        "insurance_amount": request.insurance_amount,
                        "depreciation_date": request.depreciation_date,
                    },
                })
            except Exception as e:
                logger.error(f"Failed to log total loss for vehicle {vehicle_id}: {e}")
                raise DatabaseError("create transfer log", str(e))

        logger.info(f"Marked vehicle {vehicle_id} as total loss")
        return {
            "vehicle_id": vehicle_id,
            "insurance_company": request.insurance_company,
            "insurance_amount": request.insurance_amount,
            "depreciation_date": request.depreciation_date,
            "details": request.details,
            "status_updated": status_id is not None,
            "transfer": transfer,
        }

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    @staticmethod
    def get_maintenance_history(vehicle_id: str | UUID, user_id: UUID | str) -> dict[str, list[dict[str, Any]]]:
        """
        Everything logged against a vehicle's upkeep.

        Returns:
            Dict with oilChanges, serviceLogs, warranties, penalties,
            maintenanceLogs, notes and inspections, each newest first
        """
        VehicleService.get_vehicle(vehicle_id, user_id, columns="id")
        client = SupabaseClient.get_client()

        history = {}
        for key, table, order_column in MAINTENANCE_SOURCES:
            try:
                response = (
                    client.table(table)
                    .select("*")
                    .eq("vehicle_id", str(vehicle_id))
                    .order(order_column, desc=True)
                    .execute()
                )
            except Exception as e:
                logger.error(f"Failed to fetch {table} for vehicle {vehicle_id}: {e}")
                raise DatabaseError("fetch maintenance data", str(e))
            history[key] = response.data or []

        return history
