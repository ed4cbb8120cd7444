# freightmatch/routers/loads.py
import logging
from fastapi import APIRouter, HTTPException, status
from typing import Any, Dict, Optional

from freightmatch.core.filters import LoadFilters, filter_loads, search_loads
from freightmatch.core.lifecycle import advance_load, change_vehicle_status
from freightmatch.core.matching import find_loads_for_vehicles, match
from freightmatch.data import data_loader
from freightmatch.errors import InvalidInput, InvalidTransition
from freightmatch.models import LoadStatus, PaymentTerms, StatusUpdate, VehicleStatus

router = APIRouter()
logger = logging.getLogger(__name__)

# Moving a vehicle along with the load it carries.
VEHICLE_STATUS_FOR_LOAD = {
    LoadStatus.ENROUTE: VehicleStatus.IN_TRANSIT,
    LoadStatus.DELIVERED: VehicleStatus.AVAILABLE,
}


@router.get("", summary="List loads with find-loads filters")
async def list_loads(
    search: Optional[str] = None,
    state: Optional[str] = None,
    district: Optional[str] = None,
    vehicle_type: Optional[str] = None,
    vehicle_size: Optional[float] = None,
    trailer_type: Optional[str] = None,
    payment_terms: Optional[PaymentTerms] = None,
    with_commission: bool = False,
    load_status: Optional[LoadStatus] = None,
    owner_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Retrieves loads, narrowed by the given filters.
    With `owner_id`, only loads that one of the owner's vehicles can serve are returned,
    and only posted ones unless `load_status` says otherwise.
    """
    loads = data_loader.get_load_models()
    if load_status is None and owner_id:
        load_status = LoadStatus.POSTED
    if load_status is not None:
        loads = [load for load in loads if load.status == load_status]

    if owner_id:
        fleet = [vehicle for vehicle in data_loader.get_vehicle_models() if vehicle.owner_id == owner_id]
        loads = find_loads_for_vehicles(loads, fleet)

    filters = LoadFilters(
        search=search,
        state=state,
        district=district,
        vehicle_type=vehicle_type,
        vehicle_size=vehicle_size,
        trailer_type=trailer_type,
        payment_terms=payment_terms,
        with_commission=with_commission,
    )
    loads = filter_loads(loads, filters)
    return {"status": True, "message": "Loads retrieved successfully", "count": len(loads), "loads": loads}


@router.get("/admin", summary="Admin load list with compatible vehicle counts")
async def admin_list_loads(search: Optional[str] = None, load_status: Optional[LoadStatus] = None) -> Dict[str, Any]:
    """
    Searches loads by provider name or loading place and reports, per load,
    how many stored vehicles can serve it.
    """
    loads = search_loads(data_loader.get_load_models(), search)
    if load_status is not None:
        loads = [load for load in loads if load.status == load_status]

    vehicles = data_loader.get_vehicle_models()
    entries = []
    for load in loads:
        result = match(load, vehicles)
        entries.append({"load": load, "compatibleCount": len(result.compatible)})

    logger.info(f"Admin load list: {len(entries)} loads for search '{search or ''}'")
    return {"status": True, "message": "Loads retrieved successfully", "count": len(entries), "loads": entries}


@router.patch("/{load_id}/status", summary="Advance a load to its next status")
async def update_load_status(load_id: str, update: Optional[StatusUpdate] = None) -> Dict[str, Any]:
    logger.info(f"Load status update called for ID: {load_id}")
    loads = data_loader.get_load_models()
    load = next((item for item in loads if item.load_id == load_id), None)
    if load is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"status": False, "message": f"Load with ID '{load_id}' not found."}
        )

    if load.status == LoadStatus.POSTED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"status": False, "message": "A posted load is assigned through a match request."}
        )

    try:
        updated = advance_load(load, update.status if update else None)
    except InvalidInput as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"status": False, "message": str(e)})
    except InvalidTransition as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail={"status": False, "message": str(e)})

    data_loader.save_loads(
        data_loader.replace_record(data_loader.get_loads(), "loadId", data_loader.to_record(updated))
    )

    vehicle_status = VEHICLE_STATUS_FOR_LOAD.get(updated.status)
    if vehicle_status and updated.assigned_vehicle_id:
        _move_assigned_vehicle(updated.assigned_vehicle_id, vehicle_status)

    return {"status": True, "message": f"Load moved to {updated.status.value}", "load": updated}


def _move_assigned_vehicle(vehicle_id: str, target: VehicleStatus):
    vehicle = next((item for item in data_loader.get_vehicle_models() if item.vehicle_id == vehicle_id), None)
    if vehicle is None:
        logger.warning(f"Assigned vehicle '{vehicle_id}' not found; vehicle status left unchanged.")
        return
    try:
        moved = change_vehicle_status(vehicle, target, data_loader.get_load_models())
    except InvalidTransition as e:
        logger.warning(f"Vehicle '{vehicle_id}' not moved to {target.value}: {e}")
        return
    data_loader.save_vehicles(
        data_loader.replace_record(data_loader.get_vehicles(), "vehicleId", data_loader.to_record(moved))
    )


@router.delete("/{load_id}", response_model=Dict[str, str], status_code=status.HTTP_200_OK)
async def delete_load(load_id: str):
    logger.info(f"Delete load endpoint called with ID: {load_id}")
    try:
        deleted_successfully = data_loader.delete_load_by_id_from_file(load_id)

        if deleted_successfully:
            logger.info(f"Load with ID '{load_id}' successfully deleted from file.")
            return {"message": f"Load with ID '{load_id}' successfully deleted."}
        else:
            logger.warning(f"Load with ID '{load_id}' not found in file for deletion.")
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Load with ID '{load_id}' not found."
            )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"An unexpected non-HTTPException error occurred during load deletion for ID '{load_id}': {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An internal server error occurred during load deletion."
        )
