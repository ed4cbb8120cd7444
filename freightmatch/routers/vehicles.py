# freightmatch/routers/vehicles.py
import logging
from fastapi import APIRouter, HTTPException, Body, status
from typing import Any, Dict, Optional

from freightmatch.core.filters import filter_vehicles
from freightmatch.core.lifecycle import change_vehicle_status
from freightmatch.data import data_loader
from freightmatch.errors import InvalidInput, InvalidTransition
from freightmatch.models import StatusUpdate, Vehicle, VehicleStatus

router = APIRouter()
logger = logging.getLogger(__name__)


def _get_vehicle(vehicle_id: str) -> Vehicle:
    vehicle = next((item for item in data_loader.get_vehicle_models() if item.vehicle_id == vehicle_id), None)
    if vehicle is None:
        logger.warning(f"Vehicle '{vehicle_id}' not found.")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"status": False, "message": f"Vehicle with ID '{vehicle_id}' not found."}
        )
    return vehicle


def _save_vehicle(vehicle: Vehicle):
    data_loader.save_vehicles(
        data_loader.replace_record(data_loader.get_vehicles(), "vehicleId", data_loader.to_record(vehicle))
    )


@router.get("", summary="List vehicles")
async def list_vehicles(
    vehicle_status: Optional[VehicleStatus] = None,
    search: Optional[str] = None,
    approved: Optional[bool] = None,
) -> Dict[str, Any]:
    vehicles = filter_vehicles(data_loader.get_vehicle_models(), vehicle_status, search, approved)
    return {"status": True, "message": "Vehicles retrieved successfully", "count": len(vehicles), "vehicles": vehicles}


@router.put("/{vehicle_id}/approve", summary="Approve a vehicle for matching")
async def approve_vehicle(vehicle_id: str) -> Dict[str, Any]:
    vehicle = _get_vehicle(vehicle_id).model_copy(update={"is_approved": True})
    _save_vehicle(vehicle)
    logger.info(f"Vehicle {vehicle_id} approved.")
    return {"status": True, "message": "Vehicle approved", "vehicle": vehicle}


@router.put("/{vehicle_id}/reject", summary="Withdraw a vehicle's approval")
async def reject_vehicle(vehicle_id: str, payload: Optional[Dict[str, Any]] = Body(default=None)) -> Dict[str, Any]:
    reason = (payload or {}).get("reason", "")
    vehicle = _get_vehicle(vehicle_id).model_copy(update={"is_approved": False})
    _save_vehicle(vehicle)
    logger.info(f"Vehicle {vehicle_id} rejected. Reason: {reason or 'not given'}")
    return {"status": True, "message": "Vehicle rejected", "vehicle": vehicle}


@router.patch("/{vehicle_id}/status", summary="Change a vehicle's status")
async def update_vehicle_status(vehicle_id: str, update: StatusUpdate) -> Dict[str, Any]:
    vehicle = _get_vehicle(vehicle_id)
    try:
        updated = change_vehicle_status(vehicle, update.status, data_loader.get_load_models())
    except InvalidInput as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"status": False, "message": str(e)})
    except InvalidTransition as e:
        logger.warning(f"Vehicle status change refused: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail={"status": False, "message": str(e)})

    if updated is not vehicle:
        _save_vehicle(updated)
    return {"status": True, "message": f"Vehicle is {updated.status.value}", "vehicle": updated}
