# freightmatch/routers/matching.py
from fastapi import APIRouter, HTTPException, status
import logging
from typing import Any, Dict, Optional

from freightmatch.core.commission import open_commission
from freightmatch.core.lifecycle import advance_load, change_vehicle_status
from freightmatch.core.matching import check_vehicle, match
from freightmatch.core.ranking import rank_vehicles
from freightmatch.data import data_loader
from freightmatch.errors import InvalidInput, InvalidTransition
from freightmatch.models import LoadStatus, MatchInput, MatchRequest, MatchResult, SortKey, VehicleStatus

logger = logging.getLogger(__name__)
router = APIRouter()


def _not_found(kind: str, record_id: str) -> HTTPException:
    logger.warning(f"{kind} '{record_id}' not found.")
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"status": False, "message": f"{kind} with ID '{record_id}' not found."}
    )


@router.post("/match", summary="Partition vehicles into compatible and incompatible for a load")
def match_endpoint(payload: MatchInput) -> MatchResult:
    logger.info(f"Match endpoint called with {len(payload.vehicles)} vehicles")
    try:
        return match(payload.load, payload.vehicles)
    except InvalidInput as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"status": False, "message": str(e)})


@router.get("/load/{load_id}/vehicles", summary="Match stored vehicles against a stored load")
def load_vehicles_endpoint(load_id: str, sort_by: Optional[SortKey] = None) -> MatchResult:
    """
    Returns the compatible and incompatible vehicles for a load.
    The compatible list is ranked when `sort_by` is given; `score` ranks by
    the compatibility scores reported alongside the match.
    """
    load = next((item for item in data_loader.get_load_models() if item.load_id == load_id), None)
    if load is None:
        raise _not_found("Load", load_id)

    result = match(load, data_loader.get_vehicle_models())
    if sort_by is not None:
        result.compatible = rank_vehicles(result.compatible, sort_by, scores=result.scores)
    return result


@router.post("/match-loads", summary="Assign a load to a compatible vehicle")
def match_loads_endpoint(request: MatchRequest) -> Dict[str, Any]:
    logger.info(f"Match request: load {request.load_id} -> vehicle {request.vehicle_id}")

    loads = data_loader.get_load_models()
    vehicles = data_loader.get_vehicle_models()

    load = next((item for item in loads if item.load_id == request.load_id), None)
    if load is None:
        raise _not_found("Load", request.load_id)
    vehicle = next((item for item in vehicles if item.vehicle_id == request.vehicle_id), None)
    if vehicle is None:
        raise _not_found("Vehicle", request.vehicle_id)

    if load.status != LoadStatus.POSTED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"status": False, "message": f"Load '{load.load_id}' is already {load.status.value}."}
        )

    reasons = check_vehicle(load, vehicle)
    if reasons:
        logger.warning(f"Rejected match {load.load_id} -> {vehicle.vehicle_id}: {[r.value for r in reasons]}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "status": False,
                "message": f"Vehicle '{vehicle.vehicle_id}' is not compatible with load '{load.load_id}'.",
                "reasons": [reason.value for reason in reasons],
            }
        )

    try:
        assigned_load = advance_load(load, LoadStatus.ASSIGNED)
        assigned_vehicle = change_vehicle_status(vehicle, VehicleStatus.ASSIGNED, loads)
    except InvalidTransition as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail={"status": False, "message": str(e)})
    assigned_load = assigned_load.model_copy(update={"assigned_vehicle_id": vehicle.vehicle_id})

    commissions = data_loader.get_commissions()
    commission = open_commission(
        load,
        vehicle,
        commission_id=data_loader.next_record_id(commissions, "commissionId", "C"),
        agreed_price=request.agreed_price,
    )

    data_loader.save_loads(
        data_loader.replace_record(data_loader.get_loads(), "loadId", data_loader.to_record(assigned_load))
    )
    data_loader.save_vehicles(
        data_loader.replace_record(data_loader.get_vehicles(), "vehicleId", data_loader.to_record(assigned_vehicle))
    )
    if commission is not None:
        commissions.append(data_loader.to_record(commission))
        data_loader.save_commissions(commissions)

    logger.info(f"Load {load.load_id} assigned to vehicle {vehicle.vehicle_id}")
    return {
        "status": True,
        "message": "Load assigned to vehicle successfully",
        "load": assigned_load,
        "vehicle": assigned_vehicle,
        "commission": commission,
    }
