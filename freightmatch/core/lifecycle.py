# freightmatch/core/lifecycle.py
import logging
from typing import Dict, FrozenSet, Iterable, Optional, Union

from freightmatch.errors import InvalidInput, InvalidTransition
from freightmatch.models import Load, LoadStatus, Vehicle, VehicleStatus

logger = logging.getLogger(__name__)

LOAD_STATUS_FLOW = [
    LoadStatus.POSTED,
    LoadStatus.ASSIGNED,
    LoadStatus.ENROUTE,
    LoadStatus.DELIVERED,
    LoadStatus.COMPLETED,
]

VEHICLE_TRANSITIONS: Dict[VehicleStatus, FrozenSet[VehicleStatus]] = {
    VehicleStatus.AVAILABLE: frozenset({VehicleStatus.ASSIGNED}),
    VehicleStatus.ASSIGNED: frozenset({VehicleStatus.IN_TRANSIT, VehicleStatus.AVAILABLE}),
    VehicleStatus.IN_TRANSIT: frozenset({VehicleStatus.AVAILABLE}),
}

# A vehicle carrying a load in one of these states is not free.
ACTIVE_LOAD_STATUSES = frozenset({LoadStatus.ASSIGNED, LoadStatus.ENROUTE})


def next_load_status(current: Union[LoadStatus, str]) -> Optional[LoadStatus]:
    """The status that follows `current`, or None once a load is completed."""
    index = LOAD_STATUS_FLOW.index(LoadStatus(current))
    if index + 1 < len(LOAD_STATUS_FLOW):
        return LOAD_STATUS_FLOW[index + 1]
    return None


def advance_load(load: Load, target: Union[LoadStatus, str, None] = None) -> Load:
    """
    Returns a copy of the load moved one step forward.

    If `target` is given it must be exactly the next step; skipping or going
    back raises InvalidTransition; an unknown status raises InvalidInput.
    """
    upcoming = next_load_status(load.status)
    if upcoming is None:
        raise InvalidTransition("load", load.status.value, str(target or ""), f"Load {load.load_id} is already completed.")

    if target is not None:
        try:
            target = LoadStatus(target)
        except ValueError:
            raise InvalidInput(f"Unknown load status '{target}'.")
        if target != upcoming:
            raise InvalidTransition("load", load.status.value, target.value)

    logger.info(f"Load {load.load_id}: {load.status.value} -> {upcoming.value}")
    return load.model_copy(update={"status": upcoming})


def has_active_load(vehicle: Vehicle, loads: Iterable[Load]) -> bool:
    return any(
        load.assigned_vehicle_id == vehicle.vehicle_id and load.status in ACTIVE_LOAD_STATUSES
        for load in loads
    )


def change_vehicle_status(
    vehicle: Vehicle,
    target: Union[VehicleStatus, str],
    loads: Iterable[Load] = (),
) -> Vehicle:
    """
    Returns a copy of the vehicle in the `target` status.

    Allowed moves: available -> assigned -> in_transit -> available, plus
    assigned -> available. A vehicle cannot become available while a load
    assigned to it is still assigned or en route. Re-setting the current
    status is a no-op.
    """
    try:
        target = VehicleStatus(target)
    except ValueError:
        raise InvalidInput(f"Unknown vehicle status '{target}'.")

    if target == vehicle.status:
        return vehicle

    if target not in VEHICLE_TRANSITIONS[vehicle.status]:
        raise InvalidTransition("vehicle", vehicle.status.value, target.value)

    if target == VehicleStatus.AVAILABLE and has_active_load(vehicle, loads):
        raise InvalidTransition(
            "vehicle", vehicle.status.value, target.value,
            f"Vehicle {vehicle.vehicle_id} still has an undelivered load.",
        )

    logger.info(f"Vehicle {vehicle.vehicle_id}: {vehicle.status.value} -> {target.value}")
    return vehicle.model_copy(update={"status": target})
