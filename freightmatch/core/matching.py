# freightmatch/core/matching.py
import logging
from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from freightmatch.errors import InvalidInput
from freightmatch.models import (
    IncompatibleVehicle,
    Load,
    MatchResult,
    ReasonCode,
    Vehicle,
    VehicleStatus,
)

logger = logging.getLogger(__name__)

KG_PER_TON = 1000
# Tonnages like 2.01 do not convert to an exact float number of kilograms.
WEIGHT_TOLERANCE_KG = 1e-6

# Points per matching attribute on the compatibility score, out of 100.
SCORE_WEIGHTS = {"vehicle_type": 30, "size": 25, "weight": 25, "trailer_type": 20}
HIGH_SCORE = 80
MEDIUM_SCORE = 60

LoadLike = Union[Load, Mapping[str, Any]]
VehicleLike = Union[Vehicle, Mapping[str, Any]]


def _as_load(load: Optional[LoadLike]) -> Load:
    if load is None:
        raise InvalidInput("A resolved load is required for matching.")
    if isinstance(load, Load):
        return load
    if isinstance(load, Mapping):
        try:
            return Load.model_validate(load)
        except ValidationError as e:
            raise InvalidInput(f"Malformed load: {e}") from e
    raise InvalidInput(f"Unsupported load type: {type(load).__name__}")


def _as_vehicle(vehicle: VehicleLike) -> Vehicle:
    if isinstance(vehicle, Vehicle):
        return vehicle
    if isinstance(vehicle, Mapping):
        try:
            return Vehicle.model_validate(vehicle)
        except ValidationError as e:
            raise InvalidInput(f"Malformed vehicle: {e}") from e
    raise InvalidInput(f"Unsupported vehicle type: {type(vehicle).__name__}")


def required_weight_kg(load: LoadLike) -> float:
    """Total shipment weight of a load in kilograms (0 when it has no materials)."""
    load = _as_load(load)
    return sum(material.total_weight for material in load.materials)


def carries_weight(vehicle: Vehicle, weight_kg: float) -> bool:
    """True when the vehicle's passing limit (tons) covers weight_kg, limit inclusive."""
    return weight_kg - vehicle.passing_limit * KG_PER_TON <= WEIGHT_TOLERANCE_KG


def check_vehicle(
    load: LoadLike,
    vehicle: VehicleLike,
    weight_kg: Optional[float] = None,
) -> List[ReasonCode]:
    """
    Evaluates every compatibility predicate for one vehicle against one load.

    Args:
        load: The load whose requirements must be met.
        vehicle: The candidate vehicle.
        weight_kg: Precomputed total weight of the load. Callers checking many
                   vehicles against the same load pass it to avoid re-summing
                   the materials for each vehicle.

    Returns:
        The failed predicates in the order size, weight, status, approval.
        An empty list means the vehicle is compatible.
    """
    load = _as_load(load)
    vehicle = _as_vehicle(vehicle)
    if weight_kg is None:
        weight_kg = required_weight_kg(load)

    reasons = []
    if vehicle.vehicle_size < load.vehicle_requirement.size:
        reasons.append(ReasonCode.SIZE)
    if not carries_weight(vehicle, weight_kg):
        reasons.append(ReasonCode.WEIGHT)
    if vehicle.status != VehicleStatus.AVAILABLE:
        reasons.append(ReasonCode.STATUS)
    if not vehicle.is_approved:
        reasons.append(ReasonCode.APPROVAL)
    return reasons


def is_compatible(load: LoadLike, vehicle: VehicleLike) -> bool:
    return not check_vehicle(load, vehicle)


def compatibility_score(
    load: LoadLike,
    vehicle: VehicleLike,
    weight_kg: Optional[float] = None,
) -> int:
    """
    How closely a vehicle fits a load's requirement, from 0 to 100.

    Vehicle type equal: 30. Size large enough: 25. Passing limit covers the
    weight: 25. Trailer type equal: 20. Status and approval are not scored;
    they only decide compatibility.
    """
    load = _as_load(load)
    vehicle = _as_vehicle(vehicle)
    if weight_kg is None:
        weight_kg = required_weight_kg(load)

    requirement = load.vehicle_requirement
    score = 0
    if vehicle.vehicle_type == requirement.vehicle_type:
        score += SCORE_WEIGHTS["vehicle_type"]
    if vehicle.vehicle_size >= requirement.size:
        score += SCORE_WEIGHTS["size"]
    if carries_weight(vehicle, weight_kg):
        score += SCORE_WEIGHTS["weight"]
    if vehicle.trailer_type == requirement.trailer_type:
        score += SCORE_WEIGHTS["trailer_type"]
    return min(score, 100)


def score_band(score: float) -> str:
    if score >= HIGH_SCORE:
        return "high"
    if score >= MEDIUM_SCORE:
        return "medium"
    return "low"


def match(load: Optional[LoadLike], vehicles: Iterable[VehicleLike]) -> MatchResult:
    """
    Partitions vehicles into those that can serve the load and those that cannot.

    Both output lists keep the relative order of the input. Incompatible
    vehicles carry every reason they failed, not just the first one.

    Raises:
        InvalidInput: if the load is missing or does not validate, or if a
                      vehicle does not validate.
    """
    resolved_load = _as_load(load)
    weight_kg = required_weight_kg(resolved_load)

    result = MatchResult(required_weight_kg=weight_kg)
    for candidate in vehicles:
        vehicle = _as_vehicle(candidate)
        reasons = check_vehicle(resolved_load, vehicle, weight_kg=weight_kg)
        result.scores[vehicle.vehicle_id] = compatibility_score(resolved_load, vehicle, weight_kg=weight_kg)
        if reasons:
            logger.debug(
                f"Vehicle {vehicle.vehicle_id} rejected for load {resolved_load.load_id}: "
                f"{[reason.value for reason in reasons]}"
            )
            result.incompatible.append(IncompatibleVehicle(vehicle=vehicle, reasons=reasons))
        else:
            result.compatible.append(vehicle)

    logger.debug(
        f"Load {resolved_load.load_id} ({weight_kg}kg, {resolved_load.vehicle_requirement.size}ft): "
        f"{len(result.compatible)} compatible, {len(result.incompatible)} incompatible"
    )
    return result


def find_loads_for_vehicles(loads: Iterable[LoadLike], vehicles: Iterable[VehicleLike]) -> List[Load]:
    """Loads that at least one of the given vehicles can serve, in input order."""
    fleet = [_as_vehicle(vehicle) for vehicle in vehicles]
    matched = []
    for candidate in loads:
        load = _as_load(candidate)
        weight_kg = required_weight_kg(load)
        if any(not check_vehicle(load, vehicle, weight_kg=weight_kg) for vehicle in fleet):
            matched.append(load)
    return matched
