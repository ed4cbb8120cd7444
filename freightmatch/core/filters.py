# freightmatch/core/filters.py
import logging
from typing import Iterable, List, Optional

from pydantic import BaseModel

from freightmatch.models import Load, PaymentTerms, Vehicle, VehicleStatus

logger = logging.getLogger(__name__)


class LoadFilters(BaseModel):
    search: Optional[str] = None
    state: Optional[str] = None
    district: Optional[str] = None
    vehicle_type: Optional[str] = None
    vehicle_size: Optional[float] = None
    trailer_type: Optional[str] = None
    payment_terms: Optional[PaymentTerms] = None
    with_commission: bool = False


def _contains(haystack: Optional[str], needle: str) -> bool:
    return needle.lower() in (haystack or "").lower()


def _matches_search(load: Load, term: str) -> bool:
    return (
        _contains(load.loading_location.place, term)
        or _contains(load.unloading_location.place, term)
        or _contains(load.load_provider_name, term)
        or any(_contains(material.name, term) for material in load.materials)
    )


def filter_loads(loads: Iterable[Load], filters: LoadFilters) -> List[Load]:
    """
    Applies the find-loads filters. Every filter that is set must hold.

    Text filters (search, state, district) are case-insensitive substring
    matches; vehicle type, size, trailer type and payment terms are exact.
    """
    filtered = list(loads)

    if filters.search:
        filtered = [load for load in filtered if _matches_search(load, filters.search)]

    if filters.state:
        filtered = [load for load in filtered if _contains(load.loading_location.state, filters.state)]

    if filters.district:
        filtered = [load for load in filtered if _contains(load.loading_location.district, filters.district)]

    if filters.vehicle_type:
        filtered = [load for load in filtered if load.vehicle_requirement.vehicle_type == filters.vehicle_type]

    if filters.vehicle_size is not None:
        filtered = [load for load in filtered if load.vehicle_requirement.size == filters.vehicle_size]

    if filters.trailer_type:
        filtered = [load for load in filtered if load.vehicle_requirement.trailer_type == filters.trailer_type]

    if filters.payment_terms:
        filtered = [load for load in filtered if load.payment_terms == filters.payment_terms]

    if filters.with_commission:
        filtered = [load for load in filtered if load.commission_applicable]

    logger.debug(f"Load filters kept {len(filtered)} loads")
    return filtered


def search_loads(loads: Iterable[Load], term: Optional[str]) -> List[Load]:
    """Admin search box: provider name or loading place."""
    if not term:
        return list(loads)
    return [
        load for load in loads
        if _contains(load.load_provider_name, term) or _contains(load.loading_location.place, term)
    ]


def filter_vehicles(
    vehicles: Iterable[Vehicle],
    status: Optional[VehicleStatus] = None,
    search: Optional[str] = None,
    approved: Optional[bool] = None,
) -> List[Vehicle]:
    filtered = list(vehicles)
    if status is not None:
        filtered = [vehicle for vehicle in filtered if vehicle.status == status]
    if approved is not None:
        filtered = [vehicle for vehicle in filtered if vehicle.is_approved == approved]
    if search:
        filtered = [
            vehicle for vehicle in filtered
            if _contains(vehicle.owner_name, search) or _contains(vehicle.vehicle_number, search)
        ]
    return filtered
