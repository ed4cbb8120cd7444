# freightmatch/core/ranking.py
import logging
from typing import Iterable, List, Mapping, Optional, Union

from freightmatch.errors import InvalidInput
from freightmatch.models import SortKey, Vehicle

logger = logging.getLogger(__name__)


def _price(vehicle: Vehicle) -> float:
    # Vehicles without a bid go last when sorting by price.
    return vehicle.bid_price if vehicle.bid_price is not None else float("inf")


def rank_vehicles(
    vehicles: Iterable[Vehicle],
    sort_by: Union[SortKey, str],
    scores: Optional[Mapping[str, float]] = None,
) -> List[Vehicle]:
    """
    Orders vehicles for display on top of the matcher's output.

    price: lowest bid first. rating: highest rating first.
    distance: nearest to pickup first, unknown distance counted as 0.
    score: highest compatibility score first, taken from `scores`
    (vehicleId -> score, as in MatchResult.scores).
    Ties keep their input order.
    """
    sort_by = SortKey(sort_by)
    vehicles = list(vehicles)

    if sort_by == SortKey.PRICE:
        ranked = sorted(vehicles, key=_price)
    elif sort_by == SortKey.RATING:
        ranked = sorted(vehicles, key=lambda v: v.rating, reverse=True)
    elif sort_by == SortKey.SCORE:
        if scores is None:
            raise InvalidInput("Sorting by score needs the match scores.")
        ranked = sorted(vehicles, key=lambda v: scores.get(v.vehicle_id, 0), reverse=True)
    else:
        ranked = sorted(vehicles, key=lambda v: v.distance_from_pickup or 0)

    logger.debug(f"Ranked {len(ranked)} vehicles by {sort_by.value}")
    return ranked
