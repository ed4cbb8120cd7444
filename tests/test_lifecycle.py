import pytest

from freightmatch.core.lifecycle import advance_load, change_vehicle_status, next_load_status
from freightmatch.errors import InvalidInput, InvalidTransition
from freightmatch.models import LoadStatus, VehicleStatus


def test_load_status_flow():
    assert next_load_status("posted") == LoadStatus.ASSIGNED
    assert next_load_status(LoadStatus.ASSIGNED) == LoadStatus.ENROUTE
    assert next_load_status(LoadStatus.ENROUTE) == LoadStatus.DELIVERED
    assert next_load_status(LoadStatus.DELIVERED) == LoadStatus.COMPLETED
    assert next_load_status(LoadStatus.COMPLETED) is None


def test_advance_load_moves_one_step(make_load):
    load = make_load(status="assigned")
    moved = advance_load(load)
    assert moved.status == LoadStatus.ENROUTE
    assert load.status == LoadStatus.ASSIGNED


def test_advance_load_rejects_skips_and_rollbacks(make_load):
    load = make_load(status="assigned")
    with pytest.raises(InvalidTransition):
        advance_load(load, LoadStatus.DELIVERED)
    with pytest.raises(InvalidTransition):
        advance_load(load, "posted")
    with pytest.raises(InvalidInput):
        advance_load(load, "lost")


def test_completed_load_is_terminal(make_load):
    with pytest.raises(InvalidTransition):
        advance_load(make_load(status="completed"))


def test_vehicle_cycle(make_vehicle):
    vehicle = make_vehicle("V1")
    vehicle = change_vehicle_status(vehicle, "assigned")
    vehicle = change_vehicle_status(vehicle, VehicleStatus.IN_TRANSIT)
    vehicle = change_vehicle_status(vehicle, VehicleStatus.AVAILABLE)
    assert vehicle.status == VehicleStatus.AVAILABLE


def test_vehicle_cannot_jump_to_in_transit(make_vehicle):
    with pytest.raises(InvalidTransition):
        change_vehicle_status(make_vehicle("V1"), VehicleStatus.IN_TRANSIT)


def test_same_status_is_a_no_op(make_vehicle):
    vehicle = make_vehicle("V1")
    assert change_vehicle_status(vehicle, "available") is vehicle


def test_vehicle_with_active_load_stays_busy(make_load, make_vehicle):
    vehicle = make_vehicle("V1", status="in_transit")
    active = make_load(status="enroute", assignedVehicleId="V1")

    with pytest.raises(InvalidTransition):
        change_vehicle_status(vehicle, VehicleStatus.AVAILABLE, [active])

    delivered = make_load(status="delivered", assignedVehicleId="V1")
    other = make_load("L2", status="enroute", assignedVehicleId="V2")
    freed = change_vehicle_status(vehicle, VehicleStatus.AVAILABLE, [delivered, other])
    assert freed.status == VehicleStatus.AVAILABLE


def test_unknown_vehicle_status(make_vehicle):
    with pytest.raises(InvalidInput):
        change_vehicle_status(make_vehicle("V1"), "parked")
