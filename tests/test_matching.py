import pytest

from freightmatch.core.matching import (
    check_vehicle,
    compatibility_score,
    find_loads_for_vehicles,
    is_compatible,
    match,
    required_weight_kg,
    score_band,
)
from freightmatch.errors import InvalidInput
from freightmatch.models import ReasonCode


def test_scenario_reports_every_reason(make_load, scenario_vehicles):
    result = match(make_load(size=14, weights=(3000, 2000)), scenario_vehicles)

    assert result.required_weight_kg == 5000
    assert [v.vehicle_id for v in result.compatible] == ["A"]
    reasons = {item.vehicle.vehicle_id: item.reasons for item in result.incompatible}
    assert reasons == {
        "B": [ReasonCode.SIZE],
        "C": [ReasonCode.WEIGHT, ReasonCode.STATUS],
        "D": [ReasonCode.APPROVAL],
    }


def test_partition_covers_input_in_order(make_load, scenario_vehicles):
    result = match(make_load(), scenario_vehicles)

    seen = [v.vehicle_id for v in result.compatible] + [item.vehicle.vehicle_id for item in result.incompatible]
    assert sorted(seen) == ["A", "B", "C", "D"]
    assert [item.vehicle.vehicle_id for item in result.incompatible] == ["B", "C", "D"]


def test_size_boundary_is_inclusive(make_load, make_vehicle):
    assert ReasonCode.SIZE not in check_vehicle(make_load(size=14), make_vehicle("V", size=14))
    assert check_vehicle(make_load(size=14), make_vehicle("V", size=13.9)) == [ReasonCode.SIZE]


def test_weight_boundary_is_inclusive(make_load, make_vehicle):
    load = make_load(weights=(2500, 2500))
    assert is_compatible(load, make_vehicle("V", passing_limit=5))
    assert check_vehicle(load, make_vehicle("V", passing_limit=4.999)) == [ReasonCode.WEIGHT]


def test_empty_vehicle_list(make_load):
    result = match(make_load(), [])
    assert result.compatible == []
    assert result.incompatible == []


def test_load_without_materials_needs_no_capacity(make_load, make_vehicle):
    load = make_load(weights=())
    assert required_weight_kg(load) == 0

    result = match(load, [make_vehicle("V", passing_limit=0)])
    assert [v.vehicle_id for v in result.compatible] == ["V"]


def test_match_is_idempotent_and_pure(make_load, scenario_vehicles):
    load = make_load()
    before = load.model_dump()
    vehicles_before = [v.model_dump() for v in scenario_vehicles]

    assert match(load, scenario_vehicles) == match(load, scenario_vehicles)
    assert load.model_dump() == before
    assert [v.model_dump() for v in scenario_vehicles] == vehicles_before


def test_missing_load_is_invalid_input(scenario_vehicles):
    with pytest.raises(InvalidInput):
        match(None, scenario_vehicles)


def test_malformed_load_is_invalid_input():
    with pytest.raises(InvalidInput):
        match({"loadId": "L1", "materials": []}, [])


def test_malformed_vehicle_is_invalid_input(make_load):
    with pytest.raises(InvalidInput):
        match(make_load(), [{"vehicleId": "V1"}])


def test_accepts_camel_case_mappings():
    load = {"loadId": "L9", "vehicleRequirement": {"size": 10}, "materials": [{"totalWeight": 900}]}
    vehicle = {"vehicleId": "V9", "vehicleSize": 10, "passingLimit": 1, "status": "available", "isApproved": True}

    assert [v.vehicle_id for v in match(load, [vehicle]).compatible] == ["V9"]


def test_precomputed_weight_is_used(make_load, make_vehicle):
    load = make_load(weights=(5000,))
    assert check_vehicle(load, make_vehicle("V", passing_limit=1), weight_kg=1000) == []


def test_find_loads_for_vehicles(make_load, make_vehicle):
    small = make_load("L1", size=10, weights=(1000,))
    heavy = make_load("L2", size=10, weights=(9000,))
    long_ = make_load("L3", size=30, weights=(1000,))
    fleet = [make_vehicle("V1", size=12, passing_limit=5), make_vehicle("V2", size=40, passing_limit=2)]

    found = find_loads_for_vehicles([small, heavy, long_], fleet)
    assert [load.load_id for load in found] == ["L1", "L3"]


def test_find_loads_without_vehicles(make_load):
    assert find_loads_for_vehicles([make_load()], []) == []


def test_decimal_tonnage_covers_equal_weight(make_load, make_vehicle):
    assert check_vehicle(make_load(weights=(2010,)), make_vehicle("V", passing_limit=2.01)) == []
    assert check_vehicle(make_load(weights=(4000, 20)), make_vehicle("V", passing_limit=4.02)) == []
    assert check_vehicle(make_load(weights=(2011,)), make_vehicle("V", passing_limit=2.01)) == [ReasonCode.WEIGHT]


def test_compatibility_score_points(make_load, make_vehicle):
    load = make_load()
    assert compatibility_score(load, make_vehicle("V", vehicleType="10-wheel")) == 100
    assert compatibility_score(load, make_vehicle("V", vehicleType="10-wheel", trailerType="flatbed")) == 80
    assert compatibility_score(load, make_vehicle("V", vehicleType="6-wheel")) == 70
    assert compatibility_score(load, make_vehicle("V", vehicleType="6-wheel", size=12, passing_limit=3)) == 20


def test_score_ignores_status_and_approval(make_load, make_vehicle):
    vehicle = make_vehicle("V", vehicleType="10-wheel", status="assigned", approved=False)
    assert compatibility_score(make_load(), vehicle) == 100
    assert not is_compatible(make_load(), vehicle)


def test_score_bands():
    assert score_band(100) == "high"
    assert score_band(80) == "high"
    assert score_band(79) == "medium"
    assert score_band(60) == "medium"
    assert score_band(45) == "low"


def test_match_reports_scores(make_load, scenario_vehicles):
    result = match(make_load(), scenario_vehicles)
    assert result.scores == {"A": 70, "B": 45, "C": 45, "D": 70}
