import os
import shutil

import pytest
from fastapi.testclient import TestClient

from freightmatch.config import DEFAULT_DATA_DIR, settings
from freightmatch.models import Load, Vehicle


@pytest.fixture
def make_load():
    def _make_load(load_id="L1", size=14, weights=(3000, 2000), **fields):
        record = {
            "loadId": load_id,
            "loadProviderName": "Sharma Steel Traders",
            "vehicleRequirement": {"vehicleType": "10-wheel", "size": size},
            "materials": [{"name": f"Item {i}", "totalWeight": w} for i, w in enumerate(weights)],
        }
        record.update(fields)
        return Load.model_validate(record)
    return _make_load


@pytest.fixture
def make_vehicle():
    def _make_vehicle(vehicle_id, size=20, passing_limit=10, status="available", approved=True, **fields):
        record = {
            "vehicleId": vehicle_id,
            "vehicleSize": size,
            "passingLimit": passing_limit,
            "status": status,
            "isApproved": approved,
        }
        record.update(fields)
        return Vehicle.model_validate(record)
    return _make_vehicle


@pytest.fixture
def scenario_vehicles(make_vehicle):
    """Four vehicles against a 14ft, 5000kg load: one fit and three misfits."""
    return [
        make_vehicle("A", size=14, passing_limit=6),
        make_vehicle("B", size=12, passing_limit=10),
        make_vehicle("C", size=20, passing_limit=3, status="assigned"),
        make_vehicle("D", size=20, passing_limit=10, approved=False),
    ]


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    for file_name in ("loads.json", "vehicles.json", "commissions.json"):
        shutil.copy(os.path.join(DEFAULT_DATA_DIR, file_name), tmp_path / file_name)
    monkeypatch.setattr(settings, "DATA_DIR", str(tmp_path))
    return tmp_path


@pytest.fixture
def client(data_dir):
    from freightmatch.main import app
    return TestClient(app)
