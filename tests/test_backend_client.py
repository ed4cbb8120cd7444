from unittest import mock

import pytest
import requests

from freightmatch.errors import BackendError, SessionExpired
from freightmatch.services.backend_client import BackendSession


def _response(status_code=200, payload=None):
    response = mock.Mock()
    response.status_code = status_code
    if payload is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def http():
    return mock.MagicMock()


def test_token_is_sent_as_bearer(http):
    http.request.return_value = _response(payload={"success": True, "data": []})
    session = BackendSession(base_url="http://backend/api/", token="abc", timeout=5, http=http)

    session.get_loads()

    method, url = http.request.call_args.args
    assert (method, url) == ("GET", "http://backend/api/admin/loads")
    assert http.request.call_args.kwargs["headers"]["Authorization"] == "Bearer abc"
    assert http.request.call_args.kwargs["timeout"] == 5


def test_get_loads_and_vehicles_are_validated(http):
    session = BackendSession(base_url="http://backend", token="abc", http=http)

    http.request.return_value = _response(payload={"data": [
        {"loadId": "L1", "vehicleRequirement": {"size": 14}, "materials": [{"totalWeight": 500}]},
    ]})
    assert [load.load_id for load in session.get_loads()] == ["L1"]

    http.request.return_value = _response(payload={"data": {"vehicles": [
        {"vehicleId": "V1", "vehicleSize": 14, "passingLimit": 6, "isApproved": True},
    ]}})
    assert [vehicle.vehicle_id for vehicle in session.get_vehicles()] == ["V1"]


def test_unauthorized_clears_session(http):
    http.request.return_value = _response(401, {"message": "jwt expired"})
    session = BackendSession(base_url="http://backend", token="abc", http=http)

    with pytest.raises(SessionExpired):
        session.match_load_with_vehicle("L1", "V1")
    assert session.token is None
    assert not session.is_authenticated


def test_backend_message_is_surfaced(http):
    http.request.return_value = _response(422, {"message": "Vehicle already assigned"})
    session = BackendSession(base_url="http://backend", token="abc", http=http)

    with pytest.raises(BackendError) as excinfo:
        session.approve_vehicle("V1")
    assert str(excinfo.value) == "Vehicle already assigned"
    assert excinfo.value.status_code == 422
    assert session.token == "abc"


def test_connection_failure_is_backend_error(http):
    http.request.side_effect = requests.exceptions.ConnectionError("refused")
    session = BackendSession(base_url="http://backend", http=http)

    with pytest.raises(BackendError):
        session.get_commission_reports()


def test_login_stores_token(http):
    http.request.return_value = _response(payload={"success": True, "data": {"token": "fresh"}})
    session = BackendSession(base_url="http://backend", http=http)

    assert session.login({"email": "admin@example.com", "password": "secret"}) == "fresh"
    assert session.is_authenticated
    assert "Authorization" not in http.request.call_args.kwargs["headers"]
