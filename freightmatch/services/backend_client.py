# freightmatch/services/backend_client.py
import logging
from typing import Any, Dict, List, Optional

import requests

from freightmatch.config import settings
from freightmatch.errors import BackendError, SessionExpired
from freightmatch.models import Load, Vehicle

logger = logging.getLogger(__name__)


class BackendSession:
    """
    Authenticated session against the marketplace REST backend.

    Holds the one bearer token used for every call. A 401 response clears it
    and raises SessionExpired, so callers must log in again before retrying.
    """

    def __init__(self, base_url: Optional[str] = None, token: Optional[str] = None,
                 timeout: Optional[float] = None, http: Optional[requests.Session] = None):
        self.base_url = (base_url or settings.BACKEND_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.BACKEND_TIMEOUT
        self.token = token
        self.http = http or requests.Session()
        self.http.headers.update({"Content-Type": "application/json"})

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def invalidate(self):
        logger.info("Backend session invalidated.")
        self.token = None

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self.http.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error(f"Backend request {method} {url} failed: {e}")
            raise BackendError(f"Request to backend failed: {e}") from e

        if response.status_code == 401:
            self.invalidate()
            raise SessionExpired("Backend session expired. Please log in again.", status_code=401)

        if response.status_code >= 400:
            try:
                message = response.json().get("message") or "Something went wrong"
            except ValueError:
                message = "Something went wrong"
            logger.warning(f"Backend {method} {url} returned {response.status_code}: {message}")
            raise BackendError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise BackendError(f"Backend returned a non-JSON response for {url}") from e

    def login(self, credentials: Dict[str, Any]) -> str:
        payload = self._request("POST", "/admin/login", json=credentials)
        token = (payload.get("data") or {}).get("token") or payload.get("token")
        if not token:
            raise BackendError("Login response did not include a token.")
        self.token = token
        return token

    def get_loads(self, params: Optional[Dict[str, Any]] = None) -> List[Load]:
        payload = self._request("GET", "/admin/loads", params=params)
        return [Load.model_validate(item) for item in _data_list(payload)]

    def get_vehicles(self, params: Optional[Dict[str, Any]] = None) -> List[Vehicle]:
        payload = self._request("GET", "/admin/vehicles", params=params)
        return [Vehicle.model_validate(item) for item in _data_list(payload)]

    def match_load_with_vehicle(self, load_id: str, vehicle_id: str) -> Dict[str, Any]:
        return self._request("POST", "/admin/match-loads", json={"loadId": load_id, "vehicleId": vehicle_id})

    def approve_vehicle(self, vehicle_id: str) -> Dict[str, Any]:
        return self._request("PUT", f"/admin/vehicles/{vehicle_id}/approve")

    def reject_vehicle(self, vehicle_id: str, reason: str = "") -> Dict[str, Any]:
        return self._request("PUT", f"/admin/vehicles/{vehicle_id}/reject", json={"reason": reason})

    def get_commission_reports(self, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return _data_list(self._request("GET", "/admin/commission", params=params))


def _data_list(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    # Backend wraps collections as {"success": true, "data": [...]}
    data = payload.get("data", [])
    if isinstance(data, dict):
        for key in ("items", "loads", "vehicles"):
            if isinstance(data.get(key), list):
                return data[key]
        return []
    return data if isinstance(data, list) else []
