# freightmatch/errors.py
from typing import List, Optional


class FreightMatchError(Exception):
    """Base class for errors raised by freightmatch."""


class InvalidInput(FreightMatchError, ValueError):
    """A load or vehicle was missing or could not be validated."""


class InvalidTransition(FreightMatchError):
    def __init__(self, entity: str, current: str, target: str, message: Optional[str] = None):
        self.entity = entity
        self.current = current
        self.target = target
        super().__init__(message or f"Cannot move {entity} from '{current}' to '{target}'.")


class IncompatibleAssignment(FreightMatchError):
    def __init__(self, load_id: str, vehicle_id: str, reasons: List[str]):
        self.load_id = load_id
        self.vehicle_id = vehicle_id
        self.reasons = list(reasons)
        super().__init__(
            f"Vehicle '{vehicle_id}' cannot serve load '{load_id}': {', '.join(self.reasons)}"
        )


class BackendError(FreightMatchError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class SessionExpired(BackendError):
    """The backend rejected the session token (HTTP 401)."""
