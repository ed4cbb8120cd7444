# freightmatch/models.py
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class LoadStatus(str, Enum):
    POSTED = "posted"
    ASSIGNED = "assigned"
    ENROUTE = "enroute"
    DELIVERED = "delivered"
    COMPLETED = "completed"


class VehicleStatus(str, Enum):
    AVAILABLE = "available"
    ASSIGNED = "assigned"
    IN_TRANSIT = "in_transit"


class ReasonCode(str, Enum):
    SIZE = "size"
    WEIGHT = "weight"
    STATUS = "status"
    APPROVAL = "approval"


class PaymentTerms(str, Enum):
    ADVANCE = "advance"
    COD = "cod"
    AFTER_POD = "after_pod"
    TO_PAY = "to_pay"
    CREDIT = "credit"


class CommissionStatus(str, Enum):
    PENDING = "pending"
    DEDUCTED = "deducted"
    PAID = "paid"


class SortKey(str, Enum):
    PRICE = "price"
    RATING = "rating"
    DISTANCE = "distance"
    SCORE = "score"


class CamelModel(BaseModel):
    # Backend JSON is camelCase; attributes stay snake_case.
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Coordinates(CamelModel):
    latitude: float
    longitude: float


class Location(CamelModel):
    place: str = ""
    district: str = ""
    state: str = ""
    pincode: str = ""
    coordinates: Optional[Coordinates] = None


class Material(CamelModel):
    name: str = ""
    pack_type: Optional[str] = Field(default=None, alias="packType")
    total_count: int = Field(default=0, alias="totalCount")
    single_weight: float = Field(default=0, alias="singleWeight")
    total_weight: float = Field(default=0, ge=0, alias="totalWeight")  # kg


class VehicleRequirement(CamelModel):
    vehicle_type: str = Field(default="", alias="vehicleType")
    size: float = Field(ge=0)  # feet
    trailer_type: Optional[str] = Field(default=None, alias="trailerType")


class Load(CamelModel):
    load_id: str = Field(alias="loadId")
    load_provider_id: str = Field(default="", alias="loadProviderId")
    load_provider_name: str = Field(default="", alias="loadProviderName")
    loading_location: Location = Field(default_factory=Location, alias="loadingLocation")
    unloading_location: Location = Field(default_factory=Location, alias="unloadingLocation")
    vehicle_requirement: VehicleRequirement = Field(alias="vehicleRequirement")
    materials: List[Material] = Field(default_factory=list)
    loading_date: Optional[str] = Field(default=None, alias="loadingDate")
    loading_time: Optional[str] = Field(default=None, alias="loadingTime")
    payment_terms: Optional[PaymentTerms] = Field(default=None, alias="paymentTerms")
    with_xbow_support: bool = Field(default=False, alias="withXBowSupport")
    commission_applicable: bool = Field(default=False, alias="commissionApplicable")
    rate: Optional[float] = Field(default=None, ge=0)
    status: LoadStatus = LoadStatus.POSTED
    assigned_vehicle_id: Optional[str] = Field(default=None, alias="assignedVehicleId")
    created_at: Optional[str] = Field(default=None, alias="createdAt")


class Vehicle(CamelModel):
    vehicle_id: str = Field(alias="vehicleId")
    owner_id: str = Field(default="", alias="ownerId")
    owner_name: str = Field(default="", alias="ownerName")
    vehicle_type: str = Field(default="", alias="vehicleType")
    vehicle_number: str = Field(default="", alias="vehicleNumber")
    vehicle_size: float = Field(ge=0, alias="vehicleSize")  # feet
    passing_limit: float = Field(ge=0, alias="passingLimit")  # tons
    trailer_type: Optional[str] = Field(default=None, alias="trailerType")
    status: VehicleStatus = VehicleStatus.AVAILABLE
    is_approved: bool = Field(default=False, alias="isApproved")
    bid_price: Optional[float] = Field(default=None, alias="bidPrice")
    rating: float = 0
    distance_from_pickup: Optional[float] = Field(default=None, alias="distanceFromPickup")
    total_trips: int = Field(default=0, alias="totalTrips")


class IncompatibleVehicle(CamelModel):
    vehicle: Vehicle
    reasons: List[ReasonCode]


class MatchResult(CamelModel):
    required_weight_kg: float = Field(default=0, alias="requiredWeightKg")
    compatible: List[Vehicle] = Field(default_factory=list)
    incompatible: List[IncompatibleVehicle] = Field(default_factory=list)
    scores: Dict[str, int] = Field(default_factory=dict)  # vehicleId -> compatibility score


class MatchInput(CamelModel):
    load: Optional[Dict[str, Any]] = None  # validated by the matcher
    vehicles: List[Vehicle] = Field(default_factory=list)


class MatchRequest(CamelModel):
    load_id: str = Field(alias="loadId")
    vehicle_id: str = Field(alias="vehicleId")
    agreed_price: Optional[float] = Field(default=None, ge=0, alias="agreedPrice")


class StatusUpdate(BaseModel):
    status: str


class Commission(CamelModel):
    commission_id: str = Field(alias="commissionId")
    load_id: str = Field(alias="loadId")
    vehicle_id: str = Field(alias="vehicleId")
    load_provider_id: str = Field(default="", alias="loadProviderId")
    vehicle_owner_id: str = Field(default="", alias="vehicleOwnerId")
    total_amount: float = Field(ge=0, alias="totalAmount")
    commission_rate: float = Field(alias="commissionRate")
    commission_amount: float = Field(alias="commissionAmount")
    status: CommissionStatus = CommissionStatus.PENDING
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    deducted_at: Optional[str] = Field(default=None, alias="deductedAt")
    paid_at: Optional[str] = Field(default=None, alias="paidAt")


class CommissionSummary(CamelModel):
    total_commission: float = Field(default=0, alias="totalCommission")
    pending_commission: float = Field(default=0, alias="pendingCommission")
    deducted_commission: float = Field(default=0, alias="deductedCommission")
    paid_commission: float = Field(default=0, alias="paidCommission")
