"""Pydantic schemas for API request/response validation."""

from datetime import datetime
from typing import List, Dict, Optional
from pydantic import BaseModel, Field, ConfigDict
from enum import Enum


# Enums matching domain models
class LoadStatusEnum(str, Enum):
    PENDING = "pending"
    CONSOLIDATED = "consolidated"
    ASSIGNED = "assigned"
    DISPATCHED = "dispatched"
    COMPLETED = "completed"


# Load schemas
class GroupLoadsRequest(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    max_distance_km: Optional[float] = Field(None, ge=0)
    max_weight_kg: Optional[float] = Field(None, ge=0)
    max_volume_m3: Optional[float] = Field(None, ge=0)
    max_time_window_overlap_minutes: Optional[float] = Field(None, ge=0)

    def option_overrides(self) -> Dict[str, Optional[float]]:
        return self.model_dump(exclude={"latitude", "longitude"}, exclude_none=True)


class LoadResponse(BaseModel):
    load_id: str
    order_ids: List[str]
    total_weight: float
    total_volume: float
    status: LoadStatusEnum
    vehicle_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GroupLoadsResponse(BaseModel):
    message: str
    loads: List[LoadResponse]


class LoadListResponse(BaseModel):
    loads: List[LoadResponse]


class LoadDetailResponse(BaseModel):
    load: LoadResponse


class OrderReferenceRequest(BaseModel):
    order_id: str = Field(min_length=1)


class LoadMutationResponse(BaseModel):
    message: str
    load: LoadResponse


class ConflictsResponse(BaseModel):
    load_id: str
    conflicts: List[str]
    has_conflicts: bool


class CompatibilityResponse(BaseModel):
    load_id: str
    order_id: str
    is_compatible: bool
    message: str


# Error response schema
class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.now)


# Health check schema
class HealthResponse(BaseModel):
    status: str
    timestamp: datetime = Field(default_factory=datetime.now)
    version: str = "1.0.0"
    components: Dict[str, str]
