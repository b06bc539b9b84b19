"""View models for publications (property listings).

The server speaks camelCase DTOs (`propertyTitle`, `propertyPrice`, ...);
these models are the flat, UI-ready shape produced by mapper_service.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field


class PublicationStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    REPORTED = "REPORTED"


# Statuses an administrator may set directly
MODERATION_STATUSES = (PublicationStatus.ACTIVE.value, PublicationStatus.INACTIVE.value)


class Coordinates(BaseModel):
    lat: Optional[float] = None
    lng: Optional[float] = None


class AvailableTime(BaseModel):
    id: Optional[int] = None
    day_of_week: int = Field(..., ge=1, le=7)
    start_time: str
    end_time: str


class PublicationView(BaseModel):
    id: Union[int, str]
    title: str = ""
    property_title: str = ""
    type_name: str = ""
    description: Optional[str] = None

    price: str = ""                       # display string, e.g. "$230,000"
    property_price: Optional[float] = None  # raw server amount (dollars)

    location: str = ""
    address: Optional[str] = None
    neighborhood: Optional[str] = None
    municipality: Optional[str] = None
    department: Optional[str] = None

    bedrooms: Optional[int] = None
    floors: Optional[int] = None
    size: Optional[float] = None
    parking: Optional[int] = None
    furnished: Optional[bool] = None

    image_url: str = ""
    images: List[str] = []
    coordinates: Coordinates = Coordinates()
    available_times: List[AvailableTime] = []

    publisher_id: Optional[Union[int, str]] = None
    publisher_name: Optional[str] = None
    user_email: Optional[str] = None
    user_phone_number: Optional[str] = None

    status: Optional[str] = PublicationStatus.ACTIVE.value
    is_reported: bool = False
    report_count: int = 0

    is_new: bool = False
    favorited: bool = False

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
