"""ElderCare core domain models.

This module defines the canonical :class:`Room` model (one care-facility
unit offering) and every nested record and enumeration it is built from.

Two shapes exist:

* :class:`RoomDraft`: what an administrator or the seed loader supplies.
  It has no identity and no timestamps.
* :class:`Room`: a stored room.  The store assigns ``id``, ``created_at``
  and ``updated_at`` when the draft is inserted.

Derived values (overall rating, total cost) are **not** fields.  They are
computed on every read by :mod:`eldercare.core.ratings`.

JSON uses camelCase names (``facilityName``, ``pricing.securityDeposit``)
while Python code uses snake_case attributes.

Typical usage::

    from eldercare.core.models import RoomDraft

    draft = RoomDraft.model_validate(
        {"name": "Artha Senior Care", "facilityName": "Artha", ...}
    )
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

__all__ = [
    "CamelModel",
    "RoomType",
    "Occupancy",
    "LengthOfStay",
    "CareLevel",
    "Currency",
    "Location",
    "Pricing",
    "LifestyleRating",
    "MedicalRating",
    "ServicesRating",
    "CommunityRating",
    "Facilities",
    "ContactInfo",
    "RoomDraft",
    "Room",
    "RATING_MIN",
    "RATING_MAX",
]

logger = logging.getLogger(__name__)

#: Inclusive bounds for every sub-category rating.
RATING_MIN: int = 1
RATING_MAX: int = 10


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------


class CamelModel(BaseModel):
    """Immutable model that reads and writes camelCase JSON.

    Both ``facility_name=`` and ``facilityName=`` are accepted on input;
    :meth:`model_dump` with ``by_alias=True`` produces camelCase.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class RoomType(StrEnum):
    """Kind of care offered by the unit."""

    ASSISTED_LIVING = "assisted_living"
    INDEPENDENT_LIVING = "independent_living"
    MEMORY_CARE = "memory_care"
    DAYCARE = "daycare"


class Occupancy(StrEnum):
    SINGLE = "single"
    DOUBLE = "double"
    SHARED = "shared"


class LengthOfStay(StrEnum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class CareLevel(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Currency(StrEnum):
    INR = "INR"
    USD = "USD"
    EUR = "EUR"


# ---------------------------------------------------------------------------
# Nested records
# ---------------------------------------------------------------------------


class Location(CamelModel):
    """Where the facility is.  Free text, no geocoding."""

    city: str = Field(..., min_length=1, description="City name.")
    area: str = Field(..., min_length=1, description="Neighbourhood / sector.")
    address: str = Field(..., min_length=1, description="Street address.")


class Pricing(CamelModel):
    """Monthly rent plus one-off charges, all in :attr:`currency`.

    Attributes:
        rent: Monthly rent.
        security_deposit: Refundable deposit.
        admission_charge: One-time admission fee; ``None`` if not charged.
        petty_cash_reserve: Up-front petty-cash float; ``None`` if not required.
        currency: Currency code of every amount above.
    """

    rent: float = Field(..., ge=0)
    security_deposit: float = Field(..., ge=0)
    admission_charge: float | None = Field(None, ge=0)
    petty_cash_reserve: float | None = Field(None, ge=0)
    currency: Currency = Currency.INR


class LifestyleRating(CamelModel):
    rating: float = Field(..., ge=RATING_MIN, le=RATING_MAX)
    amenities: list[str] = Field(default_factory=list)


class MedicalRating(CamelModel):
    rating: float = Field(..., ge=RATING_MIN, le=RATING_MAX)
    services: list[str] = Field(default_factory=list)


class ServicesRating(CamelModel):
    rating: float = Field(..., ge=RATING_MIN, le=RATING_MAX)
    offerings: list[str] = Field(default_factory=list)


class CommunityRating(CamelModel):
    rating: float = Field(..., ge=RATING_MIN, le=RATING_MAX)
    activities: list[str] = Field(default_factory=list)


class Facilities(CamelModel):
    shared_spaces: list[str] = Field(default_factory=list)
    safety_features: list[str] = Field(default_factory=list)
    accessibility: list[str] = Field(default_factory=list)


class ContactInfo(CamelModel):
    """Optional contact channels.  Blank strings are stored as ``None``."""

    phone: str | None = None
    email: str | None = None
    website: str | None = None

    @field_validator("phone", "email", "website", mode="before")
    @classmethod
    def _blank_to_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("email")
    @classmethod
    def _lowercase_email(cls, v: str | None) -> str | None:
        return v.lower() if v is not None else None


# ---------------------------------------------------------------------------
# Room
# ---------------------------------------------------------------------------


class RoomDraft(CamelModel):
    """A room as supplied by its author, before the store gives it an identity.

    Attributes:
        name: Display name of the offering.
        facility_name: Operator / facility the unit belongs to.
        location: City, area and address.
        pricing: Rent and one-off charges.
        room_type: Kind of care.
        occupancy: Single, double or shared occupancy.
        length_of_stay: Intended stay duration band.
        care_level: Intensity of care provided.
        description: Free-text description.
        medical_services: Free-text list of medical services.
        lifestyle: Lifestyle rating and amenities.
        medical: Medical rating and services.
        services: Services rating and offerings.
        community: Community rating and activities.
        facilities: Shared spaces, safety features, accessibility.
        images: Image URLs, first one is the cover.
        contact_info: Phone / email / website.
        is_active: Soft-delete marker.  Inactive rooms are hidden from
            public listings and comparisons.
    """

    name: str = Field(..., min_length=1)
    facility_name: str = Field(..., min_length=1)
    location: Location
    pricing: Pricing
    room_type: RoomType
    occupancy: Occupancy
    length_of_stay: LengthOfStay
    care_level: CareLevel
    description: str = Field(..., min_length=1)
    medical_services: list[str] = Field(default_factory=list)
    lifestyle: LifestyleRating
    medical: MedicalRating
    services: ServicesRating
    community: CommunityRating
    facilities: Facilities = Field(default_factory=Facilities)
    images: list[str] = Field(default_factory=list)
    contact_info: ContactInfo = Field(default_factory=ContactInfo)
    is_active: bool = True


class Room(RoomDraft):
    """A stored room.

    Attributes:
        id: Store-issued identifier (24 lowercase hex characters).  Never
            changes once assigned.
        created_at: UTC time of insertion.
        updated_at: UTC time of the last write.
    """

    id: str = Field(..., min_length=1)
    created_at: datetime
    updated_at: datetime

    def ratings(self) -> tuple[float, float, float, float]:
        """Return the four sub-category ratings in canonical order.

        Order: lifestyle, medical, services, community.
        """
        return (
            self.lifestyle.rating,
            self.medical.rating,
            self.services.rating,
            self.community.rating,
        )
