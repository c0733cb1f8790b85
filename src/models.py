"""Pydantic models for the tenant data the property chatbot reads and writes.

Field aliases are camelCase to match the host application's JSON; Python
code uses the snake_case names.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

UNAVAILABLE_STATUSES = frozenset({"rented", "occupied"})


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Unit(_CamelModel):
    """A listed property unit owned by one tenant (agency)."""

    id: str
    tenant_id: str = Field(alias="agencyId")
    unit_number: str | None = None
    price: float | None = None
    sale_price: float | None = None
    currency: str = "MXN"
    bedrooms: int | None = None
    bathrooms: float | None = None
    size: float | None = None
    size_unit: str = "m²"
    address: str | None = None
    zone: str | None = None
    listing_type: str | None = None
    property_type: str | None = None
    amenities: list[str] = Field(default_factory=list)
    description: str | None = None
    furnished: bool | None = None
    pet_friendly: bool | None = None
    parking_spaces: int | None = None
    available_from: str | None = None
    google_maps_url: str | None = None
    status: str | None = None

    @property
    def is_available(self) -> bool:
        return (self.status or "").lower() not in UNAVAILABLE_STATUSES


class NewLead(_CamelModel):
    tenant_id: str = Field(alias="agencyId")
    first_name: str
    last_name: str = ""
    email: str | None = None
    phone: str
    source: str = "chatbot"
    status: str = "new"
    notes: str = ""


class Lead(NewLead):
    """A prospective client, unique per tenant by phone or email."""

    id: str


class NewShowing(_CamelModel):
    lead_id: str
    unit_id: str = Field(alias="externalUnitId")
    scheduled_date: datetime
    status: str = "scheduled"
    notes: str = ""


class Showing(NewShowing):
    """A scheduled visit of a lead to a unit."""

    id: str
