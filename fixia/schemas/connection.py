"""Pydantic v2 schemas for connections and service requests."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConnectionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    connection_id: uuid.UUID
    explorer_id: uuid.UUID
    as_id: uuid.UUID
    request_id: uuid.UUID | None = None
    service_title: str
    status: str
    explorer_confirmed_completion: bool
    as_confirmed_completion: bool
    service_completed_at: datetime | None = None
    final_agreed_price: Decimal | None = None
    currency: str
    both_confirmed: bool = False

    @field_validator("status", mode="before")
    @classmethod
    def serialize_status(cls, v: object) -> str:
        if hasattr(v, "value"):
            return v.value
        return str(v)


class ServiceRequestCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=4096)
    locality: str | None = Field(None, max_length=100)
    budget: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)

    @field_validator("title", "description")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field must not be blank")
        return v


class ServiceRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    request_id: uuid.UUID
    explorer_id: uuid.UUID
    title: str
    description: str
    locality: str | None = None
    budget: Decimal | None = None
    status: str
    created_at: datetime

    @field_validator("status", mode="before")
    @classmethod
    def serialize_status(cls, v: object) -> str:
        if hasattr(v, "value"):
            return v.value
        return str(v)
