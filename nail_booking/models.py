"""Pydantic models for booking API payloads.

The API is loose about shapes: ids arrive as ``_id`` or ``id``, an
appointment's service and time slot may be embedded objects or bare ids,
and list endpoints answer either a bare list or an object wrapping it.
These models absorb that so workflow code never has to.
"""
from typing import Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from nail_booking.logging_config import get_logger

logger = get_logger(__name__)

ID_ALIASES = AliasChoices("_id", "id")


class ApiModel(BaseModel):
    """Base model: accepts field names or aliases, ignores unknown keys.

    Numeric ids and names (e.g. an integer ``_id``) are read as strings.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)


class Service(ApiModel):
    id: str = Field(..., validation_alias=ID_ALIASES)
    name: str
    description: Optional[str] = None
    price: float = 0.0
    duration: Optional[int] = Field(
        None, validation_alias=AliasChoices("duration", "duration_minutes")
    )

    @field_validator("price", mode="before")
    @classmethod
    def none_price_is_zero(cls, v):
        return 0.0 if v is None else v


class TimeSlot(ApiModel):
    id: str = Field(..., validation_alias=ID_ALIASES)
    date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_available: bool = Field(
        True, validation_alias=AliasChoices("is_available", "isAvailable")
    )

    @property
    def day(self) -> Optional[str]:
        """Calendar day (YYYY-MM-DD) of the slot, ignoring any time part."""
        if not self.date:
            return self.date
        return self.date.split("T")[0]


class User(ApiModel):
    id: Optional[str] = Field(None, validation_alias=ID_ALIASES)
    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    role: str = "client"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class Appointment(ApiModel):
    id: str = Field(..., validation_alias=ID_ALIASES)
    user: Optional[User] = None
    service: Optional[Union[Service, str]] = None
    time_slot: Optional[Union[TimeSlot, str]] = Field(
        None, validation_alias=AliasChoices("timeSlot", "time_slot")
    )
    status: str = "pending"
    payment_method: Optional[str] = Field(
        None, validation_alias=AliasChoices("paymentMethod", "payment_method")
    )
    notes: str = ""
    created_at: Optional[str] = Field(
        None, validation_alias=AliasChoices("createdAt", "created_at")
    )

    @field_validator("notes", mode="before")
    @classmethod
    def none_notes_is_empty(cls, v):
        return v or ""

    @property
    def service_id(self) -> Optional[str]:
        if isinstance(self.service, Service):
            return self.service.id
        return self.service

    @property
    def time_slot_id(self) -> Optional[str]:
        if isinstance(self.time_slot, TimeSlot):
            return self.time_slot.id
        return self.time_slot

    @property
    def service_details(self) -> Optional[Service]:
        return self.service if isinstance(self.service, Service) else None

    @property
    def slot_details(self) -> Optional[TimeSlot]:
        return self.time_slot if isinstance(self.time_slot, TimeSlot) else None


class DashboardStats(ApiModel):
    total_appointments: int = Field(
        0, validation_alias=AliasChoices("totalAppointments", "total_appointments")
    )
    pending_appointments: int = Field(
        0, validation_alias=AliasChoices("pendingAppointments", "pending_appointments")
    )
    total_clients: int = Field(
        0, validation_alias=AliasChoices("totalClients", "total_clients")
    )
    month_revenue: float = Field(
        0.0, validation_alias=AliasChoices("monthRevenue", "month_revenue")
    )


class AuthSession(ApiModel):
    token: Optional[str] = None
    user: Optional[User] = None


def unwrap_list(payload: Any, *keys: str) -> List[Any]:
    """
    Extract a list from an API answer.

    Args:
        payload: Decoded JSON body
        *keys: Wrapper keys to try, in order

    Returns:
        The list itself, the first list found under ``keys``, or []
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in keys:
            value = payload.get(key)
            if isinstance(value, list):
                return value
    return []


def parse_many(model, items: List[Any]) -> list:
    """Parse every dict in ``items`` as ``model``.

    Entries without an id, or that fail validation, are logged and dropped
    so one malformed record never hides the rest of the list.
    """
    parsed = []
    for item in items:
        if not isinstance(item, dict) or not (item.get("_id") or item.get("id")):
            continue
        try:
            parsed.append(model.model_validate(item))
        except ValidationError as exc:
            logger.warning(
                "invalid_record_skipped",
                model=model.__name__,
                record_id=str(item.get("_id") or item.get("id")),
                errors=exc.error_count(),
            )
    return parsed
