"""Shared Pydantic data models for the traveler capacity relay."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

UNKNOWN = "unknown"

# Beyond this the earnings arithmetic overflows; no luggage gets close.
MAX_WEIGHT_KG = 1_000_000

# Identifiers the web app may send as either strings or numbers.
Scalar = str | int | float

# --- Enums ---


class RelayEventType(str, Enum):
    CAPACITY_RECEIVED = "capacity_received"
    CAPACITY_SENT = "capacity_sent"


# --- Inbound Models ---


class _OptionalFields(BaseModel):
    """Base for inbound models: JSON null means "use the default"."""

    model_config = ConfigDict(
        extra="ignore", allow_inf_nan=False, coerce_numbers_to_str=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class AvailableWeight(_OptionalFields):
    kg: int | float = 0
    grams: int | float = 0
    display: str = "0 kg"
    is_under_1kg: bool = False

    @field_validator("kg")
    @classmethod
    def _bounded_kg(cls, value: int | float) -> int | float:
        if abs(value) > MAX_WEIGHT_KG:
            raise ValueError(f"weight must be within {MAX_WEIGHT_KG} kg")
        return value


class CapacityLevel(_OptionalFields):
    # id and label stay None when absent: rendered as "unknown" but
    # counted as empty by validation.
    id: Scalar | None = None
    label: Scalar | None = None
    description: str = ""
    min_kg: int | float = 0
    max_kg: int | float = 0


class CapacityInfo(_OptionalFields):
    available_weight: AvailableWeight = Field(default_factory=AvailableWeight)
    capacity_level: CapacityLevel = Field(default_factory=CapacityLevel)
    traveler_type: Scalar | None = None
    can_carry_more: bool = False


class RequestMetadata(_OptionalFields):
    user_agent: str | None = None
    timezone: str | None = None
    language: str | None = None
    device_type: str | None = None


class IncomingRequest(_OptionalFields):
    """Traveler capacity declaration as posted by the Telegram web app."""

    model_config = ConfigDict(
        extra="allow", allow_inf_nan=False, coerce_numbers_to_str=True,
    )

    source: str = "telegram_web_app"
    action: str = UNKNOWN
    capacity_info: CapacityInfo | None = None
    telegram_user: dict[str, Any] | None = None
    metadata: RequestMetadata = Field(default_factory=RequestMetadata)
    ip_address: str | None = None


class ObservedRequest(BaseModel):
    """Values the server observed about the inbound HTTP request."""

    model_config = ConfigDict(frozen=True)

    remote_addr: str | None = None
    user_agent: str | None = None
    server_name: str | None = None


# --- Outgoing Models ---


class EstimatedEarnings(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: int = Field(ge=0)
    max: int = Field(ge=0)
    currency: str = "IRR"
    per_kg_rate: int


class DataValidation(BaseModel):
    model_config = ConfigDict(frozen=True)

    weight_valid: bool
    capacity_level_valid: bool
    traveler_type_valid: bool
    all_valid: bool


class TravelerCapacity(BaseModel):
    model_config = ConfigDict(frozen=True)

    available_weight_kg: int | float
    available_weight_grams: int | float
    weight_display: str
    is_under_1kg: bool
    capacity_level: Scalar
    capacity_level_id: Scalar
    capacity_description: str
    capacity_min_kg: int | float
    capacity_max_kg: int | float
    traveler_type: Scalar
    can_carry_more: bool
    is_under_limit: bool
    matching_possibilities: list[str]
    estimated_earnings: EstimatedEarnings


class PayloadMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    ip_address: str
    user_agent: str
    timezone: str
    language: str
    device_type: str
    server_name: str
    processed_at: str
    data_validation: DataValidation


class OutgoingPayload(BaseModel):
    """Enriched payload delivered to the n8n webhook."""

    model_config = ConfigDict(frozen=True)

    event_type: str = "traveler_capacity_declaration"
    timestamp: str
    server_time: int
    source: str
    action: str
    traveler_capacity: TravelerCapacity | None = None
    traveler: dict[str, Any] | None = None
    metadata: PayloadMetadata

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict; absent optional blocks are omitted rather than null."""
        data = self.model_dump(mode="json")
        for key in ("traveler_capacity", "traveler"):
            if data[key] is None:
                del data[key]
        return data


class DeliveryResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    response: Any = None
    http_code: int = 0
    error: str | None = None


# --- Relay Log Models ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class RelayEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: RelayEventType
    message: str
    details: dict[str, object] | None = None
