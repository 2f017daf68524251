"""Payload enrichment: derive matching, earnings and validation fields.

Everything here is pure. Defaults for missing inbound fields are applied by
the models in ``capacity_relay.models``, so derivation never looks for
missing keys itself.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime

from capacity_relay.models import (
    UNKNOWN,
    CapacityInfo,
    DataValidation,
    EstimatedEarnings,
    IncomingRequest,
    ObservedRequest,
    OutgoingPayload,
    PayloadMetadata,
    TravelerCapacity,
)

BASE_RATE_PER_KG = 5000
CURRENCY = "IRR"
UNDER_LIMIT_KG = 30
MIN_VALID_KG = 0.1
MAX_VALID_KG = 50

# (lower bound in kg, categories) checked top-down, first match wins
_MATCHING_TIERS: tuple[tuple[float, tuple[str, ...]], ...] = (
    (20, ("large_cargo", "multiple_small_cargos", "medium_cargo")),
    (10, ("medium_cargo", "multiple_small_cargos")),
    (5, ("small_cargo", "documents")),
    (1, ("documents", "small_items")),
)
_LIGHT_MATCHES = ("documents", "jewelry")

# (upper bound in kg, min multiplier, max multiplier)
_EARNING_TIERS: tuple[tuple[float, float, float], ...] = (
    (5, 0.8, 1.2),
    (15, 0.7, 1.3),
    (math.inf, 0.6, 1.4),
)
_LIGHT_EARNINGS = (10_000, 20_000)


def calculate_matching_possibilities(weight_kg: float) -> list[str]:
    """Cargo categories a traveler with this much spare weight can take."""
    for lower_bound, categories in _MATCHING_TIERS:
        if weight_kg >= lower_bound:
            return list(categories)
    return list(_LIGHT_MATCHES)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def estimate_earnings(weight_kg: float) -> EstimatedEarnings:
    """Earnings range for carrying ``weight_kg``; under 1 kg is a flat fee."""
    if weight_kg < 1:
        low, high = _LIGHT_EARNINGS
    else:
        for upper_bound, min_factor, max_factor in _EARNING_TIERS:
            if weight_kg <= upper_bound:
                low = _round_half_up(weight_kg * BASE_RATE_PER_KG * min_factor)
                high = _round_half_up(weight_kg * BASE_RATE_PER_KG * max_factor)
                break
    return EstimatedEarnings(
        min=low, max=high, currency=CURRENCY, per_kg_rate=BASE_RATE_PER_KG,
    )


def validate_capacity(info: CapacityInfo) -> DataValidation:
    weight_kg = info.available_weight.kg
    weight_valid = MIN_VALID_KG <= weight_kg <= MAX_VALID_KG
    level_valid = bool(info.capacity_level.id)
    type_valid = bool(info.traveler_type)
    return DataValidation(
        weight_valid=weight_valid,
        capacity_level_valid=level_valid,
        traveler_type_valid=type_valid,
        all_valid=weight_valid and level_valid and type_valid,
    )


def build_traveler_capacity(info: CapacityInfo) -> TravelerCapacity:
    weight = info.available_weight
    level = info.capacity_level
    return TravelerCapacity(
        available_weight_kg=weight.kg,
        available_weight_grams=weight.grams,
        weight_display=weight.display,
        is_under_1kg=weight.is_under_1kg,
        capacity_level=level.label if level.label is not None else UNKNOWN,
        capacity_level_id=level.id if level.id is not None else UNKNOWN,
        capacity_description=level.description,
        capacity_min_kg=level.min_kg,
        capacity_max_kg=level.max_kg,
        traveler_type=info.traveler_type if info.traveler_type is not None else UNKNOWN,
        can_carry_more=info.can_carry_more,
        is_under_limit=weight.kg <= UNDER_LIMIT_KG,
        matching_possibilities=calculate_matching_possibilities(weight.kg),
        estimated_earnings=estimate_earnings(weight.kg),
    )


def _first_known(*values: str | None) -> str:
    for value in values:
        if value is not None:
            return value
    return UNKNOWN


def prepare_payload(
    request: IncomingRequest,
    observed: ObservedRequest,
    now: datetime | None = None,
) -> OutgoingPayload:
    """Build the enriched n8n payload for one capacity declaration."""
    now = now or datetime.now(UTC)
    stamp = now.strftime("%Y-%m-%d %H:%M:%S")

    traveler = None
    if request.telegram_user is not None:
        traveler = {
            **request.telegram_user,
            "status": "active",
            "registration_date": now.strftime("%Y-%m-%d"),
        }

    capacity = None
    if request.capacity_info is not None:
        capacity = build_traveler_capacity(request.capacity_info)

    meta = request.metadata
    metadata = PayloadMetadata(
        ip_address=_first_known(request.ip_address, observed.remote_addr),
        user_agent=_first_known(meta.user_agent, observed.user_agent),
        timezone=_first_known(meta.timezone),
        language=_first_known(meta.language),
        device_type=_first_known(meta.device_type),
        server_name=_first_known(observed.server_name),
        processed_at=stamp,
        data_validation=validate_capacity(request.capacity_info or CapacityInfo()),
    )

    return OutgoingPayload(
        timestamp=stamp,
        server_time=int(now.timestamp()),
        source=request.source,
        action=request.action,
        traveler_capacity=capacity,
        traveler=traveler,
        metadata=metadata,
    )
