"""Shared test data for the traveler capacity relay."""

from __future__ import annotations

from typing import Any

from capacity_relay.models import RelayEvent, RelayEventType

WEBHOOK_URL = "https://n8n.example.com/webhook/traveler-capacity"


# --- Factory functions for test data ---


def make_capacity_request(**kwargs: Any) -> dict[str, Any]:
    """Capacity declaration shaped like the Telegram web app sends it."""
    defaults: dict[str, Any] = {
        "action": "traveler_capacity_declared",
        "source": "web_test",
        "capacity_info": {
            "available_weight": {
                "kg": 10.5,
                "grams": 10500,
                "display": "10.5 kg",
                "is_under_1kg": False,
            },
            "capacity_level": {
                "id": "medium",
                "label": "Medium",
                "description": "Small suitcase",
                "min_kg": 5,
                "max_kg": 15,
            },
            "traveler_type": "heavy_traveler",
            "can_carry_more": True,
        },
        "telegram_user": {
            "telegram_id": 123456789,
            "telegram_username": "testtraveler",
        },
        "ip_address": "127.0.0.1",
    }
    defaults.update(kwargs)
    return defaults


def make_relay_event(**kwargs: Any) -> RelayEvent:
    """Factory for RelayEvent with sensible defaults."""
    defaults: dict[str, Any] = {
        "event_type": RelayEventType.CAPACITY_RECEIVED,
        "message": "Traveler capacity received",
    }
    defaults.update(kwargs)
    return RelayEvent(**defaults)
