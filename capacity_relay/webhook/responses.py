"""Caller-facing JSON bodies for the capacity relay endpoint."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

from capacity_relay.models import DeliveryResult

TRAVELER_ID_PREFIX = "TRVL_"


def _timestamp() -> str:
    return datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")


def new_traveler_id() -> str:
    """Random 13 hex digit id, collision-improbable within a process."""
    return f"{TRAVELER_ID_PREFIX}{uuid.uuid4().hex[:13]}"


def error_body(message: str) -> dict[str, Any]:
    return {"success": False, "error": message}


def misconfigured_body(message: str, received: dict[str, Any]) -> dict[str, Any]:
    return {
        "success": False,
        "error": message,
        "received_data": received,
        "timestamp": _timestamp(),
    }


def compose_response(
    result: DeliveryResult, received: dict[str, Any],
) -> dict[str, Any]:
    """Map a delivery outcome to the JSON body returned to the caller."""
    if result.success:
        return {
            "success": True,
            "message": "Traveler capacity sent to n8n successfully",
            "n8n_response": result.response,
            "timestamp": _timestamp(),
            "traveler_id": new_traveler_id(),
        }
    return {
        "success": False,
        "error": "Failed to send traveler capacity to n8n",
        "n8n_error": result.error,
        "received_data": received,
        "timestamp": _timestamp(),
    }
