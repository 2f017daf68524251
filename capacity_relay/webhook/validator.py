"""Inbound request validation for the capacity relay endpoint."""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from capacity_relay.config import Settings
from capacity_relay.models import IncomingRequest


class RelayRequestError(Exception):
    """Base for requests rejected before anything is sent downstream."""

    status_code = 400

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class MethodNotAllowedError(RelayRequestError):
    status_code = 405

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__("Only POST method allowed")


class InvalidPayloadError(RelayRequestError):
    status_code = 400

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__("Invalid JSON data")


class MisconfiguredTargetError(RelayRequestError):
    """The downstream webhook URL is unset or still the template placeholder.

    Reported with HTTP 200 and ``success: false``, echoing the received data.
    """

    status_code = 200

    def __init__(self, received: dict[str, Any]) -> None:
        self.received = received
        super().__init__("N8N webhook URL not configured")


def _reject_constant(name: str) -> float:
    raise ValueError(f"Unsupported JSON constant {name}")


def check_method(method: str) -> None:
    if method.upper() != "POST":
        raise MethodNotAllowedError(method)


def parse_body(body: bytes) -> tuple[dict[str, Any], IncomingRequest]:
    """Decode the raw body into the original dict and its typed view."""
    try:
        data = json.loads(body, parse_constant=_reject_constant)
    except (ValueError, UnicodeDecodeError) as exc:
        raise InvalidPayloadError(str(exc)) from exc
    if not isinstance(data, dict):
        raise InvalidPayloadError(f"expected a JSON object, got {type(data).__name__}")
    try:
        request = IncomingRequest.model_validate(data)
    except ValidationError as exc:
        raise InvalidPayloadError(str(exc)) from exc
    return data, request


def check_target(settings: Settings, received: dict[str, Any]) -> None:
    if not settings.webhook_configured:
        raise MisconfiguredTargetError(received)
