"""Capacity relay pipeline.

Pipeline stages:
1. Method check (POST only)
2. Payload decode into ``IncomingRequest``
3. Relay log of the received data
4. Target URL check
5. Enrichment (matching, earnings, validation)
6. Forward to n8n via httpx, one attempt, one relay log entry
7. Compose the caller-facing response
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx
from starlette.concurrency import run_in_threadpool

from capacity_relay.models import (
    DeliveryResult,
    ObservedRequest,
    OutgoingPayload,
    RelayEvent,
    RelayEventType,
)
from capacity_relay.webhook.enrichment import prepare_payload
from capacity_relay.webhook.responses import (
    compose_response,
    error_body,
    misconfigured_body,
)
from capacity_relay.webhook.validator import (
    MisconfiguredTargetError,
    RelayRequestError,
    check_method,
    check_target,
    parse_body,
)

if TYPE_CHECKING:
    from capacity_relay.audit.logger import RelayLogger
    from capacity_relay.config import Settings

logger = logging.getLogger(__name__)

USER_AGENT = "Telegram-Capacity-Webhook/1.0"


@dataclass
class RelayOutcome:
    """JSON body and HTTP status returned to the caller."""

    body: dict[str, Any]
    status_code: int = 200


class WebhookRelayClient:
    """Delivers enriched payloads to the n8n webhook, once, without retries."""

    def __init__(
        self,
        timeout: float = 30.0,
        relay_log: RelayLogger | None = None,
    ) -> None:
        self._timeout = timeout
        self._relay_log = relay_log

    async def send(self, url: str, payload: OutgoingPayload) -> DeliveryResult:
        """POST the payload and classify the outcome.

        2xx and 3xx count as delivered. Redirects are not followed.
        """
        content = json.dumps(payload.to_wire()).encode()
        headers = {
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }

        http_code = 0
        raw_body = ""
        error = ""
        try:
            async with httpx.AsyncClient(verify=True, follow_redirects=False) as client:
                resp = await client.post(
                    url, content=content, headers=headers, timeout=self._timeout,
                )
                http_code = resp.status_code
                raw_body = resp.text
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            error = str(exc) or type(exc).__name__

        await self._log_delivery(url, len(content), http_code, raw_body, error)

        if error:
            logger.warning("Delivery to n8n failed: %s", error)
            return DeliveryResult(success=False, error=error)

        if 200 <= http_code < 400:
            return DeliveryResult(
                success=True,
                response=_decode_body(raw_body),
                http_code=http_code,
            )

        logger.warning("n8n responded with HTTP %d", http_code)
        return DeliveryResult(
            success=False,
            response=raw_body,
            http_code=http_code,
            error=f"HTTP {http_code}",
        )

    async def _log_delivery(
        self, url: str, payload_size: int, http_code: int, response: str, error: str,
    ) -> None:
        if not self._relay_log:
            return
        await run_in_threadpool(self._relay_log.log, RelayEvent(
            event_type=RelayEventType.CAPACITY_SENT,
            message="Capacity data sent to n8n",
            details={
                "url": url,
                "payload_size": payload_size,
                "http_code": http_code,
                "response": response,
                "error": error,
            },
        ))


def _decode_body(raw: str) -> Any:
    """Parsed JSON body, or the raw text when it is not (truthy) JSON."""
    try:
        parsed = json.loads(raw)
    except ValueError:
        return raw
    return parsed or raw


class CapacityRelayPipeline:
    """Runs one inbound capacity declaration through the relay stages."""

    def __init__(
        self,
        settings: Settings,
        client: WebhookRelayClient,
        relay_log: RelayLogger | None = None,
    ) -> None:
        self._settings = settings
        self._client = client
        self._relay_log = relay_log

    async def handle(
        self, method: str, body: bytes, observed: ObservedRequest,
    ) -> RelayOutcome:
        try:
            check_method(method)
            received, request = parse_body(body)
        except RelayRequestError as exc:
            return RelayOutcome(error_body(exc.message), exc.status_code)

        if self._relay_log:
            await run_in_threadpool(self._relay_log.log, RelayEvent(
                event_type=RelayEventType.CAPACITY_RECEIVED,
                message="Traveler capacity received",
                details=received,
            ))

        try:
            check_target(self._settings, received)
        except MisconfiguredTargetError as exc:
            return RelayOutcome(
                misconfigured_body(exc.message, exc.received), exc.status_code,
            )

        payload = prepare_payload(request, observed)
        result = await self._client.send(self._settings.webhook_url, payload)
        return RelayOutcome(compose_response(result, received))
