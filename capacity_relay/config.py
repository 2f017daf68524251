"""Relay settings, read once from the environment at process start."""

from __future__ import annotations

import logging
import os

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

# Marker left in the URL by the deployment template until someone edits it.
PLACEHOLDER_MARKER = "your-n8n-domain"


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    webhook_url: str = ""
    relay_log_path: str = "logs/webhook_capacity_log.jsonl"
    relay_log_max_bytes: int = Field(default=10_485_760, gt=0)
    relay_log_backup_count: int = Field(default=5, ge=1)
    timeout_seconds: float = Field(default=30.0, gt=0)

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from environment variables and report a bad target URL."""
        settings = cls(
            webhook_url=os.environ.get("N8N_WEBHOOK_URL", "").strip(),
            relay_log_path=os.environ.get(
                "RELAY_LOG_PATH", "logs/webhook_capacity_log.jsonl",
            ),
            relay_log_max_bytes=int(os.environ.get("RELAY_LOG_MAX_BYTES", "10485760")),
            relay_log_backup_count=int(os.environ.get("RELAY_LOG_BACKUP_COUNT", "5")),
            timeout_seconds=float(os.environ.get("RELAY_TIMEOUT_SECONDS", "30")),
        )
        if not settings.webhook_configured:
            logger.warning(
                "N8N_WEBHOOK_URL is not configured; capacity submissions will be rejected",
            )
        return settings

    @property
    def webhook_configured(self) -> bool:
        return bool(self.webhook_url) and PLACEHOLDER_MARKER not in self.webhook_url
