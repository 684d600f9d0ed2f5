"""Structured logging for document generation."""

import logging
from typing import Any
from uuid import UUID

logger = logging.getLogger(__name__)


class StructuredGenerationLogger:
    """Structured logger for generation outcomes."""

    def log_outcome(
        self,
        client_id: UUID | None,
        title: str | None,
        outcome: str,
        latency_ms: float,
        version: int | None = None,
        storage_ref: str | None = None,
        error_reason: str | None = None,
    ) -> None:
        """Log one generation request with structured data."""
        log_data: dict[str, Any] = {
            "client_id": str(client_id) if client_id else None,
            "title": title,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if version is not None:
            log_data["version"] = version
        if storage_ref:
            log_data["storage_ref"] = storage_ref
        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Document generation: {title!r} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
