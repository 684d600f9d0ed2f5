"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Expose registered Prometheus metrics.

    Includes:
    - document_generations_total{outcome}
    - document_generation_latency_ms{outcome}
    - logo_decode_failures_total{reason}
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
