"""Dashboard report endpoint."""

from typing import Any

from fastapi import APIRouter, Request

from cost_tracker.api.dependencies import get_container
from cost_tracker.api.serializers import envelope, summary_to_dict

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("/summary")
async def report_summary(request: Request) -> dict[str, Any]:
    """Return counts, cost distributions and profit totals."""
    summary = get_container(request).report_service.summary()
    return envelope(summary_to_dict(summary))
