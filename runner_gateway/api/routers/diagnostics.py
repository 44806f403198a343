"""
Diagnostics API endpoints.

Routes: GET /diagnostics?pingRunner=&pingQueues=

Dependencies: runner_gateway.application.services.diagnostics_service
System role: Operational probe HTTP API
"""

from fastapi import APIRouter, Depends, Query

from runner_gateway.api.deps import get_diagnostics_service
from runner_gateway.application.services.diagnostics_service import DiagnosticsService

router = APIRouter(prefix="/diagnostics", tags=["diagnostics"])


@router.get("")
async def diagnostics(
    ping_runner: bool = Query(False, alias="pingRunner"),
    ping_queues: bool = Query(False, alias="pingQueues"),
    service: DiagnosticsService = Depends(get_diagnostics_service),
) -> dict:
    """
    Report configuration presence and, optionally, queue depths and runner reachability.

    Setting values are never returned, only whether they are set.
    """
    return await service.report(ping_runner=ping_runner, ping_queues=ping_queues)
