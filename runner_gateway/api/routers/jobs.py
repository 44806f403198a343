"""
Job status API endpoints.

Routes: GET /jobs/{operation}/{job_id}

Dependencies: runner_gateway.application.services.job_status_reader
System role: Job status HTTP API
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from fastapi.responses import JSONResponse

from runner_gateway.api.deps import get_job_status_reader
from runner_gateway.application.services.job_status_reader import (
    JobStatusReader,
    JobStatusView,
)
from runner_gateway.core.exceptions import JobNotFoundError
from runner_gateway.models.job import JobDiagnosticsResponse, JobStatusResponse

router = APIRouter(prefix="/jobs", tags=["jobs"])


def to_response(view: JobStatusView) -> dict:
    """camelCase JSON body for a status view, omitting unset fields."""
    diagnostics = None
    if view.diagnostics is not None:
        diagnostics = JobDiagnosticsResponse(**view.diagnostics.model_dump())
    return JobStatusResponse(
        job_id=view.job_id,
        operation=view.operation.value,
        status=view.status.value,
        error=view.error,
        output_ref=view.output_ref,
        warning=view.warning,
        diagnostics=diagnostics,
    ).model_dump(by_alias=True, exclude_none=True, mode="json")


@router.get("/{operation}/{job_id}")
async def get_job_status(
    operation: str,
    job_id: str,
    include_output: bool = Query(True, alias="includeOutput"),
    debug: bool = Query(False),
    reader: JobStatusReader = Depends(get_job_status_reader),
) -> Response:
    """
    Get job status for client polling.

    Clients poll while the response is 202 (Queued / Running).

    Args:
        operation: compile / run / analyse
        job_id: Job identifier from the intake response
        include_output: Return the stored runner output for succeeded jobs
        debug: Include processing diagnostics
        reader: Injected JobStatusReader

    Returns:
        - 202 ``{jobId, operation, status}`` while Queued / Running
        - 200 ``{jobId, operation, status: "Failed", error}``
        - 200 raw runner output (Succeeded, includeOutput=true)
        - 200 ``{jobId, operation, status: "Succeeded", outputRef}`` otherwise

    Raises:
        HTTPException(404): Job not found
    """
    try:
        view = await reader.get_status(
            operation, job_id, include_output=include_output, debug=debug
        )
    except JobNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)

    if view.is_pending:
        return JSONResponse(status_code=202, content=to_response(view))

    if view.output is not None:
        return Response(content=view.output, media_type="application/json")

    return JSONResponse(status_code=200, content=to_response(view))
