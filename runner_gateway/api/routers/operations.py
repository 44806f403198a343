"""
Job intake API endpoints.

Routes: POST /compile, POST /run, POST /analyse

The raw request body is stored as-is; JSON validity is checked later by the
worker, which fails the job with ``invalid_json`` if needed.

Dependencies: runner_gateway.application.services.job_submitter
System role: Job intake HTTP API
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from runner_gateway.api.deps import get_job_submitter
from runner_gateway.application.services.job_submitter import JobSubmitter
from runner_gateway.boundary.db.models.job_model import Operation
from runner_gateway.core.exceptions import SubmissionError, ValidationError
from runner_gateway.models.job import JobAcceptedResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["operations"])


def status_path(request: Request, operation: str, job_id: str) -> str:
    """Relative status URL, honouring the mount prefix of this router."""
    return str(request.app.url_path_for(
        "get_job_status", operation=operation, job_id=job_id
    ))


async def _submit(
    operation: Operation,
    request: Request,
    response: Response,
    submitter: JobSubmitter,
) -> JobAcceptedResponse:
    body = await request.body()
    try:
        submitted = await submitter.submit(operation.value, body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except SubmissionError as e:
        logger.exception(
            f"{__name__}:submit - Failed to enqueue job",
            extra={"operation": operation.value, "error": str(e)},
        )
        raise HTTPException(status_code=500, detail="enqueue_failed")

    url = status_path(request, submitted.operation.value, submitted.job_id)
    response.headers["Location"] = url
    return JobAcceptedResponse(
        job_id=submitted.job_id,
        operation=submitted.operation.value,
        status_url=url,
    )


@router.post(
    "/compile",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=JobAcceptedResponse,
    response_model_by_alias=True,
)
async def compile_job(
    request: Request,
    response: Response,
    submitter: JobSubmitter = Depends(get_job_submitter),
) -> JobAcceptedResponse:
    """Queue a compile job."""
    return await _submit(Operation.COMPILE, request, response, submitter)


@router.post(
    "/run",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=JobAcceptedResponse,
    response_model_by_alias=True,
)
async def run_job(
    request: Request,
    response: Response,
    submitter: JobSubmitter = Depends(get_job_submitter),
) -> JobAcceptedResponse:
    """Queue a run job."""
    return await _submit(Operation.RUN, request, response, submitter)


@router.post(
    "/analyse",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=JobAcceptedResponse,
    response_model_by_alias=True,
)
async def analyse_job(
    request: Request,
    response: Response,
    submitter: JobSubmitter = Depends(get_job_submitter),
) -> JobAcceptedResponse:
    """
    Queue an analyse job.

    Returns 202 with ``Location`` pointing at the status endpoint. Poll it
    until the status is Succeeded or Failed.

    Raises:
        HTTPException(400): Empty body
        HTTPException(500): Job could not be durably enqueued
    """
    return await _submit(Operation.ANALYSE, request, response, submitter)
