"""
CRUD operations for the job record store.

Usage:
    from runner_gateway.boundary.db.CRUD import job_crud

    record = await job_crud.get_by_key(db, "run", job_id)
"""

from runner_gateway.boundary.db.CRUD.job_crud import JobCRUD, job_crud

__all__ = [
    "JobCRUD",
    "job_crud",
]
