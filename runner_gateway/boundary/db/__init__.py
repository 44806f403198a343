"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Connection management
  - JobRecordModel, JobStatus, JobStep, Operation: Job record and its enums
  - JobCRUD, job_crud: CRUD operations for job records

Dependencies: sqlalchemy, runner_gateway.configs
System role: Database adapter providing the authoritative job state
"""

from runner_gateway.boundary.db.base import Base, TimestampMixin
from runner_gateway.boundary.db.connection import (
    create_engine_from_settings,
    dispose_async_engine,
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from runner_gateway.boundary.db.models.job_model import (
    TERMINAL_STATUSES,
    JobRecordModel,
    JobStatus,
    JobStep,
    Operation,
)
from runner_gateway.boundary.db.CRUD import JobCRUD, job_crud

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    # Connection
    "create_engine_from_settings",
    "dispose_async_engine",
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "JobRecordModel",
    "JobStatus",
    "JobStep",
    "Operation",
    "TERMINAL_STATUSES",
    # CRUD
    "JobCRUD",
    "job_crud",
]
