"""
Database models package.

Exports:
  - JobRecordModel: Job record ORM model
  - Operation, JobStatus, JobStep: Enums used by the record

Dependencies: sqlalchemy, runner_gateway.boundary.db.base
System role: Database model definitions for domain entities
"""

from runner_gateway.boundary.db.models.job_model import (
    TERMINAL_STATUSES,
    JobRecordModel,
    JobStatus,
    JobStep,
    Operation,
)

__all__ = [
    "JobRecordModel",
    "JobStatus",
    "JobStep",
    "Operation",
    "TERMINAL_STATUSES",
]
