"""
AWS boundary: S3 blob store and SQS work queue.
"""

from runner_gateway.boundary.aws.s3_client import JobBlobStore, blob_name
from runner_gateway.boundary.aws.sqs_client import JobQueueClient

__all__ = ["JobBlobStore", "JobQueueClient", "blob_name"]
