"""
S3 client for job input and output blobs.

Stores raw request bodies in the input bucket and runner results in the
output bucket, both keyed by ``{jobId}.json``.

Dependencies: boto3
System role: Blob persistence for job intake and worker results
"""

import asyncio
import logging

import boto3
from botocore.exceptions import ClientError

from runner_gateway.configs.storage import StorageSettings

logger = logging.getLogger(__name__)

_EXISTING_BUCKET_CODES = {"BucketAlreadyOwnedByYou", "BucketAlreadyExists"}


def blob_name(job_id: str) -> str:
    """Blob key used for both the input and output of a job."""
    return f"{job_id}.json"


class JobBlobStore:
    """S3-backed store for job input and output documents."""

    def __init__(
        self,
        input_bucket: str,
        output_bucket: str,
        region: str = "eu-west-1",
        endpoint_url: str | None = None,
        client=None,
    ) -> None:
        """
        Initialize S3 client for the job buckets.

        Args:
            input_bucket: Bucket holding raw request bodies
            output_bucket: Bucket holding runner results
            region: AWS region for the buckets
            endpoint_url: Custom endpoint (LocalStack), None for AWS
            client: Pre-built boto3 S3 client (tests)
        """
        self._input_bucket = input_bucket
        self._output_bucket = output_bucket
        self._region = region
        self._s3_client = client or boto3.client(
            "s3", region_name=region, endpoint_url=endpoint_url
        )

    @classmethod
    def from_settings(cls, settings: StorageSettings) -> "JobBlobStore":
        return cls(
            input_bucket=settings.input_bucket,
            output_bucket=settings.output_bucket,
            region=settings.region,
            endpoint_url=settings.endpoint_url,
        )

    @property
    def input_bucket(self) -> str:
        return self._input_bucket

    @property
    def output_bucket(self) -> str:
        return self._output_bucket

    def _create_bucket(self, bucket: str) -> None:
        kwargs: dict = {"Bucket": bucket}
        if self._region != "us-east-1":
            kwargs["CreateBucketConfiguration"] = {"LocationConstraint": self._region}
        try:
            self._s3_client.create_bucket(**kwargs)
            logger.info(
                f"{__name__}:ensure_buckets - Bucket created",
                extra={"bucket": bucket},
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") not in _EXISTING_BUCKET_CODES:
                raise

    async def ensure_buckets(self) -> None:
        """
        Create the input and output buckets if missing.

        Raises:
            ClientError: Any S3 failure other than "already exists"
        """
        for bucket in (self._input_bucket, self._output_bucket):
            await asyncio.to_thread(self._create_bucket, bucket)

    async def _put(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        await asyncio.to_thread(
            self._s3_client.put_object,
            Bucket=bucket,
            Key=key,
            Body=data,
            ContentType=content_type,
        )

    def _read(self, bucket: str, key: str) -> bytes:
        response = self._s3_client.get_object(Bucket=bucket, Key=key)
        return response["Body"].read()

    async def put_input(self, key: str, data: bytes) -> None:
        """
        Upload the raw request body of a job.

        Args:
            key: Blob name (``{jobId}.json``)
            data: Request bytes, stored verbatim
        """
        await self._put(self._input_bucket, key, data, "application/json")

    async def get_input(self, key: str) -> bytes:
        """
        Download the raw request body of a job.

        Raises:
            ClientError: Blob missing or unreadable
        """
        return await asyncio.to_thread(self._read, self._input_bucket, key)

    async def put_output(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/json",
    ) -> None:
        """
        Upload the stored result of a successful job.

        Args:
            key: Blob name (``{jobId}.json``)
            data: Output document bytes
            content_type: Content type recorded on the object
        """
        await self._put(self._output_bucket, key, data, content_type)

    async def get_output(self, key: str) -> bytes:
        """
        Download the stored result of a successful job.

        Raises:
            ClientError: Blob missing or unreadable
        """
        return await asyncio.to_thread(self._read, self._output_bucket, key)
