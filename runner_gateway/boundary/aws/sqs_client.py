"""
SQS client for the job work queue.

Owns the ``jobs`` queue and its ``jobs-poison`` dead-letter queue. Messages
are small JSON pointers to job records; delivery is at-least-once and a
message is redriven to the poison queue after ``max_receive_count``
deliveries without deletion.

Dependencies: boto3
System role: Durable work queue between intake and the worker
"""

import asyncio
import json
import logging

import boto3
from botocore.exceptions import ClientError

from runner_gateway.configs.storage import StorageSettings

logger = logging.getLogger(__name__)


class JobQueueClient:
    """SQS work queue with a redrive policy to the poison queue."""

    def __init__(
        self,
        queue_name: str,
        poison_queue_name: str,
        max_receive_count: int = 5,
        visibility_timeout_seconds: int = 300,
        region: str = "eu-west-1",
        endpoint_url: str | None = None,
        client=None,
    ) -> None:
        """
        Initialize SQS client for the work queue.

        Args:
            queue_name: Work queue name
            poison_queue_name: Dead-letter queue name
            max_receive_count: Deliveries before redrive to the poison queue
            visibility_timeout_seconds: Work queue visibility timeout
            region: AWS region
            endpoint_url: Custom endpoint (LocalStack), None for AWS
            client: Pre-built boto3 SQS client (tests)
        """
        self._queue_name = queue_name
        self._poison_queue_name = poison_queue_name
        self._max_receive_count = max_receive_count
        self._visibility_timeout = visibility_timeout_seconds
        self._sqs_client = client or boto3.client(
            "sqs", region_name=region, endpoint_url=endpoint_url
        )
        self._queue_urls: dict[str, str] = {}

    @classmethod
    def from_settings(cls, settings: StorageSettings) -> "JobQueueClient":
        return cls(
            queue_name=settings.jobs_queue,
            poison_queue_name=settings.poison_queue,
            max_receive_count=settings.max_receive_count,
            visibility_timeout_seconds=settings.visibility_timeout_seconds,
            region=settings.region,
            endpoint_url=settings.endpoint_url,
        )

    @property
    def queue_name(self) -> str:
        return self._queue_name

    @property
    def poison_queue_name(self) -> str:
        return self._poison_queue_name

    def _queue_url(self, name: str) -> str:
        if name not in self._queue_urls:
            response = self._sqs_client.get_queue_url(QueueName=name)
            self._queue_urls[name] = response["QueueUrl"]
        return self._queue_urls[name]

    def _create_queues(self) -> None:
        poison = self._sqs_client.create_queue(QueueName=self._poison_queue_name)
        self._queue_urls[self._poison_queue_name] = poison["QueueUrl"]
        poison_arn = self._sqs_client.get_queue_attributes(
            QueueUrl=poison["QueueUrl"],
            AttributeNames=["QueueArn"],
        )["Attributes"]["QueueArn"]

        # Dead-letter target must exist before the main queue references it
        attributes = {
            "VisibilityTimeout": str(self._visibility_timeout),
            "RedrivePolicy": json.dumps({
                "deadLetterTargetArn": poison_arn,
                "maxReceiveCount": str(self._max_receive_count),
            }),
        }
        try:
            queue = self._sqs_client.create_queue(
                QueueName=self._queue_name,
                Attributes=attributes,
            )
            self._queue_urls[self._queue_name] = queue["QueueUrl"]
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") not in (
                "QueueAlreadyExists",
                "QueueNameExists",
            ):
                raise
            url = self._queue_url(self._queue_name)
            self._sqs_client.set_queue_attributes(QueueUrl=url, Attributes=attributes)

        logger.info(
            f"{__name__}:ensure_queues - Queues ready",
            extra={
                "queue": self._queue_name,
                "poison_queue": self._poison_queue_name,
                "max_receive_count": self._max_receive_count,
            },
        )

    async def ensure_queues(self) -> None:
        """
        Create the work queue and poison queue if missing.

        Idempotent. An existing work queue gets its redrive policy and
        visibility timeout re-applied.
        """
        await asyncio.to_thread(self._create_queues)

    async def send(self, body: str) -> str:
        """
        Enqueue a work message.

        Args:
            body: Serialized work message

        Returns:
            str: SQS MessageId
        """
        url = await asyncio.to_thread(self._queue_url, self._queue_name)
        response = await asyncio.to_thread(
            self._sqs_client.send_message,
            QueueUrl=url,
            MessageBody=body,
        )
        return response["MessageId"]

    async def receive(self, max_messages: int = 10, wait_seconds: int = 20) -> list[dict]:
        """
        Long-poll the work queue.

        Args:
            max_messages: Upper bound per call (SQS caps at 10)
            wait_seconds: Long-poll wait time

        Returns:
            list[dict]: Raw SQS messages (MessageId, ReceiptHandle, Body, ...)
        """
        url = await asyncio.to_thread(self._queue_url, self._queue_name)
        response = await asyncio.to_thread(
            self._sqs_client.receive_message,
            QueueUrl=url,
            MaxNumberOfMessages=min(max_messages, 10),
            WaitTimeSeconds=wait_seconds,
            AttributeNames=["ApproximateReceiveCount"],
        )
        return response.get("Messages", [])

    async def delete(self, receipt_handle: str) -> None:
        """Acknowledge a processed message."""
        url = await asyncio.to_thread(self._queue_url, self._queue_name)
        await asyncio.to_thread(
            self._sqs_client.delete_message,
            QueueUrl=url,
            ReceiptHandle=receipt_handle,
        )

    async def approximate_depth(self, queue_name: str) -> int:
        """
        Approximate number of visible messages in a queue.

        Args:
            queue_name: Either the work queue or the poison queue

        Returns:
            int: ApproximateNumberOfMessages
        """
        url = await asyncio.to_thread(self._queue_url, queue_name)
        response = await asyncio.to_thread(
            self._sqs_client.get_queue_attributes,
            QueueUrl=url,
            AttributeNames=["ApproximateNumberOfMessages"],
        )
        return int(response["Attributes"]["ApproximateNumberOfMessages"])
