"""
Tests for the SQS work queue client.

Uses a MagicMock boto3 client; no network access.

System role: Verification of queue provisioning and messaging calls
"""

import json
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from runner_gateway.boundary.aws.sqs_client import JobQueueClient

JOBS_URL = "https://sqs.eu-west-1.amazonaws.com/123/jobs"
POISON_URL = "https://sqs.eu-west-1.amazonaws.com/123/jobs-poison"
POISON_ARN = "arn:aws:sqs:eu-west-1:123:jobs-poison"


@pytest.fixture
def sqs():
    client = MagicMock()
    client.get_queue_url.side_effect = lambda QueueName: {
        "QueueUrl": JOBS_URL if QueueName == "jobs" else POISON_URL
    }
    client.create_queue.side_effect = lambda QueueName, **kwargs: {
        "QueueUrl": JOBS_URL if QueueName == "jobs" else POISON_URL
    }
    client.get_queue_attributes.return_value = {
        "Attributes": {"QueueArn": POISON_ARN, "ApproximateNumberOfMessages": "7"}
    }
    client.send_message.return_value = {"MessageId": "msg-42"}
    return client


@pytest.fixture
def queue(sqs) -> JobQueueClient:
    return JobQueueClient(
        "jobs",
        "jobs-poison",
        max_receive_count=5,
        visibility_timeout_seconds=300,
        client=sqs,
    )


class TestEnsureQueues:
    """Test suite for JobQueueClient.ensure_queues()."""

    async def test_poison_queue_is_created_first_and_wired_as_dlq(self, queue, sqs):
        # Act
        await queue.ensure_queues()

        # Assert
        names = [c.kwargs["QueueName"] for c in sqs.create_queue.call_args_list]
        assert names == ["jobs-poison", "jobs"]
        attributes = sqs.create_queue.call_args.kwargs["Attributes"]
        assert attributes["VisibilityTimeout"] == "300"
        assert json.loads(attributes["RedrivePolicy"]) == {
            "deadLetterTargetArn": POISON_ARN,
            "maxReceiveCount": "5",
        }

    async def test_existing_queue_gets_attributes_reapplied(self, queue, sqs):
        def create_queue(QueueName, **kwargs):
            if QueueName == "jobs":
                raise ClientError(
                    {"Error": {"Code": "QueueAlreadyExists", "Message": "exists"}},
                    "CreateQueue",
                )
            return {"QueueUrl": POISON_URL}

        sqs.create_queue.side_effect = create_queue

        await queue.ensure_queues()

        sqs.set_queue_attributes.assert_called_once()
        assert sqs.set_queue_attributes.call_args.kwargs["QueueUrl"] == JOBS_URL


async def test_send_returns_message_id(queue, sqs):
    message_id = await queue.send('{"operation": "run", "jobId": "abc"}')

    assert message_id == "msg-42"
    sqs.send_message.assert_called_once_with(
        QueueUrl=JOBS_URL,
        MessageBody='{"operation": "run", "jobId": "abc"}',
    )


async def test_queue_url_is_cached(queue, sqs):
    await queue.send("a")
    await queue.send("b")

    assert sqs.get_queue_url.call_count == 1


async def test_receive_caps_batch_size(queue, sqs):
    sqs.receive_message.return_value = {"Messages": [{"MessageId": "m1"}]}

    messages = await queue.receive(max_messages=50, wait_seconds=5)

    assert messages == [{"MessageId": "m1"}]
    kwargs = sqs.receive_message.call_args.kwargs
    assert kwargs["MaxNumberOfMessages"] == 10
    assert kwargs["WaitTimeSeconds"] == 5


async def test_receive_with_no_messages(queue, sqs):
    sqs.receive_message.return_value = {}

    assert await queue.receive() == []


async def test_delete_acknowledges_receipt(queue, sqs):
    await queue.delete("rh-1")

    sqs.delete_message.assert_called_once_with(QueueUrl=JOBS_URL, ReceiptHandle="rh-1")


async def test_approximate_depth(queue, sqs):
    depth = await queue.approximate_depth("jobs-poison")

    assert depth == 7
    assert sqs.get_queue_attributes.call_args.kwargs["QueueUrl"] == POISON_URL
