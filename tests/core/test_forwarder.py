"""
Tests for the runner forwarder.

Covers payload projection, headers, retry/backoff against transient
statuses, Retry-After handling, exhaustion and non-retryable outcomes.
Uses httpx.MockTransport and a recording sleep so no test waits.

System role: Verification of outbound runner integration
"""

import json

import httpx
import pytest

from runner_gateway.configs.runner import RunnerSettings
from runner_gateway.core.exceptions import ConfigurationError, TokenAcquisitionError
from runner_gateway.core.job_processing.forwarder import RunnerForwarder, build_payload
from runner_gateway.observability.correlation import correlation_scope


def scripted_client(*steps):
    """
    Build an AsyncClient replaying ``steps`` in order.

    Each step is an httpx.Response or a callable taking the request (may raise).
    The last step repeats once the script runs out.
    """
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        step = steps[min(len(requests), len(steps)) - 1]
        if callable(step):
            return step(request)
        return step

    return httpx.AsyncClient(transport=httpx.MockTransport(handler)), requests


def connect_error(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


@pytest.fixture
def run_body() -> bytes:
    return json.dumps({"code": "print(1)", "languageVersion": "3.12"}).encode()


class TestForwardRetries:
    """Retry behaviour of RunnerForwarder.forward()."""

    async def test_transient_statuses_are_retried_until_success(
        self, runner_settings, token_provider, fake_sleep, recorded_sleeps, run_body
    ):
        # Arrange
        client, requests = scripted_client(
            httpx.Response(429),
            httpx.Response(503),
            httpx.Response(200, json={"ok": True}),
        )
        forwarder = RunnerForwarder(runner_settings, client, token_provider, sleep=fake_sleep)

        # Act
        result = await forwarder.forward("run", run_body, "sess-abcdefg")

        # Assert
        assert result.status_code == 200
        assert json.loads(result.body) == {"ok": True}
        assert len(requests) == 3
        assert recorded_sleeps == [pytest.approx(1.0), pytest.approx(1.8)]

    async def test_exhaustion_returns_synthetic_rate_limited(
        self, runner_settings, token_provider, fake_sleep, recorded_sleeps, run_body
    ):
        # Arrange
        client, requests = scripted_client(httpx.Response(503))
        forwarder = RunnerForwarder(runner_settings, client, token_provider, sleep=fake_sleep)

        # Act
        result = await forwarder.forward("run", run_body, "sess-abcdefg")

        # Assert
        assert len(requests) == 12
        assert result.status_code == 429
        assert json.loads(result.body) == {"error": "rate_limited"}
        assert len(recorded_sleeps) == 11
        assert max(recorded_sleeps) == pytest.approx(12.0)

    async def test_retry_after_overrides_backoff(
        self, runner_settings, token_provider, fake_sleep, recorded_sleeps, run_body
    ):
        # Arrange
        client, requests = scripted_client(
            httpx.Response(429, headers={"Retry-After": "5"}),
            httpx.Response(200, json={"ok": True}),
        )
        forwarder = RunnerForwarder(runner_settings, client, token_provider, sleep=fake_sleep)

        # Act
        result = await forwarder.forward("compile", run_body, "sess-abcdefg")

        # Assert
        assert result.status_code == 200
        assert recorded_sleeps == [pytest.approx(5.0)]

    async def test_retry_after_replaces_grown_backoff(
        self, runner_settings, token_provider, fake_sleep, recorded_sleeps, run_body
    ):
        # Arrange: second transient outcome would back off 1.8 s
        client, requests = scripted_client(
            httpx.Response(503),
            httpx.Response(429, headers={"Retry-After": "5"}),
            httpx.Response(200, json={"ok": True}),
        )
        forwarder = RunnerForwarder(runner_settings, client, token_provider, sleep=fake_sleep)

        # Act
        result = await forwarder.forward("run", run_body, "sess-abcdefg")

        # Assert
        assert result.status_code == 200
        assert len(requests) == 3
        assert recorded_sleeps == [pytest.approx(1.0), pytest.approx(5.0)]

    async def test_non_positive_retry_after_falls_back_to_backoff(
        self, runner_settings, token_provider, fake_sleep, recorded_sleeps, run_body
    ):
        client, _ = scripted_client(
            httpx.Response(503, headers={"Retry-After": "0"}),
            httpx.Response(200, json={}),
        )
        forwarder = RunnerForwarder(runner_settings, client, token_provider, sleep=fake_sleep)

        await forwarder.forward("run", run_body, "sess-abcdefg")

        assert recorded_sleeps == [pytest.approx(1.0)]

    async def test_transport_error_is_retried(
        self, runner_settings, token_provider, fake_sleep, run_body
    ):
        client, requests = scripted_client(
            connect_error,
            httpx.Response(200, json={"ok": True}),
        )
        forwarder = RunnerForwarder(runner_settings, client, token_provider, sleep=fake_sleep)

        result = await forwarder.forward("run", run_body, "sess-abcdefg")

        assert result.status_code == 200
        assert len(requests) == 2

    async def test_client_error_is_returned_without_retry(
        self, runner_settings, token_provider, fake_sleep, recorded_sleeps, run_body
    ):
        client, requests = scripted_client(httpx.Response(401, text="unauthorized"))
        forwarder = RunnerForwarder(runner_settings, client, token_provider, sleep=fake_sleep)

        result = await forwarder.forward("run", run_body, "sess-abcdefg")

        assert result.status_code == 401
        assert result.text == "unauthorized"
        assert result.content_type == "text/plain"
        assert len(requests) == 1
        assert recorded_sleeps == []

    async def test_max_attempts_is_configurable(self, token_provider, fake_sleep, run_body):
        settings = RunnerSettings(pool_endpoint="https://runner.example.test", max_attempts=2)
        client, requests = scripted_client(httpx.Response(502))
        forwarder = RunnerForwarder(settings, client, token_provider, sleep=fake_sleep)

        result = await forwarder.forward("run", run_body, "sess-abcdefg")

        assert result.status_code == 429
        assert len(requests) == 2


class TestForwardRequest:
    """Shape of the request sent to the runner."""

    async def test_request_carries_auth_identifier_and_correlation(
        self, runner_settings, token_provider, run_body
    ):
        # Arrange
        client, requests = scripted_client(httpx.Response(200, json={}))
        forwarder = RunnerForwarder(runner_settings, client, token_provider)

        # Act
        with correlation_scope("abcdef012345"):
            await forwarder.forward("run", run_body, "sess-0f8fad5")

        # Assert
        request = requests[0]
        assert request.method == "POST"
        assert request.url.path == "/runner"
        assert request.url.host == "runner.example.test"
        assert request.url.params["identifier"] == "sess-0f8fad5"
        assert request.headers["Authorization"] == "Bearer token-abc"
        assert request.headers["Accept"] == "application/json"
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["x-corr"] == "abcdef012345"

    async def test_correlation_id_is_generated_when_absent(
        self, runner_settings, token_provider, run_body
    ):
        client, requests = scripted_client(httpx.Response(200, json={}))
        forwarder = RunnerForwarder(runner_settings, client, token_provider)

        await forwarder.forward("run", run_body, "sess-0f8fad5")

        corr = requests[0].headers["x-corr"]
        assert len(corr) == 12
        int(corr, 16)

    async def test_payload_is_whitelisted_and_action_is_operation(
        self, runner_settings, token_provider
    ):
        # Arrange
        body = json.dumps({
            "code": "print(1)",
            "languageVersion": "3.12",
            "candidateId": "c-1",
            "action": "something-else",
            "unexpected": {"nested": True},
        }).encode()
        client, requests = scripted_client(httpx.Response(200, json={}))
        forwarder = RunnerForwarder(runner_settings, client, token_provider)

        # Act
        await forwarder.forward("analyse", body, "sess-0f8fad5")

        # Assert
        sent = json.loads(requests[0].content)
        assert sent == {
            "action": "analyse",
            "code": "print(1)",
            "languageVersion": "3.12",
            "candidateId": "c-1",
            "candidateName": None,
            "candidateEmail": None,
            "assignmentId": None,
            "assignmentName": None,
        }

    async def test_token_is_requested_per_attempt(
        self, runner_settings, token_provider, fake_sleep, run_body
    ):
        client, _ = scripted_client(httpx.Response(503), httpx.Response(200, json={}))
        forwarder = RunnerForwarder(runner_settings, client, token_provider, sleep=fake_sleep)

        await forwarder.forward("run", run_body, "sess-0f8fad5")

        assert token_provider.get_token.await_count == 2


class TestForwardFailures:
    """Outcomes that never reach the runner."""

    @pytest.mark.parametrize("body", [b"not json", b"[1, 2, 3]", b'{"code": 42}'])
    async def test_unusable_body_returns_invalid_json(
        self, runner_settings, token_provider, body
    ):
        client, requests = scripted_client(httpx.Response(200, json={}))
        forwarder = RunnerForwarder(runner_settings, client, token_provider)

        result = await forwarder.forward("run", body, "sess-0f8fad5")

        assert result.status_code == 400
        assert json.loads(result.body) == {"error": "invalid_json"}
        assert requests == []

    async def test_token_failure_raises(self, runner_settings, token_provider, run_body):
        token_provider.get_token.side_effect = TokenAcquisitionError(
            "no credential", scope="scope"
        )
        client, requests = scripted_client(httpx.Response(200, json={}))
        forwarder = RunnerForwarder(runner_settings, client, token_provider)

        with pytest.raises(TokenAcquisitionError):
            await forwarder.forward("run", run_body, "sess-0f8fad5")
        assert requests == []

    async def test_missing_endpoint_raises_configuration_error(self, token_provider, run_body):
        client, _ = scripted_client(httpx.Response(200, json={}))
        forwarder = RunnerForwarder(RunnerSettings(pool_endpoint="  "), client, token_provider)

        with pytest.raises(ConfigurationError) as exc_info:
            await forwarder.forward("run", run_body, "sess-0f8fad5")
        assert exc_info.value.details["setting"] == "RUNNER_POOL_ENDPOINT"


class TestPing:
    """RunnerForwarder.ping() health probe."""

    async def test_ping_reports_status_and_snippet(self, runner_settings, token_provider):
        client, requests = scripted_client(httpx.Response(200, text="healthy"))
        forwarder = RunnerForwarder(runner_settings, client, token_provider)

        result = await forwarder.ping()

        assert result["url"] == "https://runner.example.test/healthstatus"
        assert result["status"] == 200
        assert result["bodySnippet"] == "healthy"
        assert "elapsedMs" in result
        assert requests[0].method == "GET"

    async def test_ping_without_endpoint(self, token_provider):
        client, _ = scripted_client(httpx.Response(200))
        forwarder = RunnerForwarder(RunnerSettings(pool_endpoint=""), client, token_provider)

        assert await forwarder.ping() == {"error": "RUNNER_POOL_ENDPOINT not set"}

    async def test_ping_failure_is_reported_not_raised(self, runner_settings, token_provider):
        client, _ = scripted_client(connect_error)
        forwarder = RunnerForwarder(runner_settings, client, token_provider)

        result = await forwarder.ping()

        assert result["error"] == "Runner ping failed"
        assert result["exception"].startswith("ConnectError")


def test_build_payload_ignores_unknown_fields():
    payload = build_payload(" run ", b'{"code": "x", "foo": 1}')

    assert payload is not None
    assert payload.action == "run"
    assert payload.code == "x"
    assert not hasattr(payload, "foo")
