"""Tests for the httpx-based ARM REST client."""

import json
from unittest.mock import MagicMock, patch

import httpx
import pytest

from eventhubs_control.arm_client import ArmRestClient
from eventhubs_control.config import RetryPolicyOptions


def _client(handler, audit_logger, **kwargs):
    authenticator = MagicMock()
    authenticator.acquire_token.return_value = "token-123"
    return ArmRestClient(
        authenticator=authenticator,
        audit_logger=audit_logger,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class TestQueryResources:
    def test_posts_query_with_bearer_token(self, audit_logger):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": [{"name": "a"}]})

        client = _client(handler, audit_logger)
        rows = client.query_resources("Resources | take 1", ["sub-1"])

        assert rows == [{"name": "a"}]
        request = seen[0]
        assert request.method == "POST"
        assert request.url.path == "/providers/Microsoft.ResourceGraph/resources"
        assert request.url.params["api-version"] == "2021-03-01"
        assert request.headers["Authorization"] == "Bearer token-123"
        body = json.loads(request.content)
        assert body["subscriptions"] == ["sub-1"]
        assert body["query"] == "Resources | take 1"

    def test_follows_skip_token(self, audit_logger):
        bodies = []

        def handler(request):
            body = json.loads(request.content)
            bodies.append(body)
            if "$skipToken" not in body["options"]:
                return httpx.Response(200, json={"data": [{"name": "a"}], "$skipToken": "next"})
            return httpx.Response(200, json={"data": [{"name": "b"}]})

        rows = _client(handler, audit_logger).query_resources("Resources", ["sub-1"])

        assert [row["name"] for row in rows] == ["a", "b"]
        assert bodies[1]["options"]["$skipToken"] == "next"


class TestRetries:
    def test_retries_throttled_requests_honouring_retry_after(self, audit_logger, audit_store):
        responses = iter([
            httpx.Response(429, headers={"Retry-After": "2"}),
            httpx.Response(200, json={"value": []}),
        ])

        client = _client(lambda request: next(responses), audit_logger)
        with patch("eventhubs_control.arm_client.time.sleep") as sleep:
            assert client.list_subscriptions() == []

        sleep.assert_called_once_with(2.0)
        assert any(event.message == "arm_throttled" for event in audit_store.list())

    def test_uses_backoff_without_retry_after(self, audit_logger):
        responses = iter([httpx.Response(503), httpx.Response(503), httpx.Response(200, json={"value": []})])
        policy = RetryPolicyOptions(max_retries=3, delay_seconds=0.5, mode="exponential")

        client = _client(lambda request: next(responses), audit_logger, retry_policy=policy)
        with patch("eventhubs_control.arm_client.time.sleep") as sleep:
            client.list_subscriptions()

        assert [call.args[0] for call in sleep.call_args_list] == [0.5, 1.0]

    def test_raises_after_exhausting_retries(self, audit_logger):
        policy = RetryPolicyOptions(max_retries=1, delay_seconds=0)
        client = _client(lambda request: httpx.Response(429), audit_logger, retry_policy=policy)

        with patch("eventhubs_control.arm_client.time.sleep"):
            with pytest.raises(httpx.HTTPStatusError) as excinfo:
                client.list_subscriptions()

        assert excinfo.value.response.status_code == 429

    def test_client_errors_are_not_retried(self, audit_logger, audit_store):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(403, json={"error": {"code": "AuthorizationFailed"}})

        with pytest.raises(httpx.HTTPStatusError):
            _client(handler, audit_logger).list_subscriptions()

        assert len(calls) == 1
        assert any(event.message == "arm_request_failed" for event in audit_store.list())


def test_list_subscriptions_follows_next_link(audit_logger):
    def handler(request):
        if request.url.path == "/subscriptions" and "page" not in request.url.params:
            return httpx.Response(
                200,
                json={
                    "value": [{"subscriptionId": "1", "displayName": "Dev"}],
                    "nextLink": "https://management.azure.com/subscriptions?page=2",
                },
            )
        return httpx.Response(200, json={"value": [{"subscriptionId": "2", "displayName": "Prod"}]})

    subscriptions = _client(handler, audit_logger).list_subscriptions()

    assert [item["displayName"] for item in subscriptions] == ["Dev", "Prod"]
