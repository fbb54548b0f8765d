from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Sequence

import httpx

from .audit import JsonAuditLogger
from .auth import ARM_SCOPE, ArmAuthenticator
from .config import RetryPolicyOptions

logger = logging.getLogger(__name__)

RESOURCE_GRAPH_PATH = "/providers/Microsoft.ResourceGraph/resources"
RESOURCE_GRAPH_API_VERSION = "2021-03-01"
SUBSCRIPTIONS_PATH = "/subscriptions"
SUBSCRIPTIONS_API_VERSION = "2022-12-01"

RETRYABLE_STATUS = (429, 503, 504)


class ArmRestClient:
    """Azure Resource Manager REST client with throttling retries and audit logging.

    Used for the calls the Event Hubs SDK does not cover: Resource Graph
    queries and subscription lookup.
    """

    def __init__(
        self,
        authenticator: ArmAuthenticator,
        audit_logger: JsonAuditLogger,
        endpoint: str = "https://management.azure.com",
        tenant: Optional[str] = None,
        retry_policy: Optional[RetryPolicyOptions] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.authenticator = authenticator
        self.audit = audit_logger
        self.endpoint = endpoint.rstrip("/")
        self.tenant = tenant
        self.retry_policy = retry_policy or RetryPolicyOptions()
        self.session = httpx.Client(timeout=self.retry_policy.network_timeout_seconds, transport=transport)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "ArmRestClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _auth_header(self) -> Dict[str, str]:
        token = self.authenticator.acquire_token([ARM_SCOPE], tenant=self.tenant)
        return {"Authorization": f"Bearer {token}"}

    def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        headers = kwargs.pop("headers", {})
        headers.update(self._auth_header())
        max_attempts = self.retry_policy.max_retries + 1

        for attempt in range(1, max_attempts + 1):
            response = self.session.request(method, url, headers=headers, **kwargs)
            if response.status_code in RETRYABLE_STATUS and attempt < max_attempts:
                retry_after = self._get_retry_after_seconds(response)
                if retry_after is None:
                    retry_after = self.retry_policy.backoff(attempt)
                retry_after = min(retry_after, self.retry_policy.max_delay_seconds)
                self.audit.warning(
                    "arm_throttled",
                    status=response.status_code,
                    retry_after=retry_after,
                    attempt=attempt,
                    url=url,
                )
                time.sleep(retry_after)
                continue

            if response.status_code >= 400:
                self.audit.error(
                    "arm_request_failed",
                    status=response.status_code,
                    url=url,
                    body=response.text,
                )
                response.raise_for_status()

            self.audit.debug("arm_request_succeeded", status=response.status_code, url=url)
            return response

        raise RuntimeError("Maximum retry attempts exceeded for ARM request")

    def _get_retry_after_seconds(self, response: httpx.Response) -> Optional[float]:
        retry_after = response.headers.get("Retry-After")
        if retry_after is None:
            return None
        try:
            return float(retry_after)
        except ValueError:
            return None

    def get(self, path: str, api_version: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.endpoint}{path}"
        return self.request("GET", url, params={"api-version": api_version}, **kwargs)

    def post(self, path: str, api_version: str, json: Any, **kwargs: Any) -> httpx.Response:
        url = f"{self.endpoint}{path}"
        return self.request("POST", url, params={"api-version": api_version}, json=json, **kwargs)

    def query_resources(self, query: str, subscriptions: Sequence[str]) -> List[Dict[str, Any]]:
        """Run a Resource Graph query, following ``$skipToken`` pages."""
        rows: List[Dict[str, Any]] = []
        options: Dict[str, Any] = {"resultFormat": "objectArray"}

        while True:
            body = {"subscriptions": list(subscriptions), "query": query, "options": dict(options)}
            data = self.post(RESOURCE_GRAPH_PATH, RESOURCE_GRAPH_API_VERSION, json=body).json()
            rows.extend(data.get("data") or [])
            skip_token = data.get("$skipToken")
            if not skip_token:
                return rows
            options["$skipToken"] = skip_token

    def list_subscriptions(self) -> List[Dict[str, Any]]:
        subscriptions: List[Dict[str, Any]] = []
        response = self.get(SUBSCRIPTIONS_PATH, SUBSCRIPTIONS_API_VERSION)

        while True:
            data = response.json()
            subscriptions.extend(data.get("value") or [])
            next_link = data.get("nextLink")
            if not next_link:
                return subscriptions
            response = self.request("GET", next_link)
