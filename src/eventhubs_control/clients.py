from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
from azure.core.pipeline.policies import RetryMode
from azure.mgmt.eventhub import EventHubManagementClient

from .arm_client import ArmRestClient
from .audit import JsonAuditLogger
from .auth import ArmAuthenticator
from .config import ControlConfig, RetryPolicyOptions


class AzureClientFactory:
    """Creates per-request management clients bound to a tenant and retry policy."""

    def __init__(
        self,
        config: ControlConfig,
        authenticator: ArmAuthenticator,
        audit_logger: JsonAuditLogger,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.config = config
        self.authenticator = authenticator
        self.audit = audit_logger
        self.transport = transport

    def retry_policy(self, override: Optional[RetryPolicyOptions] = None) -> RetryPolicyOptions:
        return override or self.config.retry

    def arm_client(
        self,
        tenant: Optional[str] = None,
        retry_policy: Optional[RetryPolicyOptions] = None,
    ) -> ArmRestClient:
        return ArmRestClient(
            authenticator=self.authenticator,
            audit_logger=self.audit,
            endpoint=self.config.management_endpoint,
            tenant=tenant,
            retry_policy=self.retry_policy(retry_policy),
            transport=self.transport,
        )

    def eventhub_client(
        self,
        subscription_id: str,
        tenant: Optional[str] = None,
        retry_policy: Optional[RetryPolicyOptions] = None,
    ) -> EventHubManagementClient:
        return EventHubManagementClient(
            credential=self.authenticator.credential(tenant),
            subscription_id=subscription_id,
            base_url=self.config.management_endpoint,
            **sdk_retry_kwargs(self.retry_policy(retry_policy)),
        )


def sdk_retry_kwargs(policy: RetryPolicyOptions) -> Dict[str, Any]:
    """Translate a retry policy into azure-core pipeline keyword arguments."""
    return {
        "retry_total": policy.max_retries,
        "retry_backoff_factor": policy.delay_seconds,
        "retry_backoff_max": policy.max_delay_seconds,
        "retry_mode": RetryMode.Fixed if policy.mode == "fixed" else RetryMode.Exponential,
        "connection_timeout": policy.network_timeout_seconds,
        "read_timeout": policy.network_timeout_seconds,
    }
