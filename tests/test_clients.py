"""Tests for the management client factory."""

from unittest.mock import MagicMock, patch

from azure.core.pipeline.policies import RetryMode

from eventhubs_control.clients import AzureClientFactory, sdk_retry_kwargs
from eventhubs_control.config import ControlConfig, RetryPolicyOptions


def test_sdk_retry_kwargs():
    kwargs = sdk_retry_kwargs(RetryPolicyOptions(max_retries=5, delay_seconds=1.5, mode="fixed"))

    assert kwargs["retry_total"] == 5
    assert kwargs["retry_backoff_factor"] == 1.5
    assert kwargs["retry_mode"] == RetryMode.Fixed
    assert kwargs["read_timeout"] == 100.0


def test_eventhub_client_uses_tenant_credential_and_endpoint(audit_logger):
    config = ControlConfig(management_endpoint="https://management.chinacloudapi.cn")
    authenticator = MagicMock()
    factory = AzureClientFactory(config, authenticator, audit_logger)

    with patch("eventhubs_control.clients.EventHubManagementClient") as client_cls:
        factory.eventhub_client("sub-1", tenant="tenant-x")

    authenticator.credential.assert_called_once_with("tenant-x")
    kwargs = client_cls.call_args.kwargs
    assert kwargs["credential"] is authenticator.credential.return_value
    assert kwargs["subscription_id"] == "sub-1"
    assert kwargs["base_url"] == "https://management.chinacloudapi.cn"
    assert kwargs["retry_total"] == config.retry.max_retries


def test_arm_client_prefers_override_policy(audit_logger):
    factory = AzureClientFactory(ControlConfig(), MagicMock(), audit_logger)
    override = RetryPolicyOptions(max_retries=0)

    with factory.arm_client("tenant-y", override) as arm:
        assert arm.retry_policy is override
        assert arm.tenant == "tenant-y"
