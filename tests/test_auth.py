"""Tests for credential construction in eventhubs_control.auth."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from eventhubs_control.auth import ARM_SCOPE, ArmAuthenticator
from eventhubs_control.config import (
    CertificateAuth,
    ClientSecretAuth,
    DefaultAuth,
    ManagedIdentityAuth,
    SecretRef,
)


def test_client_secret_credential(audit_logger):
    auth = ClientSecretAuth(type="client_secret", client_id="app", client_secret=SecretRef(value="pw"))

    with patch("eventhubs_control.auth.ClientSecretCredential") as credential_cls:
        ArmAuthenticator(auth, audit_logger, default_tenant="tenant-a").credential()

    credential_cls.assert_called_once_with(tenant_id="tenant-a", client_id="app", client_secret="pw")


def test_client_secret_requires_tenant(audit_logger):
    auth = ClientSecretAuth(type="client_secret", client_id="app", client_secret=SecretRef(value="pw"))

    with pytest.raises(ValueError, match="tenant is required"):
        ArmAuthenticator(auth, audit_logger).credential()


def test_certificate_credential(audit_logger):
    auth = CertificateAuth(
        type="certificate",
        client_id="app",
        certificate_path=Path("/etc/certs/app.pem"),
        tenant_id="tenant-b",
    )

    with patch("eventhubs_control.auth.CertificateCredential") as credential_cls:
        ArmAuthenticator(auth, audit_logger).credential()

    credential_cls.assert_called_once_with(
        tenant_id="tenant-b", client_id="app", certificate_path="/etc/certs/app.pem", password=None
    )


def test_managed_identity_credential(audit_logger):
    with patch("eventhubs_control.auth.ManagedIdentityCredential") as credential_cls:
        ArmAuthenticator(ManagedIdentityAuth(type="managed_identity", client_id="mi"), audit_logger).credential()

    credential_cls.assert_called_once_with(client_id="mi")


def test_default_credential_is_cached_per_tenant(audit_logger):
    with patch("eventhubs_control.auth.DefaultAzureCredential") as default_cls, \
            patch("eventhubs_control.auth.AzureCliCredential") as cli_cls, \
            patch("eventhubs_control.auth.EnvironmentCredential"), \
            patch("eventhubs_control.auth.ChainedTokenCredential") as chained_cls:
        authenticator = ArmAuthenticator(DefaultAuth(), audit_logger)
        first = authenticator.credential()
        second = authenticator.credential()
        pinned = authenticator.credential("tenant-c")

    assert first is second
    default_cls.assert_called_once()
    cli_cls.assert_called_once_with(tenant_id="tenant-c")
    assert pinned is chained_cls.return_value


def test_acquire_token_audits(audit_logger, audit_store):
    credential = MagicMock()
    credential.get_token.return_value.token = "abc"
    authenticator = ArmAuthenticator(DefaultAuth(), audit_logger)

    with patch.object(authenticator, "credential", return_value=credential):
        assert authenticator.acquire_token() == "abc"

    credential.get_token.assert_called_once_with(ARM_SCOPE)
    assert audit_store.list()[0].message == "acquired_arm_token"


def test_explicit_tenant_overrides_configured_tenant(audit_logger):
    auth = ClientSecretAuth(
        type="client_secret", client_id="app", client_secret=SecretRef(value="pw"), tenant_id="tenant-config"
    )

    with patch("eventhubs_control.auth.ClientSecretCredential") as credential_cls:
        authenticator = ArmAuthenticator(auth, audit_logger, default_tenant="tenant-default")
        authenticator.credential()
        authenticator.credential("tenant-cli")

    assert [c.kwargs["tenant_id"] for c in credential_cls.call_args_list] == ["tenant-config", "tenant-cli"]
    assert authenticator.resolve_tenant() == "tenant-config"
