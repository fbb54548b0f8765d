from __future__ import annotations

import logging
from threading import Lock
from typing import Dict, Iterable, Optional

from azure.core.credentials import TokenCredential
from azure.identity import (
    AzureCliCredential,
    CertificateCredential,
    ChainedTokenCredential,
    ClientSecretCredential,
    DefaultAzureCredential,
    EnvironmentCredential,
    ManagedIdentityCredential,
)

from .audit import JsonAuditLogger
from .config import AuthConfig, CertificateAuth, ClientSecretAuth, DefaultAuth, ManagedIdentityAuth

logger = logging.getLogger(__name__)

ARM_SCOPE = "https://management.azure.com/.default"


class ArmAuthenticator:
    """Builds azure-identity credentials for the management plane.

    One credential is kept per tenant so repeated commands in the same
    process reuse the identity library's token cache.
    """

    def __init__(
        self,
        auth_config: AuthConfig,
        audit_logger: JsonAuditLogger,
        default_tenant: Optional[str] = None,
    ):
        self.auth_config = auth_config
        self.audit = audit_logger
        self.default_tenant = default_tenant
        self._credentials: Dict[Optional[str], TokenCredential] = {}
        self._lock = Lock()

    def credential(self, tenant: Optional[str] = None) -> TokenCredential:
        tenant = self.resolve_tenant(tenant)
        with self._lock:
            credential = self._credentials.get(tenant)
            if credential is None:
                credential = self._build_credential(tenant)
                self._credentials[tenant] = credential
        return credential

    def acquire_token(self, scopes: Iterable[str] = (ARM_SCOPE,), tenant: Optional[str] = None) -> str:
        result = self.credential(tenant).get_token(*scopes)
        self.audit.debug(
            "acquired_arm_token",
            tenant=self.resolve_tenant(tenant),
            auth_type=self.auth_config.type,
        )
        return result.token

    def resolve_tenant(self, tenant: Optional[str] = None) -> Optional[str]:
        """Explicit tenant first, then the service principal's tenant, then the default."""
        return tenant or getattr(self.auth_config, "tenant_id", None) or self.default_tenant

    def _build_credential(self, tenant: Optional[str]) -> TokenCredential:
        auth_config = self.auth_config

        if isinstance(auth_config, ClientSecretAuth):
            return ClientSecretCredential(
                tenant_id=self._require_tenant(tenant),
                client_id=auth_config.client_id,
                client_secret=auth_config.client_secret.resolve(),
            )

        if isinstance(auth_config, CertificateAuth):
            password = None
            if auth_config.certificate_password:
                password = auth_config.certificate_password.resolve()
            return CertificateCredential(
                tenant_id=self._require_tenant(tenant),
                client_id=auth_config.client_id,
                certificate_path=str(auth_config.certificate_path),
                password=password,
            )

        if isinstance(auth_config, ManagedIdentityAuth):
            return ManagedIdentityCredential(client_id=auth_config.client_id)

        if isinstance(auth_config, DefaultAuth):
            if tenant:
                logger.debug("Using tenant-pinned credential chain for %s", tenant)
                return ChainedTokenCredential(
                    EnvironmentCredential(),
                    AzureCliCredential(tenant_id=tenant),
                )
            return DefaultAzureCredential(exclude_interactive_browser_credential=True)

        raise ValueError("Unsupported authentication configuration")

    @staticmethod
    def _require_tenant(tenant: Optional[str]) -> str:
        if not tenant:
            raise ValueError("A tenant is required for service principal authentication")
        return tenant
