from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_ENV_VAR = "EVENTHUBS_CONTROL_CONFIG"
SUBSCRIPTION_ENV_VAR = "AZURE_SUBSCRIPTION_ID"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class SecretRef(BaseModel):
    """Reference to a secret without storing it in the configuration file.

    Secrets are expected to arrive through environment variables injected at
    runtime. Inline values are accepted for local development only.
    """

    env: Optional[str] = Field(
        default=None, description="Environment variable name containing the secret"
    )
    value: Optional[str] = Field(
        default=None,
        description="Inline value (use only for local development; avoid in production)",
    )

    model_config = ConfigDict(extra="forbid")

    def resolve(self) -> str:
        if self.env:
            env_value = os.getenv(self.env)
            if env_value:
                return env_value
            raise ValueError(f"Environment variable {self.env} is not set")
        if self.value:
            return self.value
        raise ValueError("No secret reference provided for resolution")


class ClientSecretAuth(BaseModel):
    type: Literal["client_secret"]
    client_id: str
    client_secret: SecretRef
    tenant_id: Optional[str] = Field(
        default=None, description="Tenant of the app registration; falls back to default_tenant"
    )

    model_config = ConfigDict(extra="forbid")


class CertificateAuth(BaseModel):
    type: Literal["certificate"]
    client_id: str
    certificate_path: Path
    certificate_password: Optional[SecretRef] = None
    tenant_id: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("certificate_path")
    @classmethod
    def validate_cert_path(cls, value: Path) -> Path:
        if not str(value):
            raise ValueError("certificate_path is required for certificate auth")
        return value


class ManagedIdentityAuth(BaseModel):
    type: Literal["managed_identity"]
    client_id: Optional[str] = Field(
        default=None, description="Optional user-assigned managed identity client ID"
    )

    model_config = ConfigDict(extra="forbid")


class DefaultAuth(BaseModel):
    """Azure CLI, environment, workload and managed identity, tried in order."""

    type: Literal["default"] = "default"

    model_config = ConfigDict(extra="forbid")


AuthConfig = Union[ClientSecretAuth, CertificateAuth, ManagedIdentityAuth, DefaultAuth]


class RetryPolicyOptions(BaseModel):
    max_retries: int = Field(default=3, ge=0)
    delay_seconds: float = Field(default=0.8, ge=0)
    max_delay_seconds: float = Field(default=60.0, ge=0)
    mode: Literal["fixed", "exponential"] = "exponential"
    network_timeout_seconds: float = Field(default=100.0, gt=0)

    model_config = ConfigDict(extra="forbid")

    def backoff(self, attempt: int) -> float:
        """Delay before retry ``attempt`` (1-based)."""
        if self.mode == "fixed":
            return min(self.delay_seconds, self.max_delay_seconds)
        return min(self.delay_seconds * (2 ** (attempt - 1)), self.max_delay_seconds)


class ControlConfig(BaseModel):
    default_subscription: Optional[str] = None
    default_tenant: Optional[str] = None
    auth: AuthConfig = Field(default_factory=DefaultAuth, discriminator="type")
    retry: RetryPolicyOptions = Field(default_factory=RetryPolicyOptions)
    management_endpoint: str = Field(
        default="https://management.azure.com",
        description="ARM endpoint. Override for sovereign clouds.",
    )
    log_level: str = "INFO"
    audit_buffer_size: int = Field(default=1000, gt=0)

    model_config = ConfigDict(extra="forbid")

    @field_validator("management_endpoint")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level

    def subscription_default(self) -> Optional[str]:
        return self.default_subscription or os.getenv(SUBSCRIPTION_ENV_VAR) or None

    @classmethod
    def load(cls, path: Union[str, Path]) -> "ControlConfig":
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with config_path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}

        return cls(**raw)


def load_config(path: Optional[Union[str, Path]] = None) -> ControlConfig:
    """Load from ``path``, then ``$EVENTHUBS_CONTROL_CONFIG``, else defaults."""
    path = path or os.getenv(CONFIG_ENV_VAR)
    if path:
        return ControlConfig.load(path)
    return ControlConfig()
