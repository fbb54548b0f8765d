from __future__ import annotations

import argparse
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional, Tuple

from .config import RetryPolicyOptions


@dataclass(frozen=True)
class OptionDefinition:
    """A named command option shared by the CLI and HTTP surfaces."""

    name: str
    description: str
    value_type: Callable[[Any], Any] = str
    required: bool = False
    choices: Optional[Tuple[str, ...]] = None

    @property
    def flag(self) -> str:
        return f"--{self.name}"

    @property
    def dest(self) -> str:
        return self.name.replace("-", "_")

    def as_required(self) -> "OptionDefinition":
        return replace(self, required=True)

    def as_optional(self) -> "OptionDefinition":
        return replace(self, required=False)

    def add_to(self, parser: argparse.ArgumentParser) -> None:
        # Values stay as strings here; commands coerce them so both surfaces report errors the same way.
        parser.add_argument(self.flag, dest=self.dest, default=None, metavar=self.dest.upper(), help=self.description)

    def coerce(self, value: Any) -> Any:
        if value is None or (isinstance(value, str) and value == ""):
            return None
        if isinstance(value, bool):
            raise ValueError(value)
        if self.value_type is int and isinstance(value, float) and not value.is_integer():
            raise ValueError(value)
        converted = self.value_type(value)
        if self.choices is not None and converted not in self.choices:
            raise ValueError(value)
        return converted


class CommonOptions:
    SUBSCRIPTION = OptionDefinition(
        "subscription",
        "The Azure subscription ID or name. Defaults to the configured subscription "
        "or the AZURE_SUBSCRIPTION_ID environment variable.",
        required=True,
    )
    TENANT = OptionDefinition("tenant", "The Microsoft Entra tenant ID or name.")
    RESOURCE_GROUP = OptionDefinition("resource-group", "The name of the Azure resource group.")
    RETRY_MAX_RETRIES = OptionDefinition("retry-max-retries", "Maximum retry attempts for failed operations.", int)
    RETRY_DELAY = OptionDefinition("retry-delay", "Initial delay in seconds between retry attempts.", float)
    RETRY_MAX_DELAY = OptionDefinition("retry-max-delay", "Maximum delay in seconds between retries.", float)
    RETRY_MODE = OptionDefinition(
        "retry-mode", "Retry strategy.", choices=("fixed", "exponential")
    )
    RETRY_NETWORK_TIMEOUT = OptionDefinition(
        "retry-network-timeout", "Network operation timeout in seconds.", float
    )

    RETRY = (RETRY_MAX_RETRIES, RETRY_DELAY, RETRY_MAX_DELAY, RETRY_MODE, RETRY_NETWORK_TIMEOUT)


class EventHubsOptions:
    NAMESPACE = OptionDefinition(
        "namespace",
        "The name of the Event Hubs namespace. Must be used with --resource-group option.",
    )
    EVENT_HUB = OptionDefinition(
        "eventhub",
        "The name of the event hub within the namespace. Must be used with --namespace and "
        "--resource-group options.",
    )
    CONSUMER_GROUP = OptionDefinition("consumer-group", "The name of the consumer group within the event hub.")
    PARTITION_COUNT = OptionDefinition(
        "partition-count",
        "The number of partitions for the event hub. Must be between 1 and 32 "
        "(or higher based on namespace tier).",
        int,
    )
    MESSAGE_RETENTION_IN_HOURS = OptionDefinition(
        "message-retention-in-hours",
        "The message retention time in hours. Minimum is 1 hour, maximum depends on the namespace tier.",
        int,
    )
    STATUS = OptionDefinition(
        "status",
        "The status of the event hub (Active, Disabled, SendDisabled, ...).",
    )
    USER_METADATA = OptionDefinition(
        "user-metadata",
        "User metadata for the consumer group, such as a description or owner.",
    )


@dataclass
class SubscriptionCommandOptions:
    subscription: Optional[str] = None
    tenant: Optional[str] = None
    retry_policy: Optional[RetryPolicyOptions] = None


@dataclass
class BaseEventHubsOptions(SubscriptionCommandOptions):
    resource_group: Optional[str] = None


@dataclass
class NamespaceGetOptions(BaseEventHubsOptions):
    namespace: Optional[str] = None


@dataclass
class EventHubGetOptions(BaseEventHubsOptions):
    namespace: Optional[str] = None
    eventhub: Optional[str] = None


@dataclass
class EventHubDeleteOptions(EventHubGetOptions):
    pass


@dataclass
class EventHubUpdateOptions(EventHubGetOptions):
    partition_count: Optional[int] = None
    message_retention_in_hours: Optional[int] = None
    status: Optional[str] = None


@dataclass
class ConsumerGroupGetOptions(EventHubGetOptions):
    consumer_group: Optional[str] = None


@dataclass
class ConsumerGroupDeleteOptions(ConsumerGroupGetOptions):
    pass


@dataclass
class ConsumerGroupUpdateOptions(ConsumerGroupGetOptions):
    user_metadata: Optional[str] = None
