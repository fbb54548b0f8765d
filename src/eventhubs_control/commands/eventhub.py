from __future__ import annotations

from typing import Any, List, Mapping, Optional

from ..options import (
    CommonOptions,
    EventHubDeleteOptions,
    EventHubGetOptions,
    EventHubsOptions,
    EventHubUpdateOptions,
    OptionDefinition,
)
from .base import CommandContext, SubscriptionCommand, ToolMetadata, Validator


def requires_namespace_and_resource_group(raw: Mapping[str, Any]) -> Optional[str]:
    if raw.get("eventhub") and (not raw.get("namespace") or not raw.get("resource_group")):
        return (
            f"{EventHubsOptions.EVENT_HUB.flag} option requires both {EventHubsOptions.NAMESPACE.flag} "
            f"and {CommonOptions.RESOURCE_GROUP.flag} options."
        )
    return None


class EventHubGetCommand(SubscriptionCommand):
    name = "get"
    title = "Get Event Hubs from Namespace"
    description = (
        "Get event hubs from an Azure Event Hubs namespace. This command can either:\n"
        "1. List all event hubs in a namespace\n"
        "2. Get a single event hub by name\n\n"
        "Partition count, retention settings, status and timestamps are returned for each event hub."
    )
    metadata = ToolMetadata(read_only=True, idempotent=True, open_world=True)
    options_type = EventHubGetOptions
    http_error_messages = {
        403: "Access denied. Please ensure you have sufficient permissions to access Event Hubs "
             "in the specified namespace and resource group.",
        404: "The specified event hub, namespace, resource group, or subscription was not found. "
             "Please verify all names and identifiers.",
    }

    def options(self) -> List[OptionDefinition]:
        return [
            *super().options(),
            CommonOptions.RESOURCE_GROUP.as_required(),
            EventHubsOptions.NAMESPACE.as_required(),
            EventHubsOptions.EVENT_HUB.as_optional(),
        ]

    def validators(self) -> List[Validator]:
        return [requires_namespace_and_resource_group]

    def execute(self, context: CommandContext, options: EventHubGetOptions) -> None:
        if options.eventhub:
            event_hub = context.service.get_event_hub(
                options.eventhub,
                options.namespace,
                options.resource_group,
                options.subscription,
                tenant=options.tenant,
                retry_policy=options.retry_policy,
            )
            event_hubs = [event_hub] if event_hub is not None else []
        else:
            event_hubs = context.service.list_event_hubs(
                options.namespace,
                options.resource_group,
                options.subscription,
                tenant=options.tenant,
                retry_policy=options.retry_policy,
            )
        context.response.results = {"eventHubs": [item.to_json_dict() for item in event_hubs]}


class EventHubUpdateCommand(SubscriptionCommand):
    name = "create-or-update"
    title = "Create or Update Event Hub"
    description = (
        "Create a new event hub or update an existing one in an Azure Event Hubs namespace. "
        "Settings that are not provided keep their current values on an existing event hub."
    )
    metadata = ToolMetadata(read_only=False, idempotent=True, destructive=False)
    options_type = EventHubUpdateOptions
    http_error_messages = {
        403: "Access denied. Please ensure you have sufficient permissions to create or update "
             "Event Hubs in the specified namespace and resource group.",
        404: "The specified namespace, resource group, or subscription was not found. "
             "Please verify all names and identifiers.",
        409: "Conflict occurred. The event hub may be in a transitional state or the requested "
             "settings conflict with the namespace tier. Please try again later.",
    }

    def options(self) -> List[OptionDefinition]:
        return [
            *super().options(),
            CommonOptions.RESOURCE_GROUP.as_required(),
            EventHubsOptions.NAMESPACE.as_required(),
            EventHubsOptions.EVENT_HUB.as_required(),
            EventHubsOptions.PARTITION_COUNT,
            EventHubsOptions.MESSAGE_RETENTION_IN_HOURS,
            EventHubsOptions.STATUS,
        ]

    def execute(self, context: CommandContext, options: EventHubUpdateOptions) -> None:
        event_hub = context.service.create_or_update_event_hub(
            options.eventhub,
            options.namespace,
            options.resource_group,
            options.subscription,
            partition_count=options.partition_count,
            message_retention_in_hours=options.message_retention_in_hours,
            status=options.status,
            tenant=options.tenant,
            retry_policy=options.retry_policy,
        )
        context.response.results = {"eventHub": event_hub.to_json_dict()}


class EventHubDeleteCommand(SubscriptionCommand):
    name = "delete"
    title = "Delete Event Hub"
    description = (
        "Delete an event hub from an Azure Event Hubs namespace. This permanently removes the "
        "event hub, its messages and its consumer groups.\n\n"
        "The operation is idempotent: if the event hub does not exist the command succeeds with "
        "deleted = false. A successful deletion returns deleted = true."
    )
    metadata = ToolMetadata(read_only=False, idempotent=True, destructive=True)
    options_type = EventHubDeleteOptions
    http_error_messages = {
        403: "Access denied. Please ensure you have sufficient permissions to delete Event Hubs "
             "in the specified namespace and resource group.",
        404: "The specified namespace, resource group, or subscription was not found. Note: If the "
             "event hub doesn't exist, the operation succeeds with deleted = false.",
        409: "Conflict occurred. The event hub may be in use or in a transitional state. "
             "Please try again later.",
    }

    def options(self) -> List[OptionDefinition]:
        return [
            *super().options(),
            CommonOptions.RESOURCE_GROUP.as_required(),
            EventHubsOptions.NAMESPACE.as_required(),
            EventHubsOptions.EVENT_HUB.as_required(),
        ]

    def execute(self, context: CommandContext, options: EventHubDeleteOptions) -> None:
        deleted = context.service.delete_event_hub(
            options.eventhub,
            options.namespace,
            options.resource_group,
            options.subscription,
            tenant=options.tenant,
            retry_policy=options.retry_policy,
        )
        context.response.results = {"deleted": deleted, "eventHubName": options.eventhub}
