from __future__ import annotations

from typing import List

from ..options import (
    CommonOptions,
    ConsumerGroupDeleteOptions,
    ConsumerGroupGetOptions,
    ConsumerGroupUpdateOptions,
    EventHubsOptions,
    OptionDefinition,
)
from .base import CommandContext, SubscriptionCommand, ToolMetadata


def _event_hub_scope() -> List[OptionDefinition]:
    return [
        CommonOptions.RESOURCE_GROUP.as_required(),
        EventHubsOptions.NAMESPACE.as_required(),
        EventHubsOptions.EVENT_HUB.as_required(),
    ]


class ConsumerGroupGetCommand(SubscriptionCommand):
    name = "get"
    title = "Get Event Hubs Consumer Groups"
    description = (
        "List the consumer groups of an event hub, or get a single consumer group with "
        "--consumer-group. A single lookup of a missing consumer group returns an empty list."
    )
    metadata = ToolMetadata(read_only=True, idempotent=True)
    options_type = ConsumerGroupGetOptions
    http_error_messages = {
        403: "Access denied. Please ensure you have sufficient permissions to read consumer groups "
             "in the specified event hub.",
        404: "The specified event hub, namespace, resource group, or subscription was not found. "
             "Please verify all names and identifiers.",
    }

    def options(self) -> List[OptionDefinition]:
        return [*super().options(), *_event_hub_scope(), EventHubsOptions.CONSUMER_GROUP.as_optional()]

    def execute(self, context: CommandContext, options: ConsumerGroupGetOptions) -> None:
        if options.consumer_group:
            consumer_group = context.service.get_consumer_group(
                options.consumer_group,
                options.eventhub,
                options.namespace,
                options.resource_group,
                options.subscription,
                tenant=options.tenant,
                retry_policy=options.retry_policy,
            )
            consumer_groups = [consumer_group] if consumer_group is not None else []
        else:
            consumer_groups = context.service.list_consumer_groups(
                options.eventhub,
                options.namespace,
                options.resource_group,
                options.subscription,
                tenant=options.tenant,
                retry_policy=options.retry_policy,
            )
        context.response.results = {"consumerGroups": [item.to_json_dict() for item in consumer_groups]}


class ConsumerGroupUpdateCommand(SubscriptionCommand):
    name = "update"
    title = "Create or Update Event Hubs Consumer Group"
    description = (
        "Create a consumer group in an event hub, or update the user metadata of an existing one."
    )
    metadata = ToolMetadata(read_only=False, idempotent=True, destructive=False)
    options_type = ConsumerGroupUpdateOptions
    http_error_messages = {
        403: "Access denied. Please ensure you have sufficient permissions to manage consumer groups "
             "in the specified event hub.",
        404: "The specified event hub, namespace, resource group, or subscription was not found. "
             "Please verify all names and identifiers.",
        409: "Conflict occurred. The consumer group may be in a transitional state. Please try again later.",
    }

    def options(self) -> List[OptionDefinition]:
        return [
            *super().options(),
            *_event_hub_scope(),
            EventHubsOptions.CONSUMER_GROUP.as_required(),
            EventHubsOptions.USER_METADATA,
        ]

    def execute(self, context: CommandContext, options: ConsumerGroupUpdateOptions) -> None:
        consumer_group = context.service.update_consumer_group(
            options.consumer_group,
            options.eventhub,
            options.namespace,
            options.resource_group,
            options.subscription,
            user_metadata=options.user_metadata,
            tenant=options.tenant,
            retry_policy=options.retry_policy,
        )
        context.response.results = {"consumerGroup": consumer_group.to_json_dict()}


class ConsumerGroupDeleteCommand(SubscriptionCommand):
    name = "delete"
    title = "Delete Event Hubs Consumer Group"
    description = (
        "Delete a consumer group from an event hub. The operation is idempotent: if the consumer "
        "group does not exist the command succeeds with deleted = false."
    )
    metadata = ToolMetadata(read_only=False, idempotent=True, destructive=True)
    options_type = ConsumerGroupDeleteOptions
    http_error_messages = {
        403: "Access denied. Please ensure you have sufficient permissions to delete consumer groups "
             "in the specified event hub.",
        404: "The specified event hub, namespace, resource group, or subscription was not found. Note: If "
             "the consumer group doesn't exist, the operation succeeds with deleted = false.",
        409: "Conflict occurred. The consumer group may be in use or in a transitional state. "
             "Please try again later.",
    }

    def options(self) -> List[OptionDefinition]:
        return [*super().options(), *_event_hub_scope(), EventHubsOptions.CONSUMER_GROUP.as_required()]

    def execute(self, context: CommandContext, options: ConsumerGroupDeleteOptions) -> None:
        deleted = context.service.delete_consumer_group(
            options.consumer_group,
            options.eventhub,
            options.namespace,
            options.resource_group,
            options.subscription,
            tenant=options.tenant,
            retry_policy=options.retry_policy,
        )
        context.response.results = {"deleted": deleted, "consumerGroupName": options.consumer_group}
