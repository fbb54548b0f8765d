from __future__ import annotations

from typing import List

from ..options import CommonOptions, EventHubsOptions, NamespaceGetOptions, OptionDefinition
from .base import CommandContext, SubscriptionCommand, ToolMetadata


class NamespaceGetCommand(SubscriptionCommand):
    name = "get"
    title = "Get Event Hubs Namespaces"
    description = (
        "Get Event Hubs namespaces from Azure. This command can either:\n"
        "1. List all Event Hubs namespaces in a resource group, or in the subscription when "
        "--resource-group is omitted\n"
        "2. Get a single namespace by name (using --namespace, optionally with --resource-group)\n\n"
        "When retrieving a single namespace, detailed information including SKU, settings, and "
        "metadata is returned. When listing namespaces, basic information (name, id, resource group) "
        "is returned."
    )
    metadata = ToolMetadata(read_only=True, idempotent=True, destructive=False)
    options_type = NamespaceGetOptions
    http_error_messages = {
        403: "Access denied. Please ensure you have sufficient permissions to get Event Hubs "
             "namespaces in the specified resource group.",
        404: "The specified resource group or subscription was not found. Please verify the "
             "resource group name and subscription.",
    }

    def options(self) -> List[OptionDefinition]:
        return [
            *super().options(),
            CommonOptions.RESOURCE_GROUP.as_optional(),
            EventHubsOptions.NAMESPACE.as_optional(),
        ]

    def execute(self, context: CommandContext, options: NamespaceGetOptions) -> None:
        if options.namespace:
            namespace = context.service.get_namespace(
                options.namespace,
                options.resource_group,
                options.subscription,
                tenant=options.tenant,
                retry_policy=options.retry_policy,
            )
            context.response.results = {"namespace": namespace.to_json_dict()}
            return

        namespaces = context.service.get_namespaces(
            options.resource_group,
            options.subscription,
            tenant=options.tenant,
            retry_policy=options.retry_policy,
        )
        context.response.results = {"namespaces": [item.info().to_json_dict() for item in namespaces]}
