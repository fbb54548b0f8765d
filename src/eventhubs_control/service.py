from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from azure.core.exceptions import ResourceNotFoundError
from azure.mgmt.eventhub.models import ConsumerGroup as SdkConsumerGroup
from azure.mgmt.eventhub.models import EntityStatus, Eventhub, RetentionDescription

from .audit import JsonAuditLogger
from .clients import AzureClientFactory
from .config import RetryPolicyOptions
from .errors import InvalidArgumentError, NamespaceNotFoundError
from .models import (
    ConsumerGroup,
    EventHub,
    Namespace,
    consumer_group_from_sdk,
    event_hub_from_sdk,
    namespace_from_graph,
)

logger = logging.getLogger(__name__)

NAMESPACE_RESOURCE_TYPE = "Microsoft.EventHub/namespaces"
ENTITY_STATUSES = tuple(status.value for status in EntityStatus)


def escape_kql_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


def _validate_required(**params: Optional[str]) -> None:
    for name, value in params.items():
        if value is None or not str(value).strip():
            raise InvalidArgumentError(name)


def _is_subscription_id(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


class EventHubsService:
    """Event Hubs control-plane operations.

    Namespaces are read through Azure Resource Graph; event hubs and consumer
    groups go through the ``azure-mgmt-eventhub`` SDK. Each call builds its
    own clients so tenant and retry settings apply per command.
    """

    def __init__(self, clients: AzureClientFactory, audit_logger: JsonAuditLogger):
        self.clients = clients
        self.audit = audit_logger

    # -- subscriptions -----------------------------------------------------

    def resolve_subscription(
        self,
        subscription: str,
        tenant: Optional[str] = None,
        retry_policy: Optional[RetryPolicyOptions] = None,
    ) -> str:
        _validate_required(subscription=subscription)
        subscription = subscription.strip()
        if _is_subscription_id(subscription):
            return subscription

        with self.clients.arm_client(tenant, retry_policy) as arm:
            for item in arm.list_subscriptions():
                if (item.get("displayName") or "").lower() == subscription.lower():
                    return item["subscriptionId"]

        raise InvalidArgumentError("subscription", f"Subscription '{subscription}' was not found.")

    # -- namespaces --------------------------------------------------------

    def _query_namespaces(
        self,
        subscription: str,
        resource_group: Optional[str],
        namespace_name: Optional[str],
        tenant: Optional[str],
        retry_policy: Optional[RetryPolicyOptions],
    ) -> List[Namespace]:
        subscription_id = self.resolve_subscription(subscription, tenant, retry_policy)
        clauses = [f"Resources | where type =~ '{NAMESPACE_RESOURCE_TYPE}'"]
        if resource_group:
            clauses.append(f"where resourceGroup =~ '{escape_kql_string(resource_group)}'")
        if namespace_name:
            clauses.append(f"where name =~ '{escape_kql_string(namespace_name)}'")
        query = " | ".join(clauses)
        logger.debug("Resource Graph query: %s", query)

        with self.clients.arm_client(tenant, retry_policy) as arm:
            rows = arm.query_resources(query, [subscription_id])
        return [namespace_from_graph(row) for row in rows]

    def get_namespaces(
        self,
        resource_group: Optional[str],
        subscription: str,
        tenant: Optional[str] = None,
        retry_policy: Optional[RetryPolicyOptions] = None,
    ) -> List[Namespace]:
        _validate_required(subscription=subscription)
        return self._query_namespaces(subscription, resource_group, None, tenant, retry_policy)

    def get_namespace(
        self,
        namespace_name: str,
        resource_group: Optional[str],
        subscription: str,
        tenant: Optional[str] = None,
        retry_policy: Optional[RetryPolicyOptions] = None,
    ) -> Namespace:
        _validate_required(namespace_name=namespace_name, subscription=subscription)
        try:
            namespaces = self._query_namespaces(
                subscription, resource_group, namespace_name, tenant, retry_policy
            )
            if not namespaces:
                raise NamespaceNotFoundError(namespace_name, subscription)
            return namespaces[0]
        except Exception as exc:
            self.audit.error(
                "namespace_get_failed",
                namespace=namespace_name,
                subscription=subscription,
                error=str(exc),
            )
            raise

    # -- event hubs --------------------------------------------------------

    def list_event_hubs(
        self,
        namespace_name: str,
        resource_group: str,
        subscription: str,
        tenant: Optional[str] = None,
        retry_policy: Optional[RetryPolicyOptions] = None,
    ) -> List[EventHub]:
        _validate_required(namespace_name=namespace_name, resource_group=resource_group, subscription=subscription)
        with self._eventhub_client(subscription, tenant, retry_policy) as client:
            return [
                event_hub_from_sdk(item, namespace_name, resource_group)
                for item in client.event_hubs.list_by_namespace(resource_group, namespace_name)
            ]

    def get_event_hub(
        self,
        event_hub_name: str,
        namespace_name: str,
        resource_group: str,
        subscription: str,
        tenant: Optional[str] = None,
        retry_policy: Optional[RetryPolicyOptions] = None,
    ) -> Optional[EventHub]:
        _validate_required(
            event_hub_name=event_hub_name,
            namespace_name=namespace_name,
            resource_group=resource_group,
            subscription=subscription,
        )
        with self._eventhub_client(subscription, tenant, retry_policy) as client:
            client.namespaces.get(resource_group, namespace_name)
            try:
                item = client.event_hubs.get(resource_group, namespace_name, event_hub_name)
            except ResourceNotFoundError:
                return None
        return event_hub_from_sdk(item, namespace_name, resource_group)

    def create_or_update_event_hub(
        self,
        event_hub_name: str,
        namespace_name: str,
        resource_group: str,
        subscription: str,
        partition_count: Optional[int] = None,
        message_retention_in_hours: Optional[int] = None,
        status: Optional[str] = None,
        tenant: Optional[str] = None,
        retry_policy: Optional[RetryPolicyOptions] = None,
    ) -> EventHub:
        _validate_required(
            event_hub_name=event_hub_name,
            namespace_name=namespace_name,
            resource_group=resource_group,
            subscription=subscription,
        )
        if partition_count is not None and partition_count < 1:
            raise InvalidArgumentError("partition_count", "Partition count must be at least 1.")
        if message_retention_in_hours is not None and message_retention_in_hours < 1:
            raise InvalidArgumentError(
                "message_retention_in_hours", "Message retention must be at least 1 hour."
            )
        status = _normalize_status(status)

        with self._eventhub_client(subscription, tenant, retry_policy) as client:
            client.namespaces.get(resource_group, namespace_name)
            try:
                parameters = client.event_hubs.get(resource_group, namespace_name, event_hub_name)
                created = False
            except ResourceNotFoundError:
                parameters = Eventhub()
                created = True

            if partition_count is not None:
                parameters.partition_count = partition_count
            if message_retention_in_hours is not None:
                retention = parameters.retention_description or RetentionDescription(cleanup_policy="Delete")
                retention.retention_time_in_hours = message_retention_in_hours
                parameters.retention_description = retention
                parameters.message_retention_in_days = None
            if status is not None:
                parameters.status = status

            result = client.event_hubs.create_or_update(resource_group, namespace_name, event_hub_name, parameters)
        self.audit.info(
            "event_hub_created" if created else "event_hub_updated",
            event_hub=event_hub_name,
            namespace=namespace_name,
            resource_group=resource_group,
        )
        return event_hub_from_sdk(result, namespace_name, resource_group)

    def delete_event_hub(
        self,
        event_hub_name: str,
        namespace_name: str,
        resource_group: str,
        subscription: str,
        tenant: Optional[str] = None,
        retry_policy: Optional[RetryPolicyOptions] = None,
    ) -> bool:
        """Delete an event hub; ``False`` when it was already absent."""
        _validate_required(
            event_hub_name=event_hub_name,
            namespace_name=namespace_name,
            resource_group=resource_group,
            subscription=subscription,
        )
        with self._eventhub_client(subscription, tenant, retry_policy) as client:
            client.namespaces.get(resource_group, namespace_name)
            try:
                client.event_hubs.get(resource_group, namespace_name, event_hub_name)
            except ResourceNotFoundError:
                self.audit.info("event_hub_already_absent", event_hub=event_hub_name, namespace=namespace_name)
                return False

            client.event_hubs.delete(resource_group, namespace_name, event_hub_name)
        self.audit.info("event_hub_deleted", event_hub=event_hub_name, namespace=namespace_name)
        return True

    # -- consumer groups ---------------------------------------------------

    def list_consumer_groups(
        self,
        event_hub_name: str,
        namespace_name: str,
        resource_group: str,
        subscription: str,
        tenant: Optional[str] = None,
        retry_policy: Optional[RetryPolicyOptions] = None,
    ) -> List[ConsumerGroup]:
        _validate_required(
            event_hub_name=event_hub_name,
            namespace_name=namespace_name,
            resource_group=resource_group,
            subscription=subscription,
        )
        with self._eventhub_client(subscription, tenant, retry_policy) as client:
            return [
                consumer_group_from_sdk(item, namespace_name, event_hub_name, resource_group)
                for item in client.consumer_groups.list_by_event_hub(resource_group, namespace_name, event_hub_name)
            ]

    def get_consumer_group(
        self,
        consumer_group_name: str,
        event_hub_name: str,
        namespace_name: str,
        resource_group: str,
        subscription: str,
        tenant: Optional[str] = None,
        retry_policy: Optional[RetryPolicyOptions] = None,
    ) -> Optional[ConsumerGroup]:
        _validate_required(
            consumer_group_name=consumer_group_name,
            event_hub_name=event_hub_name,
            namespace_name=namespace_name,
            resource_group=resource_group,
            subscription=subscription,
        )
        with self._eventhub_client(subscription, tenant, retry_policy) as client:
            client.event_hubs.get(resource_group, namespace_name, event_hub_name)
            try:
                item = client.consumer_groups.get(resource_group, namespace_name, event_hub_name, consumer_group_name)
            except ResourceNotFoundError:
                return None
        return consumer_group_from_sdk(item, namespace_name, event_hub_name, resource_group)

    def update_consumer_group(
        self,
        consumer_group_name: str,
        event_hub_name: str,
        namespace_name: str,
        resource_group: str,
        subscription: str,
        user_metadata: Optional[str] = None,
        tenant: Optional[str] = None,
        retry_policy: Optional[RetryPolicyOptions] = None,
    ) -> ConsumerGroup:
        _validate_required(
            consumer_group_name=consumer_group_name,
            event_hub_name=event_hub_name,
            namespace_name=namespace_name,
            resource_group=resource_group,
            subscription=subscription,
        )
        parameters = SdkConsumerGroup()
        if user_metadata:
            parameters.user_metadata = user_metadata

        with self._eventhub_client(subscription, tenant, retry_policy) as client:
            client.event_hubs.get(resource_group, namespace_name, event_hub_name)
            result = client.consumer_groups.create_or_update(
                resource_group, namespace_name, event_hub_name, consumer_group_name, parameters
            )
        self.audit.info(
            "consumer_group_updated",
            consumer_group=consumer_group_name,
            event_hub=event_hub_name,
            namespace=namespace_name,
        )
        return consumer_group_from_sdk(result, namespace_name, event_hub_name, resource_group)

    def delete_consumer_group(
        self,
        consumer_group_name: str,
        event_hub_name: str,
        namespace_name: str,
        resource_group: str,
        subscription: str,
        tenant: Optional[str] = None,
        retry_policy: Optional[RetryPolicyOptions] = None,
    ) -> bool:
        """Delete a consumer group; ``False`` when it was already absent."""
        _validate_required(
            consumer_group_name=consumer_group_name,
            event_hub_name=event_hub_name,
            namespace_name=namespace_name,
            resource_group=resource_group,
            subscription=subscription,
        )
        with self._eventhub_client(subscription, tenant, retry_policy) as client:
            client.event_hubs.get(resource_group, namespace_name, event_hub_name)
            try:
                client.consumer_groups.get(resource_group, namespace_name, event_hub_name, consumer_group_name)
            except ResourceNotFoundError:
                self.audit.info(
                    "consumer_group_already_absent",
                    consumer_group=consumer_group_name,
                    event_hub=event_hub_name,
                )
                return False

            client.consumer_groups.delete(resource_group, namespace_name, event_hub_name, consumer_group_name)
        self.audit.info("consumer_group_deleted", consumer_group=consumer_group_name, event_hub=event_hub_name)
        return True

    def _eventhub_client(
        self,
        subscription: str,
        tenant: Optional[str],
        retry_policy: Optional[RetryPolicyOptions],
    ):
        subscription_id = self.resolve_subscription(subscription, tenant, retry_policy)
        return self.clients.eventhub_client(subscription_id, tenant, retry_policy)


def _normalize_status(status: Optional[str]) -> Optional[str]:
    if status is None or not status.strip():
        return None
    for known in ENTITY_STATUSES:
        if known.lower() == status.strip().lower():
            return known
    raise InvalidArgumentError(
        "status",
        f"Invalid status '{status}'. Expected one of: {', '.join(ENTITY_STATUSES)}.",
    )
