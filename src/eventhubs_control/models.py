from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from azure.mgmt.core.tools import parse_resource_id
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .errors import ResourceParseError


class ResultModel(BaseModel):
    """Base for command results: camelCase keys, null fields dropped."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class NamespaceSku(ResultModel):
    name: Optional[str] = None
    tier: Optional[str] = None
    capacity: Optional[int] = None


class NamespaceInfo(ResultModel):
    name: str
    id: str
    resource_group: str


class Namespace(NamespaceInfo):
    location: Optional[str] = None
    sku: Optional[NamespaceSku] = None
    status: Optional[str] = None
    provisioning_state: Optional[str] = None
    creation_time: Optional[datetime] = None
    updated_time: Optional[datetime] = None
    service_bus_endpoint: Optional[str] = None
    metric_id: Optional[str] = None
    is_auto_inflate_enabled: Optional[bool] = None
    maximum_throughput_units: Optional[int] = None
    kafka_enabled: Optional[bool] = None
    zone_redundant: Optional[bool] = None
    tags: Optional[Dict[str, str]] = None

    def info(self) -> NamespaceInfo:
        return NamespaceInfo(name=self.name, id=self.id, resource_group=self.resource_group)


class EventHub(ResultModel):
    name: str
    id: str
    resource_group: str
    namespace: str
    location: Optional[str] = None
    status: Optional[str] = None
    partition_count: Optional[int] = None
    partition_ids: Optional[List[str]] = None
    message_retention_in_hours: Optional[int] = None
    cleanup_policy: Optional[str] = None
    creation_time: Optional[datetime] = None
    updated_time: Optional[datetime] = None


class ConsumerGroup(ResultModel):
    name: str
    id: str
    resource_group: str
    namespace: str
    event_hub: str
    location: Optional[str] = None
    user_metadata: Optional[str] = None
    creation_time: Optional[datetime] = None
    updated_time: Optional[datetime] = None


def resource_group_of(resource_id: Optional[str]) -> Optional[str]:
    if not resource_id:
        return None
    return parse_resource_id(resource_id).get("resource_group")


def namespace_from_graph(item: Mapping[str, Any]) -> Namespace:
    """Project a Resource Graph row for ``Microsoft.EventHub/namespaces``."""
    resource_id = item.get("id")
    if not resource_id:
        raise ResourceParseError("Resource ID is missing")

    resource_group = item.get("resourceGroup") or resource_group_of(resource_id)
    if not resource_group:
        raise ResourceParseError("Resource ID is missing resource group")

    name = item.get("name")
    if not name:
        raise ResourceParseError("Resource Name is missing")

    sku = item.get("sku") or {}
    properties = item.get("properties") or {}
    return Namespace(
        name=name,
        id=resource_id,
        resource_group=resource_group,
        location=item.get("location"),
        sku=NamespaceSku(
            name=sku.get("name"),
            tier=sku.get("tier"),
            capacity=sku.get("capacity"),
        ) if sku else None,
        status=properties.get("status"),
        provisioning_state=properties.get("provisioningState"),
        creation_time=properties.get("createdAt"),
        updated_time=properties.get("updatedAt"),
        service_bus_endpoint=properties.get("serviceBusEndpoint"),
        metric_id=properties.get("metricId"),
        is_auto_inflate_enabled=properties.get("isAutoInflateEnabled"),
        maximum_throughput_units=properties.get("maximumThroughputUnits"),
        kafka_enabled=properties.get("kafkaEnabled"),
        zone_redundant=properties.get("zoneRedundant"),
        tags=item.get("tags") or None,
    )


def _enum_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return getattr(value, "value", value)


def retention_hours(event_hub: Any) -> Optional[int]:
    retention = getattr(event_hub, "retention_description", None)
    if retention is not None and retention.retention_time_in_hours is not None:
        return retention.retention_time_in_hours
    days = getattr(event_hub, "message_retention_in_days", None)
    if days is not None:
        return days * 24
    return None


def event_hub_from_sdk(event_hub: Any, namespace_name: str, resource_group: str) -> EventHub:
    """Project an ``azure.mgmt.eventhub.models.Eventhub``."""
    if not event_hub.id:
        raise ResourceParseError("Event hub resource ID is missing")

    retention = getattr(event_hub, "retention_description", None)
    return EventHub(
        name=event_hub.name,
        id=event_hub.id,
        resource_group=resource_group_of(event_hub.id) or resource_group,
        namespace=namespace_name,
        location=event_hub.location,
        status=_enum_text(event_hub.status),
        partition_count=event_hub.partition_count,
        partition_ids=list(event_hub.partition_ids) if event_hub.partition_ids else None,
        message_retention_in_hours=retention_hours(event_hub),
        cleanup_policy=_enum_text(retention.cleanup_policy) if retention is not None else None,
        creation_time=event_hub.created_at,
        updated_time=event_hub.updated_at,
    )


def consumer_group_from_sdk(
    consumer_group: Any,
    namespace_name: str,
    event_hub_name: str,
    resource_group: str,
) -> ConsumerGroup:
    """Project an ``azure.mgmt.eventhub.models.ConsumerGroup``."""
    if not consumer_group.id:
        raise ResourceParseError("Consumer group resource ID is missing")

    return ConsumerGroup(
        name=consumer_group.name,
        id=consumer_group.id,
        resource_group=resource_group_of(consumer_group.id) or resource_group,
        namespace=namespace_name,
        event_hub=event_hub_name,
        location=consumer_group.location,
        user_metadata=consumer_group.user_metadata,
        creation_time=consumer_group.created_at,
        updated_time=consumer_group.updated_at,
    )
