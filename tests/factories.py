"""Test data builders for Event Hubs resources.

SDK resources are modelled with SimpleNamespace objects carrying the
attributes the projections read.
"""

from datetime import datetime, timezone
from types import SimpleNamespace

from azure.core.exceptions import HttpResponseError

SUBSCRIPTION_ID = "00000000-0000-0000-0000-000000000001"
RESOURCE_GROUP = "rg-streaming"
NAMESPACE = "ehns-orders"
EVENT_HUB = "orders"
CONSUMER_GROUP = "billing"

NAMESPACE_ID = (
    f"/subscriptions/{SUBSCRIPTION_ID}/resourceGroups/{RESOURCE_GROUP}"
    f"/providers/Microsoft.EventHub/namespaces/{NAMESPACE}"
)
EVENT_HUB_ID = f"{NAMESPACE_ID}/eventhubs/{EVENT_HUB}"
CONSUMER_GROUP_ID = f"{EVENT_HUB_ID}/consumergroups/{CONSUMER_GROUP}"

CREATED = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
UPDATED = datetime(2024, 3, 2, 8, 30, tzinfo=timezone.utc)


def http_error(status: int, message: str = "request failed", cls=HttpResponseError):
    error = cls(message=message)
    error.status_code = status
    return error


def make_sdk_event_hub(name=EVENT_HUB, **overrides):
    values = dict(
        id=f"{NAMESPACE_ID}/eventhubs/{name}",
        name=name,
        location="westeurope",
        status="Active",
        partition_count=4,
        partition_ids=["0", "1", "2", "3"],
        message_retention_in_days=None,
        retention_description=SimpleNamespace(retention_time_in_hours=72, cleanup_policy="Delete"),
        created_at=CREATED,
        updated_at=UPDATED,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def make_sdk_consumer_group(name=CONSUMER_GROUP, **overrides):
    values = dict(
        id=f"{EVENT_HUB_ID}/consumergroups/{name}",
        name=name,
        location="westeurope",
        user_metadata="owned by billing",
        created_at=CREATED,
        updated_at=UPDATED,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def make_graph_namespace(name=NAMESPACE, **overrides):
    row = {
        "id": f"/subscriptions/{SUBSCRIPTION_ID}/resourceGroups/{RESOURCE_GROUP}"
              f"/providers/Microsoft.EventHub/namespaces/{name}",
        "name": name,
        "type": "microsoft.eventhub/namespaces",
        "location": "westeurope",
        "resourceGroup": RESOURCE_GROUP,
        "sku": {"name": "Standard", "tier": "Standard", "capacity": 2},
        "properties": {
            "status": "Active",
            "provisioningState": "Succeeded",
            "createdAt": "2024-03-01T12:00:00Z",
            "updatedAt": "2024-03-02T08:30:00Z",
            "serviceBusEndpoint": f"https://{name}.servicebus.windows.net:443/",
            "metricId": f"{SUBSCRIPTION_ID}:{name}",
            "isAutoInflateEnabled": False,
            "maximumThroughputUnits": 0,
            "kafkaEnabled": True,
            "zoneRedundant": True,
        },
        "tags": {"env": "prod"},
    }
    row.update(overrides)
    return row
