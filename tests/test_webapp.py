"""Tests for the Flask JSON surface."""

import pytest

from eventhubs_control.webapp import create_app

from factories import CONSUMER_GROUP, EVENT_HUB, NAMESPACE, RESOURCE_GROUP


@pytest.fixture
def client(config, runner, audit_store):
    app = create_app(config=config, runner=runner, audit_store=audit_store)
    app.testing = True
    return app.test_client()


def test_lists_commands_with_metadata(client):
    response = client.get("/commands")

    payload = response.get_json()
    assert response.status_code == 200
    assert payload["count"] == 7
    delete = next(item for item in payload["commands"] if item["path"] == "eventhubs eventhub delete")
    assert delete["metadata"]["destructive"] is True
    assert any(option["name"] == "--eventhub" and option["required"] for option in delete["options"])


def test_runs_command_with_dashed_keys(client, service):
    service.delete_consumer_group.return_value = True

    response = client.post(
        "/commands/consumergroup/delete",
        json={
            "resource-group": RESOURCE_GROUP,
            "namespace": NAMESPACE,
            "eventhub": EVENT_HUB,
            "consumer_group": CONSUMER_GROUP,
        },
    )

    assert response.status_code == 200
    assert response.get_json()["results"] == {"deleted": True, "consumerGroupName": CONSUMER_GROUP}


def test_validation_errors_use_response_status(client):
    response = client.post("/commands/eventhub/get", json={"eventhub": EVENT_HUB})

    assert response.status_code == 400
    assert "--eventhub option requires" in response.get_json()["message"]


def test_unknown_command_is_404(client):
    response = client.post("/commands/eventhub/purge", json={})

    assert response.status_code == 404


def test_non_object_body_is_rejected(client):
    response = client.post("/commands/namespace/get", json=["not", "an", "object"])

    assert response.status_code == 400


def test_correlation_id_header_reaches_audit(client, service, audit_store):
    service.get_namespaces.return_value = []

    client.post("/commands/namespace/get", json={}, headers={"X-Correlation-Id": "corr-42"})
    audit = client.get("/audit.json?limit=5").get_json()

    assert audit["count"] >= 2
    assert {event["correlation_id"] for event in audit["events"]} == {"corr-42"}
