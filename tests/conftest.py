"""Shared fixtures for the eventhubs_control test suite."""

import io
import uuid
from unittest.mock import MagicMock

import pytest

from eventhubs_control.audit import InMemoryAuditStore, JsonAuditLogger
from eventhubs_control.config import ControlConfig
from eventhubs_control.runner import CommandRunner
from eventhubs_control.service import EventHubsService

from factories import SUBSCRIPTION_ID


@pytest.fixture
def audit_store():
    return InMemoryAuditStore(max_events=200)


@pytest.fixture
def audit_logger(audit_store):
    return JsonAuditLogger(
        name=f"eventhubs_control.test.{uuid.uuid4().hex}",
        level="DEBUG",
        store=audit_store,
        stream=io.StringIO(),
    )


@pytest.fixture
def config(monkeypatch):
    monkeypatch.delenv("AZURE_SUBSCRIPTION_ID", raising=False)
    return ControlConfig(default_subscription=SUBSCRIPTION_ID)


@pytest.fixture
def service():
    return MagicMock(spec=EventHubsService)


@pytest.fixture
def runner(config, audit_logger, service):
    return CommandRunner(config, audit_logger=audit_logger, service=service)


@pytest.fixture
def sdk_client():
    client = MagicMock()
    client.__enter__.return_value = client
    return client


@pytest.fixture
def arm():
    return MagicMock()


@pytest.fixture
def clients(sdk_client, arm):
    factory = MagicMock()
    factory.eventhub_client.return_value = sdk_client
    factory.arm_client.return_value.__enter__.return_value = arm
    return factory


@pytest.fixture
def real_service(clients, audit_logger):
    return EventHubsService(clients, audit_logger)
