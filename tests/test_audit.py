"""Tests for the JSON audit logger and in-memory store."""

import io
import json
import uuid

from eventhubs_control.audit import InMemoryAuditStore, JsonAuditLogger


def test_store_keeps_newest_first_and_is_bounded():
    store = InMemoryAuditStore(max_events=2)
    logger = JsonAuditLogger(name=f"audit.test.{uuid.uuid4().hex}", store=store, stream=io.StringIO())

    logger.info("first")
    logger.info("second")
    logger.info("third")

    assert [event.message for event in store.list()] == ["third", "second"]
    assert len(store) == 2


def test_writes_one_json_object_per_event():
    stream = io.StringIO()
    logger = JsonAuditLogger(name=f"audit.test.{uuid.uuid4().hex}", stream=stream)

    logger.warning("arm_throttled", status=429, command="eventhubs namespace get")

    payload = json.loads(stream.getvalue().strip())
    assert payload["level"] == "WARNING"
    assert payload["message"] == "arm_throttled"
    assert payload["status"] == 429
    assert payload["command"] == "eventhubs namespace get"


def test_event_splits_command_and_correlation_id():
    store = InMemoryAuditStore()
    logger = JsonAuditLogger(name=f"audit.test.{uuid.uuid4().hex}", store=store, stream=io.StringIO())

    logger.error("failed", command="eventhubs eventhub delete", correlation_id="c-1", error="boom")

    event = store.list()[0]
    assert event.command == "eventhubs eventhub delete"
    assert event.correlation_id == "c-1"
    assert event.extra == {"error": "boom"}


def test_events_below_level_are_not_stored():
    store = InMemoryAuditStore()
    logger = JsonAuditLogger(name=f"audit.test.{uuid.uuid4().hex}", level="INFO", store=store, stream=io.StringIO())

    logger.debug("acquired_arm_token")

    assert store.list() == []


def test_non_serializable_fields_are_stringified():
    stream = io.StringIO()
    logger = JsonAuditLogger(name=f"audit.test.{uuid.uuid4().hex}", stream=stream)

    logger.info("command_started", options=object())

    assert json.loads(stream.getvalue())["options"].startswith("<object object")


def test_reused_name_writes_to_latest_stream():
    name = f"audit.test.{uuid.uuid4().hex}"
    first_stream, second_stream = io.StringIO(), io.StringIO()
    JsonAuditLogger(name=name, stream=first_stream)
    logger = JsonAuditLogger(name=name, stream=second_stream)

    logger.info("command_completed")

    assert first_stream.getvalue() == ""
    assert json.loads(second_stream.getvalue())["message"] == "command_completed"
    assert len(logger.logger.handlers) == 1
