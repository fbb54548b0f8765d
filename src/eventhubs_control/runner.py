from __future__ import annotations

import time
import uuid
from typing import Any, Mapping, Optional

from .audit import JsonAuditLogger
from .auth import ArmAuthenticator
from .clients import AzureClientFactory
from .commands import BaseCommand, CommandContext, CommandResponse
from .config import ControlConfig
from .service import EventHubsService


class CommandRunner:
    """Runs commands against one configuration, with correlation ids and audit events."""

    def __init__(
        self,
        config: ControlConfig,
        audit_logger: Optional[JsonAuditLogger] = None,
        service: Optional[EventHubsService] = None,
    ):
        self.config = config
        self.audit = audit_logger or JsonAuditLogger(level=config.log_level)
        if service is None:
            authenticator = ArmAuthenticator(config.auth, self.audit, default_tenant=config.default_tenant)
            service = EventHubsService(AzureClientFactory(config, authenticator, self.audit), self.audit)
        self.service = service

    def context(self, correlation_id: Optional[str] = None) -> CommandContext:
        return CommandContext(
            service=self.service,
            config=self.config,
            audit=self.audit,
            correlation_id=correlation_id or str(uuid.uuid4()),
        )

    def run(
        self,
        command: BaseCommand,
        raw_options: Mapping[str, Any],
        correlation_id: Optional[str] = None,
    ) -> CommandResponse:
        context = self.context(correlation_id)
        self.audit.info("command_started", command=command.path, correlation_id=context.correlation_id)
        started = time.monotonic()

        response = command.run(context, raw_options)
        response.duration = int((time.monotonic() - started) * 1000)

        self.audit.info(
            "command_completed",
            command=command.path,
            correlation_id=context.correlation_id,
            status=response.status,
            duration_ms=response.duration,
        )
        return response
