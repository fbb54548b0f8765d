from __future__ import annotations

import argparse
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Type

from pydantic import BaseModel, ConfigDict

from ..audit import JsonAuditLogger
from ..config import ControlConfig, RetryPolicyOptions
from ..errors import InvalidArgumentError, NamespaceNotFoundError, http_status_of, is_authentication_error
from ..options import CommonOptions, OptionDefinition, SubscriptionCommandOptions
from ..service import EventHubsService

AUTHENTICATION_FAILED_MESSAGE = (
    "Authentication failed. Please ensure your Azure credentials are properly configured and have not expired."
)

NAMESPACE_NOT_FOUND_MESSAGE = (
    "Event Hubs namespace not found. Verify the namespace name, resource group, and that you have access."
)

INVALID_ARGUMENT_MESSAGES: Dict[str, str] = {
    "event_hub_name": "Invalid event hub name. Please provide a valid event hub name.",
    "namespace_name": "Invalid namespace name. Please provide a valid Event Hubs namespace name.",
    "consumer_group_name": "Invalid consumer group name. Please provide a valid consumer group name.",
    "resource_group": "Invalid resource group name. Please provide a valid resource group name.",
    "subscription": "Invalid subscription. Please provide a valid subscription ID or name.",
}

Validator = Callable[[Mapping[str, Any]], Optional[str]]


class CommandResponse(BaseModel):
    status: int = 200
    message: str = "Success"
    results: Optional[Any] = None
    duration: int = 0

    model_config = ConfigDict(validate_assignment=True)

    @property
    def ok(self) -> bool:
        return self.status < 400

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


@dataclass(frozen=True)
class ToolMetadata:
    destructive: bool = False
    idempotent: bool = True
    read_only: bool = True
    open_world: bool = False
    secret: bool = False
    local_required: bool = False


@dataclass
class CommandContext:
    service: EventHubsService
    config: ControlConfig
    audit: JsonAuditLogger
    correlation_id: str
    response: CommandResponse = field(default_factory=CommandResponse)


class BaseCommand:
    """A single executable command.

    ``run`` is the template: defaults, validation, binding, then ``execute``.
    Subclasses declare their options and override ``execute`` and, where the
    messages differ, ``get_status_code`` / ``get_error_message``.
    """

    name: str = ""
    title: str = ""
    description: str = ""
    metadata: ToolMetadata = ToolMetadata()
    options_type: Type[Any] = SubscriptionCommandOptions
    # Status-specific messages for service errors; auth failures are handled first.
    http_error_messages: Dict[int, str] = {}
    path: str = ""

    def options(self) -> List[OptionDefinition]:
        return []

    def validators(self) -> List[Validator]:
        return []

    def register(self, parser: argparse.ArgumentParser) -> None:
        for option in self.options():
            option.add_to(parser)

    def apply_defaults(self, context: CommandContext, raw: Dict[str, Any]) -> Dict[str, Any]:
        return raw

    def validate(self, raw: Dict[str, Any]) -> List[str]:
        """Coerce ``raw`` in place and return validation errors."""
        errors: List[str] = []
        missing: List[str] = []
        for option in self.options():
            try:
                raw[option.dest] = option.coerce(raw.get(option.dest))
            except (TypeError, ValueError):
                errors.append(f"Invalid value for {option.flag}: '{raw.get(option.dest)}'")
                continue
            if option.required and raw[option.dest] is None:
                missing.append(option.flag)
        if missing:
            errors.insert(0, f"Missing Required options: {', '.join(missing)}")
        for validator in self.validators():
            error = validator(raw)
            if error:
                errors.append(error)
        return errors

    def bind_options(self, context: CommandContext, raw: Mapping[str, Any]) -> Any:
        names = {f.name for f in fields(self.options_type)}
        return self.options_type(**{key: value for key, value in raw.items() if key in names})

    def execute(self, context: CommandContext, options: Any) -> None:
        raise NotImplementedError

    def run(self, context: CommandContext, raw: Mapping[str, Any]) -> CommandResponse:
        values = self.apply_defaults(context, dict(raw))
        errors = self.validate(values)
        if errors:
            context.response.status = 400
            context.response.message = ", ".join(errors)
            return context.response

        try:
            options = self.bind_options(context, values)
            self.execute(context, options)
        except Exception as exc:  # noqa: BLE001
            self.log_failure(context, values, exc)
            self.handle_exception(context, exc)
        return context.response

    def log_failure(self, context: CommandContext, values: Mapping[str, Any], exc: Exception) -> None:
        context.audit.error(
            f"{self.path.replace(' ', '_') or self.name}_failed",
            command=self.path,
            correlation_id=context.correlation_id,
            error=str(exc),
            error_type=type(exc).__name__,
            options={key: value for key, value in values.items() if value is not None},
        )

    def handle_exception(self, context: CommandContext, exc: Exception) -> None:
        context.response.status = self.get_status_code(exc)
        context.response.message = self.get_error_message(exc)
        context.response.results = {"message": str(exc), "type": type(exc).__name__}

    def get_status_code(self, exc: Exception) -> int:
        if is_authentication_error(exc):
            return 401
        status = http_status_of(exc)
        if status is not None:
            return status
        if isinstance(exc, NamespaceNotFoundError):
            return 404
        if isinstance(exc, ValueError):
            return 400
        return 500

    def get_error_message(self, exc: Exception) -> str:
        if is_authentication_error(exc):
            return AUTHENTICATION_FAILED_MESSAGE
        status = http_status_of(exc)
        if status in self.http_error_messages:
            return self.http_error_messages[status]
        if isinstance(exc, NamespaceNotFoundError):
            return NAMESPACE_NOT_FOUND_MESSAGE
        if isinstance(exc, InvalidArgumentError) and exc.param_name in INVALID_ARGUMENT_MESSAGES:
            return INVALID_ARGUMENT_MESSAGES[exc.param_name]
        return str(exc)


class SubscriptionCommand(BaseCommand):
    """Command scoped to a subscription, with tenant and retry options."""

    def options(self) -> List[OptionDefinition]:
        return [CommonOptions.SUBSCRIPTION, CommonOptions.TENANT, *CommonOptions.RETRY]

    def apply_defaults(self, context: CommandContext, raw: Dict[str, Any]) -> Dict[str, Any]:
        if not raw.get("subscription"):
            raw["subscription"] = context.config.subscription_default()
        if not raw.get("tenant"):
            raw["tenant"] = context.config.default_tenant
        return raw

    def bind_options(self, context: CommandContext, raw: Mapping[str, Any]) -> Any:
        options = super().bind_options(context, raw)
        options.retry_policy = self.bind_retry_policy(context.config.retry, raw)
        return options

    @staticmethod
    def bind_retry_policy(base: RetryPolicyOptions, raw: Mapping[str, Any]) -> Optional[RetryPolicyOptions]:
        """Overlay ``--retry-*`` values on the configured policy; ``None`` when none were given."""
        overrides = {
            "max_retries": raw.get("retry_max_retries"),
            "delay_seconds": raw.get("retry_delay"),
            "max_delay_seconds": raw.get("retry_max_delay"),
            "mode": raw.get("retry_mode"),
            "network_timeout_seconds": raw.get("retry_network_timeout"),
        }
        overrides = {key: value for key, value in overrides.items() if value is not None}
        if not overrides:
            return None
        return RetryPolicyOptions(**{**base.model_dump(), **overrides})


class CommandGroup:
    def __init__(self, name: str, description: str):
        self.name = name
        self.description = description
        self.subgroups: Dict[str, CommandGroup] = {}
        self.commands: Dict[str, BaseCommand] = {}
        self.path = name

    def add_subgroup(self, group: "CommandGroup") -> "CommandGroup":
        group.path = f"{self.path} {group.name}"
        self.subgroups[group.name] = group
        return group

    def add_command(self, command: BaseCommand) -> BaseCommand:
        command.path = f"{self.path} {command.name}"
        self.commands[command.name] = command
        return command

    def find(self, *names: str) -> Optional[BaseCommand]:
        if not names:
            return None
        head, *rest = names
        if not rest:
            return self.commands.get(head)
        group = self.subgroups.get(head)
        return group.find(*rest) if group else None

    def walk(self) -> Iterator[BaseCommand]:
        yield from self.commands.values()
        for group in self.subgroups.values():
            yield from group.walk()
