"""Event Hubs commands and the framework they run on."""

from .base import BaseCommand, CommandContext, CommandGroup, CommandResponse, SubscriptionCommand, ToolMetadata
from .consumergroup import ConsumerGroupDeleteCommand, ConsumerGroupGetCommand, ConsumerGroupUpdateCommand
from .eventhub import EventHubDeleteCommand, EventHubGetCommand, EventHubUpdateCommand
from .namespace import NamespaceGetCommand

__all__ = [
    "BaseCommand",
    "CommandContext",
    "CommandGroup",
    "CommandResponse",
    "ConsumerGroupDeleteCommand",
    "ConsumerGroupGetCommand",
    "ConsumerGroupUpdateCommand",
    "EventHubDeleteCommand",
    "EventHubGetCommand",
    "EventHubUpdateCommand",
    "NamespaceGetCommand",
    "SubscriptionCommand",
    "ToolMetadata",
]
