from __future__ import annotations

from .commands import (
    CommandGroup,
    ConsumerGroupDeleteCommand,
    ConsumerGroupGetCommand,
    ConsumerGroupUpdateCommand,
    EventHubDeleteCommand,
    EventHubGetCommand,
    EventHubUpdateCommand,
    NamespaceGetCommand,
)

ROOT_GROUP_NAME = "eventhubs"


def build_command_tree() -> CommandGroup:
    """Assemble the ``eventhubs`` command tree."""
    eventhubs = CommandGroup(
        ROOT_GROUP_NAME,
        "Azure Event Hubs operations - Commands for managing Azure Event Hubs namespaces, "
        "event hubs, and consumer groups.",
    )

    namespace_group = eventhubs.add_subgroup(CommandGroup("namespace", "Event Hubs namespace operations"))
    namespace_group.add_command(NamespaceGetCommand())

    eventhub_group = eventhubs.add_subgroup(CommandGroup("eventhub", "Event hub operations"))
    eventhub_group.add_command(EventHubGetCommand())
    eventhub_group.add_command(EventHubUpdateCommand())
    eventhub_group.add_command(EventHubDeleteCommand())

    consumer_group_group = eventhubs.add_subgroup(
        CommandGroup("consumergroup", "Event Hubs consumer group operations")
    )
    consumer_group_group.add_command(ConsumerGroupGetCommand())
    consumer_group_group.add_command(ConsumerGroupUpdateCommand())
    consumer_group_group.add_command(ConsumerGroupDeleteCommand())

    return eventhubs
