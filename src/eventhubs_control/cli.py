from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from .audit import JsonAuditLogger
from .commands import CommandGroup
from .config import LOG_LEVELS, load_config
from .registry import build_command_tree
from .runner import CommandRunner

_GLOBAL_DESTS = {"config", "log_level", "group", "command", "handler"}


def build_parser(tree: CommandGroup) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=tree.name, description=tree.description)
    parser.add_argument("--config", help="Path to configuration YAML (defaults to $EVENTHUBS_CONTROL_CONFIG)")
    parser.add_argument(
        "--log-level", type=str.upper, choices=LOG_LEVELS, help="Override the configured log level"
    )
    groups = parser.add_subparsers(dest="group", required=True)

    for group in tree.subgroups.values():
        group_parser = groups.add_parser(group.name, help=group.description, description=group.description)
        commands = group_parser.add_subparsers(dest="command", required=True)
        for command in group.commands.values():
            command_parser = commands.add_parser(
                command.name,
                help=command.title,
                description=command.description,
                formatter_class=argparse.RawDescriptionHelpFormatter,
            )
            command.register(command_parser)
            command_parser.set_defaults(handler=command)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    tree = build_command_tree()
    args = build_parser(tree).parse_args(argv)
    config = load_config(args.config)
    if args.log_level:
        config = config.model_copy(update={"log_level": args.log_level})

    # stdout carries the command result; audit events go to stderr.
    audit_logger = JsonAuditLogger(level=config.log_level, stream=sys.stderr)
    runner = CommandRunner(config, audit_logger=audit_logger)

    raw_options = {key: value for key, value in vars(args).items() if key not in _GLOBAL_DESTS}
    response = runner.run(args.handler, raw_options)

    print(json.dumps(response.to_json_dict(), indent=2))
    return 0 if response.ok else 1


if __name__ == "__main__":
    sys.exit(main())
