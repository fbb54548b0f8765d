from __future__ import annotations

import os
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from .audit import InMemoryAuditStore, JsonAuditLogger
from .config import ControlConfig, load_config
from .registry import build_command_tree
from .runner import CommandRunner


def _parse_limit(value: Optional[str], default: int = 100) -> int:
    try:
        return int(value) if value else default
    except ValueError:
        return default


def create_app(
    config_path: Optional[str | os.PathLike[str]] = None,
    config: Optional[ControlConfig] = None,
    runner: Optional[CommandRunner] = None,
    audit_store: Optional[InMemoryAuditStore] = None,
) -> Flask:
    config = config or load_config(config_path)
    audit_store = audit_store or InMemoryAuditStore(max_events=config.audit_buffer_size)
    if runner is None:
        audit_logger = JsonAuditLogger(level=config.log_level, store=audit_store)
        runner = CommandRunner(config, audit_logger=audit_logger)
    tree = build_command_tree()

    app = Flask(__name__)
    app.config["COMMAND_RUNNER"] = runner
    app.config["AUDIT_STORE"] = audit_store

    @app.get("/commands")
    def list_commands():
        payload = [
            {
                "path": command.path,
                "title": command.title,
                "description": command.description,
                "metadata": {
                    "destructive": command.metadata.destructive,
                    "idempotent": command.metadata.idempotent,
                    "readOnly": command.metadata.read_only,
                    "openWorld": command.metadata.open_world,
                    "secret": command.metadata.secret,
                    "localRequired": command.metadata.local_required,
                },
                "options": [
                    {"name": option.flag, "description": option.description, "required": option.required}
                    for option in command.options()
                ],
            }
            for command in tree.walk()
        ]
        return jsonify({"commands": payload, "count": len(payload)})

    @app.post("/commands/<group>/<name>")
    def run_command(group: str, name: str):
        command = tree.find(group, name)
        if command is None:
            return jsonify({"status": 404, "message": f"Unknown command: {group} {name}"}), 404

        body = request.get_json(silent=True)
        if body is not None and not isinstance(body, dict):
            return jsonify({"status": 400, "message": "Request body must be a JSON object"}), 400

        raw_options: Dict[str, Any] = {key.replace("-", "_"): value for key, value in (body or {}).items()}
        response = runner.run(command, raw_options, correlation_id=request.headers.get("X-Correlation-Id"))
        return jsonify(response.to_json_dict()), response.status

    @app.get("/audit.json")
    def audit_json():
        limit = _parse_limit(request.args.get("limit"))
        events = audit_store.list(limit=limit)
        payload = [event.to_dict() for event in events]
        return jsonify({"events": payload, "count": len(payload)})

    return app
