"""Azure Event Hubs control-plane commands.

This package exposes a small command framework over the Event Hubs management
API: namespace lookup, event hub CRUD, and consumer group management, served
through a CLI and a JSON HTTP surface.
"""

__version__ = "0.1.0"
