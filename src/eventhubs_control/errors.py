from __future__ import annotations

from typing import Optional

import httpx
from azure.core.exceptions import ClientAuthenticationError, HttpResponseError


class InvalidArgumentError(ValueError):
    """A required parameter was missing or malformed.

    ``param_name`` identifies the offending parameter so commands can
    produce a parameter-specific message.
    """

    def __init__(self, param_name: str, message: Optional[str] = None):
        self.param_name = param_name
        super().__init__(message or f"Value cannot be null or empty. (Parameter '{param_name}')")


class NamespaceNotFoundError(LookupError):
    def __init__(self, namespace_name: str, subscription: str):
        self.namespace_name = namespace_name
        self.subscription = subscription
        super().__init__(
            f"Event Hubs namespace '{namespace_name}' not found for subscription '{subscription}'."
        )


class ResourceParseError(RuntimeError):
    """A resource returned by Azure is missing fields required for projection."""


def http_status_of(exc: BaseException) -> Optional[int]:
    """Status code carried by an SDK or REST transport error, if any."""
    if isinstance(exc, HttpResponseError):
        return exc.status_code
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    return None


def is_authentication_error(exc: BaseException) -> bool:
    return isinstance(exc, ClientAuthenticationError)
