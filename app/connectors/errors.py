"""Project-native typed exceptions for connector fetch and sync failures."""

from __future__ import annotations


class ConnectorError(Exception):
    """Base exception for connector-level source failures.

    Attributes:
        status_code: Optional upstream HTTP status code.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ConnectorConnectionError(ConnectorError, ConnectionError):
    """Transport-level connectivity failure while calling a source."""


class ConnectorTimeoutError(ConnectorError, TimeoutError):
    """Transport timeout while waiting for a source response."""


class ConnectorHTTPStatusError(ConnectorError, ConnectionError):
    """Non-2xx upstream response; the message carries the response body."""


class ConnectorPayloadError(ConnectorError, ValueError):
    """Malformed or unexpected upstream payload."""


class PluginProtocolError(ConnectorPayloadError):
    """Remote plugin envelope was malformed or reported `success=false`."""
