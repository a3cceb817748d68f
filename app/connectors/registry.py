"""Thread-safe registry of locally hosted connectors."""

from __future__ import annotations

import logging
import threading

from .interfaces import ConnectorPort

logger = logging.getLogger(__name__)


class PluginRegistry:
    """Name-indexed connector registry shared by the API and scheduler threads.

    Registration is an upsert keyed by connector id: the last write wins.
    """

    def __init__(self) -> None:
        self._connectors: dict[str, ConnectorPort] = {}
        self._lock = threading.Lock()

    def registry_register(self, connector: ConnectorPort) -> None:
        """Register one connector under its identity id, replacing any previous entry.

        Args:
            connector: Connector to register.

        Returns:
            None: Registration does not return a value.

        Raises:
            ValueError: Raised when connector is None.
        """

        if connector is None:
            raise ValueError("connector must not be None")

        identity = connector.connector_identify()
        with self._lock:
            replaced = identity.connector_id in self._connectors
            self._connectors[identity.connector_id] = connector

        if replaced:
            logger.info("replaced registered connector id=%s name=%s", identity.connector_id, identity.display_name)
        else:
            logger.info("registered connector id=%s name=%s", identity.connector_id, identity.display_name)

    def registry_unregister(self, connector_id: str) -> None:
        """Remove one connector; unknown ids are ignored."""

        with self._lock:
            removed = self._connectors.pop(connector_id, None)
        if removed is not None:
            logger.info("unregistered connector id=%s", connector_id)

    def registry_get(self, connector_id: str) -> ConnectorPort | None:
        """Return the connector registered under an id, or None."""

        with self._lock:
            return self._connectors.get(connector_id)

    def registry_all(self) -> dict[str, ConnectorPort]:
        """Return a snapshot copy of the id to connector mapping."""

        with self._lock:
            return dict(self._connectors)

    def registry_enabled(self) -> list[ConnectorPort]:
        """Return connectors eligible for scheduled syncs, in registration order.

        Every registered connector is currently enabled.

        Returns:
            list[ConnectorPort]: Snapshot list of enabled connectors.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        with self._lock:
            return list(self._connectors.values())
