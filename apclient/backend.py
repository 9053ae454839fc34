"""Public entry point of the client back end: configuration checks and the service loop."""

from __future__ import annotations

import queue
import threading
from typing import Any, Mapping, Optional

from apclient.router import Router


class ConfigurationError(ValueError):
    """Raised when the service is given an invalid set of neighbours."""


def validate_options(neighbors: Mapping[int, Any], node_id: int) -> None:
    """Check that a client has 1-2 neighbours and that its own id is not among them."""
    if node_id in neighbors:
        raise ConfigurationError("Own ID is used as a recipient.")
    if not 1 <= len(neighbors) <= 2:
        raise ConfigurationError(
            f"There are {len(neighbors)} drones connected when the there must be "
            "1-2 connected drones."
        )


class Service:
    """Back-end service of one client, serving the front end and the simulation controller."""

    def __init__(
        self,
        node_id: int,
        sc_events: Any,
        sc_commands: queue.Queue,
        neighbors: Mapping[int, Any],
        inbound_packets: queue.Queue,
        api_commands: queue.Queue,
        flood_responses: Any,
        unread_messages: Any,
    ) -> None:
        validate_options(neighbors, node_id)
        self._router = Router(
            node_id,
            inbound_packets,
            sc_commands,
            dict(neighbors),
            sc_events,
            api_commands,
            flood_responses,
            unread_messages,
        )

    @property
    def node_id(self) -> int:
        return self._router.node_id

    def run(self, stop: Optional[threading.Event] = None) -> None:
        """Serve inbound packets and commands until stop is set, or forever without one."""
        self._router.listen(stop)