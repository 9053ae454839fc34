"""Commands accepted from the front end and the responses sent back to it."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from apclient.packet import Message, NodeType


@dataclass(frozen=True)
class GetEdgeNodesFromFlood:
    """Ask for the clients and servers discovered so far."""


@dataclass(frozen=True)
class InitializeFlood:
    """Start a network discovery flood."""


@dataclass(frozen=True)
class GetUnreadMessagesFromServer:
    """Ask for messages not yet handed to the front end."""


@dataclass(frozen=True)
class GetClientsFromServer:
    """Ask a server for its registered clients."""

    server_id: int


@dataclass
class SendMessage:
    """Send a message to its destination."""

    message: Message


Command = Union[
    GetEdgeNodesFromFlood,
    InitializeFlood,
    GetUnreadMessagesFromServer,
    GetClientsFromServer,
    SendMessage,
]


@dataclass
class ListOfDiscoveredEdgeNodes:
    """Discovered non-drone nodes."""

    nodes: list[tuple[int, NodeType]] = field(default_factory=list)


@dataclass
class UnreadMessagesFromServer:
    """Messages that had not been read before."""

    messages: list[Message] = field(default_factory=list)


@dataclass
class ClientsFromServer:
    """Client ids reported by a server."""

    clients: list[int] = field(default_factory=list)