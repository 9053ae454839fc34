"""Packet, message and event types, and conversion between messages and packets."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional, Sequence, Union

FRAGMENT_SIZE = 128


class NodeType(Enum):
    """Kind of node in the network."""

    CLIENT = "Client"
    DRONE = "Drone"
    SERVER = "Server"


@dataclass
class SourceRoutingHeader:
    """Route a packet travels along, with the index of the current hop."""

    hops: list[int] = field(default_factory=list)
    hop_index: int = 0

    def source(self) -> Optional[int]:
        """First node of the route, or None for an empty route."""
        return self.hops[0] if self.hops else None

    def destination(self) -> Optional[int]:
        """Last node of the route, or None for an empty route."""
        return self.hops[-1] if self.hops else None

    @staticmethod
    def empty_route() -> SourceRoutingHeader:
        """A header without hops."""
        return SourceRoutingHeader(hops=[], hop_index=0)


@dataclass
class Fragment:
    """One fixed-size piece of a serialized message."""

    fragment_index: int
    total_n_fragments: int
    length: int
    data: bytes = bytes(FRAGMENT_SIZE)


@dataclass
class Ack:
    """Acknowledgement of one received fragment."""

    fragment_index: int


class NackType(Enum):
    """Reason a fragment was not delivered."""

    ERROR_IN_ROUTING = "ErrorInRouting"
    DESTINATION_IS_DRONE = "DestinationIsDrone"
    DROPPED = "Dropped"
    UNEXPECTED_RECIPIENT = "UnexpectedRecipient"


@dataclass
class Nack:
    """Negative acknowledgement of a fragment; node_id names the node at fault, if any."""

    fragment_index: int
    nack_type: NackType
    node_id: Optional[int] = None


@dataclass
class FloodResponse:
    """Answer to a flood request carrying the traced path."""

    flood_id: int
    path_trace: list[tuple[int, NodeType]] = field(default_factory=list)


@dataclass
class FloodRequest:
    """Network discovery request that records the path it travels."""

    flood_id: int
    initiator_id: int
    path_trace: list[tuple[int, NodeType]] = field(default_factory=list)

    def generate_response(self, session_id: int) -> Packet:
        """Build a flood response routed back along the reversed path trace."""
        hops = [node_id for node_id, _ in reversed(self.path_trace)]
        return Packet(
            routing_header=SourceRoutingHeader(hops=hops, hop_index=0),
            session_id=session_id,
            pack_type=FloodResponse(self.flood_id, list(self.path_trace)),
        )

    def __str__(self) -> str:
        trace = ", ".join(f"({i}, {t.value})" for i, t in self.path_trace)
        return f"FloodRequest(flood_id={self.flood_id}, initiator={self.initiator_id}, trace=[{trace}])"


PacketType = Union[Fragment, Ack, Nack, FloodRequest, FloodResponse]


@dataclass
class Packet:
    """A routed packet with its payload."""

    routing_header: SourceRoutingHeader
    session_id: int
    pack_type: PacketType


@dataclass
class Message:
    """An application message; content is any JSON-serialisable value."""

    source: int
    destination: int
    session_id: int
    content: Any

    def stringify(self) -> str:
        """Serialise the message to a string."""
        return json.dumps(
            {
                "source": self.source,
                "destination": self.destination,
                "session_id": self.session_id,
                "content": self.content,
            },
            separators=(",", ":"),
        )

    @staticmethod
    def from_string(text: str) -> Message:
        """Parse a message produced by stringify; raises ValueError when malformed."""
        try:
            raw = json.loads(text)
            return Message(
                source=int(raw["source"]),
                destination=int(raw["destination"]),
                session_id=int(raw["session_id"]),
                content=raw["content"],
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Malformed message: {text!r}") from exc


@dataclass
class EventNetworkNode:
    """One node of a known topology reported to the controller."""

    node_id: int
    node_type: NodeType
    neighbors: list[int] = field(default_factory=list)


@dataclass
class PacketSent:
    """Event: a packet was handed to a neighbour."""

    packet: Packet


@dataclass
class StartingMessageTransmission:
    """Event: transmission of a message begins."""

    message: Message


@dataclass
class MessageReceived:
    """Event: a full message was reassembled."""

    message: Message


@dataclass
class MessageSentSuccessfully:
    """Event: every fragment of a message was acknowledged."""

    message: Message


@dataclass
class KnownNetworkGraph:
    """Event: the topology currently known to a node."""

    source: int
    graph: list[EventNetworkNode] = field(default_factory=list)


@dataclass
class AddSender:
    """Controller command: add a neighbour with its packet channel."""

    node_id: int
    channel: Any


@dataclass
class RemoveSender:
    """Controller command: remove a neighbour."""

    node_id: int


def disassemble(data: bytes) -> list[Fragment]:
    """Split bytes into fixed-size fragments, zero-padded to FRAGMENT_SIZE."""
    chunks = [data[start:start + FRAGMENT_SIZE] for start in range(0, len(data), FRAGMENT_SIZE)] or [b""]
    total = len(chunks)
    return [
        Fragment(
            fragment_index=index,
            total_n_fragments=total,
            length=len(chunk),
            data=chunk.ljust(FRAGMENT_SIZE, b"\x00"),
        )
        for index, chunk in enumerate(chunks)
    ]


def reassemble(fragments: Iterable[Fragment]) -> bytes:
    """Join fragments back into bytes; raises ValueError if any are missing."""
    ordered = sorted(fragments, key=lambda f: f.fragment_index)
    if not ordered:
        raise ValueError("No fragments to reassemble")
    total = ordered[0].total_n_fragments
    if [f.fragment_index for f in ordered] != list(range(total)):
        raise ValueError(f"Expected fragments 0..{total - 1}, got {[f.fragment_index for f in ordered]}")
    return b"".join(f.data[:f.length] for f in ordered)


def message_to_packets(message: Message, routing_header: SourceRoutingHeader) -> list[Packet]:
    """Serialise a message and wrap each fragment in a packet with the given header."""
    return [
        Packet(
            routing_header=SourceRoutingHeader(list(routing_header.hops), routing_header.hop_index),
            session_id=message.session_id,
            pack_type=fragment,
        )
        for fragment in disassemble(message.stringify().encode("utf-8"))
    ]


def packets_to_message(packets: Sequence[Packet]) -> Message:
    """Rebuild a message from the fragment packets among the given packets."""
    fragments = [p.pack_type for p in packets if isinstance(p.pack_type, Fragment)]
    return Message.from_string(reassemble(fragments).decode("utf-8"))


def get_new_flood_request_packet(session_id: int, initiator_id: int) -> Packet:
    """A flood request packet started by a client with an empty route."""
    return Packet(
        routing_header=SourceRoutingHeader.empty_route(),
        session_id=session_id,
        pack_type=FloodRequest(
            flood_id=session_id,
            initiator_id=initiator_id,
            path_trace=[(initiator_id, NodeType.CLIENT)],
        ),
    )