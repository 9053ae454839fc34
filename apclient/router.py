"""Packet routing and command handling for a client node."""

from __future__ import annotations

import copy
import logging
import queue
import threading
from typing import Any, Optional

from apclient.commands import (
    Command,
    GetClientsFromServer,
    GetEdgeNodesFromFlood,
    GetUnreadMessagesFromServer,
    InitializeFlood,
    ListOfDiscoveredEdgeNodes,
    SendMessage,
    UnreadMessagesFromServer,
)
from apclient.database import Database
from apclient.graph import NetGraph, Vertex
from apclient.ids import MessageID, PacketID
from apclient.packet import (
    Ack,
    AddSender,
    FloodRequest,
    FloodResponse,
    Fragment,
    Message,
    MessageReceived,
    MessageSentSuccessfully,
    Nack,
    NackType,
    NodeType,
    Packet,
    PacketSent,
    RemoveSender,
    SourceRoutingHeader,
    StartingMessageTransmission,
    get_new_flood_request_packet,
    message_to_packets,
    packets_to_message,
)

log = logging.getLogger(__name__)

_POLL_INTERVAL = 0.01


class RouterError(Exception):
    """Raised when a packet or command cannot be handled."""


class Router:
    """Routes packets for one client and serves controller and front-end commands."""

    def __init__(
        self,
        node_id: int,
        inbound_packets: queue.Queue,
        inbound_sc_commands: queue.Queue,
        neighbors: dict[int, Any],
        sc_events: Any,
        api_commands: queue.Queue,
        flood_responses: Any,
        unread_messages: Any,
    ) -> None:
        self.node_id = node_id
        self.session_id = 0
        self.graph = NetGraph(node_id)
        self.database = Database()
        self.inbound_packets = inbound_packets
        self.inbound_sc_commands = inbound_sc_commands
        self.neighbors = dict(neighbors)
        self.sc_events = sc_events
        self.api_commands = api_commands
        self.flood_responses = flood_responses
        self.unread_messages = unread_messages

    def new_session_id(self) -> int:
        """Advance and return the session counter."""
        self.session_id += 1
        return self.session_id

    def listen(self, stop: Optional[threading.Event] = None) -> None:
        """Serve all inbound channels until stop is set; failures are logged, not raised."""
        sources = (
            (self.inbound_packets, self.process, "packet"),
            (self.inbound_sc_commands, self.process_sc_command, "command"),
            (self.api_commands, self.process_api_command, "command"),
        )
        while stop is None or not stop.is_set():
            handled = False
            for channel, handler, kind in sources:
                try:
                    item = channel.get_nowait()
                except queue.Empty:
                    continue
                handled = True
                try:
                    handler(item)
                except Exception as exc:  # noqa: BLE001 - the loop must keep running
                    log.error("Tried to process %s %r but failed with error: %s", kind, item, exc)
            if not handled:
                if stop is None:
                    threading.Event().wait(_POLL_INTERVAL)
                else:
                    stop.wait(_POLL_INTERVAL)

    def process(self, packet: Packet) -> None:
        """Handle one inbound packet according to its type."""
        payload = packet.pack_type
        if isinstance(payload, Fragment):
            self._process_fragment(packet, payload)
        elif isinstance(payload, Ack):
            self._process_ack(packet, payload)
        elif isinstance(payload, Nack):
            self._process_nack(packet, payload)
        elif isinstance(payload, FloodRequest):
            self._process_flood_request(payload)
        elif isinstance(payload, FloodResponse):
            self.graph.add_route(payload.path_trace, self.sc_events)
        else:
            raise RouterError(f"Unknown packet type: {packet!r}")

    def process_sc_command(self, command: Any) -> None:
        """Add or remove a neighbour and flood again; other commands are ignored."""
        if isinstance(command, RemoveSender):
            log.info("Received SC command to remove %s from neighbors.", command.node_id)
            self.neighbors.pop(command.node_id, None)
            log.info("%s removed from neighbors.", command.node_id)
            self.flood_network()
        elif isinstance(command, AddSender):
            log.info("Received SC command to add %s to neighbors.", command.node_id)
            self.neighbors[command.node_id] = command.channel
            self.flood_network()

    def process_api_command(self, command: Command) -> None:
        """Carry out a front-end command."""
        if isinstance(command, GetEdgeNodesFromFlood):
            edge_nodes = self.get_edge_nodes()
            if edge_nodes is not None:
                self.flood_responses.put(ListOfDiscoveredEdgeNodes(edge_nodes))
        elif isinstance(command, InitializeFlood):
            self.flood_network()
        elif isinstance(command, SendMessage):
            self.send_message(command.message)
        elif isinstance(command, GetUnreadMessagesFromServer):
            ids = self.database.take_unread_message_ids(self.node_id)
            if ids is not None:
                messages = [m for m in map(self.database.get_message, ids) if m is not None]
                self.unread_messages.put(UnreadMessagesFromServer(messages))
        elif isinstance(command, GetClientsFromServer):
            pass
        else:
            raise RouterError(f"Unknown command: {command!r}")

    def flood_network(self) -> None:
        """Send a flood request to every neighbour."""
        packet = get_new_flood_request_packet(self.session_id, self.node_id)
        for channel in self.neighbors.values():
            channel.put(copy.deepcopy(packet))
            self.sc_events.put(PacketSent(copy.deepcopy(packet)))

    def send_packet(self, packet: Packet) -> None:
        """Hand a packet to the neighbour at its current hop and report it."""
        header = packet.routing_header
        if not 0 <= header.hop_index < len(header.hops):
            raise RouterError(f"Packet has no hop at index {header.hop_index}: {packet!r}")
        neighbor = header.hops[header.hop_index]
        channel = self.neighbors.get(neighbor)
        if channel is None:
            raise RouterError(
                f"Failed to send a packet. Client does not have a neighbor with ID {neighbor}!"
            )
        channel.put(copy.deepcopy(packet))
        self.sc_events.put(PacketSent(copy.deepcopy(packet)))

    def send_message(self, message: Message) -> None:
        """Give the message a new session id, fragment it and send the fragments."""
        message.session_id = self.new_session_id()
        destination = message.destination
        hops = self.route_to(destination)
        if hops is None:
            raise RouterError(
                "Tried to fragment message to packets. "
                f"Failed to find a route to destination: {destination}"
            )
        packets = message_to_packets(message, SourceRoutingHeader(hops, 1))
        self.sc_events.put(StartingMessageTransmission(copy.deepcopy(message)))
        self.database.save_message(message)
        for packet in packets:
            self.database.save_packet(packet)
            self.send_packet(packet)

    def route_to(self, destination: int) -> Optional[list[int]]:
        """A random known route from this client to destination, or None if none exists."""
        try:
            node_type = self.graph.get_node_type(destination)
        except LookupError as exc:
            raise RouterError(f"Destination {destination} is not a known node") from exc
        start = Vertex(self.node_id, NodeType.CLIENT)
        return self.graph.get_random_route(start, Vertex(destination, node_type))

    def get_edge_nodes(self) -> Optional[list[tuple[int, NodeType]]]:
        """Discovered non-drone nodes, or None if there are none."""
        return self.graph.get_edge_nodes()

    def _process_fragment(self, packet: Packet, fragment: Fragment) -> None:
        self.database.save_packet(packet)
        sender_id = packet.routing_header.source()
        if sender_id is None:
            raise RouterError(
                f"Received fragment packet without sender in source routing header! Packet: {packet!r}"
            )
        session_id = packet.session_id
        received = self.database.fragments_received(session_id, sender_id)
        if received is None:
            raise RouterError(
                f"Failed to query amount of fragments for session {session_id} from sender {sender_id}"
            )
        if received != fragment.total_n_fragments:
            return
        packets = self.database.packets_for_session(session_id, sender_id)
        if packets is None:
            raise RouterError("Received all fragments but failed to fetch them to build a message")
        message = packets_to_message(packets)
        self.database.save_message(message)
        self.sc_events.put(MessageReceived(copy.deepcopy(message)))

    def _process_ack(self, packet: Packet, ack: Ack) -> None:
        packet_id = PacketID(packet.session_id, self.node_id, ack.fragment_index)
        self.database.mark_packet_ack_received(packet_id)
        fully_sent = self.database.all_packets_acked(packet_id.session_id, packet_id.sender_id)
        if fully_sent is None:
            raise RouterError(
                f"Received ACK {packet!r} but did not find such a session from DB "
                "while querying if all packets have been sent!"
            )
        if not fully_sent:
            return
        message = self.database.get_message(MessageID(packet.session_id, self.node_id))
        if message is None:
            raise RouterError(
                f"All packets have been ACKed for session {packet.session_id} "
                "but did not find message for such a session!"
            )
        self.sc_events.put(MessageSentSuccessfully(message))

    def _process_nack(self, packet: Packet, nack: Nack) -> None:
        packet_id = PacketID(packet.session_id, self.node_id, nack.fragment_index)
        stored = self.database.get_packet(packet_id)
        if stored is None:
            raise RouterError("Failed to fetch packet from database!")

        if nack.nack_type is NackType.DESTINATION_IS_DRONE:
            return
        if nack.nack_type in (NackType.ERROR_IN_ROUTING, NackType.UNEXPECTED_RECIPIENT):
            self.flood_network()
        self._resend_on_new_route(stored)

    def _resend_on_new_route(self, packet: Packet) -> None:
        destination = packet.routing_header.destination()
        if destination is None:
            raise RouterError(
                "Tried to set a new route to a packet. The old routing header was empty!"
            )
        new_route = self.route_to(destination)
        if new_route is None:
            raise RouterError(
                "Tried to set a new route to a packet. "
                f"Did not find a route to the destination {destination}"
            )
        packet.routing_header.hops = new_route
        self.send_packet(packet)

    def _process_flood_request(self, flood_request: FloodRequest) -> None:
        flood_request.path_trace.append((self.node_id, NodeType.CLIENT))
        response = flood_request.generate_response(self.new_session_id())
        response.routing_header.hop_index = 1
        try:
            self.send_packet(response)
        except RouterError as exc:
            raise RouterError(
                f"Failed to send flood response to a flood request {flood_request}."
            ) from exc