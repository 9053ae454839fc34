"""In-memory store of messages, fragment packets and their delivery state."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Optional

from apclient.ids import MessageID, PacketID, SessionKey
from apclient.packet import Fragment, Message, Packet


class DatabaseError(Exception):
    """Raised when a store or status update cannot be carried out."""


@dataclass
class _PacketStore:
    """Fragments received or sent for one session of one sender."""

    total_fragments: int
    packets: dict[int, Packet] = field(default_factory=dict)
    received: int = 0
    complete: bool = False


class Database:
    """Keeps messages and fragments, and which of them were read, reported or acknowledged."""

    def __init__(self) -> None:
        self._messages: dict[MessageID, Message] = {}
        self._packets: dict[SessionKey, _PacketStore] = {}
        self._packets_sent_to_sc: set[PacketID] = set()
        self._messages_sent_to_sc: set[MessageID] = set()
        self._messages_read: set[MessageID] = set()
        self._packets_acked: set[PacketID] = set()

    def save_message(self, message: Message) -> None:
        """Store a message under its session id and source."""
        key = MessageID(message.session_id, message.source)
        self._messages[key] = copy.deepcopy(message)

    def save_packet(self, packet: Packet) -> None:
        """Store a fragment packet under its session, sender and fragment index."""
        fragment = packet.pack_type
        if not isinstance(fragment, Fragment):
            raise DatabaseError("Packet is not Fragment!")
        if not packet.routing_header.hops:
            raise DatabaseError("Packet has an empty routing header!")

        key = SessionKey(packet.session_id, packet.routing_header.hops[0])
        store = self._packets.setdefault(key, _PacketStore(fragment.total_n_fragments))
        store.packets[fragment.fragment_index] = copy.deepcopy(packet)
        store.received += 1
        if store.received == store.total_fragments:
            store.complete = True

    def get_message(self, message_id: MessageID) -> Optional[Message]:
        """A copy of the stored message, or None."""
        message = self._messages.get(message_id)
        return copy.deepcopy(message) if message is not None else None

    def get_packet(self, packet_id: PacketID) -> Optional[Packet]:
        """A copy of the stored fragment packet, or None."""
        store = self._packets.get(packet_id.session_key)
        if store is None:
            return None
        packet = store.packets.get(packet_id.fragment_index)
        return copy.deepcopy(packet) if packet is not None else None

    def is_message_sent_to_sc(self, message_id: MessageID) -> bool:
        return message_id in self._messages_sent_to_sc

    def is_message_read(self, message_id: MessageID) -> bool:
        return message_id in self._messages_read

    def is_packet_ack_received(self, packet_id: PacketID) -> bool:
        return packet_id in self._packets_acked

    def is_packet_sent_to_sc(self, packet_id: PacketID) -> bool:
        return packet_id in self._packets_sent_to_sc

    def mark_message_read(self, message_id: MessageID) -> None:
        """Mark a stored message as read."""
        if message_id not in self._messages:
            raise DatabaseError("Tried to update message read status but there is no such message!")
        self._messages_read.add(message_id)

    def mark_message_sent_to_sc(self, message_id: MessageID) -> None:
        """Mark a stored message as reported to the simulation controller."""
        if message_id not in self._messages:
            raise DatabaseError(
                "Tried to update message sent to SC status but there is no such message!"
            )
        self._messages_sent_to_sc.add(message_id)

    def mark_packet_sent_to_sc(self, packet_id: PacketID) -> None:
        """Mark a packet as reported to the simulation controller; its session must be stored."""
        if packet_id.session_key not in self._packets:
            raise DatabaseError(
                "Tried to update message sent to SC status but there is no such packet!"
            )
        self._packets_sent_to_sc.add(PacketID(*packet_id))

    def mark_packet_ack_received(self, packet_id: PacketID) -> None:
        """Mark a stored packet as acknowledged."""
        store = self._packets.get(packet_id.session_key)
        if store is None:
            raise DatabaseError(
                "Tried to update packet's ACK status to received but there is no packet "
                "stored with such session ID and sender ID!"
            )
        if packet_id.fragment_index not in store.packets:
            raise DatabaseError(
                "Tried to update packet's ACK status to received but there is no such packet!"
            )
        self._packets_acked.add(PacketID(*packet_id))

    def take_unread_message_ids(self, node_id: int) -> Optional[list[MessageID]]:
        """Ids of unread messages not sent by node_id, marking them read; None if there are none."""
        unread = [
            message_id
            for message_id in self._messages
            if message_id not in self._messages_read and message_id.sender_id != node_id
        ]
        self._messages_read.update(unread)
        return unread or None

    def fragments_received(self, session_id: int, sender_id: int) -> Optional[int]:
        """How many fragments were stored for the session, or None if it is unknown."""
        store = self._packets.get(SessionKey(session_id, sender_id))
        return store.received if store is not None else None

    def packets_for_session(self, session_id: int, sender_id: int) -> Optional[list[Packet]]:
        """Copies of all packets stored for the session, or None if it is unknown."""
        store = self._packets.get(SessionKey(session_id, sender_id))
        if store is None:
            return None
        return [copy.deepcopy(packet) for packet in store.packets.values()]

    def all_packets_acked(self, session_id: int, sender_id: int) -> Optional[bool]:
        """Whether every stored packet of the session is acknowledged; None if it is unknown."""
        store = self._packets.get(SessionKey(session_id, sender_id))
        if store is None:
            return None
        return all(
            PacketID(session_id, sender_id, index) in self._packets_acked
            for index in store.packets
        )