"""Identifiers for stored messages and packets."""

from typing import NamedTuple


class MessageID(NamedTuple):
    """Identifies a message by session and sender."""

    session_id: int
    sender_id: int

    def __str__(self) -> str:
        return f"{self.session_id}:{self.sender_id}"


class SessionKey(NamedTuple):
    """Identifies the fragments of one session from one sender."""

    session_id: int
    sender_id: int

    def __str__(self) -> str:
        return f"{self.session_id}:{self.sender_id}"


class PacketID(NamedTuple):
    """Identifies one fragment of a session from a sender."""

    session_id: int
    sender_id: int
    fragment_index: int

    @property
    def session_key(self) -> SessionKey:
        return SessionKey(self.session_id, self.sender_id)

    def __str__(self) -> str:
        return f"{self.session_id}:{self.sender_id}:{self.fragment_index}"