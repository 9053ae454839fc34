import pytest

from apclient.packet import (
    FRAGMENT_SIZE,
    FloodRequest,
    FloodResponse,
    Fragment,
    Message,
    NodeType,
    SourceRoutingHeader,
    disassemble,
    get_new_flood_request_packet,
    message_to_packets,
    packets_to_message,
    reassemble,
)


def make_test_message():
    return Message(source=1, destination=2, session_id=42, content={"DiscoveryRequest": None})


def test_message_to_packets_and_back():
    message = make_test_message()
    packets = message_to_packets(message, SourceRoutingHeader.empty_route())
    assert packets
    assert all(isinstance(p.pack_type, Fragment) for p in packets)
    assert packets_to_message(packets) == message


def test_get_new_flood_request_packet():
    packet = get_new_flood_request_packet(123, 45)
    assert packet.session_id == 123
    flood = packet.pack_type
    assert isinstance(flood, FloodRequest)
    assert flood.flood_id == 123
    assert flood.initiator_id == 45
    assert len(flood.path_trace) == 1
    assert flood.path_trace[0] == (45, NodeType.CLIENT)
    assert packet.routing_header.hops == []


def test_large_message_round_trip_in_reversed_order():
    message = Message(1, 2, 7, {"TextRequest": "x" * 1000})
    packets = message_to_packets(message, SourceRoutingHeader([1, 3, 2], 1))
    assert len(packets) > 1
    assert all(p.routing_header.hops == [1, 3, 2] for p in packets)
    assert all(p.session_id == 7 for p in packets)
    assert packets_to_message(list(reversed(packets))) == message


def test_disassemble_sizes():
    fragments = disassemble(b"a" * (2 * FRAGMENT_SIZE + 5))
    assert [f.length for f in fragments] == [FRAGMENT_SIZE, FRAGMENT_SIZE, 5]
    assert all(f.total_n_fragments == 3 for f in fragments)
    assert all(len(f.data) == FRAGMENT_SIZE for f in fragments)
    assert reassemble(fragments) == b"a" * (2 * FRAGMENT_SIZE + 5)


def test_reassemble_missing_fragment():
    fragments = disassemble(b"b" * (FRAGMENT_SIZE + 1))
    with pytest.raises(ValueError):
        reassemble(fragments[:1])


def test_from_string_rejects_garbage():
    with pytest.raises(ValueError):
        Message.from_string("not a message")
    with pytest.raises(ValueError):
        Message.from_string('{"source": 1}')


def test_header_source_and_destination():
    header = SourceRoutingHeader([3, 5, 6, 7, 4], 0)
    assert header.source() == 3
    assert header.destination() == 4
    empty = SourceRoutingHeader.empty_route()
    assert empty.source() is None
    assert empty.destination() is None


def test_generate_response_reverses_trace():
    request = FloodRequest(9, 1, [(1, NodeType.CLIENT), (3, NodeType.DRONE), (8, NodeType.SERVER)])
    packet = request.generate_response(11)
    assert packet.session_id == 11
    assert packet.routing_header.hops == [8, 3, 1]
    assert packet.pack_type == FloodResponse(9, request.path_trace)