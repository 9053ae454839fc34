from apclient.ids import MessageID, PacketID, SessionKey


def test_message_id_display():
    assert str(MessageID(5, 3)) == "5:3"


def test_packet_id_display():
    assert str(PacketID(5, 3, 0)) == "5:3:0"


def test_session_key_display():
    assert str(SessionKey(12, 4)) == "12:4"


def test_packet_id_session_key():
    packet_id = PacketID(77, 9, 2)
    assert packet_id.session_key == SessionKey(77, 9)


def test_ids_usable_as_keys():
    store = {MessageID(1, 2): "a", PacketID(1, 2, 0): "b"}
    assert store[MessageID(1, 2)] == "a"
    assert store[PacketID(1, 2, 0)] == "b"
    assert PacketID(1, 2, 1) not in store