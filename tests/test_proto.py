import pytest

from mcradio.proto import (
    CHN_MAX_ID,
    MAX_MSG,
    ChannelEntry,
    ProtocolError,
    decode_channel_data,
    decode_channel_list,
    encode_channel_data,
    encode_channel_list,
)


def test_channel_list_wire_bytes():
    assert encode_channel_list([ChannelEntry(1, "ab")]) == b"\x00\x01\x06\x00ab\x00"


def test_empty_channel_list_is_only_the_list_id():
    packet = encode_channel_list([])
    assert decode_channel_list(packet) == []
    assert packet[0] == 0


def test_channel_list_round_trip():
    entries = [ChannelEntry(1, "pop music\n"), ChannelEntry(2, "新闻"), ChannelEntry(7, "")]
    assert decode_channel_list(encode_channel_list(entries)) == entries


def test_channel_list_stops_at_max_msg():
    entries = [ChannelEntry(i, "x" * 60) for i in range(1, 40)]
    packet = encode_channel_list(entries)
    assert len(packet) <= MAX_MSG
    decoded = decode_channel_list(packet)
    assert 0 < len(decoded) < len(entries)
    assert decoded == entries[: len(decoded)]


def test_channel_list_rejects_bad_id():
    with pytest.raises(ProtocolError):
        encode_channel_list([ChannelEntry(0, "zero")])
    with pytest.raises(ProtocolError):
        encode_channel_list([ChannelEntry(CHN_MAX_ID + 1, "big")])


def test_channel_list_rejects_nul_in_descr():
    with pytest.raises(ProtocolError):
        encode_channel_list([ChannelEntry(1, "a\0b")])


def test_decode_list_rejects_data_packet():
    with pytest.raises(ProtocolError):
        decode_channel_list(encode_channel_data(3, b"abc"))


def test_decode_list_rejects_truncated_entry():
    packet = encode_channel_list([ChannelEntry(1, "hello")])
    with pytest.raises(ProtocolError):
        decode_channel_list(packet[:-2])
    with pytest.raises(ProtocolError):
        decode_channel_list(packet[:2])


def test_decode_list_rejects_too_small_length():
    with pytest.raises(ProtocolError):
        decode_channel_list(b"\x00\x01\x00\x00")


def test_decode_list_rejects_empty_packet():
    with pytest.raises(ProtocolError):
        decode_channel_list(b"")


def test_channel_data_wire_bytes():
    assert encode_channel_data(3, b"xyz") == b"\x03xyz"


def test_channel_data_round_trip():
    payload = bytes(range(256)) * 3
    assert decode_channel_data(encode_channel_data(5, payload)) == (5, payload)


def test_channel_data_size_limit():
    assert len(encode_channel_data(1, b"a" * (MAX_MSG - 1))) == MAX_MSG
    with pytest.raises(ProtocolError):
        encode_channel_data(1, b"a" * MAX_MSG)


def test_channel_data_rejects_list_id():
    with pytest.raises(ProtocolError):
        encode_channel_data(0, b"abc")
    with pytest.raises(ProtocolError):
        decode_channel_data(encode_channel_list([]))


def test_decode_data_rejects_empty():
    with pytest.raises(ProtocolError):
        decode_channel_data(b"")