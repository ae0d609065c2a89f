import io

import pytest

from mcradio.client import main, open_multicast_socket, stream_channel, wait_for_channel_list
from mcradio.proto import (
    GROUP_ADDR,
    RCV_PORT,
    ChannelEntry,
    encode_channel_data,
    encode_channel_list,
)


class FakeSocket:
    def __init__(self, packets):
        self.packets = list(packets)

    def recv(self, size):
        if not self.packets:
            return b""
        return self.packets.pop(0)[:size]


LIST = [ChannelEntry(1, "news"), ChannelEntry(2, "jazz")]


def test_wait_for_channel_list_skips_data_packets():
    sock = FakeSocket([
        encode_channel_data(1, b"noise"),
        b"",
        encode_channel_list(LIST),
    ])
    assert wait_for_channel_list(sock) == LIST


def test_wait_for_channel_list_ignores_malformed_list():
    sock = FakeSocket([b"\x00\x01", encode_channel_list(LIST)])
    assert wait_for_channel_list(sock) == LIST


def test_stream_channel_keeps_only_chosen_channel():
    sock = FakeSocket([
        encode_channel_data(3, b"zz"),
        encode_channel_data(2, b"ab"),
        encode_channel_list(LIST),
        b"\x02",
        encode_channel_data(2, b"cd"),
    ])
    sink = io.BytesIO()
    written = stream_channel(sock, 2, sink)
    assert sink.getvalue() == b"abcd"
    assert written == len(sink.getvalue())


def test_stream_channel_round_trips_payload():
    payload = bytes(range(256)) * 3
    sock = FakeSocket([encode_channel_data(7, payload)])
    sink = io.BytesIO()
    assert stream_channel(sock, 7, sink) == len(payload)
    assert sink.getvalue() == payload


def test_open_multicast_socket_rejects_unknown_interface():
    with pytest.raises(OSError):
        open_multicast_socket(GROUP_ADDR, RCV_PORT, "mcradio-no-such-if0")


def test_main_fails_when_player_cannot_start():
    assert main(["--player", "mcradio-no-such-player"]) == 1