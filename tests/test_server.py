from pathlib import Path

import pytest

from mcradio.medialib import Channel, MediaLibrary
from mcradio.proto import (
    GROUP_ADDR,
    MAX_MSG,
    RCV_PORT,
    ChannelEntry,
    decode_channel_data,
    decode_channel_list,
)
from mcradio.server import RadioServer, build_channel_list_packet, main

ADDRESS = (GROUP_ADDR, RCV_PORT)
CONTENT = b"abc" * 1000


class FakeSocket:
    def __init__(self, fail_after):
        self.sent = []
        self.fail_after = fail_after

    def sendto(self, data, address):
        if len(self.sent) >= self.fail_after:
            raise OSError("network down")
        self.sent.append((bytes(data), address))
        return len(data)


@pytest.fixture
def library(tmp_path):
    chn = tmp_path / "rock"
    chn.mkdir()
    (chn / "descr.txt").write_bytes(b"rock music")
    (chn / "a.mp3").write_bytes(CONTENT)
    with MediaLibrary(tmp_path) as lib:
        yield lib


def test_channel_list_packet_bytes():
    chn = Channel(1, "pop", Path("pop"), (Path("pop/a.mp3"),))
    assert build_channel_list_packet([chn]) == b"\x00\x01\x07\x00pop\x00"


def test_channel_list_packet_round_trip():
    channels = [
        Channel(1, "news", Path("news"), (Path("news/a.mp3"),)),
        Channel(2, "jazz", Path("jazz"), (Path("jazz/b.mp3"),)),
    ]
    packet = build_channel_list_packet(channels)
    assert decode_channel_list(packet) == [
        ChannelEntry(1, "news"),
        ChannelEntry(2, "jazz"),
    ]


def test_send_channel_list_repeats_until_send_fails(library):
    sock = FakeSocket(fail_after=2)
    RadioServer(library, sock, ADDRESS).send_channel_list(0.01)
    expected = build_channel_list_packet(library.channels())
    assert sock.sent == [(expected, ADDRESS), (expected, ADDRESS)]
    assert decode_channel_list(expected) == [ChannelEntry(1, "rock music")]


def test_send_channel_data_streams_track(library):
    sock = FakeSocket(fail_after=3)
    RadioServer(library, sock, ADDRESS).send_channel_data(1)
    assert len(sock.sent) == 3
    assert all(address == ADDRESS for _, address in sock.sent)
    decoded = [decode_channel_data(packet) for packet, _ in sock.sent]
    assert {chnid for chnid, _ in decoded} == {1}
    assert b"".join(payload for _, payload in decoded) == CONTENT
    assert len(sock.sent[0][0]) == MAX_MSG
    assert all(len(packet) <= MAX_MSG for packet, _ in sock.sent)


def test_main_fails_on_missing_media_root(tmp_path):
    assert main([str(tmp_path / "missing")]) == 1