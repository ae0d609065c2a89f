"""Wire format of the multicast radio: channel-list and channel-data packets."""

from __future__ import annotations

import struct
from dataclasses import dataclass

GROUP_ADDR = "226.2.3.4"
RCV_PORT = 5367
CHN_MIN_ID = 1
MAX_CHN_NR = 200
CHN_MAX_ID = CHN_MIN_ID + MAX_CHN_NR - 1
MAX_MSG = 1024
CHN_LIST_ID = 0

# Packed header of one list entry: channel id (u8) and entry length (u16).
_ENTRY_HEADER = struct.Struct("<BH")
_CHNID = struct.Struct("<B")


class ProtocolError(ValueError):
    """Raised for packets or values that do not fit the wire format."""


@dataclass(frozen=True)
class ChannelEntry:
    """One channel as announced in the channel list."""

    chnid: int
    descr: str


def _check_chnid(chnid: int) -> None:
    if not CHN_MIN_ID <= chnid <= CHN_MAX_ID:
        raise ProtocolError(
            f"channel id {chnid} outside {CHN_MIN_ID}..{CHN_MAX_ID}"
        )


def encode_channel_list(entries) -> bytes:
    """Build a channel-list packet.

    Entries are packed in order; packing stops at the first entry that
    would push the packet past MAX_MSG bytes.
    """
    packet = bytearray(_CHNID.pack(CHN_LIST_ID))
    for entry in entries:
        _check_chnid(entry.chnid)
        descr = entry.descr.encode("utf-8")
        if b"\0" in descr:
            raise ProtocolError("channel description contains a NUL byte")
        body = descr + b"\0"
        length = _ENTRY_HEADER.size + len(body)
        if len(packet) + length > MAX_MSG:
            break
        packet += _ENTRY_HEADER.pack(entry.chnid, length)
        packet += body
    return bytes(packet)


def decode_channel_list(packet: bytes) -> list[ChannelEntry]:
    """Parse a channel-list packet into its entries."""
    if not packet:
        raise ProtocolError("empty packet")
    if packet[0] != CHN_LIST_ID:
        raise ProtocolError(f"packet is for channel {packet[0]}, not the list")
    entries = []
    offset = _CHNID.size
    while offset < len(packet):
        if offset + _ENTRY_HEADER.size > len(packet):
            raise ProtocolError("truncated list entry header")
        chnid, length = _ENTRY_HEADER.unpack_from(packet, offset)
        if length <= _ENTRY_HEADER.size:
            raise ProtocolError(f"list entry length {length} too small")
        end = offset + length
        if end > len(packet):
            raise ProtocolError("list entry runs past end of packet")
        raw = packet[offset + _ENTRY_HEADER.size:end].split(b"\0", 1)[0]
        entries.append(ChannelEntry(chnid, raw.decode("utf-8", errors="replace")))
        offset = end
    return entries


def encode_channel_data(chnid: int, data: bytes) -> bytes:
    """Build a data packet carrying audio bytes for one channel."""
    _check_chnid(chnid)
    if len(data) > MAX_MSG - _CHNID.size:
        raise ProtocolError(
            f"payload of {len(data)} bytes exceeds {MAX_MSG - _CHNID.size}"
        )
    return _CHNID.pack(chnid) + bytes(data)


def decode_channel_data(packet: bytes) -> tuple[int, bytes]:
    """Split a data packet into its channel id and payload."""
    if len(packet) < _CHNID.size:
        raise ProtocolError("packet shorter than a channel id")
    chnid = packet[0]
    if chnid == CHN_LIST_ID:
        raise ProtocolError("packet is a channel list, not channel data")
    return chnid, bytes(packet[_CHNID.size:])