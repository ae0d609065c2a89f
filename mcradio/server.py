"""Multicast radio server: announces channels and streams their audio."""

from __future__ import annotations

import argparse
import logging
import socket
import struct
import sys
import threading

from mcradio.medialib import MediaLibrary, MediaLibraryError
from mcradio.proto import (
    GROUP_ADDR,
    MAX_CHN_NR,
    MAX_MSG,
    RCV_PORT,
    ChannelEntry,
    encode_channel_data,
    encode_channel_list,
)
from mcradio.tbf import TokenBucket, TokenBucketError
from mcradio.thrpool import ThreadPool

log = logging.getLogger(__name__)

TOKEN_RATE = 64 * 1024
TOKEN_BURST = 128 * 1024
LIST_INTERVAL = 1.0
POOL_MIN_FREE = 5
_CHNID_SIZE = 1


def build_channel_list_packet(channels) -> bytes:
    """Encode library channels as one channel-list packet."""
    return encode_channel_list(ChannelEntry(chn.chnid, chn.descr) for chn in channels)


class RadioServer:
    """Sends the channel list and every channel's data to a multicast address."""

    def __init__(self, library, sock, address):
        self.library = library
        self.sock = sock
        self.address = address
        self._stop = threading.Event()
        self._buckets: set[TokenBucket] = set()
        self._buckets_lock = threading.Lock()

    def send_channel_list(self, interval: float = LIST_INTERVAL) -> None:
        """Send the channel list every `interval` seconds until sending fails."""
        packet = build_channel_list_packet(self.library.channels())
        while not self._stop.is_set():
            try:
                self.sock.sendto(packet, self.address)
            except OSError as exc:
                log.error("sending channel list failed: %s", exc)
                return
            if self._stop.wait(interval):
                return

    def send_channel_data(self, chnid: int) -> None:
        """Stream one channel, rate limited, until reading or sending fails."""
        payload_size = MAX_MSG - _CHNID_SIZE
        with TokenBucket(TOKEN_RATE, TOKEN_BURST) as bucket:
            with self._buckets_lock:
                self._buckets.add(bucket)
            try:
                while not self._stop.is_set():
                    try:
                        bucket.fetch(MAX_MSG)
                    except TokenBucketError:
                        return
                    try:
                        data = self.library.read(chnid, payload_size)
                    except MediaLibraryError as exc:
                        log.error("sending channel %d failed: %s", chnid, exc)
                        return
                    packet = encode_channel_data(chnid, data)
                    try:
                        self.sock.sendto(packet, self.address)
                    except OSError as exc:
                        log.error("sending channel %d failed: %s", chnid, exc)
                        return
                    log.debug("sent %d bytes to channel %d", len(packet), chnid)
            finally:
                with self._buckets_lock:
                    self._buckets.discard(bucket)

    def _halt(self) -> None:
        self._stop.set()
        with self._buckets_lock:
            buckets = list(self._buckets)
        for bucket in buckets:
            bucket.close()

    def run(self) -> None:
        """Start the list and data senders on a thread pool and serve until interrupted."""
        channels = self.library.channels()
        pool = ThreadPool(MAX_CHN_NR + 1, POOL_MIN_FREE, MAX_CHN_NR + 1)
        try:
            pool.submit(self.send_channel_list, LIST_INTERVAL)
            for chn in channels:
                pool.submit(self.send_channel_data, chn.chnid)
            self._stop.wait()
        except KeyboardInterrupt:
            pass
        finally:
            self._halt()
            pool.shutdown()


def _ip_mreqn(group: str, ifindex: int) -> bytes:
    return struct.pack(
        "=4s4si", socket.inet_aton(group), socket.inet_aton("0.0.0.0"), ifindex
    )


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Multicast radio server.")
    parser.add_argument("root", help="media directory, one sub-directory per channel")
    parser.add_argument("--group", default=GROUP_ADDR, help="multicast group address")
    parser.add_argument("--port", type=int, default=RCV_PORT, help="destination port")
    parser.add_argument("--interface", default=None, help="network interface to send on")
    args = parser.parse_args(argv)

    try:
        library = MediaLibrary(args.root)
    except MediaLibraryError as exc:
        print(f"cannot load channel list: {exc}", file=sys.stderr)
        return 1

    with library, socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        if args.interface:
            try:
                ifindex = socket.if_nametoindex(args.interface)
                sock.setsockopt(
                    socket.IPPROTO_IP,
                    socket.IP_MULTICAST_IF,
                    _ip_mreqn(args.group, ifindex),
                )
            except OSError as exc:
                print(f"cannot use interface {args.interface}: {exc}", file=sys.stderr)
                return 1
        RadioServer(library, sock, (args.group, args.port)).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())