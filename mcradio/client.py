"""Multicast radio client: picks a channel and pipes its audio into a player."""

from __future__ import annotations

import argparse
import contextlib
import logging
import shlex
import socket
import struct
import subprocess
import sys

from mcradio.proto import (
    CHN_LIST_ID,
    GROUP_ADDR,
    RCV_PORT,
    ProtocolError,
    decode_channel_list,
)

log = logging.getLogger(__name__)

BUFSIZE = 2048
PLAYER_CMD = ("mplayer", "-cache", "8192", "-cache-min", "5", "-")


def _ip_mreqn(group: str, ifindex: int) -> bytes:
    return struct.pack(
        "=4s4si", socket.inet_aton(group), socket.inet_aton("0.0.0.0"), ifindex
    )


def open_multicast_socket(group=GROUP_ADDR, port=RCV_PORT, interface=None):
    """Open a UDP socket joined to `group` and bound to `port`."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        ifindex = socket.if_nametoindex(interface) if interface else 0
        sock.setsockopt(
            socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, _ip_mreqn(group, ifindex)
        )
        sock.bind(("0.0.0.0", port))
    except BaseException:
        sock.close()
        raise
    return sock


def wait_for_channel_list(sock):
    """Receive packets until a valid channel list arrives and return its entries."""
    while True:
        packet = sock.recv(BUFSIZE)
        if not packet or packet[0] != CHN_LIST_ID:
            continue
        try:
            return decode_channel_list(packet)
        except ProtocolError as exc:
            log.warning("ignoring malformed channel list: %s", exc)


def stream_channel(sock, chnid: int, sink) -> int:
    """Write the payload of every packet for `chnid` to `sink`.

    Runs until the socket yields an empty read; returns the bytes written.
    """
    total = 0
    while True:
        packet = sock.recv(BUFSIZE)
        if not packet:
            return total
        if packet[0] != chnid:
            continue
        payload = packet[1:]
        sink.write(payload)
        sink.flush()
        total += len(payload)
        log.debug("wrote %d bytes to the player", len(payload))


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Multicast radio client.")
    parser.add_argument("--group", default=GROUP_ADDR, help="multicast group address")
    parser.add_argument("--port", type=int, default=RCV_PORT, help="port to listen on")
    parser.add_argument("--interface", default=None, help="network interface to join on")
    parser.add_argument(
        "--player",
        default=shlex.join(PLAYER_CMD),
        help="player command that reads audio from standard input",
    )
    args = parser.parse_args(argv)

    try:
        player = subprocess.Popen(shlex.split(args.player), stdin=subprocess.PIPE)
    except OSError as exc:
        print(f"cannot start player: {exc}", file=sys.stderr)
        return 1

    try:
        with open_multicast_socket(args.group, args.port, args.interface) as sock:
            channels = wait_for_channel_list(sock)
            print("Channels:")
            for entry in channels:
                print(f"[{entry.chnid}] : {entry.descr}")
            try:
                chnid = int(input("Choose a channel: "))
            except (ValueError, EOFError):
                print("invalid channel", file=sys.stderr)
                return 1
            stream_channel(sock, chnid, player.stdin)
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        pass
    finally:
        with contextlib.suppress(OSError):
            player.stdin.close()
        if player.poll() is None:
            player.terminate()
        player.wait()
    return 0


if __name__ == "__main__":
    sys.exit(main())