"""Media library: channels are directories holding descr.txt and mp3 files."""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass
from pathlib import Path

from mcradio.proto import CHN_MIN_ID, MAX_CHN_NR

DESCR_FILE = "descr.txt"
DESCR_LEN = 128
MP3_MARK = ".mp3"
MAX_TRACKS = 100


class MediaLibraryError(Exception):
    """Raised when the library cannot be scanned or a channel cannot be read."""


@dataclass(frozen=True)
class Channel:
    """A channel found in the library."""

    chnid: int
    descr: str
    path: Path
    tracks: tuple[Path, ...]


class _Player:
    """Playback position of one channel."""

    def __init__(self, tracks: tuple[Path, ...]):
        self.tracks = tracks
        self.index = 0
        self.handle = None
        self.lock = threading.Lock()

    def close(self) -> None:
        if self.handle is not None:
            self.handle.close()
            self.handle = None


def _list_dir(path: Path) -> list[str]:
    try:
        return sorted(os.listdir(path))
    except OSError as exc:
        raise MediaLibraryError(f"cannot read directory {path}: {exc}") from exc


def _read_descr(path: Path) -> str:
    try:
        with open(path, "rb") as handle:
            raw = handle.read(DESCR_LEN)
    except OSError as exc:
        raise MediaLibraryError(f"cannot read {path}: {exc}") from exc
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")


class MediaLibrary:
    """Scans a media root and streams each channel's tracks in a loop."""

    def __init__(self, root):
        self.root = Path(root)
        self._channels: list[Channel] = []
        self._players: dict[int, _Player] = {}
        for name in _list_dir(self.root):
            if name.startswith("."):
                continue
            if len(self._channels) >= MAX_CHN_NR:
                break
            chn_path = self.root / name
            if not chn_path.is_dir():
                continue
            names = _list_dir(chn_path)
            tracks = tuple(
                chn_path / entry
                for entry in names
                if MP3_MARK in entry and (chn_path / entry).is_file()
            )[:MAX_TRACKS]
            has_descr = any(DESCR_FILE in entry for entry in names)
            if not (tracks and has_descr):
                continue
            chnid = CHN_MIN_ID + len(self._channels)
            descr = _read_descr(chn_path / DESCR_FILE)
            self._channels.append(Channel(chnid, descr, chn_path, tracks))
            self._players[chnid] = _Player(tracks)

    def channels(self) -> list[Channel]:
        """The channels found, in id order."""
        return list(self._channels)

    def read(self, chnid: int, size: int) -> bytes:
        """Read up to `size` bytes of the channel, moving on to the next track at EOF."""
        if size <= 0:
            raise ValueError("size must be positive")
        player = self._players.get(chnid)
        if player is None:
            raise MediaLibraryError(f"no channel {chnid}")
        with player.lock:
            empty_reads = 0
            while True:
                track = player.tracks[player.index]
                if player.handle is None:
                    try:
                        player.handle = open(track, "rb")
                    except OSError as exc:
                        raise MediaLibraryError(f"cannot open {track}: {exc}") from exc
                try:
                    data = player.handle.read(size)
                except OSError as exc:
                    player.close()
                    raise MediaLibraryError(f"cannot read {track}: {exc}") from exc
                if data:
                    return data
                player.close()
                player.index = (player.index + 1) % len(player.tracks)
                empty_reads += 1
                if empty_reads > len(player.tracks):
                    raise MediaLibraryError(f"channel {chnid} has no data")

    def close(self) -> None:
        """Close every open track."""
        for player in self._players.values():
            with player.lock:
                player.close()

    def __enter__(self) -> "MediaLibrary":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()