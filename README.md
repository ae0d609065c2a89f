# mcradio

A small multicast radio. The server scans a media library of channel
directories. It streams MP3 data for each channel to a UDP multicast group
and announces the channel list once a second. The client joins the group and
prints the channel list. It then pipes the chosen channel into an external
audio player.

## Installing

```
pip install .
```

The client does not decode audio itself. It starts a player command that
reads audio from standard input. The default command is
`mplayer -cache 8192 -cache-min 5 -`, so `mplayer` must be on the `PATH`
unless you pass `--player`.

## Media library layout

Every channel is a subdirectory of the library root. A subdirectory becomes a
channel when two conditions hold:

- it has an entry whose name contains `descr.txt`;
- it has at least one regular file whose name contains `.mp3`.

The channel description is read from `descr.txt`, up to its first 128 bytes.
Subdirectories whose names start with a dot are skipped. Channels are numbered
from 1 in the sorted order of their directory names. At most 200 channels are
used, with at most 100 tracks per channel. A channel plays its tracks in
sorted order and starts again from the first track after the last one.

```
media/
    jazz/
        descr.txt
        a.mp3
        b.mp3
    rock/
        descr.txt
        c.mp3
```

## Running

Start the server, giving it the library root:

```
mcradio-server media/
```

Server options:

- `--group`: the multicast group address. The default is `226.2.3.4`.
- `--port`: the destination port. The default is `5367`.
- `--interface`: the network interface to send on, for example `eth0`.

The server runs until it is interrupted with Ctrl-C.

Start a client on a machine in the same network:

```
mcradio-client
```

Client options:

- `--group`, `--port` and `--interface`, as for the server. The client binds
  to the port and joins the group on that interface.
- `--player`: the player command. It is split like a shell command line.

The client prints the channels it receives, for example `[1] : jazz`. It then
asks you to choose a channel. Enter a channel number and the payload of every
packet for that channel is written to the player's standard input.

## Wire format

Every datagram starts with a one-byte channel id.

- **Channel id 0** carries the channel list. Each entry after the id holds
  the channel id as one byte, then the entry length as a little-endian 16-bit
  value, then the description as a NUL-terminated UTF-8 string. The entry
  length counts the 3 header bytes and the terminating NUL. Entries that
  would make the packet longer than 1024 bytes are left out.
- **Channel ids 1 to 200** carry raw MP3 data for that channel, at most 1023
  bytes per packet.

A channel's data is rate-limited by a token bucket. The bucket gains 64 Ki
tokens each second and holds at most 128 Ki tokens. Every packet costs 1024
tokens.

## Library use

Each module can also be used on its own:

- `mcradio.proto`: `encode_channel_list`, `decode_channel_list`,
  `encode_channel_data`, `decode_channel_data`, `ChannelEntry`, and
  `ProtocolError` for values and packets that do not fit the format.
- `mcradio.medialib.MediaLibrary(root)`: scans a library root.
  - `channels()` returns the `Channel` records it found.
  - `read(chnid, size)` returns a channel's next bytes and cycles through its
    tracks without end.
  - `close()` closes any open tracks. The library is also a context manager.
  - Failures raise `MediaLibraryError`.
- `mcradio.tbf.TokenBucket(cps, burst, interval=1.0)`: a token bucket.
  - `fetch(ntokens)` blocks until enough tokens are there.
  - `close()` makes waiting fetches raise `TokenBucketError`.
  - The bucket is also a context manager.
- `mcradio.thrpool.ThreadPool(max_threads, min_free_threads, queue_size)`: a
  thread pool that adds a worker when all are busy and retires idle workers
  beyond the minimum.
  - `submit(func, *args)` blocks while the queue is full.
  - `shutdown()` waits for running tasks and drops queued ones.
- `mcradio.ringqueue.RingQueue(capacity)`: a fixed-capacity FIFO queue with
  `enqueue`, `dequeue`, `empty`, `full` and `len()`. It raises
  `QueueFullError` or `QueueEmptyError`.
- `mcradio.server.RadioServer(library, sock, address)` and
  `build_channel_list_packet(channels)`. The server also has `run()`,
  `send_channel_list(interval)` and `send_channel_data(chnid)`.
- `mcradio.client`: `open_multicast_socket`, `wait_for_channel_list` and
  `stream_channel(sock, chnid, sink)`.

```python
from mcradio.proto import ChannelEntry, encode_channel_list, decode_channel_list

packet = encode_channel_list([ChannelEntry(1, "jazz"), ChannelEntry(2, "rock")])
for entry in decode_channel_list(packet):
    print(entry.chnid, entry.descr)
```

## Tests

```
pip install .[test]
pytest
```