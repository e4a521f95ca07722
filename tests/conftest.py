"""Test fixtures for netmpd tests."""

import io
from collections.abc import Callable

import pytest

from netmpd.api.mpd.types import ServerAddress

GREETING = b"OK MPD 0.23.5\n"

STATUS = (
    b"volume: 50\n"
    b"repeat: 0\n"
    b"random: 1\n"
    b"single: 0\n"
    b"consume: 0\n"
    b"playlist: 7\n"
    b"playlistlength: 12\n"
    b"mixrampdb: 0.000000\n"
    b"state: play\n"
    b"song: 3\n"
    b"songid: 42\n"
    b"time: 45:180\n"
    b"elapsed: 45.300\n"
    b"bitrate: 320\n"
    b"xfade: 5\n"
    b"audio: 44100:16:2\n"
    b"OK\n"
)


def greeting(version: str) -> bytes:
    """Return the greeting line for a server version."""
    return f"OK MPD {version}\n".encode()


class FakeSocket:
    """Scripted stand-in for a connected socket.

    Everything the server will ever say on this connection is given up
    front; reads past the end behave like the server hanging up.
    """

    def __init__(self, script: bytes) -> None:
        self._reader = io.BytesIO(script)
        self.sent: list[bytes] = []
        self.closed = False
        self.timeout: float | None = None
        self.fail_writes = False

    def makefile(self, mode: str = "rb") -> io.BytesIO:
        """Return the scripted server output."""
        return self._reader

    def sendall(self, data: bytes) -> None:
        """Record written data."""
        if self.closed or self.fail_writes:
            raise BrokenPipeError("Broken pipe")
        self.sent.append(data)

    def settimeout(self, timeout: float | None) -> None:
        """Record the timeout."""
        self.timeout = timeout

    def fileno(self) -> int:
        """Return -1 once closed, like a real socket."""
        return -1 if self.closed else 3

    def close(self) -> None:
        """Mark as closed."""
        self.closed = True


class FakeServer:
    """Socket factory handing out one FakeSocket per connection attempt."""

    def __init__(self, scripts: list[bytes]) -> None:
        self._scripts = list(scripts)
        self.sockets: list[FakeSocket] = []
        self.addresses: list[ServerAddress] = []

    def __call__(self, address: ServerAddress, timeout: float) -> FakeSocket:
        self.addresses.append(address)
        if not self._scripts:
            raise ConnectionRefusedError("Connection refused")
        sock = FakeSocket(self._scripts.pop(0))
        self.sockets.append(sock)
        return sock

    @property
    def connections(self) -> int:
        """Return how many sockets were opened."""
        return len(self.sockets)

    @property
    def written(self) -> list[str]:
        """Return every line written, across all connections."""
        return [data.decode() for sock in self.sockets for data in sock.sent]


@pytest.fixture
def fake_server() -> Callable[..., FakeServer]:
    """Create a FakeServer from one script per connection."""

    def _fake_server(*scripts: bytes) -> FakeServer:
        return FakeServer(list(scripts))

    return _fake_server
