"""Synchronous MPD client.

This module ties the connection, the status attributes and the command
registry together behind one object.

Example:
    with MpdClient.from_address("secret@192.168.1.100:6600") as client:
        client.stop()
        client.clear()
        client.search_add("Artist", "David Bowie")
        client.play()
        client.set("volume", 80)
        for changed in client.idle():
            print(f"Changed: {changed}")
"""

import logging
from collections.abc import Callable
from functools import partial
from typing import Self

from netmpd.api.mpd.attributes import StatusModel
from netmpd.api.mpd.commands import COMMANDS, CommandSpec
from netmpd.api.mpd.connection import MpdConnection, SocketFactory
from netmpd.api.mpd.protocol import make_result, parse_address
from netmpd.api.mpd.types import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    CommandResult,
    ProtocolVersion,
    Record,
    ServerAddress,
)

logger = logging.getLogger(__name__)


class MpdClient:
    """Blocking MPD client.

    The connection is opened on construction; failures there propagate. Every
    later call reconnects first if the socket has gone away. Commands from
    the registry are available as methods (``client.play_id(3)``) and return
    a CommandResult; an ACK is logged and comes back as an absent result
    carrying the error.

    Not thread-safe. Use one client per thread or guard it with a lock.

    Attributes:
        address: Server address the client connects to.
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        password: str | None = None,
        *,
        timeout: float | None = None,
        socket_factory: SocketFactory | None = None,
    ) -> None:
        """Connect to an MPD server.

        Args:
            host: Hostname, IP, or Unix socket path.
            port: TCP port.
            password: Optional password.
            timeout: Read timeout in seconds (None blocks, needed for idle).
            socket_factory: Replaces socket creation, mainly for tests.

        Raises:
            MpdConnectionError: If the server cannot be reached.
            MpdHandshakeError: If the server is not MPD.
            MpdAuthError: If the password is rejected.
        """
        self.address = ServerAddress(host, port, password)
        self._connection = MpdConnection(
            self.address,
            timeout=timeout,
            socket_factory=socket_factory,
        )
        self._status = StatusModel(self._connection)
        self._connection.on_connect = self._status.refresh
        self._connection.handshake()

    @classmethod
    def from_address(
        cls,
        address: str | None = None,
        *,
        timeout: float | None = None,
        socket_factory: SocketFactory | None = None,
    ) -> Self:
        """Connect using "[password@]host[:port]".

        Args:
            address: Address string; empty means localhost:6600.
            timeout: Read timeout in seconds (None blocks).
            socket_factory: Replaces socket creation, mainly for tests.
        """
        parsed = parse_address(address)
        return cls(
            parsed.host,
            parsed.port,
            parsed.password,
            timeout=timeout,
            socket_factory=socket_factory,
        )

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"MpdClient({self.address}, version={self.version})"

    def __getattr__(self, name: str) -> Callable[..., CommandResult]:
        if name in COMMANDS:
            return partial(self.run, name)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    @property
    def connection(self) -> MpdConnection:
        """Return the underlying connection."""
        return self._connection

    @property
    def version(self) -> ProtocolVersion | None:
        """Return the protocol version the server announced."""
        return self._connection.version

    @property
    def is_connected(self) -> bool:
        """Return True if the socket is open."""
        return self._connection.is_connected

    @property
    def status(self) -> Record:
        """Return a copy of the cached status snapshot."""
        return self._status.snapshot

    # -------------------------------------------------------------------------
    # Status attributes
    # -------------------------------------------------------------------------

    def refresh_status(self) -> Record:
        """Fetch ``status`` and replace the cached snapshot."""
        return self._status.refresh()

    def get(self, name: str) -> object:
        """Return a status attribute (volume, state, song_id, ...)."""
        return self._status.get(name)

    def set(self, name: str, value: object) -> object:
        """Write a status attribute and return its new value."""
        return self._status.set(name, value)

    def replay_gain_mode(self, mode: str | None = None) -> str | None:
        """Return the replay gain mode, setting it first if mode is given."""
        return self._status.replay_gain_mode(mode)

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def command_spec(self, name: str) -> CommandSpec:
        """Look up a registered command.

        Raises:
            KeyError: If no command has that name.
        """
        try:
            return COMMANDS[name]
        except KeyError:
            raise KeyError(f"Unknown MPD command: {name}") from None

    def run(self, name: str, *args: object) -> CommandResult:
        """Run a registered command.

        ``idle`` blocks until the server reports a change; set a timeout on
        the client if the wait must be bounded.

        Args:
            name: Friendly command name (e.g. "playlist_info").
            *args: Positional arguments, sent as-is.

        Returns:
            The decoded result; absent with ``error`` set on an ACK.

        Raises:
            KeyError: If the command is unknown.
            MpdConnectionError: If a reconnect fails.
            MpdTransportError: If the socket fails mid-command.
        """
        spec = self.command_spec(name)
        response = self._connection.send(
            spec.command, *args, expect_response=spec.expects_response
        )
        result = make_result(response)
        if result.error is not None:
            logger.warning("MPD %s failed: %s", spec.command, result.error)
        return result

    def close(self) -> None:
        """Close the connection. A later command reconnects."""
        self._connection.close()
