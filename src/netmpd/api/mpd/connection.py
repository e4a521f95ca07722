"""Synchronous MPD connection.

MpdConnection owns the socket to one MPD server. It performs the handshake
(greeting, version, password), runs one request/response round trip at a
time and reconnects before a command whenever the socket is gone.

Reconnection only ever happens *before* a command is written. When the server
drops an idle connection (MPD does this deliberately, see
``connection_timeout`` in mpd.conf) the next command fails with
MpdTransportError and the one after it reconnects and succeeds. Nothing is
retried behind the caller's back; send ``ping`` periodically to keep a quiet
connection open.
"""

import logging
import socket
from collections.abc import Callable
from typing import BinaryIO

from netmpd.api.mpd.protocol import (
    SUCCESS,
    MpdClientError,
    classify,
    format_command,
    is_terminator,
    parse_greeting,
)
from netmpd.api.mpd.types import ProtocolVersion, Response, ServerAddress

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT = 5.0

SocketFactory = Callable[[ServerAddress, float], socket.socket]


class MpdConnectionError(MpdClientError):
    """Failed to connect to MPD server."""


class MpdHandshakeError(MpdConnectionError):
    """Connected, but the server did not greet us like MPD."""


class MpdAuthError(MpdConnectionError):
    """The server rejected the configured password."""


class MpdTransportError(MpdClientError):
    """Socket read or write failed in the middle of a command."""


def open_socket(address: ServerAddress, timeout: float) -> socket.socket:
    """Open a TCP or Unix socket to the server.

    Args:
        address: Server to connect to. A host containing "/" is a socket path.
        timeout: Connect timeout in seconds.

    Returns:
        The connected socket.

    Raises:
        OSError: If the connection cannot be made.
    """
    if not address.is_local_socket:
        return socket.create_connection((address.host, address.port), timeout=timeout)

    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    sock.settimeout(timeout)
    try:
        sock.connect(address.host)
    except OSError:
        sock.close()
        raise
    return sock


class MpdConnection:
    """One synchronous connection to an MPD server.

    Not thread-safe: callers sharing a connection between threads must
    serialize access themselves, or use one connection per thread.

    Attributes:
        address: Server address (host, port, password).
        timeout: Read timeout in seconds for established connections, or
            None to block (idle waits until the server reports a change).
        on_connect: Called after every successful handshake.
    """

    def __init__(
        self,
        address: ServerAddress,
        *,
        timeout: float | None = None,
        socket_factory: SocketFactory | None = None,
        on_connect: Callable[[], object] | None = None,
    ) -> None:
        """Initialize the connection without opening it.

        Args:
            address: Server address.
            timeout: Read timeout for commands (None blocks forever).
            socket_factory: Replaces open_socket, mainly for tests.
            on_connect: Hook run after every handshake.
        """
        self.address = address
        self.timeout = timeout
        self.on_connect = on_connect
        self._socket_factory = socket_factory or open_socket

        self._sock: socket.socket | None = None
        self._file: BinaryIO | None = None
        self._version: ProtocolVersion | None = None

    @property
    def host(self) -> str:
        """Return the server host or socket path."""
        return self.address.host

    @property
    def port(self) -> int:
        """Return the server TCP port."""
        return self.address.port

    @property
    def password(self) -> str | None:
        """Return the configured password, if any."""
        return self.address.password

    @property
    def version(self) -> ProtocolVersion | None:
        """Return the protocol version from the last handshake."""
        return self._version

    @property
    def is_connected(self) -> bool:
        """Return True if a socket is open."""
        return self._sock is not None and self._sock.fileno() != -1

    def ensure_connected(self) -> None:
        """Run a full handshake unless a socket is already open.

        Raises:
            MpdConnectionError: If the server cannot be reached or rejects us.
        """
        if not self.is_connected:
            self.handshake()

    def handshake(self) -> None:
        """Open a fresh socket and perform the MPD handshake.

        Reads the greeting, stores the protocol version, authenticates when a
        password is configured and finally runs the on_connect hook.

        Raises:
            MpdConnectionError: If the socket cannot be opened.
            MpdHandshakeError: If the greeting is missing or malformed.
            MpdAuthError: If the password is rejected.
        """
        self._drop()
        logger.debug("Connecting to MPD at %s", self.address)

        try:
            sock = self._socket_factory(self.address, CONNECT_TIMEOUT)
        except TimeoutError as e:
            raise MpdConnectionError(f"Connection to {self.address} timed out") from e
        except OSError as e:
            raise MpdConnectionError(f"Failed to connect to {self.address}: {e}") from e

        sock.settimeout(self.timeout)
        self._sock = sock
        self._file = sock.makefile("rb")

        try:
            greeting = self._read_line()
        except MpdTransportError as e:
            raise MpdHandshakeError(f"No greeting from {self.address}") from e

        version = parse_greeting(greeting)
        if version is None:
            self._drop()
            raise MpdHandshakeError(f"Invalid MPD greeting: {greeting}")

        self._version = version
        logger.info("Connected to MPD %s at %s", version, self.address)

        if self.password:
            error = classify(self._roundtrip(format_command("password", self.password)))
            if error is not None:
                self._drop()
                raise MpdAuthError(f"Authentication failed: {error.message}") from error

        if self.on_connect is not None:
            self.on_connect()

    def send(self, command: str, *args: object, expect_response: bool = True) -> Response:
        """Run one command round trip.

        Args:
            command: Wire command name.
            *args: Command arguments.
            expect_response: False for commands after which the server hangs
                up (close, kill); the connection is dropped after writing.

        Returns:
            The terminator and the data lines before it.

        Raises:
            MpdConnectionError: If a needed reconnect fails.
            MpdTransportError: If the socket fails mid-command.
        """
        line = format_command(command, *args)
        self.ensure_connected()

        if not expect_response:
            self._write(line)
            self._drop()
            return Response(SUCCESS)

        return self._roundtrip(line)

    def close(self) -> None:
        """Say goodbye to the server and drop the socket."""
        if self._sock is not None and self.is_connected:
            try:
                self._sock.sendall(format_command("close").encode())
            except OSError as e:
                logger.debug("Expected error during MPD disconnect: %s", e)
            logger.info("Disconnected from MPD")
        self._drop()

    def _roundtrip(self, line: str) -> Response:
        """Write a line and read up to the terminator."""
        self._write(line)

        lines: list[str] = []
        while True:
            reply = self._read_line()
            if is_terminator(reply):
                return Response(reply, tuple(lines))
            lines.append(reply)

    def _write(self, line: str) -> None:
        if self._sock is None:
            raise MpdTransportError("Not connected")

        if line.startswith("password "):
            logger.debug("MPD command: password ******")
        else:
            logger.debug("MPD command: %s", line.rstrip("\n"))

        try:
            self._sock.sendall(line.encode("utf-8"))
        except OSError as e:
            self._drop()
            raise MpdTransportError(f"Failed to write to {self.address}: {e}") from e

    def _read_line(self) -> str:
        """Read a single line from MPD.

        Raises:
            MpdTransportError: On a socket error, EOF or a line that is not
                valid UTF-8. The socket is dropped in every case.
        """
        if self._file is None:
            raise MpdTransportError("Not connected")

        try:
            raw = self._file.readline()
        except OSError as e:
            self._drop()
            raise MpdTransportError(f"Failed to read from {self.address}: {e}") from e

        if not raw:
            self._drop()
            raise MpdTransportError(f"Connection to {self.address} closed by server")

        try:
            return raw.decode("utf-8").rstrip("\n")
        except UnicodeDecodeError as e:
            # The rest of the reply is still buffered; only a fresh socket is safe
            self._drop()
            raise MpdTransportError(f"Undecodable reply from {self.address}: {e}") from e

    def _drop(self) -> None:
        """Forget the current socket so the next command reconnects."""
        for resource in (self._file, self._sock):
            if resource is None:
                continue
            try:
                resource.close()
            except OSError as e:
                logger.debug("Error closing MPD socket: %s", e)
        self._file = None
        self._sock = None
