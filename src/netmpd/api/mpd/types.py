"""MPD protocol data types.

This module defines frozen dataclasses for MPD versions, raw responses and
decoded command results.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Self

if TYPE_CHECKING:
    from netmpd.api.mpd.protocol import MpdError

DEFAULT_PORT = 6600
DEFAULT_HOST = "localhost"

# A decoded item is either a multi-key record or an unwrapped bare value
Record = dict[str, str]
Item = Record | str

_VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)(?:\.(\d+))?$")


@dataclass(frozen=True, order=True)
class ProtocolVersion:
    """MPD protocol version (major.minor.patch).

    Ordering follows standard version ordering, so versions can be compared
    directly against attribute minimums.
    """

    major: int = 0
    minor: int = 0
    patch: int = 0

    @classmethod
    def parse(cls, text: str) -> Self:
        """Parse "0.23.5" or the short form "0.15" (patch defaults to 0).

        Raises:
            ValueError: If the text is not a dotted version.
        """
        match = _VERSION_PATTERN.match(text.strip())
        if not match:
            raise ValueError(f"Invalid MPD version: {text!r}")
        major, minor, patch = match.groups()
        return cls(int(major), int(minor), int(patch or 0))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True)
class ServerAddress:
    """Where an MPD server lives.

    Attributes:
        host: Hostname, IP, or a filesystem path for a local socket.
        port: TCP port (ignored for local sockets).
        password: Optional password sent right after the handshake.
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    password: str | None = None

    @property
    def is_local_socket(self) -> bool:
        """Return True if host is a Unix socket path."""
        return "/" in self.host

    def __str__(self) -> str:
        if self.is_local_socket:
            return self.host
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class Response:
    """One round trip: the terminator line plus the data lines before it.

    Attributes:
        terminator: "OK" or the full "ACK ..." line.
        lines: Data lines received before the terminator, in order.
    """

    terminator: str
    lines: tuple[str, ...] = ()

    @property
    def is_error(self) -> bool:
        """Return True if the server answered with an ACK."""
        return self.terminator.startswith("ACK")


class ResultKind(Enum):
    """Shape of a decoded command result."""

    ABSENT = "absent"
    SINGLE = "single"
    MULTIPLE = "multiple"


@dataclass(frozen=True)
class CommandResult:
    """Decoded result of a registry command.

    Callers should branch on ``kind`` instead of guessing from the value:

        result = client.playlist_info()
        if result.kind is ResultKind.MULTIPLE:
            for song in result.items: ...

    Attributes:
        kind: ABSENT, SINGLE or MULTIPLE.
        items: Decoded records or bare values, in server order.
        error: The ACK error when the server rejected the command.
    """

    kind: ResultKind
    items: tuple[Item, ...] = ()
    error: MpdError | None = field(default=None, compare=False)

    @classmethod
    def from_items(cls, items: list[Item]) -> Self:
        """Build a result whose kind follows from the item count."""
        if not items:
            return cls(ResultKind.ABSENT)
        if len(items) == 1:
            return cls(ResultKind.SINGLE, tuple(items))
        return cls(ResultKind.MULTIPLE, tuple(items))

    @classmethod
    def failed(cls, error: MpdError) -> Self:
        """Build the absent result reported for an ACK."""
        return cls(ResultKind.ABSENT, error=error)

    @property
    def ok(self) -> bool:
        """Return True if the server did not reject the command."""
        return self.error is None

    @property
    def value(self) -> Item | None:
        """Return the single item, or None when the result is not SINGLE."""
        if self.kind is ResultKind.SINGLE:
            return self.items[0]
        return None

    def raise_for_error(self) -> Self:
        """Raise the ACK error if there is one, else return self."""
        if self.error is not None:
            raise self.error
        return self

    def __bool__(self) -> bool:
        return self.kind is not ResultKind.ABSENT

    def __iter__(self) -> Iterator[Item]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)
