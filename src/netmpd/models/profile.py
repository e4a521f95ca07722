"""Saved MPD server profiles."""

import hashlib
from dataclasses import dataclass, replace
from typing import Self

from netmpd.api.mpd.types import DEFAULT_PORT, ServerAddress


@dataclass(frozen=True)
class ServerProfile:
    """A named MPD server the user has saved.

    Attributes:
        id: Stable key, derived from host and port by create_profile().
        name: Label chosen by the user ("Kitchen").
        host: Hostname, IP address or Unix socket path.
        port: TCP port.
        password: MPD password; empty when the server has none.
        auto_connect: Used when no address is given on the command line.
    """

    id: str
    name: str
    host: str
    port: int = DEFAULT_PORT
    password: str = ""
    auto_connect: bool = False

    def with_auto_connect(self, auto_connect: bool) -> Self:
        """Return a copy with the auto_connect flag replaced."""
        return replace(self, auto_connect=auto_connect)

    def to_address(self) -> ServerAddress:
        """Return the address to hand to MpdClient."""
        return ServerAddress(self.host, self.port, self.password or None)


def create_profile(
    name: str,
    host: str,
    port: int = DEFAULT_PORT,
    password: str = "",
    auto_connect: bool = False,
) -> ServerProfile:
    """Build a profile whose id is a short hash of "host:port".

    Saving the same server twice therefore replaces the earlier entry,
    whatever its name or password.
    """
    digest = hashlib.md5(f"{host}:{port}".encode()).hexdigest()
    return ServerProfile(
        id=digest[:8],
        name=name,
        host=host,
        port=port,
        password=password,
        auto_connect=auto_connect,
    )
