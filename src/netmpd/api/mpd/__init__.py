"""MPD client module.

This module provides a synchronous client for the MPD text protocol:
command encoding, response decoding, version-gated status attributes and
the command registry.

Example:
    from netmpd.api.mpd import MpdClient

    with MpdClient("192.168.1.100") as client:
        client.refresh_status()
        print(client.get("state"), client.get("volume"))
        songs = client.playlist_info()
"""

from netmpd.api.mpd.attributes import ATTRIBUTES, AttributeSpec, MpdVersionError, StatusModel
from netmpd.api.mpd.client import MpdClient
from netmpd.api.mpd.commands import COMMANDS, CommandSpec
from netmpd.api.mpd.connection import (
    MpdAuthError,
    MpdConnection,
    MpdConnectionError,
    MpdHandshakeError,
    MpdTransportError,
)
from netmpd.api.mpd.protocol import MpdClientError, MpdError
from netmpd.api.mpd.types import (
    CommandResult,
    ProtocolVersion,
    Response,
    ResultKind,
    ServerAddress,
)

__all__ = [
    "ATTRIBUTES",
    "COMMANDS",
    "AttributeSpec",
    "CommandResult",
    "CommandSpec",
    "MpdAuthError",
    "MpdClient",
    "MpdClientError",
    "MpdConnection",
    "MpdConnectionError",
    "MpdError",
    "MpdHandshakeError",
    "MpdTransportError",
    "MpdVersionError",
    "ProtocolVersion",
    "Response",
    "ResultKind",
    "ServerAddress",
    "StatusModel",
]
