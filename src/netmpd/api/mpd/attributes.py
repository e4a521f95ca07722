"""Version-gated MPD status attributes.

Each status field the client exposes is described once by an AttributeSpec:
the wire key in the ``status`` response, the command that writes it and the
oldest protocol version that supports it. StatusModel reads values from the
cached status snapshot and writes them through the connection.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from netmpd.api.mpd.connection import MpdConnection
from netmpd.api.mpd.protocol import MpdClientError, classify, parse_pairs, to_wire
from netmpd.api.mpd.types import ProtocolVersion, Record

logger = logging.getLogger(__name__)


class MpdVersionError(MpdClientError):
    """The server is too old for the requested attribute."""

    def __init__(self, name: str, required: ProtocolVersion, actual: ProtocolVersion) -> None:
        self.name = name
        self.required = required
        self.actual = actual
        super().__init__(f"{name} requires MPD {required}, server speaks {actual}")


def _flag(value: str) -> bool:
    return value == "1"


@dataclass(frozen=True)
class AttributeSpec:
    """Registration of one status attribute.

    Attributes:
        name: Friendly name (e.g. "song_id").
        key: Key in the status response (e.g. "songid").
        command: Command that writes the value (e.g. "setvol").
        min_version: Oldest protocol version exposing the field.
        readonly: True if the attribute has no setter.
        convert: Turns the raw status string into a typed value.
    """

    name: str
    key: str
    command: str
    min_version: ProtocolVersion
    readonly: bool = False
    convert: Callable[[str], object] = str


def attribute(
    name: str,
    *,
    key: str | None = None,
    command: str | None = None,
    version: str = "0.0",
    readonly: bool = False,
    convert: Callable[[str], object] = str,
) -> AttributeSpec:
    """Create an AttributeSpec; key and command default to name without underscores."""
    normal_name = name.replace("_", "")
    return AttributeSpec(
        name=name,
        key=key or normal_name,
        command=command or normal_name,
        min_version=ProtocolVersion.parse(version),
        readonly=readonly,
        convert=convert,
    )


ATTRIBUTES: dict[str, AttributeSpec] = {
    spec.name: spec
    for spec in (
        attribute("volume", command="setvol", convert=int),
        attribute("repeat", convert=_flag),
        attribute("random", convert=_flag),
        # 0.21 added "oneshot" next to 0/1, so these stay strings
        attribute("single", version="0.15"),
        attribute("consume", version="0.15"),
        attribute("playlist", readonly=True, convert=int),
        attribute("playlist_length", readonly=True, convert=int),
        attribute("state", readonly=True),
        attribute("song", readonly=True, convert=int),
        attribute("song_id", readonly=True, convert=int),
        attribute("next_song", readonly=True, convert=int),
        attribute("next_song_id", readonly=True, convert=int),
        attribute("time", readonly=True),
        attribute("elapsed", readonly=True, version="0.16", convert=float),
        attribute("bitrate", readonly=True, convert=int),
        attribute("crossfade", key="xfade", convert=int),
        attribute("mix_ramp_db", convert=float),
        attribute("mix_ramp_delay", convert=float),
        attribute("audio", readonly=True),
        attribute("updating_db", key="updating_db", readonly=True, convert=int),
        attribute("error", readonly=True),
    )
}


class StatusModel:
    """Cached MPD status with typed, version-gated accessors.

    Getters never touch the network: they read the snapshot taken by the
    last refresh(). Setters write through the connection and, on success,
    patch the snapshot with the value they sent instead of asking the server
    again. A server that clamps a value (volume 150 -> 100) is therefore not
    reflected until the next refresh().

    Example:
        model = StatusModel(connection)
        model.refresh()
        model.set("volume", 80)
        assert model.get("volume") == 80
    """

    def __init__(self, connection: MpdConnection) -> None:
        """Initialize with an empty snapshot.

        Args:
            connection: Connection used for status and set commands.
        """
        self._connection = connection
        self._snapshot: Record = {}

    @property
    def snapshot(self) -> Record:
        """Return a copy of the cached status."""
        return dict(self._snapshot)

    def refresh(self) -> Record:
        """Replace the snapshot with a fresh ``status`` response.

        On an ACK the previous snapshot is kept and the error is logged.

        Returns:
            A copy of the (possibly unchanged) snapshot.
        """
        response = self._connection.send("status")
        error = classify(response)
        if error is not None:
            logger.warning("MPD status refresh failed: %s", error)
        else:
            self._snapshot = parse_pairs(response.lines)
        return self.snapshot

    def spec(self, name: str) -> AttributeSpec:
        """Look up an attribute registration.

        Raises:
            KeyError: If no attribute has that name.
        """
        try:
            return ATTRIBUTES[name]
        except KeyError:
            raise KeyError(f"Unknown MPD attribute: {name}") from None

    def require(self, spec: AttributeSpec) -> None:
        """Fail unless the server speaks at least spec.min_version.

        Raises:
            MpdVersionError: If the server is too old.
        """
        if self._connection.version is None:
            self._connection.ensure_connected()
        version = self._connection.version or ProtocolVersion()
        if version < spec.min_version:
            raise MpdVersionError(spec.name, spec.min_version, version)

    def get(self, name: str) -> object:
        """Return the typed value of an attribute from the snapshot.

        Returns:
            The converted value, or None if the server did not report it.

        Raises:
            KeyError: If the attribute is unknown.
            MpdVersionError: If the server is too old.
        """
        spec = self.spec(name)
        self.require(spec)

        raw = self._snapshot.get(spec.key)
        if raw is None:
            return None
        try:
            return spec.convert(raw)
        except ValueError:
            logger.warning("Unexpected MPD %s value: %r", spec.key, raw)
            return raw

    def set(self, name: str, value: object) -> object:
        """Write an attribute and return its value afterwards.

        An ACK is logged and leaves the snapshot untouched.

        Returns:
            The getter value after the write.

        Raises:
            KeyError: If the attribute is unknown.
            AttributeError: If the attribute is read-only.
            MpdVersionError: If the server is too old.
        """
        spec = self.spec(name)
        if spec.readonly:
            raise AttributeError(f"MPD attribute {name} is read-only")
        self.require(spec)

        wire_value = to_wire(value)
        error = classify(self._connection.send(spec.command, wire_value))
        if error is not None:
            logger.warning("Setting MPD %s failed: %s", name, error)
        else:
            self._snapshot[spec.key] = wire_value

        return self.get(name)

    def replay_gain_mode(self, mode: str | None = None) -> str | None:
        """Get, and optionally set, the replay gain mode.

        Unlike the other attributes this always asks the server
        (``replay_gain_status``) rather than reading the snapshot.

        Args:
            mode: "off", "track", "album" or "auto" to set first.

        Returns:
            The mode reported by the server, or None on an ACK.
        """
        if mode is not None:
            error = classify(self._connection.send("replay_gain_mode", mode))
            if error is not None:
                logger.warning("Setting MPD replay gain mode failed: %s", error)

        response = self._connection.send("replay_gain_status")
        error = classify(response)
        if error is not None:
            logger.warning("MPD replay_gain_status failed: %s", error)
            return None
        return parse_pairs(response.lines).get("replay_gain_mode")
