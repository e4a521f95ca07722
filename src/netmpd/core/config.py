"""Persistent netmpd settings backed by QSettings.

Holds the saved server profiles, which of them was used last, the default
server address and the socket read timeout. QSettings picks the storage
location per platform (registry on Windows, a plist on macOS and
``~/.config/netmpd/netmpd.conf`` on Linux).
"""

import logging
from typing import cast

from PySide6.QtCore import QSettings

from netmpd.api.mpd.types import DEFAULT_PORT
from netmpd.models.profile import ServerProfile

logger = logging.getLogger(__name__)

_KEY_SERVERS = "servers"
_KEY_LAST_SERVER = "last_server"
_KEY_MPD_ADDRESS = "mpd/address"
_KEY_MPD_TIMEOUT = "mpd/timeout"

_MAX_TIMEOUT = 3600

# QSettings INI backends hand booleans back as strings
_TRUE_VALUES = (True, 1, "true", "1")


def _clamp_timeout(seconds: int) -> int:
    return max(0, min(_MAX_TIMEOUT, seconds))


def _profile_to_dict(profile: ServerProfile) -> dict[str, object]:
    return {
        "id": profile.id,
        "name": profile.name,
        "host": profile.host,
        "port": profile.port,
        "password": profile.password,
        "auto_connect": profile.auto_connect,
    }


def _profile_from_dict(entry: dict[str, object]) -> ServerProfile:
    """Build a profile from one stored entry.

    Raises:
        ValueError: If the entry has no host or a non-numeric port.
    """
    host = str(entry.get("host") or "")
    if not host:
        raise ValueError("profile has no host")
    port = entry.get("port") or DEFAULT_PORT
    return ServerProfile(
        id=str(entry.get("id") or ""),
        name=str(entry.get("name") or host),
        host=host,
        port=int(cast(int | str, port)),
        password=str(entry.get("password") or ""),
        auto_connect=entry.get("auto_connect", False) in _TRUE_VALUES,
    )


class ConfigManager:
    """Typed access to the netmpd settings.

    Example:
        config = ConfigManager()
        config.add_server_profile(create_profile("Kitchen", "kitchen.local"))
        address = config.get_profile("Kitchen").to_address()
    """

    def __init__(self, organization: str = "netmpd", application: str = "netmpd") -> None:
        """Open the settings store.

        Args:
            organization: QSettings organization name.
            application: QSettings application name.
        """
        self._settings = QSettings(organization, application)

    # -- Server profiles -------------------------------------------------------

    def get_server_profiles(self) -> list[ServerProfile]:
        """Load the saved server profiles.

        Entries that cannot be read (no host, non-numeric port) are logged
        and skipped.

        Returns:
            Profiles in stored order, or an empty list if none are saved.
        """
        stored = self._settings.value(_KEY_SERVERS, [], list)
        if not isinstance(stored, list):
            return []

        profiles: list[ServerProfile] = []
        for entry in cast(list[object], stored):
            if not isinstance(entry, dict):
                logger.warning("Ignoring malformed server profile: %r", entry)
                continue
            try:
                profiles.append(_profile_from_dict(cast(dict[str, object], entry)))
            except (TypeError, ValueError) as e:
                logger.warning("Ignoring server profile %r: %s", entry.get("id"), e)
        return profiles

    def save_server_profiles(self, profiles: list[ServerProfile]) -> None:
        """Persist server profiles, replacing whatever was stored.

        Args:
            profiles: Profiles to save, in display order.
        """
        self._settings.setValue(_KEY_SERVERS, [_profile_to_dict(p) for p in profiles])

    def add_server_profile(self, profile: ServerProfile) -> None:
        """Add a server profile.

        A stored profile with the same id is replaced; the new one goes last.

        Args:
            profile: Profile to save.
        """
        others = [p for p in self.get_server_profiles() if p.id != profile.id]
        self.save_server_profiles([*others, profile])

    def remove_server_profile(self, profile_id: str) -> bool:
        """Remove a server profile by id.

        Args:
            profile_id: Id of the profile to remove.

        Returns:
            True if a profile was removed, False if none had that id.
        """
        profiles = self.get_server_profiles()
        kept = [p for p in profiles if p.id != profile_id]
        if len(kept) == len(profiles):
            return False
        self.save_server_profiles(kept)
        return True

    def get_profile(self, key: str) -> ServerProfile | None:
        """Look up a server profile.

        Args:
            key: Profile id, or its human-readable name. Ids are matched
                first.

        Returns:
            The matching ServerProfile, or None.
        """
        profiles = self.get_server_profiles()
        by_id = next((p for p in profiles if p.id == key), None)
        if by_id is not None:
            return by_id
        return next((p for p in profiles if p.name == key), None)

    def get_last_server_id(self) -> str | None:
        """Get the id of the profile last selected with --profile.

        Returns:
            Profile id, or None if none was recorded.
        """
        value = self._settings.value(_KEY_LAST_SERVER, "", str)
        return str(value) or None

    def set_last_server_id(self, server_id: str) -> None:
        """Record the profile last selected.

        Args:
            server_id: Id of the selected profile.
        """
        self._settings.setValue(_KEY_LAST_SERVER, server_id)

    def get_auto_connect_profile(self) -> ServerProfile | None:
        """Get the profile marked for auto-connect.

        Returns:
            The first profile with auto_connect=True, or None.
        """
        return next((p for p in self.get_server_profiles() if p.auto_connect), None)

    # -- MPD settings ----------------------------------------------------------

    def get_default_address(self) -> str:
        """Get the default server address.

        Returns:
            A "[password@]host[:port]" string, or "" for localhost.
        """
        return str(self._settings.value(_KEY_MPD_ADDRESS, "", str) or "")

    def set_default_address(self, address: str) -> None:
        """Set the default server address.

        Args:
            address: "[password@]host[:port]" used when nothing else
                selects a server.
        """
        self._settings.setValue(_KEY_MPD_ADDRESS, address)

    def get_timeout(self) -> float | None:
        """Get the socket read timeout.

        Returns:
            Timeout in seconds, or None to block (the default).
        """
        stored = self._settings.value(_KEY_MPD_TIMEOUT, 0, int)
        seconds = _clamp_timeout(int(cast(int, stored)))
        return float(seconds) if seconds else None

    def set_timeout(self, seconds: int) -> None:
        """Set the socket read timeout.

        Args:
            seconds: Timeout in seconds, clamped to 0..3600. 0 blocks.
        """
        self._settings.setValue(_KEY_MPD_TIMEOUT, _clamp_timeout(seconds))

    # -- Store -----------------------------------------------------------------

    def clear(self) -> None:
        """Remove every stored setting."""
        self._settings.clear()

    def sync(self) -> None:
        """Flush pending writes to disk."""
        self._settings.sync()
