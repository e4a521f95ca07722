"""API clients for MPD."""

from netmpd.api.mpd import MpdClient, MpdClientError, MpdError

__all__ = ["MpdClient", "MpdClientError", "MpdError"]
