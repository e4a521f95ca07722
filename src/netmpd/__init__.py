"""netmpd - a synchronous client for the MPD protocol."""

from netmpd.api.mpd import MpdClient

__version__ = "0.1.0"

__all__ = ["MpdClient", "__version__"]
