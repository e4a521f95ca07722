"""Data models for saved MPD servers."""

from netmpd.models.profile import ServerProfile, create_profile

__all__ = ["ServerProfile", "create_profile"]
