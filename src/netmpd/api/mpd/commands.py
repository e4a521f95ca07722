"""MPD command registry.

Maps the friendly, underscore-separated names exposed by MpdClient to wire
command names. Arguments are passed through untouched; the shape of the
result (absent, single, multiple) is derived from the response itself.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CommandSpec:
    """One registered command.

    Attributes:
        name: Friendly name (e.g. "play_id").
        command: Wire command (e.g. "playid").
        expects_response: False when the server hangs up instead of replying.
    """

    name: str
    command: str
    expects_response: bool = True


def command(name: str, wire: str | None = None, *, expects_response: bool = True) -> CommandSpec:
    """Create a CommandSpec; the wire name defaults to name without underscores."""
    return CommandSpec(name, wire or name.replace("_", ""), expects_response)


COMMANDS: dict[str, CommandSpec] = {
    spec.name: spec
    for spec in (
        # Status
        command("clear_error"),
        command("current_song"),
        command("idle"),
        command("stats"),
        # Playback
        command("next"),
        command("pause"),
        command("play"),
        command("play_id"),
        command("previous"),
        command("seek"),
        command("seek_id"),
        command("seek_cur"),
        command("stop"),
        # Current playlist
        command("add"),
        command("add_id"),
        command("clear"),
        command("delete"),
        command("delete_id"),
        command("move"),
        command("move_id"),
        command("playlist_find"),
        command("playlist_id"),
        command("playlist_info"),
        command("playlist_search"),
        command("playlist_changes", "plchanges"),
        command("playlist_changes_pos_id", "plchangesposid"),
        command("prio"),
        command("prio_id"),
        command("shuffle"),
        command("swap"),
        command("swapid"),
        # Stored playlists
        command("list_playlist"),
        command("list_playlist_info"),
        command("list_playlists"),
        command("load"),
        command("playlist_add"),
        command("playlist_clear"),
        command("playlist_delete"),
        command("playlist_move"),
        command("rename"),
        command("rm"),
        command("save"),
        # Database
        command("count"),
        command("find"),
        command("find_add"),
        command("list"),
        command("list_all"),
        command("list_all_info"),
        command("ls_info"),
        command("search"),
        command("search_add"),
        command("search_add_pl"),
        command("update"),
        command("rescan"),
        # Stickers
        command("sticker"),
        # Connection
        command("close", expects_response=False),
        command("kill", expects_response=False),
        command("ping"),
        # Outputs
        command("disable_output"),
        command("enable_output"),
        command("outputs"),
        # Reflection
        command("config"),
        command("commands"),
        command("not_commands"),
        command("tag_types"),
        command("url_handlers"),
        command("decoders"),
        # Client to client
        command("subscribe"),
        command("unsubscribe"),
        command("channels"),
        command("read_messages"),
        command("send_message"),
    )
}
