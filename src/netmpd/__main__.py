"""Command-line entry point for netmpd.

Examples:
    netmpd status
    netmpd -a secret@music.local volume 80
    netmpd --profile kitchen playlist_info
    netmpd idle player mixer
"""

import argparse
import logging
import os
import sys
from collections.abc import Mapping, Sequence

from netmpd import __version__
from netmpd.api.mpd import (
    ATTRIBUTES,
    COMMANDS,
    CommandResult,
    MpdClient,
    MpdClientError,
    MpdConnectionError,
    MpdTransportError,
    ServerAddress,
)
from netmpd.api.mpd.protocol import parse_address
from netmpd.core.config import ConfigManager

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_COMMAND_FAILED = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the netmpd tool."""
    parser = argparse.ArgumentParser(
        prog="netmpd",
        description="netmpd - talk to an MPD server",
    )
    parser.add_argument(
        "-a", "--address", default=None, help="[password@]host[:port] of the server",
    )
    parser.add_argument(
        "-p", "--profile", default=None, help="saved server profile (id or name)",
    )
    parser.add_argument(
        "-t", "--timeout", type=float, default=None, help="socket read timeout in seconds",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="log protocol traffic",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "command", help="MPD command, attribute name, 'status' or 'version'",
    )
    parser.add_argument("args", nargs="*", help="command arguments")
    return parser


def resolve_address(
    parsed: argparse.Namespace,
    config: ConfigManager,
    environ: Mapping[str, str] = os.environ,
) -> ServerAddress:
    """Pick the server address.

    Order: --address, --profile, MPD_HOST/MPD_PORT, the profile last chosen
    with --profile, the auto-connect profile, the configured default
    address, localhost.

    Raises:
        ValueError: If the profile is unknown or an address is malformed.
    """
    if parsed.address:
        return parse_address(parsed.address)

    if parsed.profile:
        profile = config.get_profile(parsed.profile)
        if profile is None:
            raise ValueError(f"Unknown server profile: {parsed.profile}")
        config.set_last_server_id(profile.id)
        return profile.to_address()

    if environ.get("MPD_HOST") or environ.get("MPD_PORT"):
        address = parse_address(environ.get("MPD_HOST"))
        if environ.get("MPD_PORT"):
            address = ServerAddress(address.host, int(environ["MPD_PORT"]), address.password)
        return address

    last_id = config.get_last_server_id()
    profile = config.get_profile(last_id) if last_id else None
    if profile is None:
        profile = config.get_auto_connect_profile()
    if profile is not None:
        return profile.to_address()

    return parse_address(config.get_default_address())


def format_result(result: CommandResult) -> str:
    """Render a command result as text.

    Records become "key: value" blocks separated by blank lines; bare
    values are printed one per line.
    """
    blocks: list[str] = []
    for item in result.items:
        if isinstance(item, dict):
            blocks.append("\n".join(f"{key}: {value}" for key, value in item.items()))
        else:
            blocks.append(item)

    separator = "\n\n" if any(isinstance(item, dict) for item in result.items) else "\n"
    return separator.join(blocks)


def run_command(client: MpdClient, command: str, args: Sequence[str]) -> int:
    """Run one CLI command against a connected client.

    Returns:
        Process exit code.
    """
    if command == "version":
        print(client.version)
        return EXIT_OK

    if command == "status":
        for key, value in client.refresh_status().items():
            print(f"{key}: {value}")
        return EXIT_OK

    if command == "replay_gain_mode":
        mode = client.replay_gain_mode(args[0] if args else None)
        if mode is None:
            return EXIT_COMMAND_FAILED
        print(mode)
        return EXIT_OK

    if command in ATTRIBUTES:
        if args and ATTRIBUTES[command].readonly:
            print(f"{command} is read-only", file=sys.stderr)
            return EXIT_USAGE
        if not args:
            value = client.get(command)
        elif len(args) == 1:
            value = client.set(command, args[0])
        else:
            print(f"{command} takes at most one value", file=sys.stderr)
            return EXIT_USAGE
        if value is not None:
            print(value)
        return EXIT_OK

    if command in COMMANDS:
        result = client.run(command, *args)
        if result.error is not None:
            print(result.error.message, file=sys.stderr)
            return EXIT_COMMAND_FAILED
        if result:
            print(format_result(result))
        return EXIT_OK

    print(f"Unknown command: {command}", file=sys.stderr)
    return EXIT_USAGE


def main(argv: Sequence[str] | None = None) -> int:
    """Run the netmpd tool.

    Returns:
        Exit code (0 for success).
    """
    parsed = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = ConfigManager()
    try:
        address = resolve_address(parsed, config)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return EXIT_USAGE

    timeout = parsed.timeout if parsed.timeout is not None else config.get_timeout()

    try:
        with MpdClient(
            address.host, address.port, address.password, timeout=timeout
        ) as client:
            return run_command(client, parsed.command, parsed.args)
    except (MpdConnectionError, MpdTransportError) as e:
        logger.debug("Connection failure", exc_info=True)
        print(str(e), file=sys.stderr)
        return EXIT_USAGE
    except MpdClientError as e:
        print(str(e), file=sys.stderr)
        return EXIT_COMMAND_FAILED


if __name__ == "__main__":
    sys.exit(main())
