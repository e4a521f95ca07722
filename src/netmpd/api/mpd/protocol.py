"""MPD protocol parsing utilities.

MPD uses a simple line-based text protocol:
- Commands are sent as plain text lines
- Responses are key-value pairs: "key: value"
- Responses end with "OK" or "ACK [error@command_listNum] {command} message"
- The server greets every new connection with "OK MPD <version>"

Reference: https://mpd.readthedocs.io/en/stable/protocol.html
"""

import re

from netmpd.api.mpd.types import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    CommandResult,
    Item,
    ProtocolVersion,
    Record,
    Response,
    ServerAddress,
)


class MpdClientError(Exception):
    """Base class for everything this client raises."""


class MpdError(MpdClientError):
    """MPD protocol error (an ACK reply).

    Attributes:
        code: Numeric error code (e.g. 50 = no such file).
        index: Position of the failing command in a command list (0 here).
        command: Name of the command the server rejected.
        message: Error text, verbatim from the server.
    """

    def __init__(self, code: int, command: str, message: str, index: int = 0) -> None:
        self.code = code
        self.index = index
        self.command = command
        self.message = message
        super().__init__(f"MPD error {code} in {command}: {message}")


# Pattern for ACK responses: ACK [error@command_listNum] {current_command} message_text
ACK_PATTERN = re.compile(r"^ACK \[(\d+)@(\d+)\] \{([^}]*)\} ?(.*)$")

# Greeting sent by the server on every new connection
GREETING_PATTERN = re.compile(r"^OK MPD (\d+\.\d+\.\d+)$")

# [password@]host[:port]
ADDRESS_PATTERN = re.compile(r"^(?:([^@]+)@)?([^:]*)(?::(\d+))?$")

SUCCESS = "OK"
ERROR_PREFIX = "ACK "


# -----------------------------------------------------------------------------
# Command encoding
# -----------------------------------------------------------------------------


def to_wire(value: object) -> str:
    """Return the wire text for a value. Booleans are sent as "1"/"0"."""
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def escape_arg(arg: object) -> str:
    """Escape an argument for an MPD command.

    Arguments containing whitespace or a double quote are wrapped in double
    quotes with inner double quotes backslash-escaped. Everything else is sent
    as-is. Booleans are sent as "1"/"0".

    An empty argument is the one exception to "bare unless it needs quoting":
    it is sent as '""', because a bare empty word would vanish from the
    command line and shift every later argument.

    Args:
        arg: The argument to escape (coerced with to_wire()).

    Returns:
        Escaped argument, quoted if necessary.
    """
    text = to_wire(arg)

    if text and not any(c.isspace() or c == '"' for c in text):
        return text

    escaped = text.replace('"', '\\"')
    return f'"{escaped}"'


def format_command(command: str, *args: object) -> str:
    """Format an MPD command line with arguments.

    Args:
        command: The MPD command name.
        *args: Command arguments.

    Returns:
        The newline-terminated wire line.
    """
    parts = [command, *(escape_arg(arg) for arg in args)]
    return " ".join(parts) + "\n"


# -----------------------------------------------------------------------------
# Response classification
# -----------------------------------------------------------------------------


def is_terminator(line: str) -> bool:
    """Return True if the line ends a response ("OK" or "ACK ...")."""
    return line == SUCCESS or line.startswith(ERROR_PREFIX)


def parse_ack(line: str) -> MpdError:
    """Parse an ACK terminator into an MpdError.

    Lines that do not follow the usual layout still become an error, with
    code 0 and the whole line as the message.
    """
    match = ACK_PATTERN.match(line)
    if not match:
        return MpdError(0, "", line)
    code, index, command, message = match.groups()
    return MpdError(int(code), command, message, index=int(index))


def classify(response: Response) -> MpdError | None:
    """Return the ACK error carried by a response, or None on success."""
    if response.is_error:
        return parse_ack(response.terminator)
    return None


def parse_greeting(line: str) -> ProtocolVersion | None:
    """Extract the protocol version from the server greeting.

    Returns:
        The version, or None if the line is not an MPD greeting.
    """
    match = GREETING_PATTERN.match(line)
    if not match:
        return None
    return ProtocolVersion.parse(match.group(1))


# -----------------------------------------------------------------------------
# Record decoding
# -----------------------------------------------------------------------------


def split_line(line: str) -> tuple[str, str]:
    """Split a "key: value" data line. A line without ": " is all key."""
    key, _, value = line.partition(": ")
    return key, value


def parse_pairs(lines: list[str] | tuple[str, ...]) -> Record:
    """Parse data lines into one flat key-value dict (last value wins)."""
    return dict(split_line(line) for line in lines)


def _flush(items: list[Item], record: Record) -> None:
    # Records with fewer than two keys are unwrapped to their bare value
    if len(record) < 2:
        items.extend(record.values())
    else:
        items.append(record)


def group_records(lines: list[str] | tuple[str, ...]) -> list[Item]:
    """Group a flat run of "key: value" lines into records.

    A new record starts whenever a key already present in the record being
    built shows up again. MPD does not mark record boundaries itself, so a
    command whose items legitimately repeat a key (several "Genre" tags on
    one song, for instance) gets split into more records than it has items.

    Example:
        >>> group_records(["file: a", "Title: X", "file: b", "Title: Y"])
        [{'file': 'a', 'Title': 'X'}, {'file': 'b', 'Title': 'Y'}]
        >>> group_records(["volume: 50"])
        ['50']

    Args:
        lines: Data lines without the terminator.

    Returns:
        Records and unwrapped bare values, in input order.
    """
    items: list[Item] = []
    record: Record = {}

    for line in lines:
        key, value = split_line(line)
        if key in record:
            _flush(items, record)
            record = {}
        record[key] = value

    _flush(items, record)
    return items


def make_result(response: Response) -> CommandResult:
    """Decode a response into an absent, single or multiple result."""
    error = classify(response)
    if error is not None:
        return CommandResult.failed(error)
    return CommandResult.from_items(group_records(response.lines))


# -----------------------------------------------------------------------------
# Addresses
# -----------------------------------------------------------------------------


def parse_address(address: str | None) -> ServerAddress:
    """Parse "[password@]host[:port]" into a ServerAddress.

    Missing parts fall back to no password, localhost and port 6600. A host
    containing "/" is a local socket path.

    Raises:
        ValueError: If the port is not numeric.
    """
    match = ADDRESS_PATTERN.match(address or "")
    if not match:
        raise ValueError(f"Invalid MPD address: {address!r}")
    password, host, port = match.groups()
    return ServerAddress(
        host=host or DEFAULT_HOST,
        port=int(port) if port else DEFAULT_PORT,
        password=password or None,
    )
