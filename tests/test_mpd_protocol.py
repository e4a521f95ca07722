"""Tests for MPD protocol parsing."""

import shlex

import pytest

from netmpd.api.mpd.protocol import (
    MpdError,
    classify,
    escape_arg,
    format_command,
    group_records,
    is_terminator,
    make_result,
    parse_ack,
    parse_address,
    parse_greeting,
    parse_pairs,
    split_line,
)
from netmpd.api.mpd.types import (
    CommandResult,
    ProtocolVersion,
    Response,
    ResultKind,
    ServerAddress,
)


class TestEscapeArg:
    """Tests for escape_arg function."""

    def test_simple_arg(self) -> None:
        """Test that simple args are not modified."""
        assert escape_arg("simple") == "simple"
        assert escape_arg("path/to/file.mp3") == "path/to/file.mp3"
        assert escape_arg("key:value") == "key:value"

    def test_number_arg(self) -> None:
        """Test that numbers are sent bare."""
        assert escape_arg(80) == "80"
        assert escape_arg(1.5) == "1.5"

    def test_bool_arg(self) -> None:
        """Test that booleans become 1/0."""
        assert escape_arg(True) == "1"
        assert escape_arg(False) == "0"

    def test_empty_arg(self) -> None:
        """Test empty arg is quoted."""
        assert escape_arg("") == '""'

    def test_arg_with_spaces(self) -> None:
        """Test arg with spaces is quoted."""
        assert escape_arg("David Bowie") == '"David Bowie"'

    def test_arg_with_other_whitespace(self) -> None:
        """Test tabs also trigger quoting."""
        assert escape_arg("a\tb") == '"a\tb"'

    def test_arg_with_quotes(self) -> None:
        """Test arg with quotes is escaped."""
        assert escape_arg('say "hello"') == '"say \\"hello\\""'
        assert escape_arg('12"') == '"12\\""'

    def test_backslash_without_whitespace_is_bare(self) -> None:
        """Test a backslash alone does not trigger quoting."""
        assert escape_arg("a\\b") == "a\\b"

    @pytest.mark.parametrize(
        "arg",
        ["Space Oddity", 'The "Thin" White Duke', "tab\tseparated", '"', "a b c"],
    )
    def test_quoted_arg_decodes_to_original(self, arg: str) -> None:
        """Test that unquoting the encoded form recovers the argument."""
        assert shlex.split(escape_arg(arg)) == [arg]


class TestFormatCommand:
    """Tests for format_command function."""

    def test_command_without_args(self) -> None:
        """Test command without arguments."""
        assert format_command("status") == "status\n"

    def test_command_with_simple_args(self) -> None:
        """Test command with simple arguments."""
        assert format_command("seek", 3, 120) == "seek 3 120\n"

    def test_command_with_quoted_arg(self) -> None:
        """Test command with argument that needs quoting."""
        assert (
            format_command("search", "Artist", "David Bowie") == 'search Artist "David Bowie"\n'
        )

    def test_empty_arg_keeps_position(self) -> None:
        """Test an empty argument stays a separate word."""
        assert format_command("find", "Album", "", "Artist", "X") == 'find Album "" Artist X\n'


class TestTerminators:
    """Tests for terminator detection."""

    def test_ok(self) -> None:
        """Test the success terminator."""
        assert is_terminator("OK")

    def test_ack(self) -> None:
        """Test the error terminator."""
        assert is_terminator("ACK [50@0] {play} No such song")

    def test_ack_with_colon_in_message(self) -> None:
        """Test an ACK whose message looks like a data line."""
        assert is_terminator("ACK [2@0] {setvol} problem: bad volume")

    def test_data_lines(self) -> None:
        """Test that data lines are not terminators."""
        assert not is_terminator("volume: 50")
        assert not is_terminator("OK MPD 0.23.5")
        assert not is_terminator("ACKnowledged: yes")
        assert not is_terminator("file: OK")


class TestParseAck:
    """Tests for parse_ack and classify."""

    def test_parse_ack(self) -> None:
        """Test parsing ACK error response."""
        error = parse_ack("ACK [50@0] {albumart} No file exists")
        assert isinstance(error, MpdError)
        assert error.code == 50
        assert error.index == 0
        assert error.command == "albumart"
        assert error.message == "No file exists"

    def test_message_with_colon(self) -> None:
        """Test the message is kept verbatim."""
        error = parse_ack("ACK [2@0] {setvol} Invalid volume: 150")
        assert error.code == 2
        assert error.message == "Invalid volume: 150"

    def test_empty_command(self) -> None:
        """Test an ACK without a command name."""
        error = parse_ack("ACK [5@0] {} unknown command \"foo\"")
        assert error.code == 5
        assert error.command == ""
        assert error.message == 'unknown command "foo"'

    def test_malformed_ack(self) -> None:
        """Test an ACK that does not follow the layout."""
        error = parse_ack("ACK something odd")
        assert error.code == 0
        assert error.message == "ACK something odd"

    def test_classify(self) -> None:
        """Test classify on success and error responses."""
        assert classify(Response("OK", ("volume: 50",))) is None
        error = classify(Response("ACK [4@0] {password} incorrect password"))
        assert error is not None
        assert error.code == 4


class TestParseGreeting:
    """Tests for parse_greeting function."""

    def test_valid_greeting(self) -> None:
        """Test version extraction."""
        assert parse_greeting("OK MPD 0.23.5") == ProtocolVersion(0, 23, 5)

    @pytest.mark.parametrize(
        "line",
        ["", "OK", "OK MPD", "OK MPD 0.23", "OK FOO 0.23.5", "ACK [1@0] {} nope", "OK MPD x.y.z"],
    )
    def test_invalid_greeting(self, line: str) -> None:
        """Test lines that are not MPD greetings."""
        assert parse_greeting(line) is None


class TestGroupRecords:
    """Tests for group_records function."""

    def test_two_records(self) -> None:
        """Test a repeated key starts a new record."""
        lines = ["file: a", "Title: X", "file: b", "Title: Y"]
        assert group_records(lines) == [
            {"file": "a", "Title": "X"},
            {"file": "b", "Title": "Y"},
        ]

    def test_record_order_preserved(self) -> None:
        """Test that keys and records keep input order."""
        records = group_records(["file: a", "Title: X", "Artist: Z", "file: b", "Title: Y"])
        assert [r["file"] for r in records] == ["a", "b"]  # type: ignore[index]
        assert list(records[0]) == ["file", "Title", "Artist"]  # type: ignore[arg-type]

    def test_single_value_unwrapped(self) -> None:
        """Test a single key is returned as a bare value."""
        assert group_records(["volume: 50"]) == ["50"]

    def test_repeated_single_keys(self) -> None:
        """Test a run of one-key items unwraps each of them."""
        lines = ["changed: player", "changed: mixer", "changed: options"]
        assert group_records(lines) == ["player", "mixer", "options"]

    def test_empty(self) -> None:
        """Test no lines give no items."""
        assert group_records([]) == []

    def test_value_with_colon(self) -> None:
        """Test values may contain ": "."""
        lines = ["file: a.mp3", "Title: Live: 1972"]
        assert group_records(lines) == [{"file": "a.mp3", "Title": "Live: 1972"}]

    def test_mixed_record_and_trailing_value(self) -> None:
        """Test a short final group unwraps while earlier records stay."""
        lines = ["file: a", "Title: X", "file: b"]
        assert group_records(lines) == [{"file": "a", "Title": "X"}, "b"]

    def test_repeated_key_within_item_splits(self) -> None:
        """Test the known limitation: repeated tags split one song."""
        lines = ["file: a", "Genre: Rock", "Genre: Pop"]
        assert group_records(lines) == [{"file": "a", "Genre": "Rock"}, "Pop"]

    def test_idempotent(self) -> None:
        """Test grouping the same lines twice gives the same result."""
        lines = ("file: a", "Title: X", "file: b", "Title: Y")
        assert group_records(lines) == group_records(lines)


class TestSplitLine:
    """Tests for split_line and parse_pairs."""

    def test_split(self) -> None:
        """Test key/value split on the first separator."""
        assert split_line("time: 45:180") == ("time", "45:180")

    def test_line_without_separator(self) -> None:
        """Test a line without ": " is all key."""
        assert split_line("weird") == ("weird", "")

    def test_parse_pairs_last_wins(self) -> None:
        """Test flat parsing keeps the last value of a key."""
        assert parse_pairs(["a: 1", "b: 2", "a: 3"]) == {"a": "3", "b": "2"}


class TestMakeResult:
    """Tests for make_result function."""

    def test_empty_ok(self) -> None:
        """Test OK without data gives an absent, successful result."""
        result = make_result(Response("OK"))
        assert result.kind is ResultKind.ABSENT
        assert result.ok
        assert not result

    def test_single_record(self) -> None:
        """Test one record gives a SINGLE result."""
        result = make_result(Response("OK", ("file: a", "Title: X")))
        assert result.kind is ResultKind.SINGLE
        assert result.value == {"file": "a", "Title": "X"}

    def test_single_value(self) -> None:
        """Test a lone pair gives a bare value."""
        result = make_result(Response("OK", ("volume: 50",)))
        assert result.kind is ResultKind.SINGLE
        assert result.value == "50"

    def test_multiple(self) -> None:
        """Test several records give a MULTIPLE result."""
        result = make_result(Response("OK", ("file: a", "Pos: 0", "file: b", "Pos: 1")))
        assert result.kind is ResultKind.MULTIPLE
        assert len(result) == 2
        assert result.value is None

    def test_error(self) -> None:
        """Test an ACK gives an absent result carrying the error."""
        result = make_result(Response("ACK [50@0] {play} Bad song index", ("ignored: 1",)))
        assert result.kind is ResultKind.ABSENT
        assert not result.ok
        assert result.error is not None
        assert result.error.message == "Bad song index"


class TestCommandResult:
    """Tests for CommandResult helpers."""

    def test_raise_for_error(self) -> None:
        """Test raise_for_error raises the ACK."""
        result = CommandResult.failed(MpdError(50, "play", "Bad song index"))
        with pytest.raises(MpdError, match="Bad song index"):
            result.raise_for_error()

    def test_raise_for_error_success(self) -> None:
        """Test raise_for_error returns the result on success."""
        result = CommandResult.from_items(["50"])
        assert result.raise_for_error() is result

    def test_iteration(self) -> None:
        """Test iterating over items."""
        result = CommandResult.from_items(["player", "mixer"])
        assert list(result) == ["player", "mixer"]


class TestProtocolVersion:
    """Tests for ProtocolVersion."""

    def test_parse(self) -> None:
        """Test full and short forms."""
        assert ProtocolVersion.parse("0.23.5") == ProtocolVersion(0, 23, 5)
        assert ProtocolVersion.parse("0.15") == ProtocolVersion(0, 15, 0)

    def test_ordering(self) -> None:
        """Test standard version ordering."""
        assert ProtocolVersion(0, 14, 0) < ProtocolVersion(0, 15, 0)
        assert ProtocolVersion(0, 16, 0) > ProtocolVersion(0, 15, 9)
        assert ProtocolVersion(0, 9, 0) < ProtocolVersion(0, 10, 0)
        assert ProtocolVersion(1, 0, 0) > ProtocolVersion(0, 99, 99)

    def test_str(self) -> None:
        """Test string form."""
        assert str(ProtocolVersion(0, 23, 5)) == "0.23.5"

    def test_invalid(self) -> None:
        """Test garbage is rejected."""
        with pytest.raises(ValueError):
            ProtocolVersion.parse("latest")


class TestParseAddress:
    """Tests for parse_address function."""

    def test_defaults(self) -> None:
        """Test empty address means localhost:6600."""
        assert parse_address("") == ServerAddress("localhost", 6600, None)
        assert parse_address(None) == ServerAddress("localhost", 6600, None)

    def test_host_only(self) -> None:
        """Test host without port."""
        assert parse_address("music.local") == ServerAddress("music.local", 6600, None)

    def test_full(self) -> None:
        """Test password, host and port."""
        assert parse_address("secret@music.local:6601") == ServerAddress(
            "music.local", 6601, "secret"
        )

    def test_password_without_host(self) -> None:
        """Test a missing host falls back to localhost."""
        assert parse_address("secret@") == ServerAddress("localhost", 6600, "secret")

    def test_local_socket(self) -> None:
        """Test a path becomes a local socket."""
        address = parse_address("secret@/run/mpd/socket")
        assert address.host == "/run/mpd/socket"
        assert address.password == "secret"
        assert address.is_local_socket

    def test_invalid_port(self) -> None:
        """Test a non-numeric port is rejected."""
        with pytest.raises(ValueError):
            parse_address("music.local:abc")
