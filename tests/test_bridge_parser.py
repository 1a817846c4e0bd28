"""Tests for parse_external_command."""

import pytest

from lilybear.bridge.parser import parse_external_command
from lilybear.bus.events import BROADCAST, RelayCommand
from lilybear.errors import ParseError, ParseFailure


def test_addressee_and_body():
    cmd = parse_external_command("!lily hello there")
    assert cmd.to == "lily"
    assert cmd.body == "hello there"


def test_missing_body_is_error():
    with pytest.raises(ParseError) as exc:
        parse_external_command("!hello")
    assert exc.value.reason is ParseFailure.EMPTY_BODY


def test_empty_addressee_defaults_to_broadcast():
    cmd = parse_external_command("! hello")
    assert cmd.to == BROADCAST
    assert cmd.body == "hello"


def test_whitespace_only_body_is_error():
    with pytest.raises(ParseError) as exc:
        parse_external_command("!lily    ")
    assert exc.value.reason is ParseFailure.EMPTY_BODY


def test_bare_marker_is_error():
    with pytest.raises(ParseError):
        parse_external_command("!")


def test_missing_marker_is_not_a_command():
    with pytest.raises(ParseError) as exc:
        parse_external_command("lily hello")
    assert exc.value.reason is ParseFailure.NOT_A_COMMAND


def test_body_is_stripped_but_inner_spacing_kept():
    cmd = parse_external_command("!athena   status  of   the hall ")
    assert cmd.to == "athena"
    assert cmd.body == "status  of   the hall"


def test_tab_separates_addressee():
    cmd = parse_external_command("!athena\tstatus")
    assert (cmd.to, cmd.body) == ("athena", "status")


def test_sender_and_custom_marker():
    cmd = parse_external_command("?Serafina bless", sender="quinn", marker="?")
    assert cmd == RelayCommand(sender="quinn", to="Serafina", body="bless")


def test_payload_uses_wire_field_names():
    cmd = parse_external_command("!lily hi", sender="x")
    assert cmd.to_payload() == {"from": "x", "to": "lily", "message": "hi"}
    whisper = cmd.to_whisper()
    assert (whisper.sender, whisper.to, whisper.body) == ("x", "lily", "hi")
