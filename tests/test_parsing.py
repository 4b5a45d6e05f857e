"""Tests for command classification and parsing."""

import pytest

from twitchcommander.parsing import CommandInvocation, is_command, parse_command
from twitchcommander.responses import MessageResponse, ResponseType


def _response(message, response_type=ResponseType.PRIVMSG):
    return MessageResponse(
        response_type=response_type,
        name="alice",
        channel="mychannel",
        message=message,
    )


# --- is_command ---

def test_prefixed_privmsg_is_command():
    assert is_command(_response("!ping")) is True


@pytest.mark.parametrize("message", ["ping", "hello !ping", " !ping", ""])
def test_message_without_leading_prefix_is_not_command(message):
    assert is_command(_response(message)) is False


@pytest.mark.parametrize(
    "response_type",
    [t for t in ResponseType if t != ResponseType.PRIVMSG],
)
def test_non_privmsg_is_never_command(response_type):
    """Notices, whispers etc. are ignored even when they carry the prefix."""
    assert is_command(_response("!ping", response_type)) is False


def test_custom_prefix():
    assert is_command(_response("?ping"), prefix="?") is True
    assert is_command(_response("!ping"), prefix="?") is False


# --- parse_command ---

def test_parse_key_and_parameters():
    invocation = parse_command("!greet alice bob")
    assert invocation == CommandInvocation("greet", ("alice", "bob"))


def test_parse_no_parameters():
    invocation = parse_command("!ping")
    assert invocation.command_key == "ping"
    assert invocation.parameters == ()


def test_parse_collapses_repeated_whitespace():
    invocation = parse_command("!echo   hello \t world")
    assert invocation.parameters == ("hello", "world")


def test_parse_keeps_parameters_as_strings():
    invocation = parse_command("!roll 2 6")
    assert invocation.parameters == ("2", "6")


def test_bare_prefix_gives_empty_key():
    invocation = parse_command("!")
    assert invocation.command_key == ""
    assert invocation.parameters == ()


def test_parse_multi_character_prefix():
    invocation = parse_command("~~greet bob", prefix="~~")
    assert invocation.command_key == "greet"
    assert invocation.parameters == ("bob",)


def test_parse_key_is_case_sensitive():
    assert parse_command("!Ping").command_key == "Ping"
