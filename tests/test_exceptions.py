"""Tests for the exception hierarchy."""

from twitchcommander.exceptions import (
    CommanderError,
    ContextBindingError,
    DuplicateCommandError,
    ErrorCategory,
    InvocationTimeoutError,
    ParameterMismatchError,
    RegistryError,
    ResolutionError,
)


def test_str_includes_module_and_context():
    err = CommanderError("went wrong", module="commander", command="ping")
    assert str(err) == "went wrong [module=commander] (command=ping)"
    assert "category='permanent'" in repr(err)


def test_duplicate_command_is_registry_error():
    err = DuplicateCommandError("greet", "Greetings.greet")
    assert isinstance(err, RegistryError)
    assert err.module == "registry"
    assert err.is_fatal


def test_per_invocation_errors_are_not_fatal():
    errors = [
        ParameterMismatchError("echo", expected=2, received=1),
        ContextBindingError("bad", handler_type="Echo", context_kind="dict"),
        ResolutionError("missing", handler_type="Echo"),
        InvocationTimeoutError("slow", timeout=2.5),
    ]
    for err in errors:
        assert isinstance(err, CommanderError)
        assert not err.is_fatal


def test_parameter_mismatch_message():
    err = ParameterMismatchError("echo", expected=2, received=1)
    assert err.expected == 2
    assert err.received == 1
    assert err.category == ErrorCategory.TRANSIENT
    assert "expects 2 parameter(s), got 1" in str(err)


def test_invocation_timeout_message():
    err = InvocationTimeoutError("slow", timeout=2.5)
    assert err.timeout == 2.5
    assert err.module == "commander"
    assert "Command slow timed out after 2.5s" in str(err)
