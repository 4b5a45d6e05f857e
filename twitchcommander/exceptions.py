"""Exception hierarchy for twitchcommander.

Separates startup-time misconfiguration (duplicate command keys, bad
settings) from per-invocation failures (resolution, context binding,
parameter mismatch) so the commander can decide what is fatal and what
is isolated to a single chat event.
"""

from enum import Enum
from typing import Any, Optional


class ErrorCategory(str, Enum):
    """Classification of errors for propagation decisions."""
    TRANSIENT = "transient"          # Isolated to one event, dispatch continues
    PERMANENT = "permanent"          # Misconfigured handler, fails every time
    CONFIGURATION = "configuration"  # Startup-time, stops the host


class CommanderError(Exception):
    """Base exception for all twitchcommander errors.

    Attributes:
        message: Human-readable error description.
        category: Error classification for propagation decisions.
        module: Originating module name (e.g. "registry").
        context: Arbitrary key-value pairs for structured logging.
    """

    def __init__(
        self,
        message: str = "",
        *,
        category: ErrorCategory = ErrorCategory.PERMANENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.message = message
        self.category = category
        self.module = module
        self.context = context
        super().__init__(message)

    @property
    def is_fatal(self) -> bool:
        """Whether this error should stop startup."""
        return self.category == ErrorCategory.CONFIGURATION

    def __str__(self) -> str:
        parts = [self.message or self.__class__.__name__]
        if self.module:
            parts.append(f"[module={self.module}]")
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"({ctx})")
        return " ".join(parts)

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        return (
            f"{cls}({self.message!r}, category={self.category.value!r}, "
            f"module={self.module!r})"
        )


# ---------------------------------------------------------------------------
# Registry exceptions
# ---------------------------------------------------------------------------

class RegistryError(CommanderError):
    """Registry construction failed or the registry was misused."""

    def __init__(
        self,
        message: str = "",
        *,
        category: ErrorCategory = ErrorCategory.CONFIGURATION,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        super().__init__(
            message, category=category, module=module or "registry", **context
        )


class DuplicateCommandError(RegistryError):
    """Two handler methods registered the same command key.

    Attributes:
        command_key: The colliding key.
        method_name: Qualified name of the method that was rejected.
    """

    def __init__(
        self,
        command_key: str,
        method_name: str,
        *,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.command_key = command_key
        self.method_name = method_name
        super().__init__(
            f"Duplicated entry on {command_key} on method {method_name}",
            module=module,
            **context,
        )


# ---------------------------------------------------------------------------
# Per-invocation exceptions
# ---------------------------------------------------------------------------

class ParameterMismatchError(CommanderError):
    """Chat message supplied a different number of tokens than the handler declares.

    Raised for underflow always, and for overflow only when strict
    parameter checking is enabled.
    """

    def __init__(
        self,
        command_key: str,
        expected: int,
        received: int,
        *,
        category: ErrorCategory = ErrorCategory.TRANSIENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.command_key = command_key
        self.expected = expected
        self.received = received
        super().__init__(
            f"Command {command_key} expects {expected} parameter(s), got {received}",
            category=category,
            module=module or "commander",
            **context,
        )


class InvocationTimeoutError(CommanderError):
    """A handler ran past the configured invocation timeout and was cancelled."""

    def __init__(
        self,
        command_key: str,
        timeout: float,
        *,
        category: ErrorCategory = ErrorCategory.TRANSIENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.command_key = command_key
        self.timeout = timeout
        super().__init__(
            f"Command {command_key} timed out after {timeout}s",
            category=category,
            module=module or "commander",
            **context,
        )


class ContextBindingError(CommanderError):
    """A context object could not be bound onto a handler instance.

    Attributes:
        handler_type: Name of the handler class.
        context_kind: Name of the context object's type.
    """

    def __init__(
        self,
        message: str = "",
        *,
        handler_type: Optional[str] = None,
        context_kind: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.PERMANENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.handler_type = handler_type
        self.context_kind = context_kind
        super().__init__(
            message, category=category, module=module or "injector", **context
        )


class ResolutionError(CommanderError):
    """The instance provider could not produce a handler instance."""

    def __init__(
        self,
        message: str = "",
        *,
        handler_type: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.TRANSIENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.handler_type = handler_type
        super().__init__(
            message, category=category, module=module or "providers", **context
        )


# ---------------------------------------------------------------------------
# Configuration exceptions
# ---------------------------------------------------------------------------

class ConfigurationError(CommanderError):
    """Invalid or missing configuration."""

    def __init__(
        self,
        message: str = "",
        *,
        setting_name: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.CONFIGURATION,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.setting_name = setting_name
        super().__init__(
            message, category=category, module=module or "config", **context
        )
