"""Command registry for twitchcommander.

The registry maps command keys to CommandDescriptors. It is assembled
once by a CommandRegistryBuilder from an explicit list of modules (or
individual methods), then handed to the commander read-only.

Key classes:
    CommandDescriptor: One registered command.
    CommandRegistry: Immutable key -> descriptor table.
    CommandRegistryBuilder: Collects registrations, enforces key
        uniqueness, registers module types with the instance provider.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, Optional

import structlog

from .exceptions import DuplicateCommandError, RegistryError
from .modules.base import BaseModule, command_methods
from .providers import ServiceProvider

logger = structlog.get_logger("twitchcommander.registry")

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def declared_parameter_count(method: Callable) -> int:
    """Number of positional parameters a command method takes, ``self`` excluded.

    ``*args`` and keyword-only parameters are not counted.
    """
    params = [
        p for p in inspect.signature(method).parameters.values()
        if p.kind in _POSITIONAL
    ]
    # Unbound function taken from the class: first parameter is self
    if params and not inspect.ismethod(method):
        params = params[1:]
    return len(params)


@dataclass(frozen=True)
class CommandDescriptor:
    """A registered command.

    Attributes:
        command_key: Key typed after the prefix.
        handler_type: Module class that owns the method.
        method: Unbound function, called as method(instance, *params).
        parameter_count: Positional parameters the method declares.
    """

    command_key: str
    handler_type: type
    method: Callable
    parameter_count: int

    @property
    def method_name(self) -> str:
        return getattr(self.method, "__qualname__", repr(self.method))


class CommandRegistry:
    """Read-only mapping of command keys to descriptors.

    Built by CommandRegistryBuilder; there is no API to add or remove
    entries, so concurrent lookups need no locking.
    """

    def __init__(self, commands: Dict[str, CommandDescriptor]):
        self._commands = MappingProxyType(dict(commands))

    def get(self, command_key: str) -> Optional[CommandDescriptor]:
        """Look up a descriptor, or None for an unknown key."""
        return self._commands.get(command_key)

    @property
    def command_keys(self) -> FrozenSet[str]:
        return frozenset(self._commands.keys())

    def __contains__(self, command_key: object) -> bool:
        return command_key in self._commands

    def __len__(self) -> int:
        return len(self._commands)

    def __iter__(self) -> Iterator[CommandDescriptor]:
        return iter(self._commands.values())

    def __repr__(self) -> str:
        return f"CommandRegistry({sorted(self._commands)!r})"


class CommandRegistryBuilder:
    """Collects command registrations and builds a CommandRegistry once.

    Every add_* call checks key uniqueness immediately; a collision
    raises DuplicateCommandError and nothing from the offending entry is
    recorded. Module types whose commands were accepted are registered
    with the provider as transient (existing registrations are kept).

    Args:
        provider: Container to register module types with. A fresh
            ServiceProvider is created if omitted.
    """

    def __init__(self, provider: Optional[ServiceProvider] = None):
        self.provider = provider if provider is not None else ServiceProvider()
        self._commands: Dict[str, CommandDescriptor] = {}
        self._built = False

    def add_module(self, module_type: type) -> "CommandRegistryBuilder":
        """Register every @command method declared on ``module_type``.

        Raises:
            RegistryError: Not a BaseModule subclass, or builder already built.
            DuplicateCommandError: A key is already registered.
        """
        self._check_open()
        if not (isinstance(module_type, type) and issubclass(module_type, BaseModule)):
            raise RegistryError(
                f"{module_type!r} is not a BaseModule subclass",
                handler_type=repr(module_type),
            )

        methods = command_methods(module_type)
        if not methods:
            logger.warning("module_without_commands", module=module_type.__qualname__)

        for key, method in methods:
            self._insert(key, module_type, method)

        self.provider.try_add_transient(module_type)
        return self

    def add_modules(self, module_types: Iterable[type]) -> "CommandRegistryBuilder":
        for module_type in module_types:
            self.add_module(module_type)
        return self

    def add_command(
        self, command_key: str, module_type: type, method: Callable
    ) -> "CommandRegistryBuilder":
        """Register a single method under an explicit key.

        ``method`` is the function as found on the class
        (e.g. ``Greetings.greet``), with or without the @command marker.
        """
        self._check_open()
        if not (isinstance(module_type, type) and issubclass(module_type, BaseModule)):
            raise RegistryError(
                f"{module_type!r} is not a BaseModule subclass",
                handler_type=repr(module_type),
            )
        self._insert(command_key, module_type, method)
        self.provider.try_add_transient(module_type)
        return self

    def build(self) -> CommandRegistry:
        """Seal the builder and return the registry.

        Raises:
            RegistryError: build() was already called.
        """
        self._check_open()
        self._built = True
        registry = CommandRegistry(self._commands)
        logger.info("registry_built", commands=len(registry), keys=sorted(registry.command_keys))
        return registry

    def _insert(self, key: str, module_type: type, method: Callable) -> None:
        descriptor = CommandDescriptor(
            command_key=key,
            handler_type=module_type,
            method=method,
            parameter_count=declared_parameter_count(method),
        )
        if key in self._commands:
            existing = self._commands[key]
            logger.error(
                "duplicate_command",
                command=key,
                method=descriptor.method_name,
                existing=existing.method_name,
            )
            raise DuplicateCommandError(key, descriptor.method_name)

        self._commands[key] = descriptor
        logger.debug(
            "command_registered",
            command=key,
            method=descriptor.method_name,
            parameters=descriptor.parameter_count,
        )

    def _check_open(self) -> None:
        if self._built:
            raise RegistryError("Registry already built; no further registration allowed")


def build_registry(
    module_types: Iterable[type], provider: Optional[ServiceProvider] = None
) -> CommandRegistry:
    """Build a registry from a list of module types in one call."""
    return CommandRegistryBuilder(provider).add_modules(module_types).build()
