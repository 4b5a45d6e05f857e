"""Instance providers for command modules.

The commander never constructs modules itself; it asks an
InstanceProvider for one instance per invocation. ServiceProvider is
the bundled implementation: a small container with transient,
singleton and pre-built instance registrations.

Key classes:
    InstanceProvider: Protocol the commander depends on.
    Lifetime: Registration lifetime enum.
    ServiceProvider: Default container implementation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Protocol, runtime_checkable

import structlog

from .exceptions import ResolutionError

logger = structlog.get_logger("twitchcommander.registry")

Factory = Callable[["ServiceProvider"], Any]


@runtime_checkable
class InstanceProvider(Protocol):
    def resolve(self, handler_type: type) -> Any:
        """Return an instance of handler_type for one invocation."""
        ...


class Lifetime(str, Enum):
    TRANSIENT = "transient"  # New instance per resolve
    SINGLETON = "singleton"  # One instance, created on first resolve


@dataclass
class _Registration:
    lifetime: Lifetime
    factory: Optional[Factory] = None
    instance: Any = None


class ServiceProvider:
    """Container mapping types to registrations.

    Types registered without a factory are created by calling the type
    with no arguments. Factories receive the provider so they can
    resolve their own dependencies.

    Resolution is synchronous, so a resolve call is never interleaved
    with another under asyncio.
    """

    def __init__(self):
        self._registrations: Dict[type, _Registration] = {}

    # --- Registration ---

    def add_transient(self, service_type: type, factory: Optional[Factory] = None) -> None:
        """Register (or replace) a type resolved fresh on every call."""
        self._registrations[service_type] = _Registration(Lifetime.TRANSIENT, factory)

    def try_add_transient(self, service_type: type, factory: Optional[Factory] = None) -> bool:
        """Register a transient type unless the type is already registered.

        Returns:
            True if a new registration was added.
        """
        if service_type in self._registrations:
            return False
        self.add_transient(service_type, factory)
        return True

    def add_singleton(self, service_type: type, factory: Optional[Factory] = None) -> None:
        """Register a type created once, on first resolve."""
        self._registrations[service_type] = _Registration(Lifetime.SINGLETON, factory)

    def add_instance(self, service_type: type, instance: Any) -> None:
        """Register an already-built object as a singleton."""
        self._registrations[service_type] = _Registration(
            Lifetime.SINGLETON, instance=instance
        )

    def is_registered(self, service_type: type) -> bool:
        return service_type in self._registrations

    def lifetime_of(self, service_type: type) -> Optional[Lifetime]:
        registration = self._registrations.get(service_type)
        return registration.lifetime if registration else None

    # --- Resolution ---

    def resolve(self, service_type: type) -> Any:
        """Return an instance of service_type.

        Raises:
            ResolutionError: Type not registered, or its factory or
                constructor raised.
        """
        registration = self._registrations.get(service_type)
        if registration is None:
            raise ResolutionError(
                f"No registration for {_type_name(service_type)}",
                handler_type=_type_name(service_type),
            )

        if registration.lifetime == Lifetime.SINGLETON and registration.instance is not None:
            return registration.instance

        instance = self._create(service_type, registration)

        if registration.lifetime == Lifetime.SINGLETON:
            registration.instance = instance
        return instance

    def _create(self, service_type: type, registration: _Registration) -> Any:
        try:
            if registration.factory is not None:
                return registration.factory(self)
            return service_type()
        except ResolutionError:
            raise
        except Exception as e:
            logger.error(
                "instance_creation_failed",
                handler_type=_type_name(service_type),
                error=str(e),
                exc_type=type(e).__name__,
            )
            raise ResolutionError(
                f"Could not create {_type_name(service_type)}: {e}",
                handler_type=_type_name(service_type),
            ) from e


def _type_name(service_type: Any) -> str:
    return getattr(service_type, "__qualname__", repr(service_type))
