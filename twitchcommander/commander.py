"""Command dispatcher for twitchcommander.

Subscribes to the bot's message source and turns every qualifying chat
message into a handler call: classify, parse, look up, resolve an
instance, bind context, invoke.

Key classes:
    TwitchCommander: Owns the registry and the dispatch pipeline.

Key functions:
    log_task_exception: Done-callback that logs failed dispatch tasks.
"""

import asyncio
import inspect
from typing import Optional, Set

import structlog

from .bot import TwitchBot
from .exceptions import CommanderError, InvocationTimeoutError, ParameterMismatchError
from .injector import ContextInjector
from .parsing import DEFAULT_PREFIX, CommandInvocation, is_command, parse_command
from .providers import InstanceProvider
from .proxies import InvocationContext
from .registry import CommandDescriptor, CommandRegistry
from .responses import MessageResponse

logger = structlog.get_logger("twitchcommander.commander")


def log_task_exception(task: asyncio.Task):
    """Log exceptions from fire-and-forget tasks instead of silently swallowing them."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc:
        logger.error("dispatch_task_failed", error=str(exc), exc_type=type(exc).__name__)


class TwitchCommander:
    """Dispatches chat commands to registered module methods.

    The registry must be fully built before the commander is created;
    the commander only reads it.

    Args:
        bot: Bot reference injected into every module instance.
        registry: Built command registry.
        provider: Supplies one module instance per invocation.
        prefix: Chat prefix marking a command.
        injector: Context injector (default ContextInjector()).
        invocation_timeout: Seconds a handler may run before it is
            cancelled. None disables the limit.
        strict_parameters: Reject messages carrying more tokens than
            the handler declares instead of dropping the extras.
    """

    def __init__(
        self,
        bot: TwitchBot,
        registry: CommandRegistry,
        provider: InstanceProvider,
        prefix: str = DEFAULT_PREFIX,
        injector: Optional[ContextInjector] = None,
        invocation_timeout: Optional[float] = None,
        strict_parameters: bool = False,
    ):
        self.bot = bot
        self.registry = registry
        self.provider = provider
        self.prefix = prefix
        self.injector = injector or ContextInjector()
        self.invocation_timeout = invocation_timeout
        self.strict_parameters = strict_parameters
        self._tasks: Set[asyncio.Task] = set()
        self._subscribed = False
        self._closed = False

    @classmethod
    def from_config(cls, bot, registry, provider, config) -> "TwitchCommander":
        """Create a commander using prefix, timeout and strictness from Config."""
        return cls(
            bot,
            registry,
            provider,
            prefix=config.command_prefix,
            invocation_timeout=config.invocation_timeout,
            strict_parameters=config.strict_parameters,
        )

    # --- Lifecycle ---

    async def initialize(self) -> None:
        """Subscribe to the bot's message source. Safe to call twice."""
        if self._subscribed:
            return
        self.bot.client.subscribe_receive(self._on_receive)
        self._subscribed = True
        logger.info(
            "commander_initialized",
            prefix=self.prefix,
            commands=len(self.registry),
        )

    async def drain(self) -> None:
        """Wait for every in-flight dispatch to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Stop accepting events, cancel in-flight dispatches and wait for them to unwind."""
        self._closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("commander_closed", cancelled=len(tasks))

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    # --- Intake ---

    async def _on_receive(self, response: MessageResponse) -> None:
        """Subscription callback: start the dispatch and return immediately."""
        if self._closed or not is_command(response, self.prefix):
            return
        task = asyncio.create_task(self.handle_response(response))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(log_task_exception)

    # --- Dispatch ---

    async def handle_response(self, response: MessageResponse) -> None:
        """Run one inbound event through the full pipeline.

        Returns once the handler has completed. Unknown commands and
        non-commands return silently; per-invocation failures are
        logged and never raised.
        """
        if not is_command(response, self.prefix):
            return

        invocation = parse_command(response.message, self.prefix)
        descriptor = self.registry.get(invocation.command_key)
        if descriptor is None:
            return

        logger.info(
            "command_received",
            user=response.name,
            channel=response.channel,
            message=response.message,
        )

        try:
            await self._execute(descriptor, invocation, response)
        except asyncio.CancelledError:
            raise
        except InvocationTimeoutError as e:
            logger.error(
                "command_timeout",
                command=descriptor.command_key,
                timeout=e.timeout,
                user=response.name,
            )
        except CommanderError as e:
            logger.error(
                "command_failed",
                command=descriptor.command_key,
                user=response.name,
                error=str(e),
                exc_type=type(e).__name__,
                category=e.category.value,
            )
        except Exception as e:
            logger.error(
                "command_handler_error",
                command=descriptor.command_key,
                user=response.name,
                error=str(e),
                exc_type=type(e).__name__,
                exc_info=True,
            )

    async def _execute(
        self,
        descriptor: CommandDescriptor,
        invocation: CommandInvocation,
        response: MessageResponse,
    ) -> None:
        instance = self.provider.resolve(descriptor.handler_type)
        self.injector.inject_all(instance, InvocationContext.from_response(response, self.bot))

        parameters = self._slice_parameters(descriptor, invocation)
        result = descriptor.method(instance, *parameters)
        if inspect.isawaitable(result):
            if self.invocation_timeout is not None:
                await self._await_with_timeout(descriptor, result)
            else:
                await result

        logger.debug("command_completed", command=descriptor.command_key)

    async def _await_with_timeout(self, descriptor: CommandDescriptor, awaitable) -> None:
        """Await a handler under the invocation timeout.

        Only the watchdog expiring raises InvocationTimeoutError; a
        TimeoutError raised by the handler itself propagates unchanged.
        """
        task = asyncio.ensure_future(awaitable)
        try:
            done, _ = await asyncio.wait({task}, timeout=self.invocation_timeout)
        except asyncio.CancelledError:
            task.cancel()
            raise
        if not done:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            raise InvocationTimeoutError(descriptor.command_key, self.invocation_timeout)
        task.result()

    def _slice_parameters(self, descriptor: CommandDescriptor, invocation: CommandInvocation):
        expected = descriptor.parameter_count
        received = len(invocation.parameters)
        if received < expected or (self.strict_parameters and received > expected):
            raise ParameterMismatchError(descriptor.command_key, expected, received)
        return invocation.parameters[:expected]
