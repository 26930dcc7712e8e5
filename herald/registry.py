"""
Herald registry: command storage and end-to-end dispatch.

Registration
- Registry.register(definition, aliases, description) runs the Builder and
  stores the descriptor on success. The outcome is a Registration, truthy on
  success; on failure it carries the fault and the registry is unchanged.
- @registry.command(aliases, description) is the decorator form; it raises
  the fault instead of returning it.

Dispatch
- await Registry.handle(input, trigger, context, subject) never raises
  (cancelling the awaiting task still propagates):
  • blank input                → ERROR "Invalid input"
  • no matching descriptor     → ERROR "Unknown command"
  • arity/conversion failure   → ERROR "Command parsing failed"
  • handler (or its construction) raised → ERROR "Command execution failed"
  • several descriptors match  → the first one runs; a warning lists every
    matched type and a SUCCESS result becomes WARNING.
- The handler body runs in its own asyncio task; handle() awaits it. There
  is no built-in timeout: wrap the call in asyncio.timeout() when needed.

Permissions
- The registry never enforces Descriptor.permissions. Callers check them on
  resolve() results before calling handle(), and may answer with
  CommandResult.skipped() when they refuse.
"""
import asyncio
import logging
from typing import NamedTuple

from .commands import Context
from .faults import CommandParsingException, EmptyInputError
from .parser import Parser
from .patterns import Pattern
from .results import CommandResult
from .utils import *

logger = logging.getLogger(__name__)


class Registration(NamedTuple):
    """
    Outcome of Registry.register(): the descriptor, or the fault that prevented it.
    """
    descriptor: object
    fault: Exception | None

    def __bool__(self):
        return self.fault is None


class Registry:
    """
    Owner of the registered descriptors and entry point of dispatch.

    Parameters
    - parser: Unset | Parser
      Parser used for resolution, binding and descriptor building.
    - trigger: Unset | str | Pattern
      Default trigger prefix stripped before tokenizing ("" when Unset).
    - context: Unset | Context
      Default per-call context template; Context(registry, parser) when Unset.
    """

    def __init__(self, parser=Unset, /, *, trigger=Unset, context=Unset):
        if parser is Unset:
            parser = Parser()
        elif not isinstance(parser, Parser):
            raise TypeError("registry 'parser' must be a parser")
        if not isinstance(trigger := coalesce(trigger, ""), str | Pattern):
            raise TypeError("registry 'trigger' must be a string or a pattern")
        if context is not Unset and not isinstance(context, Context):
            raise TypeError("registry 'context' must be a context")

        self._parser = parser
        self._trigger = trigger
        self._context = context
        self._descriptors = []

    @property
    def parser(self):
        return self._parser

    @property
    def trigger(self):
        return self._trigger

    @property
    def descriptors(self):
        return tuple(self._descriptors)

    def __len__(self):
        return len(self._descriptors)

    def __iter__(self):
        return iter(tuple(self._descriptors))

    def __contains__(self, object):
        return any(descriptor is object or descriptor.handler is object for descriptor in self._descriptors)

    def register(self, definition, aliases, description=Unset, /):
        """
        Validate ``definition`` and store its descriptor.

        Returns a Registration; falsey, with the fault attached, when the
        definition was rejected.
        """
        try:
            descriptor = self._parser.builder.build(definition, aliases, description)
        except CommandParsingException as fault:
            logger.warning("rejected command %r: %s", getattr(definition, "__name__", definition), fault)
            return Registration(None, fault)
        self._descriptors.append(descriptor)
        logger.debug("registered %s as %s", descriptor.name, ", ".join(map(str, descriptor.aliases)))
        return Registration(descriptor, None)

    def command(self, aliases, description=Unset, /):
        """
        Class decorator registering a Command subclass; raises the fault on rejection.

        Example
            >>> @registry.command(("echo", "say"), "repeat the given words")
            ... class Echo(Command):
            ...     async def execute(self, context, *words):
            ...         return CommandResult.success(" ".join(words))
        """

        def decorator(definition):
            descriptor, fault = self.register(definition, aliases, description)
            if fault is not None:
                raise fault
            return definition

        return decorator

    def lookup(self, name, /):
        """
        First descriptor whose aliases consume ``name``, or None.
        """
        return next(iter(self.lookup_all(name)), None)

    def lookup_all(self, name, /):
        """
        Every descriptor whose aliases consume ``name``, in registration order.
        """
        name = self._parser.fold(name)
        return tuple(descriptor for descriptor in self._descriptors if descriptor.matches(name))

    def resolve(self, input, /, trigger=Unset):
        """
        Resolve ``input`` without binding or running anything.

        Raises EmptyInputError on blank input.
        """
        return self._parser.resolve(input, coalesce(trigger, self._trigger), self)

    async def handle(self, input, /, trigger=Unset, context=Unset, subject=None):
        """
        Run the command named by ``input`` and report the outcome.
        """
        trigger = coalesce(trigger, self._trigger)
        context = coalesce(context, self._context)
        if context is Unset:
            context = Context(self, self._parser)

        logger.debug("received %r", input)
        if not isinstance(input, str):
            return CommandResult.error("Invalid input", f"Expected a string to run a command, got {type(input).__name__}.")
        try:
            resolution = self._parser.resolve(input, trigger, self)
        except EmptyInputError as fault:
            return CommandResult.error("Invalid input", fault.message, fault)

        if not resolution.candidates:
            return CommandResult.error("Unknown command", f"No command metadata found capable of parsing {input!r}.")

        descriptor, *others = resolution.candidates
        try:
            binding = self._parser.bind(resolution.tokens[1:], descriptor, context, subject)
        except CommandParsingException as fault:
            logger.debug("binding %s failed: %s", descriptor.name, fault)
            return CommandResult.error("Command parsing failed", describe(fault), fault)
        except Exception as error:
            # handler construction or a context copy went wrong
            logger.warning("preparing %s raised %s", descriptor.name, type(error).__name__, exc_info=True)
            return CommandResult.error("Command execution failed", describe(error), error)

        result = await self._invoke(binding)

        if others:
            names = ", ".join(candidate.name for candidate in resolution.candidates)
            logger.warning("multiple commands matched %r: %s", resolution.name, names)
            result = result.warn(f"Multiple commands matched search string '{resolution.name}': {names}")

        logger.debug("completed %s with %s", descriptor.name, result.status.name)
        return result

    async def _invoke(self, binding, /):
        name = binding.descriptor.name
        try:
            result = await asyncio.create_task(binding.invoke(), name=f"herald:{name}")
        except Exception as error:
            logger.warning("command %s raised %s", name, type(error).__name__, exc_info=True)
            return CommandResult.error("Command execution failed", describe(error), error)

        if not isinstance(result, CommandResult):
            error = TypeError(f"{name}.{binding.descriptor.executor}() returned {type(result).__name__}, not a command result")
            logger.warning("%s", error)
            return CommandResult.error("Command execution failed", describe(error), error)
        return result


__all__ = (
    "Registry",
    "Registration",
)
