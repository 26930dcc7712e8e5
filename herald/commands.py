"""
Herald command capability and execution context.

Defining a command
- Subclass Command and implement ``async def execute(self, context, ...)``
  returning a CommandResult. Parameters after ``context`` are bound from the
  input tokens by the Parser; their annotations select the converters.
- Declarative class attributes shape the descriptor:
  • __executor__: name of the primary executor method ("execute").
  • __subcommands__: mapping of alias (str, Pattern, or a tuple of them) to
    the name of a sub-executor method, tried in declaration order.
  • __cached__: reuse one handler instance across dispatches (default True).
  • permissions: opaque permission tokens exposed on the descriptor; the
    caller checks them before dispatching.

Context
- The per-call environment handed to executors: the active Registry and
  Parser plus the ``subject`` (whatever triggered the command, passed through
  untouched). Handlers stay stateless; the subject never lives on the
  (possibly shared) handler instance.

Registering
- command(aliases, description, registry=...) is the free-standing form of
  the Registry.command decorator.

Quick example
    >>> class Echo(Command):
    ...     async def execute(self, context, *words) -> CommandResult:
    ...         return CommandResult.success(" ".join(words))
"""
from .internals import RecordType
from .results import CommandResult
from .utils import *


class Command:
    """
    Base class of every command handler.

    The base ``execute`` is a placeholder: a subclass that does not provide
    its own executor is rejected at registration with NoExecutorFound.
    """
    __executor__ = "execute"
    __subcommands__ = {}
    __cached__ = True

    permissions = frozenset()

    async def execute(self, context, /, *arguments) -> CommandResult:
        raise NotImplementedError(f"{type(self).__name__} does not implement an executor")


class Context(metaclass=RecordType):
    """
    Environment passed as the first argument of every executor.

    Fields
    - registry: the Registry dispatching the call.
    - parser: the Parser that bound the arguments.
    - subject: the triggering entity (message, user, ...), or None.

    Subclass it to expose host services (a connection, a database) to
    handlers; executors may then annotate their context parameter with the
    subclass. Every added constructor field must also be listed in
    ``__introspectable__``: the per-call copy rebuilds the context from it.
    """

    __introspectable__ = (
        "registry",
        "parser",
        "subject",
    )
    __displayable__ = (
        "subject",
    )

    def __init__(self, registry, parser, subject=None):
        self._registry = registry
        self._parser = parser
        self._subject = subject


def command(aliases, description=Unset, /, *, registry):
    """
    Class decorator registering a Command subclass on ``registry``.

    Same as ``@registry.command(aliases, description)``: the class is
    returned unchanged and the registration fault is raised on rejection.

    Example
        >>> @command("ping", registry=registry)
        ... class Ping(Command):
        ...     async def execute(self, context) -> CommandResult:
        ...         return CommandResult.success("pong")
    """
    from .registry import Registry

    if not isinstance(registry, Registry):
        raise TypeError("command() 'registry' must be a registry")
    return registry.command(aliases, description)


__all__ = (
    "command",
    "Command",
    "Context",
)
