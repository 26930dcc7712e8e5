"""
Herald descriptor builder (format verifier).

Builder.build(definition, aliases, description) inspects a Command subclass
once, at registration, and returns an immutable Descriptor tree, or raises the
first violation found as a registration-time fault:

1. definition is a Command subclass, aliases a non-empty set of
   str/Pattern                                     → IncorrectTypeError
2. __executor__ names exactly one method implemented by the subclass
   (missing / placeholder → NoExecutorFoundError, several → MalformedExecutorError)
3. executor structure: ``async def``, CommandResult return annotation when
   annotated, a context parameter (Context or subclass when annotated)
                                                   → MalformedExecutorError
4. remaining parameters, left to right             → InvalidParameterError
   - keyword-only and ``**kwargs`` parameters cannot be bound from text;
   - an optional parameter cannot be followed by a required one;
   - nothing may follow a rest parameter;
   - the type must be convertible by the Converters registry.
5. every __subcommands__ entry goes through steps 2-4 for its own method.

The builder has no side effects: nothing is stored anywhere on failure.
"""
import inspect
import logging
import re
from collections.abc import Iterable, Mapping

from .commands import Command, Context
from .descriptors import Argument, Descriptor, Parameter
from .faults import IncorrectTypeError, InvalidParameterError, MalformedExecutorError, NoExecutorFoundError
from .patterns import Pattern
from .results import CommandResult
from .utils import *

logger = logging.getLogger(__name__)


class Builder:
    """
    Validate command definitions and build their descriptors.

    Parameters
    - converters: Converters
      Consulted to decide whether each parameter type can be bound.
    - ignorecase: bool
      Lower-case bare string aliases so that they match the lower-cased
      command names produced by the Parser. Pattern aliases are kept as given.
    """

    def __init__(self, converters, /, *, ignorecase=True):
        self._converters = converters
        self._ignorecase = bool(ignorecase)

    def build(self, definition, aliases, description=Unset, /):
        if not isinstance(definition, type) or not issubclass(definition, Command):
            raise IncorrectTypeError(
                f"{_typename(definition)} is not a command type",
                hint="subclass herald.Command",
            )
        if not isinstance(description, str | Unset):
            raise IncorrectTypeError(f"description of {definition.__name__} must be a string")

        command = definition.__name__
        aliases = self._aliases(command, aliases)
        description = coalesce(description, inspect.cleandoc(definition.__doc__ or ""))

        name = self._executor_name(definition)
        required, parameters = self._inspect(definition, name)

        subcommands = []
        subtable = getattr(definition, "__subcommands__", {})
        if not isinstance(subtable, Mapping):
            raise IncorrectTypeError(f"{command}.__subcommands__ must be a mapping of aliases to method names")
        for subaliases, method in subtable.items():
            if not isinstance(method, str):
                raise NoExecutorFoundError(f"sub-command of {command} must name a method, got {_typename(method)}", command=command)
            subrequired, subparameters = self._inspect(definition, method)
            subcommands.append(Descriptor(
                definition,
                method,
                subrequired,
                subparameters,
                self._aliases(command, subaliases),
                description,
            ))

        descriptor = Descriptor(
            definition,
            name,
            required,
            parameters,
            aliases,
            description,
            subcommands,
            getattr(definition, "permissions", frozenset()),
            getattr(definition, "__cached__", True),
        )
        logger.debug("built descriptor for %s (required=%d, %d sub-commands)", command, required, len(subcommands))
        return descriptor

    def _aliases(self, command, aliases, /):
        if isinstance(aliases, str | Pattern | re.Pattern):
            aliases = (aliases,)
        if not isinstance(aliases, Iterable):
            raise IncorrectTypeError(f"aliases of {command} must be strings or patterns", command=command)

        patterns = []
        for alias in aliases:
            if isinstance(alias, str):
                if not (alias := alias.strip()):
                    raise IncorrectTypeError(f"aliases of {command} cannot be empty strings", command=command)
                alias = alias.lower() if self._ignorecase else alias
            elif not isinstance(alias, Pattern | re.Pattern):
                raise IncorrectTypeError(f"aliases of {command} must be strings or patterns", command=command)
            try:
                patterns.append(Pattern.coerce(alias))
            except ValueError as error:
                raise IncorrectTypeError(f"alias {alias!s} of {command} is invalid", command=command) from error

        if not patterns:
            raise IncorrectTypeError(f"{command} must be registered with at least one alias", command=command)
        return patterns

    def _executor_name(self, definition, /):
        command = definition.__name__
        name = getattr(definition, "__executor__", Unset)

        if isinstance(name, (tuple, list, set, frozenset)):
            if len(name) > 1:
                raise MalformedExecutorError(
                    f"{command} declares {len(name)} primary executors ({", ".join(map(str, name))})",
                    command=command,
                    hint="declare exactly one __executor__",
                )
            name, = name or (Unset,)

        if not isinstance(name, str) or not name:
            raise NoExecutorFoundError(f"{command} does not declare an executor", command=command)
        return name

    def _inspect(self, definition, name, /):
        """
        Check the executor ``name`` of ``definition`` and build its parameters.

        Returns (required, parameters).
        """
        command = definition.__name__
        executor = inspect.getattr_static(definition, name, None)

        if executor is None or executor is inspect.getattr_static(Command, name, None):
            raise NoExecutorFoundError(f"{command} does not implement {name}()", command=command)
        if not inspect.isfunction(executor):
            raise NoExecutorFoundError(f"{command}.{name} is not a method", command=command)
        if not inspect.iscoroutinefunction(executor):
            raise MalformedExecutorError(f"{command}.{name}() must be a coroutine function", command=command, hint="use async def")

        try:
            signature = inspect.signature(executor, eval_str=True)
        except (NameError, SyntaxError, TypeError) as error:
            raise MalformedExecutorError(f"{command}.{name}() annotations cannot be resolved: {error}", command=command) from error

        returns = signature.return_annotation
        if returns is not inspect.Signature.empty and not (isinstance(returns, type) and issubclass(returns, CommandResult)):
            raise MalformedExecutorError(f"{command}.{name}() must return a command result", command=command)

        remaining = list(signature.parameters.values())[1:]  # self
        if not remaining or remaining[0].kind not in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            raise MalformedExecutorError(f"{command}.{name}() must take the context as its first parameter", command=command)
        context, *remaining = remaining
        annotation = context.annotation
        if annotation is not inspect.Parameter.empty and not (isinstance(annotation, type) and issubclass(annotation, Context)):
            raise MalformedExecutorError(f"{command}.{name}() context parameter must be annotated with a context type", command=command)

        required = 0
        optional = None
        rest = None
        parameters = []
        for parameter in remaining:
            built = self._parameter(command, name, parameter)

            if rest is not None:
                raise InvalidParameterError(
                    f"{command}.{name}() parameter {built.name!r} cannot follow rest parameter {rest!r}",
                    command=command,
                    parameter=built.name,
                )
            if optional is not None and built.required:
                raise InvalidParameterError(
                    f"{command}.{name}() required parameter {built.name!r} cannot follow optional parameter {optional!r}",
                    command=command,
                    parameter=built.name,
                )
            if not self._converters.convertible(built.type):
                raise InvalidParameterError(
                    f"{command}.{name}() parameter {built.name!r} has no converter for {built.type!r}",
                    command=command,
                    parameter=built.name,
                    hint="register a converter before registering the command",
                )

            if built.rest:
                rest = built.name
                required = -1
            elif built.optional:
                optional = built.name
            elif required >= 0:
                required += built.repetitions
            parameters.append(built)

        return required, parameters

    def _parameter(self, command, name, parameter, /):
        """
        Translate one inspect.Parameter into a Parameter.
        """
        annotation = str if parameter.annotation is inspect.Parameter.empty else parameter.annotation

        match parameter.kind:
            case inspect.Parameter.KEYWORD_ONLY | inspect.Parameter.VAR_KEYWORD:
                raise InvalidParameterError(
                    f"{command}.{name}() parameter {parameter.name!r} is keyword-only and cannot be bound from text",
                    command=command,
                    parameter=parameter.name,
                )
            case inspect.Parameter.VAR_POSITIONAL:
                return Parameter(parameter.name, list[annotation], True, 0, variadic=True)

        if isinstance(spec := parameter.default, Argument):
            return Parameter(
                parameter.name,
                coalesce(spec.type, annotation),
                spec.optional,
                spec.repetitions,
                # the mirrored property would hand out a frozen copy
                spec._default,
                descr=spec.descr,
            )
        if parameter.default is inspect.Parameter.empty:
            return Parameter(parameter.name, annotation)
        return Parameter(parameter.name, annotation, True, 1, parameter.default)


def _typename(object, /):
    return object.__name__ if isinstance(object, type) else type(object).__name__


__all__ = (
    "Builder",
)
