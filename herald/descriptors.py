"""
Herald descriptors: the validated, immutable shape of registered commands.

Overview
- Argument[_T]
  • Declarative parameter spec placed as the default of an executor
    parameter, for shapes that plain Python signatures cannot express:
    multi-token parameters (repetitions=2), rest parameters
    (repetitions=0), explicit optionality and descriptions.

- Parameter
  • One bindable executor parameter as seen by the parser: name, target
    type, optional flag, repetition count (<= 0 means "rest") and default.

- Descriptor
  • Full shape of one command or sub-command: handler class, executor
    method name, required-argument count (-1 once a rest parameter exists),
    parameters, aliases, description, nested sub-command descriptors,
    permissions and handler caching.

Lifecycle
- Descriptors are built once by the Builder at registration, stored by the
  Registry and only read while dispatching. The one mutable slot is the
  cached handler instance created on first use (see Descriptor.instantiate).
"""
import copy
import types
import typing

from rich.text import Text

from .internals import RecordType
from .utils import *


class Argument[_T](metaclass=RecordType, sealed=True):
    """
    Parameter spec used as an executor parameter default.

    Parameters
    - type: Unset | type | generic alias
      Target type. When Unset, the parameter annotation (or str) is used.
    - repetitions: int
      Tokens consumed. 1 by default; n > 1 joins/collects n tokens;
      0 (or less) consumes every remaining token.
    - optional: bool
      Missing tokens produce the default (or the type's empty value)
      instead of an arity failure. Implied by an explicit default.
    - default: Any
      Value used when too few tokens remain.
    - descr: Unset | str
      Short human description, shown by the help command.

    Example
        async def execute(self, context, words: list[str] = Argument(repetitions=0)): ...
    """

    __introspectable__ = (
        "type",
        "repetitions",
        "optional",
        "default",
        "descr",
    )

    def __init__(self, type=Unset, repetitions=1, *, optional=False, default=Unset, descr=Unset):
        if type is not Unset and not _is_type(type):
            raise TypeError(f"{self.__typename__} 'type' must be a type")
        if not isinstance(repetitions, int) or isinstance(repetitions, bool):
            raise TypeError(f"{self.__typename__} 'repetitions' must be an integer")
        if not isinstance(descr, str | Text | Unset):
            raise TypeError(f"{self.__typename__} 'descr' must be a string")
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ValueError(f"{self.__typename__} 'descr' cannot be empty")

        self._type = type
        self._repetitions = repetitions
        self._optional = bool(optional) or default is not Unset
        self._default = default
        self._descr = descr


class Parameter(metaclass=RecordType, sealed=True):
    """
    One bindable executor parameter.

    ``variadic`` marks parameters declared as ``*args``: their converted
    value is spread into the call instead of being passed as one argument.
    """

    __introspectable__ = (
        "name",
        "type",
        "optional",
        "repetitions",
        "default",
        "variadic",
        "descr",
    )
    __displayable__ = (
        "name",
        "type",
        "optional",
        "repetitions",
    )

    def __init__(self, name, type=str, optional=False, repetitions=1, default=Unset, variadic=False, descr=Unset):
        if not isinstance(name, str) or not name:
            raise TypeError(f"{self.__typename__} 'name' must be a non-empty string")
        if not _is_type(type):
            raise TypeError(f"{self.__typename__} 'type' must be a type")

        self._name = name
        self._type = type
        self._optional = bool(optional)
        self._repetitions = repetitions
        self._default = default
        self._variadic = bool(variadic)
        self._descr = descr

    @property
    def rest(self):
        """
        True when the parameter consumes every remaining token.
        """
        return self._repetitions <= 0

    @property
    def required(self):
        return not self._optional

    def empty(self):
        """
        Value bound when fewer tokens remain than the parameter needs.

        Order: the declared default, "" for str, the zero value of the
        runtime type (int() -> 0, list() -> []), or None when the type
        cannot be built without arguments.
        """
        if self._default is not Unset:
            return self._default
        if self._type is str:
            return ""
        origin = typing.get_origin(self._type) or self._type
        if not isinstance(origin, type) or origin is types.UnionType:
            return None
        try:
            return origin()
        except Exception:
            return None


class Descriptor(metaclass=RecordType, sealed=True):
    """
    Immutable shape of a registered command (or one of its sub-commands).

    Fields
    - handler: the Command subclass.
    - executor: name of the method invoked for this descriptor.
    - required: tokens needed before binding, or -1 with a rest parameter.
    - parameters: tuple[Parameter, ...] in declaration order.
    - aliases: tuple[Pattern, ...]; order is matching order.
    - description: str.
    - subcommands: tuple[Descriptor, ...] tried in declaration order.
    - permissions: frozenset[str] exposed for the caller to enforce.
    - cached: reuse one handler instance across dispatches.

    Sub-descriptors share their owner's handler instance.
    """

    __introspectable__ = (
        "handler",
        "executor",
        "required",
        "parameters",
        "aliases",
        "description",
        "subcommands",
        "permissions",
        "cached",
    )
    __displayable__ = (
        "name",
        "executor",
        "required",
        "parameters",
        "aliases",
        "subcommands",
    )

    def __init__(
            self,
            handler,
            executor,
            required,
            parameters=(),
            aliases=(),
            description="",
            subcommands=(),
            permissions=frozenset(),
            cached=True,
    ):
        self._handler = handler
        self._executor = executor
        self._required = required
        self._parameters = tuple(parameters)
        self._aliases = tuple(aliases)
        self._description = description
        self._subcommands = tuple(subcommands)
        self._permissions = frozenset(permissions)
        self._cached = bool(cached)
        self._instance = Unset
        self._owner = None
        for subcommand in self._subcommands:
            subcommand._owner = self

    @property
    def name(self):
        """
        Type name of the handler, used in multi-match warnings.
        """
        return self._handler.__name__

    @property
    def owner(self):
        """
        Descriptor owning this sub-command, None for top-level descriptors.
        """
        return self._owner

    @property
    def has_subcommands(self):
        return bool(self._subcommands)

    def matches(self, name, /):
        """
        True when one of the aliases consumes the whole ``name`` token.
        """
        return any(alias.consumes(name) for alias in self._aliases)

    def walk(self):
        """
        Yield this descriptor then every nested sub-descriptor, depth first.
        """
        yield self
        for subcommand in self._subcommands:
            yield from subcommand.walk()

    def __replace__(self, /, **changes):
        if unknown := changes.keys() - set(self.__introspectable__):
            raise TypeError(f"{self.__typename__} has no field(s) {", ".join(sorted(unknown))}")
        fields = {field: getattr(self, "_" + field) for field in self.__introspectable__} | changes
        # copies, since the constructor re-parents sub-descriptors
        fields["subcommands"] = tuple(copy.replace(subcommand) for subcommand in fields["subcommands"])
        return type(self)(**fields)

    def instantiate(self):
        """
        Return the handler instance used for a dispatch.

        Cached descriptors create the instance on first use and reuse it
        afterwards; uncached ones build a fresh instance every time.
        """
        if self._owner is not None:
            return self._owner.instantiate()
        if not self._cached:
            return self._handler()
        if self._instance is Unset:
            self._instance = self._handler()
        return self._instance


def _is_type(object):
    """
    Accept classes, parametrized generics (list[int]) and unions (int | None).
    """
    return isinstance(object, type | types.GenericAlias | types.UnionType) or typing.get_origin(object) is not None


__all__ = (
    "Argument",
    "Parameter",
    "Descriptor",
)
