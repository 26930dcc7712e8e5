"""
Herald utilities (shared helpers, exposed for handler authors)

Scope
- Small building blocks used by every layer of the dispatch pipeline so that
  defaults, read-only state and diagnostics behave the same everywhere.

Overview
- UnsetType / Unset
  • Singleton sentinel meaning “not provided”, distinct from None.
  • Falsey, printable as "Unset", sealed against subclassing.

- coalesce(value, default=None)
  • Materialize Unset into a default while keeping None/0/""/[] untouched.

- rename(callable, name) / @rename("name")
  • Give generated callables a stable __name__/__qualname__.

- mirror("attr")
  • Read-only property over a private field (self._attr). Containers are
    handed out as immutable snapshots (tuple, frozenset, mapping proxy).

- pluralize(word, count)
  • Count-aware English plural for fault messages ("1 argument", "2 arguments").

- describe(exception)
  • Flatten an exception and its causes into a multi-line error string.

Quick examples
    >>> coalesce(Unset, "!")
    '!'
    >>> pluralize("argument", 2)
    'arguments'
"""
import builtins
import functools
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Sentinel type for parameters whose absence must be told apart from None.

    Characteristics
    - bool(Unset) is False.
    - repr(Unset) is "Unset".
    - UnsetType() always returns the same instance.
    - Subclassing is rejected.
    """

    def __or__(self, other, /):
        """
        Allow ``UnsetType | T`` in annotations.
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Allow ``T | UnsetType`` in annotations.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return ``object`` unless it is Unset, in which case return ``default``.

    Falsey values (None, 0, "", []) are real values and are preserved.

    Examples
    - coalesce("!", "/")   -> "!"
    - coalesce(Unset, "/") -> "/"
    - coalesce(None, "/")  -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable, or build a decorator doing so.

    Forms
    - rename(callable, name) -> callable (updated in place)
    - rename(name) -> decorator

    Raises
    - TypeError: wrong arity, non-callable target, non-string name, or a
      callable whose metadata cannot be updated (e.g. built-ins).
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be an updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _freeze(object):
    """
    Recursively snapshot containers into immutable counterparts.

    - Mapping: read-only proxy over a fresh dict (values frozen).
    - Set: frozenset.
    - Sequence (non-string): tuple.
    - Anything else: returned as-is.
    """
    if isinstance(object, Mapping):
        return MappingProxyType({key: _freeze(value) for key, value in object.items()})
    elif isinstance(object, Set):
        return frozenset(object)
    elif isinstance(object, Sequence) and not isinstance(object, str | bytes):
        return tuple(map(_freeze, object))
    return object


def mirror(name, /):
    """
    Build a read-only property exposing the private field ``_{name}``.

    Container values are returned as immutable snapshots, so callers
    cannot mutate descriptor state through the public surface.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


_IRREGULARS = {
    "alias": "aliases",
    "child": "children",
    "person": "people",
    "status": "statuses",
}


@functools.cache
def pluralize(word, count=2, /):
    """
    Return ``word`` in singular when ``count`` is exactly one, plural otherwise.

    Only the handful of nouns used in herald's messages are covered: regular
    "-s" nouns, sibilant "-es" nouns, consonant + "y" nouns and a short list
    of irregular forms. Casing of the first letter is preserved.
    """
    if not isinstance(word, str):
        raise TypeError("pluralize() first argument must be a string")
    if not isinstance(count, int):
        raise TypeError("pluralize() second argument must be an integer")

    if count == 1 or not word:
        return word

    lower = word.lower()
    if lower in _IRREGULARS:
        plural = _IRREGULARS[lower]
    elif lower.endswith(("s", "sh", "ch", "x", "z")):
        plural = lower + "es"
    elif lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        plural = lower[:-1] + "ies"
    else:
        plural = lower + "s"

    if word.isupper() and len(word) > 1:
        return plural.upper()
    if word[:1].isupper():
        return plural[:1].upper() + plural[1:]
    return plural


def describe(exception, /):
    """
    Render an exception and its chain of causes as a multi-line string.

    Each line is ``TypeName: message``; the first line is the exception
    itself, following lines walk ``__cause__`` (or ``__context__`` when the
    context was not suppressed) until the chain ends. Cycles are cut.

    Examples
    - describe(ValueError("bad"))  -> "ValueError: bad"
    """
    if not isinstance(exception, BaseException):
        raise TypeError("describe() argument must be an exception")

    lines = []
    seen = set()
    current = exception
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        message = str(current)
        lines.append(f"{type(current).__name__}: {message}" if message else type(current).__name__)
        if current.__cause__ is not None:
            current = current.__cause__
        elif not current.__suppress_context__:
            current = current.__context__
        else:
            current = None
    return "\n".join(lines)


Unset = UnsetType()
"""
Process-wide “not provided” marker; pair with coalesce() to pick defaults.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "pluralize",
    "describe",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
