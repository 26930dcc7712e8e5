"""
Herald converters: turning string tokens into typed executor arguments.

Overview
- Converter (protocol)
  • from_tokens(tokens, context, subject): value from the slice of tokens
    a parameter consumed.
  • from_token(token, context, subject): value from a single token; used
    element-wise for array parameters.
  Both signal failure by raising (ValueError/TypeError); the Parser wraps
  the error into ParsingFailedError.

- Converters (registry)
  • Keyed by type identity (``int``, ``list[int]``); one converter per type,
    duplicates are refused instead of replacing.
  • Built-ins from Converters.defaults(): str, list[str], int, list[int].

- Built-in fallbacks (no registered converter)
  • str: tokens joined with a single space; never routed anywhere else.
  • bool/int/float/complex/Decimal/Fraction/Enum: invariant parsing of the
    joined slice ("true"/"false", ASCII digits, enum member names).
  • list[T] / tuple[T, ...]: element-wise, through a registered converter
    for T when there is one, else the fallback above.
  • T | None: converted as T.
  Any other type is not convertible: the Builder rejects it at registration.
"""
import logging
import re
import types
import typing
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

_INTEGER = re.compile(r"[+-]?[0-9]+")
_DECIMAL = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_BOOLEANS = {"true": True, "false": False}


@runtime_checkable
class Converter(Protocol):
    def from_tokens(self, tokens, context, subject, /): ...
    def from_token(self, token, context, subject, /): ...


class StringConverter:
    def from_tokens(self, tokens, context, subject, /):
        return " ".join(tokens)

    def from_token(self, token, context, subject, /):
        return token


class StringListConverter:
    def from_tokens(self, tokens, context, subject, /):
        return list(tokens)

    def from_token(self, token, context, subject, /):
        return token.split()


class IntegerConverter:
    def from_tokens(self, tokens, context, subject, /):
        return self.from_token(" ".join(tokens), context, subject)

    def from_token(self, token, context, subject, /):
        return _parse(int, token)


class IntegerListConverter:
    def from_tokens(self, tokens, context, subject, /):
        return [_parse(int, token) for token in tokens]

    def from_token(self, token, context, subject, /):
        return self.from_tokens(token.split(), context, subject)


def _parse(kind, text, /):
    """
    Invariant textual parsing of a scalar value type.
    """
    if kind is bool:
        try:
            return _BOOLEANS[text.lower()]
        except KeyError:
            raise ValueError(f"{text!r} is not a boolean (expected true or false)") from None
    if kind is int:
        if not _INTEGER.fullmatch(text):
            raise ValueError(f"{text!r} is not an integer")
        return int(text)
    if kind in (float, Decimal):
        if not _DECIMAL.fullmatch(text):
            raise ValueError(f"{text!r} is not a number")
        return kind(text)
    if kind is Fraction:
        try:
            return Fraction(text)
        except (ValueError, ZeroDivisionError):
            raise ValueError(f"{text!r} is not a fraction") from None
    if kind is complex:
        try:
            return complex(text)
        except ValueError:
            raise ValueError(f"{text!r} is not a complex number") from None
    if isinstance(kind, type) and issubclass(kind, Enum):
        for member in kind:
            if member.name.lower() == text.lower():
                return member
        raise ValueError(f"{text!r} is not one of {", ".join(member.name.lower() for member in kind)}")
    raise TypeError(f"no invariant parser for {kind!r}")


def _scalar(kind, /):
    return kind in (bool, int, float, complex, Decimal, Fraction) or (isinstance(kind, type) and issubclass(kind, Enum))


def _unwrap(kind, /):
    """
    Reduce ``T | None`` to ``T``; other types are returned unchanged.
    """
    if typing.get_origin(kind) in (typing.Union, types.UnionType):
        arguments = [argument for argument in typing.get_args(kind) if argument is not types.NoneType]
        if len(arguments) == 1:
            return arguments[0]
    return kind


def _element(kind, /):
    """
    Element type of list[T] / tuple[T, ...], or None for non-array types.
    """
    origin = typing.get_origin(kind)
    arguments = typing.get_args(kind)
    if origin is list and len(arguments) == 1:
        return arguments[0]
    if origin is tuple and len(arguments) == 2 and arguments[1] is Ellipsis:
        return arguments[0]
    return None


class Converters:
    """
    Registry of converters keyed by target type.

    Registration must finish before dispatching starts; lookups take no lock.

    Example
        >>> converters = Converters.defaults()
        >>> converters.register(Colour, ColourConverter())
        True
        >>> converters.register(Colour, OtherConverter())
        False
    """

    def __init__(self):
        self._converters = {}

    @classmethod
    def defaults(cls):
        """
        A registry holding the built-in str, list[str], int and list[int] converters.
        """
        self = cls()
        self.register(str, StringConverter())
        self.register(list[str], StringListConverter())
        self.register(int, IntegerConverter())
        self.register(list[int], IntegerListConverter())
        return self

    def register(self, kind, converter, /):
        """
        Add ``converter`` for ``kind``; False (and no change) when one already exists.
        """
        if not isinstance(converter, Converter):
            raise TypeError("register() converter must implement from_tokens() and from_token()")
        if kind in self._converters:
            logger.debug("converter for %r already registered, keeping the existing one", kind)
            return False
        self._converters[kind] = converter
        logger.debug("registered converter %s for %r", type(converter).__name__, kind)
        return True

    def deregister(self, kind, /):
        """
        Remove the converter for ``kind``; False when there was none.
        """
        if self._converters.pop(kind, None) is None:
            return False
        logger.debug("deregistered converter for %r", kind)
        return True

    def get(self, kind, default=None, /):
        return self._converters.get(kind, default)

    def __contains__(self, kind):
        return kind in self._converters

    def __iter__(self):
        return iter(self._converters)

    def __len__(self):
        return len(self._converters)

    def convertible(self, kind, /):
        """
        True when tokens can be bound to ``kind`` (registered or built-in).
        """
        if kind in self._converters or kind is str:
            return True
        kind = _unwrap(kind)
        if kind in self._converters or kind is str or _scalar(kind):
            return True
        if (element := _element(kind)) is not None:
            return self.convertible(element)
        return False

    def convert(self, kind, tokens, context, subject, /):
        """
        Convert the token slice a parameter consumed into a ``kind`` value.

        Raises whatever the converter raises; TypeError when ``kind`` is not
        convertible at all.
        """
        if (converter := self._converters.get(kind)) is not None:
            return converter.from_tokens(list(tokens), context, subject)
        if kind is str:
            return " ".join(tokens)

        kind = _unwrap(kind)
        if (converter := self._converters.get(kind)) is not None:
            return converter.from_tokens(list(tokens), context, subject)
        if kind is str:
            return " ".join(tokens)
        if _scalar(kind):
            return _parse(kind, " ".join(tokens))

        if (element := _element(kind)) is not None:
            values = [self._convert_one(element, token, context, subject) for token in tokens]
            return typing.get_origin(kind)(values)

        raise TypeError(f"no converter registered for {kind!r}")

    def _convert_one(self, kind, token, context, subject, /):
        if (converter := self._converters.get(kind)) is not None:
            return converter.from_token(token, context, subject)
        kind = _unwrap(kind)
        if (converter := self._converters.get(kind)) is not None:
            return converter.from_token(token, context, subject)
        if kind is str:
            return token
        if _scalar(kind):
            return _parse(kind, token)
        if _element(kind) is not None:
            return self.convert(kind, token.split(), context, subject)
        raise TypeError(f"no converter registered for {kind!r}")


__all__ = (
    "Converter",
    "Converters",
    "StringConverter",
    "StringListConverter",
    "IntegerConverter",
    "IntegerListConverter",
)
