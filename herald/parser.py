r"""
Herald parser: from raw input to a ready-to-run invocation.

Pipeline
- tokenize(text)
  • Whitespace split; a token starting with a double or single quote runs
    to the matching quote followed by whitespace (or the end) and loses its
    quotes. Unbalanced quotes stay literal, so "don't" is one token.

- Parser.resolve(input, trigger, registry) -> Resolution
  • Strips the trigger (str: literal prefix; Pattern: its match), splits the
    rest into tokens and lists every registered descriptor whose aliases
    consume the whole first token (the command name), in registration order.
  • Blank input, or nothing after the trigger, raises EmptyInputError.
  • Input that does not start with the trigger yields no candidates.

- Parser.bind(tokens, descriptor, context, subject) -> Binding
  • Arity check, optional sub-command routing, then per-parameter token
    slicing and conversion. Conversion errors surface as ParsingFailedError
    chained to the original exception.
  • The handler comes from the descriptor's instance cache; the subject
    travels in a per-call copy of the context, never on the handler.

Quick example
    >>> tokenize('say "hello there" world')
    ['say', 'hello there', 'world']
"""
import copy
import logging
import re
from typing import NamedTuple

from .builder import Builder
from .converters import Converters
from .faults import EmptyInputError, InvalidArgumentsError, ParsingFailedError
from .patterns import Pattern
from .utils import *

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r'"([^"]*)"(?=\s|$)|\'([^\']*)\'(?=\s|$)|(\S+)')


def tokenize(text, /):
    """
    Split ``text`` into tokens, keeping quoted segments together.
    """
    if not isinstance(text, str):
        raise TypeError("tokenize() argument must be a string")
    tokens = []
    for match in _TOKEN.finditer(text):
        double, single, bare = match.groups()
        tokens.append(next(group for group in (double, single, bare) if group is not None))
    return tokens


class Resolution(NamedTuple):
    """
    Outcome of Parser.resolve().

    - name: the command name token (case-folded when the parser ignores case),
      None when the input did not start with the trigger.
    - candidates: matching descriptors in registration order.
    - tokens: every token, command name included.
    """
    name: str | None
    candidates: tuple
    tokens: tuple


class Binding(NamedTuple):
    """
    A bound invocation, ready to run with invoke().
    """
    handler: object
    descriptor: object
    arguments: tuple
    context: object

    def invoke(self):
        """
        Call the executor; returns the coroutine to await.
        """
        return getattr(self.handler, self.descriptor.executor)(self.context, *self.arguments)


class Parser:
    """
    Tokenizer, resolver and binder.

    Parameters
    - converters: Unset | Converters
      Converter registry; Converters.defaults() when Unset.
    - ignorecase: bool
      Case-fold command and sub-command names before matching aliases.
    """

    def __init__(self, converters=Unset, /, *, ignorecase=True):
        if converters is Unset:
            converters = Converters.defaults()
        elif not isinstance(converters, Converters):
            raise TypeError("parser 'converters' must be a converters registry")
        self._converters = converters
        self._ignorecase = bool(ignorecase)
        self._builder = Builder(converters, ignorecase=ignorecase)

    @property
    def converters(self):
        return self._converters

    @property
    def builder(self):
        return self._builder

    @property
    def ignorecase(self):
        return self._ignorecase

    def register(self, kind, converter, /):
        """
        Register a converter for ``kind``; False when one already exists.
        """
        return self._converters.register(kind, converter)

    def deregister(self, kind, /):
        return self._converters.deregister(kind)

    def fold(self, name, /):
        return name.lower() if self._ignorecase else name

    def resolve(self, input, trigger, registry, /):
        if not isinstance(input, str):
            raise TypeError("resolve() input must be a string")
        if not input.strip():
            raise EmptyInputError("No valid input detected - an empty string cannot be used to run a command.")

        if isinstance(trigger, Pattern):
            if not trigger.matches(input):
                return Resolution(None, (), ())
            text = trigger.strip(input)
        elif isinstance(trigger, str):
            if not input.startswith(trigger):
                return Resolution(None, (), ())
            text = input[len(trigger):]
        else:
            raise TypeError("resolve() trigger must be a string or a pattern")

        tokens = tokenize(text)
        if not tokens:
            raise EmptyInputError("No valid input detected - nothing follows the trigger.")

        name = self.fold(tokens[0])
        candidates = tuple(descriptor for descriptor in registry.descriptors if descriptor.matches(name))
        logger.debug("resolved %r to %d candidate(s)", name, len(candidates))
        return Resolution(name, candidates, tuple(tokens))

    def bind(self, tokens, descriptor, context, subject=None, /):
        tokens = list(tokens)
        self._check_arity(descriptor, tokens)

        if descriptor.has_subcommands and tokens:
            head = self.fold(tokens[0])
            for subcommand in descriptor.subcommands:
                if subcommand.matches(head):
                    logger.debug("routed %s to sub-command %s", descriptor.name, subcommand.executor)
                    descriptor = subcommand
                    tokens = tokens[1:]
                    self._check_arity(descriptor, tokens)
                    break

        context = copy.replace(context, subject=subject)

        arguments = []
        index = 0
        for parameter in descriptor.parameters:
            count = len(tokens) - index if parameter.rest else parameter.repetitions
            if index >= len(tokens) or index + count > len(tokens):
                value = parameter.empty()
            else:
                window = tokens[index:index + count]
                index += count
                try:
                    value = self._converters.convert(parameter.type, window, context, subject)
                except Exception as error:
                    raise ParsingFailedError(
                        f"Parameter {parameter.name!r} of {descriptor.name} could not be converted from {" ".join(window)!r}.",
                        command=descriptor.name,
                        parameter=parameter.name,
                    ) from error

            if parameter.variadic:
                arguments.extend(value)
            else:
                arguments.append(value)

        handler = descriptor.instantiate()
        logger.debug("bound %s.%s with %d argument(s)", descriptor.name, descriptor.executor, len(arguments))
        return Binding(handler, descriptor, tuple(arguments), context)

    def _check_arity(self, descriptor, tokens, /):
        if 0 <= descriptor.required and len(tokens) < descriptor.required:
            raise InvalidArgumentsError(
                f"Insufficient arguments provided. Command {descriptor.name} requires "
                f"{descriptor.required} {pluralize("argument", descriptor.required)} "
                f"but was provided with {len(tokens)}.",
                command=descriptor.name,
            )


__all__ = (
    "tokenize",
    "Parser",
    "Resolution",
    "Binding",
)
