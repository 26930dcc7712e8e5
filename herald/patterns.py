r"""
Herald alias patterns.

A Pattern decides whether (and how much of) an input string it consumes. It is
used both for command aliases ("echo", r"e(cho)?") and for trigger prefixes
("!", r"<@\d+>\s*").

Modes
- regular expression (default): the source is compiled with ``re``; ``start``
  prepends ``^`` and ``end`` appends ``$``, each toggled independently.
- plain text (``plain=True``): a literal, case-sensitive prefix test.
  Case folding is the caller's job (the parser lowers command names).

State
- matches(input) remembers the span it found for that input; strip(input)
  removes exactly that span afterwards. The memory is per thread so a shared
  alias set can be consulted from several dispatching threads at once.
- strip() after a failed match returns the input untouched; strip() on an
  input other than the one last matched raises RuntimeError.

Quick example
    >>> trigger = Pattern("!")
    >>> trigger.matches("!echo hi")
    True
    >>> trigger.strip("!echo hi")
    'echo hi'
"""
import re
import threading

from .internals import RecordType
from .utils import *


class Pattern(metaclass=RecordType, sealed=True):
    """
    Literal-or-regex matcher with a remembered match span.

    Parameters
    - pattern: str | re.Pattern
      Source text. A compiled pattern is used as-is (no anchors are added).
    - plain: bool
      Treat ``pattern`` as a literal prefix instead of a regular expression.
    - start / end: bool
      Anchor the regular expression at the start / end of the input.
    - flags: int
      ``re`` flags for a string source; a compiled pattern keeps its own.

    Raises
    - TypeError: non-string source, or a compiled pattern combined with plain.
    - ValueError: empty source, or a source that does not compile.
    """

    __introspectable__ = (
        "pattern",
        "plain",
        "start",
        "end",
        "flags",
    )

    def __init__(self, pattern, *, plain=False, start=True, end=False, flags=0):
        if not isinstance(flags, int):
            raise TypeError("pattern flags must be an integer")
        if isinstance(pattern, re.Pattern):
            if plain:
                raise TypeError("pattern compiled expressions cannot be plain")
            if flags and flags != pattern.flags:
                raise TypeError("pattern compiled expressions carry their own flags")
            self._regex = pattern
            pattern = pattern.pattern
            start = end = False
        elif not isinstance(pattern, str):
            raise TypeError("pattern source must be a string or a compiled expression")
        elif not pattern:
            raise ValueError("pattern source cannot be empty")
        elif plain:
            if flags:
                raise TypeError("pattern plain text takes no flags")
            self._regex = None
        else:
            source = pattern
            if start or end:
                source = ("^" if start else "") + f"(?:{source})" + ("$" if end else "")
            try:
                self._regex = re.compile(source, flags)
            except re.error as error:
                raise ValueError(f"pattern {pattern!r} is not a valid expression: {error}") from None

        self._pattern = pattern
        self._plain = bool(plain)
        self._start = bool(start)
        self._end = bool(end)
        # effective flags, re.UNICODE included
        self._flags = 0 if self._regex is None else self._regex.flags
        self._state = threading.local()

    @classmethod
    def coerce(cls, object, /):
        """
        Return ``object`` if it already is a Pattern, else build a start-anchored one.
        """
        if isinstance(object, cls):
            return object
        if isinstance(object, str | re.Pattern):
            return cls(object)
        raise TypeError(f"cannot build a pattern from {type(object).__name__!r}")

    @classmethod
    def literal(cls, text, /):
        """
        Shortcut for ``Pattern(text, plain=True)``.
        """
        return cls(text, plain=True)

    def matches(self, input, /):
        """
        Test ``input`` and remember the matched span for a following strip().
        """
        if not isinstance(input, str):
            raise TypeError("pattern input must be a string")

        if self._plain:
            span = (0, len(self._pattern)) if input.startswith(self._pattern) else None
        elif (match := self._regex.search(input)) is not None:
            span = match.span()
        else:
            span = None

        self._state.last = (input, span)
        return span is not None

    def strip(self, input, /):
        """
        Remove the span found by the last matches() call on this same input.
        """
        last, span = getattr(self._state, "last", (None, None))
        if span is None:
            return input
        if last != input:
            raise RuntimeError("pattern strip() must follow a successful matches() on the same input")
        begin, end = span
        return input[:begin] + input[end:]

    def consumes(self, input, /):
        """
        True when the pattern matches ``input`` from its first to its last character.
        """
        if not isinstance(input, str):
            raise TypeError("pattern input must be a string")

        if self._plain:
            whole = input == self._pattern
        else:
            whole = self._regex.fullmatch(input) is not None

        self._state.last = (input, (0, len(input)) if whole else None)
        return whole

    def __str__(self):
        return self._pattern

    def __eq__(self, other):
        if not isinstance(other, Pattern):
            return NotImplemented
        return (self._pattern, self._plain, self._start, self._end, self._flags) == (other._pattern, other._plain, other._start, other._end, other._flags)

    def __hash__(self):
        return hash((self._pattern, self._plain, self._start, self._end, self._flags))


__all__ = (
    "Pattern",
)
