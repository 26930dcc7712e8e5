"""
Herald command results.

A CommandResult is produced exactly once per dispatch attempt and handed back
to the caller of Registry.handle(). It is immutable: every update (adding a
warning, changing the status) goes through copy.replace().

Statuses
- SUCCESS       the handler ran and reported success.
- WARNING       the handler ran; something worth surfacing happened (e.g. a
                command name matched several descriptors).
- ERROR         parsing, binding or the handler itself failed.
- NO_EXECUTION  reserved for callers that decide not to run a matched command
                (for example after their own permission check).
"""
import copy
from collections import defaultdict
from enum import Enum

from rich.console import Group
from rich.text import Text

from .internals import RecordType
from .utils import *


class Status(Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    NO_EXECUTION = "no-execution"


class CommandResult(metaclass=RecordType):
    """
    Outcome of one dispatch.

    Fields
    - status: Status
    - short: str, a few words (e.g. "Unknown command").
    - long: str, the detailed reason (may be empty).
    - warnings: tuple[str, ...], in the order they were attached.
    - cause: BaseException | None, the error behind an ERROR result.

    Handlers normally build results with the classmethod shortcuts:
    success(), warning(), error() and skipped().
    """

    __introspectable__ = (
        "status",
        "short",
        "long",
        "warnings",
        "cause",
    )

    def __init__(self, status, short="", long="", warnings=(), cause=None):
        if not isinstance(status, Status):
            raise TypeError(f"{type(self).__typename__} 'status' must be a status")
        if not isinstance(short, str) or not isinstance(long, str):
            raise TypeError(f"{type(self).__typename__} reasons must be strings")
        if isinstance(warnings, str):
            raise TypeError(f"{type(self).__typename__} 'warnings' must be an iterable of strings")
        warnings = tuple(warnings)
        if not all(isinstance(warning, str) for warning in warnings):
            raise TypeError(f"{type(self).__typename__} 'warnings' must be an iterable of strings")
        if cause is not None and not isinstance(cause, BaseException):
            raise TypeError(f"{type(self).__typename__} 'cause' must be an exception")

        self._status = status
        self._short = short
        self._long = long
        self._warnings = warnings
        self._cause = cause

    @classmethod
    def success(cls, short="", long=""):
        return cls(Status.SUCCESS, short, long)

    @classmethod
    def warning(cls, short="", long=""):
        return cls(Status.WARNING, short, long)

    @classmethod
    def error(cls, short, long="", cause=None):
        return cls(Status.ERROR, short, long, cause=cause)

    @classmethod
    def skipped(cls, short, long=""):
        return cls(Status.NO_EXECUTION, short, long)

    @property
    def ok(self):
        """
        True when the handler ran without failing (SUCCESS or WARNING).
        """
        return self._status in (Status.SUCCESS, Status.WARNING)

    def warn(self, message, /):
        """
        Return a copy with ``message`` appended to the warnings.

        A SUCCESS result becomes WARNING; any other status is kept, so an
        ERROR stays an error while still carrying the notice.
        """
        if not isinstance(message, str):
            raise TypeError("warn() argument must be a string")
        status = Status.WARNING if self._status is Status.SUCCESS else self._status
        return copy.replace(self, status=status, warnings=(*self._warnings, message))

    def __rich__(self):
        styles = defaultdict(str, {
            "success": "bold #9CE19C",
            "warning": "bold #FFB400",
            "error": "bold #FF4DA6",
            "no-execution": "bold #6B6F7A",
            "result-long": "#C8C8D0",
            "result-warning": "italic #FFC2E0",
        } | getattr(__import__("__main__"), "__styles__", {}))

        header = Text.assemble(
            "[ ",
            Text(self._status.value, styles[self._status.value]),
            " ] ",
            self._short,
        )
        parts = [header]
        if self._long:
            parts.append(Text(self._long, styles["result-long"]))
        for warning in self._warnings:
            parts.append(Text("! " + warning, styles["result-warning"]))
        return Group(*parts)


__all__ = (
    "Status",
    "CommandResult",
)
