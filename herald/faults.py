"""
Herald faults: the structured failure taxonomy and its rendering.

Scope
- FaultCode: stable numeric identifiers, one per failure reason.
- CommandException: base type carrying a message and free-form options
  (command name, parameter name, hint, ...), renderable through rich.
- CommandParsingException and one subclass per reason.

Taxonomies
- registration-time (22xxx): IncorrectType, NoExecutorFound,
  MalformedExecutor, InvalidParameter. Raised by the Builder and returned by
  Registry.register(); the registry is left unchanged.
- dispatch-time (21xxx): EmptyInput, UnknownCommandName, InvalidArguments,
  ParsingFailed. Raised inside the Parser and recovered by Registry.handle()
  into an error CommandResult; they never reach the caller of handle().

Host integration
- __codes__ in __main__ remaps codes to custom labels (see FaultCode.normalize).
- __styles__ in __main__ overrides the palette used by __rich__.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - dispatch-time (211xx)
      • EMPTY_INPUT, UNKNOWN_COMMAND_NAME, INVALID_ARGUMENTS, PARSING_FAILED
    - registration-time (221xx)
      • INCORRECT_TYPE, NO_EXECUTOR_FOUND, MALFORMED_EXECUTOR, INVALID_PARAMETER
    """
    # --- dispatch-time (21xxx) ---
    EMPTY_INPUT                 = 21101
    UNKNOWN_COMMAND_NAME        = 21102
    INVALID_ARGUMENTS           = 21111
    PARSING_FAILED              = 21112

    # --- registration-time (22xxx) ---
    INCORRECT_TYPE              = 22101
    NO_EXECUTOR_FOUND           = 22102
    MALFORMED_EXECUTOR          = 22103
    INVALID_PARAMETER           = 22104

    @property
    def registration(self):
        """
        True for codes raised while building descriptors.
        """
        return self.value // 1000 == 22

    def normalize(self):
        """
        return a host-normalized label for this code.

        the host application can provide a __codes__ mapping in __main__;
        without one, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    Base class of every herald fault.

    Parameters
    - message: Unset | str
      One-sentence description of what went wrong.
    - **options:
      Context for rendering and diagnostics (e.g. ``command``, ``parameter``,
      ``hint``, ``fancy``). Stored as a read-only mapping.
    """
    __title__ = "command error"

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        code = getattr(self, "code", None)
        header = Text.assemble(
            "[ ",
            Text(code.normalize() if code is not None else "-", styles["code"]),
            " | ",
            Text(type(self).__title__.title(), styles["error-title"]),
            " ]",
        )
        parts = [Text(coalesce(self.message, ""), styles["error-message"])]
        if hint := self.options.get("hint"):
            parts.append(Text.assemble(Text(" → ", styles["hint-arrow"]), Text(hint, styles["hint"])))

        if self.options.get("fancy", False):
            return Panel(Group(*parts), title=header, title_align="left")

        return Group(header, *parts)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        replaced = type(self)(self.message, **{**self.options, **overrides})
        replaced.__cause__ = self.__cause__
        return replaced


class CommandParsingException(CommandException):
    """
    A fault tied to one FaultCode.

    Subclasses bind their code through the ``__code__`` class attribute; the
    instance exposes it as ``code`` (and ``reason``, the taxonomy name).
    """
    __code__ = Unset

    def __init_subclass__(cls, **options):
        super().__init_subclass__(**options)
        if cls.__code__ is not Unset and not isinstance(cls.__code__, FaultCode):
            raise TypeError(f"{cls.__name__}.__code__ must be a fault-code")

    @property
    def code(self):
        return coalesce(type(self).__code__)

    @property
    def reason(self):
        return None if self.code is None else self.code.name


class EmptyInputError(CommandParsingException):
    __code__ = FaultCode.EMPTY_INPUT
    __title__ = "invalid input"


class UnknownCommandError(CommandParsingException):
    __code__ = FaultCode.UNKNOWN_COMMAND_NAME
    __title__ = "unknown command"


class InvalidArgumentsError(CommandParsingException):
    __code__ = FaultCode.INVALID_ARGUMENTS
    __title__ = "invalid arguments"


class ParsingFailedError(CommandParsingException):
    __code__ = FaultCode.PARSING_FAILED
    __title__ = "parsing failed"


class IncorrectTypeError(CommandParsingException):
    __code__ = FaultCode.INCORRECT_TYPE
    __title__ = "incorrect type"


class NoExecutorFoundError(CommandParsingException):
    __code__ = FaultCode.NO_EXECUTOR_FOUND
    __title__ = "no executor found"


class MalformedExecutorError(CommandParsingException):
    __code__ = FaultCode.MALFORMED_EXECUTOR
    __title__ = "malformed executor"


class InvalidParameterError(CommandParsingException):
    __code__ = FaultCode.INVALID_PARAMETER
    __title__ = "invalid parameter"


__all__ = (
    "FaultCode",
    "CommandException",
    "CommandParsingException",
    "EmptyInputError",
    "UnknownCommandError",
    "InvalidArgumentsError",
    "ParsingFailedError",
    "IncorrectTypeError",
    "NoExecutorFoundError",
    "MalformedExecutorError",
    "InvalidParameterError",
)
