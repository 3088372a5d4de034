"""
Conductor faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every failure the
  pipeline can surface, grouped by stage (parsing, routing, resolution,
  execution, registration).
- CommandException: base type carrying a structured payload (names, counts,
  raw strings) plus rendering options; it knows how to render itself with rich.
- One concrete class per failure kind, so callers match on type or on `code`.
- trigger(): central entry point to surface a fault (raise or render).
- report(): default fallback used by the executors and the shell.

Propagation
- The pipeline raises synchronously and never logs. Rendering is opt-in and
  belongs to the caller: trigger(fault, shell=True) prints instead of raising.

Integration
- Host applications may define __prog__, __styles__ and __codes__ in __main__
  to rename the program, restyle the output and relabel fault codes.
"""
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text
from rich.traceback import Traceback

from .utils import Unset, pluralize

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the pipeline (stable identifiers).

    grouping (by stage)
    - parsing (111xx)
      • MALFORMED_INPUT, MALFORMED_INVOCATION
    - routing (112xx)
      • UNKNOWN_ENVIRONMENT, UNKNOWN_COMMAND
    - resolution (113xx)
      • ARGUMENT_COUNT, MISSING_CONVERTER, UNCONVERTIBLE_VALUE, REJECTED_VALUE,
        MISSING_ARGUMENT
    - execution (114xx)
      • EXECUTION_FAILED
    - registration (115xx), build phase only
      • DUPLICATE_NAME
    """
    # --- parsing errors (111xx) ---
    MALFORMED_INPUT             = 11101
    MALFORMED_INVOCATION        = 11102

    # --- routing errors (112xx) ---
    UNKNOWN_ENVIRONMENT         = 11201
    UNKNOWN_COMMAND             = 11202

    # --- resolution errors (113xx) ---
    ARGUMENT_COUNT              = 11301
    MISSING_CONVERTER           = 11302
    UNCONVERTIBLE_VALUE         = 11303
    REJECTED_VALUE              = 11304
    MISSING_ARGUMENT            = 11305

    # --- execution errors (114xx) ---
    EXECUTION_FAILED            = 11401

    # --- registration errors (115xx) ---
    DUPLICATE_NAME              = 11501

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _typename(type, /):
    return getattr(type, "__qualname__", None) or repr(type)


def _quoted(names, /):
    return ", ".join(map(repr, names))


class CommandException(Exception):
    """
    base class of every pipeline fault.

    anatomy
    - __code__/__title__: stable code and short title (class-level).
    - __fields__: names of the structured payload; they are accepted
      positionally (in order) or by keyword and exposed as attributes and
      through the read-only `payload` mapping.
    - options: everything else (rendering options such as shell, fancy,
      colorful, deferred, tool, hint).

    subclasses describe themselves through _describe() (message) and _hint().
    """
    __code__ = Unset
    __title__ = "command error"
    __fields__ = ()

    def __init__(self, *payload, **options):
        fields = type(self).__fields__
        if len(payload) > len(fields):
            raise TypeError(f"{type(self).__name__}() takes at most {len(fields)} payload values")
        values = dict(zip(fields, payload))
        for name in fields[len(payload):]:
            try:
                values[name] = options.pop(name)
            except KeyError:
                raise TypeError(f"{type(self).__name__}() missing payload value {name!r}") from None
        self.payload = MappingProxyType(values)
        self.options = MappingProxyType(options)
        for name, object in values.items():
            setattr(self, name, object)
        self.message = self._describe()
        super().__init__(self.message)

    @property
    def code(self):
        return type(self).__code__

    @property
    def title(self):
        return type(self).__title__

    def _describe(self):
        return self.title

    def _hint(self):
        return Unset

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",

            # body
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles[style] if colorful else "")

        prog = text(getattr(main, "__prog__", self.options.get("tool", "conductor")), "prog-name")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.code.normalize() if self.code else "?", "code"),
            " | ",
            text(self.title.title(), "error-title"),
            " ]"
        )
        message = text(self.message, "error-message")
        renders = [message]
        if hint := self.options.get("hint", self._hint()):
            renders.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        replaced = type(self)(**self.payload, **{**self.options, **overrides})
        replaced.__cause__ = self.__cause__
        replaced.__traceback__ = self.__traceback__
        return replaced


# --- parsing -----------------------------------------------------------------

class TokenizationError(CommandException):
    __code__ = FaultCode.MALFORMED_INPUT
    __title__ = "malformed input"
    __fields__ = ("reason", "position")

    def _describe(self):
        return f"{self.reason} at column {self.position + 1}"

    def _hint(self):
        return "close every quote and escape only \\\\, \\\", \\n, \\r, \\t or \\b"


class InvocationFormatError(CommandException):
    __code__ = FaultCode.MALFORMED_INVOCATION
    __title__ = "malformed invocation"
    __fields__ = ("minimum", "actual")

    def _describe(self):
        noun = "token" if self.minimum == 1 else pluralize("token")
        return f"expected at least {self.minimum} {noun}, got {self.actual}"

    def _hint(self):
        return "usage: [<environment>] <command> [<subcommand>...] [<argument>...] [--<key>=<value> | --<flag>]..."


# --- routing -----------------------------------------------------------------

class EnvironmentNotFoundError(CommandException):
    __code__ = FaultCode.UNKNOWN_ENVIRONMENT
    __title__ = "unknown environment"
    __fields__ = ("environment", "suggestions")

    def __init__(self, *payload, **options):
        if len(payload) < 2:
            options.setdefault("suggestions", ())
        super().__init__(*payload, **options)

    def _describe(self):
        return f"no environment named {self.environment!r}"

    def _hint(self):
        if self.suggestions:
            return f"did you mean {_quoted(self.suggestions)}?"
        return "the first token must name a registered environment"


class CommandNotFoundError(CommandException):
    __code__ = FaultCode.UNKNOWN_COMMAND
    __title__ = "unknown command"
    __fields__ = ("command", "suggestions")

    def __init__(self, *payload, **options):
        if len(payload) < 2:
            options.setdefault("suggestions", ())
        super().__init__(*payload, **options)

    def _describe(self):
        return f"no command named {self.command!r}"

    def _hint(self):
        if self.suggestions:
            return f"did you mean {_quoted(self.suggestions)}?"
        return Unset


# --- resolution --------------------------------------------------------------

class ArgCountError(CommandException):
    __code__ = FaultCode.ARGUMENT_COUNT
    __title__ = "wrong argument count"
    __fields__ = ("command", "expected", "actual")

    def _describe(self):
        noun = "argument" if self.expected == 1 else pluralize("argument")
        return f"{self.command!r} takes {self.expected} positional {noun}, got {self.actual}"


class ConverterNotFoundError(CommandException):
    __code__ = FaultCode.MISSING_CONVERTER
    __title__ = "missing converter"
    __fields__ = ("type",)

    def _describe(self):
        return f"no converter registered for {_typename(self.type)}"


class ConversionError(CommandException):
    __code__ = FaultCode.UNCONVERTIBLE_VALUE
    __title__ = "invalid value"
    __fields__ = ("value", "reason")

    def _describe(self):
        return f"cannot convert {self.value!r}: {self.reason}"


class ArgValidationError(CommandException):
    __code__ = FaultCode.REJECTED_VALUE
    __title__ = "rejected value"
    __fields__ = ("name", "value")

    def _describe(self):
        return f"{self.name!r} does not accept {self.value!r}"


class ArgNotFoundError(CommandException):
    __code__ = FaultCode.MISSING_ARGUMENT
    __title__ = "missing argument"
    __fields__ = ("name",)

    def _describe(self):
        return f"no argument named {self.name!r}"


# --- execution ---------------------------------------------------------------

class CommandExecutionError(CommandException):
    __code__ = FaultCode.EXECUTION_FAILED
    __title__ = "command failed"
    __fields__ = ("command", "reason")

    def _describe(self):
        return f"{self.command!r} failed: {self.reason}"


# --- registration ------------------------------------------------------------

class DuplicateNameError(CommandException):
    __code__ = FaultCode.DUPLICATE_NAME
    __title__ = "duplicate name"
    __fields__ = ("name",)
    __kind__ = "name"

    @property
    def kind(self):
        return type(self).__kind__

    def _describe(self):
        return f"{self.kind} {self.name!r} is already registered"


class DuplicateCommandError(DuplicateNameError):
    __kind__ = "command"


class DuplicateEnvironmentError(DuplicateNameError):
    __kind__ = "environment"


class DuplicateArgumentError(DuplicateNameError):
    __kind__ = "argument"


class DuplicateOptionError(DuplicateNameError):
    __kind__ = "option"


class DuplicateFlagError(DuplicateNameError):
    __kind__ = "flag"


class DuplicateConverterError(DuplicateNameError):
    __kind__ = "converter"

    def _describe(self):
        return f"{self.kind} for {_typename(self.name)} is already registered"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via the rich console; otherwise, the fault is raised.

    typical options
    - tool, shell, fancy, colorful, deferred, hint.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def report(exception, /, **options):
    """
    default fallback for failures that must not propagate (async runs, shell lines).

    - CommandException: rendered through trigger() in deferred shell mode.
    - anything else: printed with its traceback through the same console.
    """
    if isinstance(exception, CommandException):
        return trigger(exception, **{"colorful": True, **options, "shell": True, "deferred": True})
    if exception.__traceback__ is None:
        return console.print(Text(f"{type(exception).__name__}: {exception}", style="bold red"))
    console.print(Traceback.from_exception(type(exception), exception, exception.__traceback__))


__all__ = (
    "CommandException",
    "TokenizationError",
    "InvocationFormatError",
    "EnvironmentNotFoundError",
    "CommandNotFoundError",
    "ArgCountError",
    "ConverterNotFoundError",
    "ConversionError",
    "ArgValidationError",
    "ArgNotFoundError",
    "CommandExecutionError",
    "DuplicateNameError",
    "DuplicateCommandError",
    "DuplicateEnvironmentError",
    "DuplicateArgumentError",
    "DuplicateOptionError",
    "DuplicateFlagError",
    "DuplicateConverterError",
    "FaultCode",
    "trigger",
    "report",
)
