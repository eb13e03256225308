"""
Optable faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues.
  Codes are grouped by domain to keep copy consistent and make logs/searches
  predictable.
- OptionException: base type that carries message + options and knows how to
  render itself in a friendly, lowercased, and actionable way.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Position-first messages: parse-time messages include the ordinal position of
  the offending piece (“at third position”).
- Short titles, one-sentence bodies, a single clear hint.

Integration
- The parser builds a fault and calls Parser.trigger(fault, **ctx), which merges
  its runtime options and hands it to trigger() (or to a host fallback).
- In non-shell mode, exceptions are raised; in shell mode, they are rendered
  via rich and the process exits with the fault status (1 unless overridden).
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by high-level domain)
    - table (111xx): problems in the option table, found before any argument is read
      • INVALID_ALIAS, RESERVED_ALIAS, DUPLICATED_ALIAS, DUPLICATED_CONTROL,
        MALFORMED_SPEC, INVALID_TYPE, INVALID_CONTROL, INVALID_RESTRICTION
    - matching (112xx): resolving pieces of the command line against the table
      • UNRECOGNIZED_OPTION, AMBIGUOUS_OPTION, STANDALONE_DASH, VALUE_ASSIGNMENT,
        BUNDLED_VALUE_OPTION, UNASSIGNABLE_VALUE
    - values (113xx): parsing and validating option values
      • MISSING_VALUE, NOT_AN_INTEGER, OUT_OF_RANGE, INVALID_CHOICE,
        MALFORMED_ARRAY, MIXED_ARRAY
    - delegated (119xx): failures reported by the host through Parser.fail()
      • DELEGATED_FAILURE
    """
    # --- table errors (111xx) ---
    INVALID_ALIAS         = 11101
    RESERVED_ALIAS        = 11102
    DUPLICATED_ALIAS      = 11103
    DUPLICATED_CONTROL    = 11104
    MALFORMED_SPEC        = 11105
    INVALID_TYPE          = 11106
    INVALID_CONTROL       = 11107
    INVALID_RESTRICTION   = 11108

    # --- matching errors (112xx) ---
    UNRECOGNIZED_OPTION   = 11201
    AMBIGUOUS_OPTION      = 11202
    STANDALONE_DASH       = 11203
    VALUE_ASSIGNMENT      = 11204
    BUNDLED_VALUE_OPTION  = 11205
    UNASSIGNABLE_VALUE    = 11206

    # --- value errors (113xx) ---
    MISSING_VALUE         = 11301
    NOT_AN_INTEGER        = 11302
    OUT_OF_RANGE          = 11303
    INVALID_CHOICE        = 11304
    MALFORMED_ARRAY       = 11305
    MIXED_ARRAY           = 11306

    # --- delegated errors (119xx) ---
    DELEGATED_FAILURE     = 11901

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class OptionException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def status(self):
        return self.options.get("status", 1)

    def __str__(self):
        return "" if self.message is Unset else self.message

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = text(getattr(main, "__prog__", self.options.get("prog", "optable")), styler("prog-name"))
        code = self.options.get("code")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if isinstance(code, FaultCode) else "?", styler("code")),
            " | ",
            text(self.options.get("title", "error").title(), styler("error-title")),
            " ]"
        )
        message = text(str(self), styler("error-message"))
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left", width=console.width - 4)

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(self.status)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class SpecConflictError(OptionException): ...
class UnrecognizedOptionError(OptionException): ...
class AmbiguousOptionError(OptionException): ...
class MissingValueError(OptionException): ...
class TypeValidationError(OptionException): ...
class OptionSyntaxError(OptionException): ...
class ParserFailure(OptionException): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see OptionException).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via rich console and the process exits;
      otherwise, the exception is raised.

    typical options
    - prog, shell, fancy, colorful, title, code, hint, status, and any other
      context the reporter may want to show (e.g., input/index/candidates).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    when not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "OptionException",
    "SpecConflictError",
    "UnrecognizedOptionError",
    "AmbiguousOptionError",
    "MissingValueError",
    "TypeValidationError",
    "OptionSyntaxError",
    "ParserFailure",
    "FaultCode",
    "trigger",
    "getdoc",
)
