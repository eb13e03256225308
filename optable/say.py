"""
Leveled "say" messaging bound to a parse result.

A Say object reads the reserved bindings of a ParseResult (__VERBOSE__,
__DEBUG__, __DRY_RUN__, __TIME_TAG__) and prints messages whose threshold is at
or below the requested verbosity.

Line format (with a caller)
    [DRY_RUN ][<time> ]%<caller>[-<S|I|E|W>]- <message>
Bare form (no caller, or bare=True)
    <prefix><message>          prefix defaults to four spaces

Channels
- note / echo: stdout.
- message / warn / yell / say / debug / deep_debug / die / done: stderr, or
  appended to the command-line log when one is configured.

Thresholds
- echo, warn, yell, die, done: always printed.
- say: 1 (visible with -v or --debug 1), debug: 2, deep_debug: 3.

Example
    >>> say = parser.say(result, "backup")
    >>> say.say("copying %d files" % count)
    >>> say.is_dry_run or copy(files)
"""
import os
import sys
import time

from rich.console import Console
from rich.text import Text

from .utils import Unset, coalesce

stdout = Console(highlight=False, soft_wrap=True)
stderr = Console(stderr=True, highlight=False, soft_wrap=True)


class Say:
    def __init__(self, result, caller=Unset, /, *, log=Unset, prefix="    "):
        self._result = result
        self.caller = coalesce(caller, "")
        self.log = log
        self.prefix = prefix

    @property
    def level(self):
        return max(self._result.get("__DEBUG__") or 0, self._result.get("__VERBOSE__") or 0)

    @property
    def is_verbose(self):
        return self.level >= 1

    @property
    def is_debug(self):
        return self.level >= 2

    @property
    def is_dry_run(self):
        return bool(self._result.get("__DRY_RUN__"))

    @property
    def time_tag(self):
        return self._result.get("__TIME_TAG__") or ""

    def _echo_of(self, control):
        try:
            return self._result.bindings[control].echo
        except KeyError:
            return ""

    # echo strings, for forwarding the reserved options to another command
    @property
    def verbose_str(self):
        return self._echo_of("__VERBOSE__")

    @property
    def debug_str(self):
        return self._echo_of("__DEBUG__")

    @property
    def dry_run_str(self):
        return self._echo_of("__DRY_RUN__")

    @property
    def time_tag_str(self):
        return self._echo_of("__TIME_TAG__")

    @property
    def depth_charge_str(self):
        return " ".join(self._result.unmatched)

    def format(self, message, seiw=Unset, /, *, bare=False):
        """
        render one line in the say format (see module docstring).
        """
        if bare or not self.caller:
            return self.prefix + message
        line = ""
        if self.is_dry_run:
            line += "DRY_RUN "
        if self.time_tag:
            line += time.strftime(self.time_tag) + " "
        line += "%" + self.caller
        if seiw:
            line += "-" + seiw
        return line + "- " + message

    def note(self, message, threshold=0, seiw=Unset, /, *, bare=False):
        if self.level < threshold:
            return False
        stdout.print(Text(self.format(message, seiw, bare=bare)))
        return True

    def message(self, message, threshold=0, seiw=Unset, /, *, bare=False):
        if self.level < threshold:
            return False
        line = self.format(message, seiw, bare=bare)
        if self.log is Unset:
            stderr.print(Text(line))
        else:
            with open(os.fspath(self.log), "a", encoding="utf-8") as file:
                file.write(line + "\n")
        return True

    def echo(self, message, seiw=Unset, /, *, bare=False):
        return self.note(message, self.level, seiw, bare=bare)

    def warn(self, message, seiw="W", /, *, bare=False):
        return self.message(message, self.level, seiw, bare=bare)

    def yell(self, message, seiw="I", /, *, bare=False):
        return self.message(message, self.level, seiw, bare=bare)

    def say(self, message, seiw="I", /, *, bare=False):
        return self.message(message, 1, seiw, bare=bare)

    def debug(self, message, seiw="I", /, *, bare=False):
        return self.message(message, 2, seiw, bare=bare)

    def deep_debug(self, message, seiw="I", /, *, bare=False):
        return self.message(message, 3, seiw, bare=bare)

    def die(self, message=Unset, seiw="E", /, status=1):
        if message:
            self.message(message, self.level, seiw)
        sys.exit(status)

    def done(self, message=Unset, seiw="S", /):
        if message:
            self.message(message, self.level, seiw)
        sys.exit(0)

    def __repr__(self):
        return "say(caller=%r, level=%d)" % (self.caller, self.level)


__all__ = (
    "Say",
)
