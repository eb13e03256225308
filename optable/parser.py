"""
Optable parser: turn an argument vector into validated, defaulted bindings.

What this module provides
- Parser: owns an immutable option table (user specs + reserved options) and the
  runtime configuration; parse() runs one invocation to completion.
- tokenize(prompt): normalize the input into atomic pieces.
- parse(options, prompt, **config): one-shot convenience.

Parse phases
- scan: every piece is classified as terminator ('--'), long option ('--key[=value]'),
  short option or bundle ('-abc[=value]'), or value/positional.
  • keys are resolved exactly or, unless abbreviations are disabled, by unique prefix.
  • bool/counter options are applied on sight; value-bearing options wait for the
    next piece (or take their inline '=value').
  • unknown keys fail, or are captured verbatim when depth charge is enabled.
- defaults: every option not seen on the command line gets its declared default,
  through the same validation as a command-line value.
- finish: --help / --version render and exit 0; --verbose and --debug are
  reconciled (--verbose wins); a report is printed at verbosity 4 and the
  reconstructed command line is appended to the log file, if any.

Faults
- All parse-time failures go through Parser.trigger(): raised when shell=False,
  rendered to stderr with exit status 1 when shell=True, or handed to the host
  handler installed with Parser.fallback().

Quick start
    from optable import Parser

    parser = Parser({
        "-c,--count": "integer-COUNT:0::0:10",
        "--name": "NAME",
    }, {
        "-c,--count": "how many",
        "--name": "who",
    })
    result = parser.parse(["--count", "5", "--name=bob", "extra1", "extra2"])
    result["COUNT"], result["NAME"], result.positionals   # 5, 'bob', ('extra1', 'extra2')
"""
import copy
import difflib
import inspect
import os.path
import shlex
import sys
import time
from collections import defaultdict
from collections.abc import Iterable, Mapping

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .bindings import Binding, ParseResult, apply
from .faults import *
from .say import Say
from .specs import Kind
from .table import build
from .utils import *
from .values import parse_value, parse_default

console = Console()


def tokenize(prompt=Unset, /):
    """
    Normalize a prompt into a list of atomic pieces.

    - Unset: sys.argv[1:].
    - str: shell-like string, split with shlex.split.
    - Iterable[str]: used as-is; every item stays one piece, embedded whitespace
      and empty strings included.

    Raises
    - TypeError: when prompt is not Unset/str/Iterable[str].
    """
    if prompt is Unset:
        return sys.argv[1:]
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if isinstance(prompt, Iterable):
        pieces = list(prompt)
        for piece in pieces:
            if not isinstance(piece, str):
                raise TypeError("tokenize() argument must be a string or an iterable of strings")
        return pieces
    raise TypeError("tokenize() argument must be a string or an iterable of strings")


class ParseContext:
    """
    Per-invocation scanning state (never shared between parse calls).

    - pieces/cursor: the input and the 1-based position of the current piece.
    - pending/anchor: value-bearing OptionSpec waiting for its value (or None)
      and the 1-based position of the piece that named it.
    - stray: unrecognized key waiting to be captured (depth charge), or None.
    - terminated: '--' was seen; everything after is positional.
    - positionals/unmatched/keys: what the scan produced so far.
    - bindings: control -> Binding.
    """
    __slots__ = ("pieces", "cursor", "pending", "anchor", "stray", "terminated", "positionals", "unmatched", "keys", "bindings")

    def __init__(self, pieces):
        self.pieces = pieces
        self.cursor = 0
        self.pending = None
        self.anchor = 0
        self.stray = None
        self.terminated = False
        self.positionals = []
        self.unmatched = []
        self.keys = 0
        self.bindings = {}


class Parser:
    """
    Declarative command-line option parser.

    Parameters
    - options: Mapping[str, str], alias group ("-t,--ticker") -> spec literal
      ("count-TICKER"). See optable.specs for the literal grammar.
    - descriptions: Mapping[str, str], alias group -> help text (optional).
    - message: version message; enables the reserved -V,--version.
    - name: program name (defaults to __main__.__prog__, then the script name).
    - abbreviations: accept unique prefixes of long options (default True).
    - depth_charge: capture unrecognized options instead of failing (default False).
    - log: path of the command-line audit log (optional).
    - shell: render faults and exit instead of raising (default True).
    - fancy: draw faults and help inside panels.
    - colorful: style faults and help.

    Raises
    - TypeError for wrong parameter types; SpecConflictError (through trigger)
      when the option table cannot be built.
    """

    __introspectable__ = (
        "name",
        "message",
        "table",
        "abbreviations",
        "depth_charge",
        "log",
        "shell",
        "fancy",
        "colorful",
    )

    def __init__(
            self,
            options,
            descriptions=Unset,
            /,
            *,
            message=Unset,
            name=Unset,
            abbreviations=True,
            depth_charge=False,
            log=Unset,
            shell=True,
            fancy=False,
            colorful=True,
    ):
        if not isinstance(message, str | Unset):
            raise TypeError("parser 'message' must be a string")
        if not isinstance(name, str | Unset):
            raise TypeError("parser 'name' must be a string")
        if not isinstance(log, str | os.PathLike | Unset):
            raise TypeError("parser 'log' must be a path")
        for flag, value in {
            "abbreviations": abbreviations,
            "depth_charge": depth_charge,
            "shell": shell,
            "fancy": fancy,
            "colorful": colorful,
        }.items():
            if not isinstance(value, bool):
                raise TypeError(f"parser {flag!r} must be a boolean")

        self._name = name
        self._message = message
        self._abbreviations = abbreviations
        self._depth_charge = depth_charge
        self._log = log
        self._shell = shell
        self._fancy = fancy
        self._colorful = colorful
        self._fallback = Unset

        try:
            self._table = build(options, descriptions, message=message)
        except SpecConflictError as fault:
            self.trigger(fault)

    message = mirror("message")
    table = mirror("table")
    abbreviations = mirror("abbreviations")
    depth_charge = mirror("depth_charge")
    log = mirror("log")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")

    @property
    def name(self):
        if self._name is not Unset:
            return self._name
        if prog := getattr(__import__("__main__"), "__prog__", None):
            return prog
        name = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "optable"
        stem, extension = os.path.splitext(name)
        return stem if extension in (".py", ".sh") else name

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "parser(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    # --- faults -------------------------------------------------------------

    def fallback(self, fallback, /):
        """
        Install a host handler that receives every fault instead of trigger().

        The handler is expected to end the run (exit or raise). If it returns,
        the fault is raised so that parsing never continues past a failure.
        Usable as a decorator; returns the handler.
        """
        if not callable(fallback):
            raise TypeError("fallback() argument must be callable")
        self._fallback = fallback
        return fallback

    def trigger(self, fault, /, **options):
        if (
                not hasattr(fault, "__trigger__") or
                not callable(fault.__trigger__) or
                not hasattr(fault, "__replace__") or
                not callable(fault.__replace__)
        ):
            raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
        fault = copy.replace(fault, **options, prog=self.name, shell=self._shell, fancy=self._fancy, colorful=self._colorful)
        if self._fallback:
            self._fallback(fault)
            raise fault
        trigger(fault)

    def fail(self, message, status=1, /):
        """
        Report an unrecoverable error on behalf of the host and end the run.
        """
        self.trigger(ParserFailure(
            message,
            title="failure",
            code=FaultCode.DELEGATED_FAILURE,
            hint="run '%s --help' to see how to call this command" % self.name,
            status=status,
        ))

    # --- matching -----------------------------------------------------------

    def _resolve(self, context, key):
        """
        resolve a key ('--name', '--na', '-n') to its OptionSpec.

        returns None for an unrecognized key when depth charge is enabled.
        """
        if key in ("-", "--"):
            self.trigger(OptionSyntaxError(
                "standalone dash(es) specified, %r at %s position" % (key, ordinal(context.cursor)),
                title="standalone dash",
                code=FaultCode.STANDALONE_DASH,
                hint="use '--' alone to end the options, or spell out an option name",
                input=key,
                index=context.cursor,
            ))

        if self._abbreviations:
            candidates = [spec for spec in self._table.values() if any(alias.startswith(key) for alias in spec.aliases)]
        else:
            candidates = [spec for spec in self._table.values() if key in spec.aliases]

        if len(candidates) > 1:
            groups = tuple(spec.group for spec in candidates)
            self.trigger(AmbiguousOptionError(
                "option not unique: %r at %s position matches %s" % (
                    key, ordinal(context.cursor), ", ".join(map(repr, groups))
                ),
                title="ambiguous option",
                code=FaultCode.AMBIGUOUS_OPTION,
                hint="type more of the option name, e.g. %r" % candidates[0].name,
                input=key,
                candidates=groups,
                index=context.cursor,
                docs=getdoc(FaultCode.AMBIGUOUS_OPTION),
            ))

        if not candidates:
            if self._depth_charge:
                return None
            aliases = [alias for spec in self._table.values() for alias in spec.aliases]
            suggestions = difflib.get_close_matches(key, aliases, 5)
            try:
                hint = "did you mean %r? you can also run '%s --help' to see all options" % (suggestions[0], self.name)
            except IndexError:
                hint = "try '%s --help' to see all available options" % self.name
            self.trigger(UnrecognizedOptionError(
                "unrecognized option %r encountered at %s position" % (key, ordinal(context.cursor)),
                title="unrecognized option",
                code=FaultCode.UNRECOGNIZED_OPTION,
                hint=hint,
                input=key,
                suggestions=suggestions,
                index=context.cursor,
                docs=getdoc(FaultCode.UNRECOGNIZED_OPTION),
            ))

        return candidates[0]

    def _dispatch(self, context, key, spec, value):
        """
        act on one resolved key: capture, apply now, or wait for a value.
        """
        if spec is None:
            if value is None:
                context.stray = key
            else:
                context.unmatched.append("%s=%s" % (key, value))
            return

        context.keys += 1
        if not spec.kind.valued:
            if value is not None:
                self.trigger(OptionSyntaxError(
                    "%s option %r at %s position followed by '=' sign" % (
                        spec.kind.typename, spec.name, ordinal(context.cursor)
                    ),
                    title="option takes no value",
                    code=FaultCode.VALUE_ASSIGNMENT,
                    hint="remove everything from '=' (for example: %s)" % key,
                    input=key,
                    index=context.cursor,
                ))
            self._bind(context, spec, None)
        elif value is not None:
            self._bind(context, spec, value)
        else:
            context.pending, context.anchor = spec, context.cursor

    def _close(self, context):
        """
        settle the pending key before the next option or the end of input.
        """
        if context.stray is not None:
            context.unmatched.append(context.stray)
            context.stray = None
        if context.pending is not None:
            spec = context.pending
            self.trigger(MissingValueError(
                "missing value for %s option %r at %s position" % (
                    spec.kind.typename, spec.name, ordinal(context.anchor)
                ),
                title="missing value",
                code=FaultCode.MISSING_VALUE,
                hint="pass a value after the option (for example: %s <value> or %s=<value>)" % (spec.name, spec.name),
                input=spec.name,
                index=context.anchor,
            ))

    def _long(self, context, piece):
        key, equal, value = piece.partition("=")
        self._dispatch(context, key, self._resolve(context, key), value if equal else None)

    def _short(self, context, piece):
        head, equal, value = piece.partition("=")
        if len(head) < 2:
            self._resolve(context, head)  # standalone dash

        # all but the last letter of a bundle are presence-only options
        for letter in head[1:-1]:
            key = "-" + letter
            spec = self._resolve(context, key)
            if spec is None:
                context.unmatched.append(key)
                continue
            if spec.kind.valued:
                self.trigger(OptionSyntaxError(
                    "%s option %r cannot be bundled in %r at %s position" % (
                        spec.kind.typename, spec.name, piece, ordinal(context.cursor)
                    ),
                    title="bundled value option",
                    code=FaultCode.BUNDLED_VALUE_OPTION,
                    hint="put %r last in the bundle or pass it separately" % key,
                    input=piece,
                    index=context.cursor,
                ))
            context.keys += 1
            self._bind(context, spec, None)

        key = "-" + head[-1]
        self._dispatch(context, key, self._resolve(context, key), value if equal else None)

    def _value(self, context, piece):
        if context.stray is not None:
            self.trigger(OptionSyntaxError(
                "unable to unambiguously assign %r at %s position as value of unrecognized option %r" % (
                    piece, ordinal(context.cursor), context.stray
                ),
                title="unassignable value",
                code=FaultCode.UNASSIGNABLE_VALUE,
                hint="attach the value with '=' (for example: %s=%s)" % (context.stray, piece),
                input=piece,
                index=context.cursor,
            ))
        if context.pending is not None:
            spec, context.pending = context.pending, None
            self._bind(context, spec, piece)
        else:
            context.positionals.append(piece)

    # --- binding ------------------------------------------------------------

    def _bind(self, context, spec, raw, *, invoked=True):
        try:
            if invoked:
                value = parse_value(spec, raw, context.bindings.get(spec.control, Unset))
            else:
                value = parse_default(spec)
            apply(context.bindings, spec, value, raw, invoked=invoked)
        except OptionException as fault:
            self.trigger(fault, index=context.cursor)

    def _defaults(self, context):
        """
        give every option that was not on the command line its default.
        """
        for spec in self._table.values():
            if spec.control in context.bindings or spec.default is Unset:
                continue
            if spec.default == "" and spec.kind in (Kind.STRING, Kind.EXTEND, Kind.ARRAY):
                context.bindings[spec.control] = Binding([] if spec.kind is Kind.ARRAY else "")
                continue
            self._bind(context, spec, spec.default, invoked=False)

    @staticmethod
    def _reconcile(bindings):
        """
        make __VERBOSE__ and __DEBUG__ agree; --verbose takes precedence.

        __DEBUG__ has no default literal; it starts at 0 with an empty echo.
        """
        verbose = bindings["__VERBOSE__"]
        debug = bindings.setdefault("__DEBUG__", Binding(0))
        if verbose.value == 0:
            if debug.value > 0:
                verbose.value = debug.value
                verbose.echo = " ".join(["--verbose"] * debug.value)
        else:
            debug.value = verbose.value
            debug.echo = "--debug=%d" % verbose.value

        if verbose.value != debug.value:
            raise RuntimeError("__VERBOSE__=%r different from __DEBUG__=%r" % (verbose.value, debug.value))

    # --- parsing ------------------------------------------------------------

    def parse(self, prompt=Unset, /):
        """
        Parse one argument vector into a ParseResult.

        Parameters
        - prompt: Unset (sys.argv[1:]), a shell-like string, or an iterable of pieces.

        Returns
        - ParseResult with bindings, positionals, captured unrecognized options
          and the number of matched keys.

        Exits
        - with status 0 after rendering help (--help) or the version (--version).
        """
        context = ParseContext(tokenize(prompt))

        while context.cursor < len(context.pieces):
            piece = context.pieces[context.cursor]
            context.cursor += 1

            if context.terminated:
                context.positionals.append(piece)
            elif piece == "--":
                self._close(context)
                context.terminated = True
            elif piece.startswith("--"):
                self._close(context)
                self._long(context, piece)
            elif piece.startswith("-"):
                self._close(context)
                self._short(context, piece)
            else:
                self._value(context, piece)

        self._close(context)
        self._defaults(context)

        if context.bindings["__HELP__"].value:
            self.help()
        if "__VERSION__" in context.bindings and context.bindings["__VERSION__"].value:
            self.version()

        self._reconcile(context.bindings)

        result = ParseResult(
            self.name,
            context.bindings,
            context.positionals,
            context.unmatched,
            context.keys,
            order=self._table.keys(),
        )
        self._report(result)
        self._record(result)
        return result

    def say(self, result, caller=Unset, /):
        """
        a Say messenger bound to result, writing to this parser's log when set.
        """
        return Say(result, caller, log=self._log)

    def _report(self, result):
        """
        list every binding at verbosity 4 (--debug 4).
        """
        say = self.say(result, self.name)
        if say.level < 4:
            return

        say.message(">>>>>>>>>>", 4)
        for control, spec in self._table.items():
            try:
                binding = result.bindings[control]
            except KeyError:
                say.message("%s not set (%s)" % (control, spec.group), 4, bare=True)
                continue
            if spec.kind is Kind.ARRAY and isinstance(binding.value, dict):
                for key, value in binding.value.items():
                    say.message("    %s[%s]=%s" % (control, key, value), 4, bare=True)
                say.message("%s has %d elements set (%s=%r)" % (
                    control, len(binding.value), spec.name, binding.echo
                ), 4, bare=True)
            else:
                say.message("%s=%s (%s=%r)" % (control, binding.value, spec.name, binding.echo), 4, bare=True)
            if spec.descr:
                say.message("    %s" % spec.descr, 4, bare=True)
        say.message("%d option(s) set" % len(result.bindings), 4, bare=True)
        say.message("", 4, bare=True)
        say.message("remaining (unprocessed) arguments:", 4, bare=True)
        say.message("    %r" % result.argv if result.positionals else "    (none)", 4, bare=True)
        if self._depth_charge:
            say.message("", 4, bare=True)
            say.message("depth charge=%r" % (say.depth_charge_str or "(none)"), 4, bare=True)
        say.message("<<<<<<<<<<", 4)
        say.message(result.cmdline, 4)
        say.message("<<<<<<<<<<", 4)

    def _record(self, result):
        """
        append the reconstructed command line to the audit log, if configured.
        """
        if self._log is Unset:
            return
        path = os.fspath(self._log)
        if os.path.exists(path) and not os.access(path, os.W_OK):
            return
        with open(path, "a", encoding="utf-8") as file:
            file.write("%s  %s\n" % (time.strftime("%Y-%m-%d %H:%M:%S"), result.cmdline))

    # --- renderers ----------------------------------------------------------

    def _styles(self):
        return defaultdict(str, {
            "doc-section": "italic #A3A3A3",  # neutral gray script documentation
            "options-label": "bold #FFFFFF",  # pure white header
            "option-name": "bold #00E6FF",  # cyan aliases
            "control": "bold #FFD600",  # amber control names
            "default": "#9CA3AF",  # muted gray defaults
            "description": "#D1D5DB",
            "version": "bold #00E6FF",
            "panel-title": "bold #FF4D94",  # magenta branding
        } | getattr(__import__("__main__"), "__styles__", {}))

    def help(self):
        """
        Render the help text to stdout and exit with status 0.

        Layout
        - the docstring of the __main__ module, when there is one;
        - "OPTIONS:" and one row per alias group, sorted, with the control name
          and [default] of value-bearing options and the description below.
        """
        styles = self._styles()

        def text(fragment, style=""):
            return Text(str(fragment), styles[style] if self._colorful else "")

        renders = []
        if doc := inspect.getdoc(__import__("__main__")):
            renders.append(text(doc, "doc-section"))
            renders.append(Text(""))

        renders.append(text("OPTIONS:", "options-label"))

        table = Table(box=None, show_header=False, padding=(0, 1), pad_edge=False)
        table.add_column("option", no_wrap=True)
        table.add_column("control")
        for spec in sorted(self._table.values(), key=lambda spec: spec.group):
            indent = "   " if spec.group.startswith("--") else ""
            control = Text()
            if spec.kind is not Kind.BOOL:
                control.append_text(text(spec.control, "control"))
                if spec.default not in (Unset, ""):
                    control.append(" ").append_text(text("[%s]" % spec.default, "default"))
            table.add_row(Text(indent).append_text(text(spec.group, "option-name")), control)
            if spec.descr:
                table.add_row(Text("        ").append_text(text(spec.descr, "description")), Text(""))
        renders.append(table)

        if self._fancy:
            console.print(Panel(Group(*renders), title=text(self.name, "panel-title"), title_align="left"))
        else:
            console.print(Group(*renders))
        sys.exit(0)

    def version(self):
        """
        Print the version message to stdout and exit with status 0.
        """
        styles = self._styles()
        message = coalesce(self._message, "(no version message available; please, set a message)")
        console.print(Text(message, styles["version"] if self._colorful else ""))
        sys.exit(0)


def parse(options, prompt=Unset, /, **config):
    """
    Build a Parser from options and parse prompt in one call.

    Parameters
    - options: Mapping[str, str] alias group -> spec literal, or a
      (options, descriptions) pair.
    - prompt: see Parser.parse.
    - **config: keyword parameters of Parser.
    """
    if isinstance(options, tuple) and len(options) == 2 and all(isinstance(item, Mapping) for item in options):
        return Parser(*options, **config).parse(prompt)
    return Parser(options, **config).parse(prompt)


__all__ = (
    "Parser",
    "ParseContext",
    "tokenize",
    "parse",
)
