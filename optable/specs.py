r"""
Optable option specifications.

Overview
- Kind: the value type of an option (bool, counter, integer, string, array, extend).
- IntegerRange / EnumSet: value restrictions attached to an option.
- OptionSpec: the compiled, read-only description of one option, built from an
  alias group (e.g. "-t,--ticker") and a spec literal (e.g. "count-TICKER").

Spec literal grammar
    [type-]CONTROL[:DEFAULT][::RESTRICTION]

- type: any word whose first letter names a kind ('bool', 'b', 'count',
  'integer', 'string', 'array', 'extend'). Omitted means string.
- CONTROL: identifier of the binding slot; must contain an uppercase letter.
- DEFAULT: literal applied when the option is not given on the command line.
- RESTRICTION: 'lo:hi' (integers, '-Inf', '+Inf'), legacy 'lo-hi' (non-negative
  integers), or a comma-separated list of allowed strings.
  A ':::' separator means "no default, restriction follows".

Quick example:
    >>> spec = OptionSpec("--nr", "integer-NR:1::-Inf:+Inf")
    >>> spec.kind, spec.control, spec.default, spec.restriction
    (<Kind.INTEGER: 'i'>, 'NR', '1', IntegerRange(low=None, high=None, legacy=False))
"""
import re
from enum import Enum
from typing import NamedTuple

from rich.text import Text

from .faults import SpecConflictError, FaultCode
from .utils import *


class Kind(Enum):
    """
    value type of an option, keyed by the first letter of the spec type prefix.
    """
    BOOL = "b"
    COUNTER = "c"
    INTEGER = "i"
    STRING = "s"
    ARRAY = "a"
    EXTEND = "e"

    @property
    def typename(self):
        return self.name.lower()

    @property
    def valued(self):
        """
        whether the option consumes a value from the command line.
        """
        return self not in (Kind.BOOL, Kind.COUNTER)

    @classmethod
    def resolve(cls, prefix, /):
        """
        map a spec type prefix ('bool', 'count', 'i', ...) to its Kind.

        raises ValueError for an empty or unknown prefix.
        """
        if not prefix:
            raise ValueError("missing type specification")
        try:
            return cls(prefix[0])
        except ValueError:
            raise ValueError("invalid type %r" % prefix) from None


class IntegerRange(NamedTuple):
    """
    inclusive integer bounds; None stands for an unbounded side (-Inf/+Inf).

    legacy marks the 'lo-hi' form, which only admits unsigned input.
    """
    low: int | None
    high: int | None
    legacy: bool = False

    def __contains__(self, value):
        return (self.low is None or value >= self.low) and (self.high is None or value <= self.high)

    def __str__(self):
        if self.legacy:
            return "%d-%d" % (self.low, self.high)
        return "%s:%s" % (
            "-Inf" if self.low is None else self.low,
            "+Inf" if self.high is None else self.high,
        )


class EnumSet(NamedTuple):
    """
    the literal strings an option value may take.
    """
    allowed: tuple[str, ...]

    def __contains__(self, value):
        return value in self.allowed

    def __str__(self):
        return ",".join(self.allowed)


# alias shapes: "-x" (one character) or "--word"
_ALIAS = re.compile(r"-[^-\s=,]|--[^\s=,]+")


def split_aliases(group, /):
    """
    split an alias group such as "-t,--ticker" (commas and/or whitespace) into aliases.
    """
    if not isinstance(group, str):
        raise TypeError("alias group must be a string")

    aliases = []
    for alias in filter(None, re.split(r"[,\s]+", group)):
        if not alias.startswith("-"):
            raise SpecConflictError(
                "%r is not a valid option (must start with '-' or '--')" % group,
                title="invalid alias",
                code=FaultCode.INVALID_ALIAS,
                hint="spell options as '-x' or '--word', e.g. '-t,--ticker'",
                group=group,
            )
        if not _ALIAS.fullmatch(alias):
            raise SpecConflictError(
                "alias %r in %r is not a valid option name" % (alias, group),
                title="invalid alias",
                code=FaultCode.INVALID_ALIAS,
                hint="short options take one character after a single dash; long options use '--'",
                group=group,
            )
        if alias in aliases:
            raise SpecConflictError(
                "alias %r appears twice in %r" % (alias, group),
                title="duplicated alias",
                code=FaultCode.DUPLICATED_ALIAS,
                hint="list each alias once",
                group=group,
            )
        aliases.append(alias)

    if not aliases:
        raise SpecConflictError(
            "empty alias group %r" % group,
            title="invalid alias",
            code=FaultCode.INVALID_ALIAS,
            hint="give at least one long option, e.g. '--name'",
            group=group,
        )
    if not any(alias.startswith("--") for alias in aliases):
        raise SpecConflictError(
            "option defs like %r, containing short options only are not allowed" % group,
            title="missing long option",
            code=FaultCode.INVALID_ALIAS,
            hint="add a long alias, e.g. '-x,--extra'",
            group=group,
        )
    return tuple(aliases)


def _split_literal(group, literal, /):
    """
    split a spec literal into (kind, control, default, restriction-text).
    """
    if not isinstance(literal, str):
        raise TypeError("spec literal for %r must be a string" % group)

    restriction = Unset
    if ":::" in literal:  # no default between ':' and '::'
        literal, _, restriction = literal.partition(":::")
    elif "::" in literal:
        literal, _, restriction = literal.partition("::")

    control, colon, default = literal.partition(":")
    default = default if colon else Unset

    if "-" in control:
        prefix, _, control = control.rpartition("-")
        try:
            kind = Kind.resolve(prefix)
        except ValueError as error:
            raise SpecConflictError(
                "%s for %r; must be 'bool', 'counter', 'integer', 'string', 'array' or 'extend'" % (error, group),
                title="invalid type",
                code=FaultCode.INVALID_TYPE,
                hint="prefix the control name with a type, e.g. 'integer-COUNT'",
                group=group,
            ) from None
    else:
        kind = Kind.STRING

    if not control:
        raise SpecConflictError(
            "missing control name in %r" % group,
            title="malformed spec",
            code=FaultCode.MALFORMED_SPEC,
            hint="write the spec as 'type-CONTROL:DEFAULT::RESTRICTION'",
            group=group,
        )
    if not control.isidentifier():
        raise SpecConflictError(
            "control name %r for option %r is not an identifier" % (control, group),
            title="invalid control name",
            code=FaultCode.INVALID_CONTROL,
            hint="use letters, digits and underscores only, e.g. 'OUTPUT_FILE'",
            group=group,
        )
    if control.lower() == control:
        raise SpecConflictError(
            "control name %r for option %r contains no uppercase chars" % (control, group),
            title="invalid control name",
            code=FaultCode.INVALID_CONTROL,
            hint="use an uppercase control name, e.g. %r" % control.upper(),
            group=group,
        )

    return kind, control, default, restriction


def _parse_restriction(group, kind, text, /):
    """
    compile restriction text into an IntegerRange or EnumSet for the given kind.
    """
    if kind is Kind.BOOL:
        return IntegerRange(0, 1)
    if text is Unset or not text:
        return None

    if match := re.fullmatch(r"([0-9]+)-([0-9]+)", text):
        restriction = IntegerRange(int(match[1]), int(match[2]), legacy=True)
    elif match := re.fullmatch(r"([-+]?[0-9]+|-Inf):([-+]?[0-9]+|\+Inf)", text):
        restriction = IntegerRange(
            None if match[1] == "-Inf" else int(match[1]),
            None if match[2] == "+Inf" else int(match[2]),
        )
    else:
        restriction = EnumSet(tuple(filter(None, re.split(r"[,|]", text))))

    if isinstance(restriction, IntegerRange):
        if kind not in (Kind.INTEGER, Kind.COUNTER):
            raise SpecConflictError(
                "cannot restrict %s key %r to numerical range %r, must be 'integer'" % (kind.typename, group, text),
                title="invalid restriction",
                code=FaultCode.INVALID_RESTRICTION,
                hint="use a list of allowed values, e.g. 'one,two,three'",
                group=group,
            )
        if None not in restriction[:2] and restriction.low > restriction.high:
            raise SpecConflictError(
                "empty numerical range %r for key %r" % (text, group),
                title="invalid restriction",
                code=FaultCode.INVALID_RESTRICTION,
                hint="write the lower bound first, e.g. '1:5'",
                group=group,
            )
    elif kind not in (Kind.STRING, Kind.EXTEND, Kind.INTEGER) or not restriction.allowed:
        raise SpecConflictError(
            "cannot restrict %s key %r to values %r" % (kind.typename, group, text),
            title="invalid restriction",
            code=FaultCode.INVALID_RESTRICTION,
            hint="only string, extend and integer options take a list of allowed values",
            group=group,
        )
    elif kind is Kind.INTEGER and not all(re.fullmatch(r"[-+]?[0-9]+", value) for value in restriction.allowed):
        raise SpecConflictError(
            "malformed restriction %r for integer key %r" % (text, group),
            title="invalid restriction",
            code=FaultCode.INVALID_RESTRICTION,
            hint="write a range as 'lo:hi' ('-Inf'/'+Inf' for open ends) or list integers, e.g. '1,2,4'",
            group=group,
        )
    return restriction


class OptionSpec:
    """
    Compiled, read-only description of one option.

    Properties
    - group: the alias group key as declared (e.g. "-t,--ticker").
    - aliases: tuple of aliases in declaration order.
    - name: display form, the first long alias (used for echoes and messages).
    - kind: Kind of the value.
    - control: binding slot identifier.
    - default: default literal, or Unset when none applies.
    - restriction: None, IntegerRange or EnumSet.
    - descr: description text, or None.

    Implicit defaults
    - bool: restriction [0,1] and default false (a declared default is ignored).
    - counter: default 0.
    - string/array/extend: default empty when none was declared.
    - integer: no default unless declared.
    """

    __introspectable__ = (
        "group",
        "aliases",
        "kind",
        "control",
        "default",
        "restriction",
        "descr",
    )

    __slots__ = tuple("_" + name for name in __introspectable__)

    def __init__(self, group, literal, /, descr=Unset):
        aliases = split_aliases(group)
        kind, control, default, restriction = _split_literal(group, literal)

        if not isinstance(descr, str | Text | Unset):
            raise TypeError("option description for %r must be a string" % group)

        match kind:
            case Kind.BOOL:
                default = "0"
            case Kind.COUNTER:
                default = coalesce(default, "0")
            case Kind.STRING | Kind.ARRAY | Kind.EXTEND:
                default = coalesce(default, "")

        self._group = group
        self._aliases = aliases
        self._kind = kind
        self._control = control
        self._default = default
        self._restriction = _parse_restriction(group, kind, restriction)
        self._descr = coalesce(descr) or None

    group = mirror("group")
    aliases = mirror("aliases")
    kind = mirror("kind")
    control = mirror("control")
    default = mirror("default")
    restriction = mirror("restriction")
    descr = mirror("descr")

    @property
    def name(self):
        return next(alias for alias in self._aliases if alias.startswith("--"))

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "option-spec(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


__all__ = (
    "Kind",
    "IntegerRange",
    "EnumSet",
    "OptionSpec",
)
