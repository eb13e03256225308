"""
Optable value parsing and validation.

One entry point per situation:
- parse_value(spec, raw, current): the typed value for a piece of the command line
  (raw is None for presence-only options).
- parse_default(spec): the typed value for a declared default literal.

Both raise TypeValidationError (or OptionSyntaxError for a value given to a
presence-only option); the parser turns those into triggered faults.

Type rules
- bool: presence only, value True.
- counter: presence only, an increment of 1 (checked against its range, if any).
- integer: optionally signed decimal ('lo-hi' legacy ranges admit unsigned only).
- string / extend: literal text, checked against an enumeration, if any.
- array: "k1:v1,k2:v2" → dict, "a,b,c" → list.
"""
import re

from .faults import TypeValidationError, OptionSyntaxError, FaultCode
from .specs import Kind, IntegerRange, EnumSet
from .utils import Unset


def _parse_integer(spec, raw, /):
    restriction = spec.restriction
    legacy = isinstance(restriction, IntegerRange) and restriction.legacy

    if not re.fullmatch(r"[0-9]+" if legacy else r"[-+]?[0-9]+", raw):
        if isinstance(restriction, IntegerRange):
            message = "illegal value %r for %s key %r, need numerical value in range '%s'" % (
                raw, spec.kind.typename, spec.name, restriction
            )
        else:
            message = "illegal value %r for %s key %r, numerical value required" % (raw, spec.kind.typename, spec.name)
        raise TypeValidationError(
            message,
            title="not an integer",
            code=FaultCode.NOT_AN_INTEGER,
            hint="pass a whole number, e.g. %s=3" % spec.name,
            input=raw,
        )
    return int(raw)


def _check_range(spec, value, raw, /):
    restriction = spec.restriction
    if not isinstance(restriction, IntegerRange) or value in restriction:
        return

    if restriction.low is None:
        message = "illegal value %r for key %r, need value less/equal '%d'" % (raw, spec.name, restriction.high)
    elif restriction.high is None:
        message = "illegal value %r for key %r, need value greater/equal '%d'" % (raw, spec.name, restriction.low)
    else:
        message = "illegal value %r for key %r, value must be in range '%s'" % (raw, spec.name, restriction)
    raise TypeValidationError(
        message,
        title="value out of range",
        code=FaultCode.OUT_OF_RANGE,
        hint="pick a value within '%s'" % (restriction,),
        input=raw,
    )


def _check_choice(spec, raw, /):
    restriction = spec.restriction
    if not isinstance(restriction, EnumSet) or raw in restriction:
        return
    raise TypeValidationError(
        "illegal value %r for key %r, allowed values are '%s'" % (raw, spec.name, restriction),
        title="invalid choice",
        code=FaultCode.INVALID_CHOICE,
        hint="choose one of: %s" % ", ".join(restriction.allowed),
        input=raw,
        choices=restriction.allowed,
    )


def _malformed(spec, message, raw, /):
    return TypeValidationError(
        message,
        title="malformed array",
        code=FaultCode.MALFORMED_ARRAY,
        hint="write pairs as %s=key1:value1,key2:value2 or values as %s=a,b,c" % (spec.name, spec.name),
        input=raw,
    )


def parse_array(spec, raw, /):
    """
    parse an array value: a mapping when raw contains ':', else a list.

    mapping syntax is a strict alternation of 'key:' and 'value,' fields:
    - an empty key, a key where a value belongs, a value where a key belongs,
      and a key with no value at the end are all rejected.
    """
    if ":" not in raw:
        return raw.split(",")

    fields = re.split(r"([:,])", raw)  # field, delimiter, field, ..., field
    mapping = {}
    key = Unset
    expecting_key = True

    for index in range(0, len(fields) - 1, 2):
        field, delimiter = fields[index], fields[index + 1]
        rest = "".join(fields[index:])
        if delimiter == ":":
            if not expecting_key:
                raise _malformed(spec, "expected to find value at start of %r; found key %r instead" % (rest, field), raw)
            if not field:
                raise _malformed(spec, "found empty key at start of %r" % rest, raw)
            key = field
            expecting_key = False
        else:
            if expecting_key:
                raise _malformed(spec, "expected to find key at start of %r; found value %r instead" % (rest, field), raw)
            mapping[key] = field
            expecting_key = True

    field = fields[-1]
    if expecting_key:
        if not field:
            raise _malformed(spec, "found empty key at end of %r" % raw, raw)
        raise _malformed(spec, "missing value for key %r at end of %r" % (field, raw), raw)
    mapping[key] = field
    return mapping


def parse_value(spec, raw, current=Unset, /):
    """
    Produce the typed value of one command-line occurrence of an option.

    Parameters
    - spec: OptionSpec being set.
    - raw: str value from the command line, or None for presence-only kinds.
    - current: the option's Binding so far (Unset when untouched); counters are
      range-checked against their running total.

    Returns
    - bool: True
    - counter: 1 (the increment)
    - integer: int
    - string/extend: str
    - array: dict[str, str] or list[str]
    """
    match spec.kind:
        case Kind.BOOL | Kind.COUNTER if raw is not None:
            raise OptionSyntaxError(
                "%s option %r followed by '=' sign" % (spec.kind.typename, spec.name),
                title="option takes no value",
                code=FaultCode.VALUE_ASSIGNMENT,
                hint="remove everything from '=' (for example: %s)" % spec.name,
                input=raw,
            )
        case Kind.BOOL:
            return True
        case Kind.COUNTER:
            total = (0 if current is Unset else current.value) + 1
            _check_range(spec, total, str(total))
            return 1
        case Kind.INTEGER:
            value = _parse_integer(spec, raw)
            _check_range(spec, value, raw)
            _check_choice(spec, raw)
            return value
        case Kind.STRING | Kind.EXTEND:
            _check_choice(spec, raw)
            return raw
        case Kind.ARRAY:
            return parse_array(spec, raw)
    raise RuntimeError("unexpected kind %r" % spec.kind)


def parse_default(spec, /):
    """
    Produce the typed value of a declared default literal.

    Defaults go through the same checks as command-line values. A bool default
    is always False and a counter default is its starting count.
    """
    match spec.kind:
        case Kind.BOOL:
            return False
        case Kind.COUNTER:
            value = _parse_integer(spec, spec.default)
            _check_range(spec, value, spec.default)
            return value
    return parse_value(spec, spec.default)


__all__ = (
    "parse_value",
    "parse_default",
    "parse_array",
)
