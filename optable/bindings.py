"""
Optable bindings: the live values of a parse and their write semantics.

- Binding: value + invoked + echo for one option.
- apply(): the binder; writes a typed value into a bindings mapping according to
  the option kind and refreshes the echo.
- ParseResult: read-only outcome of Parser.parse().

Write semantics
- bool/integer/string: overwrite.
- counter: add to the running count.
- array: merge into the mapping or extend the list (first use decides the form).
- extend: append to the accumulated string, space-separated, the new segment
  quoted when empty or containing whitespace.

Echo
- A normalized re-rendering of how the option would be re-specified, built on
  the display alias (first long alias), so that a parsed invocation can be
  forwarded to another process: '--flag', '--verbose --verbose', '--nr=3',
  '--name="two words"', '--extend=x --extend="y z"'.
"""
from types import MappingProxyType

from .faults import TypeValidationError, FaultCode
from .specs import Kind
from .utils import *


class Binding:
    """
    Live value for one option during and after a parse.

    - value: typed payload (Unset until first written).
    - invoked: True once the option was seen on the command line.
    - echo: literal re-specification of the option ("" when nothing to forward).
    """
    __slots__ = ("value", "invoked", "echo")

    def __init__(self, value=Unset, invoked=False, echo=""):
        self.value = value
        self.invoked = invoked
        self.echo = echo

    def __rich_repr__(self):
        yield "value", self.value
        yield "invoked", self.invoked
        yield "echo", self.echo

    def __repr__(self):
        return "binding(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __eq__(self, other):
        if not isinstance(other, Binding):
            return NotImplemented
        return (self.value, self.invoked, self.echo) == (other.value, other.invoked, other.echo)

    __hash__ = None


def _merge_array(spec, binding, value, raw, /):
    if binding.value is Unset:
        return type(value)(value)
    if isinstance(binding.value, dict) and isinstance(value, dict):
        return binding.value | value
    if isinstance(binding.value, list) and isinstance(value, list):
        return binding.value + value
    held = "key:value pairs" if isinstance(binding.value, dict) else "plain values"
    raise TypeValidationError(
        "array key %r already holds %s, cannot add %r" % (spec.name, held, raw),
        title="mixed array forms",
        code=FaultCode.MIXED_ARRAY,
        hint="use the same form (%s) for every occurrence of %s" % (held, spec.name),
        input=raw,
    )


def apply(bindings, spec, value, /, raw=None, *, invoked=True):
    """
    Write one typed value into bindings[spec.control] and refresh its echo.

    Parameters
    - bindings: mutable mapping control -> Binding (created on first touch).
    - spec: OptionSpec being written.
    - value: typed value from parse_value()/parse_default().
    - raw: the literal text the value was parsed from (None for presence-only kinds).
    - invoked: False when the defaulting pass applies a default.

    Returns
    - the updated Binding.
    """
    try:
        binding = bindings[spec.control]
    except KeyError:
        binding = bindings[spec.control] = Binding()

    name = spec.name
    match spec.kind:
        case Kind.BOOL:
            binding.value = value
            binding.echo = name if value else ""
        case Kind.COUNTER:
            binding.value = coalesce(binding.value, 0) + value
            binding.echo = " ".join([name] * binding.value)
        case Kind.INTEGER:
            binding.value = value
            binding.echo = "%s=%d" % (name, value)
        case Kind.STRING:
            binding.value = value
            binding.echo = "%s=%s" % (name, quote(raw))
        case Kind.ARRAY:
            binding.value = _merge_array(spec, binding, value, raw)
            binding.echo = "%s=%s" % (name, quote(raw))
        case Kind.EXTEND:
            segment = quote(value)
            binding.value = segment if not binding.value else "%s %s" % (binding.value, segment)
            echo = "%s=%s" % (name, segment)
            binding.echo = echo if not binding.echo else "%s %s" % (binding.echo, echo)

    binding.invoked |= invoked
    return binding


class ParseResult:
    """
    Read-only outcome of a parse.

    Properties
    - name: program name used for the reconstructed command line.
    - bindings: read-only mapping control -> Binding (absent when no default applied).
    - positionals: tuple of positional arguments.
    - unmatched: tuple of captured unrecognized options (depth charge).
    - keys: number of options matched on the command line.
    - nargs: number of positionals.
    - argv: positionals joined by a space.
    - echoes: non-empty echo strings, in option-table order.
    - cmdline: name, echoes and (quoted) positionals joined by a space.

    Lookup
    - result["CONTROL"] → value (KeyError when absent)
    - "CONTROL" in result, result.get("CONTROL", default)
    """

    __slots__ = ("_name", "_bindings", "_positionals", "_unmatched", "_keys", "_order")

    def __init__(self, name, bindings, positionals, unmatched, keys, order=()):
        self._name = name
        self._bindings = MappingProxyType(dict(bindings))
        self._positionals = tuple(positionals)
        self._unmatched = tuple(unmatched)
        self._keys = keys
        self._order = tuple(order) or tuple(self._bindings)

    name = mirror("name")
    positionals = mirror("positionals")
    unmatched = mirror("unmatched")
    keys = mirror("keys")

    @property
    def bindings(self):
        return self._bindings

    @property
    def nargs(self):
        return len(self._positionals)

    @property
    def argv(self):
        return " ".join(self._positionals)

    @property
    def echoes(self):
        return tuple(
            self._bindings[control].echo
            for control in self._order
            if control in self._bindings and self._bindings[control].echo
        )

    @property
    def cmdline(self):
        return " ".join((self._name, *self.echoes, *map(quote, self._positionals)))

    def __getitem__(self, control):
        return self._bindings[control].value

    def __contains__(self, control):
        return control in self._bindings

    def get(self, control, default=None, /):
        try:
            return self[control]
        except KeyError:
            return default

    def __rich_repr__(self):
        yield "bindings", {control: binding.value for control, binding in self._bindings.items()}
        yield "positionals", self._positionals
        yield "unmatched", self._unmatched
        yield "keys", self._keys

    def __repr__(self):
        return "parse-result(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


__all__ = (
    "Binding",
    "ParseResult",
    "apply",
)
