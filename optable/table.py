"""
Optable option table: merge user specs with the reserved options.

build(options, descriptions, *, message) compiles every alias group into an
OptionSpec and returns a read-only mapping control -> OptionSpec, user options
first (in declaration order), reserved options last.

Reserved options (always present, their aliases cannot be reused)
    -h,--help       bool     __HELP__      print the help text and exit
    -n,--dry-run    bool     __DRY_RUN__   dry-run flag for the caller
    -v,--verbose    counter  __VERBOSE__   verbosity, reconciled with --debug
       --debug      integer  __DEBUG__     verbosity level, range [0, +Inf)
       --time-tag   string   __TIME_TAG__  strftime format for messages
    -V,--version    bool     __VERSION__   only when a version message is configured
"""
from collections.abc import Mapping
from types import MappingProxyType

from .faults import SpecConflictError, FaultCode
from .specs import OptionSpec, split_aliases
from .utils import Unset

RESERVED = {
    "-h,--help": ("bool-__HELP__", "print documentation header"),
    "--time-tag": ("string-__TIME_TAG__", "time tag for messages"),
    "-v,--verbose": ("count-__VERBOSE__", "verbose output; same as '--debug 1'"),
    "--debug": ("integer-__DEBUG__:::0:+Inf", "debug level"),
    "-n,--dry-run": ("bool-__DRY_RUN__", "make 'dry run'"),
}

VERSION = {
    "-V,--version": ("bool-__VERSION__", "print version message"),
}


def reserved(message=Unset, /):
    """
    the reserved alias groups as (group, literal, descr), including
    -V,--version only when a version message is configured.
    """
    groups = RESERVED | (VERSION if message is not Unset else {})
    return [(group, literal, descr) for group, (literal, descr) in groups.items()]


def build(options, descriptions=Unset, /, *, message=Unset):
    """
    Compile and merge option specs into the option table.

    Parameters
    - options: Mapping[str, str], alias group -> spec literal.
    - descriptions: Mapping[str, str], alias group -> description (optional).
    - message: version message; enables the reserved -V,--version.

    Returns
    - MappingProxyType[str, OptionSpec] keyed by control name.

    Raises
    - TypeError: options/descriptions are not mappings.
    - SpecConflictError: malformed alias group or literal, an alias reused from
      the reserved options or from another group, or a duplicated control name.
    """
    if not isinstance(options, Mapping):
        raise TypeError("build() options must be a mapping of alias groups to spec literals")
    if descriptions is Unset:
        descriptions = {}
    elif not isinstance(descriptions, Mapping):
        raise TypeError("build() descriptions must be a mapping of alias groups to descriptions")

    reservations = reserved(message)
    taken = {alias for group, _, _ in reservations for alias in split_aliases(group)}

    owners = {}
    for group in options:
        for alias in split_aliases(group):
            if alias in taken:
                raise SpecConflictError(
                    "%r conflicts with reserved option %r" % (group, alias),
                    title="reserved option",
                    code=FaultCode.RESERVED_ALIAS,
                    hint="pick another alias; %s are reserved" % ", ".join(sorted(taken)),
                    group=group,
                )
            if alias in owners:
                raise SpecConflictError(
                    "alias %r is used by both %r and %r" % (alias, owners[alias], group),
                    title="duplicated alias",
                    code=FaultCode.DUPLICATED_ALIAS,
                    hint="every alias may belong to a single option",
                    group=group,
                )
            owners[alias] = group

    for group in descriptions:
        if group not in options:
            raise SpecConflictError(
                "description given for unknown option %r" % group,
                title="malformed spec",
                code=FaultCode.MALFORMED_SPEC,
                hint="use the same alias group key in options and descriptions",
                group=group,
            )

    table = {}
    specs = [OptionSpec(group, literal, descriptions.get(group, Unset)) for group, literal in options.items()]
    specs += [OptionSpec(group, literal, descr) for group, literal, descr in reservations]
    for spec in specs:
        if spec.control in table:
            raise SpecConflictError(
                "control name %r is used by both %r and %r" % (spec.control, table[spec.control].group, spec.group),
                title="duplicated control name",
                code=FaultCode.DUPLICATED_CONTROL,
                hint="give every option its own control name",
                group=spec.group,
            )
        table[spec.control] = spec

    return MappingProxyType(table)


__all__ = (
    "RESERVED",
    "VERSION",
    "reserved",
    "build",
)
