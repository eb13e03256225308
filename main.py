"""
Demo of an option table with one option of every kind.

Run with --help to see the rendered table, or -vvvv to get the parse report.
"""
from rich.pretty import pprint

from optable import *

__prog__ = "demo"

OPTIONS = {
    "-t,--ticker": "count-TICKER",
    "--nr": "integer-NR:1::-Inf:+Inf",
    "--tag": "string-TAG:none::none,alpha,beta",
    "--array": "array-ARRAY",
    "--extend": "extend-EXTEND",
    "--flag": "bool-FLAG",
}

DESCRIPTIONS = {
    "-t,--ticker": "counter; repeat to increment",
    "--nr": "any integer",
    "--tag": "one of none, alpha or beta",
    "--array": "key:value pairs or a comma-separated list",
    "--extend": "accumulates every occurrence",
    "--flag": "boolean flag",
}


if __name__ == '__main__':
    parser = Parser(OPTIONS, DESCRIPTIONS, message="demo 0.0.0", depth_charge=True)
    result = parser.parse()
    pprint(result)

    say = parser.say(result, __prog__)
    say.say("forwarding: %s" % result.cmdline)
    say.is_dry_run or say.echo("nothing to do for %d argument(s)" % result.nargs, bare=True)
