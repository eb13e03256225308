"""
Leveled messaging tests (line format, thresholds, channels, echo strings).

Conventions
- Test method names follow CamelCase per project convention.
- Results come from a real parse so the reserved bindings are present.
"""

from __future__ import annotations

import io
import os
import tempfile
import unittest
from unittest import TestCase, mock

from rich.console import Console

import optable.say
from optable import Parser, Say


def result(*pieces, **config):
    return Parser({"--name": "NAME"}, name="tool", shell=False, **config).parse(list(pieces))


class TestSay(TestCase):
    """Say bound to a parse result."""

    def setUp(self):
        self.stdout = Console(file=io.StringIO(), width=200, highlight=False, soft_wrap=True)
        self.stderr = Console(file=io.StringIO(), width=200, highlight=False, soft_wrap=True)
        patches = (
            mock.patch.object(optable.say, "stdout", self.stdout),
            mock.patch.object(optable.say, "stderr", self.stderr),
        )
        for patch in patches:
            patch.start()
            self.addCleanup(patch.stop)

    def lines(self, console):
        return console.file.getvalue().splitlines()

    def testFormatWithCaller(self):
        say = Say(result(), "tool")
        self.assertEqual(say.format("hello"), "%tool- hello")
        self.assertEqual(say.format("hello", "W"), "%tool-W- hello")

    def testFormatBareOrWithoutCaller(self):
        self.assertEqual(Say(result(), "tool").format("hello", bare=True), "    hello")
        self.assertEqual(Say(result()).format("hello", "I"), "    hello")
        self.assertEqual(Say(result(), prefix="> ").format("hello"), "> hello")

    def testDryRunPrefix(self):
        say = Say(result("--dry-run"), "tool")
        self.assertTrue(say.is_dry_run)
        self.assertEqual(say.format("hello"), "DRY_RUN %tool- hello")

    def testTimeTag(self):
        say = Say(result("--time-tag=%Y"), "tool")
        self.assertRegex(say.format("hello"), r"^\d{4} %tool- hello$")

    def testSayNeedsVerbosity(self):
        self.assertFalse(Say(result(), "tool").say("quiet"))
        self.assertTrue(Say(result("-v"), "tool").say("loud"))
        self.assertEqual(self.lines(self.stderr), ["%tool-I- loud"])

    def testDebugThresholds(self):
        say = Say(result("--debug=2"), "tool")
        self.assertTrue(say.is_debug)
        self.assertTrue(say.debug("two"))
        self.assertFalse(say.deep_debug("three"))

    def testAlwaysPrintedChannels(self):
        say = Say(result(), "tool")
        self.assertTrue(say.echo("out"))
        self.assertTrue(say.warn("careful"))
        self.assertTrue(say.yell("hey"))
        self.assertEqual(self.lines(self.stdout), ["%tool- out"])
        self.assertEqual(self.lines(self.stderr), ["%tool-W- careful", "%tool-I- hey"])

    def testDieAndDone(self):
        say = Say(result(), "tool")
        with self.assertRaises(SystemExit) as context:
            say.die("broken")
        self.assertEqual(context.exception.code, 1)
        with self.assertRaises(SystemExit) as context:
            say.die("broken", "E", status=4)
        self.assertEqual(context.exception.code, 4)
        with self.assertRaises(SystemExit) as context:
            say.done("finished")
        self.assertEqual(context.exception.code, 0)
        self.assertEqual(self.lines(self.stderr)[-1], "%tool-S- finished")

    def testMessagesGoToLogWhenConfigured(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "messages.log")
            say = Say(result(), "tool", log=path)
            say.warn("logged")
            with open(path, encoding="utf-8") as file:
                self.assertEqual(file.read(), "%tool-W- logged\n")
        self.assertEqual(self.lines(self.stderr), [])

    def testEchoStrings(self):
        say = Say(result("--debug=2", "-n", "--time-tag=%H"))
        self.assertEqual(say.verbose_str, "--verbose --verbose")
        self.assertEqual(say.debug_str, "--debug=2")
        self.assertEqual(say.dry_run_str, "--dry-run")
        self.assertEqual(say.time_tag_str, "--time-tag=%H")

    def testDepthChargeString(self):
        say = Say(result("--other=1", "-x", depth_charge=True))
        self.assertEqual(say.depth_charge_str, "--other=1 -x")

    def testParserBindsLog(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "messages.log")
            parser = Parser({"--name": "NAME"}, name="tool", shell=False, log=path)
            say = parser.say(parser.parse([]), "tool")
            self.assertEqual(say.log, path)


if __name__ == "__main__":
    unittest.main()
