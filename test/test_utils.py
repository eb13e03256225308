"""
Utility helpers tests (sentinel, coalesce, quote, ordinal, mirror).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from optable.utils import Unset, UnsetType, coalesce, quote, ordinal, mirror


class TestUnset(TestCase):
    """Sentinel behavior."""

    def testUnsetIsSingletonAndFalsey(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testUnsetCannotBeSubclassed(self):
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})

    def testUnsetJoinsTypeUnions(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", str | Unset))
        self.assertFalse(isinstance(1, str | Unset))

    def testCoalescePreservesFalseyValues(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertEqual(coalesce("", "fallback"), "")
        self.assertEqual(coalesce(0, 5), 0)
        self.assertIsNone(coalesce(Unset))


class TestQuote(TestCase):
    """Quoting for echoes and extend values."""

    def testPlainWordIsUntouched(self):
        self.assertEqual(quote("x"), "x")

    def testWhitespaceAndEmptyAreQuoted(self):
        self.assertEqual(quote("y z"), '"y z"')
        self.assertEqual(quote("tab\there"), '"tab\there"')
        self.assertEqual(quote(""), '""')

    def testNonStringRejected(self):
        with self.assertRaises(TypeError):
            quote(3)


class TestOrdinal(TestCase):
    """Position labels used in messages."""

    def testWordsUpToTen(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(3), "third")
        self.assertEqual(ordinal(10), "tenth")

    def testNumericSuffixes(self):
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(12), "12th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(111), "111th")


class TestMirror(TestCase):
    """Read-only mirrored properties."""

    def testMirrorReturnsCopiesOfContainers(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = ["a"]

        holder = Holder()
        holder.items.append("b")
        self.assertEqual(holder.items, ["a"])
        with self.assertRaises(AttributeError):
            holder.items = []


if __name__ == "__main__":
    unittest.main()
