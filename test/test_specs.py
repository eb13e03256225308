"""
Option specification tests (alias groups, literal grammar, restrictions).

Scope
- Validate kind resolution and implicit defaults per kind.
- Validate the 'type-CONTROL:DEFAULT::RESTRICTION' grammar, ':::' included.
- Validate numerical ranges (modern and legacy forms) and enumerations.
- Validate that malformed groups and literals fail with SpecConflictError.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from optable import OptionSpec, Kind, IntegerRange, EnumSet, SpecConflictError, FaultCode
from optable.specs import split_aliases
from optable.utils import Unset


class TestKind(TestCase):
    """Type prefixes are resolved by their first letter."""

    def testResolveLongAndShortPrefixes(self):
        self.assertIs(Kind.resolve("bool"), Kind.BOOL)
        self.assertIs(Kind.resolve("b"), Kind.BOOL)
        self.assertIs(Kind.resolve("count"), Kind.COUNTER)
        self.assertIs(Kind.resolve("integer"), Kind.INTEGER)
        self.assertIs(Kind.resolve("string"), Kind.STRING)
        self.assertIs(Kind.resolve("array"), Kind.ARRAY)
        self.assertIs(Kind.resolve("extend"), Kind.EXTEND)

    def testResolveRejectsUnknownPrefix(self):
        with self.assertRaises(ValueError):
            Kind.resolve("float")
        with self.assertRaises(ValueError):
            Kind.resolve("")

    def testValuedKinds(self):
        self.assertFalse(Kind.BOOL.valued)
        self.assertFalse(Kind.COUNTER.valued)
        self.assertTrue(Kind.INTEGER.valued)
        self.assertTrue(Kind.ARRAY.valued)


class TestAliasGroups(TestCase):
    """Alias group splitting and validation."""

    def testSplitOnCommasAndWhitespace(self):
        self.assertEqual(split_aliases("-t,--ticker"), ("-t", "--ticker"))
        self.assertEqual(split_aliases("-t --ticker, --tick"), ("-t", "--ticker", "--tick"))

    def testAliasWithoutDashRejected(self):
        with self.assertRaises(SpecConflictError) as context:
            split_aliases("t,--ticker")
        self.assertEqual(context.exception.code, FaultCode.INVALID_ALIAS)

    def testLongShortAliasRejected(self):
        with self.assertRaises(SpecConflictError):
            split_aliases("-tt,--ticker")

    def testShortOnlyGroupRejected(self):
        with self.assertRaises(SpecConflictError) as context:
            split_aliases("-t")
        self.assertEqual(context.exception.code, FaultCode.INVALID_ALIAS)

    def testRepeatedAliasRejected(self):
        with self.assertRaises(SpecConflictError) as context:
            split_aliases("--tick,--tick")
        self.assertEqual(context.exception.code, FaultCode.DUPLICATED_ALIAS)

    def testEmptyGroupRejected(self):
        with self.assertRaises(SpecConflictError):
            split_aliases(" , ")


class TestOptionSpec(TestCase):
    """Literal compilation into OptionSpec."""

    def testIntegerWithDefaultAndOpenRange(self):
        spec = OptionSpec("--nr", "integer-NR:1::-Inf:+Inf")
        self.assertIs(spec.kind, Kind.INTEGER)
        self.assertEqual(spec.control, "NR")
        self.assertEqual(spec.default, "1")
        self.assertEqual(spec.restriction, IntegerRange(None, None))

    def testTripleColonMeansNoDefault(self):
        spec = OptionSpec("--level", "integer-LEVEL:::1:5")
        self.assertIs(spec.default, Unset)
        self.assertEqual(spec.restriction, IntegerRange(1, 5))

    def testDoubleColonWithoutDefault(self):
        spec = OptionSpec("--level", "integer-LEVEL::-3:5")
        self.assertIs(spec.default, Unset)
        self.assertEqual(spec.restriction, IntegerRange(-3, 5))

    def testLegacyDashRange(self):
        spec = OptionSpec("--level", "integer-LEVEL:2::1-5")
        self.assertEqual(spec.restriction, IntegerRange(1, 5, legacy=True))
        self.assertEqual(str(spec.restriction), "1-5")

    def testMissingTypeMeansString(self):
        spec = OptionSpec("--name", "NAME")
        self.assertIs(spec.kind, Kind.STRING)
        self.assertEqual(spec.default, "")
        self.assertIsNone(spec.restriction)

    def testBoolIgnoresDeclaredDefault(self):
        spec = OptionSpec("-f,--flag", "bool-FLAG:1")
        self.assertEqual(spec.default, "0")
        self.assertEqual(spec.restriction, IntegerRange(0, 1))

    def testCounterDefaultsToZero(self):
        self.assertEqual(OptionSpec("-t,--ticker", "count-TICKER").default, "0")
        self.assertEqual(OptionSpec("-t,--ticker", "count-TICKER:2").default, "2")

    def testIntegerWithoutDefaultStaysUnset(self):
        self.assertIs(OptionSpec("--nr", "integer-NR").default, Unset)

    def testArrayAndExtendDefaultEmpty(self):
        self.assertEqual(OptionSpec("--array", "array-ARRAY").default, "")
        self.assertEqual(OptionSpec("--extend", "extend-EXTEND").default, "")

    def testEnumeration(self):
        spec = OptionSpec("--tag", "TAG:none::none,alpha,beta")
        self.assertEqual(spec.restriction, EnumSet(("none", "alpha", "beta")))
        self.assertIn("alpha", spec.restriction)
        self.assertNotIn("gamma", spec.restriction)

    def testNameIsFirstLongAlias(self):
        spec = OptionSpec("-t,--ticker,--tick", "count-TICKER")
        self.assertEqual(spec.name, "--ticker")
        self.assertEqual(spec.aliases, ("-t", "--ticker", "--tick"))

    def testDescriptionIsKept(self):
        self.assertEqual(OptionSpec("--nr", "integer-NR", "how many").descr, "how many")
        self.assertIsNone(OptionSpec("--nr", "integer-NR").descr)

    def testInvalidTypeRejected(self):
        with self.assertRaises(SpecConflictError) as context:
            OptionSpec("--nr", "quantity-NR")
        self.assertEqual(context.exception.code, FaultCode.INVALID_TYPE)

    def testLowercaseControlRejected(self):
        with self.assertRaises(SpecConflictError) as context:
            OptionSpec("--nr", "integer-nr")
        self.assertEqual(context.exception.code, FaultCode.INVALID_CONTROL)

    def testNonIdentifierControlRejected(self):
        with self.assertRaises(SpecConflictError) as context:
            OptionSpec("--nr", "integer-N.R")
        self.assertEqual(context.exception.code, FaultCode.INVALID_CONTROL)

    def testMissingControlRejected(self):
        with self.assertRaises(SpecConflictError) as context:
            OptionSpec("--nr", "integer-")
        self.assertEqual(context.exception.code, FaultCode.MALFORMED_SPEC)

    def testRangeOnStringRejected(self):
        with self.assertRaises(SpecConflictError) as context:
            OptionSpec("--name", "NAME::1:5")
        self.assertEqual(context.exception.code, FaultCode.INVALID_RESTRICTION)

    def testEmptyRangeRejected(self):
        with self.assertRaises(SpecConflictError) as context:
            OptionSpec("--nr", "integer-NR::5:1")
        self.assertEqual(context.exception.code, FaultCode.INVALID_RESTRICTION)

    def testMalformedIntegerRangeRejected(self):
        for restriction in ("0:Inf", "a:b", "1:2:3", "one,two"):
            with self.subTest(restriction=restriction):
                with self.assertRaises(SpecConflictError) as context:
                    OptionSpec("--nr", "integer-NR:::%s" % restriction)
                self.assertEqual(context.exception.code, FaultCode.INVALID_RESTRICTION)

    def testNonAsciiDigitsInRangeRejected(self):
        with self.assertRaises(SpecConflictError):
            OptionSpec("--nr", "integer-NR::١:٣")

    def testEnumerationOnArrayRejected(self):
        with self.assertRaises(SpecConflictError):
            OptionSpec("--array", "array-ARRAY::a,b")

    def testNonStringLiteralRejected(self):
        with self.assertRaises(TypeError):
            OptionSpec("--nr", 5)


if __name__ == "__main__":
    unittest.main()
