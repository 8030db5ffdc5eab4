# python
"""
Convert module behavioral tests.

Scope
- Validate the built-in converters (Integer, Float, Decimal, Date, Boolean): blank input
  yields absence, strict literal grammar, target-type tags on failure.
- Validate StringMutator pass-through and forced coercion.
- Validate the registry (register/resolve) and left-to-right chaining.

Conventions
- Test method names follow CamelCase per project convention.
- Failures are asserted through ConvertError.target_type, never through message text.
"""

from __future__ import annotations

import datetime
import decimal
import unittest
from unittest import TestCase

from commandmodel import UnknownConverterError, InvalidSchemaError
from commandmodel.convert import (
    ConvertError, StringMutator, Integer, Float, Decimal, Date, Boolean,
    converters, register, resolve, chain,
)


class TestNumericConverters(TestCase):
    """Behavioral tests for Integer, Float and Decimal."""

    def testBlankInputYieldsNone(self):
        for converter in (Integer(), Float(), Decimal()):
            for value in (None, "", "   "):
                with self.subTest(converter=converter, value=value):
                    self.assertIsNone(converter(value))

    def testNonNumericStringsFailWithTargetType(self):
        cases = ((Integer(), "integer"), (Float(), "number"), (Decimal(), "number"))
        for converter, target in cases:
            for value in ("abc", "12abc", "1.2.3", "nan", "inf", "1e", "--1"):
                with self.subTest(converter=converter, value=value):
                    with self.assertRaises(ConvertError) as context:
                        converter(value)
                    self.assertEqual(context.exception.target_type, target)

    def testIntegerRejectsFractionalString(self):
        with self.assertRaises(ConvertError) as context:
            Integer()("0.1")
        self.assertEqual(context.exception.target_type, "integer")

    def testIntegerParsesSignedLiterals(self):
        self.assertEqual(Integer()("42"), 42)
        self.assertEqual(Integer()(" -7 "), -7)
        self.assertEqual(Integer()("+1_000"), 1000)

    def testIntegerBeyondDigitLimitFails(self):
        with self.assertRaises(ConvertError) as context:
            Integer()("9" * 5000)
        self.assertEqual(context.exception.target_type, "integer")
        self.assertIsInstance(context.exception.original_error, ValueError)

    def testIntegerAcceptsIntegralNumbers(self):
        self.assertEqual(Integer()(5), 5)
        self.assertEqual(Integer()(5.0), 5)
        self.assertEqual(Integer()(decimal.Decimal("3")), 3)

    def testIntegerRejectsFractionalNumbersAndBooleans(self):
        for value in (1.5, decimal.Decimal("0.1"), True):
            with self.subTest(value=value):
                with self.assertRaises(ConvertError):
                    Integer()(value)

    def testFloatParsesLiterals(self):
        self.assertEqual(Float()("1.5"), 1.5)
        self.assertEqual(Float()("-2e3"), -2000.0)
        self.assertEqual(Float()(3), 3.0)

    def testDecimalParsesWithPrecision(self):
        self.assertEqual(Decimal()("10.25"), decimal.Decimal("10.25"))
        self.assertEqual(Decimal()(7), decimal.Decimal(7))
        self.assertEqual(Decimal()("1.23456789012345678901"), decimal.Decimal("1.234567890123457"))

    def testConvertErrorKeepsOriginalError(self):
        with self.assertRaises(ConvertError) as context:
            Integer()(object())
        self.assertIsInstance(context.exception.original_error, TypeError)


class TestDate(TestCase):
    """Behavioral tests for the Date converter."""

    def testIsoAndLocaleFormsAgree(self):
        self.assertEqual(Date()("2000-01-01"), datetime.date(2000, 1, 1))
        self.assertEqual(Date()("1/1/2000"), datetime.date(2000, 1, 1))

    def testInvalidCalendarValueFails(self):
        for value in ("3/50/1290", "2001-02-30", "tomorrow"):
            with self.subTest(value=value):
                with self.assertRaises(ConvertError) as context:
                    Date()(value)
                self.assertEqual(context.exception.target_type, "date")

    def testDatePassesThrough(self):
        today = datetime.date(2020, 5, 17)
        self.assertIs(Date()(today), today)

    def testBlankInputYieldsNone(self):
        self.assertIsNone(Date()(""))
        self.assertIsNone(Date()(None))


class TestBoolean(TestCase):
    """Behavioral tests for the total Boolean converter."""

    def testFalseyValues(self):
        for value in ("", "0", "f", "false", 0, 0.0, decimal.Decimal("0"), None, False):
            with self.subTest(value=value):
                self.assertIs(Boolean()(value), False)

    def testEverythingElseIsTrue(self):
        for value in ("1", "t", "true", "no", 1, True, object(), [], "False"):
            with self.subTest(value=value):
                self.assertIs(Boolean()(value), True)


class TestStringMutator(TestCase):
    """Behavioral tests for StringMutator."""

    def testTransformsText(self):
        mutator = StringMutator(lambda text: text.replace(",", ""))
        self.assertEqual(mutator("1,234"), "1234")

    def testPassesNonTextThrough(self):
        mutator = StringMutator(str.upper)
        self.assertEqual(mutator(12), 12)

    def testForceCoercesFirst(self):
        mutator = StringMutator(lambda text: text + "!", force=True)
        self.assertEqual(mutator(12), "12!")

    def testRequiresCallable(self):
        with self.assertRaises(TypeError):
            StringMutator("strip")


class TestRegistry(TestCase):
    """Behavioral tests for resolve/register/chain."""

    def testResolveNames(self):
        self.assertEqual(resolve("integer"), (converters["integer"],))
        self.assertEqual(resolve(None), ())

    def testResolveMixedSequence(self):
        strip = StringMutator(str.strip)
        resolved = resolve([strip, "decimal"])
        self.assertIs(resolved[0], strip)
        self.assertIs(resolved[1], converters["decimal"])

    def testResolveUnknownNameFails(self):
        with self.assertRaises(UnknownConverterError) as context:
            resolve("money")
        self.assertEqual(context.exception.options["name"], "money")

    def testResolveRejectsNonCallables(self):
        with self.assertRaises(InvalidSchemaError):
            resolve(42)
        with self.assertRaises(InvalidSchemaError):
            resolve(["integer", 42])

    def testRegisterMakesNameResolvable(self):
        upper = register("upper-case-for-tests", StringMutator(str.upper))
        self.assertEqual(resolve("upper-case-for-tests"), (upper,))

    def testChainReducesLeftToRight(self):
        stages = resolve([StringMutator(lambda text: text.replace(",", "")), "integer"])
        self.assertEqual(chain(stages, "1,234"), 1234)

    def testChainAbortsOnFirstFailure(self):
        reached = []
        stages = ("integer", lambda value: reached.append(value))
        with self.assertRaises(ConvertError):
            chain(resolve(stages), "x")
        self.assertEqual(reached, [])


if __name__ == "__main__":
    unittest.main()
