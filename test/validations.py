# python
"""
Validations module behavioral tests.

Scope
- Validate each field rule (presence, numericality, length, inclusion, exclusion, format,
  validate) with default and custom messages, allow_none/allow_blank.
- Validate the rules() factory: option normalization, disabled rules, unknown rules.
- Validate object rules and the conversion-error fold.

Conventions
- Test method names follow CamelCase per project convention.
- Rules run against a bare namespace carrying errors/conversion_errors, not a Model.
"""

from __future__ import annotations

import re
import unittest
from types import SimpleNamespace
from unittest import TestCase

from commandmodel import (
    Errors, InvalidSchemaError, UnknownRuleError, Presence, Numericality, Length, Inclusion,
    Exclusion, Format, Predicate, Callback, ConversionErrors, rules,
)


def target(**values):
    return SimpleNamespace(errors=Errors(), conversion_errors={}, **values)


def messages(validator, value):
    command = target(value=value)
    validator.validate(command)
    return command.errors["value"]


class TestPresence(TestCase):
    """Behavioral tests for the presence rule."""

    def testBlankValuesFail(self):
        for value in (None, "", "  ", [], {}):
            with self.subTest(value=value):
                self.assertEqual(messages(Presence("value"), value), ("can't be blank",))

    def testPresentValuesPass(self):
        for value in ("x", 0, [1]):
            with self.subTest(value=value):
                self.assertEqual(messages(Presence("value"), value), ())

    def testCustomMessage(self):
        self.assertEqual(messages(Presence("value", message="is required"), None), ("is required",))


class TestNumericality(TestCase):
    """Behavioral tests for the numericality rule."""

    def testNonNumbers(self):
        for value in ("abc", None, True, object()):
            with self.subTest(value=value):
                self.assertEqual(messages(Numericality("value"), value), ("is not a number",))

    def testNumericStringsPass(self):
        self.assertEqual(messages(Numericality("value"), "12.5"), ())

    def testOnlyInteger(self):
        self.assertEqual(messages(Numericality("value", only_integer=True), 1.5), ("must be an integer",))
        self.assertEqual(messages(Numericality("value", only_integer=True), "3"), ())

    def testComparisons(self):
        self.assertEqual(messages(Numericality("value", greater_than=0), 0), ("must be greater than 0",))
        self.assertEqual(
            messages(Numericality("value", less_than_or_equal_to=10), 11),
            ("must be less than or equal to 10",)
        )
        self.assertEqual(messages(Numericality("value", other_than=3), 3), ("must be other than 3",))
        self.assertEqual(messages(Numericality("value", greater_than=0.5), 1), ())

    def testCallableBound(self):
        self.assertEqual(messages(Numericality("value", less_than=lambda: 5), 7), ("must be less than 5",))

    def testOddEven(self):
        self.assertEqual(messages(Numericality("value", odd=True), 4), ("must be odd",))
        self.assertEqual(messages(Numericality("value", odd=True), -3), ())
        self.assertEqual(messages(Numericality("value", even=True), 3), ("must be even",))

    def testAllowNone(self):
        self.assertEqual(messages(Numericality("value", allow_none=True), None), ())

    def testUnknownOptionRejected(self):
        with self.assertRaises(InvalidSchemaError):
            Numericality("value", greater=1)


class TestLength(TestCase):
    """Behavioral tests for the length rule."""

    def testMinimumMaximum(self):
        rule = Length("value", minimum=2, maximum=4)
        self.assertEqual(messages(rule, "a"), ("is too short (minimum is 2 characters)",))
        self.assertEqual(messages(rule, "abcde"), ("is too long (maximum is 4 characters)",))
        self.assertEqual(messages(rule, "abc"), ())

    def testExact(self):
        self.assertEqual(
            messages(Length("value", **{"is": 3}), "ab"),
            ("is the wrong length (should be 3 characters)",)
        )

    def testWithinRange(self):
        rule = Length("value", within=range(2, 5))
        self.assertEqual(messages(rule, "abcde"), ("is too long (maximum is 4 characters)",))
        self.assertEqual(messages(rule, "abcd"), ())

    def testWithinMustBeRange(self):
        with self.assertRaises(InvalidSchemaError):
            Length("value", within=(2, 5))


class TestMembership(TestCase):
    """Behavioral tests for inclusion and exclusion."""

    def testInclusion(self):
        rule = Inclusion("value", within=("checking", "savings"))
        self.assertEqual(messages(rule, "brokerage"), ("is not included in the list",))
        self.assertEqual(messages(rule, "savings"), ())

    def testInclusionAcceptsGenerators(self):
        rule = Inclusion("value", within=(n for n in range(3)))
        self.assertEqual(messages(rule, 2), ())
        self.assertEqual(messages(rule, 2), ())

    def testInclusionCallable(self):
        rule = Inclusion("value", within=lambda: {"a"})
        self.assertEqual(messages(rule, "b"), ("is not included in the list",))

    def testExclusion(self):
        rule = Exclusion("value", within=("admin", "root"))
        self.assertEqual(messages(rule, "root"), ("is reserved",))
        self.assertEqual(messages(rule, "guest"), ())


class TestFormatAndPredicate(TestCase):
    """Behavioral tests for format and validate."""

    def testFormatWith(self):
        rule = Format("value", **{"with": r"^\d{4}$"})
        self.assertEqual(messages(rule, "12a4"), ("is invalid",))
        self.assertEqual(messages(rule, "1234"), ())

    def testFormatWithout(self):
        rule = Format("value", without=re.compile(r"\s"))
        self.assertEqual(messages(rule, "a b"), ("is invalid",))

    def testFormatNeedsExactlyOnePattern(self):
        with self.assertRaises(InvalidSchemaError):
            Format("value")

    def testPredicate(self):
        rule = Predicate("value", **{"with": lambda value: value.startswith("ACC"), "message": "is not an account"})
        self.assertEqual(messages(rule, "XYZ"), ("is not an account",))
        self.assertEqual(messages(rule, "ACC-1"), ())


class TestObjectRules(TestCase):
    """Behavioral tests for callbacks and the conversion-error fold."""

    def testCallbackAddsErrors(self):
        command = target()
        Callback(lambda command: command.errors.add("object", "nope")).validate(command)
        self.assertEqual(command.errors["object"], ("nope",))

    def testConversionErrorsFolded(self):
        command = target()
        command.conversion_errors["amount"] = "number"
        ConversionErrors().validate(command)
        self.assertEqual(command.errors["amount"], ("is not a number",))

    def testConversionErrorsSuppressedByExistingError(self):
        command = target()
        command.conversion_errors["amount"] = "number"
        command.errors.add("amount", "can't be blank")
        ConversionErrors().validate(command)
        self.assertEqual(command.errors["amount"], ("can't be blank",))


class TestRulesFactory(TestCase):
    """Behavioral tests for rules()."""

    def testNormalizesShorthands(self):
        built = rules("value", {
            "presence": True,
            "inclusion": ["a", "b"],
            "format": r"\w+",
            "validate": callable,
            "length": {"maximum": 3},
        })
        self.assertEqual(
            [type(rule) for rule in built],
            [Presence, Inclusion, Format, Predicate, Length]
        )

    def testDisabledRulesSkipped(self):
        self.assertEqual(rules("value", {"presence": False, "numericality": None}), ())

    def testUnknownRule(self):
        with self.assertRaises(UnknownRuleError):
            rules("value", {"uniqueness": True})

    def testMalformedOptions(self):
        with self.assertRaises(InvalidSchemaError):
            rules("value", {"presence": "yes"})


if __name__ == "__main__":
    unittest.main()
