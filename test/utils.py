# python
"""
Utils module behavioral tests.

Scope
- Validate the Unset sentinel (singleton, falsey, repr, unions, non-subclassable).
- Validate coalesce, rename, mirror and blank.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from commandmodel.utils import Unset, UnsetType, coalesce, rename, mirror, blank


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalseyAndRepr(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testUnionInIsinstance(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", Unset | str))

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            class Other(UnsetType):
                pass


class TestHelpers(TestCase):
    """Behavioral tests for the helper functions."""

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertEqual(coalesce(0, "fallback"), 0)
        self.assertIsNone(coalesce(None, "fallback"))

    def testRename(self):
        @rename("renamed")
        def original():
            pass

        self.assertEqual(original.__name__, "renamed")
        with self.assertRaises(TypeError):
            rename(42, "name")

    def testMirrorDetachesContainers(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = [1, 2]

        holder = Holder()
        holder.items.append(3)
        self.assertEqual(holder.items, [1, 2])

    def testBlank(self):
        for value in (None, False, "", " \t", [], {}, set()):
            with self.subTest(value=value):
                self.assertTrue(blank(value))
        for value in (0, 0.0, "x", [0], object()):
            with self.subTest(value=value):
                self.assertFalse(blank(value))


if __name__ == "__main__":
    unittest.main()
