"""
Utils module behavioral tests.

Scope
- Validate the Unset sentinel, rename() in both forms, mirror() properties
  and isrune() name checks.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from runeflag.utils import Unset, UnsetType, rename, mirror, isrune


class TestUnset(TestCase):

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")
        self.assertIsNot(Unset, None)

    def testSealed(self):
        with self.assertRaises(TypeError):
            type("Other", (UnsetType,), {})

    def testUnion(self):
        self.assertEqual(str | Unset, str | UnsetType)


class TestRename(TestCase):

    def testFunctionForm(self):
        function = rename(lambda: None, "named")
        self.assertEqual(function.__name__, "named")
        self.assertEqual(function.__qualname__, "named")

    def testDecoratorForm(self):
        @rename("other")
        def function():
            pass

        self.assertEqual(function.__name__, "other")

    def testArgumentChecks(self):
        with self.assertRaises(TypeError):
            rename(1, "x")
        with self.assertRaises(TypeError):
            rename(lambda: None, 1)
        with self.assertRaises(TypeError):
            rename(1)
        with self.assertRaises(TypeError):
            rename()


class TestMirror(TestCase):

    def testReadOnlyMirror(self):
        class Record:
            name = mirror("name")

            def __init__(self):
                self._name = "a"

        record = Record()
        self.assertEqual(record.name, "a")
        self.assertEqual(Record.name.fget.__name__, "name")
        with self.assertRaises(AttributeError):
            record.name = "b"

    def testRequiresString(self):
        with self.assertRaises(TypeError):
            mirror(None)


class TestIsRune(TestCase):

    def testAccepted(self):
        for name in ("a", "Z", "7", "é", "λ", "-", "\U0001F600"):
            self.assertTrue(isrune(name), repr(name))

    def testRejected(self):
        for name in ("", "ab", "\ud800", "\udfff", None, 97):
            self.assertFalse(isrune(name), repr(name))


if __name__ == "__main__":
    unittest.main()
