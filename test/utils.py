"""
Tests for the shared helpers.

This module verifies:
- Singleton identity, falsiness and union support of the Unset sentinel.
- coalesce() replacing only Unset.
- mirror() producing read-only properties.
- Flag token spelling with dash() and strip().
"""
import unittest
from unittest import TestCase

from optscan.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` sentinel and coalesce().
    """

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testUnionInIsinstance(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", str | Unset))
        self.assertFalse(isinstance(1, str | Unset))

    def testCannotSubclass(self):
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertIsNone(coalesce(Unset))


class MirrorTest(TestCase):
    """
    Test suite for mirror().
    """

    def testReadOnlyProperty(self):
        class Holder:
            value = mirror("value")

            def __init__(self):
                self._value = 3

        holder = Holder()
        self.assertEqual(holder.value, 3)
        with self.assertRaises(AttributeError):
            holder.value = 4

    def testRejectsNonString(self):
        with self.assertRaises(TypeError):
            mirror(1)


class FlagSpellingTest(TestCase):
    """
    Test suite for dash() and strip().
    """

    def testDash(self):
        self.assertEqual(dash("v"), "-v")
        self.assertEqual(dash("verbose"), "--verbose")
        self.assertEqual(dash("-name"), "-name")
        self.assertEqual(dash("--help"), "--help")

    def testDashRejectsBadInput(self):
        with self.assertRaises(ValueError):
            dash("")
        with self.assertRaises(TypeError):
            dash(None)

    def testStrip(self):
        self.assertEqual(strip("--verbose"), "verbose")
        self.assertEqual(strip("-v"), "v")
        self.assertEqual(strip("---x"), "-x")
        self.assertEqual(strip("-name"), "name")


if __name__ == "__main__":
    unittest.main()
