"""
Invocation module behavioral tests (token sources, filtering, positional lookup).

Scope
- Validate the three prompt sources (live argv, shell-like string, iterable).
- Validate filtering of dashes-prefixed tokens, the separator and the help keyword.
- Validate positional() bounds and argument checking.

Conventions
- Test method names follow CamelCase per project convention.
- The live sys.argv is always patched, never read as-is.
"""

from __future__ import annotations

import sys
import unittest
from unittest import TestCase, mock

from beetroot import Invocation


class TestSources(TestCase):
    """Behavioral tests for the accepted prompt sources."""

    def testStringIsShellSplit(self):
        invocation = Invocation("greet 'Jane Doe' now")
        self.assertEqual(invocation.argv, ("greet", "Jane Doe", "now"))
        self.assertFalse(invocation.live)

    def testIterableIsTrimmed(self):
        invocation = Invocation([" migrate ", "rollback", "  ", "3"])
        self.assertEqual(invocation.argv, ("migrate", "rollback", "3"))

    def testIterableIsSnapshotted(self):
        values = ["migrate", "run"]
        invocation = Invocation(values)
        values.append("extra")
        self.assertEqual(invocation.tokens, ("migrate", "run"))

    def testNonStringItemsRejected(self):
        with self.assertRaises(TypeError):
            Invocation(["migrate", 1])

    def testUnsupportedPromptRejected(self):
        with self.assertRaises(TypeError):
            Invocation(42)

    def testLiveArgvDropsProgram(self):
        with mock.patch.object(sys, "argv", ["artisan", "migrate", "rollback"]):
            invocation = Invocation()
            self.assertTrue(invocation.live)
            self.assertEqual(invocation.argv, ("migrate", "rollback"))

    def testUnclosedQuoteRaisesOnConstruction(self):
        with self.assertRaises(ValueError):
            Invocation("greet 'Jane")

    def testLiveArgvIsTrimmedLikeIterables(self):
        with mock.patch.object(sys, "argv", ["artisan", " migrate ", "", "  ", "rollback "]):
            self.assertEqual(Invocation().argv, ("migrate", "rollback"))
            self.assertEqual(Invocation().argv, Invocation([" migrate ", "", "  ", "rollback "]).argv)

    def testLiveArgvIsReadOnEveryAccess(self):
        invocation = Invocation()
        with mock.patch.object(sys, "argv", ["artisan", "migrate", "run"]):
            self.assertEqual(invocation.positional(1), "run")
        with mock.patch.object(sys, "argv", ["artisan", "migrate", "rollback"]):
            self.assertEqual(invocation.positional(1), "rollback")


class TestFiltering(TestCase):
    """Behavioral tests for positional token filtering."""

    def testFlagsAndOptionsDropped(self):
        invocation = Invocation("migrate --force rollback -v --step=2 5")
        self.assertEqual(invocation.tokens, ("migrate", "rollback", "5"))

    def testSeparatorDropped(self):
        self.assertEqual(Invocation("migrate -- rollback").tokens, ("migrate", "rollback"))

    def testHelpKeywordDropped(self):
        self.assertEqual(Invocation("help migrate rollback").tokens, ("migrate", "rollback"))

    def testCustomKeywords(self):
        invocation = Invocation("migrate :: aide rollback", separator="::", helper="aide")
        self.assertEqual(invocation.tokens, ("migrate", "rollback"))

    def testArgvKeepsEverything(self):
        self.assertEqual(Invocation("migrate --force help").argv, ("migrate", "--force", "help"))


class TestPositional(TestCase):
    """Behavioral tests for positional() lookups."""

    def testCommandNameAtSlotZero(self):
        self.assertEqual(Invocation("migrate rollback").positional(0), "migrate")

    def testSlotWithValue(self):
        self.assertEqual(Invocation("migrate --force rollback").positional(1), "rollback")

    def testSlotBeyondInvocation(self):
        self.assertIsNone(Invocation("migrate").positional(1))

    def testEmptyInvocation(self):
        self.assertIsNone(Invocation("").positional(0))

    def testNegativeSlotRejected(self):
        with self.assertRaises(ValueError):
            Invocation("migrate").positional(-1)

    def testNonIntegerSlotRejected(self):
        with self.assertRaises(TypeError):
            Invocation("migrate").positional("1")
        with self.assertRaises(TypeError):
            Invocation("migrate").positional(True)

    def testRepr(self):
        self.assertEqual(repr(Invocation(["migrate"])), "invocation(('migrate',))")
        self.assertEqual(repr(Invocation()), "invocation(live)")


if __name__ == "__main__":
    unittest.main()
