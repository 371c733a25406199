"""
Tests for flag declarations.

- Construction, defaults and validation of switches/params/placeholders.
- Lookup helpers (known, match, placeholder, membership).
- Immutability and copy.replace().
"""
import copy
import unittest
from unittest import TestCase

from bosun import Flags


class FlagsTest(TestCase):
    """Behavior of Flags."""

    def testEmpty(self):
        flags = Flags()
        self.assertEqual(flags.switches, ())
        self.assertEqual(flags.params, ())
        self.assertEqual(flags.placeholders, ())
        self.assertFalse(flags)

    def testPairsParamsWithPlaceholders(self):
        flags = Flags("-h", params=("-s", "-n"), placeholders=("[status]", "[name]"))
        self.assertEqual(flags.switches, ("-h",))
        self.assertEqual(dict(flags.match()), {"-s": "[status]", "-n": "[name]"})
        self.assertEqual(flags.placeholder("-n"), "[name]")
        self.assertEqual(flags.known, {"-h", "-s", "-n"})
        self.assertIn("-s", flags)
        self.assertNotIn("-x", flags)

    def testDefaultPlaceholders(self):
        self.assertEqual(Flags(params=("-a", "-b")).placeholders, ("[value]", "[value]"))

    def testPlaceholderOfUnknownFlag(self):
        with self.assertRaises(KeyError):
            Flags("-h").placeholder("-h")

    def testPlaceholderCountMustMatch(self):
        with self.assertRaises(ValueError):
            Flags(params=("-s",), placeholders=())
        with self.assertRaises(ValueError):
            Flags(params=("-s",), placeholders=("[a]", "[b]"))

    def testRejectsOverlapAndDuplicates(self):
        with self.assertRaises(ValueError):
            Flags("-s", params=("-s",))
        with self.assertRaises(ValueError):
            Flags("-h", "-h")
        with self.assertRaises(ValueError):
            Flags(params=("-s", "-s"))

    def testRejectsBadTokens(self):
        with self.assertRaises(ValueError):
            Flags("")
        with self.assertRaises(ValueError):
            Flags("-a b")
        with self.assertRaises(TypeError):
            Flags(3)
        with self.assertRaises(TypeError):
            Flags(params="-s")

    def testMatchIsReadOnly(self):
        flags = Flags(params=("-s",))
        with self.assertRaises(TypeError):
            flags.match()["-s"] = "[other]"

    def testImmutable(self):
        flags = Flags("-h")
        with self.assertRaises(AttributeError):
            flags.switches = ("-x",)

    def testEqualityAndHash(self):
        self.assertEqual(Flags("-h", params=("-s",)), Flags("-h", params=("-s",)))
        self.assertNotEqual(Flags("-h"), Flags("-x"))
        self.assertEqual(len({Flags("-h"), Flags("-h")}), 1)

    def testReplace(self):
        flags = Flags("-h", params=("-s",), placeholders=("[status]",))
        self.assertEqual(copy.replace(flags, switches=("-v",)).placeholders, ("[status]",))
        replaced = copy.replace(flags, params=("-n", "-m"))
        self.assertEqual(replaced.placeholders, ("[value]", "[value]"))
        self.assertEqual(replaced.switches, ("-h",))

    def testRepr(self):
        self.assertEqual(
            repr(Flags("-h", params=("-s",), placeholders=("[status]",))),
            "flags(switches=('-h',), params=('-s',), placeholders=('[status]',))",
        )


if __name__ == "__main__":
    unittest.main()
