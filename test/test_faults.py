"""
Tests for faults: codes, rendering and trigger().
"""
import copy
import io
import unittest
from unittest import TestCase

from rich.console import Console

from bosun.faults import *


def console():
    return Console(file=io.StringIO(), width=100, highlight=False, markup=False, emoji=False)


class FaultCodeTest(TestCase):
    """Stable identifiers."""

    def testValuesAreUnique(self):
        self.assertEqual(len({code.value for code in FaultCode}), len(FaultCode))

    def testNormalize(self):
        self.assertEqual(FaultCode.UNKNOWN_COMMAND.normalize(), "11101")


class TriggerTest(TestCase):
    """trigger() outside and inside shell mode."""

    def testRaisesOutsideShell(self):
        with self.assertRaises(UnknownCommandError) as context:
            trigger(UnknownCommandError("no such command", code=FaultCode.UNKNOWN_COMMAND))
        self.assertEqual(str(context.exception), "no such command")
        self.assertIs(context.exception.options["code"], FaultCode.UNKNOWN_COMMAND)

    def testWarnsOutsideShell(self):
        with self.assertWarns(ShadowedCommandWarning):
            trigger(ShadowedCommandWarning("shadowed"))

    def testPrintsPlainInShell(self):
        target = console()
        trigger(HandlerError("Sorry!"), shell=True, console=target)
        trigger(ShadowedCommandWarning("careful"), shell=True, console=target)
        self.assertEqual(target.file.getvalue(), "Sorry!\ncareful\n")

    def testPrintsPanelWhenFancy(self):
        target = console()
        trigger(
            MissingParameterError("flag '-s' needs a value", code=FaultCode.MISSING_PARAMETER, title="missing", hint="add it"),
            shell=True,
            console=target,
            fancy=True,
        )
        output = target.file.getvalue()
        self.assertIn("11111", output)
        self.assertIn("Missing", output)
        self.assertIn("flag '-s' needs a value", output)
        self.assertIn("add it", output)

    def testTraceAppendsTraceback(self):
        try:
            raise KeyError("lost")
        except KeyError as error:
            exception = error
        target = console()
        trigger(HandlerError("Sorry!", exception=exception), shell=True, console=target, trace=True)
        output = target.file.getvalue()
        self.assertTrue(output.startswith("Sorry!\n"))
        self.assertIn("KeyError", output)

    def testRejectsNonFaults(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))

    def testReplaceMergesOptions(self):
        fault = DuplicateCommandError("dup", code=FaultCode.DUPLICATE_COMMAND)
        replaced = copy.replace(fault, shell=True)
        self.assertEqual(replaced.message, "dup")
        self.assertEqual(dict(replaced.options), {"code": FaultCode.DUPLICATE_COMMAND, "shell": True})
        self.assertNotIn("shell", fault.options)


if __name__ == "__main__":
    unittest.main()
