"""
Tests for the command layer.

- Category and Command construction, validation and copies.
- The command() factory and decorator forms.
- The execution wrapper and the Event reply helpers, through a real shell
  writing to an in-memory stream.
"""
import copy
import io
import unittest
from unittest import TestCase

from bosun import APOLOGY, Category, Command, Event, Flags, Shell, command, parse


def noop(event):
    """Does nothing."""


def make(**options):
    return Shell(stdin=io.StringIO(), stdout=io.StringIO(), **options)


def event_for(shell, item, line):
    return Event(item, shell, parse(line, item.flags, item.names))


class CategoryTest(TestCase):
    """Behavior of Category."""

    def testDefaults(self):
        category = Category()
        self.assertIsNone(category.name)
        self.assertFalse(category.hidden)

    def testEqualityAndReplace(self):
        self.assertEqual(Category("Internal"), Category("Internal"))
        self.assertNotEqual(Category("Internal"), Category("Internal", hidden=True))
        self.assertEqual(copy.replace(Category("Internal"), hidden=True), Category("Internal", hidden=True))
        self.assertEqual(copy.replace(Category(), name="Misc"), Category("Misc"))

    def testRejectsBadNames(self):
        with self.assertRaises(TypeError):
            Category(3)
        with self.assertRaises(ValueError):
            Category("  ")


class CommandTest(TestCase):
    """Behavior of Command and command()."""

    def testDefaultsFromHandler(self):
        item = Command(noop)
        self.assertEqual(item.name, "noop")
        self.assertEqual(item.aliases, ())
        self.assertEqual(item.flags, Flags())
        self.assertEqual(item.category, Category())
        self.assertEqual(item.descr, "Does nothing.")
        self.assertIsNone(item.usage)
        self.assertIs(item.handler, noop)

    def testNamesAndMatches(self):
        item = Command(noop, "exitf", aliases=("ef", "\\q"))
        self.assertEqual(item.names, ("exitf", "ef", "\\q"))
        self.assertTrue(item.matches("EXITF"))
        self.assertTrue(item.matches("\\Q"))
        self.assertFalse(item.matches("exit"))
        self.assertFalse(item.matches(None))

    def testStringCategory(self):
        self.assertEqual(Command(noop, category="Internal").category, Category("Internal"))

    def testValidation(self):
        with self.assertRaises(TypeError):
            Command("not callable")
        with self.assertRaises(ValueError):
            Command(noop, "has space")
        with self.assertRaises(ValueError):
            Command(noop, "exitf", aliases=("EXITF",))
        with self.assertRaises(ValueError):
            Command(noop, "exitf", aliases=("ef", "EF"))
        with self.assertRaises(TypeError):
            Command(noop, aliases="ef")
        with self.assertRaises(TypeError):
            Command(noop, flags=("-h",))
        with self.assertRaises(TypeError):
            Command(noop, category=1)

    def testReplace(self):
        item = Command(noop, "a", aliases=("b",), usage="[x]")
        replaced = copy.replace(item, name="c", descr=None)
        self.assertEqual(replaced.names, ("c", "b"))
        self.assertIsNone(replaced.descr)
        self.assertEqual(replaced.usage, "[x]")
        self.assertIsNot(replaced, item)

    def testFactoryForms(self):
        direct = command(noop, "direct")
        self.assertEqual(direct.name, "direct")

        @command
        def bare(event):
            pass

        @command(aliases=("dc",), usage="[value]")
        def decorated(event):
            pass

        self.assertEqual(bare.name, "bare")
        self.assertEqual(decorated.aliases, ("dc",))
        self.assertEqual(decorated.usage, "[value]")
        with self.assertRaises(TypeError):
            command(aliases=("x",))(3)

    def testExecuteReportsSuccess(self):
        seen = []
        item = Command(lambda event: seen.append(event.input.args), "collect")
        shell = make()
        self.assertTrue(item.execute(event_for(shell, item, "collect a b")))
        self.assertEqual(seen, ["a b"])

    def testExecuteRecoversFromFailures(self):
        def broken(event):
            raise RuntimeError("boom")

        item = Command(broken)
        shell = make(trace=False)
        with self.assertLogs("bosun.commands", level="ERROR"):
            self.assertFalse(item.execute(event_for(shell, item, "broken")))
        self.assertEqual(shell.stdout.getvalue(), APOLOGY + "\n")

    def testExecuteTracesWhenConfigured(self):
        def broken(event):
            raise RuntimeError("boom")

        item = Command(broken)
        shell = make(trace=True)
        with self.assertLogs("bosun.commands", level="ERROR"):
            item.execute(event_for(shell, item, "broken"))
        output = shell.stdout.getvalue()
        self.assertTrue(output.startswith(APOLOGY + "\n"))
        self.assertIn("RuntimeError", output)
        self.assertIn("boom", output)

    def testExecuteLogsTracebackOnlyAtDebug(self):
        def broken(event):
            raise RuntimeError("boom")

        item = Command(broken)
        shell = make(trace=False)
        with self.assertLogs("bosun.commands", level="DEBUG") as context:
            item.execute(event_for(shell, item, "broken"))
        error, debug = context.records
        self.assertEqual(error.levelname, "ERROR")
        self.assertIsNone(error.exc_info)
        self.assertIn("boom", error.getMessage())
        self.assertEqual(debug.levelname, "DEBUG")
        self.assertIs(debug.exc_info[0], RuntimeError)


class EventTest(TestCase):
    """Reply helpers of Event."""

    def setUp(self):
        self.shell = make()
        self.item = Command(noop, "cmd", flags=Flags(params=("-s",), placeholders=("[status]",)))

    def output(self):
        return self.shell.stdout.getvalue()

    def testReplies(self):
        event = event_for(self.shell, self.item, "cmd")
        event.reply("a")
        event.reply("b")
        event.replyln("c")
        event.replyln()
        event.debug("state")
        self.assertEqual(self.output(), "abc\n\n[DEBUG] state\n")

    def testRepliesAreVerbatim(self):
        event_for(self.shell, self.item, "cmd").replyln("[bold]x[/bold] :smile: 1.5")
        self.assertEqual(self.output(), "[bold]x[/bold] :smile: 1.5\n")

    def testReplyWithBorder(self):
        event = event_for(self.shell, self.item, "cmd")
        event.reply_with_border("hello")
        event.reply_with_border("hi", top="-", bottom="~", length=4, bottom_length=2)
        self.assertEqual(self.output(), "=====\nhello\n=====\n----\nhi\n~~\n")

    def testResolveParams(self):
        self.assertEqual(dict(event_for(self.shell, self.item, "cmd -s 3").resolve_params()), {"-s": "3"})
        self.assertIsNone(event_for(self.shell, self.item, "cmd -s").resolve_params())
        self.assertEqual(self.output(), "You must provide a [status] for the flag -s!\n")

    def testPrompt(self):
        shell = Shell(stdin=io.StringIO("answer\n"), stdout=io.StringIO())
        event = event_for(shell, self.item, "cmd")
        self.assertEqual(event.prompt("Name?"), "answer")
        self.assertTrue(shell.fired)
        self.assertEqual(shell.stdout.getvalue(), "Name?\n$ ")
        with self.assertRaises(EOFError):
            event.prompt()

    def testHandles(self):
        event = event_for(self.shell, self.item, "cmd")
        self.assertIs(event.shell, self.shell)
        self.assertIs(event.registry, self.shell.registry)
        self.assertIs(event.command, self.item)

    def testValidation(self):
        with self.assertRaises(TypeError):
            Event(noop, self.shell, parse("cmd", Flags(), ()))
        with self.assertRaises(TypeError):
            Event(self.item, self.shell, "cmd")


if __name__ == "__main__":
    unittest.main()
