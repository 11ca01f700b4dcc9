"""
FlagSet behavioral tests.

Scope
- Validate parsing through the public FlagSet API: typed definitions,
  positionals, help/version, string input split with shlex.
- Validate failure reporting: one diagnostic line then the usage text, then
  the error-handling mode (raise, exit, abort).
- Validate definitions: duplicate names, late definitions, custom values.

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured with a colorless rich Console writing to a StringIO.
"""

from __future__ import annotations

import io
import sys
import unittest
from datetime import timedelta
from unittest import TestCase, mock

from rich.console import Console

from runeflag import (
    FlagSet,
    commandline,
    ErrorHandling,
    Outcome,
    Flag,
    Value,
    ValueSyntaxError,
    UnknownFlagError,
    MissingArgumentError,
    InvalidValueError,
    DuplicateFlagError,
    ConsumerContractError,
    ParseAbort,
    LateDefinitionWarning,
)


def capture():
    buffer = io.StringIO()
    return buffer, Console(file=buffer, color_system=None, width=200)


class ListValue(Value):
    """collects every occurrence; renders comma separated."""
    typename = "item"

    def __init__(self):
        self.items = []

    def render(self):
        return ",".join(self.items)

    def assign(self, text, /):
        self.items.append(text)

    def get(self):
        return list(self.items)


class TestParsing(TestCase):

    def setUp(self):
        self.buffer, console = capture()
        self.flags = FlagSet("tool", output=console)
        self.a = self.flags.boolean("a", False, "aaa")
        self.c = self.flags.integer("c", 2, "aaccaccaaccaca")

    def testSwitchAndValue(self):
        self.assertIs(self.flags.parse(["-ac", "73"]), Outcome.SUCCESS)
        self.assertIs(self.a.get(), True)
        self.assertEqual(self.c.get(), 73)
        self.assertEqual(self.flags.args, ())
        self.assertEqual(self.flags.nargs, 0)
        self.assertEqual(self.buffer.getvalue(), "")

    def testPositionals(self):
        self.flags.parse(["-c=5", "x", "y"])
        self.assertEqual(self.c.get(), 5)
        self.assertEqual(self.flags.args, ("x", "y"))
        self.assertEqual(self.flags.nargs, 2)
        self.assertEqual(self.flags.arg(1), "y")
        self.assertEqual(self.flags.arg(2), "")
        self.assertEqual(self.flags.arg(-1), "")

    def testReadsAreIdempotent(self):
        self.flags.parse(["-a", "x"])
        self.assertEqual(self.flags.arg(0), self.flags.arg(0))
        self.assertEqual(self.flags.formal, self.flags.formal)
        self.assertEqual(self.flags.actual, self.flags.actual)
        self.assertEqual(self.flags.args, ("x",))

    def testActualAndVisit(self):
        self.flags.parse(["-c", "1", "-a"])
        seen, every = [], []
        self.flags.visit(lambda flag: seen.append(flag.name))
        self.flags.visit_all(lambda flag: every.append(flag.name))
        self.assertEqual(seen, ["a", "c"])
        self.assertEqual(every, ["a", "c"])
        self.assertEqual(self.flags.nflags, 2)

    def testReparseResetsActual(self):
        self.flags.parse(["-a"])
        self.assertEqual(self.flags.nflags, 1)
        self.flags.parse(["rest"])
        self.assertEqual(self.flags.actual, ())
        self.assertEqual(self.flags.args, ("rest",))

    def testStringInputIsSplit(self):
        name = self.flags.string("n", "", "who")
        self.flags.parse('-n "hello world" -- -a')
        self.assertEqual(name.get(), "hello world")
        self.assertEqual(self.flags.args, ("-a",))
        self.assertIs(self.a.get(), False)

    def testGeneratorInput(self):
        self.flags.parse(token for token in ("-c", "4"))
        self.assertEqual(self.c.get(), 4)

    def testRejectsNonStringArguments(self):
        for arguments in (5, None, ["-a", 3]):
            with self.assertRaises(TypeError):
                self.flags.parse(arguments)

    def testTypedDefinitions(self):
        unsigned = self.flags.unsigned("u", 1, "")
        floating = self.flags.floating("f", 0.5, "")
        duration = self.flags.duration("d", timedelta(seconds=1), "")
        self.flags.parse(["-u", "0x10", "-f", "2.5", "-d", "1h30m"])
        self.assertEqual(unsigned.get(), 16)
        self.assertEqual(floating.get(), 2.5)
        self.assertEqual(duration.get(), timedelta(minutes=90))

    def testSet(self):
        self.flags.set("c", "5")
        self.assertEqual(self.c.get(), 5)
        self.assertEqual([flag.name for flag in self.flags.actual], ["c"])
        with self.assertRaises(UnknownFlagError) as context:
            self.flags.set("z", "1")
        self.assertEqual(context.exception.message, "no such flag -z")
        with self.assertRaises(ValueSyntaxError):
            self.flags.set("c", "x")

    def testLookup(self):
        self.assertIsInstance(self.flags.lookup("a"), Flag)
        self.assertIsNone(self.flags.lookup("z"))

    def testParsedFlag(self):
        self.assertFalse(self.flags.parsed)
        self.flags.parse([])
        self.assertTrue(self.flags.parsed)


class TestFailures(TestCase):

    def setUp(self):
        self.buffer, self.console = capture()

    def build(self, mode=ErrorHandling.RETURN, name="", **options):
        flags = FlagSet(name, mode, output=self.console, **options)
        self.a = flags.boolean("a", False, "aaa")
        self.c = flags.integer("c", 2, "aaccaccaaccaca")
        return flags

    def testUnknownFlagReportsThenRaises(self):
        flags = self.build()
        with self.assertRaises(UnknownFlagError) as context:
            flags.parse(["-ac", "73", "-b", "--help", "b"])
        self.assertEqual(context.exception.name, "b")
        self.assertIs(self.a.get(), True)
        self.assertEqual(self.c.get(), 73)
        self.assertEqual(flags.args, ("-b", "--help", "b"))
        self.assertTrue(flags.parsed)

        output = self.buffer.getvalue()
        self.assertTrue(output.startswith("flag provided but not defined: -b\n"))
        self.assertIn("Usage:", output)
        self.assertIn("-c int", output)
        self.assertIn("aaccaccaaccaca (default 2)", output)
        self.assertLess(output.index("-b"), output.index("Usage:"))

    def testExitMode(self):
        flags = self.build(ErrorHandling.EXIT, "tool")
        with self.assertRaises(SystemExit) as context:
            flags.parse(["-ac", "73", "-b", "--help", "b"])
        self.assertEqual(context.exception.code, 2)
        self.assertIn("Usage of tool:", self.buffer.getvalue())

    def testAbortMode(self):
        flags = self.build(ErrorHandling.ABORT)
        with self.assertRaises(ParseAbort) as context:
            flags.parse(["-c"])
        self.assertIsInstance(context.exception.fault, MissingArgumentError)
        self.assertIs(context.exception.__cause__, context.exception.fault)
        self.assertNotIsInstance(context.exception, MissingArgumentError)
        self.assertIn("flag needs an argument: -c", self.buffer.getvalue())

    def testInvalidValueKeepsCause(self):
        flags = self.build()
        with self.assertRaises(InvalidValueError) as context:
            flags.parse(["-c", "nope"])
        fault = context.exception
        self.assertIsInstance(fault.cause, ValueSyntaxError)
        self.assertIs(fault.__cause__, fault.cause)
        self.assertEqual(fault.text, "nope")
        self.assertIn("invalid value 'nope' for flag -c: parse error", self.buffer.getvalue())

    def testUsageHookReplacesDefault(self):
        calls = []
        flags = self.build(usage=lambda: calls.append("usage"))
        with self.assertRaises(UnknownFlagError):
            flags.parse(["-z"])
        self.assertEqual(calls, ["usage"])
        self.assertNotIn("Usage", self.buffer.getvalue())

    def testConsumerContractIsReported(self):
        flags = self.build(consumer=lambda remaining: -1)
        with self.assertRaises(ConsumerContractError):
            flags.parse(["-a"])
        self.assertIn("bad token consumer", self.buffer.getvalue())

    def testConsumerFaultIsReported(self):
        def consumer(remaining):
            if remaining[0].startswith("+"):
                raise UnknownFlagError("flag provided but not defined: %s" % remaining[0], name=remaining[0][1:])
            return 0

        flags = self.build(consumer=consumer)
        with self.assertRaises(UnknownFlagError):
            flags.parse(["-a", "+q"])
        self.assertIn("flag provided but not defined: +q", self.buffer.getvalue())
        self.assertEqual(flags.args, ("+q",))

    def testConsumerDropsTokens(self):
        seen = []

        def consumer(remaining):
            if remaining[0].startswith("+"):
                seen.append(remaining[0])
                return 1
            return 0

        flags = self.build(consumer=consumer)
        flags.parse(["+x", "-a", "+y", "tail"])
        self.assertEqual(seen, ["+x", "+y"])
        self.assertEqual(flags.args, ("tail",))


class TestHelp(TestCase):

    def setUp(self):
        self.buffer, self.console = capture()

    def testHelpReturnsOutcome(self):
        flags = FlagSet("tool", output=self.console)
        flags.boolean("a", False, "aaa")
        self.assertIs(flags.parse(["--help"]), Outcome.HELP)
        self.assertIn("Usage of tool:", self.buffer.getvalue())

    def testHelpInAbortModeIsNotAFailure(self):
        flags = FlagSet("tool", ErrorHandling.ABORT, output=self.console)
        self.assertIs(flags.parse(["--help"]), Outcome.HELP)

    def testHelpExitsCleanly(self):
        flags = FlagSet("tool", ErrorHandling.EXIT, output=self.console)
        with self.assertRaises(SystemExit) as context:
            flags.parse(["--help"])
        self.assertEqual(context.exception.code, 0)

    def testVersionHook(self):
        calls = []
        flags = FlagSet("tool", output=self.console, version=lambda: calls.append("1.0"))
        self.assertIs(flags.parse(["--version", "x"]), Outcome.HELP)
        self.assertEqual(calls, ["1.0"])
        self.assertEqual(self.buffer.getvalue(), "")

    def testNoHelp(self):
        flags = FlagSet("tool", output=self.console, nohelp=True)
        with self.assertRaises(UnknownFlagError):
            flags.parse(["--help"])
        self.assertIn("flag provided but not defined: --", self.buffer.getvalue())


class TestDefinitions(TestCase):

    def setUp(self):
        self.buffer, self.console = capture()

    def testDuplicateIsImmediate(self):
        flags = FlagSet("", output=self.console)
        flags.boolean("a")
        with self.assertRaises(DuplicateFlagError) as context:
            flags.integer("a", 1, "again")
        self.assertEqual(context.exception.message, "flag redefined: a")
        self.assertEqual(self.buffer.getvalue(), "flag redefined: a\n")

    def testDuplicateNamesTheSet(self):
        flags = FlagSet("tool", output=self.console)
        flags.boolean("a")
        with self.assertRaises(DuplicateFlagError) as context:
            flags.boolean("a")
        self.assertEqual(context.exception.message, "tool flag redefined: a")
        self.assertEqual(context.exception.name, "a")

    def testDuplicateIgnoresMode(self):
        for mode in ErrorHandling:
            flags = FlagSet("tool", mode, output=self.console)
            flags.string("o")
            with self.assertRaises(DuplicateFlagError):
                flags.string("o")

    def testLateDefinitionWarns(self):
        flags = FlagSet("tool", output=self.console)
        flags.parse([])
        with self.assertWarns(LateDefinitionWarning) as context:
            flags.boolean("q")
        self.assertEqual(context.warning.name, "q")
        self.assertIsNotNone(flags.lookup("q"))

    def testCustomValue(self):
        flags = FlagSet("tool", output=self.console)
        items = ListValue()
        flag = flags.var(items, "i", "an `entry` to add")
        self.assertEqual(flag.default, "")
        flags.parse(["-i", "x", "-i=y", "z"])
        self.assertEqual(items.get(), ["x", "y"])
        self.assertEqual(flags.args, ("z",))
        flags.print_defaults()
        self.assertIn("-i entry", self.buffer.getvalue())

    def testInvalidNames(self):
        flags = FlagSet(output=self.console)
        with self.assertRaises(ValueError):
            flags.boolean("ab")


class TestConfiguration(TestCase):

    def testOutputDefaultsToStderrConsole(self):
        flags = FlagSet()
        self.assertIsInstance(flags.output, Console)
        self.assertTrue(flags.output.stderr)

    def testOutputAcceptsStreams(self):
        buffer = io.StringIO()
        flags = FlagSet(output=buffer)
        self.assertIsInstance(flags.output, Console)
        flags.boolean("a", False, "aaa")
        flags.print_defaults()
        self.assertIn("-a", buffer.getvalue())

    def testOutputRejectsOtherObjects(self):
        with self.assertRaises(TypeError):
            FlagSet(output=object())

    def testInit(self):
        flags = FlagSet()
        flags.init("other", ErrorHandling.ABORT)
        self.assertEqual(flags.name, "other")
        self.assertIs(flags.mode, ErrorHandling.ABORT)
        with self.assertRaises(ValueError):
            flags.init("other", 7)
        with self.assertRaises(TypeError):
            flags.init(None, ErrorHandling.RETURN)

    def testRepr(self):
        flags = FlagSet("tool")
        flags.boolean("a")
        self.assertEqual(repr(flags), "FlagSet(name='tool', mode=RETURN, flags=1, parsed=False)")

    def testCommandline(self):
        with mock.patch.object(sys, "argv", ["/usr/local/bin/tool", "-a"]):
            flags = commandline()
        self.assertEqual(flags.name, "tool")
        self.assertIs(flags.mode, ErrorHandling.EXIT)
        self.assertFalse(flags.parsed)
        self.assertEqual(flags.args, ())

    def testCommandlineOptions(self):
        buffer, console = capture()
        with mock.patch.object(sys, "argv", []):
            flags = commandline(ErrorHandling.RETURN, output=console)
        self.assertEqual(flags.name, "")
        self.assertIs(flags.output, console)


if __name__ == "__main__":
    unittest.main()
