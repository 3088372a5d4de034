"""
Faults module tests (payloads, codes, options, rendering).

Scope
- Validate the structured payload contract of CommandException.
- Validate __replace__ and trigger() semantics (raise vs print vs exit).
- Validate rich rendering and the report() fallback.

Conventions
- Test method names follow CamelCase per project convention.
- Console output is captured by patching the module console.
"""
import io
import unittest
from unittest import TestCase, mock

from rich.console import Console

from conductor import faults
from conductor.faults import (
    CommandException,
    CommandNotFoundError,
    ArgCountError,
    DuplicateNameError,
    DuplicateFlagError,
    EnvironmentNotFoundError,
    FaultCode,
    trigger,
    report,
)


def capture():
    return Console(file=io.StringIO(), width=120, color_system=None)


class TestPayload(TestCase):
    """Structured payloads."""

    def testPositionalAndKeywordPayload(self):
        positional = ArgCountError("add", 2, 1)
        keyword = ArgCountError(command="add", expected=2, actual=1)
        self.assertEqual(dict(positional.payload), dict(keyword.payload))
        self.assertEqual(positional.expected, 2)
        self.assertEqual(positional.message, "'add' takes 2 positional arguments, got 1")

    def testSingularMessage(self):
        self.assertEqual(ArgCountError("rm", 1, 0).message, "'rm' takes 1 positional argument, got 0")

    def testMissingPayloadRaises(self):
        with self.assertRaises(TypeError):
            ArgCountError("add", 2)
        with self.assertRaises(TypeError):
            CommandNotFoundError()

    def testTooManyPayloadValuesRaises(self):
        with self.assertRaises(TypeError):
            DuplicateNameError("a", "b")

    def testSuggestionsDefaultToEmpty(self):
        self.assertEqual(CommandNotFoundError("x").suggestions, ())
        self.assertEqual(EnvironmentNotFoundError("x").suggestions, ())

    def testCodesAndTitles(self):
        fault = DuplicateFlagError("force")
        self.assertIsInstance(fault, DuplicateNameError)
        self.assertIsInstance(fault, CommandException)
        self.assertEqual(fault.code, FaultCode.DUPLICATE_NAME)
        self.assertEqual(fault.message, "flag 'force' is already registered")
        self.assertEqual(str(fault), fault.message)

    def testNormalizeWithoutHostMapping(self):
        self.assertEqual(FaultCode.UNKNOWN_COMMAND.normalize(), "11202")


class TestTrigger(TestCase):
    """Surfacing faults."""

    def testReplaceKeepsPayloadAndMergesOptions(self):
        fault = CommandNotFoundError("stat", ("status",), fancy=True)
        replaced = fault.__replace__(shell=True)
        self.assertIsNot(replaced, fault)
        self.assertEqual(dict(replaced.payload), dict(fault.payload))
        self.assertEqual(dict(replaced.options), {"fancy": True, "shell": True})

    def testRaisesOutsideShell(self):
        with self.assertRaises(CommandNotFoundError):
            trigger(CommandNotFoundError("stat"))

    def testShellPrintsAndExits(self):
        console = capture()
        with mock.patch.object(faults, "console", console):
            with self.assertRaises(SystemExit) as context:
                trigger(CommandNotFoundError("stat", ("status",)), shell=True)
        self.assertEqual(context.exception.code, 1)
        output = console.file.getvalue()
        self.assertIn("11202", output)
        self.assertIn("Unknown Command", output)
        self.assertIn("no command named 'stat'", output)
        self.assertIn("did you mean 'status'?", output)

    def testDeferredShellOnlyPrints(self):
        console = capture()
        with mock.patch.object(faults, "console", console):
            trigger(CommandNotFoundError("stat"), shell=True, deferred=True, fancy=True)
        self.assertIn("no command named 'stat'", console.file.getvalue())

    def testRejectsNonTriggerable(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))


class TestReport(TestCase):
    """Default fallback."""

    def testReportsCommandExceptionWithoutExiting(self):
        console = capture()
        with mock.patch.object(faults, "console", console):
            report(CommandNotFoundError("stat"))
        self.assertIn("Unknown Command", console.file.getvalue())

    def testReportsOtherExceptionsWithTraceback(self):
        console = capture()
        try:
            raise ValueError("disk full")
        except ValueError as exception:
            with mock.patch.object(faults, "console", console):
                report(exception)
        output = console.file.getvalue()
        self.assertIn("ValueError", output)
        self.assertIn("disk full", output)

    def testReportsExceptionWithoutTraceback(self):
        console = capture()
        with mock.patch.object(faults, "console", console):
            report(RuntimeError("never raised"))
        self.assertIn("RuntimeError: never raised", console.file.getvalue())


if __name__ == "__main__":
    unittest.main()
