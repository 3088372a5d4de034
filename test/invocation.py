"""
Invocation parser tests (classification and leading-token layout).

Scope
- Validate argument/option/flag classification and its policies.
- Validate the environment/command-path layout and the arity fault.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from conductor import classify, parse, Residue, Invocation, InvocationFormatError, FaultCode


class TestClassify(TestCase):
    """Token classification."""

    def testClassifiesInterleavedTokens(self):
        residue = classify(["a", "--key=value", "--verbose", "b"])
        self.assertIsInstance(residue, Residue)
        self.assertEqual(residue.arguments, ("a", "b"))
        self.assertEqual(dict(residue.options), {"key": "value"})
        self.assertEqual(residue.flags, frozenset({"verbose"}))

    def testOptionSplitsOnFirstEquals(self):
        residue = classify(["--filter=a=b=c"])
        self.assertEqual(residue.options["filter"], "a=b=c")

    def testEmptyOptionValue(self):
        self.assertEqual(classify(["--name="]).options["name"], "")

    def testLastOptionWins(self):
        self.assertEqual(classify(["--level=1", "--level=2"]).options["level"], "2")

    def testRepeatedFlagsCollapse(self):
        self.assertEqual(classify(["--force", "--force"]).flags, frozenset({"force"}))

    def testSingleDashIsPositional(self):
        self.assertEqual(classify(["-v", "-"]).arguments, ("-v", "-"))

    def testOptionsAreReadOnly(self):
        residue = classify(["--key=value"])
        with self.assertRaises(TypeError):
            residue.options["key"] = "other"  # type: ignore[index]


class TestParse(TestCase):
    """Leading tokens and arity."""

    def testEnvironmentAndPath(self):
        invocation = parse(["git", "remote", "add", "origin", "--fetch"], depth=2)
        self.assertIsInstance(invocation, Invocation)
        self.assertEqual(invocation.environment, "git")
        self.assertEqual(invocation.path, ("remote", "add"))
        self.assertEqual(invocation.command, "add")
        self.assertEqual(invocation.arguments, ("origin",))
        self.assertEqual(invocation.flags, frozenset({"fetch"}))

    def testPathTokensAreVerbatim(self):
        invocation = parse(["env", "--odd", "x"])
        self.assertEqual(invocation.path, ("--odd",))
        self.assertEqual(invocation.arguments, ("x",))

    def testWithoutEnvironment(self):
        invocation = parse(["start", "80"], environment=False)
        self.assertEqual(invocation.environment, "")
        self.assertEqual(invocation.command, "start")
        self.assertEqual(invocation.arguments, ("80",))

    def testTooFewTokensRaises(self):
        with self.assertRaises(InvocationFormatError) as context:
            parse(["git"])
        self.assertEqual(context.exception.minimum, 2)
        self.assertEqual(context.exception.actual, 1)
        self.assertEqual(context.exception.code, FaultCode.MALFORMED_INVOCATION)

        with self.assertRaises(InvocationFormatError):
            parse(["git", "remote"], depth=2)

    def testNonPositiveDepthIsProgrammingError(self):
        with self.assertRaises(ValueError):
            parse(["git", "status"], depth=0)


if __name__ == "__main__":
    unittest.main()
