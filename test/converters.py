"""
Converter tests (built-in converters and the immutable registry).

Scope
- Validate each built-in converter on good and bad input.
- Validate registry construction, extension and duplicate rejection.

Conventions
- Test method names follow CamelCase per project convention.
"""
import decimal
import pathlib
import unittest
from unittest import TestCase

from conductor import (
    to_string,
    to_integer,
    to_float,
    to_boolean,
    to_decimal,
    to_path,
    ConverterRegistry,
    DEFAULTS,
    ConversionError,
    DuplicateConverterError,
    FaultCode,
)


class TestBuiltinConverters(TestCase):
    """String to value conversions."""

    def testString(self):
        self.assertEqual(to_string("as is"), "as is")

    def testInteger(self):
        self.assertEqual(to_integer("42"), 42)
        self.assertEqual(to_integer("-7"), -7)
        with self.assertRaises(ConversionError) as context:
            to_integer("4x2")
        self.assertEqual(context.exception.value, "4x2")
        self.assertEqual(context.exception.code, FaultCode.UNCONVERTIBLE_VALUE)

    def testFloat(self):
        self.assertEqual(to_float("2.5"), 2.5)
        with self.assertRaises(ConversionError):
            to_float("two")

    def testBooleanIsStrict(self):
        self.assertIs(to_boolean("true"), True)
        self.assertIs(to_boolean("false"), False)
        for text in ("True", "yes", "1", ""):
            with self.subTest(text=text):
                with self.assertRaises(ConversionError):
                    to_boolean(text)

    def testDecimal(self):
        self.assertEqual(to_decimal("1.10"), decimal.Decimal("1.10"))
        with self.assertRaises(ConversionError):
            to_decimal("one")

    def testPath(self):
        self.assertEqual(to_path("a/b.txt"), pathlib.Path("a/b.txt"))
        with self.assertRaises(ConversionError):
            to_path("")
        with self.assertRaises(ConversionError):
            to_path("a\0b")


class TestConverterRegistry(TestCase):
    """Registry behavior."""

    def testDefaults(self):
        self.assertIs(DEFAULTS[int], to_integer)
        self.assertIs(DEFAULTS[bool], to_boolean)
        self.assertEqual(set(DEFAULTS), {str, int, float, bool, decimal.Decimal, pathlib.Path})

    def testFromPairsAndMapping(self):
        self.assertIs(ConverterRegistry([(int, to_integer)])[int], to_integer)
        self.assertIs(ConverterRegistry({int: to_integer})[int], to_integer)
        self.assertEqual(len(ConverterRegistry()), 0)

    def testExtendReturnsNewRegistry(self):
        extended = DEFAULTS.extend({complex: complex})
        self.assertIs(extended[complex], complex)
        self.assertNotIn(complex, DEFAULTS)
        self.assertIs(extended[int], to_integer)

    def testDuplicateRaises(self):
        with self.assertRaises(DuplicateConverterError) as context:
            DEFAULTS.extend({int: int})
        self.assertIs(context.exception.name, int)
        self.assertEqual(context.exception.message, "converter for int is already registered")
        with self.assertRaises(DuplicateConverterError):
            ConverterRegistry([(int, int), (int, to_integer)])

    def testNonCallableRaises(self):
        with self.assertRaises(TypeError):
            ConverterRegistry({int: "nope"})

    def testImmutable(self):
        with self.assertRaises(TypeError):
            DEFAULTS[int] = int  # type: ignore[index]


if __name__ == "__main__":
    unittest.main()
