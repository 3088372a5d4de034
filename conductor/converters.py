"""
Conductor converters: turn raw string tokens into typed values.

Contract
- A converter is any callable taking one string and returning a value.
- Failure is signaled by raising ConversionError(value, reason). Plain
  callables such as int or float may also raise ValueError/TypeError/
  ArithmeticError; the resolver reports those as ConversionError too.
- Converters must be stateless: one instance serves concurrent invocations.

Registry
- ConverterRegistry maps a type key (usually a Python type) to its converter.
  It is immutable; extend() returns a new registry and rejects duplicate keys.
- DEFAULTS holds the built-ins for str, int, float, bool, Decimal and Path.
"""
import decimal
import pathlib
from collections.abc import Mapping

from .faults import ConversionError, DuplicateConverterError
from .utils import freeze


def to_string(text, /):
    return text


def to_integer(text, /):
    """
    Parse a base-10 integer (surrounding whitespace, sign and "_" separators allowed).
    """
    try:
        return int(text, 10)
    except ValueError:
        raise ConversionError(text, "expected an integer") from None


def to_float(text, /):
    try:
        return float(text)
    except ValueError:
        raise ConversionError(text, "expected a floating-point number") from None


def to_boolean(text, /):
    """
    Accept exactly "true" or "false" (case-sensitive).
    """
    match text:
        case "true":
            return True
        case "false":
            return False
        case _:
            raise ConversionError(text, "expected 'true' or 'false'")


def to_decimal(text, /):
    try:
        return decimal.Decimal(text)
    except decimal.InvalidOperation:
        raise ConversionError(text, "expected a decimal number") from None


def to_path(text, /):
    if not text or "\0" in text:
        raise ConversionError(text, "expected a file system path")
    return pathlib.Path(text)


class ConverterRegistry(Mapping):
    """
    Immutable mapping from a type key to its converter.

    Construction
    - ConverterRegistry() → empty registry.
    - ConverterRegistry({int: to_integer, ...}) → from a mapping.
    - ConverterRegistry([(int, to_integer), ...]) → from pairs; a repeated key
      raises DuplicateConverterError.
    """

    def __init__(self, converters=(), /):
        self._converters = freeze(_collect({}, converters))

    def extend(self, converters=(), /):
        """
        Return a new registry with additional converters (self is untouched).

        Raises
        - DuplicateConverterError: a key is already registered here or repeated.
        """
        registry = object.__new__(type(self))
        registry._converters = freeze(_collect(dict(self._converters), converters))
        return registry

    def __getitem__(self, type, /):
        return self._converters[type]

    def __iter__(self):
        return iter(self._converters)

    def __len__(self):
        return len(self._converters)

    def __repr__(self):
        return f"{type(self).__name__}({{" + ", ".join(
            getattr(key, "__qualname__", repr(key)) for key in self._converters
        ) + "})"


def _collect(target, converters, /):
    pairs = converters.items() if isinstance(converters, Mapping) else converters
    for type, converter in pairs:
        if not callable(converter):
            raise TypeError(f"converter for {type!r} must be callable")
        if type in target:
            raise DuplicateConverterError(type)
        target[type] = converter
    return target


DEFAULTS = ConverterRegistry({
    str: to_string,
    int: to_integer,
    float: to_float,
    bool: to_boolean,
    decimal.Decimal: to_decimal,
    pathlib.Path: to_path,
})


__all__ = (
    "to_string",
    "to_integer",
    "to_float",
    "to_boolean",
    "to_decimal",
    "to_path",
    "ConverterRegistry",
    "DEFAULTS",
)
