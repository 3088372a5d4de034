"""
Conductor argument resolver: typed values out of a command's string residue.

Steps (first failure aborts, nothing is partially bound)
1. classify the residue when raw tokens are given;
2. arity: the positional count must equal the declared argument count;
3. arguments, in declared order: converter lookup, conversion, validation;
4. options: same as arguments when present, otherwise the declared default
   unchanged (no conversion, no validation), otherwise absent;
5. flags: present iff given.

Options and flags the command does not declare are ignored.
"""
from collections.abc import Mapping

from .faults import *
from .invocation import Invocation, Residue, classify
from .utils import *


class TypedArguments:
    """
    Immutable result of resolution, read by handlers through the context.

    - arguments: read-only mapping name → converted positional value
    - options: read-only mapping key → converted value or default
    - flags: frozenset of the names of present flags
    """

    __slots__ = ("_arguments", "_options", "_flags")

    arguments = mirror("arguments")
    options = mirror("options")
    flags = mirror("flags")

    def __init__(self, arguments=None, options=None, flags=()):
        object.__setattr__(self, "_arguments", freeze(arguments or {}))
        object.__setattr__(self, "_options", freeze(options or {}))
        object.__setattr__(self, "_flags", frozenset(flags))

    def __setattr__(self, name, value, /):
        raise AttributeError("typed arguments are immutable")

    def argument(self, name, /):
        """
        Return the converted value of a declared positional argument.

        Raises
        - ArgNotFoundError: the command declares no argument with that name.
        """
        try:
            return self._arguments[name]
        except KeyError:
            raise ArgNotFoundError(name) from None

    def option(self, key, default=None, /):
        return self._options.get(key, default)

    def flag(self, name, /):
        return name in self._flags

    def __eq__(self, other):
        if not isinstance(other, TypedArguments):
            return NotImplemented
        return (
            dict(self._arguments) == dict(other._arguments) and
            dict(self._options) == dict(other._options) and
            self._flags == other._flags
        )

    __hash__ = None

    def __repr__(self):
        return f"{type(self).__name__}(arguments={dict(self._arguments)!r}, " \
               f"options={dict(self._options)!r}, flags={sorted(self._flags)!r})"

    def __rich_repr__(self):
        yield "arguments", dict(self._arguments)
        yield "options", dict(self._options)
        yield "flags", sorted(self._flags)


def _convert(raw, spec, converters, /):
    """
    Internal: convert one raw string with the converter registered for spec.type.
    """
    try:
        converter = converters[spec.type]
    except KeyError:
        raise ConverterNotFoundError(spec.type) from None
    try:
        return converter(raw)
    except ConversionError:
        raise
    except (ValueError, TypeError, ArithmeticError) as exception:
        raise ConversionError(raw, str(exception) or type(exception).__name__) from exception


def _validate(name, value, spec, /):
    if spec.validator is not None and not spec.validator(value):
        raise ArgValidationError(name, str(value))
    return value


def resolve(residue, command, converters, /):
    """
    Resolve a command's residue into TypedArguments.

    Parameters
    - residue: Iterable[str] | Residue | Invocation
      Raw tokens following the command path, or an already classified residue.
    - command: Command
      The matched definition (its arguments, options and flags drive resolution).
    - converters: Mapping[type key, Callable[[str], Any]]

    Raises
    - ArgCountError, ConverterNotFoundError, ConversionError, ArgValidationError
    """
    if not isinstance(residue, Residue | Invocation):
        residue = classify(residue)
    if not isinstance(converters, Mapping):
        raise TypeError("resolve() 'converters' must be a mapping")

    if len(residue.arguments) != len(command.arguments):
        raise ArgCountError(command.name, len(command.arguments), len(residue.arguments))

    arguments = {}
    for raw, spec in zip(residue.arguments, command.arguments):
        arguments[spec.name] = _validate(spec.name, _convert(raw, spec, converters), spec)

    options = {}
    for spec in command.options:
        if spec.key in residue.options:
            options[spec.key] = _validate(spec.key, _convert(residue.options[spec.key], spec, converters), spec)
        elif spec.default is not Unset:
            options[spec.key] = spec.default

    flags = {spec.name for spec in command.flags if spec.name in residue.flags}

    return TypedArguments(arguments, options, flags)


__all__ = (
    "TypedArguments",
    "resolve",
)
