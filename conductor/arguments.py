"""
Conductor argument specifications.

Overview
- Argument: positional, value-bearing parameter; declared order is binding order.
- Option: keyed, value-bearing parameter given as --key=value, with an optional default.
- Flag: named, presence-only switch given as --name.

Metadata (sanitized on construction)
- name/key: non-empty string without whitespace; "=" is rejected because the
  parser splits option tokens on the first "=".
- type: converter key looked up in the environment's ConverterRegistry
  (defaults to str). Any hashable object works as a key.
- descr: Unset | str (short help), non-empty after trimming when provided.
- validator: Unset | callable predicate over the converted value.
- default (Option only): any value, used as-is when the option is omitted.

Immutability
- Specs are sealed once built: fields are served by read-only properties and
  attribute assignment is rejected.

Quick example:
    >>> from conductor.arguments import Argument, Option, Flag
    >>> port = Argument("port", type=int, validator=lambda value: 0 < value < 65536)
    >>> clients = Option("max-clients", type=int, default=16)
    >>> force = Flag("force", descr="skip confirmation")
"""
import functools
import operator
import re

from .utils import *


class ArgumentType(type):
    """
    Metaclass that turns spec classes into sealed, introspectable records.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      (mirror()) over the private "_<name>" field.
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and help output.
    - Derive __typename__ from the class name (camel-case split with hyphens).
    - Reject attribute assignment and deletion once an instance is sealed.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - option(key='port', type=<class 'int'>, descr=None, validator=None, default=8080)
            """
            return f"{type(self).__typename__}(" + ", ".join(
                map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__())
            ) + ")"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers (e.g., rich).
            """
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        @rename("__setattr__")
        def __setattr__(self, name, value, /):
            if getattr(self, "_sealed", False):
                raise AttributeError(f"{type(self).__typename__} is immutable")
            object.__setattr__(self, name, value)
        self.__setattr__ = __setattr__

        @rename("__delattr__")
        def __delattr__(self, name, /):
            if getattr(self, "_sealed", False):
                raise AttributeError(f"{type(self).__typename__} is immutable")
            object.__delattr__(self, name)
        self.__delattr__ = __delattr__

        return self


def _build(cls, metadata, /):
    """
    Internal: create a sealed instance and mirror sanitized metadata into private fields.
    """
    self = object.__new__(cls)
    for name, value in metadata.items():
        setattr(self, "_" + name, value)
    self._sealed = True
    return self


def _sanitize_identifier(cls, metadata, field, /):
    """
    Internal: validate the identifying field (name or key) of a spec in place.
    """
    if not isinstance(identifier := metadata[field], str):
        raise TypeError(f"{cls.__typename__} {field!r} must be a string")
    elif not (identifier := identifier.strip()):
        raise ValueError(f"{cls.__typename__} {field!r} cannot be empty")
    elif re.search(r"[\s=]", identifier):
        raise ValueError(f"{cls.__typename__} {field!r} cannot contain whitespace or '='")
    metadata[field] = identifier


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate the fields every spec shares.

    - descr: optional short description. If omitted (Unset), it becomes None.
      If provided, it must be a non-empty string after trimming.
    """
    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


def _sanitize_parametric_metadata(cls, metadata, /):
    """
    Internal: validate metadata for value-bearing specs (Argument, Option).

    - type: must be hashable, since it is used as a converter-registry key.
    - validator: must be Unset or callable; Unset becomes None (accept all).
    """
    try:
        hash(metadata["type"])
    except TypeError:
        raise TypeError(f"{cls.__typename__} 'type' must be hashable") from None

    if (validator := metadata["validator"]) is not Unset and not callable(validator):
        raise TypeError(f"{cls.__typename__} 'validator' must be callable")
    metadata["validator"] = coalesce(validator)


class Argument(metaclass=ArgumentType):
    """
    Positional, value-bearing parameter specification.

    The raw token bound to this argument is converted with the environment's
    converter for `type`, then checked with `validator` (when given).
    """

    __introspectable__ = (
        "name",
        "type",
        "descr",
        "validator",
    )

    def __new__(cls, name, /, type=str, descr=Unset, validator=Unset):
        """
        Construct an Argument spec.

        Parameters
        - name: str
          Name used to look the value up (TypedArguments.argument(name)).
        - type: Hashable
          Converter key. Defaults to str.
        - descr: Unset | str
          Short description for help. If Unset, becomes None.
        - validator: Unset | Callable[[value], bool]
          Predicate over the converted value; a falsy result rejects it.
        """
        metadata = {
            "name": name,
            "type": type,
            "descr": descr,
            "validator": validator,
        }
        _sanitize_identifier(cls, metadata, "name")
        _sanitize_metadata(cls, metadata)
        _sanitize_parametric_metadata(cls, metadata)
        return _build(cls, metadata)

    @property
    def label(self):
        return f"<{self.name}>"


class Option(metaclass=ArgumentType):
    """
    Keyed, value-bearing parameter specification (--key=value).

    When the option is given, its raw value is converted and validated exactly
    like a positional argument. When omitted, `default` is used unchanged (no
    conversion, no validation); with no default the option is simply absent.
    """

    __introspectable__ = (
        "key",
        "type",
        "descr",
        "validator",
        "default",
    )

    def __new__(cls, key, /, type=str, descr=Unset, validator=Unset, default=Unset):
        """
        Construct an Option spec.

        Parameters
        - key: str
          Option key, written as --key=value on the command line.
        - type: Hashable
          Converter key. Defaults to str.
        - descr: Unset | str
          Short description for help. If Unset, becomes None.
        - validator: Unset | Callable[[value], bool]
          Predicate over the converted value (never applied to the default).
        - default: Any
          Value used when the option is omitted; Unset means no value at all.
          None is a legitimate default.
        """
        metadata = {
            "key": key,
            "type": type,
            "descr": descr,
            "validator": validator,
            "default": default,
        }
        _sanitize_identifier(cls, metadata, "key")
        _sanitize_metadata(cls, metadata)
        _sanitize_parametric_metadata(cls, metadata)
        return _build(cls, metadata)

    @property
    def label(self):
        return f"[--{self.key}=<{getattr(self.type, '__name__', 'value').lower()}>]"


class Flag(metaclass=ArgumentType):
    """
    Named, presence-only switch specification (--name).

    Flags carry no value: a flag is present in the resolved arguments if and
    only if it was given on the command line.
    """

    __introspectable__ = (
        "name",
        "descr",
    )

    def __new__(cls, name, /, descr=Unset):
        """
        Construct a Flag spec.

        Parameters
        - name: str
          Flag name, written as --name on the command line.
        - descr: Unset | str
          Short description for help. If Unset, becomes None.
        """
        metadata = {
            "name": name,
            "descr": descr,
        }
        _sanitize_identifier(cls, metadata, "name")
        _sanitize_metadata(cls, metadata)
        return _build(cls, metadata)

    @property
    def label(self):
        return f"[--{self.name}]"


__all__ = (
    "Argument",
    "Option",
    "Flag",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ArgumentType
