"""
Conductor invocation parser: classify tokens into arguments, options and flags.

Classification (every token after the leading environment/command tokens)
- "--key=value" → option; split on the first "=", so the value may contain "=".
- "--name"      → flag.
- anything else → positional argument, order preserved.

Policies
- Options and flags may appear anywhere after the leading tokens.
- A repeated option key keeps the last value; repeated flags collapse.
"""
from collections.abc import Mapping
from typing import NamedTuple

from .faults import InvocationFormatError
from .utils import freeze

PREFIX = "--"


class Residue(NamedTuple):
    """
    Classified, still unconverted tokens following a command path.
    """
    arguments: tuple
    options: Mapping
    flags: frozenset


class Invocation(NamedTuple):
    """
    One parsed input line: environment, command path and classified residue.
    """
    environment: str
    path: tuple
    arguments: tuple
    options: Mapping
    flags: frozenset

    @property
    def command(self):
        return self.path[-1]


def classify(tokens, /):
    """
    Classify tokens into positional arguments, options and flags.

    Returns
    - Residue with a tuple of arguments, a read-only option mapping and a
      frozenset of flag names (prefixes stripped).
    """
    arguments = []
    options = {}
    flags = set()

    for token in tokens:
        if not token.startswith(PREFIX):
            arguments.append(token)
            continue
        key, separator, value = token[len(PREFIX):].partition("=")
        if separator:
            options[key] = value
        else:
            flags.add(key)

    return Residue(tuple(arguments), freeze(options), frozenset(flags))


def parse(tokens, /, *, environment=True, depth=1):
    """
    Parse tokens into an Invocation.

    Layout
    - tokens[0] is the environment name when `environment` is true.
    - the next `depth` tokens are the command path, taken verbatim.
    - everything after is classified (see classify()).

    Raises
    - InvocationFormatError: fewer tokens than the leading ones require.
    """
    if depth < 1:
        raise ValueError("parse() 'depth' must be a positive integer")

    tokens = list(tokens)
    if len(tokens) < (minimum := int(environment) + depth):
        raise InvocationFormatError(minimum, len(tokens))

    start = int(environment)
    residue = classify(tokens[start + depth:])
    return Invocation(
        tokens[0] if environment else "",
        tuple(tokens[start:start + depth]),
        *residue,
    )


__all__ = (
    "Residue",
    "Invocation",
    "classify",
    "parse",
)
