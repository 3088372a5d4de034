"""
Conductor execution context handed to command handlers.
"""
from .commands import CommandRegistry
from .resolver import TypedArguments
from .utils import mirror


class Context:
    """
    Read surface of one invocation.

    - arguments: TypedArguments produced by resolution.
    - registry: root CommandRegistry of the environment that dispatched the
      command (for help listings and introspection).

    The accessors delegate to `arguments`. Environments may be configured with
    a subclass (or any callable with the same signature) to add services.
    """

    __slots__ = ("_arguments", "_registry")

    arguments = mirror("arguments")
    registry = mirror("registry")

    def __init__(self, arguments, registry, /):
        if not isinstance(arguments, TypedArguments):
            raise TypeError("context 'arguments' must be a TypedArguments instance")
        if not isinstance(registry, CommandRegistry):
            raise TypeError("context 'registry' must be a CommandRegistry instance")
        self._arguments = arguments
        self._registry = registry

    def argument(self, name, /):
        return self._arguments.argument(name)

    def option(self, key, default=None, /):
        return self._arguments.option(key, default)

    def flag(self, name, /):
        return self._arguments.flag(name)

    def __repr__(self):
        return f"{type(self).__name__}({self._arguments!r}, {list(self._registry)!r})"


__all__ = (
    "Context",
)
