"""
Conductor command layer: immutable command definitions and registries.

What this module provides
- Command: a named, immutable definition holding a handler, its ordered
  positional Arguments, its Options and Flags, and an optional registry of
  child commands (subcommands).
- CommandRegistry: an immutable, insertion-ordered mapping from name to
  Command for one level of the tree; renders as a help table with rich.
- command(...): create a Command from a handler, or a decorator that does.

Core ideas
- Build once, read forever: every container is frozen at construction, so a
  tree can be shared by concurrent invocations without locks.
- Duplicates fail at build time (DuplicateCommandError, DuplicateArgumentError,
  DuplicateOptionError, DuplicateFlagError), never during dispatch.
- Trees are composed bottom-up: children are passed when the parent is built.

Quick start
    from conductor import command, Argument, Option, Flag

    @command(arguments=[Argument("name"), Argument("url")])
    def add(context):
        ...

    remote = command(lambda context: None, name="remote", children=[add])
"""
import inspect
from collections.abc import Mapping

from rich.table import Table
from rich.text import Text

from .arguments import Argument, Option, Flag
from .faults import *
from .utils import *


def _collect(cls, specs, kind, field, error, /):
    """
    Internal: freeze a collection of specs, enforcing type and unique identifiers.
    """
    collected = {}
    for spec in specs:
        if not isinstance(spec, kind):
            raise TypeError(f"{cls.__name__.lower()} {kind.__name__.lower()}s must be {kind.__name__} instances")
        if (identifier := getattr(spec, field)) in collected:
            raise error(identifier)
        collected[identifier] = spec
    return tuple(collected.values())


class CommandRegistry(Mapping):
    """
    Immutable, insertion-ordered mapping from command name to Command.

    One registry covers one level of the tree (the environment's top level or
    a command's children). Lookups never fail: get() returns None for unknown
    names, the dispatcher decides what a miss means.
    """

    def __init__(self, commands=(), /):
        """
        Parameters
        - commands: Iterable[Command] | CommandRegistry

        Raises
        - TypeError: an item is not a Command.
        - DuplicateCommandError: two commands share a name.
        """
        registry = {}
        for command in commands.values() if isinstance(commands, Mapping) else commands:
            if not isinstance(command, Command):
                raise TypeError("command registry items must be Command instances")
            if command.name in registry:
                raise DuplicateCommandError(command.name)
            registry[command.name] = command
        self._commands = freeze(registry)

    def __getitem__(self, name, /):
        return self._commands[name]

    def __iter__(self):
        return iter(self._commands)

    def __len__(self):
        return len(self._commands)

    def __repr__(self):
        return f"{type(self).__name__}({list(self._commands)!r})"

    def __rich__(self):
        """
        Render the registry as a help table (name, usage, description).
        """
        table = Table(box=None, show_header=False, pad_edge=False)
        table.add_column("name", style="bold #00E5FF", no_wrap=True)
        table.add_column("usage", style="#C8C8D0")
        table.add_column("descr", style="italic #9CE19C")
        for command in self._commands.values():
            table.add_row(command.name, Text(command.usage), command.descr or "")
        return table


class Command:
    """
    Immutable command definition (one node of the command tree).

    Responsibilities
    - Introspection: exposes metadata (name, descr, arguments, options, flags,
      children, usage) as read-only properties.
    - Composition: children form the subcommand registry walked by the
      dispatcher; nesting depth is unlimited.
    - Invocation: __call__(context) runs the handler; it is called by the
      environment once arguments are resolved.
    """

    __slots__ = ("_name", "_descr", "_handler", "_arguments", "_options", "_flags", "_children")

    name = mirror("name")
    descr = mirror("descr")
    handler = mirror("handler")
    arguments = mirror("arguments")
    options = mirror("options")
    flags = mirror("flags")
    children = mirror("children")

    def __init__(
            self,
            name,
            handler,
            /,
            arguments=(),
            options=(),
            flags=(),
            children=(),
            descr=Unset,
    ):
        """
        Construct a Command.

        Parameters
        - name: str
          Name matched against input tokens; unique within its parent registry.
        - handler: Callable[[Context], Any]
          Executable logic; receives the context built by the environment.
        - arguments: Iterable[Argument]
          Positional parameters; order is binding order, names are unique.
        - options: Iterable[Option]
          Keyed parameters; keys are unique.
        - flags: Iterable[Flag]
          Presence-only switches; names are unique.
        - children: Iterable[Command] | CommandRegistry
          Subcommands reachable by greedy prefix matching.
        - descr: Unset | str
          Short description for help. If Unset, becomes None.

        Raises
        - TypeError/ValueError on invalid metadata.
        - DuplicateArgumentError/DuplicateOptionError/DuplicateFlagError/
          DuplicateCommandError on repeated identifiers.
        """
        cls = type(self)
        if not isinstance(name, str):
            raise TypeError("command 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError("command 'name' cannot be empty")
        elif name.startswith("--") or any(char.isspace() for char in name):
            raise ValueError(f"command name {name!r} cannot contain whitespace or start with '--'")
        if not callable(handler):
            raise TypeError("command 'handler' must be callable")
        if not isinstance(descr, str | Unset):
            raise TypeError("command 'descr' must be a string")
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ValueError("command 'descr' cannot be empty")

        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_descr", coalesce(descr))
        object.__setattr__(self, "_handler", handler)
        object.__setattr__(self, "_arguments", _collect(cls, arguments, Argument, "name", DuplicateArgumentError))
        object.__setattr__(self, "_options", _collect(cls, options, Option, "key", DuplicateOptionError))
        object.__setattr__(self, "_flags", _collect(cls, flags, Flag, "name", DuplicateFlagError))
        object.__setattr__(self, "_children", children if isinstance(children, CommandRegistry) else CommandRegistry(children))

    def __setattr__(self, name, value, /):
        raise AttributeError("command is immutable")

    def __delattr__(self, name, /):
        raise AttributeError("command is immutable")

    @property
    def usage(self):
        """
        One-line usage string, e.g. "add <name> <url> [--fetch] [--tags=<str>]".
        """
        parts = [self.name]
        if self.children:
            parts.append("[<subcommand>...]")
        parts.extend(argument.label for argument in self.arguments)
        parts.extend(option.label for option in self.options)
        parts.extend(flag.label for flag in self.flags)
        return " ".join(parts)

    def __call__(self, context, /):
        return self.handler(context)

    def __repr__(self):
        return f"command(name={self.name!r}, arguments={[argument.name for argument in self.arguments]!r}, " \
               f"options={[option.key for option in self.options]!r}, flags={[flag.name for flag in self.flags]!r}, " \
               f"children={list(self.children)!r})"

    def __rich_repr__(self):
        yield "name", self.name
        yield "descr", self.descr
        yield "arguments", self.arguments
        yield "options", self.options
        yield "flags", self.flags
        yield "children", self.children


def command(source=Unset, /, **kwargs):
    """
    Create a Command or return a decorator to build it later.

    Invocation modes
    - Direct handler:
        cmd = command(handler, name="x", arguments=[...])
    - Decorator:
        @command(arguments=[Argument("file")])
        def cat(context): ...

    Defaults
    - name: the handler's __name__ (underscores become hyphens).
    - descr: the handler's docstring, when it has one.

    Returns
    - Command | Callable[[Callable], Command]
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        options = dict(kwargs)
        name = options.pop("name", Unset)
        if name is Unset:
            name = getattr(source, "__name__", "").replace("_", "-")
        options.setdefault("descr", inspect.getdoc(source) or Unset)
        return Command(name, source, **options)

    return wrapper(source) if source is not Unset else wrapper


__all__ = (
    "Command",
    "CommandRegistry",
    "command",
)
