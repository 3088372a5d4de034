"""
Conductor environments: isolated command namespaces and the routing engine.

Environment
- Owns one command tree (top-level CommandRegistry), one ConverterRegistry
  and one context factory. Immutable; shared freely across threads.
- walk(tokens) finds the deepest command matching a prefix of the tokens,
  execute(tokens) runs the whole pipeline for it.

Engine
- Routes a line to an environment by its first token, with a shortcut when a
  single environment is registered (the environment name becomes optional).
- Registration is copy-on-write: writers serialize on a lock and swap a new
  read-only snapshot in; readers never lock.

Quick start
    >>> engine = Engine([Environment("git", [remote])])
    >>> engine.execute("git remote add origin https://example.com/repo.git")
"""
import difflib
import sys
import threading
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from .commands import Command, CommandRegistry
from .context import Context
from .converters import DEFAULTS, ConverterRegistry
from .faults import *
from .invocation import parse
from .resolver import resolve
from .tokenizer import tokenize
from .utils import *


def _suggest(token, names, /):
    return tuple(difflib.get_close_matches(token, list(names), 5))


class Environment:
    """
    One isolated command namespace.

    Parameters
    - name: str
      Routing name; the first token of a line selects the environment by it.
    - commands: Iterable[Command] | CommandRegistry
      Top-level commands (their children form the rest of the tree).
    - converters: Mapping[type key, Callable[[str], Any]]
      Converters used to type arguments and options. Defaults to DEFAULTS.
    - context: Callable[[TypedArguments, CommandRegistry], Any]
      Context factory; receives the resolved arguments and the root registry.
    """

    __slots__ = ("_name", "_commands", "_converters", "_context")

    name = mirror("name")
    commands = mirror("commands")
    converters = mirror("converters")
    context = mirror("context")

    def __init__(self, name, /, commands=(), converters=DEFAULTS, context=Context):
        if not isinstance(name, str):
            raise TypeError("environment 'name' must be a string")
        elif not (name := name.strip()) or any(char.isspace() for char in name):
            raise ValueError("environment 'name' must be a non-empty string without whitespace")
        if not isinstance(converters, Mapping):
            raise TypeError("environment 'converters' must be a mapping")
        if not callable(context):
            raise TypeError("environment 'context' must be callable")

        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_commands", commands if isinstance(commands, CommandRegistry) else CommandRegistry(commands))
        object.__setattr__(self, "_converters", converters if isinstance(converters, ConverterRegistry) else ConverterRegistry(converters))
        object.__setattr__(self, "_context", context)

    def __setattr__(self, name, value, /):
        raise AttributeError("environment is immutable")

    def walk(self, tokens, /):
        """
        Greedily match a command path against the leading tokens.

        Each token is looked up in the current registry; a hit descends into
        that command's children, the first miss after a hit ends the path
        (that token and the rest belong to the matched command).

        Returns
        - (Command, depth): the deepest matched command and its path length.

        Raises
        - InvocationFormatError: no tokens at all.
        - CommandNotFoundError: the first token names no top-level command.
        """
        tokens = list(tokens)
        if not tokens:
            raise InvocationFormatError(1, 0)

        registry = self._commands
        matched = None
        depth = 0
        for token in tokens:
            if (candidate := registry.get(token)) is None:
                break
            matched, registry = candidate, candidate.children
            depth += 1

        if matched is None:
            raise CommandNotFoundError(tokens[0], _suggest(tokens[0], self._commands))
        return matched, depth

    def execute(self, tokens, /):
        """
        Run the pipeline for tokens that follow the environment name.

        walk → parse → resolve → context → handler. Resolution failures abort
        before the handler runs. A handler failure other than
        CommandExecutionError is wrapped into one (chained with `from`).

        Returns
        - Whatever the handler returns.
        """
        tokens = list(tokens)
        if not tokens:
            raise InvocationFormatError(2, 1)

        command, depth = self.walk(tokens)
        invocation = parse((self._name, *tokens), depth=depth)
        context = self._context(resolve(invocation, command, self._converters), self._commands)
        return _dispatch(command, context)

    def __repr__(self):
        return f"{type(self).__name__}({self._name!r}, {list(self._commands)!r})"

    def __rich_repr__(self):
        yield self._name
        yield "commands", list(self._commands)
        yield "converters", self._converters


def _dispatch(command, context, /):
    """
    Internal: invoke a handler, normalizing its failures to CommandExecutionError.
    """
    try:
        return command(context)
    except CommandExecutionError:
        raise
    except Exception as exception:
        raise CommandExecutionError(command.name, str(exception) or type(exception).__name__) from exception


class Engine:
    """
    Routes lines to registered environments.

    Routing
    - The first token names an environment: its remaining tokens go there.
    - Otherwise, with exactly one environment registered, the whole line goes
      to that environment (the name is optional).
    - Otherwise EnvironmentNotFoundError.

    Runtime options
    - shell, fancy, colorful: forwarded to trigger() by __invoke__ when a
      fault surfaces (print in shell mode, raise otherwise).
    """

    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")

    def __init__(self, environments=(), /, *, shell=False, fancy=False, colorful=True):
        self._lock = threading.Lock()
        self._environments = MappingProxyType({})
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        for environment in environments:
            self.register(environment)

    @property
    def environments(self):
        """
        Current read-only snapshot of the registered environments (name → Environment).
        """
        return self._environments

    def register(self, environment, /):
        """
        Register an environment.

        Raises
        - TypeError: not an Environment.
        - DuplicateEnvironmentError: the name is already registered.
        """
        if not isinstance(environment, Environment):
            raise TypeError("register() argument must be an Environment instance")
        with self._lock:
            if environment.name in self._environments:
                raise DuplicateEnvironmentError(environment.name)
            self._environments = MappingProxyType(dict(self._environments) | {environment.name: environment})
        return environment

    def unregister(self, name, /):
        """
        Remove an environment by name; return whether one was removed.
        """
        with self._lock:
            if name not in self._environments:
                return False
            environments = dict(self._environments)
            del environments[name]
            self._environments = MappingProxyType(environments)
        return True

    def route(self, tokens, /):
        """
        Select the environment for a token sequence.

        Returns
        - (Environment, remaining tokens)

        Raises
        - InvocationFormatError: no tokens at all.
        - EnvironmentNotFoundError: no environment matches and the shortcut
          does not apply.
        """
        tokens = list(tokens)
        if not tokens:
            raise InvocationFormatError(1, 0)

        environments = self._environments
        if (environment := environments.get(tokens[0])) is not None:
            return environment, tokens[1:]
        if len(environments) == 1:
            environment, = environments.values()
            return environment, tokens
        raise EnvironmentNotFoundError(tokens[0], _suggest(tokens[0], environments))

    def execute(self, prompt, /):
        """
        Run one line through the pipeline and return the handler's result.

        Parameters
        - prompt: str | Iterable[str]
          A raw line (tokenized with tokenize()) or already split tokens.

        Raises
        - Any CommandException from the pipeline, synchronously.
        """
        if isinstance(prompt, str):
            tokens = tokenize(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("execute() argument must be a string or an iterable of strings")
        else:
            raise TypeError("execute() argument must be a string or an iterable of strings")
        environment, tokens = self.route(tokens)
        return environment.execute(tokens)

    def __invoke__(self, prompt=Unset):
        """
        Execute a prompt (sys.argv[1:] when Unset) and surface faults via trigger().

        With shell=True faults are printed and the process exits with status 1;
        otherwise they are raised.
        """
        try:
            return self.execute(sys.argv[1:] if prompt is Unset else prompt)
        except CommandException as fault:
            trigger(fault, shell=self._shell, fancy=self._fancy, colorful=self._colorful)

    def __repr__(self):
        return f"{type(self).__name__}({list(self._environments)!r})"


__all__ = (
    "Environment",
    "Engine",
)
