"""
Conductor executors: run the synchronous pipeline off the caller's thread.

- AsyncExecutor: submits each full pipeline run to a fixed-size thread pool.
  Failures go to a fallback callable (report() by default), never to the
  submitter; submission after close() raises RuntimeError.
- Shell: reads lines from a stream on one dedicated daemon thread and runs
  the pipeline for each; failures go to the fallback and the loop continues.
- invoke(): run an engine (or anything with __invoke__) from a prompt or
  sys.argv.

Ordering between concurrently submitted runs is not guaranteed. A handler
that started always runs to completion; only queued runs can be dropped.
"""
import os
import sys
import threading
from concurrent.futures import ThreadPoolExecutor

from .commands import Command, command
from .environments import Engine, Environment
from .faults import TokenizationError, report, trigger
from .tokenizer import tokenize
from .utils import *


def _check(executor, fallback, /):
    if not callable(getattr(executor, "execute", None)):
        raise TypeError("executor must provide an execute(prompt) method")
    if not callable(fallback):
        raise TypeError("fallback must be callable")


class AsyncExecutor:
    """
    Thread-pool backed pipeline runner.

    Parameters
    - executor: Engine | Environment-like
      Anything with an execute(prompt) method.
    - fallback: Callable[[BaseException], Any]
      Receives every exception raised by a run. Defaults to report().
    - workers: int | None
      Pool size. Defaults to the number of CPUs.
    """

    executor = mirror("executor")
    fallback = mirror("fallback")

    def __init__(self, executor, /, fallback=report, workers=None):
        _check(executor, fallback)
        if workers is not None and (not isinstance(workers, int) or workers < 1):
            raise ValueError("AsyncExecutor 'workers' must be a positive integer")
        self._executor = executor
        self._fallback = fallback
        self._lock = threading.Lock()
        self._closed = False
        self._pool = ThreadPoolExecutor(
            max_workers=workers or os.cpu_count() or 1,
            thread_name_prefix=f"conductor-{id(executor):x}",
        )

    @property
    def closed(self):
        return self._closed

    def _run(self, prompt, /):
        try:
            return self._executor.execute(prompt)
        except Exception as exception:
            self._fallback(exception)
            return None

    def execute(self, prompt, /):
        """
        Submit one pipeline run.

        Returns
        - Future resolving to the handler's result, or None when the run
          failed (the failure went to the fallback).

        Raises
        - RuntimeError: the executor is closed.
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("cannot submit to a closed AsyncExecutor")
            return self._pool.submit(self._run, prompt)

    def close(self, wait=True):
        """
        Stop accepting runs; queued and running ones still complete.
        """
        with self._lock:
            self._closed = True
        self._pool.shutdown(wait=wait)

    def close_now(self):
        """
        Stop accepting runs and drop the queued ones (running handlers finish).
        """
        with self._lock:
            self._closed = True
        self._pool.shutdown(wait=False, cancel_futures=True)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def __repr__(self):
        return f"{type(self).__name__}({self._executor!r}, closed={self._closed})"


class Shell:
    """
    Line-oriented interactive reader.

    Reads `stream` (sys.stdin when Unset) line by line on a daemon thread and
    runs each non-blank line through `executor.execute`. Must not be driven
    from several threads at once.
    """

    executor = mirror("executor")
    fallback = mirror("fallback")

    def __init__(self, executor, /, stream=Unset, fallback=report):
        _check(executor, fallback)
        self._executor = executor
        self._fallback = fallback
        self._stream = stream
        self._lock = threading.Lock()
        self._thread = None
        self._closed = threading.Event()

    @property
    def closed(self):
        return self._closed.is_set()

    def run(self):
        """
        Run the read loop on the current thread until the stream ends or close() is called.
        """
        for line in coalesce(self._stream, sys.stdin):
            if self._closed.is_set():
                break
            if not line.strip():
                continue
            try:
                self._executor.execute(line.rstrip("\r\n"))
            except Exception as exception:
                self._fallback(exception)

    def start(self):
        """
        Start the read loop on a daemon thread.

        Raises
        - RuntimeError: the shell was already started.
        """
        with self._lock:
            if self._thread is not None:
                raise RuntimeError("shell has already been started")
            self._thread = threading.Thread(
                target=self.run,
                name=f"conductor-shell-{id(self._executor):x}",
                daemon=True,
            )
            self._thread.start()
        return self

    def join(self, timeout=None):
        if self._thread is not None:
            self._thread.join(timeout)

    def close(self):
        """
        Stop the loop after the line being processed (if any).
        """
        self._closed.set()

    def __repr__(self):
        return f"{type(self).__name__}({self._executor!r}, closed={self.closed})"


def invoke(object, prompt=Unset, /):
    """
    Convenience runner.

    Parameters
    - object: anything with __invoke__(prompt) (an Engine), a Command or a
      plain callable (wrapped into a single-command engine).
    - prompt: Unset (sys.argv[1:]) | str | Iterable[str]
      For a Command or callable the prompt is the command's residue
      (subcommands, arguments, options, flags) without its own name.

    Raises
    - TypeError: the object cannot be invoked.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)

    if isinstance(object, Command):
        # the prompt holds the command's own residue, its name is implied
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            try:
                tokens = tokenize(prompt)
            except TokenizationError as fault:
                return trigger(fault, shell=True)
        else:
            tokens = list(prompt)
        engine = Engine([Environment("__main__", [object])], shell=True)
        return engine.__invoke__(["__main__", object.name, *tokens])

    if callable(object):
        return invoke(command(object), prompt)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method")


__all__ = (
    "AsyncExecutor",
    "Shell",
    "invoke",
)
