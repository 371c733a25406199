"""
bosun shell: the fixed-period dispatch loop.

Cycle
- Every `period` seconds the scheduler thread runs one tick: it echoes the
  input prefix, blocks for exactly one line, and dispatches it.
- Ticks never overlap: a tick finding another one in progress does nothing.
  A tick that overruns the period is followed by the next one right away;
  missed periods are not replayed.
- The loop ends when a handler calls stop(), or when the input is exhausted.

Dispatch
- The first token of the line (split on single spaces) is resolved against
  the registry, ignoring case. The line is then parsed with the resolved
  command's flags and names, and the command runs through its execution
  wrapper. Unmatched lines get the configured unknown-command message.
- `fired` is True while a command runs (or once a handler prompted for more
  input) and is False again when dispatch returns.

Output
- Everything the shell and its commands print goes through one rich Console
  bound to the configured output stream, with markup, emoji and highlighting
  disabled, so plain replies reach the stream verbatim.
"""
import logging
import sys
import threading
import time
from numbers import Real

from rich.console import Console

from . import faults
from .builtin import COMMANDS as BUILTIN_COMMANDS
from .commands import Command, Event
from .demos import COMMANDS as DEMO_COMMANDS
from .faults import FaultCode, UnknownCommandError
from .parsing import parse, tokenize
from .registry import Registry
from .utils import Unset, coalesce, view

logger = logging.getLogger(__name__)

BANNER = "Please enter a command! (Type helpf to access the help command)"
PREFIX = "$"
UNKNOWN = "There is no command matching that name! Use the command help to return the help message!"
MISSING = "You must provide a {placeholder} for the flag {flag}!"


def _process_period(period, /):
    if isinstance(period, bool) or not isinstance(period, Real):
        raise TypeError("shell 'period' must be a number of seconds")
    elif not period > 0:
        raise ValueError("shell 'period' must be positive")
    return period


def _process_stream(name, stream, method, /):
    if not callable(getattr(stream, method, None)):
        raise TypeError(f"shell {name!r} must be a text stream with a {method}() method")
    return stream


def _process_message(name, message, /):
    if not isinstance(message, str):
        raise TypeError(f"shell {name!r} must be a string")
    return message


def _process_missing(template, /):
    """
    The missing-parameter template may only use the {flag} and {placeholder} fields.
    """
    template = _process_message("missing", template)
    try:
        template.format(flag="", placeholder="")
    except (KeyError, IndexError, ValueError) as error:
        raise ValueError(f"shell 'missing' is not a valid template: {error}") from None
    return template


def _process_helper(helper, /):
    if helper is not Unset and not callable(helper):
        raise TypeError("shell 'helper' must be callable")
    return coalesce(helper)


class Shell:
    """
    Interactive command shell.

    Construction
        shell = Shell(commands, stdin=..., stdout=..., demos=True)

    - commands: the user commands, registered first (highest priority); the
      built-in commands follow, then the demo commands when enabled.
    - strict: reject name/alias collisions instead of shadowing them.
    - period: seconds between ticks (default 1).
    - stdin / stdout: text streams (default sys.stdin / sys.stdout).
    - banner, prefix, unknown: startup line, input prefix, unknown-command line.
    - missing: missing-parameter template with {flag} and {placeholder} fields.
    - helper: callable(shell, event) replacing the default help listing.
    - echo: print the banner and the prefix; trace: print tracebacks after
      handler failures; demos: register the arithmetic commands; fancy: render
      faults as panels and help as a table.

    Running
    - serve() blocks until the loop ends and returns the exit status.
    - start() / stop() control the background loop; submit() and run() route
      lines programmatically from any thread.
    """

    period = view("period")
    stdin = view("stdin")
    stdout = view("stdout")
    banner = view("banner")
    prefix = view("prefix")
    unknown = view("unknown")
    missing = view("missing")
    helper = view("helper")
    echo = view("echo")
    trace = view("trace")
    demos = view("demos")
    fancy = view("fancy")
    registry = view("registry")
    console = view("console")

    def __init__(
            self,
            commands=(),
            /,
            *,
            strict=False,
            period=Unset,
            stdin=Unset,
            stdout=Unset,
            banner=Unset,
            prefix=Unset,
            unknown=Unset,
            missing=Unset,
            helper=Unset,
            echo=True,
            trace=True,
            demos=False,
            fancy=False,
    ):
        self._period = _process_period(coalesce(period, 1))
        self._stdin = _process_stream("stdin", coalesce(stdin, sys.stdin), "readline")
        self._stdout = _process_stream("stdout", coalesce(stdout, sys.stdout), "write")
        self._banner = _process_message("banner", coalesce(banner, BANNER))
        self._prefix = _process_message("prefix", coalesce(prefix, PREFIX))
        self._unknown = _process_message("unknown", coalesce(unknown, UNKNOWN))
        self._missing = _process_missing(coalesce(missing, MISSING))
        self._helper = _process_helper(helper)
        self._echo = bool(echo)
        self._trace = bool(trace)
        self._demos = bool(demos)
        self._fancy = bool(fancy)

        self._console = Console(
            file=self._stdout,
            highlight=False,
            markup=False,
            emoji=False,
            soft_wrap=True,
        )

        self._registry = Registry(commands, strict=strict)
        for item in BUILTIN_COMMANDS:
            self._registry.register(item)
        if self._demos:
            for item in DEMO_COMMANDS:
                self._registry.register(item)

        # dispatch state, re-entrant so handlers can submit() nested lines
        self._state = threading.RLock()
        # held for the duration of one tick
        self._cycle = threading.Lock()
        self._halt = threading.Event()
        self._thread = None
        self._fired = False
        self._latest = None
        self._status = 0

    @property
    def fired(self):
        """
        Whether a command fired in the cycle being dispatched.
        """
        return self._fired

    @property
    def latest(self):
        """
        The last line handed to dispatch(), or None before the first one.
        """
        return self._latest

    @property
    def status(self):
        """
        Exit status recorded by stop() (0 until then).
        """
        return self._status

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    # --- output ---

    def write(self, message, /, end="\n"):
        self._console.print(message, end=end)

    def echo_prefix(self):
        """
        Print the input prefix and one space when echoing is on.
        """
        if self._echo:
            self.write(self._prefix + " ", end="")

    def readline(self):
        """
        Read one line without its line terminator; None at end of input.
        """
        if not (line := self._stdin.readline()):
            return None
        return line.removesuffix("\n").removesuffix("\r")

    def trigger(self, fault, /, **options):
        """
        Surface a fault on the shell console with the shell's rendering options.
        """
        faults.trigger(fault, **{
            "shell": True,
            "console": self._console,
            "fancy": self._fancy,
            "trace": self._trace,
        } | options)

    def mark_fired(self):
        with self._state:
            self._fired = True

    # --- dispatch ---

    def dispatch(self, line, /):
        """
        Route one line to its command.

        Returns True when a command fired, False when no command matched (the
        unknown-command message is printed then). Handler failures are
        reported by the execution wrapper and still count as fired.
        """
        if not isinstance(line, str):
            raise TypeError("dispatch() argument must be a string")

        with self._state:
            self._latest = line
            fired = self._fired
            try:
                token = tokenize(line)[0]
                if (command := self._registry.resolve(token)) is None:
                    logger.debug("no command matches %r", token)
                    self.trigger(UnknownCommandError(
                        self._unknown,
                        title="unknown command",
                        code=FaultCode.UNKNOWN_COMMAND,
                        token=token,
                        hint="type helpf to list the available commands",
                    ))
                    return False

                self._fired = True
                logger.debug("dispatching %r to command %r", line, command.name)
                command.execute(Event(command, self, parse(line, command.flags, command.names)))
                return True
            finally:
                self._fired = fired

    def submit(self, query, /):
        """
        Run a full line (invocation token, flags and arguments) as if typed.
        """
        logger.debug("submitted %r", query)
        return self.dispatch(query)

    def run(self, command, args="", /, *flags):
        """
        Run a command by object or name with pre-split flags.

        Each item of flags is one flag with its parameter, e.g. "-s 2"; the
        line submitted is "<name> <flags...> <args>".

            shell.run("exitf", "", "-s 2")      # submits "exitf -s 2"
        """
        name = command.name if isinstance(command, Command) else command
        if not isinstance(name, str):
            raise TypeError("run() first argument must be a command or a command name")
        if not isinstance(args, str) or not all(isinstance(item, str) for item in flags):
            raise TypeError("run() arguments and flags must be strings")
        return self.submit(" ".join([name, *flags, *filter(None, [args])]))

    # --- loop ---

    def tick(self):
        """
        Run one cycle: echo the prefix, read a line, dispatch it.

        Returns False once the input is exhausted, True otherwise (including
        when the cycle was skipped because another one is in progress). A line
        read after stop() is dropped instead of dispatched.
        """
        if not self._cycle.acquire(blocking=False):
            logger.debug("cycle skipped, previous cycle still in progress")
            return True
        try:
            self.echo_prefix()
            if (line := self.readline()) is None:
                logger.debug("input exhausted")
                return False
            if self._halt.is_set():
                logger.debug("stopped while reading, dropping %r", line)
                return True
            self.dispatch(line)
            return True
        finally:
            self._cycle.release()

    def _schedule(self):
        logger.debug("scheduler started, period %ss", self._period)
        deadline = time.monotonic()
        try:
            while not self._halt.is_set():
                if not self.tick():
                    break
                deadline += self._period
                if (delay := deadline - time.monotonic()) <= 0:
                    deadline = time.monotonic()
                elif self._halt.wait(delay):
                    break
        except Exception:
            logger.exception("scheduler stopped by an unexpected error")
            self._status = self._status or 1
        finally:
            self._halt.set()
            logger.debug("scheduler stopped, status %s", self._status)

    def start(self):
        """
        Print the banner and start the scheduler on a daemon thread.
        """
        with self._state:
            if self.running:
                raise RuntimeError("shell is already running")
            self._halt.clear()
            if self._echo:
                self.write(self._banner)
            self._thread = threading.Thread(target=self._schedule, name="bosun-shell", daemon=True)
            self._thread.start()

    def stop(self, status=0, /):
        """
        Halt the loop after the cycle in progress and record the exit status.

        Safe to call from another thread: a line that arrives while the loop
        is blocked reading is dropped, not dispatched.
        """
        if isinstance(status, bool) or not isinstance(status, int):
            raise TypeError("stop() argument must be an integer")
        logger.debug("stop requested, status %s", status)
        self._status = status
        self._halt.set()

    def serve(self):
        """
        Start the loop, wait for it to end and return the exit status.
        """
        self.start()
        self._thread.join()
        return self._status

    def __repr__(self):
        return f"shell(commands={len(self._registry)}, running={self.running}, status={self._status})"


__all__ = (
    "BANNER",
    "PREFIX",
    "UNKNOWN",
    "MISSING",
    "Shell",
)
