"""
bosun command layer: describe commands, run them, reply to the user.

What this module provides
- Category: presentation metadata (name + hidden) used by help listings.
- Command: an immutable descriptor holding
  • name / aliases: the invocation tokens (matched ignoring case),
  • flags: the command's Flags declaration,
  • category, descr, usage: help metadata,
  • handler: the function run with an Event.
  Commands are plain values holding a function, not subclasses.
- command(...): factory and decorator building a Command from a function.
- Event: what a handler receives: the command, the parsed line, the shell
  and its registry, plus the reply helpers.

Execution
- Command.execute(event) is the execution wrapper: any Exception raised by the
  handler is logged and surfaced on the shell as a HandlerError (a short
  apology, plus the traceback when the shell traces), never propagated.

Quick start
    from bosun import Flags, Shell, command

    @command(aliases=("gr",), flags=Flags("-u"), usage="[name]")
    def greet(event):
        "Greets somebody."
        name = event.input.args or "stranger"
        event.replyln(("hello %s" % name).upper() if event.input.has("-u") else "hello %s" % name)

    shell = Shell()
    shell.registry.register(greet)
    shell.submit("gr -u world")       # HELLO WORLD
"""
import inspect
import logging

from .faults import FaultCode, HandlerError
from .flags import Flags
from .parsing import ParsedInput
from .utils import Introspectable, Unset, coalesce, rename

logger = logging.getLogger(__name__)

APOLOGY = "Sorry, an error occurred. Try again!"


def _process_token(cls, name, token, /):
    if not isinstance(token, str):
        raise TypeError(f"{cls.__typename__} {name!r} must be a string")
    elif not token:
        raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
    elif any(char.isspace() for char in token):
        raise ValueError(f"{cls.__typename__} {name!r} {token!r} cannot contain whitespace")
    return token


def _process_text(cls, name, text, /):
    """
    Optional help strings: Unset and None become None, strings are trimmed and non-empty.
    """
    if text is None:
        return None
    elif not isinstance(text, str | Unset):
        raise TypeError(f"{cls.__typename__} {name!r} must be a string")
    elif isinstance(text, str) and not (text := text.strip()):
        raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
    return coalesce(text)


class Category(metaclass=Introspectable):
    """
    Help metadata shared by related commands (e.g. "Internal").

    A category without a name is listed as "none"; hidden categories are left
    out of help listings but their commands still dispatch.
    """

    __introspectable__ = (
        "name",
        "hidden",
    )

    def __new__(cls, name=Unset, /, *, hidden=False):
        self = super().__new__(cls)
        self._name = _process_text(cls, "name", name)
        self._hidden = bool(hidden)
        return self

    def __eq__(self, other, /):
        if not isinstance(other, Category):
            return NotImplemented
        return (self.name, self.hidden) == (other.name, other.hidden)

    def __hash__(self):
        return hash((self._name, self._hidden))

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(overrides.pop("name", self.name), hidden=overrides.pop("hidden", self.hidden))


class Command(metaclass=Introspectable):
    """
    Immutable command descriptor.

    Identity
    - Two Command objects are distinct commands even when their fields match;
      registries compare them by identity.

    Invocation tokens
    - names == (name, *aliases); matches(token) compares ignoring case.
    - aliases must not repeat each other or the name (ignoring case).
    """

    __introspectable__ = (
        "name",
        "aliases",
        "flags",
        "category",
        "descr",
        "usage",
        "handler",
    )

    def __new__(
            cls,
            handler,
            /,
            name=Unset,
            aliases=(),
            flags=Unset,
            category=Unset,
            descr=Unset,
            usage=Unset,
    ):
        """
        Construct a command from a handler.

        Parameters
        - handler: Callable[[Event], object]
          Run for every dispatched line that resolves to this command.
        - name: str
          Primary invocation token; defaults to handler.__name__.
        - aliases: Iterable[str]
          Additional invocation tokens.
        - flags: Flags
          Flag declaration; defaults to no flags.
        - category: Category | str
          Help category; a string is a visible category of that name.
        - descr: str
          Help text; defaults to the handler docstring.
        - usage: str
          Positional argument synopsis shown by help, e.g. "[value] ...".
        """
        if not callable(handler):
            raise TypeError(f"{cls.__typename__} 'handler' must be callable")

        name = _process_token(cls, "name", coalesce(name, getattr(handler, "__name__", Unset)))

        if isinstance(aliases, str):
            raise TypeError(f"{cls.__typename__} 'aliases' must be an iterable of strings")
        seen = {name.casefold()}
        sanitized = []
        for alias in aliases:
            alias = _process_token(cls, "aliases", alias)
            if alias.casefold() in seen:
                raise ValueError(f"{cls.__typename__} alias {alias!r} is already used by {name!r}")
            seen.add(alias.casefold())
            sanitized.append(alias)

        if not isinstance(flags := coalesce(flags, Flags()), Flags):
            raise TypeError(f"{cls.__typename__} 'flags' must be a flags declaration")

        if isinstance(category := coalesce(category, Category()), str):
            category = Category(category)
        elif not isinstance(category, Category):
            raise TypeError(f"{cls.__typename__} 'category' must be a category or a string")

        self = super().__new__(cls)
        self._handler = handler
        self._name = name
        self._aliases = tuple(sanitized)
        self._flags = flags
        self._category = category
        self._descr = _process_text(cls, "descr", coalesce(descr, inspect.getdoc(handler) or Unset))
        self._usage = _process_text(cls, "usage", usage)
        return self

    @property
    def names(self):
        """
        Every invocation token: the name first, then the aliases.
        """
        return (self._name, *self._aliases)

    def matches(self, token, /):
        """
        Whether token invokes this command (case-insensitive).
        """
        return isinstance(token, str) and token.casefold() in (name.casefold() for name in self.names)

    def execute(self, event, /):
        """
        Run the handler, turning any failure into a recovered shell message.

        Returns True when the handler completed, False when it failed. The
        failure is rendered on the event's shell (apology line, then the
        traceback when the shell traces) and logged; it is never re-raised.
        """
        if not isinstance(event, Event):
            raise TypeError(f"{type(self).__typename__} execute() argument must be an event")
        try:
            self._handler(event)
        except Exception as exception:
            logger.error("command %r failed on %r: %r", self._name, event.input.content, exception)
            # the shell renders the traceback itself when tracing
            logger.debug("command %r traceback", self._name, exc_info=exception)
            event.shell.trigger(HandlerError(
                APOLOGY,
                title="command failed",
                code=FaultCode.HANDLER_FAILURE,
                command=self,
                exception=exception,
                hint="check the command input and try again",
            ))
            return False
        return True

    def __call__(self, event, /):
        return self._handler(event)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(
            overrides.pop("handler", self.handler),
            overrides.pop("name", self.name),
            overrides.pop("aliases", self.aliases),
            overrides.pop("flags", self.flags),
            overrides.pop("category", self.category),
            overrides.pop("descr", self.descr),
            overrides.pop("usage", self.usage),
            **overrides
        )


def command(source=Unset, /, *args, **kwargs):
    """
    Create a Command or return a decorator building one.

    Invocation modes
    - Direct:    cmd = command(func, name="x", aliases=("y",))
    - Decorator: @command(aliases=("y",))
                 def x(event): ...
    - Bare:      @command
                 def x(event): ...

    Parameters
    - source: Callable | Unset
      The handler; when Unset a decorator is returned.
    - *args, **kwargs: forwarded to Command (name, aliases, flags, category,
      descr, usage).
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        return Command(source, *args, **kwargs)

    return wrapper(source) if source is not Unset else wrapper


class Event:
    """
    What a handler receives for one dispatched line.

    Attributes
    - command: the resolved Command.
    - shell: the Shell that dispatched the line.
    - input: the ParsedInput of the line.
    - registry: shortcut for shell.registry.

    Replies go to the shell's output console as plain text.
    """

    def __init__(self, command, shell, input, /):
        if not isinstance(command, Command):
            raise TypeError("event 'command' must be a command")
        if not isinstance(input, ParsedInput):
            raise TypeError("event 'input' must be a parsed input")
        self.command = command
        self.shell = shell
        self.input = input

    @property
    def registry(self):
        return self.shell.registry

    def reply(self, message, /):
        """
        Write message without a trailing newline.
        """
        self.shell.write(str(message), end="")

    def replyln(self, message="", /):
        """
        Write message followed by a newline.
        """
        self.shell.write(str(message))

    def reply_with_border(self, message, /, top="=", bottom=Unset, length=Unset, bottom_length=Unset):
        """
        Write message between two rules.

        - top / bottom: rule characters (bottom defaults to top).
        - length / bottom_length: rule widths (length defaults to the message
          width, bottom_length to length). Negative widths draw nothing.
        """
        message = str(message)
        length = coalesce(length, len(message))
        self.replyln(top * max(0, length))
        self.replyln(message)
        self.replyln(coalesce(bottom, top) * max(0, coalesce(bottom_length, length)))

    def debug(self, message, /):
        self.replyln("[DEBUG] " + str(message))

    def prompt(self, message=Unset, /):
        """
        Read the next input line inside the current command.

        Writes message first (when given), then the input prefix, and blocks
        for one line. The cycle counts as fired. Raises EOFError when the
        input stream is exhausted.
        """
        if message is not Unset:
            self.replyln(message)
        self.shell.echo_prefix()
        if (line := self.shell.readline()) is None:
            raise EOFError("input stream exhausted")
        self.shell.mark_fired()
        return line

    def resolve_params(self):
        """
        Return the matched parameters, or None after telling the user.

        In the error state, the shell's missing-parameter message is written
        once per offending flag, formatted with {flag} and {placeholder}.
        """
        if (params := self.input.params) is not None:
            return params
        for flag in self.input.missing:
            self.replyln(self.shell.missing.format(flag=flag, placeholder=self.command.flags.placeholder(flag)))
        return None

    def __repr__(self):
        return f"event(command={self.command.name!r}, input={self.input!r})"


__all__ = (
    "APOLOGY",
    "Category",
    "Command",
    "command",
    "Event",
)
