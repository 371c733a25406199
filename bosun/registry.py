"""
bosun command registry.

Ordering
- Registration order is lookup priority: resolve() scans commands in the order
  they were registered and the first one owning the token wins.

Collisions
- A command whose name or aliases collide (ignoring case) with an already
  registered command is still registered, but is shadowed for the colliding
  tokens; a ShadowedCommandWarning reports it. Strict registries refuse the
  command with a DuplicateCommandError instead.

Threading
- Mutations replace the internal tuple under a lock; readers always work on a
  consistent snapshot without locking.
"""
import copy
import logging
import threading

from .commands import Command, command
from .faults import DuplicateCommandError, FaultCode, ShadowedCommandWarning, trigger
from .utils import Unset, rename

logger = logging.getLogger(__name__)


class Registry:
    """
    Ordered collection of commands with case-insensitive lookup.

    Usage
        registry = Registry()

        @registry.command(aliases=("hi",))
        def hello(event):
            event.replyln("hello!")

        registry.resolve("HI")          # the hello command
    """

    def __init__(self, commands=(), /, *, strict=False):
        self._commands = ()
        self._strict = bool(strict)
        self._lock = threading.Lock()
        for item in commands:
            self.register(item)

    @property
    def commands(self):
        """
        Snapshot of the registered commands in registration order.
        """
        return self._commands

    @property
    def strict(self):
        return self._strict

    def register(self, command, /):
        """
        Append a command and return it.

        Raises
        - TypeError: command is not a Command.
        - ValueError: this very command object is already registered.
        - DuplicateCommandError: strict registry and a token collides.
        """
        if not isinstance(command, Command):
            raise TypeError("register() argument must be a command")
        with self._lock:
            if any(registered is command for registered in self._commands):
                raise ValueError(f"command {command.name!r} is already registered")

            tokens = {name.casefold(): name for name in command.names}
            collisions = {}
            for registered in self._commands:
                for name in registered.names:
                    if name.casefold() in tokens:
                        collisions.setdefault(tokens[name.casefold()], registered)
            collisions = list(collisions.items())
            if collisions and self._strict:
                token, owner = collisions[0]
                trigger(DuplicateCommandError(
                    f"command {command.name!r} cannot use {token!r}, already taken by {owner.name!r}",
                    title="duplicate command",
                    code=FaultCode.DUPLICATE_COMMAND,
                    hint="rename the command or one of its aliases",
                ))

            self._commands = (*self._commands, command)

        for token, owner in collisions:
            logger.debug("token %r of command %r shadowed by %r", token, command.name, owner.name)
            trigger(ShadowedCommandWarning(
                f"{token!r} of command {command.name!r} is shadowed by command {owner.name!r}",
                title="shadowed command",
                code=FaultCode.SHADOWED_COMMAND,
                stacklevel=4,
            ))
        logger.debug("registered command %r (%s)", command.name, ", ".join(command.names))
        return command

    def command(self, source=Unset, /, *args, **kwargs):
        """
        Like bosun.command(), and register the resulting command.
        """
        @rename("command")
        def wrapper(source, /):
            return self.register(command(source, *args, **kwargs))

        return wrapper(source) if source is not Unset else wrapper

    def resolve(self, token, /):
        """
        Return the first command owning token (ignoring case), or None.
        """
        if not isinstance(token, str):
            raise TypeError("resolve() argument must be a string")
        for item in self._commands:
            if item.matches(token):
                return item
        return None

    def visible(self):
        """
        Commands whose category is not hidden, in registration order.
        """
        return tuple(item for item in self._commands if not item.category.hidden)

    def recategorize(self, category, /, *, name=Unset, hidden=Unset):
        """
        Rename and/or (un)hide every command filed under a category name.

        category is matched against Category.name (None selects commands
        without a category name). Returns the number of updated commands.
        """
        if name is Unset and hidden is Unset:
            return 0
        overrides = {}
        if name is not Unset:
            overrides["name"] = name
        if hidden is not Unset:
            overrides["hidden"] = hidden

        with self._lock:
            updated = 0
            commands = []
            for item in self._commands:
                if item.category.name == category:
                    item = copy.replace(item, category=copy.replace(item.category, **overrides))
                    updated += 1
                commands.append(item)
            self._commands = tuple(commands)

        logger.debug("recategorized %d command(s) filed under %r", updated, category)
        return updated

    def __contains__(self, item, /):
        if isinstance(item, Command):
            return any(registered is item for registered in self._commands)
        return isinstance(item, str) and self.resolve(item) is not None

    def __iter__(self):
        return iter(self._commands)

    def __len__(self):
        return len(self._commands)

    def __repr__(self):
        return f"registry({", ".join(repr(item.name) for item in self._commands)})"


__all__ = (
    "Registry",
)
