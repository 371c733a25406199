"""
bosun faults (errors and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing issue.
- CommandException / CommandWarning: base types carrying a message plus
  read-only options, able to render themselves through rich.
- trigger(): single entry point to surface a fault.

Options understood by the built-in faults
- shell: print on a console instead of raising (exceptions) or warning (warnings).
- console: the rich Console to print on (defaults to a stderr console).
- fancy: render a titled panel (code, title, hint) instead of the bare message.
- trace: append the traceback of options["exception"] when present.
- code, title, hint: panel header and footer copy.
- stacklevel: forwarded to warnings.warn outside shell mode.

Integration
- The shell surfaces unknown commands and handler failures with shell=True on
  its own console, so the configured messages reach the configured stream.
- The registry surfaces shadowed registrations with shell=False, which turns
  them into regular Python warnings.
"""
import copy
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text
from rich.traceback import Traceback

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - routing (1110x): UNKNOWN_COMMAND
    - flags (1111x): MISSING_PARAMETER
    - registry (1112x): DUPLICATE_COMMAND
    - delegated (1113x): HANDLER_FAILURE
    - warnings (12xxx): SHADOWED_COMMAND
    """
    # --- routing errors ---
    UNKNOWN_COMMAND             = 11101

    # --- flag errors ---
    MISSING_PARAMETER           = 11111

    # --- registry errors ---
    DUPLICATE_COMMAND           = 11121

    # --- delegated errors ---
    HANDLER_FAILURE             = 11131

    # --- warnings ---
    SHADOWED_COMMAND            = 12121

    def normalize(self):
        """
        return a host-normalized string for this code.

        a __codes__ mapping in __main__ may relabel codes; otherwise the
        numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


_palette = {
    "error": {
        "prog-name": "bold #E6E6F0",
        "code": "bold #00E5FF",
        "title": "bold #FF4DA6",
        "message": "#C8C8D0",
        "hint-arrow": "#9CE19C dim",
        "hint": "italic #9CE19C",
    },
    "warning": {
        "prog-name": "bold #E6E6F0",
        "code": "bold #FFB400",
        "title": "bold #FFC2E0",
        "message": "#D6D6DE",
        "hint-arrow": "#B8EFAF dim",
        "hint": "italic #B8EFAF",
    },
}


def _render(fault, kind):
    """
    build the renderable of a fault.

    plain mode is the message alone (one line), so configured shell messages
    reach the output verbatim; fancy mode wraps message and hint in a panel
    titled "[ prog — code | title ]". a traceback follows either form when
    options["trace"] is set and options["exception"] is present.
    """
    options = fault.options
    parts = []

    if options.get("fancy", False):
        main = __import__("__main__")
        styles = defaultdict(str, _palette[kind] | getattr(main, "__styles__", {}))
        header = Text.assemble(
            "[ ",
            (getattr(main, "__prog__", "bosun"), styles["prog-name"]),
            " — ",
            (options["code"].normalize() if "code" in options else "-", styles["code"]),
            " | ",
            (str(options.get("title", kind)).title(), styles["title"]),
            " ]",
        )
        body = [Text(coalesce(fault.message, ""), styles["message"])]
        if hint := options.get("hint"):
            body.append(Text.assemble((" → ", styles["hint-arrow"]), (hint, styles["hint"])))
        parts.append(Panel(Group(*body), title=header, title_align="left"))
    else:
        parts.append(Text(coalesce(fault.message, "")))

    if options.get("trace", False) and (exception := options.get("exception")) is not None:
        parts.append(Traceback.from_exception(type(exception), exception, exception.__traceback__))

    return Group(*parts) if len(parts) > 1 else parts[0]


class CommandException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, "error")

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        self.options.get("console", console).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownCommandError(CommandException): ...
class MissingParameterError(CommandException): ...
class DuplicateCommandError(CommandException): ...
class HandlerError(CommandException): ...


class CommandWarning(ABC, Warning):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, "warning")

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=self.options.get("stacklevel", 2))
        self.options.get("console", console).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ShadowedCommandWarning(CommandWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace() before triggering.
    - in shell mode the fault prints on options["console"]; otherwise
      exceptions are raised and warnings are emitted through warnings.warn.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "CommandException",
    "UnknownCommandError",
    "MissingParameterError",
    "DuplicateCommandError",
    "HandlerError",
    "CommandWarning",
    "ShadowedCommandWarning",
    "trigger",
)
