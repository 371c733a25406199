"""
Commands every shell registers after its own commands: helpf, versionf, exitf.
"""
from datetime import datetime

from rich import box
from rich.table import Table

from . import __title__, __version__
from .commands import Category, command
from .flags import Flags

INTERNAL = Category("Internal")

RULE = "-" * 49


def _listing(event):
    event.replyln(RULE)
    event.replyln("Commands:")
    for item in event.registry.visible():
        event.replyln("   " + item.name.upper() + ":")
        if item.aliases:
            event.replyln("      Aliases: " + ", ".join(item.aliases))
        event.replyln("      Category: " + (item.category.name or "none"))
        if item.descr is not None:
            event.replyln("      Help: " + item.descr)
        if item.usage is not None:
            event.replyln("      Arguments: " + item.usage)
        if item.flags.switches:
            event.replyln("      Flags with no parameters:")
            for count, flag in enumerate(item.flags.switches, 1):
                event.replyln(f"         #{count}: {flag}")
        if item.flags.params:
            event.replyln("      Flags with parameters:")
            for count, (flag, placeholder) in enumerate(item.flags.match().items(), 1):
                event.replyln(f"         #{count}: {flag} {placeholder}")
    event.replyln(RULE)


def _table(event):
    table = Table(title="Commands", box=box.SIMPLE_HEAD, show_lines=False)
    for column in ("Command", "Aliases", "Category", "Help", "Arguments", "Flags"):
        table.add_column(column, overflow="fold")
    for item in event.registry.visible():
        table.add_row(
            item.name,
            ", ".join(item.aliases),
            item.category.name or "none",
            item.descr or "",
            item.usage or "",
            "\n".join([*item.flags.switches, *(f"{flag} {placeholder}" for flag, placeholder in item.flags.match().items())]),
        )
    event.shell.write(table)


@command(aliases=("hf",), category=INTERNAL)
def helpf(event):
    """Returns information about all of the commands!"""
    if (helper := event.shell.helper) is not None:
        return helper(event.shell, event)
    if event.shell.fancy:
        return _table(event)
    return _listing(event)


@command(aliases=("vf",), category=INTERNAL)
def versionf(event):
    """Gets the current version of the framework!"""
    event.reply_with_border(f"Current version of {__title__} is: {__version__}")


@command(aliases=("ef", "\\q"), category=INTERNAL, flags=Flags(params=("-s",), placeholders=("[status]",)))
def exitf(event):
    """Exits the command prompt!"""
    if (params := event.resolve_params()) is None:
        return
    status = int(params.get("-s", 0))
    if status != 0:
        event.replyln()
    event.reply_with_border(f"Exiting command prompt at {datetime.now():%d/%m/%Y %I:%M:%S %p}!")
    event.shell.stop(status)


COMMANDS = (
    helpf,
    versionf,
    exitf,
)

__all__ = (
    "COMMANDS",
    "helpf",
    "versionf",
    "exitf",
)
