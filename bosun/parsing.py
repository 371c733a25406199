"""
bosun line parser: split one input line against one command's flags.

What this module provides
- tokenize(line): the tokenizer shared by the parser and the shell router.
- parse(line, flags, aliases): builds a ParsedInput holding
  • the no-parameter flags present in the line (switches),
  • each present parameter flag with the token right after it (params),
  • the residual positional text (args).

Tokenizing
- Lines are split on single spaces: no quoting, no escaping. Two consecutive
  spaces produce an empty token, and interior empty tokens are ordinary tokens.
  Trailing empty tokens are dropped, so "exitf -s " ends on the flag.

Parameter errors
- A parameter flag that is the last token, or whose next token is itself one
  of the command's declared flags, puts the whole parse in an error state:
  params is None (never a partial mapping) and the offending flags are listed
  in missing. Handlers decide what to do with it.

Positional arguments
- Computed by token position: the invocation token, every switch occurrence
  and every parameter flag occurrence with its value are dropped, the rest is
  joined back with single spaces and trimmed. A value token that also shows up
  elsewhere in the line keeps its other occurrences.

Examples
    >>> flags = Flags("-h", params=("-s",), placeholders=("[status]",))
    >>> parse("exitf -s 2", flags, ("exitf",)).params
    mappingproxy({'-s': '2'})
    >>> parse("exitf -h -s", flags, ("exitf",)).params is None
    True
"""
from types import MappingProxyType

from .faults import FaultCode, MissingParameterError
from .flags import Flags
from .utils import Introspectable, ordinal


def tokenize(line, /):
    """
    Split a line on single spaces (the only tokenizing rule of the shell).

    Trailing empty tokens are dropped; at least one token is always returned.
    """
    if not isinstance(line, str):
        raise TypeError("tokenize() argument must be a string")
    tokens = line.split(" ")
    while len(tokens) > 1 and not tokens[-1]:
        tokens.pop()
    return tokens


class ParsedInput(metaclass=Introspectable):
    """
    Immutable, structured view of one dispatched line.

    Fields
    - content: the full original line.
    - switches: no-parameter flags found in the line, in line order.
    - params: read-only mapping param flag → value token, or None when a
      parameter is missing (see module docs).
    - missing: param flags that caused the error state, in line order.
    - flags: every flag present (switches and matched param flags), line order,
      without repeats; switches only when params is None.
    - args: residual positional text, "" when nothing remains.

    Two inputs compare equal when every field does.
    """

    __introspectable__ = (
        "content",
        "switches",
        "params",
        "missing",
        "flags",
        "args",
    )

    def __new__(cls, content, switches, params, missing, flags, args, *, positions=()):
        self = super().__new__(cls)
        # 1-based token positions of the missing flags, for messages only
        self._positions = tuple(positions)
        self._content = content
        self._switches = tuple(switches)
        self._params = None if params is None else MappingProxyType(dict(params))
        self._missing = tuple(missing)
        self._flags = tuple(flags)
        self._args = args
        return self

    @property
    def malformed(self):
        """
        True when a parameter flag lacked its value (params is None).
        """
        return self._params is None

    def has(self, flag, /):
        """
        Whether a flag (switch or matched param flag) is present.
        """
        return flag in self._flags

    def get(self, flag, default=None, /):
        """
        Return the value matched for a param flag, or default when absent.

        Raises MissingParameterError when the line is in the error state, since
        no parameter value can be trusted then.
        """
        if self._params is None:
            raise MissingParameterError(
                "flag %r at %s position is missing its parameter" % (
                    self._missing[0], ordinal(self._positions[0]) if self._positions else "some"
                ),
                title="missing flag parameter",
                code=FaultCode.MISSING_PARAMETER,
                flag=self._missing[0],
                hint="put a value right after the flag, separated by one space",
            )
        return self._params.get(flag, default)

    def __eq__(self, other, /):
        if not isinstance(other, ParsedInput):
            return NotImplemented
        return tuple(self.__rich_repr__()) == tuple(other.__rich_repr__())

    def __hash__(self):
        return hash((
            self._content,
            self._switches,
            None if self._params is None else tuple(self._params.items()),
            self._missing,
            self._flags,
            self._args,
        ))


def parse(line, flags, aliases=(), /):
    """
    Parse a raw line against a command's flags and invocation tokens.

    Parameters
    - line: str
      The full input line, invocation token included.
    - flags: Flags
      The command's flag declaration.
    - aliases: Iterable[str]
      The command's invocation tokens (name and aliases). When the first token
      equals one of them, ignoring case, it is consumed as the invocation token
      and excluded from flag matching.

    Returns
    - ParsedInput. Parsing is pure: the same arguments always give equal results.
    """
    if not isinstance(flags, Flags):
        raise TypeError("parse() second argument must be a flags declaration")

    tokens = tokenize(line)
    aliases = {alias.casefold() for alias in aliases}

    consumed = set()
    if tokens[0].casefold() in aliases:
        consumed.add(0)

    switches = []
    params = {}
    missing = []
    positions = []
    present = []

    index = 1 if consumed else 0
    while index < len(tokens):
        token = tokens[index]

        if token in flags.switches:
            switches.append(token)
            consumed.add(index)
            present.append(token)
        elif token in flags.params:
            consumed.add(index)
            # a value slot holding one of our own flags means the value was omitted
            if index + 1 == len(tokens) or tokens[index + 1] in flags.known:
                missing.append(token)
                positions.append(index + 1)
            else:
                params[token] = tokens[index + 1]
                consumed.add(index + 1)
                present.append(token)
                index += 1
        index += 1

    args = " ".join(token for index, token in enumerate(tokens) if index not in consumed).strip()

    if missing:
        return ParsedInput(line, switches, None, missing, dict.fromkeys(switches), args, positions=positions)
    return ParsedInput(line, switches, params, (), dict.fromkeys(present), args)


__all__ = (
    "tokenize",
    "ParsedInput",
    "parse",
)
