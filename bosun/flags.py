"""
bosun flag declarations.

Overview
- Flags: immutable, per-command declaration of
  • switches: tokens that are present-or-absent (no parameter), e.g. "-h";
  • params: tokens that must be followed by exactly one value token, e.g. "-s";
  • placeholders: human-readable names of those values, paired by index with
    params, e.g. "[status]".

Matching is exact and case-sensitive; the parser (see bosun.parsing) splits
lines on single spaces, so a declared token may not contain whitespace.

Quick example:
    >>> flags = Flags("-h", params=("-s",), placeholders=("[status]",))
    >>> flags.match()["-s"]
    '[status]'
"""
from collections.abc import Iterable
from types import MappingProxyType

from .utils import Introspectable, Unset, coalesce


def _sanitize_tokens(cls, name, tokens, /):
    """
    Internal: validate one collection of flag tokens and stabilise it to a tuple.

    Raises
    - TypeError: the collection is a plain string, not iterable, or holds non-strings.
    - ValueError: a token is empty, contains whitespace, or is repeated.
    """
    if isinstance(tokens, str) or not isinstance(tokens, Iterable):
        raise TypeError(f"{cls.__typename__} {name!r} must be an iterable of strings")
    sanitized = []
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError(f"{cls.__typename__} {name!r} must be an iterable of strings")
        elif not token:
            raise ValueError(f"{cls.__typename__} {name!r} cannot contain empty strings")
        elif any(char.isspace() for char in token):
            raise ValueError(f"{cls.__typename__} {name!r} token {token!r} cannot contain whitespace")
        elif token in sanitized:
            raise ValueError(f"{cls.__typename__} {name!r} cannot contain duplicates")
        sanitized.append(token)
    return tuple(sanitized)


def _sanitize_placeholders(cls, placeholders, params, /):
    """
    Internal: placeholders are non-empty strings, one per parameter flag.
    """
    if isinstance(placeholders, str) or not isinstance(placeholders, Iterable):
        raise TypeError(f"{cls.__typename__} 'placeholders' must be an iterable of strings")
    sanitized = []
    for placeholder in placeholders:
        if not isinstance(placeholder, str):
            raise TypeError(f"{cls.__typename__} 'placeholders' must be an iterable of strings")
        elif not (placeholder := placeholder.strip()):
            raise ValueError(f"{cls.__typename__} 'placeholders' cannot contain empty strings")
        sanitized.append(placeholder)
    if len(sanitized) != len(params):
        raise ValueError(
            f"{cls.__typename__} expected {len(params)} placeholders for {len(params)} params, got {len(sanitized)}"
        )
    return tuple(sanitized)


class Flags(metaclass=Introspectable):
    """
    Immutable flag declaration owned by a command.

    Invariants
    - len(params) == len(placeholders).
    - No token appears twice, neither inside one collection nor across
      switches and params.

    Order
    - switches order is the help-listing order only.
    - params/placeholders order pairs each flag with its placeholder.
    """

    __introspectable__ = (
        "switches",
        "params",
        "placeholders",
    )

    def __new__(cls, *switches, params=(), placeholders=Unset):
        """
        Construct a flag declaration.

        Parameters
        - switches: str
          No-parameter flag tokens.
        - params: Iterable[str]
          Parameter flag tokens.
        - placeholders: Iterable[str]
          One placeholder per parameter flag. When omitted, each parameter flag
          is described as "[value]".
        """
        switches = _sanitize_tokens(cls, "switches", switches)
        params = _sanitize_tokens(cls, "params", params)
        placeholders = _sanitize_placeholders(cls, coalesce(placeholders, ("[value]",) * len(params)), params)

        if overlap := set(switches) & set(params):
            raise ValueError(
                f"{cls.__typename__} token {sorted(overlap)[0]!r} cannot be both a switch and a param"
            )

        self = super().__new__(cls)
        self._switches = switches
        self._params = params
        self._placeholders = placeholders
        self._known = frozenset(switches + params)
        return self

    @property
    def known(self):
        """
        Every declared token (switches and params).
        """
        return self._known

    def match(self):
        """
        Return a read-only mapping of each param flag to its placeholder.
        """
        return MappingProxyType(dict(zip(self._params, self._placeholders)))

    def placeholder(self, flag, /):
        """
        Return the placeholder of a param flag (KeyError for unknown flags).
        """
        try:
            return self._placeholders[self._params.index(flag)]
        except ValueError:
            raise KeyError(flag) from None

    def __contains__(self, token, /):
        return token in self._known

    def __bool__(self):
        return bool(self._known)

    def __eq__(self, other, /):
        if not isinstance(other, Flags):
            return NotImplemented
        return (self.switches, self.params, self.placeholders) == (other.switches, other.params, other.placeholders)

    def __hash__(self):
        return hash((self._switches, self._params, self._placeholders))

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        # new params without new placeholders fall back to "[value]"
        placeholders = overrides.pop("placeholders", Unset if "params" in overrides else self.placeholders)
        return type(self)(
            *overrides.pop("switches", self.switches),
            params=overrides.pop("params", self.params),
            placeholders=placeholders,
            **overrides
        )


__all__ = (
    "Flags",
)
