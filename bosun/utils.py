"""
bosun utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the flags, parsing, commands and shell layers.

Overview
- UnsetType / Unset
  • Singleton sentinel for “option not provided”, distinct from None.
- coalesce(value, default=None)
  • Replace Unset with a default while preserving None/0/""/().
- rename(callable, name) / @rename("name")
  • Stable __name__/__qualname__ for generated accessors.
- view("attr")
  • Read-only property over a private "_attr" field, frozen for containers.
- ordinal(number)
  • "first", "second", … "11th", "22nd" for position-first messages.
- Introspectable
  • Metaclass giving specs a __typename__, read-only views and stable reprs.
"""
import functools
import operator
import re
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Sentinel type for keyword options that were not provided.

    Characteristics
    - Boolean-false, printable as "Unset", one instance per process.
    - Sealed: subclassing raises TypeError.
    """

    def __or__(self, other, /):
        """
        Support `str | Unset` in isinstance checks.
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Return `default` when `object` is Unset, otherwise `object` unchanged.

    Falsey values such as None, 0, "" or () are user values and are preserved.

    Examples
    - coalesce(Unset, "$") -> "$"
    - coalesce("", "$")    -> ""
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable, or return a decorator doing so.

    Forms
    - rename(callable, name) -> callable
    - rename(name)           -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _freeze(object):
    # shallow: tuples, read-only mappings and frozensets
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    if isinstance(object, MappingProxyType):
        return object
    if isinstance(object, Mapping):
        return MappingProxyType(object)
    if isinstance(object, Set):
        return frozenset(object)
    return object


def view(name, /):
    """
    Define a read-only property over the private field "_{name}".

    Containers are handed out frozen (tuple / MappingProxyType / frozenset) so
    callers cannot mutate the state of a registered command or a parsed line.
    """
    if not isinstance(name, str):
        raise TypeError("view() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


@functools.cache
def ordinal(number, /):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are spelled out ("first" … "tenth").
    - Other numbers use numeric suffixes, with the 11th/12th/13th exception.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass
    if 10 < number % 100 < 20:
        return f"{number}th"
    return f"{number}%s" % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


class Introspectable(type):
    """
    Metaclass for the immutable value objects of the package.

    Responsibilities
    - __typename__: class name split on capitals and lowercased ("ParsedInput"
      → "parsed-input"), used as the prefix of validation messages.
    - One read-only view() property per name listed in __introspectable__.
    - __repr__ / __rich_repr__ built from those same names (a class defining
      its own __repr__ keeps it).
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                field: view(field) for field in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for field in type(self).__introspectable__:
                yield field, getattr(self, field)

        if "__repr__" not in namespace:
            self.__repr__ = __repr__
        self.__rich_repr__ = __rich_repr__
        return self


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "view",
    "ordinal",
    "Introspectable",
)
