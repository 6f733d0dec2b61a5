"""
minopt utilities (internal helpers, carefully exposed)

Overview
- UnsetType / Unset
  • Singleton sentinel for “value not provided”, distinct from None.
  • Falsey, printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default; None/""/[] are preserved.

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated callables.

- mirror("attr")
  • Read-only property exposing a private backing field (self._attr); mutable
    builtin containers are handed out as copies.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
"""
import builtins
import functools
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Used where None is a legitimate value (e.g. a parser without banner vs.
    a banner that was explicitly passed). Materialize it with coalesce().
    """

    def __or__(self, other, /):
        try:
            return other | type(self)
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


def coalesce(object, default=None, /):
    """
    Return object unless it is the Unset sentinel, in which case return default.

    Examples
    - coalesce("Usage: tool", "")  -> "Usage: tool"
    - coalesce(Unset, "")          -> ""
    - coalesce(None, "")           -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable, or return a decorator doing so.

    - rename(callable, name) -> callable
    - rename(name) -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
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
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _detach(object):
    """
    Copy mutable builtin containers (recursively); return anything else as-is.

    Immutable values (str, bool, tuple, RuleSet...) are shared, lists/dicts/sets
    are rebuilt so callers cannot mutate the owner's state through a property.
    """
    if isinstance(object, list):
        return list(map(_detach, object))
    elif isinstance(object, dict):
        return dict(zip(object.keys(), map(_detach, object.values())))
    elif isinstance(object, set):
        return set(map(_detach, object))
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors the backing attribute "_{name}".

    Example
    - Given self._short, declare short = mirror("short").
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _detach(getattr(self, "_" + name))

    return property(getter)


Unset = UnsetType()
"""
Internal sentinel for “not provided”. Singleton, falsey, distinct from None.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
