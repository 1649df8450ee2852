"""
Beetroot utilities shared by the records, the compiler and the fault layer.

- Unset: "not provided" marker, distinct from None (a legitimate default value
  of arguments and options).
- coalesce(): resolve Unset to a fallback.
- rename(): give generated callables a stable name for tracebacks and help.
- mirror(): read-only property over a "_{name}" attribute, handing out frozen
  views of containers so compiled definitions cannot be edited in place.
"""
import functools
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker.

    There is one instance per process; it is falsy, prints as "Unset", and may
    appear in PEP 604 unions used with isinstance() (``str | Unset``).
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"


def coalesce(object, default=None, /):
    """
    Return `object`, or `default` when it is Unset.

    Falsy values (None, "", 0) are kept.
    """
    return default if object is Unset else object


def rename(name, /):
    """
    Decorator setting __name__ and __qualname__ of the decorated callable.
    """
    if not isinstance(name, str):
        raise TypeError("@rename() argument must be a string")

    def wrapper(callable, /):
        callable.__name__ = callable.__qualname__ = name
        return callable

    return wrapper


def _freeze(object):
    # strings are sequences too, and are already immutable
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    if isinstance(object, Mapping):
        return MappingProxyType(object)
    if isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Build a read-only property returning a frozen view of ``self._{name}``.
    """
    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter, doc="Read-only view of the %r field." % name)


Unset = UnsetType()


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "mirror",
)
