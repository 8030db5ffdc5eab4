"""
Command model utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the schema, conversion, validation and model layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent "value not provided" without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated accessors for clean tracebacks.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr) with
    fresh copies of containers so public reads never alias internal state.

- blank(value)
  • Blankness test used for dependency wiring, converters and presence checks:
    None, False, whitespace-only text and empty collections are blank.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> blank("   ")
    True
    >>> blank(0)
    False
"""
import builtins
import functools
from collections.abc import Sized
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Used wherever None is a legitimate value (a dependency default of None, a
    rule option of None) but the API still needs to tell "not provided" apart.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset".
    - Non-subclassable and a singleton per process.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., Unset | str).
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support reversed PEP 604 unions when Unset appears on the right.
        """
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
    Resolve the Unset sentinel to a concrete default.

    Returns the given object unless it is Unset, in which case default is
    returned. None, 0, "" and [] are preserved as-is.
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable (renamed in place)
    - @rename(name)          -> decorator
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
    Shallow-copy common containers so callers cannot mutate the original.

    Tuples, frozensets and mapping proxies are already read-only and returned
    as they are; lists, dicts and sets are copied.
    """
    if isinstance(object, list):
        return list(object)
    elif isinstance(object, dict):
        return dict(object)
    elif isinstance(object, set):
        return set(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors the private attribute "_{name}".

    Container values are copied on every read (see _detach).
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _detach(getattr(self, "_" + name))

    return property(getter)


def blank(object, /):
    """
    Return True when object carries no meaningful value.

    Blank values
    - None and False.
    - Strings that are empty or contain only whitespace.
    - Empty sized collections (sequences, mappings, sets).

    Everything else, including 0 and 0.0, is present.
    """
    if object is None or object is False:
        return True
    if isinstance(object, str):
        return not object.strip()
    if isinstance(object, Sized):
        return len(object) == 0
    return False


Unset = UnsetType()
"""
Singleton for "not provided".

Use Unset as a default when None is a valid, user-meaningful value; materialize
a fallback with coalesce(value, default).
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "blank",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
