"""
Navarch shared helpers.

Every layer (descriptors, registry, resolver, binder, pages) builds on these:

- Unset: the "argument not given" marker. None stays a legitimate value, so
  option defaults of None and "no default at all" never get confused.
- coalesce(object, default): Unset -> default, everything else untouched.
- rename(name): decorator giving generated functions a readable __name__.
- mirror(name): read-only property over "_name" returning an immutable snapshot.
- casefold(text): the key every alias comparison goes through.
- IntrospectableType: metaclass of the descriptor, node and config objects.

    >>> coalesce(Unset, 8080), coalesce(None, 8080)
    (8080, None)
"""
import builtins
import functools
import operator
import re
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker: a falsey, process-wide singleton that refuses
    subclassing and survives copy/pickle by identity.

    It takes part in PEP 604 unions, so "str | Unset" works with isinstance().
    """

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    __ror__ = __or__

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError(f"type {UnsetType.__name__!r} is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """Return default when object is Unset (None, 0 and "" are kept)."""
    return default if object is Unset else object


def rename(*parameters):
    """
    rename(function, name) sets __name__/__qualname__ and returns function;
    rename(name) returns a decorator doing the same.
    """
    if len(parameters) == 1:
        name, = parameters
        if not isinstance(name, str):
            raise TypeError("@rename() argument must be a string")
        return functools.partial(_rename, name=name)
    if len(parameters) == 2:
        function, name = parameters
        if not isinstance(name, str):
            raise TypeError("rename() name must be a string")
        return _rename(function, name=name)
    raise TypeError(f"rename() takes 1 or 2 arguments ({len(parameters)} given)")


def _rename(function, /, *, name):
    if not builtins.callable(function):
        raise TypeError("rename() target must be callable")
    try:
        function.__name__ = function.__qualname__ = name
    except (AttributeError, TypeError):
        raise TypeError(f"cannot rename {function!r}") from None
    return function


def _freeze(object):
    """
    Recursively snapshot container values into immutable equivalents.

    - Sequence (non-string): tuple
    - Mapping: mappingproxy over a fresh dict
    - Set: frozenset
    - Anything else: returned as-is
    """
    if isinstance(object, Sequence) and not isinstance(object, str | tuple):
        return tuple(map(_freeze, object))
    elif isinstance(object, Mapping) and not isinstance(object, MappingProxyType):
        return MappingProxyType(dict(zip(object.keys(), map(_freeze, object.values()))))
    elif isinstance(object, Set) and not isinstance(object, frozenset):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads "_{name}" on the instance and returns an
    immutable snapshot for container types, so callers can never mutate
    registry or descriptor state through the public API.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


def casefold(text, /):
    """Return the case-insensitive comparison key for an alias."""
    return text.casefold()


class IntrospectableType(type):
    """
    Metaclass for the immutable metadata objects of the package.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens),
      used as the prefix of every validation message.
    - Expose each name listed in __introspectable__ as a read-only property
      backed by "_{name}" (see mirror()).
    - Provide stable __repr__/__rich_repr__ implementations; __displayable__
      (when set) narrows the fields shown.
    - With sealed=True, refuse subclassing of the resulting class.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ()) if name not in namespace
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        if "__repr__" not in namespace:
            self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        if "__rich_repr__" not in namespace:
            self.__rich_repr__ = __rich_repr__

        if options.get("sealed", False):
            @rename("__init_subclass__")
            def __init_subclass__(cls, **options):  # NOQA: F-841
                raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
            self.__init_subclass__ = classmethod(__init_subclass__)

        return self


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "casefold",

    # Types
    "UnsetType",
    "IntrospectableType",

    # Constants
    "Unset",
)
