r"""
Navarch command metadata: descriptors and the declarative provider.

Overview
- Descriptors (immutable, validated on construction)
  • OptionDescriptor: named option with short ("-t") and long ("--target") aliases.
  • ValueDescriptor: positional value, placed by its 'order'.
  • CommandDescriptor: one command, its aliases, tree position and declared fields.

- Provider
  • @command(...): class decorator that collects class-level Option/Value descriptors,
    builds the CommandDescriptor (with type=cls) and stores it as cls.__descriptor__.
  • describe(source): accept a CommandDescriptor or anything exposing __descriptor__.

- Bound options
  • Namespace: the default per-invocation options class when a command declares none.

Value types
- bool marks a flag option (presence-only, no value token).
- list[T], tuple[T, ...], set[T], frozenset[T] (or the bare containers, meaning str)
  mark enumerable fields; each parsed element is converted with T.
- enum.Enum subclasses convert by member name (case-insensitive), then by value.
- Any other callable converts with type(raw). Any exception it raises means "wrong format".

Validation highlights
- Command aliases must be non-empty, must not contain whitespace or control characters,
  must not begin with "-", and must be unique (case-insensitive) within the descriptor.
- Option names must match r"-[^\W\d_]" (short) or r"--[^\W\d_](-?[^\W_]+)*" (long);
  at least one long name is required.
- Within a command: unique fields, unique short names, unique long names (case-insensitive),
  unique value orders, no required value after an optional one, and an enumerable value
  may only be the last one.

Quick example:
    >>> @command("build", descr="Build the project")
    ... class Build:
    ...     target = OptionDescriptor("-t", "--target", required=True)
    ...     tags = OptionDescriptor("--tag", type=list[str])
    ...     source = ValueDescriptor("SOURCE", order=0)
"""
import builtins
import copy
import enum
import re
import types
import typing
from collections.abc import Iterable

from rich.text import Text

from .config import ParserOptions
from .utils import *

_ENUMERABLES = (list, tuple, set, frozenset)

_BOOLEANS = {
    "true": True, "yes": True, "on": True, "1": True,
    "false": False, "no": False, "off": False, "0": False,
}


class Namespace(types.SimpleNamespace):
    """
    Plain attribute bag used as bound options for commands that declare no class.
    """


def parse_boolean(raw, /):
    """
    Convert a textual boolean ("true/false/yes/no/on/off/1/0", any case).
    """
    try:
        return _BOOLEANS[raw.strip().casefold()]
    except KeyError:
        raise ValueError(f"invalid boolean literal {raw!r}") from None


def _convert_enum(element, raw):
    for member in element:
        if casefold(member.name) == casefold(raw):
            return member
    for member in element:
        if str(member.value) == raw:
            return member
    raise ValueError(f"{raw!r} is not a valid {element.__name__}")


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize the metadata shared by options and values.

    - descr: Unset | str | Text, trimmed, non-empty when provided (None otherwise).
    - order: int.
    - field: Unset | str identifier (None when Unset; bound later by @command).
    """
    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if not isinstance(metadata["order"], int) or isinstance(metadata["order"], bool):
        raise TypeError(f"{cls.__typename__} 'order' must be an integer")

    if not isinstance(field := metadata["field"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'field' must be a string")
    elif isinstance(field, str) and not field.isidentifier():
        raise ValueError(f"{cls.__typename__} 'field' must be a valid identifier")
    metadata["field"] = coalesce(field)


def _sanitize_type(cls, metadata, /):
    """
    Internal: split the declared 'type' into a container and an element converter.

    Sets metadata["container"] (one of list/tuple/set/frozenset, or None) and
    metadata["element"] (the per-token converter).
    """
    type = metadata["type"]
    origin = typing.get_origin(type)

    if type in _ENUMERABLES:
        container, element = type, str
    elif origin in _ENUMERABLES:
        arguments = typing.get_args(type)
        if origin is tuple:
            if len(arguments) != 2 or arguments[1] is not Ellipsis:
                raise TypeError(f"{cls.__typename__} tuple 'type' must be homogeneous (e.g. tuple[int, ...])")
        elif len(arguments) != 1:
            raise TypeError(f"{cls.__typename__} {origin.__name__} 'type' takes exactly one element type")
        container, element = origin, arguments[0]
    else:
        container, element = None, type

    if not callable(element) or element in _ENUMERABLES or typing.get_origin(element) is not None:
        raise TypeError(f"{cls.__typename__} 'type' must be callable")

    metadata["container"] = container
    metadata["element"] = element


def _sanitize_default(cls, metadata, /):
    if (default := metadata["default"]) is Unset or metadata["container"] is None:
        return
    if not isinstance(default, Iterable) or isinstance(default, str | bytes):
        raise TypeError(f"{cls.__typename__} enumerable 'default' must be an iterable")
    metadata["default"] = tuple(default)


class _Field:
    """
    Shared behavior of option and value descriptors (conversion and cloning).
    """

    @property
    def enumerable(self):
        return self._container is not None

    def convert(self, raw, /):
        """
        Convert one raw token with the element type.

        Raises whatever the converter raises on bad input (ValueError, TypeError,
        decimal.InvalidOperation, ...); the binder reports any of them as a wrong format.
        """
        element = self._element
        if element is bool:
            return parse_boolean(raw)
        if isinstance(element, builtins.type) and issubclass(element, enum.Enum):
            return _convert_enum(element, raw)
        return element(raw)

    def initial(self):
        """
        Fresh value a bound field starts with before any token is applied.
        """
        if self.enumerable:
            return list(coalesce(self._default, ()))
        if getattr(self, "_flag", False):
            return coalesce(self._default, False)
        return coalesce(self._default)

    def finalize(self, object, /):
        """
        Materialize an accumulated list into the declared container type.
        """
        if self.enumerable and self._container is not list:
            return self._container(object)
        return object

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        arguments, keywords = self._arguments
        return type(self)(*arguments, **keywords | overrides)


class OptionDescriptor(_Field, metaclass=IntrospectableType, sealed=True):
    """
    Named option specification.

    Highlights
    - shorts/longs: ordered, duplicate-free alias tuples (without leading dashes).
    - name: the first long alias; field defaults to it with "-" replaced by "_".
    - flag: True for bool options, which never consume a value token.
    - enumerable: True for container types; repeated occurrences accumulate.
    """

    __introspectable__ = (
        "name",
        "shorts",
        "longs",
        "field",
        "type",
        "container",
        "element",
        "required",
        "default",
        "order",
        "descr",
        "hidden",
        "flag",
    )

    __displayable__ = (
        "name",
        "shorts",
        "longs",
        "field",
        "type",
        "required",
        "default",
    )

    def __init__(
            self,
            *names,
            type=str,
            required=False,
            default=Unset,
            order=-1,
            descr=Unset,
            hidden=False,
            field=Unset
    ):
        cls = builtins.type(self)
        self._arguments = names, {
            "type": type,
            "required": required,
            "default": default,
            "order": order,
            "descr": descr,
            "hidden": hidden,
            "field": field,
        }

        metadata = {
            "type": type,
            "required": bool(required),
            "default": default,
            "order": order,
            "descr": descr,
            "hidden": bool(hidden),
            "field": field,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_type(cls, metadata)
        _sanitize_default(cls, metadata)

        shorts, longs, seen = [], [], set()
        if not names:
            raise TypeError(f"{cls.__typename__} must specify at least one name")
        for name in names:
            if not isinstance(name, str):
                raise TypeError(f"{cls.__typename__} names must be strings")
            elif not (name := name.strip()):
                raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
            elif match := re.fullmatch(r"-(?P<name>[^\W\d_])", name):
                shorts.append(key := match["name"])
            elif match := re.fullmatch(r"--(?P<name>[^\W\d_](-?[^\W_]+)*)", name):
                longs.append(match["name"])
                key = "--" + casefold(match["name"])
            else:
                raise ValueError(f"{cls.__typename__} names must be valid shell-style option names (unicodes are allowed)")
            if key in seen:
                raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
            seen.add(key)
        if not longs:
            raise ValueError(f"{cls.__typename__} must specify at least one long name (e.g. '--target')")

        metadata["flag"] = metadata["element"] is bool and metadata["container"] is None
        if metadata["flag"] and metadata["required"]:
            raise ValueError(f"{cls.__typename__} flags cannot be required")
        if metadata["flag"] and not isinstance(metadata["default"], bool | Unset):
            raise TypeError(f"{cls.__typename__} flag 'default' must be a boolean")

        metadata["field"] = coalesce(metadata["field"], longs[0].replace("-", "_"))
        if not metadata["field"].isidentifier():
            raise ValueError(f"{cls.__typename__} {longs[0]!r} cannot be used as a field name, pass 'field'")

        self._name = longs[0]
        self._shorts = tuple(shorts)
        self._longs = tuple(longs)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def signature(self):
        """
        Display form of every alias, shorts first (e.g. "-t, --target").
        """
        return ", ".join(["-" + name for name in self._shorts] + ["--" + name for name in self._longs])

    def matches(self, name, /):
        """Case-insensitive match of a long name (without dashes)."""
        return casefold(name) in map(casefold, self._longs)


class ValueDescriptor(_Field, metaclass=IntrospectableType, sealed=True):
    """
    Positional value specification, placed by ascending 'order'.
    """

    __introspectable__ = (
        "displayname",
        "field",
        "type",
        "container",
        "element",
        "order",
        "required",
        "default",
        "descr",
        "hidden",
    )

    __displayable__ = (
        "displayname",
        "field",
        "type",
        "order",
        "required",
        "default",
    )

    def __init__(
            self,
            displayname=Unset,
            /,
            type=str,
            order=0,
            required=False,
            default=Unset,
            descr=Unset,
            hidden=False,
            *,
            field=Unset
    ):
        cls = builtins.type(self)
        self._arguments = ((displayname,) if displayname is not Unset else ()), {
            "type": type,
            "order": order,
            "required": required,
            "default": default,
            "descr": descr,
            "hidden": hidden,
            "field": field,
        }

        metadata = {
            "type": type,
            "order": order,
            "required": bool(required),
            "default": default,
            "descr": descr,
            "hidden": bool(hidden),
            "field": field,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_type(cls, metadata)
        _sanitize_default(cls, metadata)

        if not isinstance(displayname, str | Unset):
            raise TypeError(f"{cls.__typename__} 'displayname' must be a string")
        elif isinstance(displayname, str) and not (displayname := displayname.strip()):
            raise ValueError(f"{cls.__typename__} 'displayname' cannot be empty")
        elif isinstance(displayname, str) and re.search(r"[\s\x00-\x1f\x7f-\x9f]", displayname):
            raise ValueError(f"{cls.__typename__} 'displayname' cannot contain whitespace or control characters")

        field = metadata["field"]
        if displayname is Unset and field is not None:
            displayname = field.upper().replace("_", "-")
        self._displayname = coalesce(displayname)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)


def _sanitize_aliases(cls, aliases, /):
    """
    Internal: validate command aliases and return them as an ordered tuple.
    """
    sanitized, seen = [], set()
    if not aliases:
        raise TypeError(f"{cls.__typename__} must specify at least one name")
    for alias in aliases:
        if not isinstance(alias, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (alias := alias.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif re.search(r"[\s\x00-\x1f\x7f-\x9f]", alias):
            raise ValueError(f"{cls.__typename__} name {alias!r} cannot contain whitespace or control characters")
        elif alias.startswith("-"):
            raise ValueError(f"{cls.__typename__} name {alias!r} cannot start with '-'")
        elif casefold(alias) in seen:
            raise ValueError(f"{cls.__typename__} names cannot contain duplicates (case-insensitive)")
        seen.add(casefold(alias))
        sanitized.append(alias)
    return tuple(sanitized)


def _sanitize_fields(cls, options, values, /):
    """
    Internal: cross-check the options and values declared by one command.

    Returns (options, values) as tuples, values sorted by order.
    """
    if not isinstance(options, Iterable) or not isinstance(values, Iterable):
        raise TypeError(f"{cls.__typename__} 'options' and 'values' must be iterables")
    options, values = tuple(options), tuple(values)

    fields, shorts, longs = set(), set(), set()
    for option in options:
        if not isinstance(option, OptionDescriptor):
            raise TypeError(f"{cls.__typename__} 'options' must contain option-descriptors")
        for short in option.shorts:
            if short in shorts:
                raise ValueError(f"{cls.__typename__} option name '-{short}' is declared twice")
            shorts.add(short)
        for long in option.longs:
            if casefold(long) in longs:
                raise ValueError(f"{cls.__typename__} option name '--{long}' is declared twice")
            longs.add(casefold(long))
        if option.field in fields:
            raise ValueError(f"{cls.__typename__} field {option.field!r} is declared twice")
        fields.add(option.field)

    orders = set()
    for value in values:
        if not isinstance(value, ValueDescriptor):
            raise TypeError(f"{cls.__typename__} 'values' must contain value-descriptors")
        if value.field is None:
            raise TypeError(f"{cls.__typename__} value {value.displayname!r} must declare a 'field'")
        if value.field in fields:
            raise ValueError(f"{cls.__typename__} field {value.field!r} is declared twice")
        fields.add(value.field)
        if value.order in orders:
            raise ValueError(f"{cls.__typename__} value order {value.order} is declared twice")
        orders.add(value.order)

    values = tuple(sorted(values, key=lambda x: x.order))
    optional = False
    for index, value in enumerate(values):
        if value.required and optional:
            raise ValueError(f"{cls.__typename__} required value {value.displayname!r} cannot follow an optional one")
        optional |= not value.required
        if value.enumerable and index < len(values) - 1:
            raise ValueError(f"{cls.__typename__} enumerable value {value.displayname!r} must be the last value")

    return options, values


def _generate_type(name, /):
    words = re.split(r"[^0-9A-Za-z]+", name)
    typename = "".join(word[:1].upper() + word[1:] for word in words if word)
    if not typename or not typename.isidentifier():
        typename = "Command"
    return builtins.type(typename + "Options", (Namespace,), {"__module__": __name__})


class CommandDescriptor(metaclass=IntrospectableType, sealed=True):
    """
    Static metadata for one command.

    Highlights
    - name: the first alias; aliases keep declaration order.
    - type: the identity of the command and the class bound options are built from.
    - parent: identity of the parent command, or None for root commands.
    - default: selected implicitly when no command token is given at its level.
    - order: help order (-1 by default), executable: can run (True by default).
    - parser: per-command ParserOptions overrides, or None.
    """

    __introspectable__ = (
        "name",
        "aliases",
        "type",
        "parent",
        "default",
        "order",
        "executable",
        "hidden",
        "descr",
        "options",
        "values",
        "parser",
    )

    __displayable__ = (
        "name",
        "aliases",
        "type",
        "parent",
        "default",
        "executable",
    )

    def __init__(
            self,
            *aliases,
            type=Unset,
            parent=Unset,
            default=False,
            order=-1,
            executable=True,
            hidden=False,
            descr=Unset,
            options=(),
            values=(),
            parser=Unset
    ):
        cls = builtins.type(self)
        self._aliases = _sanitize_aliases(cls, aliases)
        self._name = self._aliases[0]

        if not isinstance(type, builtins.type | Unset):
            raise TypeError(f"{cls.__typename__} 'type' must be a class")
        self._type = type if type is not Unset else _generate_type(self._name)

        if not isinstance(parent, builtins.type | Unset):
            raise TypeError(f"{cls.__typename__} 'parent' must be a class")
        if parent is self._type:
            raise ValueError(f"{cls.__typename__} cannot be its own parent")
        self._parent = coalesce(parent)

        if not isinstance(order, int) or isinstance(order, bool):
            raise TypeError(f"{cls.__typename__} 'order' must be an integer")
        self._order = order

        if not isinstance(descr, str | Text | Unset):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
        self._descr = coalesce(descr)

        if not isinstance(parser, ParserOptions | Unset):
            raise TypeError(f"{cls.__typename__} 'parser' must be a parser-options")
        self._parser = coalesce(parser)

        self._options, self._values = _sanitize_fields(cls, options, values)
        self._default = bool(default)
        self._executable = bool(executable)
        self._hidden = bool(hidden)

    @property
    def fields(self):
        """All declared options then values, in declaration/positional order."""
        return self._options + self._values


def command(*aliases, **metadata):
    """
    Declare a command on a class.

    The class-level OptionDescriptor/ValueDescriptor attributes (including inherited
    ones) become the command's fields, each bound to its attribute name. The class
    itself is the command identity and the bound-options type.

    Example
    - @command("build", "b", descr="Build things", parent=Root)
    """
    if "type" in metadata:
        raise TypeError("@command() cannot override 'type', the decorated class is used")

    def wrapper(cls):
        if not isinstance(cls, type):
            raise TypeError("@command() must be applied to a class")

        declared = {}
        for base in reversed(cls.__mro__):
            for name, object in vars(base).items():
                if isinstance(object, OptionDescriptor | ValueDescriptor):
                    declared[name] = object if object.field == name else copy.replace(object, field=name)

        options = [object for object in declared.values() if isinstance(object, OptionDescriptor)]
        values = [object for object in declared.values() if isinstance(object, ValueDescriptor)]
        cls.__descriptor__ = CommandDescriptor(*aliases, type=cls, options=options, values=values, **metadata)
        return cls

    return wrapper


def describe(source, /):
    """
    Return the CommandDescriptor behind source.

    Accepts a CommandDescriptor, a class decorated with @command, or any object
    exposing a __descriptor__ attribute (or zero-argument method) returning one.
    """
    if isinstance(source, CommandDescriptor):
        return source
    if (descriptor := getattr(source, "__descriptor__", Unset)) is Unset:
        raise TypeError(f"describe() argument must be a command-descriptor or provide __descriptor__, not {source!r}")
    if callable(descriptor) and not isinstance(descriptor, CommandDescriptor):
        descriptor = descriptor()
    if not isinstance(descriptor, CommandDescriptor):
        raise TypeError("__descriptor__ must be a command-descriptor")
    if isinstance(source, type) and descriptor.type is not source:
        raise TypeError(f"class {source.__name__!r} inherits a command descriptor but is not a command itself")
    return descriptor


__all__ = (
    "Namespace",
    "OptionDescriptor",
    "ValueDescriptor",
    "CommandDescriptor",
    "command",
    "describe",
    "parse_boolean",
)
