"""
Navarch configuration surface.

Overview
- ParserOptions
  • Six parser toggles. Every field may be Unset, meaning "inherit": a command's
    overrides win over its ancestors', which win over the application's.
- ApplicationOptions
  • Explicit, host-populated metadata (name, version, author, year, cliname, descr)
    plus the application-level ParserOptions and renderer switches.
  • Nothing here is derived from sys.argv, __main__ or package metadata; whatever
    the host does not provide stays None and is simply not rendered.

Defaults
- ignore_unknown_options    False
- ignore_additional_values  False
- provide_help_command      True
- provide_version_command   True
- provide_help_options      True
- provide_version_options   True
"""
from .utils import *

SETTINGS = (
    "ignore_unknown_options",
    "ignore_additional_values",
    "provide_help_command",
    "provide_version_command",
    "provide_help_options",
    "provide_version_options",
)


class ParserOptions(metaclass=IntrospectableType, sealed=True):
    """
    Parser toggles, possibly partial (Unset fields inherit from the enclosing scope).
    """

    __introspectable__ = SETTINGS

    def __init__(
            self,
            ignore_unknown_options=Unset,
            ignore_additional_values=Unset,
            provide_help_command=Unset,
            provide_version_command=Unset,
            provide_help_options=Unset,
            provide_version_options=Unset,
    ):
        settings = {
            "ignore_unknown_options": ignore_unknown_options,
            "ignore_additional_values": ignore_additional_values,
            "provide_help_command": provide_help_command,
            "provide_version_command": provide_version_command,
            "provide_help_options": provide_help_options,
            "provide_version_options": provide_version_options,
        }
        for name, value in settings.items():
            if not isinstance(value, bool | Unset):
                raise TypeError(f"{type(self).__typename__} {name!r} must be a boolean")
            setattr(self, "_" + name, value)

    def merge(self, fallback, /):
        """
        Return new options where every Unset field is taken from fallback.
        """
        if not isinstance(fallback, ParserOptions):
            raise TypeError("merge() argument must be a parser-options")
        return ParserOptions(**{
            name: coalesce(getattr(self, name), getattr(fallback, name)) for name in SETTINGS
        })

    def __eq__(self, other):
        if not isinstance(other, ParserOptions):
            return NotImplemented
        return all(getattr(self, name) is getattr(other, name) for name in SETTINGS)

    def __hash__(self):
        return hash(tuple(getattr(self, name) for name in SETTINGS))


DEFAULTS = ParserOptions(
    ignore_unknown_options=False,
    ignore_additional_values=False,
    provide_help_command=True,
    provide_version_command=True,
    provide_help_options=True,
    provide_version_options=True,
)


def _sanitize_string(cls, name, value):
    if not isinstance(value, str | Unset):
        raise TypeError(f"{cls.__typename__} {name!r} must be a string")
    elif isinstance(value, str) and not (value := value.strip()):
        raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
    return coalesce(value)


class ApplicationOptions(metaclass=IntrospectableType, sealed=True):
    """
    Application-wide configuration, passed down explicitly to every layer.

    Properties
    - name, version, author, year, cliname, descr: str | None (year may be an int)
    - parser: ParserOptions with every field resolved (no Unset left)
    - colorful, fancy: renderer switches
    - styles: palette overrides merged over the renderer's built-in palette
    """

    __introspectable__ = (
        "name",
        "version",
        "author",
        "year",
        "cliname",
        "descr",
        "parser",
        "colorful",
        "fancy",
        "styles",
    )

    __displayable__ = (
        "name",
        "version",
        "cliname",
        "parser",
    )

    def __init__(
            self,
            name=Unset,
            version=Unset,
            author=Unset,
            year=Unset,
            cliname=Unset,
            descr=Unset,
            parser=Unset,
            *,
            colorful=True,
            fancy=False,
            styles=Unset
    ):
        cls = type(self)
        self._name = _sanitize_string(cls, "name", name)
        self._version = _sanitize_string(cls, "version", version)
        self._author = _sanitize_string(cls, "author", author)
        self._descr = _sanitize_string(cls, "descr", descr)
        self._cliname = coalesce(_sanitize_string(cls, "cliname", cliname), self._name)

        if not isinstance(year, int | str | Unset) or isinstance(year, bool):
            raise TypeError(f"{cls.__typename__} 'year' must be an integer or a string")
        self._year = coalesce(year)

        if not isinstance(parser, ParserOptions | Unset):
            raise TypeError(f"{cls.__typename__} 'parser' must be a parser-options")
        self._parser = coalesce(parser, ParserOptions()).merge(DEFAULTS)

        if not isinstance(styles, dict | Unset):
            raise TypeError(f"{cls.__typename__} 'styles' must be a dictionary")
        self._styles = dict(coalesce(styles, {}))

        self._colorful = bool(colorful)
        self._fancy = bool(fancy)

    @property
    def copyright(self):
        """
        "Copyright (C) <year> <author>" or None when neither is known.
        """
        if self._year is None and self._author is None:
            return None
        return " ".join(
            str(part) for part in ("Copyright (C)", self._year, self._author) if part is not None
        )

    def lookup(self, setting, /, command=None):
        """
        Resolve the effective value of a parser setting for the given command.

        The command's own overrides are consulted first, then each ancestor's up to
        the root, and finally the application-level value.
        """
        if setting not in SETTINGS:
            raise ValueError(f"unknown parser setting {setting!r}")
        while command is not None:
            if (parser := command.descriptor.parser) is not None:
                if (value := getattr(parser, setting)) is not Unset:
                    return value
            command = command.parent
        return getattr(self._parser, setting)


__all__ = (
    "ParserOptions",
    "ApplicationOptions",
)
