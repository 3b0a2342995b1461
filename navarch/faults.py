"""
Navarch faults: parse-time errors (values) and setup-time failures (exceptions).

Scope
- ErrorKind: canonical, stable numeric identifiers for every user-facing parse outcome.
- CliError: immutable value describing one problem found while resolving, binding or
  validating a command line. Never raised; collected into ordered lists.
- RegistrationError and friends: hard failures signalling a bug in the hosting
  application's setup (duplicate identity/alias/default, missing parent, ...).
- CommandNotExecutableError: invalid dispatch on a node that cannot run.

Two tiers
- CliError values are returned by the parser so that a single pass can report every
  independent problem. Help and version requests travel the same path even though
  they are not faults, which keeps a single exit path for rendering.
- Exceptions are reserved for programming errors and propagate to the host untouched.

Rendering
- CliError.message rebuilds the user-facing sentence from the structured fields only
  (kind + command/option/value/name/message), so it is deterministic and never needs
  the original tokens.
- CliError.__rich__ renders a compact "[ code | title ]" header plus the message.
"""
from enum import IntEnum

from rich.console import Group
from rich.text import Text

from .utils import *


class ErrorKind(IntEnum):
    """
    canonical error kinds used across the parser (stable identifiers).

    numbering groups kinds by domain:
    - informational short-circuits (100xx)
      • VERSION_REQUESTED, HELP_REQUESTED
    - routing (1110x)
      • UNKNOWN_COMMAND, MISSING_COMMAND, COMMAND_NOT_EXECUTABLE
    - options (1111x)
      • UNKNOWN_OPTION, MISSING_OPTION, MISSING_OPTION_VALUE, WRONG_OPTION_FORMAT
    - values (1112x)
      • UNKNOWN_VALUE, WRONG_VALUE_FORMAT, MISSING_VALUE
    - delegated (11131)
      • CUSTOM
    - fallback (11999)
      • UNKNOWN
    """
    # --- informational (10xxx) ---
    VERSION_REQUESTED      = 10001
    HELP_REQUESTED         = 10002

    # --- routing errors (1110x) ---
    UNKNOWN_COMMAND        = 11101
    MISSING_COMMAND        = 11102
    COMMAND_NOT_EXECUTABLE = 11103

    # --- option errors (1111x) ---
    UNKNOWN_OPTION         = 11112
    MISSING_OPTION         = 11113
    MISSING_OPTION_VALUE   = 11117
    WRONG_OPTION_FORMAT    = 11118

    # --- value errors (1112x) ---
    UNKNOWN_VALUE          = 11121
    WRONG_VALUE_FORMAT     = 11124
    MISSING_VALUE          = 11125

    # --- delegated errors (11131) ---
    CUSTOM                 = 11131

    # --- fallback ---
    UNKNOWN                = 11999

    @property
    def informational(self):
        """True for help/version requests, which are outcomes rather than faults."""
        return self in (ErrorKind.HELP_REQUESTED, ErrorKind.VERSION_REQUESTED)

    @property
    def title(self):
        return self.name.replace("_", " ").lower()


# fields each kind cannot be built without
_REQUIREMENTS = {
    ErrorKind.UNKNOWN_COMMAND: "name",
    ErrorKind.UNKNOWN_OPTION: "name",
    ErrorKind.MISSING_OPTION: "option",
    ErrorKind.MISSING_OPTION_VALUE: "option",
    ErrorKind.WRONG_OPTION_FORMAT: "option",
    ErrorKind.WRONG_VALUE_FORMAT: "value",
    ErrorKind.COMMAND_NOT_EXECUTABLE: "command",
    ErrorKind.CUSTOM: "message",
}


class CliError:
    """
    One structured problem (or help/version request) produced by a parse attempt.

    Fields
    - kind: ErrorKind
    - command: CommandNode | None, the affected command (a reference, not owned)
    - option: OptionDescriptor | None
    - value: ValueDescriptor | None
    - name: str | None, the offending token for unknown commands/options
    - message: str | None, the text of a custom error
    - cause: BaseException | None, the converter failure behind a format error

    Instances are immutable; use copy.replace() to derive a re-scoped copy.
    """

    __introspectable__ = (
        "kind",
        "command",
        "option",
        "value",
        "name",
        "message",
        "cause",
    )

    __slots__ = tuple("_" + name for name in __introspectable__)

    def __init__(
            self,
            kind,
            /,
            *,
            command=None,
            option=None,
            value=None,
            name=None,
            message=None,
            cause=None
    ):
        if not isinstance(kind, ErrorKind):
            raise TypeError("cli-error 'kind' must be an error-kind")
        if not isinstance(name, str | None):
            raise TypeError("cli-error 'name' must be a string")
        if not isinstance(message, str | None):
            raise TypeError("cli-error 'message' must be a string")
        if not isinstance(cause, BaseException | None):
            raise TypeError("cli-error 'cause' must be an exception")
        fields = {
            "kind": kind,
            "command": command,
            "option": option,
            "value": value,
            "name": name,
            "message": message,
            "cause": cause,
        }
        if (required := _REQUIREMENTS.get(kind)) and fields[required] is None:
            raise TypeError(f"cli-error of kind {kind.name} requires a {required!r}")

        for field, object_ in fields.items():
            object.__setattr__(self, "_" + field, object_)

    kind = mirror("kind")
    command = mirror("command")
    option = mirror("option")
    value = mirror("value")
    name = mirror("name")
    cause = mirror("cause")

    @property
    def message(self):
        """
        Deterministic user-facing sentence rebuilt from the structured fields.
        """
        match self._kind:
            case ErrorKind.CUSTOM:
                return self._message
            case ErrorKind.HELP_REQUESTED:
                return "Help was requested."
            case ErrorKind.VERSION_REQUESTED:
                return "Version was requested."
            case ErrorKind.UNKNOWN_COMMAND:
                return f'The command "{self._name}" is unknown.'
            case ErrorKind.UNKNOWN_OPTION:
                return f'The option "{self._name}" is unknown.'
            case ErrorKind.UNKNOWN_VALUE:
                return "Too many values given."
            case ErrorKind.MISSING_COMMAND:
                return "No command has been provided."
            case ErrorKind.MISSING_OPTION:
                return f"The option {self._option.signature} is required."
            case ErrorKind.MISSING_OPTION_VALUE:
                return f"The option {self._option.signature} requires a value."
            case ErrorKind.MISSING_VALUE:
                return "One or more values for this command are missing."
            case ErrorKind.WRONG_OPTION_FORMAT:
                return f"The value for option {self._option.signature} has the wrong format."
            case ErrorKind.WRONG_VALUE_FORMAT:
                return f"The value <{self._value.displayname}> has the wrong format."
            case ErrorKind.COMMAND_NOT_EXECUTABLE:
                return f'The command "{self._command.name}" is not executable.'
            case _:
                return "Unknown error."

    @property
    def informational(self):
        return self._kind.informational

    def __setattr__(self, name, value):
        raise AttributeError(f"cli-error is immutable, cannot assign {name!r}")

    def __delattr__(self, name):
        raise AttributeError(f"cli-error is immutable, cannot delete {name!r}")

    def _key(self):
        return (
            self._kind,
            id(self._command) if self._command is not None else None,
            id(self._option) if self._option is not None else None,
            id(self._value) if self._value is not None else None,
            self._name,
            self._message,
            self._cause,
        )

    def __eq__(self, other):
        if not isinstance(other, CliError):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key()[:-1])

    def __str__(self):
        return self.message

    def __repr__(self):
        return "cli-error(%s)" % ", ".join(
            "%s=%r" % (name, value) for name, value in self.__rich_repr__()
        )

    def __rich_repr__(self):
        yield "kind", self._kind
        for name in self.__introspectable__[1:]:
            if name == "command" and self._command is not None:
                yield name, self._command.name
            elif (value := getattr(self, "_" + name)) is not None:
                yield name, value

    def __rich__(self):
        style = "bold #00E5FF" if self.informational else "bold #FF4DA6"
        header = Text.assemble(
            "[ ",
            Text(str(self._kind.value), "bold #00E5FF"),
            " | ",
            Text(self._kind.title, style),
            " ]",
        )
        return Group(header, Text(self.message, "#C8C8D0"))

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        fields = {name: getattr(self, "_" + name) for name in self.__introspectable__[1:]}
        return type(self)(overrides.pop("kind", self._kind), **fields | overrides)


class RegistrationError(ValueError):
    """A command could not be added to a registry; the registry is left untouched."""


class DuplicateCommandError(RegistrationError): ...
class DuplicateAliasError(RegistrationError): ...
class DuplicateDefaultError(RegistrationError): ...
class MissingParentError(RegistrationError): ...
class ReservedNameError(RegistrationError): ...
class ExecutorBindingError(RegistrationError): ...


class CommandNotExecutableError(RuntimeError):
    """
    Raised when dispatch targets a node that cannot execute.

    The resolver never returns such a terminal, so reaching this means the host
    bypassed resolution. The matching CliError is kept on .error for renderers.
    """

    def __init__(self, command, /):
        self.command = command
        self.error = CliError(ErrorKind.COMMAND_NOT_EXECUTABLE, command=command)
        super().__init__(self.error.message)


__all__ = (
    "ErrorKind",
    "CliError",
    "RegistrationError",
    "DuplicateCommandError",
    "DuplicateAliasError",
    "DuplicateDefaultError",
    "MissingParentError",
    "ReservedNameError",
    "ExecutorBindingError",
    "CommandNotExecutableError",
)
