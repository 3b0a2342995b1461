"""
Navarch option/value binder: from the remaining tokens to bound options.

Tokens
- "--" (first occurrence) ends option parsing; everything after it is positional.
- "--name" / "--name=value": long option, matched case-insensitively.
- "-abc": cluster of short options; every one but the last must be a flag, the last
  one may take the next token as its value.
- anything else (including "-" and negative numbers) is a positional candidate.

Binding
- Flags take no value token; "--flag=no" style inline booleans are accepted.
- Other options take exactly the next token; an option-like token or the end of the
  stream yields MissingOptionValue (and nothing is consumed).
- Enumerable options append on every occurrence, after their default elements.
- Positional tokens fill values in ascending order; an enumerable value absorbs every
  remaining positional token. Extra tokens yield a single UnknownValue.
- Unknown options yield UnknownOption; the positional tokens after one are taken as
  its values and ignored up to the next option or "--" (none after an inline
  "--name=value", and for a short cluster only when its last letter is unknown).
- An unknown --help/--version (when offered) short-circuits with
  HelpRequested/VersionRequested for the command.
- Any exception raised by a conversion yields WrongOptionFormat/WrongValueFormat
  carrying that exception.

Post-pass
- Required options never given (and without a default) yield MissingOption, in help
  order; missing required values yield one MissingValue.
- Errors are accumulated, so one pass reports every problem it can see.
"""
import collections
import logging

from .faults import *
from .resolver import optionlike
from .utils import *

logger = logging.getLogger(__name__)


class Bound(collections.namedtuple("Bound", ("options", "errors"))):
    """
    Outcome of a binding: the populated options object, or the errors (options is None).
    """
    __slots__ = ()

    @property
    def success(self):
        return not self.errors


class _State:
    """Per-invocation accumulator; never shared between calls."""

    def __init__(self, command):
        self.command = command
        self.fields = {field.field: field.initial() for field in command.descriptor.fields}
        self.given = set()
        self.errors = []

    def assign(self, field, raw, kind):
        self.given.add(field.field)
        try:
            object = field.convert(raw)
        except Exception as exception:
            if kind is ErrorKind.WRONG_OPTION_FORMAT:
                self.errors.append(CliError(kind, command=self.command, option=field, cause=exception))
            else:
                self.errors.append(CliError(kind, command=self.command, value=field, cause=exception))
            return
        if field.enumerable:
            self.fields[field.field].append(object)
        else:
            self.fields[field.field] = object

    def error(self, kind, **fields):
        self.errors.append(CliError(kind, command=self.command, **fields))


class OptionValueBinder:
    """
    Matches tokens against the options and values of a terminal command.

    Parameters
    - options: ApplicationOptions, the source of the parser settings (command
      overrides are honored through ApplicationOptions.lookup()).
    """

    def __init__(self, options):
        self._options = options

    def bind(self, tokens, command, /):
        tokens = tuple(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("bind() tokens must be strings")

        state = _State(command)
        values = command.values
        position = 0
        escaped = ignoring = False
        index = 0

        while index < len(tokens):
            token = tokens[index]
            index += 1

            if not escaped and token == "--":
                escaped, ignoring = True, False
                continue

            if escaped or not optionlike(token):
                if ignoring:
                    continue
                if position < len(values):
                    state.assign(value := values[position], token, ErrorKind.WRONG_VALUE_FORMAT)
                    position += not value.enumerable
                elif not self._lookup("ignore_additional_values", command) and not any(
                        error.kind is ErrorKind.UNKNOWN_VALUE for error in state.errors
                ):
                    state.error(ErrorKind.UNKNOWN_VALUE)
                continue

            ignoring = False
            if token.startswith("--"):
                name, separator, inline = token[2:].partition("=")
                if (option := command.option(name)) is None:
                    if (kind := self._request(name, command)) is not None:
                        logger.debug("%s for %r", kind.title, command.route)
                        return Bound(None, (CliError(kind, command=command),))
                    ignoring = self._unknown(state, "--" + name) and not separator
                elif separator:
                    state.assign(option, inline, ErrorKind.WRONG_OPTION_FORMAT)
                else:
                    index = self._consume(state, option, tokens, index)
                continue

            cluster = token[1:]
            for offset, char in enumerate(cluster):
                if ignoring := (option := command.short(char)) is None:
                    self._unknown(state, "-" + char)
                elif option.flag:
                    state.fields[option.field] = True
                    state.given.add(option.field)
                elif offset < len(cluster) - 1:
                    state.given.add(option.field)
                    state.error(ErrorKind.MISSING_OPTION_VALUE, option=option)
                else:
                    index = self._consume(state, option, tokens, index)

        for option in sorted(command.options, key=lambda x: x.order):
            if option.required and option.field not in state.given and option.default is Unset:
                state.error(ErrorKind.MISSING_OPTION, option=option)
        for value in values:
            if value.required and value.field not in state.given and value.default is Unset:
                state.error(ErrorKind.MISSING_VALUE, value=value)
                break

        if state.errors:
            logger.debug("binding %r failed with %d error(s)", command.route, len(state.errors))
            return Bound(None, tuple(state.errors))

        options = command.type()
        for field in command.descriptor.fields:
            setattr(options, field.field, field.finalize(state.fields[field.field]))
        logger.debug("bound %r: %s", command.route, ", ".join(sorted(state.given)) or "defaults only")
        return Bound(options, ())

    def _lookup(self, setting, command):
        return self._options.lookup(setting, command)

    def _request(self, name, command):
        match casefold(name):
            case "help" if self._lookup("provide_help_options", command):
                return ErrorKind.HELP_REQUESTED
            case "version" if self._lookup("provide_version_options", command):
                return ErrorKind.VERSION_REQUESTED
        return None

    def _unknown(self, state, name):
        """Record an unknown option; returns True so the caller ignores its presumed values."""
        if not self._lookup("ignore_unknown_options", state.command):
            state.error(ErrorKind.UNKNOWN_OPTION, name=name)
        return True

    def _consume(self, state, option, tokens, index):
        if option.flag:
            state.fields[option.field] = True
            state.given.add(option.field)
            return index
        if index < len(tokens) and not optionlike(tokens[index]) and tokens[index] != "--":
            state.assign(option, tokens[index], ErrorKind.WRONG_OPTION_FORMAT)
            return index + 1
        state.given.add(option.field)
        state.error(ErrorKind.MISSING_OPTION_VALUE, option=option)
        return index


__all__ = (
    "OptionValueBinder",
    "Bound",
)
