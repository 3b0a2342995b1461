"""
Navarch argument resolver: from raw tokens to the terminal command.

Algorithm
- Empty input selects the root default command, or fails with MissingCommand.
- The first token is matched, case-insensitively and in this order, against:
  • the built-in "help"/"version" commands (when offered at the root);
  • the built-in "--help"/"--version" options (first token of the stream only);
  • an option-like token (or "--"), which hands the whole stream to the root default
    command, else UnknownCommand(token);
  • the root command aliases, else UnknownCommand(token).
- Descent then follows child aliases one token at a time. "help"/"version" directly
  after a resolved command request help/version for that command.
- A non-executable terminal falls back through its default children; without one,
  resolution fails with MissingCommand scoped to that command.

Help/version requests
- They are reported as HelpRequested/VersionRequested errors so every non-success
  outcome leaves through the same exit path. The tokens following the request are
  resolved as a command path; the deepest command reached is the affected one, and a
  token that matches nothing adds an UnknownCommand error after the request.
"""
import collections
import logging
import re

from .faults import *
from .utils import *

logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"-(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?")


def optionlike(token, /):
    """
    True for tokens shaped like an option ("-x", "--name"); "-", "--" and negative
    numbers are not.
    """
    return len(token) > 1 and token.startswith("-") and token != "--" and not _NUMBER.fullmatch(token)


class Resolution(collections.namedtuple("Resolution", ("command", "tokens", "errors"))):
    """
    Outcome of a resolution: the terminal command and the unconsumed tokens, or the
    errors (in which case command is None).
    """
    __slots__ = ()

    @property
    def success(self):
        return not self.errors


class ArgumentResolver:
    """
    Walks the command tree of a registry.

    Parameters
    - registry: CommandRegistry
    - options: ApplicationOptions (defaults to the registry's)
    """

    def __init__(self, registry, options=Unset):
        self._registry = registry
        self._options = coalesce(options, registry.options)

    def resolve(self, tokens, /):
        tokens = tuple(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("resolve() tokens must be strings")

        if not tokens:
            if (default := self._registry.resolve_default()) is None:
                return self._fail(tokens, CliError(ErrorKind.MISSING_COMMAND))
            return self._terminal(default, tokens)

        head, *tail = tokens
        if (kind := self._request(head, None)) is not None:
            return self._requested(kind, None, tail)
        if (kind := self._option_request(head)) is not None:
            return self._requested(kind, None, tail)

        if optionlike(head) or head == "--":
            if (default := self._registry.resolve_default()) is None:
                return self._fail(tokens, CliError(ErrorKind.UNKNOWN_COMMAND, name=head))
            return self._terminal(default, tokens)

        if (node := self._registry.find(head)) is None:
            return self._fail(tokens, CliError(ErrorKind.UNKNOWN_COMMAND, name=head))

        index = 1
        while index < len(tokens):
            if (kind := self._request(tokens[index], node)) is not None:
                return self._requested(kind, node, tokens[index + 1:])
            if (child := node.child(tokens[index])) is None:
                break
            node, index = child, index + 1

        remaining = tokens[index:]
        if remaining and node.children and not node.values and not optionlike(remaining[0]) and remaining[0] != "--":
            return self._fail(remaining, CliError(ErrorKind.UNKNOWN_COMMAND, command=node, name=remaining[0]))

        return self._terminal(node, remaining)

    def _request(self, token, node, /):
        match casefold(token):
            case "help" if self._options.lookup("provide_help_command", node):
                return ErrorKind.HELP_REQUESTED
            case "version" if self._options.lookup("provide_version_command", node):
                return ErrorKind.VERSION_REQUESTED
        return None

    def _option_request(self, token, /):
        match casefold(token):
            case "--help" if self._options.lookup("provide_help_options"):
                return ErrorKind.HELP_REQUESTED
            case "--version" if self._options.lookup("provide_version_options"):
                return ErrorKind.VERSION_REQUESTED
        return None

    def _requested(self, kind, node, tokens, /):
        target, errors = node, []
        for token in tokens:
            if optionlike(token) or token == "--":
                break
            if (child := self._registry.find(token, target)) is None:
                errors.append(CliError(ErrorKind.UNKNOWN_COMMAND, command=target, name=token))
                break
            target = child
        logger.debug("%s for %r", kind.title, target.route if target is not None else None)
        return Resolution(None, (), (CliError(kind, command=target), *errors))

    def _terminal(self, node, tokens, /):
        current = node
        while not current.executable:
            if (default := self._registry.resolve_default(current)) is None:
                return self._fail(tokens, CliError(ErrorKind.MISSING_COMMAND, command=node))
            current = default
        logger.debug("resolved command %r with %d remaining token(s)", current.route, len(tokens))
        return Resolution(current, tuple(tokens), ())

    def _fail(self, tokens, error, /):
        logger.debug("resolution failed: %s", error.message)
        return Resolution(None, tuple(tokens), (error,))


__all__ = (
    "ArgumentResolver",
    "Resolution",
    "optionlike",
)
