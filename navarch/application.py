"""
Navarch applications: the parse → validate → dispatch pipeline.

Overview
- Application
  • register()/remove()/command(): build the command tree (delegates to CommandRegistry).
  • parse(args): resolve → bind → validate; never raises for bad user input and never
    executes anything. Returns a ParseResult carrying either the command, its bound
    options and an execution context, or the ordered CliError list.
  • run(args): parse, then render the help/version/error page (returning 0 for pure
    help/version requests, 1 otherwise) or dispatch and return the executor's exit code.
- AsyncApplication
  • Same surface; run() is a coroutine and awaits asynchronous executors.

Arguments
- Unset: sys.argv[1:].
- str: split shell-style (shlex), handy for tests and embedded shells.
- any iterable of strings.

Notes
- The pipeline never partially executes a command: any error stops it before dispatch.
- Executor exceptions are not caught here.
"""
import collections
import logging
import shlex
import sys

from .binder import OptionValueBinder
from .config import ApplicationOptions
from .descriptors import command as declare
from .executors import ExecutionContext
from .pages import HelpPage
from .registry import CommandRegistry
from .resolver import ArgumentResolver
from .utils import *

logger = logging.getLogger(__name__)


class ParseResult(collections.namedtuple("ParseResult", ("command", "options", "errors", "context"))):
    """
    Outcome of Application.parse().

    - command: the terminal CommandNode (None on failure)
    - options: the bound options object (None on failure)
    - errors: tuple of CliError, empty on success
    - context: ExecutionContext for the dispatch (None on failure)
    """
    __slots__ = ()

    @property
    def success(self):
        return not self.errors

    @property
    def informational(self):
        """True when the result is only a help/version request."""
        return bool(self.errors) and all(error.informational for error in self.errors)


def _tokenize(args, /):
    match args:
        case UnsetType():
            return tuple(sys.argv[1:])
        case str():
            return tuple(shlex.split(args))
        case _ if hasattr(args, "__iter__"):
            tokens = tuple(args)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("application arguments must be strings")
            return tokens
        case _:
            raise TypeError("application arguments must be a string or an iterable of strings")


class Application:
    """
    A command-line application built from registered commands.

    Parameters
    - options: ApplicationOptions (name, version, parser settings, renderer switches)
    - page: page renderer with a write(registry, errors) method (HelpPage by default)
    - console: rich Console handed to the default HelpPage
    """

    def __init__(self, options=Unset, /, *, page=Unset, console=Unset):
        if not isinstance(options, ApplicationOptions | Unset):
            raise TypeError("application 'options' must be an application-options")
        self._options = coalesce(options, ApplicationOptions())
        self._registry = CommandRegistry(self._options)
        self._resolver = ArgumentResolver(self._registry, self._options)
        self._binder = OptionValueBinder(self._options)
        self._page = page if page is not Unset else HelpPage(self._options, console)

    @property
    def options(self):
        return self._options

    @property
    def registry(self):
        return self._registry

    @property
    def page(self):
        return self._page

    def register(self, source, executor=Unset, /):
        return self._registry.register(source, executor)

    def remove(self, identity, /):
        return self._registry.remove(identity)

    def command(self, *aliases, executor=Unset, **metadata):
        """
        Decorator: declare a command on a class (see descriptors.command) and register it.
        """
        def wrapper(cls):
            cls = declare(*aliases, **metadata)(cls)
            self.register(cls, executor)
            return cls

        return wrapper

    def parse(self, args=Unset, /, *, cancellation=None):
        tokens = _tokenize(args)

        resolution = self._resolver.resolve(tokens)
        if not resolution.success:
            return self._failed(resolution.errors)
        command = resolution.command

        bound = self._binder.bind(resolution.tokens, command)
        if not bound.success:
            return self._failed(bound.errors)

        context = ExecutionContext(self, command, cancellation)
        if errors := command.validate(context, bound.options):
            return self._failed(errors)

        logger.debug("parsed %r", command.route)
        return ParseResult(command, bound.options, (), context)

    def _failed(self, errors):
        errors = tuple(errors)
        if all(error.informational for error in errors):
            logger.debug("parse short-circuited: %s", ", ".join(error.kind.name for error in errors))
        else:
            logger.info("parse failed: %s", ", ".join(error.kind.name for error in errors))
        return ParseResult(None, None, errors, None)

    def report(self, result, /):
        """
        Render a failed ParseResult and return the matching exit code.
        """
        self._page.write(self._registry, result.errors)
        return 0 if result.informational else 1

    def run(self, args=Unset, /, *, cancellation=None):
        result = self.parse(args, cancellation=cancellation)
        if not result.success:
            return self.report(result)
        return result.command.execute(result.context, result.options)


class AsyncApplication(Application):
    """
    Application whose run() is a coroutine; synchronous executors are called inline.
    """

    async def run(self, args=Unset, /, *, cancellation=None):
        result = self.parse(args, cancellation=cancellation)
        if not result.success:
            return self.report(result)
        return await result.command.execute_async(result.context, result.options)


__all__ = (
    "Application",
    "AsyncApplication",
    "ParseResult",
)
