"""
Navarch executor bindings, validation hooks and dispatch.

Overview
- Bindings (selected once, at registration, and stored on the command node)
  • Direct: the bound options object runs itself via options.__execute__(context).
  • External: a separate executor runs it via executor.__execute__(context, options).
    The executor may be given as an instance, or as a class instantiated lazily (once).
  • Function: a plain callable invoked as function(context, options).
  Each binding is synchronous or asynchronous ("asynchronous" is detected from
  __execute__ / the function being a coroutine function).

- Dispatch
  • execute(node, context, options) -> int: runs any binding to completion; awaitable
    results are driven with asyncio.run().
  • execute_async(node, context, options) -> int: awaits asynchronous bindings and calls
    synchronous ones inline.
  • Executor bodies are never wrapped: whatever they raise reaches the caller untouched.
  • A None result counts as exit code 0.

- Validation hooks
  • options.__validate__(context)            (any options object)
  • executor.__validate__(context, options)  (External bindings)
  Hooks return None, a CliError, a string (a Custom error) or an iterable of those.
"""
import asyncio
import copy
import inspect
import logging

from .faults import *
from .utils import *

logger = logging.getLogger(__name__)


class ExecutionContext(metaclass=IntrospectableType, sealed=True):
    """
    What an executor receives besides the bound options.

    - application: the Application (or AsyncApplication) that parsed the command line
    - command: the CommandNode being executed
    - cancellation: opaque host token (e.g. an asyncio.Event), never inspected here
    """

    __introspectable__ = (
        "application",
        "command",
        "cancellation",
    )

    __displayable__ = (
        "command",
    )

    def __init__(self, application, command, cancellation=None):
        if command is None:
            raise TypeError(f"{type(self).__typename__} requires a command")
        self._application = application
        self._command = command
        self._cancellation = cancellation

    def __rich_repr__(self):
        yield "command", self._command.route


def _asynchronous(function):
    return inspect.iscoroutinefunction(function)


class Direct(metaclass=IntrospectableType, sealed=True):
    """Binding for options classes that implement __execute__ themselves."""

    __introspectable__ = ("asynchronous",)
    __match_args__ = ("asynchronous",)

    def __init__(self, asynchronous=False):
        self._asynchronous = bool(asynchronous)

    @classmethod
    def supports(cls, type, /):
        return callable(getattr(type, "__execute__", None))

    @classmethod
    def of(cls, type, /):
        return cls(_asynchronous(type.__execute__))


class External(metaclass=IntrospectableType, sealed=True):
    """
    Binding for a separate executor object.

    When given a class, the instance is created on first use and reused afterwards.
    """

    __introspectable__ = ("executor", "asynchronous")
    __match_args__ = ("executor", "asynchronous")

    def __init__(self, executor):
        if not callable(getattr(executor, "__execute__", None)):
            raise TypeError(f"{type(self).__typename__} executor must implement __execute__(context, options)")
        self._executor = executor
        self._instance = Unset if isinstance(executor, type) else executor
        self._asynchronous = _asynchronous(executor.__execute__)

    @property
    def instance(self):
        if self._instance is Unset:
            logger.debug("instantiating executor %s", self._executor.__qualname__)
            self._instance = self._executor()
        return self._instance

    @property
    def validator(self):
        """The bound __validate__ hook of the executor, or None."""
        if not callable(getattr(self._executor, "__validate__", None)):
            return None
        return self.instance.__validate__


class Function(metaclass=IntrospectableType, sealed=True):
    """Binding for a plain function(context, options)."""

    __introspectable__ = ("function", "asynchronous")
    __match_args__ = ("function", "asynchronous")

    def __init__(self, function):
        if not callable(function):
            raise TypeError(f"{type(self).__typename__} 'function' must be callable")
        self._function = function
        self._asynchronous = _asynchronous(function)


def executor_of(descriptor, executor=Unset, /):
    """
    Select the binding for a command.

    - Unset: Direct when the options class implements __execute__, else None.
    - Direct/External/Function: used as-is.
    - anything implementing __execute__ (class or instance): External.
    - any other callable: Function.
    """
    match executor:
        case UnsetType():
            return Direct.of(descriptor.type) if Direct.supports(descriptor.type) else None
        case Direct() | External() | Function():
            return executor
        case _ if callable(getattr(executor, "__execute__", None)):
            return External(executor)
        case _ if callable(executor):
            return Function(executor)
        case _:
            raise ExecutorBindingError(
                f"executor for command {descriptor.name!r} must be a function or implement __execute__"
            )


def _invoke(binding, context, options):
    match binding:
        case Direct():
            return options.__execute__(context)
        case External():
            return binding.instance.__execute__(context, options)
        case Function(function):
            return function(context, options)
        case _:
            raise TypeError(f"unsupported executor binding {binding!r}")


def _check(node, context):
    if not node.executable:
        raise CommandNotExecutableError(node)
    if context.command is not node:
        raise ValueError(f"execution context belongs to {context.command.name!r}, not to {node.name!r}")


async def _settle(awaitable):
    return await awaitable


def execute(node, context, options, /):
    """
    Run the node's executor to completion and return its exit code.
    """
    _check(node, context)
    logger.debug("executing %r via %r", node.route, node.executor)
    result = _invoke(node.executor, context, options)
    if inspect.isawaitable(result):
        result = asyncio.run(_settle(result))
    return 0 if result is None else result


async def execute_async(node, context, options, /):
    """
    Await the node's executor (or call it inline when synchronous) and return its exit code.
    """
    _check(node, context)
    logger.debug("executing %r asynchronously via %r", node.route, node.executor)
    result = _invoke(node.executor, context, options)
    if inspect.isawaitable(result):
        result = await result
    return 0 if result is None else result


def _collect(node, outcome):
    match outcome:
        case None:
            return []
        case CliError() if outcome.command is None:
            return [copy.replace(outcome, command=node)]
        case CliError():
            return [outcome]
        case str():
            return [CliError(ErrorKind.CUSTOM, command=node, message=outcome)]
        case _ if hasattr(outcome, "__iter__"):
            return [error for item in outcome for error in _collect(node, item)]
        case _:
            raise TypeError(f"validator of {node.name!r} returned {type(outcome).__name__}, expected errors")


def validate(node, context, options, /):
    """
    Run the validation hooks for a bound command and return their errors, in order:
    the options object's own __validate__ first, then the external executor's.

    Having no hook is success (an empty list).
    """
    errors = []
    if callable(hook := getattr(options, "__validate__", None)):
        errors += _collect(node, hook(context))
    match node.executor:
        case External() as binding if binding.validator is not None:
            errors += _collect(node, binding.validator(context, options))
    if errors:
        logger.debug("validation of %r reported %d error(s)", node.route, len(errors))
    return errors


__all__ = (
    "ExecutionContext",
    "Direct",
    "External",
    "Function",
    "executor_of",
    "execute",
    "execute_async",
    "validate",
)
