"""
Navarch command registry: the single owner of every command node.

Scope
- CommandNode: registry-owned wrapper around a CommandDescriptor adding the tree links
  (weak parent reference, ordered children) and the executor binding.
- CommandRegistry: validates and links nodes, removes subtrees, and answers the
  read-only traversal questions asked by the resolver and the help renderer.

Registration invariants (checked before anything is mutated)
- one node per descriptor identity (the descriptor's options class);
- the parent, when declared, is already registered;
- no alias is shared by two commands anywhere in the registry (case-insensitive);
- at most one default command per level (the root list, or one parent's children);
- no alias shadows the built-in help/version commands, and no option shadows the
  built-in --help/--version options, where those are offered;
- an executable command has an executor binding, and a non-executable one has none.

Notes
- Registration is expected to happen once, single-threaded, at start-up. Parsing only
  reads the registry, so no locking is done here.
- Child lists and root lists are exposed as tuples (snapshots).
"""
import logging
import weakref

from . import executors
from .config import ApplicationOptions
from .descriptors import CommandDescriptor, describe
from .faults import *
from .utils import *

logger = logging.getLogger(__name__)


def _delegate(name, /):
    @rename(name)
    def getter(self):
        return getattr(self._descriptor, name)

    return property(getter)


class CommandNode(metaclass=IntrospectableType, sealed=True):
    """
    A registered, tree-positioned command.

    Nodes are created by CommandRegistry.register() only. The parent link is a weak
    reference: the registry owns every node, and a removed node is detached.
    """

    __introspectable__ = (
        "descriptor",
        "executor",
    )

    name = _delegate("name")
    aliases = _delegate("aliases")
    type = _delegate("type")
    default = _delegate("default")
    order = _delegate("order")
    hidden = _delegate("hidden")
    descr = _delegate("descr")
    options = _delegate("options")
    values = _delegate("values")

    def __init__(self, descriptor, executor=None, parent=None):
        if not isinstance(descriptor, CommandDescriptor):
            raise TypeError(f"{type(self).__typename__} requires a command-descriptor")
        self._descriptor = descriptor
        self._executor = executor
        self._parent = weakref.ref(parent) if parent is not None else None
        self._children = []

    @property
    def parent(self):
        return self._parent() if self._parent is not None else None

    @property
    def children(self):
        return tuple(self._children)

    @property
    def executable(self):
        """True when the descriptor allows execution and an executor is bound."""
        return self._descriptor.executable and self._executor is not None

    @property
    def root(self):
        node = self
        while (parent := node.parent) is not None:
            node = parent
        return node

    @property
    def path(self):
        """Ancestry from the root command to this node (inclusive)."""
        path = [node := self]
        while (node := node.parent) is not None:
            path.append(node)
        return tuple(reversed(path))

    @property
    def route(self):
        return " ".join(node.name for node in self.path)

    def matches(self, token, /):
        """Case-insensitive alias match."""
        return casefold(token) in map(casefold, self._descriptor.aliases)

    def option(self, name, /):
        """Find a declared option by long name (case-insensitive, without dashes)."""
        for option in self._descriptor.options:
            if option.matches(name):
                return option
        return None

    def short(self, char, /):
        """Find a declared option by short name (case-sensitive, without dash)."""
        for option in self._descriptor.options:
            if char in option.shorts:
                return option
        return None

    def child(self, token, /):
        for child in self._children:
            if child.matches(token):
                return child
        return None

    def validate(self, context, options, /):
        return executors.validate(self, context, options)

    def execute(self, context, options, /):
        return executors.execute(self, context, options)

    async def execute_async(self, context, options, /):
        return await executors.execute_async(self, context, options)

    def __rich_repr__(self):
        yield "name", self.name
        yield "route", self.route
        yield "children", tuple(child.name for child in self._children)
        yield "executor", self._executor


def _identify(source, /):
    match source:
        case CommandNode() | CommandDescriptor():
            return source.type
        case _:
            return source


class CommandRegistry:
    """
    Owner of the command tree.

    Parameters
    - options: ApplicationOptions used to decide which built-in help/version names
      are reserved at each position of the tree.
    """

    def __init__(self, options=Unset):
        if not isinstance(options, ApplicationOptions | Unset):
            raise TypeError("command registry 'options' must be an application-options")
        self._options = coalesce(options, ApplicationOptions())
        self._nodes = {}
        self._roots = []

    @property
    def options(self):
        return self._options

    def register(self, source, executor=Unset, /):
        """
        Validate and link a new command, returning its node.

        source is a CommandDescriptor or anything describe() accepts; executor is an
        executor object/class, a function, or an explicit Direct/External/Function
        binding. Raises a RegistrationError subclass and leaves the registry untouched
        when an invariant would be broken.
        """
        descriptor = describe(source)

        if descriptor.type in self._nodes:
            raise DuplicateCommandError(f"command {descriptor.name!r} is already registered")

        parent = None
        if descriptor.parent is not None and (parent := self._nodes.get(descriptor.parent)) is None:
            raise MissingParentError(
                f"the parent command {descriptor.parent.__qualname__!r} of {descriptor.name!r} has not been "
                f"registered yet. Please register all parent commands before the child commands"
            )

        aliases = set(map(casefold, descriptor.aliases))
        for node in self._nodes.values():
            if overlap := aliases.intersection(map(casefold, node.aliases)):
                raise DuplicateAliasError(
                    f"alias {min(overlap)!r} of command {descriptor.name!r} is already used by command {node.name!r}"
                )

        if descriptor.default and (current := self.resolve_default(parent)) is not None:
            raise DuplicateDefaultError(
                f"command {descriptor.name!r} cannot be a default command, {current.name!r} already is one at that level"
            )

        if not descriptor.executable and executor is not Unset:
            raise ExecutorBindingError(f"command {descriptor.name!r} is not executable and cannot bind an executor")
        binding = executors.executor_of(descriptor, executor) if descriptor.executable else None
        if descriptor.executable and binding is None:
            raise ExecutorBindingError(
                f"command {descriptor.name!r} is executable but has no executor, pass one or implement "
                f"__execute__ on {descriptor.type.__qualname__!r}"
            )

        node = CommandNode(descriptor, binding, parent)
        self._check_reserved(node, parent)

        self._nodes[descriptor.type] = node
        (parent._children if parent is not None else self._roots).append(node)
        logger.debug("registered command %r (%s)", node.route, type(binding).__name__ if binding else "not executable")
        return node

    def _check_reserved(self, node, parent, /):
        for alias in node.aliases:
            match casefold(alias):
                case "help" if self._options.lookup("provide_help_command", parent):
                    raise ReservedNameError(
                        f"command name {alias!r} clashes with the built-in help command, disable "
                        f"'provide_help_command' or rename the command"
                    )
                case "version" if self._options.lookup("provide_version_command", parent):
                    raise ReservedNameError(
                        f"command name {alias!r} clashes with the built-in version command, disable "
                        f"'provide_version_command' or rename the command"
                    )
        for setting, name in (("provide_help_options", "help"), ("provide_version_options", "version")):
            if (option := node.option(name)) is not None and self._options.lookup(setting, node):
                raise ReservedNameError(
                    f"option --{name} of command {node.name!r} clashes with the built-in --{name} option, "
                    f"disable {setting!r} or rename {option.field!r}"
                )

    def remove(self, identity, /):
        """
        Remove a command and its whole subtree (children first).

        Returns False when the identity is not registered.
        """
        if (node := self._nodes.get(_identify(identity))) is None:
            return False
        for child in node.children:
            self.remove(child.type)
        parent = node.parent
        (parent._children if parent is not None else self._roots).remove(node)
        del self._nodes[node.type]
        node._parent = None
        logger.debug("removed command %r", node.name)
        return True

    def clear(self):
        for node in self._nodes.values():
            node._parent = None
            node._children.clear()
        self._nodes.clear()
        self._roots.clear()

    def get(self, identity, default=None, /):
        return self._nodes.get(_identify(identity), default)

    def resolve_root_commands(self):
        return tuple(self._roots)

    def resolve_default(self, parent=None, /):
        """The default command among parent's children (or the roots when parent is None)."""
        for node in parent._children if parent is not None else self._roots:
            if node.default:
                return node
        return None

    def find(self, token, parent=None, /):
        """Case-insensitive alias lookup among parent's children (or the roots)."""
        for node in parent._children if parent is not None else self._roots:
            if node.matches(token):
                return node
        return None

    def __contains__(self, identity):
        return _identify(identity) in self._nodes

    def __iter__(self):
        return iter(tuple(self._nodes.values()))

    def __len__(self):
        return len(self._nodes)

    def __repr__(self):
        return f"command-registry({", ".join(repr(node.route) for node in self._nodes.values())})"


__all__ = (
    "CommandNode",
    "CommandRegistry",
)
