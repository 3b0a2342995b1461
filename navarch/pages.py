"""
Navarch help, version and error pages (rich renderer).

Pages
- version: "<name> <version>" and the copyright line.
- help: header, description, usage line, arguments, required and optional options,
  and the commands available at the affected level ("(Default) " marks the default one).
- error: header, one line per error message, then the help of the affected command.

Which page is written depends on the first error of the list: HelpRequested,
VersionRequested, or anything else (error page).

Palette keys
- program-name, version, copyright, description
- usage-label, usage, section-label
- option-name, metavar, value-name, argument-description, default-marker
- command-name, command-description
- error-code, error-message, hint-arrow, hint
- panel-title

Customization
- ApplicationOptions(styles={...}) overrides palette entries.
- colorful=False suppresses styling; fancy=True wraps the page in a panel.
"""
from collections import defaultdict

from rich.box import SIMPLE
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .faults import *
from .utils import *

_PALETTE = {
    # === Head sections ===
    "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
    "version": "bold #00E6FF",
    "copyright": "#737373",
    "description": "italic #A3A3A3",

    # === Usage ===
    "usage-label": "bold #00E6FF",
    "usage": "bold #36C5F0",
    "section-label": "bold #FFFFFF",

    # === Arguments ===
    "option-name": "bold #00E6FF",
    "metavar": "bold #FFD600",
    "value-name": "bold #FFD600",
    "argument-description": "#9CA3AF",
    "default-marker": "bold #22C55E",

    # === Commands ===
    "command-name": "bold #36C5F0",
    "command-description": "#9CA3AF",

    # === Errors ===
    "error-code": "bold #00E5FF",
    "error-message": "bold #FF4DA6",
    "hint-arrow": "#9CE19C dim",
    "hint": "italic #9CE19C",

    # === Fancy panel ===
    "panel-title": "bold #FF4D94",
}


def _metavar(field):
    element = field.element
    name = getattr(element, "__name__", "value").lower()
    return f"<{name}>" + ("..." if field.enumerable else "")


class HelpPage:
    """
    Writes the page matching a list of CliError values.

    Parameters
    - options: ApplicationOptions (metadata, styles, colorful/fancy switches)
    - console: rich Console; by default stdout for help/version, stderr for errors.
    """

    def __init__(self, options, /, console=Unset):
        if not isinstance(console, Console | Unset):
            raise TypeError("help page 'console' must be a rich console")
        self._options = options
        self._console = console
        self._styles = defaultdict(str, _PALETTE | options.styles)

    def styler(self, style):
        return self._styles[style] if self._options.colorful else ""

    def text(self, fragment, style=""):
        if fragment is None or fragment == "":
            return Text("")
        if not self._options.colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), self.styler(style))

    def write(self, registry, errors, /):
        """
        Render the page for errors (a non-empty sequence) and print it.
        """
        if not errors:
            raise ValueError("write() requires at least one error")
        first = errors[0]
        if first.kind is ErrorKind.VERSION_REQUESTED and len(errors) == 1:
            sections, stderr = [self.header() or [self.text(self._options.cliname)]], False
        elif first.kind is ErrorKind.HELP_REQUESTED and len(errors) == 1:
            sections, stderr = [self.header(), self.help(registry, first.command)], False
        else:
            if first.informational:
                command = first.command
            else:
                command = next((error.command for error in errors if error.command is not None), None)
            sections = [self.header(), self.messages(errors, command), self.help(registry, command)]
            stderr = True

        renders = []
        for section in filter(None, sections):
            if renders:
                renders.append(Text(""))
            renders.extend(section)

        renderable = Group(*renders)
        if self._options.fancy:
            renderable = Panel(
                renderable,
                title=self.text(f"[ {self._options.cliname or 'help'} ]".upper(), "panel-title"),
                title_align="left",
            )
        console = self._console if self._console is not Unset else Console(stderr=stderr)
        console.print(renderable)

    def header(self):
        renders = []
        if self._options.name or self._options.version:
            renders.append(Text(" ").join(
                part for part in (
                    self.text(self._options.name, "program-name"),
                    self.text(self._options.version, "version"),
                ) if part
            ))
        if copyright := self._options.copyright:
            renders.append(self.text(copyright, "copyright"))
        return renders

    def messages(self, errors, command=None):
        renders, seen = [], set()
        for error in errors:
            if error.informational or (message := error.message) in seen:
                continue
            seen.add(message)
            renders.append(Text.assemble(
                self.text(f"[{error.kind.value}]", "error-code"),
                " ",
                self.text(message, "error-message"),
            ))
        if renders and self._options.lookup("provide_help_options", command):
            route = " ".join(part for part in (self._options.cliname, command.route if command else None) if part)
            renders.append(Text.assemble(
                self.text(" → ", "hint-arrow"),
                self.text(f"run '{route} --help' for details", "hint"),
            ))
        return renders

    def usage(self, command):
        parts = [self._options.cliname or ""]
        if command is not None:
            parts.append(command.route)
        children = command.children if command is not None else ()
        if command is None or children:
            parts.append("[command]")
        if command is not None:
            if command.options:
                parts.append("[options]")
            for value in command.values:
                if value.hidden:
                    continue
                name = f"<{value.displayname}>" + ("..." if value.enumerable else "")
                parts.append(name if value.required else f"[{name}]")
        usage = Text()
        usage.append(self.text("Usage", "usage-label")).append(": ")
        usage.append(self.text(" ".join(part for part in parts if part), "usage"))
        return usage

    def help(self, registry, command):
        renders = []
        descr = command.descr if command is not None else self._options.descr
        if descr:
            renders.append(self.text(descr, "description"))
            renders.append(Text(""))
        renders.append(self.usage(command))

        if command is not None:
            if values := [value for value in command.values if not value.hidden]:
                renders.append(self._table("Arguments", (
                    (self.text(f"<{value.displayname}>", "value-name"), self._describe(value)) for value in values
                )))

            options = sorted((option for option in command.options if not option.hidden), key=lambda x: x.order)
            for label, required in (("Required options", True), ("Optional options", False)):
                if selected := [option for option in options if option.required is required]:
                    renders.append(self._table(label, (
                        (self._signature(option), self._describe(option)) for option in selected
                    )))

        children = command.children if command is not None else registry.resolve_root_commands()
        children = sorted((child for child in children if not child.hidden), key=lambda x: (x.order, x.name))
        if children:
            renders.append(self._table("Commands", (
                (
                    self.text(child.name, "command-name"),
                    Text.assemble(
                        self.text("(Default) ", "default-marker") if child.default else "",
                        self.text(child.descr or "", "command-description"),
                    ),
                ) for child in children
            )))
        return renders

    def _signature(self, option):
        signature = self.text(option.signature, "option-name")
        if option.flag:
            return signature
        return Text.assemble(signature, " ", self.text(_metavar(option), "metavar"))

    def _describe(self, field):
        description = self.text(field.descr or "", "argument-description")
        if field.default is not Unset and not getattr(field, "flag", False):
            default = field.default
            if field.enumerable:
                default = ", ".join(map(str, default))
            description = Text.assemble(description, " " if field.descr else "", self.text(f"[default: {default}]", "copyright"))
        return description

    def _table(self, label, rows):
        table = Table(
            show_header=False,
            box=SIMPLE,
            title=self.text(label + ":", "section-label"),
            title_justify="left",
            pad_edge=False,
        )
        table.add_column("name", no_wrap=True)
        table.add_column("help")
        for row in rows:
            table.add_row(*row)
        return table


__all__ = (
    "HelpPage",
)
