"""
Beetroot command layer: bind a signature to a command and show its help.

What this module provides
- Command: compiles a signature once, against the invocation the process is
  running with, and exposes the resulting definition:
  • name / descr / signature
  • arguments / options / subcommands (selector name -> positional slot)
  • synopsis(): the usage line, with resolved selectors shown by value.
  • __rich__ / help(): Rich-based help (usage, description, argument and option tables).
- command(signature, ...): decorator turning a callable into a Command whose
  description defaults to the callable's docstring; calling the Command calls
  the callable.

Quick start
    from beetroot import command

    @command("migrate {action(*run {--step=1}|rollback {batch : How many batches})}")
    def migrate(action, batch=None, step=None):
        '''Run or roll back database migrations.'''

    migrate.help()   # e.g. "usage: migrate rollback <batch>" for `migrate rollback 2`

Styling
- Define a mapping named __styles__ in __main__ to override any palette entry.
- When colorful is False, styling is suppressed.
"""
import inspect

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from . import usage
from .grammar import parse
from .invocation import Invocation
from .utils import *


def _names(option, /):
    names = "--" + option.name + ("" if option.flag else "[=%s]" % option.name.upper())
    return "-%s, %s" % (option.shortcut, names) if option.shortcut else names


class Command:
    """
    A command compiled from its signature.

    Parameters
    - signature: the command signature (see beetroot.grammar).
    - descr: short description shown in help.
    - invocation: Invocation to resolve selectors against; the live process
      invocation when omitted.
    - shell / fancy / colorful: fault and help rendering switches. In shell
      mode grammar errors are printed and the process exits with status 1.

    Grammar errors surface during construction; a Command always holds a
    complete definition.
    """

    __introspectable__ = (
        "name",
        "descr",
        "signature",
        "definition",
    )

    def __init__(self, signature, /, descr=Unset, *, invocation=Unset, shell=False, fancy=False, colorful=True):
        if not isinstance(descr, str | Text | Unset):
            raise TypeError("command 'descr' must be a string")
        if invocation is Unset:
            invocation = Invocation()

        self._signature = signature
        self._descr = coalesce(descr)
        self._invocation = invocation
        self._callback = Unset
        self.shell = bool(shell)
        self.fancy = bool(fancy)
        self.colorful = bool(colorful)

        self._definition = parse(signature, invocation, shell=self.shell, fancy=self.fancy, colorful=self.colorful)

    @property
    def signature(self):
        return self._signature

    @property
    def descr(self):
        return self._descr

    @property
    def invocation(self):
        return self._invocation

    @property
    def definition(self):
        return self._definition

    @property
    def name(self):
        return self._definition.name

    @property
    def arguments(self):
        return self._definition.arguments

    @property
    def options(self):
        return self._definition.options

    @property
    def subcommands(self):
        return self._definition.subcommands

    def synopsis(self, *, short=False):
        """
        Usage line of this command, with the placeholders of resolved selectors
        replaced by the values typed on the command line.
        """
        return usage.render(usage.synopsis(self._definition, short=short), self.subcommands, self._invocation)

    def __call__(self, *args, **kwargs):
        if self._callback is Unset:
            raise TypeError("command %r is not bound to a callable" % self.name)
        return self._callback(*args, **kwargs)

    def __rich__(self):
        """
        Render the help of this command.

        Palette keys (override through __main__.__styles__)
        - usage-label, usage, description
        - section, argument, option, details, choice, default
        - panel-title
        """
        palette = {
            "usage-label": "bold #E11D48",  # beet red
            "usage": "bold #F5F0E6",
            "description": "italic #A8A29E",
            "section": "bold #FAFAF9",
            "argument": "bold #F59E0B",
            "option": "bold #84CC16",  # leaf green
            "details": "#A8A29E",
            "choice": "bold #DB2777",
            "default": "dim #A8A29E",
            "panel-title": "bold #E11D48",
        } | getattr(__import__("__main__"), "__styles__", {})

        def text(fragment, style, /):
            return Text(str(fragment), palette.get(style, "") if self.colorful else "")

        def details(entry, /):
            parts = []
            if entry.descr:
                parts.append(text(entry.descr, "details"))
            if choices := getattr(entry, "choices", ()):
                parts.append(Text.assemble("{", Text(",").join(text(choice, "choice") for choice in choices), "}"))
            if entry.default is not None:
                parts.append(text("[default: %r]" % (entry.default,), "default"))
            return Text(" ").join(parts)

        def section(title, rows, /):
            table = Table.grid(padding=(0, 2))
            for name, entry in rows:
                table.add_row(Text("  ") + name, details(entry))
            return Text(""), text(title, "section"), table

        renders = [Text.assemble(text("usage", "usage-label"), ": ", text(self.synopsis(), "usage"))]

        if self._descr:
            renders.append(text(self._descr, "description"))

        if self.arguments:
            renders.extend(section("arguments:", (
                (text(argument.name, "argument"), argument) for argument in self.arguments
            )))

        if self.options:
            renders.extend(section("options:", (
                (text(_names(option), "option"), option) for option in self.options
            )))

        if self.fancy:
            return Panel(Group(*renders), title=text(self.name, "panel-title"), title_align="left")
        return Group(*renders)

    def help(self, *, stderr=False):
        """
        Print the help of this command.
        """
        Console(stderr=stderr).print(self)

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "command(%s)" % ", ".join("%s=%r" % (name, value) for name, value in self.__rich_repr__())


def command(signature, /, *args, **kwargs):
    """
    Return a decorator building a Command from `signature` around a callable.

    The description defaults to the callable's docstring; *args and **kwargs
    are forwarded to Command.
    """
    @rename("command")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@command() must be applied to a callable")
        if not args and "descr" not in kwargs and (doc := inspect.getdoc(callback)):
            self = Command(signature, doc, **kwargs)
        else:
            self = Command(signature, *args, **kwargs)
        self._callback = callback
        return self

    return wrapper


__all__ = (
    "Command",
    "command",
)
