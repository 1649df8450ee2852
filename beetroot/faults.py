"""
Beetroot faults: what the signature compiler reports, and how.

Scope
- FaultCode: stable numeric identifiers, grouped by compiler stage.
- GrammarError and subclasses: a signature that cannot be compiled. Fatal;
  a command's argument set must be fully known before help or validation
  runs, so the compiler never hands out a partial definition.
- GrammarWarning and subclasses: an invocation value the grammar cannot
  resolve. Validating that value is left to the host.
- trigger(fault, **options): merge runtime options into a fault and surface it.
- getdoc(code): documentation the host attached to a code.

Surfacing
- Outside shell mode errors are raised and warnings go through the warnings
  module, so hosts can filter them or turn them into errors.
- In shell mode both are rendered with rich on stderr; errors then exit the
  process with status 1.

Host hooks (all optional, looked up on __main__)
- __codes__: FaultCode -> label shown instead of the number.
- __docs__: FaultCode -> documentation string (see getdoc()).
- __styles__: palette overrides for the rendered faults.
- __prog__: program label shown in the fault header.
"""
import copy
import inspect
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)

_defaults = MappingProxyType({
    "shell": False,
    "fancy": False,
    "colorful": True,
    "command": Unset,
    "title": Unset,
    "code": Unset,
    "hint": Unset,
})


def _host(name, /):
    return getattr(__import__("__main__"), name, {})


class FaultCode(IntEnum):
    """
    Fault identifiers.

    - 2110x  signature structure
    - 2111x  subcommand branch lists
    - 2112x  compiled definition
    - 2211x  invocation resolution (warnings)
    """
    UNBALANCED_GROUP            = 21101
    MISSING_NAME                = 21102
    MALFORMED_TOKEN             = 21103

    MALFORMED_BRANCH            = 21111
    DUPLICATED_BRANCH           = 21112
    EMPTY_SUBCOMMAND            = 21113

    DUPLICATED_ARGUMENT         = 21121
    DUPLICATED_OPTION           = 21122
    MISPLACED_ARGUMENT          = 21123

    UNRESOLVED_BRANCH           = 22111

    def normalize(self):
        """
        Label of this code: the host's __codes__ entry, else the number.
        """
        return str(_host("__codes__").get(self, self.value))


class _Fault:
    """
    Behavior shared by errors and warnings: a message, read-only options and
    rich rendering.
    """

    kind = "fault"
    palette = {}

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError("fault message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(dict(_defaults) | options)

    def __str__(self):
        return str(self.message)

    def __replace__(self, /, **changes):
        return type(self)(self.message, **dict(self.options) | changes)

    def __rich__(self):
        styles = defaultdict(str, self.palette | _host("__styles__"))
        colorful = self.options["colorful"]

        def text(fragment, style, /):
            if fragment is Unset or fragment is None:
                return Text("")
            return Text(str(fragment), styles[style] if colorful else "")

        code = self.options["code"]
        header = Text.assemble(
            "[ ",
            text(getattr(__import__("__main__"), "__prog__", self.options["command"] or "beetroot"), "prog-name"),
            " · ",
            text(code.normalize() if code else "?", "code"),
            " | ",
            text((self.options["title"] or self.kind).title(), "title"),
            " ]",
        )
        body = [text(self.message, "message")]
        if self.options["hint"]:
            body.append(Text.assemble(text("→ ", "hint-arrow"), text(self.options["hint"], "hint")))

        if self.options["fancy"]:
            return Panel(Group(*body), title=header, title_align="left")
        return Group(header, *body)


class GrammarError(_Fault, Exception):
    """
    A signature that cannot be compiled.

    Options
    - title, code, hint: shown in the rendered fault.
    - command: program label of the header.
    - shell, fancy, colorful: surfacing switches (see trigger()).
    - anything else is kept as context (token, signature, index, ...).
    """

    kind = "error"
    palette = {
        "prog-name": "bold #F5F0E6",  # parchment
        "code": "bold #5EEAD4",  # teal
        "title": "bold #E11D48",  # beet red
        "message": "#D4D4D8",
        "hint-arrow": "dim #A3E635",
        "hint": "italic #A3E635",  # leaf green
    }

    def __trigger__(self):
        if not self.options["shell"]:
            raise self from None
        console.print(self)
        sys.exit(1)


class UnbalancedGroupError(GrammarError): ...
class MissingNameError(GrammarError): ...
class MalformedTokenError(GrammarError): ...
class MalformedBranchError(GrammarError): ...
class DuplicatedBranchError(GrammarError): ...
class EmptySubcommandError(GrammarError): ...
class DuplicatedArgumentError(GrammarError): ...
class DuplicatedOptionError(GrammarError): ...
class MisplacedArgumentError(GrammarError): ...


class GrammarWarning(_Fault, Warning):
    """
    A non-fatal finding of the compiler.
    """

    kind = "warning"
    palette = {
        "prog-name": "bold #F5F0E6",
        "code": "bold #FBBF24",  # amber
        "title": "bold #F472B6",
        "message": "#E4E4E7",
        "hint-arrow": "dim #BEF264",
        "hint": "italic #BEF264",
    }

    def __trigger__(self):
        if self.options["shell"]:
            console.print(self)
        else:
            # point the warning at the host code, outside the compiler frames
            warnings.warn(self, stacklevel=len(inspect.stack()))


class UnresolvedBranchWarning(GrammarWarning): ...


def trigger(fault, /, **options):
    """
    Surface `fault` after merging `options` into a copy of it.

    Raises TypeError when `fault` is not a beetroot fault (anything without
    __trigger__ and __replace__).
    """
    if not all(callable(getattr(fault, name, None)) for name in ("__trigger__", "__replace__")):
        raise TypeError("trigger() argument must be a fault")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    Return the documentation the host attached to `code`, or None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return _host("__docs__").get(code)


__all__ = (
    "FaultCode",
    "GrammarError",
    "UnbalancedGroupError",
    "MissingNameError",
    "MalformedTokenError",
    "MalformedBranchError",
    "DuplicatedBranchError",
    "EmptySubcommandError",
    "DuplicatedArgumentError",
    "DuplicatedOptionError",
    "MisplacedArgumentError",
    "GrammarWarning",
    "UnresolvedBranchWarning",
    "trigger",
    "getdoc",
)
