"""
Beetroot usage lines.

- synopsis(definition): the generic usage line of a compiled definition, with
  placeholders for every argument:
    required  <name>        optional  [<name>]
    variadic  <name>...     optional variadic  [<name>...]
  and options rendered as [-s|--name[=NAME]], [--flag] or [--name[=NAME]...].

- render(synopsis, subcommands, invocation): replace the placeholders of the
  resolved selectors with the values actually typed on the command line, e.g.
  "migrate [<action>] <batch>" becomes "migrate rollback <batch>".
"""
from .invocation import Invocation
from .utils import Unset


def _option(option, /):
    names = "--" + option.name
    if option.shortcut:
        names = "-%s|%s" % (option.shortcut, names)
    if option.flag:
        return "[%s]" % names
    value = "[=%s]" % option.name.upper()
    return "[%s%s%s]" % (names, value, "..." if option.array else "")


def _argument(argument, /):
    element = "<%s>%s" % (argument.name, "..." if argument.array else "")
    return element if argument.required else "[%s]" % element


def synopsis(definition, /, *, short=False):
    """
    Build the generic usage line of `definition`.

    With short=True, options collapse into a single "[options]" marker.
    """
    elements = [definition.name]

    if definition.options:
        if short:
            elements.append("[options]")
        else:
            elements.extend(map(_option, definition.options))

    if definition.options and definition.arguments:
        elements.append("[--]")

    elements.extend(map(_argument, definition.arguments))

    return " ".join(elements)


def render(synopsis, subcommands, /, invocation=Unset):
    """
    Substitute the values typed for resolved selectors into a usage line.

    Parameters
    - synopsis: usage line holding <name> / [<name>] placeholders.
    - subcommands: selector name -> positional slot (Definition.subcommands).
    - invocation: Invocation to read values from (defaults to the live one).

    Only whole placeholders are replaced; selectors without a value keep
    their placeholder.
    """
    if invocation is Unset:
        invocation = Invocation()

    for name, slot in subcommands.items():
        if (value := invocation.positional(slot)) is None:
            continue
        synopsis = synopsis.replace("[<%s>]" % name, value).replace("<%s>" % name, value)

    return synopsis


__all__ = (
    "synopsis",
    "render",
)
