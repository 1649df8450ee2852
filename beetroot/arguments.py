r"""
Beetroot argument records and the base token grammar.

Overview
- Records
  • Argument: positional entry of a command definition (required/optional, variadic,
    default value, allowed choices).
  • Option: named entry of a command definition (``--name``), with an optional
    one-letter shortcut; options never consume a positional slot.

- Base grammar (the forms accepted inside one ``{...}`` token)
  • Arguments:
      ``name``          required
      ``name?``         optional
      ``name*``         required, variadic
      ``name?*``        optional, variadic
      ``name=value``    optional with a default
      ``name=*a,b``     optional, variadic, with defaults
  • Options (written after the leading dashes):
      ``name``          flag (no value)
      ``name=``         value optional
      ``name=*``        variadic value
      ``name=value``    value with a default
      ``name=*a,b``     variadic value with defaults
      ``S|name...``     any of the above with a shortcut
  • Any token may end with `` : description``.

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes the
    fields declared in __introspectable__ as read-only properties.
  • Records are immutable; changed copies are made with copy.replace().

Quick example:
    >>> parse_argument("batch? : How many batches to roll back")
    argument(name='batch', required=False, array=False, descr='How many batches to roll back', ...)
    >>> parse_option("S|step=1")
    option(name='step', shortcut='S', flag=False, array=False, descr=None, default='1')
"""
import re

from .faults import FaultCode, MalformedTokenError, MissingNameError, getdoc
from .utils import *


def _fields(self, /):
    return tuple((name, getattr(self, name)) for name in type(self).__introspectable__)


class ArgumentType(type):
    """
    Metaclass of the argument records.

    - Every field named in __introspectable__ becomes a read-only property over
      its "_{field}" attribute.
    - __typename__ ("argument", "option") prefixes messages and reprs.
    - Records get __repr__, __rich_repr__, value equality, hashing and
      __replace__ (rebuilding through the constructor, so validation runs again).
    """

    def __new__(cls, name, bases, namespace, **options):
        fields = namespace.get("__introspectable__", ())
        namespace = {name: mirror(name) for name in fields} | namespace
        namespace.setdefault("__typename__", name.lower())
        self = super().__new__(cls, name, bases, namespace)

        @rename("__repr__")
        def __repr__(self):
            return "%s(%s)" % (type(self).__typename__, ", ".join("%s=%r" % field for field in _fields(self)))

        @rename("__rich_repr__")
        def __rich_repr__(self):
            yield from _fields(self)

        @rename("__eq__")
        def __eq__(self, other):
            if type(self) is not type(other):
                return NotImplemented
            return _fields(self) == _fields(other)

        @rename("__hash__")
        def __hash__(self):
            return hash((type(self), _fields(self)))

        @rename("__replace__")
        def __replace__(self, /, **changes):
            fields = dict(_fields(self)) | changes
            return type(self)(fields.pop("name"), **fields)

        for method in (__repr__, __rich_repr__, __eq__, __hash__, __replace__):
            setattr(self, method.__name__, method)
        return self

    def build(cls, metadata, /):
        """
        Instantiate a record from already validated field values.
        """
        self = object.__new__(cls)
        for name, value in metadata.items():
            setattr(self, "_" + name, value)
        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate the fields shared by Argument and Option.

    - name: non-empty string without whitespace.
    - descr: Unset becomes None; strings are trimmed and empty ones become None.
    - choices: any iterable, normalized to a tuple; duplicates are rejected.

    Mutates the provided metadata dict in place.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()) or re.search(r"\s", name):
        raise ValueError(f"{cls.__typename__} 'name' must be a non-empty word")
    metadata["name"] = name

    if not isinstance(descr := metadata["descr"], str | Unset | None):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    metadata["descr"] = descr.strip() or None if isinstance(descr, str) else None

    if "choices" in metadata:
        choices = []
        for choice in metadata["choices"]:
            if choice in choices:
                raise ValueError(f"{cls.__typename__} 'choices' cannot contain duplicates")
            choices.append(choice)
        metadata["choices"] = tuple(choices)


class Argument(metaclass=ArgumentType):
    """
    Positional entry of a command definition.

    Fields
    - name: identity of the argument within one definition.
    - required: the invocation must supply a value.
    - array: the argument swallows every remaining positional value.
    - descr: short help text (None when absent).
    - default: value used when the argument is omitted (None when absent).
    - choices: ordered allowed values (empty when unconstrained).
    """

    __introspectable__ = (
        "name",
        "required",
        "array",
        "descr",
        "default",
        "choices",
    )

    def __new__(cls, name, /, required=True, descr=Unset, default=None, choices=(), *, array=False):
        metadata = {
            "name": name,
            "required": bool(required),
            "array": bool(array),
            "descr": descr,
            "default": default,
            "choices": choices,
        }
        _sanitize_metadata(cls, metadata)

        if metadata["required"] and metadata["default"] is not None:
            raise ValueError(f"required {cls.__typename__} {metadata['name']!r} cannot have a default")

        return cls.build(metadata)


class Option(metaclass=ArgumentType):
    """
    Named entry of a command definition.

    Fields
    - name: long name, without the leading dashes.
    - shortcut: one-letter alias (None when absent).
    - flag: the option takes no value.
    - array: the option may be given several times, collecting every value.
    - descr: short help text (None when absent).
    - default: value used when the option is omitted (None when absent).
    """

    __introspectable__ = (
        "name",
        "shortcut",
        "flag",
        "array",
        "descr",
        "default",
    )

    def __new__(cls, name, /, shortcut=None, descr=Unset, default=None, *, flag=False, array=False):
        metadata = {
            "name": name,
            "shortcut": shortcut,
            "flag": bool(flag),
            "array": bool(array),
            "descr": descr,
            "default": default,
        }
        _sanitize_metadata(cls, metadata)

        if isinstance(shortcut, str):
            metadata["shortcut"] = shortcut.strip().lstrip("-") or None
        elif shortcut is not None:
            raise TypeError(f"{cls.__typename__} 'shortcut' must be a string")
        if metadata["flag"] and (metadata["array"] or metadata["default"] is not None):
            raise ValueError(f"flag {cls.__typename__} {metadata['name']!r} cannot take values")

        return cls.build(metadata)


def describe(token, /):
    """
    Split a token into (body, description) on the first ``<space>:<space>``.

    The description is None when the token carries none.
    """
    parts = re.split(r"\s+:\s+", token.strip(), maxsplit=1)
    return (parts[0], parts[1]) if len(parts) == 2 else (token.strip(), None)


def _defaults(source, /):
    return tuple(re.split(r",\s?", source))


def _checked(token, name, /):
    if not re.fullmatch(r"[^\s=|?*{}()]+", name):
        raise MalformedTokenError(
            "cannot read a parameter name from %r" % token,
            title="malformed token",
            code=FaultCode.MALFORMED_TOKEN,
            hint="write the name first, e.g. {name}, {name?} or {name : description}",
            token=token,
            docs=getdoc(FaultCode.MALFORMED_TOKEN),
        )
    return name


def parse_argument(token, /):
    """
    Build an Argument from one token body (braces already removed).
    """
    body, descr = describe(token)

    if body.endswith("?*"):
        return Argument(_checked(token, body.rstrip("?*")), False, descr, array=True)
    elif body.endswith("*"):
        return Argument(_checked(token, body.rstrip("?*")), True, descr, array=True)
    elif body.endswith("?"):
        return Argument(_checked(token, body.rstrip("?*")), False, descr)
    elif match := re.fullmatch(r"(.+)=\*(.+)", body):
        return Argument(_checked(token, match[1]), False, descr, _defaults(match[2]), array=True)
    elif match := re.fullmatch(r"(.+)=(.+)", body):
        return Argument(_checked(token, match[1]), False, descr, match[2])
    return Argument(_checked(token, body), True, descr)


def parse_option(token, /):
    """
    Build an Option from one token body written after its leading dashes.
    """
    body, descr = describe(token)

    shortcut = None
    if len(parts := re.split(r"\s*\|\s*", body, maxsplit=1)) == 2:
        shortcut, body = parts

    if body.endswith("=*"):
        return Option(_checked(token, body[:-2]), shortcut, descr, array=True)
    elif body.endswith("="):
        return Option(_checked(token, body[:-1]), shortcut, descr)
    elif match := re.fullmatch(r"(.+)=\*(.+)", body):
        return Option(_checked(token, match[1]), shortcut, descr, _defaults(match[2]), array=True)
    elif match := re.fullmatch(r"(.+)=(.+)", body):
        return Option(_checked(token, match[1]), shortcut, descr, match[2])
    return Option(_checked(token, body), shortcut, descr, flag=True)


def commandname(expression, /):
    """
    Read the leading name of a signature: the first run of characters that are
    neither whitespace nor an opening brace.
    """
    if not (match := re.match(r"\s*([^\s{]+)", expression)):
        raise MissingNameError(
            "unable to determine the command name from %r" % expression,
            title="missing command name",
            code=FaultCode.MISSING_NAME,
            hint="start the signature with the command name, e.g. 'migrate {action(...)}'",
            signature=expression,
            docs=getdoc(FaultCode.MISSING_NAME),
        )
    return match[1]


__all__ = (
    # Records
    "Argument",
    "Option",

    # Base grammar
    "describe",
    "parse_argument",
    "parse_option",
    "commandname",
)

# The metaclass is an implementation detail of the records above.
del ArgumentType
