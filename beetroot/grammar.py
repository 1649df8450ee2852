r"""
Beetroot signature compiler: from a signature string to an invocation-aware
command definition.

Signature grammar
    migrate {action(*run {--step=1}|rollback {batch})} {--pretend}

- The first word is the command name.
- Every top-level {...} group is a token:
  • ``--name...``                     an option (see beetroot.arguments)
  • ``name(...)``                     a subcommand selector
  • anything else                     a plain argument (see beetroot.arguments)
- A selector body holds one or more (...) groups of branches separated by "|".
  Each branch is a key followed by its own nested tokens; keys written without
  tokens share the tokens of the next key ("run|execute {x}"). A key prefixed
  with "*" is the default branch.
- A selector may end with its own " : description", after its (...) groups.
- A variadic argument must be the last positional entry: every later slot
  would be swallowed by it.

Context sensitivity
- Only the branch the user already typed is expanded: the compiler reads the
  value occupying the selector's positional slot (see beetroot.invocation) and
  splices that branch's tokens right after the selector. Other branches stay
  invisible to help and validation.
- When the chosen branch requires further input, the selector itself becomes
  required (a default branch cannot be implied while its own arguments are
  being supplied).

Public API
- groups(text, opening, closing): top-level balanced groups of a string.
- normalize(token) / classify(token): token preparation and classification.
- subcommand(token): branch-list parser for a selector token.
- parameters(tokens, ...): the recursive builder.
- parse(signature, invocation): the whole pipeline, returning a Definition.
"""
import collections
import copy
import enum
import re
from types import MappingProxyType

from .arguments import Argument, commandname, parse_argument, parse_option
from .faults import *
from .invocation import Invocation
from .utils import *

Branch = collections.namedtuple("Branch", ("aliases", "default", "tokens"))
Branch.__doc__ = """
One alternative of a subcommand selector.

- aliases: every key selecting this branch (at least one).
- default: True when the selector's default alias belongs to this branch.
- tokens: nested tokens, shared by all aliases.
"""

Subcommand = collections.namedtuple("Subcommand", ("name", "branches", "default", "argument"))
Subcommand.__doc__ = """
Parsed subcommand selector token.

- name: selector name.
- branches: read-only mapping alias -> Branch, in registration order.
- default: default alias, or None.
- argument: the selector Argument.
"""


class TokenKind(enum.Enum):
    SUBCOMMAND = "subcommand"
    OPTION = "option"
    ARGUMENT = "argument"


def groups(text, opening, closing, /):
    """
    Return the top-level groups of `text` delimited by `opening`/`closing`.

    Groups are returned in order with their delimiters; nested groups of the
    same delimiters stay inside their enclosing group. A text without groups
    yields an empty list.

    Raises
    - UnbalancedGroupError: a closing delimiter without an open group, or a
      group left open at the end of the text.
    """
    found = []
    depth = 0
    start = 0
    for index, char in enumerate(text):
        if char == opening:
            if not depth:
                start = index
            depth += 1
        elif char == closing:
            if not depth:
                raise _unbalanced(text, closing, index)
            depth -= 1
            if not depth:
                found.append(text[start:index + 1])
    if depth:
        raise _unbalanced(text, opening, start)
    return found


def _unbalanced(text, delimiter, index, /):
    return UnbalancedGroupError(
        "unmatched %r at offset %d of %r" % (delimiter, index, text),
        title="unbalanced group",
        code=FaultCode.UNBALANCED_GROUP,
        hint="every '{' and '(' needs its closing '}' or ')'",
        text=text,
        index=index,
        docs=getdoc(FaultCode.UNBALANCED_GROUP),
    )


def normalize(token, /):
    """
    Strip the outer braces and surrounding whitespace of a token, and collapse
    internal whitespace runs (including newlines) to single spaces.
    """
    token = token.strip()
    if token.startswith("{") and token.endswith("}"):
        token = token[1:-1]
    return re.sub(r"\s+", " ", token.strip())


def classify(token, /):
    """
    Tell whether a normalized token is a subcommand selector, an option or a
    plain argument (checked in that order).
    """
    if re.match(r"\w+\s?\(", token):
        return TokenKind.SUBCOMMAND
    if re.match(r"-{2,}", token):
        return TokenKind.OPTION
    return TokenKind.ARGUMENT


def _segments(body, /):
    # "|" separates branches only outside nested {...} tokens
    segments = []
    depth = 0
    start = 0
    for index, char in enumerate(body):
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        elif char == "|" and not depth:
            segments.append(body[start:index])
            start = index + 1
    segments.append(body[start:])
    return segments


def _described(token, /):
    # only a " : " outside every (...) and {...} starts the selector's description
    depth = 0
    for index, char in enumerate(token):
        if char in "({":
            depth += 1
        elif char in ")}":
            depth -= 1
        elif not depth and (match := re.match(r"\s+:\s+", token[index:])):
            return token[:index], token[index + match.end():].strip() or None
    return token, None


def subcommand(token, /):
    """
    Parse a normalized selector token into a Subcommand.

    Every (...) group of the token is read and merged into one branch mapping.
    Within a group, branches are separated by "|"; a key without nested tokens
    becomes an alias of the next key that has some (or of the group end). When
    several keys are marked with "*", the last one is the default.

    The selector Argument is required unless a default exists, lists every
    alias as its choices and uses the default alias as its default value. Its
    description is the token's own `` : description`` tail, or the list of
    aliases when there is none.
    """
    name = re.match(r"\w+", token)[0]
    token, descr = _described(token)

    collected = []
    default = None

    for group in groups(token, "(", ")"):
        if not (body := group[1:-1].strip()):
            continue
        segments = _segments(body)
        pending = []
        for position, segment in enumerate(segments):
            key = segment.split("{", 1)[0].strip()
            marked = key.startswith("*")
            if marked:
                key = key[1:].strip()
            if not key or re.search(r"[\s()*]", key):
                raise MalformedBranchError(
                    "bad branch name %r in subcommand %r" % (key, name),
                    title="malformed branch",
                    code=FaultCode.MALFORMED_BRANCH,
                    hint="write branches as (name {tokens}|other {tokens}), with an optional '*' before the default",
                    token=token,
                    docs=getdoc(FaultCode.MALFORMED_BRANCH),
                )
            if marked:
                default = key
            pending.append(key)
            tokens = tuple(groups(segment, "{", "}"))
            if tokens or position == len(segments) - 1:
                collected.append((tuple(pending), tokens))
                pending = []

    branches = {}
    for aliases, tokens in collected:
        branch = Branch(aliases, default in aliases, tokens)
        for alias in aliases:
            if alias in branches:
                raise DuplicatedBranchError(
                    "branch %r is declared twice in subcommand %r" % (alias, name),
                    title="duplicated branch",
                    code=FaultCode.DUPLICATED_BRANCH,
                    hint="give each branch of %r a distinct name" % name,
                    token=token,
                    docs=getdoc(FaultCode.DUPLICATED_BRANCH),
                )
            branches[alias] = branch

    if not branches:
        raise EmptySubcommandError(
            "subcommand %r declares no branches" % name,
            title="empty subcommand",
            code=FaultCode.EMPTY_SUBCOMMAND,
            hint="list at least one branch, e.g. {%s(run|stop)}" % name,
            token=token,
            docs=getdoc(FaultCode.EMPTY_SUBCOMMAND),
        )

    argument = Argument(
        name,
        default is None,
        descr or "One of: " + ", ".join(branches),
        default,
        tuple(branches),
    )
    return Subcommand(name, MappingProxyType(branches), default, argument)


def _positional(arguments, argument, /):
    # a variadic argument swallows every later value, so nothing may follow it
    for previous in arguments:
        if previous.array:
            raise MisplacedArgumentError(
                "argument %r follows the variadic argument %r" % (argument.name, previous.name),
                title="misplaced argument",
                code=FaultCode.MISPLACED_ARGUMENT,
                hint="make %r the last argument of the signature" % previous.name,
                argument=argument,
                docs=getdoc(FaultCode.MISPLACED_ARGUMENT),
            )
    return argument


def parameters(tokens, arguments=(), options=(), /, *, invocation, index, **context):
    """
    Build the arguments and options of one nesting level.

    Parameters
    - tokens: raw tokens (with braces) of this level.
    - arguments / options: entries built so far; never mutated, the returned
      lists extend copies of them.
    - invocation: the Invocation consulted to resolve selectors.
    - index: mapping filled with selector name -> positional slot.
    - context: options forwarded to trigger() for warnings.

    Returns
    - (arguments, options) as lists.
    """
    arguments, options = list(arguments), list(options)

    for token in map(normalize, tokens):
        match classify(token):
            case TokenKind.OPTION:
                options.append(parse_option(token.lstrip("-")))
            case TokenKind.ARGUMENT:
                arguments.append(_positional(arguments, parse_argument(token)))
            case TokenKind.SUBCOMMAND:
                selector = subcommand(token)
                arguments.append(_positional(arguments, selector.argument))
                # slot 0 is the command name, so the selector's slot is its 1-based position
                index[selector.name] = slot = len(arguments)

                if (value := invocation.positional(slot)) is None:
                    continue

                if (branch := selector.branches.get(value)) is None:
                    trigger(UnresolvedBranchWarning(
                        "%r is not a branch of %r" % (value, selector.name),
                        title="unresolved branch",
                        code=FaultCode.UNRESOLVED_BRANCH,
                        hint="use one of: %s" % ", ".join(selector.branches),
                        selector=selector.name,
                        value=value,
                        docs=getdoc(FaultCode.UNRESOLVED_BRANCH),
                    ), **context)
                    continue

                arguments, options = parameters(
                    branch.tokens,
                    arguments,
                    options,
                    invocation=invocation,
                    index=index,
                    **context,
                )

                if any(argument.required for argument in arguments[slot:]):
                    arguments[slot - 1] = copy.replace(arguments[slot - 1], required=True, default=None)

    return arguments, options


class Definition:
    """
    Compiled command definition.

    Fields
    - name: command name.
    - arguments: ordered arguments (selectors included, resolved branches spliced in).
    - options: ordered options.
    - subcommands: selector name -> positional slot, in declaration order.

    Duplicate argument names, duplicate option names, duplicate shortcuts
    and arguments placed after a variadic one are rejected on construction.
    """

    __introspectable__ = (
        "name",
        "arguments",
        "options",
        "subcommands",
    )

    name = mirror("name")
    arguments = mirror("arguments")
    options = mirror("options")
    subcommands = mirror("subcommands")

    def __init__(self, name, /, arguments=(), options=(), subcommands=Unset):
        self._name = name
        self._arguments = tuple(arguments)
        self._options = tuple(options)
        self._subcommands = dict(coalesce(subcommands, {}))

        seen = set()
        for position, argument in enumerate(self._arguments):
            _positional(self._arguments[:position], argument)
            if argument.name in seen:
                raise DuplicatedArgumentError(
                    "argument %r is defined twice in command %r" % (argument.name, name),
                    title="duplicated argument",
                    code=FaultCode.DUPLICATED_ARGUMENT,
                    hint="rename one of the %r arguments (branches share one namespace)" % argument.name,
                    argument=argument,
                    docs=getdoc(FaultCode.DUPLICATED_ARGUMENT),
                )
            seen.add(argument.name)

        # long names and shortcuts are separate namespaces ("--v" and "-v" may coexist)
        names, shortcuts = set(), set()
        for option in self._options:
            for alias, seen, kind in ((option.name, names, "option"), (option.shortcut, shortcuts, "shortcut")):
                if alias is None:
                    continue
                if alias in seen:
                    raise DuplicatedOptionError(
                        "%s %r is defined twice in command %r" % (kind, alias, name),
                        title="duplicated option",
                        code=FaultCode.DUPLICATED_OPTION,
                        hint="rename one of the %r %ss" % (alias, kind),
                        option=option,
                        docs=getdoc(FaultCode.DUPLICATED_OPTION),
                    )
                seen.add(alias)

    def argument(self, name, /):
        """
        Return the argument called `name`; KeyError when absent.
        """
        for argument in self._arguments:
            if argument.name == name:
                return argument
        raise KeyError(name)

    def option(self, name, /):
        """
        Return the option called `name`; KeyError when absent.

        "--name" and "name" look up long names, "-n" looks up shortcuts.
        """
        if name.startswith("-") and not name.startswith("--"):
            field, name = "shortcut", name[1:]
        else:
            field, name = "name", name.lstrip("-")
        for option in self._options:
            if getattr(option, field) == name:
                return option
        raise KeyError(name)

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "definition(%s)" % ", ".join("%s=%r" % (name, value) for name, value in self.__rich_repr__())


def parse(signature, /, invocation=Unset, **options):
    """
    Compile a signature into a Definition for the current invocation.

    Parameters
    - signature: the command signature.
    - invocation: Invocation to resolve selectors against (defaults to the live
      process invocation).
    - options: fault options (shell, fancy, colorful, ...) forwarded to trigger().

    Behavior
    - Grammar errors abort the compile: raised outside shell mode, rendered
      followed by exit status 1 in shell mode. No partial definition is returned.
    - Selector values matching no branch raise an UnresolvedBranchWarning and
      leave the selector unexpanded.
    """
    if not isinstance(signature, str):
        raise TypeError("parse() argument must be a string")
    if invocation is Unset:
        invocation = Invocation()
    elif not isinstance(invocation, Invocation):
        raise TypeError("parse() invocation must be an Invocation")

    try:
        name = commandname(signature)
        index = {}
        arguments, switches = parameters(
            groups(signature, "{", "}"),
            invocation=invocation,
            index=index,
            **{"command": name} | options,
        )
        return Definition(name, arguments, switches, index)
    except GrammarError as fault:
        trigger(fault, **{"signature": signature} | options)


__all__ = (
    "TokenKind",
    "Branch",
    "Subcommand",
    "Definition",
    "groups",
    "normalize",
    "classify",
    "subcommand",
    "parameters",
    "parse",
)
