"""
Beetroot invocation context: a read-only view of the positional values typed
on the real command line.

The compiler resolves subcommand branches while it is still building a
definition, so it needs to know which literal value occupies a positional
slot. Slot 0 is the command name; slot k is the value bound to the k-th
argument of the signature.

Filtering
- Any token starting with "-" (flags and options) is dropped.
- The separator token ("--" by default) and the help keyword ("help" by
  default) are dropped.

Sources
- Unset: the live sys.argv without its program element, read on every access.
- str: a shell-like string, split with shlex.split when the Invocation is
  built (an unclosed quote raises ValueError right away).
- Iterable[str]: pre-tokenized values.
Whatever the source, every token is trimmed and empty tokens are dropped.
"""
import shlex
import sys
from collections.abc import Iterable

from .utils import Unset


def _trimmed(values, /):
    values = tuple(values)
    if not all(isinstance(value, str) for value in values):
        raise TypeError("Invocation() argument must be a string or an iterable of strings")
    return tuple(stripped for value in values if (stripped := value.strip()))


class Invocation:
    """
    Positional view over a command-line invocation.

    Example
        >>> invocation = Invocation("migrate rollback --force 5")
        >>> invocation.tokens
        ('migrate', 'rollback', '5')
        >>> invocation.positional(1)
        'rollback'
        >>> invocation.positional(7) is None
        True
    """

    __slots__ = ("_prompt", "_separator", "_helper")

    def __init__(self, prompt=Unset, /, *, separator="--", helper="help"):
        if isinstance(prompt, str):
            try:
                prompt = shlex.split(prompt)
            except ValueError as error:
                raise ValueError("Invocation() argument is not a valid shell string: %s" % error) from None
        if prompt is not Unset:
            if not isinstance(prompt, Iterable):
                raise TypeError("Invocation() argument must be a string or an iterable of strings")
            prompt = _trimmed(prompt)
        self._prompt = prompt
        self._separator = separator
        self._helper = helper

    @property
    def live(self):
        """
        True when the values come from the running process.
        """
        return self._prompt is Unset

    @property
    def argv(self):
        """
        Raw tokens of the invocation (program element excluded).
        """
        if self._prompt is Unset:
            return _trimmed(sys.argv[1:])
        return self._prompt

    @property
    def tokens(self):
        """
        Positional tokens: argv without flags, the separator and the help keyword.
        """
        return tuple(
            token for token in self.argv
            if not token.startswith("-") and token != self._separator and token != self._helper
        )

    def positional(self, slot, /):
        """
        Return the literal value occupying `slot`, or None when the invocation
        does not reach that slot.
        """
        if not isinstance(slot, int) or isinstance(slot, bool):
            raise TypeError("positional() argument must be an integer")
        if slot < 0:
            raise ValueError("positional() argument must be a non-negative integer")
        try:
            return self.tokens[slot]
        except IndexError:
            return None

    def __repr__(self):
        return "invocation(%s)" % ("live" if self.live else repr(self.argv))


__all__ = (
    "Invocation",
)
