"""
Runeflag engine: the single-pass scanner behind FlagSet.parse().

Each parse_one() call classifies the token under the cursor and advances:

    consumer hook -> --help / --version -> "--" -> non-option -> cluster

- consumer hook: when installed it sees every remaining tuple first; a
  positive count means “these tokens are handled”, zero means “classify”.
- --help / --version: run the matching hook and stop with Outcome.HELP
  (--help is skipped when help handling is disabled; --version is only
  special when a version hook exists).
- "--": dropped; scanning ends, everything after it is positional.
- non-option: shorter than two characters or not starting with '-'; scanning
  ends and the token stays in place as the first positional.
- cluster: every character after '-' names a flag (-ac is -a then -c):
  • "x=" takes the rest of the token as the value and ends the cluster
    (-abc=5 gives "5" to c only);
  • a switch gets "true";
  • anything else takes the next whole argument as its value.

Faults are raised, never printed here: the caller owns reporting and the
error-handling mode. The scan never backtracks; the cost is linear in the
total number of characters.
"""
from enum import Enum

from .faults import (
    ConsumerContractError,
    InvalidValueError,
    MissingArgumentError,
    UnknownFlagError,
)


class Outcome(Enum):
    """result of a parse that did not fail."""
    SUCCESS = "success"
    HELP = "help"  # --help or --version was handled; scanning stopped


class ParseState:
    """
    Cursor over the argument vector of one parse() call.

    The tokens are never mutated; advancing moves the cursor. Once scanning
    stops, whatever remains is the positional argument list.
    """
    __slots__ = ("_tokens", "_index")

    def __init__(self, tokens, /):
        self._tokens = tuple(tokens)
        self._index = 0

    @property
    def remaining(self):
        return self._tokens[self._index:]

    def peek(self, offset=0, /):
        return self._tokens[self._index + offset]

    def advance(self, count=1, /):
        self._index += count

    def __len__(self):
        return len(self._tokens) - self._index

    def __repr__(self):
        return "ParseState(remaining=%r)" % (self.remaining,)


def parse_one(state, registry, /, *, consumer=None, usage=None, version=None, nohelp=False):
    """
    Consume the next lexical unit of `state` against `registry`.

    Parameters
    - state: ParseState, advanced in place.
    - registry: Registry used to resolve names and record set flags.
    - consumer: optional callable(tuple[str, ...]) -> int.
    - usage: callable run for --help (None: nothing is printed).
    - version: callable run for --version (None: --version is not special).
    - nohelp: when True, --help is scanned like any other token.

    Returns
    - True: something was consumed; call again.
    - False: scanning is over; state.remaining are the positionals.
    - Outcome.HELP: a help/version hook ran; scanning is over.

    Raises
    - ConsumerContractError, UnknownFlagError, MissingArgumentError,
      InvalidValueError, or any FlagException raised by the consumer.
    """
    if not state:
        return False

    if consumer is not None:
        remaining = state.remaining
        count = consumer(remaining)
        if isinstance(count, bool) or not isinstance(count, int) or not 0 <= count <= len(remaining):
            raise ConsumerContractError(
                "bad token consumer: returned %r for %d remaining arguments" % (count, len(remaining)),
                count=count
            )
        if count:
            state.advance(count)
            return True

    token = state.peek()

    if not nohelp and token == "--help":
        if usage is not None:
            usage()
        return Outcome.HELP
    if version is not None and token == "--version":
        version()
        return Outcome.HELP

    if token == "--":
        state.advance()
        return False
    if len(token) < 2 or token[0] != "-":
        return False

    cluster = token[1:]
    taken = 0  # whole tokens pulled as values after this one
    for index, name in enumerate(cluster):
        flag = registry.lookup(name)
        if flag is None:
            raise UnknownFlagError("flag provided but not defined: -%s" % name, name=name)

        inline = cluster[index + 1:index + 2] == "="
        if inline:
            text = cluster[index + 2:]
        elif flag.value.switch:
            text = "true"
        elif len(state) > taken + 1:
            taken += 1
            text = state.peek(taken)
        else:
            raise MissingArgumentError("flag needs an argument: -%s" % name, name=name)

        try:
            flag.value.assign(text)
        except ValueError as error:
            raise InvalidValueError(
                "invalid value %r for flag -%s: %s" % (text, name, error),
                name=name,
                text=text,
                cause=error
            ) from error

        registry.record(name)
        if inline:
            break

    state.advance(taken + 1)
    return True


__all__ = (
    "Outcome",
    "ParseState",
    "parse_one",
)
