"""
Runeflag flag sets: define single-character flags, parse, read the leftovers.

What this module provides
- FlagSet: a named set of flags with its own registry, output console, hooks
  and error-handling mode.
- commandline(): a FlagSet named after the running program, exiting on errors.

Lifecycle
    flags = FlagSet("tool")
    verbose = flags.boolean("v", False, "talk more")
    count = flags.integer("c", 2, "number of `rounds`")
    flags.parse(["-vc", "3", "input.txt"])
    verbose.get(), count.get(), flags.args   # (True, 3, ('input.txt',))

Failures
- Every parse fault is printed on `output` (a rich Console; stderr by default),
  followed by the usage text, and then the mode decides:
  • ErrorHandling.RETURN: the fault is raised (UnknownFlagError, ...).
  • ErrorHandling.EXIT: sys.exit(2).
  • ErrorHandling.ABORT: ParseAbort is raised with the fault attached.
- --help/--version are not failures: parse() returns Outcome.HELP (or exits
  with status 0 in EXIT mode).
- Defining a flag twice raises DuplicateFlagError right away, in every mode.

Hooks (plain attributes, None selects the default behavior)
- usage(): prints usage; defaults to default_usage().
- version(): handles --version; None means --version is an ordinary token.
- consumer(remaining) -> int: sees the remaining tokens before the standard
  scanner and returns how many of them it handled.
- nohelp: when True, --help is not special.

Not thread-safe: define and parse from one thread, or serialize the calls.
"""
import copy
import os
import shlex
import sys
from collections.abc import Iterable
from datetime import timedelta

from rich.console import Console
from rich.text import Text

from .engine import Outcome, ParseState, parse_one
from .faults import (
    DuplicateFlagError,
    ErrorHandling,
    FlagException,
    LateDefinitionWarning,
    UnknownFlagError,
    trigger,
)
from .registry import Registry
from .usage import format_defaults, format_header
from .values import BoolValue, DurationValue, FloatValue, IntValue, StringValue, UintValue

console = Console(stderr=True)


class FlagSet:
    """
    A set of single-character flags and the state of its last parse.

    Parameters
    - name: str, shown in usage and in redefinition messages ("" for none).
    - mode: ErrorHandling applied once a parse fault has been reported.
    - output: rich Console or text stream for diagnostics (None: stderr).
    - usage, version, consumer, nohelp: hooks, see the module docstring.
    - colorful: style fault lines when the console supports it.
    """

    def __init__(
            self,
            name="",
            mode=ErrorHandling.RETURN,
            /,
            *,
            output=None,
            usage=None,
            version=None,
            consumer=None,
            nohelp=False,
            colorful=False,
    ):
        self.init(name, mode)
        self._registry = Registry()
        self._parsed = False
        self._args = ()
        self.output = output
        self.usage = usage
        self.version = version
        self.consumer = consumer
        self.nohelp = nohelp
        self.colorful = colorful

    def init(self, name, mode, /):
        """Set the name and the error-handling mode."""
        if not isinstance(name, str):
            raise TypeError("flag set name must be a string")
        self._name = name
        self._mode = ErrorHandling(mode)

    @property
    def name(self):
        return self._name

    @property
    def mode(self):
        return self._mode

    @property
    def output(self):
        """destination console for diagnostics and usage."""
        return self._output if self._output is not None else console

    @output.setter
    def output(self, output):
        if output is None or isinstance(output, Console):
            self._output = output
        elif callable(getattr(output, "write", None)):
            self._output = Console(file=output)
        else:
            raise TypeError("output must be a rich Console or a writable text stream")

    # --- definitions -------------------------------------------------------

    def _define(self, value, name, usage, /):
        if self._parsed:
            trigger(LateDefinitionWarning(
                "flag -%s defined after the flag set was parsed" % name,
                name=name
            ), stacklevel=5)
        try:
            return self._registry.register(name, usage, value)
        except DuplicateFlagError as fault:
            if self._name:
                fault = type(fault)("%s %s" % (self._name, fault.message), **fault.options)
            self._print(fault.message)
            raise fault from None

    def var(self, value, name, usage="", /):
        """
        Define a flag bound to a caller-owned Value and return its Flag.

        The current rendering of `value` becomes the flag's default text.
        """
        return self._define(value, name, usage)

    def boolean(self, name, default=False, usage="", /):
        """Define a switch flag; returns its BoolValue."""
        self._define(value := BoolValue(default), name, usage)
        return value

    def integer(self, name, default=0, usage="", /):
        """Define a signed integer flag; returns its IntValue."""
        self._define(value := IntValue(default), name, usage)
        return value

    def unsigned(self, name, default=0, usage="", /):
        """Define an unsigned integer flag; returns its UintValue."""
        self._define(value := UintValue(default), name, usage)
        return value

    def floating(self, name, default=0.0, usage="", /):
        """Define a float flag; returns its FloatValue."""
        self._define(value := FloatValue(default), name, usage)
        return value

    def string(self, name, default="", usage="", /):
        """Define a string flag; returns its StringValue."""
        self._define(value := StringValue(default), name, usage)
        return value

    def duration(self, name, default=timedelta(), usage="", /):
        """Define a duration flag (1h30m, 250ms, ...); returns its DurationValue."""
        self._define(value := DurationValue(default), name, usage)
        return value

    # --- lookups -----------------------------------------------------------

    def lookup(self, name, /):
        """the Flag named `name`, or None."""
        return self._registry.lookup(name)

    @property
    def formal(self):
        """every defined flag, sorted by name."""
        return self._registry.formal

    @property
    def actual(self):
        """the flags set by the last parse (or by set()), sorted by name."""
        return self._registry.actual

    def visit(self, callback, /):
        """Call `callback(flag)` for each set flag, in name order."""
        for flag in self._registry.actual:
            callback(flag)

    def visit_all(self, callback, /):
        """Call `callback(flag)` for every defined flag, in name order."""
        for flag in self._registry.formal:
            callback(flag)

    def set(self, name, text, /):
        """
        Assign `text` to a defined flag as if it came from the command line.

        Raises UnknownFlagError for an undefined name; decode errors from the
        Value (ValueSyntaxError/ValueRangeError) propagate unchanged.
        """
        flag = self._registry.lookup(name)
        if flag is None:
            raise UnknownFlagError("no such flag -%s" % name, name=name)
        flag.value.assign(text)
        self._registry.record(name)

    # --- parsing -----------------------------------------------------------

    def parse(self, arguments, /):
        """
        Parse `arguments` (the command line without the program name).

        Parameters
        - arguments: Iterable[str], or a str split with shlex.split.

        Returns
        - Outcome.SUCCESS, or Outcome.HELP when --help/--version stopped the
          scan (EXIT mode exits with status 0 instead).

        Raises
        - FlagException subclasses in RETURN mode, ParseAbort in ABORT mode,
          SystemExit(2) in EXIT mode.
        - TypeError when `arguments` is not a string or an iterable of strings.
        """
        self._parsed = True
        if isinstance(arguments, str):
            tokens = shlex.split(arguments)
        elif isinstance(arguments, Iterable):
            tokens = list(arguments)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("parse() argument must be a string or an iterable of strings")
        else:
            raise TypeError("parse() argument must be a string or an iterable of strings")

        self._registry.reset()
        self._args = ()
        state = ParseState(tokens)
        try:
            while (outcome := parse_one(
                    state,
                    self._registry,
                    consumer=self.consumer,
                    usage=self.print_usage,
                    version=self.version,
                    nohelp=self.nohelp
            )) is True:
                continue
        except FlagException as fault:
            self._args = state.remaining
            self._fail(fault)
            raise
        self._args = state.remaining

        if outcome is Outcome.HELP:
            if self._mode is ErrorHandling.EXIT:
                sys.exit(0)
            return Outcome.HELP
        return Outcome.SUCCESS

    def _fail(self, fault, /):
        # single reporting point for every parse fault
        self.output.print(copy.replace(fault, colorful=self.colorful), soft_wrap=True)
        self.print_usage()
        trigger(fault, mode=self._mode, colorful=self.colorful, flagset=self)

    @property
    def parsed(self):
        """whether parse() has been called (even if it failed)."""
        return self._parsed

    @property
    def args(self):
        """the positional arguments left by the last parse."""
        return self._args

    @property
    def nargs(self):
        return len(self._args)

    def arg(self, index, /):
        """the index-th positional argument, or "" when out of range."""
        if not 0 <= index < len(self._args):
            return ""
        return self._args[index]

    @property
    def nflags(self):
        """number of distinct flags set by the last parse."""
        return len(self._registry.actual)

    # --- usage -------------------------------------------------------------

    def _print(self, text, /):
        self.output.print(Text(text), soft_wrap=True)

    def print_usage(self):
        """Run the usage hook, or default_usage() when none is installed."""
        if self.usage is None:
            self.default_usage()
        else:
            self.usage()

    def default_usage(self):
        """Print the "Usage of <name>:" header followed by print_defaults()."""
        self._print(format_header(self._name))
        self.print_defaults()

    def print_defaults(self):
        """Print the usage block of every defined flag, sorted by name."""
        if formal := self._registry.formal:
            self._print(format_defaults(formal))

    def __repr__(self):
        return "FlagSet(name=%r, mode=%s, flags=%d, parsed=%r)" % (
            self._name, self._mode.name, len(self._registry), self._parsed
        )

    def __rich_repr__(self):
        yield "name", self._name
        yield "mode", self._mode.name
        yield "flags", self._registry.formal
        yield "parsed", self._parsed


def commandline(mode=ErrorHandling.EXIT, /, **options):
    """
    Build a FlagSet for the running program.

    The set is named after sys.argv[0] (its base name) and exits on errors by
    default. It is a fresh object owned by the caller; nothing is registered
    globally and the arguments still have to be passed to parse() explicitly:

        flags = commandline()
        ...
        flags.parse(sys.argv[1:])
    """
    program = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else ""
    return FlagSet(program, mode, **options)


__all__ = (
    "FlagSet",
    "commandline",
)
