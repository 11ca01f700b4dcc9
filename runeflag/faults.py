"""
Runeflag faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault a flag set
  can surface. Codes are grouped by domain to keep logs/searches predictable.
- ErrorHandling: what a flag set does once a parse fault has been reported
  (raise it, exit the process, or abort with a ParseAbort).
- FlagException / FlagWarning: base types that carry a message + options and
  know how to render (rich) and surface (__trigger__) themselves.
- ValueSyntaxError / ValueRangeError: causes raised by Value.assign() so that
  InvalidValueError can tell malformed text from out-of-range text.
- trigger(): central entry point to surface any fault with runtime options.

Message tone
- One lowercase line, naming the flag the way it was typed (-c), e.g.
  “flag provided but not defined: -z”.

Integration
- The flag set prints the fault on its output console, calls its usage hook,
  then calls trigger(fault, mode=..., ...); __trigger__ applies the mode.
- DuplicateFlagError is raised directly at definition time and never goes
  through the mode selection.
"""
import copy
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.text import Text

from .utils import Unset, rename


class FaultCode(IntEnum):
    """
    canonical fault codes used across the package (stable identifiers).

    grouping
    - lookup (1111x)
      • UNKNOWN_FLAG, DUPLICATE_FLAG
    - values (1112x)
      • MISSING_ARGUMENT, INVALID_VALUE
    - integration (1113x)
      • CONSUMER_CONTRACT
    - warnings (12xxx)
      • LATE_DEFINITION

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- lookup errors (1111x) ---
    UNKNOWN_FLAG      = 11112
    DUPLICATE_FLAG    = 11115

    # --- value errors (1112x) ---
    MISSING_ARGUMENT  = 11121
    INVALID_VALUE     = 11123

    # --- integration errors (1113x) ---
    CONSUMER_CONTRACT = 11131

    # --- warnings (12xxx) ---
    LATE_DEFINITION   = 12111

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ErrorHandling(IntEnum):
    """
    behavior of FlagSet.parse() once a fault has been printed.

    - RETURN: raise the fault to the caller (library style).
    - EXIT: terminate the process with status 2 (status 0 for help requests).
    - ABORT: raise ParseAbort carrying the fault; meant to be fatal.
    """
    RETURN = 0
    EXIT   = 1
    ABORT  = 2


class ValueSyntaxError(ValueError):
    """the text could not be decoded by a Value (malformed syntax)."""

    def __init__(self, message="parse error", /):
        super().__init__(message)


class ValueRangeError(ValueError):
    """the text was well-formed but does not fit the Value's representable range."""

    def __init__(self, message="value out of range", /):
        super().__init__(message)


def _option(name, /):
    # read-only accessor over an entry of self.options
    return property(rename(lambda self: self.options.get(name), name))


def _styles(defaults, /):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


class FlagException(Exception):
    code = Unset

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    cause = _option("cause")

    def __rich__(self):
        styles = _styles({
            "error-message": "bold #FF4DA6",  # friendly pinky message
        })
        if not self.options.get("colorful"):
            return Text(self.message)
        return Text(self.message, styles["error-message"])

    def __trigger__(self) -> None:
        match self.options.get("mode", ErrorHandling.RETURN):
            case ErrorHandling.EXIT:
                sys.exit(2)
            case ErrorHandling.ABORT:
                raise ParseAbort(self) from self
            case _:
                raise self from self.cause

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownFlagError(FlagException):
    code = FaultCode.UNKNOWN_FLAG
    name = _option("name")


class DuplicateFlagError(FlagException):
    code = FaultCode.DUPLICATE_FLAG
    name = _option("name")


class MissingArgumentError(FlagException):
    code = FaultCode.MISSING_ARGUMENT
    name = _option("name")


class InvalidValueError(FlagException):
    code = FaultCode.INVALID_VALUE
    name = _option("name")
    text = _option("text")


class ConsumerContractError(FlagException):
    """the token consumer hook broke its contract: this is a caller bug, not bad input."""
    code = FaultCode.CONSUMER_CONTRACT
    count = _option("count")


class ParseAbort(RuntimeError):
    """
    fatal abort raised by ErrorHandling.ABORT.

    deliberately not a FlagException so that handlers written for the
    RETURN mode do not swallow it; the fault is available as .fault and as
    the exception's __cause__.
    """

    def __init__(self, fault, /):
        super().__init__(fault.message)
        self.fault = fault


class FlagWarning(Warning):
    code = Unset

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        styles = _styles({
            "warning-message": "#FFB400",  # amber
        })
        if not self.options.get("colorful"):
            return Text(self.message)
        return Text(self.message, styles["warning-message"])

    def __trigger__(self) -> None:
        warnings.warn(self, stacklevel=self.options.get("stacklevel", 2))

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class LateDefinitionWarning(FlagWarning):
    code = FaultCode.LATE_DEFINITION
    name = _option("name")


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.

    typical options
    - mode (ErrorHandling), colorful, stacklevel, and any context the fault
      wants to carry (name, text, cause, count).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "ErrorHandling",
    "ValueSyntaxError",
    "ValueRangeError",
    "FlagException",
    "UnknownFlagError",
    "DuplicateFlagError",
    "MissingArgumentError",
    "InvalidValueError",
    "ConsumerContractError",
    "ParseAbort",
    "FlagWarning",
    "LateDefinitionWarning",
    "trigger",
)
