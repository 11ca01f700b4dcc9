"""
Runeflag values: the contract a bindable flag value satisfies, plus built-ins.

Contract (Value)
- render() -> str: textual form of the current value. Must work on a freshly
  constructed instance, because usage output compares defaults against the
  zero value of the type.
- assign(text) -> None: decode `text` and store it. Raises ValueSyntaxError
  for malformed text and ValueRangeError for well-formed text that does not
  fit; the stored value is unspecified after a failure.
- switch: when true the engine never takes a following token for the flag
  and assigns "true" on bare mention (-v).
- get(): the decoded Python object.

Built-ins
- BoolValue      true/false (switch)
- IntValue       signed 64-bit integers, Go-style base prefixes (0x, 0o, 0b, 0)
- UintValue      unsigned 64-bit integers
- FloatValue     binary64 floats, shortest rendering (2.5, 1e+06)
- StringValue    any text
- DurationValue  1h30m, 1.5s, 300ms ... stored as datetime.timedelta
- NopValue       accepts and forgets anything (optionally a switch)

Quick example
    >>> count = IntValue(2)
    >>> count.assign("0x10")
    >>> count.get(), count.render()
    (16, '16')
"""
import decimal
import math
import re
from abc import ABC, abstractmethod
from datetime import timedelta
from fractions import Fraction

from .faults import ValueSyntaxError, ValueRangeError

_SIGNED = re.compile(
    r"[+-]?(?:0[xX](?:_?[0-9a-fA-F])+|0[bB](?:_?[01])+|0[oO](?:_?[0-7])+|0(?:_?[0-7])*|[1-9](?:_?[0-9])*)"
)
_UNSIGNED = re.compile(
    r"0[xX](?:_?[0-9a-fA-F])+|0[bB](?:_?[01])+|0[oO](?:_?[0-7])+|0(?:_?[0-7])*|[1-9](?:_?[0-9])*"
)
_FLOAT = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE
)
_HEXFLOAT = re.compile(r"[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?[0-9]+")
_DURATION = re.compile(r"(?:[0-9]*(?:\.[0-9]*)?[^0-9.+-]+)+")
_COMPONENT = re.compile(r"([0-9]*(?:\.[0-9]*)?)([^0-9.+-]+)")

# nanoseconds per unit
_UNITS = {
    "ns": 1,
    "us": 10 ** 3,
    "µs": 10 ** 3,  # micro sign
    "μs": 10 ** 3,  # greek mu
    "ms": 10 ** 6,
    "s": 10 ** 9,
    "m": 60 * 10 ** 9,
    "h": 3600 * 10 ** 9,
}

_INT64 = range(-2 ** 63, 2 ** 63)
_UINT64 = range(0, 2 ** 64)


def _integer(text, pattern, bounds, /):
    if not pattern.fullmatch(text):
        raise ValueSyntaxError()
    digits = text.lstrip("+-")
    if len(digits) > 1 and digits[0] == "0" and digits[1] not in "xXbBoO":
        # legacy octal (0755)
        number = int(digits.replace("_", ""), 8)
        number = -number if text.startswith("-") else number
    else:
        number = int(text, 0)
    if number not in bounds:
        raise ValueRangeError()
    return number


def _shortest(number, /):
    """
    render a float the way strconv.FormatFloat(x, 'g', -1, 64) does.

    the shortest digit string that round-trips is taken from repr(); the
    exponent form is used when the decimal exponent is < -4 or >= 6.
    """
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "+Inf" if number > 0 else "-Inf"
    if number == 0:
        return "-0" if math.copysign(1.0, number) < 0 else "0"

    negative, digits, exponent = decimal.Decimal(repr(number)).normalize().as_tuple()
    digits = "".join(map(str, digits))
    sign = "-" if negative else ""
    point = len(digits) + exponent  # position of the decimal point

    if not -4 <= point - 1 < 6:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        return "%s%se%s%02d" % (sign, mantissa, "-" if point - 1 < 0 else "+", abs(point - 1))
    if point <= 0:
        return sign + "0." + "0" * -point + digits
    if point >= len(digits):
        return sign + digits + "0" * (point - len(digits))
    return sign + digits[:point] + "." + digits[point:]


def _fraction(value, scale, /):
    whole, part = divmod(value, scale)
    if not part:
        return str(whole)
    width = len(str(scale)) - 1
    return "%d.%s" % (whole, str(part).rjust(width, "0").rstrip("0"))


def _nanoseconds(delta, /):
    return ((delta.days * 86400 + delta.seconds) * 10 ** 6 + delta.microseconds) * 1000


class Value(ABC):
    """
    Capability contract for anything a flag can be bound to.

    Subclasses implement render() and assign(). The class attributes tune how
    the engine and the usage printer treat the value:
    - switch: bare mention sets "true", no following token is consumed.
    - typename: placeholder shown in usage ("-c int"); "" shows nothing.
    - quoted: usage shows the default quoted ((default 'x')).
    """
    switch = False
    typename = "value"
    quoted = False

    @abstractmethod
    def render(self):
        ...

    @abstractmethod
    def assign(self, text, /):
        ...

    def get(self):
        return self.render()

    def iszero(self, text, /):
        """
        Whether `text` is how a zero-valued instance of this type renders.

        Types whose constructor needs arguments must override this.
        """
        return text == type(self)().render()

    def __str__(self):
        return self.render()

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, self.get())


class BoolValue(Value):
    switch = True
    typename = ""

    def __init__(self, value=False, /):
        self.value = value

    def render(self):
        return "true" if self.value else "false"

    def assign(self, text, /):
        if text in ("1", "t", "T", "TRUE", "true", "True"):
            self.value = True
        elif text in ("0", "f", "F", "FALSE", "false", "False"):
            self.value = False
        else:
            raise ValueSyntaxError()

    def get(self):
        return self.value


class IntValue(Value):
    typename = "int"

    def __init__(self, value=0, /):
        self.value = value

    def render(self):
        return str(self.value)

    def assign(self, text, /):
        self.value = _integer(text, _SIGNED, _INT64)

    def get(self):
        return self.value


class UintValue(Value):
    typename = "uint"

    def __init__(self, value=0, /):
        self.value = value

    def render(self):
        return str(self.value)

    def assign(self, text, /):
        self.value = _integer(text, _UNSIGNED, _UINT64)

    def get(self):
        return self.value


class FloatValue(Value):
    typename = "float"

    def __init__(self, value=0.0, /):
        self.value = value

    def render(self):
        return _shortest(float(self.value))

    def assign(self, text, /):
        if _HEXFLOAT.fullmatch(text):
            try:
                number = float.fromhex(text)
            except OverflowError:
                raise ValueRangeError() from None
        elif _FLOAT.fullmatch(text):
            number = float(text)
            if math.isinf(number) and "inf" not in text.lower():
                raise ValueRangeError()
        else:
            raise ValueSyntaxError()
        self.value = number

    def get(self):
        return self.value


class StringValue(Value):
    typename = "string"
    quoted = True

    def __init__(self, value="", /):
        self.value = value

    def render(self):
        return self.value

    def assign(self, text, /):
        self.value = text

    def get(self):
        return self.value


class DurationValue(Value):
    """
    A span of time written as a sequence of decimal numbers with unit suffixes.

    Grammar: an optional sign, then one or more <number><unit> pairs where the
    number may carry a fraction and the unit is one of ns, us (µs), ms, s, m, h.
    The lone text "0" is also accepted. Values are stored as timedelta, so
    anything below a microsecond is rounded away.

    Examples: "300ms", "-1.5h", "2h45m", "1h30m0s".
    """
    typename = "duration"

    def __init__(self, value=timedelta(), /):
        self.value = value

    def render(self):
        nanoseconds = _nanoseconds(self.value)
        if nanoseconds == 0:
            return "0s"
        sign = "-" if nanoseconds < 0 else ""
        magnitude = abs(nanoseconds)

        if magnitude < 10 ** 3:
            return "%s%dns" % (sign, magnitude)
        if magnitude < 10 ** 6:
            return sign + _fraction(magnitude, 10 ** 3) + "µs"
        if magnitude < 10 ** 9:
            return sign + _fraction(magnitude, 10 ** 6) + "ms"

        hours, rest = divmod(magnitude, 3600 * 10 ** 9)
        minutes, rest = divmod(rest, 60 * 10 ** 9)
        text = _fraction(rest, 10 ** 9) + "s"
        if hours or minutes:
            text = "%dm%s" % (minutes, text)
        if hours:
            text = "%dh%s" % (hours, text)
        return sign + text

    def assign(self, text, /):
        negative = text.startswith("-")
        body = text[1:] if text[:1] in ("-", "+") else text

        if body == "0":
            self.value = timedelta()
            return
        if not body or not _DURATION.fullmatch(body):
            raise ValueSyntaxError("invalid duration")

        total = Fraction(0)
        for match in _COMPONENT.finditer(body):
            number, unit = match.groups()
            if number in ("", "."):
                raise ValueSyntaxError("invalid duration")
            try:
                scale = _UNITS[unit]
            except KeyError:
                raise ValueSyntaxError("unknown unit %r in duration" % unit) from None
            total += Fraction(number) * scale

        limit = 2 ** 63 if negative else 2 ** 63 - 1
        if total > limit:
            raise ValueRangeError("invalid duration")
        total = -total if negative else total
        self.value = timedelta(microseconds=round(total / 1000))

    def get(self):
        return self.value


class NopValue(Value):
    """
    A value that accepts anything and keeps nothing.

    Useful to reserve a flag name (NopValue()) or to accept and ignore a
    presence-only flag (NopValue(switch=True)).
    """
    typename = "value"

    def __init__(self, *, switch=False):
        self.switch = switch

    def render(self):
        return ""

    def assign(self, text, /):
        return None

    def get(self):
        return None

    def __repr__(self):
        return "NopValue(switch=%r)" % self.switch


__all__ = (
    "Value",
    "BoolValue",
    "IntValue",
    "UintValue",
    "FloatValue",
    "StringValue",
    "DurationValue",
    "NopValue",
)
