"""
Runeflag registry: flag definitions keyed by their one-character name.

What this module provides
- Flag: immutable record of a definition (name, usage, bound value, default).
- Registry: the `formal` mapping (everything defined) and the `actual` mapping
  (what the most recent parse, or FlagSet.set, touched).

Rules
- Names are single Unicode scalar values ("a", "é", "7"); anything else is a
  TypeError/ValueError raised at definition time.
- Redefining a name raises DuplicateFlagError immediately: it is a static
  program error, never a parse-time fault.
- The default text is captured from value.render() once, at definition time.
- The registry holds a reference to the caller's Value; it never copies it.
- Enumeration is sorted by name on demand; the dicts themselves keep
  insertion order and nothing relies on it.
"""
from operator import attrgetter

from .faults import DuplicateFlagError
from .utils import isrune, mirror
from .values import Value


class Flag:
    """
    A registered flag.

    Fields (read-only)
    - name: the one-character name as typed after '-'.
    - usage: help text; a back-quoted word names the value in usage output.
    - value: the caller-owned Value the parser writes into.
    - default: value.render() captured at definition time.
    """
    __slots__ = ("_name", "_usage", "_value", "_default")

    name = mirror("name")
    usage = mirror("usage")
    value = mirror("value")
    default = mirror("default")

    def __init__(self, name, usage, value, /):
        self._name = name
        self._usage = usage
        self._value = value
        self._default = value.render()

    def __repr__(self):
        return "Flag(name=%r, usage=%r, value=%r, default=%r)" % (
            self._name, self._usage, self._value, self._default
        )

    def __rich_repr__(self):
        yield "name", self._name
        yield "usage", self._usage
        yield "value", self._value
        yield "default", self._default


_byname = attrgetter("name")


class Registry:
    """
    Flat name -> Flag registry with sort-on-enumerate.

    Not thread-safe: definitions and parses on the same registry must be
    serialized by the caller.
    """

    def __init__(self):
        self._formal = {}
        self._actual = {}

    @property
    def formal(self):
        """all defined flags, sorted by name."""
        return tuple(sorted(self._formal.values(), key=_byname))

    @property
    def actual(self):
        """flags set since the last reset(), sorted by name."""
        return tuple(sorted(self._actual.values(), key=_byname))

    def register(self, name, usage, value, /):
        """
        Define a flag and return its Flag record.

        Raises
        - TypeError: name/usage is not a string, or value is not a Value.
        - ValueError: name is not exactly one code point.
        - DuplicateFlagError: name is already defined.
        """
        if not isinstance(name, str):
            raise TypeError("flag name must be a string")
        if not isrune(name):
            raise ValueError("flag name %r is not a single code point" % name)
        if not isinstance(usage, str):
            raise TypeError("flag usage must be a string")
        if not isinstance(value, Value):
            raise TypeError("flag value must be a Value, not %r" % type(value).__name__)
        if name in self._formal:
            raise DuplicateFlagError("flag redefined: %s" % name, name=name)
        self._formal[name] = flag = Flag(name, usage, value)
        return flag

    def lookup(self, name, /):
        """the Flag defined under `name`, or None."""
        return self._formal.get(name)

    def record(self, name, /):
        """mark a defined flag as set (KeyError if it was never defined)."""
        self._actual[name] = self._formal[name]

    def reset(self):
        """forget which flags were set; definitions are kept."""
        self._actual.clear()

    def __contains__(self, name):
        return name in self._formal

    def __len__(self):
        return len(self._formal)


__all__ = (
    "Flag",
    "Registry",
)
