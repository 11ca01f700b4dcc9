r"""
Runeflag usage text.

Layout (one block per flag, sorted by name)

    Usage of tool:
      -a\taaa
      -c int
        \tcount of things (default 2)
      -o path
        \twrite output to path (default 'out.txt')

- A back-quoted word in the usage string names the value (`path` above) and
  loses its quotes in the description; otherwise Value.typename is used.
- Switches with an empty typename keep their description on the same line.
- "(default ...)" is omitted when the default is the zero value of the type;
  quoted types (strings) show the default with repr() quoting.

The functions here only build text; FlagSet decides where it is printed.
"""


def unquote_usage(flag, /):
    """
    Extract the value placeholder from a flag's usage string.

    Returns (name, usage): given "a `name` to show" this is
    ("name", "a name to show"). Without back quotes the name is the value's
    typename ("" for switches) and the usage is returned unchanged. A single
    unmatched back quote is left alone.
    """
    usage = flag.usage
    start = usage.find("`")
    if start != -1:
        end = usage.find("`", start + 1)
        if end != -1:
            name = usage[start + 1:end]
            return name, usage[:start] + name + usage[end + 1:]
    return flag.value.typename, usage


def format_flag(flag, /):
    """Render the usage block of a single flag (no trailing newline)."""
    text = "  -%s" % flag.name  # two spaces before '-'
    name, usage = unquote_usage(flag)
    if name:
        text += " " + name
    # bare one-character switches are common: keep their usage on the same line
    if len(text) <= 4:
        text += "\t"
    else:
        text += "\n    \t"
    text += usage.replace("\n", "\n    \t")

    if not flag.value.iszero(flag.default):
        if flag.value.quoted:
            text += " (default %r)" % flag.default
        else:
            text += " (default %s)" % flag.default
    return text


def format_defaults(flags, /):
    """Render the usage blocks of `flags` (already sorted) joined by newlines."""
    return "\n".join(map(format_flag, flags))


def format_header(name, /):
    return "Usage of %s:" % name if name else "Usage:"


__all__ = (
    "unquote_usage",
    "format_flag",
    "format_defaults",
    "format_header",
)
