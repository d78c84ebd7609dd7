r"""
Optscan option specifications and the specification normalizer.

Overview
- Descriptor: one canonical, read-only entry of a specification, keyed by its
  flag token ("-v", "--verbose") inside a plain dict:
  • argc: number of parameters consumed per match (int >= 0).
  • alias: another flag token; aliased descriptors are never matched directly.
  • handler: callable invoked as handler(name, value) once per match.
  • form/usage: display-only strings for help rendering.

- normalize(options): converts any accepted input shape into a canonical
  specification (dict[str, Descriptor]):
  • a traditional switch string:        "ab:c::(verbose)(-help)x:"
  • a primitive mapping:                {"-a": 1, "verbose": 0, "-n": {"alias": "--name"}}
  • a rich program description:         {"name": ..., "options": {...}, "show_help": True}
  Each shape has its own adapter; all of them produce the same canonical form.

Reserved key
- USAGE ("__usage__") may hold the assembled help text of a specification. The
  scanner strips it from its working copy, so it never acts as an option.

Quick example:
    >>> from optscan.specs import normalize
    >>> specification = normalize("ab:c::(verbose)")
    >>> sorted(specification)
    ['--verbose', '-a', '-b', '-c']
    >>> specification["-c"].argc
    2
"""
import functools
import operator
import os.path
import sys
from collections.abc import Mapping, Sequence

from rich.console import Console
from rich.text import Text

from .faults import FaultCode, InvalidSpecKindError, getdoc
from .utils import *

USAGE = "__usage__"

# Per-option config keys accepted by mappings and program descriptions (first present wins).
_ENTRIES = {
    "flags": ("flag", "switches", "short", "name", "n"),
    "argc": ("argcount", "argc", "ac"),
    "form": ("form", "format", "fmt"),
    "usage": ("h", "help", "usage", "u"),
    "handler": ("handler", "run"),
    "alias": ("alias",),
}


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate and normalize descriptor metadata in place.

    Responsibilities
    - argc: must be an integer (bools rejected) and non-negative.
    - alias: Unset or a non-empty string; bare names are dash-prefixed.
    - handler: Unset or a callable.
    - form/usage: Unset or strings.
    Unset values become None.

    Raises
    - TypeError: when a field has the wrong type.
    - ValueError: when argc is negative or alias is empty.
    """
    if isinstance(argc := metadata["argc"], bool) or not isinstance(argc, int):
        raise TypeError(f"{cls.__typename__} 'argc' must be an integer")
    elif argc < 0:
        raise ValueError(f"{cls.__typename__} 'argc' must be a non-negative integer")

    if not isinstance(alias := metadata["alias"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'alias' must be a string")
    elif isinstance(alias, str) and not (alias := alias.strip()):
        raise ValueError(f"{cls.__typename__} 'alias' cannot be empty")
    metadata["alias"] = dash(alias) if alias else None

    if not callable(handler := metadata["handler"]) and handler is not Unset:
        raise TypeError(f"{cls.__typename__} 'handler' must be callable")
    metadata["handler"] = coalesce(handler)

    for name in ("form", "usage"):
        if not isinstance(metadata[name], str | Unset):
            raise TypeError(f"{cls.__typename__} {name!r} must be a string")
        metadata[name] = coalesce(metadata[name])


class Descriptor:
    """
    Canonical, read-only description of one flag token.

    Properties
    - The names listed in __introspectable__ are exposed as read-only attributes
      mirroring the sanitized metadata values.
    """

    __typename__ = "descriptor"
    __introspectable__ = (
        "argc",
        "alias",
        "handler",
        "form",
        "usage",
    )

    argc = mirror("argc")
    alias = mirror("alias")
    handler = mirror("handler")
    form = mirror("form")
    usage = mirror("usage")

    def __init__(self, argc=0, /, alias=Unset, handler=Unset, form=Unset, usage=Unset):
        """
        Construct a Descriptor with the provided metadata.

        Parameters
        - argc: int
          Number of parameters consumed when the flag is matched (0 for a switch).
        - alias: Unset | str
          Flag token this one stands for ("-w" -> "--width"). Bare names are
          dash-prefixed ("width" -> "--width").
        - handler: Unset | Callable[[str, Any], Any]
          Called once per match with the stripped canonical name and the value.
        - form: Unset | str
          Synopsis shown in help ("-w, --width <arg>").
        - usage: Unset | str
          One-line help text.
        """
        metadata = {
            "argc": argc,
            "alias": alias,
            "handler": handler,
            "form": form,
            "usage": usage,
        }
        _sanitize_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return f"{type(self).__typename__}({
            ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
        })"

    def __eq__(self, other):
        if not isinstance(other, Descriptor):
            return NotImplemented
        return tuple(self.__rich_repr__()) == tuple(other.__rich_repr__())

    __hash__ = None


def _invalid(object, where, /):
    return InvalidSpecKindError(
        "%s of type %r is neither a string nor a mapping" % (where, type(object).__name__),
        title="invalid specification",
        code=FaultCode.INVALID_SPEC_KIND,
        token=object,
        hint="use a switch string (e.g., 'ab:c'), a mapping (e.g., {'-a': 1}) or a program description",
        docs=getdoc(FaultCode.INVALID_SPEC_KIND),
    )


def _pick(config, field, /):
    for key in _ENTRIES[field]:
        if config.get(key) is not None:
            return config[key]
    return Unset


def _configure(config, /, **overrides):
    """
    Internal: build a Descriptor from a per-option config mapping.
    """
    if not isinstance(config, Mapping):
        raise _invalid(config, "option config")
    metadata = {field: _pick(config, field) for field in ("argc", "alias", "handler", "form", "usage")}
    metadata |= overrides
    return Descriptor(coalesce(metadata.pop("argc"), 0), **metadata)


def _progname():
    return os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "script"


def _show_usage(usage, terminator, /):
    """
    Internal: build a help handler that prints `usage` and calls `terminator(0)`.
    """

    @rename("show_usage")
    def handler(name, value, /):
        Console().print(Text(usage), end="", soft_wrap=True)
        terminator(0)

    return handler


def _normalize_string(source, /):
    """
    Convert a traditional switch string ("ab:c::(verbose)") into a canonical specification.

    Every character is a one-letter switch and every ':' following it adds one
    parameter. A parenthesized run declares a long switch: "(name)" and "(-name)"
    both yield "--name".
    """
    options = {}
    index = 0
    while index < len(source):
        if source[index] == "(":
            if (end := source.find(")", index)) < 0:
                raise ValueError("unterminated long switch name in %r" % source)
            if not (name := source[index + 1:end]):
                raise ValueError("empty long switch name in %r" % source)
            flag = ("-" if name.startswith("-") else "--") + name
            index = end + 1
        else:
            flag = "-" + source[index]
            index += 1

        argc = 0
        while source[index:index + 1] == ":":
            argc += 1
            index += 1
        options[flag] = Descriptor(argc)
    return options


def _normalize_mapping(mapping, /):
    """
    Convert a primitive mapping into a canonical specification.

    Values may be argument counts, Descriptor instances (used as-is) or
    per-option config mappings. A usage string under USAGE is carried over.
    """
    options = {}
    for key, value in mapping.items():
        if key == USAGE:
            if not isinstance(value, str | None):
                raise TypeError("specification usage must be a string")
            options[USAGE] = value
        elif isinstance(value, Descriptor):
            options[dash(key)] = value
        elif isinstance(value, int):
            options[dash(key)] = Descriptor(value)
        elif isinstance(value, Mapping):
            options[dash(key)] = _configure(value)
        else:
            raise _invalid(value, "option %r" % key)
    return options


def _normalize_program(config, /):
    """
    Convert a rich program description into a canonical specification.

    The description carries program metadata (name, version, description, usage,
    show_help, terminator) and an "options" mapping or sequence of per-option
    configs. Multiple flags of one option collapse into one descriptor plus
    alias-only stubs. The assembled help text is attached under USAGE.
    """
    name = config.get("name") or _progname()
    version = config.get("version") or "0"
    description = config.get("description") or "$ " + name
    if not callable(terminator := config.get("terminator", sys.exit)):
        raise TypeError("program 'terminator' must be callable")

    if isinstance(switches := config["options"], Mapping):
        entries = list(switches.items())
    elif isinstance(switches, Sequence) and not isinstance(switches, str):
        entries = [(Unset, entry) for entry in switches]
    else:
        raise _invalid(switches, "program options")

    lines = ["%s %s -- %s" % (name, version, description)]
    if usage := config.get("usage"):
        lines.append("usage: " + usage)
    elif not entries and not config.get("show_help"):
        lines.append("usage: %s ..." % name)
    else:
        lines += ["usage: %s [options] ..." % name, "", "Options:"]

    options = {}
    for key, entry in entries:
        if not isinstance(entry, Mapping):
            raise _invalid(entry, "option config")

        flags = _pick(entry, "flags")
        flags = [] if flags is Unset else [flags] if isinstance(flags, str) else list(flags)
        if key is not Unset:
            flags.insert(0, key)
        if not flags:
            raise TypeError("option config must specify at least one flag")
        # Keep the first spelling of every flag, in declaration order.
        flags = list(dict.fromkeys(map(dash, flags)))

        argc = coalesce(_pick(entry, "argc"), 0)
        form = ", ".join(flags)
        if isinstance(argc, int) and argc > 0:
            form += " <arg>" if argc == 1 else " <%d args>" % argc
        descriptor = _configure(entry, form=coalesce(_pick(entry, "form"), form), usage=coalesce(_pick(entry, "usage"), ""))

        options[flags[0]] = descriptor
        for flag in flags[1:]:
            options.setdefault(flag, Descriptor(alias=flags[0]))

        lines.append("  " + descriptor.form)
        if descriptor.usage:
            lines.append("        " + descriptor.usage)

    helpers = []
    if config.get("show_help") is True:
        helpers = [flag for flag in ("-h", "--help") if flag not in options]
        if helpers:
            lines += ["  " + ", ".join(helpers), "        show this help message"]

    usage = "\n".join(lines) + "\n"
    for flag in helpers:
        options[flag] = Descriptor(handler=_show_usage(usage, terminator))

    options[USAGE] = usage
    return options


def normalize(options, /):
    """
    Convert an option specification into its canonical form.

    Parameters
    - options: str | Mapping
      • str: traditional switch string ("x:y::h(help)").
      • Mapping without an "options" entry: primitive mapping of flag -> argc,
        Descriptor or per-option config.
      • Mapping with an "options" entry: rich program description.

    Returns
    - dict[str, Descriptor]: a new canonical specification, possibly carrying the
      assembled help text under USAGE. The input is never mutated.

    Raises
    - InvalidSpecKindError: when options is neither a string nor a mapping.
    - TypeError / ValueError: when an option entry is malformed.
    """
    if isinstance(options, str):
        return _normalize_string(options)
    if isinstance(options, Mapping):
        if "options" in options:
            return _normalize_program(options)
        return _normalize_mapping(options)
    raise _invalid(options, "option specification")


__all__ = (
    "Descriptor",
    "normalize",
    "USAGE",
)
