"""
Optscan scanner: extract traditional unix command-line switches.

Traditional unix command options follow the command name and precede the
command arguments, as in `ls -l /tmp`. Switches begin with '-'. The first
argument that does not start with '-' ends the scan, '--' ends the scan and
is dropped, and a lone '-' is an argument, not a switch. Switch parameters
are always strings.

What this module provides
- nextopt(argv): remove and return the next switch token, or None when the
  scan is over.
- scan(argv, specification): consume every leading switch of argv according to
  a specification and return the found options.
- getopt(argv, options): convenience entry point accepting a whitespace
  separated string or any iterable of strings as argv.

Argument vector
- argv[0] is the program, argv[1] the script; switches are read from argv[2]
  onwards. Every recognized switch and its parameters are deleted from argv,
  which converges to [program, script, *positionals].

Aggregation of repeated switches
- switch without parameters: True, then 2, 3, ...
- switch with one parameter: "a", then ["a", "b"], then ["a", "b", "c"]
- switch with several parameters: ["a", "b"], then [["a", "b"], ["c", "d"]]

Quick example:
    >>> from optscan import getopt
    >>> found = getopt("python script.py -a 12 -b 34 56 -c 78 pos1", "a:b::c")
    >>> found["a"], found["b"], found["c"], found["_argv"]
    ('12', ['34', '56'], True, ['78', 'pos1'])
"""
import difflib
from collections.abc import Iterable, MutableSequence

from .faults import *
from .specs import USAGE, normalize
from .utils import strip

# Switches are always read (and removed) at this index of the argument vector.
OPTIND = 2

# Alias chains longer than this are reported as loops.
MAX_ALIAS_HOPS = 1000


def nextopt(argv, /):
    """
    Remove and return the next switch token from argv, or None.

    Stops (returns None) when
    - there is no token at OPTIND;
    - the token does not start with '-', or is exactly '-' (left in place);
    - the token is '--' (removed).
    """
    try:
        token = argv[OPTIND]
    except IndexError:
        return None
    if not token.startswith("-") or token == "-":
        return None
    del argv[OPTIND]
    if token == "--":
        return None
    return token


def _resolve(options, flag, /):
    """
    Follow the alias chain of `flag` to the flag of its real descriptor.
    """
    token = flag
    hops = 0
    while (descriptor := options.get(token)) is not None and descriptor.alias is not None:
        token = descriptor.alias
        if (hops := hops + 1) > MAX_ALIAS_HOPS:
            raise AliasLoopError(
                "alias loop while resolving option %r" % flag,
                title="alias loop",
                code=FaultCode.ALIAS_LOOP,
                token=flag,
                hint="make sure the aliases of %r end at a real option" % flag,
                docs=getdoc(FaultCode.ALIAS_LOOP),
            )
    return token


def _consume(argv, flag, argc, /):
    """
    Remove the `argc` parameters of `flag` from argv.

    Returns a bare string for one parameter and a list otherwise.
    """
    value = argv[OPTIND:OPTIND + argc]
    del argv[OPTIND:OPTIND + argc]

    if len(value) < argc:
        raise MissingArgumentError(
            "missing argument for option %r (expected %d, got %d)" % (flag, argc, len(value)),
            title="missing argument",
            code=FaultCode.MISSING_ARGUMENT,
            token=flag,
            expected=argc,
            got=len(value),
            hint="pass %d value%s after %s" % (argc, "s" * (argc > 1), flag),
            docs=getdoc(FaultCode.MISSING_ARGUMENT),
        )
    if "--" in value:
        raise MissingArgumentError(
            "missing argument for option %r ('--' ends the options)" % flag,
            title="missing argument",
            code=FaultCode.MISSING_ARGUMENT,
            token=flag,
            expected=argc,
            got=value.index("--"),
            hint="pass the value%s of %s before '--'" % ("s" * (argc > 1), flag),
            docs=getdoc(FaultCode.MISSING_ARGUMENT),
        )
    return value[0] if argc == 1 else value


def _aggregate(found, name, value, /):
    """
    Accumulate one occurrence of a switch into `found` under `name`.
    """
    if value is True:
        # repeated presence-only switches count their occurrences
        found[name] = found[name] + 1 if found.get(name) else True
    elif name not in found:
        found[name] = value
    elif not isinstance(value, list):
        # "--opt 1 --opt 2 --opt 3" => ["1", "2", "3"]
        if not isinstance(found[name], list):
            found[name] = [found[name]]
        found[name].append(value)
    else:
        # "--opt 1 2 --opt 3 4" => [["1", "2"], ["3", "4"]]
        stored = found[name]
        if not (isinstance(stored, list) and stored and isinstance(stored[0], list)):
            found[name] = [stored]
        found[name].append(value)


def scan(argv, specification, /):
    """
    Extract the leading switches of argv according to a specification.

    Parameters
    - argv: MutableSequence[str]
      The argument vector; consumed switches and parameters are deleted in place.
    - specification: str | Mapping
      Canonical specification (or any shape accepted by normalize()). A private
      working copy is scanned; the given object is never mutated.

    Returns
    - dict: found options keyed by flag without leading dashes, plus
      _program, _script, _argv, _recognizedOptions and _usage.

    Raises
    - UnrecognizedOptionError, MissingArgumentError, AliasLoopError,
      InvalidSpecKindError.
    """
    if not isinstance(argv, MutableSequence):
        raise TypeError("scan() argument vector must be a mutable sequence of strings")

    options = normalize(specification)
    usage = options.pop(USAGE, None)

    found = {}
    aliases = {}
    while (token := nextopt(argv)) is not None:
        specified = token
        flag = _resolve(options, token)

        if (descriptor := options.get(flag)) is not None:
            value = True if descriptor.argc == 0 else _consume(argv, flag, descriptor.argc)
        elif (
                (equals := flag.find("=")) > 0 and
                (descriptor := options.get(flag[:equals])) is not None and
                descriptor.argc == 1
        ):
            # equals-separated parameter, e.g. --value=3 (the value may be empty)
            flag, value = flag[:equals], flag[equals + 1:]
            specified = flag
        else:
            suggestions = difflib.get_close_matches(flag, [key for key in options if key.startswith("-")], 5)
            try:
                hint = "did you mean %r? use '--' before arguments that start with '-'" % suggestions[0]
            except IndexError:
                hint = "use '--' before arguments that start with '-'"
            raise UnrecognizedOptionError(
                "unrecognized option %r" % flag,
                title="unrecognized option",
                code=FaultCode.UNRECOGNIZED_OPTION,
                token=flag,
                suggestions=suggestions,
                hint=hint,
                docs=getdoc(FaultCode.UNRECOGNIZED_OPTION),
            )

        name = strip(flag)
        _aggregate(found, name, value)

        # every alias seen so far mirrors the accumulated canonical value
        if (given := strip(specified)) != name:
            aliases.setdefault(name, {})[given] = None
        for given in aliases.get(name, ()):
            found[given] = found[name]

        if descriptor.handler is not None:
            descriptor.handler(name, value)

    found["_program"] = argv[0] if len(argv) > 0 else None
    found["_script"] = argv[1] if len(argv) > 1 else None
    found["_argv"] = list(argv[OPTIND:])
    found["_recognizedOptions"] = options
    found["_usage"] = usage

    return found


def getopt(argv, options, /):
    """
    Scan argv for the switches described by options.

    Parameters
    - argv: str | Iterable[str]
      • str: split on whitespace into a new list (embedded spaces cannot be represented).
      • MutableSequence[str]: scanned and consumed in place.
      • other Iterable[str]: copied into a new list.
    - options: str | Mapping
      Any shape accepted by normalize().

    Returns
    - dict: see scan().
    """
    if isinstance(argv, str):
        argv = argv.split()
    elif not isinstance(argv, Iterable):
        raise TypeError("getopt() argument vector must be a string or an iterable of strings")
    elif not isinstance(argv, MutableSequence):
        argv = list(argv)

    if not all(isinstance(item, str) for item in argv):
        raise TypeError("getopt() argument vector must contain only strings")

    return scan(argv, options)


__all__ = (
    "OPTIND",
    "MAX_ALIAS_HOPS",
    "nextopt",
    "scan",
    "getopt",
)
