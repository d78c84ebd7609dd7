"""
Optscan flags: fluent option registration on top of the scanner.

What this module provides
- Flags: accumulates canonical descriptors in registration order, renders a
  usage text, registers the usual -h/--help and -V/--version switches and hands
  everything to the scanner through parse().

Process termination
- The help and version switches print through rich and then call the injected
  `terminator` (sys.exit by default). The scanner itself never exits.

Faults
- parse() surfaces scan faults through trigger() with the runtime options of the
  instance: in shell mode they are rendered on stderr and the process exits with
  status 1; otherwise they are raised.

Quick start
    from optscan import Flags

    found = (
        Flags("resize")
        .set_program_metadata(version="1.2.0", description="resize images")
        .add_option("-x, -w, --width <n>", "item width")
        .add_option("-y, --height <n>", "item height")
        .add_version_switch()
        .add_help_switch()
        .parse(["python", "resize.py", "-x", "10", "--height=20", "photo.png"])
    )
    # found["width"] == found["x"] == "10", found["height"] == "20", found["_argv"] == ["photo.png"]
"""
import os.path
import re
import sys

from rich.console import Console
from rich.text import Text

from .faults import ScanException, trigger
from .scanner import getopt
from .specs import USAGE, Descriptor
from .utils import *


class Flags:
    """
    Ordered option registry with a single parse() entry point.

    Every registration method returns the instance, so calls can be chained.
    """

    name = mirror("name")
    version = mirror("version")
    description = mirror("description")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")

    def __init__(self, name=Unset, /, *, shell=False, fancy=False, colorful=True, terminator=sys.exit):
        """
        Parameters
        - name: Unset | str
          Program name shown in usage and faults (defaults to the basename of sys.argv[0]).
        - shell: bool
          Render scan faults and exit instead of raising them.
        - fancy: bool
          Render faults inside a panel.
        - colorful: bool
          Colorize rendered faults.
        - terminator: Callable[[int], Any]
          Called with the exit status after help/version output.
        """
        if not callable(terminator):
            raise TypeError("flags 'terminator' must be callable")

        self._name = Unset
        self._version = ""
        self._description = ""
        self._synopsis = Unset
        self._options = {}
        self._helper = False

        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._terminator = terminator

        self.set_program_metadata(name=coalesce(name, os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "script"))

    def set_program_metadata(self, *, name=Unset, version=Unset, description=Unset, usage=Unset):
        """
        Update the program metadata used by the usage text; Unset fields are kept.
        """
        for field, object in (("name", name), ("version", version), ("description", description), ("synopsis", usage)):
            if object is Unset:
                continue
            if not isinstance(object, str):
                raise TypeError(f"flags {field!r} must be a string")
            setattr(self, "_" + field, object)
        return self

    def add_option(self, names, help=Unset, handler=Unset):
        """
        Register an option from a synopsis like "-u, --user, --username <name>".

        Tokens starting with '-' are flags, every other token is a parameter (a
        <...> or [...] group counts as one). The last flag is the canonical one,
        the others become aliases of it.
        """
        if not isinstance(names, str):
            raise TypeError("add_option() names must be a string")

        parts = re.findall(r"<[^>]*>|\[[^\]]*\]|[^\s,]+", names)
        flags = list(dict.fromkeys(part for part in parts if part.startswith("-")))
        params = [part for part in parts if not part.startswith("-")]
        if not flags:
            raise ValueError("add_option() names must contain at least one flag")

        canonical = flags.pop()
        self._options[canonical] = Descriptor(len(params), handler=handler, form=names, usage=coalesce(help, ""))
        for flag in flags:
            self._options[flag] = Descriptor(alias=canonical)
        return self

    def add_version_switch(self, version=Unset):
        """
        Register -V/--version, optionally setting the version first.
        """
        self.set_program_metadata(version=version)
        return self.add_option("-V, --version", "show version and exit", self._show_version)

    def add_help_switch(self):
        """
        Register -h/--help and attach the usage text to parse results.
        """
        self._helper = True
        return self.add_option("-h, --help", "show usage and exit", self._show_help)

    def _show_version(self, name, value, /):
        Console().print(Text(self.version), soft_wrap=True)
        self._terminator(0)

    def _show_help(self, name, value, /):
        Console().print(Text(self.usage), end="", soft_wrap=True)
        self._terminator(0)

    @property
    def usage(self):
        """
        The help text: a header, a usage line and one aligned line per option
        (aliases are folded into their option's form), in registration order.
        """
        entries = [
            (descriptor.form or flag, descriptor.usage or "")
            for flag, descriptor in self._options.items()
            if descriptor.alias is None
        ]
        width = max((len(form) for form, _ in entries), default=0)

        lines = [
            "%s %s -- %s" % (self.name, self.version, self.description),
            "usage: %s" % coalesce(self._synopsis, self.name + " [options]"),
            "",
            "options:",
        ]
        lines += [("  %s   %s" % (form.ljust(width), usage)).rstrip() for form, usage in entries]
        return "\n".join(lines) + "\n"

    @property
    def specification(self):
        """
        A fresh canonical specification of the registered options.
        """
        specification = dict(self._options)
        if self._helper:
            specification[USAGE] = self.usage
        return specification

    def parse(self, argv=Unset, /):
        """
        Scan argv for the registered options.

        Parameters
        - argv: Unset | str | Iterable[str]
          • Unset: scan [sys.executable, *sys.argv] (sys.argv itself is left untouched).
          • otherwise: forwarded to getopt().

        Returns
        - dict: the found options (see optscan.scanner.scan).
        """
        if argv is Unset:
            argv = [sys.executable, *sys.argv]
        try:
            return getopt(argv, self.specification)
        except ScanException as fault:
            return trigger(fault, program=self.name, shell=self.shell, fancy=self.fancy, colorful=self.colorful)

    def __rich_repr__(self):
        yield "name", self.name
        yield "version", self.version
        yield "description", self.description
        yield "options", self._options

    def __repr__(self):
        return "flags(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


__all__ = (
    "Flags",
)
