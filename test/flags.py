"""
Flags module behavioral tests (registration, usage text, help/version, faults).

Scope
- Validate option registration from synopsis strings (aliases, parameter counts).
- Validate the rendered usage text and its attachment to parse results.
- Validate the injected terminator for help/version switches.
- Validate fault surfacing in raising and shell modes.

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured with redirect_stdout/redirect_stderr.
"""

from __future__ import annotations

import io
import sys
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest import TestCase

from optscan import Flags, USAGE, UnrecognizedOptionError, MissingArgumentError


class TestRegistration(TestCase):
    """Behavioral tests for add_option and friends."""

    def testLastFlagIsCanonical(self):
        flags = Flags("tool").add_option("-x, -w, --width <n>", "item width")
        specification = flags.specification
        self.assertEqual(specification["--width"].argc, 1)
        self.assertEqual(specification["--width"].form, "-x, -w, --width <n>")
        self.assertEqual(specification["--width"].usage, "item width")
        self.assertEqual(specification["-x"].alias, "--width")
        self.assertEqual(specification["-w"].alias, "--width")

    def testBracketedParameterCountsOnce(self):
        flags = Flags("tool").add_option("-u, --username <name of user>")
        self.assertEqual(flags.specification["--username"].argc, 1)

    def testPlainParametersAreCounted(self):
        flags = Flags("tool").add_option("--point X Y")
        self.assertEqual(flags.specification["--point"].argc, 2)

    def testSwitchWithoutParameters(self):
        flags = Flags("tool").add_option("-v, --verbose")
        self.assertEqual(flags.specification["--verbose"].argc, 0)

    def testDuplicatedFlagsAreCollapsed(self):
        flags = Flags("tool").add_option("-v, -v")
        self.assertIsNone(flags.specification["-v"].alias)

    def testNamesWithoutFlagRejected(self):
        with self.assertRaises(ValueError):
            Flags("tool").add_option("value")

    def testNamesMustBeString(self):
        with self.assertRaises(TypeError):
            Flags("tool").add_option(["-v"])

    def testMetadataMustBeStrings(self):
        with self.assertRaises(TypeError):
            Flags("tool").set_program_metadata(version=1)

    def testTerminatorMustBeCallable(self):
        with self.assertRaises(TypeError):
            Flags("tool", terminator=0)

    def testSpecificationIsFresh(self):
        flags = Flags("tool").add_option("-v")
        flags.specification["-x"] = None
        self.assertNotIn("-x", flags.specification)


class TestParsing(TestCase):
    """Behavioral tests for parse()."""

    def setUp(self):
        self.flags = (
            Flags("resize")
            .add_option("-x, -w, --width <n>", "item width")
            .add_option("-y, --height <n>", "item height")
            .add_option("-v, --verbose", "more output")
        )

    def testAliasesAndValues(self):
        found = self.flags.parse(["python", "resize.py", "-x", "1", "--width", "2", "-v", "-v", "--height=3", "a.png"])
        self.assertEqual(found["width"], ["1", "2"])
        self.assertEqual(found["x"], ["1", "2"])
        self.assertEqual(found["verbose"], 2)
        self.assertEqual(found["height"], "3")
        self.assertEqual(found["_argv"], ["a.png"])

    def testStringVector(self):
        found = self.flags.parse("python resize.py -y 5 rest")
        self.assertEqual(found["height"], "5")
        self.assertEqual(found["y"], "5")

    def testHandlerIsCalled(self):
        calls = []
        flags = Flags("tool").add_option("-n, --name <n>", "a name", lambda name, value: calls.append((name, value)))
        flags.parse("python tool.py -n one --name two")
        self.assertEqual(calls, [("name", "one"), ("name", "two")])

    def testUsageAttachedOnlyWithHelpSwitch(self):
        self.assertIsNone(self.flags.parse("python resize.py")["_usage"])
        self.flags.add_help_switch()
        self.assertEqual(self.flags.parse("python resize.py")["_usage"], self.flags.usage)

    def testDefaultVectorIsSysArgv(self):
        saved = sys.argv
        sys.argv = ["resize.py", "-v", "file"]
        try:
            found = self.flags.parse()
        finally:
            sys.argv = saved
        self.assertEqual(found["_program"], sys.executable)
        self.assertEqual(found["_script"], "resize.py")
        self.assertIs(found["verbose"], True)
        self.assertEqual(found["_argv"], ["file"])

    def testFaultIsRaisedOutsideShell(self):
        with self.assertRaises(UnrecognizedOptionError) as context:
            self.flags.parse("python resize.py --depth 3")
        self.assertEqual(context.exception.options["program"], "resize")
        self.assertFalse(context.exception.options["shell"])

    def testFaultExitsInShell(self):
        flags = Flags("resize", shell=True, colorful=False).add_option("--width <n>")
        stderr = io.StringIO()
        with redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            flags.parse("python resize.py --width")
        self.assertEqual(context.exception.code, 1)

    def testMissingArgumentRaised(self):
        with self.assertRaises(MissingArgumentError):
            self.flags.parse("python resize.py --width")


class TestUsage(TestCase):
    """Behavioral tests for the usage text and the help/version switches."""

    def setUp(self):
        self.exits = []
        self.flags = (
            Flags("resize", terminator=self.exits.append)
            .set_program_metadata(version="1.2.0", description="resize images")
            .add_option("-x, --width <n>", "item width")
            .add_option("-v", "verbose")
        )

    def testUsageText(self):
        self.assertEqual(self.flags.usage, "\n".join([
            "resize 1.2.0 -- resize images",
            "usage: resize [options]",
            "",
            "options:",
            "  -x, --width <n>   item width",
            "  -v                verbose",
        ]) + "\n")

    def testCustomUsageLine(self):
        self.flags.set_program_metadata(usage="resize [options] FILE...")
        self.assertIn("usage: resize [options] FILE...\n", self.flags.usage)

    def testHelpSwitchPrintsUsageAndTerminates(self):
        self.flags.add_help_switch()
        stdout = io.StringIO()
        with redirect_stdout(stdout):
            found = self.flags.parse("python resize.py --help")
        self.assertEqual(self.exits, [0])
        self.assertIn("usage: resize [options]", stdout.getvalue())
        self.assertIn("-h, --help", stdout.getvalue())
        self.assertIs(found["help"], True)
        self.assertEqual(found["_usage"], self.flags.specification[USAGE])

    def testVersionSwitchPrintsVersionAndTerminates(self):
        self.flags.add_version_switch("2.0.0")
        stdout = io.StringIO()
        with redirect_stdout(stdout):
            self.flags.parse("python resize.py -V")
        self.assertEqual(self.exits, [0])
        self.assertEqual(stdout.getvalue().strip(), "2.0.0")
        self.assertEqual(self.flags.version, "2.0.0")

    def testDefaultTerminatorExits(self):
        flags = Flags("tool").add_help_switch()
        stdout = io.StringIO()
        with redirect_stdout(stdout), self.assertRaises(SystemExit) as context:
            flags.parse("python tool.py -h")
        self.assertEqual(context.exception.code, 0)


if __name__ == "__main__":
    unittest.main()
