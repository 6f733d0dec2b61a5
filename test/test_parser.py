"""
Parser module behavioral tests (parsing, cutover, help, CLI wrapper).

Scope
- Validate parse(): boolean flags, value-taking flags (last wins), accumulating
  flags (append in order), merged-flag expansion and its interplay with
  value-taking flags, the first-positional cutover, unrecognized options.
- Validate help(): banner, header, column layout, empty rule sets.
- Validate shell mode and invoke(): printed message and exit status.

Conventions
- Test method names follow CamelCase per project convention.
- Shell-mode output is captured by patching the faults console.
"""

from __future__ import annotations

import io
import sys
import unittest
from unittest import TestCase, mock

from rich.console import Console

from minopt import (
    FaultCode,
    MissingOptionValueWarning,
    Options,
    Parser,
    UnrecognizedOptionError,
    invoke,
    ruleset,
)

DECLARATIONS = [
    ("-w", "--watch [PATTERN]", "watch files"),
    ("-l", "--lint", "lint sources"),
    ("-o", "--output [DIR]", "set output dir"),
    ("--tag [NAME*]", "add a tag"),
    ("-x", "--x-ray", "x"),
    ("-y", "--yank", "y"),
    ("-z", "--zap", "z"),
]


class TestParse(TestCase):
    """Behavioral tests for Parser.parse."""

    def setUp(self):
        self.parser = Parser(DECLARATIONS)

    def testValueTakingLongFlag(self):
        parser = Parser([("-o", "--output [DIR]", "set output dir")])
        self.assertEqual(parser.parse(["--output", "build"]), {"output": "build", "arguments": []})

    def testValueTakingShortFlag(self):
        self.assertEqual(self.parser.parse(["-o", "dist"])["output"], "dist")

    def testLastOccurrenceWins(self):
        options = self.parser.parse(["-o", "a", "--output", "b"])
        self.assertEqual(options["output"], "b")

    def testBooleanFlag(self):
        options = self.parser.parse(["--lint"])
        self.assertIs(options["lint"], True)
        self.assertNotIn("watch", options)

    def testAccumulatingFlagWithoutShort(self):
        parser = Parser([("--tag [NAME*]", "tag")])
        self.assertEqual(parser.parse(["--tag", "a", "--tag", "b"])["tag"], ["a", "b"])

    def testAccumulatingFlagKeepsEveryValueInOrder(self):
        for count in (1, 2, 5):
            values = ["v%d" % index for index in range(count)]
            tokens = [token for value in values for token in ("--tag", value)]
            with self.subTest(count=count):
                self.assertEqual(self.parser.parse(tokens)["tag"], values)

    def testArgumentsDefaultsToEmpty(self):
        options = self.parser.parse([])
        self.assertEqual(options, {"arguments": []})
        self.assertEqual(options.arguments, [])

    def testMergedFlagsParseLikeSeparateFlags(self):
        merged = self.parser.parse(["-xyz", "file"])
        separate = self.parser.parse(["-x", "-y", "-z", "file"])
        self.assertEqual(merged, separate)
        self.assertEqual(merged, {"x-ray": True, "yank": True, "zap": True, "arguments": ["file"]})

    def testMergedValueFlagConsumesFollowingShortFlag(self):
        parser = Parser([
            ("-w", "--watch [PATTERN]", "desc"),
            ("-l", "--lint", "desc"),
        ])
        options = parser.parse(["-wl", "foo.js", "-w"])
        self.assertEqual(options["watch"], "-l")
        self.assertNotIn("lint", options)
        self.assertEqual(options["arguments"], ["foo.js", "-w"])

    def testValueMayLookLikeAnUnknownFlag(self):
        self.assertEqual(self.parser.parse(["-o", "--bogus"])["output"], "--bogus")

    def testFirstPositionalEndsFlagParsing(self):
        options = self.parser.parse(["--lint", "src", "--output", "x", "--bogus", "-w"])
        self.assertEqual(options, {"lint": True, "arguments": ["src", "--output", "x", "--bogus", "-w"]})

    def testPositionalsComeFromTheExpandedSequence(self):
        options = self.parser.parse(["src", "-wl"])
        self.assertEqual(options["arguments"], ["src", "-w", "-l"])

    def testDashesAreTreatedAsPositionals(self):
        self.assertEqual(self.parser.parse(["--", "--lint"])["arguments"], ["--", "--lint"])
        self.assertEqual(self.parser.parse(["-", "--lint"])["arguments"], ["-", "--lint"])

    def testReparsingArgumentsIsIdempotent(self):
        for tokens in (["a", "-b", "--c"], ["file.txt"], ["x", "--lint", "y"]):
            with self.subTest(tokens=tokens):
                first = self.parser.parse(["--lint"] + tokens)
                second = self.parser.parse(first["arguments"])
                self.assertEqual(second["arguments"], tokens)

    def testUnrecognizedLongOptionRaises(self):
        with self.assertRaises(UnrecognizedOptionError) as context:
            self.parser.parse(["--lint", "--bogus", "file"])
        self.assertEqual(context.exception.token, "--bogus")
        self.assertEqual(str(context.exception), "unrecognized option: --bogus")
        self.assertEqual(context.exception.code, FaultCode.UNRECOGNIZED_OPTION)

    def testUnrecognizedShortOptionFromMergedTokenRaises(self):
        with self.assertRaises(UnrecognizedOptionError) as context:
            self.parser.parse(["-lq"])
        self.assertEqual(context.exception.token, "-q")

    def testUnrecognizedOptionSuggestsCloseMatch(self):
        with self.assertRaises(UnrecognizedOptionError) as context:
            self.parser.parse(["--lnt"])
        self.assertIn("--lint", context.exception.options["hint"])
        self.assertEqual(context.exception.options["suggestions"], ["--lint"])

    def testEmptyRuleSetRejectsAnyFlag(self):
        parser = Parser([])
        self.assertEqual(parser.parse(["file"])["arguments"], ["file"])
        with self.assertRaises(UnrecognizedOptionError):
            parser.parse(["-v"])

    def testTrailingValueFlagWarnsAndStoresNone(self):
        with self.assertWarns(MissingOptionValueWarning):
            options = self.parser.parse(["--lint", "-o"])
        self.assertIsNone(options["output"])
        self.assertTrue(options["lint"])

    def testTrailingAccumulatingFlagAppendsNone(self):
        with self.assertWarns(MissingOptionValueWarning):
            options = self.parser.parse(["--tag", "a", "--tag"])
        self.assertEqual(options["tag"], ["a", None])

    def testStringInputIsShellSplit(self):
        options = self.parser.parse("--output 'my dir' file.txt")
        self.assertEqual(options, {"output": "my dir", "arguments": ["file.txt"]})

    def testInvalidInputRejected(self):
        with self.assertRaises(TypeError):
            self.parser.parse(42)
        with self.assertRaises(TypeError):
            self.parser.parse(["--lint", None])

    def testEachCallReturnsFreshOptions(self):
        first = self.parser.parse(["--tag", "a"])
        second = self.parser.parse(["--tag", "b"])
        self.assertIsNot(first, second)
        self.assertEqual(first["tag"], ["a"])

    def testParserAcceptsPrebuiltRuleSet(self):
        rules = ruleset(DECLARATIONS)
        self.assertIs(Parser(rules).rules, rules)


class TestOptions(TestCase):
    """Behavioral tests for the Options mapping."""

    def testAttributeAccess(self):
        options = Parser([("-o", "--output [DIR]", "d")]).parse(["-o", "build", "x"])
        self.assertEqual(options.output, "build")
        self.assertEqual(options.arguments, ["x"])

    def testMissingAttributeRaises(self):
        with self.assertRaises(AttributeError):
            Options().output

    def testIsAPlainDict(self):
        options = Options({"lint": True})
        self.assertIsInstance(options, dict)
        self.assertEqual(options, {"lint": True, "arguments": []})
        self.assertTrue(repr(options).startswith("options("))


class TestHelp(TestCase):
    """Behavioral tests for the help renderer."""

    def setUp(self):
        self.parser = Parser([
            ("-o", "--output [DIR]", "set output dir"),
            ("--tag [NAME*]", "add a tag"),
            ("-v", "--verbose", "talk more"),
        ], "Usage: tool [options]")

    def testLayout(self):
        self.assertEqual(self.parser.help(), "\n".join([
            "Usage: tool [options]",
            "",
            "Available options:",
            "  -o, --output   set output dir",
            "      --tag      add a tag",
            "  -v, --verbose  talk more",
        ]))

    def testBannerComesFirst(self):
        lines = self.parser.help().splitlines()
        self.assertEqual(lines[:3], ["Usage: tool [options]", "", "Available options:"])
        self.assertEqual(len(lines), 3 + len(self.parser.rules))

    def testWithoutBanner(self):
        parser = Parser([("-l", "--lint", "lint")])
        self.assertEqual(parser.help(), "Available options:\n  -l, --lint  lint")

    def testEmptyBannerIsIgnored(self):
        self.assertEqual(Parser([], "").help(), "Available options:")

    def testEmptyRuleSet(self):
        self.assertEqual(Parser([]).help(), "Available options:")
        self.assertEqual(Parser([], "Usage: tool").help(), "Usage: tool\n\nAvailable options:")

    def testColorfulRenderKeepsPlainText(self):
        colorful = Parser(self.parser.rules, "Usage: tool [options]", colorful=True)
        self.assertEqual(colorful.help(), self.parser.help())

    def testPrintHelp(self):
        buffer = io.StringIO()
        with mock.patch("minopt.parser.Console", lambda stderr=False: Console(file=buffer, width=120)):
            self.parser.print_help()
        self.assertIn("Available options:", buffer.getvalue())
        self.assertIn("-o, --output", buffer.getvalue())

    def testFancyRenderIsAPanel(self):
        buffer = io.StringIO()
        Console(file=buffer, width=120).print(Parser([("--lint", "lint")], fancy=True))
        self.assertIn("--lint", buffer.getvalue())
        self.assertIn("╭", buffer.getvalue())


class TestShellMode(TestCase):
    """Behavioral tests for printed faults and the invoke() wrapper."""

    def setUp(self):
        self.buffer = io.StringIO()
        patcher = mock.patch("minopt.faults.console", Console(file=self.buffer, width=120))
        patcher.start()
        self.addCleanup(patcher.stop)
        self.parser = Parser(DECLARATIONS)

    def testShellModePrintsAndExits(self):
        parser = Parser(DECLARATIONS, shell=True)
        with self.assertRaises(SystemExit) as context:
            parser.parse(["--bogus"])
        self.assertEqual(context.exception.code, 1)
        self.assertEqual(self.buffer.getvalue().splitlines()[0], "unrecognized option: --bogus")

    def testShellModePrintsWarningsWithoutExiting(self):
        options = Parser(DECLARATIONS, shell=True).parse(["-o"])
        self.assertIsNone(options["output"])
        self.assertIn("expects a value", self.buffer.getvalue())

    def testInvokeWithExplicitPrompt(self):
        options = invoke(self.parser, ["--lint", "a"])
        self.assertEqual(options, {"lint": True, "arguments": ["a"]})
        self.assertFalse(self.parser.shell)

    def testInvokeReadsArgv(self):
        with mock.patch.object(sys, "argv", ["tool", "-o", "out", "src"]):
            options = invoke(self.parser)
        self.assertEqual(options, {"output": "out", "arguments": ["src"]})

    def testInvokeExitsOnUnrecognizedOption(self):
        with self.assertRaises(SystemExit) as context:
            invoke(self.parser, "--bogus")
        self.assertEqual(context.exception.code, 1)
        self.assertEqual(self.buffer.getvalue().splitlines()[0], "unrecognized option: --bogus")

    def testInvokeRejectsNonParser(self):
        with self.assertRaises(TypeError):
            invoke(object(), [])


class TestParserConstruction(TestCase):
    """Behavioral tests for Parser construction options."""

    def testRuntimeSwitchesMustBeBooleans(self):
        with self.assertRaises(TypeError):
            Parser([], shell="yes")

    def testBannerMustBeAString(self):
        with self.assertRaises(TypeError):
            Parser([], 42)

    def testReplaceKeepsRulesAndBanner(self):
        parser = Parser(DECLARATIONS, "Usage: tool")
        shell = parser.__replace__(shell=True)
        self.assertTrue(shell.shell)
        self.assertIs(shell.rules, parser.rules)
        self.assertEqual(shell.banner, "Usage: tool")


if __name__ == "__main__":
    unittest.main()
