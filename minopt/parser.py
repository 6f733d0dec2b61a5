"""
minopt parser layer: parse argument vectors and render help.

What this module provides
- Parser: holds a RuleSet and an optional banner.
  • parse(args) -> Options: flags first, then positionals; the first
    non-flag token ends flag parsing for the whole invocation.
  • help() -> str: plain-text listing of every rule in declaration order.
  • __rich__(): the same listing as styled rich Text (or a Panel when fancy).
- Options: dict of flag name -> value, plus the reserved 'arguments' list.
- invoke(parser, prompt): CLI wrapper reading sys.argv[1:] by default; faults
  are printed on stderr and end the process with status 1.

Parsing rules
- Merged short flags ('-wl') are expanded before anything else.
- A rule taking an argument consumes the next token verbatim, whatever it
  looks like ('-w -l' sets watch to '-l').
- Accumulating rules ('[NAME*]') append each value; other rules overwrite.
- An option-shaped token without rule stops parsing with UnrecognizedOptionError.
- Once a positional token is met, it and every later token are returned
  unparsed in options.arguments.

Quick start
    from minopt import Parser, invoke

    parser = Parser([
        ("-o", "--output [DIR]", "set output dir"),
        ("--tag [NAME*]", "add a tag"),
        ("-v", "--verbose", "talk more"),
    ], "Usage: tool [options] FILE...")

    if __name__ == "__main__":
        options = invoke(parser)
        print(options.output, options.arguments)
"""
import difflib
import shlex
import sys
from collections import defaultdict
from collections.abc import Iterable

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .faults import (
    FaultCode,
    MissingOptionValueWarning,
    UnrecognizedOptionError,
    getdoc,
    trigger,
)
from .logger import logger
from .rules import ruleset
from .tokens import expand, isoption
from .utils import Unset, coalesce, mirror


class Options(dict):
    """
    Parse result: flag name -> True | str | list[str] | None, plus 'arguments'.

    Item access always works (options["dry-run"]); attribute access is a
    convenience for names that are valid identifiers and not dict methods.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.setdefault("arguments", [])

    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError:
            raise AttributeError("options has no %r" % name) from None

    @property
    def arguments(self):
        return self["arguments"]

    def __repr__(self):
        return "options(%s)" % super().__repr__()


class Parser:
    """
    Declarative option parser.

    Parameters
    - declarations: iterable of (long_spec, descr) / (short, long_spec, descr)
      tuples, or a prebuilt RuleSet.
    - banner: optional first line of help output.
    - shell: print faults on stderr and exit(1) instead of raising.
    - colorful: style the rich render of help and faults.
    - fancy: wrap help and faults in rich panels.
    """
    rules = mirror("rules")
    banner = mirror("banner")
    shell = mirror("shell")
    colorful = mirror("colorful")
    fancy = mirror("fancy")

    def __init__(self, declarations=(), banner=Unset, /, *, shell=False, colorful=False, fancy=False):
        if not isinstance(banner, str | Unset | None):
            raise TypeError("parser 'banner' must be a string")
        for name, value in (("shell", shell), ("colorful", colorful), ("fancy", fancy)):
            if not isinstance(value, bool):
                raise TypeError(f"parser {name!r} must be a boolean")

        self._rules = ruleset(declarations)
        self._banner = coalesce(banner) or None
        self._shell = shell
        self._colorful = colorful
        self._fancy = fancy

    def trigger(self, fault, /, **options):
        trigger(fault, **options, shell=self._shell, colorful=self._colorful, fancy=self._fancy)

    @staticmethod
    def _tokenize(args):
        if isinstance(args, str):
            return shlex.split(args)
        if not isinstance(args, Iterable):
            raise TypeError("parse() argument must be a string or an iterable of strings")
        tokens = list(args)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must be a string or an iterable of strings")
        return tokens

    def parse(self, args, /):
        """
        Parse an argument vector into Options.

        Parameters
        - args: the tokens to parse, starting at index 0 (strip the program
          name first), or a shell-like string split with shlex.split.

        Raises
        - UnrecognizedOptionError: an option-shaped token with no rule, met
          before the first positional token (shell mode prints and exits instead).
        - TypeError: args is not a string or an iterable of strings.
        """
        tokens = expand(self._tokenize(args))
        options = Options()
        index = 0

        while index < len(tokens):
            token = tokens[index]

            if (rule := self._rules.find(token)) is not None:
                if not rule.argument:
                    options[rule.name] = True
                else:
                    index += 1
                    if index < len(tokens):
                        value = tokens[index]
                    else:
                        value = None
                        self.trigger(MissingOptionValueWarning(
                            "option %r expects a value but none is left" % token,
                            title="missing option value",
                            code=FaultCode.MISSING_OPTION_VALUE,
                            hint="pass a value after %s (for example: %s %s)" % (token, rule.long, rule.metavar.rstrip("*")),
                            token=token,
                            docs=getdoc(FaultCode.MISSING_OPTION_VALUE),
                        ), stacklevel=5)
                    if rule.accumulate:
                        options.setdefault(rule.name, []).append(value)
                    else:
                        options[rule.name] = value
            elif isoption(token):
                logger.debug("unrecognized option %r at index %d", token, index)
                suggestions = difflib.get_close_matches(token, self._rules.names, 1)
                if suggestions:
                    hint = "did you mean %r?" % suggestions[0]
                else:
                    hint = "see the available options in the help listing"
                self.trigger(UnrecognizedOptionError(
                    "unrecognized option: %s" % token,
                    title="unrecognized option",
                    code=FaultCode.UNRECOGNIZED_OPTION,
                    hint=hint,
                    token=token,
                    index=index,
                    suggestions=suggestions,
                    docs=getdoc(FaultCode.UNRECOGNIZED_OPTION),
                ))
                break
            else:
                logger.debug("positional %r at index %d ends flag parsing", token, index)
                options["arguments"] = tokens[index:]
                break

            index += 1

        return options

    def _compose(self):
        styles = defaultdict(str, {
            "banner": "bold #FF4D94",
            "header": "bold #FFFFFF",
            "short-flag": "bold #22C55E",
            "long-flag": "bold #00E6FF",
            "description": "#9CA3AF",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self._colorful else ""

        lines = []
        if self._banner:
            lines.append(Text(self._banner, styler("banner")))
            lines.append(Text(""))
        lines.append(Text("Available options:", styler("header")))

        width = self._rules.width
        for rule in self._rules:
            line = Text("  ")
            if rule.short is not None:
                line.append(rule.short, styler("short-flag"))
                line.append(", ")
            else:
                line.append("    ")
            line.append(rule.long, styler("long-flag"))
            line.append(" " * (width - len(rule.long)) + "  ")
            line.append(rule.descr, styler("description"))
            lines.append(line)

        return Text("\n").join(lines)

    def help(self):
        """
        Render the help listing as plain text (no trailing newline).

        Layout
            <banner>
            <blank line>
            Available options:
              -o, --output  set output dir
                  --tag     add a tag
        """
        return self._compose().plain

    def __rich__(self):
        if self._fancy:
            return Panel(self._compose(), title_align="left")
        return self._compose()

    def print_help(self, *, stderr=False):
        Console(stderr=stderr).print(self, highlight=False)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(
            self._rules,
            overrides.pop("banner", self._banner),
            **{"shell": self._shell, "colorful": self._colorful, "fancy": self._fancy, **overrides}
        )

    def __repr__(self):
        return "parser(rules=%r, banner=%r, shell=%r)" % (self._rules, self._banner, self._shell)


def invoke(parser, prompt=Unset, /):
    """
    CLI wrapper around Parser.parse.

    Parameters
    - parser: a Parser.
    - prompt:
      • Unset: parse sys.argv[1:].
      • str: shell-like string, split with shlex.split.
      • Iterable[str]: pre-tokenized arguments.

    Behavior
    - Parses in shell mode: an unrecognized option prints
      'unrecognized option: <token>' on stderr and exits with status 1.

    Returns
    - Options on success.
    """
    if not isinstance(parser, Parser):
        raise TypeError("invoke() first argument must be a parser")
    tokens = sys.argv[1:] if prompt is Unset else prompt
    return parser.__replace__(shell=True).parse(tokens)


__all__ = (
    "Options",
    "Parser",
    "invoke",
)
