"""
minopt faults (errors and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing issue, grouped by
  domain (rule declarations, parsing, warnings).
- OptionException / OptionWarning: base types carrying a message plus read-only
  options (code, title, hint, token...). They render themselves with rich and
  know how to surface themselves (raise/warn, or print and exit in shell mode).
- trigger(): central entry point to surface any fault with runtime options.
- getdoc(): optional description lookup for a code from the host application.

Integration
- The parser builds a fault and calls trigger(fault, shell=..., colorful=...).
- In non-shell mode exceptions are raised and warnings go through warnings.warn;
  in shell mode both are printed on stderr via rich, and errors exit with status 1.
"""
import copy
import os.path
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - declarations (101xx): MALFORMED_DECLARATION, MALFORMED_RULE
    - parsing (111xx): UNRECOGNIZED_OPTION
    - warnings (121xx): MISSING_OPTION_VALUE, DUPLICATED_RULE
    """
    # --- declaration errors (10xxx) ---
    MALFORMED_DECLARATION = 10101
    MALFORMED_RULE        = 10102

    # --- parse errors (11xxx) ---
    UNRECOGNIZED_OPTION   = 11112

    # --- warnings (12xxx) ---
    MISSING_OPTION_VALUE  = 12111
    DUPLICATED_RULE       = 12112

    def normalize(self):
        """
        return a host-normalized label for this code.

        the host application can provide a __codes__ mapping in __main__ to
        override numeric ids; otherwise the numeric value is used.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, /):
    main = __import__("__main__")
    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))
    colorful = fault.options.get("colorful", False)
    fancy = fault.options.get("fancy", False)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        return Text(str(fragment), styles[style])

    message = text(fault.message, "message")
    renders = [message]
    if hint := fault.options.get("hint"):
        renders.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

    if not fancy:
        return Group(*renders)

    prog = getattr(main, "__prog__", os.path.basename(sys.argv[0]) or "minopt")
    header = Text.assemble("[ ", text(prog, "prog-name"))
    if code := fault.options.get("code"):
        header.append_text(Text.assemble(" — ", text(code.normalize(), "code")))
    if title := fault.options.get("title"):
        header.append_text(Text.assemble(" | ", text(title.title(), "title")))
    header.append(" ]")
    return Panel(Group(*renders), title=header, title_align="left")


class OptionException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "title": "bold #FF4DA6",
            "message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnrecognizedOptionError(OptionException):
    """An option-shaped token with no matching rule, met before the first positional."""

    @property
    def token(self):
        return self.options.get("token")


class MalformedRuleError(OptionException, ValueError): ...
class MalformedDeclarationError(OptionException, TypeError): ...


class OptionWarning(Warning):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "title": "bold #FFC2E0",
            "message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=self.options.get("stacklevel", 2))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class MissingOptionValueWarning(OptionWarning): ...
class DuplicatedRuleWarning(OptionWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ (see base classes).
    - options are merged into the fault via copy.replace() before triggering.

    typical options
    - shell, colorful, fancy, stacklevel, plus the context already carried
      by the fault (code, title, hint, token).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation lookup for a fault code.

    the host application may expose a __docs__ mapping in __main__ keyed by
    FaultCode; None is returned when no entry exists.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "OptionException",
    "UnrecognizedOptionError",
    "MalformedRuleError",
    "MalformedDeclarationError",
    "OptionWarning",
    "MissingOptionValueWarning",
    "DuplicatedRuleWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
