r"""
minopt token shapes and the argument normalizer.

Shapes (all matched against the whole token)
- LONG:   r"--\w[\w-]*"   e.g. '--output', '--dry-run'
- SHORT:  r"-\w"          e.g. '-o'
- MERGED: r"-\w{2,}"      e.g. '-wl' (several short flags bundled in one token)

A token is option-shaped when it matches LONG or SHORT. Merged tokens never
reach the parser as such: expand() splits them first. Anything else ('-',
'--', 'file.txt', '-x=1') is positional.
"""
import re
from collections.abc import Iterable

from .logger import logger

LONG = re.compile(r"--\w[\w-]*")
SHORT = re.compile(r"-\w")
MERGED = re.compile(r"-\w{2,}")


def isoption(token, /):
    """
    tell whether a token has the shape of a long or a short flag.

    examples
    - isoption("--watch") -> True
    - isoption("-w")      -> True
    - isoption("-wl")     -> False  (merged; expand() first)
    - isoption("--")      -> False
    """
    if not isinstance(token, str):
        raise TypeError("isoption() argument must be a string")
    return bool(LONG.fullmatch(token) or SHORT.fullmatch(token))


def expand(tokens, /):
    """
    split merged short flags into single-character flags, keeping order.

    behavior
    - '-wl' becomes '-w', '-l' at the same place in the sequence.
    - long flags, single short flags and non-flag tokens pass through untouched.
    - always returns a new list; the input is not modified.

    example
    - expand(["-wl", "foo.js", "-w"]) -> ["-w", "-l", "foo.js", "-w"]
    """
    if isinstance(tokens, str) or not isinstance(tokens, Iterable):
        raise TypeError("expand() argument must be an iterable of strings")

    expanded = []
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError("expand() argument must be an iterable of strings")
        if MERGED.fullmatch(token):
            logger.debug("expanding merged flags %r", token)
            expanded.extend("-" + char for char in token[1:])
        else:
            expanded.append(token)
    return expanded


__all__ = (
    "LONG",
    "SHORT",
    "MERGED",
    "isoption",
    "expand",
)
