r"""
minopt rules: declarative flag tuples turned into immutable Rule records.

Declarations
- 2-tuple: (long_spec, descr)          e.g. ("--tag [NAME*]", "add a tag")
- 3-tuple: (short, long_spec, descr)   e.g. ("-o", "--output [DIR]", "set output dir")

Long spec grammar
- canonical flag: the leading r"--\w+(-\w+)*" match ('--output', '--dry-run').
- optional placeholder anywhere after it: '[NAME]' (takes a value) or
  '[NAME*]' (takes a value and accumulates every occurrence into a list).

Derived fields
- name:       the canonical flag without its leading '--'; the key in parse results.
- argument:   True when a placeholder is present.
- accumulate: True when the placeholder ends with '*'.
- metavar:    the placeholder's inner text, kept for diagnostics.

Validation highlights
- A declaration must be a 2- or 3-element sequence of strings (short may be None).
- The long spec must start with '--' and a word character, and the flag must
  end at whitespace or at the end of the spec ('--out=DIR' is rejected).
- A short flag must be '-' plus exactly one word character.
- Placeholders cannot be empty ('[]', '[*]').
- '--arguments' is reserved: parse results keep positionals under that key.
- Duplicated short/long flags are accepted with a warning; the first declared
  rule wins at parse time.

Quick example:
    >>> rules = ruleset([
    ...     ("-w", "--watch [PATTERN]", "watch files"),
    ...     ("-l", "--lint", "lint sources"),
    ...     ("--tag [NAME*]", "add a tag"),
    ... ])
    >>> rules.find("-w").name
    'watch'
"""
import functools
import operator
import re
from collections.abc import Iterable, Sequence

from .faults import (
    DuplicatedRuleWarning,
    FaultCode,
    MalformedDeclarationError,
    MalformedRuleError,
    getdoc,
    trigger,
)
from .tokens import SHORT
from .utils import mirror

_LONG = re.compile(r"--\w+(?:-\w+)*")
_PLACEHOLDER = re.compile(r"\[(?P<metavar>[^\[\]]*)\]")


def _malformed(message, spec, /):
    return MalformedRuleError(
        message,
        title="malformed rule",
        code=FaultCode.MALFORMED_RULE,
        hint="declare long flags as '--name', '--name [VALUE]' or '--name [VALUE*]'",
        spec=spec,
        docs=getdoc(FaultCode.MALFORMED_RULE),
    )


class Rule:
    """
    One accepted flag: short/long spellings, description and value policy.

    Instances are read-only: every field is exposed through a property and
    computed once at construction.
    """
    __introspectable__ = ("short", "long", "name", "metavar", "argument", "accumulate", "descr")

    short = mirror("short")
    long = mirror("long")
    name = mirror("name")
    metavar = mirror("metavar")
    argument = mirror("argument")
    accumulate = mirror("accumulate")
    descr = mirror("descr")

    def __init__(self, long, descr, /, short=None):
        if not isinstance(long, str):
            raise MalformedDeclarationError(
                "rule long flag must be a string, not %s" % type(long).__name__,
                title="malformed declaration",
                code=FaultCode.MALFORMED_DECLARATION,
            )
        if not isinstance(descr, str):
            raise MalformedDeclarationError(
                "rule description must be a string, not %s" % type(descr).__name__,
                title="malformed declaration",
                code=FaultCode.MALFORMED_DECLARATION,
            )
        if short is not None and not isinstance(short, str):
            raise MalformedDeclarationError(
                "rule short flag must be a string, not %s" % type(short).__name__,
                title="malformed declaration",
                code=FaultCode.MALFORMED_DECLARATION,
            )

        spec = long.strip()
        if not (match := _LONG.match(spec)):
            raise _malformed("long flag %r must start with '--' followed by a word" % long, long)
        if (rest := spec[match.end():]) and not rest[0].isspace():
            raise _malformed("long flag %r must be separated from its placeholder by a space" % long, long)

        if short is not None and not SHORT.fullmatch(short):
            raise _malformed("short flag %r must be a dash followed by one word character" % short, long)

        if match.group() == "--arguments":
            raise _malformed("long flag %r clashes with the reserved 'arguments' result key" % long, long)

        metavar = None
        if placeholder := _PLACEHOLDER.search(rest):
            metavar = placeholder["metavar"].strip()
            if not metavar.rstrip("*").strip():
                raise _malformed("placeholder of %r cannot be empty" % long, long)

        self._short = short
        self._long = match.group()
        self._name = self._long[2:]
        self._metavar = metavar
        self._argument = metavar is not None
        self._accumulate = metavar is not None and metavar.endswith("*")
        self._descr = descr

    def matches(self, token, /):
        return token == self._long or (self._short is not None and token == self._short)

    def __eq__(self, other):
        if not isinstance(other, Rule):
            return NotImplemented
        return tuple(self.__rich_repr__()) == tuple(other.__rich_repr__())

    def __hash__(self):
        return hash(tuple(self.__rich_repr__()))

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return f"rule({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"


class RuleSet(Sequence):
    """
    Ordered, immutable sequence of rules (declaration order).

    Order drives both first-match-wins lookups and the help listing.
    """

    def __init__(self, rules=(), /):
        if isinstance(rules, str) or not isinstance(rules, Iterable):
            raise MalformedDeclarationError(
                "rule set must be built from an iterable of rules",
                title="malformed declaration",
                code=FaultCode.MALFORMED_DECLARATION,
            )
        self._rules = tuple(rules)

        seen = set()
        for index, item in enumerate(self._rules):
            if not isinstance(item, Rule):
                raise MalformedDeclarationError(
                    "rule set item #%d must be a rule, not %s" % (index, type(item).__name__),
                    title="malformed declaration",
                    code=FaultCode.MALFORMED_DECLARATION,
                )
            for flag in (item.short, item.long):
                if flag is None:
                    continue
                if flag in seen:
                    trigger(DuplicatedRuleWarning(
                        "flag %r is declared more than once; the first declaration wins" % flag,
                        title="duplicated rule",
                        code=FaultCode.DUPLICATED_RULE,
                        hint="remove or rename the later declaration of %s" % flag,
                        flag=flag,
                        docs=getdoc(FaultCode.DUPLICATED_RULE),
                    ), stacklevel=4)
                seen.add(flag)

    def __getitem__(self, index):
        if isinstance(index, slice):
            # rules were checked when this set was built
            subset = object.__new__(RuleSet)
            subset._rules = self._rules[index]
            return subset
        return self._rules[index]

    def __len__(self):
        return len(self._rules)

    def __eq__(self, other):
        if not isinstance(other, RuleSet):
            return NotImplemented
        return self._rules == other._rules

    __hash__ = None

    def find(self, token, /):
        """Return the first rule spelled exactly as token, or None."""
        return next((rule for rule in self._rules if rule.matches(token)), None)

    @property
    def width(self):
        """Length of the longest long flag; 0 for an empty rule set."""
        return max((len(rule.long) for rule in self._rules), default=0)

    @property
    def names(self):
        return [flag for rule in self._rules for flag in (rule.short, rule.long) if flag is not None]

    def __rich_repr__(self):
        yield from self._rules

    def __repr__(self):
        return "ruleset(%r)" % (list(self._rules),)


def rule(declaration, /):
    """
    Build a Rule from a 2-tuple (long_spec, descr) or 3-tuple (short, long_spec, descr).

    Raises
    - MalformedDeclarationError (a TypeError): wrong shape or non-string fields.
    - MalformedRuleError (a ValueError): bad long/short spelling or empty placeholder.
    """
    if isinstance(declaration, Rule):
        return declaration
    if isinstance(declaration, str) or not isinstance(declaration, Sequence):
        raise MalformedDeclarationError(
            "rule declaration must be a tuple, not %s" % type(declaration).__name__,
            title="malformed declaration",
            code=FaultCode.MALFORMED_DECLARATION,
            hint="use (long, description) or (short, long, description)",
        )

    match len(declaration):
        case 2:
            long, descr = declaration
            short = None
        case 3:
            short, long, descr = declaration
        case _:
            raise MalformedDeclarationError(
                "rule declaration takes 2 or 3 items but %d were given" % len(declaration),
                title="malformed declaration",
                code=FaultCode.MALFORMED_DECLARATION,
                hint="use (long, description) or (short, long, description)",
            )
    return Rule(long, descr, short=short)


def ruleset(declarations, /):
    """Build a RuleSet from declarations, keeping their order."""
    if isinstance(declarations, RuleSet):
        return declarations
    if isinstance(declarations, str) or not isinstance(declarations, Iterable):
        raise MalformedDeclarationError(
            "ruleset() argument must be an iterable of declarations",
            title="malformed declaration",
            code=FaultCode.MALFORMED_DECLARATION,
        )
    return RuleSet(map(rule, declarations))


__all__ = (
    "Rule",
    "RuleSet",
    "rule",
    "ruleset",
)
