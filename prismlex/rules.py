"""Lexer rules: patterns paired with emitters and state mutators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from .mutators import Mutator
    from .tokens import Token

_REGEX_SPECIALS = frozenset("\\.+*?()|[]{}^$")


class Emitter(Protocol):
    """Anything that turns a match's groups into tokens."""

    def emit(self, groups: Sequence[str], state: Any) -> Iterator[Token]:
        ...


def _quote_meta(text: str) -> str:
    """Escape every regular-expression metacharacter in ``text``."""
    return "".join("\\" + ch if ch in _REGEX_SPECIALS else ch for ch in text)


def words(prefix: str, suffix: str, *args: str) -> str:
    """Build a pattern matching any of the given literal words.

    Longer words come first so that they win over their own prefixes.
    """
    ordered = sorted(args, key=len, reverse=True)
    return prefix + "(" + "|".join(_quote_meta(word) for word in ordered) + ")" + suffix


@dataclass(frozen=True)
class Rule:
    """The basic matching unit of a regex lexer's state machine."""

    pattern: str = ""
    type: Optional[Emitter] = None
    mutator: Optional[Mutator] = None


class Rules(Dict[str, List[Rule]]):
    """A mapping from state name to the sequence of rules in that state."""

    def rename(self, old_rule: str, new_rule: str) -> Rules:
        """Return a clone with state ``old_rule`` renamed to ``new_rule``."""
        out = self.clone()
        out[new_rule] = out.get(old_rule, [])
        out.pop(old_rule, None)
        return out

    def clone(self) -> Rules:
        """Return a copy whose rule lists can be changed independently."""
        return Rules({state: list(rules) for state, rules in self.items()})

    def merge(self, rules: Rules) -> Rules:
        """Return a clone of these rules with the states of ``rules`` laid over it."""
        out = self.clone()
        out.update(Rules(rules).clone())
        return out


@dataclass
class CompiledRule:
    """A rule together with its compiled pattern and regex flags.

    Patterns are compiled lazily, so ``regexp`` is None until first use.
    """

    pattern: str = ""
    type: Optional[Emitter] = None
    mutator: Optional[Mutator] = None
    regexp: Any = None
    flags: str = ""

    @classmethod
    def from_rule(cls, rule: Rule, flags: str = "") -> CompiledRule:
        """Wrap a rule, ready for compilation with the given flags."""
        return cls(pattern=rule.pattern, type=rule.type, mutator=rule.mutator, flags=flags)

    @property
    def rule(self) -> Rule:
        """The plain rule this compiled rule was made from."""
        return Rule(self.pattern, self.type, self.mutator)


CompiledRules = Dict[str, List[CompiledRule]]