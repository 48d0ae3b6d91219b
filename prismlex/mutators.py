"""Mutators that change the lexer's state machine as it runs or compiles."""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import TYPE_CHECKING, Tuple

from .rules import CompiledRule, CompiledRules, Rule

if TYPE_CHECKING:
    from .regexlexer import LexerState


class Mutator(abc.ABC):
    """Modifies the lexer state machine while it is processing."""

    kind: str = ""

    @abc.abstractmethod
    def mutate(self, state: LexerState) -> None:
        """Apply this mutator to the running lexer state."""


class LexerMutator(abc.ABC):
    """A mutator that also rewrites the lexer's rules when they are compiled."""

    @abc.abstractmethod
    def mutate_lexer(self, rules: CompiledRules, state: str, rule: int) -> None:
        """Rewrite ``rules``; ``state`` and ``rule`` locate the owning rule."""


@dataclass(frozen=True)
class MultiMutator(Mutator):
    """Applies a sequence of mutators in order."""

    mutators: Tuple[Mutator, ...] = ()
    kind = "mutators"

    def mutate(self, state: LexerState) -> None:
        for mutator in self.mutators:
            mutator.mutate(state)


@dataclass(frozen=True)
class IncludeMutator(Mutator, LexerMutator):
    """Splices the rules of another state in place of the owning rule."""

    state: str
    kind = "include"

    def mutate(self, state: LexerState) -> None:
        raise RuntimeError(f"should never reach here include({self.state!r})")

    def mutate_lexer(self, rules: CompiledRules, state: str, rule: int) -> None:
        if self.state not in rules:
            raise ValueError(f"invalid include state {self.state!r}")
        current = rules[state]
        rules[state] = current[:rule] + list(rules[self.state]) + current[rule + 1 :]


@dataclass(frozen=True)
class CombinedMutator(Mutator, LexerMutator):
    """Builds an anonymous state from several states and pushes it."""

    states: Tuple[str, ...] = ()
    kind = "combined"

    def mutate(self, state: LexerState) -> None:
        raise RuntimeError(f"should never reach here combined({list(self.states)})")

    def mutate_lexer(self, rules: CompiledRules, state: str, rule: int) -> None:
        name = "__combined_" + "__".join(self.states)
        if name not in rules:
            merged: list[CompiledRule] = []
            for source in self.states:
                if source not in rules:
                    raise ValueError(f"invalid combine state {source!r}")
                merged.extend(rules[source])
            rules[name] = merged
        rules[state][rule].mutator = push(name)


@dataclass(frozen=True)
class PushMutator(Mutator):
    """Pushes states onto the stack; with no states, re-pushes the current one.

    The pseudo-state ``#pop`` pops instead of pushing.
    """

    states: Tuple[str, ...] = ()
    kind = "push"

    def mutate(self, state: LexerState) -> None:
        if not self.states:
            state.stack.append(state.state)
            return
        for name in self.states:
            if name == "#pop":
                if not state.stack:
                    raise IndexError("nothing to pop")
                state.stack.pop()
            else:
                state.stack.append(name)


@dataclass(frozen=True)
class PopMutator(Mutator):
    """Pops ``depth`` states off the stack."""

    depth: int = 1
    kind = "pop"

    def mutate(self, state: LexerState) -> None:
        if not state.stack:
            raise IndexError("nothing to pop")
        if self.depth > len(state.stack):
            raise IndexError(f"cannot pop {self.depth} states from a stack of {len(state.stack)}")
        del state.stack[len(state.stack) - self.depth :]


def mutators(*args: Mutator) -> MultiMutator:
    """Combine mutators so that they are applied in order."""
    return MultiMutator(tuple(args))


def include(state: str) -> Rule:
    """A rule that includes the rules of ``state``."""
    return Rule(mutator=IncludeMutator(state))


def combined(*args: str) -> CombinedMutator:
    """Create an anonymous state from the given states and push it."""
    return CombinedMutator(tuple(args))


def push(*args: str) -> PushMutator:
    """Push states onto the stack."""
    return PushMutator(tuple(args))


def pop(n: int) -> PopMutator:
    """Pop ``n`` states from the stack when the rule matches."""
    return PopMutator(n)


def default(*args: Mutator) -> Rule:
    """A rule that applies the given mutators without matching text."""
    return Rule(mutator=mutators(*args))