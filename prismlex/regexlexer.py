"""The regular-expression driven lexer and the state of a single lex."""

from __future__ import annotations

import functools
import operator
import os
import re
import sys
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import regex

from .mutators import LexerMutator
from .rules import CompiledRule, CompiledRules, Rules
from .tokens import EOF, Token, TokenType

_MATCH_TIMEOUT = 0.25
_FLAG_BITS = {"m": regex.MULTILINE, "i": regex.IGNORECASE, "s": regex.DOTALL}


class LexerError(Exception):
    """Raised when a lexer is misconfigured or meets an impossible state."""


@dataclass
class Config:
    """Static description of a lexer: names, file patterns and matching flags."""

    name: str = ""
    aliases: List[str] = field(default_factory=list)
    filenames: List[str] = field(default_factory=list)
    alias_filenames: List[str] = field(default_factory=list)
    mime_types: List[str] = field(default_factory=list)
    case_insensitive: bool = False
    dot_all: bool = False
    not_multiline: bool = False
    ensure_nl: bool = False
    priority: float = 0.0


@dataclass(frozen=True)
class TokeniseOptions:
    """Options for a single tokenisation."""

    state: str = "root"
    nested: bool = False
    ensure_lf: bool = True


def _glob_char(glob: str, i: int) -> Tuple[str, int]:
    """Read one (possibly escaped) character of a glob character class."""
    if i >= len(glob) or glob[i] in "-]":
        raise ValueError(f"syntax error in pattern {glob!r}")
    if glob[i] == "\\":
        i += 1
        if i >= len(glob):
            raise ValueError(f"syntax error in pattern {glob!r}")
    return glob[i], i + 1


@functools.lru_cache(maxsize=None)
def _compile_glob(glob: str) -> re.Pattern:
    """Translate a shell glob into a compiled pattern, rejecting malformed globs."""
    parts: List[str] = []
    i = 0
    n = len(glob)
    while i < n:
        ch = glob[i]
        i += 1
        if ch == "*":
            parts.append("[^/]*")
        elif ch == "?":
            parts.append("[^/]")
        elif ch == "\\":
            if i >= n:
                raise ValueError(f"syntax error in pattern {glob!r}")
            parts.append(re.escape(glob[i]))
            i += 1
        elif ch == "[":
            negate = i < n and glob[i] == "^"
            if negate:
                i += 1
            ranges: List[Tuple[str, str]] = []
            while True:
                if i < n and glob[i] == "]" and ranges:
                    i += 1
                    break
                low, i = _glob_char(glob, i)
                high = low
                if i < n and glob[i] == "-":
                    high, i = _glob_char(glob, i + 1)
                    if high < low:
                        raise ValueError(f"syntax error in pattern {glob!r}")
                ranges.append((low, high))
            body = "".join(f"{re.escape(low)}-{re.escape(high)}" for low, high in ranges)
            parts.append(f"[{'^' if negate else ''}{body}]")
        else:
            parts.append(re.escape(ch))
    return re.compile("(?s:" + "".join(parts) + ")")


def _glob_match(glob: str, name: str) -> bool:
    """Whether ``name`` matches the shell glob ``glob`` as a whole."""
    return _compile_glob(glob).fullmatch(name) is not None


def ensure_lf(text: str) -> str:
    """Replace ``\\r\\n`` and lone ``\\r`` with ``\\n``."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _match_rules(
    text: str, pos: int, rules: Sequence[CompiledRule]
) -> Optional[Tuple[int, CompiledRule, List[str], Dict[str, str]]]:
    for index, rule in enumerate(rules):
        try:
            match = rule.regexp.match(text, pos=pos, timeout=_MATCH_TIMEOUT)
        except TimeoutError:
            continue
        if match is None or match.start() != pos:
            continue
        groups = [match.group(0), *match.groups(default="")]
        named = {str(number): value for number, value in enumerate(groups)}
        named.update(match.groupdict(default=""))
        return index, rule, groups, named
    return None


class LexerState:
    """The state of a single lex; iterating it yields tokens."""

    def __init__(
        self,
        lexer: RegexLexer,
        text: str,
        options: Optional[TokeniseOptions] = None,
        newline_added: bool = False,
    ) -> None:
        self._options = options if options is not None else TokeniseOptions()
        self._newline_added = newline_added
        self._iterators: List[Iterator[Token]] = []
        self.lexer = lexer
        self.registry = lexer.registry
        self.text = text
        self.pos = 0
        self.rules: CompiledRules = lexer._compiled_rules or {}
        self.stack: List[str] = [self._options.state]
        self.state = ""
        self.rule = 0
        self.groups: List[str] = []
        self.named_groups: Dict[str, str] = {}
        self.mutator_context: Dict[Any, Any] = {}

    def set(self, key: Any, value: Any) -> None:
        """Store a value in the mutator context."""
        self.mutator_context[key] = value

    def get(self, key: Any) -> Any:
        """Fetch a value from the mutator context, or None."""
        return self.mutator_context.get(key)

    def _drain(self) -> Optional[Token]:
        while self._iterators:
            try:
                token = next(self._iterators[-1])
            except StopIteration:
                self._iterators.pop()
                continue
            if token.type == TokenType.Ignore:
                continue
            if token == EOF:
                self._iterators.pop()
                continue
            return token
        return None

    def next_token(self) -> Token:
        """Return the next token, or EOF when the text is exhausted."""
        end = len(self.text) - (1 if self._newline_added else 0)
        while self.pos < end and self.stack:
            token = self._drain()
            if token is not None:
                return token

            self.state = self.stack[-1]
            if self.lexer.trace:
                print(
                    f"{self.state}: pos={self.pos}, text={self.text[self.pos:]!r}",
                    file=sys.stderr,
                )
            try:
                selected = self.rules[self.state]
            except KeyError:
                raise LexerError(f"unknown state {self.state}") from None

            found = _match_rules(self.text, self.pos, selected)
            if found is None:
                # A newline that matches nothing resets the stack to the
                # starting state, so an unclosed construct does not spoil
                # the rest of the input.
                if self.text[self.pos] == "\n" and self.state != self._options.state:
                    self.stack = [self._options.state]
                    continue
                self.pos += 1
                return Token(TokenType.Error, self.text[self.pos - 1])

            index, rule, groups, named = found
            self.rule = index
            self.groups = groups
            self.named_groups = named
            self.pos += len(groups[0])
            if rule.mutator is not None:
                rule.mutator.mutate(self)
            if rule.type is not None:
                self._iterators.append(iter(rule.type.emit(self.groups, self)))

        token = self._drain()
        if token is not None:
            return token

        if self.pos != len(self.text) and not self.stack:
            value = self.text[self.pos:]
            self.pos = len(self.text)
            return Token(TokenType.Error, value)
        return EOF

    def __iter__(self) -> LexerState:
        return self

    def __next__(self) -> Token:
        token = self.next_token()
        if token == EOF:
            raise StopIteration
        return token


class RegexLexer:
    """A lexer driven by a state machine of regular-expression rules.

    Rules are fetched and compiled lazily, on first use.
    """

    def __init__(self, config: Config, rules_func: Callable[[], Mapping[str, Any]]) -> None:
        self.config = config
        self.registry: Any = None
        self.trace = False
        self._analyser: Optional[Callable[[str], float]] = None
        self._rules_func = rules_func
        self._lock = threading.RLock()
        self._raw_rules: Optional[Mapping[str, Any]] = None
        self._compiled_rules: Optional[CompiledRules] = None
        self._compiled = False

    def __str__(self) -> str:
        return self.config.name

    def __repr__(self) -> str:
        return f"RegexLexer({self.config.name!r})"

    def with_trace(self, trace: bool) -> RegexLexer:
        """Enable or disable tracing of each step to standard error."""
        self.trace = trace
        return self

    def rules(self) -> Rules:
        """The rules of this lexer, as given."""
        self._need_rules()
        return self._raw_rules  # type: ignore[return-value]

    def set_registry(self, registry: Any) -> RegexLexer:
        """Set the registry this lexer uses to find other lexers."""
        self.registry = registry
        return self

    def set_analyser(self, analyser: Callable[[str], float]) -> RegexLexer:
        """Set the function that scores how well text suits this lexer."""
        self._analyser = analyser
        return self

    def analyse_text(self, text: str) -> float:
        """Score, between 0.0 and 1.0, how likely ``text`` suits this lexer."""
        if self._analyser is not None:
            return self._analyser(text)
        return 0.0

    def _fetch_rules(self) -> None:
        rules = self._rules_func()
        if "root" not in rules:
            raise LexerError('no "root" state')
        flags = ("" if self.config.not_multiline else "m")
        if self.config.case_insensitive:
            flags += "i"
        if self.config.dot_all:
            flags += "s"
        self._compiled_rules = {
            state: [CompiledRule.from_rule(rule, flags) for rule in state_rules]
            for state, state_rules in rules.items()
        }
        self._raw_rules = rules

    def _next_lexer_mutator(self) -> Optional[Tuple[LexerMutator, str, int]]:
        assert self._compiled_rules is not None
        for state, state_rules in self._compiled_rules.items():
            for index, rule in enumerate(state_rules):
                if isinstance(rule.mutator, LexerMutator):
                    return rule.mutator, state, index
        return None

    def _compile(self) -> None:
        rules = self._compiled_rules
        assert rules is not None
        for state, state_rules in rules.items():
            for index, rule in enumerate(state_rules):
                if rule.regexp is not None:
                    continue
                bits = functools.reduce(operator.or_, (_FLAG_BITS[f] for f in rule.flags), 0)
                try:
                    rule.regexp = regex.compile(r"\G(?:" + rule.pattern + ")", bits)
                except regex.error as err:
                    raise LexerError(f"failed to compile rule {state}.{index}: {err}") from err
        # Apply compile-time mutators one at a time, rescanning afterwards
        # because each may add or remove rules.
        while (found := self._next_lexer_mutator()) is not None:
            mutator, state, index = found
            try:
                mutator.mutate_lexer(rules, state, index)
            except ValueError as err:
                raise LexerError(str(err)) from err
        self._compiled = True

    def _need_rules(self) -> None:
        with self._lock:
            if self._compiled_rules is None:
                self._fetch_rules()
            if not self._compiled:
                self._compile()

    def tokenise(self, text: str, options: Optional[TokeniseOptions] = None) -> LexerState:
        """Start lexing ``text``; the returned state iterates over tokens."""
        self._need_rules()
        if options is None:
            options = TokeniseOptions()
        if options.ensure_lf:
            text = ensure_lf(text)
        newline_added = False
        if not options.nested and self.config.ensure_nl and not text.endswith("\n"):
            text += "\n"
            newline_added = True
        return LexerState(self, text, options, newline_added=newline_added)


def new_lexer(
    config: Optional[Config], rules_func: Callable[[], Mapping[str, Any]]
) -> RegexLexer:
    """Create a regex lexer, checking that its filename globs are valid."""
    if config is None:
        config = Config()
    for glob in [*config.filenames, *config.alias_filenames]:
        try:
            _compile_glob(glob)
        except ValueError as err:
            raise LexerError(f"{config.name}: {glob!r} is not a valid glob: {err}") from err
    return RegexLexer(config, rules_func)


def tokenise(lexer: Any, text: str, options: Optional[TokeniseOptions] = None) -> List[Token]:
    """Tokenise ``text`` with ``lexer`` and return all tokens as a list."""
    return list(lexer.tokenise(text, options))


_ = os  # separators are handled by the registry's basename logic