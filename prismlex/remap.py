"""Lexers that rewrite the tokens of another lexer."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from .tokens import Token, TokenType


class RemappingLexer:
    """Wraps a lexer, replacing each token with zero or more tokens."""

    def __init__(self, lexer: Any, mapper: Callable[[Token], Iterable[Token]]) -> None:
        self._lexer = lexer
        self._mapper = mapper

    @property
    def config(self) -> Any:
        """The configuration of the wrapped lexer."""
        return self._lexer.config

    def analyse_text(self, text: str) -> float:
        return self._lexer.analyse_text(text)

    def set_analyser(self, analyser: Callable[[str], float]) -> RemappingLexer:
        self._lexer.set_analyser(analyser)
        return self

    def set_registry(self, registry: Any) -> RemappingLexer:
        self._lexer.set_registry(registry)
        return self

    def tokenise(self, text: str, options: Optional[Any] = None) -> Iterator[Token]:
        """Tokenise with the wrapped lexer and remap each token."""
        tokens = self._lexer.tokenise(text, options)
        return self._remap(tokens)

    def _remap(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            yield from self._mapper(token)


@dataclass(frozen=True)
class TypeMap:
    """Maps tokens of ``from_type`` to ``to_type``, limited to ``words`` if given."""

    from_type: TokenType
    to_type: TokenType
    words: Tuple[str, ...] = ()


def type_remapping_lexer(lexer: Any, mapping: Iterable[TypeMap]) -> RemappingLexer:
    """Wrap ``lexer`` so token types are changed according to ``mapping``."""
    table: Dict[TokenType, Dict[str, TokenType]] = {}
    for entry in mapping:
        by_word = table.setdefault(entry.from_type, {})
        if entry.words:
            for word in entry.words:
                by_word[word] = entry.to_type
        else:
            by_word[""] = entry.to_type

    def mapper(token: Token) -> List[Token]:
        by_word = table.get(token.type)
        if by_word is not None:
            new_type = by_word.get(token.value)
            if new_type is None:
                new_type = by_word.get("")
            if new_type is not None:
                token = dataclasses.replace(token, type=new_type)
        return [token]

    return RemappingLexer(lexer, mapper)