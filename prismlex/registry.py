"""A registry of lexers, searchable by name, alias, filename and MIME type."""

from __future__ import annotations

import os
from typing import Any, Dict, Iterable, List, Optional

from .regexlexer import _glob_match

_IGNORED_SUFFIXES = (
    # Editor backups
    "~", ".bak", ".old", ".orig",
    # Debian and derivatives apt/dpkg/ucf backups
    ".dpkg-dist", ".dpkg-old", ".ucf-dist", ".ucf-new", ".ucf-old",
    # Red Hat and derivatives rpm backups
    ".rpmnew", ".rpmorig", ".rpmsave",
    # Build system input/template files
    ".in",
)


def _prioritised(lexers: Iterable[Any]) -> List[Any]:
    """Order lexers by priority, highest first; an unset priority counts as 1."""
    return sorted(lexers, key=lambda lexer: -(lexer.config.priority or 1))


def _base_name(path: str) -> str:
    if not path:
        return "."
    stripped = path.rstrip("/" + os.sep)
    if not stripped:
        return os.sep
    return os.path.basename(stripped)


def _glob_hits(glob: str, filename: str) -> bool:
    return _glob_match(glob, filename) or any(
        _glob_match(glob + suffix, filename) for suffix in _IGNORED_SUFFIXES
    )


class LexerRegistry:
    """A collection of lexers with lookup by name, alias, filename and content."""

    def __init__(self) -> None:
        self.lexers: List[Any] = []
        self._by_name: Dict[str, Any] = {}
        self._by_alias: Dict[str, Any] = {}

    def names(self, with_aliases: bool = False) -> List[str]:
        """Sorted names of all lexers, optionally with their aliases."""
        out: List[str] = []
        for lexer in self.lexers:
            out.append(lexer.config.name)
            if with_aliases:
                out.extend(lexer.config.aliases)
        return sorted(out)

    def get(self, name: str) -> Optional[Any]:
        """Find a lexer by name, alias or file extension, or None."""
        lower = name.lower()
        for table, key in (
            (self._by_name, name),
            (self._by_alias, name),
            (self._by_name, lower),
            (self._by_alias, lower),
        ):
            found = table.get(key)
            if found is not None:
                return found
        candidates = [
            lexer
            for lexer in (self.match("filename." + name), self.match(name))
            if lexer is not None
        ]
        if not candidates:
            return None
        return _prioritised(candidates)[0]

    def match_mime_type(self, mime_type: str) -> Optional[Any]:
        """Find the best lexer declaring ``mime_type``, or None."""
        matched = [lexer for lexer in self.lexers if mime_type in lexer.config.mime_types]
        return _prioritised(matched)[0] if matched else None

    def match(self, filename: str) -> Optional[Any]:
        """Find the best lexer whose filename patterns match ``filename``.

        Primary patterns are tried first, then alias patterns. Common backup
        and template suffixes on the filename are tolerated. A malformed
        pattern raises ValueError.
        """
        filename = _base_name(filename)
        for patterns in ("filenames", "alias_filenames"):
            matched = [
                lexer
                for lexer in self.lexers
                for glob in getattr(lexer.config, patterns)
                if _glob_hits(glob, filename)
            ]
            if matched:
                return _prioritised(matched)[0]
        return None

    def analyse(self, text: str) -> Optional[Any]:
        """Return the lexer that scores ``text`` highest, or None if none scores above zero."""
        picked = None
        highest = 0.0
        for lexer in self.lexers:
            analyse_text = getattr(lexer, "analyse_text", None)
            if analyse_text is None:
                continue
            weight = analyse_text(text)
            if weight > highest:
                picked = lexer
                highest = weight
        return picked

    def register(self, lexer: Any) -> Any:
        """Add a lexer, replacing any already registered under the same name."""
        lexer.set_registry(self)
        config = lexer.config
        self._by_name[config.name] = lexer
        self._by_name[config.name.lower()] = lexer
        for alias in config.aliases:
            self._by_alias[alias] = lexer
            self._by_alias[alias.lower()] = lexer
        for index, existing in enumerate(self.lexers):
            if existing is not None and existing.config.name == config.name:
                self.lexers[index] = lexer
                break
        else:
            self.lexers.append(lexer)
        return lexer