"""Regex state-machine lexers, lexer registries and token remapping for typed tokens."""

__version__ = "0.1.0"