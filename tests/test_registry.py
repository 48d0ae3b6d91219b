import pytest

from prismlex.regexlexer import Config, RegexLexer, new_lexer
from prismlex.registry import LexerRegistry
from prismlex.rules import Rule, Rules
from prismlex.tokens import TokenType as T


def _rules():
    return Rules({"root": [Rule(".", T.Text)]})


def _lexer(name, **options):
    return new_lexer(Config(name=name, **options), _rules)


@pytest.fixture
def registry():
    reg = LexerRegistry()
    reg.register(
        _lexer(
            "reStructuredText",
            aliases=["rst", "rest"],
            filenames=["*.rst", "*.rest"],
            mime_types=["text/x-rst"],
        )
    )
    reg.register(_lexer("Python", aliases=["py"], filenames=["*.py"], alias_filenames=["*.pyw"]))
    reg.register(_lexer("Makefile", filenames=["Makefile", "*.mk"]))
    return reg


def test_get_by_name_and_alias(registry):
    assert registry.get("Python").config.name == "Python"
    assert registry.get("python").config.name == "Python"
    assert registry.get("py").config.name == "Python"
    assert registry.get("RST").config.name == "reStructuredText"


def test_get_by_extension_and_filename(registry):
    assert registry.get("mk").config.name == "Makefile"
    assert registry.get("Makefile").config.name == "Makefile"
    assert registry.get("nothing-like-this") is None


def test_match_with_directories_and_backup_suffixes(registry):
    assert registry.match("docs/guide/notes.rst").config.name == "reStructuredText"
    assert registry.match("notes.rst.bak").config.name == "reStructuredText"
    assert registry.match("notes.rst~").config.name == "reStructuredText"
    assert registry.match("config.mk.in").config.name == "Makefile"
    assert registry.match("notes.txt") is None


def test_alias_filenames_used_as_fallback(registry):
    assert registry.match("tool.pyw").config.name == "Python"
    other = registry.register(_lexer("Windowed", filenames=["*.pyw"]))
    assert registry.match("tool.pyw") is other


def test_priority_orders_matches():
    reg = LexerRegistry()
    low = reg.register(_lexer("Low", filenames=["*.ts"], priority=0.1))
    default = reg.register(_lexer("Default", filenames=["*.ts"]))
    assert reg.match("main.ts") is default
    high = reg.register(_lexer("High", filenames=["*.ts"], priority=2))
    assert reg.match("main.ts") is high
    assert low in reg.lexers


def test_match_mime_type(registry):
    assert registry.match_mime_type("text/x-rst").config.name == "reStructuredText"
    assert registry.match_mime_type("text/unknown") is None


def test_analyse_picks_highest(registry):
    assert registry.analyse("anything") is None
    registry.get("py").set_analyser(lambda text: 0.5 if "def " in text else 0.0)
    registry.get("rst").set_analyser(lambda text: 0.9 if ".. " in text else 0.0)
    assert registry.analyse("def main(): pass").config.name == "Python"
    assert registry.analyse(".. note:: def x").config.name == "reStructuredText"


def test_register_replaces_same_name(registry):
    count = len(registry.lexers)
    replacement = registry.register(_lexer("Python", aliases=["py"], filenames=["*.py"]))
    assert len(registry.lexers) == count
    assert registry.get("Python") is replacement
    assert replacement.registry is registry


def test_names_sorted(registry):
    assert registry.names() == sorted(["reStructuredText", "Python", "Makefile"])
    with_aliases = registry.names(with_aliases=True)
    assert with_aliases == sorted(with_aliases)
    assert {"rst", "rest", "py"} <= set(with_aliases)


def test_malformed_glob_raises_on_match():
    reg = LexerRegistry()
    reg.register(RegexLexer(Config(name="Broken", filenames=["[abc"]), _rules))
    with pytest.raises(ValueError):
        reg.match("abc")


def test_character_class_globs():
    reg = LexerRegistry()
    lexer = reg.register(_lexer("Classy", filenames=["*.[ch]"]))
    assert reg.match("main.c") is lexer
    assert reg.match("main.h") is lexer
    assert reg.match("main.o") is None