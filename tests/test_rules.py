import re

from prismlex.rules import CompiledRule, Rule, Rules, words
from prismlex.tokens import TokenType


def test_words_longest_first_and_escaped():
    pattern = words(r"\b", r"\b", "if", "else", "a.b")
    assert pattern == r"\b(else|a\.b|if)\b"


def test_words_matches_literals_only():
    pattern = words("", "", "a.b", "x+y")
    assert re.fullmatch(pattern, "a.b")
    assert re.fullmatch(pattern, "x+y")
    assert re.fullmatch(pattern, "axb") is None
    assert re.fullmatch(pattern, "xxy") is None


def test_words_prefers_longer_word():
    pattern = words("", "", "for", "foreach")
    assert re.match(pattern, "foreach").group(1) == "foreach"


def test_rule_defaults_and_equality():
    rule = Rule(r"\d+", TokenType.Text)
    assert rule.mutator is None
    assert rule == Rule(r"\d+", TokenType.Text, None)
    assert rule != Rule(r"\d+", TokenType.String)


def _sample():
    return Rules(
        {
            "root": [Rule("a", TokenType.Name), Rule("b", TokenType.String)],
            "other": [Rule("c", TokenType.Comment)],
        }
    )


def test_clone_is_independent():
    original = _sample()
    copy = original.clone()
    assert copy == original
    assert isinstance(copy, Rules)
    copy["root"].append(Rule("z", TokenType.Text))
    assert len(original["root"]) == 2
    assert len(copy["root"]) == 3


def test_rename_moves_state_without_touching_original():
    original = _sample()
    renamed = original.rename("other", "comments")
    assert "other" not in renamed
    assert renamed["comments"] == original["other"]
    assert "other" in original
    assert "comments" not in original


def test_merge_overrides_and_keeps():
    base = _sample()
    extra = Rules({"other": [Rule("d", TokenType.Keyword)], "new": [Rule("e", TokenType.Text)]})
    merged = base.merge(extra)
    assert merged["root"] == base["root"]
    assert merged["other"] == [Rule("d", TokenType.Keyword)]
    assert merged["new"] == [Rule("e", TokenType.Text)]
    assert base["other"] == [Rule("c", TokenType.Comment)]


def test_compiled_rule_from_rule_round_trip():
    rule = Rule("x+", TokenType.Operator)
    compiled = CompiledRule.from_rule(rule, flags="mi")
    assert compiled.flags == "mi"
    assert compiled.regexp is None
    assert compiled.rule == rule