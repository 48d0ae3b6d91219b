from types import SimpleNamespace

import pytest

from prismlex.mutators import (
    CombinedMutator,
    IncludeMutator,
    MultiMutator,
    PopMutator,
    PushMutator,
    combined,
    default,
    include,
    mutators,
    pop,
    push,
)
from prismlex.rules import CompiledRule, Rule
from prismlex.tokens import TokenType


def _state(stack, current="root"):
    return SimpleNamespace(stack=list(stack), state=current)


def test_include():
    inc = include("other")
    actual = {
        "root": [CompiledRule.from_rule(inc)],
        "other": [
            CompiledRule(pattern="//.+", type=TokenType.Comment),
            CompiledRule(pattern='"[^"]*"', type=TokenType.String),
        ],
    }
    inc.mutator.mutate_lexer(actual, "root", 0)
    expected = {
        "root": [
            CompiledRule(pattern="//.+", type=TokenType.Comment),
            CompiledRule(pattern='"[^"]*"', type=TokenType.String),
        ],
        "other": [
            CompiledRule(pattern="//.+", type=TokenType.Comment),
            CompiledRule(pattern='"[^"]*"', type=TokenType.String),
        ],
    }
    assert actual == expected


def test_include_keeps_surrounding_rules():
    rules = {
        "root": [
            CompiledRule(pattern="a", type=TokenType.Name),
            CompiledRule.from_rule(include("other")),
            CompiledRule(pattern="b", type=TokenType.Name),
        ],
        "other": [CompiledRule(pattern="c", type=TokenType.Text)],
    }
    include("other").mutator.mutate_lexer(rules, "root", 1)
    assert [r.pattern for r in rules["root"]] == ["a", "c", "b"]


def test_include_unknown_state():
    rules = {"root": [CompiledRule.from_rule(include("missing"))]}
    with pytest.raises(ValueError):
        include("missing").mutator.mutate_lexer(rules, "root", 0)


def test_include_mutate_is_an_error():
    with pytest.raises(RuntimeError):
        IncludeMutator("x").mutate(_state(["root"]))


def test_combine_builds_anonymous_state():
    mut = combined("world", "bye", "space")
    rules = {
        "root": [CompiledRule(pattern="hello", type=TokenType.String, mutator=mut)],
        "world": [CompiledRule(pattern="world", type=TokenType.Name)],
        "bye": [CompiledRule(pattern="bye", type=TokenType.Name)],
        "space": [CompiledRule(pattern=r"\s+", type=TokenType.Whitespace)],
    }
    mut.mutate_lexer(rules, "root", 0)
    name = "__combined_world__bye__space"
    assert [r.pattern for r in rules[name]] == ["world", "bye", r"\s+"]
    assert rules["root"][0].mutator == push(name)
    assert rules["root"][0].type == TokenType.String


def test_combine_unknown_state():
    mut = combined("world", "nowhere")
    rules = {
        "root": [CompiledRule(pattern="x", mutator=mut)],
        "world": [CompiledRule(pattern="world")],
    }
    with pytest.raises(ValueError):
        mut.mutate_lexer(rules, "root", 0)


def test_combined_mutate_is_an_error():
    with pytest.raises(RuntimeError):
        CombinedMutator(("a",)).mutate(_state(["root"]))


def test_push_states():
    state = _state(["root"])
    push("a", "b").mutate(state)
    assert state.stack == ["root", "a", "b"]


def test_push_without_states_repeats_current():
    state = _state(["root", "inner"], current="inner")
    push().mutate(state)
    assert state.stack == ["root", "inner", "inner"]


def test_push_pop_pseudo_state():
    state = _state(["root", "a"])
    push("#pop", "b").mutate(state)
    assert state.stack == ["root", "b"]


def test_pop_depth():
    state = _state(["root", "a", "b"])
    pop(2).mutate(state)
    assert state.stack == ["root"]


def test_pop_empty_stack():
    with pytest.raises(IndexError):
        pop(1).mutate(_state([]))


def test_multi_mutator_applies_in_order():
    state = _state(["root"])
    mutators(push("a"), push("b"), pop(1)).mutate(state)
    assert state.stack == ["root", "a"]


def test_default_rule():
    rule = default(push("x"), pop(1))
    assert rule == Rule(mutator=MultiMutator((PushMutator(("x",)), PopMutator(1))))
    assert rule.pattern == ""
    assert rule.type is None


def test_mutator_kinds():
    assert include("s").mutator.kind == "include"
    assert combined("a").kind == "combined"
    assert push().kind == "push"
    assert pop(1).kind == "pop"
    assert mutators().kind == "mutators"


def test_mutator_equality_round_trip():
    assert include("string").mutator == IncludeMutator("string")
    assert combined("a", "b", "c") == CombinedMutator(("a", "b", "c"))
    assert push("include") == PushMutator(("include",))
    assert pop(1) == PopMutator(1)