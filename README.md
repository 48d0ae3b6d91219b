# prismlex

prismlex splits source text into typed tokens. It does this with lexers
built from regular-expression state machines. The tokens can then go to a
highlighter, a formatter or any other tool that needs to know what each
piece of text is.

## Installation

```
pip install prismlex
```

The only runtime dependency is the `regex` library. Lexer rules rely on
features it provides, such as look-behind, `\G` anchoring, named groups and
match timeouts.

## Modules

- `prismlex.tokens`
  - `TokenType` is an `IntEnum` of token kinds: keywords, names, literals,
    strings, numbers, operators, punctuation, comments, generic and text
    types, and meta types such as `Background`, `Error`, `Other` and
    `Ignore`.
  - Categories are ranges of 1000 and sub-categories are ranges of 100.
    `parent()`, `category()`, `sub_category()`, `in_category(other)` and
    `in_sub_category(other)` work with that hierarchy.
  - Short aliases exist, such as `TokenType.String` for
    `TokenType.LiteralString` and `TokenType.Whitespace` for
    `TokenType.TextWhitespace`.
  - The "no highlighting" type is `TokenType.None_`. Its `label` is `"None"`.
  - `Token(type, value)` is a frozen dataclass. `EOF` marks the end of
    input. `stringify(*tokens)` joins the text of the given tokens.
  - A `TokenType` is also an emitter. Its `emit(groups, state)` yields a
    single token holding the whole match.
- `prismlex.standard`
  - `STANDARD_TYPES` is a read-only mapping from token types to the short
    CSS class names that highlighters conventionally use.
  - `css_class(token_type)` looks a type up in that mapping. It returns `""`
    for types that have no class.
- `prismlex.rules`
  - `Rule(pattern, type, mutator)` is a single rule.
  - `Rules` is a `dict` that maps state names to lists of rules. Its
    `clone()`, `merge(other)` and `rename(old, new)` methods return new
    `Rules`.
  - `CompiledRule` is a rule together with its compiled pattern.
  - `words(prefix, suffix, *words)` builds a pattern that matches any of
    the literal words. The words are escaped, and longer words are tried
    first.
- `prismlex.mutators`: these change the state stack when a rule matches.
  - `push(*states)` pushes the given states. With no states it pushes the
    current state again. The pseudo-state `#pop` pops instead of pushing.
  - `pop(n)` pops `n` states.
  - `include(state)` returns a rule. When the rules are compiled, that rule
    is replaced by the rules of `state`.
  - `combined(*states)` builds an anonymous state from several states and
    pushes it.
  - `default(*mutators)` returns a rule that only applies mutators.
  - `mutators(*mutators)` applies several mutators in order.
  - The base classes are `Mutator` and `LexerMutator`.
- `prismlex.regexlexer`
  - `Config` holds a lexer's name, aliases, filename and alias-filename
    globs, MIME types, priority, and the flags `case_insensitive`,
    `dot_all`, `not_multiline` and `ensure_nl`.
  - `new_lexer(config, rules_func)` checks the filename globs and returns a
    `RegexLexer`. Rules are fetched and compiled the first time the lexer
    is used.
  - `RegexLexer.tokenise(text, options)` returns a `LexerState`. Iterating
    it yields tokens, and `next_token()` returns `EOF` at the end.
  - `tokenise(lexer, text, options)` returns all tokens as a list.
  - `ensure_lf(text)` normalises `\r\n` and lone `\r` to `\n`.
  - `LexerError` is raised for a missing `root` state, a pattern that does
    not compile, an unknown include or combine state, an unknown state
    during lexing, or an invalid glob.
- `prismlex.registry`: `LexerRegistry` holds lexers.
  - `register(lexer)` adds a lexer. A lexer with the same name replaces the
    one already registered.
  - `get(name)` looks a lexer up by name or alias, first exactly and then
    in lower case. If that finds nothing, it tries `name` as a file
    extension and then as a filename.
  - `match(filename)` checks primary globs first and then alias globs. It
    also accepts backup and template suffixes such as `~`, `.bak`, `.orig`,
    `.rpmnew` and `.in`.
  - `match_mime_type(mime_type)` finds a lexer by MIME type.
  - `analyse(text)` returns the lexer whose analyser scores the text
    highest.
  - `names(with_aliases)` returns the sorted lexer names.
  - Where several lexers match, the one with the highest `priority` wins.
    An unset priority counts as 1.
- `prismlex.remap`
  - `RemappingLexer(lexer, mapper)` wraps a lexer and replaces each token
    with whatever the mapper returns.
  - `type_remapping_lexer(lexer, mapping)` takes a list of
    `TypeMap(from_type, to_type, words)` entries. It changes token types,
    either for the listed words only or, when `words` is empty, for every
    token of `from_type`.

## Example

```python
from prismlex.mutators import pop, push
from prismlex.regexlexer import Config, new_lexer, tokenise
from prismlex.rules import Rule, Rules
from prismlex.tokens import TokenType

def rules():
    return Rules({
        "root": [
            Rule(r"\s+", TokenType.TextWhitespace),
            Rule(r'"', TokenType.LiteralString, push("string")),
            Rule(r"\w+", TokenType.Name),
        ],
        "string": [
            Rule(r'[^"]+', TokenType.LiteralString),
            Rule(r'"', TokenType.LiteralString, pop(1)),
        ],
    })

lexer = new_lexer(Config(name="Tiny", aliases=["tiny"], filenames=["*.tiny"]), rules)

for token in tokenise(lexer, 'say "hello"'):
    print(token.type, repr(token.value))
```

## Behaviour worth knowing

- Rule patterns are anchored at the current position. Unless the lexer's
  `Config` sets `not_multiline`, they are compiled with the multiline flag.
- Any single match that takes longer than 0.25 seconds is abandoned, and
  lexing moves on to the next rule.
- Input that no rule matches comes out as `Error` tokens, one character at
  a time.
- If an unmatched newline appears in any state other than the starting
  state, the state stack is reset to the starting state.
- If the stack empties before the text ends, the rest of the text comes out
  as a single `Error` token.
- Tokens of type `Ignore` are never yielded.
- `TokeniseOptions(state, nested, ensure_lf)` sets three things:
  - `state` is the starting state. The default is `"root"`.
  - `ensure_lf` controls whether line endings are normalised. It is on by
    default.
  - `nested` marks the text as a nested fragment. A lexer with `ensure_nl`
    appends a trailing newline before lexing, but not to nested fragments.
- `RegexLexer.with_trace(True)` writes each step to standard error.

## What it does not include

prismlex is the lexing core only:

- It ships no ready-made lexers for any programming language.
- It has no formatters and no colour styles.
- It has no command-line program.
- There is no helper that converts between token type names and values.
  Use the enum directly instead, for example `TokenType["NameVariable"]`.

## Running the tests

```
pip install -e ".[test]"
pytest
```