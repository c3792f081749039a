"""Tokenizer and parser for the surface syntax of λ-terms.

```
<λ-term>      ::= <abstraction> | <application>
<abstraction> ::= <lambda> <name>+ <arrow> <λ-term>   ; "λ x y -> M" is sugar for "λx.λy.M"
                                                      ; - abstraction bodies are greedy: λx.x y = λx.(x y)
<application> ::= <atom>+ [<abstraction>]             ; associating by left: a b c = ((a b) c)
                                                      ; - a trailing abstraction needs no parentheses: f λx.x
<atom>        ::= <name> | "(" <λ-term> ")"

<lambda>      ::= "λ" | "\\"
<arrow>       ::= "->" | "."
<name>        ::= one or more of 0-9 a-z A-Z - + * / _ ~ ! @ # $ % ^ & '
                  ; a "-" directly followed by ">" is an arrow, never part of a name
```

Whitespace separates tokens and is otherwise ignored. The canonical string form of a term (see term.py) is always
accepted by this grammar, so printed results can be parsed again.
"""

import re
from dataclasses import dataclass

from lambdacalc.lang.error import LexError, ParseError
from lambdacalc.pure.term import Abstraction, Application, Variable


LAMBDA = "lambda"
ARROW = "arrow"
OPEN_PAREN = "open_paren"
CLOSE_PAREN = "close_paren"
NAME = "name"

TOKENS = [
    (LAMBDA, re.compile(r"λ|\\")),
    (ARROW, re.compile(r"->|\.")),
    (OPEN_PAREN, re.compile(r"\(")),
    (CLOSE_PAREN, re.compile(r"\)")),
    (NAME, re.compile(r"(?:[0-9a-zA-Z+*/_~!@#$%^&']|-(?!>))+")),
]
WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class Token:
    kind: str
    value: str
    start: int

    @property
    def end(self):
        return self.start + len(self.value)


def tokenize(expr):
    """Splits expr into Tokens. Raises LexError at the first character that cannot start a token."""
    tokens = []
    pos = 0
    while pos < len(expr):
        whitespace = WHITESPACE.match(expr, pos)
        if whitespace:
            pos = whitespace.end()
            continue

        for kind, pattern in TOKENS:
            match = pattern.match(expr, pos)
            if match:
                tokens.append(Token(kind, match.group(), pos))
                pos = match.end()
                break
        else:
            raise LexError("'{}' contains illegal character '{}'", (expr, expr[pos]), start=pos, end=pos + 1)
    return tokens


class Parser:
    """Recursive-descent parser over the tokens of a single expression."""

    def __init__(self, expr):
        self.expr = expr
        self.tokens = tokenize(expr)
        self.pos = 0

    def parse(self):
        """Returns the LambdaTerm for self.expr. Raises ParseError if self.expr is not valid λ-term grammar."""
        if not self.tokens:
            raise ParseError("λ-term cannot be empty", self.expr)

        term = self._term()
        if self._peek() is not None:
            token = self._peek()
            if token.kind == CLOSE_PAREN:
                self._fail("'{}' has mismatched parentheses", token)
            self._fail("'{}' has unexpected '{}'", token)
        return term

    def _peek(self):
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _next(self):
        token = self._peek()
        self.pos += 1
        return token

    def _fail(self, msg, token=None):
        """Raises ParseError pointing at token (or at the end of self.expr if token is None)."""
        if token is None:
            start = len(self.expr.rstrip())
            raise ParseError(msg, (self.expr, "end of input"), start=max(start - 1, 0), end=max(start, 1))
        raise ParseError(msg, (self.expr, token.value), start=token.start, end=token.end)

    def _term(self):
        token = self._peek()
        if token is not None and token.kind == LAMBDA:
            return self._abstraction()
        return self._application()

    def _abstraction(self):
        self._next()  # lambda

        params = []
        while self._peek() is not None and self._peek().kind == NAME:
            params.append(self._next().value)
        if not params:
            self._fail("'{}' has an abstraction without a bound variable at '{}'", self._peek())

        arrow = self._peek()
        if arrow is None or arrow.kind != ARROW:
            self._fail("'{}' expects '->' or '.' after bound variables, got '{}'", arrow)
        self._next()

        if self._peek() is None or self._peek().kind == CLOSE_PAREN:
            self._fail("'{}' contains an illegal abstraction body at '{}'", self._peek())

        body = self._term()
        for param in reversed(params):  # innermost parameter binds closest to body
            body = Abstraction(Variable(param), body)
        return body

    def _application(self):
        term = self._atom()
        while self._peek() is not None and self._peek().kind in (NAME, OPEN_PAREN, LAMBDA):
            if self._peek().kind == LAMBDA:
                return Application(term, self._abstraction())
            term = Application(term, self._atom())
        return term

    def _atom(self):
        token = self._next()
        if token is None:
            self._fail("'{}' ends unexpectedly at '{}'")
        elif token.kind == NAME:
            return Variable(token.value)
        elif token.kind == OPEN_PAREN:
            if self._peek() is not None and self._peek().kind == CLOSE_PAREN:
                self._fail("'{}' has empty parentheses at '{}'", self._peek())
            term = self._term()
            close = self._next()
            if close is None or close.kind != CLOSE_PAREN:
                self._fail("'{}' has mismatched parentheses", token)
            return term
        elif token.kind == CLOSE_PAREN:
            self._fail("'{}' has mismatched parentheses", token)
        self._fail("'{}' has stray '{}'", token)


def parse(expr):
    """Converts expr to a LambdaTerm, raising LexError/ParseError if expr is not a valid λ-term."""
    return Parser(expr).parse()
