"""Lexical analysis for the dcalc language: converts a source line into a lazy stream of pseudo-tokens (PTokens), each
of which remembers the span of the line it was read from.

Tokens are classified by longest match, ties broken in this order:

```
<identifier> ::= [A-Za-z_][A-Za-z_-]*    ; "make-dice", "x", "hist"
<dice>       ::= [0-9]*d[0-9]+           ; "2d6", "d20" (count defaults to 1)
<numeral>    ::= [0-9]+                  ; must fit the integer key type
<reserved>   ::= ">>" | <non-word char>  ; operators and brackets
```

Dice literals are expanded on the spot into `make-dice <count> <size>` applications, so the parser never sees them as
raw text. The lone identifier `d` is not a variable but the (reserved) dice operator: `3 d x`, `d 8`.
"""

import re
from dataclasses import dataclass

from dcalc.lang.error import GenericException
from dcalc.lang.symbols import Apply, Num, Text
from dcalc.pure.distr import KEY_MAX, KEY_MIN


RESERVED = [">>", "(", ")", "[", "]", "+", "-", "*", "/", ",", ";", "=", ":", "d"]

IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z_-]*")
DICE = re.compile(r"([0-9]*)d([0-9]+)")
NUMERAL = re.compile(r"[0-9]+")
SYMBOL = re.compile(r">>|[^\sA-Za-z0-9_]")
WHITESPACE = re.compile(r"\s*")

PATTERNS = [("identifier", IDENTIFIER), ("dice", DICE), ("numeral", NUMERAL), ("reserved", SYMBOL)]


@dataclass
class PToken:
    """Pseudo-token: either a reserved operator/punctuation or an already-resolved expression (Symbol)."""
    span: tuple
    reserved: str = None
    expr: object = None

    @classmethod
    def from_symbol(cls, symbol, span):
        return cls(span, expr=symbol)

    def is_reserved(self, *ops):
        """Whether this is one of the reserved operators ops (or any reserved operator if ops is empty)."""
        if self.reserved is None:
            return False
        return not ops or self.reserved in ops

    def try_to_expr(self):
        """Returns the expression held by this PToken, or None if it is reserved."""
        return self.expr

    def __repr__(self):
        if self.reserved is not None:
            return f"PToken({self.reserved!r}, {self.span})"
        return f"PToken({self.expr!r}, {self.span})"


def get_span(ptokens):
    """Span from the first PToken to the last, or None if there aren't any."""
    if not ptokens:
        return None
    return ptokens[0].span[0], ptokens[-1].span[1]


def parse_numeral(text, span):
    """Converts text to an integer of the key type, raising a lexical error if it doesn't fit."""
    num = int(text)
    if not KEY_MIN <= num <= KEY_MAX:
        raise GenericException("numeral '{}' cannot be parsed as an integer (out of range)", text, span=span)
    return num


def classify(line, pos):
    """Returns (kind, match) of the longest token starting at pos. Earlier patterns win ties."""
    best_kind, best_match = None, None
    for kind, pattern in PATTERNS:
        match = pattern.match(line, pos)
        if match and (best_match is None or match.end() > best_match.end()):
            best_kind, best_match = kind, match
    return best_kind, best_match


def tokenize(line):
    """Lazily yields the PTokens of line. Raises GenericException on the first lexical error."""
    pos = WHITESPACE.match(line, 0).end()

    while pos < len(line):
        kind, match = classify(line, pos)
        span = (match.start(), match.end())
        text = match.group()

        if kind == "identifier" and text not in RESERVED:
            yield PToken.from_symbol(Text(text, span=span), span)

        elif kind == "identifier" or kind == "reserved":
            if text not in RESERVED:
                raise GenericException("unrecognized character '{}'", text, span=span)
            yield PToken(span, reserved=text)

        elif kind == "dice":
            count_text, size_text = match.groups()
            count = parse_numeral(count_text, span) if count_text else 1
            size = parse_numeral(size_text, span)

            args = [Num(count, span=span), Num(size, span=span)]
            yield PToken.from_symbol(Apply(Text("make-dice", span=span), args, span=span), span)

        else:
            yield PToken.from_symbol(Num(parse_numeral(text, span), span=span), span)

        pos = WHITESPACE.match(line, match.end()).end()
