"""Parser for the dcalc language. Parsing happens in two phases:

1. Bracket resolution (build_pseudo_tokens): the token stream is consumed recursively, and every `( ... )` or `[ ... ]`
   group is parsed on its own and spliced back in as a single, already-resolved expression PToken. What is left at
   each nesting level is a flat list of PTokens with no brackets in it.
2. Precedence scanning (parse_expr): a flat list is split at its loosest operator, and both sides are parsed
   recursively. From loosest to tightest:

```
<line>       ::= <pattern> "=" <expr> | <expr>
<pattern>    ::= <identifier> | <identifier> ":" <type>
<expr>       ::= <expr> ">>" <expr>          ; x >> f == f x, split at the leftmost >> (right-associative)
               | <expr> ("+" | "-") <expr>   ; split at the rightmost operator (left-associative)
               | <expr> ("*" | "/") <expr>   ; same
               | [<expr>] "d" <expr>         ; a d b == make-dice a b, d b == make-die b
               | <expr> <expr>*              ; application: f x y == (f x) y
```

An operator missing an operand is a section: `(3 -)` awaits the right operand, `(- 1)` and `(/ 6)` await the left one,
and a lone operator such as `(+)` is the builtin function itself.

There is no backtracking: once a tier has been chosen, its errors are final.
"""

from dcalc.lang.error import GenericException, enrich
from dcalc.lang.lexical import PToken, get_span, tokenize
from dcalc.lang.symbols import Apply, Assigner, Fn, Nil, Num, Seq, Text, flip, render, with_span
from dcalc.pure.types import parse_type


OPERATORS = {"+": "add", "-": "sub", "*": "mul", "/": "div"}
SWAPPED_SECTIONS = ["-", "/"]  # right-only sections of these must swap operand order

MAKE_DICE = "make-dice"
MAKE_DIE = "make-die"


def parse_line(line, env):
    """Parses line into a Symbol: an Assigner if line is an assignment, an expression otherwise."""
    ptokens, __ = build_pseudo_tokens(tokenize(line), env)

    assignment = parse_assignment(ptokens, env)
    if assignment is not None:
        return assignment
    return parse_expr(ptokens, env)


def build_pseudo_tokens(tokens, env, start_paren=None, start_brack=None):
    """Builds up the list of PTokens from the token iterator, parsing everything inside parentheses and brackets.

    start_paren/start_brack is the position of the opener if this call is collecting a group. Returns the PTokens and
    the span of the closing bracket (None at the top level).
    """
    ptokens = []

    for ptoken in tokens:
        if ptoken.is_reserved("("):
            # forget about any enclosing square bracket: in `[ ( ] )`, the `]` is unmatched
            inner, close = build_pseudo_tokens(tokens, env, start_paren=ptoken.span[0])
            symbol = parse_expr(inner, env) if inner else Nil()
            span = (ptoken.span[0], close[1])
            ptokens.append(PToken.from_symbol(with_span(symbol, span), span))

        elif ptoken.is_reserved(")"):
            if start_paren is None:
                raise GenericException("unmatched close parenthesis", span=ptoken.span)
            return ptokens, ptoken.span

        elif ptoken.is_reserved("["):
            inner, close = build_pseudo_tokens(tokens, env, start_brack=ptoken.span[0])
            span = (ptoken.span[0], close[1])
            ptokens.append(PToken.from_symbol(with_span(parse_seq(inner, env), span), span))

        elif ptoken.is_reserved("]"):
            if start_brack is None:
                raise GenericException("unmatched close square bracket", span=ptoken.span)
            return ptokens, ptoken.span

        else:
            ptokens.append(ptoken)

    if start_paren is not None:
        raise GenericException("unclosed parenthesis", span=(start_paren, start_paren + 1))
    elif start_brack is not None:
        raise GenericException("unclosed square brackets", span=(start_brack, start_brack + 1))
    return ptokens, None


def parse_delimited_list(ptokens, delimiter, can_trail):
    """Splits ptokens at every reserved delimiter. A trailing delimiter is dropped if can_trail, else an error."""
    if not ptokens:
        return []

    segments = [[]]
    for ptoken in ptokens:
        if ptoken.is_reserved(delimiter):
            segments.append([])
        else:
            segments[-1].append(ptoken)

    if not segments[-1]:
        if not can_trail:
            raise GenericException("trailing '{}' is not allowed", delimiter, span=ptokens[-1].span)
        segments.pop()
    return segments


def parse_assignment(ptokens, env):
    """Returns an Assigner if ptokens is an assignment statement, None if it isn't one at all."""
    segments = parse_delimited_list(ptokens, "=", False)

    if len(segments) < 2:
        return None
    elif len(segments) > 2:
        raise GenericException("can't nest assignments: '=' is not an operator", span=get_span(ptokens))

    lhs, rhs = segments
    try:
        name, def_type = parse_pattern(lhs)
    except GenericException as err:
        raise enrich(err, "invalid left hand side of assignment statement", span=get_span(lhs)) from err
    try:
        expr = parse_expr(rhs, env)
    except GenericException as err:
        raise enrich(err, "invalid right hand side of assignment statement", span=get_span(rhs)) from err

    return Assigner(name, def_type, expr, span=get_span(ptokens))


def parse_pattern(ptokens):
    """Parses the left hand side of an assignment: `name` or `name: Type`. Returns (name, type or None)."""
    if not ptokens:
        raise GenericException("unexpected EOF while parsing pattern")

    name = ptokens[0].try_to_expr()
    if not isinstance(name, Text):
        raise GenericException("not a valid pattern: expected a name", span=ptokens[0].span)

    if len(ptokens) == 1:
        return name.name, None
    elif len(ptokens) == 3 and ptokens[1].is_reserved(":") and isinstance(ptokens[2].try_to_expr(), Text):
        return name.name, parse_type(ptokens[2].expr.name, span=ptokens[2].span)
    raise GenericException("not a valid pattern (too many tokens)", span=get_span(ptokens))


def parse_seq(ptokens, env):
    """Parses a sequence literal from the inside of square brackets: `[]`, `[1, 2, 3]` or `[d6; 4]`."""
    if not ptokens:
        return Seq([])

    try:
        segments = parse_delimited_list(ptokens, ";", False)
    except GenericException as err:
        raise enrich(err, "could not parse repetition literal") from err

    if len(segments) == 2:
        elem, count = segments
        return Seq([parse_expr(elem, env)] * parse_repetitions(count))
    elif len(segments) > 2:
        raise GenericException("unexpected sequence syntax: too many semicolons", span=get_span(ptokens))

    try:
        segments = parse_delimited_list(ptokens, ",", True)
    except GenericException as err:
        raise enrich(err, "could not parse as comma separated sequence") from err
    return Seq([parse_expr(segment, env) for segment in segments])


def parse_repetitions(ptokens):
    """The count of a `[elem; count]` literal must be a plain numeral."""
    count = ptokens[0].try_to_expr() if len(ptokens) == 1 else None
    if not isinstance(count, Num) or count.value < 0:
        raise GenericException("repetition count must be a non-negative number literal", span=get_span(ptokens))
    return count.value


def parse_expr(ptokens, env):
    """Parses a flat (bracket-free) list of PTokens into an expression Symbol."""
    if not ptokens:
        raise GenericException("unexpected EOF while parsing expression")

    if len(ptokens) == 1 and ptokens[0].try_to_expr() is not None:
        return ptokens[0].expr

    span = get_span(ptokens)

    # operator >> (weak function application): right associative and weakest
    for idx, ptoken in enumerate(ptokens):
        if ptoken.is_reserved(">>"):
            arg = _parse_operand(ptokens[:idx], env, ptoken, "left")
            target = _parse_operand(ptokens[idx + 1:], env, ptoken, "right")
            return Apply(target, [arg], span=span)

    # operators + - and then * /: left associative, so split at the rightmost one
    for ops in (("+", "-"), ("*", "/")):
        idx = _rposition(ptokens, *ops)
        if idx is not None:
            return _parse_binary(ptokens, idx, env)

    # operator d: dice
    idx = _rposition(ptokens, "d")
    if idx is not None:
        left, right = ptokens[:idx], ptokens[idx + 1:]
        op = ptokens[idx]
        args = []
        if left:
            args.append(_parse_operand(left, env, op, "left"))
        if right:
            args.append(_parse_operand(right, env, op, "right"))

        if not left and right:
            return Apply(Text(MAKE_DIE, span=op.span), args, span=span)
        elif not args:
            return Text(MAKE_DICE, span=op.span)
        return Apply(Text(MAKE_DICE, span=op.span), args, span=span)

    # strong function application
    target = ptokens[0].try_to_expr()
    if target is not None:
        args = []
        for ptoken in ptokens[1:]:
            arg = ptoken.try_to_expr()
            if arg is None:
                msg = "function call to '{}' expected valid argument here"
                raise GenericException(msg, render(target), span=ptoken.span)
            args.append(arg)
        return Apply(target, args, span=span)

    raise GenericException("could not parse ambiguous expression", span=span)


def _rposition(ptokens, *ops):
    for idx in range(len(ptokens) - 1, -1, -1):
        if ptokens[idx].is_reserved(*ops):
            return idx
    return None


def _parse_operand(ptokens, env, op, side):
    try:
        return parse_expr(ptokens, env)
    except GenericException as err:
        raise enrich(err, "could not parse {} hand operand of operator '{}'", [side, op.reserved], span=op.span) \
            from err


def _parse_binary(ptokens, idx, env):
    """Parses `left op right` (or a section of it) where op is the arithmetic operator at idx."""
    op = ptokens[idx]
    name = OPERATORS[op.reserved]
    left, right = ptokens[:idx], ptokens[idx + 1:]
    span = get_span(ptokens)

    if left and right:
        args = [_parse_operand(left, env, op, "left"), _parse_operand(right, env, op, "right")]
        return Apply(Text(name, span=op.span), args, span=span)

    elif left:
        return Apply(Text(name, span=op.span), [_parse_operand(left, env, op, "left")], span=span)

    elif right and op.reserved in SWAPPED_SECTIONS:
        # the right operand is supplied before the left one, so the builtin must see them in reverse order
        operand = _parse_operand(right, env, op, "right")
        binding = env.lookup(name)
        if binding is None or not isinstance(binding[0], Fn) or binding[0].captured:
            raise GenericException("'{}' has no binding in current namespace", name, span=op.span)
        builtin, __ = binding
        flipped = Fn(flip(builtin.native), builtin.type, name=op.reserved, span=op.span)
        return Apply(flipped, [operand], span=span)

    elif right:
        return Apply(Text(name, span=op.span), [_parse_operand(right, env, op, "right")], span=span)

    return Text(name, span=op.span)
