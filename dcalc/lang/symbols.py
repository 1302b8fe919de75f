"""Abstract syntax tree of the dcalc language, plus the two recursive traversals over it: the (read-only) type checker
and the (environment-mutating) evaluator.

The tree is a closed set of node types:

```
<symbol> ::= Nil | Num | DistrValue            ; values
           | Text                              ; identifier, resolved against the Environment
           | Seq                               ; [a, b, c]
           | Fn                                ; native function + signature + captured (curried) arguments
           | Apply                             ; target arg1 arg2 ... (possibly partial)
           | Assigner                          ; name [: Type] = expr
```

Nodes are immutable once built. Each one carries the span of the source it was parsed from (None for synthesized
nodes), which is ignored by equality.

Functions are curried. Applying k arguments to a function awaiting m of them:
    - k < m: a new Fn with the same native, the remaining in_types and the k arguments appended (unevaluated)
    - k == m: every captured and new argument is evaluated left to right and handed to the native
    - k > m: error
The type checker simulates exactly the same rules, so the type it predicts is the type of what the evaluator returns.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Callable, Optional, Tuple

from dcalc.lang.error import GenericException, enrich
from dcalc.pure.distr import Distr
from dcalc.pure.types import ANY, DISTR, NIL, NUM, FnType, SeqType, coercible_to


def _span():
    return field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Nil:
    span: Optional[tuple] = _span()


@dataclass(frozen=True)
class Num:
    value: int
    span: Optional[tuple] = _span()


@dataclass(frozen=True)
class DistrValue:
    distr: Distr
    span: Optional[tuple] = _span()


@dataclass(frozen=True)
class Text:
    name: str
    span: Optional[tuple] = _span()


@dataclass(frozen=True)
class Seq:
    elems: Tuple
    span: Optional[tuple] = _span()

    def __post_init__(self):
        object.__setattr__(self, "elems", tuple(self.elems))


@dataclass(frozen=True)
class Fn:
    """Function value. native takes the list of fully evaluated arguments and returns a symbol; captured holds the
    arguments already supplied by partial applications, in order.
    """
    native: Callable
    type: FnType
    captured: Tuple = ()
    name: str = "fn"
    span: Optional[tuple] = _span()

    def __post_init__(self):
        object.__setattr__(self, "captured", tuple(self.captured))


@dataclass(frozen=True)
class Apply:
    target: object
    args: Tuple
    span: Optional[tuple] = _span()

    def __post_init__(self):
        object.__setattr__(self, "args", tuple(self.args))


@dataclass(frozen=True)
class Assigner:
    name: str
    def_type: object
    expr: object
    span: Optional[tuple] = _span()


VALUES = (Nil, Num, DistrValue, Fn)


def with_span(symbol, span):
    """Returns a copy of symbol that covers span."""
    return replace(symbol, span=span)


def flip(native):
    """Returns a native that calls native with its arguments in reverse order."""

    def flipped(args):
        return native(list(reversed(args)))

    return flipped


# ---------------------------------------------------------------------------------------------------------------------
# runtime coercions (used by natives)

def to_distr(value):
    """Returns value as a Distr: numbers are one-point distributions."""
    if isinstance(value, Num):
        return Distr.from_num(value.value)
    elif isinstance(value, DistrValue):
        return value.distr
    raise GenericException("expected a distribution, not '{}'", render(value), span=value.span)


def to_num(value):
    """Returns value as an int: only one-point distributions can be used as numbers."""
    if isinstance(value, Num):
        return value.value
    elif isinstance(value, DistrValue):
        try:
            return value.distr.try_to_scalar()
        except GenericException as err:
            raise enrich(err, "expected a number", span=value.span) from err
    raise GenericException("expected a number, not '{}'", render(value), span=value.span)


def to_elems(value):
    """Returns the elements of a sequence value."""
    if isinstance(value, Seq):
        return list(value.elems)
    raise GenericException("expected a sequence, not '{}'", render(value), span=value.span)


def from_distr(distr):
    """Wraps distr as a symbol, collapsing a certain outcome into a plain number."""
    if len(distr) == 1 and math.isclose(distr.total(), 1.0):
        return Num(distr.try_to_scalar())
    return DistrValue(distr)


# ---------------------------------------------------------------------------------------------------------------------
# type checking

def _too_many_args(fn_repr, expected, args, span):
    extra = args[expected:]
    if extra and extra[0].span is not None and extra[-1].span is not None:
        span = (extra[0].span[0], extra[-1].span[1])
    msg = "applied too many arguments to '{}': expected {}, given {}"
    return GenericException(msg, [fn_repr, expected, len(args)], span=span)


def type_check(symbol, env):
    """Returns the type of symbol in env without evaluating it. Raises GenericException for ill-typed trees."""
    if isinstance(symbol, Nil):
        return NIL
    elif isinstance(symbol, Num):
        return NUM
    elif isinstance(symbol, DistrValue):
        return DISTR
    elif isinstance(symbol, Fn):
        return symbol.type

    elif isinstance(symbol, Text):
        binding = env.lookup(symbol.name)
        if binding is None:
            raise GenericException("'{}' has no binding in current namespace", symbol.name, span=symbol.span)
        __, type_ = binding
        return type_

    elif isinstance(symbol, Seq):
        elem_types = [type_check(elem, env) for elem in symbol.elems]
        if not elem_types:
            return SeqType(ANY)
        for candidate in elem_types:
            if all(coercible_to(type_, candidate) for type_ in elem_types):
                return SeqType(candidate)
        found = ", ".join(str(type_) for type_ in elem_types)
        raise GenericException("sequence elements must share a type, found {}", found, span=symbol.span)

    elif isinstance(symbol, Apply):
        return _type_check_apply(symbol, env)

    elif isinstance(symbol, Assigner):
        concrete_type = type_check(symbol.expr, env)
        if symbol.def_type is not None and not coercible_to(concrete_type, symbol.def_type):
            msg = "annotated type {} of '{}' does not match concrete type {}"
            raise GenericException(msg, [symbol.def_type, symbol.name, concrete_type], span=symbol.span)
        return NIL

    raise GenericException("cannot type check '{}'", repr(symbol), internal=True)


def _type_check_apply(apply, env):
    target_type = type_check(apply.target, env)
    arg_types = [type_check(arg, env) for arg in apply.args]

    if target_type == ANY:
        return ANY
    elif not isinstance(target_type, FnType):
        msg = "'{}' has type {} and is not a function, so it cannot be applied"
        raise GenericException(msg, [render(apply.target), target_type], span=apply.target.span)

    in_types = target_type.in_types
    if len(arg_types) > len(in_types):
        raise _too_many_args(render(apply.target), len(in_types), apply.args, apply.span)

    for idx, (expected, found, arg) in enumerate(zip(in_types, arg_types, apply.args)):
        if not coercible_to(found, expected):
            msg = "'{}' expected signature {}, but argument {} has type {}, not {}"
            exprs = [render(apply.target), target_type, idx + 1, found, expected]
            raise GenericException(msg, exprs, span=arg.span if arg.span is not None else apply.span)

    if len(arg_types) < len(in_types):
        return target_type.curry(len(arg_types))
    return target_type.out_type


# ---------------------------------------------------------------------------------------------------------------------
# evaluation

def evaluate(symbol, env):
    """Evaluates symbol in env and returns the resulting value. Assignments rebind env."""
    if isinstance(symbol, VALUES):
        return symbol

    elif isinstance(symbol, Text):
        binding = env.lookup(symbol.name)
        if binding is None:
            raise GenericException("'{}' has no binding in current namespace", symbol.name, span=symbol.span)
        value, __ = binding
        return value

    elif isinstance(symbol, Seq):
        return Seq([evaluate(elem, env) for elem in symbol.elems], span=symbol.span)

    elif isinstance(symbol, Apply):
        target = evaluate(symbol.target, env)
        if not isinstance(target, Fn):
            msg = "'{}' is not a function, so it cannot be applied"
            raise GenericException(msg, render(symbol.target), span=symbol.target.span)
        return call(target, symbol.args, env, symbol.span)

    elif isinstance(symbol, Assigner):
        value = evaluate(symbol.expr, env)
        type_ = symbol.def_type if symbol.def_type is not None else type_check(value, env)
        env.bind(symbol.name, value, type_)
        return Nil()

    raise GenericException("cannot evaluate '{}'", repr(symbol), internal=True)


def call(fn, args, env, span=None):
    """Applies fn to the (unevaluated) args, currying if there are fewer args than fn still needs."""
    args = tuple(args)
    expected = len(fn.type.in_types)

    if len(args) > expected:
        raise _too_many_args(render(fn), expected, args, span)

    elif len(args) < expected:
        return Fn(fn.native, fn.type.curry(len(args)), fn.captured + args, fn.name, span=span)

    values = [evaluate(arg, env) for arg in fn.captured + args]
    try:
        return fn.native(values)
    except GenericException as err:
        raise enrich(err, "could not apply '{}'", fn.name, span=span) from err


# ---------------------------------------------------------------------------------------------------------------------
# display

def render(symbol):
    """Display string of a value (or of an unevaluated tree, in source-like form)."""
    if isinstance(symbol, Nil):
        return "Nil"
    elif isinstance(symbol, Num):
        return str(symbol.value)
    elif isinstance(symbol, DistrValue):
        return symbol.distr.stat_view()
    elif isinstance(symbol, Text):
        return symbol.name
    elif isinstance(symbol, Seq):
        return "[" + ", ".join(render(elem) for elem in symbol.elems) + "]"
    elif isinstance(symbol, Fn):
        head = " ".join([symbol.name] + [_render_arg(arg) for arg in symbol.captured])
        return f"<{head}: {symbol.type}>"
    elif isinstance(symbol, Apply):
        return " ".join([_render_arg(symbol.target)] + [_render_arg(arg) for arg in symbol.args])
    elif isinstance(symbol, Assigner):
        if symbol.def_type is None:
            return f"{symbol.name} = {render(symbol.expr)}"
        return f"{symbol.name}: {symbol.def_type} = {render(symbol.expr)}"
    return repr(symbol)


def _render_arg(symbol):
    if isinstance(symbol, Apply):
        return f"({render(symbol)})"
    return render(symbol)
