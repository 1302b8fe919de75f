"""Standard library of the dcalc language: builtin functions registered into an Environment at session start.

Every builtin is a native that receives its fully evaluated arguments as a list. Arithmetic and comparisons work on
distributions (numbers are coerced), and collapse their result back to a number when only one outcome is possible, so
`10 + 2` is simply `12`.
"""

import operator

from dcalc.lang.error import GenericException
from dcalc.lang.symbols import Nil, from_distr, to_distr, to_elems, to_num
from dcalc.pure.distr import Distr
from dcalc.pure.types import DISTR, NIL, NUM, FnType, SeqType


BINARY = FnType((DISTR, DISTR), DISTR)
VIEW = FnType((DISTR,), NIL)

COMPARISONS = {
    "lt": operator.lt,
    "le": operator.le,
    "gt": operator.gt,
    "ge": operator.ge,
    "eq": operator.eq,
    "ne": operator.ne,
}


def divide(x, y):
    """Exact integer division of outcomes."""
    if y == 0:
        raise GenericException("zero division error: cannot divide {} by 0", x)
    if x % y != 0:
        raise GenericException("{} is not divisible by {}: the quotient is not an integer", [x, y])
    return x // y


def distr_op(op):
    """Native that combines two distributions outcome by outcome with op."""

    def native(args):
        left, right = args
        return from_distr(to_distr(left).combine(to_distr(right), op))

    return native


def div(args):
    left, right = args
    return from_distr(to_distr(left).combine_fallible(to_distr(right), divide))


def comparison(op):
    """Native whose result is 1 where op holds and 0 where it doesn't."""
    return distr_op(lambda x, y: int(op(x, y)))


def make_dice(args):
    count, faces = args
    return from_distr(Distr.stacked_unifs(to_num(count), to_num(faces)))


def make_die(args):
    faces, = args
    return from_distr(Distr.unif(to_num(faces)))


def total(args):
    elems, = args
    distr = Distr.from_num(0)
    for elem in to_elems(elems):
        distr = distr.combine(to_distr(elem), operator.add)
    return from_distr(distr)


def view(render):
    """Native that prints render(distribution) and returns Nil."""

    def native(args):
        distr, = args
        print(render(to_distr(distr)).rstrip("\n"))
        return Nil()

    return native


def import_arithmetic(env):
    env.bind_builtin("add", distr_op(operator.add), BINARY)
    env.bind_builtin("sub", distr_op(operator.sub), BINARY)
    env.bind_builtin("mul", distr_op(operator.mul), BINARY)
    env.bind_builtin("div", div, BINARY)
    return env


def import_dice(env):
    env.bind_builtin("make-dice", make_dice, FnType((NUM, NUM), DISTR))
    env.bind_builtin("make-die", make_die, FnType((NUM,), DISTR))
    env.bind_builtin("sum", total, FnType((SeqType(DISTR),), DISTR))
    env.bind_builtin("stats", view(Distr.stat_view), VIEW)
    env.bind_builtin("table", view(Distr.table_view), VIEW)
    env.bind_builtin("hist", view(Distr.hist_view), VIEW)
    return env


def import_comparison(env):
    for name, op in COMPARISONS.items():
        env.bind_builtin(name, comparison(op), BINARY)
    return env


def import_std(env):
    """Binds every builtin into env."""
    import_arithmetic(env)
    import_dice(env)
    import_comparison(env)
    return env
