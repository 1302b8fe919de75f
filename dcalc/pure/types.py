"""Structural type system of the dcalc language.

```
<type> ::= "Nil" | "Any" | "Num" | "Distr"   ; primitives
         | "Seq<" <type> ">"                   ; homogeneous sequences
         | "Fn(" <type>* ") -> " <type>        ; curried functions
```

Coercion is one-directional: a certain number is usable wherever a distribution is expected (Num -> Distr), and Any is
compatible with everything in both directions. Everything else has to match structurally.
"""

from dataclasses import dataclass
from typing import Tuple

from dcalc.lang.error import GenericException


@dataclass(frozen=True)
class PrimType:
    """Nil, Any, Num or Distr. Use the module-level constants rather than instantiating this."""
    name: str

    def __str__(self):
        return self.name


NIL = PrimType("Nil")
ANY = PrimType("Any")
NUM = PrimType("Num")
DISTR = PrimType("Distr")

PRIMITIVES = {prim.name: prim for prim in (NIL, ANY, NUM, DISTR)}


@dataclass(frozen=True)
class SeqType:
    inner: object

    def __str__(self):
        return f"Seq<{self.inner}>"


@dataclass(frozen=True)
class FnType:
    """Signature of a function value. Functions are curried: supplying fewer arguments than in_types leaves a function
    awaiting the rest.
    """
    in_types: Tuple
    out_type: object

    def __post_init__(self):
        object.__setattr__(self, "in_types", tuple(self.in_types))

    def curry(self, num):
        """Returns the type left after supplying the first num arguments.

        >>> FnType((DISTR, NIL), ANY).curry(1)
        FnType(in_types=(PrimType(name='Nil'),), out_type=PrimType(name='Any'))
        """
        return FnType(self.in_types[num:], self.out_type)

    def __str__(self):
        return f"Fn({', '.join(str(type_) for type_ in self.in_types)}) -> {self.out_type}"


def coercible_to(found, expected):
    """Whether a value of type found can be used where expected is required."""
    if found == ANY or expected == ANY:
        return True
    if found == NUM and expected == DISTR:
        return True
    if isinstance(found, SeqType) and isinstance(expected, SeqType):
        return coercible_to(found.inner, expected.inner)
    return found == expected


def parse_type(text, span=None):
    """Parses a type annotation. Only the primitive types can be written in source."""
    try:
        return PRIMITIVES[text.strip()]
    except KeyError:
        raise GenericException("'{}' is not a type that can be annotated (expected Nil, Any, Num or Distr)", text,
                               span=span)
