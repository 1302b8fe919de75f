"""Discrete probability distributions over integer outcomes.

A Distr maps each possible outcome to its probability mass. Distrs are never mutated once they have been built:
combining two of them always creates a new one. The combination is a discrete convolution generalized to an arbitrary
binary integer operator, so `d6 + d6`, `d6 * 2` and `d20 - d4` all go through the same cross product:

```
P(z) = sum of P(x) * P(y) over every pair (x, y) with op(x, y) == z
```

The distributions involved are small (bounded die faces), so a sparse dict is all the representation needed.
"""

import math

from dcalc.lang.error import GenericException, enrich


KEY_MIN = -2 ** 31      # outcomes written in source must fit a signed 32 bit integer
KEY_MAX = 2 ** 31 - 1

MAX_FACES = 2 ** 16     # every face is stored, so dice sizes are bounded far below KEY_MAX
MAX_DICE = 2 ** 10


class Distr:
    """Immutable probability mass function over integers."""
    HIST_WIDTH = 50  # number of X's in the tallest histogram bar

    def __init__(self, density=None):
        """density is a mapping of outcome: mass."""
        self._density = dict(density) if density else {}

    @classmethod
    def from_num(cls, num):
        """One-point distribution: num happens with certainty."""
        return cls({num: 1.0})

    @classmethod
    def unif(cls, faces):
        """Distribution of a single fair die with faces 1..faces."""
        if faces <= 0:
            raise GenericException("dice must have at least one face, not {}", faces)
        if faces > MAX_FACES:
            raise GenericException("dice can have at most {} faces, not {}", [MAX_FACES, faces])

        p = 1.0 / faces
        return cls({face: p for face in range(1, faces + 1)})

    @classmethod
    def stacked_unifs(cls, count, faces):
        """Distribution of the sum of count independent rolls of unif(faces). Rolling zero dice always gives 0."""
        if count < 0:
            raise GenericException("cannot roll a negative number of dice ({})", count)
        if count > MAX_DICE:
            raise GenericException("cannot roll more than {} dice at once, not {}", [MAX_DICE, count])

        die = cls.unif(faces)
        distr = cls.from_num(0)
        for _ in range(count):
            distr = distr.combine(die, lambda x, y: x + y)
        return distr

    @staticmethod
    def _update_prob(density, x, p):
        density[x] = density.get(x, 0.0) + p

    def combine(self, other, op):
        """Returns the distribution of op(x, y) where x ~ self and y ~ other are independent."""
        density = {}
        for x, px in self._density.items():
            for y, py in other._density.items():
                Distr._update_prob(density, op(x, y), px * py)
        return Distr(density)

    def combine_fallible(self, other, op):
        """Like combine, but op may raise a GenericException for some pair of outcomes, which aborts the whole
        combination.
        """
        density = {}
        for x, px in self._density.items():
            for y, py in other._density.items():
                try:
                    z = op(x, y)
                except GenericException as err:
                    raise enrich(err, "could not combine outcomes {} and {}", [x, y]) from err
                Distr._update_prob(density, z, px * py)
        return Distr(density)

    def prob(self, x):
        """Probability mass of outcome x (0.0 if x is not a possible outcome)."""
        return self._density.get(x, 0.0)

    def outcomes(self):
        """Possible outcomes in ascending order."""
        return sorted(self._density)

    def total(self):
        """Sum of all masses: 1.0 for well-formed distributions."""
        return math.fsum(self._density.values())

    def min(self):
        return min(self._density)

    def max(self):
        return max(self._density)

    def mean(self):
        return math.fsum(x * p for x, p in self._density.items())

    def stdev(self):
        m = self.mean()
        return math.sqrt(math.fsum((x - m) ** 2 * p for x, p in self._density.items()))

    def try_to_scalar(self):
        """Returns the only outcome of a one-point distribution. Raises GenericException for anything else."""
        if len(self._density) != 1:
            raise GenericException("could not convert distribution {} into a number", self.stat_view())
        outcome, = self._density
        return outcome

    def stat_view(self):
        if not self._density:
            return "<Never>"
        return f"<Mean: {self.mean():.3f}, Stdev: {self.stdev():.3f}>"

    def hist_view(self):
        if not self._density:
            return "The Never Distribution."

        max_p = max(self._density.values())
        lines = []
        for x in range(self.min(), self.max() + 1):
            bar = "X" * int(self.prob(x) * Distr.HIST_WIDTH / max_p)
            lines.append(f"{x:2}: {bar}")
        return "\n".join(lines) + "\n"

    def table_view(self):
        result = "  x | P(x)\n ---╋-----\n"
        for x in self.outcomes():
            result += f" {x:2} | {self.prob(x):.5f}\n"
        return result

    def __len__(self):
        return len(self._density)

    def __iter__(self):
        return iter(self.outcomes())

    def __eq__(self, other):
        if not isinstance(other, Distr) or set(self._density) != set(other._density):
            return False
        return all(math.isclose(p, other._density[x], abs_tol=1e-9) for x, p in self._density.items())

    def __repr__(self):
        density = {x: self._density[x] for x in self.outcomes()}
        return f"Distr({density})"
