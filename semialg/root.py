"""Isolated real roots with exact, lazily refined comparison.

A Root is one real root of a square-free univariate polynomial, kept as an
isolating interval that shrinks on demand. The bounds are not part of the
public value: they change whenever a comparison needs more precision. This
makes Root unsafe to share between threads; every isolation call hands out
fresh Root objects.

Invariant of a non-degenerate root: the root lies in the open interval
(lower, upper) and is the only root of the polynomial in [lower, upper].
"""

from dataclasses import dataclass
from fractions import Fraction

from sympy import Poly

from .errors import EmptyIntervalError, PreconditionError, RefinementError, UnorderedRootsError
from .polynomials import (
    coefficients,
    derivative_coefficients,
    evaluate_coefficients,
    show,
    sign,
)

# Two roots of different polynomials that still overlap after this many
# refinements are assumed to coincide, i.e. the polynomials were not coprime.
REFINEMENT_LIMIT = 10000


class Root:

    __slots__ = ("polynomial", "_coeffs", "_lower", "_upper", "_lower_sign")

    def __init__(self, polynomial: Poly, lower, upper):
        lower = Fraction(lower)
        upper = Fraction(upper)
        if lower > upper:
            raise EmptyIntervalError(lower, upper)
        self.polynomial = polynomial
        self._coeffs = coefficients(polynomial)
        self._lower = lower
        self._upper = upper
        self._lower_sign = 0
        if lower != upper:
            self._lower_sign = self._sign_right_of(lower)
            if self._sign_left_of(upper) == self._lower_sign:
                raise RefinementError(f"No sign change of {show(polynomial)} in ({lower}, {upper})")

    @classmethod
    def rational(cls, polynomial: Poly) -> "Root":
        """Create a rational root from an exactly linear polynomial."""
        coeffs = coefficients(polynomial)
        if len(coeffs) != 2 or coeffs[1] == 0:
            raise PreconditionError(f"Polynomial {show(polynomial)} is not linear")
        value = -coeffs[0] / coeffs[1]
        return cls(polynomial, value, value)

    @classmethod
    def irrational(cls, low, high, polynomial: Poly) -> "Root":
        """Create a root from an isolating interval verified by the caller."""
        return cls(polynomial, low, high)

    def _sign_right_of(self, x: Fraction) -> int:
        s = sign(evaluate_coefficients(self._coeffs, x))
        if s == 0:
            # x is a simple root itself, the derivative gives the sign just after it
            s = sign(evaluate_coefficients(derivative_coefficients(self._coeffs), x))
        if s == 0:
            raise RefinementError(f"{show(self.polynomial)} has a multiple root at {x}")
        return s

    def _sign_left_of(self, x: Fraction) -> int:
        s = sign(evaluate_coefficients(self._coeffs, x))
        if s == 0:
            s = -sign(evaluate_coefficients(derivative_coefficients(self._coeffs), x))
        if s == 0:
            raise RefinementError(f"{show(self.polynomial)} has a multiple root at {x}")
        return s

    def _has_root(self, low: Fraction, high: Fraction) -> bool:
        at_low = evaluate_coefficients(self._coeffs, low)
        at_high = evaluate_coefficients(self._coeffs, high)
        return at_low == 0 or at_high == 0 or sign(at_low) != sign(at_high)

    @property
    def lower(self) -> Fraction:
        return self._lower

    @property
    def upper(self) -> Fraction:
        return self._upper

    @property
    def error(self) -> Fraction:
        return self._upper - self._lower

    @property
    def is_rational(self) -> bool:
        return self._lower == self._upper

    @property
    def value(self) -> Fraction:
        if not self.is_rational:
            raise PreconditionError(f"Root {self} is not known to be rational")
        return self._lower

    def approximate(self) -> float:
        return float(self._lower + self.error / 2)

    def refine(self):
        """Halve the isolating interval (no-op for rational roots)."""
        if self._lower == self._upper:
            return
        middle = self._lower + self.error / 2
        value = evaluate_coefficients(self._coeffs, middle)
        if value == 0:
            self._lower = self._upper = middle
        elif sign(value) == self._lower_sign:
            self._lower = middle
        else:
            self._upper = middle

    def refine_to(self, precision: Fraction):
        while self.error > precision:
            self.refine()

    def compare(self, other: "Root") -> int:
        """-1, 0 or 1, refining whichever interval is wider until decided."""
        if self is other:
            return 0
        same_polynomial = self.polynomial == other.polynomial
        iterations = 0
        while True:
            if other.is_rational:
                return self.compare_value(other._lower)
            if self.is_rational:
                return -other.compare_value(self._lower)
            low = max(self._lower, other._lower)
            high = min(self._upper, other._upper)
            if low >= high:
                # roots lie strictly inside their intervals, touching is disjoint
                return -1 if self._upper <= other._lower else 1
            if same_polynomial:
                # each interval holds exactly one root of the polynomial, so the
                # roots are equal iff the overlap holds a root
                if self._has_root(low, high):
                    return 0
                return -1 if self._lower < other._lower else 1
            if iterations > REFINEMENT_LIMIT:
                raise RefinementError(f"Cannot separate {self} and {other}; do the polynomials share a root?")
            if self.error > other.error:
                self.refine()
            else:
                other.refine()
            iterations += 1

    def compare_value(self, value) -> int:
        """Compare this root with a rational number."""
        value = Fraction(value)
        if self.is_rational:
            return sign(self._lower - value)
        if self._lower < value < self._upper and evaluate_coefficients(self._coeffs, value) == 0:
            self._lower = self._upper = value
            return 0
        while self._lower < value < self._upper:
            self.refine()
            if self.is_rational:
                return sign(self._lower - value)
        return 1 if value <= self._lower else -1

    def middle_value(self, other: "Root") -> Fraction:
        """A rational strictly between this root and a larger one."""
        if self.compare(other) >= 0:
            raise UnorderedRootsError(self, other)
        while self._upper >= other._lower:
            if self.error > other.error:
                self.refine()
            else:
                other.refine()
        return self._upper + (other._lower - self._upper) / 2

    def __lt__(self, other):
        return self.compare(other) < 0

    def __le__(self, other):
        return self.compare(other) <= 0

    def __gt__(self, other):
        return self.compare(other) > 0

    def __ge__(self, other):
        return self.compare(other) >= 0

    def __eq__(self, other):
        if not isinstance(other, Root):
            return NotImplemented
        if self.polynomial != other.polynomial:
            return False
        return self.compare(other) == 0

    def __hash__(self):
        # The isolating interval shrinks, so only the polynomial can be hashed.
        return hash(self.polynomial)

    def __repr__(self):
        return f"[{self._lower}, {self._upper}]{{{show(self.polynomial)}}}"


@dataclass(frozen=True, eq=False)
class MRoot:
    """A root tagged with the multivariate polynomial it came from.

    ordinal is the index of the root among all in-box roots of poly over the
    current cell; (poly, ordinal) names the same section of poly no matter
    which sample point was used to isolate it.
    """
    root: Root
    ordinal: int
    poly: Poly
    # keys of roots of other polynomials that coincide with this one
    aliases: tuple = ()

    @property
    def key(self) -> tuple:
        return (self.poly, self.ordinal)

    @property
    def keys(self) -> tuple:
        return (self.key,) + self.aliases

    @property
    def polys(self) -> tuple:
        return (self.poly,) + tuple(poly for poly, _ in self.aliases)

    def with_alias(self, key: tuple) -> "MRoot":
        return MRoot(self.root, self.ordinal, self.poly, self.aliases + (key,))

    def __lt__(self, other: "MRoot"):
        return self.root.compare(other.root) < 0

    def __repr__(self):
        return f"MRoot({self.root!r}#{self.ordinal} of {show(self.poly)})"
