"""Glue between sympy polynomials and the Fraction-based engine.

Multivariate polynomials are sympy Polys over QQ that always carry the full
generator tuple x0..x{n-1} of their problem. The level of a polynomial is the
index of its highest generator with nonzero degree (-1 for constants).

Univariate work (root isolation, refinement) runs on ascending tuples of
Fraction coefficients extracted once from a univariate Poly.
"""

from fractions import Fraction

import sympy as sp
from sympy import QQ, Poly


def make_gens(dimensions: int, names=None) -> tuple:
    """Generators x0..x{n-1}, or the given names."""
    if names is None:
        return tuple(sp.Symbol(f"x{i}") for i in range(dimensions))
    if isinstance(names, str):
        names = names.replace(",", " ").split()
    gens = tuple(sp.Symbol(n) if isinstance(n, str) else n for n in names)
    if len(gens) != dimensions:
        raise ValueError(f"Expected {dimensions} generators, got {gens}")
    return gens


def to_fraction(value) -> Fraction:
    if isinstance(value, Fraction):
        return value
    if isinstance(value, int):
        return Fraction(value)
    if isinstance(value, sp.Rational):
        return Fraction(int(value.p), int(value.q))
    if isinstance(value, sp.Basic):
        raise TypeError(f"Not an exact rational: {value!r}")
    # domain elements (PythonMPQ, gmpy2.mpq) and str
    if hasattr(value, "numerator") and hasattr(value, "denominator"):
        return Fraction(int(value.numerator), int(value.denominator))
    return Fraction(value)


def to_rational(value) -> sp.Rational:
    value = Fraction(value)
    return sp.Rational(value.numerator, value.denominator)


def as_poly(value, gens) -> Poly:
    """Coerce a string, sympy expression or Poly to a Poly over QQ in gens."""
    if isinstance(value, Poly):
        if tuple(value.gens) == tuple(gens):
            return value if value.domain == QQ else value.set_domain(QQ)
        value = value.as_expr()
    elif isinstance(value, str):
        value = sp.sympify(value, locals={str(g): g for g in gens})
    extra = sp.sympify(value).free_symbols - set(gens)
    if extra:
        raise ValueError(f"Unknown variables {sorted(map(str, extra))} (expected {gens})")
    return Poly(value, *gens, domain=QQ)


def parse(text: str, gens) -> Poly:
    return as_poly(text, gens)


def level(poly: Poly) -> int:
    if poly.is_zero:
        return -1
    degrees = poly.degree_list()
    for d in reversed(range(len(degrees))):
        if degrees[d] > 0:
            return d
    return -1


def _substitution(gens, point) -> dict:
    return {gen: to_rational(value) for gen, value in zip(gens, point)}


def evaluate(poly: Poly, point) -> Fraction:
    """Value of poly at a full rational point."""
    if len(point) != len(poly.gens):
        raise ValueError(f"Point {list(point)} does not match generators {poly.gens}")
    value = poly.eval(_substitution(poly.gens, point))
    return to_fraction(value)


def partial_evaluate(poly: Poly, point) -> Poly:
    """Substitute point for the leading generators, keeping all of them."""
    if not point:
        return poly
    reduced = poly.eval(_substitution(poly.gens, point))
    expr = reduced.as_expr() if isinstance(reduced, Poly) else reduced
    return Poly(expr, *poly.gens, domain=QQ)


def univariate(poly: Poly, point) -> Poly:
    """Substitute point for the leading generators; the result is univariate
    in the generator right after the point."""
    d = len(point)
    if d >= len(poly.gens):
        raise ValueError(f"Point {list(point)} leaves no free variable in {poly}")
    gen = poly.gens[d]
    reduced = poly.eval(_substitution(poly.gens, point)) if point else poly
    expr = reduced.as_expr() if isinstance(reduced, Poly) else reduced
    extra = sp.sympify(expr).free_symbols - {gen}
    if extra:
        raise ValueError(f"{show(poly)} depends on {sorted(map(str, extra))} beyond x{d}")
    return Poly(expr, gen, domain=QQ)


def coefficients(upoly: Poly) -> tuple:
    """Ascending Fraction coefficients of a univariate Poly."""
    return tuple(to_fraction(c) for c in reversed(upoly.all_coeffs()))


def evaluate_coefficients(coeffs, x: Fraction) -> Fraction:
    result = Fraction(0)
    for c in reversed(coeffs):
        result = result * x + c
    return result


def derivative_coefficients(coeffs) -> tuple:
    return tuple(i * c for i, c in enumerate(coeffs) if i > 0)


def sign(value) -> int:
    return (value > 0) - (value < 0)


def _multiply(a, b):
    result = [Fraction(0)] * (len(a) + len(b) - 1)
    for i, x in enumerate(a):
        if x:
            for j, y in enumerate(b):
                result[i + j] += x * y
    return result


def transform_to_interval(coeffs, low: Fraction, high: Fraction) -> list:
    """Coefficients of (1 + x)^n * p((high + low*x) / (1 + x)).

    Positive roots of the result correspond to roots of p in (low, high)."""
    n = len(coeffs) - 1
    substitution = [[Fraction(1)]]
    normalization = [[Fraction(1)]]
    for _ in range(n):
        substitution.append(_multiply(substitution[-1], [high, low]))
        normalization.append(_multiply(normalization[-1], [Fraction(1), Fraction(1)]))
    result = [Fraction(0)] * (n + 1)
    for i, c in enumerate(coeffs):
        if c:
            term = _multiply(substitution[i], normalization[n - i])
            for k, t in enumerate(term):
                result[k] += c * t
    return result


def sign_changes(coeffs) -> int:
    """Number of sign changes in the nonzero coefficients (Descartes' bound)."""
    changes = 0
    previous = 0
    for c in coeffs:
        s = sign(c)
        if s == 0:
            continue
        if previous and s != previous:
            changes += 1
        previous = s
    return changes


def irreducible_factors(upoly: Poly) -> list:
    """Monic irreducible factors of positive degree (multiplicities dropped)."""
    if upoly.is_zero or upoly.degree() <= 0:
        return []
    _, factors = upoly.factor_list()
    return [f.set_domain(QQ).monic() for f, _ in factors if f.degree() > 0]


def bound_polynomials(box, gens) -> list:
    """(x_d - low_d, x_d - high_d) for every dimension of the box."""
    return [
        (Poly(gens[d] - to_rational(interval.low), *gens, domain=QQ),
         Poly(gens[d] - to_rational(interval.high), *gens, domain=QQ))
        for d, interval in enumerate(box)
    ]


def show(poly: Poly) -> str:
    return str(poly.as_expr())
