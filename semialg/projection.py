"""Discriminant and resultant projections of multivariate polynomials.

A projection eliminates one variable: the result is the set of normalized
(irreducible, monic, non-constant) factors of the principal subresultant
coefficients, i.e. the resultant together with the leading coefficients of
the subresultant remainder sequence. Both projections are pure functions of
their inputs and are memoized per instance.
"""

import logging

import sympy as sp
from sympy import QQ, Poly

from . import config
from .cache import LRUCache
from .interval import evaluate_interval

logger = logging.getLogger(__name__)


def principal_coefficients(a: Poly, b: Poly, variable: int) -> list[Poly]:
    """Resultant of a and b in x_variable plus the leading coefficients of
    their subresultant sequence, as Polys in the full generator tuple."""
    gens = a.gens
    gen = gens[variable]
    fa = a.as_expr()
    fb = b.as_expr()
    result = [sp.resultant(fa, fb, gen)]
    # the first two entries of the sequence are a and b themselves
    for remainder in sp.subresultants(fa, fb, gen)[2:]:
        result.append(sp.LC(remainder, gen))
    return [Poly(r, *gens, domain=QQ) for r in result]


def normalize(polys) -> frozenset:
    """Drop constants, split into irreducible factors and make them monic."""
    result = set()
    for poly in polys:
        if poly.is_zero or poly.total_degree() <= 0:
            continue
        _, factors = poly.factor_list()
        for factor, _ in factors:
            if factor.total_degree() > 0:
                result.add(factor.set_domain(QQ).monic())
    return frozenset(result)


def can_have_zero(poly: Poly, box) -> bool:
    """False when interval arithmetic proves poly never vanishes in the box."""
    return evaluate_interval(poly, box.data).has_zero


class Projection:

    def __init__(self, cache_size: int = config.CACHE_SIZE):
        self._discriminants = LRUCache(cache_size, name="discriminant")
        self._resultants = LRUCache(cache_size, name="resultant")

    def discriminant(self, poly: Poly, variable: int) -> frozenset:
        def compute():
            derivative = poly.diff(poly.gens[variable])
            projection = normalize(principal_coefficients(poly, derivative, variable))
            logger.debug("Discriminant of %s in x%d: %d polynomials", poly.as_expr(), variable, len(projection))
            return projection

        return self._discriminants.get_or_compute((poly, variable), compute)

    def resultant(self, a: Poly, b: Poly, variable: int) -> frozenset:
        # symmetric up to sign, which normalization removes
        key = (frozenset((a, b)), variable)
        return self._resultants.get_or_compute(
            key, lambda: normalize(principal_coefficients(a, b, variable))
        )

    def stats(self) -> list:
        return [self._discriminants.stats(), self._resultants.stats()]
