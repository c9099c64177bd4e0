"""Exact real root isolation inside a rational interval.

Every input polynomial is split into monic irreducible factors. Linear
factors give exact rational roots; the others are isolated with Descartes'
rule of signs on the Moebius-transformed polynomial and recursive bisection.
Distinct irreducible factors never share a root, so the union needs no
further merging beyond removing equal roots of the same factor.
"""

import logging
from fractions import Fraction

from sympy import Poly

from . import config
from .cache import LRUCache
from .interval import Interval
from .polynomials import (
    coefficients,
    evaluate_coefficients,
    irreducible_factors,
    show,
    sign_changes,
    transform_to_interval,
)
from .root import Root

logger = logging.getLogger(__name__)


class RootIsolation:
    """Root isolation with a memo of isolating intervals per (factor, bounds).

    The memo stores plain interval tuples, never Root objects, so callers
    always receive roots they own exclusively.
    """

    def __init__(self, cache_size: int = config.CACHE_SIZE, precision: Fraction | None = config.PRECISION):
        self.precision = precision
        self._intervals = LRUCache(cache_size, name="root isolation")
        self._factors = LRUCache(cache_size, name="factorization")

    def factors(self, poly: Poly) -> tuple:
        return self._factors.get_or_compute(poly, lambda: tuple(irreducible_factors(poly)))

    def isolate_roots_in_bounds(self, polynomials, bounds: Interval) -> list[Root]:
        """Sorted, duplicate free roots of all polynomials inside bounds."""
        unique_factors: dict[Poly, None] = {}
        for poly in dict.fromkeys(polynomials):
            if poly.is_zero:
                logger.debug("Zero polynomial has no isolated roots in %s", bounds)
                continue
            for factor in self.factors(poly):
                unique_factors.setdefault(factor, None)

        roots = []
        for factor in unique_factors:
            if factor.degree() == 1:
                root = Root.rational(factor)
                if root.value in bounds:
                    roots.append(root)
            else:
                intervals = self._intervals.get_or_compute(
                    (factor, bounds), lambda: self._isolate_irrational(factor, bounds)
                )
                roots.extend(Root.irrational(low, high, factor) for low, high in intervals)
        roots.sort()
        return _deduplicate(roots)

    def _isolate_irrational(self, polynomial: Poly, bounds: Interval) -> tuple:
        coeffs = coefficients(polynomial)
        low, high = bounds
        result = []
        if low < high:
            queue = [(low, high)]
            while queue:
                l, h = queue.pop()
                changes = sign_changes(transform_to_interval(coeffs, l, h))
                if changes == 0:
                    continue
                if changes == 1 and (self.precision is None or h - l <= self.precision):
                    result.append((l, h))
                    continue
                middle = l + (h - l) / 2
                if evaluate_coefficients(coeffs, middle) == 0:
                    result.append((middle, middle))
                queue.append((l, middle))
                queue.append((middle, h))
        # the transformation only sees the open interval
        for endpoint in {low, high}:
            if evaluate_coefficients(coeffs, endpoint) == 0:
                result.append((endpoint, endpoint))
        logger.debug("Isolated %d roots of %s in %s", len(result), show(polynomial), bounds)
        return tuple(sorted(result))

    def stats(self) -> list:
        return [self._intervals.stats(), self._factors.stats()]


def _deduplicate(roots: list[Root]) -> list[Root]:
    result = []
    for root in roots:
        if result and result[-1].compare(root) == 0:
            continue
        result.append(root)
    return result


_default = None


def default_isolation() -> RootIsolation:
    global _default
    if _default is None:
        _default = RootIsolation()
    return _default


def isolate_roots_in_bounds(polynomials, bounds: Interval) -> list[Root]:
    return default_isolation().isolate_roots_in_bounds(polynomials, bounds)
