"""Tests for semialg/projection.py."""

import sympy as sp

from semialg import Box, Projection
from semialg.projection import can_have_zero, normalize, principal_coefficients


class TestPrincipalCoefficients:
    def test_resultant_first(self, poly, gens):
        x, y = gens
        coefficients = principal_coefficients(poly(y**2 + x - 2), poly(2 * y), 1)
        assert normalize(coefficients[:1]) == frozenset({poly(x - 2)})
        assert all(c.gens == gens for c in coefficients)


class TestNormalize:
    def test_factors_made_monic(self, poly, gens):
        x, y = gens
        result = normalize([poly(2 * (x - 1)**2 * (3 * y + 3))])
        assert result == frozenset({poly(x - 1), poly(y + 1)})

    def test_constants_dropped(self, poly):
        assert normalize([poly(sp.Integer(-7)), poly(sp.Integer(0))]) == frozenset()


class TestProjection:
    def test_discriminant(self, poly, gens):
        x, y = gens
        projection = Projection(cache_size=10)
        assert poly(x - 2) in projection.discriminant(poly(y**2 + x - 2), 1)

    def test_discriminant_of_linear_is_empty(self, poly, gens):
        x, y = gens
        assert Projection(cache_size=10).discriminant(poly(x**2 - y), 1) == frozenset()

    def test_resultant_of_parallel_lines_is_constant(self, poly, gens):
        x, y = gens
        assert Projection(cache_size=10).resultant(poly(x - 1), poly(x - 2), 0) == frozenset()

    def test_resultant_of_parabolas(self, poly, gens):
        x, y = gens
        result = Projection(cache_size=10).resultant(poly(x**2 - y), poly((x - 2)**2 - y), 1)
        assert result == frozenset({poly(x - 1)})

    def test_resultant_cache_is_symmetric(self, poly, gens):
        x, y = gens
        projection = Projection(cache_size=10)
        a = poly(x**2 - y)
        b = poly(x + y - 1)
        first = projection.resultant(a, b, 1)
        second = projection.resultant(b, a, 1)
        assert first == second
        resultants = projection.stats()[1]
        assert resultants.requests == 2
        assert resultants.hits == 1


class TestCanHaveZero:
    def test_positive_definite(self, poly, gens):
        x, y = gens
        box = Box.parse([(0, 2), (0, 2)])
        assert not can_have_zero(poly(x**2 + y + 1), box)
        assert can_have_zero(poly(x - 1), box)
        assert can_have_zero(poly(x - 2), box)
