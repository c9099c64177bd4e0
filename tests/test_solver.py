"""Tests for semialg/solver.py: construction, combination and membership."""

import random
from fractions import Fraction

import numpy as np
import pytest

from semialg import (
    Box,
    CacheStats,
    IncompatibleTreesError,
    Leaf,
    PreconditionError,
    RootCollisionError,
    SemiAlgSet,
    Settings,
    TreeSolver,
)
from semialg.polynomials import evaluate
from semialg.tree import all_members, child, count_cells

P = "x0**2 - x1"
Q = "(x0 - 2)**2 - x1"


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestSignSets:
    def test_one_dimensional(self):
        solver = TreeSolver(Box.parse([(-3, 3)]))
        tree = solver.positive("x0**2 - 2")
        assert solver.contains(tree, (2,))
        assert solver.contains(tree, (-2,))
        assert not solver.contains(tree, (0,))
        assert count_cells(tree) == 3

    def test_positive_and_negative(self, solver):
        below = solver.positive(P)
        above = solver.negative(P)
        assert solver.contains(below, (Fraction(3, 2), 1))
        assert not solver.contains(below, (Fraction(1, 2), 1))
        assert solver.contains(above, (Fraction(1, 2), 1))
        assert not solver.contains(above, (Fraction(3, 2), 1))

    def test_constant_polynomials(self, solver):
        assert solver.positive("-1") == Leaf(0, False)
        assert solver.is_empty(solver.positive("-1"))
        assert solver.is_not_empty(solver.negative("-1"))
        assert all_members(solver.negative("-1"))
        assert solver.is_empty(solver.positive("0"))

    def test_sign_invariant_in_box(self, solver):
        tree = solver.positive("x0**2 + x1**2 + 1")
        assert tree == Leaf(0, True)

    def test_accepts_poly(self, solver):
        tree = solver.negative(solver.poly(P))
        assert solver.contains(tree, (Fraction(1, 2), 1))

    def test_custom_generators(self):
        solver = TreeSolver(Box.parse([(0, 2), (0, 2)]), gens="x y")
        tree = solver.negative("x**2 - y")
        assert solver.contains(tree, (Fraction(1, 2), 1))
        with pytest.raises(ValueError):
            solver.negative(P)


# ---------------------------------------------------------------------------
# Boolean combination
# ---------------------------------------------------------------------------

class TestCombination:
    def test_two_parabolas(self, solver):
        a = solver.negative(P)
        b = solver.negative(Q)
        both = solver.and_(a, b)
        assert solver.is_not_empty(both)
        assert solver.subset(both, a)
        assert solver.subset(both, b)
        assert not solver.subset(a, both)
        assert solver.contains(both, (Fraction(9, 10), Fraction(3, 2)))
        assert not solver.contains(both, (Fraction(3, 2), Fraction(1, 2)))
        assert not solver.contains(both, (Fraction(1, 10), Fraction(1, 2)))

    def test_section_point_collides(self, solver):
        both = solver.and_(solver.negative(P), solver.negative(Q))
        # the parabolas cross at x0 = 1, a section of the intersection
        with pytest.raises(RootCollisionError):
            solver.contains(both, (1, Fraction(3, 2)))

    def test_complement_partition(self, solver):
        above = solver.negative(P)
        below = solver.positive(P)
        assert solver.is_empty(solver.and_(above, below))
        assert all_members(solver.or_(above, below))
        assert solver.equivalent(solver.not_(above), below)

    def test_commutativity(self, solver):
        a = solver.negative(P)
        b = solver.positive(Q)
        assert solver.equivalent(solver.and_(a, b), solver.and_(b, a))
        assert solver.equivalent(solver.or_(a, b), solver.or_(b, a))

    def test_union_membership(self, solver):
        either = solver.or_(solver.negative(P), solver.negative(Q))
        assert solver.contains(either, (Fraction(1, 10), Fraction(1, 2)))
        assert solver.contains(either, (Fraction(19, 10), Fraction(1, 2)))
        assert not solver.contains(either, (Fraction(11, 10), Fraction(1, 2)))

    def test_difference(self, solver):
        only_a = solver.difference(solver.negative(P), solver.negative(Q))
        assert solver.contains(only_a, (Fraction(1, 10), Fraction(1, 2)))
        assert not solver.contains(only_a, (Fraction(9, 10), Fraction(3, 2)))

    def test_combined_with_pruned_line(self, solver):
        # the line only matters left of x0 = 1
        left = solver.negative("x0 - 1")
        a = solver.and_(solver.negative(P), left)
        assert solver.contains(a, (Fraction(1, 2), 1))
        assert not solver.contains(a, (Fraction(5, 4), Fraction(7, 4)))
        again = solver.and_(a, solver.negative(Q))
        assert solver.subset(again, a)
        assert solver.contains(again, (Fraction(9, 10), Fraction(3, 2)))


# ---------------------------------------------------------------------------
# Properties checked over the sample points of a decomposition
# ---------------------------------------------------------------------------

class TestSampleProperties:
    def test_double_negation(self, solver):
        tree = solver.and_(solver.negative(P), solver.negative(Q))
        double = solver.not_(solver.not_(tree))
        for point, _ in solver.walk_cells(tree):
            assert solver.contains(double, point) == solver.contains(tree, point)
            assert solver.contains(solver.not_(tree), point) != solver.contains(tree, point)

    def test_matches_float_evaluation(self, solver):
        tree = solver.or_(solver.negative(P), solver.positive(Q))
        for point, _ in solver.walk_cells(tree):
            x, y = (np.float64(float(c)) for c in point)
            expected = (x**2 - y < 0) or ((x - 2)**2 - y > 0)
            assert solver.contains(tree, point) == expected


# ---------------------------------------------------------------------------
# Queries and instrumentation
# ---------------------------------------------------------------------------

class TestQueries:
    def test_outside_box(self, solver):
        tree = solver.negative(P)
        with pytest.raises(ValueError):
            solver.contains(tree, (3, 1))
        with pytest.raises(ValueError):
            solver.contains(tree, (1,))

    def test_stats(self, solver):
        solver.and_(solver.negative(P), solver.negative(Q))
        stats = solver.stats()
        assert len(stats) == 4
        assert all(isinstance(s, CacheStats) for s in stats)
        assert sum(s.requests for s in stats) > 0

    def test_zero_width_dimension(self):
        with pytest.raises(PreconditionError, match="Dimension x1"):
            TreeSolver(Box.parse([(0, 2), (1, 1)]))

    def test_settings(self, box):
        solver = TreeSolver(box, settings=Settings(cache_size=7, precision=Fraction(1, 1000)))
        assert solver.isolation.precision == Fraction(1, 1000)
        assert all(s.capacity == 7 for s in solver.stats())

    def test_incompatible_trees(self, solver):
        other = TreeSolver(Box.parse([(0, 2), (0, 2)]), gens="x y")
        with pytest.raises(IncompatibleTreesError):
            solver.and_(solver.negative(P), other.negative("x**2 - y"))


# ---------------------------------------------------------------------------
# Three dimensions: sections that neither operand contains
# ---------------------------------------------------------------------------

def random_quadric(rng):
    """x2**2 plus small random lower terms."""
    terms = ["1", "x0", "x1", "x2", "x0*x1", "x0*x2", "x1**2"]
    return " + ".join(f"({rng.randint(-3, 3)})*{t}" for t in terms) + " + x2**2"


class TestThreeDimensional:
    @pytest.fixture
    def solver3(self):
        return TreeSolver(Box.parse([(0, 2)] * 3))

    def test_crossing_planes(self, solver3):
        a = solver3.positive("x2 - x1")
        b = solver3.negative("x1 + x2 - 2")
        both = solver3.and_(a, b)
        # the planes cross over x1 = 1, a section only the combination has
        assert [m.poly for m in child(both, 0).roots] == [solver3.poly("x1 - 1")]
        assert solver3.subset(both, a)
        assert solver3.subset(both, b)
        assert solver3.contains(both, (Fraction(1, 2), Fraction(1, 4), 1))
        assert not solver3.contains(both, (Fraction(1, 2), Fraction(5, 4), 1))
        assert not solver3.contains(both, (Fraction(1, 2), Fraction(1, 4), Fraction(15, 8)))

    @pytest.mark.parametrize("seed", range(4))
    def test_random_chain(self, solver3, seed):
        rng = random.Random(seed)
        polys = [solver3.poly(random_quadric(rng)) for _ in range(3)]
        a, b, c = (solver3.positive(p) for p in polys)
        both = solver3.and_(a, b)
        chained = solver3.or_(both, solver3.not_(c))
        assert solver3.subset(both, a)
        assert solver3.subset(both, b)
        assert solver3.subset(solver3.not_(c), chained)

        checked = 0
        for _ in range(40):
            point = tuple(Fraction(rng.randint(1, 193), 97) for _ in range(3))
            values = [evaluate(p, point) for p in polys]
            if 0 in values:
                continue
            try:
                inside = solver3.contains(chained, point)
            except RootCollisionError:
                continue
            assert inside == ((values[0] > 0 and values[1] > 0) or values[2] < 0)
            checked += 1
        assert checked > 0


class TestSemiAlgSet:
    def test_operators(self, solver):
        a = SemiAlgSet.negative(solver, P)
        b = SemiAlgSet.negative(solver, Q)
        both = a & b
        assert both <= a
        assert both.subset(b)
        assert not a <= both
        assert (Fraction(9, 10), Fraction(3, 2)) in both
        assert (Fraction(1, 10), Fraction(1, 2)) in (a - b)
        assert (Fraction(1, 10), Fraction(1, 2)) in (a | b)
        assert (Fraction(11, 10), Fraction(1, 2)) in ~(a | b)
        assert (a & ~a).is_empty()
        assert (a | ~a).is_not_empty()
        assert (a & b).equivalent(b & a)

    def test_string_points(self, solver):
        a = SemiAlgSet.negative(solver, P)
        assert a.contains(("1/2", "1"))

    def test_different_boxes(self, solver):
        a = SemiAlgSet.negative(solver, P)
        other = SemiAlgSet.negative(TreeSolver(Box.parse([(0, 1), (0, 1)])), P)
        with pytest.raises(IncompatibleTreesError):
            a & other

    def test_compatible_solvers(self, solver):
        a = SemiAlgSet.negative(solver, P)
        b = SemiAlgSet.negative(TreeSolver(Box.parse([(0, 2), (0, 2)])), Q)
        assert (a & b).is_not_empty()

    def test_type_checked(self, solver):
        with pytest.raises(TypeError):
            SemiAlgSet.negative(solver, P) & 1
