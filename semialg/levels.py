"""Level lists: the polynomials that delimit cells at each coordinate level.

A level list is a tuple of frozensets of Polys; entry d holds polynomials of
level d, i.e. polynomials whose highest variable is x_d. A CAD over a box is
obtained by isolating, at level d, the roots of entry d evaluated at a sample
point of the cell below, using the midpoints between consecutive roots (and
the box bounds) as the next sample coordinates.
"""

import logging
from dataclasses import dataclass, field
from fractions import Fraction

from sympy import QQ, Poly

from .errors import PreconditionError
from .interval import Interval
from .polynomials import level, show, to_rational, univariate
from .projection import can_have_zero
from .root import MRoot, Root

logger = logging.getLogger(__name__)


def empty_level_list(size: int) -> tuple:
    return tuple(frozenset() for _ in range(size))


def zip_levels(a, b) -> tuple:
    """Element-wise union; the tail of the longer list is kept as is."""
    if len(a) < len(b):
        a, b = b, a
    return tuple(a[i] | b[i] if i < len(b) else a[i] for i in range(len(a)))


def polynomial_level(poly: Poly) -> int:
    """Index of the highest variable of poly, -1 for constants."""
    return level(poly)


def make_level_list(polys, bound_pairs, projection, box) -> tuple:
    """Close polys under projection, from the top level down to level 0.

    Every level-d polynomial contributes its discriminant and its resultants
    with the two bound polynomials of level d; every pair of level-d
    polynomials contributes their resultant. Polynomials that provably do not
    vanish in the box are dropped.
    """
    dimensions = len(bound_pairs)
    levels = [frozenset()] * dimensions
    pending = {p for p in polys if level(p) >= 0 and can_have_zero(p, box)}
    for d in reversed(range(dimensions)):
        current = [p for p in pending if level(p) == d]
        carry = {p for p in pending if level(p) < d}
        levels[d] = frozenset(current)
        if d == 0:
            break
        projected = set()
        low, high = bound_pairs[d]
        for i, p in enumerate(current):
            projected |= projection.discriminant(p, d)
            projected |= projection.resultant(p, low, d)
            projected |= projection.resultant(p, high, d)
            for q in current[i + 1:]:
                projected |= projection.resultant(p, q, d)
        pending = carry | {p for p in projected if can_have_zero(p, box)}
    logger.debug("Level list sizes: %s", [len(l) for l in levels])
    return tuple(levels)


def intersect_cylinder(root_level, a, b, bound_pairs, projection, box):
    """Extra polynomials that make two level lists refinable against each other.

    a and b are level lists whose entry 0 is at level root_level. Returns
    (current, inserted): current holds the new polynomials of level
    root_level - 1 (they split the cell that holds both lists) and inserted[i]
    the new polynomials of level root_level + i that neither list contains.
    """
    inserted = [set() for _ in range(max(len(a), len(b)))]

    def intersect(i):
        # from here on only one list has structure, nothing to intersect
        if i >= len(a) or i >= len(b):
            return set()
        lev = root_level + i
        left = a[i]
        right = b[i]
        current = left | right
        below = intersect(i + 1) - current
        carry = {p for p in below if level(p) < lev}
        insert = list(below - carry)
        inserted[i].update(insert)
        result = set(carry)
        low, high = bound_pairs[lev]
        for k, p in enumerate(insert):
            result |= projection.discriminant(p, lev)
            result |= projection.resultant(p, low, lev)
            result |= projection.resultant(p, high, lev)
            for c in current:
                result |= projection.resultant(p, c, lev)
            for q in insert[k + 1:]:
                result |= projection.resultant(p, q, lev)
        # pairs with at least one polynomial private to one side
        for l in left:
            for r in right:
                if l in right and r in left:
                    continue
                result |= projection.resultant(l, r, lev)
        return {p for p in result if can_have_zero(p, box)}

    below = intersect(0)
    current = frozenset(p for p in below if level(p) == root_level - 1)
    if len(current) != len(below):
        logger.debug("Dropped %d projections below level %d", len(below) - len(current), root_level - 1)
    return current, tuple(frozenset(s) for s in inserted)


def bound_roots(box, gens) -> list[tuple[Root, Root]]:
    """Rational roots of x_d - low_d and x_d - high_d as univariate polynomials."""
    result = []
    for d, interval in enumerate(box):
        low = Poly(gens[d] - to_rational(interval.low), gens[d], domain=QQ)
        high = Poly(gens[d] - to_rational(interval.high), gens[d], domain=QQ)
        result.append((Root.rational(low), Root.rational(high)))
    return result


def section_roots(polys, point, bounds: Interval, isolation) -> list[MRoot]:
    """Sorted roots, strictly inside bounds, of polys over the given point.

    Each root carries its ordinal among the in-box roots of its polynomial.
    Roots of different polynomials that coincide are kept once; the others
    are recorded as aliases of the kept one. Roots equal to a bound are
    excluded once they are confirmed to be exact; a root outside bounds
    raises PreconditionError.
    """
    d = len(point)
    tagged = []
    for poly in polys:
        if level(poly) != d:
            logger.debug("Skipping %s: level %d at coordinate %d", show(poly), level(poly), d)
            continue
        roots = isolation.isolate_roots_in_bounds([univariate(poly, point)], bounds)
        inside = []
        for r in roots:
            above_low = r.compare_value(bounds.low)
            below_high = -r.compare_value(bounds.high)
            if above_low < 0 or below_high < 0:
                raise PreconditionError(f"Root {r} of {show(poly)} crosses the boundary of {bounds}")
            if above_low == 0 or below_high == 0:
                # the bound itself delimits the first or last cell
                logger.debug("Boundary root %s of %s excluded", r, show(poly))
                continue
            inside.append(r)
        tagged.extend(MRoot(r, i, poly) for i, r in enumerate(inside))
    tagged.sort()
    result = []
    for m in tagged:
        if result and result[-1].root.compare(m.root) == 0:
            logger.warning("Coincident roots of %s and %s at %s", show(result[-1].poly), show(m.poly), list(point))
            result[-1] = result[-1].with_alias(m.key)
            continue
        result.append(m)
    return result


def sample_points(roots, low: Root, high: Root) -> list[Fraction]:
    """Midpoints of the len(roots) + 1 open cells delimited by roots and bounds."""
    delimiters = [low] + [m.root for m in roots] + [high]
    return [a.middle_value(b) for a, b in zip(delimiters, delimiters[1:])]


@dataclass
class CellWalk:
    """Explicit depth-first traversal of the CAD defined by a level list.

    Each next() returns (sample_point, coordinates) in lexicographic order of
    the coordinates. The work stack holds partial cells of lower dimension,
    so only one branch of the decomposition is expanded at a time, and the
    walk can be stopped and resumed at any cell.
    """
    levels: tuple
    box: object
    bounds: list
    isolation: object
    visited: int = field(default=0, init=False)
    stack: list = field(default_factory=lambda: [((), ())], init=False, repr=False)

    def __iter__(self):
        return self

    def __next__(self):
        dimensions = len(self.levels)
        while self.stack:
            point, coordinates = self.stack.pop()
            d = len(point)
            if d == dimensions:
                self.visited += 1
                return point, coordinates
            roots = section_roots(self.levels[d], point, self.box[d], self.isolation)
            low, high = self.bounds[d]
            samples = sample_points(roots, low, high)
            for i in reversed(range(len(samples))):
                self.stack.append((point + (samples[i],), coordinates + (i,)))
        raise StopIteration


def walk_cells(levels, box, gens, isolation):
    return CellWalk(tuple(levels), box, bound_roots(box, gens), isolation)
