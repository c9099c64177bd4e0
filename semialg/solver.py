"""Construction and boolean combination of decomposition trees over a box.

A TreeSolver fixes the bounding box and the generators. Every tree it
produces describes a subset of the box up to a set of measure zero: only the
full-dimensional cells carry a membership flag, the sections between them
belong to no cell.

Children of two trees are matched through MRoot keys (poly, ordinal), which
name the same section over every cell of the lower dimensions. Pruning
removes some sections, so counting keys rather than positions keeps the
matching valid for pruned trees.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable

from .box import Box
from .config import Settings
from .errors import IncompatibleTreesError, PreconditionError, RootCollisionError
from .isolation import RootIsolation
from .levels import (
    bound_roots,
    empty_level_list,
    intersect_cylinder,
    make_level_list,
    section_roots,
    walk_cells,
    zip_levels,
)
from .polynomials import as_poly, bound_polynomials, evaluate, level, make_gens, sign, to_fraction
from .projection import Projection, normalize
from .tree import (
    Cylinder,
    Leaf,
    Tree,
    all_members,
    any_member,
    child,
    count_cells,
    level_list,
    negate,
    similar,
)

logger = logging.getLogger(__name__)


class TreeSolver:

    def __init__(self, box: Box, gens=None, isolation: RootIsolation | None = None,
                 projection: Projection | None = None, settings: Settings | None = None):
        # cells are open, so every side needs a sample point strictly inside
        for d, interval in enumerate(box):
            if interval.low == interval.high:
                raise PreconditionError(f"Dimension x{d} of {box} has zero width {interval}")
        self.box = box
        self.dimensions = box.dimensions
        self.gens = make_gens(self.dimensions, gens)
        self.bound_pairs = bound_polynomials(box, self.gens)
        self.settings = settings if settings is not None else Settings.from_env()
        if isolation is None:
            isolation = RootIsolation(self.settings.cache_size, self.settings.precision)
        if projection is None:
            projection = Projection(self.settings.cache_size)
        self.isolation = isolation
        self.projection = projection
        self._bounds = bound_roots(box, self.gens)

    def poly(self, value):
        return as_poly(value, self.gens)

    def compatible(self, other: "TreeSolver") -> bool:
        return self.box == other.box and tuple(self.gens) == tuple(other.gens)

    def _check(self, tree: Tree):
        levels = level_list(tree)
        if len(levels) > self.dimensions:
            raise IncompatibleTreesError(f"Tree of depth {len(levels)} in a {self.dimensions}-dimensional box")
        for polys in levels:
            for poly in polys:
                if tuple(poly.gens) != tuple(self.gens):
                    raise IncompatibleTreesError(f"Polynomial over {poly.gens}, expected {self.gens}")

    # Construction

    def positive(self, poly) -> Tree:
        """The cells of the box where poly > 0."""
        return self._sign_set(poly, 1, "positive")

    def negative(self, poly) -> Tree:
        """The cells of the box where poly < 0."""
        return self._sign_set(poly, -1, "negative")

    def _sign_set(self, poly, expected: int, name: str) -> Tree:
        poly = self.poly(poly)
        start = time.time()
        levels = make_level_list(normalize([poly]), self.bound_pairs, self.projection, self.box)
        tree = self._decompose((), levels, lambda point: sign(evaluate(poly, point)) == expected)
        cells = count_cells(tree)
        tree = self.prune(tree)
        logger.info("Built %s set of %s: %d cells, %d after pruning, %.3fs",
                    name, poly.as_expr(), cells, count_cells(tree), time.time() - start)
        return tree

    def _decompose(self, point: tuple, levels, member: Callable) -> Tree:
        d = len(point)
        if d == self.dimensions:
            return Leaf(d, member(point))
        roots = section_roots(levels[d], point, self.box[d], self.isolation)
        low, high = self._bounds[d]
        delimiters = [low] + [m.root for m in roots] + [high]
        cells = tuple(
            self._decompose(point + (a.middle_value(b),), levels, member)
            for a, b in zip(delimiters, delimiters[1:])
        )
        return Cylinder(d, tuple(roots), cells)

    # Combination

    def apply(self, a: Tree, b: Tree, op: Callable[[bool, bool], bool]) -> Tree:
        """Refine a and b against each other and combine their leaves with op.

        The result is not pruned.
        """
        self._check(a)
        self._check(b)
        return self._apply((), a, b, op, ())

    def _apply(self, point: tuple, a: Tree, b: Tree, op, extra: tuple) -> Tree:
        d = len(point)
        if isinstance(a, Leaf) and isinstance(b, Leaf):
            return Leaf(d, op(a.member, b.member))
        polys = set()
        for tree in (a, b):
            if isinstance(tree, Cylinder):
                polys |= tree.polys
        if extra:
            polys |= extra[0]
        merged = section_roots(polys, point, self.box[d], self.isolation)
        below = extra[1:]

        low, high = self._bounds[d]
        roots = []
        cells = []
        index_a = index_b = 0
        for i in range(len(merged) + 1):
            child_a = self._cell(a, index_a, point)
            child_b = self._cell(b, index_b, point)
            l = merged[i - 1].root if i > 0 else low
            h = merged[i].root if i < len(merged) else high
            if isinstance(child_a, Leaf) and isinstance(child_b, Leaf):
                cells.append(Leaf(d + 1, op(child_a.member, child_b.member)))
            else:
                current, inserted = intersect_cylinder(
                    d + 1, level_list(child_a), level_list(child_b), self.bound_pairs, self.projection, self.box
                )
                # sections of the new polynomials that split this cell
                split = [
                    m for m in section_roots(current, point, self.box[d], self.isolation)
                    if m.root.compare(l) > 0 and m.root.compare(h) < 0
                ]
                deeper = zip_levels(below, inserted)
                delimiters = [l] + [m.root for m in split] + [h]
                for k, (x, y) in enumerate(zip(delimiters, delimiters[1:])):
                    if k > 0:
                        roots.append(split[k - 1])
                    cells.append(self._apply(point + (x.middle_value(y),), child_a, child_b, op, deeper))
            if i < len(merged):
                m = merged[i]
                roots.append(m)
                index_a = _advance(a, index_a, m)
                index_b = _advance(b, index_b, m)

        for tree, index in ((a, index_a), (b, index_b)):
            if isinstance(tree, Cylinder) and index != len(tree.roots):
                raise PreconditionError(
                    f"Matched {index} of {len(tree.roots)} sections at level {d} over {list(point)}"
                )
        return Cylinder(d, tuple(roots), tuple(cells))

    @staticmethod
    def _cell(tree: Tree, index: int, point) -> Tree:
        if isinstance(tree, Cylinder) and index >= len(tree.cells):
            raise PreconditionError(
                f"Section {index} does not exist at level {tree.level} over {list(point)}"
            )
        return child(tree, index)

    def and_(self, a: Tree, b: Tree) -> Tree:
        return self.prune(self.apply(a, b, lambda x, y: x and y))

    def or_(self, a: Tree, b: Tree) -> Tree:
        return self.prune(self.apply(a, b, lambda x, y: x or y))

    def not_(self, a: Tree) -> Tree:
        return negate(a)

    def difference(self, a: Tree, b: Tree) -> Tree:
        return self.prune(self.apply(a, b, lambda x, y: x and not y))

    def subset(self, a: Tree, b: Tree) -> bool:
        """True when every cell of a is also a cell of b."""
        return all_members(self.apply(a, b, lambda x, y: (not x) or y))

    def equivalent(self, a: Tree, b: Tree) -> bool:
        return self.subset(a, b) and self.subset(b, a)

    def is_empty(self, tree: Tree) -> bool:
        return not any_member(tree)

    def is_not_empty(self, tree: Tree) -> bool:
        return any_member(tree)

    # Pruning

    def prune(self, tree: Tree) -> Tree:
        """Drop sections that separate indistinguishable cells.

        A section stays when its polynomial is needed by the projection of a
        neighbouring cell, or when the cells on its two sides differ.
        """
        before = count_cells(tree)
        pruned, _ = self._prune(tree)
        logger.debug("Pruned %d cells to %d", before, count_cells(pruned))
        return pruned

    def _prune(self, tree: Tree):
        if isinstance(tree, Leaf):
            return tree, frozenset()
        results = [self._prune(cell) for cell in tree.cells]
        cells = [cell for cell, _ in results]
        if all(isinstance(cell, Leaf) for cell in cells):
            members = {cell.member for cell in cells}
            if len(members) == 1:
                return Leaf(tree.level, members.pop()), frozenset()

        roots = []
        kept = []
        for i, m in enumerate(tree.roots):
            needed = results[i][1] | results[i + 1][1]
            if any(poly in needed for poly in m.polys) or not similar(cells[i], cells[i + 1]):
                roots.append(m)
                kept.append(results[i])
        kept.append(results[-1])
        if not roots and isinstance(kept[0][0], Leaf):
            return Leaf(tree.level, kept[0][0].member), frozenset()
        pruned = Cylinder(tree.level, tuple(roots), tuple(cell for cell, _ in kept))
        return pruned, self._cell_projection(pruned, [projection for _, projection in kept])

    def _cell_projection(self, tree: Cylinder, children) -> frozenset:
        """Lower-level polynomials this cylinder needs to stay delineable."""
        d = tree.level
        result = set()
        for projection in children:
            result.update(p for p in projection if level(p) < d)
        if d == 0:
            return frozenset(result)
        polys = list(tree.polys)
        low, high = self.bound_pairs[d]
        for i, p in enumerate(polys):
            result |= self.projection.discriminant(p, d)
            result |= self.projection.resultant(p, low, d)
            result |= self.projection.resultant(p, high, d)
            for q in polys[i + 1:]:
                result |= self.projection.resultant(p, q, d)
        return frozenset(result)

    # Queries

    def contains(self, tree: Tree, point) -> bool:
        """Membership of a rational point of the box."""
        point = tuple(to_fraction(x) for x in point)
        if not self.box.contains(point):
            raise ValueError(f"Point {list(point)} is outside of {self.box}")
        while isinstance(tree, Cylinder):
            d = tree.level
            x = point[d]
            index = 0
            for m in section_roots(tree.polys, point[:d], self.box[d], self.isolation):
                if tree.keys.isdisjoint(m.keys):
                    continue
                c = m.root.compare_value(x)
                if c == 0:
                    raise RootCollisionError(x, tree.roots)
                if c < 0:
                    index += 1
            tree = tree.cells[index]
        return tree.member

    def walk_cells(self, tree: Tree):
        """Sample points of the decomposition spanned by the tree's polynomials."""
        levels = zip_levels(empty_level_list(self.dimensions), level_list(tree))
        return walk_cells(levels, self.box, self.gens, self.isolation)

    def stats(self) -> list:
        return self.isolation.stats() + self.projection.stats()


def _advance(tree: Tree, index: int, m) -> int:
    if isinstance(tree, Cylinder) and not tree.keys.isdisjoint(m.keys):
        return index + 1
    return index


@dataclass(frozen=True, eq=False)
class SemiAlgSet:
    """A tree bound to the solver that built it, with set operators."""
    solver: TreeSolver
    tree: Tree

    @classmethod
    def positive(cls, solver: TreeSolver, poly) -> "SemiAlgSet":
        return cls(solver, solver.positive(poly))

    @classmethod
    def negative(cls, solver: TreeSolver, poly) -> "SemiAlgSet":
        return cls(solver, solver.negative(poly))

    def _other(self, other: "SemiAlgSet") -> Tree:
        if not isinstance(other, SemiAlgSet):
            raise TypeError(f"Expected SemiAlgSet, got {type(other).__name__}")
        if other.solver is not self.solver and not self.solver.compatible(other.solver):
            raise IncompatibleTreesError(
                f"Sets over {self.solver.box} in {self.solver.gens} and {other.solver.box} in {other.solver.gens}"
            )
        return other.tree

    def __and__(self, other):
        return SemiAlgSet(self.solver, self.solver.and_(self.tree, self._other(other)))

    def __or__(self, other):
        return SemiAlgSet(self.solver, self.solver.or_(self.tree, self._other(other)))

    def __sub__(self, other):
        return SemiAlgSet(self.solver, self.solver.difference(self.tree, self._other(other)))

    def __invert__(self):
        return SemiAlgSet(self.solver, self.solver.not_(self.tree))

    def subset(self, other) -> bool:
        return self.solver.subset(self.tree, self._other(other))

    def __le__(self, other):
        return self.subset(other)

    def equivalent(self, other) -> bool:
        return self.solver.equivalent(self.tree, self._other(other))

    def is_empty(self) -> bool:
        return self.solver.is_empty(self.tree)

    def is_not_empty(self) -> bool:
        return self.solver.is_not_empty(self.tree)

    def contains(self, point) -> bool:
        return self.solver.contains(self.tree, point)

    def __contains__(self, point):
        return self.contains(point)

    def __repr__(self):
        return f"SemiAlgSet({count_cells(self.tree)} cells in {self.solver.box})"
