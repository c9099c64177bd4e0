"""Cylindrical decomposition trees.

A Tree is either a Leaf, meaning the whole remaining region is in (member)
or out of the set, or a Cylinder that splits coordinate `level` into
len(roots) + 1 open cells, cells[i] lying strictly between roots[i-1] and
roots[i] (the box bounds stand in for the missing ends). Both variants are
immutable; the algorithms below dispatch on the variant explicitly.
"""

from dataclasses import dataclass
from functools import cached_property
from typing import Union

from .errors import PreconditionError
from .levels import zip_levels
from .polynomials import show


@dataclass(frozen=True)
class Leaf:
    level: int
    member: bool


@dataclass(frozen=True, eq=False)
class Cylinder:
    level: int
    roots: tuple
    cells: tuple

    def __post_init__(self):
        if len(self.cells) != len(self.roots) + 1:
            raise PreconditionError(
                f"Cylinder at level {self.level} has {len(self.roots)} roots but {len(self.cells)} cells"
            )

    @cached_property
    def polys(self) -> frozenset:
        return frozenset(poly for m in self.roots for poly in m.polys)

    @cached_property
    def keys(self) -> frozenset:
        return frozenset(key for m in self.roots for key in m.keys)

    @cached_property
    def level_list(self) -> tuple:
        """Polynomials used by this cylinder and all its descendants, per level."""
        below = ()
        for cell in self.cells:
            below = zip_levels(below, level_list(cell))
        return (self.polys,) + below


Tree = Union[Leaf, Cylinder]


def level_list(tree: Tree) -> tuple:
    if isinstance(tree, Leaf):
        return ()
    return tree.level_list


def tree_roots(tree: Tree) -> tuple:
    if isinstance(tree, Leaf):
        return ()
    return tree.roots


def child(tree: Tree, index: int) -> Tree:
    """The index-th cell; a leaf stands for every cell of its region."""
    if isinstance(tree, Leaf):
        return tree
    return tree.cells[index]


def negate(tree: Tree) -> Tree:
    if isinstance(tree, Leaf):
        return Leaf(tree.level, not tree.member)
    return Cylinder(tree.level, tree.roots, tuple(negate(cell) for cell in tree.cells))


def any_member(tree: Tree) -> bool:
    if isinstance(tree, Leaf):
        return tree.member
    return any(any_member(cell) for cell in tree.cells)


def all_members(tree: Tree) -> bool:
    if isinstance(tree, Leaf):
        return tree.member
    return all(all_members(cell) for cell in tree.cells)


def similar(a: Tree, b: Tree) -> bool:
    """Structural identity: same shape, same root sections, same leaves."""
    if isinstance(a, Leaf) or isinstance(b, Leaf):
        return isinstance(a, Leaf) and isinstance(b, Leaf) and a.member == b.member
    if len(a.cells) != len(b.cells):
        return False
    if any(x.key != y.key for x, y in zip(a.roots, b.roots)):
        return False
    return all(similar(x, y) for x, y in zip(a.cells, b.cells))


def count_cells(tree: Tree) -> int:
    if isinstance(tree, Leaf):
        return 1
    return sum(count_cells(cell) for cell in tree.cells)


def depth(tree: Tree) -> int:
    if isinstance(tree, Leaf):
        return 0
    return 1 + max(depth(cell) for cell in tree.cells)


def describe(tree: Tree, indent: int = 0) -> str:
    pad = "  " * indent
    if isinstance(tree, Leaf):
        return f"{pad}{'in' if tree.member else 'out'}"
    lines = [f"{pad}x{tree.level}:"]
    for i, cell in enumerate(tree.cells):
        lines.append(describe(cell, indent + 1))
        if i < len(tree.roots):
            m = tree.roots[i]
            lines.append(f"{pad}  -- root #{m.ordinal} of {show(m.poly)} ~ {m.root.approximate():.6g}")
    return "\n".join(lines)
