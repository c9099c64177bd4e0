"""Exact semi-algebraic sets over rational boxes.

Sets are cylindrical decompositions (trees of isolated real roots) of sign
conditions on polynomials with rational coefficients. They support boolean
combination, pruning and exact membership queries.
"""

from .box import Box
from .cache import CacheStats, LRUCache
from .config import Settings, configure_logging
from .errors import (
    EmptyIntervalError,
    IncompatibleTreesError,
    PreconditionError,
    RefinementError,
    RootCollisionError,
    SemialgError,
    UnorderedRootsError,
)
from .interval import Interval
from .isolation import RootIsolation, isolate_roots_in_bounds
from .projection import Projection
from .root import MRoot, Root
from .solver import SemiAlgSet, TreeSolver
from .tree import Cylinder, Leaf, Tree

__all__ = [
    "Box", "CacheStats", "Cylinder", "EmptyIntervalError", "IncompatibleTreesError", "Interval",
    "LRUCache", "Leaf", "MRoot", "PreconditionError", "Projection", "RefinementError", "Root",
    "RootCollisionError", "RootIsolation", "SemiAlgSet", "SemialgError", "Settings", "Tree",
    "TreeSolver", "UnorderedRootsError", "configure_logging", "isolate_roots_in_bounds",
]
