import pytest
from sympy import QQ, Poly

from semialg import Box, TreeSolver
from semialg.polynomials import make_gens


@pytest.fixture
def gens():
    return make_gens(2)


@pytest.fixture
def poly(gens):
    """Build a Poly over QQ in the two-dimensional generators."""
    def make(expr):
        return Poly(expr, *gens, domain=QQ)
    return make


@pytest.fixture
def box():
    return Box.parse([(0, 2), (0, 2)])


@pytest.fixture
def solver(box):
    return TreeSolver(box)
