#!/usr/bin/env python3
"""Two-parabola experiment: boolean combinations of exact semi-algebraic sets.

Builds A = {x1 > x0^2} and B = {x1 > (x0 - 2)^2} over the box [0,2] x [0,2],
combines them, and cross-checks exact membership against a floating point
grid evaluation. Then times repeated construction and combination.

Run with: uv run --with numpy --with sympy scripts/parabola_experiment.py [iterations]
"""

import sys
import time
from fractions import Fraction

try:
    import numpy as np
except ImportError:
    print("Run with: uv run --with numpy --with sympy scripts/parabola_experiment.py")
    sys.exit(1)

from semialg import Box, SemiAlgSet, TreeSolver, configure_logging
from semialg.tree import count_cells, depth

P = "x0**2 - x1"
Q = "(x0 - 2)**2 - x1"


def grid_mismatches(s, inside, n=7):
    """Compare exact membership with a float predicate on an n x n grid.

    For n = 7 no grid point lies on x0 = 1; points numerically on a parabola
    are skipped."""
    mismatches = 0
    checked = 0
    for i in range(n):
        for j in range(n):
            x = Fraction(6 * i + 1, 3 * n)
            y = Fraction(6 * j + 2, 3 * n)
            fx, fy = float(x), float(y)
            if abs(fy - fx ** 2) < 1e-9 or abs(fy - (fx - 2) ** 2) < 1e-9:
                continue
            checked += 1
            if s.contains((x, y)) != inside(np.float64(fx), np.float64(fy)):
                mismatches += 1
    return checked, mismatches


def experiment(iterations=3):
    print(f"\n{'='*70}")
    print("TWO PARABOLAS over [0,2] x [0,2]")
    print(f"{'='*70}")

    solver = TreeSolver(Box.parse([(0, 2), (0, 2)]))

    t0 = time.time()
    a = SemiAlgSet.negative(solver, P)
    b = SemiAlgSet.negative(solver, Q)
    t_build = time.time() - t0
    print(f"  A: {count_cells(a.tree)} cells, depth {depth(a.tree)}")
    print(f"  B: {count_cells(b.tree)} cells, depth {depth(b.tree)}")
    print(f"  Construction: {t_build:.3f}s", flush=True)

    t0 = time.time()
    both = a & b
    either = a | b
    only_a = a - b
    t_combine = time.time() - t0
    print(f"\n  A & B: {count_cells(both.tree)} cells, empty={both.is_empty()}")
    print(f"  A | B: {count_cells(either.tree)} cells, empty={either.is_empty()}")
    print(f"  A - B: {count_cells(only_a.tree)} cells, empty={only_a.is_empty()}")
    print(f"  A & B <= A: {both <= a}")
    print(f"  A & B <= B: {both <= b}")
    print(f"  A <= A & B: {a <= both}")
    print(f"  Combination: {t_combine:.3f}s", flush=True)

    checked, mismatches = grid_mismatches(
        both, lambda x, y: (x ** 2 - y < 0) and ((x - 2) ** 2 - y < 0)
    )
    print(f"\n  Grid cross-check of A & B: {checked} points, {mismatches} mismatches")

    times = []
    for _ in range(iterations):
        t0 = time.time()
        fresh = TreeSolver(Box.parse([(0, 2), (0, 2)]))
        x = SemiAlgSet.negative(fresh, P)
        y = SemiAlgSet.negative(fresh, Q)
        (x & y).is_not_empty()
        (x | y).is_not_empty()
        times.append(time.time() - t0)
    if times:
        print(f"\n  {iterations} cold iterations: mean {np.mean(times):.3f}s, max {np.max(times):.3f}s")

    for s in solver.stats():
        print(f"  cache {s.name:>16s}: {s.size:6d} entries, hit rate {s.hit_rate:.2f}")

    return {
        'cells_a': count_cells(a.tree), 'cells_b': count_cells(b.tree),
        'cells_and': count_cells(both.tree), 'and_empty': both.is_empty(),
        'and_subset_a': both <= a, 'and_subset_b': both <= b,
        'checked': checked, 'mismatches': mismatches, 'times': times,
    }


def main():
    iterations = int(sys.argv[1]) if len(sys.argv) > 1 else 3
    configure_logging()
    r = experiment(iterations)
    if r['mismatches']:
        print(f"\n  WARNING: {r['mismatches']} grid points disagree with exact membership")


if __name__ == "__main__":
    main()
