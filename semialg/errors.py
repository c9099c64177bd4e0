"""Exception hierarchy of the decomposition engine.

Only invariant violations are exceptions here. Empty sets and polynomials
without roots are ordinary values. Arithmetic errors raised by sympy are not
wrapped.
"""


class SemialgError(Exception):
    """Base class for all errors raised by semialg."""


class PreconditionError(SemialgError):
    """A fatal violation of an internal invariant (a programming error)."""


class EmptyIntervalError(PreconditionError):
    def __init__(self, low, high):
        super().__init__(f"Empty interval [{low}, {high}]")
        self.low = low
        self.high = high


class RefinementError(PreconditionError):
    """An isolating interval no longer contains exactly one root."""


class UnorderedRootsError(PreconditionError):
    def __init__(self, first, second):
        super().__init__(f"Cannot find middle value in [{first}, {second}] (empty interval)")
        self.first = first
        self.second = second


class RootCollisionError(PreconditionError):
    def __init__(self, value, roots):
        super().__init__(f"The point {value} is also a root in {roots}")
        self.value = value
        self.roots = roots


class IncompatibleTreesError(PreconditionError):
    """Two trees were built against different boxes or generators."""
