"""Closed rational intervals [low, high] with exact interval arithmetic."""

from fractions import Fraction

from .errors import EmptyIntervalError
from .polynomials import to_fraction


class Interval:
    """Immutable closed interval of Fractions."""

    __slots__ = ("low", "high")

    def __init__(self, low, high):
        low = Fraction(low)
        high = Fraction(high)
        if low > high:
            raise EmptyIntervalError(low, high)
        object.__setattr__(self, "low", low)
        object.__setattr__(self, "high", high)

    def __setattr__(self, name, value):
        raise AttributeError("Interval is immutable")

    @classmethod
    def point(cls, value) -> "Interval":
        return cls(value, value)

    def __iter__(self):
        yield self.low
        yield self.high

    def __eq__(self, other):
        if not isinstance(other, Interval):
            return NotImplemented
        return self.low == other.low and self.high == other.high

    def __hash__(self):
        return hash((self.low, self.high))

    def __repr__(self):
        return f"Interval({self.low}, {self.high})"

    def __str__(self):
        return f"[{self.low}, {self.high}]"

    @property
    def size(self) -> Fraction:
        return self.high - self.low

    @property
    def center(self) -> Fraction:
        return self.low + self.size / 2

    @property
    def has_zero(self) -> bool:
        return self.low <= 0 <= self.high

    def is_number(self) -> bool:
        return self.low == self.high

    def __contains__(self, value) -> bool:
        return self.low <= value <= self.high

    def intersects(self, other: "Interval") -> bool:
        return self.high >= other.low and self.low <= other.high

    def intersect(self, other: "Interval") -> "Interval | None":
        low = max(self.low, other.low)
        high = min(self.high, other.high)
        if low > high:
            return None
        return Interval(low, high)

    def split(self) -> tuple["Interval", "Interval"]:
        middle = self.center
        return Interval(self.low, middle), Interval(middle, self.high)

    def __add__(self, other):
        if isinstance(other, Interval):
            return Interval(self.low + other.low, self.high + other.high)
        other = Fraction(other)
        return Interval(self.low + other, self.high + other)

    __radd__ = __add__

    def __neg__(self):
        return Interval(-self.high, -self.low)

    def __sub__(self, other):
        if isinstance(other, Interval):
            return Interval(self.low - other.high, self.high - other.low)
        other = Fraction(other)
        return Interval(self.low - other, self.high - other)

    def __rsub__(self, other):
        return (-self) + other

    def __mul__(self, other):
        if isinstance(other, Interval):
            products = (
                self.low * other.low, self.low * other.high,
                self.high * other.low, self.high * other.high,
            )
            return Interval(min(products), max(products))
        other = Fraction(other)
        if other < 0:
            return Interval(self.high * other, self.low * other)
        return Interval(self.low * other, self.high * other)

    __rmul__ = __mul__

    def __truediv__(self, other):
        if isinstance(other, Interval):
            if other.has_zero:
                raise ZeroDivisionError(f"Zero in division {self} / {other}")
            return self * Interval(1 / other.high, 1 / other.low)
        other = Fraction(other)
        if other == 0:
            raise ZeroDivisionError(f"Division of {self} by zero")
        return self * (1 / other)

    def __pow__(self, exponent: int):
        if exponent < 0:
            raise ValueError(f"Negative exponent {exponent}")
        if exponent == 0:
            return Interval(1, 1)
        low_power = self.low ** exponent
        high_power = self.high ** exponent
        if exponent % 2 == 1:
            return Interval(low_power, high_power)
        # even power: the minimum is 0 when the interval straddles zero
        if self.has_zero:
            return Interval(0, max(low_power, high_power))
        return Interval(min(low_power, high_power), max(low_power, high_power))


def evaluate_interval(poly, intervals) -> Interval:
    """Interval enclosure of a multivariate sympy Poly over a box."""
    powers: dict[tuple[int, int], Interval] = {}

    def power(variable, exponent):
        key = (variable, exponent)
        if key not in powers:
            powers[key] = intervals[variable] ** exponent
        return powers[key]

    result = Interval(0, 0)
    for monomial, coefficient in poly.terms():
        term = Interval(1, 1)
        for variable, exponent in enumerate(monomial):
            if exponent:
                term = term * power(variable, exponent)
        result = result + term * to_fraction(coefficient)
    return result
