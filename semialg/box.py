from fractions import Fraction

from .interval import Interval


class Box:
    """An n-dimensional rational box, one closed Interval per dimension.

    A box bounds every decomposition: cells are always relative to it. Note
    that the volume grows with the number of dimensions, so [10x10] is ten
    times smaller than [10x10x10] (and the reverse for sides below 1).
    """

    __slots__ = ("data",)

    def __init__(self, *intervals: Interval):
        if not intervals:
            raise ValueError("Box needs at least one dimension")
        for interval in intervals:
            if not isinstance(interval, Interval):
                raise TypeError(f"Expected Interval, got {interval!r}")
        self.data = tuple(intervals)

    @classmethod
    def parse(cls, bounds) -> "Box":
        """Box.parse([("0", "2"), (0, "3/2")])"""
        return cls(*(Interval(Fraction(low), Fraction(high)) for low, high in bounds))

    @property
    def dimensions(self) -> int:
        return len(self.data)

    @property
    def volume(self) -> Fraction:
        result = Fraction(1)
        for interval in self.data:
            result *= interval.size
        return result

    @property
    def center(self) -> tuple:
        return tuple(interval.center for interval in self.data)

    def subdivide(self) -> list["Box"]:
        """Split this box into 2^dim boxes of half the size."""
        result = []
        for mask in range(1 << self.dimensions):
            halves = []
            for d, interval in enumerate(self.data):
                low, high = interval.split()
                # bit d of the mask: 1 = high half, 0 = low half
                halves.append(high if (mask >> d) & 1 else low)
            result.append(Box(*halves))
        return result

    def contains(self, point) -> bool:
        if len(point) != self.dimensions:
            return False
        return all(Fraction(x) in interval for x, interval in zip(point, self.data))

    def __contains__(self, point) -> bool:
        return self.contains(point)

    def __getitem__(self, d) -> Interval:
        return self.data[d]

    def __iter__(self):
        return iter(self.data)

    def __len__(self):
        return len(self.data)

    def __eq__(self, other):
        if not isinstance(other, Box):
            return NotImplemented
        return self.data == other.data

    def __hash__(self):
        return hash(self.data)

    def __repr__(self):
        return f"Box({', '.join(str(i) for i in self.data)})"
