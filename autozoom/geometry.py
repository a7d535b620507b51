import math
from dataclasses import dataclass


def finite_or_zero(value: float) -> float:
    """Return value as float, or 0.0 when it is NaN/inf or not numeric"""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def clamp(value: float, lower: float, upper: float) -> float:
    return min(max(value, lower), upper)


@dataclass(frozen=True)
class Point:
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> "Point":
        return Point(self.x * factor, self.y * factor)

    def __truediv__(self, divisor: float) -> "Point":
        return Point(self.x / divisor, self.y / divisor)

    @property
    def magnitude(self) -> float:
        return math.hypot(self.x, self.y)

    def scaled_to(self, length: float) -> "Point":
        """Same direction, given length (zero vector stays zero)"""
        current = self.magnitude
        if current <= 0:
            return Point()
        return self * (length / current)

    def sanitized(self) -> "Point":
        return Point(finite_or_zero(self.x), finite_or_zero(self.y))

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}

    @staticmethod
    def from_dict(d: dict) -> "Point":
        return Point(x=float(d["x"]), y=float(d["y"]))


@dataclass(frozen=True)
class Size:
    width: float = 0.0
    height: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not (self.width > 0 and self.height > 0)

    @property
    def center(self) -> Point:
        return Point(max(self.width, 0.0) / 2, max(self.height, 0.0) / 2)

    def clamp_point(self, point: Point) -> Point:
        """Pin a point into [0, width] x [0, height]"""
        return Point(
            clamp(point.x, 0.0, max(0.0, self.width)),
            clamp(point.y, 0.0, max(0.0, self.height)),
        )

    def to_dict(self) -> dict:
        return {"width": self.width, "height": self.height}

    @staticmethod
    def from_dict(d: dict) -> "Size":
        return Size(width=float(d["width"]), height=float(d["height"]))


@dataclass(frozen=True)
class Rect:
    origin: Point = Point()
    size: Size = Size()

    @property
    def min_x(self) -> float:
        return self.origin.x

    @property
    def min_y(self) -> float:
        return self.origin.y

    @property
    def max_x(self) -> float:
        return self.origin.x + self.size.width

    @property
    def max_y(self) -> float:
        return self.origin.y + self.size.height
