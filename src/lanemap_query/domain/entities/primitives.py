# domain/entities/primitives.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lanemap_query.query.visitor import RuleVisitor


# Core map primitives. Equality is identity; membership in result sets is by id.
@dataclass(frozen=True, eq=False)
class Point:
    id: int
    x: float  # meters in projected CRS
    y: float
    z: float = 0.0


@dataclass(eq=False)
class Curve:
    id: int
    points: list[Point]
    attributes: dict[str, str] = field(default_factory=dict)

    def __iter__(self):
        return iter(self.points)

    def __len__(self) -> int:
        return len(self.points)


@dataclass(eq=False)
class RuleElement:
    """Base of the regulatory rule family; concrete kinds live in ``rules.py``."""

    id: int
    attributes: dict[str, str] = field(default_factory=dict)

    def accept(self, visitor: RuleVisitor) -> None:
        visitor.visit(self)


@dataclass(eq=False)
class LaneSegment:
    id: int
    left: Curve
    right: Curve
    rules: list[RuleElement] = field(default_factory=list)
    attributes: dict[str, str] = field(default_factory=dict)

    @property
    def subtype(self) -> str | None:
        return self.attributes.get("subtype")

    def rules_as(self, kind: type) -> list:
        return [r for r in self.rules if isinstance(r, kind)]


@dataclass(eq=False)
class Area:
    id: int
    outer: list[Curve]
    inner: list[list[Curve]] = field(default_factory=list)
    rules: list[RuleElement] = field(default_factory=list)
    attributes: dict[str, str] = field(default_factory=dict)

    def boundary_curves(self) -> list[Curve]:
        """Outer loop followed by every inner loop, flattened."""
        out = list(self.outer)
        for loop in self.inner:
            out.extend(loop)
        return out


Primitive = Point | Curve | LaneSegment | Area | RuleElement

# ---- layer table -------------------------------------------------------

POINTS = "points"
CURVES = "curves"
AREAS = "areas"
LANE_SEGMENTS = "lane_segments"
RULE_ELEMENTS = "rule_elements"

LAYER_NAMES = (POINTS, CURVES, AREAS, LANE_SEGMENTS, RULE_ELEMENTS)

_LAYER_BY_KIND: dict[type, str] = {
    Point: POINTS,
    Curve: CURVES,
    Area: AREAS,
    LaneSegment: LANE_SEGMENTS,
    RuleElement: RULE_ELEMENTS,
}


def layer_name(prim) -> str:
    for kind in type(prim).__mro__:
        name = _LAYER_BY_KIND.get(kind)
        if name is not None:
            return name
    raise TypeError(f"{type(prim).__name__} is not a primitive of any map layer")
