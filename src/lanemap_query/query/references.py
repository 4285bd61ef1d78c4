# query/references.py
from dataclasses import dataclass, field

from lanemap_query.domain.entities.primitives import (
    AREAS,
    CURVES,
    LANE_SEGMENTS,
    RULE_ELEMENTS,
    Area,
    Curve,
    LaneSegment,
    RuleElement,
    layer_name,
)

RESULT_LAYERS = (CURVES, LANE_SEGMENTS, AREAS, RULE_ELEMENTS)


@dataclass
class References:
    """
    Top-level objects found by a reference query, one mapping per layer.
    Keyed by id: two view objects with the same id are the same entry, and the
    first representative inserted is the one kept.
    """

    curves: dict[int, Curve] = field(default_factory=dict)
    lane_segments: dict[int, LaneSegment] = field(default_factory=dict)
    areas: dict[int, Area] = field(default_factory=dict)
    rule_elements: dict[int, RuleElement] = field(default_factory=dict)

    def _bucket(self, prim) -> dict:
        name = layer_name(prim)
        if name not in RESULT_LAYERS:
            raise TypeError(f"{type(prim).__name__} cannot be recorded as a reference")
        return getattr(self, name)

    def add(self, prim) -> bool:
        bucket = self._bucket(prim)
        if prim.id in bucket:
            return False
        bucket[prim.id] = prim
        return True

    def __contains__(self, prim) -> bool:
        try:
            return prim.id in self._bucket(prim)
        except TypeError:
            return False

    def __len__(self) -> int:
        return sum(len(getattr(self, n)) for n in RESULT_LAYERS)

    def is_empty(self) -> bool:
        return len(self) == 0

    def ids(self) -> dict[str, frozenset[int]]:
        return {n: frozenset(getattr(self, n)) for n in RESULT_LAYERS}

    def counts(self) -> dict[str, int]:
        return {n: len(getattr(self, n)) for n in RESULT_LAYERS}

    def update(self, other: "References") -> None:
        for n in RESULT_LAYERS:
            bucket = getattr(self, n)
            for id_, prim in getattr(other, n).items():
                bucket.setdefault(id_, prim)
