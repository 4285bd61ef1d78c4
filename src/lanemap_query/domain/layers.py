# lanemap_query/domain/layers.py
from collections.abc import Callable, Iterable, Iterator
from itertools import chain

from lanemap_query.domain.entities.primitives import (
    AREAS,
    CURVES,
    LANE_SEGMENTS,
    LAYER_NAMES,
    POINTS,
    RULE_ELEMENTS,
    Area,
    Curve,
    LaneSegment,
    Point,
    RuleElement,
    layer_name,
)
from lanemap_query.runtime.registries import rule_roles

# (layer name, id) of a primitive an owner refers to
UsageKey = tuple[str, int]


def _key(prim) -> UsageKey:
    return layer_name(prim), prim.id


def sub_primitives(prim) -> list:
    """Direct children of a primitive, in declaration order."""
    if isinstance(prim, Point):
        return []
    if isinstance(prim, Curve):
        return list(prim.points)
    if isinstance(prim, LaneSegment):
        return [prim.left, prim.right, *prim.rules]
    if isinstance(prim, Area):
        return [*prim.boundary_curves(), *prim.rules]
    if isinstance(prim, RuleElement):
        return list(chain.from_iterable(rule_roles(prim).values()))
    raise TypeError(f"{type(prim).__name__} is not a primitive of any map layer")


class PrimitiveLayer:
    """
    One id-indexed layer of the map plus a lazily built reverse-usage index.
    The index is rebuilt on the first lookup after an insertion or attachment.
    """

    def __init__(self, name: str, children: Callable[[object], Iterable]):
        self.name = name
        self._children = children
        self._items: dict[int, object] = {}
        self._usages: dict[UsageKey, list] | None = None

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator:
        return iter(self._items.values())

    def __contains__(self, prim) -> bool:
        return self._items.get(prim.id) is not None

    def exists(self, id: int) -> bool:
        return id in self._items

    def get(self, id: int):
        try:
            return self._items[id]
        except KeyError:
            raise KeyError(f"No primitive with id {id} in layer {self.name!r}") from None

    def find_usages(self, prim) -> list:
        if self._usages is None:
            self._usages = self._build_index()
        return list(self._usages.get(_key(prim), ()))

    def invalidate(self) -> None:
        self._usages = None

    def _check(self, prim) -> bool:
        """True if ``prim`` is new to the layer, False if this exact object is held."""
        held = self._items.get(prim.id)
        if held is prim:
            return False
        if held is not None:
            raise ValueError(f"id {prim.id} already used in layer {self.name!r}")
        return True

    def _insert(self, prim) -> bool:
        if not self._check(prim):
            return False
        self._items[prim.id] = prim
        self._usages = None
        return True

    def _build_index(self) -> dict[UsageKey, list]:
        index: dict[UsageKey, list] = {}
        for owner in self._items.values():
            # an owner is listed once per child even if it refers to it twice
            for key in dict.fromkeys(_key(c) for c in self._children(owner)):
                index.setdefault(key, []).append(owner)
        return index


class LaneMap:
    def __init__(self):
        self.points = PrimitiveLayer(POINTS, lambda p: ())
        self.curves = PrimitiveLayer(CURVES, lambda c: c.points)
        self.areas = PrimitiveLayer(AREAS, lambda a: [*a.boundary_curves(), *a.rules])
        self.lane_segments = PrimitiveLayer(
            LANE_SEGMENTS, lambda ll: [ll.left, ll.right, *ll.rules]
        )
        self.rule_elements = PrimitiveLayer(RULE_ELEMENTS, sub_primitives)

    def layer(self, name: str) -> PrimitiveLayer:
        if name not in LAYER_NAMES:
            raise ValueError(f"Unknown layer {name!r}")
        return getattr(self, name)

    def add(self, prim) -> None:
        """
        Insert a primitive together with every primitive it refers to.
        The whole sub-tree is checked first; on an id clash nothing is inserted.
        """
        pending: dict[UsageKey, object] = {}
        self._collect(prim, pending)
        for (name, _), p in pending.items():
            self.layer(name)._insert(p)

    def add_all(self, prims: Iterable) -> None:
        for p in prims:
            self.add(p)

    def attach_rule(self, owner: LaneSegment | Area, rule: RuleElement) -> None:
        if not isinstance(owner, (LaneSegment, Area)):
            raise TypeError(f"rules attach to lane segments or areas, not {type(owner).__name__}")
        self.add(rule)
        if all(r.id != rule.id for r in owner.rules):
            owner.rules.append(rule)
        self.layer(layer_name(owner)).invalidate()

    def _collect(self, prim, pending: dict[UsageKey, object]) -> None:
        key = _key(prim)
        queued = pending.get(key)
        if queued is not None:
            if queued is not prim:
                raise ValueError(f"id {prim.id} used twice in layer {key[0]!r}")
            return
        if not self.layer(key[0])._check(prim):
            return
        pending[key] = prim
        for child in sub_primitives(prim):
            self._collect(child, pending)

    def __len__(self) -> int:
        return sum(len(self.layer(n)) for n in LAYER_NAMES)
