# query/traversal.py
import time
from collections.abc import Callable
from itertools import chain

from lanemap_query.app.protocols import LaneMapView, LayerView
from lanemap_query.domain.entities.primitives import (
    POINTS,
    Area,
    Curve,
    LaneSegment,
    Point,
    RuleElement,
    layer_name,
)
from lanemap_query.query.hooks import NoopHooks, QueryHooks
from lanemap_query.query.references import References
from lanemap_query.query.visitor import RuleVisitor
from lanemap_query.runtime.types import Direction

Recurse = Callable[[object, Direction, References], None]


class TraversalEngine:
    """
    Walks ownership relations of a lane map in both directions.

    UP climbs from a primitive to whatever owns it and records the top-level
    owners (lane segments, areas, and curves or rules that nothing owns).
    DOWN expands a container into the primitives it holds; the points it
    reaches climb back UP, so a DOWN walk finds everything sharing geometry
    with the container.
    """

    def __init__(
        self,
        lane_map: LaneMapView,
        *,
        hooks: QueryHooks | None = None,
        cycle_guard: bool = True,
    ):
        self.lane_map = lane_map
        self._hooks = hooks or NoopHooks()
        self._cycle_guard = cycle_guard
        # (layer, id, direction) of every call on the current recursion path
        self._in_flight: set[tuple[str, int, Direction]] = set()
        self._dispatch: dict[type, Recurse] = {
            Point: self._recurse_point,
            Curve: self._recurse_curve,
            LaneSegment: self._recurse_lane_segment,
            Area: self._recurse_area,
            RuleElement: self._recurse_rule,
        }

    def find_references(self, prim, direction: Direction | str = Direction.UP) -> References:
        direction = Direction(direction)
        self._handler_for(prim)
        layer = layer_name(prim)
        t0 = time.perf_counter()
        self._hooks.query_start(prim, layer=layer, direction=direction.value)
        refs = References()
        self.recurse(prim, direction, refs)
        self._hooks.query_end(
            prim, counts=refs.counts(), wall_ms=(time.perf_counter() - t0) * 1000
        )
        return refs

    def recurse(self, prim, direction: Direction, refs: References) -> None:
        handler = self._handler_for(prim)
        if not self._cycle_guard:
            handler(prim, direction, refs)
            return
        key = (layer_name(prim), prim.id, direction)
        if key in self._in_flight:
            self._hooks.cycle(prim, layer=key[0], direction=direction.value)
            return
        self._in_flight.add(key)
        try:
            handler(prim, direction, refs)
        finally:
            self._in_flight.discard(key)

    # --------------- Helpers -----------------------------

    def _handler_for(self, prim) -> Recurse:
        for kind in type(prim).__mro__:
            handler = self._dispatch.get(kind)
            if handler is not None:
                return handler
        exc = TypeError(f"{type(prim).__name__} is not a primitive of any map layer")
        self._hooks.error(prim, exc=exc)
        raise exc

    def _record(self, prim, layer: LayerView, refs: References) -> None:
        name = layer_name(prim)
        # a reverse lookup may still report an id its layer no longer holds
        if not layer.exists(prim.id):
            self._hooks.discard(prim, layer=name, reason="missing")
            return
        if refs.add(prim):
            self._hooks.record(prim, layer=name)

    # --------------- Per-kind recursion -----------------------------

    def _recurse_point(self, pt: Point, direction: Direction, refs: References) -> None:
        # nothing lies below a point, so it always climbs
        owners = self.lane_map.curves.find_usages(pt)
        if not owners:
            self._hooks.discard(pt, layer=POINTS, reason="unowned")
            return
        for curve in owners:
            self.recurse(curve, Direction.UP, refs)

    def _recurse_curve(self, curve: Curve, direction: Direction, refs: References) -> None:
        if direction is Direction.DOWN:
            for pt in curve.points:
                self.recurse(pt, Direction.DOWN, refs)
            return

        m = self.lane_map
        lanes = m.lane_segments.find_usages(curve)
        areas = m.areas.find_usages(curve)
        rules = m.rule_elements.find_usages(curve)
        for owner in chain(lanes, areas, rules):
            self.recurse(owner, Direction.UP, refs)

        if not (lanes or areas or rules):
            self._record(curve, m.curves, refs)

    def _recurse_lane_segment(
        self, lane: LaneSegment, direction: Direction, refs: References
    ) -> None:
        if direction is Direction.DOWN:
            for child in (lane.left, lane.right, *lane.rules):
                self.recurse(child, Direction.DOWN, refs)
            return
        # nothing owns a lane segment
        self._record(lane, self.lane_map.lane_segments, refs)

    def _recurse_area(self, area: Area, direction: Direction, refs: References) -> None:
        if direction is Direction.DOWN:
            for child in (*area.boundary_curves(), *area.rules):
                self.recurse(child, Direction.DOWN, refs)
            return
        self._record(area, self.lane_map.areas, refs)

    def _recurse_rule(self, rule: RuleElement, direction: Direction, refs: References) -> None:
        if direction is Direction.DOWN:
            rule.accept(RuleVisitor(self.lane_map, direction, refs, self.recurse))
            return

        m = self.lane_map
        lanes = m.lane_segments.find_usages(rule)
        areas = m.areas.find_usages(rule)
        for owner in chain(lanes, areas):
            self.recurse(owner, Direction.UP, refs)

        if not (lanes or areas):
            self._record(rule, m.rule_elements, refs)


def find_references(
    prim,
    lane_map: LaneMapView,
    *,
    direction: Direction | str = Direction.UP,
    hooks: QueryHooks | None = None,
    cycle_guard: bool = True,
) -> References:
    engine = TraversalEngine(lane_map, hooks=hooks, cycle_guard=cycle_guard)
    return engine.find_references(prim, direction)
