from dataclasses import dataclass, field

import pytest

from lanemap_query.domain.entities.primitives import Area, Curve, LaneSegment, Point, RuleElement
from lanemap_query.domain.entities.rules import (
    AllWayStop,
    AutowareTrafficLight,
    GenericRule,
    RightOfWay,
    SpeedLimit,
)
from lanemap_query.domain.layers import LaneMap
from lanemap_query.query.references import References
from lanemap_query.query.traversal import find_references
from lanemap_query.query.visitor import RuleVisitor
from lanemap_query.runtime.registries import register_rule_kind, rule_roles
from lanemap_query.runtime.types import Direction


def _curve(cid: int) -> Curve:
    return Curve(cid, [Point(cid * 10, 0.0, 0.0), Point(cid * 10 + 1, 1.0, 0.0)])


# ---- a rule kind unknown to the library ----
@dataclass(eq=False)
class Crossing(RuleElement):
    zebra: list[Curve] = field(default_factory=list)
    guarded: list[LaneSegment] = field(default_factory=list)


@register_rule_kind(Crossing)
def _crossing_roles(rule: Crossing):
    return {"zebra": rule.zebra, "guarded": rule.guarded}


@dataclass(eq=False)
class Unregistered(RuleElement):
    pass


def _collecting_visitor(seen: list) -> RuleVisitor:
    def forward(prim, direction, refs):
        seen.append((prim.id, direction))

    return RuleVisitor(LaneMap(), Direction.DOWN, References(), forward)


def test_visitor_forwards_every_role_primitive_downwards():
    l1 = LaneSegment(1, _curve(1), _curve(2))
    l2 = LaneSegment(2, _curve(3), _curve(4))
    stop = _curve(5)
    row = RightOfWay(id=100, right_of_way=[l1], yield_lanes=[l2], stop_line=stop)
    seen = []
    row.accept(_collecting_visitor(seen))
    assert seen == [(1, Direction.DOWN), (2, Direction.DOWN), (5, Direction.DOWN)]


def test_subclass_without_handler_uses_base_roles():
    sl = SpeedLimit(id=1, sign_type="de205", signs=[_curve(1)], ref_lines=[_curve(2)])
    assert set(rule_roles(sl)) == {"refers", "ref_line", "cancels", "cancel_line"}


def test_subclass_handler_extends_base_roles():
    tl = AutowareTrafficLight(id=1, lights=[_curve(1)], light_bulbs=[_curve(2)])
    roles = rule_roles(tl)
    assert [c.id for c in roles["light_bulbs"]] == [2]
    assert [c.id for c in roles["refers"]] == [1]
    assert roles["ref_line"] == []


def test_generic_rule_exposes_its_parameters():
    pt, area = Point(1, 0.0, 0.0), Area(2, outer=[_curve(3)])
    g = GenericRule(id=9, parameters={"anchor": [pt], "zone": [area]})
    seen = []
    g.accept(_collecting_visitor(seen))
    assert [i for i, _ in seen] == [1, 2]


def test_unregistered_kind_is_rejected():
    with pytest.raises(ValueError):
        rule_roles(Unregistered(id=1))
    with pytest.raises(ValueError):
        LaneMap().add(Unregistered(id=1))


def test_new_kind_needs_only_a_handler():
    zebra = _curve(1)
    crossing = Crossing(id=50, zebra=[zebra])
    lane = LaneSegment(10, _curve(2), _curve(3), rules=[crossing])
    m = LaneMap()
    m.add(lane)

    assert m.rule_elements.find_usages(zebra) == [crossing]
    assert set(find_references(zebra, m).lane_segments) == {10}


def test_down_walk_through_rule_reaches_guarded_lanes():
    guarded = LaneSegment(11, _curve(4), _curve(5))
    crossing = Crossing(id=50, zebra=[_curve(1)], guarded=[guarded])
    lane = LaneSegment(10, _curve(2), _curve(3), rules=[crossing])
    m = LaneMap()
    m.add(lane)

    refs = find_references(lane, m, direction=Direction.DOWN)
    assert set(refs.lane_segments) == {10, 11}


def test_all_way_stop_roles():
    lane = LaneSegment(1, _curve(1), _curve(2))
    aws = AllWayStop(id=7, lanes=[lane], stop_lines=[_curve(3)], signs=[_curve(4)])
    roles = rule_roles(aws)
    assert [x.id for x in roles["yield"]] == [1]
    assert [x.id for x in roles["ref_line"]] == [3]
    assert [x.id for x in roles["refers"]] == [4]
