import pytest

from lanemap_query.domain.entities.primitives import Area, Curve, LaneSegment, Point, layer_name
from lanemap_query.domain.entities.rules import TrafficLight
from lanemap_query.domain.layers import LaneMap


@pytest.fixture
def lane() -> LaneSegment:
    left = Curve(1, [Point(11, 0.0, 0.0), Point(12, 10.0, 0.0)])
    right = Curve(2, [Point(21, 0.0, 3.5), Point(22, 10.0, 3.5)])
    return LaneSegment(10, left, right, attributes={"subtype": "road"})


def test_add_inserts_sub_primitives(lane):
    m = LaneMap()
    m.add(lane)
    assert len(m.lane_segments) == 1
    assert len(m.curves) == 2
    assert len(m.points) == 4
    assert m.points.exists(21)
    assert len(m) == 7


def test_readding_same_object_is_noop_but_id_clash_raises(lane):
    m = LaneMap()
    m.add(lane)
    m.add(lane)
    assert len(m.lane_segments) == 1
    with pytest.raises(ValueError):
        m.add(Curve(1, []))


def test_usages_by_layer(lane):
    m = LaneMap()
    m.add(lane)
    p = lane.left.points[0]
    assert m.curves.find_usages(p) == [lane.left]
    assert m.lane_segments.find_usages(lane.right) == [lane]
    assert m.areas.find_usages(lane.right) == []
    assert m.rule_elements.find_usages(lane.right) == []


def test_closed_loop_lists_owner_once():
    p0 = Point(1, 0.0, 0.0)
    ring = Curve(5, [p0, Point(2, 1.0, 0.0), Point(3, 1.0, 1.0), p0])
    m = LaneMap()
    m.add(Area(7, outer=[ring]))
    assert m.curves.find_usages(p0) == [ring]
    assert m.areas.find_usages(ring) == [m.areas.get(7)]


def test_attach_rule_refreshes_usages(lane):
    m = LaneMap()
    m.add(lane)
    tl = TrafficLight(id=100, stop_line=Curve(3, [Point(31, 10.0, 0.0)]))
    assert m.lane_segments.find_usages(tl) == []

    m.attach_rule(lane, tl)
    m.attach_rule(lane, tl)
    assert lane.rules == [tl]
    assert m.lane_segments.find_usages(tl) == [lane]
    assert m.rule_elements.exists(100)
    assert m.curves.exists(3)


def test_attach_rule_with_clashing_id_leaves_owner_untouched(lane):
    m = LaneMap()
    m.add(lane)
    m.add(TrafficLight(id=100))
    clash = TrafficLight(id=100, stop_line=Curve(3, [Point(31, 10.0, 0.0)]))

    with pytest.raises(ValueError):
        m.attach_rule(lane, clash)
    assert lane.rules == []
    assert m.lane_segments.find_usages(clash) == []
    assert not m.curves.exists(3)


def test_add_with_deep_clash_inserts_nothing(lane):
    m = LaneMap()
    m.add(lane)
    other = LaneSegment(
        20, Curve(5, [Point(51, 0.0, 7.0)]), Curve(1, [Point(61, 0.0, 9.0)])
    )

    with pytest.raises(ValueError):
        m.add(other)
    assert not m.lane_segments.exists(20)
    assert not m.curves.exists(5)
    assert not m.points.exists(51)
    assert len(m) == 7


def test_add_rejects_two_objects_sharing_an_id_in_one_tree():
    twin_left = Curve(1, [Point(11, 0.0, 0.0)])
    twin_right = Curve(1, [Point(12, 0.0, 3.5)])
    m = LaneMap()
    with pytest.raises(ValueError):
        m.add(LaneSegment(10, twin_left, twin_right))
    assert len(m) == 0


def test_attach_rule_requires_a_container(lane):
    with pytest.raises(TypeError):
        LaneMap().attach_rule(lane.left, TrafficLight(id=1))


def test_layer_lookup_errors(lane):
    m = LaneMap()
    m.add(lane)
    with pytest.raises(ValueError):
        m.layer("polygons")
    with pytest.raises(KeyError):
        m.curves.get(99)
    assert lane in m.lane_segments
    assert Curve(99, []) not in m.curves


def test_layer_name_and_subtype(lane):
    assert layer_name(lane) == "lane_segments"
    assert layer_name(TrafficLight(id=1)) == "rule_elements"
    with pytest.raises(TypeError):
        layer_name("not a primitive")

    assert lane.subtype == "road"
