# query/filters.py
from collections.abc import Iterable

from lanemap_query.app.protocols import LaneMapView
from lanemap_query.domain.entities.primitives import Area, Curve, LaneSegment
from lanemap_query.domain.entities.rules import (
    AutowareTrafficLight,
    ManeuverType,
    RightOfWay,
    TrafficLight,
    TrafficSign,
)
from lanemap_query.domain.layers import LaneMap
from lanemap_query.query.references import References
from lanemap_query.query.traversal import find_references
from lanemap_query.runtime.types import Direction

CROSSWALK = "crosswalk"
ROAD = "road"


def lane_segment_layer(lane_map: LaneMap) -> list[LaneSegment]:
    return list(lane_map.lane_segments)


def subtype_lane_segments(lanes: Iterable[LaneSegment], subtype: str) -> list[LaneSegment]:
    return [ll for ll in lanes if ll.subtype == subtype]


def crosswalk_lane_segments(lanes: Iterable[LaneSegment]) -> list[LaneSegment]:
    return subtype_lane_segments(lanes, CROSSWALK)


def road_lane_segments(lanes: Iterable[LaneSegment]) -> list[LaneSegment]:
    return subtype_lane_segments(lanes, ROAD)


def _unique_rules(lanes: Iterable[LaneSegment], kind: type) -> list:
    seen: dict[int, object] = {}
    for ll in lanes:
        for rule in ll.rules_as(kind):
            seen.setdefault(rule.id, rule)
    return list(seen.values())


def traffic_lights(lanes: Iterable[LaneSegment]) -> list[TrafficLight]:
    return _unique_rules(lanes, TrafficLight)


def autoware_traffic_lights(lanes: Iterable[LaneSegment]) -> list[AutowareTrafficLight]:
    return _unique_rules(lanes, AutowareTrafficLight)


def stop_lines_lane_segment(lane: LaneSegment) -> list[Curve]:
    """Stop lines governing a lane: yield stop lines, light stop lines, first sign ref line."""
    stop_lines: list[Curve] = []
    for row in lane.rules_as(RightOfWay):
        if row.maneuver(lane) is ManeuverType.YIELD and row.stop_line is not None:
            stop_lines.append(row.stop_line)
    for tl in lane.rules_as(TrafficLight):
        if tl.stop_line is not None:
            stop_lines.append(tl.stop_line)
    for ts in lane.rules_as(TrafficSign):
        if ts.ref_lines:
            stop_lines.append(ts.ref_lines[0])
    return stop_lines


def stop_lines_lane_segments(lanes: Iterable[LaneSegment]) -> list[Curve]:
    out: list[Curve] = []
    for ll in lanes:
        out.extend(stop_lines_lane_segment(ll))
    return out


def stop_sign_stop_lines(
    lanes: Iterable[LaneSegment], stop_sign_type: str = "stop_sign"
) -> list[Curve]:
    seen: dict[int, Curve] = {}
    for ll in lanes:
        for ts in ll.rules_as(TrafficSign):
            if ts.sign_type != stop_sign_type or not ts.ref_lines:
                continue
            seen.setdefault(ts.ref_lines[0].id, ts.ref_lines[0])
    return list(seen.values())


def expand_references(container: LaneSegment | Area, lane_map: LaneMapView, **kw) -> References:
    """Everything reachable by expanding a container into its own references."""
    return find_references(container, lane_map, direction=Direction.DOWN, **kw)
