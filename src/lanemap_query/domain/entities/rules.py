# domain/entities/rules.py
from dataclasses import dataclass, field
from enum import Enum

from lanemap_query.domain.entities.primitives import Curve, LaneSegment, RuleElement


class ManeuverType(Enum):
    RIGHT_OF_WAY = "right_of_way"
    YIELD = "yield"
    UNKNOWN = "unknown"


@dataclass(eq=False)
class GenericRule(RuleElement):
    # role name -> referenced primitives of any kind
    parameters: dict[str, list] = field(default_factory=dict)


@dataclass(eq=False)
class RightOfWay(RuleElement):
    right_of_way: list[LaneSegment] = field(default_factory=list)
    yield_lanes: list[LaneSegment] = field(default_factory=list)
    stop_line: Curve | None = None

    def maneuver(self, lane: LaneSegment) -> ManeuverType:
        if any(ll.id == lane.id for ll in self.right_of_way):
            return ManeuverType.RIGHT_OF_WAY
        if any(ll.id == lane.id for ll in self.yield_lanes):
            return ManeuverType.YIELD
        return ManeuverType.UNKNOWN


@dataclass(eq=False)
class TrafficLight(RuleElement):
    lights: list[Curve] = field(default_factory=list)
    stop_line: Curve | None = None


@dataclass(eq=False)
class AutowareTrafficLight(TrafficLight):
    light_bulbs: list[Curve] = field(default_factory=list)


@dataclass(eq=False)
class TrafficSign(RuleElement):
    sign_type: str = ""
    signs: list[Curve] = field(default_factory=list)
    ref_lines: list[Curve] = field(default_factory=list)
    cancel_signs: list[Curve] = field(default_factory=list)
    cancel_lines: list[Curve] = field(default_factory=list)


@dataclass(eq=False)
class SpeedLimit(TrafficSign):
    pass


@dataclass(eq=False)
class AllWayStop(RuleElement):
    lanes: list[LaneSegment] = field(default_factory=list)
    stop_lines: list[Curve] = field(default_factory=list)
    signs: list[Curve] = field(default_factory=list)
