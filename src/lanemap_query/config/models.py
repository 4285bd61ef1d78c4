from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class LogModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False
    sample_every: int = 1

    @field_validator("sample_every")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("sample_every must be >= 1")
        return v


class TraversalModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    cycle_guard: bool = True
    direction: Literal["up", "down"] = "up"


# ----------------- MAP DOCUMENT ---------------------


class PointModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: int
    x: float
    y: float
    z: float = 0.0


class CurveModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: int
    points: list[int]
    attributes: dict[str, str] = Field(default_factory=dict)


class LaneSegmentModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: int
    left: int
    right: int
    rules: list[int] = Field(default_factory=list)
    attributes: dict[str, str] = Field(default_factory=dict)


class AreaModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: int
    outer: list[int]
    inner: list[list[int]] = Field(default_factory=list)
    rules: list[int] = Field(default_factory=list)
    attributes: dict[str, str] = Field(default_factory=dict)

    @field_validator("outer")
    @classmethod
    def _non_empty(cls, v: list[int]) -> list[int]:
        if not v:
            raise ValueError("area outer loop needs at least one curve")
        return v


LayerLiteral = Literal["points", "curves", "areas", "lane_segments", "rule_elements"]


class PrimitiveRef(BaseModel):
    model_config = ConfigDict(extra="forbid")
    layer: LayerLiteral
    id: int


# ----------------- RULE KINDS ---------------------


class GenericRuleModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["generic"] = "generic"
    id: int
    attributes: dict[str, str] = Field(default_factory=dict)
    parameters: dict[str, list[PrimitiveRef]] = Field(default_factory=dict)


class RightOfWayModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)
    kind: Literal["right_of_way"] = "right_of_way"
    id: int
    attributes: dict[str, str] = Field(default_factory=dict)
    right_of_way: list[int] = Field(default_factory=list)
    yield_lanes: list[int] = Field(default_factory=list, alias="yield")
    stop_line: int | None = None

    @model_validator(mode="after")
    def _disjoint(self):
        both = set(self.right_of_way) & set(self.yield_lanes)
        if both:
            raise ValueError(f"lanes {sorted(both)} cannot both have and yield right of way")
        return self


class TrafficLightModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["traffic_light"] = "traffic_light"
    id: int
    attributes: dict[str, str] = Field(default_factory=dict)
    lights: list[int] = Field(default_factory=list)
    stop_line: int | None = None


class AutowareTrafficLightModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["autoware_traffic_light"] = "autoware_traffic_light"
    id: int
    attributes: dict[str, str] = Field(default_factory=dict)
    lights: list[int] = Field(default_factory=list)
    stop_line: int | None = None
    light_bulbs: list[int] = Field(default_factory=list)


class TrafficSignModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["traffic_sign"] = "traffic_sign"
    id: int
    attributes: dict[str, str] = Field(default_factory=dict)
    sign_type: str = ""
    signs: list[int] = Field(default_factory=list)
    ref_lines: list[int] = Field(default_factory=list)
    cancel_signs: list[int] = Field(default_factory=list)
    cancel_lines: list[int] = Field(default_factory=list)


class SpeedLimitModel(TrafficSignModel):
    kind: Literal["speed_limit"] = "speed_limit"


class AllWayStopModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["all_way_stop"] = "all_way_stop"
    id: int
    attributes: dict[str, str] = Field(default_factory=dict)
    lanes: list[int] = Field(default_factory=list)
    stop_lines: list[int] = Field(default_factory=list)
    signs: list[int] = Field(default_factory=list)


RuleUnion = Annotated[
    GenericRuleModel
    | RightOfWayModel
    | TrafficLightModel
    | AutowareTrafficLightModel
    | TrafficSignModel
    | SpeedLimitModel
    | AllWayStopModel,
    Field(discriminator="kind"),
]


class MapDocumentModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    points: list[PointModel] = Field(default_factory=list)
    curves: list[CurveModel] = Field(default_factory=list)
    lane_segments: list[LaneSegmentModel] = Field(default_factory=list)
    areas: list[AreaModel] = Field(default_factory=list)
    rule_elements: list[RuleUnion] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_ids(self):
        for layer in ("points", "curves", "lane_segments", "areas", "rule_elements"):
            seen: set[int] = set()
            for item in getattr(self, layer):
                if item.id in seen:
                    raise ValueError(f"duplicate id {item.id} in layer {layer!r}")
                seen.add(item.id)
        return self


# ------------------------------------------------------------------


class QueryModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str
    run_id: str = "local"
    log: LogModel = LogModel()
    traversal: TraversalModel = TraversalModel()
    map: MapDocumentModel = Field(default_factory=MapDocumentModel)
