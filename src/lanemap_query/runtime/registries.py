# runtime/registries.py
from collections.abc import Callable, Sequence
from typing import Any

from lanemap_query.config.models import (
    AllWayStopModel,
    AutowareTrafficLightModel,
    GenericRuleModel,
    RightOfWayModel,
    RuleUnion,
    SpeedLimitModel,
    TrafficLightModel,
    TrafficSignModel,
)
from lanemap_query.domain.entities.primitives import RuleElement
from lanemap_query.domain.entities.rules import (
    AllWayStop,
    AutowareTrafficLight,
    GenericRule,
    RightOfWay,
    SpeedLimit,
    TrafficLight,
    TrafficSign,
)

Roles = dict[str, Sequence[Any]]
RoleHandler = Callable[[Any], Roles]
# deps["resolve"](layer, id) -> primitive
RuleBuilder = Callable[[RuleUnion, dict], RuleElement]

_role_registry: dict[type, RoleHandler] = {}
_rule_builder_registry: dict[str, RuleBuilder] = {}


# ------------------- Rule role handlers ---------------------------


def register_rule_kind(kind: type):
    def deco(fn: RoleHandler):
        _role_registry[kind] = fn
        return fn

    return deco


def role_handler_for(kind: type) -> RoleHandler:
    for k in kind.__mro__:
        fn = _role_registry.get(k)
        if fn is not None:
            return fn
    raise ValueError(f"No role handler registered for rule kind {kind.__name__!r}")


def rule_roles(rule: RuleElement) -> Roles:
    return role_handler_for(type(rule))(rule)


def _opt(curve) -> list:
    return [curve] if curve is not None else []


@register_rule_kind(GenericRule)
def _generic_roles(rule: GenericRule) -> Roles:
    return dict(rule.parameters)


@register_rule_kind(RightOfWay)
def _right_of_way_roles(rule: RightOfWay) -> Roles:
    return {
        "right_of_way": rule.right_of_way,
        "yield": rule.yield_lanes,
        "ref_line": _opt(rule.stop_line),
    }


@register_rule_kind(TrafficLight)
def _traffic_light_roles(rule: TrafficLight) -> Roles:
    return {"refers": rule.lights, "ref_line": _opt(rule.stop_line)}


@register_rule_kind(AutowareTrafficLight)
def _autoware_traffic_light_roles(rule: AutowareTrafficLight) -> Roles:
    return {**_traffic_light_roles(rule), "light_bulbs": rule.light_bulbs}


# SpeedLimit resolves to this handler through its base class
@register_rule_kind(TrafficSign)
def _traffic_sign_roles(rule: TrafficSign) -> Roles:
    return {
        "refers": rule.signs,
        "ref_line": rule.ref_lines,
        "cancels": rule.cancel_signs,
        "cancel_line": rule.cancel_lines,
    }


@register_rule_kind(AllWayStop)
def _all_way_stop_roles(rule: AllWayStop) -> Roles:
    return {"yield": rule.lanes, "ref_line": rule.stop_lines, "refers": rule.signs}


# ------------------- Rule builders (map documents) ----------------------


def register_rule_builder(kind: str):
    def deco(fn: RuleBuilder):
        _rule_builder_registry[kind] = fn
        return fn

    return deco


def make_rule(cfg: RuleUnion, *, deps: dict) -> RuleElement:
    try:
        builder = _rule_builder_registry[cfg.kind]
    except KeyError:
        raise ValueError(f"Unknown rule kind {cfg.kind!r}")
    return builder(cfg, deps)


def _curves(ids, deps) -> list:
    return [deps["resolve"]("curves", i) for i in ids]


def _lanes(ids, deps) -> list:
    return [deps["resolve"]("lane_segments", i) for i in ids]


def _opt_curve(i, deps):
    return None if i is None else deps["resolve"]("curves", i)


@register_rule_builder("generic")
def _make_generic(cfg: GenericRuleModel, deps):
    params = {
        role: [deps["resolve"](ref.layer, ref.id) for ref in refs]
        for role, refs in cfg.parameters.items()
    }
    return GenericRule(id=cfg.id, attributes=dict(cfg.attributes), parameters=params)


@register_rule_builder("right_of_way")
def _make_right_of_way(cfg: RightOfWayModel, deps):
    return RightOfWay(
        id=cfg.id,
        attributes=dict(cfg.attributes),
        right_of_way=_lanes(cfg.right_of_way, deps),
        yield_lanes=_lanes(cfg.yield_lanes, deps),
        stop_line=_opt_curve(cfg.stop_line, deps),
    )


@register_rule_builder("traffic_light")
def _make_traffic_light(cfg: TrafficLightModel, deps):
    return TrafficLight(
        id=cfg.id,
        attributes=dict(cfg.attributes),
        lights=_curves(cfg.lights, deps),
        stop_line=_opt_curve(cfg.stop_line, deps),
    )


@register_rule_builder("autoware_traffic_light")
def _make_autoware_traffic_light(cfg: AutowareTrafficLightModel, deps):
    return AutowareTrafficLight(
        id=cfg.id,
        attributes=dict(cfg.attributes),
        lights=_curves(cfg.lights, deps),
        stop_line=_opt_curve(cfg.stop_line, deps),
        light_bulbs=_curves(cfg.light_bulbs, deps),
    )


def _sign_fields(cfg: TrafficSignModel, deps) -> dict:
    return dict(
        id=cfg.id,
        attributes=dict(cfg.attributes),
        sign_type=cfg.sign_type,
        signs=_curves(cfg.signs, deps),
        ref_lines=_curves(cfg.ref_lines, deps),
        cancel_signs=_curves(cfg.cancel_signs, deps),
        cancel_lines=_curves(cfg.cancel_lines, deps),
    )


@register_rule_builder("traffic_sign")
def _make_traffic_sign(cfg: TrafficSignModel, deps):
    return TrafficSign(**_sign_fields(cfg, deps))


@register_rule_builder("speed_limit")
def _make_speed_limit(cfg: SpeedLimitModel, deps):
    return SpeedLimit(**_sign_fields(cfg, deps))


@register_rule_builder("all_way_stop")
def _make_all_way_stop(cfg: AllWayStopModel, deps):
    return AllWayStop(
        id=cfg.id,
        attributes=dict(cfg.attributes),
        lanes=_lanes(cfg.lanes, deps),
        stop_lines=_curves(cfg.stop_lines, deps),
        signs=_curves(cfg.signs, deps),
    )
