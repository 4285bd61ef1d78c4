# query/visitor.py
from collections.abc import Callable

from lanemap_query.app.protocols import LaneMapView
from lanemap_query.domain.entities.primitives import RuleElement
from lanemap_query.query.references import References
from lanemap_query.runtime.registries import rule_roles
from lanemap_query.runtime.types import Direction

Forward = Callable[[object, Direction, References], None]


class RuleVisitor:
    """
    Carries the map, the traversal direction and the in-progress References
    into a rule element, and forwards every primitive the rule references.
    The role handler registered for the rule's kind decides what those are.
    """

    def __init__(
        self, lane_map: LaneMapView, direction: Direction, refs: References, forward: Forward
    ):
        self.lane_map, self.direction, self.refs = lane_map, direction, refs
        self._forward = forward

    def visit(self, rule: RuleElement) -> None:
        for prims in rule_roles(rule).values():
            for prim in prims:
                self._forward(prim, self.direction, self.refs)
