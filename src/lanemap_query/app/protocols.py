from typing import Protocol, runtime_checkable


# ------------- Map collaborators --------------------
@runtime_checkable
class LayerView(Protocol):
    """
    Responsibilities:
      • Answer whether an id is present in this layer.
      • Return the direct owners, within this layer, of a primitive from another layer.
    """

    def exists(self, id: int) -> bool: ...
    def find_usages(self, prim) -> list: ...


@runtime_checkable
class LaneMapView(Protocol):
    """The five layers the traversal reads. Treated as a stable snapshot per query."""

    points: LayerView
    curves: LayerView
    areas: LayerView
    lane_segments: LayerView
    rule_elements: LayerView
