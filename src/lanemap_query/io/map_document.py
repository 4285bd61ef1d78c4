# io/map_document.py
import json
from collections.abc import Mapping
from pathlib import Path

from lanemap_query.config.models import MapDocumentModel
from lanemap_query.domain.entities.primitives import Area, Curve, LaneSegment, Point
from lanemap_query.domain.layers import LaneMap
from lanemap_query.runtime.registries import make_rule


def load_map(doc: MapDocumentModel | Mapping) -> LaneMap:
    """
    Build a LaneMap from a map document. Ids refer across layers; rules may
    name lanes that carry them, so lanes and areas are built first and their
    rules attached once every rule exists.
    """
    model = doc if isinstance(doc, MapDocumentModel) else MapDocumentModel.model_validate(doc)
    built: dict[str, dict[int, object]] = {
        "points": {},
        "curves": {},
        "lane_segments": {},
        "areas": {},
        "rule_elements": {},
    }

    def resolve(layer: str, id: int):
        try:
            return built[layer][id]
        except KeyError:
            raise ValueError(f"Unknown {layer} id {id} referenced in map document") from None

    for p in model.points:
        built["points"][p.id] = Point(p.id, p.x, p.y, p.z)
    for c in model.curves:
        pts = [resolve("points", i) for i in c.points]
        built["curves"][c.id] = Curve(c.id, pts, attributes=dict(c.attributes))
    for ll in model.lane_segments:
        built["lane_segments"][ll.id] = LaneSegment(
            ll.id,
            left=resolve("curves", ll.left),
            right=resolve("curves", ll.right),
            attributes=dict(ll.attributes),
        )
    for a in model.areas:
        built["areas"][a.id] = Area(
            a.id,
            outer=[resolve("curves", i) for i in a.outer],
            inner=[[resolve("curves", i) for i in loop] for loop in a.inner],
            attributes=dict(a.attributes),
        )
    deps = {"resolve": resolve}
    for r in model.rule_elements:
        built["rule_elements"][r.id] = make_rule(r, deps=deps)

    for ll in model.lane_segments:
        lane = built["lane_segments"][ll.id]
        lane.rules.extend(resolve("rule_elements", i) for i in ll.rules)
    for a in model.areas:
        area = built["areas"][a.id]
        area.rules.extend(resolve("rule_elements", i) for i in a.rules)

    lane_map = LaneMap()
    for layer in ("points", "curves", "lane_segments", "areas", "rule_elements"):
        lane_map.add_all(built[layer].values())
    return lane_map


def read_map_document(path: str | Path) -> MapDocumentModel:
    with open(path, encoding="utf-8") as fh:
        return MapDocumentModel.model_validate(json.load(fh))
