# lanemap_query/app/build.py
from collections.abc import Mapping
from dataclasses import dataclass

from lanemap_query.config.models import QueryModel
from lanemap_query.domain.layers import LaneMap
from lanemap_query.io.map_document import load_map
from lanemap_query.io.query_logging import QueryLogging
from lanemap_query.query.hooks import NoopHooks, QueryHooks
from lanemap_query.query.references import References
from lanemap_query.query.traversal import TraversalEngine
from lanemap_query.runtime.types import Direction


@dataclass
class App:
    model: QueryModel
    lane_map: LaneMap
    hooks: QueryHooks
    engine: TraversalEngine

    def query(self, layer: str, id: int, direction: Direction | str | None = None) -> References:
        view = self.lane_map.layer(layer)
        if not view.exists(id):
            return References()
        prim = view.get(id)
        return self.engine.find_references(prim, direction or self.model.traversal.direction)


def build(cfg: QueryModel | Mapping, *, use_logging: bool = True) -> App:
    # 0) Validate config
    model = cfg if isinstance(cfg, QueryModel) else QueryModel.model_validate(cfg)

    # 1) Map snapshot
    lane_map = load_map(model.map)

    # 2) Hooks
    hooks = (
        QueryLogging(
            run_id=model.run_id,
            level=model.log.level,
            debug=model.log.debug,
            sample_every=model.log.sample_every,
        )
        if use_logging
        else NoopHooks()
    )

    # 3) Engine
    engine = TraversalEngine(lane_map, hooks=hooks, cycle_guard=model.traversal.cycle_guard)
    return App(model, lane_map, hooks, engine)
