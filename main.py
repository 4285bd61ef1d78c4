# main.py
import argparse
import json

from lanemap_query.app.build import build


def run(config_path: str, layer: str, prim_id: int) -> dict:
    with open(config_path, encoding="utf-8") as fh:
        app = build(json.load(fh))
    refs = app.query(layer, prim_id)
    return {name: sorted(ids) for name, ids in refs.ids().items()}


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Find everything that references a map primitive.")
    parser.add_argument("config", help="JSON query config holding the map document")
    parser.add_argument("layer", choices=["points", "curves", "areas", "lane_segments", "rule_elements"])
    parser.add_argument("id", type=int)
    args = parser.parse_args()
    print(json.dumps(run(args.config, args.layer, args.id), indent=2))
