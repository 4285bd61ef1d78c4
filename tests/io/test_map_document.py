import json

import pytest
from pydantic import ValidationError

from lanemap_query.domain.entities.rules import RightOfWay, SpeedLimit
from lanemap_query.io.map_document import load_map, read_map_document
from lanemap_query.query.traversal import find_references


def _doc(**over) -> dict:
    doc = {
        "points": [{"id": i, "x": float(i), "y": 0.0} for i in range(1, 9)],
        "curves": [
            {"id": 1, "points": [1, 2]},
            {"id": 2, "points": [3, 4]},
            {"id": 3, "points": [5, 6], "attributes": {"type": "stop_line"}},
            {"id": 4, "points": [7, 8]},
        ],
        "lane_segments": [
            {"id": 10, "left": 1, "right": 2, "rules": [100], "attributes": {"subtype": "road"}},
        ],
        "areas": [{"id": 20, "outer": [4], "rules": [101]}],
        "rule_elements": [
            {"kind": "right_of_way", "id": 100, "right_of_way": [10], "stop_line": 3},
            {"kind": "speed_limit", "id": 101, "sign_type": "de274-50", "signs": [4]},
        ],
    }
    doc.update(over)
    return doc


def test_load_map_resolves_ids_across_layers():
    m = load_map(_doc())
    lane = m.lane_segments.get(10)
    row = m.rule_elements.get(100)
    assert isinstance(row, RightOfWay)
    assert isinstance(m.rule_elements.get(101), SpeedLimit)
    assert lane.rules == [row]
    assert row.right_of_way == [lane]
    assert lane.left is m.curves.get(1)
    assert m.curves.get(3).attributes == {"type": "stop_line"}


def test_loaded_map_answers_reference_queries():
    m = load_map(_doc())
    refs = find_references(m.curves.get(3), m)
    assert set(refs.lane_segments) == {10}
    refs = find_references(m.curves.get(4), m)
    assert set(refs.areas) == {20}


def test_yield_alias_is_accepted():
    rules = [{"kind": "right_of_way", "id": 100, "yield": [10]}]
    m = load_map(_doc(rule_elements=rules, areas=[]))
    assert m.rule_elements.get(100).yield_lanes == [m.lane_segments.get(10)]


def test_generic_rule_references_any_layer():
    rules = [
        {"kind": "right_of_way", "id": 100},
        {
            "kind": "generic",
            "id": 102,
            "parameters": {"refers": [{"layer": "curves", "id": 3}, {"layer": "points", "id": 1}]},
        },
    ]
    m = load_map(_doc(rule_elements=rules, areas=[]))
    assert set(find_references(m.curves.get(3), m).rule_elements) == {102}


def test_unknown_reference_raises():
    curves = [{"id": 1, "points": [1, 99]}]
    with pytest.raises(ValueError, match="points id 99"):
        load_map(_doc(curves=curves, lane_segments=[], areas=[], rule_elements=[]))


@pytest.mark.parametrize(
    "over",
    [
        {"points": [{"id": 1, "x": 0.0, "y": 0.0}, {"id": 1, "x": 1.0, "y": 0.0}]},
        {"rule_elements": [{"kind": "school_zone", "id": 100}]},
        {
            "rule_elements": [
                {"kind": "right_of_way", "id": 100, "right_of_way": [10], "yield": [10]}
            ]
        },
        {"areas": [{"id": 20, "outer": []}]},
        {"curves": [{"id": 1, "points": [1], "colour": "white"}]},
    ],
)
def test_malformed_documents_are_rejected(over):
    with pytest.raises(ValidationError):
        load_map(_doc(**over))


def test_read_map_document(tmp_path):
    path = tmp_path / "map.json"
    path.write_text(json.dumps(_doc()), encoding="utf-8")
    doc = read_map_document(path)
    assert len(doc.rule_elements) == 2
    assert len(load_map(doc).lane_segments) == 1
