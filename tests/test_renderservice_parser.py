import json

from conftest import SAMPLE_DUMP
from infra.renderservice import (
    ROOT_TYPE,
    BackgroundColor,
    RenderServiceParser,
    UiNode,
    count_depth,
    get_summary,
    get_tree_by_pid,
    ingest,
    search_nodes,
    to_compact_json,
    to_json,
)

SCENARIO_DUMP = "| pid[10]\n| | Canvas[1]\n| | | Text[2] name[OK]"


def non_root_nodes(forest):
    return [node for root in forest.values() for node in root.iter_nodes() if not node.is_root]


def test_ingest_builds_one_tree_per_pid():
    forest = ingest(SAMPLE_DUMP)
    assert sorted(forest) == [1937, 2001]
    root = forest[1937]
    assert root.id == "pid-1937"
    assert root.type == ROOT_TYPE
    assert root.parent_id is None
    assert [child.id for child in root.children] == ["RSCanvasNode-100"]


def test_ingest_counts_every_patterned_line():
    forest = ingest(SAMPLE_DUMP)
    nodes = non_root_nodes(forest)
    assert len(nodes) == 6
    for node in nodes:
        assert node.parent_id is not None


def test_depth_equals_marker_count():
    lines = {
        line.split("[")[1].split("]")[0]: count_depth(line)
        for line in SAMPLE_DUMP.splitlines()
        if "Node[" in line
    }
    for node in non_root_nodes(ingest(SAMPLE_DUMP)):
        identifier = node.id.split("-")[1]
        assert node.depth == lines[identifier]


def test_siblings_realign_to_parent_after_dedent():
    page = ingest(SAMPLE_DUMP)[1937].children[0]
    assert [child.name for child in page.children] == ["Login", "Settings"]
    assert page.children[0].children[0].name == "LoginButton"
    assert page.children[1].parent_id == page.id


def test_scenario_dump():
    forest = ingest(SCENARIO_DUMP)
    assert list(forest) == [10]
    canvas = forest[10].children[0]
    assert canvas.type == "Canvas"
    assert canvas.depth == 2
    text = canvas.children[0]
    assert text.type == "Text"
    assert text.name == "OK"
    assert text.parent_id == "Canvas-1"


def test_node_fields_and_modifiers():
    page = ingest(SAMPLE_DUMP)[1937].children[0]
    assert page.frame_node_id == "1"
    assert page.frame_node_tag == "page"
    assert page.properties.instance_id == "7"
    assert page.properties.render_parent == "0"
    modifiers = page.properties.modifiers
    assert modifiers.background_color == BackgroundColor("RGBA-0xFFFFFFFF", "SRGB")
    assert modifiers.bounds is True
    assert modifiers.frame is True
    login = page.children[0]
    assert login.properties.modifiers.bounds == "[100, 200, 300, 50]"
    assert login.properties.get("parent") == "100"


def test_unknown_modifier_tokens_are_kept():
    parser = RenderServiceParser()
    modifiers = parser.parse_modifiers("Alpha[0.5], Visible, Frame[0, 0, 10, 10]")
    assert modifiers.extra == {"alpha": "0.5", "Visible": True, "frameRect": "[0, 0, 10, 10]"}
    assert modifiers.frame is True


def test_unparseable_and_orphan_lines_are_skipped():
    dump = "\n".join(
        [
            "| | OrphanNode[5]",
            "| pid[3]",
            "| this line has no node pattern",
            "",
            "| Canvas[1]",
            "top level text",
        ]
    )
    forest = ingest(dump)
    assert list(forest) == [3]
    assert [child.id for child in forest[3].children] == ["Canvas-1"]


def test_empty_and_consecutive_roots():
    forest = ingest("| pid[1]\n| pid[2]\n| pid[3]\n")
    assert sorted(forest) == [1, 2, 3]
    assert all(root.children == [] for root in forest.values())
    assert ingest("") == {}


def test_indentation_spaces_do_not_change_depth():
    assert count_depth("|   |    Text[1]") == 2
    assert count_depth("  | Text[1]") == 1
    assert count_depth("Text[1] | |") == 0


def test_full_json_round_trip():
    root = ingest(SAMPLE_DUMP)[1937]
    payload = json.loads(json.dumps(root.to_dict()))
    restored = UiNode.from_dict(payload)
    assert restored == root

    def shape(node):
        return (node.type, node.name, [shape(child) for child in node.children])

    assert shape(restored) == shape(root)


def test_compact_json_is_depth_bounded():
    data = json.loads(to_compact_json(SAMPLE_DUMP, pid=1937, max_depth=1))
    root = data["1937"]
    assert root["type"] == ROOT_TYPE
    page = root["children"][0]
    assert page == {"type": "RSCanvasNode", "frameNodeId": "1", "frameNodeTag": "page"}


def test_summary_reports_counts():
    summary = get_summary(SAMPLE_DUMP)
    assert "Processes: 2" in summary
    assert "### Process 1937" in summary
    assert "- total nodes: 5" in summary
    assert "- max depth: 3" in summary
    assert "  - RSCanvasNode: 4" in summary


def test_search_nodes_by_tag():
    report = search_nodes(SAMPLE_DUMP, frame_node_tag="Text")
    assert report.startswith("## Search results (2)")
    assert (
        "path: ProcessRoot > RSCanvasNode > RSCanvasNode(Login) > RSCanvasNode(LoginButton)"
        in report
    )
    assert "- name: Settings" in report


def test_search_nodes_without_filters_is_empty():
    assert search_nodes(SAMPLE_DUMP).startswith("## Search results (0)")


def test_tree_by_pid_and_json_export():
    assert get_tree_by_pid(SAMPLE_DUMP, 2001).children[0].name == "Logon"
    assert get_tree_by_pid(SAMPLE_DUMP, 42) is None
    exported = to_json(SAMPLE_DUMP)
    assert sorted(exported) == [1937, 2001]
    assert exported[2001]["children"][0]["children"][0]["name"] == "Cancel"
