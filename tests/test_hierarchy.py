from homefin.hierarchy import (
    CashFlowItemNode,
    build_hierarchy,
    decode_hierarchy_payload,
    flatten_hierarchy,
    iter_edges,
    iter_nodes,
    iter_with_depth,
    normalize_node,
)


def _flat(*pairs):
    return [{"id": i, "name": f"Item {i}", "parent": p} for i, p in pairs]


def test_flat_input_each_node_appears_once_with_input_edges() -> None:
    """Every node appears once and tree edges equal the input (id, parent) pairs."""
    payload = _flat(("1", None), ("2", "1"), ("3", "1"), ("4", "2"), ("5", None))

    forest = build_hierarchy(payload)

    ids = [node.id for node in iter_nodes(forest)]
    assert sorted(ids) == ["1", "2", "3", "4", "5"]
    assert len(ids) == len(set(ids))
    assert set(iter_edges(forest)) == {
        ("1", None),
        ("2", "1"),
        ("3", "1"),
        ("4", "2"),
        ("5", None),
    }
    assert [root.id for root in forest] == ["1", "5"]


def test_children_keep_input_order() -> None:
    """Children are attached to their parent in input order."""
    payload = _flat(("b", "r"), ("r", None), ("a", "r"))

    forest = build_hierarchy(payload)

    assert [child.id for child in forest[0].children] == ["b", "a"]


def test_dangling_parent_promotes_node_to_root() -> None:
    """A node whose parent is absent from the listing becomes a root."""
    payload = _flat(("1", None), ("2", "missing"))

    forest = build_hierarchy(payload)

    assert [root.id for root in forest] == ["1", "2"]
    # The raw parent reference is kept on the node itself.
    assert forest[1].parent == "missing"


def test_self_reference_is_promoted_to_root() -> None:
    forest = build_hierarchy(_flat(("1", "1")))

    assert [root.id for root in forest] == ["1"]
    assert forest[0].children == []


def test_parent_cycle_is_broken_without_losing_nodes() -> None:
    """Nodes in a parent cycle are kept: the first one becomes a root."""
    payload = _flat(("a", "b"), ("b", "a"), ("c", None))

    forest = build_hierarchy(payload)

    ids = [node.id for node in iter_nodes(forest)]
    assert sorted(ids) == ["a", "b", "c"]
    assert len(ids) == 3
    assert [root.id for root in forest] == ["c", "a"]
    assert [child.id for child in forest[1].children] == ["b"]


def test_pre_nested_input_is_returned_as_mapped() -> None:
    """When nodes already carry children, the structure is kept unchanged."""
    payload = [
        {
            "id": "1",
            "name": "Food",
            "children": [
                {"id": "2", "name": "Groceries", "parent": "1"},
                {
                    "id": "3",
                    "name": "Restaurants",
                    "parent": "1",
                    "children": [{"id": "4", "name": "Fast food", "parent": "3"}],
                },
            ],
        },
        {"id": "5", "name": "Salary"},
    ]

    forest = build_hierarchy(payload)

    assert [root.id for root in forest] == ["1", "5"]
    assert [c.id for c in forest[0].children] == ["2", "3"]
    assert [c.id for c in forest[0].children[1].children] == ["4"]
    assert forest[0].children[1].children[0].name == "Fast food"


def test_flatten_then_build_is_idempotent() -> None:
    payload = _flat(
        ("1", None), ("2", "1"), ("3", "2"), ("4", "ghost"), ("5", "6"), ("6", "5")
    )
    forest = build_hierarchy(payload)

    assert build_hierarchy(flatten_hierarchy(forest)) == forest


def test_idempotent_on_pre_nested_input() -> None:
    payload = [{"id": "1", "name": "A", "children": [{"id": "2", "name": "B"}]}]
    forest = build_hierarchy(payload)

    rebuilt = build_hierarchy(flatten_hierarchy(forest))

    assert [n.id for n in iter_nodes(rebuilt)] == ["1", "2"]
    assert set(iter_edges(rebuilt)) == {("1", None), ("2", "1")}


def test_empty_input_gives_empty_forest() -> None:
    assert build_hierarchy([]) == []
    assert build_hierarchy({}) == []
    assert build_hierarchy(None) == []
    assert build_hierarchy("not a payload") == []


def test_wrapper_shapes_are_decoded() -> None:
    nodes = [{"id": "1", "name": "A"}]

    assert decode_hierarchy_payload({"items": nodes}) == nodes
    assert decode_hierarchy_payload({"children": nodes}) == nodes
    assert decode_hierarchy_payload({"results": nodes}) == nodes
    assert decode_hierarchy_payload({"id": "9", "name": "Single"}) == [
        {"id": "9", "name": "Single"}
    ]


def test_wrapper_keys_checked_in_order() -> None:
    payload = {"results": [{"id": "r"}], "items": [{"id": "i"}]}

    assert [n["id"] for n in decode_hierarchy_payload(payload)] == ["i"]


def test_single_node_payload_builds_one_root() -> None:
    forest = build_hierarchy({"id": "7", "name": "Alone"})

    assert len(forest) == 1
    assert forest[0].id == "7"


def test_normalize_node_applies_defaults() -> None:
    node = normalize_node({"id": 12, "parent": ""}, untitled_label="No name")

    assert node == CashFlowItemNode(id="12", name="No name")
    assert node.code is None
    assert node.include_in_budget is None
    assert node.parent is None

    numeric = normalize_node({"id": 5, "code": 7, "parent": 3})
    assert (numeric.code, numeric.parent) == ("7", "3")


def test_iter_with_depth_reports_levels() -> None:
    forest = build_hierarchy(_flat(("1", None), ("2", "1"), ("3", "2")))

    assert [(depth, node.id) for depth, node in iter_with_depth(forest)] == [
        (0, "1"),
        (1, "2"),
        (2, "3"),
    ]
