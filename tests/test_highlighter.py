from __future__ import annotations

from richdiff.config import DiffConfig
from richdiff.highlighter import (
    apply_highlights,
    apply_text_node_changes,
    group_words,
    make_marker,
    mark_list_changes,
    mark_node_as_changed,
    mark_whitespace_runs,
)
from richdiff.indexer import RawTextNode, extract_text_nodes
from richdiff.parser import parse_html, serialize_children
from richdiff.text_differ import DIFF_DELETE, DIFF_EQUAL, DIFF_INSERT
from richdiff.utils import element_children, get_classes, localname, text_content


def _first(root):
    return element_children(root)[0]


def _markers(root, classname: str) -> list:
    found = []
    stack = [root]
    while stack:
        node = stack.pop(0)
        for child in node.childNodes:
            if child.nodeType == child.ELEMENT_NODE:
                if classname in get_classes(child):
                    found.append(child)
                stack.append(child)
    return found


def test_group_words_merges_runs():
    view = [(DIFF_EQUAL, "Hello "), (DIFF_DELETE, "big"), (DIFF_DELETE, " "), (DIFF_DELETE, "world")]
    groups = group_words(view)
    assert [(g.start, g.end, g.changed) for g in groups] == [(0, 6, False), (6, 15, True)]


def test_marker_copies_parent_formatting():
    root = parse_html('<p class="lead" style="color: red">x</p>')
    p = _first(root)
    marker = make_marker(p.ownerDocument, "added", "word", parent=p)
    assert localname(marker) == "span"
    assert get_classes(marker) == ["diff-added", "lead"]
    assert marker.getAttribute("style") == "color: red"
    assert text_content(marker) == "word"


def test_apply_highlights_marks_changed_words_on_both_sides():
    old_root = parse_html('<p style="color: red" class="lead">Hello world</p>')
    new_root = parse_html('<p style="color: red" class="lead">Hello there</p>')
    diffs = [(DIFF_EQUAL, "Hello "), (DIFF_DELETE, "world"), (DIFF_INSERT, "there")]
    apply_highlights(_first(old_root), _first(new_root), diffs)

    removed = _markers(old_root, "diff-removed")
    added = _markers(new_root, "diff-added")
    assert [text_content(m) for m in removed] == ["world"]
    assert [text_content(m) for m in added] == ["there"]
    assert get_classes(removed[0]) == ["diff-removed", "lead"]
    assert removed[0].getAttribute("style") == "color: red"
    assert text_content(old_root) == "Hello world"
    assert text_content(new_root) == "Hello there"


def test_text_node_is_split_only_once():
    """
    Two changed groups in the same text node: the first one splits it, the
    second one refers to the already replaced node and is skipped.
    """
    old_root = parse_html("<p>a b c</p>")
    new_root = parse_html("<p>x b y</p>")
    diffs = [
        (DIFF_DELETE, "a"), (DIFF_INSERT, "x"),
        (DIFF_EQUAL, " b "),
        (DIFF_DELETE, "c"), (DIFF_INSERT, "y"),
    ]
    apply_highlights(_first(old_root), _first(new_root), diffs)
    assert [text_content(m) for m in _markers(old_root, "diff-removed")] == ["a"]
    assert text_content(old_root) == "a b c"


def test_whitespace_only_groups_are_not_wrapped():
    old_root = parse_html("<p>a b</p>")
    new_root = parse_html("<p>a  b</p>")
    diffs = [(DIFF_EQUAL, "a "), (DIFF_INSERT, " "), (DIFF_EQUAL, "b")]
    apply_highlights(_first(old_root), _first(new_root), diffs)
    assert _markers(new_root, "diff-added") == []
    assert serialize_children(new_root) == "<p>a  b</p>"


def test_node_marker_keeps_style_recoverable():
    root = parse_html('<p class="a" style="color: blue">x</p><p>y</p>')
    first, second = element_children(root)
    mark_node_as_changed(first, "removed")
    mark_node_as_changed(second, "added")
    assert get_classes(first) == ["a", "diff-node-removed"]
    assert first.getAttribute("style") == "color: blue"
    assert first.getAttribute("data-original-style") == "color: blue"
    assert get_classes(second) == ["diff-node-added"]
    assert not second.hasAttribute("data-original-style")


def test_node_marker_style_copy_can_be_disabled():
    root = parse_html('<p style="color: blue">x</p>')
    p = _first(root)
    mark_node_as_changed(p, "removed", DiffConfig(preserve_original_style=False))
    assert not p.hasAttribute("data-original-style")


def test_text_node_changes_across_elements():
    root = parse_html("<p>ab<b>cd</b>ef</p>")
    nodes = extract_text_nodes(root)
    count = apply_text_node_changes(root, nodes, [(1, 5, "bcde", "removed")])
    assert count == 3
    assert serialize_children(root) == (
        '<p>a<span class="diff-removed">b</span>'
        '<b><span class="diff-removed">cd</span></b>'
        '<span class="diff-removed">e</span>f</p>'
    )


def test_text_node_changes_split_node_once_with_all_ranges():
    root = parse_html("<p>one two three</p>")
    nodes = extract_text_nodes(root)
    changes = [(0, 3, "one", "added"), (8, 13, "three", "added")]
    assert apply_text_node_changes(root, nodes, changes) == 2
    assert serialize_children(root) == (
        '<p><span class="diff-added">one</span> two <span class="diff-added">three</span></p>'
    )


def test_text_node_changes_skip_unresolvable_paths():
    root = parse_html("<p>ab</p>")
    stale = [RawTextNode((5, 0), "zz", 0, 2), RawTextNode((0, 0), "other", 0, 2)]
    assert apply_text_node_changes(root, stale, [(0, 2, "ab", "removed")]) == 0
    assert serialize_children(root) == "<p>ab</p>"


def test_whitespace_runs_are_wrapped_without_losing_characters():
    root = parse_html("<p>a  b   c d</p>")
    assert mark_whitespace_runs(root) == 2
    assert text_content(root) == "a  b   c d"
    assert serialize_children(root) == (
        '<p>a<span class="diff-whitespace" style="white-space: pre-wrap;">  </span>'
        'b<span class="diff-whitespace" style="white-space: pre-wrap;">   </span>c d</p>'
    )


def test_list_type_change_and_item_changes():
    old_root = parse_html("<ul><li>A</li><li>B</li></ul>")
    new_root = parse_html("<ol><li>A</li><li>C</li></ol>")
    mark_list_changes(old_root, new_root)

    old_list, new_list = _first(old_root), _first(new_root)
    old_a, old_b = element_children(old_list)
    new_a, new_c = element_children(new_list)
    assert "diff-list-type-changed" in get_classes(old_list)
    assert "diff-list-type-changed" in get_classes(new_list)
    assert "diff-list-item-type-changed" in get_classes(old_a)
    assert "diff-list-item-type-changed" in get_classes(new_a)
    assert get_classes(old_b) == ["diff-list-item-removed"]
    assert get_classes(new_c) == ["diff-list-item-added"]


def test_list_reorder_is_flagged():
    old_root = parse_html("<ul><li>A</li><li>B</li></ul>")
    new_root = parse_html("<ul><li>B</li><li>A</li></ul>")
    mark_list_changes(old_root, new_root)
    for root in (old_root, new_root):
        for li in element_children(_first(root)):
            assert get_classes(li) == ["diff-list-item-reordered"]


def test_whitespace_runs_skip_style_and_script_text():
    root = parse_html("<style>a {  color: red }</style><p>a  b</p><script>x  = 1</script>")
    assert mark_whitespace_runs(root) == 1
    style = _first(root)
    assert localname(style) == "style"
    assert element_children(style) == []
    assert text_content(style) == "a {  color: red }"
    assert len(_markers(root, "diff-whitespace")) == 1
