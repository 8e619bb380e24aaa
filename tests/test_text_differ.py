from __future__ import annotations

import re

import pytest

from richdiff import text_differ
from richdiff.errors import DiffEngineFailure
from richdiff.text_differ import (
    DIFF_DELETE,
    DIFF_EQUAL,
    DIFF_INSERT,
    change_ranges,
    diff_words,
    force_diff_by_words,
    has_significant_changes,
    new_view,
    old_view,
    reconstruct_new,
    reconstruct_old,
    space_placeholder,
    split_into_words,
)


PAIRS = [
    ("Hello world", "Hello there"),
    ("The quick brown fox jumps over the lazy dog.", "The very quick brown foxes jump over the dog."),
    ("a  b", "a b"),
    ("", "abc"),
    ("abc", ""),
    ("", ""),
    ("same text", "same text"),
    ("Giá: 100.000đ, còn hàng!", "Giá: 120.000đ; hết hàng."),
    (u"non\u00a0breaking  spaces", u"non breaking\u00a0 spaces"),
    (u"private \ue000 codepoint", u"private \ue001 codepoint  "),
    ("Line one\nLine two", "Line one\n\nLine 2"),
]

_TOKEN = re.compile(r"[^\s.,;:!?()]+|[.,;:!?()]|\s+")


@pytest.mark.parametrize("old,new", PAIRS)
def test_ops_reconstruct_both_texts(old, new):
    ops = diff_words(old, new)
    assert reconstruct_old(ops) == old
    assert reconstruct_new(ops) == new


@pytest.mark.parametrize("old,new", PAIRS)
def test_changed_fragments_are_single_tokens(old, new):
    for op, text in diff_words(old, new):
        assert text != ""
        if op != DIFF_EQUAL:
            assert _TOKEN.fullmatch(text), (op, text)


def test_whole_words_are_flagged():
    ops = diff_words("Hello world", "Hello there")
    assert (DIFF_DELETE, "world") in ops
    assert (DIFF_INSERT, "there") in ops
    assert (DIFF_EQUAL, "Hello ") in ops


def test_deleted_space_is_a_real_change():
    ops = diff_words("a  b", "a b")
    assert [text for op, text in ops if op == DIFF_DELETE] == [" "]
    assert not has_significant_changes(ops)


def test_views_keep_one_side():
    ops = [(DIFF_EQUAL, "a "), (DIFF_DELETE, "b"), (DIFF_INSERT, "c")]
    assert old_view(ops) == [(DIFF_EQUAL, "a "), (DIFF_DELETE, "b")]
    assert new_view(ops) == [(DIFF_EQUAL, "a "), (DIFF_INSERT, "c")]


def test_force_diff_by_words_splits_changed_fragments_only():
    ops = [(DIFF_EQUAL, "keep this, "), (DIFF_DELETE, "old words, here"), (DIFF_INSERT, "  ")]
    assert force_diff_by_words(ops) == [
        (DIFF_EQUAL, "keep this, "),
        (DIFF_DELETE, "old"),
        (DIFF_DELETE, " "),
        (DIFF_DELETE, "words"),
        (DIFF_DELETE, ","),
        (DIFF_DELETE, " "),
        (DIFF_DELETE, "here"),
        (DIFF_INSERT, "  "),
    ]


def test_split_into_words_covers_text():
    assert split_into_words("") == []
    assert split_into_words("   ") == ["   "]
    assert split_into_words("Hi, you (there)!") == ["Hi", ",", " ", "you", " ", "(", "there", ")", "!"]
    text = "tab\tand\u00a0nbsp... done"
    assert "".join(split_into_words(text)) == text


def test_space_placeholder_avoids_input_codepoints():
    assert space_placeholder("abc", "def") == u"\ue000"
    assert space_placeholder(u"x\ue000", u"\ue001") == u"\ue002"


def test_significant_changes_ignore_whitespace():
    assert not has_significant_changes([(DIFF_EQUAL, "a"), (DIFF_INSERT, "  ")])
    assert has_significant_changes([(DIFF_EQUAL, "a"), (DIFF_INSERT, " b")])
    assert not has_significant_changes([(DIFF_EQUAL, "unchanged")])


def test_change_ranges_per_side():
    ops = [
        (DIFF_EQUAL, "The "),
        (DIFF_DELETE, "quick"),
        (DIFF_DELETE, " "),
        (DIFF_DELETE, "fox"),
        (DIFF_INSERT, "dog"),
        (DIFF_EQUAL, " ran"),
        (DIFF_INSERT, "!"),
    ]
    old_changes, new_changes = change_ranges(ops)
    assert old_changes == [(4, 13, "quick fox", "removed")]
    assert new_changes == [(4, 7, "dog", "added"), (11, 12, "!", "added")]

    old_changes, _ = change_ranges(ops, merge_adjacent=False)
    assert old_changes == [
        (4, 9, "quick", "removed"),
        (9, 10, " ", "removed"),
        (10, 13, "fox", "removed"),
    ]


def test_diff_is_deterministic():
    old = "Tài liệu hướng dẫn sử dụng phiên bản một " * 20
    new = "Tài liệu hướng dẫn dùng phiên bản hai " * 20
    assert diff_words(old, new) == diff_words(old, new)


def test_character_diff_failure_is_wrapped(monkeypatch):
    def boom(self, *args, **kwargs):
        raise RuntimeError("engine exploded")

    monkeypatch.setattr(text_differ.diff_match_patch, "diff_main", boom)
    with pytest.raises(DiffEngineFailure) as excinfo:
        diff_words("a", "b")
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_cleanup_failure_is_wrapped(monkeypatch):
    def boom(self, diffs):
        raise IndexError("cleanup exploded")

    monkeypatch.setattr(text_differ.diff_match_patch, "diff_cleanupSemantic", boom)
    with pytest.raises(DiffEngineFailure) as excinfo:
        diff_words("Hello world", "Hello there")
    assert isinstance(excinfo.value.__cause__, IndexError)
