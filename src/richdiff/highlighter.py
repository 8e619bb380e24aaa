# -*- coding: utf-8 -*-
"""
Highlight application.

Everything in here mutates DOM trees in place and follows the same recipe:
locate a text node, build the list of nodes that replace it (plain text and
marker elements, whose text concatenates back to the original), then splice
that list into the parent's children.
"""
import logging
import re

from .config import DiffConfig, LIST_TAGS
from .indexer import extract_text_spans
from .text_differ import new_view, old_view, split_into_words, DIFF_EQUAL
from .utils import (
    add_classes, create_element, get_classes, in_raw_text, is_element, is_text, is_whitespace,
    iter_text_nodes, localname, owner_document, resolve_path, splice, text_content,
)

logger = logging.getLogger(__name__)


class WordGroup(object):
    """Maximal run of tokens sharing the same changed flag."""

    __slots__ = ('start', 'end', 'changed')

    def __init__(self, start, end, changed):
        self.start = start
        self.end = end
        self.changed = changed

    def __repr__(self):
        return '<WordGroup %d:%d%s>' % (self.start, self.end, ' changed' if self.changed else '')


def group_words(view, config=None):
    """Turn a one-sided op list into WordGroups with absolute offsets."""
    groups = []
    position = 0
    current = None
    for op, text in view:
        changed = op != DIFF_EQUAL
        for word in split_into_words(text, config):
            start, position = position, position + len(word)
            if current is not None and current.changed == changed:
                current.end = position
                continue
            current = WordGroup(start, position, changed)
            groups.append(current)
    return groups


def make_marker(document, change_type, text, parent=None, config=None):
    """
    Inline marker element for a changed fragment.

    When ``parent`` is given its class list and inline style are copied onto
    the marker so the fragment keeps the surrounding formatting.
    """
    config = config or DiffConfig()
    marker = create_element(document, config.marker_tag, text=text)
    add_classes(marker, config.change_class(change_type))
    if is_element(parent):
        style = parent.getAttribute('style')
        if style:
            marker.setAttribute('style', style)
        classes = get_classes(parent)
        if classes:
            add_classes(marker, *classes)
    return marker


def _split_text_node(node, ranges, change_type, config, inherit_parent):
    """
    Replacement nodes for ``node`` with every ``(start, end)`` local range
    wrapped in a marker. Ranges must be sorted and disjoint.
    """
    document = owner_document(node)
    parent = node.parentNode if inherit_parent else None
    content = node.data
    replacements = []
    position = 0
    for start, end in ranges:
        if start > position:
            replacements.append(document.createTextNode(content[position:start]))
        replacements.append(make_marker(document, change_type, content[start:end], parent, config))
        position = end
    if position < len(content):
        replacements.append(document.createTextNode(content[position:]))
    return replacements


def apply_word_highlighting(spans, groups, change_type, config=None):
    """
    Wrap the changed groups of one side. Each text node is split at most
    once; groups are visited in ascending offset order.
    """
    config = config or DiffConfig()
    processed = set()
    markers = 0
    for group in groups:
        if not group.changed:
            continue
        affected = []
        for span in spans:
            if id(span.node) in processed:
                continue
            if span.end <= group.start or span.start >= group.end:
                continue
            local_start = max(0, group.start - span.start)
            local_end = min(len(span.node.data), group.end - span.start)
            if local_start < local_end:
                affected.append((span.node, local_start, local_end))

        for node, local_start, local_end in affected:
            if is_whitespace(node.data[local_start:local_end]):
                continue
            if in_raw_text(node):
                continue
            if node.parentNode is None:
                logger.debug('skipping detached text node %r', node.data)
                continue
            replacements = _split_text_node(node, [(local_start, local_end)], change_type,
                                            config, inherit_parent=True)
            splice(node, replacements)
            processed.add(id(node))
            markers += 1
    return markers


def apply_highlights(old_element, new_element, diffs, config=None):
    """Mark the text differences of an aligned pair of elements."""
    config = config or DiffConfig()
    old_spans = extract_text_spans(old_element)
    new_spans = extract_text_spans(new_element)
    old_groups = group_words(old_view(diffs), config)
    new_groups = group_words(new_view(diffs), config)
    apply_word_highlighting(old_spans, old_groups, 'removed', config)
    apply_word_highlighting(new_spans, new_groups, 'added', config)


def mark_node_as_changed(element, change_type, config=None):
    """
    Flag a whole element as removed or added. Existing classes and styles are
    kept; the original inline style is copied to a recoverable attribute.
    """
    if not is_element(element):
        return
    config = config or DiffConfig()
    original_style = element.getAttribute('style')
    add_classes(element, config.node_change_class(change_type))
    if original_style and config.preserve_original_style:
        element.setAttribute(config.original_style_attr, original_style)


def apply_text_node_changes(root, text_nodes, changes, config=None):
    """
    Splice markers into the raw text layout of ``root``.

    ``text_nodes`` comes from :func:`richdiff.indexer.extract_text_nodes` on
    the unmodified tree and ``changes`` is a list of
    ``(start, end, text, change_type)`` ranges. Every path is resolved before
    the first mutation; paths that no longer lead to the recorded text node
    are skipped. Returns the number of markers inserted.
    """
    config = config or DiffConfig()
    targets = []
    for raw in text_nodes:
        ranges = []
        change_type = None
        for start, end, _text, kind in changes:
            if raw.end <= start or raw.start >= end:
                continue
            local_start = max(0, start - raw.start)
            local_end = min(len(raw.text), end - raw.start)
            if local_start < local_end:
                ranges.append((local_start, local_end))
                change_type = kind
        if not ranges:
            continue
        node = resolve_path(root, raw.path)
        if not is_text(node) or node.data != raw.text:
            logger.debug('text node at %r no longer resolves', raw.path)
            continue
        if in_raw_text(node):
            continue
        targets.append((node, sorted(ranges), change_type))

    markers = 0
    for node, ranges, change_type in targets:
        splice(node, _split_text_node(node, ranges, change_type, config, inherit_parent=False))
        markers += len(ranges)
    return markers


def mark_whitespace_runs(container, config=None):
    """
    Wrap runs of consecutive literal spaces in a cosmetic marker. No
    character is added or removed.
    """
    config = config or DiffConfig()
    rx = re.compile(u' {%d,}' % max(1, config.whitespace_min_run))
    markers = 0
    for node in list(iter_text_nodes(container)):
        if in_raw_text(node):
            continue
        content = node.data
        matches = list(rx.finditer(content))
        if not matches:
            continue
        document = owner_document(node)
        replacements = []
        position = 0
        for match in matches:
            if match.start() > position:
                replacements.append(document.createTextNode(content[position:match.start()]))
            replacements.append(create_element(
                document, config.marker_tag,
                attrs=[('class', config.whitespace_class), ('style', config.whitespace_style)],
                text=match.group(),
            ))
            position = match.end()
        if position < len(content):
            replacements.append(document.createTextNode(content[position:]))
        if splice(node, replacements):
            markers += len(matches)
    return markers


def _iter_elements(node, tag):
    for child in node.childNodes:
        if is_element(child):
            if localname(child) == tag:
                yield child
            for sub in _iter_elements(child, tag):
                yield sub


def _list_items(root):
    items = []
    for list_tag in sorted(LIST_TAGS, reverse=True):  # ul first, then ol
        for list_el in _iter_elements(root, list_tag):
            for li in _iter_elements(list_el, 'li'):
                items.append({
                    'element': li,
                    'text': text_content(li),
                    'type': list_tag,
                    'parent': list_el,
                })
    return items


def mark_list_changes(old_root, new_root, config=None):
    """
    Optional list pass: flags list items whose list type changed, items
    that only exist on one side and items whose relative order changed.
    It only adds classes and never touches the node alignment.
    """
    old_items = _list_items(old_root)
    new_items = _list_items(new_root)

    for old_item in old_items:
        for new_item in new_items:
            if new_item['text'] == old_item['text'] and new_item['type'] != old_item['type']:
                add_classes(old_item['parent'], 'diff-list-type-changed')
                add_classes(new_item['parent'], 'diff-list-type-changed')
                add_classes(old_item['element'], 'diff-list-item-type-changed')
                add_classes(new_item['element'], 'diff-list-item-type-changed')
                break

    new_texts = [item['text'] for item in new_items]
    old_texts = [item['text'] for item in old_items]
    for old_item in old_items:
        if old_item['text'] not in new_texts:
            add_classes(old_item['element'], 'diff-list-item-removed')
    for new_item in new_items:
        if new_item['text'] not in old_texts:
            add_classes(new_item['element'], 'diff-list-item-added')

    common = [text for text in old_texts if text in new_texts]
    for text in common:
        old_index = old_texts.index(text)
        new_index = new_texts.index(text)
        if old_index == new_index:
            continue
        others = [t for t in common if t != text]
        old_relative = [old_texts.index(t) < old_index for t in others]
        new_relative = [new_texts.index(t) < new_index for t in others]
        if old_relative != new_relative:
            add_classes(old_items[old_index]['element'], 'diff-list-item-reordered')
            add_classes(new_items[new_index]['element'], 'diff-list-item-reordered')
