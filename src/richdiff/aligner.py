# -*- coding: utf-8 -*-
"""
Structural alignment of two DOM trees.

Nodes are paired greedily, parents before children:

1. exact pass: same signature and same text (first fit),
2. structural pass: same signature only; the pair's text is word-diffed and
   highlighted when something other than whitespace changed,
3. residual pass: whatever is left is removed (old side) or added (new side).

A removed, added or highlighted node decides for its whole subtree. Nodes
paired in the exact pass do not, so formatting changes below an identical
block are still found. Pairs that end up inside a removed or added subtree
are dropped again and their other side goes back to the residual pass.
The matching is order dependent on purpose; the traversal order is fixed,
which keeps the result deterministic.
"""
import logging

from .config import (
    DiffConfig, STATUS_ADDED, STATUS_CHANGED, STATUS_IDENTICAL, STATUS_REMOVED,
    STATUS_UNCHANGED,
)
from .highlighter import apply_highlights, mark_node_as_changed
from .indexer import index_tree, is_descendant_path, iter_ancestors, sort_by_depth
from .text_differ import diff_words, has_significant_changes

logger = logging.getLogger(__name__)


class AlignmentResult(object):

    def __init__(self, pairs, removed, added, statuses):
        self.pairs = pairs
        self.removed = removed
        self.added = added
        self.statuses = statuses

    def __repr__(self):
        return '<AlignmentResult pairs=%d removed=%d added=%d>' % (
            len(self.pairs), len(self.removed), len(self.added))


class _AlignmentState(object):
    """Matching state threaded through the passes of one alignment."""

    def __init__(self, old_records, new_records):
        self.old_records = old_records
        self.new_records = new_records
        self.old_sorted = sort_by_depth(old_records)
        self.new_sorted = sort_by_depth(new_records)
        self.pairs = []
        self.removed = []
        self.added = []

    def has_decided_ancestor(self, records, record):
        for ancestor in iter_ancestors(records, record):
            if ancestor.decided:
                return True
        return False

    def candidates(self):
        """New records still available for pairing, in traversal order."""
        for record in self.new_sorted:
            if record.matched or self.has_decided_ancestor(self.new_records, record):
                continue
            yield record

    def pair(self, old_record, new_record, status):
        old_record.matched = new_record.matched = True
        old_record.status = new_record.status = status
        self.pairs.append((old_record.path, new_record.path))

    def decide(self, *records):
        for record in records:
            record.decided = True


def exact_pass(state):
    for old_record in state.old_sorted:
        if state.has_decided_ancestor(state.old_records, old_record):
            old_record.matched = True
            continue
        for new_record in state.candidates():
            if (old_record.signature == new_record.signature
                    and old_record.text == new_record.text):
                state.pair(old_record, new_record, STATUS_IDENTICAL)
                break


def structural_pass(state, config):
    for old_record in state.old_sorted:
        if old_record.matched or state.has_decided_ancestor(state.old_records, old_record):
            continue
        for new_record in state.candidates():
            if old_record.signature != new_record.signature:
                continue
            diffs = diff_words(old_record.text, new_record.text, config)
            if has_significant_changes(diffs):
                state.pair(old_record, new_record, STATUS_CHANGED)
                apply_highlights(old_record.element, new_record.element, diffs, config)
                state.decide(old_record, new_record)
                logger.debug('changed pair %s -> %s', old_record.path, new_record.path)
            else:
                state.pair(old_record, new_record, STATUS_UNCHANGED)
            break


def _residual(state, records, ordered, status, out):
    for record in ordered:
        if record.matched or state.has_decided_ancestor(records, record):
            continue
        record.status = status
        state.decide(record)
        out.append(record.path)
        for path, other in records.items():
            if not is_descendant_path(path, record.path):
                continue
            if path in out:
                # Decided in an earlier round, now covered by this ancestor.
                out.remove(path)
            other.matched = True
            other.decided = False
            other.status = status
        logger.debug('%s node %s', status, record.path)


def _under_residual(records, record):
    """True when an ancestor of ``record`` was removed or added."""
    for ancestor in iter_ancestors(records, record):
        if ancestor.decided and ancestor.status in (STATUS_REMOVED, STATUS_ADDED):
            return True
    return False


def _drop_superseded_pairs(state):
    """
    Remove pairs with a side inside a removed or added subtree. The other
    side is released for the next residual round unless it is inside one
    too. Returns True when a record was released.
    """
    kept = []
    released = False
    for old_path, new_path in state.pairs:
        old_record = state.old_records[old_path]
        new_record = state.new_records[new_path]
        old_gone = _under_residual(state.old_records, old_record)
        new_gone = _under_residual(state.new_records, new_record)
        if not (old_gone or new_gone):
            kept.append((old_path, new_path))
            continue
        for record, gone in ((old_record, old_gone), (new_record, new_gone)):
            if not gone:
                record.matched = record.decided = False
                record.status = None
                released = True
        logger.debug('dropped pair %s -> %s', old_path, new_path)
    state.pairs = kept
    return released


def residual_pass(state, config):
    while True:
        _residual(state, state.old_records, state.old_sorted, STATUS_REMOVED, state.removed)
        _residual(state, state.new_records, state.new_sorted, STATUS_ADDED, state.added)
        if not _drop_superseded_pairs(state):
            break
    for path in state.removed:
        mark_node_as_changed(state.old_records[path].element, STATUS_REMOVED, config)
    for path in state.added:
        mark_node_as_changed(state.new_records[path].element, STATUS_ADDED, config)


def _inherit_statuses(records, ordered):
    """Fill the statuses left open under a decided ancestor."""
    for record in ordered:
        if record.status is not None:
            continue
        for ancestor in iter_ancestors(records, record):
            if ancestor.decided:
                record.status = ancestor.status
                break


def align_records(old_records, new_records, config=None):
    """Run the three passes over two indexed trees."""
    config = config or DiffConfig()
    state = _AlignmentState(old_records, new_records)
    exact_pass(state)
    structural_pass(state, config)
    residual_pass(state, config)
    _inherit_statuses(old_records, state.old_sorted)
    _inherit_statuses(new_records, state.new_sorted)

    statuses = {}
    for records in (old_records, new_records):
        for path, record in records.items():
            statuses[path] = record.status
    return AlignmentResult(state.pairs, state.removed, state.added, statuses)


def align(old_root, new_root, config=None):
    """
    Align the element trees under ``old_root`` and ``new_root`` and annotate
    both in place.
    """
    config = config or DiffConfig()
    old_records, _old_spans = index_tree(old_root, 'old', config)
    new_records, _new_spans = index_tree(new_root, 'new', config)
    result = align_records(old_records, new_records, config)
    logger.debug('alignment finished: %r', result)
    return result
