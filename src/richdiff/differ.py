# -*- coding: utf-8 -*-
"""
Diff orchestration.

:class:`RichTextDiffer` runs one pass per ``(old_html, new_html)`` pair:

* identical inputs are returned untouched,
* same text but different markup goes through the structural aligner
  (formatting and tag changes) and the whitespace-run marker,
* anything else is word-diffed on the plain text of both containers and
  the changes are spliced into the raw text layout.

A pass never raises: on failure both sides fall back to the unmodified input
and the error is logged and returned on the :class:`DiffResult`.
"""
import copy
import logging
from functools import partial

from .aligner import align
from .config import (
    DiffConfig, MODES, MODE_INLINE, MODE_SIDE_BY_SIDE, STATE_COMPARING, STATE_DONE, STATE_IDLE,
    STATE_STRUCTURAL_ONLY, STATE_TEXTUAL_DIFF,
)
from .highlighter import apply_text_node_changes, mark_list_changes, mark_whitespace_runs
from .indexer import extract_text_nodes
from .inline import render_fallback, render_inline_diff
from .parser import parse_html, serialize_children, strip_private_attributes
from .text_differ import change_ranges, diff_words
from .utils import text_content

logger = logging.getLogger(__name__)


class DiffResult(object):
    """Outcome of one diff pass."""

    def __init__(self, mode, old_html=None, new_html=None, html=None):
        self.mode = mode
        self.state = STATE_IDLE
        self.path_taken = None
        self.old_html = old_html
        self.new_html = new_html
        self.html = html
        self.alignment = None
        self.error = None

    @property
    def ok(self):
        return self.error is None

    def __repr__(self):
        return '<DiffResult %s %s%s>' % (self.mode, self.state,
                                         ' error=%r' % self.error if self.error else '')


class RichTextDiffer(object):
    """
    Runs diff passes with a fixed configuration. ``state`` is the state of
    the last pass and ``history`` lists the states it went through.
    """

    def __init__(self, config=None):
        self.config = config or DiffConfig()
        if self.config.mode not in MODES:
            raise ValueError('unknown diff mode %r (expected one of %s)'
                             % (self.config.mode, ', '.join(MODES)))
        self.state = STATE_IDLE
        self.history = [STATE_IDLE]

    def _enter(self, state, result):
        self.state = result.state = state
        self.history.append(state)

    def diff(self, old_html, new_html):
        old_html = old_html or u''
        new_html = new_html or u''
        self.history = [STATE_IDLE]
        if self.config.mode == MODE_INLINE:
            return self._diff_inline(old_html, new_html)
        return self._diff_side_by_side(old_html, new_html)

    def _diff_side_by_side(self, old_html, new_html):
        result = DiffResult(self.config.mode, old_html, new_html)
        self._enter(STATE_COMPARING, result)
        if old_html == new_html:
            self._enter(STATE_DONE, result)
            return result
        try:
            old_root = parse_html(old_html)
            new_root = parse_html(new_html)
            if text_content(old_root) == text_content(new_root):
                self._enter(STATE_STRUCTURAL_ONLY, result)
                result.path_taken = 'structural'
                self._structural(old_root, new_root, result)
            else:
                self._enter(STATE_TEXTUAL_DIFF, result)
                result.path_taken = 'textual'
                self._textual(old_root, new_root)
            result.old_html = serialize_children(old_root)
            result.new_html = serialize_children(new_root)
        except Exception as exc:
            logger.warning('highlighting changes failed, showing unmodified input', exc_info=True)
            result.old_html = old_html
            result.new_html = new_html
            result.alignment = None
            result.error = exc
        self._enter(STATE_DONE, result)
        return result

    def _structural(self, old_root, new_root, result):
        result.alignment = align(old_root, new_root, self.config)
        if self.config.mark_list_changes:
            mark_list_changes(old_root, new_root, self.config)
        mark_whitespace_runs(old_root, self.config)
        mark_whitespace_runs(new_root, self.config)

    def _textual(self, old_root, new_root):
        diffs = diff_words(text_content(old_root), text_content(new_root), self.config)
        old_changes, new_changes = change_ranges(diffs, self.config.merge_adjacent_changes)
        # Layouts are captured before either tree is touched.
        old_nodes = extract_text_nodes(old_root)
        new_nodes = extract_text_nodes(new_root)
        removed = apply_text_node_changes(old_root, old_nodes, old_changes, self.config)
        added = apply_text_node_changes(new_root, new_nodes, new_changes, self.config)
        logger.debug('textual diff: %d removed markers, %d added markers', removed, added)

    def _diff_inline(self, old_html, new_html):
        result = DiffResult(self.config.mode)
        self._enter(STATE_COMPARING, result)
        prefix = self.config.private_attr_prefix
        try:
            differ = self.config.document_differ or partial(render_inline_diff, config=self.config)
            result.html = differ(strip_private_attributes(old_html, prefix),
                                 strip_private_attributes(new_html, prefix))
        except Exception as exc:
            logger.warning('inline diff failed, showing both versions', exc_info=True)
            result.html = render_fallback(old_html, new_html, self.config)
            result.error = exc
        self._enter(STATE_DONE, result)
        return result


def render_diff(old, new, config=None):
    """Diff two HTML fragments; returns a :class:`DiffResult`."""
    return RichTextDiffer(config).diff(old, new)


def render_side_by_side(old, new, config=None):
    """Annotated ``(old_html, new_html)`` for two HTML fragments."""
    config = config or DiffConfig()
    if config.mode != MODE_SIDE_BY_SIDE:
        config = _with_mode(config, MODE_SIDE_BY_SIDE)
    result = RichTextDiffer(config).diff(old, new)
    return result.old_html, result.new_html


def render_inline(old, new, config=None):
    """Single merged HTML fragment for two HTML fragments."""
    config = config or DiffConfig()
    if config.mode != MODE_INLINE:
        config = _with_mode(config, MODE_INLINE)
    return RichTextDiffer(config).diff(old, new).html


def diff_trees(old_root, new_root, config=None):
    """
    Structural alignment of two caller-owned DOM trees, annotating them in
    place. Returns the :class:`~richdiff.aligner.AlignmentResult`.
    """
    return align(old_root, new_root, config)


def _with_mode(config, mode):
    config = copy.copy(config)
    config.mode = mode
    return config
