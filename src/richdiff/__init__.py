# -*- coding: utf-8 -*-
"""
    richdiff
    ~~~~~~~~

    Diffs two versions of a rich-text HTML fragment and annotates both sides
    in place, keeping the original formatting around every change.  Examples:

    >>> from richdiff import render_side_by_side

    >>> old, new = render_side_by_side('<p>Hello world</p>', '<p>Hello there</p>')
    >>> print(old)
    <p>Hello <span class="diff-removed">world</span></p>
    >>> print(new)
    <p>Hello <span class="diff-added">there</span></p>

    Formatting-only changes are found by aligning the element trees:

    >>> old, new = render_side_by_side('<p>Foo <b>bar</b></p>', '<p>Foo <i>bar</i></p>')
    >>> print(old)
    <p>Foo <b class="diff-node-removed">bar</b></p>
    >>> print(new)
    <p>Foo <i class="diff-node-added">bar</i></p>
"""
from .config import DiffConfig, DIFF_STYLESHEET
from .differ import (
    DiffResult,
    RichTextDiffer,
    diff_trees,
    render_diff,
    render_inline,
    render_side_by_side,
)
from .errors import DiffEngineFailure, RichDiffError, UnresolvableNode
from .parser import parse_html, serialize_children
from .text_differ import diff_words

__all__ = [
    'render_diff',
    'render_side_by_side',
    'render_inline',
    'diff_trees',
    'diff_words',
    'parse_html',
    'serialize_children',
    'DiffConfig',
    'DiffResult',
    'RichTextDiffer',
    'DIFF_STYLESHEET',
    'RichDiffError',
    'UnresolvableNode',
    'DiffEngineFailure',
]
