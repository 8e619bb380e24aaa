# -*- coding: utf-8 -*-
"""
Configuración y constantes para richdiff.
"""
import re

# Expresiones regulares (exportadas para uso en otros módulos)
_word_token_re = re.compile(r'[^\s.,;:!?()]+|[.,;:!?()]', re.U)
_word_split_re = re.compile(r'[^\s.,;:!?()]+|[.,;:!?()]|\s+', re.U)
_whitespace_only_re = re.compile(r'^\s+$', re.U)
# Inline mode tokenizer (words, whitespace runs, punctuation runs)
_token_split_re = re.compile(r'(\s+|[^\w\s]+)', re.U)

MODE_SIDE_BY_SIDE = 'side-by-side'
MODE_INLINE = 'inline'
MODES = (MODE_SIDE_BY_SIDE, MODE_INLINE)

# Orchestrator states
STATE_IDLE = 'idle'
STATE_COMPARING = 'comparing'
STATE_STRUCTURAL_ONLY = 'structural-only'
STATE_TEXTUAL_DIFF = 'textual-diff'
STATE_DONE = 'done'

# Node classifications produced by the aligner
STATUS_IDENTICAL = 'identical'
STATUS_CHANGED = 'changed'
STATUS_UNCHANGED = 'unchanged'
STATUS_REMOVED = 'removed'
STATUS_ADDED = 'added'

LIST_TAGS = frozenset(['ul', 'ol'])

# Elements whose text is not markup; never split into marker spans.
RAW_TEXT_TAGS = frozenset(['script', 'style', 'textarea', 'title', 'xmp', 'iframe',
                           'noembed', 'noframes', 'noscript', 'plaintext'])


class DiffConfig(object):
    """
    Runtime configuration for diff rendering.

    Every attribute is a class-level default; pass keyword arguments to
    override them per instance::

        DiffConfig(mode='inline', private_attr_prefix='data-editor')
    """

    # Presentation: 'side-by-side' (two annotated fragments) or 'inline'
    mode = MODE_SIDE_BY_SIDE

    # Attributes owned by the hosting editor. Ignored in signatures and
    # stripped before handing HTML to the whole-document differ.
    private_attr_prefix = 'data-lexical'

    # Annotation vocabulary
    removed_class = 'diff-removed'
    added_class = 'diff-added'
    node_removed_class = 'diff-node-removed'
    node_added_class = 'diff-node-added'
    whitespace_class = 'diff-whitespace'
    whitespace_style = 'white-space: pre-wrap;'
    marker_tag = 'span'

    # Keep the inline style of a whole-node marked element recoverable.
    preserve_original_style = True
    original_style_attr = 'data-original-style'

    # Minimum run of literal spaces considered a cosmetic whitespace change
    whitespace_min_run = 2

    # Text diff engine (diff-match-patch). A zero timeout keeps diff_main
    # deterministic regardless of machine speed.
    diff_timeout = 0
    diff_edit_cost = 4
    word_token_regex = _word_token_re
    word_split_regex = _word_split_re

    # Textual path: merge contiguous changed fragments into a single marker.
    merge_adjacent_changes = True

    # Optional list-item pass (diff-list-* classes). Never alters alignment.
    mark_list_changes = False

    # Inline mode
    wrapper_element = 'div'
    wrapper_class = 'diff'
    # callable(old_html, new_html) -> merged_html; None means the bundled
    # Genshi stream differ (richdiff.inline.render_inline_diff).
    document_differ = None
    track_attrs = ('style', 'class', 'src', 'href')
    tokenize_regex = _token_split_re
    # Matching blocks shorter than this are ignored by the inline text differ.
    sequence_match_threshold = 2
    fallback_old_title = 'Before'
    fallback_new_title = 'After'

    def __init__(self, **options):
        for key, value in options.items():
            if not hasattr(type(self), key):
                raise TypeError('unknown DiffConfig option %r' % key)
            setattr(self, key, value)

    def change_class(self, change_type):
        """Class used for an inline text marker ('removed' or 'added')."""
        return self.removed_class if change_type == 'removed' else self.added_class

    def node_change_class(self, change_type):
        """Class used for a whole element marker ('removed' or 'added')."""
        return self.node_removed_class if change_type == 'removed' else self.node_added_class


# Stylesheet for the annotation vocabulary. Node markers only paint a border
# and a translucent overlay so the element keeps its own background.
DIFF_STYLESHEET = u"""\
.diff-removed {
  background: #ffeeee;
  color: #cc0000;
  text-decoration: line-through;
  border-radius: 2px;
  padding: 0 2px;
  display: inline-block;
}
.diff-added {
  background: #eeffee;
  color: #008800;
  border-radius: 2px;
  padding: 0 2px;
  display: inline-block;
}
.diff-node-removed {
  border: 1px solid #ffcccc;
  border-left: 3px solid #ff0000;
  padding: 2px;
  border-radius: 2px;
  position: relative;
}
.diff-node-removed::after {
  content: '';
  position: absolute;
  top: 0;
  left: 0;
  right: 0;
  bottom: 0;
  background-color: rgba(255, 238, 238, 0.4);
  pointer-events: none;
  z-index: 1;
}
.diff-node-added {
  border: 1px solid #ccffcc;
  border-left: 3px solid #008800;
  padding: 2px;
  border-radius: 2px;
  position: relative;
}
.diff-node-added::after {
  content: '';
  position: absolute;
  top: 0;
  left: 0;
  right: 0;
  bottom: 0;
  background-color: rgba(238, 255, 238, 0.4);
  pointer-events: none;
  z-index: 1;
}
.diff-whitespace {
  background: #f0f8ff;
  white-space: pre-wrap;
  border-radius: 2px;
}
.diff del.diff-removed, .diff ins.diff-added {
  display: inline;
}
"""
