# -*- coding: utf-8 -*-
"""
Word-granular text diffing.

This module turns two plain strings into a list of ``(op, text)`` tuples
(the diff-match-patch encoding) whose changed fragments never split a word:
a character diff is computed first, cleaned up, and every changed fragment is
then re-cut on word / punctuation boundaries.
"""
from diff_match_patch import diff_match_patch

from .config import DiffConfig, _whitespace_only_re
from .errors import DiffEngineFailure

DIFF_DELETE = diff_match_patch.DIFF_DELETE
DIFF_INSERT = diff_match_patch.DIFF_INSERT
DIFF_EQUAL = diff_match_patch.DIFF_EQUAL


def space_placeholder(*texts):
    """
    First private-use codepoint that appears in none of ``texts``.

    Spaces are swapped for it during the character diff so runs of spaces are
    compared one by one, and mapping back is lossless.
    """
    code = 0xE000
    while any(chr(code) in text for text in texts):
        code += 1
    return chr(code)


def make_matcher(config=None):
    config = config or DiffConfig()
    dmp = diff_match_patch()
    dmp.Diff_Timeout = config.diff_timeout
    dmp.Diff_EditCost = config.diff_edit_cost
    return dmp


def diff_chars(old_text, new_text, config=None):
    """Cleaned-up character diff between two strings."""
    dmp = make_matcher(config)
    placeholder = space_placeholder(old_text, new_text)
    try:
        diffs = dmp.diff_main(old_text.replace(u' ', placeholder),
                              new_text.replace(u' ', placeholder))
        diffs = [(op, text.replace(placeholder, u' ')) for op, text in diffs]
        # Readability first, then efficiency. The order is significant.
        dmp.diff_cleanupSemantic(diffs)
        dmp.diff_cleanupEfficiency(diffs)
    except Exception as exc:
        raise DiffEngineFailure('character diff failed: %s' % exc) from exc
    return diffs


def force_diff_by_words(diffs, config=None):
    """
    Re-cut every changed fragment on word boundaries.

    Whitespace between tokens is emitted as its own fragment with the same
    operation; unchanged fragments and whitespace-only fragments are kept as
    they are.
    """
    config = config or DiffConfig()
    rx = config.word_token_regex
    result = []
    for op, text in diffs:
        if op == DIFF_EQUAL or _whitespace_only_re.match(text):
            result.append((op, text))
            continue
        last = 0
        for match in rx.finditer(text):
            if match.start() > last:
                result.append((op, text[last:match.start()]))
            result.append((op, match.group()))
            last = match.end()
        if last < len(text):
            result.append((op, text[last:]))
    return result


def diff_words(old_text, new_text, config=None):
    """
    Word-level diff of two strings.

    >>> diff_words(u'Hello world', u'Hello there')
    [(0, 'Hello '), (-1, 'world'), (1, 'there')]
    """
    return force_diff_by_words(diff_chars(old_text, new_text, config), config)


def old_view(diffs):
    """Ops that make up the old text (equal + delete)."""
    return [(op, text) for op, text in diffs if op != DIFF_INSERT]


def new_view(diffs):
    """Ops that make up the new text (equal + insert)."""
    return [(op, text) for op, text in diffs if op != DIFF_DELETE]


def reconstruct_old(diffs):
    return u''.join(text for _op, text in old_view(diffs))


def reconstruct_new(diffs):
    return u''.join(text for _op, text in new_view(diffs))


def has_significant_changes(diffs):
    """True if any changed fragment carries non-whitespace content."""
    return any(op != DIFF_EQUAL and text.strip() for op, text in diffs)


def split_into_words(text, config=None):
    """
    Split text into word, punctuation and whitespace tokens. The tokens
    always concatenate back to ``text``.
    """
    if not text:
        return []
    if _whitespace_only_re.match(text):
        return [text]
    config = config or DiffConfig()
    result = []
    last = 0
    for match in config.word_split_regex.finditer(text):
        if match.start() > last:
            result.append(text[last:match.start()])
        result.append(match.group())
        last = match.end()
    if last < len(text):
        result.append(text[last:])
    return result


def change_ranges(diffs, merge_adjacent=True):
    """
    Absolute offset ranges of the changed fragments on each side.

    Returns ``(old_changes, new_changes)``, lists of
    ``(start, end, text, change_type)`` with change_type 'removed' or 'added'.
    With ``merge_adjacent`` contiguous fragments of the same side collapse
    into a single range.
    """
    old_changes = []
    new_changes = []
    old_pos = 0
    new_pos = 0

    def push(changes, start, text, change_type):
        if not text:
            return
        end = start + len(text)
        if merge_adjacent and changes and changes[-1][1] == start:
            prev_start, _prev_end, prev_text, _t = changes[-1]
            changes[-1] = (prev_start, end, prev_text + text, change_type)
        else:
            changes.append((start, end, text, change_type))

    for op, text in diffs:
        if op == DIFF_EQUAL:
            old_pos += len(text)
            new_pos += len(text)
        elif op == DIFF_DELETE:
            push(old_changes, old_pos, text, 'removed')
            old_pos += len(text)
        elif op == DIFF_INSERT:
            push(new_changes, new_pos, text, 'added')
            new_pos += len(text)
    return old_changes, new_changes
