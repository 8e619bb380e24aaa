# -*- coding: utf-8 -*-
"""
Inline (merged) HTML diff over Genshi event streams.

This is the default whole-document differ used by the ``inline`` mode. It
diffs the flat event streams of both fragments and injects ``<del>`` and
``<ins>`` markers into a single output stream:

>>> print(render_inline_diff('Foo baz', 'Foo blah baz'))
<div class="diff">Foo <ins class="diff-added">blah </ins>baz</div>
"""
from contextlib import contextmanager
from difflib import SequenceMatcher
from itertools import chain

from genshi.core import Stream, QName, Attrs, START, END, TEXT

from .config import DiffConfig, _token_split_re
from .parser import longzip, parse_html_stream


class InsensitiveSequenceMatcher(SequenceMatcher):
    """
    SequenceMatcher that ignores very small matching blocks.

    This prevents "shredded" diffs where unrelated texts get word-by-word
    interleaving due to incidental small matches (e.g. "de" matching "de").
    """

    def __init__(self, isjunk=None, a='', b='', threshold=2):
        super().__init__(isjunk, a, b)
        self.threshold = threshold

    def get_matching_blocks(self):
        # Dynamically adjust threshold based on sequence size to avoid
        # over-filtering on very short sequences.
        size = min(len(self.a), len(self.b))
        effective_threshold = min(self.threshold, size // 4)

        blocks = super().get_matching_blocks()
        # Keep blocks larger than threshold, or the sentinel (size=0) at the end.
        return [block for block in blocks
                if block[2] > effective_threshold or block[2] == 0]


class StreamDiffer(object):
    """
    Diffs two streams of Genshi events, injecting ``<ins>`` and ``<del>``
    markers. Tags that only changed their attributes are kept once and
    flagged with a class plus ``data-old-*`` attributes.
    """

    def __init__(self, old_stream, new_stream, config=None):
        self.config = config or DiffConfig()
        self._old_events = list(old_stream)
        self._new_events = list(new_stream)
        self._result = None
        self._stack = []
        self._context = None

    @contextmanager
    def context(self, kind):
        old_context = self._context
        self._context = kind
        try:
            yield
        finally:
            self._context = old_context

    def inject_class(self, attrs, classname):
        cls = attrs.get('class')
        attrs |= [(QName('class'), cls and cls + ' ' + classname or classname)]
        return attrs

    def inject_refattr(self, attrs, old_attrs):
        # Only inject data-old-* for attributes that actually changed.
        for attr in self.config.track_attrs:
            old_attr = old_attrs.get(attr)
            new_attr = attrs.get(attr)
            if old_attr != new_attr and old_attr is not None:
                attrs |= [(QName('data-old-%s' % attr), old_attr)]
        return attrs

    def append(self, type, data, pos):
        self._result.append((type, data, pos))

    def text_split(self, text):
        rx = getattr(self.config, 'tokenize_regex', _token_split_re)
        return [p for p in rx.split(text) if p != u'']

    def change_attrs(self, tag):
        cls = self.config.removed_class if tag == 'del' else self.config.added_class
        return Attrs([(QName('class'), cls)])

    def mark_text(self, pos, text, tag):
        tag_qname = QName(tag)
        self.append(START, (tag_qname, self.change_attrs(tag)), pos)
        self.append(TEXT, text, pos)
        self.append(END, tag_qname, pos)

    def diff_text(self, pos, old_text, new_text):
        old = self.text_split(old_text)
        new = self.text_split(new_text)
        matcher = InsensitiveSequenceMatcher(None, old, new,
                                             threshold=self.config.sequence_match_threshold)

        # Deletions always precede insertions inside one changed region.
        pending_del = []
        pending_ins = []

        def flush_pending():
            if pending_del:
                self.mark_text(pos, u''.join(pending_del), 'del')
                del pending_del[:]
            if pending_ins:
                self.mark_text(pos, u''.join(pending_ins), 'ins')
                del pending_ins[:]

        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == 'equal':
                flush_pending()
                self.append(TEXT, u''.join(old[i1:i2]), pos)
            elif tag == 'replace':
                pending_del.extend(old[i1:i2])
                pending_ins.extend(new[j1:j2])
            elif tag == 'delete':
                pending_del.extend(old[i1:i2])
            elif tag == 'insert':
                pending_ins.extend(new[j1:j2])
        flush_pending()

    def replace(self, old_start, old_end, new_start, new_end):
        old = self._old_events[old_start:old_end]
        new = self._new_events[new_start:new_end]
        for idx, (old_event, new_event) in enumerate(longzip(old, new)):
            if old_event is None:
                self.insert(new_start + idx, new_end)
                break
            elif new_event is None:
                self.delete(old_start + idx, old_end)
                break

            if old_event[0] == new_event[0]:
                type = old_event[0]
                if type == START:
                    _, (tag, attrs), pos = new_event
                    self.enter_mark_replaced(pos, tag, attrs, old_event[1][1])
                # Try to leave the new tag first, then the old one.
                elif type == END:
                    _, tag, pos = new_event
                    if not self.leave(pos, tag):
                        self.leave(pos, old_event[1])
                elif type == TEXT:
                    _, new_text, pos = new_event
                    self.diff_text(pos, old_event[1], new_text)
                else:
                    self.append(*new_event)
            elif old_event[0] == TEXT and new_event[0] in (START, END):
                _, text, pos = old_event
                self.mark_text(pos, text, 'del')
                type, data, pos = new_event
                if type == START:
                    self.enter(pos, *data)
                else:
                    self.leave(pos, data)
            elif old_event[0] in (START, END) and new_event[0] == TEXT:
                # Old markup went away: render the rest as delete then insert
                # so the deleted content keeps its formatting.
                self.delete(old_start + idx, old_end)
                self.insert(new_start + idx, new_end)
                break
            else:
                self.append(*new_event)

    def delete(self, start, end):
        with self.context('del'):
            self.block_process(self._old_events[start:end])

    def insert(self, start, end):
        with self.context('ins'):
            self.block_process(self._new_events[start:end])

    def unchanged(self, start, end):
        with self.context(None):
            self.block_process(self._old_events[start:end])

    def enter(self, pos, tag, attrs):
        self._stack.append(tag)
        self.append(START, (tag, attrs), pos)

    def enter_mark_replaced(self, pos, tag, attrs, old_attrs):
        attrs = self.inject_class(attrs, 'diff-node-replaced')
        attrs = self.inject_refattr(attrs, old_attrs)
        self._stack.append(tag)
        self.append(START, (tag, attrs), pos)

    def leave(self, pos, tag):
        if not self._stack:
            return False
        if tag == self._stack[-1]:
            self.append(END, tag, pos)
            self._stack.pop()
            return True
        return False

    def leave_all(self):
        if self._stack:
            last_pos = (self._new_events or self._old_events)[-1][2]
            for tag in reversed(self._stack):
                self.append(END, tag, last_pos)
        del self._stack[:]

    def block_process(self, events):
        for event in events:
            type, data, pos = event
            if type == START:
                self.enter(pos, *data)
            elif type == END:
                self.leave(pos, data)
            elif type == TEXT:
                if self._context is not None and data.strip():
                    self.mark_text(pos, data, self._context)
                else:
                    self.append(type, data, pos)
            else:
                self.append(type, data, pos)

    def process(self):
        self._result = []
        matcher = SequenceMatcher(None, self._old_events, self._new_events)
        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == 'replace':
                # Deletions first, like in diff_text.
                self.replace(i1, i2, j1, j2)
            elif tag == 'delete':
                self.delete(i1, i2)
            elif tag == 'insert':
                self.insert(j1, j2)
            else:
                self.unchanged(i1, i2)
        self.leave_all()

    def get_diff_stream(self):
        if self._result is None:
            self.process()
        return Stream(self._result)


def diff_genshi_stream(old_stream, new_stream, config=None):
    """Diff two Genshi streams into a single annotated stream."""
    return StreamDiffer(old_stream, new_stream, config=config).get_diff_stream()


def render_inline_diff(old, new, config=None):
    """Renders the merged diff between two HTML fragments."""
    config = config or DiffConfig()
    old_stream = parse_html_stream(old, config.wrapper_element, config.wrapper_class)
    new_stream = parse_html_stream(new, config.wrapper_element, config.wrapper_class)
    rv = diff_genshi_stream(old_stream, new_stream, config)
    return rv.render('html', encoding=None)


def render_fallback(old, new, config=None):
    """Both fragments one after the other, used when the merged diff fails."""
    config = config or DiffConfig()
    return u''.join(chain(
        [u'<div class="diff-fallback-old">', u'<h3>%s</h3>' % config.fallback_old_title, old or u'', u'</div>'],
        [u'<div class="diff-fallback-new">', u'<h3>%s</h3>' % config.fallback_new_title, new or u'', u'</div>'],
    ))
