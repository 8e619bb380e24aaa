# -*- coding: utf-8 -*-
"""
Tree indexing.

Two independent walks over a container:

* :func:`index_tree` records every element under a path built from
  *element* child indices (``old/0/2``) together with its structural
  signature and text content.
* :func:`extract_text_spans` / :func:`extract_text_nodes` record every
  descendant text node with its absolute character offsets. Raw text nodes
  are addressed by their index among *all* child nodes.

Paths are only valid for the tree state they were computed on; never index
a tree while it is being mutated.
"""
from .config import DiffConfig
from .utils import element_children, is_element, is_text, localname, text_content


class NodeRecord(object):
    """One element of an indexed tree."""

    __slots__ = ('path', 'signature', 'text', 'depth', 'parent_path', 'element',
                 'matched', 'decided', 'status')

    def __init__(self, path, signature, text, depth, parent_path, element):
        self.path = path
        self.signature = signature
        self.text = text
        self.depth = depth
        # Back-reference by key, only used for ancestor lookups.
        self.parent_path = parent_path
        self.element = element
        self.matched = False
        self.decided = False
        self.status = None

    def __repr__(self):
        return '<NodeRecord %s %r>' % (self.path, self.signature)


class TextSpan(object):
    """A text node and its [start, end) range in the element's text."""

    __slots__ = ('node', 'start', 'end')

    def __init__(self, node, start, end):
        self.node = node
        self.start = start
        self.end = end

    def __repr__(self):
        return '<TextSpan %d:%d %r>' % (self.start, self.end, self.node.data)


class RawTextNode(object):
    """A text node addressed by child indices from the container."""

    __slots__ = ('path', 'text', 'start', 'end')

    def __init__(self, path, text, start, end):
        self.path = path
        self.text = text
        self.start = start
        self.end = end

    def __repr__(self):
        return '<RawTextNode %r %d:%d>' % (self.path, self.start, self.end)


def attrs_signature(element, config=None):
    """
    Canonical ``name="value"`` rendering of the element's attributes, sorted
    by name, without the editor's private attributes.
    """
    config = config or DiffConfig()
    prefix = config.private_attr_prefix
    items = []
    for name, value in element.attributes.items():
        if prefix and name.startswith(prefix):
            continue
        items.append((name, value))
    items.sort()
    return u' '.join(u'%s="%s"' % (name, value) for name, value in items)


def node_signature(element, config=None):
    """Tag name, stable attributes and child count of an element."""
    signature = localname(element)
    attrs = attrs_signature(element, config)
    if attrs:
        signature += u' ' + attrs
    return u'%s:%d' % (signature, len(element.childNodes))


def index_tree(root, prefix, config=None):
    """
    Index the element descendants of ``root``.

    Returns ``(records, text_spans)``: an ordered mapping path -> NodeRecord
    in pre-order, and the text spans of the whole container.
    """
    config = config or DiffConfig()
    records = {}

    def process(element, path, depth, parent_path):
        records[path] = NodeRecord(
            path,
            node_signature(element, config),
            text_content(element),
            depth,
            parent_path,
            element,
        )
        for index, child in enumerate(element_children(element)):
            process(child, '%s/%d' % (path, index), depth + 1, path)

    for index, child in enumerate(element_children(root)):
        process(child, '%s/%d' % (prefix, index), 0, prefix)

    return records, extract_text_spans(root)


def sort_by_depth(records):
    """Records by ascending depth; encounter order within a depth."""
    return sorted(records.values(), key=lambda record: record.depth)


def parent_record(records, record):
    return records.get(record.parent_path)


def iter_ancestors(records, record):
    """Ancestor records, nearest first. Stops at the tree prefix."""
    parent = parent_record(records, record)
    while parent is not None:
        yield parent
        parent = parent_record(records, parent)


def is_descendant_path(path, ancestor_path):
    return path.startswith(ancestor_path + '/')


def extract_text_spans(element):
    """
    Single left-to-right walk over all descendant text nodes. Spans are
    contiguous and their union is the element's text content.
    """
    spans = []
    position = 0

    def process(node):
        nonlocal position
        for child in node.childNodes:
            if is_text(child):
                length = len(child.data)
                spans.append(TextSpan(child, position, position + length))
                position += length
            elif is_element(child):
                process(child)

    process(element)
    return spans


def extract_text_nodes(root):
    """Like :func:`extract_text_spans`, addressing nodes by child index path."""
    nodes = []
    position = 0

    def process(node, path):
        nonlocal position
        for index, child in enumerate(node.childNodes):
            child_path = path + (index,)
            if is_text(child):
                text = child.data
                nodes.append(RawTextNode(child_path, text, position, position + len(text)))
                position += len(text)
            elif is_element(child):
                process(child, child_path)

    process(root, ())
    return nodes
