# -*- coding: utf-8 -*-
"""
Funciones de parsing y serialización HTML para richdiff.
"""
from itertools import zip_longest

import html5lib
from html5lib.serializer import HTMLSerializer
from genshi.input import ET

from .utils import create_element, is_element


# Keep end tags and quoting explicit so annotated output is stable to compare.
SERIALIZER_OPTIONS = dict(
    omit_optional_tags=False,
    quote_attr_values='always',
    minimize_boolean_attributes=False,
)


def parse_html(html, wrapper_element='div'):
    """
    Parse an HTML fragment into a DOM tree (``xml.dom.minidom`` nodes) and
    return a container element holding the fragment's top-level nodes.

    Adjacent text nodes are merged so the layout matches what a browser
    produces for ``innerHTML``.
    """
    fragment = html5lib.parseFragment(html or u'', treebuilder='dom')
    document = fragment.ownerDocument
    root = create_element(document, wrapper_element)
    root.appendChild(fragment)
    root.normalize()
    return root


def serialize_node(node):
    walker = html5lib.getTreeWalker('dom')
    return HTMLSerializer(**SERIALIZER_OPTIONS).render(walker(node))


def serialize_children(root):
    """Inner HTML of ``root``."""
    return u''.join(serialize_node(child) for child in root.childNodes)


def strip_private_attributes(html, prefix):
    """
    Remove every attribute whose name starts with ``prefix`` (the hosting
    editor's private namespace, e.g. ``data-lexical``) from an HTML fragment.
    """
    if not prefix:
        return html
    root = parse_html(html)
    stack = [root]
    while stack:
        node = stack.pop()
        if is_element(node):
            for name in list(node.attributes.keys()):
                if name.startswith(prefix):
                    node.removeAttribute(name)
        stack.extend(node.childNodes)
    return serialize_children(root)


def _drop_comments(element):
    """Remove comment nodes from an etree, keeping their tail text."""
    for child in list(element):
        if not isinstance(child.tag, str):
            tail = child.tail or u''
            idx = list(element).index(child)
            if idx == 0:
                element.text = (element.text or u'') + tail
            else:
                prev = element[idx - 1]
                prev.tail = (prev.tail or u'') + tail
            element.remove(child)
        else:
            _drop_comments(child)


def parse_html_stream(html, wrapper_element='div', wrapper_class='diff'):
    """Parse an HTML fragment into a Genshi stream."""
    builder = html5lib.getTreeBuilder('etree')
    parser = html5lib.HTMLParser(tree=builder, namespaceHTMLElements=False)
    tree = parser.parseFragment(html or u'')
    tree.tag = wrapper_element
    if wrapper_class is not None:
        tree.set('class', wrapper_class)
    _drop_comments(tree)
    return ET(tree)


def longzip(a, b):
    """Like `zip` but yields `None` for missing items."""
    return zip_longest(a, b)


__all__ = [
    'parse_html',
    'parse_html_stream',
    'serialize_children',
    'serialize_node',
    'strip_private_attributes',
    'longzip',
]
