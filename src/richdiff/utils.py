# -*- coding: utf-8 -*-
"""
Funciones utilitarias para richdiff (nodos DOM de xml.dom.minidom).
"""
from xml.dom import Node

from html5lib.constants import namespaces

from .config import RAW_TEXT_TAGS
from .errors import UnresolvableNode


def is_element(node):
    return node is not None and node.nodeType == Node.ELEMENT_NODE


def is_text(node):
    return node is not None and node.nodeType in (Node.TEXT_NODE, Node.CDATA_SECTION_NODE)


def localname(node):
    """Lowercase tag name of an element, without namespace prefix."""
    name = node.localName or node.nodeName
    if ':' in name:
        name = name.split(':', 1)[1]
    return name.lower()


def element_children(node):
    return [child for child in node.childNodes if is_element(child)]


def text_content(node):
    """
    Concatenated data of every descendant text node, like DOM ``textContent``.
    Comments and processing instructions do not contribute.
    """
    if is_text(node):
        return node.data
    parts = []
    for child in node.childNodes:
        if is_text(child):
            parts.append(child.data)
        elif is_element(child):
            parts.append(text_content(child))
    return u''.join(parts)


def is_whitespace(s):
    """True for strings that are empty or whitespace only."""
    return s.strip() == u''


def get_classes(element):
    return [c for c in (element.getAttribute('class') or u'').split() if c]


def add_classes(element, *classnames):
    """
    Append classes to the element's class list, keeping the existing ones
    and their order. Duplicates are ignored.
    """
    classes = get_classes(element)
    for classname in classnames:
        for c in classname.split():
            if c not in classes:
                classes.append(c)
    if classes:
        element.setAttribute('class', u' '.join(classes))


def owner_document(node):
    return node.ownerDocument if node.nodeType != Node.DOCUMENT_NODE else node


def create_element(document, tag, attrs=None, text=None):
    """Create an HTML element in the same namespace html5lib uses."""
    el = document.createElementNS(namespaces['html'], tag)
    for name, value in (attrs or ()):
        el.setAttribute(name, value)
    if text:
        el.appendChild(document.createTextNode(text))
    return el


def splice(node, replacements):
    """
    Replace ``node`` in its parent's child sequence by ``replacements``
    (in order). Returns False when the node is detached.
    """
    parent = node.parentNode
    if parent is None:
        return False
    for new_node in replacements:
        parent.insertBefore(new_node, node)
    parent.removeChild(node)
    return True


def resolve_path(root, path, strict=False):
    """
    Follow a sequence of child indices (among *all* child nodes) from root.

    Returns None when the path runs off the tree, or raises
    :class:`UnresolvableNode` if ``strict`` is set.
    """
    current = root
    for index in path:
        children = current.childNodes
        if index < 0 or index >= len(children):
            if strict:
                raise UnresolvableNode(tuple(path))
            return None
        current = children[index]
    return current


def iter_text_nodes(node):
    """All descendant text nodes in document order."""
    for child in node.childNodes:
        if is_text(child):
            yield child
        elif is_element(child):
            for sub in iter_text_nodes(child):
                yield sub


def in_raw_text(node):
    """True for text inside <script>, <style> and other non-markup elements."""
    parent = node.parentNode
    return is_element(parent) and localname(parent) in RAW_TEXT_TAGS
