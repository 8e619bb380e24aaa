# -*- coding: utf-8 -*-
"""
Excepciones de richdiff.

None of these ever escape a diff pass: the orchestrator recovers from all of
them. They exist so the individual components can be used (and tested) on
their own.
"""


class RichDiffError(Exception):
    """Base class for every error raised by richdiff."""


class UnresolvableNode(RichDiffError):
    """A recorded node path no longer resolves in the tree."""

    def __init__(self, path):
        RichDiffError.__init__(self, 'path %r does not resolve' % (path,))
        self.path = path


class DiffEngineFailure(RichDiffError):
    """The underlying character diff raised."""
