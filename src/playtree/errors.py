# -*- coding: utf-8 -*-
"""
playtree.errors
===============

Exceptions raised by the tree induction engine.
"""

from __future__ import annotations


class ConsistencyError(RuntimeError):
    """An internal invariant of the store, index or tree was violated.

    Every detected violation is fatal: any inconsistency invalidates the whole
    build, so callers are expected to report the message and stop rather than
    try to recover a partial tree.
    """
