"""Intermediate representation: the validated layout graph."""

from repograph.ir.graph import LayoutGraph, validate_node

__all__ = [
    "LayoutGraph",
    "validate_node",
]
