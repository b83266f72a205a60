"""Error types raised by the layout engine and the flow operations."""

from __future__ import annotations


class LayoutError(ValueError):
    """Base class for every input error this package raises."""


class InvalidNodeError(LayoutError):
    """A node lacks a usable id or a positive width/height."""

    def __init__(self, node_id: object, reason: str) -> None:
        self.node_id = node_id
        self.reason = reason
        super().__init__(f"invalid node {node_id!r}: {reason}")


class InvalidDirectionError(LayoutError):
    """A direction value outside the TB/LR enumeration."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"unknown direction {value!r}; use TB or LR")


class InvalidPayloadError(LayoutError):
    """A flow-graph payload that is not shaped like ``{"nodes": [...], "edges": [...]}``."""
