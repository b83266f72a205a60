"""repograph: layered layout for AI-annotated repository architecture graphs."""

from repograph.config import DEFAULT_CONFIG, LayoutConfig
from repograph.errors import InvalidDirectionError, InvalidNodeError, InvalidPayloadError, LayoutError
from repograph.flow import apply_layout, build_flow_graph, generate_layout, relayout
from repograph.layout import LayoutEdge, LayoutNode, Point, layout, layout_async
from repograph.sizing import default_node_size
from repograph.types import LayoutDirection

__all__ = [
    "DEFAULT_CONFIG",
    "InvalidDirectionError",
    "InvalidNodeError",
    "InvalidPayloadError",
    "LayoutConfig",
    "LayoutDirection",
    "LayoutEdge",
    "LayoutError",
    "LayoutNode",
    "Point",
    "apply_layout",
    "build_flow_graph",
    "default_node_size",
    "generate_layout",
    "layout",
    "layout_async",
    "relayout",
]
