"""Default node sizing policy.

The engine never invents sizes; callers derive them from node content. The
default policy gives every node the base box and adds a strip of height for
nodes that list many files.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from repograph.config import DEFAULT_CONFIG, LayoutConfig

NodeSizer = Callable[[Mapping[str, Any], LayoutConfig], tuple[float, float]]


def _file_count(files: Any) -> int:
    # Anything that is not a list of entries counts as no files.
    if isinstance(files, Sequence) and not isinstance(files, (str, bytes)):
        return len(files)
    return 0


def default_node_size(data: Mapping[str, Any] | None, config: LayoutConfig = DEFAULT_CONFIG) -> tuple[float, float]:
    """Return (width, height) for a flow node's ``data`` payload."""
    files = (data or {}).get("files")
    extra = config.extra_height if _file_count(files) > config.file_count_threshold else 0
    return (config.base_node_width, config.base_node_height + extra)
