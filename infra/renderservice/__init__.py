from infra.renderservice.parser import (
    DEFAULT_PARSER,
    RenderServiceParser,
    count_by_type,
    count_depth,
    count_nodes,
    get_summary,
    get_tree_by_pid,
    ingest,
    search_nodes,
    to_compact_json,
    to_json,
)
from infra.renderservice.types import (
    ROOT_TYPE,
    BackgroundColor,
    Coordinates,
    Modifiers,
    NodeProperties,
    UiNode,
)

__all__ = [
    "DEFAULT_PARSER",
    "ROOT_TYPE",
    "BackgroundColor",
    "Coordinates",
    "Modifiers",
    "NodeProperties",
    "RenderServiceParser",
    "UiNode",
    "count_by_type",
    "count_depth",
    "count_nodes",
    "get_summary",
    "get_tree_by_pid",
    "ingest",
    "search_nodes",
    "to_compact_json",
    "to_json",
]
