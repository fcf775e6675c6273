from infra.windowmanager.parser import (
    DEFAULT_PARSER,
    WindowInfo,
    WindowManagerParser,
    WindowRect,
    filter_by_pid,
    find_window,
    format_window_table,
    parse_windows,
    visible_windows,
)

__all__ = [
    "DEFAULT_PARSER",
    "WindowInfo",
    "WindowManagerParser",
    "WindowRect",
    "filter_by_pid",
    "find_window",
    "format_window_table",
    "parse_windows",
    "visible_windows",
]
