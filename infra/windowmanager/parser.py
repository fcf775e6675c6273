import re
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional

HEADER_MARKER = "WindowName"
RECT_RE = re.compile(r"\[\s*(\d+)\s+(\d+)\s+(\d+)\s+(\d+)\s*\]")
VISIBLE_MODE = 1


@dataclass
class WindowRect:
    x: int
    y: int
    w: int
    h: int


@dataclass
class WindowInfo:
    name: str
    display_id: int
    pid: int
    win_id: int
    type: int
    mode: int
    flag: int
    z_order: int
    orientation: int
    rect: WindowRect

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


def _to_int(value: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class WindowManagerParser:
    def parse(self, output: str) -> List[WindowInfo]:
        lines = (output or "").splitlines()
        start = None
        for index, line in enumerate(lines):
            if HEADER_MARKER in line:
                start = index + 1
                break
        if start is None:
            return []
        windows: List[WindowInfo] = []
        for raw in lines[start:]:
            line = raw.strip()
            if not line or line.startswith("---") or line.startswith("Focus"):
                continue
            window = self.parse_line(line)
            if window is not None:
                windows.append(window)
        return windows

    def parse_line(self, line: str) -> Optional[WindowInfo]:
        parts = line.split()
        if len(parts) < 9:
            return None
        rect_match = RECT_RE.search(line)
        if not rect_match:
            return None
        x, y, w, h = (_to_int(group) for group in rect_match.groups())
        return WindowInfo(
            name=parts[0],
            display_id=_to_int(parts[1]),
            pid=_to_int(parts[2]),
            win_id=_to_int(parts[3]),
            type=_to_int(parts[4]),
            mode=_to_int(parts[5]),
            flag=_to_int(parts[6]),
            z_order=_to_int(parts[7]),
            orientation=_to_int(parts[8]),
            rect=WindowRect(x=x, y=y, w=w, h=h),
        )


def find_window(windows: List[WindowInfo], name: str) -> Optional[WindowInfo]:
    for window in windows:
        if window.name == name:
            return window
    return None


def filter_by_pid(windows: List[WindowInfo], pid: int) -> List[WindowInfo]:
    return [window for window in windows if window.pid == pid]


def visible_windows(windows: List[WindowInfo]) -> List[WindowInfo]:
    return [window for window in windows if window.mode == VISIBLE_MODE]


def format_window_table(windows: List[WindowInfo]) -> str:
    lines = [
        "## Windows ({})".format(len(windows)),
        "",
        "| Name | PID | WinId | Type | ZOrder | Rect |",
        "|------|-----|-------|------|--------|------|",
    ]
    for window in windows:
        rect = window.rect
        lines.append(
            "| {} | {} | {} | {} | {} | [{}, {}, {}x{}] |".format(
                window.name,
                window.pid,
                window.win_id,
                window.type,
                window.z_order,
                rect.x,
                rect.y,
                rect.w,
                rect.h,
            )
        )
    return "\n".join(lines)


DEFAULT_PARSER = WindowManagerParser()


def parse_windows(output: str) -> List[WindowInfo]:
    return DEFAULT_PARSER.parse(output)
