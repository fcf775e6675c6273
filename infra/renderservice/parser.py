import json
import re
from collections import Counter
from typing import Dict, List, Optional, Tuple

from infra.renderservice.types import (
    ROOT_TYPE,
    BackgroundColor,
    Modifiers,
    NodeProperties,
    UiNode,
)

DEPTH_MARKER = "|"

PID_RE = re.compile(r"\|\s*pid\[(\d+)\]")
NODE_RE = re.compile(r"\|\s*(\w+)\[(\d+)\]")
PARENT_RE = re.compile(r"\bparent\[(\d+)\]")
FRAME_NODE_ID_RE = re.compile(r"\bframeNodeId\[(\d+)\]")
FRAME_NODE_TAG_RE = re.compile(r"\bframeNodeTag\[(\w+)\]")
NAME_RE = re.compile(r"\bname\[([^\]]+)\]")
INSTANCE_ID_RE = re.compile(r"\binstanceId\[(-?\d+)\]")
MODIFIERS_KEY = "modifiers["
COLOR_SPACE_RE = re.compile(r"colorSpace\s*:\s*(\S+)")
TOKEN_RE = re.compile(r"^(\w+)\[(.*)\]$", re.DOTALL)


def count_depth(line: str) -> int:
    count = 0
    for char in line:
        if char == DEPTH_MARKER:
            count += 1
        elif char != " ":
            break
    return count


def _bracket_body(text: str, start: int) -> str:
    depth = 1
    for index in range(start, len(text)):
        char = text[index]
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return text[start:index]
    return text[start:]


def split_top_level(text: str, sep: str = ",") -> List[str]:
    parts: List[str] = []
    depth = 0
    current: List[str] = []
    for char in text:
        if char == "[":
            depth += 1
        elif char == "]":
            depth = max(0, depth - 1)
        if char == sep and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    parts.append("".join(current).strip())
    return [part for part in parts if part]


class RenderServiceParser:
    def parse(self, output: str) -> Dict[int, UiNode]:
        trees: Dict[int, UiNode] = {}
        stack: List[UiNode] = []
        for line in (output or "").splitlines():
            if not line.strip():
                continue
            pid_match = PID_RE.search(line)
            if pid_match:
                pid = int(pid_match.group(1))
                root = UiNode(
                    id="pid-{}".format(pid),
                    type=ROOT_TYPE,
                    pid=pid,
                    depth=count_depth(line),
                )
                trees[pid] = root
                stack = [root]
                continue
            depth = count_depth(line)
            if depth <= 0 or not stack:
                continue
            node = self.parse_node_line(line, depth)
            if node is None:
                continue
            while len(stack) > depth:
                stack.pop()
            parent = stack[-1]
            node.parent_id = parent.id
            parent.children.append(node)
            stack.append(node)
        return trees

    def parse_node_line(self, line: str, depth: int = 0) -> Optional[UiNode]:
        node_match = NODE_RE.search(line)
        if not node_match:
            return None
        node_type, identifier = node_match.group(1), node_match.group(2)
        properties = NodeProperties()
        node = UiNode(
            id="{}-{}".format(node_type, identifier),
            type=node_type,
            depth=depth,
            properties=properties,
        )
        parent_match = PARENT_RE.search(line)
        if parent_match:
            properties.render_parent = parent_match.group(1)
        frame_id_match = FRAME_NODE_ID_RE.search(line)
        if frame_id_match:
            node.frame_node_id = frame_id_match.group(1)
        frame_tag_match = FRAME_NODE_TAG_RE.search(line)
        if frame_tag_match:
            node.frame_node_tag = frame_tag_match.group(1)
        name_match = NAME_RE.search(line)
        if name_match:
            node.name = name_match.group(1)
        instance_match = INSTANCE_ID_RE.search(line)
        if instance_match:
            properties.instance_id = instance_match.group(1)
        modifiers_at = line.find(MODIFIERS_KEY)
        if modifiers_at >= 0:
            body = _bracket_body(line, modifiers_at + len(MODIFIERS_KEY))
            properties.modifiers = self.parse_modifiers(body)
        return node

    def parse_modifiers(self, text: str) -> Modifiers:
        modifiers = Modifiers()
        for part in split_top_level(text):
            token = TOKEN_RE.match(part)
            if token is None:
                if part == "Bounds":
                    modifiers.bounds = True
                elif part == "Frame":
                    modifiers.frame = True
                else:
                    modifiers.extra[part] = True
                continue
            key, body = token.group(1), token.group(2).strip()
            if key == "BackgroundColor":
                modifiers.background_color = self._parse_background(body)
            elif key == "Bounds":
                modifiers.bounds = "[{}]".format(body)
            elif key == "Frame":
                modifiers.frame = True
                modifiers.extra["frameRect"] = "[{}]".format(body)
            else:
                modifiers.extra[key[:1].lower() + key[1:]] = body
        return modifiers

    def _parse_background(self, body: str) -> BackgroundColor:
        parts = split_top_level(body)
        value = parts[0] if parts else body
        color_space = None
        space_match = COLOR_SPACE_RE.search(body)
        if space_match:
            color_space = space_match.group(1)
        return BackgroundColor(value=value, color_space=color_space)

    def get_tree_by_pid(self, output: str, pid: int) -> Optional[UiNode]:
        return self.parse(output).get(pid)

    def to_json(self, output: str) -> Dict[int, dict]:
        return {pid: root.to_dict() for pid, root in self.parse(output).items()}

    def to_compact_json(
        self, output: str, pid: Optional[int] = None, max_depth: int = 50
    ) -> str:
        trees = self.parse(output)
        pids = [pid] if pid else sorted(trees)
        result = {}
        for current in pids:
            root = trees.get(current)
            if root is not None:
                result[current] = root.to_compact_dict(max_depth)
        return json.dumps(result, indent=2, ensure_ascii=False)

    def get_summary(self, output: str) -> str:
        trees = self.parse(output)
        lines = ["## UI tree summary", "", "Processes: {}".format(len(trees)), ""]
        for pid, root in trees.items():
            total, max_depth = count_nodes(root)
            lines.append("### Process {}".format(pid))
            lines.append("- total nodes: {}".format(total))
            lines.append("- max depth: {}".format(max_depth))
            lines.append("- types:")
            for node_type, count in count_by_type(root).most_common():
                lines.append("  - {}: {}".format(node_type, count))
            lines.append("")
        return "\n".join(lines)

    def search_nodes(
        self,
        output: str,
        pid: Optional[int] = None,
        frame_node_tag: Optional[str] = None,
        node_name: Optional[str] = None,
        node_type: Optional[str] = None,
        max_results: int = 50,
    ) -> str:
        results: List[Tuple[int, List[str], UiNode]] = []
        if frame_node_tag or node_name or node_type:
            for current, root in self.parse(output).items():
                if pid and current != pid:
                    continue
                _search(root, [], current, frame_node_tag, node_name, node_type,
                        max_results, results)
                if len(results) >= max_results:
                    break
        lines = ["## Search results ({})".format(len(results)), ""]
        for current, path, node in results:
            lines.append("**PID {}**".format(current))
            lines.append("path: {}".format(" > ".join(path)))
            lines.append("- type: {}".format(node.type))
            if node.name:
                lines.append("- name: {}".format(node.name))
            if node.frame_node_id:
                lines.append("- frameNodeId: {}".format(node.frame_node_id))
            if node.frame_node_tag:
                lines.append("- frameNodeTag: {}".format(node.frame_node_tag))
            lines.append("")
        return "\n".join(lines)


def _search(node, path, pid, frame_node_tag, node_name, node_type, max_results, results):
    if len(results) >= max_results:
        return
    current_path = path + [node.label]
    match = True
    if frame_node_tag and node.frame_node_tag != frame_node_tag:
        match = False
    if node_name and node.name and node_name not in node.name:
        match = False
    if node_type and node.type != node_type:
        match = False
    if match:
        results.append((pid, current_path, node))
    for child in node.children:
        _search(child, current_path, pid, frame_node_tag, node_name, node_type,
                max_results, results)


def count_nodes(root: UiNode) -> Tuple[int, int]:
    total = 0
    max_depth = 0
    stack = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        total += 1
        max_depth = max(max_depth, depth)
        stack.extend((child, depth + 1) for child in node.children)
    return total, max_depth


def count_by_type(root: UiNode) -> Counter:
    return Counter(node.type for node in root.iter_nodes())


DEFAULT_PARSER = RenderServiceParser()


def ingest(output: str) -> Dict[int, UiNode]:
    return DEFAULT_PARSER.parse(output)


def get_tree_by_pid(output: str, pid: int) -> Optional[UiNode]:
    return DEFAULT_PARSER.get_tree_by_pid(output, pid)


def to_json(output: str) -> Dict[int, dict]:
    return DEFAULT_PARSER.to_json(output)


def to_compact_json(output: str, pid: Optional[int] = None, max_depth: int = 50) -> str:
    return DEFAULT_PARSER.to_compact_json(output, pid=pid, max_depth=max_depth)


def get_summary(output: str) -> str:
    return DEFAULT_PARSER.get_summary(output)


def search_nodes(output: str, **options) -> str:
    return DEFAULT_PARSER.search_nodes(output, **options)
