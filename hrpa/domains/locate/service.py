import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from infra.renderservice import Coordinates, UiNode

EXACT_SCORE = 100
CONTAINS_SCORE = 85
PREFIX_SCORE = 75
SUFFIX_SCORE = 70
FUZZY_WEIGHT = 60
FUZZY_THRESHOLD = 0.6
TYPE_SCORE = 80
PROPERTY_SCORE = 100

TEXT_WEIGHT = 30
TYPE_WEIGHT = 20
PROPERTY_WEIGHT = 25

BOUNDS_RE = re.compile(r"\[(\d+),\s*(\d+),\s*(\d+),\s*(\d+)\]")

_MISSING = object()

Forest = Mapping[int, UiNode]
Query = Callable[[UiNode], List["Match"]]


@dataclass
class Match:
    node: UiNode
    path: List[str]
    score: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.node.id,
            "type": self.node.type,
            "name": self.node.name,
            "path": list(self.path),
            "score": self.score,
        }


@dataclass
class SearchConditions:
    text: Optional[str] = None
    type: Optional[str] = None
    properties: Dict[str, Any] = field(default_factory=dict)

    def total(self) -> int:
        return (1 if self.text else 0) + (1 if self.type else 0) + len(self.properties)


def levenshtein(a: str, b: str) -> int:
    rows, cols = len(a), len(b)
    dp = [[0] * (cols + 1) for _ in range(rows + 1)]
    for i in range(rows + 1):
        dp[i][0] = i
    for j in range(cols + 1):
        dp[0][j] = j
    for i in range(1, rows + 1):
        for j in range(1, cols + 1):
            if a[i - 1] == b[j - 1]:
                dp[i][j] = dp[i - 1][j - 1]
            else:
                dp[i][j] = min(dp[i - 1][j], dp[i][j - 1], dp[i - 1][j - 1]) + 1
    return dp[rows][cols]


def text_score(name: Optional[str], text: str) -> int:
    """Tiered similarity of a node name against the searched text (0 = no match)."""
    if not name:
        return 0
    candidate = name.lower()
    target = text.lower()
    if candidate == target:
        return EXACT_SCORE
    if target in candidate or candidate in target:
        return CONTAINS_SCORE
    if candidate.startswith(target):
        return PREFIX_SCORE
    if candidate.endswith(target):
        return SUFFIX_SCORE
    longest = max(len(candidate), len(target))
    if not longest:
        return 0
    similarity = 1 - levenshtein(candidate, target) / longest
    if similarity >= FUZZY_THRESHOLD:
        return int(round(similarity * FUZZY_WEIGHT))
    return 0


def walk(root: UiNode) -> Iterator[Tuple[UiNode, List[str]]]:
    stack = [(root, [root.label])]
    while stack:
        node, path = stack.pop()
        yield node, path
        for child in reversed(node.children):
            stack.append((child, path + [child.label]))


def sort_matches(matches: List[Match]) -> List[Match]:
    matches.sort(key=lambda match: match.score, reverse=True)
    return matches


def best_match(matches: List[Match]) -> Optional[Match]:
    if not matches:
        return None
    return sort_matches(list(matches))[0]


def format_path(path: List[str]) -> str:
    return " > ".join(path)


def get_coordinates(node: UiNode) -> Optional[Coordinates]:
    modifiers = node.properties.modifiers
    if modifiers is not None:
        if modifiers.bounds_data is not None:
            return modifiers.bounds_data
        if isinstance(modifiers.bounds, str):
            match = BOUNDS_RE.search(modifiers.bounds)
            if match:
                x, y, width, height = (int(group) for group in match.groups())
                return Coordinates(x=x, y=y, width=width, height=height)
    position = node.properties.position
    if position and position.get("x") is not None and position.get("y") is not None:
        try:
            return Coordinates(
                x=float(position["x"]),
                y=float(position["y"]),
                width=float(position.get("width") or 0),
                height=float(position.get("height") or 0),
            )
        except (TypeError, ValueError):
            return None
    return None


def get_center(node: UiNode) -> Optional[Tuple[float, float]]:
    coordinates = get_coordinates(node)
    if coordinates is None:
        return None
    return coordinates.center()


class ElementResolver:
    def find_by_text(self, root: UiNode, text: str, exact_match: bool = False) -> List[Match]:
        matches: List[Match] = []
        target = (text or "").lower()
        for node, path in walk(root):
            if not node.name:
                continue
            if exact_match:
                if node.name.lower() != target:
                    continue
                score = EXACT_SCORE
            else:
                score = text_score(node.name, text or "")
                if score <= 0:
                    continue
            matches.append(Match(node=node, path=path, score=score))
        return sort_matches(matches)

    def find_by_type(self, root: UiNode, node_type: str) -> List[Match]:
        return [
            Match(node=node, path=path, score=TYPE_SCORE)
            for node, path in walk(root)
            if node.type == node_type
        ]

    def find_by_property(self, root: UiNode, key: str, value: Any) -> List[Match]:
        return [
            Match(node=node, path=path, score=PROPERTY_SCORE)
            for node, path in walk(root)
            if node.properties.get(key, _MISSING) == value
        ]

    def find_by_conditions(self, root: UiNode, conditions: SearchConditions) -> List[Match]:
        # score = (raw / total) * (matched / total) * 100, capped at 100
        total = conditions.total()
        if not total:
            return []
        text = (conditions.text or "").lower()
        matches: List[Match] = []
        for node, path in walk(root):
            raw = 0
            matched = 0
            if conditions.text and node.name and text in node.name.lower():
                raw += TEXT_WEIGHT
                matched += 1
            if conditions.type and node.type == conditions.type:
                raw += TYPE_WEIGHT
                matched += 1
            for key, value in conditions.properties.items():
                if node.properties.get(key, _MISSING) == value:
                    raw += PROPERTY_WEIGHT
                    matched += 1
            if not matched:
                continue
            score = min(100, int(round((raw / total) * (matched / total) * 100)))
            matches.append(Match(node=node, path=path, score=score))
        return sort_matches(matches)

    def resolve(
        self,
        target: Union[UiNode, Forest],
        query: Query,
        pid: Optional[int] = None,
    ) -> List[Match]:
        if isinstance(target, UiNode):
            roots = [target]
        else:
            roots = [root for current, root in target.items() if not pid or current == pid]
        matches: List[Match] = []
        for root in roots:
            matches.extend(query(root))
        return sort_matches(matches)

    def get_coordinates(self, node: UiNode) -> Optional[Coordinates]:
        return get_coordinates(node)


DEFAULT_RESOLVER = ElementResolver()


def find_by_text(root: UiNode, text: str, exact_match: bool = False) -> List[Match]:
    return DEFAULT_RESOLVER.find_by_text(root, text, exact_match=exact_match)


def find_by_type(root: UiNode, node_type: str) -> List[Match]:
    return DEFAULT_RESOLVER.find_by_type(root, node_type)


def find_by_property(root: UiNode, key: str, value: Any) -> List[Match]:
    return DEFAULT_RESOLVER.find_by_property(root, key, value)


def find_by_conditions(root: UiNode, conditions: SearchConditions) -> List[Match]:
    return DEFAULT_RESOLVER.find_by_conditions(root, conditions)
