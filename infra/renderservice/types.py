from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

ROOT_TYPE = "ProcessRoot"


@dataclass(frozen=True)
class Coordinates:
    x: float
    y: float
    width: float
    height: float

    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class BackgroundColor:
    value: str
    color_space: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {"value": self.value}
        if self.color_space is not None:
            payload["colorSpace"] = self.color_space
        return payload

    @classmethod
    def from_dict(cls, data: Any) -> Optional["BackgroundColor"]:
        if isinstance(data, str):
            return cls(value=data)
        if not isinstance(data, dict) or not data.get("value"):
            return None
        return cls(value=str(data["value"]), color_space=data.get("colorSpace"))


@dataclass
class Modifiers:
    background_color: Optional[BackgroundColor] = None
    bounds: Union[bool, str, None] = None
    bounds_data: Optional[Coordinates] = None
    frame: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.background_color is not None:
            payload["backgroundColor"] = self.background_color.to_dict()
        if self.bounds is not None:
            payload["bounds"] = self.bounds
        if self.bounds_data is not None:
            payload["boundsData"] = self.bounds_data.to_dict()
        if self.frame:
            payload["frame"] = True
        payload.update(self.extra)
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Modifiers":
        data = dict(data or {})
        bounds_data = data.pop("boundsData", None)
        return cls(
            background_color=BackgroundColor.from_dict(data.pop("backgroundColor", None)),
            bounds=data.pop("bounds", None),
            bounds_data=Coordinates(**bounds_data) if isinstance(bounds_data, dict) else None,
            frame=bool(data.pop("frame", False)),
            extra=data,
        )


@dataclass
class NodeProperties:
    instance_id: Optional[str] = None
    modifiers: Optional[Modifiers] = None
    position: Optional[Dict[str, Any]] = None
    render_parent: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        if key == "instanceId":
            value = self.instance_id
        elif key == "modifiers":
            value = self.modifiers
        elif key == "position":
            value = self.position
        elif key == "parent":
            value = self.render_parent
        else:
            value = self.extra.get(key)
        return default if value is None else value

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.instance_id is not None:
            payload["instanceId"] = self.instance_id
        if self.modifiers is not None:
            payload["modifiers"] = self.modifiers.to_dict()
        if self.position is not None:
            payload["position"] = dict(self.position)
        if self.render_parent is not None:
            payload["parent"] = self.render_parent
        payload.update(self.extra)
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NodeProperties":
        data = dict(data or {})
        modifiers = data.pop("modifiers", None)
        return cls(
            instance_id=data.pop("instanceId", None),
            modifiers=Modifiers.from_dict(modifiers) if isinstance(modifiers, dict) else None,
            position=data.pop("position", None),
            render_parent=data.pop("parent", None),
            extra=data,
        )


@dataclass
class UiNode:
    id: str
    type: str
    name: Optional[str] = None
    pid: Optional[int] = None
    frame_node_id: Optional[str] = None
    frame_node_tag: Optional[str] = None
    parent_id: Optional[str] = None
    depth: int = 0
    properties: NodeProperties = field(default_factory=NodeProperties)
    children: List["UiNode"] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.type == ROOT_TYPE

    @property
    def label(self) -> str:
        if self.name:
            return "{}({})".format(self.type, self.name)
        return self.type

    def iter_nodes(self):
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "pid": self.pid,
            "frameNodeId": self.frame_node_id,
            "frameNodeTag": self.frame_node_tag,
            "parentId": self.parent_id,
            "depth": self.depth,
            "properties": self.properties.to_dict(),
            "children": [child.to_dict() for child in self.children],
        }

    def to_compact_dict(self, max_depth: int = 50, _depth: int = 0) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"type": self.type}
        if self.name:
            payload["name"] = self.name
        if self.frame_node_id:
            payload["frameNodeId"] = self.frame_node_id
        if self.frame_node_tag:
            payload["frameNodeTag"] = self.frame_node_tag
        if self.children and _depth < max_depth:
            payload["children"] = [
                child.to_compact_dict(max_depth, _depth + 1) for child in self.children
            ]
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UiNode":
        if not isinstance(data, dict):
            raise ValueError("node must be an object")
        return cls(
            id=str(data.get("id") or ""),
            type=str(data.get("type") or ""),
            name=data.get("name"),
            pid=data.get("pid"),
            frame_node_id=data.get("frameNodeId"),
            frame_node_tag=data.get("frameNodeTag"),
            parent_id=data.get("parentId"),
            depth=int(data.get("depth") or 0),
            properties=NodeProperties.from_dict(data.get("properties") or {}),
            children=[cls.from_dict(child) for child in data.get("children") or []],
        )
