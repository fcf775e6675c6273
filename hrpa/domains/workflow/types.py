from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from hrpa.domains.locate import Match
from infra.renderservice import UiNode


def step_to_dict(step: Any) -> Dict[str, Any]:
    if hasattr(step, "to_dict"):
        return step.to_dict()
    if isinstance(step, dict):
        return dict(step)
    return {"type": str(step)}


@dataclass
class StepResult:
    step: Any
    success: bool
    message: str
    duration_ms: int = 0
    matched_node: Optional[UiNode] = None
    candidates: List[Match] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "step": step_to_dict(self.step),
            "success": self.success,
            "message": self.message,
            "duration_ms": self.duration_ms,
        }
        if self.matched_node is not None:
            payload["matched_node"] = self.matched_node.to_compact_dict(max_depth=0)
        if self.candidates:
            payload["candidates"] = [match.to_dict() for match in self.candidates]
        return payload


@dataclass
class WorkflowResult:
    success: bool
    steps: List[StepResult] = field(default_factory=list)
    summary: str = ""

    @property
    def failed(self) -> List[StepResult]:
        return [result for result in self.steps if not result.success]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "summary": self.summary,
            "steps": [result.to_dict() for result in self.steps],
        }
