import json
from pathlib import Path
from typing import Annotated, Any, Dict, Iterable, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel


class SchemaError(ValueError):
    pass


class _Step(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid", frozen=True
    )

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class LaunchAndTapStep(_Step):
    type: Literal["launch_and_tap"] = "launch_and_tap"
    bundle_name: str = Field(min_length=1)
    ability_name: str = Field(min_length=1)
    target_text: str = Field(min_length=1)
    timeout_ms: Optional[int] = Field(default=None, ge=0)


class ScrollAndTapStep(_Step):
    type: Literal["scroll_and_tap"] = "scroll_and_tap"
    target_text: str = Field(min_length=1)
    max_scrolls: Optional[int] = Field(default=None, ge=0)


class AssertExistsStep(_Step):
    type: Literal["assert_exists"] = "assert_exists"
    text: str = Field(min_length=1)


class AssertTextEqualsStep(_Step):
    type: Literal["assert_text_equals"] = "assert_text_equals"
    element_text: str = Field(min_length=1)
    expected_text: str


class TapStep(_Step):
    type: Literal["tap"] = "tap"
    text: str = Field(min_length=1)


class InputTextStep(_Step):
    type: Literal["input_text"] = "input_text"
    text: str
    target_text: Optional[str] = None


class SwipeStep(_Step):
    type: Literal["swipe"] = "swipe"
    start_x: float
    start_y: float
    end_x: float
    end_y: float
    duration_ms: Optional[int] = Field(default=None, gt=0)


class WaitForStep(_Step):
    type: Literal["wait_for"] = "wait_for"
    text: str = Field(min_length=1)
    timeout_ms: Optional[int] = Field(default=None, ge=0)


class DelayStep(_Step):
    type: Literal["delay"] = "delay"
    ms: int = Field(ge=0)


WorkflowStep = Annotated[
    Union[
        LaunchAndTapStep,
        ScrollAndTapStep,
        AssertExistsStep,
        AssertTextEqualsStep,
        TapStep,
        InputTextStep,
        SwipeStep,
        WaitForStep,
        DelayStep,
    ],
    Field(discriminator="type"),
]

STEP_TYPES = (
    "launch_and_tap",
    "scroll_and_tap",
    "assert_exists",
    "assert_text_equals",
    "tap",
    "input_text",
    "swipe",
    "wait_for",
    "delay",
)
_TYPE_ALIASES = {to_camel(name): name for name in STEP_TYPES}
_STEP_ADAPTER = TypeAdapter(WorkflowStep)


def normalize_step_type(value: Any) -> str:
    name = str(value or "").strip()
    return _TYPE_ALIASES.get(name, name)


def parse_step(data: Any, index: int = 1):
    if isinstance(data, BaseModel):
        return data
    if not isinstance(data, dict):
        raise SchemaError("step {} must be an object".format(index))
    step_type = normalize_step_type(data.get("type"))
    if not step_type:
        raise SchemaError("step {} missing type".format(index))
    if step_type not in STEP_TYPES:
        raise SchemaError("invalid step type {} at {}".format(step_type, index))
    payload = dict(data)
    payload["type"] = step_type
    try:
        return _STEP_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        problems = "; ".join(
            "{}: {}".format(".".join(str(part) for part in error["loc"][1:]) or "step", error["msg"])
            for error in exc.errors()
        )
        raise SchemaError("invalid {} step at {}: {}".format(step_type, index, problems)) from exc


def parse_steps(data: Any) -> List[Any]:
    if isinstance(data, dict):
        data = data.get("steps")
    if not isinstance(data, list):
        raise SchemaError("workflow must be a list of steps or an object with steps")
    return [parse_step(item, index) for index, item in enumerate(data, start=1)]


def load_workflow(path: Union[str, Path]) -> List[Any]:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise SchemaError("workflow not found: {}".format(path)) from exc
    except json.JSONDecodeError as exc:
        raise SchemaError("workflow is not valid JSON: {}".format(exc)) from exc
    return parse_steps(data)


def steps_to_dicts(steps: Iterable[Any]) -> List[Dict[str, Any]]:
    converted: List[Dict[str, Any]] = []
    for step in steps:
        if isinstance(step, _Step):
            converted.append(step.to_dict())
        elif isinstance(step, dict):
            converted.append(dict(step))
        else:
            raise SchemaError("unsupported step type {}".format(type(step)))
    return converted
