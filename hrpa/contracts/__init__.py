from hrpa.contracts.schema import (
    STEP_TYPES,
    AssertExistsStep,
    AssertTextEqualsStep,
    DelayStep,
    InputTextStep,
    LaunchAndTapStep,
    SchemaError,
    ScrollAndTapStep,
    SwipeStep,
    TapStep,
    WaitForStep,
    WorkflowStep,
    load_workflow,
    normalize_step_type,
    parse_step,
    parse_steps,
    steps_to_dicts,
)

__all__ = [
    "STEP_TYPES",
    "AssertExistsStep",
    "AssertTextEqualsStep",
    "DelayStep",
    "InputTextStep",
    "LaunchAndTapStep",
    "SchemaError",
    "ScrollAndTapStep",
    "SwipeStep",
    "TapStep",
    "WaitForStep",
    "WorkflowStep",
    "load_workflow",
    "normalize_step_type",
    "parse_step",
    "parse_steps",
    "steps_to_dicts",
]
