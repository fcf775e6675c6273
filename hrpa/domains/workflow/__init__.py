from hrpa.domains.workflow.service import WorkflowEngine, extract_text
from hrpa.domains.workflow.types import StepResult, WorkflowResult

__all__ = ["StepResult", "WorkflowEngine", "WorkflowResult", "extract_text"]
