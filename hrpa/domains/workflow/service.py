import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from hrpa.context import AutomationContext
from hrpa.contracts import (
    AssertExistsStep,
    AssertTextEqualsStep,
    DelayStep,
    LaunchAndTapStep,
    SchemaError,
    ScrollAndTapStep,
    SwipeStep,
    TapStep,
    WaitForStep,
    parse_step,
)
from hrpa.domains.control import UiController
from hrpa.domains.locate import Match, SearchConditions
from hrpa.domains.workflow.types import StepResult, WorkflowResult
from infra.hdc import start_ability_command
from infra.renderservice import UiNode

LOGGER = logging.getLogger("hrpa.workflow")

MAX_CANDIDATES = 5
SCROLL_START_RATIO = 0.8
SCROLL_END_RATIO = 0.2
INPUT_TEXT_UNSUPPORTED = (
    "input_text is not supported: uitest uiInput inputText is unavailable on this device"
)


def extract_text(node: UiNode) -> str:
    if node.name:
        return node.name
    modifiers = node.properties.modifiers
    if modifiers is not None:
        for key in ("text", "content"):
            value = modifiers.extra.get(key)
            if value:
                return str(value)
    return ""


class WorkflowEngine:
    """Runs workflow steps in order and records one StepResult per step.

    Failed steps do not stop the run unless ``stop_on_failure`` is set; the
    aggregate result is successful only when every executed step succeeded.
    """

    def __init__(
        self,
        context: AutomationContext,
        controller: Optional[UiController] = None,
        stop_on_failure: bool = False,
    ):
        self.context = context
        self.controller = controller or UiController(context)
        self.resolver = context.resolver
        self.settings = context.settings.workflow
        self.stop_on_failure = stop_on_failure
        self.results: List[StepResult] = []
        self._handlers: Dict[str, Callable[[Any], StepResult]] = {
            "launch_and_tap": self._launch_and_tap,
            "scroll_and_tap": self._scroll_and_tap,
            "assert_exists": self._assert_exists,
            "assert_text_equals": self._assert_text_equals,
            "tap": self._tap,
            "input_text": self._input_text,
            "swipe": self._swipe,
            "wait_for": self._wait_for,
            "delay": self._delay,
        }

    def run_sequence(
        self, steps: Iterable[Any], stop_on_failure: Optional[bool] = None
    ) -> WorkflowResult:
        if stop_on_failure is None:
            stop_on_failure = self.stop_on_failure
        self.results = []
        started = self.context.clock()
        steps = list(steps)
        for index, step in enumerate(steps, start=1):
            result = self.run_step(step, index)
            self.results.append(result)
            LOGGER.info(
                "step %s/%s %s: %s (%sms) %s",
                index,
                len(steps),
                _step_type(result.step),
                "ok" if result.success else "failed",
                result.duration_ms,
                result.message,
            )
            if not result.success and stop_on_failure:
                LOGGER.info("stopping after failed step %s", index)
                break
        total_ms = self._elapsed_ms(started)
        succeeded = sum(1 for result in self.results if result.success)
        failed = len(self.results) - succeeded
        summary = "{} steps, {} succeeded, {} failed, total {}ms".format(
            len(self.results), succeeded, failed, total_ms
        )
        if len(self.results) < len(steps):
            summary += " (stopped, {} skipped)".format(len(steps) - len(self.results))
        return WorkflowResult(success=failed == 0, steps=list(self.results), summary=summary)

    def run_step(self, step: Any, index: int = 1) -> StepResult:
        started = self.context.clock()
        try:
            step = parse_step(step, index)
        except SchemaError as exc:
            return StepResult(
                step=step,
                success=False,
                message="unknown or invalid step: {}".format(exc),
                duration_ms=self._elapsed_ms(started),
            )
        handler = self._handlers[step.type]
        try:
            result = handler(step)
        except Exception as exc:
            result = StepResult(
                step=step,
                success=False,
                message="{} failed: {}".format(step.type, exc),
            )
        result.duration_ms = self._elapsed_ms(started)
        return result

    def get_results(self) -> List[StepResult]:
        return list(self.results)

    def clear_results(self) -> None:
        self.results = []

    def launch_and_tap(
        self,
        bundle_name: str,
        ability_name: str,
        target_text: str,
        timeout_ms: Optional[int] = None,
    ) -> StepResult:
        return self._record(
            LaunchAndTapStep(
                bundle_name=bundle_name,
                ability_name=ability_name,
                target_text=target_text,
                timeout_ms=timeout_ms,
            )
        )

    def scroll_and_tap(self, target_text: str, max_scrolls: Optional[int] = None) -> StepResult:
        return self._record(ScrollAndTapStep(target_text=target_text, max_scrolls=max_scrolls))

    def assert_exists(self, text: str) -> StepResult:
        return self._record(AssertExistsStep(text=text))

    def assert_text_equals(self, element_text: str, expected_text: str) -> StepResult:
        return self._record(
            AssertTextEqualsStep(element_text=element_text, expected_text=expected_text)
        )

    def _record(self, step) -> StepResult:
        result = self.run_step(step, len(self.results) + 1)
        self.results.append(result)
        return result

    def _launch_and_tap(self, step: LaunchAndTapStep) -> StepResult:
        self.context.channel.run_command(
            start_ability_command(step.bundle_name, step.ability_name)
        )
        timeout_ms = step.timeout_ms
        if timeout_ms is None:
            timeout_ms = self.settings.wait_timeout_ms
        match = self.controller.wait_for_element(step.target_text, timeout_ms=timeout_ms)
        if match is None:
            return StepResult(
                step=step,
                success=False,
                message='launched {}/{} but "{}" did not appear within {}ms'.format(
                    step.bundle_name, step.ability_name, step.target_text, timeout_ms
                ),
            )
        tap = self.controller.tap_element(match.node)
        return StepResult(
            step=step,
            success=tap.success,
            message=tap.message,
            matched_node=match.node,
        )

    def _scroll_and_tap(self, step: ScrollAndTapStep) -> StepResult:
        max_scrolls = step.max_scrolls
        if max_scrolls is None:
            max_scrolls = self.settings.max_scrolls
        width, height = self.controller.screen_size()
        center_x = int(round(width / 2))
        start_y = int(round(height * SCROLL_START_RATIO))
        end_y = int(round(height * SCROLL_END_RATIO))
        scrolls = 0
        while True:
            tap = self.controller.smart_tap(step.target_text)
            if tap.success:
                return StepResult(
                    step=step,
                    success=True,
                    message='tapped "{}" after {} scrolls'.format(step.target_text, scrolls),
                    matched_node=tap.element,
                )
            if scrolls >= max_scrolls:
                break
            swipe = self.controller.swipe(
                center_x, start_y, center_x, end_y, self.settings.swipe_duration_ms
            )
            if not swipe.success:
                return StepResult(step=step, success=False, message=swipe.message)
            scrolls += 1
            self.context.sleep(self.settings.scroll_settle_ms / 1000.0)
        return StepResult(
            step=step,
            success=False,
            message='"{}" not found after {} scrolls'.format(step.target_text, scrolls),
            candidates=tap.candidates[:MAX_CANDIDATES],
        )

    def _search(self, text: str):
        forest = self.controller.ingest()
        conditions = SearchConditions(text=text)
        matches = self.resolver.resolve(
            forest, lambda root: self.resolver.find_by_conditions(root, conditions)
        )
        return forest, matches

    def _candidates(self, forest, text: str) -> List[Match]:
        fuzzy = self.resolver.resolve(
            forest, lambda root: self.resolver.find_by_text(root, text)
        )
        return fuzzy[:MAX_CANDIDATES]

    def _assert_exists(self, step: AssertExistsStep) -> StepResult:
        forest, matches = self._search(step.text)
        if not matches:
            return StepResult(
                step=step,
                success=False,
                message='assertion failed: no element containing "{}"'.format(step.text),
                candidates=self._candidates(forest, step.text),
            )
        return StepResult(
            step=step,
            success=True,
            message='found {} elements containing "{}"'.format(len(matches), step.text),
            matched_node=matches[0].node,
        )

    def _assert_text_equals(self, step: AssertTextEqualsStep) -> StepResult:
        forest, matches = self._search(step.element_text)
        if not matches:
            return StepResult(
                step=step,
                success=False,
                message='assertion failed: no element containing "{}"'.format(
                    step.element_text
                ),
                candidates=self._candidates(forest, step.element_text),
            )
        node = matches[0].node
        actual = extract_text(node)
        if actual == step.expected_text:
            message = '"{}" equals "{}"'.format(actual, step.expected_text)
        else:
            message = 'assertion failed: "{}" != "{}"'.format(actual, step.expected_text)
        return StepResult(
            step=step,
            success=actual == step.expected_text,
            message=message,
            matched_node=node,
        )

    def _tap(self, step: TapStep) -> StepResult:
        tap = self.controller.smart_tap(step.text)
        return StepResult(
            step=step,
            success=tap.success,
            message=tap.message,
            matched_node=tap.element,
            candidates=[] if tap.success else tap.candidates[:MAX_CANDIDATES],
        )

    def _input_text(self, step) -> StepResult:
        return StepResult(step=step, success=False, message=INPUT_TEXT_UNSUPPORTED)

    def _swipe(self, step: SwipeStep) -> StepResult:
        swipe = self.controller.swipe(
            step.start_x, step.start_y, step.end_x, step.end_y, step.duration_ms
        )
        return StepResult(step=step, success=swipe.success, message=swipe.message)

    def _wait_for(self, step: WaitForStep) -> StepResult:
        match = self.controller.wait_for_element(step.text, timeout_ms=step.timeout_ms)
        if match is None:
            return StepResult(
                step=step,
                success=False,
                message='timed out waiting for "{}"'.format(step.text),
            )
        return StepResult(
            step=step,
            success=True,
            message='found "{}" (score {})'.format(step.text, match.score),
            matched_node=match.node,
        )

    def _delay(self, step: DelayStep) -> StepResult:
        self.context.sleep(step.ms / 1000.0)
        return StepResult(step=step, success=True, message="waited {}ms".format(step.ms))

    def _elapsed_ms(self, started: float) -> int:
        return int(round((self.context.clock() - started) * 1000))


def _step_type(step: Any) -> str:
    if isinstance(step, dict):
        return str(step.get("type") or "?")
    return str(getattr(step, "type", "?"))
