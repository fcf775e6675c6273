import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from hrpa.context import AutomationContext
from hrpa.domains.locate import Match, SearchConditions, get_center
from infra.hdc import parse_screen_size, screen_info_command, ui_tree_command
from infra.renderservice import UiNode
from shared.errors import HdcError

LOGGER = logging.getLogger("hrpa.control")


@dataclass
class TapResult:
    success: bool
    message: str
    element: Optional[UiNode] = None
    coordinates: Optional[Tuple[int, int]] = None
    candidates: List[Match] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"success": self.success, "message": self.message}
        if self.element is not None:
            payload["element"] = self.element.to_compact_dict(max_depth=0)
        if self.coordinates is not None:
            payload["coordinates"] = {"x": self.coordinates[0], "y": self.coordinates[1]}
        if self.candidates:
            payload["candidates"] = [match.to_dict() for match in self.candidates]
        return payload


@dataclass
class SwipeResult:
    success: bool
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "message": self.message}


class UiController:
    def __init__(self, context: AutomationContext):
        self.context = context
        self.channel = context.channel
        self.parser = context.parser
        self.resolver = context.resolver
        self.executor = context.executor
        self.workflow_settings = context.settings.workflow

    def dump(self) -> str:
        return self.channel.run_command(ui_tree_command())

    def ingest(self) -> Dict[int, UiNode]:
        return self.parser.parse(self.dump())

    def find_text(self, text: str, pid: Optional[int] = None) -> List[Match]:
        return self.resolver.resolve(
            self.ingest(), lambda root: self.resolver.find_by_text(root, text), pid=pid
        )

    def find_elements(
        self, conditions: SearchConditions, pid: Optional[int] = None
    ) -> List[Match]:
        return self.resolver.resolve(
            self.ingest(),
            lambda root: self.resolver.find_by_conditions(root, conditions),
            pid=pid,
        )

    def smart_tap(self, text: str, pid: Optional[int] = None) -> TapResult:
        try:
            matches = self.find_text(text, pid=pid)
            if not matches:
                return TapResult(
                    success=False,
                    message='no element matching "{}"'.format(text),
                )
            target = matches[0]
            center = get_center(target.node)
            if center is None:
                return TapResult(
                    success=False,
                    message="no coordinates for {}".format(target.node.label),
                    element=target.node,
                    candidates=matches,
                )
            coordinates = self._tap_at(center)
        except Exception as exc:
            return TapResult(success=False, message="tap failed: {}".format(exc))
        LOGGER.info("tapped %s at %s (score %s)", target.node.label, coordinates, target.score)
        return TapResult(
            success=True,
            message='tapped "{}" (score {})'.format(text, target.score),
            element=target.node,
            coordinates=coordinates,
            candidates=matches,
        )

    def tap_element(self, node: UiNode) -> TapResult:
        center = get_center(node)
        if center is None:
            return TapResult(
                success=False,
                message="no coordinates for {}".format(node.label),
                element=node,
            )
        try:
            coordinates = self._tap_at(center)
        except Exception as exc:
            return TapResult(
                success=False, message="tap failed: {}".format(exc), element=node
            )
        return TapResult(
            success=True,
            message="tapped {}".format(node.label),
            element=node,
            coordinates=coordinates,
        )

    def _tap_at(self, center: Tuple[float, float]) -> Tuple[int, int]:
        x, y = int(round(center[0])), int(round(center[1]))
        self.executor.tap(x, y)
        return x, y

    def swipe(self, x1, y1, x2, y2, duration_ms: Optional[int] = None) -> SwipeResult:
        if duration_ms is None:
            duration_ms = self.workflow_settings.swipe_duration_ms
        try:
            self.executor.swipe(x1, y1, x2, y2, duration_ms=duration_ms)
        except Exception as exc:
            return SwipeResult(success=False, message="swipe failed: {}".format(exc))
        return SwipeResult(
            success=True,
            message="swiped ({}, {}) -> ({}, {})".format(x1, y1, x2, y2),
        )

    def wait_for_element(
        self,
        text: str,
        timeout_ms: Optional[int] = None,
        pid: Optional[int] = None,
    ) -> Optional[Match]:
        settings = self.workflow_settings
        if timeout_ms is None:
            timeout_ms = settings.wait_timeout_ms
        clock = self.context.clock
        deadline = clock() + timeout_ms / 1000.0
        errors = 0
        while clock() < deadline:
            try:
                matches = self.find_text(text, pid=pid)
            except Exception as exc:
                errors += 1
                if errors >= settings.max_retries:
                    raise HdcError(
                        "waiting for {!r} failed after {} attempts: {}".format(
                            text, errors, exc
                        )
                    ) from exc
                LOGGER.warning("ui tree poll failed (%s/%s): %s", errors, settings.max_retries, exc)
            else:
                errors = 0
                if matches:
                    return matches[0]
            self.context.sleep(settings.poll_interval_ms / 1000.0)
        return None

    def screen_size(self) -> Tuple[int, int]:
        settings = self.workflow_settings
        try:
            size = parse_screen_size(self.channel.run_command(screen_info_command()))
        except Exception as exc:
            LOGGER.warning("screen size query failed: %s", exc)
            size = None
        if size is None:
            return settings.default_screen_width, settings.default_screen_height
        return size
