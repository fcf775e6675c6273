import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from hrpa.domains.act import ActionExecutor
from hrpa.domains.locate import ElementResolver
from hrpa.domains.ports import DeviceChannel
from hrpa.settings import ClientSettings
from infra.hdc import HdcClient
from infra.renderservice import RenderServiceParser


@dataclass
class AutomationContext:
    channel: DeviceChannel
    settings: ClientSettings = field(default_factory=ClientSettings)
    parser: RenderServiceParser = field(default_factory=RenderServiceParser)
    resolver: ElementResolver = field(default_factory=ElementResolver)
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], None] = time.sleep
    executor: Optional[ActionExecutor] = None

    def __post_init__(self):
        if self.executor is None:
            self.executor = ActionExecutor(self.channel, self.settings.input)


def build_context(settings: Optional[ClientSettings] = None) -> AutomationContext:
    settings = settings or ClientSettings()
    client = HdcClient(
        hdc_path=settings.hdc_path or "hdc",
        device_id=settings.device_id,
        timeout=settings.command_timeout,
    )
    return AutomationContext(channel=client, settings=settings)
