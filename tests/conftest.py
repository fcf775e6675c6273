import pytest

from hrpa.context import AutomationContext
from hrpa.settings import ClientSettings
from infra.hdc import screen_info_command, ui_tree_command
from shared.errors import HdcError


SAMPLE_DUMP = """\
RenderService client dump
| pid[1937]
| RSCanvasNode[100], parent[0], frameNodeId[1], frameNodeTag[page], instanceId[7], modifiers[BackgroundColor[RGBA-0xFFFFFFFF, colorSpace: SRGB], Bounds, Frame]
| | RSCanvasNode[101], parent[100], frameNodeId[2], frameNodeTag[Button], name[Login], modifiers[Bounds[100, 200, 300, 50]]
| | | RSCanvasNode[102], parent[101], frameNodeId[3], frameNodeTag[Text], name[LoginButton], modifiers[Bounds[110, 210, 280, 30]]
| | RSCanvasNode[103], parent[100], frameNodeId[4], frameNodeTag[Text], name[Settings], modifiers[Bounds[0, 400, 1080, 120]]
| pid[2001]
| RSSurfaceNode[200], parent[0], name[Logon]
| | RSCanvasNode[201], parent[200], name[Cancel], modifiers[Bounds[0, 0, 100, 100]]
"""

EMPTY_DUMP = """\
| pid[1937]
| RSCanvasNode[100], parent[0], frameNodeId[1]
"""

SCREEN_INFO = """\
-- ScreenInfo
screen[0]: id=0, powerstatus=POWER_STATUS_ON, backlight=255, screenType=BUILT_IN_TYPE, render size: 1260x2720, physical resolution=1260x2720, isVirtual=false
"""


class FakeChannel:
    def __init__(self, dumps=None, screen=SCREEN_INFO):
        self.dumps = list(dumps or [])
        self.screen = screen
        self.tree_errors = 0
        self.commands = []
        self.inputs = []

    def run_command(self, command):
        self.commands.append(command)
        if command == ui_tree_command():
            if self.tree_errors:
                self.tree_errors -= 1
                raise HdcError("device offline")
            if len(self.dumps) > 1:
                return self.dumps.pop(0)
            return self.dumps[0] if self.dumps else ""
        if command == screen_info_command():
            return self.screen
        return ""

    def send_input(self, kind, args):
        self.inputs.append((kind, list(args)))
        return "No Error"

    @property
    def tree_dumps(self):
        return [command for command in self.commands if command == ui_tree_command()]


class ResetChannel(FakeChannel):
    def run_command(self, command):
        self.commands.append(command)
        raise ConnectionResetError("connection reset by peer")

    def send_input(self, kind, args):
        raise ConnectionResetError("connection reset by peer")


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def channel():
    return FakeChannel([SAMPLE_DUMP])


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return ClientSettings(hdc_path="hdc", device_id=None)


@pytest.fixture
def context(channel, clock, settings):
    return AutomationContext(
        channel=channel, settings=settings, clock=clock, sleep=clock.sleep
    )
