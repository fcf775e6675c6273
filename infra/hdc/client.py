import logging
import re
import subprocess
from typing import Iterable, Optional, Sequence, Tuple, Union

from shared.errors import HdcCommandError, HdcError


LOGGER = logging.getLogger("hrpa.hdc")

UI_TREE_SERVICE = "RenderService"
UI_TREE_ARGS = "client"
SCREEN_ARGS = "screen"
WINDOW_SERVICE = "WindowManagerService"
ABILITY_SERVICE = "AbilityManagerService"

_SCREEN_SIZE_PATTERNS = (
    re.compile(r"physical resolution\s*=\s*(\d+)\s*x\s*(\d+)", re.IGNORECASE),
    re.compile(r"Physical size:\s*(\d+)\s*x\s*(\d+)", re.IGNORECASE),
)


def hidumper_command(service: str, args: str) -> str:
    return "hidumper -s {} -a '{}'".format(service, args)


def ui_tree_command() -> str:
    return hidumper_command(UI_TREE_SERVICE, UI_TREE_ARGS)


def screen_info_command() -> str:
    return hidumper_command(UI_TREE_SERVICE, SCREEN_ARGS)


def windows_command() -> str:
    return hidumper_command(WINDOW_SERVICE, "-a")


def abilities_command() -> str:
    return hidumper_command(ABILITY_SERVICE, "-a")


def start_ability_command(bundle_name: str, ability_name: str) -> str:
    return "aa start -a {} -b {}".format(ability_name, bundle_name)


def input_command(kind: str, args: Iterable[Union[int, str]]) -> str:
    parts = ["uitest", "uiInput", str(kind)]
    parts.extend(str(arg) for arg in args)
    return " ".join(parts)


def parse_screen_size(output: str) -> Optional[Tuple[int, int]]:
    for pattern in _SCREEN_SIZE_PATTERNS:
        match = pattern.search(output or "")
        if match:
            width, height = int(match.group(1)), int(match.group(2))
            if width > 0 and height > 0:
                return width, height
    return None


class HdcClient:
    def __init__(self, hdc_path="hdc", device_id=None, timeout=30):
        self.hdc_path = hdc_path
        self.device_id = device_id or None
        self.timeout = timeout

    def _base_cmd(self):
        cmd = [self.hdc_path]
        if self.device_id:
            cmd += ["-t", self.device_id]
        return cmd

    def run(self, args, timeout=None, check=True):
        cmd = self._base_cmd() + list(args)
        LOGGER.debug("hdc %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                timeout=timeout or self.timeout,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as exc:
            raise HdcError("hdc executable not found: {}".format(self.hdc_path)) from exc
        except subprocess.TimeoutExpired as exc:
            raise HdcError("hdc timed out: {}".format(" ".join(cmd))) from exc
        except OSError as exc:
            raise HdcError("hdc failed to start: {}".format(exc)) from exc
        if check and result.returncode != 0:
            raise HdcCommandError(" ".join(cmd), result.returncode, result.stderr)
        if check and result.stderr and not result.stdout:
            raise HdcCommandError(" ".join(cmd), result.returncode, result.stderr)
        return result

    def run_command(self, command: str) -> str:
        return self.run(["shell", command]).stdout

    def send_input(self, kind: str, args: Sequence[Union[int, str]]) -> str:
        return self.run_command(input_command(kind, args))
