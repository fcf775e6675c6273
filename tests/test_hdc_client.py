import subprocess

import pytest

from infra.hdc import (
    HdcClient,
    abilities_command,
    hidumper_command,
    input_command,
    parse_screen_size,
    start_ability_command,
    ui_tree_command,
    windows_command,
)
from shared.errors import HdcCommandError, HdcError


class Completed:
    def __init__(self, stdout="", stderr="", returncode=0):
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode


class Calls(list):
    pass


@pytest.fixture
def recorder(monkeypatch):
    calls = Calls()
    calls.responses = []

    def fake_run(cmd, **kwargs):
        calls.append((cmd, kwargs))
        if calls.responses:
            response = calls.responses.pop(0)
            if isinstance(response, Exception):
                raise response
            return response
        return Completed(stdout="ok")

    monkeypatch.setattr(subprocess, "run", fake_run)
    return calls


def test_run_command_uses_shell_and_device(recorder):
    client = HdcClient(hdc_path="/opt/hdc", device_id="ABC123", timeout=5)
    assert client.run_command("ls") == "ok"
    cmd, kwargs = recorder[0]
    assert cmd == ["/opt/hdc", "-t", "ABC123", "shell", "ls"]
    assert kwargs["timeout"] == 5
    assert kwargs["capture_output"] is True


def test_get_ui_tree_command(recorder):
    HdcClient().run_command(ui_tree_command())
    assert recorder[0][0] == ["hdc", "shell", ui_tree_command()]
    assert ui_tree_command() == "hidumper -s RenderService -a 'client'"


def test_send_input(recorder):
    HdcClient().send_input("click", [10, 20])
    assert recorder[0][0][-1] == "uitest uiInput click 10 20"
    assert input_command("keyEvent", [2]) == "uitest uiInput keyEvent 2"


def test_nonzero_exit_raises(recorder):
    recorder.responses.append(Completed(stderr="[Fail]", returncode=1))
    with pytest.raises(HdcCommandError) as excinfo:
        HdcClient().run_command("ls")
    assert excinfo.value.returncode == 1


def test_stderr_without_stdout_raises(recorder):
    recorder.responses.append(Completed(stderr="boom"))
    with pytest.raises(HdcError):
        HdcClient().run_command("ls")


def test_missing_executable_and_timeout(recorder):
    recorder.responses.append(FileNotFoundError())
    with pytest.raises(HdcError):
        HdcClient(hdc_path="nope").run_command("ls")
    recorder.responses.append(subprocess.TimeoutExpired(cmd="hdc", timeout=1))
    with pytest.raises(HdcError):
        HdcClient().run_command("ls")


def test_parse_screen_size():
    assert parse_screen_size("physical resolution=1260x2720") == (1260, 2720)
    assert parse_screen_size("Physical size: 720x1280") == (720, 1280)
    assert parse_screen_size("") is None


def test_unstartable_executable_raises_hdc_error(recorder):
    recorder.responses.append(PermissionError(13, "Permission denied"))
    with pytest.raises(HdcError) as excinfo:
        HdcClient(hdc_path="/tmp/hdc").run_command("ls")
    assert "Permission denied" in str(excinfo.value)


def test_service_dump_commands(recorder):
    client = HdcClient()
    client.run_command(windows_command())
    client.run_command(abilities_command())
    client.run_command(hidumper_command("RenderService", "screen"))
    client.run_command(start_ability_command("com.example.app", "EntryAbility"))
    assert [cmd[-1] for cmd, _ in recorder] == [
        "hidumper -s WindowManagerService -a '-a'",
        "hidumper -s AbilityManagerService -a '-a'",
        "hidumper -s RenderService -a 'screen'",
        "aa start -a EntryAbility -b com.example.app",
    ]
