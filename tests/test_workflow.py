import pytest

from conftest import EMPTY_DUMP, SAMPLE_DUMP, FakeChannel, ResetChannel
from hrpa.contracts import AssertExistsStep, DelayStep
from hrpa.domains.workflow import WorkflowEngine, extract_text
from infra.hdc import start_ability_command, ui_tree_command
from infra.renderservice import Modifiers, NodeProperties, UiNode


@pytest.fixture
def engine(context):
    return WorkflowEngine(context)


def use_channel(context, channel):
    context.channel = channel
    context.executor.channel = channel
    return channel


def test_failed_assertion_does_not_halt(engine, clock):
    result = engine.run_sequence(
        [
            {"type": "assert_exists", "text": "Checkout"},
            {"type": "delay", "ms": 250},
        ]
    )
    assert not result.success
    assert [step.success for step in result.steps] == [False, True]
    assert result.steps[1].duration_ms == 250
    assert clock.sleeps == [0.25]
    assert "2 steps, 1 succeeded, 1 failed" in result.summary


def test_stop_on_failure_is_opt_in(context):
    engine = WorkflowEngine(context, stop_on_failure=True)
    result = engine.run_sequence(
        [AssertExistsStep(text="Checkout"), DelayStep(ms=100)]
    )
    assert len(result.steps) == 1
    assert "1 skipped" in result.summary


def test_assert_exists(engine):
    result = engine.run_sequence([{"type": "assertExists", "text": "Setting"}])
    assert result.success
    assert result.steps[0].matched_node.name == "Settings"


def test_assert_exists_miss_carries_candidates(engine):
    result = engine.assert_exists("Logn")
    assert not result.success
    assert [match.node.name for match in result.candidates][:1] == ["Login"]
    assert engine.get_results() == [result]


def test_assert_text_equals(engine):
    ok = engine.assert_text_equals("Sett", "Settings")
    assert ok.success
    mismatch = engine.assert_text_equals("Sett", "Preferences")
    assert not mismatch.success
    assert '"Settings" != "Preferences"' in mismatch.message


def test_extract_text_falls_back_to_modifiers():
    node = UiNode(
        id="Text-1",
        type="Text",
        properties=NodeProperties(modifiers=Modifiers(extra={"content": "Hello"})),
    )
    assert extract_text(node) == "Hello"
    assert extract_text(UiNode(id="Text-2", type="Text")) == ""


def test_tap_step(engine, channel):
    result = engine.run_sequence([{"type": "tap", "text": "Settings"}])
    assert result.success
    assert channel.inputs == [("click", [540, 460])]


def test_input_text_is_unsupported(engine, channel):
    result = engine.run_sequence([{"type": "inputText", "text": "hello"}])
    assert not result.success
    assert "not supported" in result.steps[0].message
    assert channel.commands == []
    assert channel.inputs == []


def test_swipe_step(engine, channel):
    result = engine.run_sequence(
        [{"type": "swipe", "startX": 100, "startY": 900, "endX": 100, "endY": 200, "durationMs": 500}]
    )
    assert result.success
    assert channel.inputs == [("swipe", [100, 900, 100, 200, 3000])]


def test_wait_for_step_times_out(context, clock):
    context.channel = FakeChannel([EMPTY_DUMP])
    result = WorkflowEngine(context).run_sequence(
        [{"type": "wait_for", "text": "Settings", "timeoutMs": 1000}]
    )
    assert not result.success
    assert result.steps[0].duration_ms == 1000
    assert "timed out" in result.steps[0].message


def test_wait_for_step_turns_transport_failure_into_result(engine, channel):
    channel.tree_errors = 3
    result = engine.run_sequence([{"type": "wait_for", "text": "Login"}])
    assert not result.success
    assert "wait_for failed" in result.steps[0].message


def test_connection_reset_does_not_abort_run(context, clock):
    use_channel(context, ResetChannel())
    result = WorkflowEngine(context).run_sequence(
        [AssertExistsStep(text="Login"), DelayStep(ms=100)]
    )
    assert not result.success
    assert [step.success for step in result.steps] == [False, True]
    assert "connection reset" in result.steps[0].message
    assert "2 steps, 1 succeeded, 1 failed" in result.summary


def test_launch_and_tap(context, clock):
    channel = use_channel(context, FakeChannel([EMPTY_DUMP, SAMPLE_DUMP]))
    result = WorkflowEngine(context).launch_and_tap(
        "com.example.app", "EntryAbility", "Login"
    )
    assert result.success
    assert channel.commands[0] == start_ability_command("com.example.app", "EntryAbility")
    assert channel.commands[0] == "aa start -a EntryAbility -b com.example.app"
    assert channel.inputs == [("click", [250, 225])]
    assert result.matched_node.name == "Login"


def test_launch_and_tap_timeout(context):
    channel = use_channel(context, FakeChannel([EMPTY_DUMP]))
    result = WorkflowEngine(context).launch_and_tap("com.example.app", "EntryAbility", "Login", 1500)
    assert not result.success
    assert "did not appear within 1500ms" in result.message
    assert channel.inputs == []


def test_scroll_and_tap_scrolls_until_found(context, clock):
    channel = use_channel(context, FakeChannel([EMPTY_DUMP, EMPTY_DUMP, SAMPLE_DUMP]))
    result = WorkflowEngine(context).scroll_and_tap("Settings")
    assert result.success
    assert "after 2 scrolls" in result.message
    swipe = ("swipe", [630, 2176, 630, 544, 5000])
    assert channel.inputs == [swipe, swipe, ("click", [540, 460])]
    assert clock.sleeps == [0.5, 0.5]


def test_scroll_and_tap_gives_up(context):
    channel = use_channel(context, FakeChannel([EMPTY_DUMP]))
    result = WorkflowEngine(context).scroll_and_tap("Settings", max_scrolls=3)
    assert not result.success
    assert "not found after 3 scrolls" in result.message
    assert len(channel.tree_dumps) == 4
    assert [kind for kind, _ in channel.inputs] == ["swipe"] * 3


def test_unknown_step_is_a_failure(engine):
    result = engine.run_sequence([{"type": "teleport"}, {"ms": 5}])
    assert [step.success for step in result.steps] == [False, False]
    assert "invalid step type teleport" in result.steps[0].message
    assert "missing type" in result.steps[1].message


def test_results_reset_per_run(engine):
    engine.run_sequence([{"type": "delay", "ms": 0}])
    second = engine.run_sequence([{"type": "delay", "ms": 0}])
    assert len(second.steps) == 1
    engine.clear_results()
    assert engine.get_results() == []


def test_result_serializes(engine):
    result = engine.run_sequence([{"type": "assert_exists", "text": "Login"}])
    payload = result.to_dict()
    assert payload["success"] is True
    step = payload["steps"][0]
    assert step["step"] == {"type": "assert_exists", "text": "Login"}
    assert step["matched_node"]["name"] == "Login"
    assert ui_tree_command() in engine.context.channel.commands
