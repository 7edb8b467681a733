"""End-to-end flows through AppState.handle_input and tick."""

from __future__ import annotations

import pytest

from conftest import char, key, type_text
from success_cli.models import KeyCode
from success_cli.models.state import (
    CreateGoalForm,
    PickDuration,
    PickGoalForSession,
    QuantityPrompt,
    RunningTimer,
    View,
)


@pytest.fixture(autouse=True)
def no_spawn(mocker):
    return mocker.patch("success_cli.core.timer.spawn_commands", return_value=[])


def replace_duration(app, text: str) -> None:
    for _ in range(len(app.duration_input.value)):
        app.handle_input(key(KeyCode.BACKSPACE))
    type_text(app, text)


def test_goal_with_quantity_unit(app, store, clock):
    app.handle_input(key(KeyCode.ENTER))
    assert isinstance(app.mode, PickGoalForSession)

    type_text(app, "Read")
    app.handle_input(key(KeyCode.ENTER))
    assert isinstance(app.mode, CreateGoalForm)
    assert app.form_state.goal_name.value == "Read"

    app.handle_input(key(KeyCode.TAB))
    type_text(app, "pages")
    app.handle_input(key(KeyCode.ENTER))
    assert app.mode == PickDuration(is_reward=False, goal_name="Read", goal_id=1)
    assert app.duration_input.value == "25m"
    assert store.goals[0].quantity_name == "pages"

    replace_duration(app, "1m")
    app.handle_input(key(KeyCode.ENTER))
    assert isinstance(app.mode, RunningTimer)
    assert app.timer.total_seconds == 60

    clock.advance(61)
    app.tick()
    assert app.mode == QuantityPrompt(goal_name="Read", unit_name="pages")

    type_text(app, "12")
    app.handle_input(key(KeyCode.ENTER))

    assert isinstance(app.mode, View)
    assert len(store.sessions) == 1
    session = store.sessions[0]
    assert session.name == "Read"
    assert session.quantity == 12
    assert session.duration_seconds == 60
    assert app.sessions == store.sessions


def test_goal_without_quantity_unit_saves_automatically(app, store, clock):
    app.handle_input(key(KeyCode.ENTER))
    type_text(app, "Stretch")
    app.handle_input(key(KeyCode.ENTER))
    app.handle_input(key(KeyCode.ENTER))
    replace_duration(app, "30s")
    app.handle_input(key(KeyCode.ENTER))

    clock.advance(29)
    app.tick()
    assert store.sessions == []

    clock.advance(2)
    app.tick()
    assert isinstance(app.mode, View)
    assert len(store.sessions) == 1
    assert store.sessions[0].quantity is None
    assert store.sessions[0].duration_seconds == 30


def test_reward_after_goal_session(app, store, clock):
    store.add_goal("Games", True, [])
    app.goals = store.list_goals()
    goal = store.add_goal("Read", False, [])
    app.goals = store.list_goals()
    store.add_session(goal.id, "Read", clock(), 60, False)
    app.load_day(app.today())

    app.handle_input(key(KeyCode.ENTER))
    assert app.search_results()[0][0] == "Games (id 1)"
    app.handle_input(key(KeyCode.ENTER))
    assert app.mode == PickDuration(is_reward=True, goal_name="Games", goal_id=1)


def test_timer_invariant_holds_through_flow(app, store, clock):
    def check():
        assert isinstance(app.mode, RunningTimer) == (app.timer is not None)

    check()
    app.handle_input(key(KeyCode.ENTER))
    type_text(app, "Walk")
    app.handle_input(key(KeyCode.ENTER))
    app.handle_input(key(KeyCode.ENTER))
    app.handle_input(key(KeyCode.ENTER))
    check()
    for _ in range(10):
        app.handle_input(key(KeyCode.UP))
        clock.advance(200)
        app.tick()
        check()


def test_ctrl_c_quits_from_any_mode(app):
    app.handle_input(key(KeyCode.ENTER))
    assert app.handle_input(char("c", ctrl=True)) is True


def test_q_quits_only_outside_dialogs(app):
    app.handle_input(key(KeyCode.ENTER))
    assert app.handle_input(char("q")) is False
    assert app.search_input.value == "q"
    app.handle_input(key(KeyCode.ESC))
    assert app.handle_input(char("q")) is True


def test_shutdown_kills_running_helpers(app, mocker):
    kill = mocker.patch("success_cli.core.app.kill_spawned")
    app.mode = PickDuration(is_reward=True, goal_name="Games", goal_id=1)
    app.handle_input(key(KeyCode.ENTER))
    processes = app.timer.spawned_processes

    app.shutdown()

    kill.assert_called_once_with(processes)
    assert app.timer is None


def test_shutdown_reports_unsaved_sessions(app, store, clock, mocker):
    logger = mocker.patch("success_cli.core.app.logger")
    store.fail_add_session = True
    app.mode = PickDuration(is_reward=False, goal_name="Walk", goal_id=1)
    app.handle_input(key(KeyCode.ENTER))
    clock.advance(25 * 60)
    app.tick()
    assert len(app.unsaved_sessions) == 1

    app.shutdown()

    logger.error.assert_called_once()
    assert "Walk" in logger.error.call_args.args
