"""
Tests for the offboardctl command line interface.
"""

import json

import pytest
from click.testing import CliRunner

from offboarding_engine.cli.offboardctl import OffboardingController, cli
from offboarding_engine.models import ProcessStatus


@pytest.fixture
def config_file(tmp_path, engine_config):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(engine_config))
    return path


@pytest.fixture
def controller(config_file):
    return OffboardingController(str(config_file))


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, controller, args, **kwargs):
    return runner.invoke(cli, args, obj={"controller": controller}, **kwargs)


class TestOffboardingController:
    """Test cases for configuration loading."""

    def test_config_file_overrides_defaults(self, controller, engine_config):
        assert controller.config["state_file"] == engine_config["state_file"]
        assert controller.engine.state_manager.storage_path is not None

    def test_defaults_without_config(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        controller = OffboardingController()

        assert controller.config["state_file"] == "offboarding_state.json"
        assert controller.config["audit_dir"] == "audit"


class TestCommands:
    """Test cases for the CLI commands."""

    def test_steps(self, runner, controller):
        result = invoke(runner, controller, ["steps"])

        assert result.exit_code == 0
        assert "EXIT_INTERVIEW" in result.output

    def test_start_and_list(self, runner, controller):
        result = invoke(runner, controller, ["start", "E1001", "--actor", "hr.manager"])
        assert result.exit_code == 0

        process = controller.engine.get_active_process("E1001")
        assert process is not None
        assert process.started_by == "hr.manager"

        result = invoke(runner, controller, ["list", "--status", "IN_PROGRESS"])
        assert result.exit_code == 0
        assert "Offboarding Processes (1)" in result.output

    def test_start_twice_fails(self, runner, controller):
        invoke(runner, controller, ["start", "E1001"])

        result = invoke(runner, controller, ["start", "E1001"])

        assert result.exit_code == 1
        assert "Cannot start offboarding" in result.output

    def test_submit_step_complete(self, runner, controller, tmp_path, notice_payload):
        process = controller.engine.start_process("E1001")
        payload_file = tmp_path / "notice.json"
        payload_file.write_text(json.dumps(notice_payload))

        result = invoke(
            runner, controller, ["submit-step", process.id, "1", str(payload_file), "--complete"]
        )

        assert result.exit_code == 0
        assert "Completed step 1" in result.output
        assert controller.engine.get_process(process.id).current_step == 2

    def test_submit_step_reports_missing_preconditions(self, runner, controller, tmp_path):
        process = controller.engine.start_process("E1001")
        payload_file = tmp_path / "interview.json"
        payload_file.write_text(json.dumps({"feedback": ""}))

        result = invoke(
            runner, controller, ["submit-step", process.id, "5", str(payload_file), "--complete"]
        )

        assert result.exit_code == 1
        assert "Exit interview feedback is required" in result.output
        assert controller.engine.get_process(process.id).current_step == 1

    def test_submit_step_with_attachment(self, runner, controller, tmp_path, notice_payload):
        process = controller.engine.start_process("E1001")
        payload_file = tmp_path / "notice.json"
        payload_file.write_text(json.dumps(notice_payload))
        letter = tmp_path / "letter.pdf"
        letter.write_bytes(b"%PDF-1.4")

        result = invoke(
            runner, controller,
            ["submit-step", process.id, "1", str(payload_file), "--attach", str(letter)],
        )

        assert result.exit_code == 0
        notice = controller.engine.get_process(process.id).notice
        assert len(notice.attachments) == 1
        assert notice.attachments[0].endswith("letter.pdf")
        assert notice.is_completed is False

    def test_navigate(self, runner, controller):
        process = controller.engine.start_process("E1001")

        result = invoke(runner, controller, ["navigate", process.id, "7"])

        assert result.exit_code == 0
        assert controller.engine.get_process(process.id).current_step == 7

    def test_navigate_out_of_range(self, runner, controller):
        process = controller.engine.start_process("E1001")

        result = invoke(runner, controller, ["navigate", process.id, "0"])

        assert result.exit_code == 1

    def test_cancel_requires_confirmation(self, runner, controller):
        process = controller.engine.start_process("E1001")

        result = invoke(runner, controller, ["cancel", process.id], input="n\n")
        assert result.exit_code == 0
        assert controller.engine.get_process(process.id).status == ProcessStatus.IN_PROGRESS

        result = invoke(runner, controller, ["cancel", process.id, "--yes"])
        assert result.exit_code == 0
        assert controller.engine.get_process(process.id).status == ProcessStatus.CANCELLED

    def test_show_unknown_process(self, runner, controller):
        result = invoke(runner, controller, ["show", "missing"])

        assert result.exit_code == 1

    def test_audit_trail(self, runner, controller):
        process = controller.engine.start_process("E1001", actor="hr.manager")

        result = invoke(runner, controller, ["audit-trail", process.id])

        assert result.exit_code == 0
        assert "start_process" in result.output
