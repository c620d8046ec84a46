"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate sequencing deeply - the unit tests do that - just that
each command loads the units file, touches the session store and renders.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

# Project root
PROJECT_ROOT = Path(__file__).parent.parent.parent

SESSION_ARGS = ["-e", "enr-1", "-m", "mod-1"]


def run_cli_command(args: list[str], session_dir: Path, timeout: int = 30) -> tuple[int, str, str]:
    """
    Run a CLI command and return exit code, stdout, stderr.

    Args:
        args: Arguments after 'python -m playlist_engine.cli.main'
        session_dir: Session directory for this test
        timeout: Maximum time to wait

    Returns:
        Tuple of (exit_code, stdout, stderr)
    """
    env = {
        **os.environ,
        "PLAYLIST_SESSION_DIR": str(session_dir),
        "COLUMNS": "200",
    }
    result = subprocess.run(
        [sys.executable, "-m", "playlist_engine.cli.main", *args],
        cwd=PROJECT_ROOT,
        capture_output=True,
        text=True,
        timeout=timeout,
        env=env,
    )

    return result.returncode, result.stdout, result.stderr


@pytest.fixture
def session_dir(tmp_path):
    return tmp_path / "sessions"


@pytest.fixture
def units_file(tmp_path, sample_unit_records):
    """Plain list export (no course settings, so the configured default mode applies)."""
    path = tmp_path / "units.json"
    path.write_text(json.dumps(sample_unit_records), encoding="utf-8")
    return str(path)


@pytest.fixture
def full_module_file(tmp_path, sample_unit_records):
    """Module export with adaptive mode 'full'."""
    path = tmp_path / "module.json"
    path.write_text(
        json.dumps({"units": sample_unit_records, "adaptiveSettings": {"mode": "full"}}),
        encoding="utf-8",
    )
    return str(path)


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self, session_dir):
        """Main help should list the commands."""
        code, stdout, stderr = run_cli_command(["--help"], session_dir)

        assert code == 0, f"Help failed: {stderr}"
        assert "Commands" in stdout
        for command in ("init", "show", "next", "gate", "mastery", "goto"):
            assert command in stdout

    @pytest.mark.parametrize("command", ["init", "show", "next", "gate", "mastery", "goto"])
    def test_command_help(self, session_dir, command):
        code, stdout, stderr = run_cli_command([command, "--help"], session_dir)

        assert code == 0, f"{command} help failed: {stderr}"


class TestCLISession:
    """Test session commands against a units file."""

    def test_init_renders_playlist(self, units_file, session_dir):
        code, stdout, stderr = run_cli_command(["init", units_file, *SESSION_ARGS], session_dir)

        assert code == 0, f"Init failed: {stderr}"
        assert "Binary Basics" in stdout
        assert "Wrap-up" in stdout
        assert list(session_dir.glob("*.json"))

    def test_missing_units_file_fails(self, tmp_path, session_dir):
        code, _, _ = run_cli_command(
            ["init", str(tmp_path / "nope.json"), *SESSION_ARGS], session_dir
        )
        assert code != 0

    def test_show_without_saved_session(self, units_file, session_dir):
        code, stdout, stderr = run_cli_command(["show", units_file, *SESSION_ARGS], session_dir)

        assert code == 0, f"Show failed: {stderr}"
        assert "Next:" in stdout

    def test_static_walk_to_completion(self, units_file, session_dir):
        run_cli_command(["init", units_file, *SESSION_ARGS], session_dir)

        outputs = []
        for _ in range(4):
            code, stdout, stderr = run_cli_command(["next", units_file, *SESSION_ARGS], session_dir)
            assert code == 0, f"Next failed: {stderr}"
            outputs.append(stdout)

        assert "Applied: advance" in outputs[0]
        assert "Module complete" in outputs[-1]

        code, stdout, _ = run_cli_command(["next", units_file, *SESSION_ARGS], session_dir)
        assert code == 0
        assert "Module already complete" in stdout


class TestCLIAdaptiveFlow:
    """Walk a full-mode module through skip, hold, gate failure and review."""

    def test_full_flow(self, full_module_file, session_dir):
        def run(*args):
            code, stdout, stderr = run_cli_command([*args, *SESSION_ARGS], session_dir)
            assert code == 0, f"{args[0]} failed: {stderr}"
            return stdout

        run("init", full_module_file)
        run("mastery", full_module_file, "node-1", "0.9", "--attempts", "4")

        assert "Applied: skip" in run("next", full_module_file)
        assert "Applied: advance" in run("next", full_module_file)
        assert "Applied: hold" in run("next", full_module_file)

        stdout = run("gate", full_module_file, "gate-1", "--failed", "--score", "0.4",
                     "-f", "node-1", "-f", "node-2")
        assert "Recorded attempt #1 on gate-1" in stdout

        stdout = run("next", full_module_file)
        assert "Applied: inject 2 entries" in stdout
        assert "Review: Binary Basics" in stdout

    def test_goto_blocked_by_gate(self, full_module_file, session_dir):
        run_cli_command(["init", full_module_file, *SESSION_ARGS, "--mode", "guided"], session_dir)

        code, stdout, _ = run_cli_command(["goto", full_module_file, "3", *SESSION_ARGS], session_dir)
        assert code == 1
        assert "Cannot move to index 3" in stdout

        code, _, stderr = run_cli_command(
            ["goto", full_module_file, "3", "--override", *SESSION_ARGS], session_dir
        )
        assert code == 0, f"Override goto failed: {stderr}"

        code, _, stderr = run_cli_command(["goto", full_module_file, "0", *SESSION_ARGS], session_dir)
        assert code == 0, f"Backwards goto failed: {stderr}"


class TestCLIModePersistence:
    """The mode chosen at init drives every later command."""

    @pytest.fixture
    def gated_units_file(self, tmp_path):
        records = [
            {"id": "lu-1", "title": "Intro", "sequence": 1},
            {
                "id": "gate-1",
                "title": "Checkpoint",
                "sequence": 2,
                "adaptive": {
                    "assessesNodes": ["node-1"],
                    "isGate": True,
                    "gateConfig": {"maxRetries": 1, "failStrategy": "hold"},
                },
            },
            {"id": "lu-3", "title": "After", "sequence": 3},
        ]
        path = tmp_path / "gated.json"
        path.write_text(json.dumps(records), encoding="utf-8")
        return str(path)

    def test_goto_respects_mode_from_init(self, gated_units_file, session_dir):
        code, _, stderr = run_cli_command(
            ["init", gated_units_file, *SESSION_ARGS, "--mode", "full"], session_dir
        )
        assert code == 0, f"Init failed: {stderr}"

        code, stdout, _ = run_cli_command(["goto", gated_units_file, "2", *SESSION_ARGS], session_dir)

        assert code == 1
        assert "Cannot move to index 2" in stdout

    def test_next_respects_mode_from_init(self, gated_units_file, session_dir):
        run_cli_command(["init", gated_units_file, *SESSION_ARGS, "--mode", "full"], session_dir)

        _, first, _ = run_cli_command(["next", gated_units_file, *SESSION_ARGS], session_dir)
        _, second, _ = run_cli_command(["next", gated_units_file, *SESSION_ARGS], session_dir)

        assert "Applied: advance" in first
        assert "Applied: hold" in second

    def test_mode_flag_overrides_saved_mode(self, gated_units_file, session_dir):
        run_cli_command(["init", gated_units_file, *SESSION_ARGS, "--mode", "full"], session_dir)

        code, _, stderr = run_cli_command(
            ["next", gated_units_file, *SESSION_ARGS, "--mode", "off"], session_dir
        )
        assert code == 0, f"Next failed: {stderr}"

        _, stdout, _ = run_cli_command(["next", gated_units_file, *SESSION_ARGS], session_dir)
        assert "Applied: advance" in stdout


class TestCLIInputValidation:
    def test_mastery_out_of_range_is_rejected(self, units_file, session_dir):
        run_cli_command(["init", units_file, *SESSION_ARGS], session_dir)

        code, stdout, _ = run_cli_command(
            ["mastery", units_file, "node-1", "85", *SESSION_ARGS], session_dir
        )

        assert code == 1
        assert "Invalid progress for node-1" in stdout
