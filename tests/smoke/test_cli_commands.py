"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work.
Each test points SUPERMORSE_DATA_DIR at a temporary directory.

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

from supermorse.drill import SQLiteBlobStore
from supermorse.drill.drill_cli import CONFUSIONS_KEY

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

# Project root
PROJECT_ROOT = Path(__file__).parent.parent.parent


@pytest.fixture
def run_cli(tmp_path):
    """Run ``python -m supermorse.drill`` against a throwaway data directory."""

    def runner(command: str, stdin: str = "", timeout: int = 30) -> tuple[int, str, str]:
        """
        Run a CLI command and return exit code, stdout, stderr.

        Args:
            command: The command to run (after 'python -m supermorse.drill')
            stdin: Text fed to interactive prompts
            timeout: Maximum time to wait

        Returns:
            Tuple of (exit_code, stdout, stderr)
        """
        env = dict(os.environ)
        env["SUPERMORSE_DATA_DIR"] = str(tmp_path)
        env["PYTHONIOENCODING"] = "utf-8"
        env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(PROJECT_ROOT), env.get("PYTHONPATH")]))

        result = subprocess.run(
            f"{sys.executable} -m supermorse.drill {command}",
            shell=True,
            cwd=PROJECT_ROOT,
            input=stdin,
            capture_output=True,
            text=True,
            encoding="utf-8",
            timeout=timeout,
            env=env,
        )

        return result.returncode, result.stdout, result.stderr

    return runner


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self, run_cli):
        """Main help should display without errors."""
        code, stdout, stderr = run_cli("--help")

        assert code == 0, f"Help failed: {stderr}"
        assert "supermorse" in stdout.lower()
        assert "Commands" in stdout

    @pytest.mark.parametrize("command", ["status", "learn", "drill", "settings", "alphabet", "reset"])
    def test_command_help(self, run_cli, command):
        code, stdout, stderr = run_cli(f"{command} --help")

        assert code == 0, f"{command} help failed: {stderr}"


class TestCLIProgress:
    """Test status, learn and reset."""

    def test_status_on_fresh_install(self, run_cli, tmp_path):
        code, stdout, stderr = run_cli("status")

        assert code == 0, f"Status failed: {stderr}"
        assert "international" in stdout
        assert "core" in stdout
        assert (tmp_path / "state.db").exists()

    def test_learn_shows_first_symbol(self, run_cli):
        code, stdout, stderr = run_cli("learn")

        assert code == 0, f"Learn failed: {stderr}"
        assert "K" in stdout
        assert "-.-" in stdout

    def test_reset_with_yes(self, run_cli):
        code, stdout, stderr = run_cli("reset --yes")

        assert code == 0, f"Reset failed: {stderr}"
        assert "reset" in stdout.lower()

    def test_reset_declined(self, run_cli):
        code, stdout, stderr = run_cli("reset", stdin="n\n")

        assert code == 0, f"Reset failed: {stderr}"
        assert "has been reset" not in stdout


class TestCLISettings:
    """Test settings changes persist between runs."""

    def test_show_settings(self, run_cli):
        code, stdout, stderr = run_cli("settings")

        assert code == 0, f"Settings failed: {stderr}"
        assert "12 wpm" in stdout

    def test_wpm_change_persists(self, run_cli):
        code, stdout, stderr = run_cli("settings --wpm 20")
        assert code == 0, f"Settings failed: {stderr}"
        assert "20 wpm" in stdout

        code, stdout, stderr = run_cli("settings")
        assert "20 wpm" in stdout

    def test_out_of_range_wpm_is_clamped(self, run_cli):
        code, stdout, stderr = run_cli("settings --wpm 500")

        assert code == 0, f"Settings failed: {stderr}"
        assert "60 wpm" in stdout

    def test_curriculum_switch_with_confirmation(self, run_cli):
        code, stdout, stderr = run_cli("settings --curriculum germany", stdin="y\n")

        assert code == 0, f"Settings failed: {stderr}"
        assert "germany" in stdout

    def test_curriculum_switch_forgets_confusions(self, run_cli, tmp_path):
        store = SQLiteBlobStore(tmp_path / "state.db")
        store.put(CONFUSIONS_KEY, json.dumps({"confusions": [{"expected": "K", "observed": "R", "count": 3}]}))
        store.close()

        code, stdout, stderr = run_cli("settings --curriculum germany", stdin="y\n")
        assert code == 0, f"Settings failed: {stderr}"

        store = SQLiteBlobStore(tmp_path / "state.db")
        try:
            assert store.get(CONFUSIONS_KEY) is None
        finally:
            store.close()

    def test_declined_switch_keeps_confusions(self, run_cli, tmp_path):
        store = SQLiteBlobStore(tmp_path / "state.db")
        store.put(CONFUSIONS_KEY, json.dumps({"confusions": []}))
        store.close()

        code, stdout, stderr = run_cli("settings --curriculum germany", stdin="n\n")
        assert code == 0, f"Settings failed: {stderr}"

        store = SQLiteBlobStore(tmp_path / "state.db")
        try:
            assert store.get(CONFUSIONS_KEY) is not None
        finally:
            store.close()


class TestCLIAlphabet:
    """Test alphabet display."""

    def test_international_alphabet(self, run_cli):
        code, stdout, stderr = run_cli("alphabet")

        assert code == 0, f"Alphabet failed: {stderr}"
        assert "-.-" in stdout

    def test_regional_alphabet(self, run_cli):
        code, stdout, stderr = run_cli("alphabet --curriculum germany")

        assert code == 0, f"Alphabet failed: {stderr}"
        assert "Ä" in stdout


class TestCLIDrill:
    """Test a short drill session."""

    def test_single_send_round(self, run_cli):
        code, stdout, stderr = run_cli("drill --rounds 1 --length 3", stdin="-.- -.- --\n")

        assert code == 0, f"Drill failed: {stderr}"
        assert "Accuracy" in stdout
        assert "Rounds completed: 1" in stdout

    def test_single_copy_round(self, run_cli):
        code, stdout, stderr = run_cli("drill --mode copy --rounds 1 --length 2", stdin="k m\n")

        assert code == 0, f"Drill failed: {stderr}"
        assert "Rounds completed: 1" in stdout

    def test_quit_immediately(self, run_cli):
        code, stdout, stderr = run_cli("drill", stdin="q\n")

        assert code == 0, f"Drill failed: {stderr}"
        assert "Rounds completed: 0" in stdout

    def test_unknown_mode(self, run_cli):
        code, stdout, stderr = run_cli("drill --mode hum")

        assert code == 1
