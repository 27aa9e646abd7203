"""Tests for subprocess wrapper with rich error context."""

import subprocess
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from stackyard.core.subprocess import run_subprocess_with_context


def test_success_returns_completed_process() -> None:
    with patch("stackyard.core.subprocess.subprocess.run") as mock_run:
        mock_result = Mock(spec=subprocess.CompletedProcess)
        mock_result.returncode = 0
        mock_result.stdout = "feat-a\nmain\n"
        mock_run.return_value = mock_result

        result = run_subprocess_with_context(
            ["git", "branch"],
            operation_context="list local branches",
            cwd=Path("/repo"),
        )

        assert result == mock_result
        mock_run.assert_called_once_with(
            ["git", "branch"],
            cwd=Path("/repo"),
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=True,
        )


def test_failure_message_carries_context_and_stderr() -> None:
    """A failed rebase reports what was attempted, the command, and git's stderr."""
    with patch("stackyard.core.subprocess.subprocess.run") as mock_run:
        error = subprocess.CalledProcessError(
            returncode=128,
            cmd=["git", "rebase", "main"],
            stderr="fatal: invalid upstream 'main'",
        )
        mock_run.side_effect = error

        with pytest.raises(RuntimeError) as exc_info:
            run_subprocess_with_context(
                ["git", "rebase", "main"],
                operation_context="rebase '/wt/feat-a' onto 'main'",
            )

        message = str(exc_info.value)
        assert "Failed to rebase '/wt/feat-a' onto 'main'" in message
        assert "Command: git rebase main" in message
        assert "Exit code: 128" in message
        assert "stderr: fatal: invalid upstream 'main'" in message
        assert exc_info.value.__cause__ is error


def test_whitespace_only_output_is_omitted() -> None:
    with patch("stackyard.core.subprocess.subprocess.run") as mock_run:
        mock_run.side_effect = subprocess.CalledProcessError(
            returncode=1, cmd=["git", "log"], output="  ", stderr="   \n  "
        )

        with pytest.raises(RuntimeError) as exc_info:
            run_subprocess_with_context(["git", "log"], operation_context="read commit log")

        message = str(exc_info.value)
        assert "stdout:" not in message
        assert "stderr:" not in message


def test_missing_binary_is_runtime_error() -> None:
    with patch("stackyard.core.subprocess.subprocess.run") as mock_run:
        mock_run.side_effect = FileNotFoundError("git")

        with pytest.raises(RuntimeError) as exc_info:
            run_subprocess_with_context(["git", "status"], operation_context="check status")

        assert "Command not found while trying to check status: git" in str(exc_info.value)


def test_check_false_returns_failed_process() -> None:
    with patch("stackyard.core.subprocess.subprocess.run") as mock_run:
        mock_result = Mock(spec=subprocess.CompletedProcess)
        mock_result.returncode = 1
        mock_run.return_value = mock_result

        result = run_subprocess_with_context(
            ["git", "rebase", "main"], operation_context="rebase", check=False
        )

        assert result.returncode == 1
        assert mock_run.call_args.kwargs["check"] is False


def test_extra_kwargs_pass_through() -> None:
    with patch("stackyard.core.subprocess.subprocess.run") as mock_run:
        mock_run.return_value = Mock(spec=subprocess.CompletedProcess)

        run_subprocess_with_context(
            ["git", "status"], operation_context="status", timeout=30, env={"A": "1"}
        )

        assert mock_run.call_args.kwargs["timeout"] == 30
        assert mock_run.call_args.kwargs["env"] == {"A": "1"}
