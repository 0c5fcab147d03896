"""Tests for shell utilities."""

import pytest

from prreview.utils.shell import ShellError, ShellResult, run_command


class TestShellResult:
    """Test ShellResult behaviour."""

    def test_success(self):
        assert ShellResult(0, "out", "", "true").success is True

    def test_check_raises_on_failure(self):
        result = ShellResult(3, "", "boom", "false")

        with pytest.raises(ShellError) as exc_info:
            result.check()

        assert exc_info.value.returncode == 3
        assert exc_info.value.stderr == "boom"


def test_missing_command():
    with pytest.raises(ShellError) as exc_info:
        run_command(["prreview-definitely-missing-binary"])

    assert exc_info.value.returncode == -1


def test_quoted_arguments_kept_together():
    result = run_command("echo 'a or b'")

    assert result.stdout.strip() == "a or b"


def test_unbalanced_quotes():
    with pytest.raises(ShellError) as exc_info:
        run_command("pytest -k 'a or b")

    assert exc_info.value.returncode == -1
