"""Unit tests for utility functions (crpml.utils).

Tests cover:
- run_command (success, failure, timeout, cwd, capture=False)
- write_file
- get_short_path_name
- highlight_names and the Rich output helpers
"""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from crpml.utils import (
    get_short_path_name,
    highlight_names,
    print_error,
    print_success,
    print_warning,
    run_command,
    write_file,
)


# ---------------------------------------------------------------------------
# run_command
# ---------------------------------------------------------------------------


class TestRunCommand:
    @pytest.mark.unit
    async def test_successful_command(self):
        returncode, stdout, stderr = await run_command([sys.executable, "-c", "print('hello')"])
        assert returncode == 0
        assert "hello" in stdout

    @pytest.mark.unit
    async def test_failed_command(self):
        returncode, stdout, stderr = await run_command(
            [sys.executable, "-c", "import sys; sys.exit(3)"]
        )
        assert returncode == 3

    @pytest.mark.unit
    async def test_command_with_cwd(self, tmp_path: Path):
        returncode, stdout, stderr = await run_command(
            [sys.executable, "-c", "import os; print(os.getcwd())"], cwd=tmp_path
        )
        assert returncode == 0
        assert Path(stdout.strip()).resolve() == tmp_path.resolve()

    @pytest.mark.unit
    async def test_command_timeout(self):
        returncode, stdout, stderr = await run_command(
            [sys.executable, "-c", "import time; time.sleep(10)"], timeout=1
        )
        assert returncode == -1
        assert "timed out" in stderr

    @pytest.mark.unit
    async def test_command_returns_stderr(self):
        returncode, stdout, stderr = await run_command(
            [sys.executable, "-c", "import sys; sys.stderr.write('error_msg\\n')"],
        )
        assert "error_msg" in stderr

    @pytest.mark.unit
    async def test_no_capture_returns_empty_strings(self, mock_subprocess):
        proc = mock_subprocess(returncode=0)
        proc.communicate.return_value = (None, None)
        with patch("asyncio.create_subprocess_exec", return_value=proc) as create:
            result = await run_command(["npm", "install"], capture=False)
        assert result == (0, "", "")
        assert create.call_args.kwargs["stdout"] is None
        assert create.call_args.kwargs["stderr"] is None


# ---------------------------------------------------------------------------
# write_file
# ---------------------------------------------------------------------------


class TestWriteFile:
    @pytest.mark.unit
    def test_creates_parents(self, tmp_path: Path):
        target = tmp_path / "a" / "b" / "c.txt"
        write_file(target, "content")
        assert target.read_text(encoding="utf-8") == "content"

    @pytest.mark.unit
    def test_overwrites(self, tmp_path: Path):
        target = tmp_path / "c.txt"
        write_file(target, "one")
        write_file(target, "two")
        assert target.read_text(encoding="utf-8") == "two"


# ---------------------------------------------------------------------------
# get_short_path_name
# ---------------------------------------------------------------------------


class TestShortPathName:
    @pytest.mark.unit
    def test_short_path_unchanged(self):
        assert get_short_path_name("/usr/lib/node", "/") == "/usr/lib/node"

    @pytest.mark.unit
    def test_six_parts_unchanged(self):
        assert get_short_path_name("/a/b/c/d/e", "/") == "/a/b/c/d/e"

    @pytest.mark.unit
    def test_long_path_shortened(self):
        assert get_short_path_name("/a/b/c/d/e/f/g", "/") == "/a/b/c/.../e/f/g"

    @pytest.mark.unit
    def test_trailing_separator_kept(self):
        assert get_short_path_name("/a/b/c/d/e/f/g/", "/") == "/a/b/c/.../e/f/g/"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


class TestOutputHelpers:
    @pytest.mark.unit
    def test_highlight_names(self):
        assert highlight_names("Invalid template `lib`") == "Invalid template `[bold]lib[/bold]`"

    @pytest.mark.unit
    def test_highlight_escapes_markup(self):
        assert "\\[red]" in highlight_names("literal [red] text")

    @pytest.mark.unit
    def test_print_helpers_do_not_raise(self):
        with patch("crpml.utils.console") as mock_console:
            print_success("done")
            print_warning("careful")
            print_error("Missing merge method for `package.json`")
        assert mock_console.print.call_count == 3
        assert "Oops" in mock_console.print.call_args_list[2].args[0]
