"""Shared utility functions for crpml.

Provides async command execution, file writing, path shortening for display,
and Rich-based console output helpers.
"""

from __future__ import annotations

import asyncio
import os
import re
from pathlib import Path

from rich.console import Console
from rich.markup import escape

console = Console()

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: float | None = None,
    capture: bool = True,
) -> tuple[int, str, str]:
    """Run a command asynchronously.

    Args:
        cmd: Executable followed by its arguments.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed, or
            ``None`` to wait for as long as it takes.
        capture: Whether to capture stdout/stderr (if ``False`` they inherit
            the parent's streams).

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  If *capture* is ``False``
        the stdout/stderr strings will be empty.
    """
    stdout_pipe = asyncio.subprocess.PIPE if capture else None
    stderr_pipe = asyncio.subprocess.PIPE if capture else None

    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=stdout_pipe,
        stderr=stderr_pipe,
        cwd=str(cwd) if cwd else None,
    )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (-1, "", f"Command timed out after {timeout}s: {' '.join(cmd)}")

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def get_short_path_name(absolute_path: str, separator: str = os.sep) -> str:
    """Replace the inner parts of a long path with an ellipsis.

    Examples::

        get_short_path_name("/a/b/c/d/e/f/g", "/") -> "/a/b/c/.../e/f/g"
        get_short_path_name("/a/b/c", "/")         -> "/a/b/c"
    """
    ends_with_separator = absolute_path.endswith(separator)
    normalised = absolute_path[: -len(separator)] if ends_with_separator else absolute_path

    parts = normalised.split(separator)
    # The empty part before a leading separator counts.
    if len(parts) < 7:
        return absolute_path

    result = separator.join([*parts[:4], "...", *parts[-3:]])
    return result + separator if ends_with_separator else result


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def highlight_names(message: str) -> str:
    """Turn back-quoted names in *message* into bold Rich markup."""
    escaped = escape(message)
    return re.sub(r"`([^`]+)`", r"`[bold]\1[/bold]`", escaped)


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message, emphasising back-quoted names."""
    console.print(f"[cyan]Oops, something went wrong![/cyan] [red]{highlight_names(message)}[/red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")
