"""External line filter invocation.

The index is searched by piping it through a grep-like program: spawn it
with the search term, write the whole index to its stdin, close stdin, read
all of stdout and wait for it to exit.
"""

from __future__ import annotations

import os
import shlex
import subprocess

import structlog

from mates.exceptions import FilterSpawnError, FilterStreamError

logger = structlog.get_logger()


def run_filter(command: str, term: str, text: str, timeout: float | None = None) -> str:
    """Run `command term` with `text` on stdin and return its stdout.

    The exit status is not checked: grep-like tools exit non-zero when
    nothing matched.

    Args:
        command: Filter command line, e.g. ``grep`` or ``grep -i``.
        term: Search term, passed as the last argument. For grep it follows
            ``--`` so terms starting with ``-`` are not read as options.
        text: Data written to the process's stdin.
        timeout: Seconds to wait for the process before killing it.

    Returns:
        str: Everything the process wrote to stdout.

    Raises:
        FilterSpawnError: If the process cannot be started.
        FilterStreamError: If writing, reading or waiting fails.
    """

    argv = shlex.split(command)
    if not argv:
        raise FilterSpawnError("No filter command configured")
    if os.path.basename(argv[0]) == "grep":
        argv.append("--")
    argv.append(term)

    try:
        process = subprocess.Popen(
            argv,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            encoding="utf-8",
        )
    except OSError as exc:
        raise FilterSpawnError(f"Unable to start {argv[0]!r}: {exc}") from exc

    try:
        output, _ = process.communicate(text, timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        process.kill()
        process.communicate()
        raise FilterStreamError(f"{argv[0]!r} did not finish within {timeout} seconds") from exc
    except (OSError, ValueError) as exc:
        process.kill()
        process.wait()
        raise FilterStreamError(f"Failed to exchange data with {argv[0]!r}: {exc}") from exc

    logger.debug("filter_process_exited", command=argv[0], returncode=process.returncode)
    if output is None:
        raise FilterStreamError(f"Failed to get stdout from {argv[0]!r}")
    return output
