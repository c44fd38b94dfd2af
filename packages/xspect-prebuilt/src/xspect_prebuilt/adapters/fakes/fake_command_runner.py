"""Fake command runner for testing.

Provides a test double for CommandRunnerPort that writes preconfigured
files into the working directory instead of spawning processes, which is
enough to stand in for `npm pack`.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class FakeCommandRunner:
    """Fake implementation of CommandRunnerPort for testing.

    Records every (args, cwd) pair, then writes the configured output files
    into cwd or raises the configured exception.
    """

    def __init__(self, outputs: dict[str, bytes] | None = None) -> None:
        """Initialize with files to create on each run.

        Args:
            outputs: Filename to content, written into cwd by run().
        """
        self._outputs = dict(outputs or {})
        self._exception: BaseException | None = None
        self._calls: list[tuple[list[str], Path]] = []

    @property
    def calls(self) -> list[tuple[list[str], Path]]:
        """Return (args, cwd) tuples from run() calls."""
        return list(self._calls)

    def set_output(self, filename: str, content: bytes) -> None:
        """Configure a file to create on run()."""
        self._outputs[filename] = content

    def set_exception(self, exception: BaseException | None) -> None:
        """Configure an exception to raise from run(), or None to clear."""
        self._exception = exception

    def run(self, args: Sequence[str], cwd: Path) -> None:
        self._calls.append((list(args), Path(cwd)))
        if self._exception is not None:
            raise self._exception
        for filename, content in self._outputs.items():
            (Path(cwd) / filename).write_bytes(content)
