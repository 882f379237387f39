"""
Bounded external tool runner.

Runs diskpart (or any tool accepting a script file) with its output
redirected to a temporary file, polls it against a deadline and kills it
when the deadline passes. Script and output files live in a private
temporary directory that is removed on every exit path.
"""

from __future__ import annotations

import subprocess
import sys
import tempfile
import time
from collections.abc import Callable
from enum import Enum, auto
from pathlib import Path
from typing import IO

import psutil

from diskcensus.core.config import DiskpartConfig
from diskcensus.core.errors import CaptureError, ToolLaunchError, ToolTimeoutError
from diskcensus.core.logging import OperationLogger, get_logger

logger = get_logger(__name__)

SCRIPT_PLACEHOLDER = "{script}"
OUTPUT_PLACEHOLDER = "{output}"
CLEANUP_ATTEMPTS = 3
CLEANUP_RETRY_SECONDS = 0.5


class RunState(Enum):
    """Lifecycle of one tool invocation."""

    STARTING = auto()
    RUNNING = auto()
    COMPLETED = auto()
    TIMED_OUT = auto()
    FAILED = auto()


class ToolProcess:
    """
    One tool invocation driven by poll ticks.

    ``tick()`` is the only transition function: from STARTING it launches
    the process, from RUNNING it checks liveness and the deadline. Entering
    TIMED_OUT kills the process tree.
    """

    def __init__(
        self,
        command: list[str],
        sink: IO[bytes],
        timeout_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.command = command
        self.sink = sink
        self.timeout_seconds = timeout_seconds
        self.state = RunState.STARTING
        self.error: OSError | None = None
        self.deadline: float | None = None
        self._clock = clock
        self._popen: subprocess.Popen[bytes] | None = None

    @property
    def pid(self) -> int | None:
        return self._popen.pid if self._popen else None

    def tick(self) -> RunState:
        if self.state is RunState.STARTING:
            self._launch()
        elif self.state is RunState.RUNNING:
            self._poll()
        return self.state

    def exit_code(self) -> int:
        """Exit code of a completed process; 0 when it cannot be read."""
        if self._popen is None:
            return 0
        try:
            code = self._popen.poll()
        except OSError:
            return 0
        return code if code is not None else 0

    def _enter(self, state: RunState) -> None:
        logger.debug("Tool state change", pid=self.pid, old=self.state.name, new=state.name)
        self.state = state
        if state is RunState.TIMED_OUT:
            self._terminate()

    def _launch(self) -> None:
        kwargs: dict = {}
        if sys.platform == "win32":
            kwargs["creationflags"] = subprocess.CREATE_NO_WINDOW

        try:
            self._popen = subprocess.Popen(
                self.command,
                stdin=subprocess.DEVNULL,
                stdout=self.sink,
                stderr=subprocess.STDOUT,
                **kwargs,
            )
        except OSError as e:
            self.error = e
            self._enter(RunState.FAILED)
            return

        self.deadline = self._clock() + self.timeout_seconds
        self._enter(RunState.RUNNING)

    def _poll(self) -> None:
        assert self._popen is not None and self.deadline is not None
        if self._popen.poll() is not None:
            self._enter(RunState.COMPLETED)
        elif self._clock() >= self.deadline:
            self._enter(RunState.TIMED_OUT)

    def _terminate(self) -> None:
        """Kill the process and its children. Failures are only logged."""
        if self._popen is None:
            return

        try:
            parent = psutil.Process(self._popen.pid)
            victims = parent.children(recursive=True) + [parent]
            for proc in victims:
                try:
                    proc.kill()
                except psutil.NoSuchProcess:
                    pass
            psutil.wait_procs(victims, timeout=5)
        except psutil.Error as e:
            logger.debug("Failed to terminate tool", pid=self._popen.pid, error=str(e))

        try:
            self._popen.wait(timeout=5)
        except subprocess.TimeoutExpired:
            logger.debug("Tool did not exit after kill", pid=self._popen.pid)


class BoundedProcessRunner:
    """Runs one tool script per call and returns the captured lines."""

    def __init__(
        self,
        config: DiskpartConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config or DiskpartConfig()
        self._sleep = sleep

    def build_command(self, script_path: Path, output_path: Path) -> list[str]:
        return [
            part.replace(SCRIPT_PLACEHOLDER, str(script_path)).replace(
                OUTPUT_PLACEHOLDER, str(output_path)
            )
            for part in self.config.command
        ]

    def run(self, commands: list[str], timeout_seconds: float | None = None) -> list[str]:
        """
        Run the tool against a script made of ``commands``.

        Raises ToolLaunchError, ToolTimeoutError or CaptureError. A non-zero
        exit code is logged but is not a failure.
        """
        timeout = timeout_seconds or self.config.timeout_seconds
        temp_root = str(self.config.temp_directory) if self.config.temp_directory else None

        workdir = tempfile.TemporaryDirectory(prefix="diskcensus-", dir=temp_root)
        try:
            script_path = Path(workdir.name) / "script.txt"
            output_path = Path(workdir.name) / "output.txt"
            script_path.write_text(
                "\n".join(commands) + "\n", encoding=self.config.script_encoding
            )
            command = self.build_command(script_path, output_path)

            with OperationLogger("tool run", logger, command=command[0], directives=len(commands)):
                self._wait(command, output_path, timeout)
                return self._read_sink(output_path)
        finally:
            self._remove_workdir(workdir)

    def _remove_workdir(self, workdir: tempfile.TemporaryDirectory) -> bool:
        """
        Remove the script and sink directory, retrying while files are locked.

        A killed tool can keep its handles open for a moment on Windows.
        Returns False, after logging a warning, when the directory survives.
        """
        error: OSError | None = None
        for attempt in range(1, CLEANUP_ATTEMPTS + 1):
            try:
                workdir.cleanup()
                return True
            except OSError as e:
                error = e
                logger.debug("Temporary directory removal failed", path=workdir.name, attempt=attempt)
                if attempt < CLEANUP_ATTEMPTS:
                    self._sleep(CLEANUP_RETRY_SECONDS)

        logger.warning("Failed to remove temporary files", path=workdir.name, error=str(error))
        return False

    def _wait(self, command: list[str], output_path: Path, timeout: float) -> ToolProcess:
        with open(output_path, "wb") as sink:
            process = ToolProcess(command, sink, timeout)
            while process.tick() is RunState.RUNNING:
                self._sleep(self.config.poll_interval_seconds)

        if process.state is RunState.FAILED:
            raise ToolLaunchError(command, str(process.error)) from process.error
        if process.state is RunState.TIMED_OUT:
            raise ToolTimeoutError(command, timeout)

        # Give the process handle a moment to settle before reading the code
        if self.config.exit_grace_seconds:
            self._sleep(self.config.exit_grace_seconds)
        returncode = process.exit_code()
        if returncode != 0:
            logger.warning("Tool exited with non-zero status", command=command[0], returncode=returncode)
        return process

    def _read_sink(self, output_path: Path) -> list[str]:
        if not output_path.exists():
            raise CaptureError(output_path)
        text = output_path.read_text(encoding=self.config.output_encoding, errors="replace")
        return text.splitlines()
