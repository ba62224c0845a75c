"""
Process execution for the integration harness.

Runs an external command to completion and captures stdout and
stderr as ordered line sequences.
"""

import os
import subprocess
import threading
import time
import logging
from pathlib import Path
from typing import IO, List, Mapping, Optional

from ..models.command import CommandInvocation, CommandResult
from ..exceptions import HarnessError, LaunchFailure

logger = logging.getLogger(__name__)


class _StreamReader(threading.Thread):
    """Drains one pipe into a list of lines.

    Both pipes must be read while the child runs: a child blocked on a
    full stderr pipe never exits while we sit reading stdout.
    """

    def __init__(self, stream: IO[str], name: str):
        super().__init__(name=name, daemon=True)
        self.stream = stream
        self.lines: List[str] = []
        self.error: Optional[BaseException] = None

    def run(self) -> None:
        try:
            for line in self.stream:
                # Universal newlines: every terminator arrives as "\n"
                self.lines.append(line[:-1] if line.endswith("\n") else line)
        except Exception as e:
            self.error = e
        finally:
            self.stream.close()


class ProcessRunner:
    """Runs commands as child processes and captures their output.

    The calling thread blocks until the child exits. Output is decoded
    as UTF-8; undecodable bytes become replacement characters.

    Usage:
        runner = ProcessRunner()
        result = runner.run(CommandInvocation(argv=("bazel", "info", "release")),
                            default_workdir=workspace.root)
        if not result.success:
            print("\\n".join(result.stderr_lines))
    """

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        encoding: str = "utf-8",
    ):
        """Initialize runner.

        Args:
            environ: Parent environment for invocations that inherit it
                (defaults to os.environ at run time)
            encoding: Encoding of the child's output
        """
        self._environ = environ
        self.encoding = encoding

    def run(
        self,
        invocation: CommandInvocation,
        default_workdir: Optional[Path] = None,
    ) -> CommandResult:
        """Run a command and wait for it to exit.

        Args:
            invocation: What to run
            default_workdir: Working directory when the invocation has none;
                a relative invocation workdir is taken relative to it

        Returns:
            CommandResult with exit code and both output streams

        Raises:
            LaunchFailure: If the process cannot be started
            HarnessError: If reading the process output fails
        """
        if not invocation.argv:
            raise LaunchFailure("Cannot run an empty command")

        workdir = invocation.workdir
        if workdir is None:
            workdir = default_workdir
        elif not workdir.is_absolute() and default_workdir is not None:
            workdir = Path(default_workdir) / workdir
        parent_env = os.environ if self._environ is None else self._environ
        env = invocation.environment(parent_env)

        logger.debug(f"Running in {workdir}: {invocation}")
        start_time = time.time()

        try:
            proc = subprocess.Popen(
                list(invocation.argv),
                cwd=str(workdir) if workdir is not None else None,
                env=env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding=self.encoding,
                errors="replace",
            )
        except FileNotFoundError as e:
            raise LaunchFailure(
                f"Cannot launch {invocation.argv[0]}: executable or working "
                f"directory not found ({e})"
            ) from e
        except PermissionError as e:
            raise LaunchFailure(f"Cannot launch {invocation.argv[0]}: permission denied ({e})") from e
        except OSError as e:
            raise LaunchFailure(f"Cannot launch {invocation.argv[0]}: {e}") from e

        stdout_reader = _StreamReader(proc.stdout, f"stdout-{proc.pid}")
        stderr_reader = _StreamReader(proc.stderr, f"stderr-{proc.pid}")
        stdout_reader.start()
        stderr_reader.start()

        try:
            exit_code = proc.wait()
        except BaseException:
            proc.kill()
            proc.wait()
            raise
        finally:
            stdout_reader.join()
            stderr_reader.join()

        duration = time.time() - start_time

        for reader in (stdout_reader, stderr_reader):
            if reader.error is not None:
                raise HarnessError(
                    f"Failed reading {reader.name} of {invocation.argv[0]}: {reader.error}"
                ) from reader.error

        logger.debug(
            f"Command complete: exit={exit_code}, "
            f"stdout={len(stdout_reader.lines)} lines, "
            f"stderr={len(stderr_reader.lines)} lines, duration={duration:.1f}s"
        )

        return CommandResult(
            exit_code=exit_code,
            stdout_lines=tuple(stdout_reader.lines),
            stderr_lines=tuple(stderr_reader.lines),
            invocation=invocation.with_workdir(Path(workdir)) if workdir is not None else invocation,
            duration_seconds=duration,
        )
