"""
Command data models for the integration harness.

A CommandInvocation describes what to run; a CommandResult captures
what came back. Both are frozen: a result is owned by the caller that
ran the command and never changes afterwards.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple


@dataclass(frozen=True)
class CommandInvocation:
    """An external command to run.

    Attributes:
        argv: Program followed by its arguments
        workdir: Working directory (None = the workspace root at run time)
        env: Full environment; None inherits the parent's environment
        extra_env: Variables merged over the inherited or given environment
    """

    argv: Tuple[str, ...]
    workdir: Optional[Path] = None
    env: Optional[Mapping[str, str]] = None
    extra_env: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "argv", tuple(str(a) for a in self.argv))
        if isinstance(self.workdir, str):
            object.__setattr__(self, "workdir", Path(self.workdir))

    def with_workdir(self, workdir: Path) -> "CommandInvocation":
        """Copy of this invocation bound to a working directory."""
        return CommandInvocation(
            argv=self.argv,
            workdir=workdir,
            env=self.env,
            extra_env=self.extra_env,
        )

    def environment(self, parent: Mapping[str, str]) -> Dict[str, str]:
        """Environment the child process should see."""
        base = dict(parent if self.env is None else self.env)
        base.update(self.extra_env)
        return base

    def __str__(self) -> str:
        return " ".join(self.argv)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of running a command.

    Exit code zero conventionally means success. Each stream keeps its
    own emission order; there is no ordering between the two streams.
    """

    exit_code: int
    stdout_lines: Tuple[str, ...] = ()
    stderr_lines: Tuple[str, ...] = ()
    invocation: Optional[CommandInvocation] = None
    duration_seconds: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "stdout_lines", tuple(self.stdout_lines))
        object.__setattr__(self, "stderr_lines", tuple(self.stderr_lines))

    @property
    def success(self) -> bool:
        """Check if the command exited with zero."""
        return self.exit_code == 0

    @property
    def stdout(self) -> str:
        return "\n".join(self.stdout_lines)

    @property
    def stderr(self) -> str:
        return "\n".join(self.stderr_lines)

    def __str__(self) -> str:
        status = "OK" if self.success else f"FAIL (exit={self.exit_code})"
        cmd = str(self.invocation) if self.invocation else "<command>"
        return (
            f"[{status}] {cmd} ({len(self.stdout_lines)} stdout lines, "
            f"{len(self.stderr_lines)} stderr lines, {self.duration_seconds:.1f}s)"
        )
