"""
Diagnostic report models.

A DiagnosticReport explains a failed command: the raw stderr, what
was in the workspace, and the contents of every secondary log that
stderr pointed at. Reports are built on demand and never persisted.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class LogReference:
    """A log path found in a stderr line via the `(see <path>)` marker."""

    path: str
    line_index: int  # index of the stderr line it came from


@dataclass(frozen=True)
class LogSection:
    """Contents of one referenced log, or why it could not be read."""

    reference: LogReference
    resolved_path: Path
    lines: Tuple[str, ...] = ()
    error: Optional[str] = None

    @property
    def available(self) -> bool:
        return self.error is None

    def render_lines(self) -> List[str]:
        out = ["Log path:", str(self.resolved_path)]
        if self.available:
            out.append("Log contents:")
            out.extend(self.lines)
        else:
            out.append(f"Log unavailable: {self.error}")
        return out


@dataclass(frozen=True)
class DiagnosticReport:
    """Human-readable explanation of a command failure.

    Attributes:
        exit_code: Exit code of the failed command
        command: Command line, if the result carried its invocation
        stderr_lines: Raw stderr, in emission order
        workspace_listing: Every file in the workspace, recursively
        logs: One section per log reference, in stderr order
    """

    exit_code: int
    stderr_lines: Tuple[str, ...]
    workspace_listing: Tuple[str, ...]
    logs: Tuple[LogSection, ...] = field(default_factory=tuple)
    command: Optional[str] = None

    @property
    def log_references(self) -> List[LogReference]:
        return [section.reference for section in self.logs]

    @property
    def unavailable_logs(self) -> List[LogSection]:
        return [section for section in self.logs if not section.available]

    def render(self) -> str:
        """Render the report as text."""
        lines = []
        if self.command:
            lines.append(f"Command: {self.command}")
        lines.append(f"Exit code: {self.exit_code}")

        lines.append("std-error:")
        lines.extend(self.stderr_lines)

        lines.append("Workspace contents:")
        lines.extend(self.workspace_listing)

        if self.logs:
            lines.append("Contents of internal test logs:")
            lines.append("*******************************")
            for section in self.logs:
                lines.extend(section.render_lines())

        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()
