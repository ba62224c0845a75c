"""Exit-code expectations that fail with a full diagnostic report."""

from typing import Optional

from ..models.command import CommandResult
from ..workspace.scratch import Workspace
from ..exceptions import UnexpectedExitCode
from .extractor import build_failure_report


def expect_exit_code(
    result: CommandResult,
    expected: int,
    workspace: Optional[Workspace] = None,
) -> CommandResult:
    """Return the result if it exited with `expected`.

    Raises:
        UnexpectedExitCode: With the rendered report as its message
    """
    if result.exit_code != expected:
        report = build_failure_report(result, workspace)
        raise UnexpectedExitCode(expected, result.exit_code, report)
    return result


def expect_success(
    result: CommandResult,
    workspace: Optional[Workspace] = None,
) -> CommandResult:
    """Return the result if it exited with zero."""
    return expect_exit_code(result, 0, workspace)
