"""
Failure diagnostics for the integration harness.

Build tools often print a short error and point at a longer log, e.g.

    //:smoke_test    FAILED in 0.4s (see /tmp/out/testlogs/smoke_test/test.log)

find_log_references() is the only place that knows this convention.
build_failure_report() inlines every log it finds next to the raw
stderr and the workspace listing.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from ..models.command import CommandResult
from ..models.report import DiagnosticReport, LogReference, LogSection
from ..workspace.scratch import Workspace
from ..exceptions import IOFailure

logger = logging.getLogger(__name__)

LOG_MARKER = "(see "
LOG_MARKER_END = ")"


def find_log_references(stderr_lines: Iterable[str]) -> List[LogReference]:
    """Extract `(see <path>)` log references from stderr, in scan order.

    A line may hold several references. A marker without a closing
    parenthesis takes the rest of the line.
    """
    references = []
    for index, line in enumerate(stderr_lines):
        start = line.find(LOG_MARKER)
        while start != -1:
            begin = start + len(LOG_MARKER)
            end = line.find(LOG_MARKER_END, begin)
            path = (line[begin:] if end == -1 else line[begin:end]).strip()
            if path:
                references.append(LogReference(path=path, line_index=index))
            if end == -1:
                break
            start = line.find(LOG_MARKER, end + 1)
    return references


def _read_log(reference: LogReference, base_dir: Optional[Path]) -> LogSection:
    path = Path(reference.path)
    if not path.is_absolute() and base_dir is not None:
        path = base_dir / path

    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except (OSError, ValueError) as e:
        # A missing log is itself diagnostic; never hide the original failure
        logger.warning(f"Referenced log unavailable: {path}: {e}")
        return LogSection(reference=reference, resolved_path=path, error=str(e))

    return LogSection(reference=reference, resolved_path=path, lines=tuple(text.splitlines()))


def build_failure_report(
    result: CommandResult,
    workspace: Optional[Workspace] = None,
) -> DiagnosticReport:
    """Build a diagnostic report for a command result.

    Reads but never modifies the result or the workspace, and never
    raises for an unreadable log or a closed workspace.

    Args:
        result: The command result to explain
        workspace: Workspace the command ran in, if any

    Returns:
        DiagnosticReport ready to render
    """
    listing: List[str] = []
    workspace_root: Optional[Path] = None
    if workspace is not None:
        try:
            workspace_root = workspace.root
            listing = workspace.workspace_contents()
        except IOFailure as e:
            listing = [f"<workspace unavailable: {e}>"]

    base_dir = None
    if result.invocation is not None and result.invocation.workdir is not None:
        base_dir = result.invocation.workdir
    elif workspace_root is not None:
        base_dir = workspace_root

    sections = tuple(
        _read_log(reference, base_dir)
        for reference in find_log_references(result.stderr_lines)
    )

    return DiagnosticReport(
        exit_code=result.exit_code,
        stderr_lines=tuple(result.stderr_lines),
        workspace_listing=tuple(listing),
        logs=sections,
        command=str(result.invocation) if result.invocation is not None else None,
    )
