"""
Diagnostics layer for the integration harness.

Turns a failed command into a readable report:
- Log references scraped from stderr
- Report assembly (stderr, workspace listing, inlined logs)
- Exit-code expectations that raise with the report attached
"""

from .extractor import LOG_MARKER, find_log_references, build_failure_report
from .expectations import expect_exit_code, expect_success

__all__ = [
    "LOG_MARKER",
    "find_log_references",
    "build_failure_report",
    "expect_exit_code",
    "expect_success",
]
