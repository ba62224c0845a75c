"""
Data models for the integration harness.

Public exports:
- Command types (CommandInvocation, CommandResult)
- Report types (LogReference, LogSection, DiagnosticReport)
"""

from .command import CommandInvocation, CommandResult

from .report import LogReference, LogSection, DiagnosticReport

__all__ = [
    # Command models
    "CommandInvocation",
    "CommandResult",
    # Report models
    "LogReference",
    "LogSection",
    "DiagnosticReport",
]
