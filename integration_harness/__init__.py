"""
Integration Harness - drive a build tool inside disposable workspaces.

This module provides:
- Scratch workspaces (isolated, resettable directory trees)
- Runfile resolution (logical resource paths to files on disk)
- Process execution (exit code + stdout/stderr lines, fully drained)
- Failure diagnostics (stderr, workspace listing, inlined `(see ...)` logs)

Quick start:
    from integration_harness import HarnessConfig, HarnessContext

    with HarnessContext(HarnessConfig.from_env()) as harness:
        result = harness.run("info", "release")
        harness.expect_success(result)
        assert f"release {harness.tool.version}" in result.stdout_lines
"""

__version__ = "0.1.0"

# Core exports
from .config import HarnessConfig, ToolConfig, WorkspaceConfig, RunfilesConfig
from .exceptions import (
    HarnessError,
    IOFailure,
    ResourceNotFound,
    LaunchFailure,
    ConfigurationError,
    UnexpectedExitCode,
)

# Model exports
from .models import (
    CommandInvocation,
    CommandResult,
    LogReference,
    LogSection,
    DiagnosticReport,
)

# Component exports
from .workspace import Workspace, RunfilesResolver
from .execution import ProcessRunner, BuildTool
from .diagnostics import (
    find_log_references,
    build_failure_report,
    expect_exit_code,
    expect_success,
)
from .context import HarnessContext

__all__ = [
    # Version
    "__version__",
    # Config
    "HarnessConfig",
    "ToolConfig",
    "WorkspaceConfig",
    "RunfilesConfig",
    # Exceptions
    "HarnessError",
    "IOFailure",
    "ResourceNotFound",
    "LaunchFailure",
    "ConfigurationError",
    "UnexpectedExitCode",
    # Models
    "CommandInvocation",
    "CommandResult",
    "LogReference",
    "LogSection",
    "DiagnosticReport",
    # Components
    "Workspace",
    "RunfilesResolver",
    "ProcessRunner",
    "BuildTool",
    "find_log_references",
    "build_failure_report",
    "expect_exit_code",
    "expect_success",
    "HarnessContext",
]
