"""
Per-test harness context.

A HarnessContext is built before a test case and closed after it. It
owns exactly one Workspace and wires it to a runfiles resolver, a
process runner and the build tool, so test code reads as a sequence
of scratch, run and expect steps.
"""

import os
from pathlib import Path
from typing import List, Optional, Union

from .config import HarnessConfig
from .models.command import CommandInvocation, CommandResult
from .models.report import DiagnosticReport
from .workspace.scratch import Workspace
from .workspace.runfiles import RunfilesResolver
from .execution.process_runner import ProcessRunner
from .execution.build_tool import BuildTool
from .diagnostics.extractor import build_failure_report
from .diagnostics.expectations import expect_exit_code


class HarnessContext:
    """Everything one test case needs to drive the build tool.

    Usage:
        with HarnessContext(HarnessConfig.from_env()) as harness:
            harness.scratch_file("MODULE.bazel")
            harness.scratch_file("BUILD", "sh_test(name = 'smoke', srcs = ['smoke.sh'])")
            harness.scratch_executable_file("smoke.sh", "#!/bin/sh", "exit 0")
            harness.expect_success(harness.run("test", "//:smoke"))

    Attributes:
        config: Harness configuration
        workspace: The test case's workspace
        runfiles: Runfile resolver
        runner: Process runner
        tool: Build tool command factory
    """

    def __init__(
        self,
        config: Optional[HarnessConfig] = None,
        runner: Optional[ProcessRunner] = None,
        runfiles: Optional[RunfilesResolver] = None,
    ):
        self.config = config or HarnessConfig.from_env()
        self.workspace = Workspace(self.config.workspace)
        self.runfiles = runfiles or RunfilesResolver(self.config.runfiles)
        self.runner = runner or ProcessRunner()
        self.tool = BuildTool(self.config.tool)

    # Workspace ------------------------------------------------------------

    @property
    def root(self) -> Path:
        return self.workspace.root

    def scratch_file(self, path: Union[str, Path], *lines: str) -> Path:
        return self.workspace.scratch_file(path, *lines)

    def scratch_executable_file(self, path: Union[str, Path], *lines: str) -> Path:
        return self.workspace.scratch_executable_file(path, *lines)

    def copy_from_runfiles(self, source: str, destination: Union[str, Path]) -> Path:
        """Copy a logical runfile into the workspace."""
        return self.runfiles.copy_into_workspace(self.workspace, source, destination)

    def get_runfile(self, *segments: str) -> Path:
        return self.runfiles.resolve_runfile(*segments)

    def new_workspace(self) -> Path:
        return self.workspace.new_workspace()

    def workspace_contents(self) -> List[str]:
        return self.workspace.workspace_contents()

    # Execution ------------------------------------------------------------

    def command(self, *args: str, workdir: Optional[Path] = None) -> CommandInvocation:
        """Build tool invocation, e.g. command("info", "release")."""
        return self.tool.command(*args, workdir=workdir)

    def run(self, *args: str, workdir: Optional[Path] = None) -> CommandResult:
        """Run the build tool in the workspace."""
        return self.run_command(self.command(*args, workdir=workdir))

    def run_command(self, invocation: CommandInvocation) -> CommandResult:
        """Run any command, defaulting its working directory to the workspace.

        A relative working directory is taken relative to the workspace root.

        Raises:
            IOFailure: If a relative working directory leaves the workspace
            LaunchFailure: If the process cannot be started
        """
        root = self.workspace.root
        workdir = invocation.workdir
        if workdir is not None and not workdir.is_absolute():
            if os.path.normpath(workdir) == os.curdir:
                invocation = invocation.with_workdir(root)
            else:
                invocation = invocation.with_workdir(self.workspace.path(workdir))
        return self.runner.run(invocation, default_workdir=root)

    # Diagnostics ----------------------------------------------------------

    def failure_report(self, result: CommandResult) -> DiagnosticReport:
        return build_failure_report(result, self.workspace)

    def expect_exit_code(self, result: CommandResult, expected: int) -> CommandResult:
        return expect_exit_code(result, expected, self.workspace)

    def expect_success(self, result: CommandResult) -> CommandResult:
        return expect_exit_code(result, 0, self.workspace)

    # Lifecycle ------------------------------------------------------------

    def close(self) -> None:
        """Tear down the workspace."""
        self.workspace.close()

    def __enter__(self) -> "HarnessContext":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Remove the workspace unless configured to keep it."""
        if self.config.workspace.cleanup_on_exit:
            self.close()
        else:
            self.workspace.keep()
