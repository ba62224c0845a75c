"""
Build tool command factory.

Builds invocations of the configured build-tool binary. The tool is
opaque here: arguments go through untouched.
"""

import os
import shutil
from pathlib import Path
from typing import Mapping, Optional

from ..config import ToolConfig
from ..models.command import CommandInvocation


class BuildTool:
    """The build tool under test.

    Usage:
        tool = BuildTool(config.tool)
        invocation = tool.command("info", "release")
        result = runner.run(invocation, default_workdir=workspace.root)
        assert f"release {tool.version}" in result.stdout_lines
    """

    def __init__(self, config: Optional[ToolConfig] = None):
        self.config = config or ToolConfig()

    @property
    def path(self) -> str:
        return self.config.path

    @property
    def version(self) -> Optional[str]:
        """Version the tool is expected to report, if configured."""
        return self.config.version

    def command(
        self,
        *args: str,
        workdir: Optional[Path] = None,
        extra_env: Optional[Mapping[str, str]] = None,
    ) -> CommandInvocation:
        """Build an invocation of the tool.

        Args:
            args: Tool arguments, e.g. "test", "//:all"
            workdir: Working directory (None = workspace root at run time)
            extra_env: Variables set on top of the configured ones

        Returns:
            CommandInvocation ready for ProcessRunner.run()
        """
        env = dict(self.config.env)
        env.update(extra_env or {})
        return CommandInvocation(
            argv=(self.config.path, *self.config.startup_args, *args),
            workdir=workdir,
            # An empty base environment when the tool must not inherit ours
            env=None if self.config.inherit_env else {},
            extra_env=env,
        )

    def resolved_path(self) -> Optional[str]:
        """Absolute path of the tool binary, or None if it cannot be found."""
        if os.sep in self.config.path:
            candidate = Path(self.config.path)
            return str(candidate) if os.access(candidate, os.X_OK) else None
        return shutil.which(self.config.path)

    def is_available(self) -> bool:
        """Check if the tool binary can be found and executed."""
        return self.resolved_path() is not None

    def __repr__(self) -> str:
        return f"BuildTool({self.config.path!r}, version={self.config.version!r})"
