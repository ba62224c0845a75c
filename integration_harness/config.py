"""
Configuration management for the integration harness.

Supports:
- Programmatic configuration via dataclasses
- YAML file loading
- Environment variable overrides
- Sensible defaults for all settings
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Any, Dict, List
import os

import yaml

from .exceptions import ConfigurationError


@dataclass
class ToolConfig:
    """Configuration for the build tool being driven."""

    path: str = "bazel"  # name on PATH or absolute path
    version: Optional[str] = None  # expected `info release` version
    startup_args: List[str] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)
    inherit_env: bool = True

    def __post_init__(self):
        if not self.path:
            raise ConfigurationError("tool path must not be empty")
        if not all(isinstance(arg, str) for arg in self.startup_args):
            raise ConfigurationError("startup_args must be strings")
        # YAML reads `version: 7.1` as a float
        if self.version is not None:
            self.version = str(self.version)
        self.env = {str(k): str(v) for k, v in self.env.items()}


@dataclass
class WorkspaceConfig:
    """Configuration for scratch workspaces."""

    base_dir: Optional[Path] = None  # None = TEST_TMPDIR or system temp dir
    prefix: str = "workspace_"
    cleanup_on_exit: bool = True

    def __post_init__(self):
        # Convert string to Path if needed
        if isinstance(self.base_dir, str):
            self.base_dir = Path(self.base_dir)

        if not self.prefix or os.sep in self.prefix:
            raise ConfigurationError(f"Invalid workspace prefix: {self.prefix!r}")


@dataclass
class RunfilesConfig:
    """Where prepared runfiles live."""

    runfiles_dir: Optional[Path] = None
    manifest_path: Optional[Path] = None

    def __post_init__(self):
        if isinstance(self.runfiles_dir, str):
            self.runfiles_dir = Path(self.runfiles_dir)
        if isinstance(self.manifest_path, str):
            self.manifest_path = Path(self.manifest_path)


@dataclass
class HarnessConfig:
    """Master configuration for the integration harness.

    Example usage:
        # Defaults
        config = HarnessConfig.default()

        # From file
        config = HarnessConfig.from_yaml(Path("harness.yaml"))

        # Programmatic
        config = HarnessConfig(
            tool=ToolConfig(path="/usr/local/bin/bazel", version="7.1.0"),
            workspace=WorkspaceConfig(cleanup_on_exit=False),
        )
    """

    tool: ToolConfig = field(default_factory=ToolConfig)
    workspace: WorkspaceConfig = field(default_factory=WorkspaceConfig)
    runfiles: RunfilesConfig = field(default_factory=RunfilesConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> "HarnessConfig":
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            HarnessConfig instance

        Raises:
            ConfigurationError: If file not found or invalid
        """
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config root must be a mapping: {path}")

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "HarnessConfig":
        """Create HarnessConfig from dictionary."""
        try:
            return cls(
                tool=ToolConfig(**(data.get("tool") or {})),
                workspace=WorkspaceConfig(**(data.get("workspace") or {})),
                runfiles=RunfilesConfig(**(data.get("runfiles") or {})),
            )
        except TypeError as e:
            raise ConfigurationError(f"Unknown config key: {e}") from e

    @classmethod
    def default(cls) -> "HarnessConfig":
        """Create configuration with all defaults."""
        return cls()

    @classmethod
    def from_env(cls) -> "HarnessConfig":
        """Create configuration with environment variable overrides.

        Supported environment variables:
        - INTEGRATION_HARNESS_TOOL: Build tool binary
        - INTEGRATION_HARNESS_TOOL_VERSION: Expected tool version (or BAZEL_VERSION)
        - INTEGRATION_HARNESS_WORKSPACE_DIR: Base dir for workspaces (or TEST_TMPDIR)
        - RUNFILES_DIR / TEST_SRCDIR: Runfiles directory
        - RUNFILES_MANIFEST_FILE: Runfiles manifest
        """
        config = cls.default()

        # Tool overrides
        if tool := os.environ.get("INTEGRATION_HARNESS_TOOL"):
            config.tool.path = tool
        if version := (
            os.environ.get("INTEGRATION_HARNESS_TOOL_VERSION")
            or os.environ.get("BAZEL_VERSION")
        ):
            config.tool.version = version

        # Workspace overrides
        if base_dir := (
            os.environ.get("INTEGRATION_HARNESS_WORKSPACE_DIR")
            or os.environ.get("TEST_TMPDIR")
        ):
            config.workspace.base_dir = Path(base_dir)

        # Runfiles overrides
        if runfiles_dir := (os.environ.get("RUNFILES_DIR") or os.environ.get("TEST_SRCDIR")):
            config.runfiles.runfiles_dir = Path(runfiles_dir)
        if manifest := os.environ.get("RUNFILES_MANIFEST_FILE"):
            config.runfiles.manifest_path = Path(manifest)

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary (for serialization)."""
        return {
            "tool": {
                "path": self.tool.path,
                "version": self.tool.version,
                "startup_args": list(self.tool.startup_args),
                "env": dict(self.tool.env),
                "inherit_env": self.tool.inherit_env,
            },
            "workspace": {
                "base_dir": str(self.workspace.base_dir)
                if self.workspace.base_dir
                else None,
                "prefix": self.workspace.prefix,
                "cleanup_on_exit": self.workspace.cleanup_on_exit,
            },
            "runfiles": {
                "runfiles_dir": str(self.runfiles.runfiles_dir)
                if self.runfiles.runfiles_dir
                else None,
                "manifest_path": str(self.runfiles.manifest_path)
                if self.runfiles.manifest_path
                else None,
            },
        }

    def to_yaml(self) -> str:
        """Serialize config to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False)
