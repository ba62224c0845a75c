"""
Scratch workspaces for the integration harness.

A Workspace owns a private base directory and, inside it, one active
generation directory that serves as the workspace root. Tests write
scratch files into the root, run the build tool there, and reset to a
fresh empty root with new_workspace().
"""

import os
import shutil
import stat
import tempfile
import logging
from pathlib import Path
from typing import List, Optional, Union

from ..config import WorkspaceConfig
from ..exceptions import IOFailure

logger = logging.getLogger(__name__)

EXECUTABLE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


class Workspace:
    """Isolated scratch directory tree for one test case.

    The first generation is created on construction. Every call to
    new_workspace() discards the current tree and switches to a fresh,
    empty generation directory, so a handle left open on an old file
    can never block the new workspace.

    Usage:
        # As context manager (recommended)
        with Workspace(config) as ws:
            ws.scratch_file("BUILD", "sh_test(", "    name = 'smoke',", ")")
            ws.scratch_executable_file("smoke.sh", "#!/bin/sh", "exit 0")

        # Manual management
        ws = Workspace(config)
        try:
            ...
        finally:
            ws.close()

    Attributes:
        config: Workspace configuration
        root: Root of the current generation
        generation: Number of the current generation, starting at 0
    """

    def __init__(self, config: Optional[WorkspaceConfig] = None):
        self.config = config or WorkspaceConfig()
        self._generation = 0
        self._closed = False
        self._base = self._create_base()
        try:
            self._root = self._create_generation()
        except IOFailure:
            self._discard(self._base)
            raise
        logger.info(f"Created workspace in {self._root}")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def root(self) -> Path:
        """Get the current workspace root.

        Raises:
            IOFailure: If the workspace has been closed
        """
        if self._closed:
            raise IOFailure("Workspace is closed")
        return self._root

    @property
    def base_dir(self) -> Path:
        return self._base

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def closed(self) -> bool:
        return self._closed

    def _create_base(self) -> Path:
        base_parent = self.config.base_dir
        try:
            if base_parent is not None:
                base_parent.mkdir(parents=True, exist_ok=True)
            created = tempfile.mkdtemp(
                prefix=self.config.prefix,
                dir=str(base_parent) if base_parent is not None else None,
            )
        except OSError as e:
            raise IOFailure(f"Failed to create workspace base directory: {e}") from e
        # Resolve once so listings and escape checks agree on symlinked temp dirs
        return Path(created).resolve()

    def _create_generation(self) -> Path:
        root = self._base / f"generation_{self._generation:03d}"
        try:
            root.mkdir()
        except OSError as e:
            raise IOFailure(f"Failed to create workspace {root}: {e}") from e
        return root

    def new_workspace(self) -> Path:
        """Discard the current tree and start a fresh, empty one.

        Returns:
            Root of the new generation

        Raises:
            IOFailure: If the workspace is closed or the new root cannot be created
        """
        old_root = self.root
        self._discard(old_root)
        self._generation += 1
        self._root = self._create_generation()
        logger.info(f"Reset workspace: generation {self._generation} at {self._root}")
        return self._root

    def _discard(self, path: Path) -> None:
        if not path.exists():
            return
        try:
            shutil.rmtree(path)
            logger.debug(f"Removed workspace tree: {path}")
        except OSError as e:
            logger.error(f"Failed to remove workspace tree {path}: {e}")

    def close(self) -> None:
        """Remove the whole workspace, all generations included."""
        if self._closed:
            return
        self._closed = True
        self._discard(self._base)

    def keep(self) -> None:
        """Close the workspace but leave its files on disk."""
        if not self._closed:
            self._closed = True
            logger.info(f"Keeping workspace for debugging: {self._root}")

    def __enter__(self) -> "Workspace":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.config.cleanup_on_exit:
            self.close()
        else:
            self.keep()

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def path(self, relative: Union[str, Path]) -> Path:
        """Resolve a workspace-relative path.

        Raises:
            IOFailure: If the path is absolute or leaves the workspace root
        """
        root = self.root
        if Path(relative).is_absolute():
            raise IOFailure(f"Scratch paths must be relative to the workspace: {relative}")

        candidate = Path(os.path.normpath(root / relative))
        if candidate == root or root not in candidate.parents:
            raise IOFailure(f"Path escapes the workspace root: {relative}")
        return candidate

    def find(self, relative: Union[str, Path]) -> Optional[Path]:
        """Absolute path of an existing file written as `relative`, or None."""
        target = self.path(relative)
        return target if target.is_file() else None

    def workspace_contents(self) -> List[str]:
        """All files under the workspace root, as absolute path strings.

        Every entry ends with the relative path it was written with, so
        `any(p.endswith("pkg/BUILD") for p in ws.workspace_contents())`
        finds a scratch file. Suffix lookup needs the normalized path:
        a file written as "./WORKSPACE" is listed as ".../WORKSPACE",
        so look it up by "WORKSPACE" or use find().
        """
        root = self.root
        found = []
        for dirpath, _dirnames, filenames in os.walk(root):
            for name in filenames:
                found.append(os.path.join(dirpath, name))
        return sorted(found)

    def relative_contents(self) -> List[str]:
        """Same listing as workspace_contents(), relative to the root."""
        root = self.root
        return [
            Path(p).relative_to(root).as_posix()
            for p in self.workspace_contents()
        ]

    # ------------------------------------------------------------------
    # Scratch files
    # ------------------------------------------------------------------

    def scratch_file(self, relative: Union[str, Path], *lines: str) -> Path:
        """Write lines joined with the platform newline to a workspace file.

        No trailing newline is added. Zero lines make an empty file.
        Parent directories are created; an existing file is overwritten.

        Returns:
            Absolute path of the written file

        Raises:
            IOFailure: If the path is invalid or the write fails
        """
        data = os.linesep.join(lines).encode("utf-8")
        return self._write(relative, data, executable=False)

    def scratch_executable_file(self, relative: Union[str, Path], *lines: str) -> Path:
        """Like scratch_file(), then set the execute bits."""
        data = os.linesep.join(lines).encode("utf-8")
        return self._write(relative, data, executable=True)

    def scratch_bytes(
        self,
        relative: Union[str, Path],
        data: bytes,
        executable: bool = False,
    ) -> Path:
        """Write raw bytes to a workspace file."""
        return self._write(relative, bytes(data), executable=executable)

    def scratch_dir(self, relative: Union[str, Path]) -> Path:
        """Create a directory (and its parents) in the workspace."""
        target = self.path(relative)
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IOFailure(f"Failed to create directory {relative}: {e}") from e
        return target

    def read_text(self, relative: Union[str, Path]) -> str:
        """Read a workspace file as UTF-8 text, byte-for-byte."""
        target = self.path(relative)
        try:
            return target.read_bytes().decode("utf-8")
        except OSError as e:
            raise IOFailure(f"Failed to read {relative}: {e}") from e

    def _write(self, relative: Union[str, Path], data: bytes, executable: bool) -> Path:
        target = self.path(relative)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
            if executable:
                mode = target.stat().st_mode
                target.chmod(mode | EXECUTABLE_BITS)
        except OSError as e:
            raise IOFailure(f"Failed to write scratch file {relative}: {e}") from e

        logger.debug(f"Created file: {target} ({len(data)} bytes, executable={executable})")
        return target

    def __repr__(self) -> str:
        state = "closed" if self._closed else f"generation={self._generation}"
        return f"Workspace({self._root}, {state})"
