"""
Runfile resolution for the integration harness.

Runfiles are resources prepared before the test run, such as build
rules or jars produced by an earlier build step. Tests name them by a
logical path (`<root name>/<path inside that root>`) and never by
their location on disk.
"""

import os
import posixpath
import shutil
import stat
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..config import RunfilesConfig
from ..exceptions import IOFailure, ResourceNotFound
from .scratch import Workspace

logger = logging.getLogger(__name__)


class RunfilesResolver:
    """Maps logical runfile paths to real files.

    Two layouts are supported, checked in order:
    - A manifest file, one `<logical path> <real path>` pair per line
    - A runfiles directory that mirrors the logical layout

    The configured manifest and directory come first, then the
    RUNFILES_MANIFEST_FILE, RUNFILES_DIR and TEST_SRCDIR variables.

    Usage:
        resolver = RunfilesResolver(config.runfiles)
        rules = resolver.resolve_runfile("my_rules", "tools", "BUILD")
        resolver.copy_into_workspace(workspace, "my_rules/tools/BUILD", "tools/BUILD")
    """

    def __init__(self, config: Optional[RunfilesConfig] = None, environ=None):
        self.config = config or RunfilesConfig()
        self._environ = os.environ if environ is None else environ
        self._manifest: Optional[Dict[str, str]] = None

    def _manifest_paths(self) -> List[Path]:
        paths = []
        if self.config.manifest_path:
            paths.append(self.config.manifest_path)
        if manifest := self._environ.get("RUNFILES_MANIFEST_FILE"):
            paths.append(Path(manifest))
        return paths

    def _runfiles_dirs(self) -> List[Path]:
        dirs = []
        if self.config.runfiles_dir:
            dirs.append(self.config.runfiles_dir)
        for var in ("RUNFILES_DIR", "TEST_SRCDIR"):
            if value := self._environ.get(var):
                dirs.append(Path(value))
        return dirs

    def _load_manifest(self) -> Dict[str, str]:
        if self._manifest is not None:
            return self._manifest

        entries: Dict[str, str] = {}
        for manifest in self._manifest_paths():
            try:
                text = manifest.read_text(encoding="utf-8")
            except OSError as e:
                logger.warning(f"Cannot read runfiles manifest {manifest}: {e}")
                continue
            for line in text.splitlines():
                if not line.strip():
                    continue
                logical, _, real = line.partition(" ")
                # First manifest wins for duplicate keys
                entries.setdefault(logical, real)
        self._manifest = entries
        return entries

    @staticmethod
    def logical_path(*segments: str) -> str:
        """Join runfile segments into a normalized logical path.

        Raises:
            ResourceNotFound: If no segments are given or the path leaves the runfiles tree
        """
        parts = [str(s).strip("/") for s in segments if str(s).strip("/")]
        if not parts:
            raise ResourceNotFound("Empty runfile path")
        logical = posixpath.normpath("/".join(parts))
        if logical == ".." or logical.startswith("../"):
            raise ResourceNotFound(f"Runfile path leaves the runfiles tree: {logical}")
        return logical

    def resolve_runfile(self, *segments: str) -> Path:
        """Resolve a logical runfile to an absolute, existing path.

        Args:
            segments: Root name followed by path segments; segments may contain '/'

        Returns:
            Absolute path of the runfile

        Raises:
            ResourceNotFound: If the runfile does not exist
        """
        logical = self.logical_path(*segments)

        real = self._load_manifest().get(logical)
        if real and Path(real).exists():
            return Path(real).absolute()

        for directory in self._runfiles_dirs():
            candidate = directory / logical
            if candidate.exists():
                return candidate.absolute()

        searched = [str(p) for p in self._manifest_paths() + self._runfiles_dirs()]
        raise ResourceNotFound(
            f"Runfile not found: {logical} "
            f"(searched: {', '.join(searched) if searched else 'no runfiles configured'})"
        )

    def copy_into_workspace(
        self,
        workspace: Workspace,
        logical_source: Union[str, Path],
        destination: Union[str, Path],
    ) -> Path:
        """Copy a runfile verbatim into the workspace.

        Directories are copied recursively. Copies are made writable by
        the owner so later scratch writes can overwrite them.

        Returns:
            Absolute path of the copy

        Raises:
            ResourceNotFound: If the runfile does not exist
            IOFailure: If the copy fails
        """
        source = self.resolve_runfile(str(logical_source))
        target = workspace.path(destination)

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if source.is_dir():
                shutil.copytree(source, target, dirs_exist_ok=True)
                for dirpath, _dirnames, filenames in os.walk(target):
                    _make_writable(Path(dirpath))
                    for name in filenames:
                        _make_writable(Path(dirpath) / name)
            else:
                shutil.copy(source, target)
                _make_writable(target)
        except OSError as e:
            raise IOFailure(f"Failed to copy runfile {logical_source} to {destination}: {e}") from e

        logger.debug(f"Copied runfile {logical_source} -> {target}")
        return target


def _make_writable(path: Path) -> None:
    mode = path.stat().st_mode
    if not mode & stat.S_IWUSR:
        path.chmod(mode | stat.S_IWUSR)
