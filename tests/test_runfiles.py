"""
Tests for runfile resolution.

Tests:
- Directory and manifest lookups
- Environment variable fallbacks
- Copying runfiles into a workspace
"""

import os
import stat

import pytest

from integration_harness import (
    IOFailure,
    ResourceNotFound,
    RunfilesConfig,
    RunfilesResolver,
)


class TestResolveRunfile:
    """Test resolving logical runfile paths."""

    def test_get_runfile_returns_the_file(self, runfiles_dir):
        resolver = RunfilesResolver(RunfilesConfig(runfiles_dir=runfiles_dir), environ={})

        runfile = resolver.resolve_runfile("rules_under_test", "tools", "BUILD")

        assert runfile.exists()
        assert runfile.is_absolute()
        assert runfile == runfiles_dir / "rules_under_test" / "tools" / "BUILD"

    def test_segments_may_contain_slashes(self, runfiles_dir):
        resolver = RunfilesResolver(RunfilesConfig(runfiles_dir=runfiles_dir), environ={})

        joined = resolver.resolve_runfile("rules_under_test/tools/common.bzl")
        split = resolver.resolve_runfile("rules_under_test", "tools/common.bzl")

        assert joined == split

    def test_unknown_runfile_raises(self, runfiles_dir):
        resolver = RunfilesResolver(RunfilesConfig(runfiles_dir=runfiles_dir), environ={})

        with pytest.raises(ResourceNotFound) as exc_info:
            resolver.resolve_runfile("rules_under_test", "tools", "missing.bzl")

        assert "rules_under_test/tools/missing.bzl" in str(exc_info.value)

    def test_nothing_configured_raises(self):
        resolver = RunfilesResolver(RunfilesConfig(), environ={})

        with pytest.raises(ResourceNotFound) as exc_info:
            resolver.resolve_runfile("rules_under_test", "tools", "BUILD")

        assert "no runfiles configured" in str(exc_info.value)

    def test_empty_path_raises(self):
        resolver = RunfilesResolver(RunfilesConfig(), environ={})
        with pytest.raises(ResourceNotFound):
            resolver.resolve_runfile()

    def test_path_leaving_runfiles_tree_raises(self, runfiles_dir):
        resolver = RunfilesResolver(RunfilesConfig(runfiles_dir=runfiles_dir), environ={})
        with pytest.raises(ResourceNotFound):
            resolver.resolve_runfile("..", "etc", "passwd")

    def test_environment_runfiles_dir(self, runfiles_dir):
        resolver = RunfilesResolver(RunfilesConfig(), environ={"TEST_SRCDIR": str(runfiles_dir)})

        assert resolver.resolve_runfile("rules_under_test", "tools", "BUILD").exists()

    def test_manifest_lookup(self, tmp_path):
        real = tmp_path / "out" / "libdriver.jar"
        real.parent.mkdir()
        real.write_bytes(b"PK\x03\x04")
        manifest = tmp_path / "MANIFEST"
        manifest.write_text(
            f"rules_under_test/java/libdriver.jar {real}\n"
            "\n"
            f"rules_under_test/java/gone.jar {tmp_path / 'gone.jar'}\n"
        )
        resolver = RunfilesResolver(RunfilesConfig(manifest_path=manifest), environ={})

        assert resolver.resolve_runfile("rules_under_test", "java", "libdriver.jar") == real
        with pytest.raises(ResourceNotFound):
            resolver.resolve_runfile("rules_under_test", "java", "gone.jar")

    def test_manifest_from_environment(self, tmp_path):
        real = tmp_path / "real.bzl"
        real.write_text("X = 1\n")
        manifest = tmp_path / "MANIFEST"
        manifest.write_text(f"rules_under_test/real.bzl {real}\n")
        resolver = RunfilesResolver(
            RunfilesConfig(),
            environ={"RUNFILES_MANIFEST_FILE": str(manifest)},
        )

        assert resolver.resolve_runfile("rules_under_test", "real.bzl") == real

    def test_unreadable_manifest_falls_back_to_directory(self, tmp_path, runfiles_dir):
        resolver = RunfilesResolver(
            RunfilesConfig(manifest_path=tmp_path / "missing_manifest", runfiles_dir=runfiles_dir),
            environ={},
        )

        assert resolver.resolve_runfile("rules_under_test", "tools", "BUILD").exists()


class TestCopyIntoWorkspace:
    """Test copying runfiles into the workspace."""

    @pytest.fixture
    def resolver(self, runfiles_dir):
        return RunfilesResolver(RunfilesConfig(runfiles_dir=runfiles_dir), environ={})

    def test_copies_bytes_verbatim(self, resolver, workspace, runfiles_dir):
        copied = resolver.copy_into_workspace(
            workspace, "rules_under_test/tools/common.bzl", "tools/common.bzl"
        )

        source = runfiles_dir / "rules_under_test" / "tools" / "common.bzl"
        assert copied == workspace.root / "tools" / "common.bzl"
        assert copied.read_bytes() == source.read_bytes()
        assert "tools/common.bzl" in workspace.relative_contents()

    def test_copies_directory(self, resolver, workspace):
        resolver.copy_into_workspace(workspace, "rules_under_test/tools", "tools")

        assert workspace.relative_contents() == ["tools/BUILD", "tools/common.bzl"]

    def test_preserves_executable_bit(self, resolver, workspace, runfiles_dir):
        script = runfiles_dir / "rules_under_test" / "tools" / "bazel.sh"
        script.write_text("#!/bin/sh\n")
        script.chmod(0o555)

        copied = resolver.copy_into_workspace(
            workspace, "rules_under_test/tools/bazel.sh", "tools/bazel.sh"
        )

        assert os.access(copied, os.X_OK)
        # Read-only runfiles become owner-writable so tests can overwrite them
        assert copied.stat().st_mode & stat.S_IWUSR
        workspace.scratch_file("tools/bazel.sh", "#!/bin/sh", "exit 0")

    def test_missing_source_raises(self, resolver, workspace):
        with pytest.raises(ResourceNotFound):
            resolver.copy_into_workspace(workspace, "rules_under_test/nope", "nope")

        assert workspace.workspace_contents() == []

    def test_destination_under_plain_file_raises(self, resolver, workspace):
        workspace.scratch_file("tools", "not a directory")

        with pytest.raises(IOFailure):
            resolver.copy_into_workspace(workspace, "rules_under_test/tools/BUILD", "tools/BUILD")

    def test_destination_outside_workspace_raises(self, resolver, workspace):
        with pytest.raises(IOFailure):
            resolver.copy_into_workspace(workspace, "rules_under_test/tools/BUILD", "../BUILD")
