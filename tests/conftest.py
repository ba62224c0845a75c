"""Shared fixtures for integration harness tests."""

import stat

import pytest
from pathlib import Path

from integration_harness import (
    HarnessConfig,
    HarnessContext,
    RunfilesConfig,
    ToolConfig,
    Workspace,
    WorkspaceConfig,
)


FAKE_TOOL_VERSION = "7.1.0"

# Stands in for the build tool: `info release`, and `test //:<name>`
# which runs <name>.sh from the working directory and writes its
# output to $FAKE_TOOL_LOGS/<name>.log.
FAKE_TOOL_SCRIPT = f"""#!/bin/sh
case "$1" in
  info)
    if [ "$2" = "release" ]; then
      echo "release {FAKE_TOOL_VERSION}"
      exit 0
    fi
    echo "ERROR: unknown key '$2'" >&2
    exit 2
    ;;
  test)
    if [ ! -f BUILD ]; then
      echo "ERROR: no BUILD file in $(pwd)" >&2
      exit 1
    fi
    name="${{2#//:}}"
    mkdir -p "$FAKE_TOOL_LOGS"
    log="$FAKE_TOOL_LOGS/$name.log"
    if sh "./$name.sh" > "$log" 2>&1; then
      echo "//:$name PASSED in 0.0s"
      exit 0
    fi
    echo "//:$name FAILED in 0.0s (see $log)" >&2
    exit 3
    ;;
esac
echo "ERROR: unknown command '$1'" >&2
exit 2
"""


@pytest.fixture
def workspace_config(tmp_path):
    """Workspaces under the test's own tmp dir."""
    return WorkspaceConfig(base_dir=tmp_path / "workspaces")


@pytest.fixture
def workspace(workspace_config):
    """A fresh workspace, removed after the test."""
    ws = Workspace(workspace_config)
    yield ws
    ws.close()


@pytest.fixture
def fake_tool(tmp_path):
    """Executable shell script that behaves like a tiny build tool."""
    tool = tmp_path / "bin" / "fake-build-tool"
    tool.parent.mkdir(parents=True)
    tool.write_text(FAKE_TOOL_SCRIPT)
    tool.chmod(tool.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return tool


@pytest.fixture
def harness_config(tmp_path, fake_tool, workspace_config):
    """Config that drives the fake tool."""
    return HarnessConfig(
        tool=ToolConfig(
            path=str(fake_tool),
            version=FAKE_TOOL_VERSION,
            env={"FAKE_TOOL_LOGS": str(tmp_path / "testlogs")},
        ),
        workspace=workspace_config,
        runfiles=RunfilesConfig(runfiles_dir=tmp_path / "runfiles"),
    )


@pytest.fixture
def harness(harness_config):
    """Per-test harness context."""
    with HarnessContext(harness_config) as ctx:
        yield ctx


@pytest.fixture
def runfiles_dir(harness_config) -> Path:
    """Populated runfiles tree for the `rules_under_test` root."""
    root = harness_config.runfiles.runfiles_dir
    tools = root / "rules_under_test" / "tools"
    tools.mkdir(parents=True)
    (tools / "BUILD").write_text("exports_files(['common.bzl'])\n")
    (tools / "common.bzl").write_text("COMMON = True\n")
    return root
