"""
Execution layer for the integration harness.

Handles:
- Running child processes with fully drained output streams
- Building invocations of the build tool under test
"""

from .process_runner import ProcessRunner
from .build_tool import BuildTool

__all__ = [
    "ProcessRunner",
    "BuildTool",
]
