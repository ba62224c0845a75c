"""
Workspace layer for the integration harness.

Handles:
- Scratch workspaces (isolated temp directories, reset by generation)
- Runfile resolution and copying into workspaces
"""

from .scratch import Workspace
from .runfiles import RunfilesResolver

__all__ = [
    "Workspace",
    "RunfilesResolver",
]
