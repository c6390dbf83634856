"""
Google Workspace connectivity for Sharewatch.
"""

from sharewatch.workspace.client import WorkspaceClientFactory

__all__ = ["WorkspaceClientFactory"]
