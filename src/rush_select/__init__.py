"""Interactive script launcher for Rush monorepo workspaces."""

__version__ = "0.1.0"
