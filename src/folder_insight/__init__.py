"""Folder Insight: directory size statistics built on a symlink-safe traversal engine."""

__version__ = "0.1.0"
