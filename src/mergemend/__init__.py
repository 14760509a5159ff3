"""Merge-conflict detection and resolution for git working trees."""

__version__ = "0.1.0"
