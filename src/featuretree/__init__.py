"""Reconcile issue-tracker tickets with git history and assemble feature trees."""

__version__ = "0.1.0"
